"""
Page Builder Kernel -- Style Resolution

Turns style, position, and background state into NodePatches.
Pure: reads values, returns patches, never touches a node.
"""

from __future__ import annotations

from typing import Any

from pagebuilder.kernel.bindings import BackgroundApply, PositionApply, StyleApply
from pagebuilder.kernel.types import NodePatch, format_number

# ---------------------------------------------------------------------------
# Text style
# ---------------------------------------------------------------------------


def style_patches(binding: StyleApply, changes: dict[str, Any]) -> list[NodePatch]:
    """
    Patches for the style keys present in `changes` only.
    Absent keys are left at whatever the node already has.
    """
    patches: list[NodePatch] = []
    target = binding.target

    color = changes.get("color")
    if color is not None:
        patches.append(NodePatch(target, "style", color, name="color"))
        if binding.vector:
            patches.append(NodePatch(target, "style", color, name="fill"))

    font = changes.get("font")
    if font is not None:
        patches.append(NodePatch(target, "style", font, name="font-family"))

    size = changes.get("size")
    if size is not None:
        patches.append(NodePatch(target, "style", f"{format_number(size)}px", name="font-size"))

    return patches


def position_patches(binding: PositionApply, offset: int | float) -> list[NodePatch]:
    return [NodePatch(binding.target, "style", f"translateY({format_number(offset)}px)", name="transform")]


# ---------------------------------------------------------------------------
# Background
# ---------------------------------------------------------------------------


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    """'#RRGGBB' → (r, g, b). Caller guarantees the format."""
    return int(color[1:3], 16), int(color[3:5], 16), int(color[5:7], 16)


def composite_background(color: str, opacity: int | float) -> str:
    """
    Layer a slider opacity (0–100) onto a hex color.

    composite_background("#FF0000", 50) → "rgba(255, 0, 0, 0.5)"
    """
    r, g, b = hex_to_rgb(color)
    fraction = opacity / 100
    return f"rgba({r}, {g}, {b}, {format_number(fraction)})"


def background_color_patches(binding: BackgroundApply, color: str, opacity: int | float) -> list[NodePatch]:
    patches = [NodePatch(binding.target, "style", composite_background(color, opacity), name="background-color")]
    if binding.readout:
        patches.append(NodePatch(binding.readout, "text", f"{format_number(opacity)}%"))
    return patches


def background_image_patches(binding: BackgroundApply, data_uri: str) -> list[NodePatch]:
    patches: list[NodePatch] = []
    if binding.preview:
        patches.append(NodePatch(binding.preview, "attr", data_uri, name="src"))
        patches.append(NodePatch(binding.preview, "remove_class", "hidden"))
    if binding.placeholder:
        patches.append(NodePatch(binding.placeholder, "add_class", "hidden"))
    patches += [
        NodePatch(binding.target, "style", f"url({data_uri})", name="background-image"),
        NodePatch(binding.target, "style", "cover", name="background-size"),
        NodePatch(binding.target, "style", "center", name="background-position"),
    ]
    return patches


def background_clear_patches(binding: BackgroundApply) -> list[NodePatch]:
    """Exact inverse of background_image_patches, plus a file control reset."""
    patches: list[NodePatch] = []
    if binding.preview:
        patches.append(NodePatch(binding.preview, "attr", "", name="src"))
        patches.append(NodePatch(binding.preview, "add_class", "hidden"))
    if binding.placeholder:
        patches.append(NodePatch(binding.placeholder, "remove_class", "hidden"))
    # "none", not "": an empty value would fall back to the stylesheet
    patches.append(NodePatch(binding.target, "style", "none", name="background-image"))
    if binding.file_control:
        patches.append(NodePatch(binding.file_control, "attr", "", name="value"))
    return patches
