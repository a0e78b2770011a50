"""
Page Builder Kernel -- Reducer

Pure function: (state, event) → ReduceResult
No side effects. No IO. Deterministic.

The result carries the new state and the NodePatches that bring the bound
preview nodes in line with it. Only nodes affected by the event are patched.
Rejected events leave the state untouched and produce no patches.
"""

from __future__ import annotations

import copy
from typing import Any

from pagebuilder.kernel.bindings import (
    DEFAULT_BINDINGS,
    ArcApply,
    BackgroundApply,
    BindingTable,
    ImageMirror,
    PositionApply,
    StyleApply,
    TextMirror,
)
from pagebuilder.kernel.fields import DEFAULT_REGISTRY, FieldRegistry
from pagebuilder.kernel.geometry import PAGE_MARGIN, PAGE_WIDTH, arc_path, compute_scale, scale_transform
from pagebuilder.kernel.layout import BORDER_NODE, PAGE_ROOT
from pagebuilder.kernel.styles import (
    background_clear_patches,
    background_color_patches,
    background_image_patches,
    position_patches,
    style_patches,
)
from pagebuilder.kernel.types import (
    BORDER_STYLES,
    DEFAULT_ARC_DEPTH,
    DEFAULT_ARC_FONT_SIZE,
    DEFAULT_BG_COLOR,
    DEFAULT_BG_OPACITY,
    DEFAULT_BORDER_COLOR,
    DEFAULT_BORDER_STYLE,
    PLACEHOLDER_GLYPH,
    Event,
    NodePatch,
    ReduceResult,
    Warning,
    format_number,
    is_hex_color,
    is_number,
)
from pagebuilder.kernel.validation import validate_event
from pagebuilder.kernel.visibility import visibility_patches

STYLE_KEYS = ("color", "font", "size")
IMAGE_URL_PREFIXES = ("http", "data:")

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def empty_state(
    registry: FieldRegistry = DEFAULT_REGISTRY,
    bindings: BindingTable = DEFAULT_BINDINGS,
    *,
    page_width: int | float = PAGE_WIDTH,
    margin: int | float = PAGE_MARGIN,
) -> dict[str, Any]:
    """
    The state of a freshly loaded document, before any interaction.
    Every field sits at its declared default and every toggle is visible.
    """
    return {
        "values": {f.id: f.default or "" for f in registry.of_kind("text")},
        "images": {},
        "styles": {},
        "positions": {
            b.source: registry.get(b.source).default or 0 for b in bindings.of_kind(PositionApply) if b.source in registry
        },
        "visibility": {t: True for t in registry.toggles},
        "arc": {"depth": DEFAULT_ARC_DEPTH, "font_size": DEFAULT_ARC_FONT_SIZE},
        "background": {"color": DEFAULT_BG_COLOR, "opacity": DEFAULT_BG_OPACITY, "image": None},
        "border": {"style": DEFAULT_BORDER_STYLE, "color": DEFAULT_BORDER_COLOR},
        "viewport": {"width": None, "scale": 1.0, "page_width": page_width, "margin": margin},
    }


def reduce(
    state: dict[str, Any],
    event: Event,
    registry: FieldRegistry = DEFAULT_REGISTRY,
    bindings: BindingTable = DEFAULT_BINDINGS,
) -> ReduceResult:
    """
    Apply one event to the current state.
    Returns new state + applied flag + patches + warnings/errors.

    Pure function. The returned state is a new dict (deep copy on mutation paths).
    The input state is never modified.
    """
    handler = _HANDLERS.get(event.type)
    if handler is None:
        return ReduceResult(state=state, applied=False, error=f"UNKNOWN_EVENT: {event.type}")

    errors = validate_event(event.type, event.payload)
    if errors:
        return ReduceResult(state=state, applied=False, error=f"INVALID_PAYLOAD: {'; '.join(errors)}")

    snap = copy.deepcopy(state)
    result = handler(snap, event, registry, bindings)
    if not result.applied:
        # Rejections hand back the caller's state, untouched
        result.state = state
        result.patches = []
    return result


def replay(
    events: list[Event],
    registry: FieldRegistry = DEFAULT_REGISTRY,
    bindings: BindingTable = DEFAULT_BINDINGS,
    *,
    page_width: int | float = PAGE_WIDTH,
    margin: int | float = PAGE_MARGIN,
) -> dict[str, Any]:
    """
    Rebuild state from scratch by reducing over all events.
    Rejected events are skipped. Page geometry must match the one the
    events were first reduced against, or resize events scale differently.
    """
    state = empty_state(registry, bindings, page_width=page_width, margin=margin)
    for event in events:
        result = reduce(state, event, registry, bindings)
        if result.applied:
            state = result.state
    return state


def recompute_arc(state: dict[str, Any], bindings: BindingTable = DEFAULT_BINDINGS) -> list[NodePatch]:
    """
    Path + text size for every arc binding, from the current arc state.
    Always recomputed from scratch, so repeating it changes nothing.
    """
    arc = state["arc"]
    patches: list[NodePatch] = []
    seen: set[tuple[str, str]] = set()
    for b in bindings.of_kind(ArcApply):
        key = (b.path, b.text)
        if key in seen:
            continue
        seen.add(key)
        patches.append(NodePatch(b.path, "attr", arc_path(arc["depth"]), name="d"))
        patches.append(NodePatch(b.text, "style", f"{format_number(arc['font_size'])}px", name="font-size"))
    return patches


def sync_patches(
    state: dict[str, Any],
    registry: FieldRegistry = DEFAULT_REGISTRY,
    bindings: BindingTable = DEFAULT_BINDINGS,
) -> list[NodePatch]:
    """
    Patches that bring every bound node in line with `state`.
    Used once at document load; afterwards only event patches are applied.
    """
    patches: list[NodePatch] = []

    for field_id, value in state["values"].items():
        for b in bindings.resolve_kind(field_id, TextMirror):
            patches.append(_mirror_text(b, value))

    for field_id, src in state["images"].items():
        for b in bindings.resolve_kind(field_id, ImageMirror):
            patches += _mirror_image(b, src)

    for field_id, style in state["styles"].items():
        for b in bindings.resolve_kind(field_id, StyleApply):
            patches += style_patches(b, style)

    for field_id, offset in state["positions"].items():
        for b in bindings.resolve_kind(field_id, PositionApply):
            patches += position_patches(b, offset)

    for toggle_id, visible in state["visibility"].items():
        toggle = registry.toggle(toggle_id)
        if toggle is not None:
            patches += visibility_patches(toggle, visible)

    patches += recompute_arc(state, bindings)
    patches += _background_patches(state, bindings)

    bg_image = state["background"]["image"]
    for b in bindings.resolve_kind("bg_image", BackgroundApply):
        if bg_image:
            patches += background_image_patches(b, bg_image)
        else:
            patches += background_clear_patches(b)

    patches += _border_patches(state)
    patches.append(NodePatch(PAGE_ROOT, "style", scale_transform(state["viewport"]["scale"]), name="transform"))
    return patches


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _reject(snap: dict, code: str, msg: str) -> ReduceResult:
    return ReduceResult(state=snap, applied=False, error=f"{code}: {msg}")


def _ok(snap: dict, patches: list[NodePatch] | None = None, warnings: list[Warning] | None = None) -> ReduceResult:
    return ReduceResult(state=snap, applied=True, patches=patches or [], warnings=warnings or [])


def _check_field(registry: FieldRegistry, field_id: str, kind: str) -> str | None:
    """Error string when the field is unknown or of another kind, else None."""
    f = registry.get(field_id)
    if f is None:
        return f"UNKNOWN_FIELD: {field_id}"
    if f.kind != kind:
        return f"WRONG_FIELD_KIND: {field_id} is {f.kind}, expected {kind}"
    return None


def _mirror_text(binding: TextMirror, value: str) -> NodePatch:
    trimmed = value.strip()
    if trimmed == "" and binding.placeholder:
        return NodePatch(binding.target, "text", PLACEHOLDER_GLYPH)
    return NodePatch(binding.target, "text", trimmed + binding.suffix)


def _mirror_image(binding: ImageMirror, src: str) -> list[NodePatch]:
    return [
        NodePatch(binding.thumbnail, "attr", src, name="src"),
        NodePatch(binding.target, "attr", src, name="src"),
    ]


def _background_patches(snap: dict, bindings: BindingTable) -> list[NodePatch]:
    bg = snap["background"]
    patches: list[NodePatch] = []
    seen: set[tuple[str, str | None]] = set()
    for field_id in ("bg_color", "bg_opacity"):
        for b in bindings.resolve_kind(field_id, BackgroundApply):
            key = (b.target, b.readout)
            if key in seen:
                continue
            seen.add(key)
            patches += background_color_patches(b, bg["color"], bg["opacity"])
    return patches


def _border_patches(snap: dict) -> list[NodePatch]:
    border = snap["border"]
    return [
        NodePatch(BORDER_NODE, "set_class", f"page-border border-style-{border['style']}"),
        NodePatch(BORDER_NODE, "style", border["color"], name="border-color"),
        NodePatch("", "variable", border["color"], name="--border-color"),
    ]


# ---------------------------------------------------------------------------
# Text / image mirror
# ---------------------------------------------------------------------------


def _handle_field_input(snap: dict, event: Event, registry: FieldRegistry, bindings: BindingTable) -> ReduceResult:
    p = event.payload
    field_id = p["field"]

    error = _check_field(registry, field_id, "text")
    if error:
        return ReduceResult(state=snap, applied=False, error=error)

    value = p["value"]
    snap["values"][field_id] = value
    patches = [_mirror_text(b, value) for b in bindings.resolve_kind(field_id, TextMirror)]
    return _ok(snap, patches)


def _handle_image_upload(snap: dict, event: Event, registry: FieldRegistry, bindings: BindingTable) -> ReduceResult:
    p = event.payload
    field_id = p["field"]

    error = _check_field(registry, field_id, "image")
    if error:
        return ReduceResult(state=snap, applied=False, error=error)

    data_uri = p["data_uri"]
    if not data_uri.startswith("data:"):
        return _reject(snap, "NO_IMAGE_DATA", f"{field_id} upload is not a data URI")

    snap["images"][field_id] = data_uri
    patches: list[NodePatch] = []
    for b in bindings.resolve_kind(field_id, ImageMirror):
        patches += _mirror_image(b, data_uri)
    return _ok(snap, patches)


def _handle_image_link(snap: dict, event: Event, registry: FieldRegistry, bindings: BindingTable) -> ReduceResult:
    p = event.payload
    field_id = p["field"]

    error = _check_field(registry, field_id, "image")
    if error:
        return ReduceResult(state=snap, applied=False, error=error)

    url = p["url"]
    if not url or not url.startswith(IMAGE_URL_PREFIXES):
        return _reject(snap, "INVALID_IMAGE_URL", url)

    snap["images"][field_id] = url
    patches: list[NodePatch] = []
    for b in bindings.resolve_kind(field_id, ImageMirror):
        patches += _mirror_image(b, url)
    return _ok(snap, patches)


# ---------------------------------------------------------------------------
# Style resolver
# ---------------------------------------------------------------------------


def _handle_style_set(snap: dict, event: Event, registry: FieldRegistry, bindings: BindingTable) -> ReduceResult:
    p = event.payload
    field_id = p["field"]

    if field_id not in registry:
        return _reject(snap, "UNKNOWN_FIELD", field_id)

    changes = {k: p[k] for k in STYLE_KEYS if p.get(k) is not None}
    if "size" in changes and changes["size"] <= 0:
        return _reject(snap, "INVALID_SIZE", f"font size must be positive, got {changes['size']}")

    warnings: list[Warning] = []
    if not changes:
        warnings.append(Warning(code="EMPTY_STYLE", message=f"style.set for '{field_id}' carried no style inputs"))

    style = snap["styles"].setdefault(field_id, {})
    style.update(changes)

    patches: list[NodePatch] = []
    for b in bindings.resolve_kind(field_id, StyleApply):
        patches += style_patches(b, changes)
    return _ok(snap, patches, warnings)


def _handle_position_set(snap: dict, event: Event, registry: FieldRegistry, bindings: BindingTable) -> ReduceResult:
    p = event.payload
    field_id = p["field"]

    error = _check_field(registry, field_id, "numeric")
    if error:
        return ReduceResult(state=snap, applied=False, error=error)

    offset = p["offset"]
    if not is_number(offset):
        return _reject(snap, "INVALID_OFFSET", str(offset))

    snap["positions"][field_id] = offset
    patches: list[NodePatch] = []
    for b in bindings.resolve_kind(field_id, PositionApply):
        patches += position_patches(b, offset)
    return _ok(snap, patches)


# ---------------------------------------------------------------------------
# Visibility controller
# ---------------------------------------------------------------------------


def _handle_visibility_toggle(
    snap: dict, event: Event, registry: FieldRegistry, bindings: BindingTable
) -> ReduceResult:
    toggle_id = event.payload["toggle"]
    toggle = registry.toggle(toggle_id)
    if toggle is None:
        return _reject(snap, "UNKNOWN_TOGGLE", toggle_id)

    visible = not snap["visibility"].get(toggle_id, True)
    snap["visibility"][toggle_id] = visible
    return _ok(snap, visibility_patches(toggle, visible))


def _handle_visibility_set(snap: dict, event: Event, registry: FieldRegistry, bindings: BindingTable) -> ReduceResult:
    p = event.payload
    toggle_id = p["toggle"]
    toggle = registry.toggle(toggle_id)
    if toggle is None:
        return _reject(snap, "UNKNOWN_TOGGLE", toggle_id)

    visible = bool(p["visible"])
    snap["visibility"][toggle_id] = visible
    return _ok(snap, visibility_patches(toggle, visible))


# ---------------------------------------------------------------------------
# Arc geometry
# ---------------------------------------------------------------------------


def _handle_arc_set(snap: dict, event: Event, registry: FieldRegistry, bindings: BindingTable) -> ReduceResult:
    p = event.payload
    depth = p.get("depth")
    font_size = p.get("font_size")

    if depth is not None and not is_number(depth):
        return _reject(snap, "INVALID_DEPTH", str(depth))
    if font_size is not None and (not is_number(font_size) or font_size <= 0):
        return _reject(snap, "INVALID_SIZE", f"arc font size must be positive, got {font_size}")

    if depth is not None:
        snap["arc"]["depth"] = depth
    if font_size is not None:
        snap["arc"]["font_size"] = font_size

    return _ok(snap, recompute_arc(snap, bindings))


# ---------------------------------------------------------------------------
# Background compositor
# ---------------------------------------------------------------------------


def _handle_background_set(snap: dict, event: Event, registry: FieldRegistry, bindings: BindingTable) -> ReduceResult:
    p = event.payload
    color = p.get("color")
    opacity = p.get("opacity")

    if color is not None and not is_hex_color(color):
        return _reject(snap, "INVALID_COLOR", str(color))
    if opacity is not None and (not is_number(opacity) or not 0 <= opacity <= 100):
        return _reject(snap, "INVALID_OPACITY", f"opacity must be within 0-100, got {opacity}")

    bg = snap["background"]
    if color is not None:
        bg["color"] = color
    if opacity is not None:
        bg["opacity"] = opacity

    return _ok(snap, _background_patches(snap, bindings))


def _handle_background_image_set(
    snap: dict, event: Event, registry: FieldRegistry, bindings: BindingTable
) -> ReduceResult:
    data_uri = event.payload["data_uri"]
    if not data_uri.startswith("data:"):
        return _reject(snap, "NO_IMAGE_DATA", "background image is not a data URI")

    # Color stays committed underneath the image
    snap["background"]["image"] = data_uri
    patches: list[NodePatch] = []
    for b in bindings.resolve_kind("bg_image", BackgroundApply):
        patches += background_image_patches(b, data_uri)
    return _ok(snap, patches)


def _handle_background_image_clear(
    snap: dict, event: Event, registry: FieldRegistry, bindings: BindingTable
) -> ReduceResult:
    snap["background"]["image"] = None
    patches: list[NodePatch] = []
    for b in bindings.resolve_kind("bg_image", BackgroundApply):
        patches += background_clear_patches(b)
    return _ok(snap, patches)


# ---------------------------------------------------------------------------
# Border
# ---------------------------------------------------------------------------


def _handle_border_style(snap: dict, event: Event, registry: FieldRegistry, bindings: BindingTable) -> ReduceResult:
    style = event.payload["style"]
    if style not in BORDER_STYLES:
        return _reject(snap, "INVALID_BORDER_STYLE", style)

    snap["border"]["style"] = style
    return _ok(snap, [NodePatch(BORDER_NODE, "set_class", f"page-border border-style-{style}")])


def _handle_border_color(snap: dict, event: Event, registry: FieldRegistry, bindings: BindingTable) -> ReduceResult:
    color = event.payload["color"]
    if not is_hex_color(color):
        return _reject(snap, "INVALID_COLOR", color)

    snap["border"]["color"] = color
    return _ok(
        snap,
        [
            NodePatch(BORDER_NODE, "style", color, name="border-color"),
            NodePatch("", "variable", color, name="--border-color"),
        ],
    )


# ---------------------------------------------------------------------------
# Viewport
# ---------------------------------------------------------------------------


def _handle_viewport_resize(
    snap: dict, event: Event, registry: FieldRegistry, bindings: BindingTable
) -> ReduceResult:
    width = event.payload["width"]
    if not is_number(width) or width < 0:
        return _reject(snap, "INVALID_WIDTH", str(width))

    viewport = snap["viewport"]
    scale = compute_scale(width, viewport["page_width"], viewport["margin"])
    viewport["width"] = width
    viewport["scale"] = scale

    warnings: list[Warning] = []
    if scale <= 0:
        warnings.append(Warning(code="PAGE_COLLAPSED", message=f"container width {width} leaves no room for the page"))

    return _ok(snap, [NodePatch(PAGE_ROOT, "style", scale_transform(scale), name="transform")], warnings)


# ---------------------------------------------------------------------------
# Handler dispatch table
# ---------------------------------------------------------------------------

_HANDLERS: dict[str, Any] = {
    "field.input": _handle_field_input,
    "image.upload": _handle_image_upload,
    "image.link": _handle_image_link,
    "style.set": _handle_style_set,
    "position.set": _handle_position_set,
    "visibility.toggle": _handle_visibility_toggle,
    "visibility.set": _handle_visibility_set,
    "arc.set": _handle_arc_set,
    "background.set": _handle_background_set,
    "background.image_set": _handle_background_image_set,
    "background.image_clear": _handle_background_image_clear,
    "border.style": _handle_border_style,
    "border.color": _handle_border_color,
    "viewport.resize": _handle_viewport_resize,
}
