"""
Page Builder Kernel -- Visibility

Patches for one toggle. The control's marker class, its icon token (or
checkbox state), and the target's display always come out of the same call,
so no caller can apply one without the others.
"""

from __future__ import annotations

from pagebuilder.kernel.types import (
    HIDDEN_MARKER_CLASS,
    ICON_HIDDEN,
    ICON_VISIBLE,
    NodePatch,
    Toggle,
)


def visibility_patches(toggle: Toggle, visible: bool) -> list[NodePatch]:
    if visible:
        patches = [NodePatch(toggle.control, "remove_class", HIDDEN_MARKER_CLASS)]
    else:
        patches = [NodePatch(toggle.control, "add_class", HIDDEN_MARKER_CLASS)]

    if toggle.icon:
        patches.append(NodePatch(toggle.icon, "text", ICON_VISIBLE if visible else ICON_HIDDEN))

    if toggle.checkbox:
        if visible:
            patches.append(NodePatch(toggle.control, "attr", "checked", name="checked"))
        else:
            patches.append(NodePatch(toggle.control, "remove_attr", "", name="checked"))

    patches.append(NodePatch(toggle.target, "style", toggle.display if visible else "none", name="display"))
    return patches
