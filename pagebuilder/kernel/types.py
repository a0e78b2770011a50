"""
Page Builder Kernel -- Shared Types

Data classes used across fields, bindings, reducer, renderer, and coordinator.
These are the contracts that bind the kernel together.

Key ideas:
- Fields are declared once in the registry and never change afterwards
- Bindings are tagged by transform kind (see bindings.py)
- The reducer turns (state, event) into a new state plus NodePatches
- Patches are the only thing that ever touches a preview node
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

ID_PATTERN = re.compile(r"^[a-z][a-z0-9_]{0,63}$")
HEX_COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")


# ---------------------------------------------------------------------------
# Registries of known names
# ---------------------------------------------------------------------------

FIELD_KINDS: set[str] = {"text", "image", "numeric", "color", "font", "choice"}

TRANSFORM_KINDS: set[str] = {
    "text_mirror",
    "image_mirror",
    "style_apply",
    "position_apply",
    "arc_apply",
    "background_apply",
}

EVENT_TYPES: set[str] = {
    # Text / image mirror
    "field.input",
    "image.upload",
    "image.link",
    # Style resolver
    "style.set",
    "position.set",
    # Visibility controller
    "visibility.toggle",
    "visibility.set",
    # Arc geometry
    "arc.set",
    # Background compositor
    "background.set",
    "background.image_set",
    "background.image_clear",
    # Border
    "border.style",
    "border.color",
    # Render coordinator
    "viewport.resize",
}

PATCH_OPS: set[str] = {
    "text",
    "style",
    "attr",
    "add_class",
    "remove_class",
    "set_class",
    "remove_attr",
    "variable",
}

BORDER_STYLES: set[str] = {"classic", "double", "dashed", "dotted", "none", "ornate"}

# Non-breaking space keeps an empty text node at full line height
PLACEHOLDER_GLYPH = "\u00a0"

ICON_VISIBLE = "visibility"
ICON_HIDDEN = "visibility_off"
HIDDEN_MARKER_CLASS = "hidden-field"

# Arc defaults are part of the initial render contract
DEFAULT_ARC_DEPTH = 100
DEFAULT_ARC_FONT_SIZE = 24

DEFAULT_BG_COLOR = "#ffffff"
DEFAULT_BG_OPACITY = 100
DEFAULT_BORDER_STYLE = "classic"
DEFAULT_BORDER_COLOR = "#1a1a1a"


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Field:
    """One user-editable unit of document data."""

    id: str
    kind: str
    default: Any = None
    visible: bool = True
    label: str | None = None


@dataclass(frozen=True)
class Toggle:
    """
    A show/hide switch for one preview node.

    `namespace` is the id prefix of the control ("vis-btn" or "toggle").
    `display` is the value written to the target when shown; an empty
    string means "fall back to the node's stylesheet display".
    """

    id: str
    namespace: str
    control: str
    target: str
    display: str
    icon: str | None = None
    checkbox: bool = False


@dataclass
class Event:
    """
    One user interaction, normalized.
    The reducer reads only `type` and `payload`.
    """

    id: str
    sequence: int
    timestamp: str  # ISO 8601 UTC
    source: str
    type: str
    payload: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "sequence": self.sequence,
            "timestamp": self.timestamp,
            "source": self.source,
            "type": self.type,
            "payload": self.payload,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Event:
        return cls(
            id=d["id"],
            sequence=d["sequence"],
            timestamp=d["timestamp"],
            source=d.get("source", "web"),
            type=d["type"],
            payload=d["payload"],
        )


@dataclass(frozen=True)
class NodePatch:
    """
    One mutation of one preview node, addressed by id.

    op:
      text          replace text content with `value`
      style         set style property `name` to `value`
      attr          set attribute `name` to `value`
      add_class     add class `value`
      remove_class  remove class `value`
      set_class     replace the whole class list with `value` (space separated)
      remove_attr   drop attribute `name`
      variable      set document-level CSS variable `name` (node_id is ignored)
    """

    node_id: str
    op: str
    value: str
    name: str | None = None


@dataclass
class Warning:
    """A non-fatal issue encountered during reduction."""

    code: str
    message: str
    details: dict[str, Any] | None = None


@dataclass
class ReduceResult:
    """
    Result of applying one event to a state.
    The reducer never throws. It always returns one of these.
    """

    state: dict[str, Any]
    applied: bool
    patches: list[NodePatch] = field(default_factory=list)
    warnings: list[Warning] = field(default_factory=list)
    error: str | None = None


@dataclass
class RenderOptions:
    """Options controlling what the renderer includes in output."""

    title: str = "A4 Page Builder"
    include_editor: bool = False
    include_fonts: bool = True
    register_worker: bool = True


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def is_valid_id(value: str) -> bool:
    """Check if a string is a valid field ID (snake_case, max 64 chars)."""
    return bool(ID_PATTERN.match(value))


def is_hex_color(value: Any) -> bool:
    return isinstance(value, str) and bool(HEX_COLOR_PATTERN.match(value))


def is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def format_number(value: int | float) -> str:
    """
    Render a number the way the page expects it in CSS and SVG.
    Integral floats drop their fraction: 24.0 → "24", 0.5 → "0.5".
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def now_iso() -> str:
    """Current UTC time as ISO 8601 string."""
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
