"""
Page Builder Kernel -- Binding Table

Static map from each input field to the preview node(s) it drives and the
transform to apply. One dataclass per transform kind; the table is
enumerated in full here and checked against the field registry and the
host document at load time.

resolve() on an unbound field returns an empty tuple. That is a valid state
(a field with no live preview), not an error.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from typing import ClassVar

from pagebuilder.kernel.fields import DETAIL_ROWS, FieldRegistry, label_suffix
from pagebuilder.kernel.types import TRANSFORM_KINDS

# ---------------------------------------------------------------------------
# Binding variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Binding(ABC):
    """A field → node link. Each variant names the nodes it writes to."""

    source: str

    kind: ClassVar[str] = ""

    @abstractmethod
    def targets(self) -> tuple[str, ...]:
        ...


@dataclass(frozen=True)
class TextMirror(Binding):
    """
    Trimmed field value → node text.
    Empty values become the placeholder glyph unless `placeholder` is off.
    """

    target: str = ""
    suffix: str = ""
    placeholder: bool = True

    kind: ClassVar[str] = "text_mirror"

    def targets(self) -> tuple[str, ...]:
        return (self.target,)


@dataclass(frozen=True)
class ImageMirror(Binding):
    """Data URI / link → `src` of both the thumbnail and the page image."""

    thumbnail: str = ""
    target: str = ""

    kind: ClassVar[str] = "image_mirror"

    def targets(self) -> tuple[str, ...]:
        return (self.thumbnail, self.target)


@dataclass(frozen=True)
class StyleApply(Binding):
    """
    color / font / size → node style.
    `vector` marks SVG-hosted text, whose color also needs `fill`.
    """

    target: str = ""
    vector: bool = False

    kind: ClassVar[str] = "style_apply"

    def targets(self) -> tuple[str, ...]:
        return (self.target,)


@dataclass(frozen=True)
class PositionApply(Binding):
    target: str = ""

    kind: ClassVar[str] = "position_apply"

    def targets(self) -> tuple[str, ...]:
        return (self.target,)


@dataclass(frozen=True)
class ArcApply(Binding):
    """Arc depth drives `path`'s geometry; arc size drives `text`'s font size."""

    path: str = ""
    text: str = ""

    kind: ClassVar[str] = "arc_apply"

    def targets(self) -> tuple[str, ...]:
        return (self.path, self.text)


@dataclass(frozen=True)
class BackgroundApply(Binding):
    """
    Background color/opacity/image → the page root.
    The readout, preview, placeholder and file control are editor affordances.
    """

    target: str = ""
    readout: str | None = None
    preview: str | None = None
    placeholder: str | None = None
    file_control: str | None = None

    kind: ClassVar[str] = "background_apply"

    def targets(self) -> tuple[str, ...]:
        extra = (self.readout, self.preview, self.placeholder, self.file_control)
        return (self.target,) + tuple(t for t in extra if t)


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------


class BindingTable:
    """Field id → bindings. Immutable after construction."""

    def __init__(self, bindings: Iterable[Binding]):
        self._bindings: tuple[Binding, ...] = tuple(bindings)
        by_source: dict[str, list[Binding]] = {}
        for b in self._bindings:
            by_source.setdefault(b.source, []).append(b)
        self._by_source = {k: tuple(v) for k, v in by_source.items()}

    def __iter__(self):
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def resolve(self, field_id: str) -> tuple[Binding, ...]:
        return self._by_source.get(field_id, ())

    def resolve_kind(self, field_id: str, kind: type[Binding]) -> tuple[Binding, ...]:
        return tuple(b for b in self.resolve(field_id) if isinstance(b, kind))

    def of_kind(self, kind: type[Binding]) -> tuple[Binding, ...]:
        return tuple(b for b in self._bindings if isinstance(b, kind))


def validate_bindings(
    table: BindingTable,
    registry: FieldRegistry,
    node_ids: set[str] | None = None,
) -> list[str]:
    """
    Check the table against the registry (and the document, if given).
    Returns a list of error strings. Empty list = valid.
    """
    errors: list[str] = []
    for b in table:
        if b.kind not in TRANSFORM_KINDS:
            errors.append(f"Unknown binding kind for {b.source}: {b.kind!r}")
        if b.source not in registry:
            errors.append(f"Binding source not registered: {b.source}")
        if node_ids is None:
            continue
        for target in b.targets():
            if target not in node_ids:
                errors.append(f"Binding target not in document: {b.source} → {target}")
    return errors


def _default_bindings() -> list[Binding]:
    bindings: list[Binding] = [
        TextMirror("univ", target="out-univ"),
        TextMirror("coll", target="out-coll-path"),
        TextMirror("topic", target="out-topic"),
        TextMirror("header", target="out-header"),
        TextMirror("session", target="out-session"),
    ]
    for row_id, suffix, _label in DETAIL_ROWS:
        bindings.append(TextMirror(row_id, target=f"out-{suffix}"))
        bindings.append(
            TextMirror(
                f"label_{row_id}",
                target=f"preview-label-{suffix}",
                suffix=label_suffix(row_id),
                placeholder=False,
            )
        )

    bindings += [
        ImageMirror("univ_logo", thumbnail="p-univ", target="img-univ"),
        ImageMirror("coll_logo", thumbnail="p-coll", target="img-coll"),
        StyleApply("univ", target="out-univ"),
        StyleApply("coll", target="out-coll-path", vector=True),
        StyleApply("header", target="out-header"),
        StyleApply("topic", target="out-topic"),
        StyleApply("session", target="out-session-p"),
        PositionApply("coll_name_offset", target="coll-name-wrapper"),
        PositionApply("coll_logo_offset", target="coll-logo-wrapper"),
        ArcApply("arc_depth", path="curve-path", text="out-coll-path"),
        ArcApply("arc_size", path="curve-path", text="out-coll-path"),
        BackgroundApply("bg_color", target="page-content", readout="opacity-value"),
        BackgroundApply("bg_opacity", target="page-content", readout="opacity-value"),
        BackgroundApply(
            "bg_image",
            target="page-content",
            preview="bg-image-preview",
            placeholder="bg-image-text",
            file_control="bg-image-file",
        ),
    ]
    return bindings


DEFAULT_BINDINGS = BindingTable(_default_bindings())
