"""
Page Builder Kernel -- Field Registry

Declares every editable field (identity, kind, default, visibility default)
and every visibility toggle. Built once at import; read-only afterwards.

Two toggle namespaces exist and never touch each other:
  vis-btn-*  eye buttons next to detail rows and project fields
  toggle-*   checkboxes for whole sections and logo blocks
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from types import MappingProxyType

from pagebuilder.kernel.types import (
    DEFAULT_ARC_DEPTH,
    DEFAULT_ARC_FONT_SIZE,
    DEFAULT_BG_COLOR,
    DEFAULT_BG_OPACITY,
    DEFAULT_BORDER_COLOR,
    DEFAULT_BORDER_STYLE,
    FIELD_KINDS,
    Field,
    Toggle,
    is_valid_id,
)

# Detail rows, in page order. (field id, node suffix, default label)
DETAIL_ROWS: tuple[tuple[str, str, str], ...] = (
    ("name", "name", "Name"),
    ("sem", "sem", "Semester"),
    ("course", "course", "Course"),
    ("roll", "roll", "Class Roll No"),
    ("uni_roll", "uni-roll", "University Roll No"),
    ("reg", "reg", "Registration No"),
)

# Project fields with their own eye button. (field id, preview node)
PROJECT_FIELDS: tuple[tuple[str, str], ...] = (
    ("header", "out-header"),
    ("topic", "out-topic"),
    ("session", "preview-session-footer"),
)

STYLEABLE_FIELDS: tuple[str, ...] = ("univ", "coll", "header", "topic", "session")


def label_suffix(row_id: str) -> str:
    """Roll and registration labels end in ':-', the rest in ' -'."""
    return ":-" if "roll" in row_id or row_id == "reg" else " -"


def _declare_fields() -> list[Field]:
    fields = [
        Field("univ", "text", default="UNIVERSITY NAME"),
        Field("coll", "text", default="COLLEGE NAME"),
        Field("header", "text", default="PROJECT REPORT"),
        Field("topic", "text", default="Project Topic"),
        Field("session", "text", default="2024-2025"),
    ]
    for row_id, _suffix, label in DETAIL_ROWS:
        fields.append(Field(row_id, "text", default="", label=label))
        fields.append(Field(f"label_{row_id}", "text", default=label))

    fields += [
        Field("univ_logo", "image"),
        Field("coll_logo", "image"),
        Field("coll_name_offset", "numeric", default=0),
        Field("coll_logo_offset", "numeric", default=0),
        Field("arc_depth", "numeric", default=DEFAULT_ARC_DEPTH),
        Field("arc_size", "numeric", default=DEFAULT_ARC_FONT_SIZE),
        Field("bg_color", "color", default=DEFAULT_BG_COLOR),
        Field("bg_opacity", "numeric", default=DEFAULT_BG_OPACITY),
        Field("bg_image", "image"),
        Field("border_style", "choice", default=DEFAULT_BORDER_STYLE),
        Field("border_color", "color", default=DEFAULT_BORDER_COLOR),
    ]
    return fields


def _declare_toggles() -> list[Toggle]:
    toggles: list[Toggle] = []
    for row_id, suffix, _label in DETAIL_ROWS:
        toggles.append(
            Toggle(
                id=f"row_{row_id}",
                namespace="vis-btn",
                control=f"vis-btn-{suffix}",
                icon=f"vis-icon-{suffix}",
                target=f"preview-row-{suffix}",
                display="flex",
            )
        )
    for field_id, target in PROJECT_FIELDS:
        toggles.append(
            Toggle(
                id=f"project_{field_id}",
                namespace="vis-btn",
                control=f"vis-btn-{field_id}",
                icon=f"vis-icon-{field_id}",
                target=target,
                display="",
            )
        )
    for section in ("univ", "coll"):
        toggles.append(
            Toggle(
                id=f"section_{section}",
                namespace="toggle",
                control=f"toggle-{section}",
                target=f"section-{section}",
                display="block",
                checkbox=True,
            )
        )
        toggles.append(
            Toggle(
                id=f"logo_{section}",
                namespace="toggle",
                control=f"toggle-{section}-logo",
                target=f"{section}-logo-wrapper",
                display="flex",
                checkbox=True,
            )
        )
    return toggles


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class FieldRegistry:
    """Read-only lookup of fields and toggles by id."""

    def __init__(self, fields: Iterable[Field], toggles: Iterable[Toggle] = ()):
        by_id: dict[str, Field] = {}
        for f in fields:
            if not is_valid_id(f.id):
                raise ValueError(f"Invalid field ID: {f.id}")
            if f.kind not in FIELD_KINDS:
                raise ValueError(f"Unknown field kind for {f.id}: {f.kind}")
            if f.id in by_id:
                raise ValueError(f"Duplicate field ID: {f.id}")
            by_id[f.id] = f

        toggles_by_id: dict[str, Toggle] = {}
        for t in toggles:
            if t.id in toggles_by_id:
                raise ValueError(f"Duplicate toggle ID: {t.id}")
            if not t.control.startswith(t.namespace + "-"):
                raise ValueError(f"Toggle {t.id} control {t.control} is outside namespace {t.namespace}")
            toggles_by_id[t.id] = t

        self._fields = MappingProxyType(by_id)
        self._toggles = MappingProxyType(toggles_by_id)

    def __contains__(self, field_id: object) -> bool:
        return field_id in self._fields

    def __iter__(self) -> Iterator[Field]:
        return iter(self._fields.values())

    def __len__(self) -> int:
        return len(self._fields)

    def get(self, field_id: str) -> Field | None:
        return self._fields.get(field_id)

    def toggle(self, toggle_id: str) -> Toggle | None:
        return self._toggles.get(toggle_id)

    @property
    def fields(self) -> MappingProxyType:
        return self._fields

    @property
    def toggles(self) -> MappingProxyType:
        return self._toggles

    def of_kind(self, kind: str) -> list[Field]:
        return [f for f in self._fields.values() if f.kind == kind]


DEFAULT_REGISTRY = FieldRegistry(_declare_fields(), _declare_toggles())
