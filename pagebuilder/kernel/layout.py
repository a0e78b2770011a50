"""
Page Builder Kernel -- Page Layout

Builds the fixed host document: the A4 page preview plus the editor
affordances the engine drives (eye buttons, checkboxes, thumbnails, the
background image picker). Built once per document load.
"""

from __future__ import annotations

from pagebuilder.kernel.document import Document, PreviewNode
from pagebuilder.kernel.fields import DEFAULT_REGISTRY, DETAIL_ROWS, PROJECT_FIELDS, FieldRegistry, label_suffix
from pagebuilder.kernel.geometry import arc_path
from pagebuilder.kernel.types import DEFAULT_BORDER_COLOR, DEFAULT_BORDER_STYLE, ICON_VISIBLE, PLACEHOLDER_GLYPH

PAGE_ROOT = "page-content"
BORDER_NODE = "page-border"


def _node(tag: str, id: str | None = None, *children: PreviewNode, **kw) -> PreviewNode:
    return PreviewNode(tag=tag, id=id, children=list(children), **kw)


def _text_default(registry: FieldRegistry, field_id: str) -> str:
    f = registry.get(field_id)
    value = (f.default or "").strip() if f else ""
    return value or PLACEHOLDER_GLYPH


# ---------------------------------------------------------------------------
# Page
# ---------------------------------------------------------------------------


def _univ_section(registry: FieldRegistry) -> PreviewNode:
    return _node(
        "section",
        "section-univ",
        _node(
            "div",
            "univ-logo-wrapper",
            _node("img", "img-univ", classes=["logo"], attrs={"src": "", "alt": "University logo"}),
            classes=["logo-wrapper"],
        ),
        _node("h1", "out-univ", classes=["univ-name"], text=_text_default(registry, "univ")),
        classes=["page-section"],
    )


def _coll_section(registry: FieldRegistry) -> PreviewNode:
    curve = _node(
        "svg",
        "curve-svg",
        _node("path", "curve-path", attrs={"d": arc_path(), "fill": "none"}),
        _node(
            "text",
            None,
            _node(
                "textPath",
                "out-coll-path",
                attrs={"href": "#curve-path", "startOffset": "50%", "text-anchor": "middle"},
                text=_text_default(registry, "coll"),
            ),
        ),
        attrs={"viewBox": "0 0 600 200", "width": "600", "height": "200"},
    )
    return _node(
        "section",
        "section-coll",
        _node("div", "coll-name-wrapper", curve, classes=["coll-name-wrapper"]),
        _node(
            "div",
            "coll-logo-wrapper",
            _node("img", "img-coll", classes=["logo"], attrs={"src": "", "alt": "College logo"}),
            classes=["logo-wrapper"],
        ),
        classes=["page-section"],
    )


def _detail_rows(registry: FieldRegistry) -> PreviewNode:
    rows = []
    for row_id, suffix, _label in DETAIL_ROWS:
        label = _text_default(registry, f"label_{row_id}")
        rows.append(
            _node(
                "div",
                f"preview-row-{suffix}",
                _node("span", f"preview-label-{suffix}", classes=["row-label"], text=label + label_suffix(row_id)),
                _node("span", f"out-{suffix}", classes=["row-value"], text=_text_default(registry, row_id)),
                classes=["detail-row"],
            )
        )
    return _node("div", "details", *rows, classes=["details"])


def build_page(registry: FieldRegistry = DEFAULT_REGISTRY) -> PreviewNode:
    border = _node(
        "div",
        BORDER_NODE,
        _univ_section(registry),
        _coll_section(registry),
        _node("h2", "out-header", classes=["header"], text=_text_default(registry, "header")),
        _node("h3", "out-topic", classes=["topic"], text=_text_default(registry, "topic")),
        _detail_rows(registry),
        _node(
            "footer",
            "preview-session-footer",
            _node(
                "p",
                "out-session-p",
                _node("span", None, text="Session: "),
                _node("span", "out-session", text=_text_default(registry, "session")),
            ),
            classes=["session-footer"],
        ),
        classes=["page-border", f"border-style-{DEFAULT_BORDER_STYLE}"],
    )
    return _node("div", PAGE_ROOT, border, classes=["a4-page"])


# ---------------------------------------------------------------------------
# Editor affordances
# ---------------------------------------------------------------------------


def _eye_button(suffix: str) -> PreviewNode:
    return _node(
        "button",
        f"vis-btn-{suffix}",
        _node("span", f"vis-icon-{suffix}", classes=["material-symbols-outlined"], text=ICON_VISIBLE),
        classes=["vis-btn"],
        attrs={"type": "button"},
    )


def _checkbox(control_id: str) -> PreviewNode:
    return _node("input", control_id, attrs={"type": "checkbox", "checked": "checked"})


def build_editor() -> PreviewNode:
    controls: list[PreviewNode] = [
        _checkbox("toggle-univ"),
        _checkbox("toggle-univ-logo"),
        _node("img", "p-univ", classes=["thumb"], attrs={"src": "", "alt": ""}),
        _checkbox("toggle-coll"),
        _checkbox("toggle-coll-logo"),
        _node("img", "p-coll", classes=["thumb"], attrs={"src": "", "alt": ""}),
    ]
    for field_id, _target in PROJECT_FIELDS:
        controls.append(_eye_button(field_id))
    for _row_id, suffix, _label in DETAIL_ROWS:
        controls.append(_eye_button(suffix))
    controls += [
        _node("span", "opacity-value", text="100%"),
        _node("img", "bg-image-preview", classes=["hidden"], attrs={"src": "", "alt": "Background"}),
        _node("span", "bg-image-text", text="No image"),
        _node("input", "bg-image-file", attrs={"type": "file", "accept": "image/*", "value": ""}),
    ]
    return _node("aside", "editor", *controls, classes=["editor-panel"])


def build_document(registry: FieldRegistry = DEFAULT_REGISTRY) -> Document:
    """The whole host document: editor panel + page preview inside <main>."""
    root = _node(
        "div",
        "app",
        build_editor(),
        _node("main", "preview-main", build_page(registry)),
    )
    return Document(root, variables={"--border-color": DEFAULT_BORDER_COLOR})
