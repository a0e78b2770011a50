"""
Page Builder Kernel -- Renderer

Pure function: (document, options?) → HTML string
No IO. Deterministic: same document → same output, always.

Serializes the host document as it currently stands into a single portable
HTML file. Images are already embedded as data URIs by the time they reach a
node, so the output references nothing on the local filesystem.
"""

from __future__ import annotations

from html import escape as _html_escape

import chevron

from pagebuilder.kernel.document import Document, PreviewNode
from pagebuilder.kernel.layout import PAGE_ROOT
from pagebuilder.kernel.types import RenderOptions

VOID_TAGS = {"img", "input", "br", "hr", "meta", "link"}
SVG_LEAF_TAGS = {"path"}

# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{{title}}</title>
{{#include_fonts}}
  <link rel="preconnect" href="https://fonts.googleapis.com">
  <link href="https://fonts.googleapis.com/css2?family=Cinzel:wght@400;700&family=Inter:wght@400;600&display=swap" rel="stylesheet">
  <link href="https://fonts.googleapis.com/css2?family=Material+Symbols+Outlined" rel="stylesheet">
{{/include_fonts}}
  <style>
:root {
{{#variables}}
  {{name}}: {{value}};
{{/variables}}
}
{{{css}}}
  </style>
</head>
<body>
{{{body}}}
{{#register_worker}}
  <script>
    if ('serviceWorker' in navigator) {
      const sw = new Blob(["self.addEventListener('fetch', () => {});"], { type: 'application/javascript' });
      navigator.serviceWorker.register(URL.createObjectURL(sw)).catch(e => console.log(e));
    }
  </script>
{{/register_worker}}
</body>
</html>
"""

BASE_CSS = """
*, *::before, *::after { box-sizing: border-box; margin: 0; padding: 0; }
body { font-family: Inter, sans-serif; background: #e5e7eb; }
.hidden { display: none; }
.a4-page {
  width: 794px;
  min-height: 1123px;
  margin: 0 auto;
  background: #ffffff;
  transform-origin: top center;
}
.page-border {
  min-height: 1083px;
  margin: 20px;
  padding: 32px;
  border: 4px solid var(--border-color);
}
.border-style-classic { border-style: solid; }
.border-style-double { border: 8px double var(--border-color); }
.border-style-dashed { border-style: dashed; }
.border-style-dotted { border-style: dotted; }
.border-style-none { border: none; }
.border-style-ornate { border: 6px ridge var(--border-color); outline: 2px solid var(--border-color); outline-offset: -14px; }
.page-section { display: block; text-align: center; }
.logo-wrapper { display: flex; justify-content: center; }
.logo { max-height: 120px; }
.univ-name { font-family: Cinzel, serif; font-size: 28px; }
.coll-name-wrapper { display: flex; justify-content: center; }
.header { text-align: center; margin-top: 32px; }
.topic { text-align: center; margin: 16px 0 40px; }
.detail-row { display: flex; gap: 8px; margin: 8px 64px; font-size: 18px; }
.row-label { min-width: 200px; font-weight: 600; }
.session-footer { text-align: center; margin-top: 48px; }
.vis-btn.hidden-field { opacity: 0.4; }
@media print {
  body { background: none; }
  .editor-panel { display: none; }
  .a4-page { transform: none !important; }
}
"""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def render(document: Document, options: RenderOptions | None = None) -> str:
    """
    Render the document as one self-contained HTML file.
    Without `include_editor` only the page preview (not the editor panel)
    goes into the body.
    """
    opts = options or RenderOptions()

    if opts.include_editor:
        body = render_node(document.root)
    else:
        page = document.get(PAGE_ROOT)
        body = render_node(page) if page is not None else ""

    return chevron.render(
        PAGE_TEMPLATE,
        {
            "title": opts.title,
            "include_fonts": opts.include_fonts,
            "register_worker": opts.register_worker,
            "variables": [{"name": k, "value": v} for k, v in sorted(document.variables.items())],
            "css": BASE_CSS,
            "body": body,
        },
    )


def render_node(node: PreviewNode, depth: int = 1) -> str:
    """
    Render a single node and its children recursively.
    Returns an HTML fragment string.
    """
    indent = "  " * depth
    open_tag = f"{indent}<{node.tag}{_render_attrs(node)}>"

    if node.tag in VOID_TAGS:
        return open_tag
    if node.tag in SVG_LEAF_TAGS and not node.children:
        return f"{indent}<{node.tag}{_render_attrs(node)} />"

    text = escape(node.text) if node.text is not None else ""
    if not node.children:
        return f"{open_tag}{text}</{node.tag}>"

    parts = [f"{open_tag}{text}"]
    for child in node.children:
        parts.append(render_node(child, depth + 1))
    parts.append(f"{indent}</{node.tag}>")
    return "\n".join(parts)


def render_style(style: dict[str, str]) -> str:
    """Inline style string. Property order follows insertion order."""
    return "; ".join(f"{k}: {v}" for k, v in style.items())


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _render_attrs(node: PreviewNode) -> str:
    parts: list[str] = []
    if node.id:
        parts.append(f'id="{escape(node.id)}"')
    if node.classes:
        parts.append(f'class="{escape(" ".join(node.classes))}"')
    if node.style:
        parts.append(f'style="{escape(render_style(node.style))}"')
    for key, value in node.attrs.items():
        parts.append(f'{key}="{escape(value)}"')
    return (" " + " ".join(parts)) if parts else ""


def escape(text: str) -> str:
    """HTML-escape text content and attribute values."""
    return _html_escape(text, quote=True)
