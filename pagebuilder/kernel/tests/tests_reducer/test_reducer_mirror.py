"""
Page Builder Reducer -- Text & Image Mirror Tests

Text: the trimmed value goes to the bound node; an empty value becomes the
non-breaking placeholder so the row keeps its height.
Images: uploads arrive as data URIs and land on thumbnail and page image
alike; pasted links must start with http or data:.
"""

import pytest

from pagebuilder.kernel.bindings import DEFAULT_BINDINGS, TextMirror
from pagebuilder.kernel.types import PLACEHOLDER_GLYPH, NodePatch

TEXT_FIELDS = sorted(
    {b.source for b in DEFAULT_BINDINGS.of_kind(TextMirror) if b.placeholder}
)


def text_patches(result):
    return {p.node_id: p.value for p in result.patches if p.op == "text"}


# ============================================================================
# Text mirror
# ============================================================================


class TestTextMirror:
    @pytest.mark.parametrize("field_id", TEXT_FIELDS)
    def test_empty_value_gives_placeholder(self, state, apply, field_id):
        (binding,) = DEFAULT_BINDINGS.resolve_kind(field_id, TextMirror)
        r = apply(state, "field.input", {"field": field_id, "value": ""})
        assert r.applied
        assert text_patches(r) == {binding.target: PLACEHOLDER_GLYPH}

    @pytest.mark.parametrize("field_id", TEXT_FIELDS)
    def test_whitespace_only_gives_placeholder(self, state, apply, field_id):
        r = apply(state, "field.input", {"field": field_id, "value": "   \t "})
        assert list(text_patches(r).values()) == [PLACEHOLDER_GLYPH]

    @pytest.mark.parametrize("field_id", TEXT_FIELDS)
    def test_value_is_trimmed(self, state, apply, field_id):
        (binding,) = DEFAULT_BINDINGS.resolve_kind(field_id, TextMirror)
        r = apply(state, "field.input", {"field": field_id, "value": "  Asha Rao  "})
        assert text_patches(r) == {binding.target: "Asha Rao"}

    def test_raw_value_kept_in_state(self, state, apply):
        r = apply(state, "field.input", {"field": "name", "value": "  Asha  "})
        assert r.state["values"]["name"] == "  Asha  "

    def test_input_state_not_mutated(self, state, apply):
        before = state["values"]["name"]
        apply(state, "field.input", {"field": "name", "value": "Changed"})
        assert state["values"]["name"] == before

    def test_only_bound_node_patched(self, state, apply):
        r = apply(state, "field.input", {"field": "sem", "value": "6th"})
        assert r.patches == [NodePatch("out-sem", "text", "6th")]


class TestLabels:
    def test_label_gets_dash_suffix(self, state, apply):
        r = apply(state, "field.input", {"field": "label_name", "value": "Student"})
        assert text_patches(r) == {"preview-label-name": "Student -"}

    def test_roll_label_gets_colon_suffix(self, state, apply):
        r = apply(state, "field.input", {"field": "label_uni_roll", "value": "Univ Roll"})
        assert text_patches(r) == {"preview-label-uni-roll": "Univ Roll:-"}

    def test_empty_label_has_no_placeholder(self, state, apply):
        r = apply(state, "field.input", {"field": "label_reg", "value": ""})
        assert text_patches(r) == {"preview-label-reg": ":-"}


# ============================================================================
# Image mirror
# ============================================================================

PNG_URI = "data:image/png;base64,iVBORw0KGgo="


class TestImageUpload:
    def test_upload_sets_thumbnail_and_target(self, state, apply):
        r = apply(state, "image.upload", {"field": "univ_logo", "data_uri": PNG_URI})
        assert r.applied
        srcs = {p.node_id: p.value for p in r.patches if p.name == "src"}
        assert srcs == {"p-univ": PNG_URI, "img-univ": PNG_URI}
        assert r.state["images"]["univ_logo"] == PNG_URI

    def test_upload_must_be_data_uri(self, state, apply):
        r = apply(state, "image.upload", {"field": "univ_logo", "data_uri": "/home/me/logo.png"})
        assert not r.applied
        assert r.error.startswith("NO_IMAGE_DATA")
        assert r.patches == []

    def test_upload_to_text_field_rejected(self, state, apply):
        r = apply(state, "image.upload", {"field": "name", "data_uri": PNG_URI})
        assert not r.applied
        assert r.error.startswith("WRONG_FIELD_KIND")


class TestImageLink:
    @pytest.mark.parametrize("url", ["https://example.com/logo.png", "http://x.org/a.jpg", PNG_URI])
    def test_allowed_links(self, state, apply, url):
        r = apply(state, "image.link", {"field": "coll_logo", "url": url})
        assert r.applied
        srcs = {p.node_id: p.value for p in r.patches}
        assert srcs == {"p-coll": url, "img-coll": url}

    @pytest.mark.parametrize("url", ["ftp://x.png", "file:///etc/passwd", "logo.png", ""])
    def test_rejected_links_leave_nodes_unchanged(self, state, apply, url):
        r = apply(state, "image.link", {"field": "coll_logo", "url": url})
        assert not r.applied
        assert r.error.startswith("INVALID_IMAGE_URL")
        assert r.patches == []
        assert r.state is state
        assert "coll_logo" not in r.state["images"]
