"""
Page Builder Reducer -- Visibility Tests

A toggle flips one boolean and, in the same result, moves the marker class,
the icon token (or checkbox), and the target's display together. Toggling
twice is an involution. The vis-btn-* and toggle-* namespaces never leak
into each other.
"""

import pytest

from pagebuilder.kernel.document import apply_patches
from pagebuilder.kernel.fields import DEFAULT_REGISTRY
from pagebuilder.kernel.layout import build_document
from pagebuilder.kernel.reducer import sync_patches
from pagebuilder.kernel.types import HIDDEN_MARKER_CLASS, ICON_HIDDEN, ICON_VISIBLE

ALL_TOGGLES = sorted(DEFAULT_REGISTRY.toggles)


@pytest.fixture
def document(state):
    doc = build_document()
    apply_patches(doc, sync_patches(state))
    return doc


def observable(doc, toggle_id):
    """(marker class present, icon text, checkbox attr, target display)"""
    t = DEFAULT_REGISTRY.toggle(toggle_id)
    control = doc.get(t.control)
    icon = doc.get(t.icon) if t.icon else None
    target = doc.get(t.target)
    return (
        HIDDEN_MARKER_CLASS in control.classes,
        icon.text if icon else None,
        control.attrs.get("checked"),
        target.style.get("display"),
    )


# ============================================================================
# Lock-step updates
# ============================================================================


class TestToggleLockStep:
    def test_all_toggles_start_visible(self, state):
        assert set(state["visibility"]) == set(ALL_TOGGLES)
        assert all(state["visibility"].values())

    def test_row_toggle_hides_all_three(self, state, apply):
        r = apply(state, "visibility.toggle", {"toggle": "row_name"})
        assert r.applied
        assert r.state["visibility"]["row_name"] is False
        by_node = {(p.node_id, p.op, p.name): p.value for p in r.patches}
        assert by_node[("vis-btn-name", "add_class", None)] == HIDDEN_MARKER_CLASS
        assert by_node[("vis-icon-name", "text", None)] == ICON_HIDDEN
        assert by_node[("preview-row-name", "style", "display")] == "none"

    def test_row_shows_as_flex(self, state, apply):
        r1 = apply(state, "visibility.toggle", {"toggle": "row_roll"})
        r2 = apply(r1.state, "visibility.toggle", {"toggle": "row_roll"}, seq=2)
        displays = [p.value for p in r2.patches if p.name == "display"]
        icons = [p.value for p in r2.patches if p.op == "text"]
        assert displays == ["flex"]
        assert icons == [ICON_VISIBLE]

    def test_section_shows_as_block(self, state, apply):
        r = apply(state, "visibility.set", {"toggle": "section_univ", "visible": True})
        assert [p.value for p in r.patches if p.name == "display"] == ["block"]

    def test_logo_shows_as_flex(self, state, apply):
        r = apply(state, "visibility.set", {"toggle": "logo_coll", "visible": True})
        assert [p.value for p in r.patches if p.name == "display"] == ["flex"]

    def test_project_field_falls_back_to_stylesheet(self, state, apply):
        r = apply(state, "visibility.set", {"toggle": "project_session", "visible": True})
        assert [p.value for p in r.patches if p.name == "display"] == [""]

    def test_checkbox_state_follows(self, state, apply):
        r = apply(state, "visibility.toggle", {"toggle": "section_coll"})
        ops = [(p.op, p.name) for p in r.patches if p.node_id == "toggle-coll"]
        assert ("remove_attr", "checked") in ops

    def test_unknown_toggle_rejected(self, state, apply):
        r = apply(state, "visibility.toggle", {"toggle": "row_ghost"})
        assert not r.applied
        assert r.error.startswith("UNKNOWN_TOGGLE")


# ============================================================================
# Involution
# ============================================================================


class TestToggleInvolution:
    @pytest.mark.parametrize("toggle_id", ALL_TOGGLES)
    def test_double_toggle_restores_everything(self, state, apply, document, toggle_id):
        before = observable(document, toggle_id)

        r1 = apply(state, "visibility.toggle", {"toggle": toggle_id})
        apply_patches(document, r1.patches)
        hidden = observable(document, toggle_id)
        assert hidden != before
        assert hidden[3] == "none"

        r2 = apply(r1.state, "visibility.toggle", {"toggle": toggle_id}, seq=2)
        apply_patches(document, r2.patches)
        assert observable(document, toggle_id) == before
        assert r2.state["visibility"] == state["visibility"]


# ============================================================================
# Namespace isolation
# ============================================================================


class TestNamespaceIsolation:
    def test_section_toggle_leaves_field_toggles_alone(self, state, apply):
        r = apply(state, "visibility.toggle", {"toggle": "section_univ"})
        changed = {k for k, v in r.state["visibility"].items() if v != state["visibility"][k]}
        assert changed == {"section_univ"}
        assert all(not p.node_id.startswith("vis-btn-") for p in r.patches)

    def test_field_toggle_leaves_sections_alone(self, state, apply):
        r = apply(state, "visibility.toggle", {"toggle": "project_header"})
        changed = {k for k, v in r.state["visibility"].items() if v != state["visibility"][k]}
        assert changed == {"project_header"}
        assert all(not p.node_id.startswith("toggle-") for p in r.patches)

    def test_logo_and_section_independent(self, state, apply):
        r = apply(state, "visibility.toggle", {"toggle": "logo_univ"})
        assert r.state["visibility"]["section_univ"] is True
        assert r.state["visibility"]["logo_univ"] is False
