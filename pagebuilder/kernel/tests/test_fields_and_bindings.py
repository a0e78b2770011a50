"""
Page Builder -- Field Registry & Binding Table Tests

The binding table is the whole input → preview topology. It has to agree
with the registry (every source declared) and with the page (every target
present), and resolving an unbound field is a quiet no-op.
"""

import pytest

from pagebuilder.kernel.bindings import (
    DEFAULT_BINDINGS,
    ArcApply,
    Binding,
    BindingTable,
    ImageMirror,
    StyleApply,
    TextMirror,
    validate_bindings,
)
from pagebuilder.kernel.fields import DEFAULT_REGISTRY, STYLEABLE_FIELDS, FieldRegistry, label_suffix
from pagebuilder.kernel.layout import build_document
from pagebuilder.kernel.types import TRANSFORM_KINDS, Field, Toggle

# ============================================================================
# Registry
# ============================================================================


class TestFieldRegistry:
    def test_known_fields_present(self):
        for field_id in ("univ", "coll", "name", "uni_roll", "univ_logo", "arc_depth", "bg_color"):
            assert field_id in DEFAULT_REGISTRY

    def test_border_style_is_a_choice(self):
        assert DEFAULT_REGISTRY.get("border_style").kind == "choice"
        assert DEFAULT_REGISTRY.of_kind("font") == []

    def test_fields_are_immutable(self):
        f = DEFAULT_REGISTRY.get("name")
        with pytest.raises(AttributeError):
            f.default = "changed"

    def test_registry_mapping_is_read_only(self):
        with pytest.raises(TypeError):
            DEFAULT_REGISTRY.fields["extra"] = Field("extra", "text")

    def test_duplicate_field_rejected(self):
        with pytest.raises(ValueError, match="Duplicate field ID"):
            FieldRegistry([Field("a", "text"), Field("a", "text")])

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError, match="Unknown field kind"):
            FieldRegistry([Field("a", "video")])

    def test_toggle_control_must_match_namespace(self):
        bad = Toggle(id="row_x", namespace="vis-btn", control="toggle-x", target="row-x", display="flex")
        with pytest.raises(ValueError, match="outside namespace"):
            FieldRegistry([], [bad])

    def test_fields_default_visible(self):
        assert all(DEFAULT_REGISTRY.get(f.id).visible for f in DEFAULT_REGISTRY)

    def test_toggle_namespaces_disjoint(self):
        vis_btn = {t.control for t in DEFAULT_REGISTRY.toggles.values() if t.namespace == "vis-btn"}
        checkbox = {t.control for t in DEFAULT_REGISTRY.toggles.values() if t.namespace == "toggle"}
        assert vis_btn and checkbox
        assert vis_btn.isdisjoint(checkbox)
        assert all(c.startswith("vis-btn-") for c in vis_btn)
        assert all(c.startswith("toggle-") for c in checkbox)

    def test_label_suffixes(self):
        assert label_suffix("roll") == ":-"
        assert label_suffix("uni_roll") == ":-"
        assert label_suffix("reg") == ":-"
        assert label_suffix("name") == " -"
        assert label_suffix("course") == " -"


# ============================================================================
# Binding table
# ============================================================================


class TestBindingTable:
    def test_default_table_is_valid_against_registry_and_page(self):
        document = build_document()
        assert validate_bindings(DEFAULT_BINDINGS, DEFAULT_REGISTRY, document.ids()) == []

    def test_unbound_field_resolves_to_nothing(self):
        assert DEFAULT_BINDINGS.resolve("border_style") == ()
        assert DEFAULT_BINDINGS.resolve("no_such_field") == ()

    def test_text_field_has_mirror_and_style(self):
        kinds = {b.kind for b in DEFAULT_BINDINGS.resolve("univ")}
        assert kinds == {"text_mirror", "style_apply"}

    def test_college_style_is_vector(self):
        (binding,) = DEFAULT_BINDINGS.resolve_kind("coll", StyleApply)
        assert binding.vector is True
        (univ,) = DEFAULT_BINDINGS.resolve_kind("univ", StyleApply)
        assert univ.vector is False

    def test_image_mirror_targets_thumbnail_and_page(self):
        (binding,) = DEFAULT_BINDINGS.resolve_kind("univ_logo", ImageMirror)
        assert binding.targets() == ("p-univ", "img-univ")

    def test_arc_bindings_share_nodes(self):
        arcs = DEFAULT_BINDINGS.of_kind(ArcApply)
        assert {(b.path, b.text) for b in arcs} == {("curve-path", "out-coll-path")}

    def test_labels_mirror_with_suffix_and_no_placeholder(self):
        (binding,) = DEFAULT_BINDINGS.resolve_kind("label_roll", TextMirror)
        assert binding.suffix == ":-"
        assert binding.placeholder is False

    def test_unregistered_source_reported(self):
        table = BindingTable([TextMirror("ghost", target="out-ghost")])
        errors = validate_bindings(table, DEFAULT_REGISTRY)
        assert errors == ["Binding source not registered: ghost"]

    def test_missing_target_reported_only_with_document(self):
        table = BindingTable([TextMirror("name", target="out-elsewhere")])
        assert validate_bindings(table, DEFAULT_REGISTRY) == []
        errors = validate_bindings(table, DEFAULT_REGISTRY, build_document().ids())
        assert len(errors) == 1
        assert "out-elsewhere" in errors[0]

    def test_every_transform_kind_used(self):
        assert {b.kind for b in DEFAULT_BINDINGS} == TRANSFORM_KINDS

    def test_every_styleable_field_has_style_binding(self):
        styled = {b.source for b in DEFAULT_BINDINGS.of_kind(StyleApply)}
        assert styled == set(STYLEABLE_FIELDS)

    def test_unknown_kind_reported(self):
        class Stray(TextMirror):
            kind = "stray"

        errors = validate_bindings(BindingTable([Stray("name", target="out-name")]), DEFAULT_REGISTRY)
        assert errors == ["Unknown binding kind for name: 'stray'"]

    def test_base_binding_is_abstract(self):
        with pytest.raises(TypeError):
            Binding("name")
