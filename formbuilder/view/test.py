"""Tests for render tree construction."""

import logging

import pytest

from formbuilder.view import FieldView, GroupView, build_tree
from formbuilder.widgets import Widget


class TestBuildTree:
    """Tests for build_tree."""

    @pytest.mark.unit
    def test_structure(self, contact_schema):
        """Groups nest and paths stay flat dotted strings."""
        view = build_tree(contact_schema)
        assert view.title == "Contact"
        assert not view.informational
        names = [child.path for child in view.children]
        assert names == ["name", "age", "contact", "subscribe"]

        group = view.children[2]
        assert isinstance(group, GroupView)
        assert group.title == "Contact details"
        assert [c.path for c in group.children] == ["contact.email", "contact.phone"]

    @pytest.mark.unit
    def test_required_from_immediate_parent(self, contact_schema):
        """Required-ness comes from the parent's list only."""
        fields = {f.path: f for f in build_tree(contact_schema).iter_fields()}
        assert fields["name"].required
        assert not fields["age"].required
        assert fields["contact.email"].required
        assert not fields["contact.phone"].required

    @pytest.mark.unit
    def test_values_and_errors(self, contact_schema):
        """Answers and errors are attached by path."""
        view = build_tree(
            contact_schema,
            answers={"contact": {"email": "bad"}},
            field_errors={"contact.email": "Invalid email address"},
        )
        email = next(f for f in view.iter_fields() if f.path == "contact.email")
        assert email.value == "bad"
        assert email.error == "Invalid email address"
        assert email.widget.widget is Widget.EMAIL
        assert email.element_id == "contact.email"

    @pytest.mark.unit
    def test_title_falls_back_to_name(self):
        """Untitled fields use their property name."""
        view = build_tree({"type": "object", "properties": {"zip": {"type": "string"}}})
        assert view.first_field().title == "zip"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "schema",
        [
            {"title": "Closed", "description": "Come back later"},
            {"title": "Closed", "type": "object", "properties": {}},
        ],
    )
    def test_informational_form(self, schema):
        """A root without properties has no controls."""
        view = build_tree(schema)
        assert view.informational
        assert view.title == "Closed"
        assert view.control_paths() == []

    @pytest.mark.unit
    def test_widgets_from_hints(self, choices_schema, choices_hints):
        """UI hints steer widget selection by path."""
        widgets = {
            f.path: f.widget.widget
            for f in build_tree(choices_schema, choices_hints).iter_fields()
        }
        assert widgets == {
            "notice": Widget.INFO,
            "color": Widget.SELECT,
            "size": Widget.RADIO,
            "channels": Widget.CHECKBOXES,
            "topics": Widget.MULTISELECT,
            "comments": Widget.TEXTAREA,
        }

    @pytest.mark.unit
    def test_info_fields_excluded_from_controls(self, choices_schema, choices_hints):
        """Informational fields render no input."""
        paths = build_tree(choices_schema, choices_hints).control_paths()
        assert "notice" not in paths
        assert paths[0] == "color"

    @pytest.mark.unit
    def test_grouped_widgets_hide_label(self, choices_schema, choices_hints):
        """Radio and checkbox groups use a legend instead of a label."""
        fields = {
            f.path: f for f in build_tree(choices_schema, choices_hints).iter_fields()
        }
        assert not fields["size"].show_label
        assert fields["size"].widget.inline
        assert not fields["channels"].show_label
        assert fields["color"].show_label
        assert fields["channels"].option_id("sms") == "channels-sms"

    @pytest.mark.unit
    def test_single_checkbox_hides_label(self, contact_schema):
        """A boolean checkbox labels itself, so no field label is shown."""
        fields = {f.path: f for f in build_tree(contact_schema).iter_fields()}
        assert not fields["subscribe"].show_label
        assert fields["name"].show_label

    @pytest.mark.unit
    def test_depth_ceiling(self, caplog):
        """Groups past the ceiling are rendered empty with a warning."""
        schema = {
            "type": "object",
            "properties": {
                "a": {
                    "type": "object",
                    "properties": {
                        "b": {"type": "object", "properties": {"c": {"type": "string"}}}
                    },
                }
            },
        }
        with caplog.at_level(logging.WARNING):
            view = build_tree(schema, max_depth=1)
        group_a = view.children[0]
        group_b = group_a.children[0]
        assert isinstance(group_b, GroupView)
        assert group_b.children == []
        assert group_b.truncated
        assert not group_a.truncated
        assert "Maximum nesting depth" in caplog.text

    @pytest.mark.unit
    def test_iter_fields_order(self, contact_schema):
        """Fields are yielded depth-first in schema order."""
        paths = [f.path for f in build_tree(contact_schema).iter_fields()]
        assert paths == ["name", "age", "contact.email", "contact.phone", "subscribe"]
        assert all(isinstance(f, FieldView) for f in build_tree(contact_schema).iter_fields())
