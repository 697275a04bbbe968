"""Tests for widget selection."""

import pytest

from formbuilder.schema import SchemaNode, UiHint
from formbuilder.widgets import (
    Widget,
    WidgetSpec,
    resolve_ui_hint,
    sanitize_id,
    select_widget,
)


def _node(**kwargs) -> SchemaNode:
    return SchemaNode.model_validate(kwargs)


class TestSelectWidget:
    """Tests for the ordered widget dispatch."""

    @pytest.mark.unit
    def test_array_enum_with_checkboxes_hint(self):
        """Array of enum plus checkboxes hint gives a checkbox group."""
        node = _node(type="array", items={"enum": ["a", "b"]})
        spec = select_widget(node, UiHint(widget="checkboxes", inline=True))
        assert spec.widget is Widget.CHECKBOXES
        assert spec.options == ("a", "b")
        assert spec.inline is True
        assert spec.is_grouped

    @pytest.mark.unit
    def test_array_enum_defaults_to_multiselect(self):
        """Array of enum without a hint gives a multi-select."""
        node = _node(type="array", items={"enum": ["a", "b"]})
        assert select_widget(node).widget is Widget.MULTISELECT

    @pytest.mark.unit
    def test_array_without_item_enum_falls_back(self):
        """Arrays of free values fall through to a text input."""
        node = _node(type="array", items={"type": "string"})
        assert select_widget(node).widget is Widget.TEXT

    @pytest.mark.unit
    def test_single_member_enum_is_info(self):
        """A one-value enum is informational."""
        spec = select_widget(_node(type="string", enum=["Fresno"]))
        assert spec.widget is Widget.INFO
        assert not spec.is_control

    @pytest.mark.unit
    def test_single_member_enum_ignores_radio_hint(self):
        """A one-value enum never becomes an input, whatever the hint."""
        spec = select_widget(_node(enum=["only"]), UiHint(widget="radio"))
        assert spec.widget is Widget.INFO

    @pytest.mark.unit
    def test_enum_with_radio_hint(self):
        """Enum plus radio hint gives a radio group."""
        spec = select_widget(_node(enum=["x", "y", "z"]), UiHint(widget="radio"))
        assert spec.widget is Widget.RADIO
        assert spec.options == ("x", "y", "z")
        assert spec.inline is False

    @pytest.mark.unit
    def test_enum_defaults_to_select(self):
        """Plain enum gives a select with a placeholder."""
        spec = select_widget(_node(enum=["x", "y"]))
        assert spec.widget is Widget.SELECT
        assert spec.placeholder is True

    @pytest.mark.unit
    def test_boolean(self):
        """Booleans give a checkbox."""
        assert select_widget(_node(type="boolean")).widget is Widget.CHECKBOX

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "fmt,hint,expected",
        [
            ("email", None, Widget.EMAIL),
            ("date", None, Widget.DATE),
            ("email", "textarea", Widget.EMAIL),
            (None, "textarea", Widget.TEXTAREA),
            (None, None, Widget.TEXT),
            ("uri", None, Widget.TEXT),
        ],
    )
    def test_strings(self, fmt, hint, expected):
        """String format takes precedence over the textarea hint."""
        spec = select_widget(_node(type="string", format=fmt), UiHint(widget=hint))
        assert spec.widget is expected

    @pytest.mark.unit
    @pytest.mark.parametrize("type_,step", [("integer", "1"), ("number", "any")])
    def test_numbers(self, type_, step):
        """Numeric types give a number input with a matching step."""
        spec = select_widget(_node(type=type_))
        assert spec.widget is Widget.NUMBER
        assert spec.step == step

    @pytest.mark.unit
    def test_untyped_fallback(self):
        """Nodes without a usable type fall back to text."""
        assert select_widget(_node()) == WidgetSpec(Widget.TEXT)


class TestResolveUiHint:
    """Tests for hint tree lookup."""

    @pytest.mark.unit
    def test_nested_lookup(self):
        """Hints are found by walking the path segments."""
        hints = {"contact": {"notes": {"ui:widget": "textarea"}}}
        assert resolve_ui_hint(hints, "contact.notes").widget == "textarea"

    @pytest.mark.unit
    def test_bare_keys(self):
        """Unprefixed keys are accepted too."""
        hints = {"size": {"widget": "radio", "options": {"inline": True}}}
        hint = resolve_ui_hint(hints, "size")
        assert hint == UiHint(widget="radio", inline=True)

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "hints", [None, {}, {"contact": "oops"}, {"contact": {"notes": None}}]
    )
    def test_missing_gives_empty_hint(self, hints):
        """Absent or malformed entries give the empty hint."""
        assert resolve_ui_hint(hints, "contact.notes") == UiHint()


class TestSanitizeId:
    """Tests for HTML id sanitising."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("channels.email", "channels.email"),
            ("a b  c", "a-b-c"),
            ("--weird!!id--", "weird-id"),
            ("1st", "id-1st"),
            ("_private", "id-_private"),
            ("", "id"),
            ("!!!", "id"),
            (None, "id"),
            (42, "id-42"),
        ],
    )
    def test_sanitize(self, text, expected):
        """Invalid characters collapse to hyphens with a letter first."""
        assert sanitize_id(text) == expected
