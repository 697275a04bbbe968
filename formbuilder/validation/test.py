"""Unit tests for validation module."""

import logging

import pytest

from formbuilder.schema import SchemaNode
from formbuilder.validation import (
    FieldError,
    collect_field_errors,
    is_valid,
    validate_answers,
)


def _chain(levels: int) -> dict:
    """Schema nested ``levels`` groups deep, each level requiring ``v``."""
    node: dict = {"type": "object", "required": ["v"], "properties": {"v": {"type": "string"}}}
    for _ in range(levels):
        node = {
            "type": "object",
            "required": ["v"],
            "properties": {"v": {"type": "string"}, "next": node},
        }
    return node


class TestRequired:
    """Tests for node-local required lists."""

    @pytest.mark.unit
    def test_valid_answers(self, contact_schema, valid_contact_answers):
        """Complete answers pass."""
        assert validate_answers(contact_schema, valid_contact_answers) == {}
        assert is_valid(contact_schema, valid_contact_answers)

    @pytest.mark.unit
    def test_empty_answers(self, contact_schema):
        """Empty answers flag every required field at every level."""
        errors = validate_answers(contact_schema, {})
        assert errors == {
            "name": "This field is required",
            "contact.email": "This field is required",
        }

    @pytest.mark.unit
    def test_none_answers(self, contact_schema):
        """Missing answers are treated as empty."""
        assert "name" in validate_answers(contact_schema, None)

    @pytest.mark.unit
    def test_empty_string_is_missing(self, contact_schema):
        """An empty string does not satisfy required."""
        errors = validate_answers(contact_schema, {"name": "", "contact": {"email": "a@b.co"}})
        assert errors == {"name": "This field is required"}

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [False, 0])
    def test_falsy_values_satisfy_required(self, value):
        """False and 0 are answers, not absences."""
        schema = {"type": "object", "required": ["x"], "properties": {"x": {}}}
        assert validate_answers(schema, {"x": value}) == {}

    @pytest.mark.unit
    def test_required_is_scoped_to_parent(self):
        """A name required in one group does not leak into a sibling group."""
        schema = {
            "type": "object",
            "properties": {
                "home": {
                    "type": "object",
                    "required": ["email"],
                    "properties": {"email": {"type": "string"}},
                },
                "work": {
                    "type": "object",
                    "properties": {"email": {"type": "string"}},
                },
            },
        }
        assert validate_answers(schema, {}) == {"home.email": "This field is required"}

    @pytest.mark.unit
    def test_custom_required_message(self):
        """A custom required message replaces the default."""
        schema = {
            "type": "object",
            "required": ["email"],
            "properties": {
                "email": {"type": "string", "messages": {"required": "Email please"}}
            },
        }
        assert validate_answers(schema, {}) == {"email": "Email please"}

    @pytest.mark.unit
    def test_informational_fields_skipped(self):
        """Single-value enums are never validated, even when required."""
        schema = {
            "type": "object",
            "required": ["campus"],
            "properties": {"campus": {"type": "string", "enum": ["Fresno"]}},
        }
        assert validate_answers(schema, {}) == {}

    @pytest.mark.unit
    def test_accepts_schema_node(self, contact_schema):
        """Parsed schema nodes are accepted as well as raw mappings."""
        node = SchemaNode.model_validate(contact_schema)
        assert validate_answers(node, {}) == validate_answers(contact_schema, {})


class TestLeafRules:
    """Tests for format, pattern, number and length rules."""

    @pytest.mark.unit
    @pytest.mark.parametrize("email", ["jo", "jo@", "jo@example", "a b@c.de", "@x.io"])
    def test_invalid_email(self, contact_schema, email):
        """Malformed emails fail the format rule."""
        errors = validate_answers(
            contact_schema, {"name": "Jo", "contact": {"email": email}}
        )
        assert errors == {"contact.email": "Invalid email address"}

    @pytest.mark.unit
    def test_pattern_error_message(self, contact_schema):
        """patternErrorMessage is used when no custom pattern message exists."""
        errors = validate_answers(
            contact_schema,
            {"name": "Jo", "contact": {"email": "jo@x.io", "phone": "5551234"}},
        )
        assert errors == {"contact.phone": "Use 555-555-5555"}

    @pytest.mark.unit
    def test_pattern_message_precedence(self):
        """Custom pattern message beats patternErrorMessage beats the default."""
        base = {"type": "string", "pattern": "^[0-9]+$"}
        cases = [
            ({**base, "patternErrorMessage": "P", "messages": {"pattern": "M"}}, "M"),
            ({**base, "patternErrorMessage": "P"}, "P"),
            (base, "Invalid format"),
        ]
        for leaf, expected in cases:
            schema = {"type": "object", "properties": {"code": leaf}}
            assert validate_answers(schema, {"code": "abc"}) == {"code": expected}

    @pytest.mark.unit
    def test_pattern_searches(self):
        """An unanchored pattern matches anywhere in the value."""
        schema = {"type": "object", "properties": {"code": {"pattern": "[0-9]"}}}
        assert validate_answers(schema, {"code": "abc1"}) == {}

    @pytest.mark.unit
    def test_invalid_pattern_ignored(self, caplog):
        """A broken regular expression is logged and skipped."""
        schema = {"type": "object", "properties": {"code": {"pattern": "(["}}}
        with caplog.at_level(logging.WARNING):
            assert validate_answers(schema, {"code": "abc"}) == {}
        assert "invalid pattern" in caplog.text

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "age,expected",
        [
            ("abc", {"age": "Must be a number"}),
            (True, {"age": "Must be a number"}),
            (-1, {"age": "Must be at least 0"}),
            ("131", {"age": "Must be at most 130"}),
            ("42", {}),
            (0, {}),
        ],
    )
    def test_number_rules(self, contact_schema, valid_contact_answers, age, expected):
        """Numbers are coerced then range-checked."""
        answers = {**valid_contact_answers, "age": age}
        assert validate_answers(contact_schema, answers) == expected

    @pytest.mark.unit
    def test_length_rules(self):
        """String lengths are checked against minLength and maxLength."""
        schema = {
            "type": "object",
            "properties": {"code": {"type": "string", "minLength": 2, "maxLength": 3}},
        }
        assert validate_answers(schema, {"code": "a"}) == {
            "code": "Must be at least 2 characters"
        }
        assert validate_answers(schema, {"code": "abcd"}) == {
            "code": "Must be at most 3 characters"
        }
        assert validate_answers(schema, {"code": "abc"}) == {}

    @pytest.mark.unit
    def test_first_failure_wins(self):
        """Only the first failing rule is reported for a field."""
        schema = {
            "type": "object",
            "properties": {
                "email": {"type": "string", "format": "email", "minLength": 50}
            },
        }
        errors = collect_field_errors(schema, {"email": "nope"})
        assert errors == [
            FieldError(path="email", message="Invalid email address", rule="format")
        ]

    @pytest.mark.unit
    def test_custom_rule_messages(self):
        """Every rule honours a custom message."""
        schema = {
            "type": "object",
            "properties": {
                "n": {"type": "number", "minimum": 5, "messages": {"minimum": "Too small"}}
            },
        }
        assert validate_answers(schema, {"n": 1}) == {"n": "Too small"}

    @pytest.mark.unit
    def test_leaf_rules_skip_groups(self):
        """Object nodes never get leaf rules applied."""
        schema = {
            "type": "object",
            "properties": {
                "g": {"type": "object", "minLength": 10, "properties": {}},
            },
        }
        assert validate_answers(schema, {"g": {"x": 1}}) == {}


class TestDepthCeiling:
    """Tests for the nesting ceiling."""

    @pytest.mark.unit
    def test_deep_branches_skipped(self, caplog):
        """Levels beyond max_depth are skipped with a warning."""
        with caplog.at_level(logging.WARNING):
            errors = validate_answers(_chain(4), {}, max_depth=2)
        assert set(errors) == {"v", "next.v", "next.next.v"}
        assert "Maximum nesting depth" in caplog.text

    @pytest.mark.unit
    def test_default_ceiling(self):
        """The default ceiling covers ten levels of nesting."""
        errors = validate_answers(_chain(12), {})
        assert len(errors) == 11
