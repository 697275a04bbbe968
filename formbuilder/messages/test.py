"""Tests for custom message lookup."""

import pytest

from formbuilder.messages import get_custom_error_message
from formbuilder.schema import SchemaNode


@pytest.fixture
def schema() -> SchemaNode:
    return SchemaNode.model_validate(
        {
            "type": "object",
            "properties": {
                "contact": {
                    "type": "object",
                    "properties": {
                        "email": {
                            "type": "string",
                            "format": "email",
                            "messages": {"required": "Email please"},
                        },
                        "phone": {"type": "string"},
                    },
                },
            },
        }
    )


class TestGetCustomErrorMessage:
    """Tests for get_custom_error_message."""

    @pytest.mark.unit
    def test_found(self, schema):
        """A declared message is returned."""
        assert (
            get_custom_error_message(schema, "contact.email", "required")
            == "Email please"
        )

    @pytest.mark.unit
    def test_rule_missing(self, schema):
        """An undeclared rule gives None."""
        assert get_custom_error_message(schema, "contact.email", "format") is None

    @pytest.mark.unit
    def test_no_messages_map(self, schema):
        """A node without messages gives None."""
        assert get_custom_error_message(schema, "contact.phone", "required") is None

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "path", ["contact.fax", "contact.email.local", "nope.email", "", None]
    )
    def test_missing_path(self, schema, path):
        """Broken paths give None instead of raising."""
        assert get_custom_error_message(schema, path, "required") is None

    @pytest.mark.unit
    def test_no_schema(self):
        """A missing schema gives None."""
        assert get_custom_error_message(None, "a", "required") is None
