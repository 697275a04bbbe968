"""Unit tests for schema models."""

import pytest

from formbuilder.schema import FormDefinition, SchemaNode, SubmissionEnvelope, UiHint


class TestSchemaNode:
    """Tests for SchemaNode parsing and helpers."""

    @pytest.mark.unit
    def test_nested_parsing(self, contact_schema):
        """Nested properties become SchemaNode instances."""
        node = SchemaNode.model_validate(contact_schema)
        contact = node.properties["contact"]
        assert isinstance(contact, SchemaNode)
        assert contact.is_group
        assert contact.required == ["email"]
        assert contact.properties["email"].format == "email"

    @pytest.mark.unit
    def test_camel_case_keywords(self):
        """JSON Schema camelCase keywords map to snake_case attributes."""
        node = SchemaNode.model_validate(
            {
                "type": "string",
                "minLength": 2,
                "maxLength": 5,
                "pattern": "^a",
                "patternErrorMessage": "Start with a",
            }
        )
        assert node.min_length == 2
        assert node.max_length == 5
        assert node.pattern_error_message == "Start with a"

    @pytest.mark.unit
    def test_unknown_keywords_preserved(self):
        """Unsupported keywords are kept as extras."""
        node = SchemaNode.model_validate({"type": "array", "uniqueItems": True})
        assert node.model_extra == {"uniqueItems": True}

    @pytest.mark.unit
    def test_required_defaults_empty(self):
        """Required list defaults to empty."""
        assert SchemaNode(type="object").required == []

    @pytest.mark.unit
    def test_empty_object_is_group(self):
        """An object with an empty properties map still counts as a group."""
        assert SchemaNode.model_validate({"type": "object", "properties": {}}).is_group
        assert not SchemaNode(type="object").is_group

    @pytest.mark.unit
    def test_informational_enum(self):
        """Only single-member scalar enums are informational."""
        assert SchemaNode(type="string", enum=["Yes"]).is_informational
        assert not SchemaNode(type="string", enum=["Yes", "No"]).is_informational
        assert not SchemaNode(type="string").is_informational

    @pytest.mark.unit
    def test_item_enum(self):
        """Array-of-enum values are exposed through item_enum."""
        node = SchemaNode.model_validate(
            {"type": "array", "items": {"type": "string", "enum": ["a", "b"]}}
        )
        assert node.item_enum == ["a", "b"]
        assert SchemaNode(type="string", enum=["a"]).item_enum is None

    @pytest.mark.unit
    def test_label_fallback(self):
        """Label falls back to the property name."""
        assert SchemaNode(type="string").label("city") == "city"
        assert SchemaNode(type="string", title="City").label("city") == "City"


class TestUiHint:
    """Tests for UI hint parsing."""

    @pytest.mark.unit
    def test_prefixed_keys(self):
        """ui:widget and ui:options are read."""
        hint = UiHint.from_mapping({"ui:widget": "radio", "ui:options": {"inline": True}})
        assert hint.widget == "radio"
        assert hint.inline is True

    @pytest.mark.unit
    def test_bare_keys(self):
        """widget and options are accepted as synonyms."""
        hint = UiHint.from_mapping({"widget": "textarea"})
        assert hint.widget == "textarea"
        assert hint.inline is False

    @pytest.mark.unit
    def test_non_mapping_entry(self):
        """Missing or malformed entries give the empty hint."""
        assert UiHint.from_mapping(None) == UiHint()
        assert UiHint.from_mapping("radio") == UiHint()


class TestFormDefinition:
    """Tests for schema-source payload parsing."""

    @pytest.mark.unit
    def test_wrapped_payload(self, contact_schema):
        """version, schema and metadata are split out."""
        definition = FormDefinition.from_payload(
            {"version": 3, "schema": contact_schema, "metadata": {"a": {}}}
        )
        assert definition.version == 3
        assert definition.form_schema.title == "Contact"
        assert definition.metadata == {"a": {}}

    @pytest.mark.unit
    def test_bare_schema_payload(self, contact_schema):
        """A payload without a schema key is the schema itself."""
        definition = FormDefinition.from_payload(contact_schema)
        assert definition.version is None
        assert "contact" in definition.form_schema.properties


class TestSubmissionEnvelope:
    """Tests for the submission body."""

    @pytest.mark.unit
    def test_wire_names(self):
        """Envelope serialises with camelCase keys."""
        envelope = SubmissionEnvelope(
            username="jdoe",
            form_fname="intake",
            form_version=2,
            timestamp=1700000000000,
            answers={"name": "Jo"},
        )
        assert envelope.model_dump(by_alias=True) == {
            "username": "jdoe",
            "formFname": "intake",
            "formVersion": 2,
            "timestamp": 1700000000000,
            "answers": {"name": "Jo"},
        }

    @pytest.mark.unit
    def test_timestamp_default(self):
        """Timestamp defaults to the current time in milliseconds."""
        envelope = SubmissionEnvelope(username="u", form_fname="f")
        assert envelope.timestamp > 1_600_000_000_000
