"""form-builder: schema-driven HTML forms with validation and submission."""

from formbuilder.paths import get_nested_value, get_schema_at_path, set_nested_value
from formbuilder.schema import FormDefinition, SchemaNode, UiHint
from formbuilder.session import FormBuilder, FormStatus
from formbuilder.validation import is_valid, validate_answers
from formbuilder.view import FormView, build_tree

__all__ = [
    # Schema
    "SchemaNode",
    "UiHint",
    "FormDefinition",
    # Paths
    "get_nested_value",
    "set_nested_value",
    "get_schema_at_path",
    # Validation
    "validate_answers",
    "is_valid",
    # View
    "build_tree",
    "FormView",
    # Session
    "FormBuilder",
    "FormStatus",
]
