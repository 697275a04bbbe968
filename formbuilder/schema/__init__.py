"""Form schema, UI hint and submission models."""

from formbuilder.schema.lib import (
    FormDefinition,
    Scalar,
    SchemaNode,
    SchemaType,
    SubmissionEnvelope,
    UiHint,
)

__all__ = [
    "SchemaNode",
    "SchemaType",
    "Scalar",
    "UiHint",
    "FormDefinition",
    "SubmissionEnvelope",
]
