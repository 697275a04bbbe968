"""Core models for form schemas, UI hints and submissions.

A form is described by a JSON-Schema-like tree of ``SchemaNode`` objects,
an optional UI hint tree mirroring its shape, and the answers collected
from the user. Only the practical subset of JSON Schema used by the form
builder microservice is modelled; unknown keywords (``$id``, ``$schema``,
``uniqueItems``, ...) are preserved as extras and otherwise ignored.
"""

import time
from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

Scalar = str | int | float | bool | None


class SchemaType(str, Enum):
    """Supported values of the ``type`` keyword."""

    OBJECT = "object"
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"


class SchemaNode(BaseModel):
    """Recursive node of a form schema.

    ``type: "object"`` nodes own child nodes keyed by name in ``properties``.
    The ``required`` list is scoped to the node that declares it: a child is
    required when its *parent's* list names it.

    Attributes:
        type: JSON type name (object, string, number, integer, boolean, array).
        title: Human-readable label.
        description: Help text shown with the field or group.
        properties: Child nodes for object types.
        required: Names of required children, in declaration order.
        enum: Allowed scalar values.
        items: Item schema for arrays.
        format: String format (``email``, ``date``).
        pattern: Regular expression the value must contain a match for.
        pattern_error_message: Message used when ``pattern`` fails.
        minimum: Inclusive numeric lower bound.
        maximum: Inclusive numeric upper bound.
        min_length: Minimum string length.
        max_length: Maximum string length.
        messages: Per-rule override messages, keyed by rule name.

    Example:
        >>> node = SchemaNode.model_validate(
        ...     {"type": "object", "required": ["name"],
        ...      "properties": {"name": {"type": "string"}}}
        ... )
        >>> node.properties["name"].type
        'string'
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str | None = Field(None, description="JSON type name")
    title: str | None = Field(None, description="Human-readable label")
    description: str | None = Field(None, description="Help text")
    properties: dict[str, "SchemaNode"] | None = Field(
        None, description="Child nodes keyed by property name"
    )
    required: list[str] = Field(
        default_factory=list, description="Required child names"
    )
    enum: list[Scalar] | None = Field(None, description="Allowed values")
    items: "SchemaNode | None" = Field(None, description="Array item schema")
    format: str | None = Field(None, description="String format")
    pattern: str | None = Field(None, description="Regular expression")
    pattern_error_message: str | None = Field(None, alias="patternErrorMessage")
    minimum: int | float | None = None
    maximum: int | float | None = None
    min_length: int | None = Field(None, alias="minLength")
    max_length: int | None = Field(None, alias="maxLength")
    messages: dict[str, str] | None = Field(
        None, description="Custom messages keyed by rule name"
    )

    @property
    def is_group(self) -> bool:
        """True for object nodes that carry their own properties."""
        return self.type == SchemaType.OBJECT.value and self.properties is not None

    @property
    def is_informational(self) -> bool:
        """True for single-choice enums, which state a fact rather than ask."""
        return (
            self.type != SchemaType.ARRAY.value
            and self.enum is not None
            and len(self.enum) == 1
        )

    @property
    def item_enum(self) -> list[Scalar] | None:
        """Allowed values of an array-of-enum node, if any."""
        if self.type == SchemaType.ARRAY.value and self.items is not None:
            return self.items.enum
        return None

    def label(self, fallback: str) -> str:
        """Return the title, or ``fallback`` when the node has none."""
        return self.title or fallback


SchemaNode.model_rebuild()


class UiHint(BaseModel):
    """Display hint for a single field.

    Parsed from one entry of the UI hint tree. Both the prefixed keys used by
    the microservice (``ui:widget``, ``ui:options``) and the bare keys
    (``widget``, ``options``) are accepted.

    Attributes:
        widget: Requested widget (``textarea``, ``radio``, ``checkboxes``).
        inline: Lay grouped choices out on one line.
    """

    widget: str | None = None
    inline: bool = False

    @classmethod
    def from_mapping(cls, entry: Any) -> "UiHint":
        """Build a hint from a raw UI hint tree entry.

        Non-mapping entries (including None) produce the empty hint.
        """
        if not isinstance(entry, Mapping):
            return cls()
        widget = entry.get("ui:widget", entry.get("widget"))
        options = entry.get("ui:options", entry.get("options"))
        inline = bool(options.get("inline")) if isinstance(options, Mapping) else False
        return cls(widget=widget if isinstance(widget, str) else None, inline=inline)


class FormDefinition(BaseModel):
    """A form as served by the schema source.

    Attributes:
        version: Form version, echoed back in submissions.
        form_schema: Root schema node.
        metadata: UI hint tree mirroring the schema's shape.
    """

    model_config = ConfigDict(populate_by_name=True)

    version: str | int | None = None
    form_schema: SchemaNode = Field(..., alias="schema")
    metadata: dict[str, Any] | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "FormDefinition":
        """Parse a schema-source response body.

        A payload without a ``schema`` key is itself the schema.
        """
        schema = payload.get("schema") or payload
        return cls(
            version=payload.get("version"),
            form_schema=SchemaNode.model_validate(schema),
            metadata=payload.get("metadata"),
        )


def _now_millis() -> int:
    return int(time.time() * 1000)


class SubmissionEnvelope(BaseModel):
    """JSON body posted to the submission sink.

    Serialise with ``model_dump(by_alias=True)`` to get the wire names.
    """

    model_config = ConfigDict(populate_by_name=True)

    username: str
    form_fname: str = Field(..., alias="formFname")
    form_version: str | int | None = Field(None, alias="formVersion")
    timestamp: int = Field(default_factory=_now_millis)
    answers: dict[str, Any] = Field(default_factory=dict)


__all__ = [
    "FormDefinition",
    "Scalar",
    "SchemaNode",
    "SchemaType",
    "SubmissionEnvelope",
    "UiHint",
]
