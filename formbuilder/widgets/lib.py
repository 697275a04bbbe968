"""Widget selection for leaf schema nodes.

Decides, for one schema node and its optional UI hint, which input
representation a field gets. The rules form a closed, ordered list with a
single text-input fallback, so every node maps to exactly one widget.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from formbuilder.paths import split_path
from formbuilder.schema import Scalar, SchemaNode, SchemaType, UiHint


class Widget(str, Enum):
    """Input representations a field can render as."""

    CHECKBOXES = "checkboxes"
    MULTISELECT = "multiselect"
    INFO = "info"
    RADIO = "radio"
    SELECT = "select"
    CHECKBOX = "checkbox"
    EMAIL = "email"
    DATE = "date"
    TEXTAREA = "textarea"
    TEXT = "text"
    NUMBER = "number"


# Widgets whose fieldset legend replaces the field label
GROUPED_WIDGETS = frozenset({Widget.RADIO, Widget.CHECKBOXES})


@dataclass(frozen=True)
class WidgetSpec:
    """Selected widget plus the details needed to render it.

    Attributes:
        widget: The chosen representation.
        options: Choice values for enum-backed widgets.
        inline: Lay grouped choices out on one line.
        step: ``step`` attribute for number inputs ("1" or "any").
        placeholder: Prepend a blank option (single selects only).
    """

    widget: Widget
    options: tuple[Scalar, ...] = field(default_factory=tuple)
    inline: bool = False
    step: str | None = None
    placeholder: bool = False

    @property
    def is_grouped(self) -> bool:
        """True when the widget renders as a fieldset of choices."""
        return self.widget in GROUPED_WIDGETS

    @property
    def is_control(self) -> bool:
        """True when the widget produces a focusable input."""
        return self.widget is not Widget.INFO


def select_widget(node: SchemaNode, hint: UiHint | None = None) -> WidgetSpec:
    """Choose the widget for a leaf schema node.

    Precedence:
        1. array of enum + ``checkboxes`` hint -> checkbox group
        2. array of enum -> multi-select list
        3. single-member enum -> informational label;
           enum + ``radio`` hint -> radio group
        4. enum -> select with blank placeholder
        5. boolean -> checkbox
        6. string -> email / date / textarea / text
        7. number or integer -> number input
        8. anything else -> text input

    Args:
        node: Leaf schema node (never an object group).
        hint: UI hint for the field.

    Returns:
        WidgetSpec: The selected widget.

    Example:
        >>> select_widget(SchemaNode(type="integer")).step
        '1'
    """
    hint = hint or UiHint()

    item_enum = node.item_enum
    if item_enum is not None:
        if hint.widget == Widget.CHECKBOXES.value:
            return WidgetSpec(Widget.CHECKBOXES, tuple(item_enum), inline=hint.inline)
        return WidgetSpec(Widget.MULTISELECT, tuple(item_enum))

    if node.enum is not None:
        if node.is_informational:
            return WidgetSpec(Widget.INFO, tuple(node.enum))
        if hint.widget == Widget.RADIO.value:
            return WidgetSpec(Widget.RADIO, tuple(node.enum), inline=hint.inline)
        return WidgetSpec(Widget.SELECT, tuple(node.enum), placeholder=True)

    if node.type == SchemaType.BOOLEAN.value:
        return WidgetSpec(Widget.CHECKBOX)

    if node.type == SchemaType.STRING.value:
        if node.format == "email":
            return WidgetSpec(Widget.EMAIL)
        if node.format == "date":
            return WidgetSpec(Widget.DATE)
        if hint.widget == Widget.TEXTAREA.value:
            return WidgetSpec(Widget.TEXTAREA)
        return WidgetSpec(Widget.TEXT)

    if node.type == SchemaType.INTEGER.value:
        return WidgetSpec(Widget.NUMBER, step="1")
    if node.type == SchemaType.NUMBER.value:
        return WidgetSpec(Widget.NUMBER, step="any")

    return WidgetSpec(Widget.TEXT)


def resolve_ui_hint(ui_hints: Mapping[str, Any] | None, path: str) -> UiHint:
    """Walk the UI hint tree by the segments of a dotted field path.

    Args:
        ui_hints: UI hint tree mirroring the schema's shape.
        path: Dotted field path.

    Returns:
        UiHint: The hint at that path, or the empty hint.
    """
    entry: Any = ui_hints
    for part in split_path(path):
        if not isinstance(entry, Mapping):
            return UiHint()
        entry = entry.get(part)
    return UiHint.from_mapping(entry)


_INVALID_ID_CHARS = re.compile(r"[^a-zA-Z0-9\-_.]")
_HYPHEN_RUNS = re.compile(r"-+")


def sanitize_id(text: Any) -> str:
    """Make a string usable as an HTML element id.

    Invalid characters become hyphens, hyphen runs collapse, leading and
    trailing hyphens are trimmed, and ids not starting with a letter get an
    ``id-`` prefix.

    Example:
        >>> sanitize_id("channels.taco truck-Fresno City")
        'channels.taco-truck-Fresno-City'
    """
    if not isinstance(text, str):
        text = "" if text is None else str(text)

    sanitized = _HYPHEN_RUNS.sub("-", _INVALID_ID_CHARS.sub("-", text)).strip("-")
    if not sanitized:
        sanitized = "id"
    if not sanitized[0].isascii() or not sanitized[0].isalpha():
        sanitized = f"id-{sanitized}"
    return sanitized


__all__ = [
    "GROUPED_WIDGETS",
    "Widget",
    "WidgetSpec",
    "resolve_ui_hint",
    "sanitize_id",
    "select_widget",
]
