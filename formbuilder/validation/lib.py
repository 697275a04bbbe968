"""Answer validation against a form schema.

This module walks the schema tree alongside the answers and records at most
one message per field path, checking the node-local ``required`` lists and
the leaf rules (email format, pattern, numeric range, string length).
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Mapping

from formbuilder.messages import get_custom_error_message
from formbuilder.paths import get_nested_value, join_path
from formbuilder.schema import SchemaNode, SchemaType

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 10

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

REQUIRED_MESSAGE = "This field is required"
EMAIL_MESSAGE = "Invalid email address"
PATTERN_MESSAGE = "Invalid format"
NUMBER_MESSAGE = "Must be a number"


@dataclass
class FieldError:
    """A failed rule on one field.

    Attributes:
        path: Dotted path of the field.
        message: Human-readable error description.
        rule: Name of the failed rule (``required``, ``format``, ``pattern``,
            ``type``, ``minimum``, ``maximum``, ``minLength``, ``maxLength``).
    """

    path: str
    message: str
    rule: str


def collect_field_errors(
    schema: SchemaNode | Mapping[str, Any],
    answers: Mapping[str, Any] | None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[FieldError]:
    """Validate answers and return every failed rule, one per field.

    Args:
        schema: Root schema node (or its raw mapping).
        answers: Nested answers mapping.
        max_depth: Nesting ceiling; deeper branches are skipped with a warning.

    Returns:
        list[FieldError]: Errors in schema order (empty if valid).
    """
    root = _as_node(schema)
    errors: dict[str, FieldError] = {}
    _validate_node(
        root,
        root.properties or {},
        root.required,
        answers or {},
        base_path="",
        depth=0,
        max_depth=max_depth,
        errors=errors,
    )
    return list(errors.values())


def validate_answers(
    schema: SchemaNode | Mapping[str, Any],
    answers: Mapping[str, Any] | None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> dict[str, str]:
    """Validate answers and return the field error map.

    Args:
        schema: Root schema node (or its raw mapping).
        answers: Nested answers mapping.
        max_depth: Nesting ceiling.

    Returns:
        dict[str, str]: Message per failing dotted path (empty if valid).

    Example:
        >>> errors = validate_answers(schema, {"contact": {}})
        >>> errors["contact.email"]
        'This field is required'
    """
    return {
        error.path: error.message
        for error in collect_field_errors(schema, answers, max_depth=max_depth)
    }


def is_valid(
    schema: SchemaNode | Mapping[str, Any],
    answers: Mapping[str, Any] | None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> bool:
    """Check whether answers satisfy the schema.

    Convenience function that returns True if no validation errors exist.
    """
    return not collect_field_errors(schema, answers, max_depth=max_depth)


def _as_node(schema: SchemaNode | Mapping[str, Any]) -> SchemaNode:
    if isinstance(schema, SchemaNode):
        return schema
    return SchemaNode.model_validate(schema)


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def _validate_node(
    root: SchemaNode,
    properties: Mapping[str, SchemaNode],
    required: list[str],
    answers: Mapping[str, Any],
    base_path: str,
    depth: int,
    max_depth: int,
    errors: dict[str, FieldError],
) -> None:
    """Validate one object level and recurse into its groups.

    Args:
        root: Root schema, used for custom message lookup.
        properties: Child nodes of this level.
        required: Names required at this level only.
        answers: Root answers mapping.
        base_path: Dotted path of this level ("" for the root).
        depth: Current nesting depth.
        max_depth: Nesting ceiling.
        errors: Accumulator keyed by path.
    """
    if depth > max_depth:
        logger.warning(
            "Maximum nesting depth %d exceeded at '%s'; skipping branch",
            max_depth,
            base_path,
        )
        return

    for name in required:
        child = properties.get(name)
        if child is not None and child.is_informational:
            continue
        path = join_path(base_path, name)
        if _is_empty(get_nested_value(answers, path)):
            errors[path] = FieldError(
                path=path,
                message=get_custom_error_message(root, path, "required")
                or REQUIRED_MESSAGE,
                rule="required",
            )

    for name, child in properties.items():
        path = join_path(base_path, name)

        if child.is_group:
            _validate_node(
                root,
                child.properties or {},
                child.required,
                answers,
                base_path=path,
                depth=depth + 1,
                max_depth=max_depth,
                errors=errors,
            )
            continue

        if child.is_informational or path in errors:
            continue

        value = get_nested_value(answers, path)
        if _is_empty(value):
            continue

        error = _check_leaf(root, child, path, value)
        if error is not None:
            errors[path] = error


def _check_leaf(
    root: SchemaNode, node: SchemaNode, path: str, value: Any
) -> FieldError | None:
    """Apply leaf rules in order, stopping at the first failure."""

    def fail(rule: str, default: str) -> FieldError:
        message = get_custom_error_message(root, path, rule) or default
        return FieldError(path=path, message=message, rule=rule)

    if node.format == "email" and not EMAIL_RE.match(str(value)):
        return fail("format", EMAIL_MESSAGE)

    if node.pattern and not isinstance(value, (list, dict)):
        try:
            matched = re.search(node.pattern, str(value)) is not None
        except re.error as e:
            logger.warning("Ignoring invalid pattern on '%s': %s", path, e)
            matched = True
        if not matched:
            return fail("pattern", node.pattern_error_message or PATTERN_MESSAGE)

    if node.type in (SchemaType.NUMBER.value, SchemaType.INTEGER.value):
        number = _to_number(value)
        if number is None:
            return fail("type", NUMBER_MESSAGE)
        if node.minimum is not None and number < node.minimum:
            return fail("minimum", f"Must be at least {_format_bound(node.minimum)}")
        if node.maximum is not None and number > node.maximum:
            return fail("maximum", f"Must be at most {_format_bound(node.maximum)}")

    if node.type == SchemaType.STRING.value and isinstance(value, str):
        if node.min_length is not None and len(value) < node.min_length:
            return fail(
                "minLength", f"Must be at least {node.min_length} characters"
            )
        if node.max_length is not None and len(value) > node.max_length:
            return fail("maxLength", f"Must be at most {node.max_length} characters")

    return None


def _to_number(value: Any) -> float | None:
    """Coerce form input to a number, or None when it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    # NaN never compares, so treat it as non-numeric
    if number != number:
        return None
    return number


def _format_bound(bound: int | float) -> str:
    if isinstance(bound, float) and bound.is_integer():
        return str(int(bound))
    return str(bound)


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "FieldError",
    "collect_field_errors",
    "is_valid",
    "validate_answers",
]
