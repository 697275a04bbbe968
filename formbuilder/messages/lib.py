"""Per-field custom error messages declared in the schema.

A leaf node may carry a ``messages`` map keyed by rule name, e.g.::

    {"type": "string", "format": "email",
     "messages": {"required": "We need your email", "format": "Check the address"}}
"""

from typing import Any

from formbuilder.paths import split_path
from formbuilder.schema import SchemaNode


def get_custom_error_message(
    schema: SchemaNode | None, field_path: Any, rule: str
) -> str | None:
    """Look up the custom message for ``rule`` on the node at ``field_path``.

    Never raises: any missing segment, a node without ``properties``, an
    absent ``messages`` map or an absent rule key gives None.

    Args:
        schema: Root schema node.
        field_path: Dotted path of the field.
        rule: Rule name (``required``, ``format``, ``pattern``, ...).

    Returns:
        str | None: The message, or None to use the default.
    """
    parts = split_path(field_path)
    if schema is None or not parts:
        return None

    node: SchemaNode | None = schema
    for part in parts:
        if node is None or not node.properties:
            return None
        node = node.properties.get(part)

    if node is None or not node.messages:
        return None
    message = node.messages.get(rule)
    return message if isinstance(message, str) else None


__all__ = ["get_custom_error_message"]
