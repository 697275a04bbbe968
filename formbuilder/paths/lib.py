"""Dotted-path addressing over answers and schema trees.

Answers are nested mappings edited by scattered input handlers. Every write
goes through ``set_nested_value``, which returns a new root: only the spine
from the root to the written leaf is copied and every other branch is shared
with the previous root. A render pass holding the old root never observes a
partial write.
"""

from typing import Any, Mapping

from formbuilder.schema import SchemaNode


def split_path(path: Any) -> list[str]:
    """Split a dotted path into its non-empty segments.

    ``"a..b"``, ``".a.b"`` and ``"a.b."`` all give ``["a", "b"]``.
    Anything other than a string gives an empty list.

    Args:
        path: Dotted path.

    Returns:
        list[str]: Path segments.
    """
    if not isinstance(path, str):
        return []
    return [part for part in path.split(".") if part]


def join_path(base_path: str, name: str) -> str:
    """Append a property name to a dotted base path."""
    return f"{base_path}.{name}" if base_path else name


def get_nested_value(root: Mapping[str, Any] | None, path: Any) -> Any:
    """Read the value at a dotted path.

    Args:
        root: Nested answers mapping.
        path: Dotted path, e.g. ``"contact_information.email"``.

    Returns:
        The stored value, or None when the path is invalid or absent.

    Example:
        >>> get_nested_value({"a": {"b": 1}}, "a.b")
        1
    """
    parts = split_path(path)
    if not parts:
        return None

    value: Any = root
    for part in parts:
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def set_nested_value(root: Mapping[str, Any] | None, path: Any, value: Any) -> Any:
    """Return a copy of ``root`` with ``value`` written at ``path``.

    Missing intermediates are created as dicts. An intermediate that exists
    but is neither a mapping nor a list is replaced by a fresh dict. Lists on
    the spine are shallow-copied and not traversed further: a path that runs
    through a list only clones that list.

    An invalid or empty path returns ``root`` unchanged (same object).

    Args:
        root: Nested answers mapping (not modified).
        path: Dotted path.
        value: Leaf value to store.

    Returns:
        New root sharing all untouched branches with ``root``.

    Example:
        >>> old = {"a": {"b": 1}, "c": {"d": 2}}
        >>> new = set_nested_value(old, "a.b", 5)
        >>> new["c"] is old["c"]
        True
    """
    parts = split_path(path)
    if not parts:
        return root

    new_root: dict[str, Any] = dict(root or {})
    current = new_root

    for part in parts[:-1]:
        existing = current.get(part)
        if isinstance(existing, list):
            # Lists are cloned but not addressable by name; stop here.
            current[part] = list(existing)
            return new_root
        if isinstance(existing, Mapping):
            current[part] = dict(existing)
        else:
            current[part] = {}
        current = current[part]

    current[parts[-1]] = value
    return new_root


def get_schema_at_path(schema: SchemaNode | None, path: Any) -> SchemaNode | None:
    """Resolve the schema node for a dotted path.

    Empty or missing paths return the root. Traversal descends through
    ``properties`` and yields None as soon as a segment is missing or the
    current node has no ``properties``.

    Args:
        schema: Root schema node.
        path: Dotted path.

    Returns:
        SchemaNode | None: The node at the path, or None.

    Example:
        >>> get_schema_at_path(root, "contact_information.email").format
        'email'
    """
    parts = split_path(path)
    node = schema
    for part in parts:
        if node is None or not node.properties:
            return None
        node = node.properties.get(part)
    return node


__all__ = [
    "get_nested_value",
    "get_schema_at_path",
    "join_path",
    "set_nested_value",
    "split_path",
]
