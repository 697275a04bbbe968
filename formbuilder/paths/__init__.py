"""Dotted-path addressing for answers and schemas."""

from formbuilder.paths.lib import (
    get_nested_value,
    get_schema_at_path,
    join_path,
    set_nested_value,
    split_path,
)

__all__ = [
    "get_nested_value",
    "set_nested_value",
    "get_schema_at_path",
    "split_path",
    "join_path",
]
