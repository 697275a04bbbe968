"""Answer validation against form schemas."""

from formbuilder.validation.lib import (
    DEFAULT_MAX_DEPTH,
    FieldError,
    collect_field_errors,
    is_valid,
    validate_answers,
)

__all__ = [
    "FieldError",
    "validate_answers",
    "collect_field_errors",
    "is_valid",
    "DEFAULT_MAX_DEPTH",
]
