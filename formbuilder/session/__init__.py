"""Form sessions: load, edit, validate and submit."""

from formbuilder.session.lib import (
    SUBMIT_ERROR_EVENT,
    SUBMIT_SUCCESS_EVENT,
    FormBuilder,
    FormStatus,
    Listener,
)

__all__ = [
    "FormBuilder",
    "FormStatus",
    "Listener",
    "SUBMIT_SUCCESS_EVENT",
    "SUBMIT_ERROR_EVENT",
]
