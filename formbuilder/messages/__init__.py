"""Custom validation messages."""

from formbuilder.messages.lib import get_custom_error_message

__all__ = ["get_custom_error_message"]
