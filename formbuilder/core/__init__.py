"""Core utilities shared across form-builder modules."""

from .log import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
