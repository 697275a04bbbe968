"""Core logging implementation for form-builder."""

import logging
import sys
from typing import Optional

__all__ = ["get_logger", "setup_logging"]

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: int = logging.INFO, stream=sys.stderr) -> None:
    """Configure root logging for the CLI and embedding hosts.

    Args:
        level: Logging level.
        stream: Output stream.
    """
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=stream)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger under the ``formbuilder`` namespace.

    Args:
        name: Dotted area name, e.g. ``"session"`` or ``"cli"``.

    Returns:
        Logger instance.
    """
    if not name:
        return logging.getLogger("formbuilder")
    if name.startswith("formbuilder"):
        return logging.getLogger(name)
    return logging.getLogger(f"formbuilder.{name}")
