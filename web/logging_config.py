"""Logging configuration for the photostrip app."""

import logging
import sys
from typing import Optional

# Top-level packages whose loggers we own
PROJECT_LOGGERS = ("imaging", "controller", "web")


def setup_logging(
    level: int = logging.INFO,
    format_string: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
) -> logging.Handler:
    """
    Configure logging for the imaging, controller and web packages.

    Args:
        level: Logging level (e.g., logging.DEBUG, logging.INFO)
        format_string: Custom format string. If None, uses default format.
        handler: Custom handler. If None, uses StreamHandler to stderr.

    Returns:
        The handler attached to every project logger.
    """
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    handler.setFormatter(logging.Formatter(format_string))

    for name in PROJECT_LOGGERS:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        # Remove existing handlers to avoid duplicates
        logger.handlers.clear()
        logger.addHandler(handler)
        logger.propagate = False

    return handler
