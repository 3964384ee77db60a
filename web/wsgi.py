"""
WSGI entrypoint for production (gunicorn/systemd).

This module should have no side effects beyond creating the Flask app and configuring logging.
"""
import logging

from web.app import create_app
from web.logging_config import setup_logging


def _log_level(name) -> int:
    """Level number for a LOG_LEVEL setting; unknown names fall back to INFO."""
    if isinstance(name, int) and not isinstance(name, bool):
        return name
    return logging.getLevelNamesMapping().get(str(name).upper(), logging.INFO)


app = create_app()
setup_logging(level=_log_level(app.config["LOG_LEVEL"]))
