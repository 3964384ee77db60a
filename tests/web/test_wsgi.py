import logging

import pytest

from web.wsgi import _log_level, app


@pytest.mark.parametrize(
    "value, expected",
    [("INFO", logging.INFO), ("debug", logging.DEBUG), ("Warning", logging.WARNING), (logging.ERROR, logging.ERROR)],
)
def test_log_level_names(value, expected):
    assert _log_level(value) == expected


@pytest.mark.parametrize("value", ["BOGUS", "", None, True])
def test_unknown_log_level_falls_back_to_info(value):
    assert _log_level(value) == logging.INFO


def test_module_exposes_app():
    assert app.strip_session is not None
