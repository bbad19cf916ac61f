"""setup_logging: levels for app, uvicorn and multipart loggers."""
import logging

from app.logging import APP_LOGGERS, setup_logging


def test_levels_follow_argument_and_access_log_switch():
    try:
        setup_logging("debug", access_log=False)
        for name in APP_LOGGERS:
            assert logging.getLogger(name).level == logging.DEBUG
        assert logging.getLogger("uvicorn.error").level == logging.DEBUG
        assert logging.getLogger("uvicorn.access").level == logging.WARNING
        # per-part DEBUG lines stay hidden even at DEBUG
        assert logging.getLogger("python_multipart").level == logging.INFO
    finally:
        setup_logging()


def test_defaults_come_from_settings():
    setup_logging()
    assert logging.getLogger("mockapi").level == logging.INFO
    assert logging.getLogger("uvicorn.access").level == logging.INFO
    formats = [h.formatter._fmt for h in logging.getLogger().handlers if h.formatter]
    assert "%(asctime)s [%(levelname)s] %(name)s: %(message)s" in formats


def test_unknown_level_name_falls_back_to_info():
    try:
        setup_logging("chatty")
        assert logging.getLogger("app.core.storage").level == logging.INFO
    finally:
        setup_logging()
