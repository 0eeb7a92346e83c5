"""Tests for logging helpers."""

import logging

from common.logging_utils import Timer, configure_logging, extra_context, safe_url


class TestConfigureLogging:
    """Console handler installation."""

    def test_level_from_env_and_single_handler(self, monkeypatch):
        monkeypatch.setenv("BOB_LOG_LEVEL", "debug")
        configure_logging()
        configure_logging()
        root = logging.getLogger()
        consoles = [h for h in root.handlers if getattr(h, "_bob_console", False)]
        assert len(consoles) == 1
        assert root.level == logging.DEBUG

    def test_invalid_level_falls_back_to_info(self, monkeypatch):
        monkeypatch.setenv("BOB_LOG_LEVEL", "chatty")
        configure_logging()
        assert logging.getLogger().level == logging.INFO


class TestHelpers:
    """Structured logging helpers."""

    def test_extra_context_drops_none(self):
        assert extra_context(a=1, b=None) == {"a": 1}

    def test_safe_url_strips_credentials_and_query(self):
        assert safe_url("https://user:pw@api.github.com/repos?token=x") == "https://api.github.com/repos"

    def test_safe_url_empty(self):
        assert safe_url(None) == ""

    def test_timer(self):
        with Timer() as t:
            pass
        assert t.duration_ms() >= 0
