"""Tests for terminal-safe output and logging setup."""
import logging
from types import SimpleNamespace

import pytest
from rich.logging import RichHandler

from gdblint.utils.logger import (
    configure_logging,
    is_utf8_capable,
    sanitize_for_terminal,
    stream_encoding,
)


@pytest.fixture(autouse=True)
def restore_level():
    yield
    configure_logging("WARNING")


UTF8 = SimpleNamespace(encoding="UTF-8")
CP1252 = SimpleNamespace(encoding="cp1252")


class TestSanitize:
    def test_encoding_names_are_normalized(self):
        assert stream_encoding(SimpleNamespace(encoding="UTF_8")) == "utf-8"
        assert is_utf8_capable(UTF8)
        assert not is_utf8_capable(CP1252)

    def test_utf8_stream_keeps_icons(self):
        assert sanitize_for_terminal("✓ cache removed", UTF8) == "✓ cache removed"

    def test_legacy_stream_gets_ascii(self):
        assert sanitize_for_terminal("✓ cache removed", CP1252) == "[OK] cache removed"
        assert sanitize_for_terminal("⚠ Warning: a → b", CP1252) == "[WARN] Warning: a -> b"

    def test_plain_text_untouched(self):
        assert sanitize_for_terminal("No cache at /tmp", CP1252) == "No cache at /tmp"


class TestConfigureLogging:
    def test_single_handler_and_level(self):
        root = configure_logging("debug")
        configure_logging("INFO")

        handlers = [h for h in root.handlers if isinstance(h, RichHandler)]
        assert len(handlers) == 1, "Repeated setup must not stack handlers"
        assert root.level == logging.INFO

    def test_unknown_level_falls_back_to_warning(self):
        assert configure_logging("chatty").level == logging.WARNING
