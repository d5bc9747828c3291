"""Logging setup and terminal-safe text handling.

Internal tracing goes through stdlib logging with a rich handler on stderr.
Operator-facing text is sanitized for terminals that cannot print UTF-8.
"""
import sys
import locale
import logging
from typing import Optional, TextIO

from rich.console import Console
from rich.logging import RichHandler


# Unicode to ASCII icon mapping for non-UTF-8 terminals
ICON_MAP = {
    '✓': '[OK]',
    '✗': '[FAIL]',
    '⚠': '[WARN]',
    '→': '->',
    '…': '...',
    '•': '*',
}
_ICON_TABLE = str.maketrans(ICON_MAP)

_LOG_FORMAT = "%(name)s: %(message)s"


def stream_encoding(stream: Optional[TextIO] = None) -> str:
    """Encoding of the stream text is written to, stdout by default.

    Captured or redirected streams may report no encoding; the locale's
    preferred encoding is used then.
    """
    if stream is None:
        stream = sys.stdout
    encoding = getattr(stream, 'encoding', None) or locale.getpreferredencoding(False)
    return (encoding or 'ascii').lower().replace('_', '-')


def is_utf8_capable(stream: Optional[TextIO] = None) -> bool:
    return stream_encoding(stream) in ('utf-8', 'utf8')


def sanitize_for_terminal(text: str, stream: Optional[TextIO] = None) -> str:
    """Replace icons with ASCII equivalents unless `stream` accepts UTF-8."""
    if is_utf8_capable(stream):
        return text
    return text.translate(_ICON_TABLE)


def configure_logging(level: str = "WARNING") -> logging.Logger:
    """Route the gdblint logger hierarchy to a rich handler on stderr.

    Safe to call more than once; the handler is installed a single time and
    only the level is updated on later calls.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ...)

    Returns:
        The package root logger
    """
    root = logging.getLogger("gdblint")
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    root.setLevel(numeric)

    if not any(isinstance(h, RichHandler) for h in root.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        root.addHandler(handler)
        root.propagate = False

    return root
