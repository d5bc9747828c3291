"""Token classification heuristics for GDB reference candidates.

A token pulled out of a script line is only a user reference when it is not
an implicit GDB value, a built-in command, a keyword or a numeric literal.
"""
import re
from typing import Optional

from .command_trie import CommandTrie

SIGIL = '$'

GDB_KEYWORDS = frozenset({
    "if", "else", "while", "for", "break", "continue", "end", "quit",
})

_INTEGER = re.compile(r'[+-]?[0-9]+')
_FLOAT = re.compile(r'[+-]?[0-9]*\.[0-9]+')
_FUNC_ARG = re.compile(r'arg[0-9]+')


def is_history_var(token: str) -> bool:
    """Check for value-history references: $, $$, $N, $$N.

    These name earlier results, not user symbols.
    """
    if token.startswith(SIGIL):
        token = token[1:]
    if token.startswith(SIGIL):
        token = token[1:]
    return not token or (token.isascii() and token.isdigit())


def is_func_arg(token: str) -> bool:
    """Check for user-command arguments: $arg0, $arg1, ..."""
    if token.startswith(SIGIL):
        token = token[1:]
    return _FUNC_ARG.fullmatch(token) is not None


def is_gdb_keyword(token: str) -> bool:
    return token in GDB_KEYWORDS


def is_number(token: str) -> bool:
    """Integer literal with optional sign."""
    if token.startswith(SIGIL):
        token = token[1:]
    return _INTEGER.fullmatch(token) is not None


def is_floating_point(token: str) -> bool:
    """Decimal literal with optional sign and exactly one point followed by digits."""
    if token.startswith(SIGIL):
        token = token[1:]
    return _FLOAT.fullmatch(token) is not None


class TokenClassifier:
    """Decide whether a token is a genuine user reference.

    Consults the command recognizer, so it must be built after the command
    trie has been seeded from the environment or the cache.
    """

    def __init__(self, commands: Optional[CommandTrie] = None):
        """
        :param commands: Recognizer for GDB built-in command names.
                         An empty recognizer is used when omitted.
        """
        self.commands = commands if commands is not None else CommandTrie()

    def is_gdb_command(self, token: str) -> bool:
        return self.commands.is_command(token)

    def is_valid_reference(self, token: str) -> bool:
        """True when `token` survives every exclusion filter."""
        return not (
            is_history_var(token)
            or is_func_arg(token)
            or self.is_gdb_command(token)
            or is_gdb_keyword(token)
            or is_number(token)
            or is_floating_point(token)
        )
