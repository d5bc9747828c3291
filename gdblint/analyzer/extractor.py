"""Definition extraction from logical GDB script lines."""
import logging
import re
from typing import Iterable, List, Optional, Tuple

from .lines import LogicalLine
from .symbol_table import Symbol, SymbolKind, SymbolTable

logger = logging.getLogger(__name__)

COMMENT_MARKER = '#'

IDENTIFIER = r'[a-zA-Z0-9_-]+'

DEFINE_PATTERN = re.compile(rf'^\s*define\s+({IDENTIFIER})')
SET_PATTERN = re.compile(rf'^\s*set\s+(?:var(?:iable)?\s+)?\$({IDENTIFIER})')
PY_SETVAR_PATTERN = re.compile(
    rf'''^\s*python.*set_convenience_variable\(\s*["']?({IDENTIFIER})["']?\s*,'''
)


def strip_comment(text: str) -> str:
    """Drop everything from the first comment marker onward."""
    index = text.find(COMMENT_MARKER)
    return text if index < 0 else text[:index]


def is_definition_header(text: str) -> bool:
    """True for a `define NAME` line."""
    return DEFINE_PATTERN.match(text) is not None


class DefinitionExtractor:
    """Extract user command and convenience variable definitions."""

    # Checked in order; the first match decides the kind.
    PATTERNS: Tuple[Tuple[re.Pattern, SymbolKind], ...] = (
        (DEFINE_PATTERN, SymbolKind.FUNCTION),
        (SET_PATTERN, SymbolKind.VARIABLE),
        (PY_SETVAR_PATTERN, SymbolKind.VARIABLE),
    )

    def __init__(self, definitions: SymbolTable):
        """Initialize extractor.

        Args:
            definitions: Table receiving every discovered definition
        """
        self.definitions = definitions

    def match_line(self, text: str) -> Optional[Tuple[str, SymbolKind]]:
        """Return (name, kind) for the definition on a line, if any.

        Args:
            text: Logical line text, comment already stripped
        """
        for pattern, kind in self.PATTERNS:
            match = pattern.match(text)
            if match:
                return match.group(1), kind
        return None

    def extract(self, lines: Iterable[LogicalLine]) -> List[Symbol]:
        """Insert one definition per matching logical line.

        Args:
            lines: Logical lines of the script

        Returns:
            Symbols inserted into the definitions table, in line order
        """
        found = []
        for line in lines:
            result = self.match_line(strip_comment(line.text))
            if result is None:
                continue

            name, kind = result
            logger.debug("definition: %s %s at line %d", kind.label, name, line.line_number)
            symbol = self.definitions.insert(name, kind, line.line_number)
            if symbol is not None:
                found.append(symbol)

        return found
