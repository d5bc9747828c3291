"""Reference extraction: maps identifier uses in a GDB script to the references table."""
import logging
import re
from dataclasses import dataclass
from typing import Iterable, List

from .classifier import SIGIL, TokenClassifier
from .extractor import IDENTIFIER, is_definition_header, strip_comment
from .lines import LogicalLine
from .symbol_table import SymbolKind, SymbolTable

logger = logging.getLogger(__name__)

# A command at the start of a statement, its operands, then ';' or end of line.
CALL_PATTERN = re.compile(
    rf'(^\s*|;\s*)({IDENTIFIER})(\s+[$a-zA-Z0-9_-]+)*\s*(;|$)'
)
# A sigil-prefixed convenience variable anywhere in the text.
VARIABLE_PATTERN = re.compile(
    rf'(\s*|\b)\$({IDENTIFIER})(\s*|\b|$)'
)

SET_KEYWORD = re.compile(r"\bset\s")
ASSIGNMENT = "="


@dataclass
class Reference:
    """A candidate reference accepted into the references table."""
    name: str
    kind: SymbolKind
    line_number: int


class ReferenceExtractor:
    """Scan logical lines for user command calls and convenience variable uses."""

    # (pattern, kind, prefix restored before classification)
    SCANS = (
        (CALL_PATTERN, SymbolKind.FUNCTION, ""),
        (VARIABLE_PATTERN, SymbolKind.VARIABLE, SIGIL),
    )

    def __init__(self, references: SymbolTable, classifier: TokenClassifier):
        """Initialize extractor.

        Args:
            references: Table receiving accepted references
            classifier: Filter discarding built-ins, keywords and literals
        """
        self.references = references
        self.classifier = classifier

    @staticmethod
    def scan_start(text: str) -> int:
        """Offset where reference scanning begins, or -1 to skip the line.

        Definition headers never reference their own name. For `set`
        assignments only the right-hand side is scanned; a `set` without an
        assignment only toggles a GDB setting.
        """
        if is_definition_header(text):
            return -1

        set_match = SET_KEYWORD.search(text)
        if set_match is None:
            return 0

        return text.find(ASSIGNMENT, set_match.end())

    @staticmethod
    def scan_tokens(pattern: re.Pattern, text: str) -> List[str]:
        """Collect group 2 of successive non-overlapping matches, left to right.

        The pattern is re-run on the unconsumed remainder so that `^`
        anchors at the cursor.
        """
        tokens = []
        cursor = 0
        while cursor < len(text):
            match = pattern.search(text[cursor:])
            if match is None or match.end() == 0:
                break
            tokens.append(match.group(2))
            cursor += match.end()
        return tokens

    def extract_line(self, line: LogicalLine) -> List[Reference]:
        text = strip_comment(line.text)
        start = self.scan_start(text)
        if start < 0:
            return []

        remainder = text[start:]
        accepted = []
        for pattern, kind, prefix in self.SCANS:
            for token in self.scan_tokens(pattern, remainder):
                # $i is a variable even where `i` is a command alias
                if not self.classifier.is_valid_reference(prefix + token):
                    continue
                logger.debug("reference: %s %s at line %d", kind.label, token, line.line_number)
                self.references.insert(token, kind, line.line_number)
                accepted.append(Reference(token, kind, line.line_number))

        return accepted

    def extract(self, lines: Iterable[LogicalLine]) -> List[Reference]:
        """Populate the references table from every logical line.

        Returns:
            Accepted references in scan order
        """
        accepted = []
        for line in lines:
            accepted.extend(self.extract_line(line))
        return accepted
