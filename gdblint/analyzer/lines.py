"""Logical line assembly for GDB scripts.

GDB joins a physical line ending in a backslash with the line that follows.
Diagnostics point at the physical line where the joined statement ends.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List

logger = logging.getLogger(__name__)

CONTINUATION = "\\"


@dataclass
class LogicalLine:
    """One complete statement after continuation joining."""
    text: str
    line_number: int  # last physical line of the joined group


@dataclass
class LinesMap:
    """Append-only sequence of logical lines."""
    lines: List[LogicalLine] = field(default_factory=list)
    max_line_number: int = 0

    def append(self, text: str, line_number: int):
        """Record a logical line ending at physical line `line_number`."""
        if line_number <= 0:
            return
        self.lines.append(LogicalLine(text, line_number))
        if line_number > self.max_line_number:
            self.max_line_number = line_number

    @property
    def line_number_width(self) -> int:
        """Zero-padding width for printed line numbers."""
        width = 1
        remaining = self.max_line_number
        while remaining:
            remaining //= 10
            width += 1
        return width

    def __iter__(self) -> Iterator[LogicalLine]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def __getitem__(self, index: int) -> LogicalLine:
        return self.lines[index]


class LineAssembler:
    """Join continuation-marked physical lines into logical lines."""

    def assemble(self, physical_lines: Iterable[str]) -> LinesMap:
        """Build a LinesMap from raw physical lines.

        Args:
            physical_lines: Lines as read from a file, with or without
                trailing newlines

        Returns:
            LinesMap of joined statements. A continuation still open at the
            end of input is dropped.
        """
        lines_map = LinesMap()
        pending: List[str] = []
        line_number = 0

        for raw in physical_lines:
            line_number += 1
            text = raw.rstrip("\n").rstrip("\r")

            if text.endswith(CONTINUATION):
                pending.append(text[:-1])
                continue

            pending.append(text)
            lines_map.append("".join(pending), line_number)
            pending = []

        if pending:
            logger.warning(
                "dropping unterminated continuation ending at line %d", line_number
            )

        return lines_map

    def assemble_text(self, text: str) -> LinesMap:
        """Convenience wrapper over assemble() for an in-memory script."""
        return self.assemble(text.splitlines(keepends=True))
