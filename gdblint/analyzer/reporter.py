"""Unused/undefined symbol detection and diagnostic rendering."""
from dataclasses import dataclass
from typing import List, Optional

from .symbol_table import SymbolKind, SymbolTable

UNUSED = "unused"
UNDEFINED = "undefined"

STDIN_LABEL = "STDIN"

REPORTS_VARIABLE = "GDBLINT_REPORTS"
COUNT_VARIABLE = "GDBLINT_NREPORTS"

_SHELL_ESCAPES = str.maketrans({'\\': '\\\\', '"': '\\"', '$': '\\$', '`': '\\`'})


@dataclass
class WarningFilter:
    """Which diagnostics to suppress."""
    no_unused: bool = False
    no_undefined: bool = False
    no_unused_function: bool = False
    no_unused_variable: bool = False
    no_undefined_function: bool = False
    no_undefined_variable: bool = False

    def allows(self, category: str, kind: SymbolKind) -> bool:
        if category == UNUSED:
            if self.no_unused:
                return False
            if kind == SymbolKind.FUNCTION:
                return not self.no_unused_function
            return not self.no_unused_variable

        if self.no_undefined:
            return False
        if kind == SymbolKind.FUNCTION:
            return not self.no_undefined_function
        return not self.no_undefined_variable


@dataclass
class Diagnostic:
    """One lint finding."""
    category: str  # UNUSED or UNDEFINED
    kind: SymbolKind
    name: str
    line_number: int

    def message(self, file_label: str, width: int = 1) -> str:
        """Render the plain one-line message.

        Args:
            file_label: Script base name or STDIN
            width: Zero-padding width for the location line number
        """
        location = f"{file_label}:{self.line_number:0{width}d}"
        if self.category == UNUSED:
            return (f"{location}: Unused {self.kind.label}: '{self.name}' "
                    f"defined at line {self.line_number} is never used")
        return (f"{location}: Undefined {self.kind.label}: '{self.name}' "
                f"is referenced at line {self.line_number} but never defined")


class IssueReporter:
    """Diff the definitions and references tables."""

    def __init__(self, definitions: SymbolTable, references: SymbolTable,
                 warnings: Optional[WarningFilter] = None, sort_by_line: bool = False):
        """Initialize reporter.

        Args:
            definitions: Script and environment definitions
            references: Script references
            warnings: Suppression flags; everything is reported when omitted
            sort_by_line: Order diagnostics by line instead of table order
        """
        self.definitions = definitions
        self.references = references
        self.warnings = warnings or WarningFilter()
        self.sort_by_line = sort_by_line

    def unused(self) -> List[Diagnostic]:
        """Script definitions that nothing references."""
        found = []
        for _, symbol in self.definitions:
            if symbol.from_environment:
                continue
            if not self.warnings.allows(UNUSED, symbol.kind):
                continue
            if self.references.find(symbol.name, symbol.kind) is None:
                found.append(Diagnostic(UNUSED, symbol.kind, symbol.name, symbol.source_line))
        return self._ordered(found)

    def undefined(self) -> List[Diagnostic]:
        """References with no definition in the script or the environment."""
        found = []
        for _, symbol in self.references:
            if not self.warnings.allows(UNDEFINED, symbol.kind):
                continue
            if self.definitions.find(symbol.name, symbol.kind) is None:
                found.append(Diagnostic(UNDEFINED, symbol.kind, symbol.name, symbol.source_line))
        return self._ordered(found)

    def report(self) -> List[Diagnostic]:
        """Undefined diagnostics followed by unused ones."""
        return self._ordered(self.undefined() + self.unused())

    def _ordered(self, diagnostics: List[Diagnostic]) -> List[Diagnostic]:
        if self.sort_by_line:
            return sorted(diagnostics, key=lambda d: d.line_number)
        return diagnostics


def render_plain(diagnostics: List[Diagnostic], file_label: str, width: int,
                 script_path: Optional[str] = None) -> List[str]:
    """One message per line, then a summary when anything was found."""
    lines = [d.message(file_label, width) for d in diagnostics]
    if diagnostics:
        lines.append(f"File: {script_path or file_label}")
        lines.append(f"Found: {len(diagnostics)} issue(s)")
    return lines


def render_scriptable(diagnostics: List[Diagnostic], file_label: str, width: int) -> List[str]:
    """Shell array assignment that `eval` can consume, plus the count."""
    lines = [f"export {REPORTS_VARIABLE}=(\\"]
    for d in diagnostics:
        escaped = d.message(file_label, width).translate(_SHELL_ESCAPES)
        lines.append(f'  "{escaped}\\n"\\')
    lines.append(");")
    lines.append(f"export {COUNT_VARIABLE}={len(diagnostics)};")
    return lines
