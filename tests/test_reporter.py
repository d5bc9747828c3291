"""Tests for issue detection and output rendering."""
import pytest

from gdblint.analyzer.reporter import (
    UNDEFINED,
    UNUSED,
    Diagnostic,
    IssueReporter,
    WarningFilter,
    render_plain,
    render_scriptable,
)
from gdblint.analyzer.symbol_table import SymbolKind, SymbolTable

FUNC = SymbolKind.FUNCTION
VAR = SymbolKind.VARIABLE


def tables(defs=(), refs=()):
    definitions = SymbolTable()
    for name, kind, line in defs:
        definitions.insert(name, kind, line)
    references = SymbolTable()
    for name, kind, line in refs:
        references.insert(name, kind, line)
    return definitions, references


def summary(diagnostics):
    return [(d.category, d.kind, d.name, d.line_number) for d in diagnostics]


class TestDetection:
    def test_unused_and_undefined(self):
        reporter = IssueReporter(*tables(
            defs=[("myproc", FUNC, 1)],
            refs=[("myvar", VAR, 2)],
        ))

        assert summary(reporter.report()) == [
            (UNDEFINED, VAR, "myvar", 2),
            (UNUSED, FUNC, "myproc", 1),
        ]

    def test_used_definition_not_reported(self):
        reporter = IssueReporter(*tables(
            defs=[("hits", VAR, 1)],
            refs=[("hits", VAR, 4)],
        ))
        assert reporter.report() == []

    def test_kind_must_match(self):
        """A variable reference does not use a command of the same name."""
        reporter = IssueReporter(*tables(
            defs=[("dump", FUNC, 1)],
            refs=[("dump", VAR, 2)],
        ))
        assert summary(reporter.report()) == [
            (UNDEFINED, VAR, "dump", 2),
            (UNUSED, FUNC, "dump", 1),
        ]

    def test_environment_symbols_never_unused(self):
        reporter = IssueReporter(*tables(defs=[("rax", VAR, 0)]))
        assert reporter.unused() == []

    def test_environment_symbols_satisfy_references(self):
        reporter = IssueReporter(*tables(
            defs=[("rax", VAR, 0)],
            refs=[("rax", VAR, 3)],
        ))
        assert reporter.undefined() == []

    def test_every_reference_occurrence_reported(self):
        reporter = IssueReporter(*tables(refs=[("ghost", VAR, 2), ("ghost", VAR, 5)]))
        assert sorted(d.line_number for d in reporter.undefined()) == [2, 5]


class TestOrdering:
    def test_undefined_before_unused_by_default(self):
        reporter = IssueReporter(*tables(
            defs=[("early", FUNC, 1)],
            refs=[("late", VAR, 9)],
        ))
        assert [d.category for d in reporter.report()] == [UNDEFINED, UNUSED]

    def test_sort_by_line(self):
        reporter = IssueReporter(*tables(
            defs=[("early", FUNC, 1), ("middle", VAR, 4)],
            refs=[("late", VAR, 9)],
        ), sort_by_line=True)
        assert [d.line_number for d in reporter.report()] == [1, 4, 9]


class TestWarningFilter:
    ALL = [
        (UNUSED, FUNC), (UNUSED, VAR), (UNDEFINED, FUNC), (UNDEFINED, VAR),
    ]

    @pytest.mark.parametrize("flags,suppressed", [
        ({}, []),
        ({"no_unused": True}, [(UNUSED, FUNC), (UNUSED, VAR)]),
        ({"no_undefined": True}, [(UNDEFINED, FUNC), (UNDEFINED, VAR)]),
        ({"no_unused_function": True}, [(UNUSED, FUNC)]),
        ({"no_unused_variable": True}, [(UNUSED, VAR)]),
        ({"no_undefined_function": True}, [(UNDEFINED, FUNC)]),
        ({"no_undefined_variable": True}, [(UNDEFINED, VAR)]),
    ])
    def test_allows(self, flags, suppressed):
        warnings = WarningFilter(**flags)
        for category, kind in self.ALL:
            expected = (category, kind) not in suppressed
            assert warnings.allows(category, kind) is expected, f"{flags} on {category} {kind.label}"

    def test_unused_function_flag_only_drops_unused_functions(self):
        defs = [("f", FUNC, 1), ("v", VAR, 2)]
        refs = [("g", FUNC, 3), ("w", VAR, 4)]
        everything = summary(IssueReporter(*tables(defs, refs)).report())
        filtered = summary(IssueReporter(
            *tables(defs, refs), warnings=WarningFilter(no_unused_function=True)
        ).report())

        assert filtered == [d for d in everything if d[:2] != (UNUSED, FUNC)]


class TestMessages:
    def test_unused_message(self):
        d = Diagnostic(UNUSED, FUNC, "myproc", 1)
        assert d.message("t.gdb", 2) == "t.gdb:01: Unused func: 'myproc' defined at line 1 is never used"

    def test_undefined_message(self):
        d = Diagnostic(UNDEFINED, VAR, "myvar", 2)
        assert d.message("STDIN", 2) == (
            "STDIN:02: Undefined var: 'myvar' is referenced at line 2 but never defined"
        )

    def test_padding_width(self):
        d = Diagnostic(UNUSED, VAR, "x", 7)
        assert d.message("t.gdb", 3).startswith("t.gdb:007:")
        assert d.message("t.gdb", 1).startswith("t.gdb:7:")


class TestRendering:
    DIAGS = [
        Diagnostic(UNDEFINED, VAR, "myvar", 2),
        Diagnostic(UNUSED, FUNC, "myproc", 1),
    ]

    def test_plain(self):
        lines = render_plain(self.DIAGS, "t.gdb", 2, "/work/t.gdb")
        assert lines == [
            "t.gdb:02: Undefined var: 'myvar' is referenced at line 2 but never defined",
            "t.gdb:01: Unused func: 'myproc' defined at line 1 is never used",
            "File: /work/t.gdb",
            "Found: 2 issue(s)",
        ]

    def test_plain_falls_back_to_label(self):
        assert render_plain(self.DIAGS[:1], "STDIN", 2)[-2] == "File: STDIN"

    def test_plain_empty(self):
        assert render_plain([], "t.gdb", 1, "/work/t.gdb") == []

    def test_scriptable(self):
        lines = render_scriptable(self.DIAGS, "t.gdb", 2)
        assert lines == [
            "export GDBLINT_REPORTS=(\\",
            "  \"t.gdb:02: Undefined var: 'myvar' is referenced at line 2 but never defined\\n\"\\",
            "  \"t.gdb:01: Unused func: 'myproc' defined at line 1 is never used\\n\"\\",
            ");",
            "export GDBLINT_NREPORTS=2;",
        ]

    def test_scriptable_empty(self):
        assert render_scriptable([], "t.gdb", 1) == [
            "export GDBLINT_REPORTS=(\\",
            ");",
            "export GDBLINT_NREPORTS=0;",
        ]

    def test_scriptable_escapes_shell_characters(self):
        lines = render_scriptable(self.DIAGS[1:], 'we"ird$`\\.gdb', 2)
        assert lines[1].startswith('  "we\\"ird\\$\\`\\\\.gdb:01:')
