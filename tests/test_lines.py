"""Tests for logical line assembly."""
from gdblint.analyzer.lines import LineAssembler, LinesMap


def test_continuation_joins_into_last_physical_line():
    """A backslash-continued line is reported at the line where it ends."""
    lines = LineAssembler().assemble(["foo \\\n", "bar\n"])

    assert len(lines) == 1
    assert lines[0].text == "foo bar"
    assert lines[0].line_number == 2, "Joined statement must carry the last physical line number"


def test_counter_advances_for_every_physical_line():
    lines = LineAssembler().assemble([
        "first\n",
        "a \\\n",
        "b \\\n",
        "c\n",
        "after\n",
    ])

    assert [(l.text, l.line_number) for l in lines] == [
        ("first", 1),
        ("a b c", 4),
        ("after", 5),
    ]


def test_blank_lines_are_kept():
    lines = LineAssembler().assemble(["\n", "x\n", "\n"])
    assert [l.line_number for l in lines] == [1, 2, 3]
    assert lines[0].text == ""


def test_trailing_continuation_is_dropped():
    """A continuation still open at end of input emits nothing."""
    lines = LineAssembler().assemble(["kept\n", "dangling \\\n"])

    assert [l.text for l in lines] == ["kept"]
    assert lines.max_line_number == 1


def test_last_line_without_newline():
    lines = LineAssembler().assemble_text("one\ntwo")
    assert [(l.text, l.line_number) for l in lines] == [("one", 1), ("two", 2)]


def test_crlf_line_endings():
    lines = LineAssembler().assemble(["a \\\r\n", "b\r\n"])
    assert lines[0].text == "a b"


def test_line_number_width():
    """Width is one more than the digit count of the largest line number."""
    lines_map = LinesMap()
    assert lines_map.line_number_width == 1

    lines_map.append("x", 9)
    assert lines_map.line_number_width == 2

    lines_map.append("y", 120)
    assert lines_map.line_number_width == 4
    assert lines_map.max_line_number == 120


def test_zero_line_number_is_ignored():
    lines_map = LinesMap()
    lines_map.append("x", 0)
    assert len(lines_map) == 0
