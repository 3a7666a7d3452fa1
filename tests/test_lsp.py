"""Tests for the sqllogic language server helper functions."""

from lsprotocol import types

from sqllogic.lsp.server import (
    SORT_MODES,
    _word_at_position,
    completion_items,
    hover_text,
    parse_diagnostics,
)


# ---------------------------------------------------------------------------
# parse_diagnostics
# ---------------------------------------------------------------------------


class TestParseDiagnostics:
    def test_valid_script(self):
        assert parse_diagnostics("statement ok\nselect 1\n") == []

    def test_empty_signature(self):
        diagnostics = parse_diagnostics("statement ok\nselect 1\n\nquery\nselect 1\n")
        assert len(diagnostics) == 1
        diagnostic = diagnostics[0]
        assert diagnostic.range.start == types.Position(line=3, character=0)
        assert diagnostic.range.end == types.Position(line=3, character=5)
        assert diagnostic.severity == types.DiagnosticSeverity.Error
        assert diagnostic.message == "Empty query type signature"

    def test_separator_without_query(self):
        diagnostics = parse_diagnostics("----\n")
        assert diagnostics[0].range.start.line == 0
        assert "without a preceding query" in diagnostics[0].message

    def test_error_at_end_of_document(self):
        diagnostics = parse_diagnostics("skipif sqlite")
        assert diagnostics[0].range.start.line == 0


# ---------------------------------------------------------------------------
# _word_at_position
# ---------------------------------------------------------------------------


class TestWordAtPosition:
    def test_simple_word(self):
        assert _word_at_position("query III rowsort", 7) == "III"

    def test_word_start(self):
        assert _word_at_position("statement ok", 0) == "statement"

    def test_at_space(self):
        assert _word_at_position("statement ok", 9) == ""

    def test_empty_line(self):
        assert _word_at_position("", 0) == ""

    def test_out_of_bounds(self):
        assert _word_at_position("halt", -1) == ""
        assert _word_at_position("halt", 10) == ""


# ---------------------------------------------------------------------------
# completion_items
# ---------------------------------------------------------------------------


class TestCompletionItems:
    def test_markers_at_line_start(self):
        labels = [item.label for item in completion_items("")]
        assert "statement ok" in labels
        assert "statement error" in labels
        assert "query" in labels

    def test_markers_while_typing_first_word(self):
        labels = [item.label for item in completion_items("sta")]
        assert "statement ok" in labels

    def test_sort_modes_after_signature(self):
        labels = [item.label for item in completion_items("query II ")]
        assert labels == list(SORT_MODES)

    def test_nothing_inside_sql(self):
        assert completion_items("select * from t where ") == []


# ---------------------------------------------------------------------------
# hover_text
# ---------------------------------------------------------------------------


class TestHoverText:
    def test_signature(self):
        text = hover_text("query IT rowsort", 6)
        assert text is not None
        assert text.startswith("**2 columns**")
        assert "`I` Integer column" in text
        assert "`T` Text column" in text

    def test_keyword(self):
        assert hover_text("statement ok", 0).startswith("**statement**")

    def test_sort_mode(self):
        assert "Sort rows" in hover_text("query I rowsort", 10)

    def test_plain_word(self):
        assert hover_text("select v1 from t", 8) is None

    def test_query_error_is_not_a_signature(self):
        assert hover_text("query error", 7).startswith("**error**")
