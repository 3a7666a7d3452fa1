"""Tests for verdict classification."""

import datetime

from sqllogic.comparator import compare
from sqllogic.model import (
    ColumnType,
    Expect,
    Failure,
    HaltDirective,
    Outcome,
    QueryDirective,
    SortMode,
    StatementDirective,
    Success,
)

I = ColumnType.INTEGER
T = ColumnType.TEXT


def _query(types, rows, sort_mode=SortMode.NOSORT):
    return QueryDirective(
        line=3,
        sql="select ...",
        column_types=tuple(types),
        expected_rows=tuple(tuple(r.split(" ")) for r in rows),
        sort_mode=sort_mode,
    )


class TestStatementVerdicts:
    """Tests for statement ok / statement error."""

    def test_ok_success(self):
        case = StatementDirective(line=1, sql="create table t(v int)")
        assert compare(case, Success()).outcome is Outcome.PASS

    def test_ok_failure(self):
        case = StatementDirective(line=1, sql="create table t(v int)")
        verdict = compare(case, Failure("table t already exists"), path="a.test")
        assert verdict.outcome is Outcome.UNEXPECTED_ERROR
        assert "already exists" in verdict.reason
        assert verdict.location == "a.test:1"

    def test_error_failure(self):
        case = StatementDirective(line=1, sql="insert", expect=Expect.ERROR)
        assert compare(case, Failure("anything at all")).outcome is Outcome.PASS

    def test_error_success(self):
        case = StatementDirective(line=1, sql="insert", expect=Expect.ERROR)
        assert compare(case, Success()).outcome is Outcome.UNEXPECTED_SUCCESS

    def test_error_hint_matches_case_insensitively(self):
        case = StatementDirective(line=1, sql="insert", expect=Expect.ERROR, error_hint="unique")
        verdict = compare(case, Failure("UNIQUE constraint failed: t.v2, t.v3"))
        assert verdict.outcome is Outcome.PASS

    def test_error_hint_mismatch(self):
        case = StatementDirective(line=1, sql="insert", expect=Expect.ERROR, error_hint="syntax")
        verdict = compare(case, Failure("UNIQUE constraint failed"))
        assert verdict.outcome is Outcome.FAIL
        assert verdict.expected == ["syntax"]
        assert verdict.actual == ["UNIQUE constraint failed"]

    def test_halt_passes(self):
        assert compare(HaltDirective(line=1), Success()).outcome is Outcome.PASS


class TestQueryVerdicts:
    """Tests for query result comparison."""

    def test_match(self):
        case = _query([I, T], ["1 a", "2 b"])
        verdict = compare(case, Success(rows=((1, "a"), (2, "b"))))
        assert verdict.passed

    def test_failure_is_unexpected_error(self):
        case = _query([I], ["1"])
        verdict = compare(case, Failure("no such table: t"))
        assert verdict.outcome is Outcome.UNEXPECTED_ERROR
        assert verdict.expected == ["1"]

    def test_row_count_mismatch(self):
        case = _query([I], ["1"])
        verdict = compare(case, Success(rows=((1,), (2,))))
        assert verdict.outcome is Outcome.FAIL
        assert verdict.reason == "Expected 1 rows but got 2"
        assert verdict.actual == ["1", "2"]

    def test_column_count_mismatch(self):
        case = _query([I], ["1"])
        verdict = compare(case, Success(rows=((1, 2),)))
        assert verdict.outcome is Outcome.FAIL
        assert "Expected 1 columns" in verdict.reason

    def test_value_mismatch(self):
        case = _query([I, T], ["1 a", "2 b"])
        verdict = compare(case, Success(rows=((1, "a"), (2, "c"))))
        assert verdict.outcome is Outcome.FAIL
        assert verdict.reason == "Mismatch at row 2"
        assert verdict.expected == ["1 a", "2 b"]
        assert verdict.actual == ["1 a", "2 c"]

    def test_order_is_significant(self):
        case = _query([I], ["1", "2"])
        verdict = compare(case, Success(rows=((2,), (1,))))
        assert verdict.outcome is Outcome.FAIL

    def test_rowsort_ignores_order(self):
        case = _query([I], ["1", "2"], sort_mode=SortMode.ROWSORT)
        assert compare(case, Success(rows=((2,), (1,)))).passed

    def test_valuesort_flattens(self):
        case = _query([I, I], ["1", "2", "3", "4"], sort_mode=SortMode.VALUESORT)
        assert compare(case, Success(rows=((3, 4), (1, 2)))).passed

    def test_empty_result(self):
        case = _query([I], [])
        assert compare(case, Success()).passed

    def test_timestamp_row_compared_whole(self):
        case = _query([T], ["2016-03-26 01:02:03"])
        rows = ((datetime.datetime(2016, 3, 26, 1, 2, 3),),)
        assert compare(case, Success(rows=rows)).passed

    def test_temporal_cast_to_text_matches_temporal(self):
        """A date and its text cast compare equal against the same row."""
        case = _query([T], ["2016-03-26"])
        assert compare(case, Success(rows=((datetime.date(2016, 3, 26),),))).passed
        assert compare(case, Success(rows=(("2016-03-26",),))).passed

    def test_null_and_empty(self):
        case = _query([T, T], ["NULL (empty)"])
        assert compare(case, Success(rows=((None, ""),))).passed
