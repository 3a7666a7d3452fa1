"""Compare execution results against directive expectations."""

from __future__ import annotations

from sqllogic.model import (
    Case,
    ExecutionResult,
    Expect,
    Failure,
    HaltDirective,
    Outcome,
    QueryDirective,
    SortMode,
    StatementDirective,
    Success,
    Verdict,
)
from sqllogic.values import render_row


def compare(case: Case, result: ExecutionResult, path: str = "<string>") -> Verdict:
    """Classify *result* against the expectation of *case*."""
    if isinstance(case, QueryDirective):
        return _compare_query(case, result, path)
    if isinstance(case, StatementDirective):
        return _compare_statement(case, result, path)
    if isinstance(case, HaltDirective):
        return Verdict.for_case(path, case, Outcome.PASS)
    raise TypeError(f"Cannot compare directive of type {type(case).__name__}")


def _compare_statement(case: StatementDirective, result: ExecutionResult, path: str) -> Verdict:
    if case.expect is Expect.OK:
        if isinstance(result, Success):
            return Verdict.for_case(path, case, Outcome.PASS)
        return Verdict.for_case(
            path, case, Outcome.UNEXPECTED_ERROR,
            reason=f"Statement failed: {result.message}",
            actual=[result.message],
        )

    if isinstance(result, Success):
        expected = [case.error_hint] if case.error_hint else []
        return Verdict.for_case(
            path, case, Outcome.UNEXPECTED_SUCCESS,
            reason="Statement succeeded but an error was expected",
            expected=expected,
        )
    if case.error_hint and case.error_hint.lower() not in result.message.lower():
        return Verdict.for_case(
            path, case, Outcome.FAIL,
            reason=f"Error message does not contain '{case.error_hint}'",
            expected=[case.error_hint],
            actual=[result.message],
        )
    return Verdict.for_case(path, case, Outcome.PASS)


def sort_lines(case: QueryDirective, lines: list[list[str]]) -> list[str]:
    """Apply the query's sort mode to rendered rows and join them into lines."""
    if case.sort_mode is SortMode.VALUESORT:
        return sorted(value for row in lines for value in row)
    joined = [" ".join(row) for row in lines]
    if case.sort_mode is SortMode.ROWSORT:
        return sorted(joined)
    return joined


def _compare_query(case: QueryDirective, result: ExecutionResult, path: str) -> Verdict:
    expected = sort_lines(case, [list(row) for row in case.expected_rows])

    if isinstance(result, Failure):
        return Verdict.for_case(
            path, case, Outcome.UNEXPECTED_ERROR,
            reason=f"Query failed: {result.message}",
            expected=expected,
            actual=[result.message],
        )

    width = len(case.column_types)
    rendered = [render_row(row, case.column_types) for row in result.rows]
    actual = sort_lines(case, rendered)

    for i, row in enumerate(result.rows):
        if len(row) != width:
            return Verdict.for_case(
                path, case, Outcome.FAIL,
                reason=f"Expected {width} columns but row {i + 1} has {len(row)}",
                expected=expected,
                actual=actual,
            )

    if case.sort_mode is not SortMode.VALUESORT and len(rendered) != len(case.expected_rows):
        return Verdict.for_case(
            path, case, Outcome.FAIL,
            reason=f"Expected {len(case.expected_rows)} rows but got {len(rendered)}",
            expected=expected,
            actual=actual,
        )

    if actual != expected:
        if len(actual) != len(expected):
            reason = f"Expected {len(expected)} values but got {len(actual)}"
        else:
            first = next(i for i, (a, e) in enumerate(zip(actual, expected)) if a != e)
            reason = f"Mismatch at {'value' if case.sort_mode is SortMode.VALUESORT else 'row'} {first + 1}"
        return Verdict.for_case(
            path, case, Outcome.FAIL,
            reason=reason,
            expected=expected,
            actual=actual,
        )

    return Verdict.for_case(path, case, Outcome.PASS)
