"""Directive model for parsed SQL logic test scripts."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterator, Union


class ColumnType(Enum):
    """Declared type of one query output column."""

    INTEGER = "I"
    TEXT = "T"
    REAL = "R"
    BOOLEAN = "B"

    @classmethod
    def from_signature(cls, signature: str) -> tuple[ColumnType, ...]:
        """Decode a compact type signature such as ``III`` or ``TI``.

        Raises:
            ValueError: If the signature is empty or has an unknown character.
        """
        if not signature:
            raise ValueError("Empty query type signature")
        column_types = []
        for ch in signature:
            column_type = COLUMN_TYPE_CODES.get(ch)
            if column_type is None:
                raise ValueError(f"Unknown column type '{ch}' in signature '{signature}'")
            column_types.append(column_type)
        return tuple(column_types)


# Mapping from signature characters to ColumnType values
COLUMN_TYPE_CODES: dict[str, ColumnType] = {ct.value: ct for ct in ColumnType}


class SortMode(Enum):
    """How actual rows are ordered before comparison."""

    NOSORT = "nosort"
    ROWSORT = "rowsort"
    VALUESORT = "valuesort"


class Expect(Enum):
    """Expected outcome of a statement."""

    OK = "ok"
    ERROR = "error"


@dataclass(frozen=True)
class Condition:
    """A ``skipif``/``onlyif`` gate applied to the next directive."""

    kind: str  # "skipif" or "onlyif"
    engine: str

    def allows(self, engine: str) -> bool:
        """Return whether the gated directive runs on *engine*."""
        matches = self.engine.lower() == engine.lower()
        return not matches if self.kind == "skipif" else matches


@dataclass(frozen=True)
class Comment:
    """A comment line, kept only for line-accurate reporting."""

    line: int
    text: str


@dataclass(frozen=True)
class StatementDirective:
    """A statement that must succeed or fail."""

    line: int
    sql: str
    expect: Expect = Expect.OK
    error_hint: str | None = None
    conditions: tuple[Condition, ...] = ()
    marker: str = "statement"  # "query" for a query expected to fail

    @property
    def kind(self) -> str:
        return f"{self.marker} {self.expect.value}"


@dataclass(frozen=True)
class QueryDirective:
    """A query whose result set is compared against expected rows."""

    line: int
    sql: str
    column_types: tuple[ColumnType, ...]
    expected_rows: tuple[tuple[str, ...], ...] = ()
    sort_mode: SortMode = SortMode.NOSORT
    conditions: tuple[Condition, ...] = ()

    @property
    def kind(self) -> str:
        signature = "".join(ct.value for ct in self.column_types)
        return f"query {signature}"

    @property
    def expected_lines(self) -> list[str]:
        """Expected rows rendered back to their single-space form."""
        return [" ".join(row) for row in self.expected_rows]


@dataclass(frozen=True)
class HaltDirective:
    """Stop executing the rest of the script."""

    line: int
    conditions: tuple[Condition, ...] = ()

    @property
    def kind(self) -> str:
        return "halt"

    @property
    def sql(self) -> str:
        return ""


Case = Union[StatementDirective, QueryDirective, HaltDirective]
Directive = Union[StatementDirective, QueryDirective, HaltDirective, Comment]


@dataclass(frozen=True)
class TestScript:
    """An ordered, immutable sequence of directives parsed from one file."""

    __test__ = False  # not a pytest test class

    path: str
    directives: tuple[Directive, ...] = ()

    @property
    def name(self) -> str:
        return Path(self.path).name

    @property
    def cases(self) -> Iterator[Case]:
        """Yield only the directives that the runner executes."""
        for directive in self.directives:
            if not isinstance(directive, Comment):
                yield directive

    def __len__(self) -> int:
        return sum(1 for _ in self.cases)


# ---------------------------------------------------------------------------
# Execution results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Success:
    """Rows returned by a successful execution (empty for DDL/DML)."""

    rows: tuple[tuple[Any, ...], ...] = ()
    columns: tuple[str, ...] = ()


@dataclass(frozen=True)
class Failure:
    """An error reported by the backend."""

    message: str


ExecutionResult = Union[Success, Failure]


# ---------------------------------------------------------------------------
# Verdicts
# ---------------------------------------------------------------------------


class Outcome(Enum):
    """Classification of one executed directive."""

    PASS = "pass"
    FAIL = "fail"
    UNEXPECTED_ERROR = "unexpected_error"
    UNEXPECTED_SUCCESS = "unexpected_success"
    SKIPPED = "skipped"

    @property
    def is_failure(self) -> bool:
        return self not in (Outcome.PASS, Outcome.SKIPPED)


@dataclass
class Verdict:
    """Outcome of one directive plus everything needed to diagnose it."""

    outcome: Outcome
    path: str
    line: int
    kind: str
    sql: str
    reason: str = ""
    expected: list[str] = field(default_factory=list)
    actual: list[str] = field(default_factory=list)

    @classmethod
    def for_case(cls, path: str, case: Case, outcome: Outcome, **kwargs: Any) -> Verdict:
        """Create a verdict located at *case* in the script at *path*."""
        return cls(outcome=outcome, path=path, line=case.line, kind=case.kind, sql=case.sql, **kwargs)

    @property
    def location(self) -> str:
        return f"{self.path}:{self.line}"

    @property
    def passed(self) -> bool:
        return self.outcome is Outcome.PASS

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "outcome": self.outcome.value,
            "path": self.path,
            "line": self.line,
            "kind": self.kind,
            "sql": self.sql,
            "reason": self.reason,
            "expected": list(self.expected),
            "actual": list(self.actual),
        }
