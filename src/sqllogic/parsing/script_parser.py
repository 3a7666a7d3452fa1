"""Parser for SQL logic test scripts.

A script is a sequence of blank-line separated records::

    # comment
    statement ok
    CREATE TABLE t(v1 INT)

    query I rowsort
    SELECT v1 FROM t
    ----
    1
    2

Header lines are handled by ``HeaderParser``; this module splits the script
into records, reads SQL bodies and expected-output blocks, and assembles the
directive model.
"""

from __future__ import annotations

import logging
from pathlib import Path

from sqllogic.model import (
    ColumnType,
    Comment,
    Condition,
    Directive,
    Expect,
    HaltDirective,
    QueryDirective,
    SortMode,
    StatementDirective,
    TestScript,
)
from sqllogic.parsing.header_lexer import MARKER_KEYWORDS
from sqllogic.parsing.header_parser import HeaderParser, HeaderSpec

logger = logging.getLogger(__name__)

# Separates a query's SQL from its expected output
SEPARATOR = "----"


class ParseError(SyntaxError):
    """A malformed test script.

    Carries the 1-based line number and the script path so that the file can
    be reported and skipped.
    """

    def __init__(self, message: str, lineno: int, path: str = "<string>") -> None:
        super().__init__(f"{path}:{lineno}: {message}")
        self.message = message
        self.lineno = lineno
        self.path = path

    def __str__(self) -> str:
        return f"{self.path}:{self.lineno}: {self.message}"


def _is_blank(line: str) -> bool:
    return not line.strip()


def _is_comment(line: str) -> bool:
    return line.lstrip().startswith("#")


def _is_separator(line: str) -> bool:
    return line.strip() == SEPARATOR


def _is_marker(line: str) -> bool:
    return line.split()[0] in MARKER_KEYWORDS


class ScriptParser:
    """Parser that turns script text into a ``TestScript``."""

    def __init__(self) -> None:
        self._header_parser = HeaderParser()
        self._lines: list[str] = []
        self._pos = 0
        self._path = "<string>"

    def parse(self, text: str, path: str = "<string>") -> TestScript:
        """Parse script text.

        Args:
            text: The full script source.
            path: Source path used for error messages and reports.

        Returns:
            The parsed, immutable TestScript.

        Raises:
            ParseError: If the script is malformed.
        """
        self._lines = text.splitlines()
        self._pos = 0
        self._path = path

        directives: list[Directive] = []
        conditions: list[Condition] = []
        condition_line = 0

        while self._pos < len(self._lines):
            line = self._lines[self._pos]
            lineno = self._pos + 1

            if _is_blank(line):
                if conditions:
                    raise self._error("Condition is not followed by a statement or query", condition_line)
                self._pos += 1
                continue

            if _is_comment(line):
                directives.append(Comment(line=lineno, text=line.lstrip()[1:].strip()))
                self._pos += 1
                continue

            if _is_separator(line):
                raise self._error("Result separator '----' without a preceding query", lineno)

            header = self._parse_header(line, lineno)
            self._pos += 1

            if header.marker in ("skipif", "onlyif"):
                conditions.append(Condition(kind=header.marker, engine=header.engine or ""))
                condition_line = condition_line or lineno
                continue

            if header.marker == "halt":
                directives.append(HaltDirective(line=lineno, conditions=tuple(conditions)))
            elif header.marker == "statement" or header.expect is Expect.ERROR:
                directives.append(self._read_statement(header, lineno, tuple(conditions)))
            else:
                directives.append(self._read_query(header, lineno, tuple(conditions)))
            conditions = []
            condition_line = 0

        if conditions:
            raise self._error("Condition is not followed by a statement or query", condition_line)

        script = TestScript(path=path, directives=tuple(directives))
        logger.debug("Parsed %s: %d directives", path, len(script))
        return script

    def parse_file(self, path: Path | str) -> TestScript:
        """Read and parse the script at *path*."""
        path = Path(path)
        return self.parse(path.read_text(encoding="utf-8"), str(path))

    def _error(self, message: str, lineno: int) -> ParseError:
        return ParseError(message, lineno, self._path)

    def _parse_header(self, line: str, lineno: int) -> HeaderSpec:
        words = line.split()
        if not _is_marker(line):
            raise self._error(f"Unknown directive '{words[0]}'", lineno)
        try:
            return self._header_parser.parse(line.strip())
        except SyntaxError as e:
            raise self._error(str(e), lineno) from e

    def _read_sql(self, lineno: int, stop_at_separator: bool) -> tuple[str, bool]:
        """Read SQL lines up to a blank line, the next header, EOF or ``----``.

        Returns the SQL text and whether a separator terminated it.
        """
        sql_lines: list[str] = []
        saw_separator = False
        while self._pos < len(self._lines):
            line = self._lines[self._pos]
            if _is_blank(line) or _is_marker(line):
                break
            self._pos += 1
            if _is_comment(line):
                continue
            if _is_separator(line):
                if not stop_at_separator:
                    raise self._error("Result separator '----' without a preceding query", self._pos)
                saw_separator = True
                break
            sql_lines.append(line.rstrip())
        if not sql_lines:
            raise self._error("Directive is not followed by any SQL", lineno)
        return "\n".join(sql_lines), saw_separator

    def _read_statement(
        self, header: HeaderSpec, lineno: int, conditions: tuple[Condition, ...]
    ) -> StatementDirective:
        sql, _ = self._read_sql(lineno, stop_at_separator=False)
        return StatementDirective(
            line=lineno,
            sql=sql,
            expect=header.expect or Expect.OK,
            error_hint=header.hint,
            conditions=conditions,
            marker=header.marker,
        )

    def _read_query(
        self, header: HeaderSpec, lineno: int, conditions: tuple[Condition, ...]
    ) -> QueryDirective:
        try:
            column_types = ColumnType.from_signature(header.signature or "")
        except ValueError as e:
            raise self._error(str(e), lineno) from e

        sql, saw_separator = self._read_sql(lineno, stop_at_separator=True)

        rows: list[tuple[str, ...]] = []
        if saw_separator:
            while self._pos < len(self._lines):
                line = self._lines[self._pos]
                if _is_blank(line):
                    break
                self._pos += 1
                if _is_comment(line):
                    continue
                row = tuple(line.strip().split(" "))
                # valuesort blocks may list one value per line
                if header.sort_mode is not SortMode.VALUESORT and len(row) < len(column_types):
                    raise self._error(
                        f"Expected {len(column_types)} columns but row has {len(row)}",
                        self._pos,
                    )
                rows.append(row)

        return QueryDirective(
            line=lineno,
            sql=sql,
            column_types=column_types,
            expected_rows=tuple(rows),
            sort_mode=header.sort_mode,
            conditions=conditions,
        )


def parse_script(text: str, path: str = "<string>") -> TestScript:
    """Parse script text into a TestScript."""
    return ScriptParser().parse(text, path)


def parse_file(path: Path | str) -> TestScript:
    """Read and parse the script at *path*."""
    return ScriptParser().parse_file(path)
