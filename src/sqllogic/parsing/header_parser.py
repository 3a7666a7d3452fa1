"""Parser for directive header lines."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import ply.yacc as yacc

from sqllogic.model import Expect, SortMode
from sqllogic.parsing.header_lexer import HeaderLexer


@dataclass
class HeaderSpec:
    """Parsed form of one header line before its block is read."""

    marker: str  # statement, query, halt, skipif, onlyif
    expect: Expect | None = None
    signature: str | None = None
    sort_mode: SortMode = SortMode.NOSORT
    hint: str | None = None
    engine: str | None = None


class HeaderParser:
    """Parser for ``statement``/``query``/``halt``/``skipif``/``onlyif`` lines."""

    tokens = HeaderLexer.tokens
    start = "header"

    def __init__(self) -> None:
        self.lexer = HeaderLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_header(self, p: yacc.YaccProduction) -> None:
        """header : statement_header
                  | query_header
                  | condition_header
                  | halt_header"""
        p[0] = p[1]

    def p_statement_ok(self, p: yacc.YaccProduction) -> None:
        """statement_header : STATEMENT OK"""
        p[0] = HeaderSpec(marker="statement", expect=Expect.OK)

    def p_statement_error(self, p: yacc.YaccProduction) -> None:
        """statement_header : STATEMENT ERROR"""
        p[0] = HeaderSpec(marker="statement", expect=Expect.ERROR)

    def p_statement_error_hint(self, p: yacc.YaccProduction) -> None:
        """statement_header : STATEMENT ERROR MESSAGE"""
        p[0] = HeaderSpec(marker="statement", expect=Expect.ERROR, hint=p[3])

    def p_query_bare(self, p: yacc.YaccProduction) -> None:
        """query_header : QUERY"""
        p[0] = HeaderSpec(marker="query", signature="")

    def p_query_signature(self, p: yacc.YaccProduction) -> None:
        """query_header : QUERY WORD"""
        p[0] = HeaderSpec(marker="query", signature=p[2])

    def p_query_signature_sorted(self, p: yacc.YaccProduction) -> None:
        """query_header : QUERY WORD sort_mode"""
        p[0] = HeaderSpec(marker="query", signature=p[2], sort_mode=p[3])

    def p_query_error(self, p: yacc.YaccProduction) -> None:
        """query_header : QUERY ERROR"""
        p[0] = HeaderSpec(marker="query", expect=Expect.ERROR)

    def p_query_error_hint(self, p: yacc.YaccProduction) -> None:
        """query_header : QUERY ERROR MESSAGE"""
        p[0] = HeaderSpec(marker="query", expect=Expect.ERROR, hint=p[3])

    def p_sort_mode(self, p: yacc.YaccProduction) -> None:
        """sort_mode : NOSORT
                     | ROWSORT
                     | VALUESORT"""
        p[0] = SortMode(p[1])

    def p_condition_header(self, p: yacc.YaccProduction) -> None:
        """condition_header : SKIPIF WORD
                            | ONLYIF WORD"""
        p[0] = HeaderSpec(marker=p[1], engine=p[2])

    def p_halt_header(self, p: yacc.YaccProduction) -> None:
        """halt_header : HALT"""
        p[0] = HeaderSpec(marker="halt")

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (position {p.lexpos})")
        else:
            raise SyntaxError("Syntax error at end of line")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, **kwargs)

    def parse(self, data: str) -> HeaderSpec:
        """Parse one header line."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)
        self.lexer.input("")
        header = self.parser.parse(data, lexer=self.lexer.lexer)
        if header is None:
            raise SyntaxError("Empty directive header")
        return header
