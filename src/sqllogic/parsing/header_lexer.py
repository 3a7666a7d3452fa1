"""Lexer for directive header lines in SQL logic test scripts."""

import ply.lex as lex


class HeaderLexer:
    """Lexer for tokenizing a single directive header line."""

    # Reserved keywords
    reserved = {
        "statement": "STATEMENT",
        "query": "QUERY",
        "ok": "OK",
        "error": "ERROR",
        "halt": "HALT",
        "skipif": "SKIPIF",
        "onlyif": "ONLYIF",
        "nosort": "NOSORT",
        "rowsort": "ROWSORT",
        "valuesort": "VALUESORT",
    }

    # Token list
    tokens = [
        "WORD",
        "MESSAGE",
    ] + list(reserved.values())

    # Lexer states: free-text hint state after the ERROR keyword
    states = (("hint", "exclusive"),)

    t_ignore = " \t"

    def __init__(self) -> None:
        self.lexer: lex.LexToken = None  # type: ignore

    def t_WORD(self, t: lex.LexToken) -> lex.LexToken:
        r"[A-Za-z_][A-Za-z0-9_.\-]*"
        t.type = self.reserved.get(t.value, "WORD")
        if t.type == "ERROR":
            t.lexer.begin("hint")
        return t

    def t_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_error(self, t: lex.LexToken) -> None:
        raise SyntaxError(f"Illegal character '{t.value[0]}' at position {t.lexpos}")

    # --- Exclusive hint state tokens ---

    t_hint_ignore = " \t"

    def t_hint_MESSAGE(self, t: lex.LexToken) -> lex.LexToken:
        r"[^\s][^\n]*"
        t.value = t.value.rstrip()
        t.lexer.begin("INITIAL")
        return t

    def t_hint_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_hint_error(self, t: lex.LexToken) -> None:
        t.lexer.begin("INITIAL")
        raise SyntaxError(f"Illegal character '{t.value[0]}' at position {t.lexpos}")

    # --- Lexer methods ---

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Set the input string to tokenize."""
        self.lexer.begin("INITIAL")
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens


# Module-level set of marker keywords for use by other modules
MARKER_KEYWORDS: frozenset[str] = frozenset(
    ("statement", "query", "halt", "skipif", "onlyif")
)
