"""SQL logic test language server: diagnostics, completion, hover via pygls."""

from __future__ import annotations

from lsprotocol import types
from pygls.lsp.server import LanguageServer

from sqllogic.parsing import ParseError, parse_script

# ---------------------------------------------------------------------------
# Static data
# ---------------------------------------------------------------------------

MARKERS: dict[str, str] = {
    "statement ok": "Run SQL that must succeed",
    "statement error": "Run SQL that must fail (optional message substring follows)",
    "query": "Run a query and compare its rows (type signature follows)",
    "query error": "Run a query that must fail",
    "halt": "Stop executing the rest of the script",
    "skipif": "Skip the next record on the named engine",
    "onlyif": "Run the next record only on the named engine",
}

KEYWORDS: dict[str, str] = {
    "statement": "Statement record: `statement ok` or `statement error`",
    "query": "Query record: `query <types> [nosort|rowsort|valuesort]`",
    "ok": "The statement must succeed",
    "error": "The statement must fail",
    "halt": "Stop executing the rest of the script",
    "skipif": "Skip the next record on the named engine",
    "onlyif": "Run the next record only on the named engine",
    "nosort": "Compare rows in the order returned (default)",
    "rowsort": "Sort rows before comparing",
    "valuesort": "Sort all values individually before comparing",
}

COLUMN_TYPES: dict[str, str] = {
    "I": "Integer column",
    "T": "Text column (dates, times and timestamps in canonical form)",
    "R": "Real column (three decimal places)",
    "B": "Boolean column (true/false)",
}

SORT_MODES = ("nosort", "rowsort", "valuesort")

# ---------------------------------------------------------------------------
# Helpers (module-level so they are easy to unit-test)
# ---------------------------------------------------------------------------


def parse_diagnostics(source: str) -> list[types.Diagnostic]:
    """Return diagnostics for *source*; empty when it parses cleanly."""
    try:
        parse_script(source)
    except ParseError as exc:
        lines = source.split("\n")
        line = min(max(exc.lineno - 1, 0), max(len(lines) - 1, 0))
        length = len(lines[line]) if lines else 0
        return [
            types.Diagnostic(
                range=types.Range(
                    start=types.Position(line=line, character=0),
                    end=types.Position(line=line, character=max(length, 1)),
                ),
                severity=types.DiagnosticSeverity.Error,
                source="sqllogic",
                message=exc.message,
            )
        ]
    return []


def _word_at_position(line_text: str, character: int) -> str:
    """Return the contiguous identifier-like word surrounding *character*."""
    if character < 0 or character >= len(line_text):
        return ""
    ch = line_text[character]
    if not (ch.isalnum() or ch == "_"):
        return ""
    # Scan left
    left = character
    while left > 0 and (line_text[left - 1].isalnum() or line_text[left - 1] == "_"):
        left -= 1
    # Scan right
    right = character
    while right < len(line_text) and (line_text[right].isalnum() or line_text[right] == "_"):
        right += 1
    return line_text[left:right]


def completion_items(prefix: str) -> list[types.CompletionItem]:
    """Completion items for the text before the cursor on a line."""
    words = prefix.split()
    if not words or (len(words) == 1 and not prefix.endswith(" ")):
        return [
            types.CompletionItem(label=label, kind=types.CompletionItemKind.Keyword, detail=desc)
            for label, desc in MARKERS.items()
        ]
    if words[0] == "query" and len(words) == 2 and prefix.endswith(" "):
        return [
            types.CompletionItem(label=mode, kind=types.CompletionItemKind.EnumMember, detail=KEYWORDS[mode])
            for mode in SORT_MODES
        ]
    return []


def hover_text(line_text: str, character: int) -> str | None:
    """Markdown hover content for the word at *character*, if any."""
    word = _word_at_position(line_text, character)
    if not word:
        return None
    words = line_text.split()
    if len(words) >= 2 and words[0] == "query" and word == words[1] and word != "error":
        described = [f"`{ch}` {COLUMN_TYPES.get(ch, 'unknown type')}" for ch in word]
        return f"**{len(word)} column{'s' if len(word) != 1 else ''}**: " + ", ".join(described)
    if word in KEYWORDS:
        return f"**{word}**: {KEYWORDS[word]}"
    return None


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------

server = LanguageServer("sqllogic-language-server", "0.1.0")


@server.feature(types.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: types.DidOpenTextDocumentParams) -> None:
    _validate_document(params.text_document.uri)


@server.feature(types.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: types.DidChangeTextDocumentParams) -> None:
    _validate_document(params.text_document.uri)


def _validate_document(uri: str) -> None:
    doc = server.workspace.get_text_document(uri)
    server.text_document_publish_diagnostics(
        types.PublishDiagnosticsParams(uri=uri, diagnostics=parse_diagnostics(doc.source))
    )


@server.feature(
    types.TEXT_DOCUMENT_COMPLETION,
    types.CompletionOptions(trigger_characters=[" "]),
)
def completions(params: types.CompletionParams) -> types.CompletionList:
    doc = server.workspace.get_text_document(params.text_document.uri)
    line_text = doc.lines[params.position.line] if params.position.line < len(doc.lines) else ""
    prefix = line_text[: params.position.character]
    return types.CompletionList(is_incomplete=False, items=completion_items(prefix))


@server.feature(types.TEXT_DOCUMENT_HOVER)
def hover(params: types.HoverParams) -> types.Hover | None:
    doc = server.workspace.get_text_document(params.text_document.uri)
    if params.position.line >= len(doc.lines):
        return None
    content = hover_text(doc.lines[params.position.line].rstrip("\n"), params.position.character)
    if content is None:
        return None
    return types.Hover(
        contents=types.MarkupContent(
            kind=types.MarkupKind.Markdown,
            value=content,
        )
    )


def main() -> None:
    server.start_io()


if __name__ == "__main__":
    main()
