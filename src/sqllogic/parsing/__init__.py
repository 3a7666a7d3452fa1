"""Parsing module for SQL logic test scripts."""

from sqllogic.parsing.header_parser import HeaderParser, HeaderSpec
from sqllogic.parsing.script_parser import (
    ParseError,
    ScriptParser,
    parse_file,
    parse_script,
)

__all__ = [
    "HeaderParser",
    "HeaderSpec",
    "ParseError",
    "ScriptParser",
    "parse_file",
    "parse_script",
]
