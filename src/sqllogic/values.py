"""Tagged values and their canonical string forms.

Backends return loosely-typed Python objects. Every object is first tagged
with a ``ValueKind`` and then rendered through a single canonicalization
function per kind, so that all comparison logic sees one textual form:

- NULL renders as ``NULL`` and the empty string as ``(empty)``.
- Dates render as ``YYYY-MM-DD``.
- Times render as ``HH:MM:SS``, with a fractional part only when the value
  carries one (trailing zeros dropped).
- Timestamps render as ``YYYY-MM-DD HH:MM:SS``; timezone-aware timestamps
  append their ``+HH:MM`` offset.

Rendering is idempotent: rendering the text form of a value as text yields
the same string, which is what makes a temporal value cast to a character
type compare equal to the temporal value itself.
"""

from __future__ import annotations

import datetime
import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Sequence

from sqllogic.model import ColumnType

NULL_TOKEN = "NULL"
EMPTY_TOKEN = "(empty)"


class ValueKind(Enum):
    """Kinds of values a backend can return."""

    NULL = "null"
    INTEGER = "integer"
    REAL = "real"
    BOOLEAN = "boolean"
    TEXT = "text"
    DATE = "date"
    TIME = "time"
    TIMESTAMP = "timestamp"

    @property
    def is_numeric(self) -> bool:
        return self in (ValueKind.INTEGER, ValueKind.REAL, ValueKind.BOOLEAN)

    @property
    def is_temporal(self) -> bool:
        return self in (ValueKind.DATE, ValueKind.TIME, ValueKind.TIMESTAMP)


@dataclass(frozen=True)
class Value:
    """A backend value tagged with its kind."""

    kind: ValueKind
    payload: Any = None

    @property
    def is_null(self) -> bool:
        return self.kind is ValueKind.NULL


NULL = Value(ValueKind.NULL)


def tag(obj: Any) -> Value:
    """Classify a Python object returned by a backend."""
    if obj is None:
        return NULL
    if isinstance(obj, Value):
        return obj
    # bool before int, datetime before date: both are subclasses
    if isinstance(obj, bool):
        return Value(ValueKind.BOOLEAN, obj)
    if isinstance(obj, int):
        return Value(ValueKind.INTEGER, obj)
    if isinstance(obj, (float, Decimal)):
        return Value(ValueKind.REAL, obj)
    if isinstance(obj, datetime.datetime):
        return Value(ValueKind.TIMESTAMP, obj)
    if isinstance(obj, datetime.date):
        return Value(ValueKind.DATE, obj)
    if isinstance(obj, datetime.time):
        return Value(ValueKind.TIME, obj)
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return Value(ValueKind.TEXT, bytes(obj).decode("utf-8", errors="replace"))
    return Value(ValueKind.TEXT, str(obj))


# ---------------------------------------------------------------------------
# Temporal formatting
# ---------------------------------------------------------------------------


def _format_fraction(microsecond: int) -> str:
    if not microsecond:
        return ""
    return "." + f"{microsecond:06d}".rstrip("0")


def _format_offset(offset: datetime.timedelta | None) -> str:
    if offset is None:
        return ""
    total = int(offset.total_seconds())
    sign = "-" if total < 0 else "+"
    hours, rest = divmod(abs(total), 3600)
    return f"{sign}{hours:02d}:{rest // 60:02d}"


def format_date(value: datetime.date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def format_time(value: datetime.time) -> str:
    text = f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    return text + _format_fraction(value.microsecond) + _format_offset(value.utcoffset())


def format_timestamp(value: datetime.datetime) -> str:
    """Render a timestamp as ``YYYY-MM-DD HH:MM:SS[.ffffff][+HH:MM]``."""
    text = f"{format_date(value)} {value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    return text + _format_fraction(value.microsecond) + _format_offset(value.utcoffset())


def _is_finite(value: Any) -> bool:
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, Decimal):
        return value.is_finite()
    return True


def _format_real(value: float | Decimal) -> str:
    if isinstance(value, float) and math.isnan(value):
        return "NaN"
    if isinstance(value, float) and math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ---------------------------------------------------------------------------
# Canonicalization per column type
# ---------------------------------------------------------------------------


def text_form(value: Value) -> str:
    """Canonical text form of a tagged value."""
    kind = value.kind
    if kind is ValueKind.NULL:
        return NULL_TOKEN
    if kind is ValueKind.TEXT:
        return value.payload if value.payload != "" else EMPTY_TOKEN
    if kind is ValueKind.BOOLEAN:
        return "true" if value.payload else "false"
    if kind is ValueKind.INTEGER:
        return str(value.payload)
    if kind is ValueKind.REAL:
        return _format_real(value.payload)
    if kind is ValueKind.DATE:
        return format_date(value.payload)
    if kind is ValueKind.TIME:
        return format_time(value.payload)
    return format_timestamp(value.payload)


def _integer_form(value: Value) -> str:
    kind = value.kind
    if kind is ValueKind.BOOLEAN:
        return "1" if value.payload else "0"
    if kind is ValueKind.INTEGER:
        return str(value.payload)
    if kind is ValueKind.REAL:
        payload = value.payload
        if not _is_finite(payload):
            return _format_real(payload)
        return str(int(payload))
    if kind is ValueKind.TEXT:
        text = value.payload.strip()
        try:
            return str(int(text))
        except ValueError:
            pass
        try:
            return str(int(float(text)))
        except (ValueError, OverflowError):
            return text_form(value)
    return text_form(value)


def _real_form(value: Value) -> str:
    kind = value.kind
    if kind.is_numeric:
        payload = value.payload
        if not _is_finite(payload):
            return _format_real(payload)
        return f"{float(payload):.3f}"
    if kind is ValueKind.TEXT:
        try:
            number = float(value.payload)
        except ValueError:
            return text_form(value)
        if math.isfinite(number):
            return f"{number:.3f}"
    return text_form(value)


_TRUE_WORDS = frozenset(("true", "t", "1", "yes"))
_FALSE_WORDS = frozenset(("false", "f", "0", "no"))


def _boolean_form(value: Value) -> str:
    kind = value.kind
    if kind.is_numeric:
        return "true" if value.payload else "false"
    if kind is ValueKind.TEXT:
        word = value.payload.strip().lower()
        if word in _TRUE_WORDS:
            return "true"
        if word in _FALSE_WORDS:
            return "false"
    return text_form(value)


def canonical(obj: Any, column_type: ColumnType = ColumnType.TEXT) -> str:
    """Render a backend value in its canonical form for *column_type*.

    NULL renders as ``NULL`` under every column type.
    """
    value = tag(obj)
    if value.is_null:
        return NULL_TOKEN
    if column_type is ColumnType.INTEGER:
        return _integer_form(value)
    if column_type is ColumnType.REAL:
        return _real_form(value)
    if column_type is ColumnType.BOOLEAN:
        return _boolean_form(value)
    return text_form(value)


def render_row(row: Sequence[Any], column_types: Sequence[ColumnType]) -> list[str]:
    """Render one result row; columns beyond the signature render as text."""
    rendered = []
    for i, obj in enumerate(row):
        column_type = column_types[i] if i < len(column_types) else ColumnType.TEXT
        rendered.append(canonical(obj, column_type))
    return rendered
