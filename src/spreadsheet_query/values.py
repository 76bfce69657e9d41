"""Coercion helpers shared by the type inferencer, clause parser and executors."""

from __future__ import annotations

import math
import re

from spreadsheet_query.models import CellValue

_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")

Number = int | float


def is_blank(value: CellValue) -> bool:
    """True for missing cells and empty strings."""
    return value is None or value == ""


def to_number(value: CellValue) -> Number | None:
    """Coerce a cell value to a finite number, or return None.

    Integers stay integers so that sums over integer columns remain exact.
    Booleans are never treated as numbers.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    text = str(value).strip()
    if _INTEGER_RE.match(text):
        return int(text)
    if _DECIMAL_RE.match(text):
        number = float(text)
        return number if math.isfinite(number) else None
    return None


def as_text(value: CellValue) -> str:
    """Render a cell value the way it is displayed and matched.

    Missing values render as an empty string, booleans as ``true``/``false``
    and integral floats without a trailing ``.0``.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def contains_text(value: CellValue, needle: str) -> bool:
    """Case-insensitive substring test against the displayed value."""
    return needle.lower() in as_text(value).lower()


def format_fixed(number: Number) -> str:
    """Format a statistic with two decimals, e.g. ``400.00``."""
    return f"{number:.2f}"
