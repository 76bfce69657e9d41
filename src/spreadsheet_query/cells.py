"""A1-style coordinate helpers for sparse cell maps."""

from __future__ import annotations

import re

from spreadsheet_query.models import Cell, CellMap, CellValue

_COORDINATE_RE = re.compile(r"^\$?([A-Za-z]{1,3})\$?(\d+)$")


def column_letter(col: int) -> str:
    """Convert a 1-based column index to spreadsheet letters (1 -> "A", 27 -> "AA")."""
    if col < 1:
        raise ValueError(f"Column index must be >= 1, got {col}")
    letters = ""
    while col > 0:
        col, remainder = divmod(col - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def column_index(letters: str) -> int:
    """Convert spreadsheet column letters to a 1-based index ("AA" -> 27)."""
    if not letters or not letters.isalpha():
        raise ValueError(f"Invalid column letters: {letters!r}")
    index = 0
    for char in letters.upper():
        index = index * 26 + (ord(char) - ord("A") + 1)
    return index


def cell_key(row: int, col: int) -> str:
    """Build the coordinate key for a cell, e.g. ``cell_key(2, 3) == "C2"``."""
    return f"{column_letter(col)}{row}"


def parse_coordinate(key: str) -> tuple[int, int]:
    """Parse an A1 reference (absolute markers allowed) into ``(row, col)``.

    Raises:
        ValueError: If the key is not a valid A1 reference.
    """
    match = _COORDINATE_RE.match(key.strip())
    if not match:
        raise ValueError(f"Invalid cell coordinate: {key!r}")
    row = int(match.group(2))
    if row < 1:
        raise ValueError(f"Invalid cell coordinate: {key!r}")
    return row, column_index(match.group(1))


def build_cell_map(rows: list[list[CellValue]]) -> CellMap:
    """Build a sparse cell map from a row-major list of values.

    ``None`` and empty-string values are omitted; strings starting with
    ``=`` are stored as formulas.
    """
    cells: CellMap = {}
    for r, row in enumerate(rows, start=1):
        for c, value in enumerate(row, start=1):
            if value is None or value == "":
                continue
            if isinstance(value, str) and value.startswith("="):
                cells[cell_key(r, c)] = Cell(row=r, col=c, formula=value)
            else:
                cells[cell_key(r, c)] = Cell(row=r, col=c, value=value)
    return cells
