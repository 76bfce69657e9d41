"""Dense, read-only snapshot of a sparse cell map."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from spreadsheet_query.models import CellValue, ColumnType

Row = tuple[CellValue, ...]


@dataclass(frozen=True)
class MaterializedGrid:
    """A dense row/column matrix derived from one cell map.

    Row 0 of ``matrix`` is the header row. ``headers`` holds the lower-cased
    column names (``column_N`` for blank header cells) and ``column_types``
    holds one inferred type per column index. Executors treat the snapshot
    as immutable and build new output structures from it.
    """

    headers: tuple[str, ...] = ()
    matrix: tuple[Row, ...] = ()
    column_types: tuple[ColumnType, ...] = ()

    @property
    def is_empty(self) -> bool:
        """True when the source cell map had no cells at all."""
        return not self.matrix

    @property
    def data_rows(self) -> tuple[Row, ...]:
        """All rows below the header row."""
        return self.matrix[1:]

    @property
    def row_count(self) -> int:
        """Number of data rows."""
        return max(len(self.matrix) - 1, 0)

    def column_index(self, header: str) -> int:
        """Index of the first column named ``header``, or -1."""
        try:
            return self.headers.index(header)
        except ValueError:
            return -1

    def type_of(self, index: int) -> ColumnType:
        """Inferred type of the column at ``index``."""
        if 0 <= index < len(self.column_types):
            return self.column_types[index]
        return ColumnType.TEXT

    def columns_of_type(self, column_type: ColumnType) -> list[str]:
        """Distinct header names whose column has the given type, in column order."""
        names: list[str] = []
        for header, inferred in zip(self.headers, self.column_types, strict=False):
            if inferred is column_type and header not in names:
                names.append(header)
        return names

    def columns_not_of_type(self, column_type: ColumnType) -> list[str]:
        """Distinct header names whose column type differs from ``column_type``."""
        names: list[str] = []
        for header, inferred in zip(self.headers, self.column_types, strict=False):
            if inferred is not column_type and header not in names:
                names.append(header)
        return names

    def record(self, row: Sequence[CellValue]) -> dict[str, Any]:
        """Convert a matrix row into a header-keyed row object."""
        return {header: row[index] for index, header in enumerate(self.headers)}

    def records(self, rows: Sequence[Sequence[CellValue]]) -> list[dict[str, Any]]:
        """Convert several matrix rows into row objects."""
        return [self.record(row) for row in rows]
