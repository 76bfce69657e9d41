"""Conversion of a sparse cell map into a dense, typed grid snapshot.

The matrix is sized to the largest row and column observed in the map.
Missing cells are ``None``. Row 0 is the header row: header labels are
lower-cased and blank header cells are named ``column_<n>``. Formula cells
are evaluated first; a formula that cannot be evaluated is replaced by its
raw formula text, even when the cell also carries a cached value.

Two entry points produce identical grids:
- ``materialize`` runs in one pass.
- ``materialize_async`` writes cells in fixed-size chunks and yields to the
  event loop between chunks, for large sheets served from async code.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping

from spreadsheet_query.config import Settings, settings
from spreadsheet_query.grid import MaterializedGrid
from spreadsheet_query.models import Cell, CellValue
from spreadsheet_query.services.formula_evaluator import FormulaEvaluator
from spreadsheet_query.services.type_inferencer import ColumnTypeInferencer
from spreadsheet_query.utils.exceptions import FormulaEvaluationError
from spreadsheet_query.utils.logging import (
    ProgressTracker,
    get_logger,
    timed_operation,
)
from spreadsheet_query.values import as_text

logger = get_logger(__name__)


class GridMaterializer:
    """Build :class:`MaterializedGrid` snapshots from cell maps."""

    def __init__(
        self,
        inferencer: ColumnTypeInferencer | None = None,
        config: Settings | None = None,
    ) -> None:
        """Initialize the materializer.

        Args:
            inferencer: Column type inferencer. Built from settings if omitted.
            config: Settings to use. Defaults to the global settings.
        """
        self._settings = config or settings
        self._inferencer = inferencer or ColumnTypeInferencer(
            threshold=self._settings.type_threshold
        )

    def materialize(self, cells: Mapping[str, Cell]) -> MaterializedGrid:
        """Materialize a cell map in a single pass.

        Args:
            cells: Sparse coordinate-keyed cell map.

        Returns:
            The grid snapshot; an empty grid for an empty map.
        """
        if not cells:
            return MaterializedGrid()

        with timed_operation(logger, "materialize") as metrics:
            matrix = self._allocate(cells.values())
            evaluator = FormulaEvaluator(cells)
            for key, cell in cells.items():
                matrix[cell.row - 1][cell.col - 1] = self._resolve(key, cell, evaluator)
            grid = self._finish(matrix)
            metrics.cells_processed = len(cells)
            metrics.rows_processed = grid.row_count
        return grid

    async def materialize_async(
        self,
        cells: Mapping[str, Cell],
        chunk_size: int | None = None,
    ) -> MaterializedGrid:
        """Materialize a cell map in chunks, yielding between chunks.

        Args:
            cells: Sparse coordinate-keyed cell map.
            chunk_size: Cells written per chunk. Defaults to the configured
                ``materialize_chunk_size``.

        Returns:
            A grid identical to ``materialize(cells)``.
        """
        if not cells:
            return MaterializedGrid()

        size = chunk_size or self._settings.materialize_chunk_size
        items = list(cells.items())
        total_chunks = (len(items) + size - 1) // size

        with timed_operation(logger, "materialize_async") as metrics:
            matrix = self._allocate(cells.values())
            evaluator = FormulaEvaluator(cells)
            tracker = ProgressTracker(logger, "Materializing cells", total=len(items))

            for start in range(0, len(items), size):
                chunk = items[start : start + size]
                for key, cell in chunk:
                    matrix[cell.row - 1][cell.col - 1] = self._resolve(
                        key, cell, evaluator
                    )
                tracker.update(len(chunk))
                await asyncio.sleep(0)

            tracker.complete()
            grid = self._finish(matrix)
            metrics.cells_processed = len(items)
            metrics.rows_processed = grid.row_count
            metrics.chunks = total_chunks
        return grid

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _allocate(cells: Iterable[Cell]) -> list[list[CellValue]]:
        cell_list = list(cells)
        max_row = max(cell.row for cell in cell_list)
        max_col = max(cell.col for cell in cell_list)
        return [[None] * max_col for _ in range(max_row)]

    @staticmethod
    def _resolve(key: str, cell: Cell, evaluator: FormulaEvaluator) -> CellValue:
        if not cell.formula:
            return cell.value
        try:
            return evaluator.evaluate_cell(cell)
        except FormulaEvaluationError as e:
            logger.debug(
                "Formula evaluation failed, keeping formula text",
                cell=key,
                error_code=e.error_code.value,
                reason=e.message,
            )
            return cell.formula

    def _finish(self, matrix: list[list[CellValue]]) -> MaterializedGrid:
        headers = tuple(
            self._header_label(value, index) for index, value in enumerate(matrix[0])
        )
        rows = tuple(tuple(row) for row in matrix)
        column_types = self._inferencer.infer(rows[1:], len(headers))
        return MaterializedGrid(headers=headers, matrix=rows, column_types=column_types)

    @staticmethod
    def _header_label(value: CellValue, index: int) -> str:
        label = as_text(value).strip().lower()
        return label or f"column_{index + 1}"
