"""Loading of XLSX and CSV files into sparse cell maps.

XLSX workbooks are read with openpyxl twice: once to capture formulas and
once for the values Excel cached when the file was saved. Formula cells keep
their formula text in ``Cell.formula`` and their cached value, if any, in
``Cell.value``. CSV files are read with pandas as text and numeric strings
are converted to numbers. Empty cells are omitted from the map.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl import load_workbook
from openpyxl.worksheet.worksheet import Worksheet as OpenpyxlWorksheet

from spreadsheet_query.cells import cell_key
from spreadsheet_query.models import Cell, CellMap, CellValue, Workbook, Worksheet
from spreadsheet_query.utils.exceptions import (
    UnsupportedFormatError,
    WorksheetNotFoundError,
)
from spreadsheet_query.utils.logging import get_logger
from spreadsheet_query.values import to_number

logger = get_logger(__name__)

XLSX_EXTENSIONS = frozenset({".xlsx", ".xlsm"})
CSV_EXTENSIONS = frozenset({".csv"})
SUPPORTED_EXTENSIONS = XLSX_EXTENSIONS | CSV_EXTENSIONS

Source = Path | io.BytesIO


@dataclass
class WorkbookLoadOptions:
    """Options controlling workbook loading."""

    sheet_name: str | None = None
    max_rows: int | None = None
    max_columns: int | None = None


class WorkbookLoader:
    """Convert spreadsheet files into :class:`Workbook` models."""

    def load_path(
        self, file_path: Path, options: WorkbookLoadOptions | None = None
    ) -> Workbook:
        """Load a workbook from disk.

        Raises:
            FileNotFoundError: If the file does not exist.
            UnsupportedFormatError: If the extension is not XLSX or CSV.
            WorksheetNotFoundError: If ``options.sheet_name`` is not in the file.
        """
        if not file_path.exists():
            raise FileNotFoundError(f"Spreadsheet file not found: {file_path}")
        return self._load(file_path, file_path.name, options or WorkbookLoadOptions())

    def load_bytes(
        self,
        content: bytes,
        filename: str,
        options: WorkbookLoadOptions | None = None,
    ) -> Workbook:
        """Load a workbook from uploaded bytes; the filename selects the format."""
        return self._load(
            io.BytesIO(content), filename, options or WorkbookLoadOptions()
        )

    def get_sheet_names(self, file_path: Path) -> list[str]:
        """List all sheet names in a workbook (a CSV file has one sheet)."""
        if not file_path.exists():
            raise FileNotFoundError(f"Spreadsheet file not found: {file_path}")
        extension = self._extension(file_path.name)
        if extension in CSV_EXTENSIONS:
            return [file_path.stem]
        wb = load_workbook(filename=file_path, read_only=True)
        try:
            return list(wb.sheetnames)
        finally:
            wb.close()

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _load(
        self, source: Source, filename: str, opts: WorkbookLoadOptions
    ) -> Workbook:
        extension = self._extension(filename)
        name = Path(filename).stem or "Workbook"
        if extension in XLSX_EXTENSIONS:
            workbook = self._load_xlsx(source, name, opts)
        else:
            workbook = self._load_csv(source, name, opts)
        logger.info(
            "Loaded workbook",
            filename=filename,
            sheets=len(workbook.worksheets),
            cells=sum(len(ws.cells) for ws in workbook.worksheets),
        )
        return workbook

    @staticmethod
    def _extension(filename: str) -> str:
        extension = Path(filename).suffix.lower()
        if extension not in SUPPORTED_EXTENSIONS:
            raise UnsupportedFormatError(
                f"Unsupported file format: {extension or filename}. "
                f"Supported formats: {', '.join(sorted(SUPPORTED_EXTENSIONS))}",
                extension=extension or None,
            )
        return extension

    def _load_xlsx(
        self, source: Source, name: str, opts: WorkbookLoadOptions
    ) -> Workbook:
        # Load twice: once to capture formulas, once for cached values
        formula_wb = load_workbook(filename=_rewind(source), data_only=False)
        computed_wb = load_workbook(filename=_rewind(source), data_only=True)

        sheet_names = formula_wb.sheetnames
        if opts.sheet_name and opts.sheet_name not in sheet_names:
            raise WorksheetNotFoundError(opts.sheet_name, available=sheet_names)
        target_names = [opts.sheet_name] if opts.sheet_name else sheet_names

        worksheets = [
            Worksheet(
                name=sheet_name,
                cells=self._extract_sheet(
                    formula_wb[sheet_name], computed_wb[sheet_name], opts
                ),
            )
            for sheet_name in target_names
        ]
        active = opts.sheet_name or formula_wb.active.title
        return Workbook(name=name, worksheets=worksheets, active_worksheet=active)

    def _extract_sheet(
        self,
        sheet: OpenpyxlWorksheet,
        computed_sheet: OpenpyxlWorksheet,
        opts: WorkbookLoadOptions,
    ) -> CellMap:
        cells: CellMap = {}
        row_iter = sheet.iter_rows(max_row=opts.max_rows, max_col=opts.max_columns)
        computed_iter = computed_sheet.iter_rows(
            max_row=opts.max_rows, max_col=opts.max_columns, values_only=True
        )
        for row_cells, computed_values in zip(row_iter, computed_iter, strict=True):
            for cell, computed_value in zip(row_cells, computed_values, strict=True):
                built = self._build_cell(cell, computed_value)
                if built is not None:
                    cells[cell_key(built.row, built.col)] = built
        return cells

    @staticmethod
    def _build_cell(cell: Any, computed_value: Any) -> Cell | None:
        """Create a Cell with formula metadata, or None for an empty cell."""
        if cell.data_type == "f":
            formula = str(getattr(cell.value, "text", cell.value))
            if not formula.startswith("="):
                formula = f"={formula}"
            return Cell(
                row=cell.row,
                col=cell.column,
                value=_to_cell_value(computed_value),
                formula=formula,
            )
        value = _to_cell_value(cell.value)
        if value is None or value == "":
            return None
        return Cell(row=cell.row, col=cell.column, value=value)

    def _load_csv(
        self, source: Source, name: str, opts: WorkbookLoadOptions
    ) -> Workbook:
        try:
            frame = pd.read_csv(
                _rewind(source),
                header=None,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=False,
                nrows=opts.max_rows,
            )
        except pd.errors.EmptyDataError:
            frame = pd.DataFrame()

        if opts.max_columns is not None:
            frame = frame.iloc[:, : opts.max_columns]

        cells: CellMap = {}
        for row_index, row in enumerate(frame.itertuples(index=False), start=1):
            for col_index, raw in enumerate(row, start=1):
                text = str(raw).strip()
                if not text:
                    continue
                if text.startswith("="):
                    cell = Cell(row=row_index, col=col_index, formula=text)
                else:
                    cell = Cell(row=row_index, col=col_index, value=_from_text(text))
                cells[cell_key(row_index, col_index)] = cell

        sheet_name = opts.sheet_name or name
        return Workbook(
            name=name,
            worksheets=[Worksheet(name=sheet_name, cells=cells)],
            active_worksheet=sheet_name,
        )


def _rewind(source: Source) -> Source:
    if isinstance(source, io.BytesIO):
        source.seek(0)
    return source


def _from_text(text: str) -> CellValue:
    number = to_number(text)
    return text if number is None else number


def _to_cell_value(value: Any) -> CellValue:
    """Map openpyxl values to cell scalars; dates become ISO strings."""
    if value is None or isinstance(value, bool | int | float):
        return value
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date | time):
        return value.isoformat()
    if isinstance(value, str):
        return _from_text(value)
    return str(value)
