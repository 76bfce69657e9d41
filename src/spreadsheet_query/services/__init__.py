"""Services for the spreadsheet query engine."""

from spreadsheet_query.services.column_resolver import (
    find_column,
    find_mentioned_column,
)
from spreadsheet_query.services.formula_evaluator import FormulaEvaluator
from spreadsheet_query.services.grid_cache import GridCache
from spreadsheet_query.services.grid_materializer import GridMaterializer
from spreadsheet_query.services.intent_classifier import classify
from spreadsheet_query.services.sheet_router import RoutedQuery, SheetRouter
from spreadsheet_query.services.type_inferencer import ColumnTypeInferencer
from spreadsheet_query.services.workbook_loader import (
    WorkbookLoader,
    WorkbookLoadOptions,
)

__all__ = [
    "ColumnTypeInferencer",
    "FormulaEvaluator",
    "GridCache",
    "GridMaterializer",
    "RoutedQuery",
    "SheetRouter",
    "WorkbookLoadOptions",
    "WorkbookLoader",
    "classify",
    "find_column",
    "find_mentioned_column",
]
