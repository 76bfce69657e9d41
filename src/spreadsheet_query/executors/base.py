"""Shared contract and column helpers for intent executors."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import ClassVar

from spreadsheet_query.config import Settings, settings
from spreadsheet_query.grid import MaterializedGrid
from spreadsheet_query.models import CellValue, ColumnType, Intent, QueryResult
from spreadsheet_query.output.result_formatter import ResultFormatter
from spreadsheet_query.services.column_resolver import find_column
from spreadsheet_query.services.intent_classifier import normalize_query
from spreadsheet_query.utils.exceptions import (
    ColumnNotFoundError,
    EmptyDatasetError,
    ErrorCode,
    QueryEngineError,
)
from spreadsheet_query.utils.logging import get_logger
from spreadsheet_query.values import as_text, is_blank

logger = get_logger(__name__)

GROUP_BY_RE = re.compile(r"\bby\s+(\w+)")

UNKNOWN_GROUP = "Unknown"


class Executor(ABC):
    """Base class for executors.

    ``execute`` owns the contract every executor shares: an empty grid is a
    failure before any intent logic runs, and engine errors raised while
    running (a missing column, an unhandled intent) become failure results.
    Subclasses implement ``run`` against a non-empty grid and a normalized
    query, and never mutate the grid.
    """

    intent: ClassVar[Intent]

    def __init__(self, config: Settings | None = None) -> None:
        self.settings = config or settings

    def execute(self, grid: MaterializedGrid, query: str) -> QueryResult:
        """Run this executor and always return a QueryResult."""
        if grid.is_empty:
            return ResultFormatter.failure(EmptyDatasetError().message)
        try:
            return self.run(grid, normalize_query(query))
        except QueryEngineError as e:
            logger.debug(
                "Executor reported failure",
                intent=self.intent.value,
                error_code=e.error_code.value,
                reason=e.message,
            )
            return ResultFormatter.failure(e.message)

    @abstractmethod
    def run(self, grid: MaterializedGrid, query: str) -> QueryResult:
        """Execute against a non-empty grid and a lower-cased query."""


def require_column(
    grid: MaterializedGrid,
    keywords: Iterable[str],
    role: str,
    message: str,
) -> int:
    """Resolve a semantic role to a column index or raise ColumnNotFoundError."""
    index = find_column(grid.headers, keywords)
    if index == -1:
        raise ColumnNotFoundError(message, role=role)
    return index


def require_numeric_columns(grid: MaterializedGrid, message: str) -> list[str]:
    """Numeric column headers in column order, or raise if there are none."""
    numeric = grid.columns_of_type(ColumnType.NUMBER)
    if not numeric:
        raise ColumnNotFoundError(
            message, role="numeric", error_code=ErrorCode.NO_NUMERIC_COLUMNS
        )
    return numeric


def group_by_index(grid: MaterializedGrid, query: str) -> int:
    """Column index named by a ``by <column>`` suffix, or -1."""
    match = GROUP_BY_RE.search(query)
    if not match:
        return -1
    return find_column(grid.headers, [match.group(1)])


def group_key(value: CellValue) -> str:
    """Grouping key for a cell: its displayed text, or ``Unknown`` when blank."""
    return UNKNOWN_GROUP if is_blank(value) else as_text(value)


def log_missing_target(intent: Intent, query: str) -> None:
    """Record that an intent matched but named no value to filter by."""
    logger.debug(
        "No target literal in query, returning all rows",
        intent=intent.value,
        error_code=ErrorCode.NO_TARGET_LITERAL.value,
        query=query,
    )
