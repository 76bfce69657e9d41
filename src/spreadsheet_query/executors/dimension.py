"""Region, product and date executors.

Each resolves one dimension column, extracts a target literal from the
query and keeps the data rows whose column text contains it. A query that
names no target returns every row with no filters applied.
"""

from __future__ import annotations

import re
from abc import abstractmethod
from typing import ClassVar

from spreadsheet_query.executors.base import (
    Executor,
    log_missing_target,
    require_column,
)
from spreadsheet_query.grid import MaterializedGrid
from spreadsheet_query.models import Intent, QueryResult
from spreadsheet_query.output.result_formatter import ResultFormatter
from spreadsheet_query.values import contains_text
from spreadsheet_query.vocabulary import (
    DATE_COLUMN_KEYWORDS,
    MONTH_NAMES,
    PRODUCT_KEYWORDS,
    QUARTERS,
    REGION_COLUMN_KEYWORDS,
    REGION_VALUES,
    YEARS,
)


class DimensionExecutor(Executor):
    """Filter rows on one dimension column by a literal taken from the query."""

    role: ClassVar[str]
    column_keywords: ClassVar[tuple[str, ...]]
    missing_column_message: ClassVar[str]

    @abstractmethod
    def extract_target(self, query: str) -> str | None:
        """The literal to filter by, or None when the query names none."""

    @abstractmethod
    def describe_filter(self, target: str) -> str:
        """Summary filter string for an applied target."""

    @abstractmethod
    def message(self, count: int, target: str | None) -> str:
        """Result message for ``count`` surviving rows."""

    def run(self, grid: MaterializedGrid, query: str) -> QueryResult:
        index = require_column(
            grid, self.column_keywords, self.role, self.missing_column_message
        )
        target = self.extract_target(query)
        if target is None:
            log_missing_target(self.intent, query)
            rows = grid.data_rows
            return ResultFormatter.rows(grid, rows, self.message(len(rows), None))

        matched = [row for row in grid.data_rows if contains_text(row[index], target)]
        return ResultFormatter.rows(
            grid,
            matched,
            self.message(len(matched), target),
            filters=[self.describe_filter(target)],
        )


class RegionExecutor(DimensionExecutor):
    intent = Intent.REGION
    role = "region"
    column_keywords = REGION_COLUMN_KEYWORDS
    missing_column_message = "No region column found in the data"

    def extract_target(self, query: str) -> str | None:
        return next((region for region in REGION_VALUES if region in query), None)

    def describe_filter(self, target: str) -> str:
        return f"region = {target}"

    def message(self, count: int, target: str | None) -> str:
        if target is None:
            return f"Found {count} region records"
        return f"Found {count} records for {target} region"


class ProductExecutor(DimensionExecutor):
    """Product names are the words following a product keyword.

    ``"show product widget"`` targets ``widget``.
    """

    intent = Intent.PRODUCT
    role = "product"
    column_keywords = PRODUCT_KEYWORDS
    missing_column_message = "No product column found in the data"

    _patterns = tuple(
        (keyword, re.compile(rf"{keyword}\s+([\w\s]+)")) for keyword in PRODUCT_KEYWORDS
    )

    def extract_target(self, query: str) -> str | None:
        for keyword, pattern in self._patterns:
            if keyword not in query:
                continue
            match = pattern.search(query)
            if match and match.group(1).strip():
                return match.group(1).strip()
        return None

    def describe_filter(self, target: str) -> str:
        return f"product contains {target}"

    def message(self, count: int, target: str | None) -> str:
        if target is None:
            return f"Found {count} product records"
        return f'Found {count} records for product containing "{target}"'


class DateExecutor(DimensionExecutor):
    """Date targets are tried as month names, then years, then quarters."""

    intent = Intent.DATE
    role = "date"
    column_keywords = DATE_COLUMN_KEYWORDS
    missing_column_message = "No date column found in the data"

    def extract_target(self, query: str) -> str | None:
        for vocabulary in (MONTH_NAMES, YEARS, QUARTERS):
            found = next((term for term in vocabulary if term in query), None)
            if found is not None:
                return found
        return None

    def describe_filter(self, target: str) -> str:
        return f"date contains {target}"

    def message(self, count: int, target: str | None) -> str:
        if target is None:
            return f"Found {count} date-related records"
        return f"Found {count} records for {target}"
