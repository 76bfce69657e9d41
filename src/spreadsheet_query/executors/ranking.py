"""Ranking executor: top or bottom N rows by a numeric column."""

from __future__ import annotations

import re

from spreadsheet_query.executors.base import Executor
from spreadsheet_query.grid import MaterializedGrid
from spreadsheet_query.models import ColumnType, Intent, QueryResult
from spreadsheet_query.output.result_formatter import ResultFormatter
from spreadsheet_query.services.column_resolver import (
    find_column,
    find_mentioned_column,
)
from spreadsheet_query.utils.exceptions import ColumnNotFoundError, ErrorCode
from spreadsheet_query.values import to_number
from spreadsheet_query.vocabulary import SALES_KEYWORDS, TOP_KEYWORDS

LIMIT_RE = re.compile(r"\d+")


class RankingExecutor(Executor):
    """Rank rows by a numeric column.

    The ranking column is a numeric column named in the query, else the
    sales-like column. Rows without a numeric value in it are excluded. The
    sort is stable, so ties keep their sheet order.
    """

    intent = Intent.RANKING

    def run(self, grid: MaterializedGrid, query: str) -> QueryResult:
        descending = any(keyword in query for keyword in TOP_KEYWORDS)
        direction = "top" if descending else "bottom"
        limit = self.parse_limit(query)

        numeric = grid.columns_of_type(ColumnType.NUMBER)
        mentioned = find_mentioned_column(query, numeric)
        if mentioned is not None:
            index = grid.column_index(mentioned)
        else:
            index = find_column(grid.headers, SALES_KEYWORDS)
        if index == -1:
            raise ColumnNotFoundError(
                "No numeric column found for ranking",
                role="numeric",
                error_code=ErrorCode.NO_NUMERIC_COLUMNS,
            )

        scored = [
            (number, row)
            for row in grid.data_rows
            if (number := to_number(row[index])) is not None
        ]
        scored.sort(key=lambda pair: pair[0], reverse=descending)
        ranked = [row for _, row in scored[:limit]]

        column = grid.headers[index]
        return ResultFormatter.rows(
            grid,
            ranked,
            f"Found {direction} {limit} records by {column}",
            filters=[f"{direction} {limit} by {column}"],
        )

    def parse_limit(self, query: str) -> int:
        """First integer in the query, else the configured default."""
        match = LIMIT_RE.search(query)
        return int(match.group(0)) if match else self.settings.default_rank_limit
