"""Chart preparation executor.

Sums a value column per category so a chart component can plot the rows
directly: each row carries the raw field names and the generic
``category``/``value`` aliases.
"""

from __future__ import annotations

from spreadsheet_query.executors.base import (
    Executor,
    group_key,
    require_numeric_columns,
)
from spreadsheet_query.grid import MaterializedGrid
from spreadsheet_query.models import ColumnType, Intent, QueryResult
from spreadsheet_query.output.result_formatter import ResultFormatter
from spreadsheet_query.services.column_resolver import find_mentioned_column
from spreadsheet_query.utils.exceptions import ColumnNotFoundError
from spreadsheet_query.values import Number, to_number
from spreadsheet_query.vocabulary import CHART_TYPES, DEFAULT_CHART_TYPE


def detect_chart_type(query: str) -> str:
    """Chart type named in the query, ``bar`` by default."""
    for chart_type, triggers in CHART_TYPES:
        if any(trigger in query for trigger in triggers):
            return chart_type
    return DEFAULT_CHART_TYPE


class ChartExecutor(Executor):
    intent = Intent.CHART

    def run(self, grid: MaterializedGrid, query: str) -> QueryResult:
        numeric = require_numeric_columns(
            grid, "No numeric columns found for chart creation"
        )
        categories = grid.columns_not_of_type(ColumnType.NUMBER)

        category_column = find_mentioned_column(query, categories) or (
            categories[0] if categories else None
        )
        value_column = find_mentioned_column(query, numeric) or numeric[0]
        if category_column is None:
            raise ColumnNotFoundError(
                "Could not determine appropriate columns for chart", role="category"
            )

        category_index = grid.column_index(category_column)
        value_index = grid.column_index(value_column)

        totals: dict[str, Number] = {}
        for row in grid.data_rows:
            amount = to_number(row[value_index])
            if amount is None:
                continue
            key = group_key(row[category_index])
            totals[key] = totals.get(key, 0) + amount

        data = [
            {
                "category": category,
                "value": total,
                value_column: total,
                category_column: category,
            }
            for category, total in totals.items()
        ]
        chart_type = detect_chart_type(query)
        return ResultFormatter.success(
            data,
            f"Created {chart_type} chart of {value_column} by {category_column}",
            columns=dict.fromkeys([category_column, value_column, "category", "value"]),
        )
