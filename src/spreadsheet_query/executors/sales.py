"""Sales executor: grouped totals, or dataset-wide sales statistics."""

from __future__ import annotations

from spreadsheet_query.executors.base import (
    Executor,
    group_by_index,
    group_key,
    require_column,
)
from spreadsheet_query.grid import MaterializedGrid
from spreadsheet_query.models import Intent, QueryResult
from spreadsheet_query.output.result_formatter import ResultFormatter
from spreadsheet_query.values import Number, format_fixed, is_blank, to_number
from spreadsheet_query.vocabulary import SALES_KEYWORDS


class SalesExecutor(Executor):
    """Analyze the sales-like column.

    With a ``by <column>`` suffix, emits one ``{group, sum, count, average}``
    row per distinct group value in first-seen order. Without one, returns
    the rows that have a sales value and reports total, average, max and min
    in the message.
    """

    intent = Intent.SALES

    def run(self, grid: MaterializedGrid, query: str) -> QueryResult:
        sales_index = require_column(
            grid, SALES_KEYWORDS, "sales", "No sales/revenue column found in the data"
        )
        group_index = group_by_index(grid, query)
        # Grouping a column by itself would overwrite its own key
        if group_index not in (-1, sales_index):
            return self._grouped(grid, sales_index, group_index)
        return self._ungrouped(grid, sales_index)

    def _grouped(
        self, grid: MaterializedGrid, sales_index: int, group_index: int
    ) -> QueryResult:
        sales_header = grid.headers[sales_index]
        group_header = grid.headers[group_index]

        totals: dict[str, list[Number]] = {}
        for row in grid.data_rows:
            amount = to_number(row[sales_index])
            if amount is None:
                continue
            totals.setdefault(group_key(row[group_index]), []).append(amount)

        data = [
            {
                group_header: group,
                sales_header: sum(amounts),
                "count": len(amounts),
                "average": sum(amounts) / len(amounts),
            }
            for group, amounts in totals.items()
        ]
        return ResultFormatter.success(
            data,
            f"Grouped {sales_header} by {group_header}",
            columns=[group_header, sales_header, "count", "average"],
        )

    def _ungrouped(self, grid: MaterializedGrid, sales_index: int) -> QueryResult:
        rows = [row for row in grid.data_rows if not is_blank(row[sales_index])]
        amounts = [
            number
            for number in (to_number(row[sales_index]) for row in rows)
            if number is not None
        ]
        total = sum(amounts)
        average = total / len(amounts) if amounts else 0
        highest = max(amounts, default=0)
        lowest = min(amounts, default=0)

        message = (
            f"Sales analysis: {len(rows)} records, "
            f"Total: {format_fixed(total)}, Average: {format_fixed(average)}, "
            f"Max: {format_fixed(highest)}, Min: {format_fixed(lowest)}"
        )
        return ResultFormatter.rows(grid, rows, message, filters=["sales data only"])
