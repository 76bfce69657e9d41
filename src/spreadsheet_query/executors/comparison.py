"""Comparison executor: ``<A> vs <B>`` statistics over a numeric column."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from spreadsheet_query.executors.base import Executor, log_missing_target
from spreadsheet_query.grid import MaterializedGrid, Row
from spreadsheet_query.models import ColumnType, Intent, QueryResult
from spreadsheet_query.output.result_formatter import ResultFormatter
from spreadsheet_query.services.column_resolver import find_mentioned_column
from spreadsheet_query.values import Number, as_text, contains_text, to_number

COMPARISON_RE = re.compile(r"(\w+)\s+(?:vs\.?|versus|against|compared to)\s+(\w+)")
# Keys of the summary row that a compared literal must not overwrite
_SUMMARY_KEYS = frozenset({"comparison", "difference"})


@dataclass(frozen=True)
class GroupStats:
    """Count, sum and average of one side of a comparison."""

    count: int
    total: Number
    average: float

    @classmethod
    def of(cls, values: Sequence[Number]) -> "GroupStats":
        total = sum(values)
        return cls(len(values), total, total / len(values) if values else 0)

    def as_dict(self) -> dict[str, Any]:
        return {"count": self.count, "sum": self.total, "average": self.average}


def percent_change(first: Number, second: Number) -> float:
    """``(first - second) / second`` in percent, or 0 when ``second`` is 0."""
    return (first - second) / second * 100 if second else 0


class ComparisonExecutor(Executor):
    """Compare two values of one column across a numeric column.

    The compared column is the first whose values contain both literals.
    If the pattern, that column or a numeric column cannot be found, every
    row is returned for manual comparison instead of failing.
    """

    intent = Intent.COMPARISON

    def run(self, grid: MaterializedGrid, query: str) -> QueryResult:
        match = COMPARISON_RE.search(query)
        if match:
            first, second = match.group(1), match.group(2)
            result = self._compare(grid, query, first, second)
            if result is not None:
                return result

        log_missing_target(self.intent, query)
        rows = grid.data_rows
        return ResultFormatter.rows(
            grid,
            rows,
            f"Comparison data prepared with {len(rows)} records",
            filters=["comparison query"],
        )

    def _compare(
        self, grid: MaterializedGrid, query: str, first: str, second: str
    ) -> QueryResult | None:
        if first == second or {first, second} & _SUMMARY_KEYS:
            return None
        column_index = self._find_comparison_column(grid, first, second)
        if column_index == -1:
            return None

        numeric = grid.columns_of_type(ColumnType.NUMBER)
        value_column = find_mentioned_column(query, numeric) or (
            numeric[0] if numeric else None
        )
        if value_column is None:
            return None
        value_index = grid.column_index(value_column)

        first_stats = GroupStats.of(
            self._values(grid.data_rows, column_index, value_index, first)
        )
        second_stats = GroupStats.of(
            self._values(grid.data_rows, column_index, value_index, second)
        )
        difference = {
            "count": first_stats.count - second_stats.count,
            "sum": first_stats.total - second_stats.total,
            "average": first_stats.average - second_stats.average,
        }
        percent_difference = {
            "count": percent_change(first_stats.count, second_stats.count),
            "sum": percent_change(first_stats.total, second_stats.total),
            "average": percent_change(first_stats.average, second_stats.average),
        }
        summary_row = {
            "comparison": "Summary",
            first: first_stats.as_dict(),
            second: second_stats.as_dict(),
            "difference": difference,
            "percentDifference": percent_difference,
        }
        return ResultFormatter.success(
            [summary_row],
            f"Comparison of {first} vs {second} by {value_column}",
            columns=["comparison", first, second, "difference", "percentDifference"],
        )

    @staticmethod
    def _find_comparison_column(
        grid: MaterializedGrid, first: str, second: str
    ) -> int:
        for index in range(len(grid.headers)):
            texts = [as_text(row[index]).lower() for row in grid.data_rows]
            if any(first in text for text in texts) and any(
                second in text for text in texts
            ):
                return index
        return -1

    @staticmethod
    def _values(
        rows: Sequence[Row], column_index: int, value_index: int, literal: str
    ) -> list[Number]:
        values: list[Number] = []
        for row in rows:
            if not contains_text(row[column_index], literal):
                continue
            number = to_number(row[value_index])
            if number is not None:
                values.append(number)
        return values
