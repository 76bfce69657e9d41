"""Aggregation executor: sum, average, count, max or min of numeric columns."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from spreadsheet_query.executors.base import (
    Executor,
    group_by_index,
    group_key,
    require_numeric_columns,
)
from spreadsheet_query.grid import MaterializedGrid
from spreadsheet_query.models import Intent, QueryResult
from spreadsheet_query.output.result_formatter import ResultFormatter
from spreadsheet_query.services.column_resolver import find_mentioned_column
from spreadsheet_query.values import Number, to_number
from spreadsheet_query.vocabulary import AGGREGATION_VERBS


@dataclass(frozen=True)
class Aggregation:
    """An aggregation verb, its output field prefix and its reducer."""

    verb: str
    prefix: str
    reduce: Callable[[Sequence[Number]], Number]

    def field(self, column: str) -> str:
        """Output field name, e.g. ``avg_sales``."""
        return f"{self.prefix}_{column}"


_REDUCERS: dict[str, Callable[[Sequence[Number]], Number]] = {
    "sum": sum,
    "average": lambda values: sum(values) / len(values),
    "count": len,
    "max": max,
    "min": min,
}

AGGREGATIONS = tuple(
    (Aggregation(verb, prefix, _REDUCERS[verb]), triggers)
    for verb, prefix, triggers in AGGREGATION_VERBS
)


def detect_aggregation(query: str) -> Aggregation:
    """First aggregation whose trigger words appear in the query, default sum."""
    for aggregation, triggers in AGGREGATIONS:
        if any(trigger in query for trigger in triggers):
            return aggregation
    return AGGREGATIONS[0][0]


class AggregationExecutor(Executor):
    """Aggregate a named numeric column, or every numeric column.

    Supports the same ``by <column>`` grouping as the sales executor: one
    row per group in first-seen order with one prefixed field per target
    column. Without grouping the result is a single row.
    """

    intent = Intent.AGGREGATION

    def run(self, grid: MaterializedGrid, query: str) -> QueryResult:
        numeric = require_numeric_columns(
            grid, "No numeric columns found for aggregation"
        )
        aggregation = detect_aggregation(query)
        mentioned = find_mentioned_column(query, numeric)
        targets = [mentioned] if mentioned else numeric
        target_indexes = [(column, grid.column_index(column)) for column in targets]

        group_index = group_by_index(grid, query)
        if group_index != -1:
            return self._grouped(grid, aggregation, target_indexes, group_index)

        row: dict[str, Any] = {}
        for column, index in target_indexes:
            values = _numbers(grid.data_rows, index)
            if values:
                row[aggregation.field(column)] = aggregation.reduce(values)
        return ResultFormatter.success(
            [row],
            f"{aggregation.verb.upper()} calculation for {', '.join(targets)}",
            columns=list(row),
        )

    def _grouped(
        self,
        grid: MaterializedGrid,
        aggregation: Aggregation,
        target_indexes: list[tuple[str, int]],
        group_index: int,
    ) -> QueryResult:
        group_header = grid.headers[group_index]
        groups: dict[str, dict[str, list[Number]]] = {}
        for row in grid.data_rows:
            bucket = groups.setdefault(
                group_key(row[group_index]),
                {column: [] for column, _ in target_indexes},
            )
            for column, index in target_indexes:
                number = to_number(row[index])
                if number is not None:
                    bucket[column].append(number)

        data: list[dict[str, Any]] = []
        for group, columns in groups.items():
            result_row: dict[str, Any] = {group_header: group}
            for column, values in columns.items():
                if values:
                    result_row[aggregation.field(column)] = aggregation.reduce(values)
            data.append(result_row)

        targets = [column for column, _ in target_indexes]
        return ResultFormatter.success(
            data,
            f"{aggregation.verb.upper()} of {', '.join(targets)} "
            f"grouped by {group_header}",
            columns=[group_header, *(aggregation.field(column) for column in targets)],
        )


def _numbers(rows: Sequence[Sequence[Any]], index: int) -> list[Number]:
    numbers = (to_number(row[index]) for row in rows)
    return [number for number in numbers if number is not None]
