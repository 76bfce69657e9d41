"""Filter executor and the general keyword-search fallback."""

from __future__ import annotations

from collections.abc import Sequence

from spreadsheet_query.executors.base import Executor
from spreadsheet_query.grid import MaterializedGrid, Row
from spreadsheet_query.models import Intent, QueryResult
from spreadsheet_query.output.result_formatter import ResultFormatter
from spreadsheet_query.services.clause_parser import (
    ALL_COLUMNS,
    Clause,
    parse_clauses,
    token_clauses,
)
from spreadsheet_query.utils.exceptions import ErrorCode
from spreadsheet_query.utils.logging import get_logger
from spreadsheet_query.values import contains_text
from spreadsheet_query.vocabulary import GENERAL_STOP_WORDS, MIN_TOKEN_LENGTH

logger = get_logger(__name__)


def apply_clauses(
    grid: MaterializedGrid, rows: Sequence[Row], clauses: Sequence[Clause]
) -> tuple[list[Row], list[str]]:
    """AND the clauses over ``rows``.

    Returns:
        The surviving rows and the descriptions of clauses that narrowed them.
    """
    surviving = list(rows)
    applied: list[str] = []
    for clause in clauses:
        index = -1
        if clause.column != ALL_COLUMNS:
            index = grid.column_index(clause.column)
            if index == -1:
                continue
        before = len(surviving)
        surviving = [row for row in surviving if clause.matches(row, index)]
        if len(surviving) < before:
            applied.append(clause.describe())
    return surviving, applied


class FilterExecutor(Executor):
    """Apply structured clauses, or token clauses when none parse."""

    intent = Intent.FILTER

    def run(self, grid: MaterializedGrid, query: str) -> QueryResult:
        clauses = parse_clauses(query, grid.headers)
        if not clauses:
            logger.debug(
                "No structured clauses, falling back to token search",
                error_code=ErrorCode.UNPARSEABLE_CLAUSE.value,
            )
            clauses = token_clauses(query, grid.headers)

        rows, applied = apply_clauses(grid, grid.data_rows, clauses)
        return ResultFormatter.rows(
            grid,
            rows,
            f"Filter applied: Found {len(rows)} matching records",
            filters=applied,
        )


class GeneralExecutor(Executor):
    """Search every column for each meaningful query word."""

    intent = Intent.GENERAL

    def run(self, grid: MaterializedGrid, query: str) -> QueryResult:
        words = [
            word
            for word in query.split()
            if len(word) >= MIN_TOKEN_LENGTH and word not in GENERAL_STOP_WORDS
        ]
        rows = list(grid.data_rows)
        if not words:
            return ResultFormatter.rows(grid, rows, f"Showing all {len(rows)} records")

        applied: list[str] = []
        for word in words:
            before = len(rows)
            rows = [row for row in rows if any(contains_text(c, word) for c in row)]
            if len(rows) < before:
                applied.append(f'contains "{word}"')

        return ResultFormatter.rows(
            grid,
            rows,
            f"Found {len(rows)} records matching your query",
            filters=applied,
        )
