"""Assembly of the uniform ``QueryResult`` envelope.

Every executor goes through these helpers, which keep two invariants:
- a failure carries no data and a non-empty message;
- a success has ``summary.total_rows == len(data)``.
"""

from collections.abc import Iterable, Sequence
from typing import Any

from spreadsheet_query.grid import MaterializedGrid, Row
from spreadsheet_query.models import QueryResult, QuerySummary


class ResultFormatter:
    """Build success and failure results."""

    @staticmethod
    def success(
        data: list[dict[str, Any]],
        message: str,
        columns: Iterable[str],
        filters: Iterable[str] = (),
    ) -> QueryResult:
        """Wrap computed row objects in a successful result.

        Args:
            data: Row objects, already in output order.
            message: Human-readable description of what was done.
            columns: Header names or computed field names describing ``data``.
            filters: Applied constraints, in application order.

        Returns:
            A successful QueryResult.
        """
        return QueryResult(
            success=True,
            message=message,
            data=data,
            summary=QuerySummary(
                total_rows=len(data),
                columns=list(columns),
                filters=list(filters),
            ),
        )

    @staticmethod
    def rows(
        grid: MaterializedGrid,
        rows: Sequence[Row],
        message: str,
        filters: Iterable[str] = (),
    ) -> QueryResult:
        """Convert surviving matrix rows to row objects keyed by header."""
        return ResultFormatter.success(
            grid.records(rows), message, columns=grid.headers, filters=filters
        )

    @staticmethod
    def failure(message: str) -> QueryResult:
        """Build a failed result with no data and no summary."""
        return QueryResult(success=False, message=message or "Query failed", data=[])
