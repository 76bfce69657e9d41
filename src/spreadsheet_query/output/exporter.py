"""Export of query results to downloadable JSON and CSV documents.

JSON exports carry the full result envelope. CSV exports carry only the
data rows, with columns ordered by ``summary.columns``; nested values (the
per-group statistics of a comparison) are flattened to ``parent.child``
columns.
"""

import json
from dataclasses import dataclass

import pandas as pd

from spreadsheet_query.models import ExportFormat, QueryResult
from spreadsheet_query.utils.exceptions import ValidationError
from spreadsheet_query.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ExportedDocument:
    """A rendered export ready to be written or streamed."""

    content: str
    media_type: str
    extension: str

    def filename(self, stem: str = "query_result") -> str:
        """Suggested download filename."""
        return f"{stem}.{self.extension}"


class ResultExporter:
    """Render :class:`QueryResult` objects as JSON or CSV."""

    def export(self, result: QueryResult, fmt: ExportFormat) -> ExportedDocument:
        """Render a result in the requested format.

        Raises:
            ValidationError: If a failed result is exported as CSV.
        """
        if fmt is ExportFormat.CSV:
            return ExportedDocument(self.to_csv(result), "text/csv", "csv")
        return ExportedDocument(self.to_json(result), "application/json", "json")

    def to_json(self, result: QueryResult, indent: int | None = 2) -> str:
        """Serialize the full result envelope."""
        return json.dumps(result.to_dict(), indent=indent, default=str)

    def to_csv(self, result: QueryResult) -> str:
        """Serialize the result's data rows as CSV."""
        if not result.success:
            raise ValidationError(
                f"Cannot export a failed query result: {result.message}",
                field="result",
            )

        summary_columns: list[str] = []
        if result.summary is not None:
            summary_columns = list(dict.fromkeys(result.summary.columns))
        if not result.data:
            frame = pd.DataFrame(columns=summary_columns)
        else:
            frame = pd.json_normalize(result.data, sep=".")
            frame = frame[self._ordered_columns(list(frame.columns), summary_columns)]

        logger.debug("Exported CSV", rows=len(frame), columns=len(frame.columns))
        content: str = frame.to_csv(index=False)
        return content

    @staticmethod
    def _ordered_columns(present: list[str], preferred: list[str]) -> list[str]:
        """Order flattened columns by their summary column, leftovers last."""
        ordered: list[str] = []
        for column in preferred:
            for name in present:
                if name not in ordered and (
                    name == column or name.startswith(f"{column}.")
                ):
                    ordered.append(name)
        ordered.extend(name for name in present if name not in ordered)
        return ordered
