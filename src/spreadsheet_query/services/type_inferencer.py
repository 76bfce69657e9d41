"""Column type inference by majority vote over sampled values.

Each column's non-empty data values are tested against the predicates in
fixed order: number, date, boolean. The first predicate matched by strictly
more than ``threshold`` of the samples decides the type; otherwise, or when
the column has no samples, the column is text.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence

from dateutil import parser as date_parser

from spreadsheet_query.models import CellValue, ColumnType
from spreadsheet_query.utils.logging import get_logger
from spreadsheet_query.values import is_blank, to_number
from spreadsheet_query.vocabulary import BOOLEAN_LITERALS

logger = get_logger(__name__)

DATE_PATTERNS = (
    re.compile(r"^\d{4}-\d{2}-\d{2}$"),  # YYYY-MM-DD
    re.compile(r"^\d{2}/\d{2}/\d{4}$"),  # MM/DD/YYYY
    re.compile(r"^\d{2}-\d{2}-\d{4}$"),  # MM-DD-YYYY
    re.compile(
        r"^\d{1,2}\s+(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)"
        r"[a-z]*\s+\d{4}$",
        re.IGNORECASE,
    ),  # D Mon YYYY
)

_DIGIT_RE = re.compile(r"\d")


def is_number(value: CellValue) -> bool:
    """Value coerces to a finite number."""
    return to_number(value) is not None


def is_date(value: CellValue) -> bool:
    """Value matches a known date layout or parses as a date."""
    if isinstance(value, bool) or value is None:
        return False
    text = str(value).strip()
    if any(pattern.match(text) for pattern in DATE_PATTERNS):
        return True
    # The generic parser accepts bare words like "may"; require a digit
    if not _DIGIT_RE.search(text):
        return False
    try:
        date_parser.parse(text)
    except (ValueError, OverflowError):
        return False
    return True


def is_boolean(value: CellValue) -> bool:
    """Value is a boolean or a true/false/yes/no literal."""
    if isinstance(value, bool):
        return True
    return isinstance(value, str) and value.strip().lower() in BOOLEAN_LITERALS


TYPE_PREDICATES: tuple[tuple[ColumnType, Callable[[CellValue], bool]], ...] = (
    (ColumnType.NUMBER, is_number),
    (ColumnType.DATE, is_date),
    (ColumnType.BOOLEAN, is_boolean),
)


class ColumnTypeInferencer:
    """Infer one :class:`ColumnType` per column of a dense matrix."""

    def __init__(self, threshold: float = 0.7) -> None:
        """Initialize the inferencer.

        Args:
            threshold: Fraction of samples a predicate must strictly exceed.
        """
        self.threshold = threshold

    def infer_column(self, values: Sequence[CellValue]) -> ColumnType:
        """Infer the type of a single column from its data values."""
        samples = [value for value in values if not is_blank(value)]
        if not samples:
            return ColumnType.TEXT
        for column_type, predicate in TYPE_PREDICATES:
            matched = sum(1 for value in samples if predicate(value))
            if matched / len(samples) > self.threshold:
                return column_type
        return ColumnType.TEXT

    def infer(
        self, data_rows: Sequence[Sequence[CellValue]], column_count: int
    ) -> tuple[ColumnType, ...]:
        """Infer types for every column of the data rows (header row excluded)."""
        types = tuple(
            self.infer_column([row[index] for row in data_rows])
            for index in range(column_count)
        )
        logger.debug(
            "Inferred column types",
            columns=column_count,
            rows=len(data_rows),
            types=",".join(t.value for t in types),
        )
        return types
