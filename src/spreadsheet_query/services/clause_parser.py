"""Mini-grammar turning filter phrases into ``(column, operator, value)`` clauses.

Structured clauses come from a fixed, ordered list of regex patterns of the
form ``<column> <operator> <value>``. A pattern match whose column word names
no header is dropped. When no structured clause survives, callers fall back
to :func:`token_clauses`, which treats each meaningful query word either as
a column-equality clause (word names a header, next word is the value) or as
a free-text search across all columns.
"""

from __future__ import annotations

import operator
import re
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass

from spreadsheet_query.models import CellValue
from spreadsheet_query.services.column_resolver import find_column
from spreadsheet_query.utils.exceptions import ErrorCode
from spreadsheet_query.utils.logging import get_logger
from spreadsheet_query.values import as_text, contains_text, to_number
from spreadsheet_query.vocabulary import FILTER_STOP_WORDS, MIN_TOKEN_LENGTH

logger = get_logger(__name__)

ALL_COLUMNS = "*"

_NUMBER = r"(-?\d+(?:\.\d+)?)"

_NUMERIC_OPERATORS: dict[str, Callable[[float, float], bool]] = {
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
}


@dataclass(frozen=True)
class Clause:
    """A single filter constraint.

    ``column`` is a header name, or ``"*"`` for a search across all columns.
    Numeric operators carry a numeric ``value``.
    """

    column: str
    operator: str
    value: int | float | str

    def describe(self) -> str:
        """Human-readable form used in result summaries, e.g. ``sales > 100``."""
        return f"{self.column} {self.operator} {as_text(self.value)}"

    def matches(self, row: Sequence[CellValue], index: int) -> bool:
        """Test one matrix row. ``index`` is the column index (ignored for ``*``)."""
        if self.column == ALL_COLUMNS:
            needle = as_text(self.value)
            return any(contains_text(cell, needle) for cell in row)

        cell = row[index]
        compare = _NUMERIC_OPERATORS.get(self.operator)
        if compare is not None:
            number = to_number(cell)
            threshold = to_number(self.value)
            if number is None or threshold is None:
                return False
            return compare(number, threshold)
        if self.operator == "=":
            return as_text(cell).lower() == as_text(self.value).lower()
        if self.operator == "contains":
            return contains_text(cell, as_text(self.value))
        return True


@dataclass(frozen=True)
class ClausePattern:
    """Regex for one operator. Group 1 is the column word, group 2 the value."""

    operator: str
    regex: re.Pattern[str]

    @property
    def numeric(self) -> bool:
        return self.operator in _NUMERIC_OPERATORS

    def scan(self, query: str) -> Iterator[tuple[str, str]]:
        """Yield ``(column word, raw value)`` for every match in the query."""
        for match in self.regex.finditer(query):
            yield match.group(1).lower(), match.group(2).strip()


CLAUSE_PATTERNS: tuple[ClausePattern, ...] = (
    ClausePattern(
        ">",
        re.compile(
            r"\b(\w+)\s*(?:>(?!=)|\bgreater than\b(?! or equal to))\s*" + _NUMBER
        ),
    ),
    ClausePattern(
        "<",
        re.compile(r"\b(\w+)\s*(?:<(?!=)|\bless than\b(?! or equal to))\s*" + _NUMBER),
    ),
    ClausePattern(
        ">=",
        re.compile(r"\b(\w+)\s*(?:>=|\bgreater than or equal to\b)\s*" + _NUMBER),
    ),
    ClausePattern(
        "<=",
        re.compile(r"\b(\w+)\s*(?:<=|\bless than or equal to\b)\s*" + _NUMBER),
    ),
    ClausePattern(
        "=",
        re.compile(r"\b(\w+)\s*(?:==?|\bequals\b|\bis\b)\s*(\w+)"),
    ),
    ClausePattern(
        "contains",
        re.compile(r"\b(\w+)\s+(?:contains|has|includes)\s+['\"]?([^'\"]+)['\"]?"),
    ),
)


def parse_clauses(query: str, headers: Sequence[str]) -> list[Clause]:
    """Extract structured clauses from a normalized query.

    Args:
        query: Lower-cased query text.
        headers: Grid headers used to resolve column words.

    Returns:
        Clauses in pattern order, then match order.
    """
    clauses: list[Clause] = []
    for pattern in CLAUSE_PATTERNS:
        for word, raw_value in pattern.scan(query):
            index = find_column(headers, [word])
            if index == -1:
                logger.debug(
                    "Dropped clause with unknown column",
                    error_code=ErrorCode.UNPARSEABLE_CLAUSE.value,
                    column=word,
                    operator=pattern.operator,
                )
                continue
            value: int | float | str = raw_value
            if pattern.numeric:
                number = to_number(raw_value)
                if number is None:
                    continue
                value = number
            clauses.append(Clause(headers[index], pattern.operator, value))
    return clauses


def token_clauses(query: str, headers: Sequence[str]) -> list[Clause]:
    """Fallback clauses built from individual query words."""
    words = query.split()
    clauses: list[Clause] = []
    for position, word in enumerate(words):
        if len(word) < MIN_TOKEN_LENGTH or word in FILTER_STOP_WORDS:
            continue
        index = find_column(headers, [word])
        if index == -1:
            clauses.append(Clause(ALL_COLUMNS, "contains", word))
        elif position + 1 < len(words):
            clauses.append(Clause(headers[index], "=", words[position + 1]))
    return clauses
