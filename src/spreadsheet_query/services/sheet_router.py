"""Routing of workbook queries to the worksheet they refer to."""

from __future__ import annotations

import re
from dataclasses import dataclass

from spreadsheet_query.models import Workbook, Worksheet
from spreadsheet_query.utils.logging import get_logger

logger = get_logger(__name__)

SHEET_REFERENCE_RE = re.compile(r"sheet\s*(\d+|[a-z]+)")
_WHITESPACE_RE = re.compile(r"\s{2,}")


@dataclass(frozen=True)
class RoutedQuery:
    """Target worksheet plus the query with the sheet reference removed."""

    worksheet: Worksheet | None
    processed_query: str


class SheetRouter:
    """Pick the worksheet a query refers to.

    Resolution order:
    1. A worksheet whose name occurs in the query (case-insensitive). The
       name is removed from the query.
    2. A ``sheet <n|name>`` reference matching a worksheet whose name
       contains the reference or equals ``sheet<ref>``. The reference is
       removed from the query.
    3. The workbook's active worksheet, with the query unchanged.
    """

    def route(self, workbook: Workbook, query: str) -> RoutedQuery:
        lowered = query.lower()

        for worksheet in workbook.worksheets:
            name = worksheet.name.lower()
            if name and name in lowered:
                processed = _strip(query, re.escape(worksheet.name))
                logger.debug("Routed query by sheet name", worksheet=worksheet.name)
                return RoutedQuery(worksheet, processed)

        match = SHEET_REFERENCE_RE.search(lowered)
        if match:
            reference = match.group(1)
            for worksheet in workbook.worksheets:
                name = worksheet.name.lower()
                if reference in name or name == f"sheet{reference}":
                    processed = _strip(query, re.escape(match.group(0)))
                    logger.debug(
                        "Routed query by sheet reference",
                        worksheet=worksheet.name,
                        reference=match.group(0),
                    )
                    return RoutedQuery(worksheet, processed)

        return RoutedQuery(workbook.active, query)


def _strip(query: str, pattern: str) -> str:
    """Remove every case-insensitive occurrence of ``pattern`` and tidy spaces."""
    removed = re.sub(pattern, "", query, flags=re.IGNORECASE)
    return _WHITESPACE_RE.sub(" ", removed).strip()
