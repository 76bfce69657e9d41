"""Resolution of semantic column roles to concrete headers.

These two primitives are the only way executors discover columns, so every
executor resolves roles the same way.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence


def find_column(headers: Sequence[str], keywords: Iterable[str]) -> int:
    """Index of the first header containing any keyword, or -1.

    Headers are scanned in order; matching is a case-insensitive substring
    test.

    Example:
        >>> find_column(["region", "total sales"], ["revenue", "sales"])
        1
    """
    candidates = [keyword.lower() for keyword in keywords if keyword]
    for index, header in enumerate(headers):
        lowered = header.lower()
        if any(keyword in lowered for keyword in candidates):
            return index
    return -1


def find_mentioned_column(query: str, candidates: Iterable[str]) -> str | None:
    """First candidate header that appears literally in the query, or None."""
    lowered = query.lower()
    for candidate in candidates:
        if candidate and candidate.lower() in lowered:
            return candidate
    return None
