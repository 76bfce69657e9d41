"""Deterministic keyword classification of natural-language queries.

``INTENT_RULES`` is the explicit precedence table: rules are tried in order
against the lower-cased, trimmed query and the first rule whose triggers
appear in the text wins. A query mentioning both "chart" and "region" is a
chart request because the chart rule comes first. Queries matching no rule
fall through to :attr:`Intent.GENERAL`.
"""

from __future__ import annotations

from dataclasses import dataclass

from spreadsheet_query.models import Intent
from spreadsheet_query.utils.logging import get_logger
from spreadsheet_query.vocabulary import (
    AGGREGATION_KEYWORDS,
    CHART_KEYWORDS,
    COMPARISON_KEYWORDS,
    DATE_KEYWORDS,
    FILTER_KEYWORDS,
    MONTH_NAMES,
    PRODUCT_KEYWORDS,
    QUARTERS,
    RANKING_KEYWORDS,
    REGION_KEYWORDS,
    REGION_VALUES,
    SALES_KEYWORDS,
    SHEET_KEYWORDS,
    YEARS,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class IntentRule:
    """One classification predicate: an intent and the substrings that trigger it."""

    intent: Intent
    triggers: tuple[str, ...]

    def matches(self, query: str) -> bool:
        """Whether any trigger occurs in the (normalized) query."""
        return any(trigger in query for trigger in self.triggers)

    def matched_trigger(self, query: str) -> str | None:
        """The first trigger found in the query, if any."""
        return next((trigger for trigger in self.triggers if trigger in query), None)


INTENT_RULES: tuple[IntentRule, ...] = (
    IntentRule(Intent.CHART, CHART_KEYWORDS),
    IntentRule(Intent.REGION, REGION_KEYWORDS + REGION_VALUES),
    IntentRule(Intent.PRODUCT, PRODUCT_KEYWORDS),
    IntentRule(Intent.DATE, DATE_KEYWORDS + MONTH_NAMES + YEARS + QUARTERS),
    IntentRule(Intent.SALES, SALES_KEYWORDS),
    IntentRule(Intent.RANKING, RANKING_KEYWORDS),
    IntentRule(Intent.COMPARISON, COMPARISON_KEYWORDS),
    IntentRule(Intent.AGGREGATION, AGGREGATION_KEYWORDS),
    IntentRule(Intent.FILTER, FILTER_KEYWORDS),
    IntentRule(Intent.SHEET, SHEET_KEYWORDS),
)


def normalize_query(query: str) -> str:
    """Lower-case and trim a query the way every executor expects it."""
    return query.strip().lower()


def classify(query: str) -> Intent:
    """Classify a query into exactly one intent.

    Args:
        query: Raw or normalized query text.

    Returns:
        The intent of the first matching rule, or ``Intent.GENERAL``.
    """
    normalized = normalize_query(query)
    for rule in INTENT_RULES:
        trigger = rule.matched_trigger(normalized)
        if trigger is not None:
            logger.debug("Classified query", intent=rule.intent.value, trigger=trigger)
            return rule.intent
    logger.debug("Classified query", intent=Intent.GENERAL.value, trigger=None)
    return Intent.GENERAL
