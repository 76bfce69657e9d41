"""Intent executors.

One executor per intent. ``build_executors`` returns the intent-to-executor
table the engine dispatches through.
"""

from spreadsheet_query.config import Settings
from spreadsheet_query.executors.aggregation import AggregationExecutor
from spreadsheet_query.executors.base import Executor
from spreadsheet_query.executors.chart import ChartExecutor
from spreadsheet_query.executors.comparison import ComparisonExecutor
from spreadsheet_query.executors.dimension import (
    DateExecutor,
    ProductExecutor,
    RegionExecutor,
)
from spreadsheet_query.executors.filtering import FilterExecutor, GeneralExecutor
from spreadsheet_query.executors.ranking import RankingExecutor
from spreadsheet_query.executors.sales import SalesExecutor
from spreadsheet_query.executors.sheet import SheetExecutor
from spreadsheet_query.models import Intent

EXECUTOR_CLASSES: tuple[type[Executor], ...] = (
    ChartExecutor,
    RegionExecutor,
    ProductExecutor,
    DateExecutor,
    SalesExecutor,
    RankingExecutor,
    ComparisonExecutor,
    AggregationExecutor,
    FilterExecutor,
    SheetExecutor,
    GeneralExecutor,
)


def build_executors(config: Settings | None = None) -> dict[Intent, Executor]:
    """Instantiate one executor per intent."""
    return {cls.intent: cls(config) for cls in EXECUTOR_CLASSES}


__all__ = [
    "AggregationExecutor",
    "ChartExecutor",
    "ComparisonExecutor",
    "DateExecutor",
    "EXECUTOR_CLASSES",
    "Executor",
    "FilterExecutor",
    "GeneralExecutor",
    "ProductExecutor",
    "RankingExecutor",
    "RegionExecutor",
    "SalesExecutor",
    "SheetExecutor",
    "build_executors",
]
