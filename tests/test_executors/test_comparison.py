"""Tests for the comparison executor."""

import pytest

from spreadsheet_query.config import Settings
from spreadsheet_query.executors.comparison import (
    ComparisonExecutor,
    GroupStats,
    percent_change,
)
from spreadsheet_query.grid import MaterializedGrid


class TestComparisonExecutor:
    def test_compares_two_values(
        self, sales_grid: MaterializedGrid, test_settings: Settings
    ) -> None:
        result = ComparisonExecutor(test_settings).execute(
            sales_grid, "compare widget vs gadget"
        )
        assert result.success
        assert len(result.data) == 1
        row = result.data[0]
        assert row["comparison"] == "Summary"
        assert row["widget"]["count"] == 3
        assert row["widget"]["sum"] == 350
        assert row["widget"]["average"] == pytest.approx(116.67, abs=0.01)
        assert row["gadget"] == {"count": 2, "sum": 250, "average": 125.0}
        assert row["difference"]["count"] == 1
        assert row["difference"]["sum"] == 100
        assert row["percentDifference"]["count"] == pytest.approx(50.0)
        assert row["percentDifference"]["sum"] == pytest.approx(40.0)
        assert result.message == "Comparison of widget vs gadget by sales"
        assert result.summary is not None
        assert result.summary.columns == [
            "comparison",
            "widget",
            "gadget",
            "difference",
            "percentDifference",
        ]

    def test_mentioned_numeric_column(
        self, sales_grid: MaterializedGrid, test_settings: Settings
    ) -> None:
        result = ComparisonExecutor(test_settings).execute(
            sales_grid, "compare West versus East by units"
        )
        row = result.data[0]
        assert row["west"]["sum"] == 30
        assert row["east"]["sum"] == 8
        assert result.message == "Comparison of west vs east by units"

    @pytest.mark.parametrize(
        "query",
        ["compare these", "compare apples vs oranges", "compare west vs west"],
    )
    def test_falls_back_to_all_rows(
        self, query: str, sales_grid: MaterializedGrid, test_settings: Settings
    ) -> None:
        result = ComparisonExecutor(test_settings).execute(sales_grid, query)
        assert result.success
        assert len(result.data) == 5
        assert result.message == "Comparison data prepared with 5 records"
        assert result.summary is not None
        assert result.summary.filters == ["comparison query"]


class TestComparisonHelpers:
    def test_percent_change_zero_base(self) -> None:
        assert percent_change(5, 0) == 0

    def test_percent_change(self) -> None:
        assert percent_change(150, 100) == pytest.approx(50.0)

    def test_group_stats_empty(self) -> None:
        stats = GroupStats.of([])
        assert stats.as_dict() == {"count": 0, "sum": 0, "average": 0}
