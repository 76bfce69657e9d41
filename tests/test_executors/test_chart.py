"""Tests for the chart and sheet executors."""

from collections.abc import Callable

import pytest

from spreadsheet_query.config import Settings
from spreadsheet_query.executors.chart import ChartExecutor, detect_chart_type
from spreadsheet_query.executors.sheet import SheetExecutor
from spreadsheet_query.grid import MaterializedGrid


class TestChartExecutor:
    def test_sums_value_per_category(
        self, sales_grid: MaterializedGrid, test_settings: Settings
    ) -> None:
        result = ChartExecutor(test_settings).execute(
            sales_grid, "chart sales by region"
        )
        assert result.data == [
            {"category": "West", "value": 320, "sales": 320, "region": "West"},
            {"category": "East", "value": 130, "sales": 130, "region": "East"},
            {"category": "North", "value": 150, "sales": 150, "region": "North"},
        ]
        assert result.message == "Created bar chart of sales by region"
        assert result.summary is not None
        assert result.summary.columns == ["region", "sales", "category", "value"]

    def test_mentioned_columns_and_type(
        self, sales_grid: MaterializedGrid, test_settings: Settings
    ) -> None:
        result = ChartExecutor(test_settings).execute(
            sales_grid, "pie chart of units by product"
        )
        assert {row["category"]: row["value"] for row in result.data} == {
            "Widget A": 25,
            "Widget B": 5,
            "Gadget": 23,
        }
        assert result.message == "Created pie chart of units by product"

    @pytest.mark.parametrize(
        ("query", "chart_type"),
        [
            ("column chart", "bar"),
            ("line graph", "line"),
            ("scatter plot", "scatter"),
            ("visualize", "bar"),
        ],
    )
    def test_detect_chart_type(self, query: str, chart_type: str) -> None:
        assert detect_chart_type(query) == chart_type

    def test_no_category_column(
        self, make_grid: Callable[..., MaterializedGrid], test_settings: Settings
    ) -> None:
        grid = make_grid([["Sales", "Units"], [1, 2], [3, 4]])
        result = ChartExecutor(test_settings).execute(grid, "chart")
        assert not result.success
        assert result.message == "Could not determine appropriate columns for chart"

    def test_no_numeric_columns(
        self, make_grid: Callable[..., MaterializedGrid], test_settings: Settings
    ) -> None:
        grid = make_grid([["Name", "City"], ["a", "b"]])
        result = ChartExecutor(test_settings).execute(grid, "chart")
        assert result.message == "No numeric columns found for chart creation"


class TestSheetExecutor:
    def test_reports_unhandled(
        self, sales_grid: MaterializedGrid, test_settings: Settings
    ) -> None:
        result = SheetExecutor(test_settings).execute(sales_grid, "open sheet 2")
        assert not result.success
        assert result.data == []
        assert result.summary is None
        assert result.message == "Sheet-specific queries are handled at a higher level"
