"""Tests for the sales executor."""

from collections.abc import Callable

from spreadsheet_query.config import Settings
from spreadsheet_query.executors.sales import SalesExecutor
from spreadsheet_query.grid import MaterializedGrid


class TestSalesExecutor:
    def test_ungrouped_statistics(
        self, sales_grid: MaterializedGrid, test_settings: Settings
    ) -> None:
        result = SalesExecutor(test_settings).execute(sales_grid, "show sales")
        assert result.success
        assert len(result.data) == 5
        assert result.message == (
            "Sales analysis: 5 records, Total: 600.00, Average: 120.00, "
            "Max: 200.00, Min: 50.00"
        )
        assert result.summary is not None
        assert result.summary.filters == ["sales data only"]

    def test_ungrouped_skips_blank_sales(
        self, make_grid: Callable[..., MaterializedGrid], test_settings: Settings
    ) -> None:
        grid = make_grid([["Rep", "Revenue"], ["Ann", 10], ["Bob", None], ["Cy", 30]])
        result = SalesExecutor(test_settings).execute(grid, "revenue")
        assert [row["rep"] for row in result.data] == ["Ann", "Cy"]
        assert "Total: 40.00" in result.message

    def test_grouped_by_column(
        self, sales_grid: MaterializedGrid, test_settings: Settings
    ) -> None:
        result = SalesExecutor(test_settings).execute(sales_grid, "sales by region")
        assert result.data == [
            {"region": "West", "sales": 320, "count": 2, "average": 160.0},
            {"region": "East", "sales": 130, "count": 2, "average": 65.0},
            {"region": "North", "sales": 150, "count": 1, "average": 150.0},
        ]
        assert result.message == "Grouped sales by region"
        assert result.summary is not None
        assert result.summary.columns == ["region", "sales", "count", "average"]
        assert result.summary.total_rows == 3

    def test_group_totals_add_up(
        self, sales_grid: MaterializedGrid, test_settings: Settings
    ) -> None:
        result = SalesExecutor(test_settings).execute(sales_grid, "sales by product")
        assert sum(row["sales"] for row in result.data) == 600
        assert sum(row["count"] for row in result.data) == 5

    def test_blank_group_value_is_unknown(
        self, make_grid: Callable[..., MaterializedGrid], test_settings: Settings
    ) -> None:
        grid = make_grid([["Rep", "Sales"], ["Ann", 10], [None, 5], ["Ann", 1]])
        result = SalesExecutor(test_settings).execute(grid, "sales by rep")
        assert [row["rep"] for row in result.data] == ["Ann", "Unknown"]

    def test_unknown_group_column_falls_back_to_statistics(
        self, sales_grid: MaterializedGrid, test_settings: Settings
    ) -> None:
        result = SalesExecutor(test_settings).execute(sales_grid, "sales by colour")
        assert result.message.startswith("Sales analysis: 5 records")

    def test_grouping_by_sales_column_falls_back_to_statistics(
        self, sales_grid: MaterializedGrid, test_settings: Settings
    ) -> None:
        result = SalesExecutor(test_settings).execute(sales_grid, "sales by sales")
        assert result.message.startswith("Sales analysis: 5 records")
        assert len(result.data) == 5

    def test_missing_sales_column(
        self, make_grid: Callable[..., MaterializedGrid], test_settings: Settings
    ) -> None:
        grid = make_grid([["Name", "Units"], ["a", 1]])
        result = SalesExecutor(test_settings).execute(grid, "sales")
        assert not result.success
        assert result.message == "No sales/revenue column found in the data"
