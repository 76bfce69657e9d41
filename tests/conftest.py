from __future__ import annotations

import os
from collections.abc import Callable
from unittest.mock import patch

import pytest

from spreadsheet_query.cells import build_cell_map
from spreadsheet_query.config import Settings
from spreadsheet_query.engine import QueryEngine
from spreadsheet_query.grid import MaterializedGrid
from spreadsheet_query.models import CellMap, CellValue
from spreadsheet_query.services.grid_materializer import GridMaterializer

SALES_ROWS: list[list[CellValue]] = [
    ["Region", "Product", "Sales", "Units", "Date"],
    ["West", "Widget A", 120, 10, "2024-01-15"],
    ["East", "Widget B", 80, 5, "2024-02-10"],
    ["West", "Gadget", 200, 20, "2024-03-05"],
    ["North", "Widget A", 150, 15, "2023-12-20"],
    ["East", "Gadget", 50, 3, "2024-01-30"],
]


@pytest.fixture
def test_settings() -> Settings:
    """Settings built from defaults only, ignoring the environment."""
    with patch.dict(os.environ, {}, clear=True):
        return Settings(_env_file=None)


@pytest.fixture
def sales_cells() -> CellMap:
    """Five sales records with region, product, sales, units and date columns."""
    return build_cell_map(SALES_ROWS)


@pytest.fixture
def sales_grid(sales_cells: CellMap, test_settings: Settings) -> MaterializedGrid:
    return GridMaterializer(config=test_settings).materialize(sales_cells)


@pytest.fixture
def empty_grid() -> MaterializedGrid:
    return MaterializedGrid()


@pytest.fixture
def make_grid(
    test_settings: Settings,
) -> Callable[[list[list[CellValue]]], MaterializedGrid]:
    """Factory materializing ad-hoc row-major data."""
    materializer = GridMaterializer(config=test_settings)

    def _make(rows: list[list[CellValue]]) -> MaterializedGrid:
        return materializer.materialize(build_cell_map(rows))

    return _make


@pytest.fixture
def engine(test_settings: Settings) -> QueryEngine:
    return QueryEngine(test_settings)
