"""Tests for the FastAPI application."""

import io
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any
from unittest.mock import patch

import httpx
import pytest
from fastapi import status
from openpyxl import Workbook as OpenpyxlWorkbook

from spreadsheet_query.api import create_app
from spreadsheet_query.models import CellMap


@asynccontextmanager
async def create_test_client(
    patches: dict[str, Any] | None = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """Create an async test client with proper lifespan handling.

    Args:
        patches: Optional dictionary of patch targets and values.
    """
    with patch.dict("os.environ", {}, clear=False):
        for target, value in (patches or {}).items():
            patch(target, value).start()
        try:
            app = create_app()
            async with (
                app.router.lifespan_context(app),
                httpx.AsyncClient(
                    transport=httpx.ASGITransport(app=app),
                    base_url="http://test",
                ) as client,
            ):
                client.app = app  # type: ignore[attr-defined]
                yield client
        finally:
            patch.stopall()


@pytest.fixture
async def client() -> AsyncIterator[httpx.AsyncClient]:
    """Create an async test client for the FastAPI application."""
    async with create_test_client() as ac:
        yield ac


@pytest.fixture
def cells_payload(sales_cells: CellMap) -> dict[str, Any]:
    """The sales cell map as it would arrive in a JSON request body."""
    return {key: cell.model_dump() for key, cell in sales_cells.items()}


def _xlsx_bytes() -> bytes:
    wb = OpenpyxlWorkbook()
    ws = wb.active
    ws.title = "Sales"
    ws.append(["Region", "Sales"])
    ws.append(["West", 120])
    ws.append(["East", 80])
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    async def test_health_check_returns_200(self, client: httpx.AsyncClient) -> None:
        """Test that health check returns 200 OK."""
        response = await client.get("/health")
        assert response.status_code == status.HTTP_200_OK

    async def test_health_check_response_format(
        self, client: httpx.AsyncClient
    ) -> None:
        """Test that health check returns expected fields."""
        data = (await client.get("/health")).json()
        assert data["status"] == "healthy"
        assert data["version"] == "0.1.0"
        datetime.fromisoformat(data["timestamp"])

    async def test_request_id_echoed(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/health", headers={"X-Request-ID": "req-42"})
        assert response.headers["X-Request-ID"] == "req-42"

    async def test_request_id_generated(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/health")
        assert response.headers["X-Request-ID"]


class TestOpenAPIDocs:
    async def test_openapi_schema(self, client: httpx.AsyncClient) -> None:
        schema = (await client.get("/openapi.json")).json()
        assert schema["info"]["title"] == "Spreadsheet Query API"
        assert "/query" in schema["paths"]
        assert "/workbook/query" in schema["paths"]


class TestQueryEndpoint:
    """Tests for POST /query."""

    async def test_successful_query(
        self, client: httpx.AsyncClient, cells_payload: dict[str, Any]
    ) -> None:
        response = await client.post(
            "/query", json={"cells": cells_payload, "query": "top 3"}
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Found top 3 records by sales"
        assert [row["sales"] for row in data["data"]] == [200, 150, 120]
        assert data["summary"]["totalRows"] == 3
        assert data["summary"]["filters"] == ["top 3 by sales"]

    async def test_failed_query_omits_summary(self, client: httpx.AsyncClient) -> None:
        response = await client.post("/query", json={"cells": {}, "query": "total"})
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data == {
            "success": False,
            "message": "No data available. Please import or enter data first.",
            "data": [],
        }

    async def test_empty_query_rejected(self, client: httpx.AsyncClient) -> None:
        response = await client.post("/query", json={"cells": {}, "query": ""})
        assert response.status_code == 422

    async def test_too_many_cells(self, cells_payload: dict[str, Any]) -> None:
        async with create_test_client(
            {"spreadsheet_query.api.settings.max_cells": 3}
        ) as client:
            response = await client.post(
                "/query", json={"cells": cells_payload, "query": "top 3"}
            )
        assert response.status_code == 413
        data = response.json()
        assert data["error_code"] == "E1002"
        assert data["request_id"]


class TestWorkbookQueryEndpoint:
    """Tests for POST /workbook/query."""

    async def test_routes_to_named_sheet(
        self, client: httpx.AsyncClient, cells_payload: dict[str, Any]
    ) -> None:
        body = {
            "workbook": {
                "worksheets": [
                    {"name": "Notes", "cells": {}},
                    {"name": "Sales", "cells": cells_payload},
                ],
                "active_worksheet": "Notes",
            },
            "query": "top 2 in Sales",
        }
        response = await client.post("/workbook/query", json=body)
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["worksheet"] == "Sales"
        assert data["processed_query"] == "top 2 in"
        assert len(data["result"]["data"]) == 2


class TestQueryFileEndpoint:
    """Tests for POST /query/file."""

    async def test_csv_upload(self, client: httpx.AsyncClient) -> None:
        content = b"Region,Sales\nWest,120\nEast,80\nWest,30\n"
        response = await client.post(
            "/query/file",
            files={"file": ("sales.csv", content, "text/csv")},
            data={"query": "top 2"},
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["worksheet"] == "sales"
        assert data["result"]["data"] == [
            {"region": "West", "sales": 120},
            {"region": "East", "sales": 80},
        ]

    async def test_xlsx_upload_with_sheet(self, client: httpx.AsyncClient) -> None:
        response = await client.post(
            "/query/file",
            files={"file": ("book.xlsx", _xlsx_bytes())},
            data={"query": "total sales", "sheet": "Sales"},
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        # the sheet name is stripped from the query before classification
        assert data["processed_query"] == "total"
        assert data["result"]["data"] == [{"sum_sales": 200}]

    async def test_unknown_sheet(self, client: httpx.AsyncClient) -> None:
        response = await client.post(
            "/query/file",
            files={"file": ("book.xlsx", _xlsx_bytes())},
            data={"query": "total", "sheet": "Missing"},
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_unsupported_format(self, client: httpx.AsyncClient) -> None:
        response = await client.post(
            "/query/file",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            data={"query": "total"},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "Unsupported file format" in response.json()["detail"]

    async def test_file_too_large(self) -> None:
        async with create_test_client(
            {"spreadsheet_query.api.settings.max_upload_size_mb": 1}
        ) as client:
            response = await client.post(
                "/query/file",
                files={"file": ("big.csv", b"a" * (1024 * 1024 + 1), "text/csv")},
                data={"query": "total"},
            )
        assert response.status_code == 413


class TestExportEndpoint:
    """Tests for POST /query/export."""

    async def test_json_export(
        self, client: httpx.AsyncClient, cells_payload: dict[str, Any]
    ) -> None:
        response = await client.post(
            "/query/export", json={"cells": cells_payload, "query": "top 2"}
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-type"].startswith("application/json")
        assert 'filename="query_result.json"' in (
            response.headers["content-disposition"]
        )
        assert response.json()["summary"]["totalRows"] == 2

    async def test_csv_export(
        self, client: httpx.AsyncClient, cells_payload: dict[str, Any]
    ) -> None:
        response = await client.post(
            "/query/export?format=csv",
            json={"cells": cells_payload, "query": "top 2"},
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.strip().splitlines()
        assert lines[0] == "region,product,sales,units,date"
        assert len(lines) == 3

    async def test_csv_export_of_failed_result(
        self, client: httpx.AsyncClient
    ) -> None:
        response = await client.post(
            "/query/export?format=csv", json={"cells": {}, "query": "top 2"}
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
