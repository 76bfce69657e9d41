"""Pydantic models for the engine's input/output contracts and the HTTP API."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from spreadsheet_query.utils.exceptions import ErrorCode

CellValue = bool | int | float | str | None
"""Scalar stored in a cell. Booleans are listed first so they never coerce to int."""


class ColumnType(str, Enum):
    """Inferred type of a materialized column."""

    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
    TEXT = "text"


class Intent(str, Enum):
    """Classified purpose of a natural-language query."""

    CHART = "chart"
    REGION = "region"
    PRODUCT = "product"
    DATE = "date"
    SALES = "sales"
    RANKING = "ranking"
    COMPARISON = "comparison"
    AGGREGATION = "aggregation"
    FILTER = "filter"
    SHEET = "sheet"
    GENERAL = "general"


class Cell(BaseModel):
    """A single spreadsheet cell addressed by 1-based row and column.

    Extra keys sent by spreadsheet front-ends (``id``, ``type``, ``format``)
    are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    row: int = Field(..., ge=1, description="1-based row index")
    col: int = Field(..., ge=1, description="1-based column index")
    value: CellValue = Field(default=None, description="Literal cell value")
    formula: str | None = Field(
        default=None, description="Formula text, with or without a leading '='"
    )


CellMap = dict[str, Cell]
"""Sparse coordinate-keyed cell store (e.g. ``{"A1": Cell(...)}``)."""


class QuerySummary(BaseModel):
    """Display-oriented description of why a result looks the way it does."""

    model_config = ConfigDict(populate_by_name=True)

    total_rows: int = Field(..., alias="totalRows", ge=0)
    columns: list[str] = Field(default_factory=list)
    filters: list[str] = Field(default_factory=list)


class QueryResult(BaseModel):
    """Uniform envelope returned for every processed query.

    ``success=False`` always carries an empty ``data`` list and an explanatory
    ``message``. For successful results ``len(data) == summary.total_rows``.
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    data: list[dict[str, Any]] = Field(default_factory=list)
    summary: QuerySummary | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize with stable camelCase field names, omitting an absent summary.

        Returns:
            JSON-compatible dictionary.
        """
        payload = self.model_dump(by_alias=True)
        if payload["summary"] is None:
            del payload["summary"]
        return payload


class Worksheet(BaseModel):
    """A named sheet holding its own cell map."""

    name: str = Field(..., min_length=1)
    cells: CellMap = Field(default_factory=dict)


class Workbook(BaseModel):
    """An ordered collection of worksheets with one active sheet."""

    name: str = "Workbook"
    worksheets: list[Worksheet] = Field(default_factory=list)
    active_worksheet: str | None = None

    @property
    def sheet_names(self) -> list[str]:
        """Worksheet names in workbook order."""
        return [ws.name for ws in self.worksheets]

    def get_worksheet(self, name: str) -> Worksheet | None:
        """Look up a worksheet by exact name."""
        for ws in self.worksheets:
            if ws.name == name:
                return ws
        return None

    @property
    def active(self) -> Worksheet | None:
        """The active worksheet, falling back to the first one."""
        if self.active_worksheet:
            found = self.get_worksheet(self.active_worksheet)
            if found is not None:
                return found
        return self.worksheets[0] if self.worksheets else None


# =============================================================================
# HTTP API models
# =============================================================================


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    timestamp: str
    version: str


class ExportFormat(str, Enum):
    """Output formats supported by the export endpoint."""

    JSON = "json"
    CSV = "csv"


class QueryRequest(BaseModel):
    """Request body for querying a single cell map."""

    cells: CellMap = Field(default_factory=dict, description="Sparse cell map")
    query: str = Field(..., min_length=1, description="Natural-language query")


class WorkbookQueryRequest(BaseModel):
    """Request body for querying a multi-sheet workbook."""

    workbook: Workbook
    query: str = Field(..., min_length=1, description="Natural-language query")


class WorkbookQueryResponse(BaseModel):
    """Result of a workbook query together with the routing decision."""

    worksheet: str | None = Field(
        default=None, description="Worksheet the query was routed to"
    )
    processed_query: str = Field(
        ..., description="Query text after sheet references were stripped"
    )
    result: QueryResult

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the nested result in its stable envelope form."""
        payload = self.model_dump(exclude={"result"})
        payload["result"] = self.result.to_dict()
        return payload


class ErrorDetail(BaseModel):
    """Error detail model for API error responses."""

    detail: str = Field(..., description="Human-readable error message")
    error_code: str | None = Field(
        default=None,
        description="Machine-readable error code (e.g., 'E1001')",
    )
    details: dict[str, Any] | None = Field(
        default=None,
        description="Additional error details for debugging",
    )
    request_id: str | None = Field(
        default=None,
        description="Request ID for error correlation",
    )

    @classmethod
    def from_error_code(
        cls,
        error_code: ErrorCode,
        detail: str,
        details: dict[str, Any] | None = None,
        request_id: str | None = None,
    ) -> "ErrorDetail":
        """Create an ErrorDetail from an ErrorCode enum value."""
        return cls(
            detail=detail,
            error_code=error_code.value,
            details=details,
            request_id=request_id,
        )
