"""FastAPI application exposing the spreadsheet query engine over HTTP."""

import uuid
from collections.abc import Mapping
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import (
    FastAPI,
    File,
    Form,
    HTTPException,
    Query,
    Request,
    UploadFile,
    status,
)
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from spreadsheet_query.config import settings, validate_settings_on_startup
from spreadsheet_query.engine import QueryEngine
from spreadsheet_query.models import (
    Cell,
    ErrorDetail,
    ExportFormat,
    HealthResponse,
    QueryRequest,
    WorkbookQueryRequest,
)
from spreadsheet_query.output.exporter import ResultExporter
from spreadsheet_query.services.workbook_loader import (
    WorkbookLoader,
    WorkbookLoadOptions,
)
from spreadsheet_query.utils.exceptions import (
    DatasetTooLargeError,
    ErrorCode,
    FileTooLargeError,
    QueryEngineError,
    ValidationError,
)
from spreadsheet_query.utils.logging import (
    clear_context,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)

API_VERSION = "0.1.0"

# Configure structured logging using settings
configure_logging(
    level=settings.log_level_int,
    use_structured_formatter=True,
)
logger = get_logger(__name__)


def _check_cell_limit(cell_maps: list[Mapping[str, Cell]]) -> None:
    """Reject requests whose cell maps exceed the configured cell limit."""
    cell_count = sum(len(cells) for cells in cell_maps)
    if cell_count > settings.max_cells:
        logger.warning(
            "Dataset too large",
            cell_count=cell_count,
            max_cells=settings.max_cells,
        )
        raise DatasetTooLargeError(
            cell_count=cell_count, max_cells=settings.max_cells
        )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    engine = QueryEngine(settings)
    loader = WorkbookLoader()
    exporter = ResultExporter()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> Any:
        logger.info("Query engine ready", cache_size=settings.grid_cache_size)
        try:
            yield
        finally:
            engine.cache.clear()

    app = FastAPI(
        title="Spreadsheet Query API",
        description=(
            "Natural-language queries over spreadsheet data: filtering, "
            "aggregation, ranking, comparison and chart preparation."
        ),
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.engine = engine

    # Configure CORS using settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Validate settings on startup
    validate_settings_on_startup(settings)

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next: Any) -> Any:
        """Assign a request ID, expose it in the response and clear it afterwards."""
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        set_request_id(request_id)
        request.state.request_id = request_id

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_context()

    @app.exception_handler(QueryEngineError)
    async def engine_exception_handler(
        request: Request, exc: QueryEngineError
    ) -> JSONResponse:
        """Return structured error responses for engine exceptions."""
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.error(
            f"Query Engine Error: {exc.message}",
            error_code=exc.error_code.value,
            http_status=exc.http_status,
        )
        return JSONResponse(
            status_code=exc.http_status,
            content=ErrorDetail(
                detail=exc.message,
                error_code=exc.error_code.value,
                details=exc.details if exc.details else None,
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        """Custom exception handler for HTTP exceptions."""
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.warning(
            f"HTTP Error: {exc.detail}",
            status_code=exc.status_code,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorDetail(
                detail=str(exc.detail),
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all handler that hides internals unless debug is enabled."""
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.exception(
            f"Unexpected error: {type(exc).__name__}",
            error_type=type(exc).__name__,
        )
        if settings.debug:
            detail = f"Internal server error: {type(exc).__name__}: {exc}"
        else:
            detail = "Internal server error. Please try again later."

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorDetail(
                detail=detail,
                error_code=ErrorCode.INTERNAL_ERROR.value,
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request) -> dict[str, Any]:
        """Check the health status of the service."""
        request_id = getattr(request.state, "request_id", None)
        logger.debug("Health check requested", request_id=request_id)
        return {
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "version": API_VERSION,
        }

    @app.post(
        "/query",
        tags=["Query"],
        responses={413: {"model": ErrorDetail, "description": "Too many cells"}},
    )
    async def query_cells(body: QueryRequest) -> JSONResponse:
        """Run a natural-language query against a cell map.

        The response is always a QueryResult envelope; query-level problems
        (no data, missing columns) are reported with ``success: false``.
        """
        _check_cell_limit([body.cells])
        result = await engine.process_query_async(body.cells, body.query)
        return JSONResponse(content=result.to_dict())

    @app.post(
        "/workbook/query",
        tags=["Query"],
        responses={413: {"model": ErrorDetail, "description": "Too many cells"}},
    )
    async def query_workbook(body: WorkbookQueryRequest) -> JSONResponse:
        """Route a query to the worksheet it names, then run it."""
        _check_cell_limit([ws.cells for ws in body.workbook.worksheets])
        response = engine.process_workbook_query(body.workbook, body.query)
        return JSONResponse(content=response.to_dict())

    @app.post(
        "/query/file",
        tags=["Query"],
        responses={
            400: {"model": ErrorDetail, "description": "Unsupported file"},
            404: {"model": ErrorDetail, "description": "Worksheet not found"},
            413: {"model": ErrorDetail, "description": "File too large"},
        },
    )
    async def query_file(
        request: Request,
        file: Annotated[UploadFile, File(description="XLSX or CSV file")],
        query: Annotated[str, Form(min_length=1, description="Natural-language query")],
        sheet: Annotated[
            str | None, Form(description="Worksheet to load (default: all)")
        ] = None,
    ) -> JSONResponse:
        """Upload a spreadsheet file and query it."""
        request_id = getattr(request.state, "request_id", None)

        if file.filename is None or file.filename == "":
            logger.warning("Query request missing file", request_id=request_id)
            raise ValidationError(
                message="A spreadsheet file must be provided", field="file"
            )

        content = await file.read()
        if len(content) > settings.max_upload_size_bytes:
            logger.warning(
                "File too large",
                file_size=len(content),
                max_size=settings.max_upload_size_bytes,
                request_id=request_id,
            )
            raise FileTooLargeError(
                file_size=len(content), max_size=settings.max_upload_size_bytes
            )

        workbook = loader.load_bytes(
            content, file.filename, WorkbookLoadOptions(sheet_name=sheet or None)
        )
        _check_cell_limit([ws.cells for ws in workbook.worksheets])
        response = engine.process_workbook_query(workbook, query)
        return JSONResponse(content=response.to_dict())

    @app.post(
        "/query/export",
        tags=["Query"],
        responses={
            200: {"content": {"application/json": {}, "text/csv": {}}},
            400: {"model": ErrorDetail, "description": "Failed result"},
        },
    )
    async def export_query(
        body: QueryRequest,
        fmt: Annotated[
            ExportFormat, Query(alias="format", description="Export format")
        ] = ExportFormat.JSON,
    ) -> Response:
        """Run a query and download its result as JSON or CSV."""
        _check_cell_limit([body.cells])
        result = await engine.process_query_async(body.cells, body.query)
        document = exporter.export(result, fmt)
        return Response(
            content=document.content,
            media_type=document.media_type,
            headers={
                "Content-Disposition": (
                    f'attachment; filename="{document.filename()}"'
                )
            },
        )

    return app


# Create the default app instance
app = create_app()
