"""Query engine facade: cell map plus query text in, ``QueryResult`` out.

Processing one query:
1. An empty cell map fails immediately with a "no data" result.
2. The cell map is materialized into a typed grid snapshot, reused from
   the grid cache when the same dataset was seen before.
3. The query is classified into one intent.
4. The intent's executor runs read-only over the snapshot.

The engine never raises to its caller. Engine errors become
``success=false`` results at the executor; anything unexpected is caught
here and reported the same way.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Mapping

from spreadsheet_query.config import Settings, settings
from spreadsheet_query.executors import Executor, build_executors
from spreadsheet_query.grid import MaterializedGrid
from spreadsheet_query.models import (
    Cell,
    Intent,
    QueryResult,
    Workbook,
    WorkbookQueryResponse,
)
from spreadsheet_query.output.result_formatter import ResultFormatter
from spreadsheet_query.services.grid_cache import GridCache, fingerprint
from spreadsheet_query.services.grid_materializer import GridMaterializer
from spreadsheet_query.services.intent_classifier import classify
from spreadsheet_query.services.sheet_router import SheetRouter
from spreadsheet_query.utils.exceptions import EmptyDatasetError
from spreadsheet_query.utils.logging import LogContext, get_logger

logger = get_logger(__name__)


class QueryEngine:
    """Process natural-language queries against spreadsheet cell maps.

    An engine holds no per-dataset state besides the snapshot cache, so a
    single instance can serve concurrent queries.
    """

    def __init__(self, config: Settings | None = None) -> None:
        """Initialize the engine.

        Args:
            config: Settings to use. Defaults to the global settings.
        """
        self.settings = config or settings
        self.materializer = GridMaterializer(config=self.settings)
        self.cache = GridCache(max_size=self.settings.grid_cache_size)
        self.router = SheetRouter()
        self.executors: dict[Intent, Executor] = build_executors(self.settings)

    def materialize(self, cells: Mapping[str, Cell]) -> MaterializedGrid:
        """Typed snapshot of a cell map, from the cache when possible."""
        return self.cache.get_or_build(cells, self.materializer.materialize)

    def process_query(self, cells: Mapping[str, Cell], query: str) -> QueryResult:
        """Process one query against a cell map.

        Args:
            cells: Sparse coordinate-keyed cell map.
            query: Free-text query.

        Returns:
            The query result. Never raises.
        """
        with LogContext(query_id=uuid.uuid4().hex[:12]):
            if not cells:
                return self._empty_result()
            try:
                grid = self.materialize(cells)
            except Exception as e:
                logger.exception("Materialization failed", error_type=type(e).__name__)
                return ResultFormatter.failure(f"Error processing query: {e}")
            return self.execute(grid, query)

    async def process_query_async(
        self, cells: Mapping[str, Cell], query: str
    ) -> QueryResult:
        """Async variant of :meth:`process_query`.

        The snapshot cache is consulted first; on a miss the grid is
        materialized in chunks that yield to the event loop.
        """
        with LogContext(query_id=uuid.uuid4().hex[:12]):
            if not cells:
                return self._empty_result()
            try:
                grid = await self._materialize_async(cells)
            except Exception as e:
                logger.exception("Materialization failed", error_type=type(e).__name__)
                return ResultFormatter.failure(f"Error processing query: {e}")
            return self.execute(grid, query)

    def execute(self, grid: MaterializedGrid, query: str) -> QueryResult:
        """Classify a query and run its executor over an existing snapshot."""
        started = time.perf_counter()
        intent = classify(query)
        with LogContext(intent=intent.value):
            try:
                result = self.executors[intent].execute(grid, query)
            except Exception as e:
                logger.exception(
                    "Error processing query", error_type=type(e).__name__
                )
                result = ResultFormatter.failure(f"Error processing query: {e}")
            logger.log_query_result(
                intent=intent.value,
                success=result.success,
                row_count=len(result.data),
                duration_seconds=time.perf_counter() - started,
                message=result.message,
            )
        return result

    def process_workbook_query(
        self, workbook: Workbook, query: str
    ) -> WorkbookQueryResponse:
        """Route a query to a worksheet of the workbook, then process it.

        Args:
            workbook: Workbook with ordered worksheets and an active sheet.
            query: Free-text query, possibly naming a worksheet.

        Returns:
            The routing decision together with the query result.
        """
        routed = self.router.route(workbook, query)
        cells = routed.worksheet.cells if routed.worksheet is not None else {}
        result = self.process_query(cells, routed.processed_query)
        return WorkbookQueryResponse(
            worksheet=routed.worksheet.name if routed.worksheet is not None else None,
            processed_query=routed.processed_query,
            result=result,
        )

    async def _materialize_async(self, cells: Mapping[str, Cell]) -> MaterializedGrid:
        if not self.cache.enabled:
            return await self.materializer.materialize_async(cells)
        key = fingerprint(cells)
        grid = self.cache.get(key)
        if grid is None:
            grid = await self.materializer.materialize_async(cells)
            self.cache.put(key, grid)
        return grid

    @staticmethod
    def _empty_result() -> QueryResult:
        error = EmptyDatasetError()
        logger.debug("Empty cell map", error_code=error.error_code.value)
        return ResultFormatter.failure(error.message)
