"""Sheet intent placeholder.

Sheet selection happens before a cell map reaches the engine (see
:class:`~spreadsheet_query.services.sheet_router.SheetRouter`), so at this
layer a sheet query is reported as unhandled.
"""

from spreadsheet_query.executors.base import Executor
from spreadsheet_query.grid import MaterializedGrid
from spreadsheet_query.models import Intent, QueryResult
from spreadsheet_query.utils.exceptions import UnhandledIntentError


class SheetExecutor(Executor):
    intent = Intent.SHEET

    def run(self, grid: MaterializedGrid, query: str) -> QueryResult:
        raise UnhandledIntentError(
            "Sheet-specific queries are handled at a higher level",
            intent=self.intent.value,
        )
