"""Spreadsheet Query - natural-language queries over spreadsheet cell maps."""

from spreadsheet_query.api import app, create_app
from spreadsheet_query.engine import QueryEngine

__all__ = ["QueryEngine", "app", "create_app"]
__version__ = "0.1.0"


def main() -> None:
    """Run the FastAPI server using uvicorn."""
    import uvicorn

    from spreadsheet_query.config import settings

    uvicorn.run(
        "spreadsheet_query.api:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
    )
