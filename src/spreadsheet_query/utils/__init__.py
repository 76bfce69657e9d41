"""Utilities package for the spreadsheet query engine.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
"""

from spreadsheet_query.utils.exceptions import (
    ColumnNotFoundError,
    EmptyDatasetError,
    ErrorCode,
    FormulaEvaluationError,
    HTTPStatusMixin,
    QueryEngineError,
    UnhandledIntentError,
    ValidationError,
    WorkbookError,
)
from spreadsheet_query.utils.logging import (
    LogContext,
    StructuredLogger,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Exceptions
    "ColumnNotFoundError",
    "EmptyDatasetError",
    "ErrorCode",
    "FormulaEvaluationError",
    "HTTPStatusMixin",
    "QueryEngineError",
    "UnhandledIntentError",
    "ValidationError",
    "WorkbookError",
    # Logging
    "LogContext",
    "StructuredLogger",
    "get_logger",
    "get_request_id",
    "set_request_id",
]
