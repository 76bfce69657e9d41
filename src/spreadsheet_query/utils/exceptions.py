"""Centralized exception classes for the spreadsheet query engine.

This module provides a hierarchy of custom exceptions with error codes,
HTTP status code mapping, and structured error details. Inside the engine
these exceptions never reach the caller: they are either absorbed at the
smallest possible scope or converted into a ``success=false`` QueryResult.
Only the HTTP transport surfaces them as error responses.

Exception Hierarchy:
    QueryEngineError (base)
    ├── DatasetError
    │   ├── EmptyDatasetError
    │   └── DatasetTooLargeError
    ├── ColumnNotFoundError
    ├── UnhandledIntentError
    ├── FormulaEvaluationError
    ├── WorkbookError
    │   ├── WorksheetNotFoundError
    │   ├── UnsupportedFormatError
    │   └── FileTooLargeError
    └── ValidationError

Error Codes:
    All errors have a unique error code (e.g., "E1001") that can be used
    for programmatic error handling and documentation.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Enumeration of all error codes used in the application.

    Error codes are grouped by category:
    - E1xxx: Dataset errors
    - E2xxx: Column resolution errors
    - E3xxx: Query interpretation errors
    - E4xxx: Cell evaluation errors
    - E5xxx: Workbook and file errors
    - E9xxx: Internal/unexpected errors
    """

    # Dataset errors (E1xxx)
    EMPTY_DATASET = "E1001"
    DATASET_TOO_LARGE = "E1002"

    # Column resolution errors (E2xxx)
    COLUMN_NOT_FOUND = "E2001"
    NO_NUMERIC_COLUMNS = "E2002"

    # Query interpretation errors (E3xxx)
    NO_TARGET_LITERAL = "E3001"
    UNPARSEABLE_CLAUSE = "E3002"
    UNHANDLED_INTENT = "E3003"

    # Cell evaluation errors (E4xxx)
    FORMULA_EVALUATION_FAILED = "E4001"

    # Workbook and file errors (E5xxx)
    WORKSHEET_NOT_FOUND = "E5001"
    UNSUPPORTED_FORMAT = "E5002"
    FILE_TOO_LARGE = "E5003"

    # Internal errors (E9xxx)
    INTERNAL_ERROR = "E9001"
    INVALID_REQUEST = "E9002"


class HTTPStatusMixin:
    """Mixin that provides HTTP status code for exceptions.

    Subclasses should set the `http_status` class attribute.
    """

    http_status: int = 500

    def get_http_status(self) -> int:
        """Get the HTTP status code for this exception.

        Returns:
            HTTP status code appropriate for this error.
        """
        return self.http_status


class QueryEngineError(Exception, HTTPStatusMixin):
    """Base exception for all spreadsheet query errors.

    Attributes:
        message: Human-readable error message.
        error_code: Unique error code from ErrorCode enum.
        details: Optional dictionary with additional error details.
        http_status: HTTP status code for API responses (default 500).
    """

    http_status: int = 500

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Error code from ErrorCode enum.
            details: Optional additional details about the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary for API responses.

        Returns:
            Dictionary with error information.
        """
        result: dict[str, Any] = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code.value}] {self.message}"


# =============================================================================
# Dataset Errors (E1xxx)
# =============================================================================


class DatasetError(QueryEngineError):
    """Base class for dataset-level errors."""

    http_status: int = 400


class EmptyDatasetError(DatasetError):
    """Raised when the cell map has no entries."""

    def __init__(
        self,
        message: str = "No data available. Please import or enter data first.",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.EMPTY_DATASET, details)


class DatasetTooLargeError(DatasetError):
    """Raised when a cell map exceeds the configured cell limit."""

    http_status: int = 413

    def __init__(
        self,
        cell_count: int,
        max_cells: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with size information.

        Args:
            cell_count: Number of cells submitted.
            max_cells: Maximum allowed number of cells.
            details: Additional details.
        """
        details = details or {}
        details["cell_count"] = cell_count
        details["max_cells"] = max_cells
        super().__init__(
            f"Dataset has {cell_count} cells, exceeding the limit of {max_cells}",
            ErrorCode.DATASET_TOO_LARGE,
            details,
        )
        self.cell_count = cell_count
        self.max_cells = max_cells


# =============================================================================
# Column Resolution Errors (E2xxx)
# =============================================================================


class ColumnNotFoundError(QueryEngineError):
    """Raised when a required semantic column role has no matching header."""

    http_status: int = 422

    def __init__(
        self,
        message: str,
        role: str | None = None,
        error_code: ErrorCode = ErrorCode.COLUMN_NOT_FOUND,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the unresolved role.

        Args:
            message: Error message shown to the user.
            role: Semantic role that could not be resolved (e.g. "region").
            error_code: Error code.
            details: Additional details.
        """
        details = details or {}
        if role:
            details["role"] = role
        super().__init__(message, error_code, details)
        self.role = role


# =============================================================================
# Query Interpretation Errors (E3xxx)
# =============================================================================


class UnhandledIntentError(QueryEngineError):
    """Raised for intents that are delegated to a higher layer."""

    http_status: int = 422

    def __init__(
        self,
        message: str,
        intent: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if intent:
            details["intent"] = intent
        super().__init__(message, ErrorCode.UNHANDLED_INTENT, details)
        self.intent = intent


# =============================================================================
# Cell Evaluation Errors (E4xxx)
# =============================================================================


class FormulaEvaluationError(QueryEngineError):
    """Raised when a cell formula cannot be evaluated to a scalar."""

    def __init__(
        self,
        message: str,
        formula: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the failing formula.

        Args:
            message: Error message.
            formula: The formula text that failed.
            details: Additional details.
        """
        details = details or {}
        if formula is not None:
            details["formula"] = formula
        super().__init__(message, ErrorCode.FORMULA_EVALUATION_FAILED, details)
        self.formula = formula


# =============================================================================
# Workbook and File Errors (E5xxx)
# =============================================================================


class WorkbookError(QueryEngineError):
    """Base class for workbook and file errors."""

    http_status: int = 400


class WorksheetNotFoundError(WorkbookError):
    """Raised when a named worksheet does not exist in a workbook."""

    http_status: int = 404

    def __init__(
        self,
        sheet_name: str,
        available: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if available is not None:
            details["available_sheets"] = available
        super().__init__(
            f"Worksheet not found: {sheet_name}",
            ErrorCode.WORKSHEET_NOT_FOUND,
            details,
        )
        self.sheet_name = sheet_name


class UnsupportedFormatError(WorkbookError):
    """Raised when an uploaded file is neither XLSX nor CSV."""

    def __init__(
        self,
        message: str,
        extension: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if extension:
            details["extension"] = extension
        super().__init__(message, ErrorCode.UNSUPPORTED_FORMAT, details)
        self.extension = extension


class FileTooLargeError(WorkbookError):
    """Raised when a file exceeds the maximum allowed size."""

    http_status: int = 413

    def __init__(
        self,
        file_size: int,
        max_size: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with size information.

        Args:
            file_size: Actual file size in bytes.
            max_size: Maximum allowed size in bytes.
            details: Additional details.
        """
        details = details or {}
        details["file_size_bytes"] = file_size
        details["max_size_bytes"] = max_size
        message = (
            f"File size ({file_size} bytes) exceeds maximum "
            f"allowed size ({max_size} bytes)"
        )
        super().__init__(message, ErrorCode.FILE_TOO_LARGE, details)
        self.file_size = file_size
        self.max_size = max_size


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(QueryEngineError):
    """General validation error for request input."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with validation details.

        Args:
            message: Main error message.
            field: Field that failed validation.
            details: Additional details.
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, ErrorCode.INVALID_REQUEST, details)
