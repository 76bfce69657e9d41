"""Tests for the centralized exception classes."""

import pytest

from spreadsheet_query.utils.exceptions import (
    ColumnNotFoundError,
    DatasetError,
    DatasetTooLargeError,
    EmptyDatasetError,
    ErrorCode,
    FileTooLargeError,
    FormulaEvaluationError,
    QueryEngineError,
    UnhandledIntentError,
    UnsupportedFormatError,
    ValidationError,
    WorkbookError,
    WorksheetNotFoundError,
)


class TestErrorCode:
    """Tests for ErrorCode enumeration."""

    def test_error_codes_are_unique(self) -> None:
        values = [code.value for code in ErrorCode]
        assert len(values) == len(set(values))

    def test_error_code_format(self) -> None:
        """Error codes should follow Exxxx format."""
        for code in ErrorCode:
            assert code.value.startswith("E")
            assert len(code.value) == 5
            assert code.value[1:].isdigit()

    @pytest.mark.parametrize(
        ("prefix", "codes"),
        [
            ("E1", [ErrorCode.EMPTY_DATASET, ErrorCode.DATASET_TOO_LARGE]),
            ("E2", [ErrorCode.COLUMN_NOT_FOUND, ErrorCode.NO_NUMERIC_COLUMNS]),
            (
                "E3",
                [
                    ErrorCode.NO_TARGET_LITERAL,
                    ErrorCode.UNPARSEABLE_CLAUSE,
                    ErrorCode.UNHANDLED_INTENT,
                ],
            ),
            ("E4", [ErrorCode.FORMULA_EVALUATION_FAILED]),
            (
                "E5",
                [
                    ErrorCode.WORKSHEET_NOT_FOUND,
                    ErrorCode.UNSUPPORTED_FORMAT,
                    ErrorCode.FILE_TOO_LARGE,
                ],
            ),
            ("E9", [ErrorCode.INTERNAL_ERROR, ErrorCode.INVALID_REQUEST]),
        ],
    )
    def test_codes_grouped_by_category(
        self, prefix: str, codes: list[ErrorCode]
    ) -> None:
        for code in codes:
            assert code.value.startswith(prefix)


class TestQueryEngineError:
    """Tests for the base exception."""

    def test_defaults(self) -> None:
        error = QueryEngineError("Something broke")
        assert error.message == "Something broke"
        assert error.error_code == ErrorCode.INTERNAL_ERROR
        assert error.details == {}
        assert error.http_status == 500

    def test_str_includes_error_code(self) -> None:
        error = QueryEngineError("Something broke")
        assert str(error) == "[E9001] Something broke"

    def test_to_dict_without_details(self) -> None:
        error = QueryEngineError("Something broke")
        assert error.to_dict() == {"error_code": "E9001", "message": "Something broke"}

    def test_to_dict_with_details(self) -> None:
        error = QueryEngineError("Bad", details={"cell": "A1"})
        assert error.to_dict()["details"] == {"cell": "A1"}

    def test_get_http_status(self) -> None:
        assert QueryEngineError("x").get_http_status() == 500


class TestDatasetErrors:
    """Tests for dataset-level errors."""

    def test_empty_dataset_default_message(self) -> None:
        error = EmptyDatasetError()
        assert error.message == "No data available. Please import or enter data first."
        assert error.error_code == ErrorCode.EMPTY_DATASET
        assert error.http_status == 400

    def test_dataset_too_large(self) -> None:
        error = DatasetTooLargeError(cell_count=2000, max_cells=1000)
        assert error.cell_count == 2000
        assert error.max_cells == 1000
        assert error.details == {"cell_count": 2000, "max_cells": 1000}
        assert error.http_status == 413
        assert "2000" in error.message


class TestColumnNotFoundError:
    def test_role_recorded_in_details(self) -> None:
        error = ColumnNotFoundError("No region column found", role="region")
        assert error.role == "region"
        assert error.details["role"] == "region"
        assert error.error_code == ErrorCode.COLUMN_NOT_FOUND
        assert error.http_status == 422

    def test_custom_error_code(self) -> None:
        error = ColumnNotFoundError(
            "No numeric columns found", error_code=ErrorCode.NO_NUMERIC_COLUMNS
        )
        assert error.error_code == ErrorCode.NO_NUMERIC_COLUMNS
        assert "role" not in error.details


class TestQueryErrors:
    def test_unhandled_intent(self) -> None:
        error = UnhandledIntentError("Handled elsewhere", intent="sheet")
        assert error.intent == "sheet"
        assert error.details == {"intent": "sheet"}
        assert error.error_code == ErrorCode.UNHANDLED_INTENT

    def test_formula_evaluation(self) -> None:
        error = FormulaEvaluationError("Division by zero", formula="=A1/0")
        assert error.formula == "=A1/0"
        assert error.details["formula"] == "=A1/0"
        assert error.error_code == ErrorCode.FORMULA_EVALUATION_FAILED


class TestWorkbookErrors:
    """Tests for workbook and file errors."""

    def test_worksheet_not_found(self) -> None:
        error = WorksheetNotFoundError("Q3", available=["Q1", "Q2"])
        assert error.sheet_name == "Q3"
        assert error.message == "Worksheet not found: Q3"
        assert error.details["available_sheets"] == ["Q1", "Q2"]
        assert error.http_status == 404

    def test_unsupported_format(self) -> None:
        error = UnsupportedFormatError("Unsupported file type", extension=".pdf")
        assert error.extension == ".pdf"
        assert error.error_code == ErrorCode.UNSUPPORTED_FORMAT
        assert error.http_status == 400

    def test_file_too_large(self) -> None:
        error = FileTooLargeError(file_size=20, max_size=10)
        assert error.details == {"file_size_bytes": 20, "max_size_bytes": 10}
        assert error.http_status == 413


class TestValidationError:
    def test_field_recorded(self) -> None:
        error = ValidationError("Query must not be empty", field="query")
        assert error.details == {"field": "query"}
        assert error.error_code == ErrorCode.INVALID_REQUEST
        assert error.http_status == 400


class TestExceptionInheritance:
    """Tests for the exception hierarchy."""

    @pytest.mark.parametrize(
        ("error", "parent"),
        [
            (EmptyDatasetError(), DatasetError),
            (DatasetTooLargeError(cell_count=2, max_cells=1), DatasetError),
            (WorksheetNotFoundError("x"), WorkbookError),
            (UnsupportedFormatError("x"), WorkbookError),
            (FileTooLargeError(file_size=2, max_size=1), WorkbookError),
        ],
    )
    def test_subclass_relationships(
        self, error: QueryEngineError, parent: type[QueryEngineError]
    ) -> None:
        assert isinstance(error, parent)
        assert isinstance(error, QueryEngineError)
        assert isinstance(error, Exception)
