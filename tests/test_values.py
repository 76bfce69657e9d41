"""Tests for cell value coercion helpers."""

import math

import pytest

from spreadsheet_query.values import (
    as_text,
    contains_text,
    format_fixed,
    is_blank,
    to_number,
)


class TestToNumber:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (5, 5),
            (2.5, 2.5),
            ("42", 42),
            (" -7 ", -7),
            ("3.25", 3.25),
            (".5", 0.5),
            ("1e3", 1000.0),
        ],
    )
    def test_numeric_values(self, value: object, expected: float) -> None:
        assert to_number(value) == expected  # type: ignore[arg-type]

    def test_integer_strings_stay_integers(self) -> None:
        assert isinstance(to_number("42"), int)

    @pytest.mark.parametrize(
        "value", [None, True, False, "", "abc", "12abc", "1,000", math.inf, math.nan]
    )
    def test_non_numeric_values(self, value: object) -> None:
        assert to_number(value) is None  # type: ignore[arg-type]

    def test_overflowing_decimal_is_not_a_number(self) -> None:
        assert to_number("1e999") is None


class TestAsText:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, ""),
            (True, "true"),
            (False, "false"),
            (120.0, "120"),
            (2.5, "2.5"),
            (7, "7"),
            ("West", "West"),
        ],
    )
    def test_rendering(self, value: object, expected: str) -> None:
        assert as_text(value) == expected  # type: ignore[arg-type]


def test_is_blank() -> None:
    assert is_blank(None)
    assert is_blank("")
    assert not is_blank(0)
    assert not is_blank(" ")


def test_contains_text_is_case_insensitive() -> None:
    assert contains_text("Widget A", "widget")
    assert contains_text(2024, "202")
    assert not contains_text(None, "x")


def test_format_fixed() -> None:
    assert format_fixed(400) == "400.00"
    assert format_fixed(2 / 3) == "0.67"
