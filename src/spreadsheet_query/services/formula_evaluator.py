"""Best-effort evaluation of trivial cell formulas.

Supported: numeric, string and boolean literals (``TRUE``/``FALSE``),
arithmetic (``+ - * / // % ^ **``), unary signs, comparisons (``= <> < <=
> >=``), ``&`` string concatenation, parentheses and A1 references to other
cells of the same map. References are resolved recursively with cycle
detection. Anything else raises :class:`FormulaEvaluationError`; callers
that must never fail substitute the raw formula text.
"""

from __future__ import annotations

import ast
import math
import operator
import re
import sys
from collections.abc import Callable, Mapping
from typing import Any

from spreadsheet_query.cells import parse_coordinate
from spreadsheet_query.models import Cell, CellValue
from spreadsheet_query.utils.exceptions import FormulaEvaluationError

_NOT_EQUAL_RE = re.compile(r"<>")
_EQUALITY_RE = re.compile(r"(?<![<>!=])=(?!=)")
_ABSOLUTE_REF_RE = re.compile(r"\$(?=[A-Za-z]|\d)")
_REFERENCE_RE = re.compile(r"^[A-Za-z]{1,3}\d+$")

MAX_EXPONENT = 1024
# Largest decimal exponent a numeric result may reach
MAX_MAGNITUDE_DIGITS = sys.float_info.max_10_exp

_BINARY_OPERATORS: dict[type[ast.operator], Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_COMPARE_OPERATORS: dict[type[ast.cmpop], Callable[[Any, Any], bool]] = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
}

_BOOLEAN_NAMES = {"TRUE": True, "FALSE": False}


def to_python_expression(formula: str) -> str:
    """Rewrite spreadsheet operator spellings into Python expression syntax."""
    expression = formula.strip()
    if expression.startswith("="):
        expression = expression[1:]
    expression = _ABSOLUTE_REF_RE.sub("", expression)
    expression = _NOT_EQUAL_RE.sub("!=", expression)
    expression = _EQUALITY_RE.sub("==", expression)
    return expression.replace("^", "**").strip()


class FormulaEvaluator:
    """Evaluate formulas against one cell map.

    Results of referenced formula cells are memoized for the lifetime of the
    evaluator, so one instance should be used per materialization pass.
    """

    def __init__(self, cells: Mapping[str, Cell] | None = None) -> None:
        self._cells: dict[tuple[int, int], Cell] = {
            (cell.row, cell.col): cell for cell in (cells or {}).values()
        }
        self._resolved: dict[tuple[int, int], CellValue] = {}
        self._in_progress: set[tuple[int, int]] = set()

    def evaluate(self, formula: str) -> CellValue:
        """Evaluate a formula to a scalar.

        Args:
            formula: Formula text, with or without the leading ``=``.

        Returns:
            The evaluated scalar value.

        Raises:
            FormulaEvaluationError: If the formula is unsupported or fails.
        """
        expression = to_python_expression(formula)
        if not expression:
            raise FormulaEvaluationError("Empty formula", formula=formula)
        try:
            tree = ast.parse(expression, mode="eval")
        except SyntaxError as e:
            raise FormulaEvaluationError(
                f"Unsupported formula syntax: {e.msg}", formula=formula
            ) from e

        try:
            result = self._eval(tree.body, formula)
        except FormulaEvaluationError:
            raise
        except (ArithmeticError, TypeError, ValueError, RecursionError) as e:
            raise FormulaEvaluationError(
                f"Formula evaluation failed: {e}", formula=formula
            ) from e

        _bounded(result, formula)
        if isinstance(result, float) and not math.isfinite(result):
            raise FormulaEvaluationError(
                "Formula result is not finite", formula=formula
            )
        if not isinstance(result, bool | int | float | str):
            raise FormulaEvaluationError(
                f"Formula produced unsupported type {type(result).__name__}",
                formula=formula,
            )
        return result

    def evaluate_cell(self, cell: Cell) -> CellValue:
        """Resolve a cell to its scalar: the evaluated formula or the literal value."""
        if not cell.formula:
            return cell.value
        position = (cell.row, cell.col)
        if position in self._resolved:
            return self._resolved[position]
        if position in self._in_progress:
            raise FormulaEvaluationError(
                "Circular reference detected", formula=cell.formula
            )
        self._in_progress.add(position)
        try:
            value = self.evaluate(cell.formula)
        finally:
            self._in_progress.discard(position)
        self._resolved[position] = value
        return value

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _eval(self, node: ast.AST, formula: str) -> Any:
        if isinstance(node, ast.Constant):
            if isinstance(node.value, bool | int | float | str):
                return node.value
            raise FormulaEvaluationError("Unsupported literal", formula=formula)

        if isinstance(node, ast.Name):
            return self._resolve_name(node.id, formula)

        if isinstance(node, ast.UnaryOp):
            operand = self._eval(node.operand, formula)
            if isinstance(node.op, ast.USub):
                return -self._numeric(operand, formula)
            if isinstance(node.op, ast.UAdd):
                return +self._numeric(operand, formula)
            raise FormulaEvaluationError("Unsupported unary operator", formula=formula)

        if isinstance(node, ast.BinOp):
            left = self._eval(node.left, formula)
            right = self._eval(node.right, formula)
            if isinstance(node.op, ast.BitAnd):
                return _concat(left) + _concat(right)
            op = _BINARY_OPERATORS.get(type(node.op))
            if op is None:
                raise FormulaEvaluationError("Unsupported operator", formula=formula)
            if isinstance(left, str) or isinstance(right, str):
                both_text = isinstance(left, str) and isinstance(right, str)
                if both_text and isinstance(node.op, ast.Add):
                    return left + right
                raise FormulaEvaluationError(
                    "Arithmetic on text values", formula=formula
                )
            left = self._numeric(left, formula)
            right = self._numeric(right, formula)
            if isinstance(node.op, ast.Pow):
                _check_power(left, right, formula)
            return _bounded(op(left, right), formula)

        if isinstance(node, ast.Compare):
            left = self._eval(node.left, formula)
            for cmp_op, comparator in zip(node.ops, node.comparators, strict=True):
                fn = _COMPARE_OPERATORS.get(type(cmp_op))
                if fn is None:
                    raise FormulaEvaluationError(
                        "Unsupported comparison", formula=formula
                    )
                right = self._eval(comparator, formula)
                if not fn(left, right):
                    return False
                left = right
            return True

        raise FormulaEvaluationError(
            f"Unsupported expression: {type(node).__name__}", formula=formula
        )

    def _resolve_name(self, name: str, formula: str) -> CellValue:
        upper = name.upper()
        if upper in _BOOLEAN_NAMES:
            return _BOOLEAN_NAMES[upper]
        if not _REFERENCE_RE.match(name):
            raise FormulaEvaluationError(f"Unknown name: {name}", formula=formula)
        position = parse_coordinate(name)
        cell = self._cells.get(position)
        if cell is None:
            # Empty referenced cells read as zero
            return 0
        value = self.evaluate_cell(cell)
        return 0 if value is None else value

    @staticmethod
    def _numeric(value: Any, formula: str) -> int | float:
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int | float):
            return _bounded(value, formula)
        raise FormulaEvaluationError(
            f"Expected a number, got {value!r}", formula=formula
        )


def _concat(value: Any) -> str:
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _check_power(base: int | float, exponent: int | float, formula: str) -> None:
    """Reject powers whose result would be far outside float range."""
    if abs(exponent) > MAX_EXPONENT:
        raise FormulaEvaluationError("Exponent too large", formula=formula)
    if exponent > 0 and abs(base) > 1:
        if exponent * math.log10(abs(base)) > MAX_MAGNITUDE_DIGITS + 1:
            raise FormulaEvaluationError(
                "Formula result is out of range", formula=formula
            )


def _bounded(value: Any, formula: str) -> Any:
    """Reject integers too large to convert to a float."""
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            float(value)
        except OverflowError as e:
            raise FormulaEvaluationError(
                "Formula result is out of range", formula=formula
            ) from e
    return value
