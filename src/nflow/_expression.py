"""Algebraic expression evaluation against a scope of named numbers.

The engine only depends on the ``Evaluator`` protocol. ``MathEvaluator`` is the
default implementation: expressions are parsed with the ``ast`` module and
walked over a whitelist of node types, so no Python code is ever executed.
"""

import ast
import math
import operator
from collections.abc import Callable, Mapping
from functools import cache
from statistics import fmean
from typing import Protocol, runtime_checkable


class EvaluationError(Exception):
    """An expression could not be evaluated."""


class ExpressionSyntaxError(EvaluationError):
    """The expression is malformed or uses a construct outside the language."""


class UnresolvedNameError(EvaluationError):
    """The expression references a name absent from the scope."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Undefined symbol {name}")


class EvaluationMathError(EvaluationError):
    """A math error occurred, or the result is not a finite real number."""


@runtime_checkable
class Evaluator(Protocol):
    """Evaluates an expression string against a mapping of known names."""

    def evaluate(self, expression: str, scope: Mapping[str, float]) -> float:
        """Evaluate ``expression`` and return its numeric value.

        Raises:
            EvaluationError: If the expression cannot be evaluated.

        """
        ...


_BINARY_OPERATORS: dict[type[ast.operator], Callable[[float, float], float]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
    ast.FloorDiv: operator.floordiv,
}

_UNARY_OPERATORS: dict[type[ast.unaryop], Callable[[float], float]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

_COMPARE_OPERATORS: dict[type[ast.cmpop], Callable[[float, float], bool]] = {
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
}


def _log(x: float, base: float | None = None) -> float:
    return math.log(x) if base is None else math.log(x, base)


def _sum(*args: float) -> float:
    return math.fsum(args)


def _mean(*args: float) -> float:
    if not args:
        msg = "mean() requires at least one argument"
        raise ValueError(msg)
    return fmean(args)


FUNCTIONS: dict[str, Callable[..., float]] = {
    "abs": abs,
    "min": min,
    "max": max,
    "pow": math.pow,
    "round": round,
    "exp": math.exp,
    "log": _log,
    "log10": math.log10,
    "log2": math.log2,
    "sqrt": math.sqrt,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "asin": math.asin,
    "acos": math.acos,
    "atan": math.atan,
    "atan2": math.atan2,
    "sinh": math.sinh,
    "cosh": math.cosh,
    "tanh": math.tanh,
    "ceil": math.ceil,
    "floor": math.floor,
    "sum": _sum,
    "mean": _mean,
}

CONSTANTS: dict[str, float] = {
    "pi": math.pi,
    "e": math.e,
}


@cache
def parse_expression(expression: str) -> ast.expr:
    """Parse an expression into a checked syntax tree.

    ``^`` denotes exponentiation, as in common spreadsheet and calculator
    languages.

    Args:
        expression: The expression source.

    Returns:
        The body of the parsed expression.

    Raises:
        ExpressionSyntaxError: If the expression cannot be parsed or uses a
            construct outside the supported language.

    """
    source = expression.replace("^", "**").strip()
    if not source:
        msg = "Empty expression"
        raise ExpressionSyntaxError(msg)
    try:
        tree = ast.parse(source, mode="eval")
        _check_node(tree.body, expression)
    except SyntaxError as e:
        msg = f"Invalid expression {expression!r}: {e.msg}"
        raise ExpressionSyntaxError(msg) from e
    except (RecursionError, MemoryError) as e:
        msg = f"Expression is nested too deeply: {expression[:40]!r}..."
        raise ExpressionSyntaxError(msg) from e
    return tree.body


def _check_node(node: ast.AST, expression: str) -> None:
    match node:
        case ast.Constant(value=value) if isinstance(value, (int, float)) and not isinstance(value, bool):
            return
        case ast.Name():
            return
        case ast.BinOp(left=left, op=op, right=right) if type(op) in _BINARY_OPERATORS:
            _check_node(left, expression)
            _check_node(right, expression)
        case ast.UnaryOp(op=op, operand=operand) if type(op) in _UNARY_OPERATORS:
            _check_node(operand, expression)
        case ast.Compare(left=left, ops=ops, comparators=comparators) if all(
            type(op) in _COMPARE_OPERATORS for op in ops
        ):
            _check_node(left, expression)
            for comparator in comparators:
                _check_node(comparator, expression)
        case ast.Call(func=ast.Name(id=name), args=args, keywords=[]) if name in FUNCTIONS:
            for arg in args:
                _check_node(arg, expression)
        case ast.Call(func=ast.Name(id=name)):
            msg = f"Unknown or unsupported function {name!r} in {expression!r}"
            raise ExpressionSyntaxError(msg)
        case _:
            msg = f"Unsupported syntax {type(node).__name__} in {expression!r}"
            raise ExpressionSyntaxError(msg)


def _free_names(node: ast.AST) -> set[str]:
    # Function names are not references to variables
    callees = {id(child.func) for child in ast.walk(node) if isinstance(child, ast.Call)}
    return {child.id for child in ast.walk(node) if isinstance(child, ast.Name) and id(child) not in callees}


class MathEvaluator:
    """Default ``Evaluator`` over a restricted arithmetic language.

    Supports numeric literals, names, ``+ - * / % // ^ **``, unary signs,
    comparisons (yielding 1.0 or 0.0), parentheses, and the functions in
    ``FUNCTIONS``. Scope entries shadow the constants ``pi`` and ``e``.
    """

    def evaluate(self, expression: str, scope: Mapping[str, float]) -> float:
        """Evaluate ``expression`` against ``scope``.

        Args:
            expression: The expression source.
            scope: Known names and their values.

        Returns:
            The finite numeric result.

        Raises:
            ExpressionSyntaxError: If the expression is malformed.
            UnresolvedNameError: If a referenced name is not in scope.
            EvaluationMathError: On math errors or a non-finite result.

        """
        tree = parse_expression(expression)
        try:
            result = self._eval(tree, scope)
            if isinstance(result, complex) or not math.isfinite(result):
                msg = f"Non-finite result {result!r} for {expression!r}"
                raise EvaluationMathError(msg)
            return float(result)
        except (ZeroDivisionError, OverflowError, ValueError, TypeError) as e:
            msg = f"{type(e).__name__} in {expression!r}: {e}"
            raise EvaluationMathError(msg) from e
        except RecursionError as e:
            msg = f"Expression is nested too deeply: {expression[:40]!r}..."
            raise ExpressionSyntaxError(msg) from e

    def referenced_names(self, expression: str) -> frozenset[str]:
        """Return the variable names an expression reads from its scope.

        Function names and the built-in constants are not included.

        Raises:
            ExpressionSyntaxError: If the expression is malformed.

        """
        return frozenset(_free_names(parse_expression(expression)) - set(CONSTANTS))

    def _eval(self, node: ast.expr, scope: Mapping[str, float]) -> float:
        match node:
            case ast.Constant(value=value):
                return value
            case ast.Name(id=name):
                if name in scope:
                    return scope[name]
                if name in CONSTANTS:
                    return CONSTANTS[name]
                raise UnresolvedNameError(name)
            case ast.BinOp(left=left, op=op, right=right):
                return _BINARY_OPERATORS[type(op)](self._eval(left, scope), self._eval(right, scope))
            case ast.UnaryOp(op=op, operand=operand):
                return _UNARY_OPERATORS[type(op)](self._eval(operand, scope))
            case ast.Compare(left=left, ops=ops, comparators=comparators):
                current = self._eval(left, scope)
                for op, comparator in zip(ops, comparators, strict=True):
                    right = self._eval(comparator, scope)
                    if not _COMPARE_OPERATORS[type(op)](current, right):
                        return 0.0
                    current = right
                return 1.0
            case ast.Call(func=ast.Name(id=name), args=args):
                return FUNCTIONS[name](*(self._eval(arg, scope) for arg in args))
            case _:
                msg = f"Unsupported syntax {type(node).__name__}"
                raise ExpressionSyntaxError(msg)
