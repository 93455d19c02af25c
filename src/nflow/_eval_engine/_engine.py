"""Core evaluation engine for derived variables."""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum, auto

from nflow._expression import (
    EvaluationError,
    EvaluationMathError,
    Evaluator,
    ExpressionSyntaxError,
    MathEvaluator,
    UnresolvedNameError,
)
from nflow._models import Variable, VariableType

logger = logging.getLogger(__name__)


class FailureKind(StrEnum):
    """Why a derived variable could not be computed."""

    UNRESOLVED = auto()  # Referenced name missing from scope
    SYNTAX = auto()  # Malformed expression
    MATH = auto()  # Math error or non-finite result
    ERROR = auto()  # Any other evaluator failure


@dataclass(frozen=True, slots=True)
class EvaluationFailure:
    """Diagnostic record for one variable whose evaluation failed.

    Attributes:
        variable_id: Id of the failed variable.
        kind: Failure category.
        message: Evaluator error message.
        name: The unresolved name, for ``FailureKind.UNRESOLVED`` failures.

    """

    variable_id: str
    kind: FailureKind
    message: str
    name: str | None = None


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    """Result of one forward evaluation pass.

    Attributes:
        values: Mapping from derived variable id to its new value, None when
            evaluation failed. Variables without an expression are absent.
        scope: Final scope: inputs with a value plus every successful result.
        failures: One record per failed variable, in evaluation order.
        skipped: Ids of output/io variables without an expression.
        order: Ids of the output/io variables in the order they were visited.

    """

    values: dict[str, float | None] = field(default_factory=dict)
    scope: dict[str, float] = field(default_factory=dict)
    failures: list[EvaluationFailure] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    order: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Check if every derived variable was computed."""
        return len(self.failures) == 0

    @property
    def failed_ids(self) -> list[str]:
        """Ids of the variables that failed, in evaluation order."""
        return [failure.variable_id for failure in self.failures]

    def get_value(self, variable_id: str) -> float | None:
        """Get the value computed for a derived variable.

        Raises:
            KeyError: If the variable was not evaluated in this pass.

        """
        return self.values[variable_id]


def _classify(error: Exception) -> tuple[FailureKind, str | None]:
    match error:
        case UnresolvedNameError(name=name):
            return FailureKind.UNRESOLVED, name
        case ExpressionSyntaxError():
            return FailureKind.SYNTAX, None
        case EvaluationMathError() | ArithmeticError():
            return FailureKind.MATH, None
        case _:
            return FailureKind.ERROR, None


def initial_scope(variables: Iterable[Variable]) -> dict[str, float]:
    """Build the starting scope from input variables that carry a value."""
    return {v.id: v.value for v in variables if v.type == VariableType.INPUT and v.value is not None}


def evaluation_order(variables: Iterable[Variable]) -> list[Variable]:
    """Select output and io variables, sorted by ``sequence``.

    The sort is stable, so variables sharing a sequence keep their input order.
    """
    selected = [v for v in variables if v.type in (VariableType.OUTPUT, VariableType.IO)]
    return sorted(selected, key=lambda v: v.sequence)


def evaluate_variables(
    variables: Sequence[Variable],
    evaluator: Evaluator | None = None,
) -> EvaluationResult:
    """Evaluate every derived variable in a single forward pass.

    This function does not modify ``variables``. The scope is threaded through
    the pass and a result is committed to it only after the variable evaluated
    successfully, so later variables see earlier results and never the reverse.
    A failure maps the variable to None, is logged, and the pass continues.

    Args:
        variables: All variables of the network.
        evaluator: Expression evaluator. Defaults to ``MathEvaluator``.

    Returns:
        EvaluationResult with the new values and any failures.

    Example:
        >>> result = evaluate_variables(variables)
        >>> result.get_value("runoff")
        5.0

    """
    evaluator = evaluator if evaluator is not None else MathEvaluator()
    scope = initial_scope(variables)
    ordered = evaluation_order(variables)

    values: dict[str, float | None] = {}
    failures: list[EvaluationFailure] = []
    skipped: list[str] = []

    logger.debug("Starting evaluation of %d variables with %d scope entries", len(ordered), len(scope))

    for variable in ordered:
        if variable.expr is None:
            skipped.append(variable.id)
            continue

        try:
            result = evaluator.evaluate(variable.expr, scope)
        except (
            EvaluationError,
            ArithmeticError,
            TypeError,
            ValueError,
            AttributeError,
            LookupError,
            RuntimeError,
        ) as e:
            kind, name = _classify(e)
            logger.warning("Error evaluating variable %s: %s", variable.id, e)
            failures.append(EvaluationFailure(variable_id=variable.id, kind=kind, message=str(e), name=name))
            values[variable.id] = None
            continue

        logger.debug("  %s = %r", variable.id, result)
        values[variable.id] = result
        scope[variable.id] = result

    logger.debug("Evaluation finished: %d computed, %d failed", len(values) - len(failures), len(failures))

    return EvaluationResult(
        values=values,
        scope=scope,
        failures=failures,
        skipped=skipped,
        order=[v.id for v in ordered],
    )


def commit_values(variables: Iterable[Variable], result: EvaluationResult) -> None:
    """Write the values of an evaluation pass into the variables.

    Only variables present in ``result.values`` are touched; inputs and
    variables without an expression keep their current value.
    """
    for variable in variables:
        if variable.id in result.values:
            variable.value = result.values[variable.id]


def evaluate_all(
    variables: Sequence[Variable],
    evaluator: Evaluator | None = None,
) -> EvaluationResult:
    """Recompute all derived variables from the current inputs, in place.

    Never raises for evaluation failures: failed variables end up with a None
    value and a record in ``EvaluationResult.failures``.

    Args:
        variables: All variables of the network. Their ``value`` is updated.
        evaluator: Expression evaluator. Defaults to ``MathEvaluator``.

    Returns:
        The EvaluationResult that was committed.

    """
    result = evaluate_variables(variables, evaluator)
    commit_values(variables, result)
    return result
