"""Optional check that sequence numbers agree with variable references.

Evaluation itself stays permissive: a variable whose reference is not yet in
scope simply evaluates to None. This pass reports those situations up front.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum, auto

from nflow._expression import Evaluator, ExpressionSyntaxError, MathEvaluator
from nflow._graph import DependencyGraph
from nflow._models import Variable, VariableType

from ._engine import evaluation_order

logger = logging.getLogger(__name__)


class SequenceIssueKind(StrEnum):
    """Category of a sequence/dependency mismatch."""

    UNKNOWN_REFERENCE = auto()
    LATE_DEPENDENCY = auto()
    NEVER_IN_SCOPE = auto()
    MISSING_INPUT = auto()
    CYCLE = auto()
    UNPARSEABLE = auto()


@dataclass(frozen=True, slots=True)
class SequenceIssue:
    """A reference that will not resolve during the forward pass."""

    variable_id: str
    kind: SequenceIssueKind
    message: str
    reference: str | None = None


def referenced_ids(variable: Variable, evaluator: Evaluator) -> list[str]:
    """List the ids a derived variable reads, in first-seen order.

    Combines the declared ``depends`` with the names found in the expression
    when the evaluator can report them.

    Raises:
        ExpressionSyntaxError: If the expression cannot be parsed.

    """
    refs = dict.fromkeys(variable.depends)
    names_of = getattr(evaluator, "referenced_names", None)
    if variable.expr is not None and names_of is not None:
        refs.update(dict.fromkeys(sorted(names_of(variable.expr))))
    return list(refs)


def build_reference_graph(variables: Sequence[Variable], evaluator: Evaluator | None = None) -> DependencyGraph[str]:
    """Build the graph of references between variables.

    An edge (a, b) means variable ``b`` reads variable ``a``. Unparseable
    expressions contribute only their declared ``depends``.
    """
    evaluator = evaluator if evaluator is not None else MathEvaluator()
    edges: list[tuple[str, str]] = []
    for variable in variables:
        if variable.expr is None:
            continue
        try:
            refs = referenced_ids(variable, evaluator)
        except ExpressionSyntaxError:
            refs = list(variable.depends)
        edges.extend((ref, variable.id) for ref in refs)
    return DependencyGraph.from_edges(edges, nodes=[v.id for v in variables])


def check_sequence(  # noqa: C901
    variables: Sequence[Variable],
    evaluator: Evaluator | None = None,
) -> list[SequenceIssue]:
    """Report references that the forward pass cannot satisfy.

    Args:
        variables: All variables of the network.
        evaluator: Evaluator used to extract names from expressions.
            Defaults to ``MathEvaluator``.

    Returns:
        The issues found, grouped by variable in sequence order. Empty when
        every reference resolves.

    """
    evaluator = evaluator if evaluator is not None else MathEvaluator()
    by_id = {v.id: v for v in variables}
    issues: list[SequenceIssue] = []

    ordered = evaluation_order(variables)
    position = {v.id: index for index, v in enumerate(ordered)}
    derived = [v for v in ordered if v.expr is not None]

    for variable in derived:
        try:
            refs = referenced_ids(variable, evaluator)
        except ExpressionSyntaxError as e:
            issues.append(SequenceIssue(variable.id, SequenceIssueKind.UNPARSEABLE, str(e)))
            refs = list(variable.depends)

        for ref in refs:
            target = by_id.get(ref)
            if target is None:
                issues.append(
                    SequenceIssue(
                        variable.id,
                        SequenceIssueKind.UNKNOWN_REFERENCE,
                        f"'{variable.id}' references unknown variable '{ref}'",
                        ref,
                    ),
                )
            elif target.type == VariableType.INPUT:
                if target.value is None:
                    issues.append(
                        SequenceIssue(
                            variable.id,
                            SequenceIssueKind.MISSING_INPUT,
                            f"'{variable.id}' reads input '{ref}', which has no value",
                            ref,
                        ),
                    )
            elif target.expr is None:
                issues.append(
                    SequenceIssue(
                        variable.id,
                        SequenceIssueKind.NEVER_IN_SCOPE,
                        f"'{variable.id}' reads '{ref}', which has no expression and is never in scope",
                        ref,
                    ),
                )
            elif position[ref] >= position[variable.id]:
                issues.append(
                    SequenceIssue(
                        variable.id,
                        SequenceIssueKind.LATE_DEPENDENCY,
                        f"'{variable.id}' (sequence {variable.sequence}) reads '{ref}'"
                        f" (sequence {target.sequence}), which is evaluated later",
                        ref,
                    ),
                )

    # Kahn leaves every node downstream of a cycle unordered; keep the members only
    graph = build_reference_graph(variables, evaluator)
    cyclic = [node for node in graph.cycle_nodes() if node in graph.descendants(node)]
    if cyclic:
        issues.append(
            SequenceIssue(
                cyclic[0],
                SequenceIssueKind.CYCLE,
                f"Circular references among: {', '.join(cyclic)}",
            ),
        )

    logger.debug("Sequence check found %d issue(s)", len(issues))
    return issues


def affected_by(variable_id: str, variables: Sequence[Variable], evaluator: Evaluator | None = None) -> frozenset[str]:
    """Return the ids of every variable that transitively reads ``variable_id``.

    Useful to explain which None values are a consequence of one failure.
    """
    return build_reference_graph(variables, evaluator).descendants(variable_id)
