"""Evaluation engine module for nflow.

The engine evaluates derived variables in a single forward pass ordered by
``sequence``. The pass itself is a pure fold over the variables; writing the
results back into the variables is a separate commit step.

Key types:
- EvaluationResult: Values, final scope and failures of one pass
- EvaluationFailure: Diagnostic record of one failed variable
- evaluate_variables: Pure forward pass
- evaluate_all: Forward pass followed by commit
- check_sequence: Optional check of sequence numbers against references
"""

from ._engine import (
    EvaluationFailure,
    EvaluationResult,
    FailureKind,
    commit_values,
    evaluate_all,
    evaluate_variables,
    evaluation_order,
    initial_scope,
)
from ._validation import (
    SequenceIssue,
    SequenceIssueKind,
    affected_by,
    build_reference_graph,
    check_sequence,
    referenced_ids,
)

__all__ = [
    "EvaluationFailure",
    "EvaluationResult",
    "FailureKind",
    "SequenceIssue",
    "SequenceIssueKind",
    "affected_by",
    "build_reference_graph",
    "check_sequence",
    "commit_values",
    "evaluate_all",
    "evaluate_variables",
    "evaluation_order",
    "initial_scope",
    "referenced_ids",
]
