"""Evaluation of nitrogen-flow accounting networks."""

__all__ = [
    "AggregatedEdge",
    "CycleError",
    "Department",
    "DependencyGraph",
    "Direction",
    "DuplicateVariableError",
    "EditIssue",
    "EditValidationError",
    "EvaluationError",
    "EvaluationFailure",
    "EvaluationMathError",
    "EvaluationResult",
    "Evaluator",
    "ExpressionSyntaxError",
    "FailureKind",
    "FlowEdge",
    "FlowGraph",
    "FlowKey",
    "FlowStatistics",
    "GraphEdge",
    "GraphNode",
    "InputFileError",
    "MathEvaluator",
    "SequenceIssue",
    "SequenceIssueKind",
    "UnresolvedNameError",
    "Variable",
    "VariableRole",
    "VariableStore",
    "VariableType",
    "affected_by",
    "aggregate_flows",
    "build_flow_graph",
    "check_sequence",
    "commit_values",
    "evaluate_all",
    "evaluate_variables",
    "export_graph_json",
    "export_to_toml",
    "flow_statistics",
    "load_display_ids",
    "load_edits",
    "load_variables",
    "parallel_flows",
    "select_displayable",
    "validate_edits",
]

from ._department import Department
from ._edits import EditIssue, EditValidationError, validate_edits
from ._eval_engine import (
    EvaluationFailure,
    EvaluationResult,
    FailureKind,
    SequenceIssue,
    SequenceIssueKind,
    affected_by,
    check_sequence,
    commit_values,
    evaluate_all,
    evaluate_variables,
)
from ._expression import (
    EvaluationError,
    EvaluationMathError,
    Evaluator,
    ExpressionSyntaxError,
    MathEvaluator,
    UnresolvedNameError,
)
from ._flows import AggregatedEdge, FlowEdge, FlowStatistics, aggregate_flows, flow_statistics, parallel_flows
from ._graph import CycleError, DependencyGraph
from ._io import InputFileError, export_graph_json, export_to_toml, load_display_ids, load_edits, load_variables
from ._models import Direction, FlowKey, Variable, VariableRole, VariableType
from ._projection import FlowGraph, GraphEdge, GraphNode, build_flow_graph
from ._store import DuplicateVariableError, VariableStore, select_displayable
