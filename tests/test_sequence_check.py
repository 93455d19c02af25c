"""Tests for the sequence consistency check."""

import itertools

from nflow import (
    Department,
    SequenceIssueKind,
    Variable,
    VariableType,
    affected_by,
    check_sequence,
    evaluate_variables,
)
from nflow._eval_engine import build_reference_graph

_N_IDS = itertools.count(1)


def _input(variable_id: str, value: float | None = 1.0) -> Variable:
    return Variable(n_id=next(_N_IDS), id=variable_id, type=VariableType.INPUT, dept=Department.INDUSTRY, value=value)


def _derived(variable_id: str, expr: str | None, sequence: int, depends: list[str] | None = None) -> Variable:
    return Variable(
        n_id=next(_N_IDS),
        id=variable_id,
        type=VariableType.OUTPUT,
        dept=Department.INDUSTRY,
        expr=expr,
        sequence=sequence,
        depends=depends or [],
    )


class TestCheckSequence:
    """Tests for check_sequence."""

    def test_consistent_network(self) -> None:
        variables = [_input("x"), _derived("a", "x * 2", 1), _derived("b", "a + x", 2)]
        assert check_sequence(variables) == []

    def test_late_dependency(self) -> None:
        variables = [_input("x"), _derived("a", "b + 1", 1), _derived("b", "x", 2)]

        issues = check_sequence(variables)

        assert [(i.variable_id, i.kind, i.reference) for i in issues] == [
            ("a", SequenceIssueKind.LATE_DEPENDENCY, "b"),
        ]

    def test_tie_listed_earlier_resolves(self) -> None:
        variables = [_derived("a", "1", 3), _derived("b", "a", 3)]

        assert check_sequence(variables) == []
        assert evaluate_variables(variables).values == {"a": 1.0, "b": 1.0}

    def test_tie_listed_later_is_late(self) -> None:
        variables = [_derived("b", "a", 3), _derived("a", "1", 3)]

        issues = check_sequence(variables)

        assert [(i.variable_id, i.kind) for i in issues] == [("b", SequenceIssueKind.LATE_DEPENDENCY)]
        assert evaluate_variables(variables).values["b"] is None

    def test_unknown_reference(self) -> None:
        issues = check_sequence([_derived("a", "ghost * 2", 1)])
        assert issues[0].kind is SequenceIssueKind.UNKNOWN_REFERENCE
        assert issues[0].reference == "ghost"

    def test_missing_input(self) -> None:
        issues = check_sequence([_input("x", None), _derived("a", "x", 1)])
        assert [i.kind for i in issues] == [SequenceIssueKind.MISSING_INPUT]

    def test_never_in_scope(self) -> None:
        issues = check_sequence([_derived("manual", None, 1), _derived("a", "manual", 2)])
        assert [i.kind for i in issues] == [SequenceIssueKind.NEVER_IN_SCOPE]

    def test_declared_depends_are_checked(self) -> None:
        issues = check_sequence([_derived("a", "1", 1, depends=["ghost"])])
        assert [i.reference for i in issues] == ["ghost"]

    def test_unparseable_expression(self) -> None:
        issues = check_sequence([_derived("a", "1 +", 1)])
        assert [i.kind for i in issues] == [SequenceIssueKind.UNPARSEABLE]

    def test_cycle_lists_members_only(self) -> None:
        variables = [
            _input("x"),
            _derived("a", "b + x", 1),
            _derived("b", "a", 2),
            _derived("downstream", "b * 2", 3),
        ]

        issues = check_sequence(variables)

        cycles = [i for i in issues if i.kind is SequenceIssueKind.CYCLE]
        assert len(cycles) == 1
        assert cycles[0].variable_id == "a"
        assert cycles[0].message == "Circular references among: a, b"

    def test_self_reference_is_a_cycle(self) -> None:
        issues = check_sequence([_derived("a", "a + 1", 1)])
        assert [i.kind for i in issues] == [SequenceIssueKind.LATE_DEPENDENCY, SequenceIssueKind.CYCLE]


class TestReferenceGraph:
    """Tests for the variable reference graph."""

    def test_edges_follow_references(self) -> None:
        variables = [_input("x"), _derived("a", "x * 2", 1), _derived("b", "a + x", 2)]

        graph = build_reference_graph(variables)

        assert graph.predecessors("b") == ("a", "x")
        assert graph.successors("x") == ("a", "b")
        assert graph.topological_order() == ["x", "a", "b"]

    def test_affected_by(self) -> None:
        variables = [
            _input("x"),
            _derived("a", "x * 2", 1),
            _derived("b", "a + 1", 2),
            _derived("c", "x", 3),
            _derived("d", "5", 4),
        ]

        assert affected_by("a", variables) == frozenset({"b"})
        assert affected_by("x", variables) == frozenset({"a", "b", "c"})
        assert affected_by("d", variables) == frozenset()
