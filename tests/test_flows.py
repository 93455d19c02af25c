"""Tests for flow aggregation and parallel flow edges."""

import itertools

from nflow import Department, Variable, VariableType, aggregate_flows, flow_statistics, parallel_flows

AGRI = Department.AGRICULTURE
WATER = Department.SURFACE_WATER
AIR = Department.ATMOSPHERE

_N_IDS = itertools.count(1)


def _flow(
    variable_id: str,
    source: Department | None,
    target: Department | None,
    value: float | None,
) -> Variable:
    return Variable(
        n_id=next(_N_IDS),
        id=variable_id,
        type=VariableType.OUTPUT,
        dept=source or AGRI,
        expr="0",
        value=value,
        from_dept=source,
        to_dept=target,
    )


class TestAggregateFlows:
    """Tests for aggregate_flows."""

    def test_groups_by_ordered_pair(self) -> None:
        variables = [
            _flow("v1", AGRI, WATER, 2.0),
            _flow("v2", AGRI, WATER, 3.5),
            _flow("v3", WATER, AGRI, 1.0),
        ]

        edges = aggregate_flows(variables)

        assert list(edges) == [(AGRI, WATER), (WATER, AGRI)]
        forward = edges[AGRI, WATER]
        assert forward.total_value == 5.5
        assert forward.variable_count == 2
        assert [v.id for v in forward.variables] == ["v1", "v2"]
        backward = edges[WATER, AGRI]
        assert backward.total_value == 1.0
        assert backward.variable_count == 1

    def test_null_values_are_excluded(self) -> None:
        variables = [_flow("ok", AGRI, WATER, 2.0), _flow("failed", AGRI, WATER, None), _flow("gone", AIR, WATER, None)]

        edges = aggregate_flows(variables)

        assert list(edges) == [(AGRI, WATER)]
        assert edges[AGRI, WATER].variable_count == 1

    def test_zero_is_a_value(self) -> None:
        edges = aggregate_flows([_flow("zero", AGRI, WATER, 0.0)])
        assert edges[AGRI, WATER].total_value == 0.0
        assert edges[AGRI, WATER].variable_count == 1

    def test_non_flow_variables_are_ignored(self) -> None:
        assert aggregate_flows([_flow("stock", None, None, 4.0)]) == {}

    def test_self_loop(self) -> None:
        edges = aggregate_flows([_flow("straw", AGRI, AGRI, 6.0)])
        edge = edges[AGRI, AGRI]
        assert edge.is_loop is True
        assert edge.key == (AGRI, AGRI)
        assert edge.total_value == 6.0

    def test_total_matches_contributors(self) -> None:
        variables = [_flow(f"v{i}", AIR, WATER, i * 0.25) for i in range(8)]
        edge = aggregate_flows(variables)[AIR, WATER]
        assert edge.total_value == sum(v.value or 0.0 for v in edge.variables)
        assert edge.variable_count == 8


class TestParallelFlows:
    """Tests for parallel_flows."""

    def test_parallel_indices_per_pair(self) -> None:
        variables = [
            _flow("v1", AGRI, WATER, 1.0),
            _flow("v2", WATER, AGRI, 2.0),
            _flow("v3", AGRI, WATER, 3.0),
            _flow("v4", AGRI, WATER, None),
            _flow("v5", AGRI, WATER, 5.0),
        ]

        edges = parallel_flows(variables)

        assert [(e.variable.id, e.parallel_index) for e in edges] == [("v1", 0), ("v2", 0), ("v3", 1), ("v5", 2)]
        assert edges[1].source is WATER
        assert edges[2].value == 3.0

    def test_self_loop_edge(self) -> None:
        (edge,) = parallel_flows([_flow("straw", AGRI, AGRI, 1.0)])
        assert edge.is_loop is True


class TestFlowStatistics:
    """Tests for flow_statistics."""

    def test_counts(self) -> None:
        variables = [
            _flow("a", AGRI, WATER, 1.0),
            _flow("b", AGRI, WATER, 2.0),
            _flow("c", AIR, WATER, None),
            _flow("d", AIR, AGRI, 3.0),
            _flow("e", None, None, 9.0),
        ]
        display_ids = {v.n_id for v in variables[:4]}

        stats = flow_statistics(variables, display_ids)

        assert stats.total_variables == 5
        assert stats.display_variables == 4
        assert stats.flow_variables == 4
        assert stats.graph_variables == 3
        assert stats.multi_flow_pairs == 1
