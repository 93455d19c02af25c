"""Aggregation of flow variables into department-to-department edges."""

from collections.abc import Collection, Iterable
from dataclasses import dataclass

from ._department import Department
from ._models import FlowKey, Variable


@dataclass(frozen=True, slots=True)
class AggregatedEdge:
    """All evaluated flows sharing one ordered (source, target) pair.

    Attributes:
        source: Department the flows leave.
        target: Department the flows enter.
        total_value: Plain sum of the contributing values. No unit conversion.
        variables: Contributing variables, in input order.

    """

    source: Department
    target: Department
    total_value: float
    variables: tuple[Variable, ...]

    @property
    def key(self) -> FlowKey:
        """The ordered department pair of this edge."""
        return (self.source, self.target)

    @property
    def variable_count(self) -> int:
        """Number of contributing variables."""
        return len(self.variables)

    @property
    def is_loop(self) -> bool:
        """Whether the flow starts and ends in the same department."""
        return self.source == self.target


@dataclass(frozen=True, slots=True)
class FlowEdge:
    """One un-aggregated flow, for rendering parallel edges.

    Attributes:
        source: Department the flow leaves.
        target: Department the flow enters.
        value: Value of the originating variable.
        variable: The originating flow variable.
        parallel_index: Position among the flows of the same ordered pair,
            counted from 0 in input order.

    """

    source: Department
    target: Department
    value: float
    variable: Variable
    parallel_index: int

    @property
    def is_loop(self) -> bool:
        """Whether the flow starts and ends in the same department."""
        return self.source == self.target


def _qualifying(variables: Iterable[Variable]) -> Iterable[tuple[FlowKey, Variable, float]]:
    # Failed or never computed flows are excluded, not counted as zero
    for variable in variables:
        key = variable.flow_key
        if key is not None and variable.value is not None:
            yield key, variable, variable.value


def aggregate_flows(variables: Iterable[Variable]) -> dict[FlowKey, AggregatedEdge]:
    """Group evaluated flow variables by ordered department pair.

    a→b and b→a are distinct groups. Self-loops are ordinary groups. Pairs with
    no contributing variable never appear.

    Args:
        variables: Variables to scan, typically the display subset.

    Returns:
        Mapping from (source, target) to its AggregatedEdge, ordered by the
        first appearance of each pair in ``variables``.

    Example:
        >>> edges = aggregate_flows(store.get_display_variables())
        >>> edges[Department.AGRICULTURE, Department.SURFACE_WATER].total_value
        5.5

    """
    groups: dict[FlowKey, list[Variable]] = {}
    totals: dict[FlowKey, float] = {}
    for key, variable, value in _qualifying(variables):
        groups.setdefault(key, []).append(variable)
        totals[key] = totals.get(key, 0.0) + value

    return {
        key: AggregatedEdge(
            source=key[0],
            target=key[1],
            total_value=totals[key],
            variables=tuple(members),
        )
        for key, members in groups.items()
    }


def parallel_flows(variables: Iterable[Variable]) -> list[FlowEdge]:
    """Turn every evaluated flow variable into its own edge.

    Flows of the same ordered pair are numbered in input order so consumers can
    keep parallel edges apart.

    Args:
        variables: Variables to scan, typically the display subset.

    Returns:
        One FlowEdge per qualifying variable, in input order.

    """
    counters: dict[FlowKey, int] = {}
    edges: list[FlowEdge] = []
    for key, variable, value in _qualifying(variables):
        index = counters.get(key, 0)
        counters[key] = index + 1
        edges.append(
            FlowEdge(source=key[0], target=key[1], value=value, variable=variable, parallel_index=index),
        )
    return edges


@dataclass(frozen=True, slots=True)
class FlowStatistics:
    """Counts describing how much of the network reaches the flow graph."""

    total_variables: int
    display_variables: int
    flow_variables: int
    graph_variables: int
    multi_flow_pairs: int


def flow_statistics(variables: Collection[Variable], display_ids: Collection[int]) -> FlowStatistics:
    """Summarize the variables that end up in the flow graph.

    Args:
        variables: All variables of the network.
        display_ids: ``n_id`` values of the display subset.

    Returns:
        FlowStatistics for the current values.

    """
    shown = [v for v in variables if v.n_id in display_ids]
    edges = aggregate_flows(shown)
    return FlowStatistics(
        total_variables=len(variables),
        display_variables=len(shown),
        flow_variables=sum(1 for v in variables if v.is_flow),
        graph_variables=sum(edge.variable_count for edge in edges.values()),
        multi_flow_pairs=sum(1 for edge in edges.values() if edge.variable_count > 1),
    )
