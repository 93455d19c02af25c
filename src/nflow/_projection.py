"""Projection of flows into graph node and edge records.

Only data is produced here: nodes, edges and the attributes a renderer needs
to tell parallel and mirrored edges apart. Layout is left to the consumer.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

from ._department import Department
from ._flows import aggregate_flows, parallel_flows

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ._models import Variable

LARGE_NODES = frozenset({Department.ATMOSPHERE})


@dataclass(frozen=True, slots=True)
class GraphNode:
    """A department node."""

    id: str
    label: str
    is_big: bool = False


@dataclass(frozen=True, slots=True)
class GraphEdge:
    """A directed edge between two department nodes.

    Attributes:
        id: Edge identifier, unique within a graph.
        source: Source department id.
        target: Target department id.
        label: Text shown on the edge.
        value: Flow value, or summed value for aggregated edges.
        is_loop: Whether source and target are the same department.
        parallel_index: Position among edges of the same ordered pair.
        mirror_sign: +1 when ``source < target``, else -1, so opposite
            directions between the same departments stay distinguishable.
        variable_ids: Ids of the originating variables.

    """

    id: str
    source: str
    target: str
    label: str
    value: float
    is_loop: bool
    parallel_index: int
    mirror_sign: int
    variable_ids: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class FlowGraph:
    """Nodes and edges ready to hand to a graph renderer."""

    nodes: tuple[GraphNode, ...]
    edges: tuple[GraphEdge, ...]

    def to_elements(self) -> list[dict[str, Any]]:
        """Return the graph as a flat list of ``{"data": {...}}`` elements, nodes first."""
        elements: list[dict[str, Any]] = [{"data": asdict(node)} for node in self.nodes]
        for edge in self.edges:
            data = asdict(edge)
            data["variable_ids"] = list(edge.variable_ids)
            elements.append({"data": data})
        return elements


def _mirror_sign(source: Department, target: Department) -> int:
    return 1 if source.value < target.value else -1


def _format_value(value: float) -> str:
    return f"{value:.4g}"


def department_nodes() -> tuple[GraphNode, ...]:
    """One node per department, in declaration order."""
    return tuple(GraphNode(id=dept.value, label=dept.label, is_big=dept in LARGE_NODES) for dept in Department)


def build_flow_graph(variables: Iterable[Variable], *, aggregate: bool = True) -> FlowGraph:
    """Build graph records from evaluated flow variables.

    Args:
        variables: Variables to project, typically the display subset.
        aggregate: Merge flows sharing an ordered department pair into one
            edge. When False, every flow becomes its own parallel edge.

    Returns:
        A FlowGraph with every department as a node.

    """
    edges: list[GraphEdge] = []
    if aggregate:
        for edge in aggregate_flows(variables).values():
            edges.append(
                GraphEdge(
                    id=f"{edge.source.value}->{edge.target.value}",
                    source=edge.source.value,
                    target=edge.target.value,
                    label=_format_value(edge.total_value),
                    value=edge.total_value,
                    is_loop=edge.is_loop,
                    parallel_index=0,
                    mirror_sign=_mirror_sign(edge.source, edge.target),
                    variable_ids=tuple(v.id for v in edge.variables),
                ),
            )
    else:
        for flow in parallel_flows(variables):
            edges.append(
                GraphEdge(
                    id=str(flow.variable.n_id),
                    source=flow.source.value,
                    target=flow.target.value,
                    label=flow.variable.caption or flow.variable.id,
                    value=flow.value,
                    is_loop=flow.is_loop,
                    parallel_index=flow.parallel_index,
                    mirror_sign=_mirror_sign(flow.source, flow.target),
                    variable_ids=(flow.variable.id,),
                ),
            )
    return FlowGraph(nodes=department_nodes(), edges=tuple(edges))
