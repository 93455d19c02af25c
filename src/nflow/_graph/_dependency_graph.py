"""Generic dependency graph abstraction."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from ._algorithms import CycleError, topological_sort


@dataclass(frozen=True, slots=True)
class DependencyGraph[T]:
    """A directed graph of "depends on" relationships.

    This is an immutable data structure with query methods. Neighbours are
    kept in first-seen order so that traversals are reproducible.

    - predecessors[b] = (a,) means "b depends on a"
    - successors[a] = (b,) means "a is depended on by b"

    Attributes:
        _predecessors: Mapping from node to its direct dependencies.
        _successors: Mapping from node to nodes that depend on it.

    """

    _predecessors: dict[T, tuple[T, ...]] = field(default_factory=dict)
    _successors: dict[T, tuple[T, ...]] = field(default_factory=dict)

    @classmethod
    def from_edges(cls, edges: Iterable[tuple[T, T]], nodes: Iterable[T] = ()) -> DependencyGraph[T]:
        """Build a graph from (source, target) edges.

        An edge (a, b) means "b depends on a".

        Args:
            edges: The (source, target) pairs.
            nodes: Extra nodes to include even if no edge touches them.

        Returns:
            A new DependencyGraph instance.

        Example:
            >>> graph = DependencyGraph.from_edges([("rain", "runoff")])
            >>> graph.predecessors("runoff")
            ('rain',)

        """
        predecessors: dict[T, dict[T, None]] = {}
        successors: dict[T, dict[T, None]] = {}

        for node in nodes:
            predecessors.setdefault(node, {})
            successors.setdefault(node, {})

        for src, dst in edges:
            predecessors.setdefault(src, {})
            successors.setdefault(src, {})[dst] = None
            predecessors.setdefault(dst, {})[src] = None
            successors.setdefault(dst, {})

        return cls(
            _predecessors={k: tuple(v) for k, v in predecessors.items()},
            _successors={k: tuple(v) for k, v in successors.items()},
        )

    @property
    def nodes(self) -> tuple[T, ...]:
        """All nodes in the graph, in first-seen order."""
        return tuple(self._successors)

    def predecessors(self, node: T) -> tuple[T, ...]:
        """Get the direct dependencies of a node."""
        return self._predecessors.get(node, ())

    def successors(self, node: T) -> tuple[T, ...]:
        """Get the direct dependents of a node."""
        return self._successors.get(node, ())

    def ancestors(self, node: T) -> frozenset[T]:
        """Get every node that ``node`` transitively depends on."""
        return self._reachable(node, self.predecessors)

    def descendants(self, node: T) -> frozenset[T]:
        """Get every node that transitively depends on ``node``."""
        return self._reachable(node, self.successors)

    def topological_order(self) -> list[T]:
        """Return nodes in topological order (dependencies before dependents).

        Raises:
            CycleError: If the graph contains a cycle.

        """
        return topological_sort(self._successors)

    def cycle_nodes(self) -> list[T]:
        """Return the nodes that cannot be ordered because of a cycle.

        Returns:
            An empty list when the graph is acyclic.

        """
        try:
            self.topological_order()
        except CycleError as e:
            return list(e.nodes)  # type: ignore[arg-type]
        return []

    def has_cycle(self) -> bool:
        """Check if the graph contains a cycle."""
        return bool(self.cycle_nodes())

    def _reachable(self, node: T, step: Callable[[T], tuple[T, ...]]) -> frozenset[T]:
        visited: set[T] = set()
        stack = list(step(node))
        while stack:
            current = stack.pop()
            if current not in visited:
                visited.add(current)
                stack.extend(step(current))
        return frozenset(visited)

    def __len__(self) -> int:
        """Return the number of nodes in the graph."""
        return len(self._successors)

    def __contains__(self, node: object) -> bool:
        """Check if a node is in the graph."""
        return node in self._successors
