"""Graph algorithms for dependency ordering."""

from collections import deque
from collections.abc import Collection, Hashable, Mapping


class CycleError(ValueError):
    """The graph contains at least one cycle."""

    def __init__(self, nodes: list[object]) -> None:
        self.nodes = nodes
        super().__init__(f"Cycle detected among {len(nodes)} node(s): {', '.join(map(str, nodes))}")


def topological_sort[T: Hashable](successors: Mapping[T, Collection[T]]) -> list[T]:
    """Sort a graph topologically (dependencies before dependents).

    Ties are broken by the iteration order of ``successors``, so the result is
    reproducible for a given input mapping.

    Args:
        successors: Mapping from node to the nodes that depend on it.
            An edge (a -> b) means "b depends on a".

    Returns:
        List of nodes in topological order.

    Raises:
        CycleError: If the graph contains a cycle. ``nodes`` holds every node
            that could not be ordered.

    Example:
        >>> topological_sort({"rain": ["runoff"], "runoff": ["river"], "river": []})
        ['rain', 'runoff', 'river']

    """
    indegree: dict[T, int] = {}
    for node, deps in successors.items():
        indegree.setdefault(node, 0)
        for dep in deps:
            indegree[dep] = indegree.get(dep, 0) + 1

    queue = deque(node for node, deg in indegree.items() if deg == 0)
    order: list[T] = []

    while queue:
        node = queue.popleft()
        order.append(node)
        for successor in successors.get(node, ()):
            indegree[successor] -= 1
            if indegree[successor] == 0:
                queue.append(successor)

    if len(order) != len(indegree):
        ordered = set(order)
        raise CycleError([node for node in indegree if node not in ordered])

    return order
