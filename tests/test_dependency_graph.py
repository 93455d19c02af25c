"""Tests for DependencyGraph and graph algorithms."""

import pytest

from nflow._graph import CycleError, DependencyGraph, topological_sort


class TestTopologicalSort:
    """Tests for the topological_sort algorithm."""

    def test_empty_graph(self) -> None:
        assert topological_sort({}) == []

    def test_linear_chain(self) -> None:
        # fertilizer -> runoff -> river
        result = topological_sort({"fertilizer": ["runoff"], "runoff": ["river"], "river": []})
        assert result == ["fertilizer", "runoff", "river"]

    def test_ties_follow_mapping_order(self) -> None:
        assert topological_sort({"b": ["c"], "a": ["c"], "c": []}) == ["b", "a", "c"]
        assert topological_sort({"a": ["c"], "b": ["c"], "c": []}) == ["a", "b", "c"]

    def test_diamond_dependency(self) -> None:
        result = topological_sort({"a": ["b", "c"], "b": ["d"], "c": ["d"], "d": []})
        assert result == ["a", "b", "c", "d"]

    def test_nodes_only_listed_as_successors(self) -> None:
        assert topological_sort({"a": ["b"]}) == ["a", "b"]

    def test_cycle_detection(self) -> None:
        with pytest.raises(CycleError, match="Cycle") as exc_info:
            topological_sort({"x": ["a"], "a": ["b"], "b": ["a"]})
        assert exc_info.value.nodes == ["a", "b"]

    def test_self_loop_detection(self) -> None:
        with pytest.raises(ValueError, match="Cycle"):
            topological_sort({"a": ["a"]})

    def test_works_with_integers(self) -> None:
        assert topological_sort({1: [2], 2: [3], 3: []}) == [1, 2, 3]


class TestDependencyGraphConstruction:
    """Tests for DependencyGraph construction."""

    def test_empty_graph(self) -> None:
        graph = DependencyGraph.from_edges([])
        assert graph.nodes == ()
        assert len(graph) == 0

    def test_nodes_in_first_seen_order(self) -> None:
        graph = DependencyGraph.from_edges([("b", "c"), ("a", "c")])
        assert graph.nodes == ("b", "c", "a")

    def test_isolated_nodes(self) -> None:
        graph = DependencyGraph.from_edges([("a", "b")], nodes=["z", "a"])
        assert graph.nodes == ("z", "a", "b")
        assert "z" in graph
        assert graph.predecessors("z") == ()

    def test_duplicate_edges_collapse(self) -> None:
        graph = DependencyGraph.from_edges([("a", "b"), ("a", "b")])
        assert graph.successors("a") == ("b",)

    def test_contains(self) -> None:
        graph = DependencyGraph.from_edges([("a", "b")])
        assert "a" in graph
        assert "c" not in graph


class TestDependencyGraphQueries:
    """Tests for DependencyGraph query methods."""

    def test_predecessors(self) -> None:
        graph = DependencyGraph.from_edges([("a", "c"), ("b", "c")])
        assert graph.predecessors("c") == ("a", "b")
        assert graph.predecessors("a") == ()
        assert graph.predecessors("nonexistent") == ()

    def test_successors(self) -> None:
        graph = DependencyGraph.from_edges([("a", "b"), ("a", "c")])
        assert graph.successors("a") == ("b", "c")
        assert graph.successors("b") == ()

    def test_ancestors(self) -> None:
        graph = DependencyGraph.from_edges([("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")])
        assert graph.ancestors("d") == frozenset({"a", "b", "c"})
        assert graph.ancestors("a") == frozenset()

    def test_descendants(self) -> None:
        graph = DependencyGraph.from_edges([("a", "b"), ("b", "c")])
        assert graph.descendants("a") == frozenset({"b", "c"})
        assert graph.descendants("c") == frozenset()

    def test_descendants_in_cycle(self) -> None:
        graph = DependencyGraph.from_edges([("a", "b"), ("b", "a")])
        assert graph.descendants("a") == frozenset({"a", "b"})


class TestDependencyGraphCycles:
    """Tests for ordering and cycle reporting."""

    def test_topological_order(self) -> None:
        graph = DependencyGraph.from_edges([("a", "b"), ("b", "c")])
        assert graph.topological_order() == ["a", "b", "c"]
        assert graph.has_cycle() is False
        assert graph.cycle_nodes() == []

    def test_cycle(self) -> None:
        graph = DependencyGraph.from_edges([("x", "a"), ("a", "b"), ("b", "a")])
        assert graph.has_cycle() is True
        assert graph.cycle_nodes() == ["a", "b"]
        with pytest.raises(CycleError):
            graph.topological_order()
