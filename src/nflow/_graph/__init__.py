"""Dependency graph between variables.

This module contains:
- DependencyGraph[T]: A generic, immutable directed graph of "depends on" edges
- topological_sort: Deterministic ordering of nodes by dependencies
- CycleError: Raised when no such ordering exists
"""

from ._algorithms import CycleError, topological_sort
from ._dependency_graph import DependencyGraph

__all__ = ["CycleError", "DependencyGraph", "topological_sort"]
