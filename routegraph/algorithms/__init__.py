"""Routing algorithms: shortest paths, stop permutations and circuit search."""

from routegraph.algorithms.circuit import find_optimal_circuit, stitch_segments
from routegraph.algorithms.permutations import Permutations, iter_permutations
from routegraph.algorithms.spf import resolve_path, shortest_path, spf

__all__ = [
    "find_optimal_circuit",
    "stitch_segments",
    "Permutations",
    "iter_permutations",
    "resolve_path",
    "shortest_path",
    "spf",
]
