"""RouteGraph: optimal routing through mandatory stops.

RouteGraph finds the minimum-weight route from a start node to an end node
that visits every node of a small set of mandatory stops. Each candidate
ordering of the stops is priced with Dijkstra shortest paths and the
cheapest ordering's segments are stitched into one continuous path.

Primary API:
    WeightedGraph - Read-only weighted adjacency graph
    shortest_path() - Single source/target shortest path
    find_optimal_circuit() - Cheapest start -> stops -> end route
    RouteResult - Result object shared by both searches

Example:
    from routegraph import WeightedGraph, find_optimal_circuit

    graph = WeightedGraph.from_edges(
        [("W", "A", 4), ("A", "C", 5), ("C", "H", 3)], directed=False
    )
    result = find_optimal_circuit(graph, "W", "H", ["C"])
    print(result.distance, result.path)
"""

from __future__ import annotations

from routegraph import cli, logging
from routegraph._version import __version__
from routegraph.algorithms.circuit import find_optimal_circuit, stitch_segments
from routegraph.algorithms.permutations import Permutations, iter_permutations
from routegraph.algorithms.spf import shortest_path, spf
from routegraph.config import SEARCH_CONFIG, CircuitSearchConfig
from routegraph.dsl.loader import (
    NetworkSpec,
    load_network_file,
    load_network_yaml,
    load_sample_network,
)
from routegraph.errors import (
    Infeasible,
    NegativeWeight,
    NoPathFound,
    RouteGraphError,
    TooManyStops,
    UnknownNode,
)
from routegraph.graph.convert import from_networkx, to_networkx
from routegraph.graph.model import WeightedGraph
from routegraph.types.base import Cost, NodeID, RouteStatus
from routegraph.types.dto import RouteResult

__all__ = [
    # Version
    "__version__",
    # Model
    "WeightedGraph",
    "NetworkSpec",
    # Algorithms (primary API)
    "shortest_path",
    "spf",
    "find_optimal_circuit",
    "stitch_segments",
    "Permutations",
    "iter_permutations",
    # Types
    "Cost",
    "NodeID",
    "RouteStatus",
    "RouteResult",
    # Configuration
    "CircuitSearchConfig",
    "SEARCH_CONFIG",
    # Errors
    "RouteGraphError",
    "UnknownNode",
    "NegativeWeight",
    "NoPathFound",
    "Infeasible",
    "TooManyStops",
    # Loading
    "load_network_yaml",
    "load_network_file",
    "load_sample_network",
    # Library integrations (NetworkX)
    "from_networkx",
    "to_networkx",
    # Utilities
    "cli",
    "logging",
]
