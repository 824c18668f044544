"""Graph conversion utilities between WeightedGraph and NetworkX graphs.

Undirected NetworkX graphs expand into both edge directions; multigraphs are
consolidated by keeping the minimum weight between each node pair.
"""

from typing import Dict, Optional

import networkx as nx

from routegraph.graph.model import WeightedGraph
from routegraph.types.base import Cost, NodeID


def to_networkx(graph: WeightedGraph, weight_attr: str = "weight") -> nx.DiGraph:
    """Convert a WeightedGraph to a NetworkX DiGraph.

    Args:
        graph: The graph to convert.
        weight_attr: Edge attribute that receives the weight.

    Returns:
        A NetworkX DiGraph with one edge per directed adjacency entry.
    """
    nx_graph = nx.DiGraph()
    nx_graph.add_nodes_from(graph.nodes())
    for source, target, weight in graph.edges():
        nx_graph.add_edge(source, target, **{weight_attr: weight})
    return nx_graph


def from_networkx(
    nx_graph: nx.Graph,
    weight_attr: str = "weight",
    default_weight: Optional[Cost] = 1,
) -> WeightedGraph:
    """Convert a NetworkX graph to a WeightedGraph.

    Args:
        nx_graph: Any NetworkX graph (Graph, DiGraph, MultiGraph, MultiDiGraph).
        weight_attr: Edge attribute holding the weight.
        default_weight: Weight used when an edge lacks ``weight_attr``. When
            ``None``, a missing attribute raises ``ValueError``.

    Returns:
        WeightedGraph: The converted graph.

    Raises:
        ValueError: If an edge has no weight and ``default_weight`` is None.
    """
    adj: Dict[NodeID, Dict[NodeID, Cost]] = {node: {} for node in nx_graph.nodes}
    directed = nx_graph.is_directed()

    for source, target, data in nx_graph.edges(data=True):
        weight = data.get(weight_attr, default_weight)
        if weight is None:
            raise ValueError(
                f"Edge '{source}' -> '{target}' has no '{weight_attr}' attribute."
            )
        pairs = [(source, target)] if directed else [(source, target), (target, source)]
        for u, v in pairs:
            # Parallel edges collapse to the cheapest one
            if v not in adj[u] or weight < adj[u][v]:
                adj[u][v] = weight

    return WeightedGraph(adj, directed=directed)
