"""Shortest-path-first (SPF) algorithms.

Implements label-setting Dijkstra over a weighted adjacency mapping using a
binary heap. The graph may be a `WeightedGraph` or any plain
``Mapping[node, Mapping[neighbor, weight]]``; it is never mutated, so
concurrent calls against the same graph are safe.

Notes:
    Heap entries are ``(cost, seq, node)`` where ``seq`` is a monotonically
    increasing insertion counter. Among frontier nodes with equal tentative
    cost the earliest-inserted one is extracted first, which makes the
    reported path deterministic for a given graph and adjacency order.
    Only the distance is guaranteed when several equal-cost paths exist.
"""

from __future__ import annotations

from heapq import heappop, heappush
from itertools import count
from typing import Dict, List, Mapping, Optional, Tuple

from routegraph.errors import NegativeWeight, UnknownNode
from routegraph.logging import get_logger
from routegraph.types.base import Cost, NodeID
from routegraph.types.dto import RouteResult

logger = get_logger(__name__)

Adjacency = Mapping[NodeID, Mapping[NodeID, Cost]]
PredMap = Dict[NodeID, Optional[NodeID]]


def _require_node(graph: Adjacency, node: NodeID, role: str) -> None:
    try:
        present = node in graph
    except TypeError:
        present = False
    if not present:
        raise UnknownNode(node, role=role)


def _outgoing(graph: Adjacency, node: NodeID) -> Mapping[NodeID, Cost]:
    try:
        return graph[node]
    except (KeyError, TypeError):
        raise UnknownNode(node) from None


def spf(
    graph: Adjacency,
    src_node: NodeID,
    dst_node: Optional[NodeID] = None,
) -> Tuple[Dict[NodeID, Cost], PredMap]:
    """Compute shortest-path costs and predecessors from a source node.

    Args:
        graph: Adjacency mapping ``node -> {neighbor: weight}``.
        src_node: The source node.
        dst_node: Optional destination. When given, the search stops as soon
            as ``dst_node`` is extracted from the heap; costs of other nodes
            may then be tentative.

    Returns:
        A tuple of (costs, pred):
          - costs: Maps each discovered node to its cost from ``src_node``.
          - pred: Maps each discovered node to its predecessor on the
            shortest path (``None`` for the source).

    Raises:
        UnknownNode: If ``src_node`` (or a referenced neighbor) is not in the graph.
        NegativeWeight: If a negative edge weight is encountered.
    """
    _require_node(graph, src_node, "Source")

    costs: Dict[NodeID, Cost] = {src_node: 0}
    pred: PredMap = {src_node: None}
    seq = count()
    min_pq: List[Tuple[Cost, int, NodeID]] = [(0, next(seq), src_node)]

    while min_pq:
        current_cost, _, node_id = heappop(min_pq)
        if current_cost > costs[node_id]:
            # Stale entry superseded by a cheaper push
            continue
        if node_id == dst_node:
            break

        for neighbor_id, weight in _outgoing(graph, node_id).items():
            if weight < 0:
                raise NegativeWeight(node_id, neighbor_id, weight)
            new_cost = current_cost + weight
            if neighbor_id not in costs or new_cost < costs[neighbor_id]:
                costs[neighbor_id] = new_cost
                pred[neighbor_id] = node_id
                heappush(min_pq, (new_cost, next(seq), neighbor_id))

    return costs, pred


def resolve_path(
    pred: PredMap, src_node: NodeID, dst_node: NodeID
) -> Optional[Tuple[NodeID, ...]]:
    """Walk predecessors back from ``dst_node`` and return the forward path.

    Returns:
        The node sequence from ``src_node`` to ``dst_node``, or ``None`` when
        the walk does not terminate at ``src_node`` (destination unreachable).
    """
    if dst_node not in pred:
        return None

    path: List[NodeID] = [dst_node]
    current = pred[dst_node]
    while current is not None:
        path.append(current)
        current = pred.get(current)

    if path[-1] != src_node:
        return None
    path.reverse()
    return tuple(path)


def shortest_path(graph: Adjacency, source: NodeID, target: NodeID) -> RouteResult:
    """Return the minimum-distance path from ``source`` to ``target``.

    Args:
        graph: Adjacency mapping ``node -> {neighbor: weight}``.
        source: Start node.
        target: End node.

    Returns:
        RouteResult: ``OK`` with distance and path, or ``NO_PATH`` with both
        fields ``None`` when ``target`` is unreachable.

    Raises:
        UnknownNode: If ``source`` or ``target`` is not in the graph.
        NegativeWeight: If a negative weight is encountered during traversal.
    """
    _require_node(graph, source, "Source")
    _require_node(graph, target, "Target")

    if source == target:
        return RouteResult(0, (source,), source=source, target=target)

    costs, pred = spf(graph, source, dst_node=target)
    path = resolve_path(pred, source, target)
    if path is None:
        logger.debug(f"No path from '{source}' to '{target}'")
        return RouteResult.no_path(source, target)

    logger.debug(
        f"Shortest path '{source}' -> '{target}': cost={costs[target]}, "
        f"hops={len(path) - 1}"
    )
    return RouteResult(costs[target], path, source=source, target=target)
