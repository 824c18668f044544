"""Read-only weighted graph used by the routing algorithms.

`WeightedGraph` wraps an adjacency mapping ``node -> {neighbor: weight}`` and
exposes it as an immutable ``Mapping``. The graph may be directed: neighbor
maps need not be symmetric. Construction enforces that every referenced
neighbor is itself a node; weight signs are checked by ``validate()`` and,
lazily, by the shortest-path engine during traversal.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import (
    Any,
    Dict,
    FrozenSet,
    Iterable,
    Iterator,
    Mapping,
    Optional,
    Sequence,
    Tuple,
)

from routegraph.errors import NegativeWeight, UnknownNode
from routegraph.types.base import Cost, NodeID

EdgeTuple = Tuple[NodeID, NodeID, Cost]


class WeightedGraph(Mapping[NodeID, Mapping[NodeID, Cost]]):
    """Immutable weighted adjacency graph.

    Attributes:
        directed: Informational flag recorded by the builders; adjacency is
            always stored per direction.
    """

    __slots__ = ("_adj", "_nodes", "directed")

    def __init__(
        self,
        adjacency: Mapping[NodeID, Mapping[NodeID, Cost]],
        directed: bool = True,
    ) -> None:
        """Copy ``adjacency`` into read-only views.

        Args:
            adjacency: Mapping of node -> mapping of neighbor -> weight.
            directed: Whether the graph is meant to be directed.

        Raises:
            UnknownNode: If a neighbor is not a key of ``adjacency``.
        """
        adj: Dict[NodeID, Mapping[NodeID, Cost]] = {}
        for node, neighbors in adjacency.items():
            adj[node] = MappingProxyType(dict(neighbors))
        for node, neighbors in adj.items():
            for neighbor in neighbors:
                if neighbor not in adj:
                    raise UnknownNode(neighbor, role=f"Neighbor of '{node}'")
        self._adj: Mapping[NodeID, Mapping[NodeID, Cost]] = MappingProxyType(adj)
        self._nodes: FrozenSet[NodeID] = frozenset(adj)
        self.directed = directed

    @classmethod
    def from_edges(
        cls,
        edges: Iterable[Sequence[Any]],
        directed: bool = False,
        nodes: Optional[Iterable[NodeID]] = None,
    ) -> "WeightedGraph":
        """Build a graph from ``(source, target, weight)`` triples.

        Nodes are created implicitly from the edge endpoints. For undirected
        graphs each edge is added in both directions. A repeated edge keeps
        the last weight seen.

        Args:
            edges: Iterable of ``(source, target, weight)`` triples.
            directed: Whether edges are one-way.
            nodes: Additional (possibly isolated) nodes to include.

        Returns:
            WeightedGraph: The constructed graph.
        """
        adj: Dict[NodeID, Dict[NodeID, Cost]] = {}
        for node in nodes or ():
            adj.setdefault(node, {})
        for source, target, weight in edges:
            adj.setdefault(source, {})[target] = weight
            adj.setdefault(target, {})
            if not directed:
                adj[target][source] = weight
        return cls(adj, directed=directed)

    #
    # Mapping protocol
    #
    def __getitem__(self, node: NodeID) -> Mapping[NodeID, Cost]:
        return self.neighbors(node)

    def __iter__(self) -> Iterator[NodeID]:
        return iter(self._adj)

    def __len__(self) -> int:
        return len(self._adj)

    def __contains__(self, node: object) -> bool:
        try:
            return node in self._adj
        except TypeError:
            # Unhashable tokens are never members
            return False

    def __repr__(self) -> str:
        return (
            f"WeightedGraph(nodes={len(self)}, edges={self.edge_count()}, "
            f"directed={self.directed})"
        )

    def __getstate__(self) -> Dict[str, Any]:
        return {"adjacency": self.to_dict(), "directed": self.directed}

    def __setstate__(self, state: Dict[str, Any]) -> None:
        self.__init__(state["adjacency"], directed=state["directed"])  # type: ignore[misc]

    #
    # Queries
    #
    def neighbors(self, node: NodeID) -> Mapping[NodeID, Cost]:
        """Return the read-only mapping of neighbor -> weight for ``node``.

        Raises:
            UnknownNode: If ``node`` is not in the graph.
        """
        try:
            return self._adj[node]
        except (KeyError, TypeError):
            raise UnknownNode(node) from None

    def nodes(self) -> FrozenSet[NodeID]:
        """Return the set of all node identifiers."""
        return self._nodes

    def has_edge(self, source: NodeID, target: NodeID) -> bool:
        """Return True if the directed edge ``source -> target`` exists."""
        return source in self and target in self._adj[source]

    def weight(self, source: NodeID, target: NodeID) -> Cost:
        """Return the weight of edge ``source -> target``.

        Raises:
            UnknownNode: If ``source`` is not in the graph.
            KeyError: If the edge does not exist.
        """
        neighbors = self.neighbors(source)
        if target not in neighbors:
            raise KeyError(f"Edge '{source}' -> '{target}' does not exist.")
        return neighbors[target]

    def edges(self) -> Iterator[EdgeTuple]:
        """Yield every directed edge as ``(source, target, weight)``."""
        for source, neighbors in self._adj.items():
            for target, weight in neighbors.items():
                yield source, target, weight

    def edge_count(self) -> int:
        """Return the number of directed edges."""
        return sum(len(neighbors) for neighbors in self._adj.values())

    def validate(self) -> None:
        """Check that every weight is nonnegative.

        Neighbor membership is already enforced at construction.

        Raises:
            NegativeWeight: On the first negative weight found.
        """
        for source, target, weight in self.edges():
            if weight < 0:
                raise NegativeWeight(source, target, weight)

    def is_valid_path(self, path: Sequence[NodeID]) -> bool:
        """Return True if ``path`` is a non-empty walk along existing edges.

        Consecutive repeated nodes are rejected.
        """
        if not path or path[0] not in self:
            return False
        for u, v in zip(path, path[1:]):
            if u == v or not self.has_edge(u, v):
                return False
        return True

    def path_distance(self, path: Sequence[NodeID]) -> Cost:
        """Return the total weight along ``path``.

        Raises:
            ValueError: If ``path`` is not a valid walk in this graph.
        """
        if not self.is_valid_path(path):
            raise ValueError(f"Path {list(path)} is not a valid walk in the graph.")
        return sum((self._adj[u][v] for u, v in zip(path, path[1:])), 0)

    def to_dict(self) -> Dict[NodeID, Dict[NodeID, Cost]]:
        """Return a plain-dict copy of the adjacency."""
        return {node: dict(neighbors) for node, neighbors in self._adj.items()}
