"""Result containers returned by the routing algorithms."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from routegraph.errors import Infeasible, NoPathFound
from routegraph.types.base import Cost, NodeID, RouteStatus


@dataclass(frozen=True)
class RouteResult:
    """Outcome of a shortest-path or optimal-circuit search.

    ``distance`` and ``path`` are either both set or both ``None``; the latter
    signals that no route exists (see ``status``).

    Attributes:
        distance: Total edge weight along ``path``.
        path: Node sequence from source to target, junctions not duplicated.
        status: Search outcome.
        source: First node requested by the caller.
        target: Last node requested by the caller.
        order: Visiting order of the mandatory stops in the winning circuit.
        evaluated: Number of stop orderings evaluated (0 for a plain path).
        truncated: True when a deadline or iteration cap stopped the search
            before every ordering was evaluated.
    """

    distance: Optional[Cost]
    path: Optional[Tuple[NodeID, ...]]
    status: RouteStatus = RouteStatus.OK
    source: Optional[NodeID] = None
    target: Optional[NodeID] = None
    order: Tuple[NodeID, ...] = ()
    evaluated: int = 0
    truncated: bool = False

    def __post_init__(self) -> None:
        if (self.distance is None) != (self.path is None):
            raise ValueError("distance and path must be both set or both None")
        if self.status == RouteStatus.OK and self.path is None:
            raise ValueError("an OK result requires a distance and a path")
        if self.status != RouteStatus.OK and self.path is not None:
            raise ValueError(f"a {self.status.name} result cannot carry a path")

    @classmethod
    def no_path(cls, source: NodeID, target: NodeID) -> "RouteResult":
        """Return the result for an unreachable source/target pair."""
        return cls(None, None, RouteStatus.NO_PATH, source=source, target=target)

    @classmethod
    def infeasible(
        cls,
        source: NodeID,
        target: NodeID,
        evaluated: int = 0,
        truncated: bool = False,
    ) -> "RouteResult":
        """Return the result for a circuit search with no feasible ordering."""
        return cls(
            None,
            None,
            RouteStatus.INFEASIBLE,
            source=source,
            target=target,
            evaluated=evaluated,
            truncated=truncated,
        )

    @property
    def found(self) -> bool:
        """True when a route was found."""
        return self.status == RouteStatus.OK

    def raise_for_status(self) -> "RouteResult":
        """Return self when a route was found, else raise the matching error.

        Raises:
            NoPathFound: For a ``NO_PATH`` result.
            Infeasible: For an ``INFEASIBLE`` result.
        """
        if self.status == RouteStatus.NO_PATH:
            raise NoPathFound(self.source, self.target)
        if self.status == RouteStatus.INFEASIBLE:
            raise Infeasible(self.source, self.target, truncated=self.truncated)
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "status": self.status.name,
            "source": self.source,
            "target": self.target,
            "distance": self.distance,
            "path": list(self.path) if self.path is not None else None,
            "order": list(self.order),
            "evaluated": self.evaluated,
            "truncated": self.truncated,
        }
