"""Exception taxonomy for routing searches.

Input problems (``UnknownNode``, ``NegativeWeight``, ``TooManyStops``) are
raised before or during a search. Unreachable pairs and infeasible circuits are
normally reported through ``RouteResult.status``; ``RouteResult.raise_for_status``
turns them into ``NoPathFound`` and ``Infeasible``.
"""

from __future__ import annotations

from typing import Hashable, Optional


class RouteGraphError(Exception):
    """Base class for all RouteGraph errors."""


class UnknownNode(RouteGraphError, KeyError):
    """A referenced node is not a member of the graph."""

    def __init__(self, node: Hashable, role: Optional[str] = None) -> None:
        self.node = node
        self.role = role
        label = f"{role} node" if role else "Node"
        super().__init__(f"{label} '{node}' is not in the graph.")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])

    def __reduce__(self):
        return (type(self), (self.node, self.role))


class NegativeWeight(RouteGraphError, ValueError):
    """An edge with a negative weight was encountered."""

    def __init__(self, source: Hashable, target: Hashable, weight: float) -> None:
        self.source = source
        self.target = target
        self.weight = weight
        super().__init__(
            f"Edge '{source}' -> '{target}' has negative weight {weight}; "
            "shortest paths require nonnegative weights."
        )

    def __reduce__(self):
        return (type(self), (self.source, self.target, self.weight))


class TooManyStops(RouteGraphError, ValueError):
    """The mandatory stop count exceeds the configured bound."""

    def __init__(self, count: int, limit: int) -> None:
        self.count = count
        self.limit = limit
        super().__init__(
            f"{count} mandatory stops requested but at most {limit} are allowed "
            f"({count}! orderings would be searched)."
        )

    def __reduce__(self):
        return (type(self), (self.count, self.limit))


class NoPathFound(RouteGraphError):
    """The target is unreachable from the source."""

    def __init__(self, source: Hashable, target: Hashable) -> None:
        self.source = source
        self.target = target
        super().__init__(f"No path from '{source}' to '{target}'.")

    def __reduce__(self):
        return (type(self), (self.source, self.target))


class Infeasible(RouteGraphError):
    """No ordering of the mandatory stops yields a connected circuit."""

    def __init__(self, start: Hashable, end: Hashable, truncated: bool = False) -> None:
        self.start = start
        self.end = end
        self.truncated = truncated
        suffix = " before the search was truncated" if truncated else ""
        super().__init__(
            f"No feasible circuit from '{start}' to '{end}' through all mandatory "
            f"stops{suffix}."
        )

    def __reduce__(self):
        return (type(self), (self.start, self.end, self.truncated))
