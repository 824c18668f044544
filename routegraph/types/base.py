"""Base aliases and enums shared by the routing algorithms."""

from __future__ import annotations

from enum import IntEnum
from typing import Hashable, Union

#: Opaque node identifier (strings in practice).
NodeID = Hashable

#: Numeric cost of an edge or path (distance, time, etc.).
Cost = Union[int, float]


class RouteStatus(IntEnum):
    """Outcome of a shortest-path or circuit search."""

    #: A route was found; distance and path are populated.
    OK = 1
    #: The target is unreachable from the source (single shortest-path call).
    NO_PATH = 2
    #: No ordering of the mandatory stops yields a connected circuit.
    INFEASIBLE = 3

    @classmethod
    def from_string(cls, value: str) -> "RouteStatus":
        """Parse a case-insensitive status name.

        Raises:
            ValueError: If the string doesn't match any enum member.
        """
        try:
            return cls[value.upper()]
        except KeyError:
            valid = ", ".join(e.name for e in cls)
            raise ValueError(
                f"Invalid route status '{value}'. Valid values are: {valid}"
            ) from None
