"""Shared type aliases, enums and result containers."""

from routegraph.types.base import Cost, NodeID, RouteStatus
from routegraph.types.dto import RouteResult

__all__ = ["Cost", "NodeID", "RouteStatus", "RouteResult"]
