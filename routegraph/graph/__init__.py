"""Graph primitives and helpers.

This package provides the read-only `WeightedGraph` model and conversion
helpers for NetworkX (`convert`).
"""

from routegraph.graph.model import EdgeTuple, WeightedGraph

__all__ = ["EdgeTuple", "WeightedGraph"]
