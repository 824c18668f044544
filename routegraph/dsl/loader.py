"""YAML loader + schema validation for network files.

Provides a single entrypoint to parse a YAML string, normalize node keys,
validate against the packaged JSON schema, and return a `NetworkSpec` holding
the graph, the optional default route and search overrides.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import jsonschema

from routegraph.config import SEARCH_CONFIG, CircuitSearchConfig
from routegraph.errors import UnknownNode
from routegraph.graph.model import WeightedGraph
from routegraph.logging import get_logger
from routegraph.types.base import NodeID
from routegraph.utils.yaml_utils import load_yaml_str_keys

logger = get_logger(__name__)


@dataclass
class NetworkSpec:
    """A parsed network file.

    Attributes:
        graph: The weighted graph.
        name: Optional network name.
        start: Default route start, if declared.
        end: Default route end, if declared.
        stops: Default mandatory stops, in declared order.
        search: Search policy with any file-level overrides applied.
    """

    graph: WeightedGraph
    name: Optional[str] = None
    start: Optional[NodeID] = None
    end: Optional[NodeID] = None
    stops: Tuple[NodeID, ...] = ()
    search: CircuitSearchConfig = field(default_factory=lambda: SEARCH_CONFIG)


@lru_cache(maxsize=1)
def _network_schema() -> Dict[str, Any]:
    try:
        with (
            resources.files("routegraph.schemas")
            .joinpath("network.json")
            .open("r", encoding="utf-8")
        ) as f:
            return json.load(f)
    except OSError as exc:  # pragma: no cover
        raise RuntimeError(
            "Failed to locate packaged RouteGraph schema 'routegraph/schemas/network.json'."
        ) from exc


def _node(value: Any) -> str:
    # YAML turns values like 'yes' or '42' into non-strings
    return str(value)


def _normalize(data: Dict[str, Any]) -> None:
    adjacency = data.get("adjacency")
    if isinstance(adjacency, dict):
        normalized: Dict[str, Any] = {}
        for node, neighbors in adjacency.items():
            if neighbors is None:
                normalized[node] = {}
            elif isinstance(neighbors, dict):
                normalized[node] = dict(neighbors)
            else:
                raise ValueError(
                    f"Neighbors of node '{node}' must be a mapping of neighbor -> weight"
                )
        data["adjacency"] = normalized


def _build_graph(data: Dict[str, Any]) -> WeightedGraph:
    directed = bool(data.get("directed", False))
    extra_nodes: List[str] = [_node(n) for n in data.get("nodes", [])]

    if "adjacency" in data:
        adjacency: Dict[str, Dict[str, Any]] = {
            node: dict(neighbors) for node, neighbors in data["adjacency"].items()
        }
        for node in extra_nodes:
            adjacency.setdefault(node, {})
        if not directed:
            for node, neighbors in list(adjacency.items()):
                for neighbor, weight in neighbors.items():
                    back = adjacency.setdefault(neighbor, {})
                    if back.get(node, weight) != weight:
                        raise ValueError(
                            f"Undirected edge '{node}' - '{neighbor}' has conflicting "
                            f"weights {weight} and {back[node]}"
                        )
                    back[node] = weight
        return WeightedGraph(adjacency, directed=directed)

    edges = [
        (_node(e["source"]), _node(e["target"]), e["weight"]) for e in data["edges"]
    ]
    return WeightedGraph.from_edges(edges, directed=directed, nodes=extra_nodes)


def load_network_yaml(yaml_str: str) -> NetworkSpec:
    """Load, normalize, and validate a network YAML string.

    Args:
        yaml_str: YAML document describing the network.

    Returns:
        NetworkSpec: Graph plus optional default route and search policy.

    Raises:
        ValueError: If the document is not a mapping or is malformed.
        jsonschema.ValidationError: If the document violates the schema.
        UnknownNode: If the route references a node absent from the graph.
        NegativeWeight: If any edge weight is negative.
    """
    data = load_yaml_str_keys(yaml_str)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("The provided YAML must map to a dictionary at top-level.")

    # Early shape checks give clearer messages than schema errors
    if "edges" in data and not isinstance(data["edges"], list):
        raise ValueError("'edges' must be a list")
    if isinstance(data.get("edges"), list):
        for entry in data["edges"]:
            if not isinstance(entry, dict):
                raise ValueError(
                    "Each edge definition must be a mapping with 'source', 'target' and 'weight'"
                )
            missing = [k for k in ("source", "target", "weight") if k not in entry]
            if missing:
                raise ValueError(
                    f"Edge definition {entry} is missing: {', '.join(missing)}"
                )
    if "adjacency" in data and not isinstance(data["adjacency"], dict):
        raise ValueError("'adjacency' must be a mapping")

    _normalize(data)
    jsonschema.validate(data, _network_schema())

    graph = _build_graph(data)
    graph.validate()

    route = data.get("route", {})
    start = _node(route["start"]) if "start" in route else None
    end = _node(route["end"]) if "end" in route else None
    stops = tuple(_node(s) for s in route.get("stops", []))
    for role, node in (("Start", start), ("End", end)):
        if node is not None and node not in graph:
            raise UnknownNode(node, role=role)
    for stop in stops:
        if stop not in graph:
            raise UnknownNode(stop, role="Mandatory stop")

    search = CircuitSearchConfig.from_dict(data.get("search", {}))

    logger.debug(
        f"Loaded network '{data.get('name', '<unnamed>')}' with {len(graph)} nodes "
        f"and {graph.edge_count()} directed edges"
    )
    return NetworkSpec(
        graph=graph,
        name=data.get("name"),
        start=start,
        end=end,
        stops=stops,
        search=search,
    )


def load_network_file(path: Union[str, Path]) -> NetworkSpec:
    """Read and load a network YAML file.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
    """
    text = Path(path).read_text(encoding="utf-8")
    return load_network_yaml(text)


def load_sample_network(name: str = "delivery_network") -> NetworkSpec:
    """Load one of the networks packaged under ``routegraph/data``."""
    text = (
        resources.files("routegraph.data")
        .joinpath(f"{name}.yaml")
        .read_text(encoding="utf-8")
    )
    return load_network_yaml(text)
