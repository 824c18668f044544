import itertools
import logging
from concurrent import futures
from unittest.mock import patch

import networkx as nx
import pytest

from routegraph.algorithms.circuit import (
    SegmentCache,
    evaluate_order,
    find_optimal_circuit,
    route_sequence,
    stitch_segments,
)
from routegraph.algorithms.spf import shortest_path
from routegraph.config import CircuitSearchConfig
from routegraph.errors import Infeasible, NegativeWeight, TooManyStops, UnknownNode
from routegraph.graph.convert import to_networkx
from routegraph.graph.model import WeightedGraph
from routegraph.types.base import RouteStatus


def _oracle_distance(graph: WeightedGraph, start, end, stops):
    """Brute force over itertools.permutations priced with NetworkX Dijkstra."""
    nx_graph = to_networkx(graph)
    best = None
    for order in itertools.permutations(stops):
        sequence = [start, *order, end]
        try:
            total = sum(
                nx.dijkstra_path_length(nx_graph, u, v)
                for u, v in zip(sequence, sequence[1:])
            )
        except nx.NetworkXNoPath:
            continue
        if best is None or total < best:
            best = total
    return best


@pytest.fixture
def star():
    # S and E both connect to X and Y with weight 1: both stop orders tie.
    return WeightedGraph.from_edges(
        [("S", "X", 1), ("S", "Y", 1), ("E", "X", 1), ("E", "Y", 1)],
        directed=False,
    )


@pytest.fixture
def chain():
    # Directed S -> P -> Q -> E; Q never reaches P.
    return WeightedGraph({"S": {"P": 1}, "P": {"Q": 1}, "Q": {"E": 1}, "E": {}})


class TestReferenceScenario:
    def test_optimal_circuit(self, delivery_network):
        result = find_optimal_circuit(
            delivery_network, "Warehouse", "Delivery_Hub", ["C", "F"]
        )
        assert result.status == RouteStatus.OK
        assert result.distance == 23
        assert result.path == (
            "Warehouse",
            "A",
            "C",
            "D",
            "F",
            "G",
            "Delivery_Hub",
        )
        assert result.order == ("C", "F")
        assert result.evaluated == 2
        assert not result.truncated

    def test_alternative_order_is_evaluated_and_rejected(self, delivery_network):
        cache = SegmentCache(delivery_network)
        total, legs = evaluate_order(cache, "Warehouse", ("F", "C"), "Delivery_Hub")
        assert total == 31
        assert len(legs) == 3

        # Enumerating F first still selects C-then-F
        result = find_optimal_circuit(
            delivery_network, "Warehouse", "Delivery_Hub", ["F", "C"]
        )
        assert result.evaluated == 2
        assert result.distance == 23
        assert result.order == ("C", "F")

    def test_stops_given_as_set(self, delivery_network):
        result = find_optimal_circuit(
            delivery_network, "Warehouse", "Delivery_Hub", {"C", "F"}
        )
        assert result.distance == 23

    def test_plain_dict_graph(self, delivery_network):
        result = find_optimal_circuit(
            delivery_network.to_dict(), "Warehouse", "Delivery_Hub", ["C", "F"]
        )
        assert result.distance == 23
        assert result.path == (
            "Warehouse",
            "A",
            "C",
            "D",
            "F",
            "G",
            "Delivery_Hub",
        )


class TestCircuitProperties:
    def test_no_stops_delegates_to_shortest_path(self, delivery_network):
        for start, end in itertools.permutations(sorted(delivery_network), 2):
            assert find_optimal_circuit(
                delivery_network, start, end, []
            ) == shortest_path(delivery_network, start, end)

    def test_no_stops_unreachable(self, disconnected):
        result = find_optimal_circuit(disconnected, "A", "X")
        assert result.status == RouteStatus.NO_PATH

    def test_single_stop_is_sum_of_segments(self, delivery_network):
        nodes = sorted(delivery_network)
        for start, stop, end in itertools.permutations(nodes, 3):
            expected = (
                shortest_path(delivery_network, start, stop).distance
                + shortest_path(delivery_network, stop, end).distance
            )
            result = find_optimal_circuit(delivery_network, start, end, [stop])
            assert result.distance == expected

    def test_stitched_path_is_valid_walk(self, delivery_network):
        inner = ["A", "B", "C", "D", "E", "F", "G"]
        for stops in itertools.combinations(inner, 2):
            result = find_optimal_circuit(
                delivery_network, "Warehouse", "Delivery_Hub", stops
            )
            path = result.path
            assert path[0] == "Warehouse" and path[-1] == "Delivery_Hub"
            assert all(u != v for u, v in zip(path, path[1:]))
            assert all(delivery_network.has_edge(u, v) for u, v in zip(path, path[1:]))
            assert set(stops) <= set(path)
            assert delivery_network.path_distance(path) == result.distance

    @pytest.mark.parametrize(
        "stops", [("C", "F", "E"), ("B", "D", "G"), ("A", "E", "F", "D")]
    )
    def test_matches_brute_force_oracle(self, delivery_network, stops):
        result = find_optimal_circuit(
            delivery_network, "Warehouse", "Delivery_Hub", stops
        )
        assert result.distance == _oracle_distance(
            delivery_network, "Warehouse", "Delivery_Hub", stops
        )

    def test_ties_keep_first_enumerated_order(self, star):
        first = find_optimal_circuit(star, "S", "E", ["X", "Y"])
        assert first.distance == 4
        assert first.order == ("X", "Y")

        swapped = find_optimal_circuit(star, "S", "E", ["Y", "X"])
        assert swapped.distance == 4
        assert swapped.order == ("Y", "X")

    def test_infeasible_order_is_skipped(self, chain):
        result = find_optimal_circuit(chain, "S", "E", ["Q", "P"])
        assert result.distance == 3
        assert result.order == ("P", "Q")
        assert result.path == ("S", "P", "Q", "E")
        assert result.evaluated == 2

    def test_infeasible_when_every_order_fails(self, disconnected):
        result = find_optimal_circuit(disconnected, "A", "B", ["X"])
        assert result.status == RouteStatus.INFEASIBLE
        assert result.distance is None and result.path is None
        assert result.evaluated == 1
        with pytest.raises(Infeasible):
            result.raise_for_status()

    def test_stop_equal_to_start_is_tolerated(self, delivery_network, caplog):
        with caplog.at_level(logging.WARNING, logger="routegraph"):
            result = find_optimal_circuit(
                delivery_network, "Warehouse", "C", ["Warehouse"]
            )
        assert result.distance == 9
        assert result.path == ("Warehouse", "A", "C")
        assert "repeat" in caplog.text


class TestFailFast:
    def test_unknown_nodes(self, delivery_network):
        with pytest.raises(UnknownNode):
            find_optimal_circuit(delivery_network, "Nowhere", "Delivery_Hub", ["C"])
        with pytest.raises(UnknownNode):
            find_optimal_circuit(delivery_network, "Warehouse", "Nowhere", ["C"])
        with pytest.raises(UnknownNode) as exc_info:
            find_optimal_circuit(
                delivery_network, "Warehouse", "Delivery_Hub", ["C", "Nowhere"]
            )
        assert exc_info.value.node == "Nowhere"

    def test_too_many_stops_does_no_search(self, delivery_network):
        with patch("routegraph.algorithms.circuit.shortest_path") as mock_spf:
            with pytest.raises(TooManyStops) as exc_info:
                find_optimal_circuit(
                    delivery_network,
                    "Warehouse",
                    "Delivery_Hub",
                    ["C", "F", "E"],
                    max_stops=2,
                )
            mock_spf.assert_not_called()
        assert exc_info.value.count == 3
        assert exc_info.value.limit == 2

    def test_default_bound_applies(self):
        names = [f"N{i}" for i in range(11)]
        graph = WeightedGraph.from_edges(
            [(u, v, 1) for u, v in zip(names, names[1:])], directed=False
        )
        with pytest.raises(TooManyStops) as exc_info:
            find_optimal_circuit(graph, "N0", "N10", names[1:10])
        assert exc_info.value.limit == CircuitSearchConfig().max_stops

    def test_config_bound(self, delivery_network):
        config = CircuitSearchConfig(max_stops=1)
        with pytest.raises(TooManyStops):
            find_optimal_circuit(
                delivery_network, "Warehouse", "Delivery_Hub", ["C", "F"], config=config
            )
        # Explicit keyword overrides the config
        result = find_optimal_circuit(
            delivery_network,
            "Warehouse",
            "Delivery_Hub",
            ["C", "F"],
            config=config,
            max_stops=2,
        )
        assert result.distance == 23

    def test_negative_weight_propagates(self):
        graph = {"S": {"M": 1}, "M": {"E": -1}, "E": {}}
        with pytest.raises(NegativeWeight):
            find_optimal_circuit(graph, "S", "E", ["M"])


class TestTruncation:
    def test_zero_deadline_returns_truncated_infeasible(self, delivery_network):
        result = find_optimal_circuit(
            delivery_network, "Warehouse", "Delivery_Hub", ["C", "F"], deadline=0
        )
        assert result.truncated
        assert result.status == RouteStatus.INFEASIBLE
        assert result.evaluated == 0
        with pytest.raises(Infeasible) as exc_info:
            result.raise_for_status()
        assert exc_info.value.truncated

    def test_iteration_cap_returns_best_so_far(self, delivery_network):
        result = find_optimal_circuit(
            delivery_network,
            "Warehouse",
            "Delivery_Hub",
            ["F", "C"],
            max_iterations=1,
        )
        assert result.truncated
        assert result.evaluated == 1
        assert result.distance == 31
        assert result.order == ("F", "C")
        assert delivery_network.path_distance(result.path) == 31

    def test_iteration_cap_covering_everything_is_not_truncated(self, delivery_network):
        result = find_optimal_circuit(
            delivery_network,
            "Warehouse",
            "Delivery_Hub",
            ["C", "F"],
            max_iterations=2,
        )
        assert not result.truncated
        assert result.distance == 23

    def test_generous_deadline_completes(self, delivery_network):
        result = find_optimal_circuit(
            delivery_network, "Warehouse", "Delivery_Hub", ["C", "F", "E"], deadline=60
        )
        assert not result.truncated
        assert result.evaluated == 6


class TestParallel:
    def test_parallel_matches_serial(self, delivery_network):
        stops = ["C", "F", "E", "B"]
        serial = find_optimal_circuit(
            delivery_network, "Warehouse", "Delivery_Hub", stops
        )
        parallel = find_optimal_circuit(
            delivery_network,
            "Warehouse",
            "Delivery_Hub",
            stops,
            config=CircuitSearchConfig(workers=2, chunk_size=5),
        )
        assert parallel.distance == serial.distance
        assert parallel.order == serial.order
        assert parallel.path == serial.path
        assert parallel.evaluated == 24
        assert not parallel.truncated

    def test_parallel_ties_match_serial(self, star):
        config = CircuitSearchConfig(workers=2, chunk_size=1)
        result = find_optimal_circuit(star, "S", "E", ["Y", "X"], config=config)
        assert result.order == ("Y", "X")

    def test_parallel_iteration_cap(self, delivery_network):
        result = find_optimal_circuit(
            delivery_network,
            "Warehouse",
            "Delivery_Hub",
            ["C", "F", "E"],
            config=CircuitSearchConfig(workers=2, chunk_size=1, max_iterations=3),
        )
        assert result.truncated
        assert result.evaluated == 3

    def test_parallel_deadline_cancels_waiting_chunks(self, delivery_network):
        stops = ["A", "B", "C", "D", "E", "F", "G"]
        result = find_optimal_circuit(
            delivery_network,
            "Warehouse",
            "Delivery_Hub",
            stops,
            config=CircuitSearchConfig(
                max_stops=7, workers=2, chunk_size=10, deadline=0.01
            ),
        )
        assert result.truncated
        assert result.evaluated < 5040
        if result.found:
            assert delivery_network.is_valid_path(result.path)
            assert delivery_network.path_distance(result.path) == result.distance
            assert set(stops) <= set(result.path)
        else:
            assert result.status == RouteStatus.INFEASIBLE

    def test_parallel_deadline_after_last_chunk_is_complete(self, delivery_network):
        """All chunks fit the in-flight window and return before the check."""
        clock = itertools.chain([0.0], itertools.repeat(10.0))

        def wait_all(fs, timeout=None, return_when=None):
            return futures.wait(fs, return_when=futures.ALL_COMPLETED)

        with (
            patch("routegraph.algorithms.circuit.perf_counter", lambda: next(clock)),
            patch("routegraph.algorithms.circuit.wait", wait_all),
        ):
            # 24 orderings in 4 chunks of 6 exactly fill 2 workers * 2 slots
            result = find_optimal_circuit(
                delivery_network,
                "Warehouse",
                "Delivery_Hub",
                ["C", "F", "E", "B"],
                config=CircuitSearchConfig(workers=2, chunk_size=6, deadline=1.0),
            )
        assert result.evaluated == 24
        assert not result.truncated
        serial = find_optimal_circuit(
            delivery_network, "Warehouse", "Delivery_Hub", ["C", "F", "E", "B"]
        )
        assert result.distance == serial.distance
        assert result.order == serial.order


class TestStitching:
    def test_drops_junction_nodes(self):
        segments = [("A", "B"), ("B", "C", "D"), ("D", "E")]
        assert stitch_segments(segments) == ("A", "B", "C", "D", "E")

    def test_zero_length_segment(self):
        assert stitch_segments([("A",), ("A", "B")]) == ("A", "B")
        assert stitch_segments([("A", "B"), ("B",)]) == ("A", "B")

    def test_mismatched_segments_rejected(self):
        with pytest.raises(ValueError):
            stitch_segments([("A", "B"), ("C", "D")])

    def test_empty_input_rejected(self):
        with pytest.raises(ValueError):
            stitch_segments([])
        with pytest.raises(ValueError):
            stitch_segments([("A",), ()])

    def test_route_sequence(self):
        assert route_sequence("S", ("X", "Y"), "E") == ("S", "X", "Y", "E")


def test_segment_cache_computes_each_leg_once(delivery_network):
    cache = SegmentCache(delivery_network)
    first = cache.leg("Warehouse", "C")
    second = cache.leg("Warehouse", "C")
    assert first is second
    assert cache.calls == 1
