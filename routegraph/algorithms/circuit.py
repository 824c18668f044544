"""Optimal circuit search through a set of mandatory stops.

Every ordering of the mandatory stops is evaluated as the route
``start -> stop_1 -> ... -> stop_n -> end``; each leg is a shortest path and
the ordering with the smallest total wins. Segment paths of the winner are
stitched into one continuous node sequence.

Notes:
    The search is exponential in the stop count (n! orderings of n + 1 legs),
    so the stop count is bounded by ``CircuitSearchConfig.max_stops`` and the
    search accepts an optional wall-clock deadline and iteration cap. On
    expiry the best circuit found so far is returned with ``truncated=True``.

    Ties are resolved in favour of the first ordering in enumeration order
    (see ``routegraph.algorithms.permutations``). Parallel evaluation reduces
    on ``(total, ordering_index)`` and therefore picks the same winner as the
    serial search.
"""

from __future__ import annotations

import os
import pickle
from concurrent.futures import FIRST_COMPLETED, Future, ProcessPoolExecutor, wait
from itertools import islice
from time import perf_counter
from typing import (
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Set,
    Tuple,
)

from routegraph.algorithms.permutations import Permutations
from routegraph.algorithms.spf import shortest_path
from routegraph.config import SEARCH_CONFIG, CircuitSearchConfig
from routegraph.errors import RouteGraphError, TooManyStops, UnknownNode
from routegraph.graph.model import WeightedGraph
from routegraph.logging import get_global_log_level, get_logger, set_global_log_level
from routegraph.types.base import Cost, NodeID, RouteStatus
from routegraph.types.dto import RouteResult

logger = get_logger(__name__)

# (total, ordering_index, ordering)
Candidate = Tuple[Cost, int, Tuple[NodeID, ...]]

# Graph installed in each worker process by the pool initializer
_worker_graph: Optional[WeightedGraph] = None


class SegmentCache:
    """Memoizes shortest-path legs for the lifetime of one circuit search."""

    def __init__(self, graph: Mapping[NodeID, Mapping[NodeID, Cost]]) -> None:
        self.graph = graph
        self._legs: Dict[Tuple[NodeID, NodeID], RouteResult] = {}
        self.calls = 0

    def leg(self, source: NodeID, target: NodeID) -> RouteResult:
        """Return the shortest path ``source -> target``, computing it once."""
        key = (source, target)
        result = self._legs.get(key)
        if result is None:
            self.calls += 1
            result = shortest_path(self.graph, source, target)
            self._legs[key] = result
        return result


def route_sequence(
    start: NodeID, order: Sequence[NodeID], end: NodeID
) -> Tuple[NodeID, ...]:
    """Return the candidate stop sequence ``(start, *order, end)``."""
    return (start, *order, end)


def evaluate_order(
    cache: SegmentCache, start: NodeID, order: Sequence[NodeID], end: NodeID
) -> Optional[Tuple[Cost, List[RouteResult]]]:
    """Sum the legs of one stop ordering.

    Returns:
        ``(total, legs)`` or ``None`` if any leg is unreachable.
    """
    sequence = route_sequence(start, order, end)
    total: Cost = 0
    legs: List[RouteResult] = []
    for source, target in zip(sequence, sequence[1:]):
        leg = cache.leg(source, target)
        if not leg.found:
            return None
        total += leg.distance  # type: ignore[operator]
        legs.append(leg)
    return total, legs


def stitch_segments(segments: Iterable[Sequence[NodeID]]) -> Tuple[NodeID, ...]:
    """Concatenate segment paths, dropping each later segment's first node.

    Each segment must start where the previous one ended.

    Raises:
        ValueError: If there are no segments or two segments do not meet.
    """
    stitched: List[NodeID] = []
    for index, segment in enumerate(segments):
        if not segment:
            raise ValueError(f"Segment {index} is empty.")
        if index == 0:
            stitched.extend(segment)
            continue
        if segment[0] != stitched[-1]:
            raise ValueError(
                f"Segment {index} starts at '{segment[0]}' but the previous "
                f"segment ends at '{stitched[-1]}'."
            )
        stitched.extend(segment[1:])
    if not stitched:
        raise ValueError("At least one segment is required.")
    return tuple(stitched)


def _chunked(
    orders: Iterator[Tuple[NodeID, ...]], chunk_size: int
) -> Iterator[Tuple[int, List[Tuple[NodeID, ...]]]]:
    """Yield ``(first_index, orders)`` chunks from an ordering iterator."""
    first_index = 0
    while True:
        chunk = list(islice(orders, chunk_size))
        if not chunk:
            return
        yield first_index, chunk
        first_index += len(chunk)


def _worker_init(graph_pickle: bytes, log_level: int) -> None:
    """Install the shared graph and the parent's log level in a worker process."""
    global _worker_graph
    set_global_log_level(log_level)
    _worker_graph = pickle.loads(graph_pickle)
    get_logger(f"{__name__}.worker").debug(
        f"Worker {os.getpid()} initialized with {len(_worker_graph)} nodes"
    )


def _evaluate_chunk(
    start: NodeID,
    end: NodeID,
    first_index: int,
    orders: List[Tuple[NodeID, ...]],
) -> Tuple[int, Optional[Candidate]]:
    """Evaluate a chunk of orderings in a worker and return its best candidate."""
    if _worker_graph is None:
        raise RuntimeError("Worker graph is not initialized.")
    cache = SegmentCache(_worker_graph)
    best: Optional[Candidate] = None
    for offset, order in enumerate(orders):
        evaluated = evaluate_order(cache, start, order, end)
        if evaluated is None:
            continue
        total = evaluated[0]
        if best is None or total < best[0]:
            best = (total, first_index + offset, order)
    return len(orders), best


def _search_serial(
    cache: SegmentCache,
    start: NodeID,
    end: NodeID,
    permutations: Permutations[NodeID],
    deadline_at: Optional[float],
    max_iterations: Optional[int],
) -> Tuple[Optional[Candidate], int, bool]:
    total_orders = len(permutations)
    progress_step = max(1, total_orders // 10)
    best: Optional[Candidate] = None
    evaluated = 0
    truncated = False

    for index, order in enumerate(permutations):
        if max_iterations is not None and evaluated >= max_iterations:
            truncated = True
            break
        if deadline_at is not None and perf_counter() >= deadline_at:
            truncated = True
            break

        evaluated += 1
        candidate = evaluate_order(cache, start, order, end)
        if candidate is not None:
            total = candidate[0]
            # Strict comparison keeps the first-enumerated minimum on ties
            if best is None or total < best[0]:
                best = (total, index, order)
                logger.debug(f"New best ordering {list(order)} with total {total}")

        if total_orders >= 20 and evaluated % progress_step == 0:
            logger.debug(f"Circuit search progress: {evaluated}/{total_orders}")

    return best, evaluated, truncated


def _search_parallel(
    graph: WeightedGraph,
    start: NodeID,
    end: NodeID,
    permutations: Permutations[NodeID],
    deadline_at: Optional[float],
    max_iterations: Optional[int],
    workers: int,
    chunk_size: int,
) -> Tuple[Optional[Candidate], int, bool]:
    total_orders = len(permutations)
    limit = total_orders if max_iterations is None else min(total_orders, max_iterations)
    truncated = limit < total_orders
    chunks = _chunked(islice(iter(permutations), limit), chunk_size)

    graph_pickle = pickle.dumps(graph)
    logger.debug(f"Serialized graph once: {len(graph_pickle)} bytes")

    best: Optional[Candidate] = None
    evaluated = 0
    pending: Set[Future] = set()
    exhausted = False

    with ProcessPoolExecutor(
        max_workers=workers,
        initializer=_worker_init,
        initargs=(graph_pickle, get_global_log_level()),
    ) as pool:
        logger.debug(f"ProcessPoolExecutor created with {workers} workers")

        def _fill() -> None:
            nonlocal exhausted
            # Bound in-flight chunks so orderings are generated lazily
            while not exhausted and len(pending) < workers * 2:
                chunk = next(chunks, None)
                if chunk is None:
                    exhausted = True
                    return
                first_index, orders = chunk
                pending.add(
                    pool.submit(_evaluate_chunk, start, end, first_index, orders)
                )

        _fill()
        while pending:
            timeout = None
            if deadline_at is not None:
                timeout = max(0.0, deadline_at - perf_counter())
            done, not_done = wait(pending, timeout=timeout, return_when=FIRST_COMPLETED)
            pending.clear()
            pending.update(not_done)

            for future in done:
                count, chunk_best = future.result()
                evaluated += count
                if chunk_best is not None and (
                    best is None or chunk_best[:2] < best[:2]
                ):
                    best = chunk_best

            if deadline_at is not None and perf_counter() >= deadline_at:
                # A deadline met after the last chunk returned is no truncation
                if evaluated < limit:
                    truncated = True
                    for future in pending:
                        future.cancel()
                    pool.shutdown(wait=False, cancel_futures=True)
                    logger.debug(
                        f"Deadline reached with {len(pending)} chunk(s) in flight"
                    )
                break
            _fill()

    return best, evaluated, truncated


def _check_nodes(
    graph: WeightedGraph, start: NodeID, end: NodeID, stops: Sequence[NodeID]
) -> None:
    if start not in graph:
        raise UnknownNode(start, role="Start")
    if end not in graph:
        raise UnknownNode(end, role="End")
    for stop in stops:
        if stop not in graph:
            raise UnknownNode(stop, role="Mandatory stop")


def find_optimal_circuit(
    graph: Mapping[NodeID, Mapping[NodeID, Cost]],
    start: NodeID,
    end: NodeID,
    mandatory_stops: Iterable[NodeID] = (),
    *,
    max_stops: Optional[int] = None,
    deadline: Optional[float] = None,
    max_iterations: Optional[int] = None,
    workers: Optional[int] = None,
    config: Optional[CircuitSearchConfig] = None,
) -> RouteResult:
    """Find the cheapest route from ``start`` to ``end`` through every stop.

    Args:
        graph: A `WeightedGraph` or plain adjacency mapping.
        start: First node of the route.
        end: Last node of the route.
        mandatory_stops: Nodes that must all be visited. A sequence fixes the
            enumeration (and tie-breaking) order.
        max_stops: Largest accepted stop count; overrides ``config``.
        deadline: Wall-clock budget in seconds; overrides ``config``.
        max_iterations: Cap on orderings evaluated; overrides ``config``.
        workers: Worker processes; values above 1 evaluate orderings in
            parallel. Overrides ``config``.
        config: Search policy; defaults to ``SEARCH_CONFIG``.

    Returns:
        RouteResult: ``OK`` with the stitched circuit, or ``INFEASIBLE`` when
        no ordering connects. With no stops this is exactly
        ``shortest_path(graph, start, end)``.

    Raises:
        UnknownNode: If start, end or a stop is not in the graph.
        TooManyStops: If the stop count exceeds ``max_stops``.
        NegativeWeight: If a negative weight is met during a leg search.
    """
    cfg = (config or SEARCH_CONFIG).with_overrides(
        max_stops=max_stops,
        deadline=deadline,
        max_iterations=max_iterations,
        workers=workers,
    )
    if not isinstance(graph, WeightedGraph):
        graph = WeightedGraph(graph)
    stops: Tuple[NodeID, ...] = tuple(mandatory_stops)

    _check_nodes(graph, start, end, stops)
    if len(stops) > cfg.max_stops:
        raise TooManyStops(len(stops), cfg.max_stops)

    if not stops:
        return shortest_path(graph, start, end)

    if len(set(stops)) != len(stops) or start in stops or end in stops:
        logger.warning(
            "Mandatory stops repeat each other or the start/end node; "
            "orderings are still searched as given"
        )

    permutations = Permutations(stops)
    logger.info(
        f"Searching {len(permutations)} ordering(s) of {len(stops)} stop(s) "
        f"from '{start}' to '{end}'"
    )
    started = perf_counter()
    deadline_at = started + cfg.deadline if cfg.deadline is not None else None

    cache = SegmentCache(graph)
    if cfg.workers > 1 and len(permutations) > cfg.chunk_size:
        best, evaluated, truncated = _search_parallel(
            graph,
            start,
            end,
            permutations,
            deadline_at,
            cfg.max_iterations,
            cfg.workers,
            cfg.chunk_size,
        )
    else:
        best, evaluated, truncated = _search_serial(
            cache, start, end, permutations, deadline_at, cfg.max_iterations
        )

    elapsed = perf_counter() - started
    if truncated:
        logger.warning(
            f"Circuit search truncated after {evaluated}/{len(permutations)} "
            f"ordering(s) ({elapsed:.3f}s); returning best found so far"
        )

    if best is None:
        logger.info(f"No feasible circuit from '{start}' to '{end}'")
        return RouteResult.infeasible(
            start, end, evaluated=evaluated, truncated=truncated
        )

    total, _, order = best
    sequence = route_sequence(start, order, end)
    legs = [cache.leg(u, v) for u, v in zip(sequence, sequence[1:])]
    path = stitch_segments(leg.path for leg in legs)  # type: ignore[misc]
    if not graph.is_valid_path(path):
        raise RouteGraphError(f"Stitched circuit {list(path)} is not a valid walk.")

    logger.info(
        f"Best circuit from '{start}' to '{end}': distance={total}, "
        f"order={list(order)} ({evaluated} evaluated in {elapsed:.3f}s)"
    )
    return RouteResult(
        total,
        path,
        RouteStatus.OK,
        source=start,
        target=end,
        order=order,
        evaluated=evaluated,
        truncated=truncated,
    )
