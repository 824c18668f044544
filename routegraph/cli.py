"""Command-line interface for RouteGraph."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from time import perf_counter
from typing import Any, Dict, List, Optional

from routegraph.algorithms.circuit import find_optimal_circuit
from routegraph.algorithms.spf import shortest_path
from routegraph.dsl.loader import NetworkSpec, load_network_file
from routegraph.logging import get_logger, set_global_log_level
from routegraph.types.dto import RouteResult
from routegraph.utils.output_paths import ensure_parent_dir, results_path_for_run

logger = get_logger(__name__)


def _format_table(
    headers: List[str],
    rows: List[List[str]],
    min_width: int = 8,
    max_col_width: Optional[int] = None,
) -> str:
    """Format data as a simple ASCII table.

    Args:
        headers: Column headers
        rows: Data rows
        min_width: Minimum column width
        max_col_width: Optional width at which cells are clipped with "..."

    Returns:
        Formatted table string
    """
    if not rows:
        return ""

    def clip(val: Any) -> str:
        s = str(val)
        if max_col_width is not None and len(s) > max_col_width:
            return s[: max_col_width - 3] + "..."
        return s

    clipped_headers = [clip(h) for h in headers]
    clipped_rows = [[clip(item) for item in row] for row in rows]

    all_data = [clipped_headers] + clipped_rows
    col_widths = []
    for col_idx in range(len(clipped_headers)):
        max_width = max(len(str(row[col_idx])) for row in all_data)
        col_widths.append(max(max_width, min_width))

    def format_row(row_data: List[str]) -> str:
        return "   " + " | ".join(
            f"{str(item):<{col_widths[i]}}" for i, item in enumerate(row_data)
        )

    lines = [format_row(clipped_headers)]
    lines.append("   " + "-+-".join("-" * width for width in col_widths))
    for row in clipped_rows:
        lines.append(format_row(row))
    return "\n".join(lines)


def _format_cost(value: Any) -> str:
    """Return cost formatted with up to three decimals.

    Examples:
        0.1 -> "0.1"; 10.0 -> "10"; 1234.567 -> "1,234.567".
    """
    try:
        v = float(value)
    except (TypeError, ValueError):
        return str(value)

    s = f"{v:,.3f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s


def _format_duration(seconds: float) -> str:
    """Return a concise human-readable duration string.

    Examples:
        0.123 -> "123.0 ms"; 1.234 -> "1.23 s"; 75.2 -> "1m 15.2s".
    """
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f} ms"
    if seconds < 60.0:
        return f"{seconds:.2f} s"
    minutes = int(seconds // 60)
    rem = seconds - minutes * 60
    return f"{minutes}m {rem:.1f}s"


def _format_path(path: Optional[tuple]) -> str:
    if not path:
        return "-"
    return " -> ".join(str(node) for node in path)


def _print_result(result: RouteResult) -> None:
    if result.found:
        print(f"   Distance: {_format_cost(result.distance)}")
        print(f"   Path: {_format_path(result.path)}")
        if result.order:
            print(f"   Stop order: {', '.join(str(s) for s in result.order)}")
    else:
        print(f"   Status: {result.status.name}")
    if result.evaluated:
        print(f"   Orderings evaluated: {result.evaluated:,}")
    if result.truncated:
        print("   ⚠️  Search truncated; result is the best found before the limit")


def _inspect_network(path: Path, detail: bool) -> None:
    """Print a summary of a network file and its default route."""
    logger.info(f"Inspecting network: {path}")
    _start_time = perf_counter()

    try:
        spec = load_network_file(path)
        graph = spec.graph

        print("\n1. NETWORK")
        print("-" * 30)
        if spec.name:
            print(f"   Name: {spec.name}")
        print(f"   Directed: {graph.directed}")
        print(f"   Total Nodes: {len(graph):,}")
        print(f"   Total Directed Edges: {graph.edge_count():,}")

        in_degree: Dict[Any, int] = {node: 0 for node in graph}
        for _, target, _ in graph.edges():
            in_degree[target] += 1
        isolated = [n for n in graph if not graph.neighbors(n) and not in_degree[n]]
        if isolated:
            print(f"   Isolated Nodes: {', '.join(str(n) for n in isolated)}")

        if detail:
            print("\n   Nodes:")
            node_rows = [
                [str(node), str(len(graph.neighbors(node))), str(in_degree[node])]
                for node in graph
            ]
            print(_format_table(["Node", "Out", "In"], node_rows))

            print("\n   Edges:")
            edge_rows = [
                [str(u), str(v), _format_cost(w)] for u, v, w in graph.edges()
            ]
            print(_format_table(["Source", "Target", "Weight"], edge_rows))

        print("\n2. ROUTE")
        print("-" * 30)
        if spec.start is None and spec.end is None:
            print("   No default route defined")
        else:
            print(f"   Start: {spec.start if spec.start is not None else '-'}")
            print(f"   End: {spec.end if spec.end is not None else '-'}")
            stops = ", ".join(str(s) for s in spec.stops) or "-"
            print(f"   Mandatory stops: {stops}")
        candidates = [n for n in graph if n not in (spec.start, spec.end)]
        print(f"   Candidate stops: {', '.join(str(n) for n in candidates) or '-'}")

        print("\n3. SEARCH POLICY")
        print("-" * 30)
        for key, value in asdict(spec.search).items():
            print(f"   {key}: {value if value is not None else '-'}")

        _elapsed = perf_counter() - _start_time
        logger.info(
            f"Network inspection completed successfully in {_format_duration(_elapsed)}"
        )

    except FileNotFoundError:
        print(f"❌ ERROR: Network file not found: {path}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Failed to inspect network: {e}")
        print("❌ ERROR: Failed to inspect network")
        print(f"  {type(e).__name__}: {e}")
        sys.exit(1)


def _resolve_route(
    spec: NetworkSpec,
    start: Optional[str],
    end: Optional[str],
    stops: Optional[List[str]],
) -> tuple:
    route_start = start if start is not None else spec.start
    route_end = end if end is not None else spec.end
    route_stops = tuple(stops) if stops is not None else spec.stops
    if route_start is None or route_end is None:
        raise ValueError(
            "Route start and end must be given with --start/--end or in the "
            "network file's 'route' section"
        )
    return route_start, route_end, route_stops


def _solve_circuit(
    path: Path,
    start: Optional[str],
    end: Optional[str],
    stops: Optional[List[str]],
    overrides: Dict[str, Any],
    results_override: Optional[Path],
    no_results: bool,
    stdout: bool,
    output_dir: Optional[Path] = None,
) -> None:
    """Solve the optimal circuit for a network file and export JSON results.

    Args:
        path: Network YAML file.
        start: Route start; defaults to the file's ``route.start``.
        end: Route end; defaults to the file's ``route.end``.
        stops: Mandatory stops; defaults to the file's ``route.stops``.
        overrides: Search policy overrides (None values are ignored).
        results_override: Optional explicit results path.
        no_results: Whether to disable results file generation.
        stdout: Whether to also print results to stdout.
        output_dir: Optional directory for generated artifacts.
    """
    logger.info(f"Loading network from: {path}")
    _start_time = perf_counter()

    try:
        spec = load_network_file(path)
        route_start, route_end, route_stops = _resolve_route(spec, start, end, stops)
        config = spec.search.with_overrides(**overrides)

        result = find_optimal_circuit(
            spec.graph, route_start, route_end, route_stops, config=config
        )

        if result.found:
            print("✅ Optimal circuit found")
        else:
            print("⚠️  No feasible circuit found")
        _print_result(result)

        results_dict: Dict[str, Any] = {
            "network": spec.name or path.stem,
            "request": {
                "start": route_start,
                "end": route_end,
                "stops": list(route_stops),
            },
            "search": asdict(config),
            "result": result.to_dict(),
        }
        json_str = json.dumps(results_dict, indent=2, default=str)

        if not no_results:
            effective_output = results_path_for_run(
                network_path=path,
                output_dir=output_dir,
                results_override=results_override,
            )
            ensure_parent_dir(effective_output)
            logger.info(f"Writing results to: {effective_output}")
            effective_output.write_text(json_str)
            print(f"✅ Results written to: {effective_output}")

        if stdout:
            print(json_str)

        _elapsed = perf_counter() - _start_time
        logger.info(f"Circuit solve completed in {_format_duration(_elapsed)}")

    except FileNotFoundError:
        logger.error(f"Network file not found: {path}")
        print(f"❌ ERROR: Network file not found: {path}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Failed to solve circuit: {type(e).__name__}: {e}")
        print(f"❌ ERROR: Failed to solve circuit: {type(e).__name__}: {e}")
        sys.exit(1)


def _solve_path(path: Path, source: str, target: str, stdout: bool) -> None:
    """Print the shortest path between two nodes of a network file."""
    try:
        spec = load_network_file(path)
        result = shortest_path(spec.graph, source, target)
        if result.found:
            print(f"✅ Shortest path from {source} to {target}")
        else:
            print(f"⚠️  No path from {source} to {target}")
        _print_result(result)
        if stdout:
            print(json.dumps(result.to_dict(), indent=2, default=str))
    except FileNotFoundError:
        print(f"❌ ERROR: Network file not found: {path}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Failed to compute shortest path: {type(e).__name__}: {e}")
        print(f"❌ ERROR: Failed to compute shortest path: {type(e).__name__}: {e}")
        sys.exit(1)


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``routegraph`` command.

    Args:
        argv: Optional list of command-line arguments. If ``None``, ``sys.argv``
            is used.
    """
    parser = argparse.ArgumentParser(
        prog="routegraph",
        description="Find optimal routes through mandatory stops.",
    )

    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Log warnings and errors only; results are still printed",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        title="Available commands",
        metavar="{solve,path,inspect}",
        help="Available commands",
    )

    # Solve command
    solve_parser = subparsers.add_parser(
        "solve", help="Find the optimal circuit through mandatory stops"
    )
    solve_parser.add_argument("network", type=Path, help="Path to network YAML")
    solve_parser.add_argument("--start", "-s", help="Start node (default: from file)")
    solve_parser.add_argument("--end", "-e", help="End node (default: from file)")
    solve_parser.add_argument(
        "--stops",
        nargs="*",
        default=None,
        help="Mandatory stops in enumeration order (default: from file)",
    )
    solve_parser.add_argument(
        "--max-stops", type=int, default=None, help="Largest accepted stop count"
    )
    solve_parser.add_argument(
        "--deadline",
        type=float,
        default=None,
        help="Search time budget in seconds; best result so far is returned",
    )
    solve_parser.add_argument(
        "--max-iterations",
        type=int,
        default=None,
        help="Cap on the number of stop orderings evaluated",
    )
    solve_parser.add_argument(
        "--workers",
        "-w",
        type=int,
        default=None,
        help="Worker processes for evaluating orderings",
    )
    solve_parser.add_argument(
        "--results",
        "-r",
        type=Path,
        default=None,
        help=(
            "Export results to JSON file (default: <network_name>.results.json;"
            " placed under --output when provided)"
        ),
    )
    solve_parser.add_argument(
        "--no-results",
        action="store_true",
        help="Disable results file generation",
    )
    solve_parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print results to stdout",
    )
    solve_parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output directory for generated artifacts",
    )

    # Path command
    path_parser = subparsers.add_parser(
        "path", help="Compute the shortest path between two nodes"
    )
    path_parser.add_argument("network", type=Path, help="Path to network YAML")
    path_parser.add_argument("source", help="Source node")
    path_parser.add_argument("target", help="Target node")
    path_parser.add_argument(
        "--stdout", action="store_true", help="Print the result as JSON"
    )

    # Inspect command
    inspect_parser = subparsers.add_parser(
        "inspect", help="Inspect and validate a network file"
    )
    inspect_parser.add_argument("network", type=Path, help="Path to network YAML")
    inspect_parser.add_argument(
        "--detail",
        "-d",
        action="store_true",
        help="Show complete node and edge tables",
    )

    effective_args = sys.argv[1:] if argv is None else argv

    # If no arguments are provided, show help and exit cleanly
    if not effective_args:
        parser.print_help()
        raise SystemExit(0)

    args = parser.parse_args(effective_args)

    if args.verbose:
        set_global_log_level(logging.DEBUG)
        logger.debug("Debug logging enabled")
    elif args.quiet:
        set_global_log_level(logging.WARNING)
    else:
        set_global_log_level(logging.INFO)

    if args.command == "solve":
        _solve_circuit(
            path=args.network,
            start=args.start,
            end=args.end,
            stops=args.stops,
            overrides={
                "max_stops": args.max_stops,
                "deadline": args.deadline,
                "max_iterations": args.max_iterations,
                "workers": args.workers,
            },
            results_override=args.results,
            no_results=args.no_results,
            stdout=args.stdout,
            output_dir=args.output,
        )
    elif args.command == "path":
        _solve_path(args.network, args.source, args.target, args.stdout)
    elif args.command == "inspect":
        _inspect_network(args.network, args.detail)


if __name__ == "__main__":
    main()
