"""Utilities for building CLI artifact output paths.

Paths are built from an optional output directory, a prefix derived from the
network file name, and a per-artifact suffix.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


def network_prefix_from_path(network_path: Path) -> str:
    """Return the network filename stem used as an artifact prefix."""
    return network_path.stem


def ensure_parent_dir(path: Path) -> None:
    """Ensure the parent directory exists for a file path."""
    path.parent.mkdir(parents=True, exist_ok=True)


def resolve_override_path(
    override: Optional[Path], output_dir: Optional[Path]
) -> Optional[Path]:
    """Resolve an override path with respect to an optional output directory.

    Absolute overrides are returned as-is; relative ones are placed under
    ``output_dir`` when it is given, otherwise left relative to the CWD.
    """
    if override is None:
        return None
    if override.is_absolute():
        return override
    if output_dir is not None:
        return (output_dir / override).resolve()
    return override


def results_path_for_run(
    network_path: Path,
    output_dir: Optional[Path],
    results_override: Optional[Path],
) -> Path:
    """Determine the results JSON path for the ``solve`` command.

    Behavior:
    - If ``results_override`` is provided, return it (resolved relative to
      ``output_dir`` when that is specified, otherwise as-is).
    - Else if ``output_dir`` is provided, return ``output_dir/<prefix>.results.json``.
    - Else, return ``<network_stem>.results.json`` in the current working directory.

    Args:
        network_path: The network YAML file path.
        output_dir: Optional base output directory.
        results_override: Optional explicit results file path.

    Returns:
        The path where results should be written.
    """
    resolved_override = resolve_override_path(results_override, output_dir)
    if resolved_override is not None:
        return resolved_override

    prefix = network_prefix_from_path(network_path)
    if output_dir is not None:
        return output_dir / f"{prefix}.results.json"
    return Path(f"{prefix}.results.json")
