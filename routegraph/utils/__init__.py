"""Utility helpers used across RouteGraph.

This package contains small, self-contained utilities that do not depend on
project internals.
"""

from routegraph.utils.output_paths import ensure_parent_dir, results_path_for_run
from routegraph.utils.yaml_utils import StringKeyLoader, load_yaml_str_keys

__all__ = [
    "StringKeyLoader",
    "ensure_parent_dir",
    "load_yaml_str_keys",
    "results_path_for_run",
]
