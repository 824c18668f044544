"""Network file DSL: YAML parsing and schema validation."""

from routegraph.dsl.loader import (
    NetworkSpec,
    load_network_file,
    load_network_yaml,
    load_sample_network,
)

__all__ = ["NetworkSpec", "load_network_file", "load_network_yaml", "load_sample_network"]
