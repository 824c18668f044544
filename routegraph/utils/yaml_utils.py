"""Utilities for handling YAML parsing quirks."""

from typing import Any, Dict

import yaml


class StringKeyLoader(yaml.SafeLoader):
    """Safe loader that turns every mapping key into a string while parsing.

    YAML 1.1 boolean-like keys (``yes``, ``no``, ``on``, ``off``, ...) and
    numeric keys would otherwise become Python values, and ``True``/``1``
    would collapse into one dict key before any later normalization could
    see them. Node names must stay distinct strings.
    """

    def construct_mapping(
        self, node: yaml.MappingNode, deep: bool = False
    ) -> Dict[str, Any]:
        if not isinstance(node, yaml.MappingNode):
            raise yaml.constructor.ConstructorError(
                None,
                None,
                f"expected a mapping node, but found {node.id}",
                node.start_mark,
            )
        own_entries = sum(
            1 for key_node, _ in node.value if key_node.tag != "tag:yaml.org,2002:merge"
        )
        self.flatten_mapping(node)
        # flatten_mapping prepends entries pulled in through '<<'
        merged = len(node.value) - own_entries
        mapping: Dict[str, Any] = {}
        merged_keys = set()
        for index, (key_node, value_node) in enumerate(node.value):
            key = str(self.construct_object(key_node, deep=deep))
            if index < merged:
                merged_keys.add(key)
            elif key in mapping and key not in merged_keys:
                raise ValueError(
                    f"Duplicate mapping key '{key}' at line "
                    f"{key_node.start_mark.line + 1}"
                )
            mapping[key] = self.construct_object(value_node, deep=deep)
        return mapping


def load_yaml_str_keys(text: str) -> Any:
    """Parse a YAML document with every mapping key converted to ``str``.

    Examples:
        >>> load_yaml_str_keys("{yes: 1, 7: 2, A: 3}")
        {'True': 1, '7': 2, 'A': 3}

    Raises:
        ValueError: If two keys of one mapping are equal once stringified.
    """
    return yaml.load(text, Loader=StringKeyLoader)
