"""YAML loading for Home Assistant documents with line tracking.

Every string scalar comes back as a :class:`LocatedStr`, a ``str`` that also
remembers the 1-based line it started on. Home Assistant tags such as
``!include`` or ``!secret`` are kept as plain marker strings (``"!secret
wifi"``) instead of being resolved; reference extraction skips them.
"""
from collections.abc import Hashable
from pathlib import Path
from typing import Any, Optional, Union

import yaml


class LocatedStr(str):
    """A string scalar annotated with its source line."""

    line: Optional[int] = None

    def __new__(cls, value: str, line: Optional[int] = None):
        obj = super().__new__(cls, value)
        obj.line = line
        return obj


def line_of(value: Any) -> Optional[int]:
    """Return the source line of a loaded scalar, if it was tracked."""
    return getattr(value, "line", None)


class HAYamlLoader(yaml.SafeLoader):
    """Safe loader that understands Home Assistant tags and tracks lines.

    Duplicate mapping keys are an error instead of silently keeping the
    last value, so a script id defined twice in one file is caught.
    """

    def construct_mapping(self, node, deep=False):
        if isinstance(node, yaml.MappingNode):
            seen = {}
            for key_node, _ in node.value:
                if key_node.tag == "tag:yaml.org,2002:merge":
                    continue
                key = self.construct_object(key_node, deep=deep)
                if not isinstance(key, Hashable):
                    continue
                if key in seen:
                    raise yaml.constructor.ConstructorError(
                        "while constructing a mapping", node.start_mark,
                        f"found duplicate key '{key}' (first defined on line {seen[key]})",
                        key_node.start_mark,
                    )
                seen[key] = key_node.start_mark.line + 1
        return super().construct_mapping(node, deep=deep)


def _construct_located_str(loader: HAYamlLoader, node: yaml.ScalarNode) -> LocatedStr:
    value = loader.construct_scalar(node)
    return LocatedStr(value, node.start_mark.line + 1)


def _tag_marker(tag: str):
    def constructor(loader: HAYamlLoader, node: yaml.Node) -> LocatedStr:
        if isinstance(node, yaml.ScalarNode):
            argument = loader.construct_scalar(node)
        elif isinstance(node, yaml.SequenceNode):
            argument = " ".join(str(item) for item in loader.construct_sequence(node))
        else:
            raise yaml.constructor.ConstructorError(
                None, None, f"unexpected mapping after {tag}", node.start_mark
            )
        return LocatedStr(f"{tag} {argument}", node.start_mark.line + 1)

    return constructor


HA_TAGS = (
    "!include",
    "!include_dir_list",
    "!include_dir_named",
    "!include_dir_merge_list",
    "!include_dir_merge_named",
    "!secret",
    "!input",
    "!env_var",
)

HAYamlLoader.add_constructor("tag:yaml.org,2002:str", _construct_located_str)
for _tag in HA_TAGS:
    HAYamlLoader.add_constructor(_tag, _tag_marker(_tag))


def load_yaml(source: Union[str, Path]) -> Any:
    """Parse a document file with :class:`HAYamlLoader`.

    Raises:
        OSError: The file cannot be read
        yaml.YAMLError: The content is not valid YAML/JSON or uses an unknown tag
    """
    with open(source, "r", encoding="utf-8") as handle:
        return yaml.load(handle, Loader=HAYamlLoader)


def load_yaml_text(text: str) -> Any:
    """Parse a document from a string with :class:`HAYamlLoader`."""
    return yaml.load(text, Loader=HAYamlLoader)
