import io
import json
import math

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ..config import FormatConfig
from ..errors import ParseError
from .base import Capability


def apply_line_ending(text: str, config: FormatConfig) -> str:
    newline = config.line_ending.newline
    return text if newline == "\n" else text.replace("\n", newline)


def _reject_duplicates(pairs):
    obj = {}
    for key, value in pairs:
        if key in obj:
            raise ParseError(f"JSON parsing error: duplicate key '{key}'")
        obj[key] = value
    return obj


def _reject_constant(name):
    raise ValueError(f"{name} is not valid JSON")


def _finite_float(text):
    value = float(text)
    if math.isinf(value):
        raise ValueError(f"number {text} is out of range")
    return value


class JsonCapability(Capability):
    """Re-serializes JSON documents, keeping key order.

    Documents that cannot be written back without losing data (duplicate
    keys, numbers outside the float range) are rejected as parse errors.
    """

    name = "json"

    def __init__(self, config: FormatConfig):
        self.config = config

    def format_one(self, source: str, path: str) -> str:
        if not source.strip():
            return source
        try:
            data = json.loads(
                source,
                object_pairs_hook=_reject_duplicates,
                parse_constant=_reject_constant,
                parse_float=_finite_float,
            )
            text = json.dumps(data, indent=self.config.indent_string, ensure_ascii=False, allow_nan=False)
        except ValueError as e:
            raise ParseError(f"JSON parsing error: {e}") from e
        return apply_line_ending(text + "\n", self.config)


class YamlCapability(Capability):
    """Round-trips YAML 1.2 streams, keeping comments, key order and quoting."""

    name = "yaml"

    def __init__(self, config: FormatConfig):
        self.config = config

    def _yaml(self) -> YAML:
        # YAML forbids tab indentation
        indent = 2 if self.config.use_tabs else min(max(self.config.indent_width, 2), 9)
        yaml = YAML()
        yaml.indent(mapping=indent, sequence=indent, offset=0)
        yaml.width = self.config.line_width
        yaml.preserve_quotes = True
        return yaml

    def format_one(self, source: str, path: str) -> str:
        if not source.strip():
            return source
        # YAML instances keep emitter state, so each call gets its own
        yaml = self._yaml()
        try:
            documents = list(yaml.load_all(source))
            if all(document is None for document in documents):
                # Comment-only streams have nothing to re-emit
                return source
            stream = io.StringIO()
            yaml.dump_all(documents, stream)
        except YAMLError as e:
            raise ParseError(f"YAML parsing error: {e}") from e

        text = stream.getvalue()
        if not text.strip():
            return source
        return apply_line_ending(text, self.config)
