"""Style rules applied to JavaScript after layout.

jsbeautifier only handles whitespace. Quote style, semicolons, trailing
commas and bracket spacing are applied here as byte edits computed from a
tree-sitter parse of the laid-out source.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from tree_sitter import Language, Node, Parser

from ..config import FormatConfig, QuoteStyle, Semicolons, TrailingComma


@dataclass(frozen=True)
class Transformation:
    start_byte: int
    end_byte: int
    new_content: bytes


class StyleRule(ABC):
    def __init__(self, config: FormatConfig):
        self.config = config

    @abstractmethod
    def analyze(self, node: Node, data: bytes) -> List[Transformation]:
        """Edits for ``node`` alone; children are visited separately."""


def _requote(body: str, quote: str, target: str) -> Optional[str]:
    out = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            out.append(quote if body[i + 1] == quote else body[i : i + 2])
            i += 2
            continue
        if ch == target:
            # Switching would need new escapes
            return None
        out.append(ch)
        i += 1
    return "".join(out)


class QuoteStyleRule(StyleRule):
    def analyze(self, node, data):
        if node.type != "string" or (node.parent is not None and node.parent.type == "jsx_attribute"):
            return []
        target = "'" if self.config.quote_style is QuoteStyle.SINGLE else '"'
        text = data[node.start_byte : node.end_byte].decode("utf-8")
        quote = text[0]
        if quote == target or len(text) < 2:
            return []
        body = _requote(text[1:-1], quote, target)
        if body is None:
            return []
        return [Transformation(node.start_byte, node.end_byte, f"{target}{body}{target}".encode("utf-8"))]


STATEMENTS = frozenset(
    {
        "expression_statement",
        "lexical_declaration",
        "variable_declaration",
        "return_statement",
        "throw_statement",
        "break_statement",
        "continue_statement",
        "debugger_statement",
        "import_statement",
        "export_statement",
    }
)

# A line starting with one of these would continue the previous statement
_CONTINUATION = tuple(b"([`+-/*<")
_BLOCK_VALUES = frozenset({"function_expression", "function", "generator_function", "class", "arrow_function"})


def _last_token(node: Node) -> Optional[Node]:
    for child in reversed(node.children):
        if child.type != "comment":
            return child
    return None


class SemicolonRule(StyleRule):
    def analyze(self, node, data):
        if node.type not in STATEMENTS:
            return []
        if node.parent is not None and node.parent.type in ("for_statement", "for_in_statement"):
            return []
        if node.type == "export_statement":
            value = node.child_by_field_name("value")
            if node.child_by_field_name("declaration") is not None or (value is not None and value.type in _BLOCK_VALUES):
                return []
        last = _last_token(node)
        if last is None:
            return []

        if self.config.semicolons is Semicolons.ALWAYS:
            if last.type == ";":
                return []
            return [Transformation(last.end_byte, last.end_byte, b";")]

        if last.type != ";":
            return []
        rest = data[last.end_byte :]
        if rest.lstrip(b" \t")[:1] not in (b"", b"\n", b"\r"):
            return []
        following = rest.lstrip()
        if following and following[0] in _CONTINUATION:
            return []
        return [Transformation(last.start_byte, last.end_byte, b"")]


LISTS = frozenset(
    {
        "array",
        "object",
        "arguments",
        "formal_parameters",
        "named_imports",
        "export_clause",
        "object_pattern",
        "array_pattern",
    }
)


class TrailingCommaRule(StyleRule):
    """Trailing commas on multi-line lists only; single-line lists never keep one."""

    def analyze(self, node, data):
        if node.type not in LISTS or len(node.children) < 2:
            return []
        elements = [c for c in node.named_children if c.type != "comment"]
        if not elements:
            return []
        last = elements[-1]
        closer = node.children[-1]
        index = next(i for i, c in enumerate(node.children) if c.id == last.id)
        commas = [c for c in node.children[index + 1 : -1] if c.type == ","]
        multiline = closer.start_point[0] > last.end_point[0]

        if multiline and self.config.trailing_comma is TrailingComma.ALL:
            if commas or last.type == "rest_pattern":
                return []
            return [Transformation(last.end_byte, last.end_byte, b",")]

        # More than one comma marks array holes, which are significant
        if len(commas) == 1:
            return [Transformation(commas[0].start_byte, commas[0].end_byte, b"")]
        return []


BRACED = frozenset({"object", "object_pattern", "named_imports", "export_clause"})


class BracketSpacingRule(StyleRule):
    def analyze(self, node, data):
        if node.type not in BRACED or node.start_point[0] != node.end_point[0]:
            return []
        children = node.children
        if len(children) < 3 or children[0].type != "{" or children[-1].type != "}":
            return []
        pad = b" " if self.config.bracket_spacing else b""
        edits = []
        for start, end in ((children[0].end_byte, children[1].start_byte), (children[-2].end_byte, children[-1].start_byte)):
            if data[start:end] != pad:
                edits.append(Transformation(start, end, pad))
        return edits


def apply_transformations(data: bytes, transforms: List[Transformation]) -> bytes:
    """Applies non-overlapping byte edits in a single pass."""
    result = []
    last_offset = 0
    for t in sorted(transforms, key=lambda t: (t.start_byte, t.end_byte)):
        if t.start_byte < last_offset:
            continue
        result.append(data[last_offset : t.start_byte])
        result.append(t.new_content)
        last_offset = t.end_byte
    result.append(data[last_offset:])
    return b"".join(result)


class ScriptStyler:
    def __init__(self, language: Language, config: FormatConfig):
        self.language = language
        self.rules = [
            QuoteStyleRule(config),
            SemicolonRule(config),
            TrailingCommaRule(config),
            BracketSpacingRule(config),
        ]

    def apply(self, source: str) -> str:
        data = source.encode("utf-8")
        tree = Parser(self.language).parse(data)
        if tree.root_node.has_error:
            return source

        transforms: List[Transformation] = []
        stack = [tree.root_node]
        while stack:
            node = stack.pop()
            for rule in self.rules:
                transforms.extend(rule.analyze(node, data))
            stack.extend(node.children)
        if not transforms:
            return source
        return apply_transformations(data, transforms).decode("utf-8")
