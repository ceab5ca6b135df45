"""JavaScript-family and stylesheet backends.

Sources are parsed with tree-sitter first so that syntax errors are reported
instead of being re-indented; accepted sources are laid out with the
jsbeautifier / cssbeautifier printers. TypeScript is routed to biome instead,
since jsbeautifier has no notion of type syntax.
"""

import cssbeautifier
import jsbeautifier
import tree_sitter_css as tscss
import tree_sitter_javascript as tsjs
from tree_sitter import Language, Parser

from ..config import BraceStyle, FormatConfig
from ..errors import ParseError
from ..languages import LanguageTag
from .base import Capability
from .script_style import ScriptStyler


class TreeSitterGate:
    """Rejects sources whose tree-sitter parse contains ERROR or MISSING nodes."""

    def __init__(self, language: Language, label: str):
        self.language = language
        self.label = label

    def check(self, source: str) -> None:
        # Parsers are not shared between threads; one per call is cheap
        parser = Parser(self.language)
        tree = parser.parse(source.encode("utf-8"))
        if tree.root_node.has_error:
            raise ParseError(f"Parse errors in {self.label} file{self._location(tree.root_node)}")

    @staticmethod
    def _location(root) -> str:
        stack = [root]
        while stack:
            node = stack.pop()
            if node.is_missing or node.type == "ERROR":
                line, column = node.start_point
                return f" at line {line + 1}, column {column + 1}"
            stack.extend(reversed([c for c in node.children if c.has_error or c.is_missing]))
        return ""


_SCRIPT_LABELS = {
    LanguageTag.JAVASCRIPT: "JavaScript",
    LanguageTag.JSX: "JSX",
}


class ScriptCapability(Capability):
    def __init__(self, tag: LanguageTag, config: FormatConfig):
        if tag not in _SCRIPT_LABELS:
            raise ValueError(f"{tag.name} is not handled by jsbeautifier")
        language = Language(tsjs.language())
        self.tag = tag
        self.config = config
        self.name = f"jsbeautifier:{tag.value}"
        self.gate = TreeSitterGate(language, _SCRIPT_LABELS[tag])
        self.styler = ScriptStyler(language, config)

    def _options(self):
        opts = jsbeautifier.default_options()
        opts.indent_size = self.config.indent_width
        opts.indent_char = " "
        opts.indent_with_tabs = self.config.use_tabs
        opts.wrap_line_length = self.config.line_width
        opts.eol = self.config.line_ending.newline
        opts.end_with_newline = True
        opts.brace_style = "expand" if self.config.brace_style is BraceStyle.NEW_LINE else "collapse"
        opts.e4x = self.tag is LanguageTag.JSX
        return opts

    def format_one(self, source: str, path: str) -> str:
        self.gate.check(source)
        return self.styler.apply(jsbeautifier.beautify(source, self._options()))


class StylesheetCapability(Capability):
    """CSS printer shared by the CSS-like dialects."""

    name = "cssbeautifier"

    def __init__(self, config: FormatConfig):
        self.config = config
        self.gate = TreeSitterGate(Language(tscss.language()), "CSS")

    def _options(self):
        opts = cssbeautifier.default_options()
        opts.indent_size = self.config.indent_width
        opts.indent_char = " "
        opts.indent_with_tabs = self.config.use_tabs
        opts.eol = self.config.line_ending.newline
        opts.end_with_newline = True
        opts.newline_between_rules = True
        return opts

    def format_one(self, source: str, path: str) -> str:
        self.gate.check(source)
        return cssbeautifier.beautify(source, self._options())
