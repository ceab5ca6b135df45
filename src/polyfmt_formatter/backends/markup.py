"""Markdown and XML backends."""

import re

import mdformat
from lxml import etree

from ..config import FormatConfig
from ..errors import ParseError
from .base import Capability
from .data import apply_line_ending

_XML_DECLARATION = re.compile(r"\A\s*(<\?xml\s[^>]*\?>)")


class MarkdownCapability(Capability):
    """CommonMark through mdformat. Paragraph wrapping is left as written."""

    name = "mdformat"

    def __init__(self, config: FormatConfig):
        self.config = config

    def format_one(self, source: str, path: str) -> str:
        if not source.strip():
            return source
        text = mdformat.text(source.replace("\r\n", "\n"), options={"wrap": "keep", "number": False})
        return apply_line_ending(text, self.config)


class XmlCapability(Capability):
    """Re-indents XML documents with lxml, keeping comments, doctype and declaration."""

    name = "lxml"

    def __init__(self, config: FormatConfig):
        self.config = config

    def format_one(self, source: str, path: str) -> str:
        if not source.strip():
            return source
        parser = etree.XMLParser(remove_blank_text=True, resolve_entities=False, no_network=True)
        try:
            root = etree.fromstring(source.encode("utf-8"), parser)
        except etree.XMLSyntaxError as e:
            raise ParseError(f"XML parsing error: {e}") from e

        document = etree.ElementTree(root)
        etree.indent(document, space=self.config.indent_string)
        text = etree.tostring(document, encoding="unicode", pretty_print=True)

        # lxml rewrites the declaration with its own quoting, so the original is kept
        declaration = _XML_DECLARATION.match(source)
        if declaration:
            text = f"{declaration.group(1)}\n{text}"
        return apply_line_ending(text, self.config)
