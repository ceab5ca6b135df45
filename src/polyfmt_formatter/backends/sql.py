import sqlparse

from ..config import FormatConfig
from .base import Capability
from .data import apply_line_ending


class SqlCapability(Capability):
    """Re-indents SQL statements with sqlparse and upper-cases keywords."""

    name = "sqlparse"

    def __init__(self, config: FormatConfig):
        self.config = config

    def format_one(self, source: str, path: str) -> str:
        if not source.strip():
            return source
        text = sqlparse.format(
            source.replace("\r\n", "\n"),
            reindent=True,
            keyword_case="upper",
            use_space_around_operators=True,
            indent_tabs=self.config.use_tabs,
            indent_width=self.config.indent_width,
        )
        return apply_line_ending(text.strip() + "\n", self.config)
