from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class IndentStyle(str, Enum):
    TABS = "tabs"
    SPACES = "spaces"


class LineEnding(str, Enum):
    LF = "lf"
    CRLF = "crlf"

    @property
    def newline(self) -> str:
        return "\r\n" if self is LineEnding.CRLF else "\n"


class QuoteStyle(str, Enum):
    SINGLE = "single"
    DOUBLE = "double"


class TrailingComma(str, Enum):
    ALL = "all"
    NONE = "none"


class Semicolons(str, Enum):
    ALWAYS = "always"
    AS_NEEDED = "as_needed"


class BraceStyle(str, Enum):
    SAME_LINE = "same_line"
    NEW_LINE = "new_line"


class FormatConfig(BaseModel):
    """Style settings shared by every backend for the whole run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    indent_style: IndentStyle = IndentStyle.TABS
    indent_width: int = Field(4, ge=1, le=16)
    line_width: int = Field(80, ge=20, le=400)
    line_ending: LineEnding = LineEnding.LF
    quote_style: QuoteStyle = QuoteStyle.DOUBLE
    trailing_comma: TrailingComma = TrailingComma.ALL
    semicolons: Semicolons = Semicolons.ALWAYS
    brace_style: BraceStyle = BraceStyle.SAME_LINE
    bracket_spacing: bool = True

    @property
    def use_tabs(self) -> bool:
        return self.indent_style is IndentStyle.TABS

    @property
    def indent_string(self) -> str:
        return "\t" if self.use_tabs else " " * self.indent_width


class BackendSettings(BaseModel):
    """Locations of foreign backends. Unset entries fall back to subprocess tools."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    clang_format_wasm: Path | None = None
    goffi_library: Path | None = None
    executables: dict[str, str] = Field(default_factory=dict)

    def executable(self, name: str) -> str:
        return self.executables.get(name, name)


class PolyfmtConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    style: FormatConfig = Field(default_factory=FormatConfig)
    backends: BackendSettings = Field(default_factory=BackendSettings)
