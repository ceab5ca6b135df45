import black

from ..config import FormatConfig, QuoteStyle
from ..errors import ParseError
from .base import Capability


class BlackCapability(Capability):
    name = "black"

    def __init__(self, config: FormatConfig):
        self.config = config
        # black only knows how to normalize towards double quotes
        self.mode = black.Mode(
            line_length=config.line_width,
            string_normalization=config.quote_style is QuoteStyle.DOUBLE,
        )

    def format_one(self, source: str, path: str) -> str:
        if path.endswith(".pyi"):
            mode = black.Mode(
                line_length=self.mode.line_length,
                string_normalization=self.mode.string_normalization,
                is_pyi=True,
            )
        else:
            mode = self.mode
        try:
            formatted = black.format_str(source.replace("\r\n", "\n"), mode=mode)
        except black.InvalidInput as e:
            raise ParseError(f"Python formatting error: {e}") from e
        newline = self.config.line_ending.newline
        return formatted if newline == "\n" else formatted.replace("\n", newline)
