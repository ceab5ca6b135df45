from .config import FormatConfig, PolyfmtConfig
from .discovery import discover, discover_all
from .engine import FormatterEngine
from .languages import LanguageTag, classify
from .models import FormatOutcome, FormatResult, FormatStats
from .registry import FormatterRegistry

__all__ = [
    "FormatConfig",
    "FormatOutcome",
    "FormatResult",
    "FormatStats",
    "FormatterEngine",
    "FormatterRegistry",
    "LanguageTag",
    "PolyfmtConfig",
    "classify",
    "discover",
    "discover_all",
]
