import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence, Union

from ..errors import FormatError, ParseError
from ..models import FormatResult

logger = logging.getLogger(__name__)


class Capability(ABC):
    """Formatting contract implemented by one backend for one or more languages."""

    name: str = "capability"

    @abstractmethod
    def format_one(self, source: str, path: str) -> str:
        """Return the formatted source or raise FormatError."""
        pass

    def format_result(self, source: str, path: str) -> FormatResult:
        return FormatResult(source=self.format_one(source, path))

    def format_many(
        self, sources: Sequence[str], paths: Optional[Sequence[str]] = None
    ) -> list[Union[str, FormatError]]:
        """Format several sources; element ``i`` equals ``format_one(sources[i])``."""
        names = _batch_paths(sources, paths)
        results: list[Union[str, FormatError]] = []
        for source, path in zip(sources, names):
            try:
                results.append(self.format_one(source, path))
            except FormatError as e:
                results.append(e)
        return results

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"


class LenientCapability(Capability):
    """Returns the source untouched when the wrapped parser cannot read a dialect."""

    def __init__(self, inner: Capability):
        self.inner = inner
        self.name = f"{inner.name} (lenient)"

    def format_result(self, source: str, path: str) -> FormatResult:
        try:
            return FormatResult(source=self.inner.format_one(source, path))
        except ParseError as e:
            logger.debug("Passing %s through unformatted: %s", path or "<source>", e)
            return FormatResult(source=source, passthrough=True)

    def format_one(self, source: str, path: str) -> str:
        return self.format_result(source, path).source


def _batch_paths(sources: Sequence[str], paths: Optional[Sequence[str]]) -> Sequence[str]:
    if paths is None:
        return [""] * len(sources)
    if len(paths) != len(sources):
        raise ValueError(f"Got {len(sources)} sources but {len(paths)} paths")
    return paths
