import logging
import os
import shutil
import tempfile
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Optional, Sequence

from .errors import FormatError, WriteError
from .languages import LanguageTag, classify
from .models import FormatOutcome, FormatResult, FormatStats
from .registry import FormatterRegistry

logger = logging.getLogger(__name__)


def default_jobs() -> int:
    return os.cpu_count() or 1


def atomic_write(path: Path, content: str) -> None:
    """Replace ``path`` with ``content`` so readers never see a partial file."""
    data = content.encode("utf-8")
    directory = path.parent
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=directory)
    except OSError as e:
        raise WriteError(path, e) from e

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        shutil.copymode(path, tmp_name)
        os.replace(tmp_name, path)
    except OSError as e:
        try:
            os.unlink(tmp_name)
        except OSError:
            logger.debug("Could not remove temporary file %s", tmp_name)
        raise WriteError(path, e) from e


class FormatterEngine:
    """Formats candidate files in parallel and aggregates the outcomes."""

    def __init__(self, registry: FormatterRegistry, check: bool = False, jobs: Optional[int] = None):
        self.registry = registry
        self.check = check
        self.jobs = max(1, jobs or default_jobs())

    def format_string(self, source: str, file_path: str) -> FormatResult:
        """Format an in-memory source as if it lived at ``file_path``."""
        tag = classify(file_path)
        capability = self.registry.require(tag)
        return capability.format_result(source, file_path)

    def format_file(self, path: Path) -> FormatOutcome:
        try:
            original = path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return FormatOutcome.failed(path, f"{path}: {e}")

        tag = classify(path)
        if tag is LanguageTag.UNKNOWN:
            return FormatOutcome.failed(path, f"{path}: unsupported file type")

        try:
            result = self.format_string(original, str(path))
        except FormatError as e:
            return FormatOutcome.failed(path, f"{path}: {e}")
        except Exception as e:
            logger.debug("Backend crashed on %s", path, exc_info=True)
            return FormatOutcome.failed(path, f"{path}: unexpected error: {e}")

        if result.source == original:
            logger.debug("%s is already formatted", path)
            return FormatOutcome.unchanged(path, passthrough=result.passthrough)

        if not self.check:
            try:
                atomic_write(path, result.source)
            except WriteError as e:
                return FormatOutcome.failed(path, str(e))
        logger.debug("%s %s", "Would format" if self.check else "Formatted", path)
        return FormatOutcome.changed(path)

    def _format_chunk(self, paths: Sequence[Path]) -> tuple[FormatStats, list[FormatOutcome]]:
        stats = FormatStats()
        outcomes = []
        for path in paths:
            outcome = self.format_file(path)
            stats.record(outcome)
            outcomes.append(outcome)
        return stats, outcomes

    def _chunks(self, paths: Sequence[Path]) -> list[Sequence[Path]]:
        # Several chunks per worker keeps the pool busy when file sizes vary
        size = max(1, len(paths) // (self.jobs * 4))
        return [paths[i : i + size] for i in range(0, len(paths), size)]

    def run(self, paths: Sequence[Path]) -> tuple[FormatStats, list[FormatOutcome]]:
        """Format every path; returns the merged stats and the per-file outcomes."""
        paths = list(paths)
        if not paths:
            return FormatStats(), []

        if self.jobs == 1:
            return self._format_chunk(paths)

        total = FormatStats()
        outcomes: list[FormatOutcome] = []
        with ThreadPoolExecutor(max_workers=self.jobs) as pool:
            futures = [pool.submit(self._format_chunk, chunk) for chunk in self._chunks(paths)]
            for future in as_completed(futures):
                chunk_stats, chunk_outcomes = future.result()
                total = total.merge(chunk_stats)
                outcomes.extend(chunk_outcomes)
        return total, outcomes

    def format_files(self, paths: Sequence[Path]) -> FormatStats:
        """Batch format files on disk."""
        stats, _ = self.run(paths)
        return stats
