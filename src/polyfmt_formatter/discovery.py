"""Turns patterns into the sorted list of files to format.

Walks honor ``.gitignore`` and ``.ignore`` files (the deepest matching rule
wins), the ignore files of ancestor directories up to the repository root and
``.git/info/exclude``. Hidden entries are walked unless ignored; ``.git`` is
never entered.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence

from pathspec import GitIgnoreSpec

from .errors import InvalidPatternError, UnsupportedExtensionError
from .languages import extension_of, is_supported

logger = logging.getLogger(__name__)

DEFAULT_PATTERN = "**/*"
IGNORE_FILES = (".gitignore", ".ignore")
GLOB_CHARS = frozenset("*?[")


@dataclass(frozen=True)
class IgnoreLayer:
    """Rules from one ignore file, matched relative to the directory holding it."""

    root: Path
    spec: GitIgnoreSpec

    def check(self, path: Path, is_dir: bool) -> Optional[bool]:
        try:
            rel = path.relative_to(self.root).as_posix()
        except ValueError:
            return None
        if is_dir:
            rel += "/"
        return self.spec.check_file(rel).include


def _read_layer(directory: Path, filename: str) -> Optional[IgnoreLayer]:
    ignore_file = directory / filename
    if not ignore_file.is_file():
        return None
    try:
        lines = ignore_file.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as e:
        logger.warning("Skipping unreadable ignore file %s: %s", ignore_file, e)
        return None
    if not any(line.strip() and not line.lstrip().startswith("#") for line in lines):
        return None
    return IgnoreLayer(directory, GitIgnoreSpec.from_lines(lines))


def _directory_layers(directory: Path) -> list[IgnoreLayer]:
    layers = []
    for filename in IGNORE_FILES:
        layer = _read_layer(directory, filename)
        if layer is not None:
            layers.append(layer)
    return layers


def find_repo_root(start: Path) -> Optional[Path]:
    for candidate in (start, *start.parents):
        if (candidate / ".git").exists():
            return candidate
    return None


def _ancestor_layers(base: Path) -> list[IgnoreLayer]:
    """Layers that apply to ``base`` from above, shallowest first."""
    repo_root = find_repo_root(base)
    if repo_root is None:
        return []

    layers: list[IgnoreLayer] = []
    exclude = _read_layer(repo_root / ".git" / "info", "exclude")
    if exclude is not None:
        # info/exclude has the lowest precedence and is rooted at the repo
        layers.append(IgnoreLayer(repo_root, exclude.spec))

    ancestors = [p for p in (base, *base.parents) if p != base and repo_root in (p, *p.parents)]
    for directory in reversed(ancestors):
        layers.extend(_directory_layers(directory))
    return layers


def is_ignored(path: Path, is_dir: bool, layers: Sequence[IgnoreLayer]) -> bool:
    for layer in reversed(layers):
        decision = layer.check(path, is_dir)
        if decision is not None:
            return decision
    return False


def _log_walk_error(error: OSError) -> None:
    logger.warning("Skipping %s: %s", error.filename, error.strerror or error)


def walk(base: Path, matcher: Optional[GitIgnoreSpec] = None) -> list[Path]:
    """Supported files under ``base`` that survive the ignore rules and ``matcher``."""
    if not base.is_dir():
        return []

    base_abs = base.resolve()
    layers_by_dir: dict[str, list[IgnoreLayer]] = {".": _ancestor_layers(base_abs)}
    found: list[Path] = []

    for dirpath, dirnames, filenames in os.walk(base, onerror=_log_walk_error):
        rel_dir = os.path.relpath(dirpath, base)
        parent_layers = layers_by_dir.pop(rel_dir, [])
        dir_abs = base_abs / rel_dir if rel_dir != "." else base_abs
        layers = parent_layers + _directory_layers(dir_abs)

        kept_dirs = []
        for name in sorted(dirnames):
            if name == ".git":
                continue
            if is_ignored(dir_abs / name, True, layers):
                logger.debug("Pruning ignored directory %s", os.path.join(dirpath, name))
                continue
            kept_dirs.append(name)
            layers_by_dir[os.path.normpath(os.path.join(rel_dir, name))] = layers
        dirnames[:] = kept_dirs

        for name in filenames:
            if not is_supported(name):
                continue
            if is_ignored(dir_abs / name, False, layers):
                continue
            rel = Path(rel_dir, name) if rel_dir != "." else Path(name)
            if matcher is not None and not matcher.match_file(rel.as_posix()):
                continue
            found.append(base / rel)

    return found


def is_glob(pattern: str) -> bool:
    return any(ch in GLOB_CHARS for ch in pattern)


def validate_pattern(pattern: str) -> None:
    if not pattern:
        raise InvalidPatternError(pattern, "empty pattern")

    depth = 0
    for ch in pattern:
        if ch == "[":
            depth += 1
        elif ch == "]" and depth:
            depth -= 1
    if depth:
        raise InvalidPatternError(pattern, "unclosed character class")

    for part in pattern.split("/"):
        if "**" in part and part != "**":
            raise InvalidPatternError(pattern, "'**' must be a whole path component")


def split_glob(pattern: str) -> tuple[Path, str]:
    """Split a glob into its literal leading directory and the remaining pattern."""
    parts = pattern.split("/")
    prefix: list[str] = []
    for part in parts[:-1]:
        if is_glob(part):
            break
        prefix.append(part)
    remainder = "/".join(parts[len(prefix):])

    if not prefix:
        return Path("."), remainder
    if prefix == [""]:
        return Path("/"), remainder
    return Path("/".join(prefix)), remainder


def compile_glob(pattern: str, remainder: str) -> GitIgnoreSpec:
    try:
        return GitIgnoreSpec.from_lines([remainder])
    except ValueError as e:
        raise InvalidPatternError(pattern, str(e)) from e


def discover(pattern: Optional[str] = None) -> list[Path]:
    """Return the sorted, de-duplicated supported files matching ``pattern``."""
    pattern = DEFAULT_PATTERN if pattern is None else pattern

    if pattern and not is_glob(pattern):
        literal = Path(pattern)
        if literal.is_file():
            if not is_supported(literal):
                raise UnsupportedExtensionError(literal, extension_of(literal))
            return [literal]
        if literal.is_dir():
            return sorted(set(walk(literal)))
        logger.debug("'%s' does not exist, matching it as a pattern", pattern)

    validate_pattern(pattern)
    base, remainder = split_glob(pattern)
    if not is_glob(pattern):
        # A missing literal path only matches itself, never a same-named deeper file
        remainder = "/" + remainder
    matcher = compile_glob(pattern, remainder)
    logger.debug("Walking %s for '%s'", base, remainder)
    return sorted(set(walk(base, matcher)))


def discover_all(patterns: Iterable[str]) -> list[Path]:
    """Union of ``discover`` over every pattern; no patterns means the default."""
    patterns = list(patterns) or [DEFAULT_PATTERN]
    seen: dict[Path, Path] = {}
    for pattern in patterns:
        matches = discover(pattern)
        if not matches:
            logger.warning("No files matched '%s'", pattern)
        for path in matches:
            seen.setdefault(path.resolve(), path)
    return sorted(seen.values())
