import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from polyfmt_formatter.config import PolyfmtConfig
from polyfmt_formatter.errors import ConfigError

CONFIG_FILENAME = ".polyfmt.toml"
PYPROJECT_TABLE = "polyfmt"


def find_config(start: Path) -> tuple[Path, dict[str, Any]] | None:
    """Locate the nearest configuration: ``.polyfmt.toml`` first, then ``pyproject.toml``."""
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate, _read_toml(candidate)

        pyproject = directory / "pyproject.toml"
        if pyproject.is_file():
            table = _read_toml(pyproject).get("tool", {}).get(PYPROJECT_TABLE)
            if table is not None:
                return pyproject, table
    return None


def load_config(config_path: Path | None = None, cwd: Path | None = None) -> PolyfmtConfig:
    """Build the run's configuration. Missing files mean defaults; invalid ones are errors."""
    if config_path is not None:
        if not config_path.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
        data = _read_toml(config_path)
        if config_path.name == "pyproject.toml":
            data = data.get("tool", {}).get(PYPROJECT_TABLE, {})
        return _build(config_path, data)

    found = find_config((cwd or Path.cwd()).resolve())
    if found is None:
        return PolyfmtConfig()
    return _build(*found)


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e


def _build(path: Path, data: dict[str, Any]) -> PolyfmtConfig:
    style = dict(data)
    backends = dict(style.pop("backends", {}) or {})

    # Backend locations are relative to the file that names them
    for key in ("clang_format_wasm", "goffi_library"):
        if isinstance(backends.get(key), str):
            location = Path(backends[key]).expanduser()
            backends[key] = location if location.is_absolute() else path.parent / location

    try:
        return PolyfmtConfig(style=style, backends=backends)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}:\n{e}") from e
