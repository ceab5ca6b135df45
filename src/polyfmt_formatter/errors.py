from pathlib import Path


class PolyfmtError(Exception):
    """Base class for every error raised by polyfmt."""


class ConfigError(PolyfmtError):
    """The configuration file could not be read or validated."""


class DiscoveryError(PolyfmtError):
    """Discovery cannot produce a candidate list; fatal for the run."""


class InvalidPatternError(DiscoveryError):
    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid glob pattern '{pattern}': {reason}")


class UnsupportedExtensionError(DiscoveryError):
    def __init__(self, path: Path, extension: str):
        self.path = path
        self.extension = extension
        super().__init__(f"Unsupported file extension '{extension}': {path}")


class FormatError(PolyfmtError):
    """A backend could not format one file. Never fatal to the batch."""


class ParseError(FormatError):
    """The backend rejected the source as syntactically invalid."""


class TransportError(FormatError):
    """The backend could not be reached: spawn, instantiate, symbol lookup or trap."""


class DecodeError(FormatError):
    """The backend answered with bytes that are not valid UTF-8."""


class UnsupportedLanguageError(FormatError):
    pass


class WriteError(PolyfmtError):
    """Formatted output could not be persisted."""

    def __init__(self, path: Path, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"{path}: formatted but not written: {cause}")


class GitError(PolyfmtError):
    pass
