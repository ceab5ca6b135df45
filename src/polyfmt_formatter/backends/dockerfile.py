import re

from ..config import FormatConfig
from .base import Capability

INSTRUCTIONS = frozenset(
    {
        "ADD", "ARG", "CMD", "COPY", "ENTRYPOINT", "ENV", "EXPOSE", "FROM",
        "HEALTHCHECK", "LABEL", "MAINTAINER", "ONBUILD", "RUN", "SHELL",
        "STOPSIGNAL", "USER", "VOLUME", "WORKDIR",
    }
)

_INSTRUCTION_LINE = re.compile(r"^\s*([A-Za-z]+)(\s+(.*))?$")


class DockerfileCapability(Capability):
    """Normalizes instruction casing, spacing and continuation indentation."""

    name = "dockerfile"

    def __init__(self, config: FormatConfig):
        self.config = config

    def format_one(self, source: str, path: str) -> str:
        lines = source.replace("\r\n", "\n").split("\n")
        out: list[str] = []
        continuation = False
        for raw in lines:
            line = raw.rstrip()
            if not line.strip():
                if out and out[-1] != "" and not continuation:
                    out.append("")
                continue

            if continuation:
                out.append(self.config.indent_string + line.strip())
            elif line.lstrip().startswith("#"):
                out.append(line.strip())
            else:
                out.append(self._instruction(line))
            continuation = line.endswith("\\")

        while out and out[-1] == "":
            out.pop()
        if not out:
            return source
        newline = self.config.line_ending.newline
        return newline.join(out) + newline

    @staticmethod
    def _instruction(line: str) -> str:
        match = _INSTRUCTION_LINE.match(line)
        if not match or match.group(1).upper() not in INSTRUCTIONS:
            return line.strip()
        keyword = match.group(1).upper()
        args = match.group(3)
        return f"{keyword} {args}" if args else keyword
