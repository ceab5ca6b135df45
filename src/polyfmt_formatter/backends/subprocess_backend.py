import logging
import subprocess
from typing import Callable, Sequence

from ..errors import FormatError, TransportError
from .base import Capability
from .buffers import decode_utf8

logger = logging.getLogger(__name__)

ArgsBuilder = Callable[[str], Sequence[str]]


def _no_args(path: str) -> Sequence[str]:
    return ()


class SubprocessCapability(Capability):
    """Runs one external formatter process per call, source on stdin, result on stdout."""

    def __init__(self, name: str, executable: str, build_args: ArgsBuilder = _no_args):
        self.name = name
        self.executable = executable
        self.build_args = build_args

    def command(self, path: str) -> list[str]:
        return [self.executable, *self.build_args(path)]

    def format_one(self, source: str, path: str) -> str:
        argv = self.command(path)
        logger.debug("Running %s", " ".join(argv))
        try:
            # run() closes stdin after writing the input, which signals EOF
            completed = subprocess.run(
                argv,
                input=source.encode("utf-8"),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=False,
            )
        except OSError as e:
            raise TransportError(f"Failed to spawn {self.name}: {e}") from e

        if completed.returncode != 0:
            raise FormatError(self._failure_message(completed))

        output = decode_utf8(completed.stdout, self.name)
        if not output and source.strip():
            raise FormatError(f"{self.name} exited successfully but produced no output")
        return output

    def _failure_message(self, completed: subprocess.CompletedProcess) -> str:
        stderr = completed.stderr.decode("utf-8", errors="replace").strip()
        if stderr:
            return f"{self.name} error: {stderr}"
        stdout = completed.stdout.decode("utf-8", errors="replace").strip()
        if stdout:
            return f"{self.name} error: {stdout}"
        return f"{self.name} exited with status {completed.returncode} and no diagnostic output"
