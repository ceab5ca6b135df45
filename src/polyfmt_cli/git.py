import logging
import subprocess
from pathlib import Path

from polyfmt_formatter.errors import GitError
from polyfmt_formatter.languages import is_supported

logger = logging.getLogger(__name__)


def _git(args: list[str], cwd: Path | None = None) -> str:
    try:
        completed = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        raise GitError(f"Failed to run git: {e}") from e
    if completed.returncode != 0:
        raise GitError(f"git {' '.join(args)} failed: {completed.stderr.strip()}")
    return completed.stdout


def repo_root(cwd: Path | None = None) -> Path:
    try:
        return Path(_git(["rev-parse", "--show-toplevel"], cwd).strip())
    except GitError as e:
        raise GitError("Not inside a git repository") from e


def git_files(staged: bool, cwd: Path | None = None) -> list[Path]:
    """Supported files that are staged, or changed in the working tree."""
    root = repo_root(cwd)
    args = ["diff", "--name-only", "--diff-filter=ACM"]
    if staged:
        args.append("--cached")
    output = _git(args, root)

    files = []
    for line in output.splitlines():
        name = line.strip()
        if not name:
            continue
        path = root / name
        if is_supported(path) and path.is_file():
            files.append(path)
        else:
            logger.debug("Skipping %s from git", name)
    return sorted(set(files))
