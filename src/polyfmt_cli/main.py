import logging
from pathlib import Path

import typer

from polyfmt_formatter.discovery import discover_all
from polyfmt_formatter.engine import FormatterEngine
from polyfmt_formatter.errors import ConfigError, DiscoveryError, GitError
from polyfmt_formatter.languages import EXTENSIONS, FILENAME_PREFIXES, FILENAMES
from polyfmt_formatter.registry import FormatterRegistry

from .config import load_config
from .editorconfig import render_editorconfig
from .git import git_files
from .reporter import report, report_outcomes

app = typer.Typer(help="polyfmt - Format source files in many languages with one command")


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


def _load(config_file: Path | None):
    try:
        return load_config(config_file)
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)


@app.command("format")
def format_command(
    patterns: list[str] = typer.Argument(None, help="Files, directories or glob patterns (default: **/*)"),
    check: bool = typer.Option(False, "--check", "-c", help="Report files that would change without writing"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print errors and the summary"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Print per-file results and debug logs"),
    staged: bool = typer.Option(False, "--staged", help="Format files staged in git"),
    changed: bool = typer.Option(False, "--changed", help="Format files changed in the git working tree"),
    jobs: int = typer.Option(None, "--jobs", "-j", min=1, help="Worker threads (default: CPU count)"),
    config_file: Path = typer.Option(None, "--config", help="Path to .polyfmt.toml or pyproject.toml"),
):
    """Format files in place, or check them with --check"""
    _configure_logging(debug)
    config = _load(config_file)

    if staged and changed:
        typer.echo("Error: --staged and --changed cannot be combined", err=True)
        raise typer.Exit(code=2)

    try:
        if staged or changed:
            if patterns:
                typer.echo("Warning: patterns are ignored with --staged/--changed", err=True)
            files = git_files(staged=staged)
        else:
            files = discover_all(patterns or [])
    except (DiscoveryError, GitError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if not files:
        typer.echo("No files to format")
        return

    registry = FormatterRegistry(config)
    engine = FormatterEngine(registry, check=check, jobs=jobs)
    stats, outcomes = engine.run(files)

    if debug:
        report_outcomes(outcomes, check)
    report(stats, check=check, quiet=quiet)

    if check and stats.formatted:
        raise typer.Exit(code=1)


@app.command()
def export(
    config_file: Path = typer.Option(None, "--config", help="Path to .polyfmt.toml or pyproject.toml"),
):
    """Print an .editorconfig matching the active style"""
    config = _load(config_file)
    typer.echo(render_editorconfig(config.style), nl=False)


@app.command()
def languages(
    config_file: Path = typer.Option(None, "--config", help="Path to .polyfmt.toml or pyproject.toml"),
):
    """List supported languages and the backend for each"""
    registry = FormatterRegistry(_load(config_file))
    filenames: dict = {}
    for name, tag in FILENAMES.items():
        filenames.setdefault(tag, []).append(name)
    for prefix, tag in FILENAME_PREFIXES.items():
        filenames.setdefault(tag, []).append(f"{prefix}*")

    for tag in registry.tags():
        matches = [f".{ext}" for ext in EXTENSIONS.get(tag, ())] + filenames.get(tag, [])
        capability = registry.resolve(tag)
        typer.echo(f"{tag.value:<12} {capability.name:<28} {', '.join(matches)}")


if __name__ == "__main__":
    app()
