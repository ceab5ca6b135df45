from typing import Iterable

import typer

from polyfmt_formatter.models import FormatOutcome, FormatStats, OutcomeKind


def summary_line(stats: FormatStats, check: bool) -> str:
    errors = len(stats.errors)
    if not check:
        return f"Formatted {stats.formatted} files, {stats.unchanged} unchanged, {errors} errors"
    if stats.formatted:
        return f"{stats.formatted} files need formatting, {stats.unchanged} unchanged, {errors} errors"
    return f"All {stats.unchanged} files are properly formatted ({errors} errors)"


def report_outcomes(outcomes: Iterable[FormatOutcome], check: bool) -> None:
    """Per-file lines, shown with --debug."""
    for outcome in sorted(outcomes, key=lambda o: str(o.path)):
        if outcome.kind is OutcomeKind.CHANGED:
            verb = "Would format" if check else "Formatted"
            typer.secho(f"{verb} {outcome.path}", fg=typer.colors.GREEN)
        elif outcome.kind is OutcomeKind.FAILED:
            typer.secho(f"Failed {outcome.path}", fg=typer.colors.RED)
        else:
            typer.echo(f"Unchanged {outcome.path}")


def report(stats: FormatStats, check: bool, quiet: bool) -> None:
    if not quiet:
        for warning in stats.warnings:
            typer.echo(f"Warning: {warning}", err=True)

    # Errors and the summary are printed even in quiet mode
    for error in stats.errors:
        typer.echo(f"Error: {error}", err=True)
    typer.echo(summary_line(stats, check))
