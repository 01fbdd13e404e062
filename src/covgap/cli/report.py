"""cover report command - print missing coverage from Cobertura files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click

from covgap.config.constants import COVERAGE_OK_MESSAGE, OUTPUT_FORMATS
from covgap.config.loader import load_config
from covgap.config.models import ReportConfig
from covgap.core.errors import CovGapError
from covgap.core.logging import configure_logging, get_log_file_path, get_logger
from covgap.core.progress import pluralize, status
from covgap.coverage.exporters import get_exporter
from covgap.coverage.extract import extract_missing
from covgap.coverage.files import filter_excluded, read_report, resolve_files
from covgap.coverage.merge import merge_reports
from covgap.coverage.paths import NullPathTransformer, PathTransformer, RelativePathTransformer

log = get_logger("cli.report")


def _make_path_transformer(report_config: ReportConfig) -> PathTransformer:
    if report_config.absolute_paths:
        return NullPathTransformer()
    if report_config.base_path:
        return RelativePathTransformer(str(Path(report_config.base_path).resolve()))
    return RelativePathTransformer(str(Path.cwd()))


def _cli_overrides(
    *,
    output: str | None,
    limit: int | None,
    absolute_paths: bool,
    base_path: str | None,
    exclude: tuple[str, ...],
    verbose: bool,
) -> dict[str, Any]:
    """Map CLI flags to config overrides. Flags left unset keep config values."""
    report: dict[str, Any] = {}
    if output is not None:
        report["output"] = output
    if limit is not None:
        report["limit"] = limit
    if absolute_paths:
        report["absolute_paths"] = True
    if base_path is not None:
        report["base_path"] = base_path
    if exclude:
        report["exclude"] = list(exclude)

    overrides: dict[str, Any] = {"report": report} if report else {}
    if verbose:
        overrides["logging"] = {"level": "DEBUG"}
    return overrides


def _fail(error: CovGapError) -> click.ClickException:
    log.info("report_failed", error=error.error_name, message=error.message, **error.details)
    message = error.message
    if log_path := get_log_file_path():
        message += f"\nSee log: {log_path}"
    return click.ClickException(message)


@click.command()
@click.argument("files", nargs=-1)
@click.option(
    "--limit",
    type=click.IntRange(min=0),
    default=None,
    help="Maximum number of rows to output.",
)
@click.option(
    "--output",
    type=click.Choice(OUTPUT_FORMATS, case_sensitive=False),
    default=None,
    help="Output format: table (default), json, or markdown.",
)
@click.option("--verbose", is_flag=True, help="Show verbose processing information.")
@click.option(
    "--absolute-paths",
    is_flag=True,
    help="Show full absolute file paths instead of relative paths.",
)
@click.option(
    "--base-path",
    default=None,
    help="Base directory for relative paths (defaults to current directory).",
)
@click.option(
    "--exclude",
    multiple=True,
    help="Glob pattern for source files to exclude (repeatable).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Config file to use instead of ./.covgap.yaml.",
)
def report_command(
    files: tuple[str, ...],
    limit: int | None,
    output: str | None,
    verbose: bool,
    absolute_paths: bool,
    base_path: str | None,
    exclude: tuple[str, ...],
    config_path: Path | None,
) -> None:
    """Generate a missing coverage report from Cobertura XML files.

    FILES are Cobertura XML file paths or glob patterns (e.g. "**/coverage.xml").
    """
    if not files:
        raise click.ClickException("No files specified.")

    try:
        config = load_config(
            config_path=config_path,
            **_cli_overrides(
                output=output,
                limit=limit,
                absolute_paths=absolute_paths,
                base_path=base_path,
                exclude=exclude,
                verbose=verbose,
            ),
        )
    except CovGapError as e:
        raise click.ClickException(e.message) from e

    configure_logging(config=config.logging)
    report_config = config.report

    if report_config.absolute_paths and report_config.base_path:
        raise click.ClickException("Cannot specify both --absolute-paths and --base-path.")
    if report_config.base_path and not Path(report_config.base_path).is_dir():
        raise click.ClickException(
            f"Base path directory does not exist: {report_config.base_path}"
        )

    try:
        path_transformer = _make_path_transformer(report_config)
        resolved = resolve_files(files)

        if verbose:
            status(f"Processing {pluralize(len(resolved), 'file')}:")
            for path in resolved:
                status(str(path), style="none", indent=4)

        reports = [read_report(path) for path in resolved]
        merged = merge_reports(reports)

        if verbose:
            status(f"Merged {pluralize(len(reports), 'report')}.", style="success")

        rows = extract_missing(merged)

        if report_config.exclude:
            rows = filter_excluded(rows, report_config.exclude)
            if verbose:
                status(f"After exclusion filter: {pluralize(len(rows), 'row')} remaining.")

        log.info("report_built", files=len(resolved), rows=len(rows))

        if not rows:
            click.echo(COVERAGE_OK_MESSAGE)
            return

        if verbose and report_config.limit is not None and report_config.limit < len(rows):
            status(f"Showing first {report_config.limit} of {len(rows)} rows.", style="warning")

        exporter = get_exporter(report_config.output)
        click.echo(exporter.export(rows, report_config.limit, path_transformer))
    except CovGapError as e:
        raise _fail(e) from e
