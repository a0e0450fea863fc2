"""``huludscan scan [path]`` -- Scan a tree for Shai-Hulud 2.0 indicators.

Loads the IOC feed (local file or URL), walks the project path and, with
``--global``, the npm global and nvm directories, then prints the report
and optionally persists it as JSON and/or CSV.

Exit Codes:
    0 -- Clean.
    1 -- Compromised-package warnings only.
    2 -- Infected package manifests.
    3 -- Suspected payload files.
    4 -- Credential-harvester cache present.
    5 -- Fatal error (missing path, IOC feed unavailable, report not written).
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import NoReturn

import click
from rich.progress import Progress, SpinnerColumn, TextColumn

from huludscan.core.indicators import (
    DEFAULT_FEED_URL,
    IndicatorSet,
    fetch_feed,
    load_feed_file,
)
from huludscan.core.matcher import FileDescriptor
from huludscan.core.orchestrator import ScanOptions, ScanOrchestrator
from huludscan.core.report import ExitCode, ScanReport
from huludscan.exceptions import HuludScanError
from huludscan.sinks import CsvReportSink, JsonReportSink, ReportSink


def load_indicators(ioc_file: Path | None, feed_url: str) -> IndicatorSet:
    """Load indicators from ``ioc_file`` if given, else fetch ``feed_url``.

    Raises:
        IndicatorFeedError: If no usable records can be obtained.
    """
    if ioc_file is not None:
        return load_feed_file(ioc_file)
    return asyncio.run(fetch_feed(feed_url))


def fail(message: str) -> NoReturn:
    """Print a fatal error and exit with SCAN_FAILED."""
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(int(ExitCode.SCAN_FAILED))


def _run_with_progress(
    orchestrator: ScanOrchestrator, path: Path, options: ScanOptions,
) -> ScanReport:
    from huludscan.cli.output import err_console

    with Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.completed}[/bold] files"),
        TextColumn("[dim]{task.description}[/dim]"),
        console=err_console,
        transient=True,
    ) as progress:
        task = progress.add_task("", total=None)

        def on_file(file: FileDescriptor, count: int) -> None:
            progress.update(task, completed=count, description=str(file.directory))

        options.progress = on_file
        return orchestrator.run(path, options)


def _sinks(json_out: Path | None, csv_dir: Path | None) -> list[ReportSink]:
    sinks: list[ReportSink] = []
    if json_out is not None:
        sinks.append(JsonReportSink(json_out))
    if csv_dir is not None:
        sinks.append(CsvReportSink(csv_dir))
    return sinks


@click.command("scan")
@click.argument(
    "path",
    type=click.Path(file_okay=False, path_type=Path),
    required=False,
    default=".",
)
@click.option(
    "--global/--no-global", "include_global",
    default=False,
    help="Also scan the npm global and nvm package directories.",
)
@click.option(
    "--ioc-file",
    envvar="HULUDSCAN_IOC_FILE",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Local IOC feed (.csv or .json) instead of downloading one.",
)
@click.option(
    "--feed-url",
    envvar="HULUDSCAN_FEED_URL",
    default=DEFAULT_FEED_URL,
    show_default=True,
    help="IOC feed URL used when --ioc-file is not given.",
)
@click.option(
    "--workers",
    envvar="HULUDSCAN_WORKERS",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Worker threads reading and scanning files.",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format: text (default) or json.",
)
@click.option(
    "--json-out",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write the full report to this JSON file.",
)
@click.option(
    "--csv-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Also write one CSV per finding type into this directory.",
)
@click.option("--quiet", "-q", is_flag=True, default=False, help="Hide the progress display.")
def scan_command(
    path: Path,
    include_global: bool,
    ioc_file: Path | None,
    feed_url: str,
    workers: int,
    output_format: str,
    json_out: Path | None,
    csv_dir: Path | None,
    quiet: bool,
) -> None:
    """Scan PATH (default: current directory) for Shai-Hulud 2.0 indicators.

    Looks for known payload files, infection signatures in package.json,
    and references to npm packages on the compromised list. The exit
    code reflects the most severe finding.
    """
    try:
        indicators = load_indicators(ioc_file, feed_url)
        orchestrator = ScanOrchestrator(indicators)
        options = ScanOptions(include_global_packages=include_global, workers=workers)
        if quiet or output_format == "json":
            report = orchestrator.run(path, options)
        else:
            report = _run_with_progress(orchestrator, path, options)
    except HuludScanError as exc:
        fail(str(exc))

    if output_format == "json":
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        from huludscan.cli.output import print_report
        print_report(report)

    try:
        for sink in _sinks(json_out, csv_dir):
            for written in sink.write(report):
                if output_format == "text":
                    click.echo(f"{sink.name.upper()} report written to: {written}")
    except HuludScanError as exc:
        fail(str(exc))

    sys.exit(int(report.exit_code()))
