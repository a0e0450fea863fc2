"""Rich output formatting helpers for the huludscan CLI.

Provides the terminal rendering of a finalized ``ScanReport``: a summary
panel, one table per non-empty finding variant, and the verdict line.

Color Mapping:
    infected = bold red, suspected = red, harvester = magenta,
    warnings = yellow, errors = dim
"""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from huludscan.core.indicators.models import IndicatorSet
from huludscan.core.report import ExitCode, ScanReport
from huludscan.core.scanner import VersionMatch

_VERDICT_STYLES: dict[ExitCode, tuple[str, str]] = {
    ExitCode.CLEAN: ("No indicators found. The system may be safe.", "bold green"),
    ExitCode.WARNINGS: ("Compromised-package references found. Review the warnings.", "yellow"),
    ExitCode.INFECTED: ("INFECTED: infection signatures found in package manifests.", "bold red"),
    ExitCode.SUSPECTED: ("SUSPECTED: known Shai-Hulud payload files found.", "red"),
    ExitCode.CREDENTIAL_HARVESTER: (
        "Credential-harvester cache found. Rotate all secrets on this machine.",
        "magenta",
    ),
}

_VERSION_MATCH_STYLES: dict[VersionMatch, str] = {
    VersionMatch.MALICIOUS: "bold red",
    VersionMatch.SAFE: "green",
    VersionMatch.UNKNOWN: "yellow",
}

console = Console()
err_console = Console(stderr=True)


def print_report(report: ScanReport) -> None:
    """Print the summary, findings tables, and verdict for a report.

    Args:
        report: The finalized report from ``ScanOrchestrator.run``.
    """
    info = report.information
    summary = Table.grid(padding=(0, 2))
    summary.add_column(style="bold")
    summary.add_column(justify="right")
    summary.add_row("Files scanned", str(info.files_scanned))
    summary.add_row("package.json scanned", str(info.package_json_files_scanned))
    summary.add_row("Infected files", str(info.infected_files))
    summary.add_row("Suspected files", str(info.suspected_files))
    summary.add_row("Package warnings", str(info.npm_package_warnings))
    summary.add_row("Malicious versions", str(len(report.malicious_version_warnings)))
    summary.add_row("Scan errors", str(info.scan_errors))
    summary.add_row(
        "Credential-harvester cache",
        "present" if info.credential_harvester_detected else "absent",
    )
    summary.add_row("Duration", f"{info.duration_seconds:.2f}s")
    console.print(Panel(summary, title="huludscan Scan Summary"))

    for root in info.scan_roots:
        console.print(f"  [dim]scanned[/dim] {root.path} [dim]({root.kind.value})[/dim]")
    for note in info.skipped_roots:
        console.print(f"  [yellow]skipped[/yellow] {note}")
    if info.interrupted:
        console.print("[yellow]Scan was interrupted; results are partial.[/yellow]")

    _print_findings(report)

    message, style = _VERDICT_STYLES[report.exit_code()]
    console.print(Text(message, style=style))


def _print_findings(report: ScanReport) -> None:
    if report.infected_files:
        table = Table(title="Infected Files", show_header=True, header_style="bold red")
        table.add_column("Path")
        table.add_column("Pattern")
        for f in report.infected_files:
            table.add_row(str(f.path), f.matched_pattern)
        console.print(table)

    if report.suspected_files:
        table = Table(title="Suspected Files", show_header=True, header_style="bold red")
        table.add_column("Path")
        for s in report.suspected_files:
            table.add_row(str(s.path))
        console.print(table)

    if report.npm_package_warnings:
        table = Table(title="Compromised Package Warnings", show_header=True, header_style="bold")
        table.add_column("Package", style="bold")
        table.add_column("Installed")
        table.add_column("Match", justify="center")
        table.add_column("Reason", style="dim")
        table.add_column("Path")
        for w in report.npm_package_warnings:
            table.add_row(
                w.package_name,
                w.installed_version or "-",
                Text(w.version_match.value, style=_VERSION_MATCH_STYLES[w.version_match]),
                w.reason.value,
                str(w.path),
            )
        console.print(table)

    if report.scan_errors:
        table = Table(title="Scan Errors", show_header=True, header_style="dim")
        table.add_column("Path")
        table.add_column("Error")
        for e in report.scan_errors:
            table.add_row(str(e.path), e.message)
        console.print(table)


def indicator_summary(indicators: IndicatorSet) -> dict[str, Any]:
    """Summarize an indicator set as a JSON-serializable dict."""
    return {
        "packages": indicators.package_count,
        "versions": indicators.version_count,
        "malicious_file_names": sorted(indicators.malicious_file_names),
        "infection_patterns": list(indicators.infection_patterns),
    }


def print_indicator_summary(indicators: IndicatorSet) -> None:
    summary = indicator_summary(indicators)
    console.print(Panel(
        f"[bold]{summary['packages']}[/bold] compromised packages, "
        f"[bold]{summary['versions']}[/bold] malicious versions",
        title="IOC Feed",
    ))
    table = Table(show_header=True)
    table.add_column("Indicator", style="bold")
    table.add_column("Value")
    for name in summary["malicious_file_names"]:
        table.add_row("file name", name)
    for pattern in summary["infection_patterns"]:
        table.add_row("manifest pattern", pattern)
    console.print(table)

