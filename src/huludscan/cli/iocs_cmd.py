"""``huludscan iocs`` -- Load the IOC feed and summarize it.

Useful for checking that a feed URL or local file parses before running
a long scan.

Exit Codes:
    0 -- Feed loaded.
    5 -- Feed could not be loaded.
"""

from __future__ import annotations

import json
from pathlib import Path

import click

from huludscan.cli.scan import fail, load_indicators
from huludscan.core.indicators import DEFAULT_FEED_URL
from huludscan.exceptions import IndicatorFeedError


@click.command("iocs")
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
    help="IOC feed URL used when --ioc-file is not given.",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format: text (default) or json.",
)
def iocs_command(ioc_file: Path | None, feed_url: str, output_format: str) -> None:
    """Show the indicators a scan would use."""
    from huludscan.cli.output import indicator_summary, print_indicator_summary

    try:
        indicators = load_indicators(ioc_file, feed_url)
    except IndicatorFeedError as exc:
        fail(str(exc))

    if output_format == "json":
        click.echo(json.dumps(indicator_summary(indicators), indent=2))
    else:
        print_indicator_summary(indicators)
