"""huludscan CLI -- Shai-Hulud 2.0 supply-chain worm detection.

Entry point for the ``huludscan`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    scan  -- Scan a project (and optionally global packages) for IOCs.
    iocs  -- Load and summarize the IOC feed.

Usage::

    huludscan scan                          # Scan the current directory
    huludscan scan ./my-app --global        # Include npm global + nvm dirs
    huludscan scan --ioc-file iocs.csv --json-out report.json
    huludscan -v iocs --format json
"""

from __future__ import annotations

import logging

import click
from rich.logging import RichHandler

from huludscan import __version__
from huludscan.cli.iocs_cmd import iocs_command
from huludscan.cli.scan import scan_command
from huludscan.core.report import ExitCode

_LOG_LEVELS: dict[int, int] = {0: logging.WARNING, 1: logging.INFO}


def configure_logging(verbosity: int) -> None:
    """Route log records to stderr through Rich at the requested verbosity."""
    from huludscan.cli.output import err_console

    logging.basicConfig(
        level=_LOG_LEVELS.get(verbosity, logging.DEBUG),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


class HuludScanGroup(click.Group):
    """Click group whose usage errors exit with SCAN_FAILED.

    Click exits 2 on bad arguments, which would read as "infected".
    """

    def make_context(self, info_name, args, parent=None, **extra):
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except click.UsageError as exc:
            exc.exit_code = int(ExitCode.SCAN_FAILED)
            raise

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except click.UsageError as exc:
            exc.exit_code = int(ExitCode.SCAN_FAILED)
            raise


@click.group(cls=HuludScanGroup)
@click.version_option(version=__version__)
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v info, -vv debug).")
def cli(verbose: int) -> None:
    """huludscan: Detect Shai-Hulud 2.0 supply-chain worm compromise.

    Scans developer and CI filesystems for known payload files, infection
    signatures in package manifests, and references to npm packages known
    to have published malicious versions.
    """
    configure_logging(verbose)


# Register all subcommands
cli.add_command(scan_command)
cli.add_command(iocs_command)
