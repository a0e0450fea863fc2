"""Overall verdict and process exit codes.

The verdict is never stored; it is recomputed from report counts.

Exit Codes:
    0 -- Clean.
    1 -- Warnings only (compromised-package references).
    2 -- Infected: a manifest carries an infection signature.
    3 -- Suspected: a known payload file name was found.
    4 -- Credential-harvester cache directory present.
    5 -- Scan failed before a report could be produced.

When several conditions hold the most severe wins, in the order
infected > suspected > credential harvester > warnings > clean.
"""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from huludscan.core.report.models import ScanInformation


class ExitCode(IntEnum):
    CLEAN = 0
    WARNINGS = 1
    INFECTED = 2
    SUSPECTED = 3
    CREDENTIAL_HARVESTER = 4
    SCAN_FAILED = 5


def may_be_safe(info: ScanInformation) -> bool:
    """True iff no infected, suspected, or warning findings and no harvester cache.

    Scan errors do not affect the verdict; they are reported as counts.
    """
    return (
        info.infected_files == 0
        and info.suspected_files == 0
        and info.npm_package_warnings == 0
        and not info.credential_harvester_detected
    )


def exit_code_for(info: ScanInformation) -> ExitCode:
    """Map report counts to the most severe applicable exit code."""
    if info.infected_files:
        return ExitCode.INFECTED
    if info.suspected_files:
        return ExitCode.SUSPECTED
    if info.credential_harvester_detected:
        return ExitCode.CREDENTIAL_HARVESTER
    if info.npm_package_warnings:
        return ExitCode.WARNINGS
    return ExitCode.CLEAN
