"""Report data models: ScanRoot, ScanInformation, ScanReport.

A ``ScanReport`` is produced only by ``ReportAggregator.finalize()``. It
is frozen: finding lists are tuples, and every count in its
``ScanInformation`` equals the length of the matching list.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from huludscan.core.scanner.models import (
    Finding,
    InfectedFile,
    NpmPackageWarning,
    ScanError,
    SuspectedFile,
    VersionMatch,
)
from huludscan.core.report.verdict import ExitCode, exit_code_for, may_be_safe


class RootKind(str, Enum):
    """What a scan root represents, for reporting context."""

    PROJECT = "project"
    GLOBAL_PACKAGES = "global_packages"
    VERSION_MANAGER_PACKAGES = "version_manager_packages"


@dataclass(frozen=True)
class ScanRoot:
    """A directory traversed during a run."""

    path: Path
    kind: RootKind

    def to_dict(self) -> dict[str, str]:
        return {"path": str(self.path), "kind": self.kind.value}


@dataclass(frozen=True)
class ScanInformation:
    """Counters and metadata describing one run.

    Attributes:
        files_scanned: Distinct matched files visited.
        package_json_files_scanned: Distinct ``package.json`` files visited.
        infected_files: Number of ``InfectedFile`` findings.
        suspected_files: Number of ``SuspectedFile`` findings.
        npm_package_warnings: Number of ``NpmPackageWarning`` findings.
        scan_errors: Number of ``ScanError`` findings.
        scan_roots: Roots actually traversed, in order.
        skipped_roots: Human-readable notes for optional roots not scanned.
        environment: Host and tool metadata.
        started_at: UTC start of the run.
        finished_at: UTC end of the run.
        credential_harvester_detected: Whether the trufflehog cache exists.
        interrupted: True if the run stopped before traversal completed.
    """

    files_scanned: int
    package_json_files_scanned: int
    infected_files: int
    suspected_files: int
    npm_package_warnings: int
    scan_errors: int
    scan_roots: tuple[ScanRoot, ...]
    skipped_roots: tuple[str, ...]
    environment: dict[str, str]
    started_at: datetime
    finished_at: datetime
    credential_harvester_detected: bool = False
    interrupted: bool = False

    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        return {
            "files_scanned": self.files_scanned,
            "package_json_files_scanned": self.package_json_files_scanned,
            "infected_files": self.infected_files,
            "suspected_files": self.suspected_files,
            "npm_package_warnings": self.npm_package_warnings,
            "scan_errors": self.scan_errors,
            "scan_roots": [r.to_dict() for r in self.scan_roots],
            "skipped_roots": list(self.skipped_roots),
            "environment": dict(self.environment),
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "duration_seconds": round(self.duration_seconds, 3),
            "credential_harvester_detected": self.credential_harvester_detected,
            "interrupted": self.interrupted,
        }


@dataclass(frozen=True)
class ScanReport:
    """The complete, finalized result of a run.

    Attributes:
        information: Counters and metadata.
        infected_files: Manifests carrying an infection signature.
        suspected_files: Files named like a known payload.
        npm_package_warnings: Manifests tied to a compromised package.
        scan_errors: Files that could not be read.
    """

    information: ScanInformation
    infected_files: tuple[InfectedFile, ...] = ()
    suspected_files: tuple[SuspectedFile, ...] = ()
    npm_package_warnings: tuple[NpmPackageWarning, ...] = ()
    scan_errors: tuple[ScanError, ...] = ()

    @property
    def findings(self) -> tuple[Finding, ...]:
        """All findings, grouped by variant in severity order."""
        return (
            *self.infected_files, *self.suspected_files,
            *self.npm_package_warnings, *self.scan_errors,
        )

    @property
    def malicious_version_warnings(self) -> tuple[NpmPackageWarning, ...]:
        return tuple(
            w for w in self.npm_package_warnings
            if w.version_match is VersionMatch.MALICIOUS
        )

    @property
    def may_be_safe(self) -> bool:
        """Derived verdict. See ``huludscan.core.report.verdict``."""
        return may_be_safe(self.information)

    def exit_code(self) -> ExitCode:
        return exit_code_for(self.information)

    def to_dict(self) -> dict[str, Any]:
        """Serializable form: one list per variant plus scan information."""
        return {
            "scan_information": self.information.to_dict(),
            "may_be_safe": self.may_be_safe,
            "infected_files": [f.to_dict() for f in self.infected_files],
            "suspected_files": [f.to_dict() for f in self.suspected_files],
            "npm_package_warnings": [f.to_dict() for f in self.npm_package_warnings],
            "scan_errors": [f.to_dict() for f in self.scan_errors],
        }
