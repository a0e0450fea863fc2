"""Thread-safe accumulation of findings into a ``ScanReport``.

``ReportAggregator`` is append-only: findings are never removed or
deduplicated, so the same file can appear once per distinct signal. All
mutators take one lock, which lets worker threads call ``accumulate``
concurrently. ``finalize()`` closes the aggregator and derives every count
from the collected lists.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Iterable

from huludscan.core.indicators.models import MANIFEST_FILE_NAME
from huludscan.core.matcher import FileDescriptor
from huludscan.core.report.models import ScanInformation, ScanReport, ScanRoot
from huludscan.core.scanner.models import (
    Finding,
    InfectedFile,
    NpmPackageWarning,
    ScanError,
    SuspectedFile,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReportAggregator:
    """Collects findings and counters for one run.

    Usage::

        aggregator = ReportAggregator()
        aggregator.add_root(root)
        aggregator.record_file(descriptor)
        aggregator.accumulate_all(scanner.scan(descriptor, indicators))
        report = aggregator.finalize()
    """

    def __init__(self, clock: Clock = _utcnow) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._started_at = clock()
        self._closed = False

        self._infected: list[InfectedFile] = []
        self._suspected: list[SuspectedFile] = []
        self._warnings: list[NpmPackageWarning] = []
        self._errors: list[ScanError] = []

        self._files_scanned = 0
        self._manifests_scanned = 0
        self._roots: list[ScanRoot] = []
        self._skipped_roots: list[str] = []
        self._environment: dict[str, str] = {}
        self._credential_harvester = False

    @property
    def started_at(self) -> datetime:
        return self._started_at

    @property
    def files_scanned(self) -> int:
        with self._lock:
            return self._files_scanned

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("ReportAggregator is finalized")

    # -- Mutators --

    def accumulate(self, finding: Finding) -> None:
        """Append one finding to the list for its variant."""
        with self._lock:
            self._check_open()
            if isinstance(finding, InfectedFile):
                self._infected.append(finding)
            elif isinstance(finding, SuspectedFile):
                self._suspected.append(finding)
            elif isinstance(finding, NpmPackageWarning):
                self._warnings.append(finding)
            elif isinstance(finding, ScanError):
                self._errors.append(finding)
            else:
                raise TypeError(f"Unknown finding type: {type(finding).__name__}")

    def accumulate_all(self, findings: Iterable[Finding]) -> None:
        for finding in findings:
            self.accumulate(finding)

    def record_file(self, file: FileDescriptor) -> int:
        """Count one visited file. Returns the running files-scanned total."""
        with self._lock:
            self._check_open()
            self._files_scanned += 1
            if file.base_name == MANIFEST_FILE_NAME:
                self._manifests_scanned += 1
            return self._files_scanned

    def add_root(self, root: ScanRoot) -> None:
        with self._lock:
            self._check_open()
            self._roots.append(root)

    def skip_root(self, note: str) -> None:
        """Record an optional root that was not scanned."""
        with self._lock:
            self._check_open()
            self._skipped_roots.append(note)

    def set_environment(self, environment: dict[str, str]) -> None:
        with self._lock:
            self._check_open()
            self._environment = dict(environment)

    def set_credential_harvester_detected(self, detected: bool) -> None:
        with self._lock:
            self._check_open()
            self._credential_harvester = detected

    # -- Finalization --

    def finalize(self, *, interrupted: bool = False) -> ScanReport:
        """Close the aggregator and return the frozen report.

        Raises:
            RuntimeError: If called twice.
        """
        with self._lock:
            self._check_open()
            self._closed = True
            info = ScanInformation(
                files_scanned=self._files_scanned,
                package_json_files_scanned=self._manifests_scanned,
                infected_files=len(self._infected),
                suspected_files=len(self._suspected),
                npm_package_warnings=len(self._warnings),
                scan_errors=len(self._errors),
                scan_roots=tuple(self._roots),
                skipped_roots=tuple(self._skipped_roots),
                environment=dict(self._environment),
                started_at=self._started_at,
                finished_at=self._clock(),
                credential_harvester_detected=self._credential_harvester,
                interrupted=interrupted,
            )
            report = ScanReport(
                information=info,
                infected_files=tuple(self._infected),
                suspected_files=tuple(self._suspected),
                npm_package_warnings=tuple(self._warnings),
                scan_errors=tuple(self._errors),
            )
        logger.info(
            "Report finalized: %d files, %d manifests, %d findings in %.2fs",
            info.files_scanned, info.package_json_files_scanned,
            len(report.findings), info.duration_seconds,
        )
        return report
