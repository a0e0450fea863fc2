"""Scan orchestration: roots -> matcher -> scanner -> aggregator -> report.

``ScanOrchestrator.run`` drives one project root, plus the npm global and
nvm directories when requested, through a single shared
``ReportAggregator`` and returns the finalized ``ScanReport``.

Failure semantics:
    - Missing project root: ``ScanRootNotFoundError``, no report.
    - Optional root unresolvable: logged, noted in ``skipped_roots``.
    - Unreadable file or directory: ``ScanError`` finding, scan continues.
    - ``cancel()`` or ``KeyboardInterrupt``: traversal stops, a partial
      report is finalized with ``interrupted = True``.

With ``workers > 1`` files are read and scanned on a bounded thread pool
while the main thread walks the tree. Roots are scanned one after another.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator

from huludscan.core.indicators.models import IndicatorSet
from huludscan.core.matcher import FileDescriptor, FileMatcher
from huludscan.core.report.aggregator import ReportAggregator
from huludscan.core.report.models import RootKind, ScanReport, ScanRoot
from huludscan.core.scanner.engine import SignatureScanner
from huludscan.core.scanner.models import ScanError
from huludscan.discovery.environment import collect_environment
from huludscan.discovery.roots import RootResolver
from huludscan.exceptions import ScanRootNotFoundError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[FileDescriptor, int], None]

# Pending futures allowed per worker before the walker blocks.
_QUEUE_FACTOR = 4


@dataclass
class ScanOptions:
    """Per-run options.

    Attributes:
        include_global_packages: Also scan the npm global and nvm directories.
        workers: 1 scans sequentially; more uses a bounded thread pool.
        progress: Observer called after each file with the running count.
        resolver: Optional-root and harvester-cache resolver.
        environment: Supplies report environment metadata.
    """

    include_global_packages: bool = False
    workers: int = 1
    progress: ProgressCallback | None = None
    resolver: RootResolver = field(default_factory=RootResolver)
    environment: Callable[[], dict[str, str]] = collect_environment


class ScanOrchestrator:
    """Runs a complete scan against a fixed ``IndicatorSet``.

    Usage::

        orchestrator = ScanOrchestrator(indicators)
        report = orchestrator.run(Path("."), ScanOptions(include_global_packages=True))
        sys.exit(report.exit_code())
    """

    def __init__(
        self,
        indicators: IndicatorSet,
        matcher: FileMatcher | None = None,
        scanner: SignatureScanner | None = None,
    ) -> None:
        self._indicators = indicators
        self._matcher = matcher or FileMatcher()
        self._scanner = scanner or SignatureScanner()
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        """Ask a running scan to stop after the files already in flight."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def run(self, project_root: Path | str, options: ScanOptions | None = None) -> ScanReport:
        """Scan ``project_root`` (and optional global roots) and return the report.

        Args:
            project_root: Directory to scan; resolved to an absolute path.
            options: Run options; defaults to a sequential project-only scan.

        Raises:
            ScanRootNotFoundError: If ``project_root`` does not exist.
        """
        options = options or ScanOptions()
        root_path = Path(project_root).expanduser().resolve()
        if not root_path.exists():
            raise ScanRootNotFoundError(f"Project path does not exist: {root_path}")

        self._cancelled.clear()
        aggregator = ReportAggregator()
        aggregator.set_environment(options.environment())

        roots = [ScanRoot(root_path, RootKind.PROJECT)]
        if options.include_global_packages:
            roots.extend(self._optional_roots(options.resolver, aggregator))

        interrupted = False
        seen: set[Path] = set()
        try:
            for root in roots:
                if root.path in seen:
                    continue
                seen.add(root.path)
                if self.cancelled:
                    interrupted = True
                    break
                self._scan_root(root, aggregator, options)
            interrupted = interrupted or self.cancelled
        except KeyboardInterrupt:
            logger.warning("Scan interrupted; finalizing partial report")
            interrupted = True

        aggregator.set_credential_harvester_detected(
            options.resolver.credential_harvester_detected()
        )
        return aggregator.finalize(interrupted=interrupted)

    # -- Roots --

    def _optional_roots(
        self, resolver: RootResolver, aggregator: ReportAggregator,
    ) -> list[ScanRoot]:
        roots: list[ScanRoot] = []
        lookups = (
            (RootKind.GLOBAL_PACKAGES, "npm global packages", resolver.global_packages_dir),
            (RootKind.VERSION_MANAGER_PACKAGES, "nvm managed versions", resolver.version_manager_dir),
        )
        for kind, label, lookup in lookups:
            try:
                path = lookup()
            except OSError as exc:
                logger.warning("Failed to resolve %s: %s", label, exc)
                path = None
            if path is None:
                aggregator.skip_root(f"{label}: not found")
                continue
            roots.append(ScanRoot(path.resolve(), kind))
        return roots

    def _scan_root(
        self, root: ScanRoot, aggregator: ReportAggregator, options: ScanOptions,
    ) -> None:
        def on_error(path: Path, exc: OSError) -> None:
            message = f"{type(exc).__name__}: {exc.strerror or exc}"
            aggregator.accumulate(ScanError(path=path, message=message))

        try:
            files = self._matcher.find(
                root.path, self._indicators.names_of_interest, on_error=on_error,
            )
        except ScanRootNotFoundError:
            if root.kind is RootKind.PROJECT:
                raise
            logger.warning("Skipping vanished root %s", root.path)
            aggregator.skip_root(f"{root.kind.value}: {root.path} vanished")
            return

        aggregator.add_root(root)
        logger.info("Scanning %s (%s)", root.path, root.kind.value)
        if options.workers > 1:
            self._scan_parallel(files, aggregator, options)
        else:
            self._scan_sequential(files, aggregator, options)

    # -- Per-file work --

    def _process(
        self,
        file: FileDescriptor,
        aggregator: ReportAggregator,
        progress: ProgressCallback | None,
    ) -> None:
        logger.debug("Scanning %s", file.path)
        try:
            findings = self._scanner.scan(file, self._indicators)
        except Exception as exc:
            logger.warning("Failed to scan: %s", file.path, exc_info=True)
            findings = [ScanError(path=file.path, message=f"{type(exc).__name__}: {exc}")]
        count = aggregator.record_file(file)
        aggregator.accumulate_all(findings)
        if progress is not None:
            progress(file, count)

    def _scan_sequential(
        self,
        files: Iterator[FileDescriptor],
        aggregator: ReportAggregator,
        options: ScanOptions,
    ) -> None:
        for file in files:
            if self.cancelled:
                break
            self._process(file, aggregator, options.progress)

    def _scan_parallel(
        self,
        files: Iterator[FileDescriptor],
        aggregator: ReportAggregator,
        options: ScanOptions,
    ) -> None:
        limit = options.workers * _QUEUE_FACTOR
        pending: set[Future[None]] = set()
        executor = ThreadPoolExecutor(
            max_workers=options.workers, thread_name_prefix="huludscan",
        )
        try:
            for file in files:
                if self.cancelled:
                    break
                if len(pending) >= limit:
                    done, pending = wait(pending, return_when=FIRST_COMPLETED)
                    for future in done:
                        future.result()
                pending.add(executor.submit(self._process, file, aggregator, options.progress))
            for future in pending:
                future.result()
        finally:
            # Unstarted files are dropped; running ones finish so counts stay exact.
            executor.shutdown(wait=True, cancel_futures=True)
