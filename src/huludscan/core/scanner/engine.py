"""Three-check signature scanner for matched files.

This module implements the ``SignatureScanner`` class which runs three
independent, non-exclusive checks against one ``FileDescriptor``:

1. **Name check** -- the base name is a known malicious artifact name.
2. **Content-pattern check** -- a ``package.json`` contains a known
   infection signature (case-sensitive substring).
3. **Compromised-package check** -- a ``package.json`` references a
   package on the IOC list by its quoted name, or sits in a directory
   whose path ends with that package name. The manifest's ``version`` is
   compared against the record's malicious versions by exact string
   equality.

The directory heuristic is a plain path-suffix test. Unrelated
directories that share a compromised package's name are reported too;
those findings carry ``reason = directory name matches package name`` so
they can be triaged separately.
"""

from __future__ import annotations

import json
import logging
from pathlib import PurePath

from huludscan.core.indicators.models import (
    MANIFEST_FILE_NAME,
    CompromisedPackageRecord,
    IndicatorSet,
)
from huludscan.core.matcher import FileDescriptor
from huludscan.core.scanner.models import (
    Finding,
    InfectedFile,
    NpmPackageWarning,
    ScanError,
    SuspectedFile,
    VersionMatch,
    WarningReason,
)

logger = logging.getLogger(__name__)


def extract_version(content: str) -> str | None:
    """Best-effort read of a manifest's ``version`` field.

    Returns None when the content is not a JSON object or has no string
    ``version``. Never raises, including on nesting too deep to decode.
    """
    try:
        document = json.loads(content)
    except (ValueError, RecursionError):
        return None
    if not isinstance(document, dict):
        return None
    version = document.get("version")
    return version if isinstance(version, str) and version else None


def classify_version(
    installed_version: str | None,
    record: CompromisedPackageRecord,
) -> VersionMatch:
    """Classify an installed version against a compromised-package record."""
    if installed_version is None:
        return VersionMatch.UNKNOWN
    if record.is_malicious_version(installed_version):
        return VersionMatch.MALICIOUS
    return VersionMatch.SAFE


def directory_matches_package(directory: PurePath, package_name: str) -> bool:
    """Return True if ``directory`` ends with the package name as path segments.

    ``node_modules/@scope/pkg`` matches ``@scope/pkg``; ``node_modules/pkg``
    matches ``pkg``.
    """
    normalized = "/" + directory.as_posix().rstrip("/")
    return normalized.endswith("/" + package_name)


class SignatureScanner:
    """Classifies one file against an ``IndicatorSet``.

    The scanner holds no state between calls. Each ``scan()`` only reads
    the given descriptor, so instances can be shared across worker threads.

    Usage::

        scanner = SignatureScanner()
        for finding in scanner.scan(descriptor, indicators):
            aggregator.accumulate(finding)
    """

    def scan(self, file: FileDescriptor, indicators: IndicatorSet) -> list[Finding]:
        """Run all applicable checks and return the findings for one file.

        A manifest that cannot be read yields a single ``ScanError`` in
        addition to any name-check result; its content checks are skipped.

        Args:
            file: The matched file.
            indicators: Indicators to match against.

        Returns:
            Zero or more findings, in check order.
        """
        findings: list[Finding] = []

        # 1: Known malicious artifact name
        if file.base_name in indicators.malicious_file_names:
            findings.append(SuspectedFile(path=file.path))

        if file.base_name != MANIFEST_FILE_NAME:
            return findings

        try:
            content = file.read_text()
        except OSError as exc:
            logger.warning("Cannot read %s: %s", file.path, exc.strerror or exc)
            findings.append(ScanError(path=file.path, message=_describe(exc)))
            return findings

        # 2: Infection signatures
        findings.extend(self._match_patterns(file, content, indicators))

        # 3: Compromised package references
        findings.extend(self._match_packages(file, content, indicators))
        return findings

    def _match_patterns(
        self,
        file: FileDescriptor,
        content: str,
        indicators: IndicatorSet,
    ) -> list[Finding]:
        return [
            InfectedFile(path=file.path, matched_pattern=pattern)
            for pattern in indicators.infection_patterns
            if pattern in content
        ]

    def _match_packages(
        self,
        file: FileDescriptor,
        content: str,
        indicators: IndicatorSet,
    ) -> list[Finding]:
        findings: list[Finding] = []
        installed_version: str | None = None
        version_read = False

        for record in indicators.packages.values():
            reasons: list[WarningReason] = []
            if f'"{record.name}"' in content:
                reasons.append(WarningReason.REFERENCE_FOUND)
            if directory_matches_package(file.directory, record.name):
                reasons.append(WarningReason.DIRECTORY_NAME_MATCH)
            if not reasons:
                continue

            if not version_read:
                installed_version = extract_version(content)
                version_read = True

            match = classify_version(installed_version, record)
            known = tuple(sorted(record.malicious_versions))
            for reason in reasons:
                findings.append(NpmPackageWarning(
                    path=file.path,
                    package_name=record.name,
                    installed_version=installed_version,
                    known_malicious_versions=known,
                    version_match=match,
                    reason=reason,
                ))
        return findings


def _describe(exc: OSError) -> str:
    if exc.strerror:
        return f"{type(exc).__name__}: {exc.strerror}"
    return f"{type(exc).__name__}: {exc}"
