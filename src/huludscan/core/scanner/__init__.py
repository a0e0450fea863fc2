"""Signature scanning for matched files.

Submodules
----------
- ``models``: Finding variants (InfectedFile, SuspectedFile,
  NpmPackageWarning, ScanError) and the VersionMatch / WarningReason enums.
- ``engine``: The SignatureScanner class and version helpers.

Public names are re-exported here::

    from huludscan.core.scanner import SignatureScanner, Finding, VersionMatch
"""

from huludscan.core.scanner.models import (
    FINDING_TYPES,
    Finding,
    InfectedFile,
    NpmPackageWarning,
    ScanError,
    SuspectedFile,
    VersionMatch,
    WarningReason,
)
from huludscan.core.scanner.engine import (
    SignatureScanner,
    classify_version,
    directory_matches_package,
    extract_version,
)

__all__ = [
    "FINDING_TYPES",
    "Finding",
    "InfectedFile",
    "NpmPackageWarning",
    "ScanError",
    "SignatureScanner",
    "SuspectedFile",
    "VersionMatch",
    "WarningReason",
    "classify_version",
    "directory_matches_package",
    "extract_version",
]
