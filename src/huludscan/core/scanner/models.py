"""Finding variants produced by the signature scanner.

``Finding`` is a closed union of four frozen dataclasses. Each variant
carries a ``kind`` tag used as its list key in the report and as its
record type in serialized output. Code that handles findings dispatches
with ``isinstance`` over exactly these four classes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar, Union


class VersionMatch(str, Enum):
    """How an installed version compares to a record's malicious versions."""

    MALICIOUS = "malicious"
    SAFE = "safe"
    UNKNOWN = "unknown"


class WarningReason(str, Enum):
    """Which heuristic tied a manifest to a compromised package."""

    REFERENCE_FOUND = "reference found"
    DIRECTORY_NAME_MATCH = "directory name matches package name"


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InfectedFile:
    """A ``package.json`` containing a known infection signature.

    Attributes:
        path: Manifest path.
        matched_pattern: The infection pattern found in its content.
    """

    kind: ClassVar[str] = "infected_file"

    path: Path
    matched_pattern: str

    def to_dict(self) -> dict[str, Any]:
        return {"path": str(self.path), "matched_pattern": self.matched_pattern}


@dataclass(frozen=True)
class SuspectedFile:
    """A file whose name matches a known malicious artifact."""

    kind: ClassVar[str] = "suspected_file"

    path: Path

    def to_dict(self) -> dict[str, Any]:
        return {"path": str(self.path), "file_name": self.path.name}


@dataclass(frozen=True)
class NpmPackageWarning:
    """A manifest tied to a package on the compromised list.

    Attributes:
        path: Manifest path.
        package_name: The compromised package's name.
        installed_version: ``version`` field of the manifest, if any.
        known_malicious_versions: Versions listed for the package, sorted.
        version_match: Classification of ``installed_version``.
        reason: Which heuristic fired.
    """

    kind: ClassVar[str] = "npm_package_warning"

    path: Path
    package_name: str
    installed_version: str | None
    known_malicious_versions: tuple[str, ...]
    version_match: VersionMatch
    reason: WarningReason

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": str(self.path),
            "package_name": self.package_name,
            "installed_version": self.installed_version,
            "known_malicious_versions": list(self.known_malicious_versions),
            "version_match": self.version_match.value,
            "reason": self.reason.value,
        }


@dataclass(frozen=True)
class ScanError:
    """A file or directory that could not be read. Never aborts the scan."""

    kind: ClassVar[str] = "scan_error"

    path: Path
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"path": str(self.path), "message": self.message}


Finding = Union[InfectedFile, SuspectedFile, NpmPackageWarning, ScanError]

FINDING_TYPES: tuple[type, ...] = (InfectedFile, SuspectedFile, NpmPackageWarning, ScanError)
