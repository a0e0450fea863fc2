"""Data models for indicators of compromise: CompromisedPackageRecord, IndicatorSet.

An ``IndicatorSet`` is built once per run and handed explicitly to the
matcher and scanner. It is immutable so a single instance can be shared by
every worker thread without locking.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping

# ---------------------------------------------------------------------------
# Built-in indicators (Shai-Hulud 2.0 "Second Coming" campaign)
# ---------------------------------------------------------------------------

MANIFEST_FILE_NAME: str = "package.json"

DEFAULT_MALICIOUS_FILE_NAMES: frozenset[str] = frozenset({
    "setup_bun.js",          # fake Bun installer run from preinstall
    "bun_environment.js",    # obfuscated payload
    "actionsSecrets.json",   # double base64 exfiltration dump
    "truffleSecrets.json",
})

DEFAULT_INFECTION_PATTERNS: tuple[str, ...] = (
    "node setup_bun.js",
    "bun_environment.js",
)

# Left behind in the home directory by the payload's trufflehog run.
CREDENTIAL_HARVESTER_CACHE_DIR: str = ".truffler-cache"


# ---------------------------------------------------------------------------
# CompromisedPackageRecord
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CompromisedPackageRecord:
    """One npm package known to have published malicious versions.

    Attributes:
        name: Exact npm package name, including any ``@scope/`` prefix.
        malicious_versions: Exact version strings known to be compromised.
            Compared by string equality, never as semver ranges.
    """

    name: str
    malicious_versions: frozenset[str] = frozenset()

    def is_malicious_version(self, version: str) -> bool:
        """Return True if ``version`` is one of the listed malicious versions."""
        return version in self.malicious_versions

    def merged_with(self, other: CompromisedPackageRecord) -> CompromisedPackageRecord:
        """Return a record holding the union of both version sets."""
        return CompromisedPackageRecord(
            name=self.name,
            malicious_versions=self.malicious_versions | other.malicious_versions,
        )


# ---------------------------------------------------------------------------
# IndicatorSet
# ---------------------------------------------------------------------------


def _freeze_packages(
    records: Iterable[CompromisedPackageRecord],
) -> Mapping[str, CompromisedPackageRecord]:
    packages: dict[str, CompromisedPackageRecord] = {}
    for record in records:
        existing = packages.get(record.name)
        packages[record.name] = existing.merged_with(record) if existing else record
    return MappingProxyType(packages)


@dataclass(frozen=True)
class IndicatorSet:
    """Immutable bundle of everything the scanner matches against.

    Attributes:
        packages: Package name to ``CompromisedPackageRecord``. Read-only.
        malicious_file_names: Base names of known payload / dump files.
        infection_patterns: Substrings that mark an infected ``package.json``.
    """

    packages: Mapping[str, CompromisedPackageRecord] = field(
        default_factory=lambda: MappingProxyType({})
    )
    malicious_file_names: frozenset[str] = DEFAULT_MALICIOUS_FILE_NAMES
    infection_patterns: tuple[str, ...] = DEFAULT_INFECTION_PATTERNS

    @classmethod
    def from_records(
        cls,
        records: Iterable[CompromisedPackageRecord],
        *,
        malicious_file_names: Iterable[str] = DEFAULT_MALICIOUS_FILE_NAMES,
        infection_patterns: Iterable[str] = DEFAULT_INFECTION_PATTERNS,
    ) -> IndicatorSet:
        """Build an IndicatorSet, merging records that share a package name."""
        return cls(
            packages=_freeze_packages(records),
            malicious_file_names=frozenset(malicious_file_names),
            infection_patterns=tuple(dict.fromkeys(infection_patterns)),
        )

    @property
    def names_of_interest(self) -> frozenset[str]:
        """File base names the matcher must yield: manifests plus payload names."""
        return self.malicious_file_names | {MANIFEST_FILE_NAME}

    @property
    def package_count(self) -> int:
        return len(self.packages)

    @property
    def version_count(self) -> int:
        return sum(len(r.malicious_versions) for r in self.packages.values())
