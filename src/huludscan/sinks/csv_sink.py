"""CSV report sink: one file per finding variant plus a metadata file.

Files written for prefix ``huludscan``::

    huludscan-infected-files.csv
    huludscan-suspected-files.csv
    huludscan-npm-package-warnings.csv
    huludscan-scan-errors.csv
    huludscan-scan-information.csv

Variants with no findings still get a header-only file, so downstream
tooling can rely on every file existing.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Iterable

from huludscan.core.report.models import ScanReport
from huludscan.exceptions import ReportError
from huludscan.sinks.base import ReportSink

logger = logging.getLogger(__name__)

DEFAULT_PREFIX: str = "huludscan"

_COLUMNS: dict[str, tuple[str, ...]] = {
    "infected-files": ("path", "matched_pattern"),
    "suspected-files": ("path", "file_name"),
    "npm-package-warnings": (
        "path", "package_name", "installed_version",
        "known_malicious_versions", "version_match", "reason",
    ),
    "scan-errors": ("path", "message"),
}


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return ", ".join(value)
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value)
    return str(value)


class CsvReportSink(ReportSink):
    """Writes a report as a set of CSV files into a directory."""

    def __init__(self, directory: Path, prefix: str = DEFAULT_PREFIX) -> None:
        self.directory = Path(directory)
        self.prefix = prefix

    @property
    def name(self) -> str:
        return "csv"

    def _path(self, suffix: str) -> Path:
        return self.directory / f"{self.prefix}-{suffix}.csv"

    def _write_rows(
        self, path: Path, columns: Iterable[str], rows: Iterable[dict[str, Any]],
    ) -> None:
        columns = list(columns)
        with open(path, "w", encoding="utf-8", newline="") as fh:
            writer = csv.DictWriter(fh, fieldnames=columns)
            writer.writeheader()
            for row in rows:
                writer.writerow({c: _cell(row.get(c)) for c in columns})

    def write(self, report: ScanReport) -> list[Path]:
        data = report.to_dict()
        sections = {
            "infected-files": data["infected_files"],
            "suspected-files": data["suspected_files"],
            "npm-package-warnings": data["npm_package_warnings"],
            "scan-errors": data["scan_errors"],
        }
        info = data["scan_information"]
        info["may_be_safe"] = data["may_be_safe"]

        written: list[Path] = []
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            for suffix, rows in sections.items():
                path = self._path(suffix)
                self._write_rows(path, _COLUMNS[suffix], rows)
                written.append(path)
            path = self._path("scan-information")
            self._write_rows(path, info.keys(), [info])
            written.append(path)
        except OSError as exc:
            raise ReportError(f"Cannot write CSV report to {self.directory}: {exc}") from exc

        logger.info("CSV report written to %s (%d files)", self.directory, len(written))
        return written
