"""Tests for the JSON and CSV report sinks."""

from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest

from huludscan.core.report import ReportAggregator, RootKind, ScanReport, ScanRoot
from huludscan.core.scanner import (
    InfectedFile,
    NpmPackageWarning,
    SuspectedFile,
    VersionMatch,
    WarningReason,
)
from huludscan.exceptions import ReportError
from huludscan.sinks import CsvReportSink, JsonReportSink


@pytest.fixture
def report(tmp_path: Path) -> ScanReport:
    agg = ReportAggregator()
    agg.add_root(ScanRoot(tmp_path, RootKind.PROJECT))
    agg.set_environment({"platform": "Linux"})
    agg.accumulate(InfectedFile(tmp_path / "a" / "package.json", "node setup_bun.js"))
    agg.accumulate(SuspectedFile(tmp_path / "a" / "setup_bun.js"))
    agg.accumulate(NpmPackageWarning(
        path=tmp_path / "b" / "package.json",
        package_name="@ctrl/tinycolor",
        installed_version="4.1.1",
        known_malicious_versions=("4.1.1", "4.1.2"),
        version_match=VersionMatch.MALICIOUS,
        reason=WarningReason.REFERENCE_FOUND,
    ))
    return agg.finalize()


def _rows(path: Path) -> list[dict[str, str]]:
    with open(path, newline="", encoding="utf-8") as fh:
        return list(csv.DictReader(fh))


class TestJsonSink:
    """Single-document JSON output."""

    def test_writes_full_report(self, report: ScanReport, tmp_path: Path) -> None:
        out = tmp_path / "out" / "report.json"
        written = JsonReportSink(out).write(report)
        assert written == [out]
        data = json.loads(out.read_text())
        assert data["scan_information"]["infected_files"] == 1
        assert data["npm_package_warnings"][0]["known_malicious_versions"] == ["4.1.1", "4.1.2"]
        assert data["scan_errors"] == []

    def test_write_failure_raises_report_error(self, report: ScanReport, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        with pytest.raises(ReportError):
            JsonReportSink(blocker / "report.json").write(report)


class TestCsvSink:
    """One CSV per variant plus metadata."""

    def test_writes_five_files(self, report: ScanReport, tmp_path: Path) -> None:
        written = CsvReportSink(tmp_path / "csv", prefix="run").write(report)
        assert sorted(p.name for p in written) == [
            "run-infected-files.csv",
            "run-npm-package-warnings.csv",
            "run-scan-errors.csv",
            "run-scan-information.csv",
            "run-suspected-files.csv",
        ]

    def test_variant_rows(self, report: ScanReport, tmp_path: Path) -> None:
        CsvReportSink(tmp_path).write(report)
        (warning,) = _rows(tmp_path / "huludscan-npm-package-warnings.csv")
        assert warning["package_name"] == "@ctrl/tinycolor"
        assert warning["known_malicious_versions"] == "4.1.1, 4.1.2"
        assert warning["version_match"] == "malicious"
        (infected,) = _rows(tmp_path / "huludscan-infected-files.csv")
        assert infected["matched_pattern"] == "node setup_bun.js"

    def test_empty_variant_has_header(self, report: ScanReport, tmp_path: Path) -> None:
        CsvReportSink(tmp_path).write(report)
        text = (tmp_path / "huludscan-scan-errors.csv").read_text()
        assert text.strip() == "path,message"

    def test_metadata_row(self, report: ScanReport, tmp_path: Path) -> None:
        CsvReportSink(tmp_path).write(report)
        (info,) = _rows(tmp_path / "huludscan-scan-information.csv")
        assert info["infected_files"] == "1"
        assert info["may_be_safe"] == "False"
        assert json.loads(info["environment"]) == {"platform": "Linux"}

    def test_write_failure_raises_report_error(self, report: ScanReport, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        with pytest.raises(ReportError):
            CsvReportSink(blocker).write(report)
