"""Tests for ``huludscan scan`` command.

Verifies:
    - Exit codes for clean, warning, infected, suspected, and harvester trees.
    - JSON output format.
    - JSON and CSV report files.
    - Fatal errors (missing path, unusable IOC feed) exit with code 5.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from huludscan.cli.main import cli
from huludscan.core.indicators import parse_feed_text
from huludscan.exceptions import IndicatorFeedError

IOC_CSV = "Package,Version\n@ctrl/tinycolor,= 4.1.1 || = 4.1.2\nposthog-node,= 4.18.1\n"


def _scan(runner: CliRunner, path: Path, ioc_file: Path, *extra: str):
    return runner.invoke(cli, ["scan", str(path), "--ioc-file", str(ioc_file), "-q", *extra])


class TestScanExitCodes:
    """Exit code reflects the most severe finding."""

    def test_clean_exits_0(self, runner: CliRunner, clean_project: Path, ioc_file: Path) -> None:
        result = _scan(runner, clean_project, ioc_file)
        assert result.exit_code == 0, result.output
        assert "may be safe" in result.output

    def test_warning_exits_1(self, runner: CliRunner, warning_project: Path, ioc_file: Path) -> None:
        result = _scan(runner, warning_project, ioc_file)
        assert result.exit_code == 1
        assert "Review the warnings" in result.output
        assert "Malicious versions" in result.output

    def test_infected_exits_2(self, runner: CliRunner, infected_project: Path, ioc_file: Path) -> None:
        result = _scan(runner, infected_project, ioc_file)
        assert result.exit_code == 2
        assert "INFECTED" in result.output

    def test_suspected_exits_3(self, runner: CliRunner, suspected_project: Path, ioc_file: Path) -> None:
        result = _scan(runner, suspected_project, ioc_file)
        assert result.exit_code == 3
        assert "SUSPECTED" in result.output

    def test_harvester_exits_4(
        self, runner: CliRunner, clean_project: Path, ioc_file: Path, isolated_home: Path,
    ) -> None:
        (isolated_home / ".truffler-cache").mkdir()
        result = _scan(runner, clean_project, ioc_file)
        assert result.exit_code == 4

    def test_progress_display_does_not_change_result(
        self, runner: CliRunner, infected_project: Path, ioc_file: Path,
    ) -> None:
        result = runner.invoke(cli, ["scan", str(infected_project), "--ioc-file", str(ioc_file)])
        assert result.exit_code == 2

    def test_workers_option(self, runner: CliRunner, infected_project: Path, ioc_file: Path) -> None:
        result = _scan(runner, infected_project, ioc_file, "--workers", "4")
        assert result.exit_code == 2


class TestScanJsonOutput:
    """--format json prints the full report."""

    def test_json_structure(self, runner: CliRunner, warning_project: Path, ioc_file: Path) -> None:
        result = _scan(runner, warning_project, ioc_file, "--format", "json")
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["may_be_safe"] is False
        assert data["scan_information"]["package_json_files_scanned"] == 1
        (warning,) = data["npm_package_warnings"]
        assert warning["version_match"] == "malicious"
        assert warning["installed_version"] == "4.1.1"

    def test_json_clean(self, runner: CliRunner, clean_project: Path, ioc_file: Path) -> None:
        result = _scan(runner, clean_project, ioc_file, "--format", "json")
        data = json.loads(result.output)
        assert data["may_be_safe"] is True
        assert data["scan_information"]["files_scanned"] == 2


class TestScanSinks:
    """--json-out and --csv-dir persist the report."""

    def test_json_out(
        self, runner: CliRunner, infected_project: Path, ioc_file: Path, tmp_path: Path,
    ) -> None:
        out = tmp_path / "reports" / "scan.json"
        result = _scan(runner, infected_project, ioc_file, "--json-out", str(out))
        assert result.exit_code == 2
        assert json.loads(out.read_text())["scan_information"]["infected_files"] == 1
        assert "JSON report written to" in result.output

    def test_csv_dir(
        self, runner: CliRunner, suspected_project: Path, ioc_file: Path, tmp_path: Path,
    ) -> None:
        out = tmp_path / "csv"
        result = _scan(runner, suspected_project, ioc_file, "--csv-dir", str(out))
        assert result.exit_code == 3
        assert (out / "huludscan-suspected-files.csv").exists()
        assert (out / "huludscan-scan-information.csv").exists()

    def test_unwritable_sink_exits_5(
        self, runner: CliRunner, clean_project: Path, ioc_file: Path, tmp_path: Path,
    ) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        result = _scan(runner, clean_project, ioc_file, "--csv-dir", str(blocker))
        assert result.exit_code == 5


class TestScanFatalErrors:
    """Fatal conditions produce no report and exit 5."""

    def test_missing_path(self, runner: CliRunner, tmp_path: Path, ioc_file: Path) -> None:
        result = _scan(runner, tmp_path / "nope", ioc_file)
        assert result.exit_code == 5
        assert "does not exist" in result.output

    def test_invalid_workers_exits_5(
        self, runner: CliRunner, clean_project: Path, ioc_file: Path,
    ) -> None:
        """Usage errors must not collide with the infected exit code."""
        result = _scan(runner, clean_project, ioc_file, "--workers", "0")
        assert result.exit_code == 5

    def test_path_is_a_file_exits_5(
        self, runner: CliRunner, ioc_file: Path,
    ) -> None:
        result = _scan(runner, ioc_file, ioc_file)
        assert result.exit_code == 5

    def test_unknown_option_exits_5(self, runner: CliRunner, clean_project: Path) -> None:
        result = runner.invoke(cli, ["scan", str(clean_project), "--no-such-option"])
        assert result.exit_code == 5

    def test_missing_ioc_file(self, runner: CliRunner, clean_project: Path, tmp_path: Path) -> None:
        result = _scan(runner, clean_project, tmp_path / "missing.csv")
        assert result.exit_code == 5
        assert "Error" in result.output

    def test_empty_ioc_file(self, runner: CliRunner, clean_project: Path, tmp_path: Path) -> None:
        empty = tmp_path / "empty.csv"
        empty.write_text("Package,Version\n")
        result = _scan(runner, clean_project, empty)
        assert result.exit_code == 5

    def test_feed_unreachable(self, runner: CliRunner, clean_project: Path) -> None:
        with patch(
            "huludscan.cli.scan.fetch_feed",
            new_callable=AsyncMock,
            side_effect=IndicatorFeedError("Timeout fetching IOC feed"),
        ):
            result = runner.invoke(cli, ["scan", str(clean_project), "-q"])
        assert result.exit_code == 5
        assert "Timeout" in result.output


class TestScanFeedUrl:
    """--feed-url and the HULUDSCAN_FEED_URL environment variable."""

    def test_feed_url_passed_through(self, runner: CliRunner, warning_project: Path) -> None:
        with patch(
            "huludscan.cli.scan.fetch_feed",
            new_callable=AsyncMock,
            return_value=parse_feed_text(IOC_CSV, "csv"),
        ) as fetch:
            result = runner.invoke(
                cli, ["scan", str(warning_project), "-q", "--feed-url", "https://example.test/f.csv"],
            )
        assert result.exit_code == 1
        fetch.assert_awaited_once_with("https://example.test/f.csv")

    def test_ioc_file_env_var(
        self, runner: CliRunner, warning_project: Path, ioc_file: Path,
    ) -> None:
        result = runner.invoke(
            cli, ["scan", str(warning_project), "-q"],
            env={"HULUDSCAN_IOC_FILE": str(ioc_file)},
        )
        assert result.exit_code == 1
