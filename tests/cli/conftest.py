"""Shared fixtures for CLI tests.

Provides an isolated home directory, a local IOC feed file, and project
trees for each verdict scenario.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

IOC_CSV = (
    "Package,Version\n"
    "@ctrl/tinycolor,= 4.1.1 || = 4.1.2\n"
    "posthog-node,= 4.18.1\n"
)


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME at an empty directory so the real harvester cache is never seen."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.delenv("HULUDSCAN_FEED_URL", raising=False)
    monkeypatch.delenv("HULUDSCAN_IOC_FILE", raising=False)
    monkeypatch.delenv("HULUDSCAN_WORKERS", raising=False)
    return home


@pytest.fixture
def ioc_file(tmp_path: Path) -> Path:
    """A local IOC feed in the public research CSV format."""
    path = tmp_path / "iocs.csv"
    path.write_text(IOC_CSV)
    return path


def _manifest(directory: Path, data: dict) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "package.json").write_text(json.dumps(data))


@pytest.fixture
def clean_project(tmp_path: Path) -> Path:
    """A project with only benign manifests."""
    root = tmp_path / "clean"
    _manifest(root, {"name": "clean", "version": "1.0.0"})
    _manifest(root / "node_modules" / "lodash", {"name": "lodash", "version": "4.17.21"})
    return root


@pytest.fixture
def infected_project(tmp_path: Path) -> Path:
    """A project whose dependency runs the fake Bun installer on preinstall."""
    root = tmp_path / "infected"
    _manifest(root / "node_modules" / "evil", {
        "name": "evil", "version": "1.0.0",
        "scripts": {"preinstall": "node setup_bun.js"},
    })
    return root


@pytest.fixture
def suspected_project(tmp_path: Path) -> Path:
    """A project containing a setup_bun.js payload file."""
    root = tmp_path / "suspected"
    payload = root / "node_modules" / "x" / "setup_bun.js"
    payload.parent.mkdir(parents=True)
    payload.write_text("// loader")
    return root


@pytest.fixture
def warning_project(tmp_path: Path) -> Path:
    """A project vendoring a compromised version of a listed package."""
    root = tmp_path / "warning"
    _manifest(root / "vendor", {"name": "@ctrl/tinycolor", "version": "4.1.1"})
    return root
