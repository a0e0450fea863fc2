"""Shared fixtures for huludscan tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from huludscan.core.indicators import CompromisedPackageRecord, IndicatorSet
from huludscan.core.orchestrator import ScanOptions
from huludscan.discovery import RootResolver

ManifestFactory = Callable[..., Path]


@pytest.fixture
def indicators() -> IndicatorSet:
    """A small indicator set with scoped and unscoped compromised packages."""
    return IndicatorSet.from_records([
        CompromisedPackageRecord("@ctrl/tinycolor", frozenset({"4.1.1", "4.1.2"})),
        CompromisedPackageRecord("posthog-node", frozenset({"4.18.1", "5.13.3"})),
        CompromisedPackageRecord("ngx-bootstrap", frozenset({"18.1.4"})),
    ])


@pytest.fixture
def make_manifest() -> ManifestFactory:
    """Return a helper that writes a package.json into a directory."""

    def _make(directory: Path, data: dict[str, Any] | str | None = None) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        manifest = directory / "package.json"
        if data is None:
            data = {"name": directory.name, "version": "1.0.0"}
        manifest.write_text(data if isinstance(data, str) else json.dumps(data, indent=2))
        return manifest

    return _make


@pytest.fixture
def fake_home(tmp_path: Path) -> Path:
    """An empty home directory, outside any scanned project."""
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """An empty project directory."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def offline_resolver(fake_home: Path) -> RootResolver:
    """A resolver with no npm on PATH and an isolated home."""
    return RootResolver(home=fake_home, environ={}, runner=lambda args: None)


@pytest.fixture
def scan_options(offline_resolver: RootResolver) -> ScanOptions:
    """Sequential, project-only options that never touch the real system."""
    return ScanOptions(
        resolver=offline_resolver,
        environment=lambda: {"platform": "test"},
    )
