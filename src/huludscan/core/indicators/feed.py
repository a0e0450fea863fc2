"""IOC feed loading: turn supplier records into an ``IndicatorSet``.

The supplier hands over ``{package_name, package_versions}`` records where
``package_versions`` is a comma-separated list of exact versions. Records
can come from a local JSON/CSV file or from a remote feed fetched with
``httpx``. Any failure to obtain usable records raises
``IndicatorFeedError``; the scan cannot run without them.

Usage::

    indicators = load_feed_file(Path("iocs.csv"))
    indicators = asyncio.run(fetch_feed(DEFAULT_FEED_URL))
"""

from __future__ import annotations

import csv
import io
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

import httpx

from huludscan import __version__
from huludscan.core.indicators.models import CompromisedPackageRecord, IndicatorSet
from huludscan.exceptions import IndicatorFeedError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_FEED_URL: str = (
    "https://raw.githubusercontent.com/wiz-sec-public/wiz-research-iocs/"
    "refs/heads/main/reports/shai-hulud-2-packages.csv"
)

# Timeout for feed requests (seconds).
DEFAULT_TIMEOUT: float = 30.0

USER_AGENT: str = f"huludscan/{__version__}"

FEED_FORMATS: tuple[str, ...] = ("json", "csv")

# Header aliases accepted for the two record fields.
_NAME_KEYS: tuple[str, ...] = ("package_name", "Package", "package", "name")
_VERSION_KEYS: tuple[str, ...] = ("package_versions", "Version", "versions", "version")


# ---------------------------------------------------------------------------
# Record parsing
# ---------------------------------------------------------------------------


def parse_versions(raw: str) -> frozenset[str]:
    """Split a supplier version list into exact version strings.

    Accepts the comma-separated form (``"1.0.0, 1.0.1"``) and the
    research-feed form (``"= 1.0.0 || = 1.0.1"``).
    """
    versions: set[str] = set()
    for chunk in raw.replace("||", ",").split(","):
        version = chunk.strip().lstrip("=").strip()
        if version:
            versions.add(version)
    return frozenset(versions)


def _first_value(record: Mapping[str, Any], keys: Iterable[str]) -> str:
    for key in keys:
        value = record.get(key)
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            return ", ".join(str(v) for v in value)
        return str(value)
    return ""


def records_to_indicators(
    records: Iterable[Mapping[str, Any]],
    **indicator_kwargs: Any,
) -> IndicatorSet:
    """Convert supplier records into an ``IndicatorSet``.

    Args:
        records: Mappings with ``package_name`` and ``package_versions``
            (or the ``Package``/``Version`` aliases).
        **indicator_kwargs: Forwarded to ``IndicatorSet.from_records``.

    Returns:
        The frozen indicator set.

    Raises:
        IndicatorFeedError: If no record carries a package name.
    """
    parsed: list[CompromisedPackageRecord] = []
    skipped = 0
    for record in records:
        if not isinstance(record, Mapping):
            skipped += 1
            continue
        name = _first_value(record, _NAME_KEYS).strip()
        if not name:
            skipped += 1
            continue
        parsed.append(CompromisedPackageRecord(
            name=name,
            malicious_versions=parse_versions(_first_value(record, _VERSION_KEYS)),
        ))

    if skipped:
        logger.warning("Skipped %d IOC record(s) without a package name", skipped)
    if not parsed:
        raise IndicatorFeedError("IOC feed contained no usable package records")

    indicators = IndicatorSet.from_records(parsed, **indicator_kwargs)
    logger.info(
        "Loaded %d compromised packages (%d versions)",
        indicators.package_count, indicators.version_count,
    )
    return indicators


def _json_records(text: str) -> list[Any]:
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise IndicatorFeedError(f"IOC feed is not valid JSON: {exc}") from exc
    if isinstance(data, dict):
        data = data.get("packages", [])
    if not isinstance(data, list):
        raise IndicatorFeedError("IOC feed JSON must be a list of package records")
    return data


def _csv_records(text: str) -> list[dict[str, str]]:
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    if not reader.fieldnames:
        raise IndicatorFeedError("IOC feed CSV has no header row")
    return [
        {k.strip(): (v or "") for k, v in row.items() if k is not None}
        for row in reader
    ]


def parse_feed_text(text: str, fmt: str = "csv", **indicator_kwargs: Any) -> IndicatorSet:
    """Parse a raw feed body in the given format (``json`` or ``csv``)."""
    if fmt not in FEED_FORMATS:
        raise IndicatorFeedError(f"Unsupported IOC feed format: {fmt}")
    records = _json_records(text) if fmt == "json" else _csv_records(text)
    return records_to_indicators(records, **indicator_kwargs)


def _format_for(name: str) -> str:
    return "json" if name.lower().split("?", 1)[0].endswith(".json") else "csv"


# ---------------------------------------------------------------------------
# Suppliers
# ---------------------------------------------------------------------------


def load_feed_file(path: Path, **indicator_kwargs: Any) -> IndicatorSet:
    """Load indicators from a local ``.json`` or ``.csv`` feed file.

    Raises:
        IndicatorFeedError: If the file is missing, unreadable, or empty.
    """
    try:
        text = Path(path).read_text(encoding="utf-8-sig")
    except OSError as exc:
        raise IndicatorFeedError(f"Cannot read IOC file {path}: {exc}") from exc
    return parse_feed_text(text, _format_for(str(path)), **indicator_kwargs)


async def fetch_feed(
    url: str = DEFAULT_FEED_URL,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    **indicator_kwargs: Any,
) -> IndicatorSet:
    """Fetch and parse a remote IOC feed.

    Args:
        url: Feed URL; a ``.json`` path selects the JSON parser, anything
            else is read as CSV.
        timeout: Request timeout in seconds.

    Raises:
        IndicatorFeedError: On timeouts, HTTP errors, or unparsable bodies.
    """
    try:
        async with httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        ) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            text = resp.text
    except httpx.TimeoutException as exc:
        raise IndicatorFeedError(f"Timeout fetching IOC feed {url}") from exc
    except httpx.HTTPStatusError as exc:
        raise IndicatorFeedError(
            f"HTTP {exc.response.status_code} fetching IOC feed {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise IndicatorFeedError(f"Request error fetching IOC feed {url}: {exc}") from exc

    logger.info("Fetched IOC feed from %s (%d bytes)", url, len(text))
    return parse_feed_text(text, _format_for(url), **indicator_kwargs)
