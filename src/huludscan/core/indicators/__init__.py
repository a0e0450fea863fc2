"""Indicators of compromise for the Shai-Hulud 2.0 worm.

Public API::

    from huludscan.core.indicators import IndicatorSet, load_feed_file

    indicators = load_feed_file(Path("shai-hulud-2-packages.csv"))
    record = indicators.packages["@ctrl/tinycolor"]
"""

from __future__ import annotations

from huludscan.core.indicators.feed import (
    DEFAULT_FEED_URL,
    fetch_feed,
    load_feed_file,
    parse_feed_text,
    parse_versions,
    records_to_indicators,
)
from huludscan.core.indicators.models import (
    CREDENTIAL_HARVESTER_CACHE_DIR,
    DEFAULT_INFECTION_PATTERNS,
    DEFAULT_MALICIOUS_FILE_NAMES,
    MANIFEST_FILE_NAME,
    CompromisedPackageRecord,
    IndicatorSet,
)

__all__ = [
    "CREDENTIAL_HARVESTER_CACHE_DIR",
    "CompromisedPackageRecord",
    "DEFAULT_FEED_URL",
    "DEFAULT_INFECTION_PATTERNS",
    "DEFAULT_MALICIOUS_FILE_NAMES",
    "IndicatorSet",
    "MANIFEST_FILE_NAME",
    "fetch_feed",
    "load_feed_file",
    "parse_feed_text",
    "parse_versions",
    "records_to_indicators",
]
