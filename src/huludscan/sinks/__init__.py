"""Report sinks: persist a finalized ``ScanReport``.

Public API::

    from huludscan.sinks import CsvReportSink, JsonReportSink, ReportSink
"""

from __future__ import annotations

from huludscan.sinks.base import ReportSink
from huludscan.sinks.csv_sink import CsvReportSink
from huludscan.sinks.json_sink import JsonReportSink

__all__ = [
    "CsvReportSink",
    "JsonReportSink",
    "ReportSink",
]
