"""JSON report sink: the whole report as one document."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from huludscan.core.report.models import ScanReport
from huludscan.exceptions import ReportError
from huludscan.sinks.base import ReportSink

logger = logging.getLogger(__name__)


class JsonReportSink(ReportSink):
    """Writes ``ScanReport.to_dict()`` to a single JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    @property
    def name(self) -> str:
        return "json"

    def write(self, report: ScanReport) -> list[Path]:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(report.to_dict(), indent=2) + "\n", encoding="utf-8",
            )
        except OSError as exc:
            raise ReportError(f"Cannot write JSON report to {self.path}: {exc}") from exc
        logger.info("JSON report written to %s", self.path)
        return [self.path]
