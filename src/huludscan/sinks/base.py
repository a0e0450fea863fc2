"""Report sink interface.

A sink receives a finalized ``ScanReport`` and persists it. Sinks never
mutate the report; they return the paths they wrote.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from huludscan.core.report.models import ScanReport


class ReportSink(ABC):
    """Abstract base class for report persistence."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short format name (e.g. 'json')."""

    @abstractmethod
    def write(self, report: ScanReport) -> list[Path]:
        """Persist the report.

        Args:
            report: A finalized report.

        Returns:
            Paths of all files written.

        Raises:
            ReportError: If any file cannot be written.
        """
