"""Report aggregation, verdict, and exit codes.

Public API::

    from huludscan.core.report import ReportAggregator, ScanReport, ExitCode
"""

from huludscan.core.report.verdict import ExitCode, exit_code_for, may_be_safe
from huludscan.core.report.models import RootKind, ScanInformation, ScanReport, ScanRoot
from huludscan.core.report.aggregator import ReportAggregator

__all__ = [
    "ExitCode",
    "ReportAggregator",
    "RootKind",
    "ScanInformation",
    "ScanReport",
    "ScanRoot",
    "exit_code_for",
    "may_be_safe",
]
