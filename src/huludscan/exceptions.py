"""huludscan exception hierarchy.

All public exceptions inherit from HuludScanError, giving callers a single
base class to catch when they want to handle any scanner-specific failure
without swallowing unrelated errors.

Only fatal conditions are raised. Unreadable files and unresolvable
optional scan roots are recorded in the report instead.
"""


class HuludScanError(Exception):
    """Base exception for all huludscan errors."""


class ScanRootNotFoundError(HuludScanError, FileNotFoundError):
    """Raised when the requested project root does not exist.

    Raised before any traversal begins, so no report is produced.
    """


class IndicatorFeedError(HuludScanError):
    """Raised when the IOC feed cannot be obtained or contains no usable records.

    Covers network failures, unreadable feed files, and malformed
    feed bodies. The scan cannot run without indicators.
    """


class ReportError(HuludScanError):
    """Raised when a report sink fails to persist a finalized report."""
