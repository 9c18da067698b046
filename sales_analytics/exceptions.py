"""
Library exceptions.
"""
from typing import List, Optional


class SalesAnalyticsError(Exception):
    """Base class for errors raised by the reporting library"""


class SnapshotLoadError(SalesAnalyticsError):
    """
    The star schema snapshot could not be loaded or failed validation.

    Report computation never runs over a partial snapshot, so this is
    always surfaced to the caller.
    """

    def __init__(self, message: str, table: Optional[str] = None, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.table = table
        self.errors = errors or []

    def __str__(self) -> str:
        base = super().__str__()
        if self.errors:
            return f"{base}: {'; '.join(self.errors)}"
        return base


class UnknownAnalysisError(SalesAnalyticsError):
    """Requested analysis or granularity is not supported"""
