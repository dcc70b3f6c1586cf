"""Exception hierarchy shared by the triage components."""

from typing import Optional


class TriageError(Exception):
    """Base class for errors raised by the triage pipeline.

    Attributes:
        message: Human-readable error description.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, message: str, cause: Optional[Exception] = None):
        self.message = message
        self.cause = cause
        super().__init__(message)


class ConfigurationError(TriageError):
    """Raised when required settings are missing or invalid."""


class IssueSearchError(TriageError):
    """Raised when the issue search backend cannot be queried."""


class ReportWriteError(TriageError):
    """Raised when a report artifact cannot be written to disk."""
