# materials_ngrams/errors.py
from __future__ import annotations


class AnalysisError(Exception):
    """Base class for everything the analyzer raises on purpose."""


class ConfigurationError(AnalysisError, ValueError):
    """Invalid n, coverage fraction, floor or worker bound. Raised before any corpus work."""


class LoadError(AnalysisError):
    """The document source could not be opened or a record failed to parse."""


class SearchError(AnalysisError):
    """A single vocabulary lookup failed or came back with a non-success status."""

    def __init__(self, message: str, *, status: int | None = None, body: object = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class MatchingCancelled(AnalysisError):
    """A matching batch was cancelled; its partial results were discarded."""
