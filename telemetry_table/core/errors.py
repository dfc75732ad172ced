"""Exception hierarchy for the table pipeline."""

from __future__ import annotations

from typing import Optional


class TelemetryTableError(Exception):
    """Base class for every error raised by this package."""


class SourceError(TelemetryTableError):
    """A historical request, metadata fetch or composition load failed.

    Aborts the current load cycle and is surfaced to the caller.
    """

    def __init__(self, message: str, identifier: Optional[str] = None) -> None:
        super().__init__(message)
        self.identifier = identifier


class FieldExtractionError(TelemetryTableError):
    """A record has no usable value for a column. Contained per cell."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"cannot extract {key!r}: {reason}")
        self.key = key


class SubscriptionError(TelemetryTableError):
    """A live callback failed or the provider reported a transport failure."""

    def __init__(self, message: str, identifier: Optional[str] = None) -> None:
        super().__init__(message)
        self.identifier = identifier
