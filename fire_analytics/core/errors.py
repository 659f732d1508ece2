from __future__ import annotations


class AnalyticsError(Exception):
    """Base class for failures raised by the analytics core."""


class RecordSourceError(AnalyticsError):
    """Raised when the record store cannot return a collection."""


class ExportError(AnalyticsError):
    """Raised when a rendered export cannot be persisted."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnknownFamilyError(AnalyticsError, ValueError):
    """Raised for a record family name outside the supported set."""

    def __init__(self, family: str) -> None:
        super().__init__(f"unknown record family: {family}")
        self.family = family
