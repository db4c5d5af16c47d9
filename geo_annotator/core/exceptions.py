"""Custom exception hierarchy for the annotation engine."""

from __future__ import annotations


class AnnotationError(RuntimeError):
    """Base class for errors raised by the annotation engine."""

    def __init__(self, message: str, *, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}

    def as_dict(self) -> dict:
        """Return a serializable representation."""
        payload = {"message": str(self)}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(AnnotationError):
    """Raised when marker fields are out of range or missing."""


class ParseError(AnnotationError):
    """Raised when an import file cannot be parsed."""


class UnsupportedFormatError(AnnotationError):
    """Raised when an import or export format is not recognised."""


class StorageError(AnnotationError):
    """Raised by storage slots when the backend cannot be read or written."""
