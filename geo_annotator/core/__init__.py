"""Core domain primitives for the annotation engine."""

from .models import (
    DEFAULT_ICON,
    GeocodeResult,
    GeoPoint,
    HistorySnapshot,
    Marker,
    MarkerDraft,
    Measurement,
    validate_coordinates,
)
from .exceptions import (
    AnnotationError,
    ParseError,
    StorageError,
    UnsupportedFormatError,
    ValidationError,
)

__all__ = [
    "DEFAULT_ICON",
    "GeocodeResult",
    "GeoPoint",
    "HistorySnapshot",
    "Marker",
    "MarkerDraft",
    "Measurement",
    "validate_coordinates",
    "AnnotationError",
    "ParseError",
    "StorageError",
    "UnsupportedFormatError",
    "ValidationError",
]
