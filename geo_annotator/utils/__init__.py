"""Utility helpers for the annotation engine."""

from .geo import haversine_distance, path_length, shoelace_area
from .formatting import format_area, format_coordinate, format_distance, format_number
from .io import decode_text, detect_encoding, file_extension, safe_filename

__all__ = [
    "haversine_distance",
    "path_length",
    "shoelace_area",
    "format_area",
    "format_coordinate",
    "format_distance",
    "format_number",
    "decode_text",
    "detect_encoding",
    "file_extension",
    "safe_filename",
]
