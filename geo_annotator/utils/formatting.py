"""Formatting helpers."""

from __future__ import annotations


def format_distance(value: float | None) -> str:
    """Return a distance in kilometres with two decimals."""

    if value is None:
        return "N/A"
    return f"{value:.2f} km"


def format_area(value: float | None) -> str:
    if value is None:
        return "N/A"
    return f"{value:.2f} km²"


def format_coordinate(value: float) -> str:
    """Six decimal places, roughly 0.1 m of precision."""

    return f"{value:.6f}"


def format_number(value: float) -> str:
    """Render a coordinate the shortest way that parses back to the same float."""

    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
