"""Distance and area measurement over a clicked path."""

from __future__ import annotations

import logging

from ..core import GeoPoint, Measurement, validate_coordinates
from ..utils import format_area, format_distance, path_length, shoelace_area

logger = logging.getLogger(__name__)


class MeasurementEngine:
    """Accumulate vertices while active and derive metrics from them.

    Distance and area are recomputed from the vertex list on every call; no
    running totals are kept.
    """

    def __init__(self) -> None:
        self.active = False
        self._points: list[GeoPoint] = []

    def activate(self) -> None:
        self.active = True
        self.reset()

    def deactivate(self) -> None:
        self.active = False
        self.reset()

    def toggle(self) -> bool:
        if self.active:
            self.deactivate()
        else:
            self.activate()
        return self.active

    def add_point(self, lat: float, lng: float) -> bool:
        """Append a vertex; ignored unless the engine is active.

        Raises :class:`ValidationError` for coordinates outside the valid ranges.
        """

        if not self.active:
            return False
        lat, lng = float(lat), float(lng)
        validate_coordinates(lat, lng)
        self._points.append(GeoPoint(lat=lat, lng=lng))
        return True

    @property
    def points(self) -> tuple[GeoPoint, ...]:
        return tuple(self._points)

    def total_distance(self) -> float:
        return path_length(self._points)

    def enclosed_area(self) -> float:
        return shoelace_area(self._points)

    def reset(self) -> None:
        self._points.clear()

    def finish(self) -> Measurement | None:
        """Summarize the current path, then clear it and leave measuring mode.

        Returns ``None`` without changing state when fewer than two points exist.
        """

        if len(self._points) < 2:
            return None

        measurement = Measurement(
            points=self.points,
            distance_km=self.total_distance(),
            area_km2=self.enclosed_area(),
        )
        logger.info(
            "Measurement complete: %s, area %s",
            format_distance(measurement.distance_km),
            format_area(measurement.area_km2),
        )
        self.deactivate()
        return measurement
