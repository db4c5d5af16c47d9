"""Domain models used throughout the annotation engine."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field, replace
from typing import Iterable, Mapping, Sequence

from .exceptions import ValidationError

DEFAULT_ICON = "📍"

CONTENT_FIELDS: tuple[str, ...] = ("lat", "lng", "title", "description", "icon")


def now_ms() -> int:
    """Milliseconds since the epoch."""
    return int(time.time() * 1000)


def validate_coordinates(lat: float, lng: float) -> None:
    """Raise :class:`ValidationError` when ``lat``/``lng`` are outside valid ranges."""

    if not -90.0 <= lat <= 90.0:
        raise ValidationError(
            "Latitude must be between -90 and 90",
            details={"field": "lat", "value": lat},
        )
    if not -180.0 <= lng <= 180.0:
        raise ValidationError(
            "Longitude must be between -180 and 180",
            details={"field": "lng", "value": lng},
        )


def coerce_coordinate(value: object, field_name: str) -> float:
    if isinstance(value, bool) or value in (None, ""):
        raise ValidationError(f"Missing value for required field '{field_name}'", details={"field": field_name})
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValidationError(
            f"Field '{field_name}' must contain a numeric value",
            details={"field": field_name, "value": str(value)},
        ) from exc
    if number != number:
        raise ValidationError(f"Field '{field_name}' must not be NaN", details={"field": field_name})
    return number


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A bare latitude/longitude pair."""

    lat: float
    lng: float


@dataclass(frozen=True, slots=True)
class MarkerDraft:
    """Content of a marker before the store assigns identity.

    ``created_at`` is only carried when restoring persisted records; imports and
    history snapshots leave it unset so the store stamps a fresh timestamp.
    """

    lat: float
    lng: float
    title: str = ""
    description: str = ""
    icon: str = DEFAULT_ICON
    created_at: int | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, object], *, require_title: bool = False) -> "MarkerDraft":
        """Build a draft from user supplied data, validating it at the boundary."""

        lat = coerce_coordinate(data.get("lat"), "lat")
        lng = coerce_coordinate(data.get("lng"), "lng")
        validate_coordinates(lat, lng)

        title = str(data.get("title") or "")
        if require_title and not title.strip():
            raise ValidationError("Title is required", details={"field": "title"})

        return cls(
            lat=lat,
            lng=lng,
            title=title,
            description=str(data.get("description") or ""),
            icon=str(data.get("icon") or DEFAULT_ICON),
        )


@dataclass(slots=True)
class Marker:
    """A geographic annotation owned by the :class:`MarkerStore`."""

    id: str
    lat: float
    lng: float
    title: str
    description: str = ""
    icon: str = DEFAULT_ICON
    created_at: int = field(default_factory=now_ms)

    def content(self) -> dict:
        """Fields captured by history snapshots."""
        return {
            "lat": self.lat,
            "lng": self.lng,
            "title": self.title,
            "description": self.description,
            "icon": self.icon,
        }

    def to_record(self) -> dict:
        """Persistable representation, shared by storage and the JSON export."""
        record = self.content()
        record["createdAt"] = self.created_at
        return record

    def as_dict(self) -> dict:
        payload = self.to_record()
        payload["id"] = self.id
        return payload

    def merged(self, fields: Mapping[str, object]) -> "Marker":
        return replace(self, **fields)


@dataclass(frozen=True, slots=True)
class HistorySnapshot:
    """Serialized content of the marker list at one point in history."""

    payload: str

    @classmethod
    def from_markers(cls, markers: Iterable[Marker]) -> "HistorySnapshot":
        state = {"markers": [marker.content() for marker in markers]}
        return cls(payload=json.dumps(state, ensure_ascii=False))

    def drafts(self) -> list[MarkerDraft]:
        state = json.loads(self.payload)
        return [MarkerDraft(**entry) for entry in state["markers"]]

    def __len__(self) -> int:
        return len(json.loads(self.payload)["markers"])


@dataclass(frozen=True, slots=True)
class GeocodeResult:
    """A single geocoding hit."""

    lat: float
    lon: float
    display_name: str
    address: dict = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Mapping[str, object]) -> "GeocodeResult":
        address = payload.get("address")
        return cls(
            lat=float(payload["lat"]),  # type: ignore[arg-type]
            lon=float(payload["lon"]),  # type: ignore[arg-type]
            display_name=str(payload.get("display_name") or ""),
            address=dict(address) if isinstance(address, Mapping) else {},
        )

    def as_dict(self) -> dict:
        return {
            "lat": self.lat,
            "lon": self.lon,
            "display_name": self.display_name,
            "address": dict(self.address),
        }


@dataclass(frozen=True, slots=True)
class Measurement:
    """Summary of a finished measurement path."""

    points: Sequence[GeoPoint]
    distance_km: float
    area_km2: float
    timestamp: int = field(default_factory=now_ms)

    def as_dict(self) -> dict:
        return {
            "points": [{"lat": point.lat, "lng": point.lng} for point in self.points],
            "distance": self.distance_km,
            "area": self.area_km2,
            "timestamp": self.timestamp,
        }
