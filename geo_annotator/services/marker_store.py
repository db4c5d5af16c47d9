"""Authoritative in-memory marker collection."""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Iterable, Iterator, Mapping

from ..core import HistorySnapshot, Marker, MarkerDraft, ValidationError, validate_coordinates
from ..core.models import CONTENT_FIELDS, DEFAULT_ICON, coerce_coordinate, now_ms

if TYPE_CHECKING:
    from .history import HistoryManager
    from .persistence import PersistenceAdapter

logger = logging.getLogger(__name__)


class MarkerStore:
    """Ordered set of markers with stable identity.

    Every mutation runs the same fixed sequence: mutate, then save through the
    persistence adapter, then record a history snapshot. Titles are not checked
    here; callers validate them at the boundary.
    """

    def __init__(
        self,
        *,
        persistence: PersistenceAdapter | None = None,
        history: HistoryManager | None = None,
    ):
        self.persistence = persistence
        self.history = history
        self._markers: list[Marker] = []

    def add(self, point: MarkerDraft) -> str:
        validate_coordinates(point.lat, point.lng)
        marker = self._build(point)
        self._markers.append(marker)
        self._commit()
        logger.debug("Added marker %s", marker.id)
        return marker.id

    def remove(self, marker_id: str) -> None:
        index = self._index_of(marker_id)
        if index is None:
            return
        del self._markers[index]
        self._commit()
        logger.debug("Removed marker %s", marker_id)

    def update(self, marker_id: str, fields: Mapping[str, object]) -> None:
        index = self._index_of(marker_id)
        if index is None:
            return

        unknown = sorted(set(fields) - set(CONTENT_FIELDS))
        if unknown:
            raise ValidationError("Unknown marker fields", details={"fields": unknown})

        changes = dict(fields)
        for name in ("lat", "lng"):
            if name in changes:
                changes[name] = coerce_coordinate(changes[name], name)
        for name in ("title", "description", "icon"):
            if name not in changes:
                continue
            value = changes[name]
            if value is None:
                changes[name] = DEFAULT_ICON if name == "icon" else ""
            elif not isinstance(value, str):
                raise ValidationError(f"Field '{name}' must be a string", details={"field": name})

        current = self._markers[index]
        validate_coordinates(changes.get("lat", current.lat), changes.get("lng", current.lng))

        self._markers[index] = current.merged(changes)
        self._commit()

    def clear(self) -> None:
        self._markers.clear()
        self._commit()

    def replace(self, drafts: Iterable[MarkerDraft], *, persist: bool = True) -> None:
        """Swap the whole content for ``drafts``; each entry gets a fresh id.

        Used to apply history snapshots and to restore persisted state, so no
        snapshot is recorded. Validation happens before anything is replaced.
        """

        drafts = list(drafts)
        for draft in drafts:
            validate_coordinates(draft.lat, draft.lng)

        self._markers = [self._build(draft) for draft in drafts]
        if persist and self.persistence is not None:
            self.persistence.save(self._markers)

    def list(self) -> tuple[Marker, ...]:
        return tuple(self._markers)

    def get(self, marker_id: str) -> Marker | None:
        index = self._index_of(marker_id)
        return None if index is None else self._markers[index]

    def snapshot(self) -> HistorySnapshot:
        return HistorySnapshot.from_markers(self._markers)

    def __len__(self) -> int:
        return len(self._markers)

    def __iter__(self) -> Iterator[Marker]:
        return iter(tuple(self._markers))

    def __contains__(self, marker_id: object) -> bool:
        return any(marker.id == marker_id for marker in self._markers)

    def _commit(self) -> None:
        if self.persistence is not None:
            self.persistence.save(self._markers)
        if self.history is not None:
            self.history.record(self.snapshot())

    def _index_of(self, marker_id: str) -> int | None:
        for index, marker in enumerate(self._markers):
            if marker.id == marker_id:
                return index
        return None

    @staticmethod
    def _build(draft: MarkerDraft) -> Marker:
        return Marker(
            id=uuid.uuid4().hex,
            lat=draft.lat,
            lng=draft.lng,
            title=draft.title,
            description=draft.description,
            icon=draft.icon,
            created_at=draft.created_at if draft.created_at is not None else now_ms(),
        )
