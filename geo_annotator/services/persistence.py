"""Durable storage for the marker set."""

from __future__ import annotations

import json
import logging
import math
import os
from pathlib import Path
from typing import Iterable, Protocol

from redis import Redis
from redis.exceptions import RedisError

from ..core import Marker, MarkerDraft, StorageError, ValidationError, validate_coordinates
from ..core.models import DEFAULT_ICON, coerce_coordinate

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "geo_annotator_markers_v2"


class StorageSlot(Protocol):
    """Key-value backend holding one text value per key."""

    def read(self, key: str) -> str | None: ...

    def write(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemorySlot:
    """Process-local storage, used for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.values: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self.values.get(key)

    def write(self, key: str, value: str) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


class FileSlot:
    """Store each key as a JSON file inside ``directory``."""

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"Unable to read {path}", details={"error": str(exc)}) from exc
        except UnicodeDecodeError as exc:
            raise StorageError(f"{path} is not valid UTF-8", details={"error": str(exc)}) from exc

    def write(self, key: str, value: str) -> None:
        path = self._path(key)
        temp_path = path.with_suffix(".json.tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(value, encoding="utf-8")
            os.replace(temp_path, path)
        except OSError as exc:
            raise StorageError(f"Unable to write {path}", details={"error": str(exc)}) from exc

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Unable to delete {path}", details={"error": str(exc)}) from exc


class RedisSlot:
    """Redis-backed slot; one string value per key."""

    def __init__(self, connection: Redis):
        self.connection = connection

    @classmethod
    def from_url(cls, url: str) -> "RedisSlot":
        return cls(Redis.from_url(url))

    def read(self, key: str) -> str | None:
        try:
            value = self.connection.get(key)
        except RedisError as exc:
            raise StorageError("Redis read failed", details={"key": key, "error": str(exc)}) from exc
        if value is None:
            return None
        if isinstance(value, bytes):
            try:
                return value.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise StorageError("Redis value is not valid UTF-8", details={"key": key, "error": str(exc)}) from exc
        return str(value)

    def write(self, key: str, value: str) -> None:
        try:
            self.connection.set(key, value.encode("utf-8"))
        except RedisError as exc:
            raise StorageError("Redis write failed", details={"key": key, "error": str(exc)}) from exc

    def delete(self, key: str) -> None:
        try:
            self.connection.delete(key)
        except RedisError as exc:
            raise StorageError("Redis delete failed", details={"key": key, "error": str(exc)}) from exc


class PersistenceAdapter:
    """Serialize markers to a single named storage slot.

    None of the public methods raise: a failed save must not undo the in-memory
    edit that triggered it, so failures are logged and reported as ``False``.
    """

    def __init__(self, slot: StorageSlot, *, key: str = DEFAULT_STORAGE_KEY):
        self.slot = slot
        self.key = key

    def save(self, markers: Iterable[Marker]) -> bool:
        try:
            payload = json.dumps([marker.to_record() for marker in markers], ensure_ascii=False)
            self.slot.write(self.key, payload)
        except (StorageError, TypeError, ValueError) as exc:
            logger.warning("Failed to save markers: %s", exc)
            return False
        return True

    def load(self) -> list[MarkerDraft]:
        try:
            raw = self.slot.read(self.key)
        except StorageError as exc:
            logger.warning("Failed to load markers: %s", exc)
            return []
        if not raw:
            return []

        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("stored markers must be a JSON array")
            return [self._draft_from_record(record) for record in data]
        except (ValueError, TypeError, KeyError, ValidationError) as exc:
            logger.warning("Ignoring unreadable marker storage %r: %s", self.key, exc)
            return []

    def clear(self) -> bool:
        try:
            self.slot.delete(self.key)
        except StorageError as exc:
            logger.warning("Failed to clear marker storage: %s", exc)
            return False
        return True

    @staticmethod
    def _draft_from_record(record: dict) -> MarkerDraft:
        if not isinstance(record, dict):
            raise TypeError("stored marker must be an object")
        lat = coerce_coordinate(record["lat"], "lat")
        lng = coerce_coordinate(record["lng"], "lng")
        validate_coordinates(lat, lng)
        created_at = record.get("createdAt")
        if not isinstance(created_at, (int, float)) or isinstance(created_at, bool) or not math.isfinite(created_at):
            created_at = None
        return MarkerDraft(
            lat=lat,
            lng=lng,
            title=str(record.get("title") or ""),
            description=str(record.get("description") or ""),
            icon=str(record.get("icon") or DEFAULT_ICON),
            created_at=None if created_at is None else int(created_at),
        )
