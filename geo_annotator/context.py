"""Wiring of the annotation services into one explicit context object."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .config import APP_CONFIG, GEOCODER_CONFIG, STORAGE_CONFIG, AppConfig, GeocoderConfig, StorageConfig
from .core import Marker, MarkerDraft
from .services import (
    FileSlot,
    GeocodeCache,
    HistoryManager,
    MarkerExporter,
    MarkerImporter,
    MarkerStore,
    MeasurementEngine,
    MemorySlot,
    NominatimGeocoder,
    PersistenceAdapter,
    RedisSlot,
)
from .services.persistence import StorageSlot

logger = logging.getLogger(__name__)

DEFAULT_MARKERS: tuple[MarkerDraft, ...] = (
    MarkerDraft(48.8584, 2.2945, "Eiffel Tower", "Paris, France", "🗼"),
    MarkerDraft(40.6892, -74.0445, "Statue of Liberty", "New York, USA", "🗽"),
    MarkerDraft(51.5007, -0.1246, "Big Ben", "London, UK", "🕰️"),
    MarkerDraft(35.6895, 139.6917, "Tokyo Tower", "Tokyo, Japan", "🗼"),
    MarkerDraft(-33.8568, 151.2153, "Sydney Opera House", "Sydney, Australia", "🎭"),
)


def build_slot(config: StorageConfig) -> StorageSlot:
    """Create the storage backend named by ``config.backend``."""

    if config.backend == "redis":
        return RedisSlot.from_url(config.redis_url)
    if config.backend == "file":
        return FileSlot(config.directory)
    if config.backend == "memory":
        return MemorySlot()
    raise ValueError(f"Unknown storage backend: {config.backend!r}")


@dataclass(slots=True)
class AnnotationContext:
    """Everything a front end needs to drive the annotation engine."""

    store: MarkerStore
    history: HistoryManager
    persistence: PersistenceAdapter
    importer: MarkerImporter
    exporter: MarkerExporter
    geocoder: NominatimGeocoder
    measurement: MeasurementEngine

    @classmethod
    def create(
        cls,
        slot: StorageSlot,
        *,
        app_config: AppConfig = APP_CONFIG,
        storage_key: str = STORAGE_CONFIG.storage_key,
        geocoder: NominatimGeocoder | None = None,
        geocoder_config: GeocoderConfig = GEOCODER_CONFIG,
    ) -> "AnnotationContext":
        persistence = PersistenceAdapter(slot, key=storage_key)
        history = HistoryManager(limit=app_config.history_limit)
        store = MarkerStore(persistence=persistence, history=history)
        if geocoder is None:
            geocoder = NominatimGeocoder(
                cache=GeocodeCache(ttl=app_config.geocode_ttl_seconds),
                timeout=geocoder_config.timeout,
                user_agent=geocoder_config.user_agent,
                search_url=geocoder_config.search_url,
                reverse_url=geocoder_config.reverse_url,
            )
        return cls(
            store=store,
            history=history,
            persistence=persistence,
            importer=MarkerImporter(store, allowed_extensions=app_config.allowed_import_extensions),
            exporter=MarkerExporter(),
            geocoder=geocoder,
            measurement=MeasurementEngine(),
        )

    @classmethod
    def from_config(
        cls,
        storage_config: StorageConfig = STORAGE_CONFIG,
        app_config: AppConfig = APP_CONFIG,
    ) -> "AnnotationContext":
        return cls.create(build_slot(storage_config), app_config=app_config, storage_key=storage_config.storage_key)

    @classmethod
    def in_memory(cls, *, app_config: AppConfig = APP_CONFIG, **kwargs) -> "AnnotationContext":
        return cls.create(MemorySlot(), app_config=app_config, **kwargs)

    @classmethod
    def for_directory(cls, directory: Path | str, *, app_config: AppConfig = APP_CONFIG) -> "AnnotationContext":
        return cls.create(FileSlot(directory), app_config=app_config)

    def bootstrap(self, *, seed_defaults: bool = False) -> "AnnotationContext":
        """Restore persisted markers and record the initial history entry.

        With ``seed_defaults`` an empty slot is populated with a handful of
        well-known landmarks, which are saved immediately.
        """

        restored = self.persistence.load()
        if restored:
            self.store.replace(restored, persist=False)
            logger.info("Restored %s marker(s) from storage", len(restored))
        elif seed_defaults:
            self.store.replace(DEFAULT_MARKERS)
            logger.info("Seeded %s default marker(s)", len(DEFAULT_MARKERS))

        self.history.reset()
        self.history.record(self.store.snapshot())
        return self

    def undo(self) -> bool:
        snapshot = self.history.undo()
        if snapshot is None:
            return False
        self.store.replace(snapshot.drafts())
        return True

    def redo(self) -> bool:
        snapshot = self.history.redo()
        if snapshot is None:
            return False
        self.store.replace(snapshot.drafts())
        return True

    def markers(self) -> tuple[Marker, ...]:
        return self.store.list()

    def export(self, fmt: str) -> str:
        return self.exporter.export(self.store.list(), fmt)

    def import_text(self, filename: str, content: str | bytes) -> list[str]:
        return self.importer.import_text(filename, content)

    def history_state(self) -> dict:
        return {
            "index": self.history.index,
            "size": len(self.history),
            "can_undo": self.history.can_undo,
            "can_redo": self.history.can_redo,
        }

