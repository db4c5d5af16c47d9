"""Service layer exports."""

from .exporter import EXPORT_FORMATS, MarkerExporter
from .geocode_cache import GeocodeCache
from .geocoder import NominatimGeocoder
from .history import HistoryManager
from .importer import MarkerImporter, detect_format
from .marker_store import MarkerStore
from .measurement import MeasurementEngine
from .persistence import FileSlot, MemorySlot, PersistenceAdapter, RedisSlot

__all__ = [
    "EXPORT_FORMATS",
    "MarkerExporter",
    "GeocodeCache",
    "NominatimGeocoder",
    "HistoryManager",
    "MarkerImporter",
    "detect_format",
    "MarkerStore",
    "MeasurementEngine",
    "FileSlot",
    "MemorySlot",
    "PersistenceAdapter",
    "RedisSlot",
]
