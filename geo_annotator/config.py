"""Runtime configuration for the Geo Annotator project."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class AppConfig:
    """High level runtime configuration values."""

    history_limit: int = 50
    geocode_ttl_seconds: float = 300.0
    max_import_size_mb: int = 10
    allowed_import_extensions: tuple[str, ...] = ("json", "csv", "kml")
    seed_default_markers: bool = True

    @property
    def max_upload_bytes(self) -> int:
        """Maximum import payload in bytes."""
        return self.max_import_size_mb * 1024 * 1024


@dataclass(frozen=True)
class StorageConfig:
    """Where the marker slot lives."""

    backend: str = "redis"
    redis_url: str = "redis://localhost:6379/0"
    directory: Path = Path("data")
    storage_key: str = "geo_annotator_markers_v2"


@dataclass(frozen=True)
class GeocoderConfig:
    """Settings for the Nominatim client."""

    search_url: str = "https://nominatim.openstreetmap.org/search"
    reverse_url: str = "https://nominatim.openstreetmap.org/reverse"
    timeout: int = 10
    user_agent: str = "GeoAnnotator/1.0"


APP_CONFIG = AppConfig(
    history_limit=int(os.environ.get("GEO_ANNOTATOR_HISTORY_LIMIT", AppConfig.history_limit)),
    geocode_ttl_seconds=float(
        os.environ.get("GEO_ANNOTATOR_GEOCODE_TTL", AppConfig.geocode_ttl_seconds)
    ),
    max_import_size_mb=int(
        os.environ.get("GEO_ANNOTATOR_MAX_IMPORT_MB", AppConfig.max_import_size_mb)
    ),
    seed_default_markers=_env_flag("GEO_ANNOTATOR_SEED_DEFAULTS", AppConfig.seed_default_markers),
)
STORAGE_CONFIG = StorageConfig(
    backend=os.environ.get("GEO_ANNOTATOR_STORAGE", StorageConfig.backend),
    redis_url=os.environ.get("GEO_ANNOTATOR_REDIS_URL", StorageConfig.redis_url),
    directory=Path(os.environ.get("GEO_ANNOTATOR_DATA_DIR", StorageConfig.directory)),
    storage_key=os.environ.get("GEO_ANNOTATOR_STORAGE_KEY", StorageConfig.storage_key),
)
GEOCODER_CONFIG = GeocoderConfig(
    search_url=os.environ.get("GEO_ANNOTATOR_GEOCODER_SEARCH_URL", GeocoderConfig.search_url),
    reverse_url=os.environ.get("GEO_ANNOTATOR_GEOCODER_REVERSE_URL", GeocoderConfig.reverse_url),
    timeout=int(os.environ.get("GEO_ANNOTATOR_GEOCODER_TIMEOUT", GeocoderConfig.timeout)),
    user_agent=os.environ.get("GEO_ANNOTATOR_USER_AGENT", GeocoderConfig.user_agent),
)
