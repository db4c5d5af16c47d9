"""Time-bounded memo of geocoding results."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from ..core import GeocodeResult

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0


@dataclass(frozen=True, slots=True)
class CacheEntry:
    result: GeocodeResult
    expires_at: float


class GeocodeCache:
    """Exact-match cache keyed by the query string.

    Entries expire ``ttl`` seconds after their own insertion and are dropped
    lazily on access or on the next ``put``. The cache never evicts for size.
    """

    def __init__(self, *, ttl: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, query: str) -> GeocodeResult | None:
        entry = self._entries.get(query)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[query]
            logger.debug("Geocode cache entry expired for %r", query)
            return None
        logger.debug("Geocode cache hit for %r", query)
        return entry.result

    def put(self, query: str, result: GeocodeResult) -> None:
        self.purge_expired()
        self._entries[query] = CacheEntry(result=result, expires_at=self._clock() + self.ttl)

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [query for query, entry in self._entries.items() if entry.expires_at <= now]
        for query in expired:
            del self._entries[query]
        return len(expired)

    def __contains__(self, query: object) -> bool:
        return isinstance(query, str) and self.get(query) is not None

    def __len__(self) -> int:
        return len(self._entries)
