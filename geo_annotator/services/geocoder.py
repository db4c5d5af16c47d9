"""Nominatim geocoding client with a read-through result cache."""

from __future__ import annotations

import json
import logging
from typing import Dict, Optional
from urllib import parse as urllib_parse
from urllib import request as urllib_request

from ..core import GeocodeResult
from .geocode_cache import GeocodeCache

logger = logging.getLogger(__name__)


class _HTTPClient:
    """Small wrapper around :func:`urllib.request.urlopen` with headers."""

    def __init__(self, user_agent: str = "GeoAnnotator/1.0"):
        self.headers = {"User-Agent": user_agent, "Accept": "application/json"}

    def get_json(self, url: str, params: Dict[str, object], timeout: int) -> object:
        query = urllib_parse.urlencode(params)
        full_url = f"{url}?{query}"
        request = urllib_request.Request(full_url, headers=self.headers)
        with urllib_request.urlopen(request, timeout=timeout) as response:
            data = response.read()
        return json.loads(data.decode("utf-8"))


class NominatimGeocoder:
    """Forward and reverse geocoding against an OpenStreetMap Nominatim server."""

    search_url = "https://nominatim.openstreetmap.org/search"
    reverse_url = "https://nominatim.openstreetmap.org/reverse"

    def __init__(
        self,
        http_client: Optional[_HTTPClient] = None,
        *,
        cache: Optional[GeocodeCache] = None,
        timeout: int = 10,
        user_agent: str = "GeoAnnotator/1.0",
        search_url: Optional[str] = None,
        reverse_url: Optional[str] = None,
    ):
        self.http_client = http_client or _HTTPClient(user_agent)
        self.cache = cache if cache is not None else GeocodeCache()
        self.timeout = timeout
        if search_url:
            self.search_url = search_url
        if reverse_url:
            self.reverse_url = reverse_url

    def search(self, query: str) -> Optional[GeocodeResult]:
        """Resolve free text to the best matching place.

        Transport and decoding errors propagate; only hits are cached.
        """

        cached = self.cache.get(query)
        if cached is not None:
            return cached

        params = {"format": "json", "q": query, "limit": 1, "addressdetails": 1}
        payload = self.http_client.get_json(self.search_url, params, self.timeout)

        if not isinstance(payload, list) or not payload:
            return None

        result = GeocodeResult.from_payload(payload[0])
        self.cache.put(query, result)
        return result

    def reverse(self, lat: float, lon: float) -> Optional[dict]:
        params = {"format": "json", "lat": lat, "lon": lon, "zoom": 18, "addressdetails": 1}
        try:
            payload = self.http_client.get_json(self.reverse_url, params, self.timeout)
        except (OSError, ValueError) as exc:
            logger.warning("Reverse geocoding failed: %s", exc)
            return None
        return payload if isinstance(payload, dict) else None
