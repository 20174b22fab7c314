from __future__ import annotations

import json
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from pydantic import ValidationError

from ...domain.models import Coordinates
from .base import GeocodingError

NOMINATIM_SEARCH_URL = "https://nominatim.openstreetmap.org/search"
DEFAULT_TIMEOUT_SECONDS = 10
DEFAULT_USER_AGENT = "parade-planner/0.1"


def _fetch_json(url: str, *, user_agent: str, timeout: float) -> Any:
    request = Request(url, headers={"User-Agent": user_agent, "Accept": "application/json"})
    try:
        with urlopen(request, timeout=timeout) as response:
            return json.loads(response.read().decode("utf-8"))
    except (HTTPError, URLError, TimeoutError, OSError, json.JSONDecodeError) as exc:
        raise GeocodingError("Failed to fetch geocoding results from Nominatim") from exc


def _parse_candidate(item: Any) -> Coordinates | None:
    if not isinstance(item, dict):
        return None
    label = item.get("display_name")
    try:
        return Coordinates(
            latitude=float(item.get("lat")),
            longitude=float(item.get("lon")),
            label=label if isinstance(label, str) and label.strip() else None,
        )
    except (TypeError, ValueError, ValidationError):
        return None


class NominatimGeocodingAdapter:
    def __init__(
        self,
        *,
        search_url: str = NOMINATIM_SEARCH_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        limit: int = 1,
    ) -> None:
        self._search_url = search_url
        self._user_agent = user_agent
        self._timeout_seconds = timeout_seconds
        self._limit = max(limit, 1)

    def geocode(self, query: str) -> list[Coordinates]:
        text = query.strip()
        if not text:
            raise GeocodingError("Geocoding query must not be empty")

        params = urlencode({"q": text, "format": "json", "limit": self._limit})
        payload = _fetch_json(
            f"{self._search_url}?{params}",
            user_agent=self._user_agent,
            timeout=self._timeout_seconds,
        )
        if not isinstance(payload, list):
            raise GeocodingError("Unexpected Nominatim response shape")

        candidates: list[Coordinates] = []
        for item in payload:
            candidate = _parse_candidate(item)
            if candidate is not None:
                candidates.append(candidate)
        return candidates
