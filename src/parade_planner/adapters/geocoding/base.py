from __future__ import annotations

from typing import Protocol

from ...domain.models import Coordinates


class GeocodingError(RuntimeError):
    """Raised when a place name cannot be resolved to coordinates."""


class GeocodingAdapter(Protocol):
    def geocode(self, query: str) -> list[Coordinates]:
        """Return candidate coordinates for a free-text place name, best match first."""
