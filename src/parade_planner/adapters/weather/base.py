from __future__ import annotations

from typing import Protocol

from ...domain.models import ForecastDay, WeatherSnapshot


class WeatherAdapterError(RuntimeError):
    """Raised when a weather provider request cannot be completed."""


class WeatherAdapter(Protocol):
    def get_current(self, lat: float, lon: float, *, city: str) -> WeatherSnapshot:
        """Fetch current conditions for the provided coordinates."""

    def get_forecast(self, lat: float, lon: float, *, days: int = 5) -> list[ForecastDay]:
        """Fetch a daily forecast for the provided coordinates, oldest day first."""
