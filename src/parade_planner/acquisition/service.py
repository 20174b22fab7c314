from __future__ import annotations

import asyncio
import logging
import random

from ..adapters.geocoding import GeocodingAdapter, GeocodingError, NominatimGeocodingAdapter
from ..adapters.weather import OpenWeatherMapAdapter, WeatherAdapter, WeatherAdapterError
from ..domain.models import Coordinates, ForecastDay, WeatherReport, WeatherSnapshot
from ..settings import AppSettings
from .synthetic import generate_synthetic_snapshot

LOGGER = logging.getLogger(__name__)


class WeatherAcquisitionService:
    """Resolves a city to weather, degrading to synthetic data on any failure.

    Exactly one live attempt is made per call. Callers always get a result back;
    ``WeatherSnapshot.is_synthetic`` tells them whether it came from the provider.
    """

    def __init__(
        self,
        *,
        geocoder: GeocodingAdapter,
        weather: WeatherAdapter,
        forecast_enabled: bool = True,
        forecast_days: int = 5,
        rng: random.Random | None = None,
    ) -> None:
        self._geocoder = geocoder
        self._weather = weather
        self._forecast_enabled = forecast_enabled
        self._forecast_days = forecast_days
        self._rng = rng if rng is not None else random.Random()

    async def acquire(self, city: str) -> WeatherSnapshot:
        report = await self.acquire_report(city)
        return report.snapshot

    async def acquire_report(self, city: str) -> WeatherReport:
        city_name = city.strip()
        try:
            coordinates, snapshot = await self._acquire_live(city_name)
        except (GeocodingError, WeatherAdapterError) as exc:
            LOGGER.warning("Live weather for '%s' unavailable, using synthetic data: %s", city_name, exc)
            return self._synthetic_report(city_name)
        except Exception:
            LOGGER.exception("Live weather for '%s' failed unexpectedly, using synthetic data", city_name)
            return self._synthetic_report(city_name)

        forecast = await self._acquire_forecast(city_name, coordinates)
        LOGGER.info(
            "Live weather for '%s' at %.3f, %.3f retrieved (%d forecast days)",
            city_name,
            coordinates.latitude,
            coordinates.longitude,
            len(forecast),
        )
        return WeatherReport(snapshot=snapshot, forecast=forecast, coordinates=coordinates)

    async def _acquire_live(self, city: str) -> tuple[Coordinates, WeatherSnapshot]:
        candidates = await asyncio.to_thread(self._geocoder.geocode, city)
        if not candidates:
            raise GeocodingError(f"No geocoding results for '{city}'")

        # First candidate wins, even for ambiguous place names.
        coordinates = candidates[0]
        snapshot = await asyncio.to_thread(
            self._weather.get_current,
            coordinates.latitude,
            coordinates.longitude,
            city=city,
        )
        return coordinates, snapshot

    async def _acquire_forecast(self, city: str, coordinates: Coordinates) -> list[ForecastDay]:
        if not self._forecast_enabled:
            return []
        try:
            return await asyncio.to_thread(
                self._weather.get_forecast,
                coordinates.latitude,
                coordinates.longitude,
                days=self._forecast_days,
            )
        except WeatherAdapterError as exc:
            LOGGER.warning("Forecast for '%s' unavailable: %s", city, exc)
        except Exception:  # pragma: no cover - defensive fallback
            LOGGER.exception("Forecast for '%s' failed unexpectedly", city)
        return []

    def _synthetic_report(self, city: str) -> WeatherReport:
        return WeatherReport(snapshot=generate_synthetic_snapshot(city, self._rng))


def build_acquisition_service(settings: AppSettings) -> WeatherAcquisitionService:
    geocoding = settings.yaml.geocoding
    if geocoding.provider != "nominatim":
        raise ValueError(f"Unsupported geocoding provider: {geocoding.provider}")

    weather = settings.yaml.weather
    if weather.provider != "openweathermap":
        raise ValueError(f"Unsupported weather provider: {weather.provider}")

    return WeatherAcquisitionService(
        geocoder=NominatimGeocodingAdapter(
            search_url=geocoding.search_url,
            user_agent=geocoding.user_agent,
            timeout_seconds=geocoding.timeout_seconds,
        ),
        weather=OpenWeatherMapAdapter(
            api_key=settings.openweather_api_key,
            current_url=weather.current_url,
            forecast_url=weather.forecast_url,
            timeout_seconds=weather.timeout_seconds,
        ),
        forecast_enabled=weather.forecast_enabled,
        forecast_days=weather.forecast_days,
    )
