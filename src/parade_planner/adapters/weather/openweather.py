from __future__ import annotations

import json
from collections import Counter
from datetime import date
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from pydantic import ValidationError

from ...domain.models import ForecastDay, WeatherSnapshot
from .base import WeatherAdapterError

OPENWEATHER_CURRENT_URL = "https://api.openweathermap.org/data/2.5/weather"
OPENWEATHER_FORECAST_URL = "https://api.openweathermap.org/data/2.5/forecast"
DEFAULT_TIMEOUT_SECONDS = 10
MAX_FORECAST_DAYS = 5


def _coerce_float(value: Any, *, field_name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise WeatherAdapterError(f"Invalid numeric value for {field_name}") from exc


def _coerce_int(value: Any, *, field_name: str) -> int:
    try:
        return int(round(float(value)))
    except (TypeError, ValueError) as exc:
        raise WeatherAdapterError(f"Invalid integer value for {field_name}") from exc


def _section(payload: dict[str, Any], name: str) -> dict[str, Any]:
    value = payload.get(name)
    if not isinstance(value, dict):
        raise WeatherAdapterError(f"OpenWeatherMap response did not include '{name}'")
    return value


def _rain_amount(payload: dict[str, Any], window: str) -> float:
    # Provider omits the rain block entirely when it is dry.
    rain = payload.get("rain")
    if not isinstance(rain, dict):
        return 0.0
    value = rain.get(window)
    if value is None:
        return 0.0
    return _coerce_float(value, field_name=f"rain.{window}")


def _description(payload: dict[str, Any]) -> str:
    weather = payload.get("weather")
    if not isinstance(weather, list) or not weather or not isinstance(weather[0], dict):
        raise WeatherAdapterError("OpenWeatherMap response did not include a weather description")
    description = weather[0].get("description")
    if not isinstance(description, str):
        raise WeatherAdapterError("OpenWeatherMap weather description was not text")
    return description.strip()


def _fetch_json(url: str, *, timeout: float) -> dict[str, Any]:
    request = Request(url, headers={"User-Agent": "parade-planner/0.1"})
    try:
        with urlopen(request, timeout=timeout) as response:
            payload = json.loads(response.read().decode("utf-8"))
    except HTTPError as exc:
        raise WeatherAdapterError(f"OpenWeatherMap returned HTTP {exc.code}") from exc
    except (URLError, TimeoutError, OSError, json.JSONDecodeError) as exc:
        raise WeatherAdapterError("Failed to fetch weather data from OpenWeatherMap") from exc

    if not isinstance(payload, dict):
        raise WeatherAdapterError("Unexpected OpenWeatherMap response shape")
    return payload


class OpenWeatherMapAdapter:
    def __init__(
        self,
        *,
        api_key: str | None,
        current_url: str = OPENWEATHER_CURRENT_URL,
        forecast_url: str = OPENWEATHER_FORECAST_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._api_key = api_key
        self._current_url = current_url
        self._forecast_url = forecast_url
        self._timeout_seconds = timeout_seconds

    def _build_url(self, base_url: str, lat: float, lon: float) -> str:
        if not self._api_key:
            raise WeatherAdapterError("OpenWeatherMap API key is not configured")
        params = {
            "lat": f"{lat:.5f}",
            "lon": f"{lon:.5f}",
            "units": "metric",
            "appid": self._api_key,
        }
        return f"{base_url}?{urlencode(params)}"

    def get_current(self, lat: float, lon: float, *, city: str) -> WeatherSnapshot:
        payload = _fetch_json(self._build_url(self._current_url, lat, lon), timeout=self._timeout_seconds)
        main = _section(payload, "main")
        wind = _section(payload, "wind")

        try:
            return WeatherSnapshot(
                city=city,
                temperature_c=_coerce_float(main.get("temp"), field_name="main.temp"),
                wind_speed_ms=_coerce_float(wind.get("speed"), field_name="wind.speed"),
                precipitation_mm=_rain_amount(payload, "1h"),
                humidity_percent=_coerce_int(main.get("humidity"), field_name="main.humidity"),
                description=_description(payload),
                is_synthetic=False,
            )
        except ValidationError as exc:
            raise WeatherAdapterError("OpenWeatherMap current conditions were out of range") from exc

    def get_forecast(self, lat: float, lon: float, *, days: int = MAX_FORECAST_DAYS) -> list[ForecastDay]:
        payload = _fetch_json(self._build_url(self._forecast_url, lat, lon), timeout=self._timeout_seconds)
        entries = payload.get("list")
        if not isinstance(entries, list):
            raise WeatherAdapterError("OpenWeatherMap forecast did not include a 'list' of entries")

        grouped: dict[date, list[dict[str, Any]]] = {}
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            raw_timestamp = entry.get("dt_txt")
            if not isinstance(raw_timestamp, str):
                raise WeatherAdapterError("OpenWeatherMap forecast entry was missing 'dt_txt'")
            try:
                entry_date = date.fromisoformat(raw_timestamp.split()[0])
            except (ValueError, IndexError) as exc:
                raise WeatherAdapterError("OpenWeatherMap forecast timestamp was invalid") from exc
            grouped.setdefault(entry_date, []).append(entry)

        forecast_days = min(max(days, 1), MAX_FORECAST_DAYS)
        return [
            self._aggregate_day(day, grouped[day])
            for day in sorted(grouped)[:forecast_days]
        ]

    @staticmethod
    def _aggregate_day(day: date, entries: list[dict[str, Any]]) -> ForecastDay:
        temps: list[float] = []
        winds: list[float] = []
        humidities: list[float] = []
        total_rain = 0.0
        descriptions: Counter[str] = Counter()

        for entry in entries:
            main = _section(entry, "main")
            wind = _section(entry, "wind")
            temps.append(_coerce_float(main.get("temp"), field_name="list[].main.temp"))
            humidities.append(_coerce_float(main.get("humidity"), field_name="list[].main.humidity"))
            winds.append(_coerce_float(wind.get("speed"), field_name="list[].wind.speed"))
            total_rain += _rain_amount(entry, "3h")
            descriptions[_description(entry)] += 1

        # Most frequent description; ties go to the alphabetically first one.
        dominant = sorted(descriptions.items(), key=lambda item: (-item[1], item[0]))[0][0]
        try:
            return ForecastDay(
                date=day,
                temperature_c=round(sum(temps) / len(temps), 1),
                wind_speed_ms=round(sum(winds) / len(winds), 1),
                precipitation_mm=round(total_rain, 1),
                humidity_percent=round(sum(humidities) / len(humidities)),
                description=dominant,
            )
        except ValidationError as exc:
            raise WeatherAdapterError("OpenWeatherMap forecast values were out of range") from exc
