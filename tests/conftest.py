from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from parade_planner.domain.models import Coordinates, ForecastDay, WeatherReport, WeatherSnapshot
from parade_planner.settings import load_settings

CONFIG_TEXT = """
ui:
  title: "Test Planner"
  subtitle: "Parade Planner"
weather:
  forecast_enabled: true
  forecast_days: 3
  timeout_seconds: 2
geocoding:
  timeout_seconds: 2
"""


class FakeGeocoder:
    def __init__(self, candidates=None, error: Exception | None = None) -> None:
        self.candidates = candidates if candidates is not None else []
        self.error = error
        self.queries: list[str] = []

    def geocode(self, query: str) -> list[Coordinates]:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return list(self.candidates)


class FakeWeather:
    def __init__(
        self,
        *,
        current: WeatherSnapshot | None = None,
        forecast: list[ForecastDay] | None = None,
        current_error: Exception | None = None,
        forecast_error: Exception | None = None,
    ) -> None:
        self.current = current
        self.forecast = forecast or []
        self.current_error = current_error
        self.forecast_error = forecast_error
        self.current_calls: list[tuple[float, float, str]] = []
        self.forecast_calls: list[tuple[float, float, int]] = []

    def get_current(self, lat: float, lon: float, *, city: str) -> WeatherSnapshot:
        self.current_calls.append((lat, lon, city))
        if self.current_error is not None:
            raise self.current_error
        return self.current.model_copy(update={"city": city})

    def get_forecast(self, lat: float, lon: float, *, days: int = 5) -> list[ForecastDay]:
        self.forecast_calls.append((lat, lon, days))
        if self.forecast_error is not None:
            raise self.forecast_error
        return self.forecast[:days]


class FakeReportSource:
    def __init__(self, report: WeatherReport) -> None:
        self.report = report
        self.cities: list[str] = []

    async def acquire_report(self, city: str) -> WeatherReport:
        self.cities.append(city)
        return self.report.model_copy(
            update={"snapshot": self.report.snapshot.model_copy(update={"city": city})}
        )


def make_snapshot(
    *,
    temperature_c: float = 20,
    wind_speed_ms: float = 10,
    precipitation_mm: float = 2,
    humidity_percent: int = 50,
    description: str = "clear sky",
    city: str = "London",
    is_synthetic: bool = False,
) -> WeatherSnapshot:
    return WeatherSnapshot(
        city=city,
        temperature_c=temperature_c,
        wind_speed_ms=wind_speed_ms,
        precipitation_mm=precipitation_mm,
        humidity_percent=humidity_percent,
        description=description,
        is_synthetic=is_synthetic,
    )


def make_forecast_day(day: date, **overrides) -> ForecastDay:
    values = {
        "date": day,
        "temperature_c": 18.5,
        "wind_speed_ms": 4.2,
        "precipitation_mm": 0.0,
        "humidity_percent": 60,
        "description": "few clouds",
    }
    values.update(overrides)
    return ForecastDay(**values)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "planner.yaml"
    path.write_text(CONFIG_TEXT, encoding="utf-8")
    return path


@pytest.fixture
def planner_env(monkeypatch: pytest.MonkeyPatch, config_file: Path):
    monkeypatch.setenv("PLANNER_ENV", "test")
    monkeypatch.setenv("PLANNER_CONFIG_PATH", str(config_file))
    monkeypatch.setenv("PLANNER_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("OPENWEATHER_API_KEY", "")
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()
