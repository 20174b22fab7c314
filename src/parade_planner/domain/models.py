from __future__ import annotations

import datetime as dt
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Severity(str, Enum):
    OK = "ok"
    WARNING = "warning"


class MetricBand(str, Enum):
    NORMAL = "normal"
    ELEVATED = "elevated"
    SEVERE = "severe"
    COLD = "cold"
    HOT = "hot"
    DRY = "dry"


class Coordinates(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    label: str | None = None


class WeatherMetrics(BaseModel):
    """The four metrics the risk checks look at, plus a text description."""

    model_config = ConfigDict(extra="ignore")

    temperature_c: float
    wind_speed_ms: float = Field(ge=0)
    precipitation_mm: float = Field(default=0.0, ge=0)
    humidity_percent: int = Field(ge=0, le=100)
    description: str = ""


class WeatherSnapshot(WeatherMetrics):
    city: str
    is_synthetic: bool = False


class ForecastDay(WeatherMetrics):
    date: dt.date


class WeatherReport(BaseModel):
    model_config = ConfigDict(extra="ignore")

    snapshot: WeatherSnapshot
    forecast: list[ForecastDay] = Field(default_factory=list)
    coordinates: Coordinates | None = None

    @property
    def is_synthetic(self) -> bool:
        return self.snapshot.is_synthetic


class EventRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    city: str
    event_name: str
    date: dt.date

    @field_validator("city", "event_name")
    @classmethod
    def validate_non_empty_text(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("event request text fields must not be empty")
        return text


class RiskAssessment(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    message: str
    severity: Severity

    @property
    def is_ok(self) -> bool:
        return self.severity is Severity.OK


class EventPlan(BaseModel):
    model_config = ConfigDict(extra="ignore")

    event: EventRequest
    report: WeatherReport
    assessment: RiskAssessment
    bands: dict[str, MetricBand] = Field(default_factory=dict)
    event_day: ForecastDay | None = None
    event_day_assessment: RiskAssessment | None = None
