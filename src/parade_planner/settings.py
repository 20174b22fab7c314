from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[2]

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _validate_http_url(value: str, *, field_name: str) -> str:
    text = value.strip()
    parsed = urlparse(text)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"{field_name} must be an absolute http(s) URL")
    return text


class UiSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = "SpaceShield"
    subtitle: str = "Parade Planner"

    @field_validator("title", "subtitle")
    @classmethod
    def validate_non_empty_text(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("ui.title and ui.subtitle must not be empty")
        return text


class GeocodingSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    provider: Literal["nominatim"] = "nominatim"
    search_url: str = "https://nominatim.openstreetmap.org/search"
    user_agent: str = "parade-planner/0.1"
    timeout_seconds: float = Field(default=10, gt=0, le=120)

    @field_validator("search_url")
    @classmethod
    def validate_search_url(cls, value: str) -> str:
        return _validate_http_url(value, field_name="geocoding.search_url")

    @field_validator("user_agent")
    @classmethod
    def validate_user_agent(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("geocoding.user_agent must not be empty")
        return text


class WeatherSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    provider: Literal["openweathermap"] = "openweathermap"
    current_url: str = "https://api.openweathermap.org/data/2.5/weather"
    forecast_url: str = "https://api.openweathermap.org/data/2.5/forecast"
    forecast_enabled: bool = True
    forecast_days: int = Field(default=5, ge=1, le=5)
    timeout_seconds: float = Field(default=10, gt=0, le=120)

    @field_validator("current_url")
    @classmethod
    def validate_current_url(cls, value: str) -> str:
        return _validate_http_url(value, field_name="weather.current_url")

    @field_validator("forecast_url")
    @classmethod
    def validate_forecast_url(cls, value: str) -> str:
        return _validate_http_url(value, field_name="weather.forecast_url")


class PlannerYamlSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ui: UiSettings = Field(default_factory=UiSettings)
    geocoding: GeocodingSettings = Field(default_factory=GeocodingSettings)
    weather: WeatherSettings = Field(default_factory=WeatherSettings)


class EnvSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    planner_env: Literal["dev", "test", "prod"] = "dev"
    planner_config_path: Path = Path("config/planner.yaml")
    planner_log_level: str = "INFO"
    openweather_api_key: SecretStr | None = None

    @field_validator("planner_log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("openweather_api_key")
    @classmethod
    def validate_api_key(cls, value: SecretStr | None) -> SecretStr | None:
        if value is None:
            return None
        text = value.get_secret_value().strip()
        return SecretStr(text) if text else None


class AppSettings(BaseModel):
    env: EnvSettings
    yaml: PlannerYamlSettings
    project_root: Path
    config_path: Path

    @property
    def openweather_api_key(self) -> str | None:
        secret = self.env.openweather_api_key
        return secret.get_secret_value() if secret is not None else None


def _resolve_project_path(path: Path) -> Path:
    if path.is_absolute():
        return path
    return (PROJECT_ROOT / path).resolve()


def _load_yaml_settings(path: Path) -> PlannerYamlSettings:
    if not path.exists():
        raise FileNotFoundError(f"Planner config file not found: {path}")

    raw_config = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ValueError("Planner config must be a YAML mapping/object at the top level")
    return PlannerYamlSettings.model_validate(raw_config)


@lru_cache(maxsize=1)
def load_settings() -> AppSettings:
    env = EnvSettings()
    config_path = _resolve_project_path(env.planner_config_path)
    yaml_settings = _load_yaml_settings(config_path)
    return AppSettings(
        env=env,
        yaml=yaml_settings,
        project_root=PROJECT_ROOT,
        config_path=config_path,
    )
