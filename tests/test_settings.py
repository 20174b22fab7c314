from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from parade_planner.settings import EnvSettings, PlannerYamlSettings, load_settings


def test_load_settings_reads_yaml_and_env(planner_env, config_file: Path) -> None:
    settings = load_settings()

    assert settings.env.planner_env == "test"
    assert settings.env.planner_log_level == "DEBUG"
    assert settings.config_path == config_file
    assert settings.yaml.ui.title == "Test Planner"
    assert settings.yaml.weather.forecast_days == 3
    assert settings.yaml.weather.timeout_seconds == 2
    assert settings.yaml.geocoding.search_url == "https://nominatim.openstreetmap.org/search"
    assert settings.openweather_api_key is None


def test_api_key_comes_from_environment(planner_env, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENWEATHER_API_KEY", "  abc123  ")
    load_settings.cache_clear()

    assert load_settings().openweather_api_key == "abc123"


def test_missing_config_file_fails(planner_env, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("PLANNER_CONFIG_PATH", str(tmp_path / "missing.yaml"))
    load_settings.cache_clear()

    with pytest.raises(FileNotFoundError):
        load_settings()


def test_non_mapping_config_fails(planner_env, config_file: Path) -> None:
    config_file.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError, match="YAML mapping"):
        load_settings()


def test_empty_config_uses_defaults(planner_env, config_file: Path) -> None:
    config_file.write_text("", encoding="utf-8")

    settings = load_settings()

    assert settings.yaml == PlannerYamlSettings()
    assert settings.yaml.weather.forecast_enabled is True


@pytest.mark.parametrize(
    "raw",
    [
        {"weather": {"forecast_days": 0}},
        {"weather": {"forecast_days": 6}},
        {"weather": {"current_url": "ftp://example.com"}},
        {"geocoding": {"user_agent": "  "}},
        {"ui": {"title": ""}},
    ],
)
def test_invalid_yaml_values_are_rejected(raw) -> None:
    with pytest.raises(ValidationError):
        PlannerYamlSettings.model_validate(raw)


def test_unknown_log_level_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PLANNER_LOG_LEVEL", "chatty")

    with pytest.raises(ValidationError):
        EnvSettings()
