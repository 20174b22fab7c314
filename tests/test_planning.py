from __future__ import annotations

import asyncio
from datetime import date

import pytest

from conftest import FakeReportSource, make_forecast_day, make_snapshot
from parade_planner.domain.models import MetricBand, Severity, WeatherReport
from parade_planner.planning.service import (
    INVALID_DATE_MESSAGE,
    MISSING_FIELDS_MESSAGE,
    EventRequestError,
    parse_event_request,
    plan_event,
)


def test_parse_event_request_strips_and_parses() -> None:
    request = parse_event_request("  Tokyo ", " Spring Parade ", "2025-04-05")

    assert request.city == "Tokyo"
    assert request.event_name == "Spring Parade"
    assert request.date == date(2025, 4, 5)


def test_past_dates_are_accepted() -> None:
    request = parse_event_request("Tokyo", "Retro Parade", "1999-12-31")

    assert request.date == date(1999, 12, 31)


@pytest.mark.parametrize(
    ("city", "event_name", "event_date"),
    [
        ("", "Parade", "2025-04-05"),
        ("Tokyo", "   ", "2025-04-05"),
        ("Tokyo", "Parade", ""),
        (None, "Parade", "2025-04-05"),
    ],
)
def test_missing_fields_are_rejected(city, event_name, event_date) -> None:
    with pytest.raises(EventRequestError, match=MISSING_FIELDS_MESSAGE):
        parse_event_request(city, event_name, event_date)


def test_unparseable_date_is_rejected() -> None:
    with pytest.raises(EventRequestError, match=INVALID_DATE_MESSAGE):
        parse_event_request("Tokyo", "Parade", "next friday")


def test_event_request_is_immutable() -> None:
    request = parse_event_request("Tokyo", "Parade", date(2025, 4, 5))

    with pytest.raises(Exception):
        request.city = "Osaka"


def test_plan_event_combines_assessment_and_bands() -> None:
    source = FakeReportSource(
        WeatherReport(snapshot=make_snapshot(temperature_c=40, wind_speed_ms=35, precipitation_mm=15, humidity_percent=90))
    )
    request = parse_event_request("Seville", "Feria", "2025-04-05")

    plan = asyncio.run(plan_event(request, source))

    assert source.cities == ["Seville"]
    assert plan.event == request
    assert plan.assessment.severity is Severity.WARNING
    assert plan.assessment.message == (
        "Be aware of high wind, rain, extreme temperature, high humidity conditions"
    )
    assert plan.bands == {
        "temperature": MetricBand.HOT,
        "wind": MetricBand.ELEVATED,
        "precipitation": MetricBand.ELEVATED,
        "humidity": MetricBand.ELEVATED,
    }
    assert plan.event_day is None
    assert plan.event_day_assessment is None


def test_plan_event_picks_forecast_for_event_date() -> None:
    forecast = [
        make_forecast_day(date(2025, 4, 4)),
        make_forecast_day(date(2025, 4, 5), precipitation_mm=14.0, description="moderate rain"),
    ]
    source = FakeReportSource(WeatherReport(snapshot=make_snapshot(), forecast=forecast))
    request = parse_event_request("Tokyo", "Parade", "2025-04-05")

    plan = asyncio.run(plan_event(request, source))

    assert plan.assessment.severity is Severity.OK
    assert plan.event_day == forecast[1]
    assert plan.event_day_assessment.message == "Be aware of rain conditions"


def test_synthetic_flag_reaches_the_plan() -> None:
    source = FakeReportSource(WeatherReport(snapshot=make_snapshot(is_synthetic=True)))
    request = parse_event_request("Tokyo", "Parade", "2025-04-05")

    plan = asyncio.run(plan_event(request, source))

    assert plan.report.snapshot.is_synthetic is True
    assert plan.model_dump(mode="json")["report"]["snapshot"]["is_synthetic"] is True
