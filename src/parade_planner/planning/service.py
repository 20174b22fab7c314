from __future__ import annotations

import logging
from datetime import date
from typing import Protocol

from pydantic import ValidationError

from ..domain.models import EventPlan, EventRequest, ForecastDay, WeatherReport
from ..risk.evaluator import classify_metrics, evaluate

LOGGER = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Please fill in all fields"
INVALID_DATE_MESSAGE = "Please enter a valid event date"


class EventRequestError(ValueError):
    """Raised when submitted form values cannot form an event request."""


class ReportSource(Protocol):
    async def acquire_report(self, city: str) -> WeatherReport:
        """Return live or synthetic weather for ``city``; never raises."""


def parse_event_request(
    city: str | None,
    event_name: str | None,
    event_date: str | date | None,
) -> EventRequest:
    values = (city, event_name, event_date)
    if any(value is None or (isinstance(value, str) and not value.strip()) for value in values):
        raise EventRequestError(MISSING_FIELDS_MESSAGE)

    if isinstance(event_date, str):
        try:
            event_date = date.fromisoformat(event_date.strip())
        except ValueError as exc:
            raise EventRequestError(INVALID_DATE_MESSAGE) from exc

    try:
        return EventRequest(city=city, event_name=event_name, date=event_date)
    except ValidationError as exc:
        raise EventRequestError(MISSING_FIELDS_MESSAGE) from exc


def _forecast_for(target: date, forecast: list[ForecastDay]) -> ForecastDay | None:
    for day in forecast:
        if day.date == target:
            return day
    return None


async def plan_event(request: EventRequest, source: ReportSource) -> EventPlan:
    report = await source.acquire_report(request.city)
    snapshot = report.snapshot
    event_day = _forecast_for(request.date, report.forecast)

    plan = EventPlan(
        event=request,
        report=report,
        assessment=evaluate(snapshot),
        bands=classify_metrics(snapshot),
        event_day=event_day,
        event_day_assessment=evaluate(event_day) if event_day is not None else None,
    )
    LOGGER.info(
        "Planned '%s' in %s on %s: %s (%s data)",
        request.event_name,
        request.city,
        request.date.isoformat(),
        plan.assessment.severity.value,
        "synthetic" if snapshot.is_synthetic else "live",
    )
    return plan
