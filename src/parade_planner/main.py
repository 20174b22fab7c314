from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, ConfigDict

from .acquisition.service import build_acquisition_service
from .domain.models import EventPlan, EventRequest, ForecastDay
from .planning.service import EventRequestError, parse_event_request, plan_event
from .risk.evaluator import classify_metrics, evaluate
from .settings import AppSettings, load_settings
from .state import FormValues, Notice, PlannerState, SubmissionInProgressError

LOGGER = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
WEB_DIR = BASE_DIR / "web"
TEMPLATES_DIR = WEB_DIR / "templates"
STATIC_DIR = WEB_DIR / "static"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

LIVE_SOURCE_LABEL = "Live data from OpenWeatherMap API"
SYNTHETIC_SOURCE_LABEL = "Showing sample data. Real API might be rate-limited."

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

WEATHER_ICONS = (
    ("rain", "🌧️"),
    ("cloud", "☁️"),
    ("clear", "☀️"),
    ("snow", "❄️"),
    ("wind", "💨"),
    ("storm", "⛈️"),
)
DEFAULT_WEATHER_ICON = "🌈"


class PlanRequestBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    city: str | None = None
    event_name: str | None = None
    date: str | None = None


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("parade_planner").setLevel(level)


def _get_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def _get_state(request: Request) -> PlannerState:
    return request.app.state.planner_state


def _set_state(request: Request, state: PlannerState) -> None:
    request.app.state.planner_state = state


def weather_icon(description: str) -> str:
    text = description.lower()
    for keyword, icon in WEATHER_ICONS:
        if keyword in text:
            return icon
    return DEFAULT_WEATHER_ICON


def _format_long_date(value: date) -> str:
    return f"{value:%A}, {value:%B} {value.day}, {value.year}"


def _format_number(value: float) -> str:
    return f"{value:g}"


def _build_forecast_rows(forecast: list[ForecastDay]) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for day in forecast:
        bands = classify_metrics(day)
        rows.append(
            {
                "weekday_label": f"{day.date:%a}",
                "date_label": f"{day.date:%b} {day.date.day}",
                "icon": weather_icon(day.description),
                "temperature_display": f"{round(day.temperature_c)}",
                "description": day.description,
                "wind_display": _format_number(day.wind_speed_ms),
                "precipitation_display": _format_number(day.precipitation_mm),
                "bands": {metric: band.value for metric, band in bands.items()},
                "is_ok": evaluate(day).is_ok,
            }
        )
    return rows


def _build_dashboard_context(plan: EventPlan | None) -> dict[str, Any]:
    context: dict[str, Any] = {
        "dashboard_available": False,
        "dashboard_city": None,
        "dashboard_event_name": None,
        "dashboard_date_label": None,
        "dashboard_icon": DEFAULT_WEATHER_ICON,
        "dashboard_description": None,
        "dashboard_temperature_display": None,
        "dashboard_wind_display": None,
        "dashboard_precipitation_display": None,
        "dashboard_humidity_display": None,
        "dashboard_bands": {},
        "dashboard_status_message": None,
        "dashboard_status_ok": False,
        "dashboard_is_synthetic": False,
        "dashboard_source_label": None,
        "dashboard_forecast": [],
        "dashboard_event_day_message": None,
        "dashboard_event_day_ok": False,
    }
    if plan is None:
        return context

    snapshot = plan.report.snapshot
    context.update(
        {
            "dashboard_available": True,
            "dashboard_city": snapshot.city,
            "dashboard_event_name": plan.event.event_name,
            "dashboard_date_label": _format_long_date(plan.event.date),
            "dashboard_icon": weather_icon(snapshot.description),
            "dashboard_description": snapshot.description,
            "dashboard_temperature_display": f"{round(snapshot.temperature_c)}",
            "dashboard_wind_display": _format_number(snapshot.wind_speed_ms),
            "dashboard_precipitation_display": _format_number(snapshot.precipitation_mm),
            "dashboard_humidity_display": f"{snapshot.humidity_percent}",
            "dashboard_bands": {metric: band.value for metric, band in plan.bands.items()},
            "dashboard_status_message": plan.assessment.message,
            "dashboard_status_ok": plan.assessment.is_ok,
            "dashboard_is_synthetic": snapshot.is_synthetic,
            "dashboard_source_label": SYNTHETIC_SOURCE_LABEL if snapshot.is_synthetic else LIVE_SOURCE_LABEL,
            "dashboard_forecast": _build_forecast_rows(plan.report.forecast),
        }
    )
    if plan.event_day_assessment is not None:
        context["dashboard_event_day_message"] = plan.event_day_assessment.message
        context["dashboard_event_day_ok"] = plan.event_day_assessment.is_ok
    return context


def _render_page(
    request: Request,
    *,
    state: PlannerState | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    settings = _get_settings(request)
    current = state or _get_state(request)
    return templates.TemplateResponse(
        request,
        "planner.html",
        {
            "title": settings.yaml.ui.title,
            "subtitle": settings.yaml.ui.subtitle,
            "form": current.form,
            "is_loading": current.is_loading,
            "notice": current.notice,
            **_build_dashboard_context(current.plan),
        },
        status_code=status_code,
    )


async def _run_submission(request: Request, values: FormValues, event: EventRequest) -> EventPlan:
    busy = _get_state(request).with_form(values).begin_submission()
    _set_state(request, busy)

    plan: EventPlan | None = None
    try:
        plan = await plan_event(event, request.app.state.acquisition_service)
    finally:
        current = _get_state(request)
        _set_state(request, current.complete(plan) if plan is not None else current.finish())
    return plan


@asynccontextmanager
async def lifespan(application: FastAPI):
    settings = load_settings()
    _configure_logging(settings.env.planner_log_level)
    if settings.openweather_api_key is None:
        LOGGER.warning("OPENWEATHER_API_KEY is not set; every plan will use synthetic weather")

    application.state.settings = settings
    application.state.acquisition_service = build_acquisition_service(settings)
    application.state.planner_state = PlannerState()
    application.state.started_at_utc = datetime.now(timezone.utc)
    LOGGER.info("Parade planner started in '%s' mode", settings.env.planner_env)
    yield


app = FastAPI(title="Parade Planner", version="0.1.0", lifespan=lifespan)
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")


@app.get("/", response_class=HTMLResponse)
async def planner_page(request: Request) -> HTMLResponse:
    return _render_page(request)


@app.post("/plan", response_class=HTMLResponse)
async def submit_plan(
    request: Request,
    city: str = Form(default=""),
    event_name: str = Form(default=""),
    date: str = Form(default=""),
) -> HTMLResponse:
    values = FormValues(city=city, event_name=event_name, date=date)
    state = _get_state(request)

    try:
        event = parse_event_request(city, event_name, date)
    except EventRequestError as exc:
        LOGGER.info("Rejected plan submission: %s", exc)
        if state.is_loading:
            return _render_page(request, state=state.with_form(values).reject(str(exc)), status_code=422)
        _set_state(request, state.with_form(values).reject(str(exc)))
        return _render_page(request, status_code=422)

    try:
        await _run_submission(request, values, event)
    except SubmissionInProgressError as exc:
        busy_view = PlannerState(
            form=values,
            is_loading=True,
            plan=state.plan,
            notice=Notice(level="error", message=str(exc)),
        )
        return _render_page(request, state=busy_view, status_code=409)
    return _render_page(request)


@app.post("/api/plan", response_class=JSONResponse)
async def api_plan(request: Request, body: PlanRequestBody) -> JSONResponse:
    try:
        event = parse_event_request(body.city, body.event_name, body.date)
    except EventRequestError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    values = FormValues(city=event.city, event_name=event.event_name, date=event.date.isoformat())
    try:
        plan = await _run_submission(request, values, event)
    except SubmissionInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return JSONResponse(plan.model_dump(mode="json"))


@app.get("/health", response_class=JSONResponse)
async def health(request: Request) -> JSONResponse:
    settings = _get_settings(request)
    state = _get_state(request)
    return JSONResponse(
        {
            "status": "ok",
            "service": "parade-planner",
            "environment": settings.env.planner_env,
            "weather_api_configured": settings.openweather_api_key is not None,
            "forecast_enabled": settings.yaml.weather.forecast_enabled,
            "is_loading": state.is_loading,
            "has_plan": state.plan is not None,
            "started_at_utc": request.app.state.started_at_utc.isoformat(),
            "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        }
    )
