from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Literal

from .domain.models import EventPlan

LIVE_DATA_NOTICE = "Real weather data retrieved successfully!"
SYNTHETIC_DATA_NOTICE = "Using sample data (API limit reached)"


@dataclass(frozen=True, slots=True)
class FormValues:
    city: str = ""
    event_name: str = ""
    date: str = ""


@dataclass(frozen=True, slots=True)
class Notice:
    level: Literal["success", "warning", "error"]
    message: str


class SubmissionInProgressError(RuntimeError):
    """Raised when a submission starts while another one is still in flight."""


@dataclass(frozen=True, slots=True)
class PlannerState:
    """Everything the page shows: form values, the busy flag and the last plan.

    The app owns one instance and swaps it for the value each transition
    returns; nothing mutates a state in place.
    """

    form: FormValues = field(default_factory=FormValues)
    is_loading: bool = False
    plan: EventPlan | None = None
    notice: Notice | None = None

    def with_form(self, values: FormValues) -> PlannerState:
        return replace(self, form=values)

    def begin_submission(self) -> PlannerState:
        if self.is_loading:
            raise SubmissionInProgressError("A weather request is already in flight")
        return replace(self, is_loading=True, notice=None)

    def complete(self, plan: EventPlan) -> PlannerState:
        if plan.report.is_synthetic:
            notice = Notice(level="warning", message=SYNTHETIC_DATA_NOTICE)
        else:
            notice = Notice(level="success", message=LIVE_DATA_NOTICE)
        return replace(self, is_loading=False, plan=plan, notice=notice)

    def reject(self, message: str) -> PlannerState:
        return replace(self, is_loading=False, notice=Notice(level="error", message=message))

    def finish(self) -> PlannerState:
        return replace(self, is_loading=False)
