"""Event-safety checks over weather metrics.

Two independent threshold tables live here. ``AGGREGATE_CHECKS`` drives the
single OK/WARNING status message; ``DISPLAY_BANDS`` colors each metric on the
dashboard. Their wind and precipitation cut-offs differ.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..domain.models import MetricBand, RiskAssessment, Severity, WeatherMetrics

PERFECT_CONDITIONS_MESSAGE = "Perfect conditions for your parade!"

METRIC_FIELDS = {
    "temperature": "temperature_c",
    "wind": "wind_speed_ms",
    "precipitation": "precipitation_mm",
    "humidity": "humidity_percent",
}


@dataclass(frozen=True, slots=True)
class AggregateCheck:
    label: str
    metric: str
    above: float | None = None
    below: float | None = None

    def is_triggered(self, value: float) -> bool:
        if self.above is not None and value > self.above:
            return True
        return self.below is not None and value < self.below


@dataclass(frozen=True, slots=True)
class BandRule:
    band: MetricBand
    above: float | None = None
    below: float | None = None

    def matches(self, value: float) -> bool:
        if self.above is not None:
            return value > self.above
        if self.below is not None:
            return value < self.below
        return False


# Order matters: labels appear in the status message in this order.
AGGREGATE_CHECKS: tuple[AggregateCheck, ...] = (
    AggregateCheck(label="high wind", metric="wind", above=30),
    AggregateCheck(label="rain", metric="precipitation", above=10),
    AggregateCheck(label="extreme temperature", metric="temperature", below=5, above=35),
    AggregateCheck(label="high humidity", metric="humidity", above=80),
)

# First matching rule wins; no match means NORMAL.
DISPLAY_BANDS: dict[str, tuple[BandRule, ...]] = {
    "temperature": (
        BandRule(MetricBand.COLD, below=5),
        BandRule(MetricBand.HOT, above=35),
    ),
    "wind": (
        BandRule(MetricBand.SEVERE, above=50),
        BandRule(MetricBand.ELEVATED, above=30),
    ),
    "precipitation": (
        BandRule(MetricBand.SEVERE, above=50),
        BandRule(MetricBand.ELEVATED, above=10),
    ),
    "humidity": (
        BandRule(MetricBand.ELEVATED, above=80),
        BandRule(MetricBand.DRY, below=30),
    ),
}


def _metric_value(metrics: WeatherMetrics, metric: str) -> float:
    return float(getattr(metrics, METRIC_FIELDS[metric]))


def triggered_labels(metrics: WeatherMetrics) -> list[str]:
    return [
        check.label
        for check in AGGREGATE_CHECKS
        if check.is_triggered(_metric_value(metrics, check.metric))
    ]


def evaluate(metrics: WeatherMetrics) -> RiskAssessment:
    """Summarize whether the weather is fit for an outdoor event."""
    labels = triggered_labels(metrics)
    if not labels:
        return RiskAssessment(message=PERFECT_CONDITIONS_MESSAGE, severity=Severity.OK)
    return RiskAssessment(
        message=f"Be aware of {', '.join(labels)} conditions",
        severity=Severity.WARNING,
    )


def classify_metric(metric: str, value: float) -> MetricBand:
    rules = DISPLAY_BANDS.get(metric)
    if rules is None:
        raise ValueError(f"Unknown weather metric: {metric}")
    for rule in rules:
        if rule.matches(value):
            return rule.band
    return MetricBand.NORMAL


def classify_metrics(metrics: WeatherMetrics) -> dict[str, MetricBand]:
    return {metric: classify_metric(metric, _metric_value(metrics, metric)) for metric in DISPLAY_BANDS}
