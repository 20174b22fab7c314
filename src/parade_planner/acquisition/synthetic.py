from __future__ import annotations

import math
import random

from ..domain.models import WeatherSnapshot

SYNTHETIC_DESCRIPTIONS = ("clear sky", "partly cloudy", "light rain", "sunny")

SYNTHETIC_TEMPERATURE_RANGE_C = (15, 35)
SYNTHETIC_WIND_MAX_MS = 15
SYNTHETIC_PRECIPITATION_MAX_MM = 20
SYNTHETIC_HUMIDITY_RANGE_PERCENT = (40, 80)


def _one_decimal_below(upper: float, rng: random.Random) -> float:
    # Truncate rather than round so the upper bound stays exclusive.
    return math.floor(rng.random() * upper * 10) / 10


def generate_synthetic_snapshot(city: str, rng: random.Random | None = None) -> WeatherSnapshot:
    """Build placeholder weather for ``city`` when live data is unavailable.

    Pass a seeded ``random.Random`` to get reproducible values.
    """
    source = rng if rng is not None else random.Random()
    low_temp, high_temp = SYNTHETIC_TEMPERATURE_RANGE_C
    low_humidity, high_humidity = SYNTHETIC_HUMIDITY_RANGE_PERCENT
    return WeatherSnapshot(
        city=city,
        temperature_c=float(round(source.uniform(low_temp, high_temp))),
        wind_speed_ms=_one_decimal_below(SYNTHETIC_WIND_MAX_MS, source),
        precipitation_mm=_one_decimal_below(SYNTHETIC_PRECIPITATION_MAX_MM, source),
        humidity_percent=source.randint(low_humidity, high_humidity),
        description=source.choice(SYNTHETIC_DESCRIPTIONS),
        is_synthetic=True,
    )
