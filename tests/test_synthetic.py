from __future__ import annotations

import random

import pytest

from parade_planner.acquisition.synthetic import SYNTHETIC_DESCRIPTIONS, generate_synthetic_snapshot


class _ConstantRandom(random.Random):
    def __init__(self, value: float) -> None:
        super().__init__(0)
        self._value = value

    def random(self) -> float:
        return self._value


def test_lowest_draw_gives_lower_bounds() -> None:
    snapshot = generate_synthetic_snapshot("Oslo", _ConstantRandom(0.0))

    assert snapshot.temperature_c == 15
    assert snapshot.wind_speed_ms == 0.0
    assert snapshot.precipitation_mm == 0.0
    assert snapshot.is_synthetic is True
    assert snapshot.city == "Oslo"


def test_highest_draw_stays_below_exclusive_bounds() -> None:
    snapshot = generate_synthetic_snapshot("Oslo", _ConstantRandom(0.9999999))

    assert snapshot.temperature_c == 35
    assert snapshot.wind_speed_ms == 14.9
    assert snapshot.precipitation_mm == 19.9


@pytest.mark.parametrize("seed", range(200))
def test_synthetic_values_stay_in_range(seed: int) -> None:
    snapshot = generate_synthetic_snapshot("Lima", random.Random(seed))

    assert 15 <= snapshot.temperature_c <= 35
    assert snapshot.temperature_c == int(snapshot.temperature_c)
    assert 0 <= snapshot.wind_speed_ms < 15
    assert round(snapshot.wind_speed_ms, 1) == snapshot.wind_speed_ms
    assert 0 <= snapshot.precipitation_mm < 20
    assert round(snapshot.precipitation_mm, 1) == snapshot.precipitation_mm
    assert 40 <= snapshot.humidity_percent <= 80
    assert snapshot.description in SYNTHETIC_DESCRIPTIONS
    assert snapshot.is_synthetic is True


def test_same_seed_gives_same_snapshot() -> None:
    first = generate_synthetic_snapshot("Lima", random.Random(42))
    second = generate_synthetic_snapshot("Lima", random.Random(42))

    assert first == second
