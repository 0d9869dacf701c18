from __future__ import annotations

from datetime import datetime, timedelta

import numpy as np
import pytest

from backend.services.delivery_service import simulate_delivery
from backend.services.slot_service import build_time_slots


START_DATE = datetime(2025, 1, 1, 0, 0, 0)


class FixedGenerator:
    """Stand-in random source returning the same draw every time."""

    def __init__(self, value: float) -> None:
        self.value = value
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.value


def _build_slots(total: int = 1_000_000):
    return build_time_slots(START_DATE, total, "weighted", "peak_hours")


def test_only_ended_slots_are_completed():
    slots = _build_slots()
    current_time = START_DATE + timedelta(hours=3)

    updated = simulate_delivery(slots, current_time, rng=np.random.default_rng(1))

    completed = [slot for slot in updated if slot.completed]
    assert len(completed) == 18
    assert all(slot.end_time <= current_time for slot in completed)
    for original, result in zip(slots[18:], updated[18:]):
        assert result is original


def test_slot_ending_exactly_now_is_completed():
    slots = _build_slots()
    updated = simulate_delivery(slots, slots[0].end_time, rng=np.random.default_rng(2))
    assert updated[0].completed
    assert not updated[1].completed


def test_actual_delivery_is_bounded_by_plan():
    slots = _build_slots()
    updated = simulate_delivery(
        slots,
        START_DATE + timedelta(days=1),
        variation_factor=0.2,
        rng=np.random.default_rng(42),
    )

    assert all(slot.completed for slot in updated)
    for slot in updated:
        assert 0 <= slot.actual <= slot.planned
        assert slot.actual >= int(slot.planned * 0.8) - 1


def test_fixed_draw_gives_exact_delivery():
    slots = build_time_slots(START_DATE, 144 * 100, "equal", "uniform")
    rng = FixedGenerator(0.5)

    updated = simulate_delivery(slots, START_DATE + timedelta(minutes=30), variation_factor=0.2, rng=rng)

    assert [slot.actual for slot in updated[:3]] == [90, 90, 90]
    assert rng.calls == 3


def test_zero_variation_delivers_full_plan():
    slots = _build_slots()
    updated = simulate_delivery(slots, START_DATE + timedelta(hours=2), variation_factor=0.0)
    for slot in updated[:12]:
        assert slot.actual == slot.planned


def test_completed_slots_are_never_redrawn():
    slots = _build_slots()
    first_pass = simulate_delivery(slots, START_DATE + timedelta(hours=1), rng=np.random.default_rng(3))
    rng = FixedGenerator(0.0)
    second_pass = simulate_delivery(first_pass, START_DATE + timedelta(hours=2), rng=rng)

    assert second_pass[:6] == first_pass[:6]
    assert rng.calls == 6


def test_same_seed_same_delivery():
    slots = _build_slots()
    current_time = START_DATE + timedelta(hours=12)
    first = simulate_delivery(slots, current_time, rng=np.random.default_rng(99))
    second = simulate_delivery(slots, current_time, rng=np.random.default_rng(99))
    assert first == second


def test_input_sequence_is_left_untouched():
    slots = _build_slots()
    snapshot = list(slots)
    simulate_delivery(slots, START_DATE + timedelta(days=1), rng=np.random.default_rng(5))
    assert slots == snapshot
    assert not any(slot.completed for slot in slots)


def test_invalid_variation_factor_raises():
    with pytest.raises(ValueError):
        simulate_delivery(_build_slots(), START_DATE, variation_factor=1.5)
