"""Projection of time slots into chart-ready series."""

from __future__ import annotations

from typing import Optional, Sequence

from backend.domain.models import (
    REFERENCE_START_DATE,
    TOTAL_SLOTS,
    ChartData,
    PatternType,
    TimeSlot,
)
from backend.domain.patterns import get_pattern


def format_slot_label(slot: TimeSlot) -> str:
    return f"{slot.start_time:%b} {slot.start_time.day} {slot.start_time:%H:%M}"


def compute_customer_influx(
    slots: Sequence[TimeSlot],
    pattern_tag: str | PatternType | None,
) -> list[float]:
    """Pattern weight per slot scaled so the busiest slot reads 100."""
    pattern = get_pattern(pattern_tag)
    if pattern is None:
        return [1.0 for _ in slots]

    start_date = slots[0].start_time if slots else REFERENCE_START_DATE
    total_slots = len(slots)
    weights = [pattern.weight(index, total_slots, start_date) for index in range(total_slots)]
    max_weight = max(weights, default=0.0)
    if max_weight == 0:
        return [0.0 for _ in slots]
    return [weight / max_weight * 100.0 for weight in weights]


def generate_chart_data(
    slots: Sequence[TimeSlot],
    max_slots: int = TOTAL_SLOTS,
    pattern_tag: Optional[str | PatternType] = None,
) -> ChartData:
    display_slots = list(slots[:max_slots])
    return ChartData(
        labels=[format_slot_label(slot) for slot in display_slots],
        planned=[slot.planned for slot in display_slots],
        actual=[slot.actual for slot in display_slots],
        customer_influx=compute_customer_influx(display_slots, pattern_tag),
    )
