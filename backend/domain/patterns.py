"""Customer-traffic patterns used to weight time slots.

Each pattern maps ``(slot_index, total_slots, start_date)`` to a positive
multiplier describing relative traffic intensity. Patterns are stateless and
looked up by `PatternType`; unknown tags resolve to ``None`` so callers decide
how to fail.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from backend.domain.models import (
    REFERENCE_START_DATE,
    SLOTS_PER_HOUR,
    TOTAL_SLOTS,
    PatternType,
)


WeightFunction = Callable[[int, int, datetime], float]


@dataclass(frozen=True)
class DistributionPattern:
    type: PatternType
    name: str
    description: str
    weight_fn: WeightFunction

    def weight(self, slot_index: int, total_slots: int, start_date: datetime) -> float:
        return self.weight_fn(slot_index, total_slots, start_date)


def hour_of_slot(slot_index: int) -> int:
    return (slot_index // SLOTS_PER_HOUR) % 24


def _uniform_weight(slot_index: int, total_slots: int, start_date: datetime) -> float:
    return 1.0


def _peak_hours_weight(slot_index: int, total_slots: int, start_date: datetime) -> float:
    hour = hour_of_slot(slot_index)
    if 9 <= hour <= 11 or 19 <= hour <= 21:
        return 2.0
    if 7 <= hour <= 8 or 12 <= hour <= 18 or 22 <= hour <= 23:
        return 1.2
    return 0.5


def _morning_peak_weight(slot_index: int, total_slots: int, start_date: datetime) -> float:
    hour = hour_of_slot(slot_index)
    if 7 <= hour <= 12:
        center, variance = 9.5, 2.0
        return 1.0 + 2.0 * math.exp(-((hour - center) ** 2) / (2.0 * variance))
    return 0.3


def _evening_peak_weight(slot_index: int, total_slots: int, start_date: datetime) -> float:
    hour = hour_of_slot(slot_index)
    if 17 <= hour <= 23:
        center, variance = 20.0, 3.0
        return 1.0 + 2.5 * math.exp(-((hour - center) ** 2) / (2.0 * variance))
    return 0.4


def _weekend_weight(slot_index: int, total_slots: int, start_date: datetime) -> float:
    hour = hour_of_slot(slot_index)
    if 10 <= hour <= 22:
        normalized = (hour - 10) / 12
        return 1.0 + 0.5 + 0.5 * math.cos(2.0 * math.pi * normalized + math.pi)
    return 0.3


PATTERN_CATALOG: dict[PatternType, DistributionPattern] = {
    PatternType.UNIFORM: DistributionPattern(
        type=PatternType.UNIFORM,
        name="Uniform",
        description="Identical customer traffic in every time slot",
        weight_fn=_uniform_weight,
    ),
    PatternType.PEAK_HOURS: DistributionPattern(
        type=PatternType.PEAK_HOURS,
        name="Peak hours",
        description="Traffic concentrated at 09-11 and 19-21",
        weight_fn=_peak_hours_weight,
    ),
    PatternType.MORNING_PEAK: DistributionPattern(
        type=PatternType.MORNING_PEAK,
        name="Morning peak",
        description="Traffic concentrated in the morning (07-12)",
        weight_fn=_morning_peak_weight,
    ),
    PatternType.EVENING_PEAK: DistributionPattern(
        type=PatternType.EVENING_PEAK,
        name="Evening peak",
        description="Traffic concentrated in the evening (17-23)",
        weight_fn=_evening_peak_weight,
    ),
    PatternType.WEEKEND: DistributionPattern(
        type=PatternType.WEEKEND,
        name="Weekend",
        description="Gentle curve from late morning to evening (10-22)",
        weight_fn=_weekend_weight,
    ),
}


def resolve_pattern_type(tag: str | PatternType | None) -> Optional[PatternType]:
    if tag is None:
        return None
    try:
        return PatternType(tag)
    except ValueError:
        return None


def get_pattern(tag: str | PatternType | None) -> Optional[DistributionPattern]:
    """Return the catalog pattern for ``tag`` or ``None`` when it is unknown."""
    pattern_type = resolve_pattern_type(tag)
    if pattern_type is None:
        return None
    return PATTERN_CATALOG[pattern_type]


def available_patterns() -> list[DistributionPattern]:
    return [PATTERN_CATALOG[pattern_type] for pattern_type in PatternType]


def generate_pattern_preview(
    pattern: DistributionPattern,
    total_slots: int = TOTAL_SLOTS,
) -> list[float]:
    """Evaluate ``pattern`` for every slot of a reference day."""
    return [
        pattern.weight(slot_index, total_slots, REFERENCE_START_DATE)
        for slot_index in range(total_slots)
    ]
