"""Slot builder composing a distribution pattern and algorithm into time slots."""

from __future__ import annotations

from datetime import datetime

from backend.domain.algorithms import get_algorithm
from backend.domain.models import SLOT_DURATION, TOTAL_SLOTS, AlgorithmType, PatternType, TimeSlot
from backend.domain.patterns import get_pattern
from backend.utils.logger import get_logger


logger = get_logger(__name__)


class SlotBuildError(Exception):
    """Raised when the requested algorithm or pattern is not in the catalog."""

    def __init__(self, algorithm_tag: str, pattern_tag: str) -> None:
        self.algorithm_tag = algorithm_tag
        self.pattern_tag = pattern_tag
        super().__init__(
            f"Could not resolve algorithm '{algorithm_tag}' or pattern '{pattern_tag}'"
        )


def _tag_value(tag: str | AlgorithmType | PatternType) -> str:
    return tag.value if isinstance(tag, (AlgorithmType, PatternType)) else str(tag)


def build_time_slots(
    start_date: datetime,
    total_budget: int,
    algorithm_tag: str | AlgorithmType = AlgorithmType.EQUAL,
    pattern_tag: str | PatternType = PatternType.UNIFORM,
) -> list[TimeSlot]:
    """Split one day into 10-minute slots and plan ``total_budget`` across them."""
    algorithm = get_algorithm(algorithm_tag)
    pattern = get_pattern(pattern_tag)
    if algorithm is None or pattern is None:
        logger.warning(
            "Slot build rejected | algorithm=%s | pattern=%s",
            _tag_value(algorithm_tag),
            _tag_value(pattern_tag),
        )
        raise SlotBuildError(_tag_value(algorithm_tag), _tag_value(pattern_tag))

    distribution = algorithm.distribute(total_budget, TOTAL_SLOTS, start_date, pattern)

    slots: list[TimeSlot] = []
    for index in range(TOTAL_SLOTS):
        slot_start = start_date + index * SLOT_DURATION
        slots.append(
            TimeSlot(
                index=index,
                start_time=slot_start,
                end_time=slot_start + SLOT_DURATION,
                planned=distribution[index] if index < len(distribution) else 0,
            )
        )

    logger.debug(
        "Time slots built | algorithm=%s | pattern=%s | total_budget=%s | slots=%s",
        algorithm.type.value,
        pattern.type.value,
        total_budget,
        len(slots),
    )
    return slots
