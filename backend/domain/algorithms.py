"""Budget distribution algorithms.

Every algorithm turns a total impression budget into one integer allocation
per slot. The result always sums exactly to the budget; each algorithm owns
its own rounding correction.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from backend.domain.models import AlgorithmType
from backend.domain.patterns import DistributionPattern


DistributeFunction = Callable[[int, int, datetime, DistributionPattern], list[int]]

PEAK_EMPHASIS_EXPONENT = 1.5
FRONT_LOAD_DECAY_SPAN = 0.3
FRONT_LOAD_NORMALIZER = 0.1


@dataclass(frozen=True)
class DistributionAlgorithm:
    type: AlgorithmType
    name: str
    description: str
    distribute_fn: DistributeFunction

    def distribute(
        self,
        total_budget: int,
        slot_count: int,
        start_date: datetime,
        pattern: DistributionPattern,
    ) -> list[int]:
        _validate_distribution_inputs(total_budget, slot_count)
        return self.distribute_fn(total_budget, slot_count, start_date, pattern)


def _validate_distribution_inputs(total_budget: int, slot_count: int) -> None:
    if total_budget < 0:
        raise ValueError("total_budget must be >= 0")
    if slot_count <= 0:
        raise ValueError("slot_count must be > 0")


def _pattern_weights(
    pattern: DistributionPattern,
    slot_count: int,
    start_date: datetime,
) -> list[float]:
    return [pattern.weight(index, slot_count, start_date) for index in range(slot_count)]


def split_evenly(total: int, slot_count: int) -> list[int]:
    """Base + remainder split; the first ``total % slot_count`` slots get one extra."""
    base, remainder = divmod(total, slot_count)
    return [base + 1 if index < remainder else base for index in range(slot_count)]


def _equal_distribution(
    total_budget: int,
    slot_count: int,
    start_date: datetime,
    pattern: DistributionPattern,
) -> list[int]:
    return split_evenly(total_budget, slot_count)


def _weighted_distribution(
    total_budget: int,
    slot_count: int,
    start_date: datetime,
    pattern: DistributionPattern,
) -> list[int]:
    weights = _pattern_weights(pattern, slot_count, start_date)
    total_weight = sum(weights)
    distribution = [math.floor(total_budget * weight / total_weight) for weight in weights]

    shortfall = total_budget - sum(distribution)
    if shortfall > 0:
        distribution[-1] += shortfall
    return distribution


def _peak_hours_distribution(
    total_budget: int,
    slot_count: int,
    start_date: datetime,
    pattern: DistributionPattern,
) -> list[int]:
    raw_weights = _pattern_weights(pattern, slot_count, start_date)
    enhanced_weights = [weight**PEAK_EMPHASIS_EXPONENT for weight in raw_weights]
    total_enhanced = sum(enhanced_weights)
    distribution = [
        math.floor(total_budget * weight / total_enhanced)
        for weight in enhanced_weights
    ]

    shortfall = total_budget - sum(distribution)
    if shortfall > 0:
        # max() keeps the first index on ties.
        peak_index = max(range(slot_count), key=lambda index: raw_weights[index])
        distribution[peak_index] += shortfall
    return distribution


def _front_loaded_distribution(
    total_budget: int,
    slot_count: int,
    start_date: datetime,
    pattern: DistributionPattern,
) -> list[int]:
    distribution: list[int] = []
    remaining = total_budget

    for index in range(slot_count):
        if index == slot_count - 1:
            allocation = remaining
        else:
            decay = math.exp(-index / (slot_count * FRONT_LOAD_DECAY_SPAN))
            ratio = decay * pattern.weight(index, slot_count, start_date)
            ratio /= (slot_count - index) * FRONT_LOAD_NORMALIZER
            allocation = math.floor(remaining * ratio)
        allocation = max(0, min(allocation, remaining))
        distribution.append(allocation)
        remaining -= allocation

    return distribution


ALGORITHM_CATALOG: dict[AlgorithmType, DistributionAlgorithm] = {
    AlgorithmType.EQUAL: DistributionAlgorithm(
        type=AlgorithmType.EQUAL,
        name="Equal split",
        description="Same impression volume in every time slot",
        distribute_fn=_equal_distribution,
    ),
    AlgorithmType.WEIGHTED: DistributionAlgorithm(
        type=AlgorithmType.WEIGHTED,
        name="Weighted split",
        description="Volume proportional to the customer traffic pattern",
        distribute_fn=_weighted_distribution,
    ),
    AlgorithmType.PEAK_HOURS: DistributionAlgorithm(
        type=AlgorithmType.PEAK_HOURS,
        name="Peak concentration",
        description="Volume concentrated in the traffic peaks",
        distribute_fn=_peak_hours_distribution,
    ),
    AlgorithmType.FRONT_LOADED: DistributionAlgorithm(
        type=AlgorithmType.FRONT_LOADED,
        name="Front loading",
        description="Volume concentrated early in the campaign for fast delivery",
        distribute_fn=_front_loaded_distribution,
    ),
}


def resolve_algorithm_type(tag: str | AlgorithmType | None) -> Optional[AlgorithmType]:
    if tag is None:
        return None
    try:
        return AlgorithmType(tag)
    except ValueError:
        return None


def get_algorithm(tag: str | AlgorithmType | None) -> Optional[DistributionAlgorithm]:
    """Return the catalog algorithm for ``tag`` or ``None`` when it is unknown."""
    algorithm_type = resolve_algorithm_type(tag)
    if algorithm_type is None:
        return None
    return ALGORITHM_CATALOG[algorithm_type]


def available_algorithms() -> list[DistributionAlgorithm]:
    return [ALGORITHM_CATALOG[algorithm_type] for algorithm_type in AlgorithmType]
