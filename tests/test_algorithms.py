from __future__ import annotations

import math

import pytest

from backend.domain.algorithms import (
    ALGORITHM_CATALOG,
    available_algorithms,
    get_algorithm,
    split_evenly,
)
from backend.domain.models import REFERENCE_START_DATE, TOTAL_SLOTS, AlgorithmType, PatternType
from backend.domain.patterns import PATTERN_CATALOG, available_patterns


def _distribute(algorithm_type: AlgorithmType, pattern_type: PatternType, total: int) -> list[int]:
    return ALGORITHM_CATALOG[algorithm_type].distribute(
        total,
        TOTAL_SLOTS,
        REFERENCE_START_DATE,
        PATTERN_CATALOG[pattern_type],
    )


def test_catalog_covers_every_algorithm_type():
    assert set(ALGORITHM_CATALOG) == set(AlgorithmType)
    assert [algorithm.type for algorithm in available_algorithms()] == list(AlgorithmType)


def test_unknown_algorithm_tag_resolves_to_none():
    assert get_algorithm("round_robin") is None
    assert get_algorithm(None) is None
    assert get_algorithm("front_loaded") is ALGORITHM_CATALOG[AlgorithmType.FRONT_LOADED]


@pytest.mark.parametrize("total", [0, 1, 999, 1_000_000])
@pytest.mark.parametrize("pattern_type", list(PatternType), ids=lambda item: item.value)
@pytest.mark.parametrize("algorithm_type", list(AlgorithmType), ids=lambda item: item.value)
def test_distribution_conserves_budget_and_is_non_negative(algorithm_type, pattern_type, total):
    distribution = _distribute(algorithm_type, pattern_type, total)

    assert len(distribution) == TOTAL_SLOTS
    assert sum(distribution) == total
    assert all(isinstance(value, int) for value in distribution)
    assert all(value >= 0 for value in distribution)


def test_equal_distribution_ignores_pattern():
    expected = _distribute(AlgorithmType.EQUAL, PatternType.UNIFORM, 1000)
    for pattern_type in PatternType:
        assert _distribute(AlgorithmType.EQUAL, pattern_type, 1000) == expected


def test_equal_distribution_gives_remainder_to_first_slots():
    distribution = _distribute(AlgorithmType.EQUAL, PatternType.UNIFORM, 1000)
    assert distribution[:136] == [7] * 136
    assert distribution[136:] == [6] * 8


def test_weighted_differs_from_equal_under_peak_traffic():
    equal = _distribute(AlgorithmType.EQUAL, PatternType.PEAK_HOURS, 1000)
    weighted = _distribute(AlgorithmType.WEIGHTED, PatternType.PEAK_HOURS, 1000)
    assert equal != weighted


def test_weighted_distribution_puts_rounding_shortfall_on_last_slot():
    distribution = _distribute(AlgorithmType.WEIGHTED, PatternType.UNIFORM, 1000)
    assert distribution[:-1] == [6] * (TOTAL_SLOTS - 1)
    assert distribution[-1] == 6 + (1000 - 6 * TOTAL_SLOTS)


def test_weighted_distribution_follows_pattern_tiers():
    distribution = _distribute(AlgorithmType.WEIGHTED, PatternType.PEAK_HOURS, 1_000_000)
    off_peak, shoulder, peak = distribution[0], distribution[7 * 6], distribution[9 * 6]
    assert off_peak < shoulder < peak


def test_peak_hours_distribution_sends_shortfall_to_first_raw_peak():
    pattern = PATTERN_CATALOG[PatternType.PEAK_HOURS]
    raw_weights = [pattern.weight(index, TOTAL_SLOTS, REFERENCE_START_DATE) for index in range(TOTAL_SLOTS)]
    enhanced = [weight**1.5 for weight in raw_weights]
    floors = [math.floor(1000 * weight / sum(enhanced)) for weight in enhanced]

    distribution = _distribute(AlgorithmType.PEAK_HOURS, PatternType.PEAK_HOURS, 1000)

    first_peak_index = 9 * 6
    assert distribution[first_peak_index] == floors[first_peak_index] + (1000 - sum(floors))
    for index, value in enumerate(distribution):
        if index != first_peak_index:
            assert value == floors[index]


def test_peak_hours_distribution_ties_resolve_to_first_slot():
    distribution = _distribute(AlgorithmType.PEAK_HOURS, PatternType.UNIFORM, 999)
    assert distribution[0] == 6 + (999 - 6 * TOTAL_SLOTS)
    assert distribution[1:] == [6] * (TOTAL_SLOTS - 1)


def test_peak_hours_distribution_sharpens_weighted_split():
    weighted = _distribute(AlgorithmType.WEIGHTED, PatternType.PEAK_HOURS, 1_000_000)
    peak = _distribute(AlgorithmType.PEAK_HOURS, PatternType.PEAK_HOURS, 1_000_000)
    assert peak[0] < weighted[0]
    assert peak[10 * 6] > weighted[10 * 6]


def test_front_loaded_distribution_front_loads_budget():
    distribution = _distribute(AlgorithmType.FRONT_LOADED, PatternType.UNIFORM, 1000)
    assert distribution[0] == math.floor(1000 / (TOTAL_SLOTS * 0.1))
    assert sum(distribution[:72]) > sum(distribution[72:-1])


def test_front_loaded_last_slot_takes_everything_left():
    distribution = _distribute(AlgorithmType.FRONT_LOADED, PatternType.EVENING_PEAK, 1_000_000)
    assert distribution[-1] == 1_000_000 - sum(distribution[:-1])


@pytest.mark.parametrize("algorithm", available_algorithms(), ids=lambda algorithm: algorithm.type.value)
def test_single_slot_receives_whole_budget(algorithm):
    pattern = PATTERN_CATALOG[PatternType.MORNING_PEAK]
    assert algorithm.distribute(42, 1, REFERENCE_START_DATE, pattern) == [42]


def test_distribute_rejects_invalid_inputs():
    algorithm = ALGORITHM_CATALOG[AlgorithmType.EQUAL]
    pattern = PATTERN_CATALOG[PatternType.UNIFORM]
    with pytest.raises(ValueError):
        algorithm.distribute(-1, TOTAL_SLOTS, REFERENCE_START_DATE, pattern)
    with pytest.raises(ValueError):
        algorithm.distribute(100, 0, REFERENCE_START_DATE, pattern)


def test_split_evenly():
    assert split_evenly(10, 4) == [3, 3, 2, 2]
    assert split_evenly(0, 3) == [0, 0, 0]
    assert split_evenly(2, 5) == [1, 1, 0, 0, 0]
