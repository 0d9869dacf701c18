"""Bounded-random delivery simulation for ended time slots."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Optional, Sequence

import numpy as np

from backend.domain.models import TimeSlot
from backend.utils.logger import get_logger


logger = get_logger(__name__)


DEFAULT_VARIATION_FACTOR = 0.2


def simulate_delivery(
    slots: Sequence[TimeSlot],
    current_time: datetime,
    variation_factor: float = DEFAULT_VARIATION_FACTOR,
    rng: Optional[np.random.Generator] = None,
) -> list[TimeSlot]:
    """Complete every slot whose window ended by ``current_time``.

    Actual delivery is drawn in ``(planned * (1 - variation_factor), planned]``
    and never exceeds the slot's planned allocation. Completed and still-open
    slots are returned as-is.
    """
    if not 0.0 <= variation_factor <= 1.0:
        raise ValueError("variation_factor must be between 0 and 1")
    generator = rng if rng is not None else np.random.default_rng()

    updated: list[TimeSlot] = []
    newly_completed = 0
    for slot in slots:
        if slot.completed or current_time < slot.end_time:
            updated.append(slot)
            continue

        variation = float(generator.random()) * variation_factor
        actual = math.floor(slot.planned * (1.0 - variation))
        updated.append(slot.complete(max(0, min(actual, slot.planned))))
        newly_completed += 1

    if newly_completed:
        logger.debug(
            "Delivery simulated | current_time=%s | newly_completed=%s",
            current_time.isoformat(),
            newly_completed,
        )
    return updated
