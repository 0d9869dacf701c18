"""Redistribution of undelivered budget across slots that are still open."""

from __future__ import annotations

from typing import Sequence

from backend.domain.algorithms import split_evenly
from backend.domain.models import TimeSlot
from backend.utils.logger import get_logger


logger = get_logger(__name__)


class BudgetInvariantError(Exception):
    """Raised when completed slots delivered more than the total budget."""


def committed_total(slots: Sequence[TimeSlot]) -> int:
    """Planned volume of open slots plus actual volume of completed ones."""
    return sum(slot.actual if slot.completed else slot.planned for slot in slots)


def redistribute_remaining(slots: Sequence[TimeSlot], total_budget: int) -> list[TimeSlot]:
    """Re-plan open slots so the whole horizon still adds up to ``total_budget``.

    Whatever completed slots did not deliver is spread evenly over the open
    slots in index order, earlier slots taking the remainder.
    """
    open_slots = [slot for slot in slots if not slot.completed]
    if not open_slots:
        return list(slots)

    delivered = sum(slot.actual for slot in slots if slot.completed)
    remaining = total_budget - delivered
    if remaining < 0:
        logger.error(
            "Budget invariant violated | total_budget=%s | delivered=%s | remaining=%s",
            total_budget,
            delivered,
            remaining,
        )
        raise BudgetInvariantError(
            f"completed slots delivered {delivered} impressions, "
            f"exceeding total budget {total_budget}"
        )

    shares = iter(split_evenly(remaining, len(open_slots)))
    redistributed = [
        slot if slot.completed else slot.with_planned(max(0, next(shares)))
        for slot in slots
    ]
    logger.debug(
        "Budget redistributed | remaining=%s | open_slots=%s",
        remaining,
        len(open_slots),
    )
    return redistributed
