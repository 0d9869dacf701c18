"""Domain models for single-day impression delivery simulation."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum


SLOT_DURATION_MINUTES = 10
SLOTS_PER_HOUR = 60 // SLOT_DURATION_MINUTES
HORIZON_DAYS = 1
HORIZON_MINUTES = HORIZON_DAYS * 24 * 60
TOTAL_SLOTS = HORIZON_MINUTES // SLOT_DURATION_MINUTES
SLOT_DURATION = timedelta(minutes=SLOT_DURATION_MINUTES)

# Reference start used by pattern previews and projector fallbacks.
REFERENCE_START_DATE = datetime(2025, 1, 1, 0, 0, 0)


class PatternType(str, Enum):
    UNIFORM = "uniform"
    PEAK_HOURS = "peak_hours"
    MORNING_PEAK = "morning_peak"
    EVENING_PEAK = "evening_peak"
    WEEKEND = "weekend"


class AlgorithmType(str, Enum):
    EQUAL = "equal"
    WEIGHTED = "weighted"
    PEAK_HOURS = "peak_hours"
    FRONT_LOADED = "front_loaded"


@dataclass(frozen=True)
class TimeSlot:
    """One 10-minute delivery window.

    Instances are immutable; the simulator and the redistribution engine hand
    back new slots through `complete` and `with_planned`.
    """

    index: int
    start_time: datetime
    end_time: datetime
    planned: int
    actual: int = 0
    completed: bool = False

    def with_planned(self, planned: int) -> "TimeSlot":
        return replace(self, planned=planned)

    def complete(self, actual: int) -> "TimeSlot":
        return replace(self, actual=actual, completed=True)


@dataclass(frozen=True)
class CampaignConfig:
    start_date: datetime
    total_budget: int
    algorithm: AlgorithmType
    pattern: PatternType


@dataclass(frozen=True)
class ChartData:
    labels: list[str]
    planned: list[int]
    actual: list[int]
    customer_influx: list[float]


@dataclass(frozen=True)
class DeliveryStats:
    completed_slots: int
    total_slots: int
    total_actual: int
    total_planned: int
    achievement_rate: float
    committed_total: int

    def to_dict(self) -> dict[str, float | int]:
        return {
            "completed_slots": self.completed_slots,
            "total_slots": self.total_slots,
            "total_actual": self.total_actual,
            "total_planned": self.total_planned,
            "achievement_rate": self.achievement_rate,
            "committed_total": self.committed_total,
        }


@dataclass(frozen=True)
class SimulationState:
    run_id: str
    config: CampaignConfig
    slots: tuple[TimeSlot, ...]
    elapsed_minutes: int = 0
    is_playing: bool = False
    speed: float = 1.0

    @property
    def current_time(self) -> datetime:
        return self.config.start_date + timedelta(minutes=self.elapsed_minutes)

    @property
    def is_finished(self) -> bool:
        return self.elapsed_minutes >= HORIZON_MINUTES
