"""Driving loop for the single-day delivery simulation.

The service owns the slot sequence between ticks. Each tick advances the
simulated clock by a fixed step, completes ended slots, redistributes the
shortfall, and only then commits the new state. Engine functions never mutate
the committed snapshot, so readers always see a whole tick or none of it.
"""

from __future__ import annotations

import time
from dataclasses import replace
from datetime import datetime
from threading import RLock
from typing import Callable, Optional
from uuid import uuid4

import numpy as np

from backend.domain.algorithms import resolve_algorithm_type
from backend.domain.constraints import SimulationConfig, validate_simulation_config
from backend.domain.models import (
    CampaignConfig,
    ChartData,
    DeliveryStats,
    SimulationState,
)
from backend.domain.patterns import resolve_pattern_type
from backend.services.chart_service import generate_chart_data
from backend.services.delivery_service import simulate_delivery
from backend.services.redistribution_service import committed_total, redistribute_remaining
from backend.services.slot_service import SlotBuildError, build_time_slots
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


class SimulationStateError(Exception):
    """Raised when the driving loop is used out of order."""


def compute_delivery_stats(state: SimulationState) -> DeliveryStats:
    completed = [slot for slot in state.slots if slot.completed]
    total_actual = sum(slot.actual for slot in completed)
    total_planned = sum(slot.planned for slot in completed)
    achievement_rate = (
        float(total_actual / total_planned * 100.0)
        if total_planned > 0
        else 0.0
    )
    return DeliveryStats(
        completed_slots=len(completed),
        total_slots=len(state.slots),
        total_actual=total_actual,
        total_planned=total_planned,
        achievement_rate=achievement_rate,
        committed_total=committed_total(state.slots),
    )


class SimulationService:
    """Runs build -> (deliver -> redistribute)* over one simulated day."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._config = SimulationConfig(
            total_budget=self._settings.simulation_total_budget,
            step_minutes=self._settings.simulation_step_minutes,
            variation_factor=self._settings.simulation_variation_factor,
            base_tick_interval_seconds=self._settings.simulation_base_tick_interval_seconds,
            speed_choices=tuple(self._settings.simulation_speed_choices),
            default_speed=self._settings.simulation_default_speed,
        )
        validate_simulation_config(self._config)
        self._rng = rng if rng is not None else np.random.default_rng(
            self._settings.simulation_random_seed
        )
        self._lock = RLock()
        self._state: SimulationState | None = None

    @property
    def speed_choices(self) -> tuple[float, ...]:
        return self._config.speed_choices

    @property
    def state(self) -> SimulationState:
        with self._lock:
            if self._state is None:
                raise SimulationStateError("Simulation has not been started")
            return self._state

    def default_campaign(self) -> CampaignConfig:
        algorithm = resolve_algorithm_type(self._settings.simulation_default_algorithm)
        pattern = resolve_pattern_type(self._settings.simulation_default_pattern)
        if algorithm is None or pattern is None:
            raise SlotBuildError(
                self._settings.simulation_default_algorithm,
                self._settings.simulation_default_pattern,
            )
        return CampaignConfig(
            start_date=datetime.fromisoformat(self._settings.simulation_start_date),
            total_budget=self._config.total_budget,
            algorithm=algorithm,
            pattern=pattern,
        )

    def _build_state(self, config: CampaignConfig, speed: float) -> SimulationState:
        slots = build_time_slots(
            start_date=config.start_date,
            total_budget=config.total_budget,
            algorithm_tag=config.algorithm,
            pattern_tag=config.pattern,
        )
        return SimulationState(
            run_id=str(uuid4()),
            config=config,
            slots=tuple(slots),
            speed=speed,
        )

    def start(self, config: Optional[CampaignConfig] = None) -> SimulationState:
        campaign = config or self.default_campaign()
        if campaign.total_budget <= 0:
            raise ValueError("total_budget must be > 0")
        with self._lock:
            speed = self._state.speed if self._state is not None else self._config.default_speed
            self._state = self._build_state(campaign, speed)
            logger.info(
                (
                    "Simulation started | run_id=%s | algorithm=%s | pattern=%s | "
                    "total_budget=%s | start_date=%s"
                ),
                self._state.run_id,
                campaign.algorithm.value,
                campaign.pattern.value,
                campaign.total_budget,
                campaign.start_date.isoformat(),
            )
            return self._state

    def reset(self) -> SimulationState:
        with self._lock:
            current = self.state
            self._state = self._build_state(current.config, current.speed)
            logger.info("Simulation reset | run_id=%s", self._state.run_id)
            return self._state

    def configure(
        self,
        *,
        algorithm_tag: Optional[str] = None,
        pattern_tag: Optional[str] = None,
    ) -> SimulationState:
        """Switch algorithm and/or pattern and rebuild the plan from scratch."""
        with self._lock:
            current = self.state
            if current.is_playing:
                raise SimulationStateError("Algorithm and pattern cannot change during playback")

            requested_algorithm = algorithm_tag or current.config.algorithm.value
            requested_pattern = pattern_tag or current.config.pattern.value
            algorithm = resolve_algorithm_type(requested_algorithm)
            pattern = resolve_pattern_type(requested_pattern)
            if algorithm is None or pattern is None:
                raise SlotBuildError(requested_algorithm, requested_pattern)

            campaign = replace(current.config, algorithm=algorithm, pattern=pattern)
            self._state = self._build_state(campaign, current.speed)
            logger.info(
                "Simulation reconfigured | run_id=%s | algorithm=%s | pattern=%s",
                self._state.run_id,
                algorithm.value,
                pattern.value,
            )
            return self._state

    def set_speed(self, speed: float) -> SimulationState:
        if speed not in self._config.speed_choices:
            raise SimulationStateError(
                f"speed={speed} is not one of {list(self._config.speed_choices)}"
            )
        with self._lock:
            self._state = replace(self.state, speed=float(speed))
            return self._state

    def tick_interval_seconds(self, speed: Optional[float] = None) -> float:
        """Wall-clock delay between ticks; speed never changes the simulated step."""
        effective_speed = speed if speed is not None else self.state.speed
        return self._config.base_tick_interval_seconds / effective_speed

    def tick(self) -> SimulationState:
        with self._lock:
            current = self.state
            if current.is_finished:
                return current

            next_state = replace(
                current,
                elapsed_minutes=current.elapsed_minutes + self._config.step_minutes,
            )
            slots = simulate_delivery(
                current.slots,
                next_state.current_time,
                variation_factor=self._config.variation_factor,
                rng=self._rng,
            )
            slots = redistribute_remaining(slots, current.config.total_budget)
            next_state = replace(
                next_state,
                slots=tuple(slots),
                is_playing=current.is_playing and not next_state.is_finished,
            )
            self._state = next_state

        logger.debug(
            "Simulation tick | run_id=%s | elapsed_minutes=%s | completed_slots=%s",
            next_state.run_id,
            next_state.elapsed_minutes,
            sum(1 for slot in next_state.slots if slot.completed),
        )
        if next_state.is_finished:
            stats = compute_delivery_stats(next_state)
            logger.info(
                (
                    "Simulation finished | run_id=%s | total_actual=%s | "
                    "achievement_rate=%.2f | committed_total=%s"
                ),
                next_state.run_id,
                stats.total_actual,
                stats.achievement_rate,
                stats.committed_total,
            )
        return next_state

    def stop(self) -> SimulationState:
        with self._lock:
            self._state = replace(self.state, is_playing=False)
            return self._state

    pause = stop

    def resume(self) -> SimulationState:
        """Mark the run as playing; an external timer is expected to call `tick`."""
        with self._lock:
            current = self.state
            if current.is_finished:
                return current
            self._state = replace(current, is_playing=True)
            return self._state

    def play(
        self,
        *,
        sleep: Callable[[float], None] = time.sleep,
        on_tick: Optional[Callable[[SimulationState], None]] = None,
        max_ticks: Optional[int] = None,
    ) -> SimulationState:
        """Tick until the day ends, `stop` is called, or ``max_ticks`` run.

        The next tick is scheduled only after the previous one committed, so
        ticks never overlap.
        """
        self.resume()
        ticks = 0
        while self.state.is_playing:
            state = self.tick()
            ticks += 1
            if on_tick is not None:
                on_tick(state)
            if max_ticks is not None and ticks >= max_ticks:
                self.stop()
                break
            if self.state.is_playing:
                sleep(self.tick_interval_seconds())
        return self.state

    def run_to_completion(self) -> SimulationState:
        state = self.state
        while not state.is_finished:
            state = self.tick()
        return state

    def stats(self) -> DeliveryStats:
        return compute_delivery_stats(self.state)

    def chart_data(self, max_slots: Optional[int] = None) -> ChartData:
        state = self.state
        return generate_chart_data(
            state.slots,
            max_slots=max_slots if max_slots is not None else self._settings.chart_max_slots,
            pattern_tag=state.config.pattern,
        )
