"""Domain-level validation rules for the simulation driving loop."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SimulationConfig:
    total_budget: int
    step_minutes: int
    variation_factor: float
    base_tick_interval_seconds: float
    speed_choices: tuple[float, ...]
    default_speed: float


def validate_simulation_config(config: SimulationConfig) -> None:
    if config.total_budget <= 0:
        raise ValueError("total_budget must be > 0")
    if config.step_minutes <= 0:
        raise ValueError("step_minutes must be > 0")
    if not 0.0 <= config.variation_factor <= 1.0:
        raise ValueError("variation_factor must be between 0 and 1")
    if config.base_tick_interval_seconds <= 0.0:
        raise ValueError("base_tick_interval_seconds must be > 0")
    if not config.speed_choices:
        raise ValueError("speed_choices must not be empty")
    if any(speed <= 0.0 for speed in config.speed_choices):
        raise ValueError("speed_choices must all be > 0")
    if config.default_speed not in config.speed_choices:
        raise ValueError("default_speed must be one of speed_choices")
