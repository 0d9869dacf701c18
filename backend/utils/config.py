"""Runtime settings for the delivery simulation."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


ENV_PREFIX = "ADTWIN_"


def _env(name: str, default: str) -> str:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def _env_optional_int(name: str) -> Optional[int]:
    raw = os.getenv(f"{ENV_PREFIX}{name}")
    if raw is None or not raw.strip():
        return None
    return int(raw)


def _env_float_tuple(name: str, default: str) -> tuple[float, ...]:
    raw = _env(name, default)
    return tuple(float(item) for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    simulation_start_date: str
    simulation_total_budget: int
    simulation_default_algorithm: str
    simulation_default_pattern: str
    simulation_step_minutes: int
    simulation_variation_factor: float
    simulation_base_tick_interval_seconds: float
    simulation_speed_choices: tuple[float, ...]
    simulation_default_speed: float
    simulation_random_seed: Optional[int]
    chart_max_slots: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process from ADTWIN_* environment variables."""
    return Settings(
        app_name=_env("APP_NAME", "Ad Delivery Twin"),
        app_version=_env("APP_VERSION", "0.1.0"),
        log_level=_env("LOG_LEVEL", "INFO"),
        simulation_start_date=_env("START_DATE", "2025-01-01T00:00:00"),
        simulation_total_budget=int(_env("TOTAL_BUDGET", "1000000")),
        simulation_default_algorithm=_env("DEFAULT_ALGORITHM", "equal"),
        simulation_default_pattern=_env("DEFAULT_PATTERN", "uniform"),
        simulation_step_minutes=int(_env("STEP_MINUTES", "10")),
        simulation_variation_factor=float(_env("VARIATION_FACTOR", "0.2")),
        simulation_base_tick_interval_seconds=float(_env("TICK_INTERVAL_SECONDS", "0.5")),
        simulation_speed_choices=_env_float_tuple("SPEED_CHOICES", "0.5,1,2,4"),
        simulation_default_speed=float(_env("DEFAULT_SPEED", "1")),
        simulation_random_seed=_env_optional_int("RANDOM_SEED"),
        chart_max_slots=int(_env("CHART_MAX_SLOTS", "144")),
    )
