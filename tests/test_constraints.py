"""Tests for simulation config validation logic.

Covers every validation branch in validate_simulation_config().
"""

from __future__ import annotations

import pytest

from backend.domain.constraints import SimulationConfig, validate_simulation_config


def valid_config(**overrides) -> SimulationConfig:
    """Return a valid baseline SimulationConfig, optionally overriding fields."""
    defaults = {
        "total_budget": 1_000_000,
        "step_minutes": 10,
        "variation_factor": 0.2,
        "base_tick_interval_seconds": 0.5,
        "speed_choices": (0.5, 1.0, 2.0, 4.0),
        "default_speed": 1.0,
    }
    defaults.update(overrides)
    return SimulationConfig(**defaults)


# --- Baseline pass ---

def test_valid_config_passes() -> None:
    """A fully valid config must not raise."""
    validate_simulation_config(valid_config())


# --- total_budget ---

def test_total_budget_zero_raises() -> None:
    with pytest.raises(ValueError):
        validate_simulation_config(valid_config(total_budget=0))


def test_total_budget_negative_raises() -> None:
    with pytest.raises(ValueError):
        validate_simulation_config(valid_config(total_budget=-5))


# --- step_minutes ---

def test_step_minutes_zero_raises() -> None:
    with pytest.raises(ValueError):
        validate_simulation_config(valid_config(step_minutes=0))


# --- variation_factor ---

def test_variation_factor_below_zero_raises() -> None:
    with pytest.raises(ValueError):
        validate_simulation_config(valid_config(variation_factor=-0.01))


def test_variation_factor_above_one_raises() -> None:
    with pytest.raises(ValueError):
        validate_simulation_config(valid_config(variation_factor=1.01))


# --- base_tick_interval_seconds ---

def test_base_tick_interval_zero_raises() -> None:
    with pytest.raises(ValueError):
        validate_simulation_config(valid_config(base_tick_interval_seconds=0.0))


# --- speed_choices / default_speed ---

def test_empty_speed_choices_raises() -> None:
    with pytest.raises(ValueError):
        validate_simulation_config(valid_config(speed_choices=(), default_speed=1.0))


def test_non_positive_speed_choice_raises() -> None:
    with pytest.raises(ValueError):
        validate_simulation_config(valid_config(speed_choices=(0.0, 1.0)))


def test_default_speed_outside_choices_raises() -> None:
    with pytest.raises(ValueError):
        validate_simulation_config(valid_config(default_speed=3.0))


# --- Boundary values ---

def test_variation_factor_zero_passes() -> None:
    """No variation means delivery always matches plan."""
    validate_simulation_config(valid_config(variation_factor=0.0))


def test_variation_factor_one_passes() -> None:
    validate_simulation_config(valid_config(variation_factor=1.0))


def test_total_budget_one_passes() -> None:
    validate_simulation_config(valid_config(total_budget=1))
