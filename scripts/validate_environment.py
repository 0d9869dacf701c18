#!/usr/bin/env python3
"""Validate local environment readiness for the delivery simulation."""

from __future__ import annotations

import importlib
import sys
from dataclasses import replace
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import numpy as np

from backend.domain.algorithms import available_algorithms
from backend.domain.models import REFERENCE_START_DATE, TOTAL_SLOTS
from backend.domain.patterns import available_patterns
from backend.services.redistribution_service import committed_total
from backend.services.simulation_service import SimulationService
from backend.services.slot_service import build_time_slots
from backend.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True

    # CHECK 1: Python version >= 3.11
    if sys.version_info >= (3, 11):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.11",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable
    package_specs = ["numpy", "pandas", "pydantic", "streamlit", "pytest"]
    import_errors: list[str] = []
    for module_name in package_specs:
        try:
            importlib.import_module(module_name)
        except Exception as exc:  # pragma: no cover - runtime guard
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 3: Every algorithm x pattern conserves the budget
    budget = 1_000_000
    failures: list[str] = []
    for algorithm in available_algorithms():
        for pattern in available_patterns():
            try:
                slots = build_time_slots(REFERENCE_START_DATE, budget, algorithm.type, pattern.type)
                planned = sum(slot.planned for slot in slots)
                if len(slots) != TOTAL_SLOTS or planned != budget:
                    failures.append(f"{algorithm.type.value}/{pattern.type.value}={planned}")
            except Exception as exc:
                failures.append(f"{algorithm.type.value}/{pattern.type.value} ({exc})")
    if failures:
        ok, line = _print_result("Budget conservation", False, ", ".join(failures))
    else:
        combinations = len(available_algorithms()) * len(available_patterns())
        ok, line = _print_result("Budget conservation", True, f": {combinations} combinations")
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 4: Full-day simulation keeps the global invariant
    try:
        settings = replace(get_settings(), simulation_total_budget=budget)
        service = SimulationService(settings=settings, rng=np.random.default_rng(7))
        state = service.start()
        while not state.is_finished:
            state = service.tick()
            has_open_slots = any(not slot.completed for slot in state.slots)
            total = committed_total(state.slots)
            if has_open_slots and total != budget:
                raise RuntimeError(
                    f"committed total {total} != {budget} at minute {state.elapsed_minutes}"
                )
        stats = service.stats()
        ok, line = _print_result(
            "Full-day simulation",
            True,
            f": achievement={stats.achievement_rate:.2f}%",
        )
    except Exception as exc:
        ok, line = _print_result("Full-day simulation", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    print(SEPARATOR_LINE)
    print(" Ad Delivery Twin Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
