"""
main.py: Headless launcher.

Runs one simulated day for every algorithm against the configured pattern and
prints a comparison table:

    python main.py
    python main.py peak_hours

This file does NOT contain simulation logic. See app.py for wiring and
backend/services for the engine.

For the interactive chart:
    streamlit run dashboard/app.py
"""

from __future__ import annotations

import sys

import pandas as pd

from app import create_app
from backend.controllers.simulation_controller import SimulationRequestError
from backend.utils.config import get_settings


def run_comparison(pattern: str) -> pd.DataFrame:
    """Simulate a full day per algorithm and collect the end-of-day stats."""
    controller = create_app()
    rows: list[dict[str, object]] = []
    for entry in controller.catalog().algorithms:
        controller.configure(algorithm=entry.type, pattern=pattern)
        snapshot = controller.run_to_completion()
        rows.append(
            {
                "algorithm": entry.type,
                "completed_slots": snapshot.stats.completed_slots,
                "total_actual": snapshot.stats.total_actual,
                "total_planned": snapshot.stats.total_planned,
                "achievement_rate": round(snapshot.stats.achievement_rate, 2),
                "committed_total": snapshot.stats.committed_total,
            }
        )
    return pd.DataFrame(rows).set_index("algorithm")


def main() -> int:
    settings = get_settings()
    pattern = sys.argv[1] if len(sys.argv) > 1 else settings.simulation_default_pattern

    print("=" * 60)
    print(f"  {settings.app_name} v{settings.app_version}")
    print("=" * 60)
    print(f"  Budget  : {settings.simulation_total_budget:,} impressions")
    print(f"  Start   : {settings.simulation_start_date}")
    print(f"  Pattern : {pattern}")
    print("=" * 60)

    try:
        frame = run_comparison(pattern)
    except SimulationRequestError as exc:
        print(f"  Error: {exc}")
        return 1

    print(frame.to_string())
    print("=" * 60)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
