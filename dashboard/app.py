"""Streamlit dashboard for the impression delivery simulation."""

from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd
import streamlit as st

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from backend.controllers.simulation_controller import (
    CatalogResponse,
    SimulationController,
    SimulationRequestError,
    SimulationSnapshotResponse,
)
from backend.services.simulation_service import SimulationService
from backend.utils.config import get_settings

st.set_page_config(
    page_title="Ad Delivery Twin",
    page_icon="📊",
    layout="wide",
)


# ==========================================
# Controller session helpers
# ==========================================
def get_controller() -> SimulationController:
    """One controller per browser session, kept across Streamlit reruns."""
    controller: Optional[SimulationController] = st.session_state.get("controller")
    if controller is None:
        settings = get_settings()
        service = SimulationService(
            settings=settings,
            rng=np.random.default_rng(settings.simulation_random_seed),
        )
        controller = SimulationController(service=service)
        controller.start_campaign()
        st.session_state["controller"] = controller
    return controller


def build_chart_frame(snapshot: SimulationSnapshotResponse) -> pd.DataFrame:
    chart = snapshot.chart
    frame = pd.DataFrame(
        {
            "planned": chart.planned,
            "actual": chart.actual,
            "customer_influx": chart.customer_influx,
        },
        index=pd.Index(chart.labels, name="slot"),
    )
    # Completed slots show delivery only; their plan is history.
    frame["remaining_plan"] = frame["planned"].where(frame["actual"] == 0, 0)
    return frame


# ==========================================
# UI sections
# ==========================================
def render_settings(controller: SimulationController, catalog: CatalogResponse, snapshot: SimulationSnapshotResponse) -> None:
    st.sidebar.header("🔧 Algorithm & pattern")

    algorithm_types = [entry.type for entry in catalog.algorithms]
    algorithm_names = {entry.type: entry.name for entry in catalog.algorithms}
    pattern_types = [entry.type for entry in catalog.patterns]
    pattern_names = {entry.type: entry.name for entry in catalog.patterns}

    algorithm = st.sidebar.selectbox(
        "Distribution algorithm",
        algorithm_types,
        index=algorithm_types.index(snapshot.algorithm),
        format_func=algorithm_names.get,
        disabled=snapshot.is_playing,
    )
    pattern = st.sidebar.selectbox(
        "Customer traffic pattern",
        pattern_types,
        index=pattern_types.index(snapshot.pattern),
        format_func=pattern_names.get,
        disabled=snapshot.is_playing,
    )
    if algorithm != snapshot.algorithm or pattern != snapshot.pattern:
        try:
            controller.configure(algorithm=algorithm, pattern=pattern)
        except SimulationRequestError as exc:
            st.sidebar.error(str(exc))
        st.rerun()

    descriptions = {entry.type: entry.description for entry in catalog.algorithms}
    st.sidebar.caption(f"Algorithm: {descriptions.get(snapshot.algorithm, '-')}")
    descriptions = {entry.type: entry.description for entry in catalog.patterns}
    st.sidebar.caption(f"Pattern: {descriptions.get(snapshot.pattern, '-')}")

    speed_choices = list(controller.service.speed_choices)
    speed = st.sidebar.selectbox(
        "Simulation speed",
        speed_choices,
        index=speed_choices.index(snapshot.speed),
        format_func=lambda value: f"{value:g}x",
    )
    if speed != snapshot.speed:
        controller.set_speed(speed)
        st.rerun()


def render_controls(controller: SimulationController, snapshot: SimulationSnapshotResponse) -> None:
    st.subheader("Current simulation time")
    hours, minutes = divmod(snapshot.elapsed_minutes, 60)
    st.markdown(f"**{snapshot.current_time:%Y-%m-%d %H:%M}** (elapsed {hours}h {minutes}m)")

    col_play, col_step, col_reset = st.columns(3)
    play_label = "⏸️ Pause" if snapshot.is_playing else "▶️ Play"
    if col_play.button(play_label, type="primary", disabled=snapshot.is_finished):
        controller.toggle_playback()
        st.rerun()
    if col_step.button("⏭️ Step", disabled=snapshot.is_playing or snapshot.is_finished):
        controller.tick()
        st.rerun()
    if col_reset.button("🔄 Reset"):
        controller.reset()
        st.rerun()


def render_stats(snapshot: SimulationSnapshotResponse) -> None:
    stats = snapshot.stats
    col_a, col_b, col_c, col_d = st.columns(4)
    col_a.metric("Completed slots", f"{stats.completed_slots:,} / {stats.total_slots:,}")
    col_b.metric("Actual impressions", f"{stats.total_actual:,}")
    col_c.metric("Planned impressions", f"{stats.total_planned:,}")
    col_d.metric("Achievement rate", f"{stats.achievement_rate:.1f}%")


def render_chart(snapshot: SimulationSnapshotResponse) -> None:
    frame = build_chart_frame(snapshot)
    st.subheader("Impression delivery per 10-minute slot")
    st.bar_chart(frame[["remaining_plan", "actual"]], use_container_width=True)
    st.subheader("Customer influx (busiest slot = 100)")
    st.line_chart(frame[["customer_influx"]], use_container_width=True)


# ==========================================
# Main App Router
# ==========================================
def main() -> None:
    st.title("📊 Ad impression delivery simulation")
    st.caption("Compare distribution algorithms under simulated customer traffic patterns.")

    controller = get_controller()
    catalog = controller.catalog()
    snapshot = controller.snapshot()

    render_settings(controller, catalog, snapshot)
    render_controls(controller, snapshot)
    render_stats(snapshot)
    render_chart(snapshot)

    if snapshot.is_playing:
        time.sleep(controller.service.tick_interval_seconds())
        controller.tick()
        st.rerun()


if __name__ == "__main__":
    main()
