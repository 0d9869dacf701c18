"""
app.py: Application factory for the delivery simulation.

Wires settings, the seeded random source, the simulation service and the
controller consumed by the dashboard and the headless launcher.

Usage (headless launcher):
    python main.py

Usage (dashboard):
    streamlit run dashboard/app.py
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from backend.controllers.simulation_controller import SimulationController
from backend.services.simulation_service import SimulationService
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> SimulationController:
    """
    Build and wire the simulation controller.

    Every dependency is constructed here and passed down explicitly; the
    random source is seeded from settings so a run can be replayed.
    """
    resolved_settings = settings or get_settings()

    rng = np.random.default_rng(resolved_settings.simulation_random_seed)
    simulation_service = SimulationService(settings=resolved_settings, rng=rng)
    controller = SimulationController(service=simulation_service)

    _startup(controller)
    return controller


def _startup(controller: SimulationController) -> None:
    """Build the default campaign so consumers always have a plan to show."""
    logger.info("Startup: building default campaign plan")
    snapshot = controller.start_campaign()
    logger.info(
        "Startup complete | run_id=%s | algorithm=%s | pattern=%s",
        snapshot.run_id,
        snapshot.algorithm,
        snapshot.pattern,
    )
