"""In-process controller layer between consumers and the simulation service.

Consumers (the Streamlit dashboard, the headless launcher) hand over plain
payloads; this layer validates them with pydantic DTOs, calls the service and
shapes the response. Recoverable failures surface as `SimulationRequestError`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from backend.domain.algorithms import available_algorithms, resolve_algorithm_type
from backend.domain.models import CampaignConfig, ChartData, DeliveryStats, SimulationState
from backend.domain.patterns import available_patterns, generate_pattern_preview, get_pattern, resolve_pattern_type
from backend.services.simulation_service import SimulationService, SimulationStateError
from backend.services.slot_service import SlotBuildError
from backend.utils.config import get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


class SimulationRequestError(Exception):
    """Raised when a consumer request cannot be served."""


class CampaignConfigRequest(BaseModel):
    """Input DTO validated before entering the service layer."""

    start_date: datetime = Field(
        default_factory=lambda: datetime.fromisoformat(get_settings().simulation_start_date)
    )
    total_budget: int = Field(
        default_factory=lambda: get_settings().simulation_total_budget,
        gt=0,
    )
    algorithm: str = Field(default_factory=lambda: get_settings().simulation_default_algorithm)
    pattern: str = Field(default_factory=lambda: get_settings().simulation_default_pattern)

    @field_validator("algorithm")
    @classmethod
    def validate_algorithm(cls, value: str) -> str:
        if resolve_algorithm_type(value) is None:
            raise ValueError(f"unknown algorithm '{value}'")
        return value

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, value: str) -> str:
        if resolve_pattern_type(value) is None:
            raise ValueError(f"unknown pattern '{value}'")
        return value

    def to_campaign_config(self) -> CampaignConfig:
        return CampaignConfig(
            start_date=self.start_date,
            total_budget=self.total_budget,
            algorithm=resolve_algorithm_type(self.algorithm),
            pattern=resolve_pattern_type(self.pattern),
        )


class CatalogEntryResponse(BaseModel):
    type: str
    name: str
    description: str


class CatalogResponse(BaseModel):
    algorithms: list[CatalogEntryResponse]
    patterns: list[CatalogEntryResponse]


class DeliveryStatsResponse(BaseModel):
    completed_slots: int = Field(ge=0)
    total_slots: int = Field(ge=0)
    total_actual: int = Field(ge=0)
    total_planned: int = Field(ge=0)
    achievement_rate: float = Field(ge=0.0, le=100.0)
    committed_total: int = Field(ge=0)


class ChartDataResponse(BaseModel):
    labels: list[str]
    planned: list[int]
    actual: list[int]
    customer_influx: list[float]


class SimulationSnapshotResponse(BaseModel):
    run_id: str
    algorithm: str
    pattern: str
    total_budget: int = Field(gt=0)
    current_time: datetime
    elapsed_minutes: int = Field(ge=0)
    speed: float = Field(gt=0.0)
    is_playing: bool
    is_finished: bool
    stats: DeliveryStatsResponse
    chart: ChartDataResponse


def _stats_response(stats: DeliveryStats) -> DeliveryStatsResponse:
    return DeliveryStatsResponse(**stats.to_dict())


def _chart_response(chart: ChartData) -> ChartDataResponse:
    return ChartDataResponse(
        labels=chart.labels,
        planned=chart.planned,
        actual=chart.actual,
        customer_influx=chart.customer_influx,
    )


class SimulationController:
    """Validates consumer payloads and delegates to `SimulationService`."""

    def __init__(self, service: Optional[SimulationService] = None) -> None:
        self._service = service or SimulationService()

    @property
    def service(self) -> SimulationService:
        return self._service

    def catalog(self) -> CatalogResponse:
        return CatalogResponse(
            algorithms=[
                CatalogEntryResponse(
                    type=algorithm.type.value,
                    name=algorithm.name,
                    description=algorithm.description,
                )
                for algorithm in available_algorithms()
            ],
            patterns=[
                CatalogEntryResponse(
                    type=pattern.type.value,
                    name=pattern.name,
                    description=pattern.description,
                )
                for pattern in available_patterns()
            ],
        )

    def pattern_preview(self, pattern_tag: str) -> list[float]:
        pattern = get_pattern(pattern_tag)
        if pattern is None:
            raise SimulationRequestError(f"unknown pattern '{pattern_tag}'")
        return generate_pattern_preview(pattern)

    def snapshot(self, max_slots: Optional[int] = None) -> SimulationSnapshotResponse:
        try:
            state = self._service.state
            return self._snapshot_response(
                state,
                self._service.stats(),
                self._service.chart_data(max_slots),
            )
        except SimulationStateError as exc:
            raise SimulationRequestError(str(exc)) from exc

    def _snapshot_response(
        self,
        state: SimulationState,
        stats: DeliveryStats,
        chart: ChartData,
    ) -> SimulationSnapshotResponse:
        return SimulationSnapshotResponse(
            run_id=state.run_id,
            algorithm=state.config.algorithm.value,
            pattern=state.config.pattern.value,
            total_budget=state.config.total_budget,
            current_time=state.current_time,
            elapsed_minutes=state.elapsed_minutes,
            speed=state.speed,
            is_playing=state.is_playing,
            is_finished=state.is_finished,
            stats=_stats_response(stats),
            chart=_chart_response(chart),
        )

    def start_campaign(
        self,
        payload: CampaignConfigRequest | Mapping[str, Any] | None = None,
    ) -> SimulationSnapshotResponse:
        try:
            request = (
                payload
                if isinstance(payload, CampaignConfigRequest)
                else CampaignConfigRequest(**dict(payload or {}))
            )
            self._service.start(request.to_campaign_config())
        except ValidationError as exc:
            raise SimulationRequestError(
                "; ".join(error["msg"] for error in exc.errors())
            ) from exc
        except (SlotBuildError, ValueError) as exc:
            raise SimulationRequestError(str(exc)) from exc
        return self.snapshot()

    def configure(
        self,
        *,
        algorithm: Optional[str] = None,
        pattern: Optional[str] = None,
    ) -> SimulationSnapshotResponse:
        try:
            self._service.configure(algorithm_tag=algorithm, pattern_tag=pattern)
        except (SlotBuildError, SimulationStateError) as exc:
            raise SimulationRequestError(str(exc)) from exc
        return self.snapshot()

    def set_speed(self, speed: float) -> SimulationSnapshotResponse:
        try:
            self._service.set_speed(speed)
        except SimulationStateError as exc:
            raise SimulationRequestError(str(exc)) from exc
        return self.snapshot()

    def tick(self) -> SimulationSnapshotResponse:
        try:
            self._service.tick()
        except SimulationStateError as exc:
            raise SimulationRequestError(str(exc)) from exc
        return self.snapshot()

    def toggle_playback(self) -> SimulationSnapshotResponse:
        """Flip the playing flag; the consumer's timer drives the ticks."""
        try:
            state = self._service.state
            if state.is_playing:
                self._service.stop()
            elif not state.is_finished:
                self._service.resume()
        except SimulationStateError as exc:
            raise SimulationRequestError(str(exc)) from exc
        return self.snapshot()

    def reset(self) -> SimulationSnapshotResponse:
        try:
            self._service.reset()
        except SimulationStateError as exc:
            raise SimulationRequestError(str(exc)) from exc
        logger.info("Simulation reset requested by consumer")
        return self.snapshot()

    def run_to_completion(self) -> SimulationSnapshotResponse:
        try:
            self._service.run_to_completion()
        except SimulationStateError as exc:
            raise SimulationRequestError(str(exc)) from exc
        return self.snapshot()
