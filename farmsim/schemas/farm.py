"""Pydantic schemas for engine results, notices and read-only snapshots."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from farmsim.models.enums import ActionFailureReason, PlotStateEnum, SeasonEnum


class ClimateState(BaseModel):
	drought_probability: float = Field(ge=0)
	heatwave_probability: float = Field(ge=0)


class FarmNotice(BaseModel):
	model_config = ConfigDict(frozen=True)

	date: str
	message: str
	is_alert: bool = False


class ActionResult(BaseModel):
	model_config = ConfigDict(frozen=True)

	success: bool
	reason: ActionFailureReason | None = None
	cost: float = 0.0


class HarvestResult(BaseModel):
	model_config = ConfigDict(frozen=True)

	success: bool
	income: int = 0
	crop_name: str | None = None
	yield_percentage: int = 0
	reason: ActionFailureReason | None = None


class SustainabilityBreakdown(BaseModel):
	model_config = ConfigDict(frozen=True)

	total: int
	soil_score: int
	diversity_score: int
	tech_score: int


class CropHistoryRead(BaseModel):
	crop_id: str
	duration: int


class PlotSnapshot(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	row: int
	col: int
	state: PlotStateEnum
	crop_id: str
	crop_name: str
	water_level: float
	soil_health: float
	growth_progress: float
	days_since_planting: int
	fertilized: bool
	irrigated: bool
	harvest_ready: bool
	expected_yield: float
	consecutive_plantings: int
	pest_pressure: float
	crop_history: list[CropHistoryRead] = Field(default_factory=list)


class FarmSnapshot(BaseModel):
	year: int
	day: int
	absolute_day: int
	season: SeasonEnum
	balance: float
	farm_value: int
	farm_health: int
	water_reserve: float
	climate: ClimateState
	market_prices: dict[str, float] = Field(default_factory=dict)
	researched_technologies: list[str] = Field(default_factory=list)
	pending_event_count: int = 0
	sustainability: SustainabilityBreakdown


class StrategyRunResult(BaseModel):
	"""Final summary of one headless strategy run."""

	model_config = ConfigDict(frozen=True)

	strategy: str
	stop_reason: str
	year: int
	day: int
	balance: float
	farm_value: int
	farm_health: int
	water_reserve: float
	sustainability: SustainabilityBreakdown
	researched_technologies: list[str] = Field(default_factory=list)
