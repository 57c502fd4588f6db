"""Pydantic schemas for scheduled events and their application results."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from farmsim.models.enums import (
	EventPhaseEnum,
	EventTypeEnum,
	MarketDirectionEnum,
	PolicyTypeEnum,
	TechnologyEventEnum,
)

MULTI_DAY_EVENT_TYPES = frozenset({EventTypeEnum.drought, EventTypeEnum.heatwave})


class EventLifecycle(BaseModel):
	model_config = ConfigDict(frozen=True)

	phase: EventPhaseEnum = EventPhaseEnum.scheduled
	days_remaining: int = Field(default=1, ge=0)


class PendingEvent(BaseModel):
	"""A weather/market/policy/technology occurrence waiting for its day.

	``day`` is the absolute simulated day (day 1 of year 1 is 1). Only the
	payload fields relevant to ``type`` are populated.
	"""

	model_config = ConfigDict(frozen=True)

	type: EventTypeEnum
	day: int
	message: str = ""
	forecast_message: str | None = None
	is_alert: bool = False
	severity: str | None = None
	duration: int | None = None
	lifecycle: EventLifecycle | None = None

	# rain
	water_increase: float | None = None

	# market
	crop_id: str | None = None
	direction: MarketDirectionEnum | None = None
	change_percent: float | None = None

	# policy
	policy_type: PolicyTypeEnum | None = None
	balance_change: float = 0.0
	base_cost: float | None = None
	irrigation_cost_increase: float | None = None

	# technology
	sub_type: TechnologyEventEnum | None = None
	amount: float | None = None
	discount: float | None = None

	@property
	def is_multi_day(self) -> bool:
		return self.type in MULTI_DAY_EVENT_TYPES

	@property
	def label(self) -> str:
		detail = self.sub_type or self.severity or self.policy_type or self.direction or ""
		return f"{self.type}:{detail}" if detail else str(self.type)


class ApplyOutcome(BaseModel):
	"""What applying one event on one day did."""

	message: str | None = None
	continue_event: bool = False
	next_duration: int = 0
	lifecycle: EventLifecycle | None = None
	skipped: bool = False
	balance_delta: float = 0.0
