"""Event generation, scheduling and application.

Every random choice is one uniform draw against a cumulative distribution
built from relative weights. Generators return a ``PendingEvent`` aimed at an
absolute day; ``schedule`` deduplicates and queues it, ``process_due`` applies
everything due today in queue order. Each event runs inside its own failure
boundary so a malformed record is logged and dropped without aborting the
tick.
"""

from __future__ import annotations

from collections.abc import Callable, Collection, Mapping, Sequence
from typing import Any, TypeVar

import numpy as np
import structlog

from farmsim.config import Settings, get_settings
from farmsim.errors import MalformedEventError, UnknownEventTypeError
from farmsim.models.crops import CropCatalog
from farmsim.models.enums import (
	DroughtSeverityEnum,
	EnvironmentalEffectEnum,
	EventCategoryEnum,
	EventPhaseEnum,
	EventTypeEnum,
	MarketDirectionEnum,
	PolicyTypeEnum,
	RainSeverityEnum,
	SeasonEnum,
	TechnologyEventEnum,
)
from farmsim.models.farm import FarmState, ResearchDiscount
from farmsim.schemas.events import ApplyOutcome, EventLifecycle, PendingEvent
from farmsim.services import event_lifecycle
from farmsim.utils import clamp, format_currency, round_half_up

_logger = structlog.get_logger("farmsim.events")

T = TypeVar("T")

CATEGORY_WEIGHTS: tuple[tuple[EventCategoryEnum, float], ...] = (
	(EventCategoryEnum.weather, 0.4),
	(EventCategoryEnum.market, 0.3),
	(EventCategoryEnum.policy, 0.15),
	(EventCategoryEnum.technology, 0.15),
)
MARKET_WEIGHTS: tuple[tuple[MarketDirectionEnum, float], ...] = (
	(MarketDirectionEnum.increase, 0.4),
	(MarketDirectionEnum.decrease, 0.4),
	(MarketDirectionEnum.opportunity, 0.2),
)
POLICY_WEIGHTS: tuple[tuple[PolicyTypeEnum, float], ...] = (
	(PolicyTypeEnum.water_restriction, 0.4),
	(PolicyTypeEnum.environmental_subsidy, 0.3),
	(PolicyTypeEnum.new_regulations, 0.3),
)
TECHNOLOGY_WEIGHTS: tuple[tuple[TechnologyEventEnum, float], ...] = (
	(TechnologyEventEnum.innovation_grant, 0.5),
	(TechnologyEventEnum.research_breakthrough, 0.3),
	(TechnologyEventEnum.technology_setback, 0.2),
)
NO_EVENT_CHANCE = 0.5
RAIN_WEIGHT = 0.5
FROST_WEIGHT_WINTER = 0.3
FROST_WEIGHT = 0.05
EARLY_GAME_SWAP_CHANCE = 0.5
BASELINE_DROUGHT_PROBABILITY = 0.05

# Seasonal scheduling odds on the first day of a season
SPRING_RAIN_CHANCE = 0.4
FALL_RAIN_CHANCE = 0.3
WINTER_FROST_CHANCE = 0.3

MARKET_PRICE_MIN = 0.4
MARKET_PRICE_MAX = 2.5
MARKET_OPPORTUNITY_MAX = 3.0

DROUGHT_SEVERITY_FACTORS: dict[DroughtSeverityEnum, int] = {
	DroughtSeverityEnum.mild: 1,
	DroughtSeverityEnum.moderate: 2,
	DroughtSeverityEnum.severe: 3,
}
DROUGHT_START_MESSAGES: dict[DroughtSeverityEnum, str] = {
	DroughtSeverityEnum.mild: "Mild drought conditions. Water reserves decreasing slowly.",
	DroughtSeverityEnum.moderate: "Moderate drought! Crop stress increasing, yield potentially impacted.",
	DroughtSeverityEnum.severe: "Severe drought! Critical water levels, significant yield loss likely.",
}
HEATWAVE_START_MESSAGE = (
	"Heatwave conditions! Crops experiencing heat stress, water use increased, potential yield loss."
)
FROST_DEFAULT_MESSAGE = "Frost reported! Crops, especially young ones, may have suffered yield damage."

# Fraction of each adverse effect that still reaches the farm per researched technology
DROUGHT_EXPOSURE: dict[str, float] = {"drought_resistant": 0.7, "silvopasture": 0.8, "ai_irrigation": 0.95}
HEATWAVE_EXPOSURE: dict[str, float] = {"greenhouse": 0.6, "silvopasture": 0.85}
FROST_EXPOSURE: dict[str, float] = {"greenhouse": 0.4}
EROSION_EXPOSURE: dict[str, float] = {"no_till_farming": 0.5, "cover_crop": 0.7}


def exposure(researched: Collection[str], factors: Mapping[str, float]) -> float:
	result = 1.0
	for tech_id, factor in factors.items():
		if tech_id in researched:
			result *= factor
	return result


def scale_cost(
	base_cost: float,
	balance: float,
	*,
	reference_balance: float,
	reference_spread: float,
	scale_min: float,
	scale_max: float,
	cost_min: float,
	cost_max: float,
) -> int:
	"""Balance-aware cost: richer farms pay more, poorer farms less, within hard bounds."""
	scale = clamp(1 + (balance - reference_balance) / reference_spread, scale_min, scale_max)
	return round_half_up(clamp(abs(base_cost) * scale, cost_min, cost_max))


def _require(event: PendingEvent, field_name: str) -> Any:
	value = getattr(event, field_name, None)
	if value is None:
		raise MalformedEventError(f"{event.type} event on day {event.day} is missing {field_name!r}")
	return value


class EventEngine:
	"""Generates, schedules and applies events against a ``FarmState``."""

	def __init__(
		self,
		rng: np.random.Generator,
		settings: Settings | None = None,
		crop_catalog: CropCatalog | None = None,
	):
		self._rng = rng
		self._settings = settings or get_settings()
		self._crops = crop_catalog or CropCatalog.default()
		self._handlers: dict[EventTypeEnum, Callable[[FarmState, PendingEvent], ApplyOutcome]] = {
			EventTypeEnum.rain: self.apply_rain,
			EventTypeEnum.drought: self.apply_drought,
			EventTypeEnum.heatwave: self.apply_heatwave,
			EventTypeEnum.frost: self.apply_frost,
			EventTypeEnum.market: self.apply_market,
			EventTypeEnum.policy: self.apply_policy,
			EventTypeEnum.technology: self.apply_technology,
		}

	# ── Random helpers ──────────────────────────────────────────────────────

	def _roll(self, span: int) -> int:
		"""Uniform integer in ``[0, span)``."""
		return int(self._rng.integers(span))

	def _pick(self, weights: Sequence[tuple[T, float]]) -> T:
		total = sum(weight for _, weight in weights)
		if total <= 0:
			return weights[0][0]
		roll = self._rng.random()
		cumulative = 0.0
		for option, weight in weights:
			cumulative += weight / total
			if roll < cumulative:
				return option
		return weights[0][0]

	# ── Generation ──────────────────────────────────────────────────────────

	def generate_random_event(self, state: FarmState) -> PendingEvent | None:
		if self._rng.random() < NO_EVENT_CHANCE:
			return None

		category = self._pick(CATEGORY_WEIGHTS)
		today = state.absolute_day
		early_game = state.year == 1 and state.day < self._settings.early_game_days

		match category:
			case EventCategoryEnum.market:
				return self.generate_market_event(today)
			case EventCategoryEnum.policy:
				return self.generate_policy_event(today, state.farm_health, suppress_costly=early_game)
			case EventCategoryEnum.technology:
				return self.generate_technology_event(today, len(state.researched), suppress_costly=early_game)
			case _:
				return self.generate_weather_event(state)

	def generate_weather_event(self, state: FarmState) -> PendingEvent:
		climate = state.climate
		frost_weight = FROST_WEIGHT_WINTER if state.season == SeasonEnum.winter else FROST_WEIGHT
		kind = self._pick(
			(
				(EventTypeEnum.rain, RAIN_WEIGHT),
				(EventTypeEnum.drought, climate.drought_probability),
				(EventTypeEnum.heatwave, climate.heatwave_probability),
				(EventTypeEnum.frost, frost_weight),
			)
		)
		today = state.absolute_day
		event_day = today + self._roll(20) + 5

		if kind != EventTypeEnum.rain and state.cooldowns.cooling_down(
			kind, today, self._settings.event_cooldown_days
		):
			_logger.debug("weather_event_cooling_down", replaced=str(kind))
			kind = EventTypeEnum.rain

		match kind:
			case EventTypeEnum.drought:
				return self.schedule_drought(event_day, climate.drought_probability)
			case EventTypeEnum.heatwave:
				return self.schedule_heatwave(event_day)
			case EventTypeEnum.frost:
				return self.schedule_frost(event_day)
			case _:
				return self.schedule_rain(event_day)

	def schedule_rain(self, day: int) -> PendingEvent:
		intensity = self._rng.random()
		if intensity < 0.3:
			severity = RainSeverityEnum.light
			message = "Light rainfall increased water levels slightly."
			water_increase = 5 + self._roll(5)
		elif intensity < 0.7:
			severity = RainSeverityEnum.moderate
			message = "Moderate rainfall increased water levels."
			water_increase = 10 + self._roll(10)
		else:
			severity = RainSeverityEnum.heavy
			message = "Heavy rainfall significantly increased water levels but may cause erosion."
			water_increase = 15 + self._roll(15)

		return PendingEvent(
			type=EventTypeEnum.rain,
			day=day,
			severity=severity.value,
			water_increase=water_increase,
			message=message,
			forecast_message=f"Weather forecast: {severity} rain expected soon.",
			is_alert=severity == RainSeverityEnum.heavy,
		)

	def schedule_drought(self, day: int, probability: float) -> PendingEvent:
		roll = self._rng.random()
		if roll < 0.6:
			severity = DroughtSeverityEnum.mild
			duration = self._roll(3) + 3
			message = "Drought conditions affecting your farm."
		elif roll < 0.9:
			severity = DroughtSeverityEnum.moderate
			duration = self._roll(4) + 5
			message = "Moderate drought conditions! Water levels dropping, crops stressed."
		else:
			severity = DroughtSeverityEnum.severe
			duration = self._roll(5) + 7
			message = "Severe drought conditions! Water critically low, crops at high risk."

		# droughts last longer as the climate drifts
		climate_modifier = max(1.0, probability / BASELINE_DROUGHT_PROBABILITY)
		duration = max(1, int(duration * climate_modifier))

		return PendingEvent(
			type=EventTypeEnum.drought,
			day=day,
			severity=severity.value,
			duration=duration,
			lifecycle=event_lifecycle.begin(duration),
			message=message,
			forecast_message="Weather forecast: Dry conditions expected. Potential drought warning.",
			is_alert=severity != DroughtSeverityEnum.mild,
		)

	def schedule_heatwave(self, day: int) -> PendingEvent:
		duration = self._roll(4) + 2
		return PendingEvent(
			type=EventTypeEnum.heatwave,
			day=day,
			duration=duration,
			lifecycle=event_lifecycle.begin(duration),
			message="Heatwave conditions! Crops experiencing heat stress.",
			forecast_message="Weather forecast: Extreme heat expected in the coming days.",
			is_alert=True,
		)

	def schedule_frost(self, day: int) -> PendingEvent:
		return PendingEvent(
			type=EventTypeEnum.frost,
			day=day,
			message="Frost warning! Young plants are vulnerable.",
			forecast_message="Weather forecast: Temperatures expected to drop below freezing overnight.",
			is_alert=True,
		)

	def generate_market_event(self, today: int) -> PendingEvent | None:
		direction = self._pick(MARKET_WEIGHTS)
		event_day = today + self._roll(15) + 5
		if direction == MarketDirectionEnum.opportunity:
			return self.create_market_opportunity(event_day)
		return self.create_market_event(event_day, direction)

	def create_market_event(self, day: int, direction: MarketDirectionEnum) -> PendingEvent | None:
		candidates = self._crops.plantable()
		if not candidates:
			return None
		crop = candidates[self._roll(len(candidates))]
		change_percent = 10 + self._roll(30)

		if direction == MarketDirectionEnum.increase:
			message = f"Market update: {crop.name} prices have risen by {change_percent}%."
			forecast = f"Market news: Increased demand expected for {crop.name}."
		else:
			message = f"Market update: {crop.name} prices have fallen by {change_percent}%."
			forecast = f"Market news: Market surplus expected for {crop.name}."

		return PendingEvent(
			type=EventTypeEnum.market,
			day=day,
			direction=direction,
			crop_id=crop.id,
			change_percent=change_percent,
			message=message,
			forecast_message=forecast,
			is_alert=direction == MarketDirectionEnum.decrease,
		)

	def create_market_opportunity(self, day: int) -> PendingEvent | None:
		candidates = self._crops.plantable()
		if not candidates:
			return None
		crop = candidates[self._roll(len(candidates))]
		bonus_percent = 30 + self._roll(30)
		duration = self._roll(10) + 5
		return PendingEvent(
			type=EventTypeEnum.market,
			day=day,
			direction=MarketDirectionEnum.opportunity,
			crop_id=crop.id,
			change_percent=bonus_percent,
			duration=duration,
			message=(
				f"Market opportunity! {crop.name} prices temporarily increased by "
				f"{bonus_percent}% for {duration} days!"
			),
			forecast_message=f"Market news: Special demand expected for {crop.name}.",
			is_alert=True,
		)

	def generate_policy_event(
		self,
		today: int,
		farm_health: float,
		policy_type: PolicyTypeEnum | None = None,
		*,
		suppress_costly: bool = False,
	) -> PendingEvent | None:
		if policy_type is None:
			policy_type = self._pick(POLICY_WEIGHTS)

		costly = (PolicyTypeEnum.new_regulations, PolicyTypeEnum.water_restriction)
		if suppress_costly and policy_type in costly and self._rng.random() < EARLY_GAME_SWAP_CHANCE:
			_logger.debug("early_policy_event_swapped", replaced=str(policy_type))
			policy_type = PolicyTypeEnum.environmental_subsidy

		event_day = today + self._roll(20) + 10
		return self.create_policy_event(event_day, farm_health, policy_type)

	def create_policy_event(
		self, day: int, farm_health: float, policy_type: PolicyTypeEnum
	) -> PendingEvent | None:
		match policy_type:
			case PolicyTypeEnum.water_restriction:
				return PendingEvent(
					type=EventTypeEnum.policy,
					day=day,
					policy_type=policy_type,
					message="Water restriction policy enacted. Irrigation costs increased by 50%.",
					forecast_message="Policy update: Water restrictions being considered.",
					is_alert=True,
					irrigation_cost_increase=0.5,
				)
			case PolicyTypeEnum.environmental_subsidy:
				subsidy = 5000 if farm_health > 60 else 3000 if farm_health > 40 else 0
				if subsidy <= 0:
					return None
				return PendingEvent(
					type=EventTypeEnum.policy,
					day=day,
					policy_type=policy_type,
					message=f"You received a {format_currency(subsidy)} environmental subsidy!",
					forecast_message="Policy update: Environmental subsidies being discussed.",
					balance_change=subsidy,
				)
			case PolicyTypeEnum.new_regulations:
				base_cost = self._settings.regulation_base_cost
				return PendingEvent(
					type=EventTypeEnum.policy,
					day=day,
					policy_type=policy_type,
					message=(
						f"New regulations require compliance upgrades costing {format_currency(base_cost)}."
					),
					forecast_message="Policy update: New farming regulations proposed.",
					is_alert=True,
					balance_change=-base_cost,
					base_cost=base_cost,
				)
		return None

	def generate_technology_event(
		self, today: int, researched_count: int, *, suppress_costly: bool = False
	) -> PendingEvent:
		sub_type = self._pick(TECHNOLOGY_WEIGHTS)
		if (
			suppress_costly
			and sub_type == TechnologyEventEnum.technology_setback
			and self._rng.random() < EARLY_GAME_SWAP_CHANCE
		):
			_logger.debug("early_technology_setback_swapped")
			sub_type = TechnologyEventEnum.innovation_grant

		event_day = today + self._roll(30) + 5
		match sub_type:
			case TechnologyEventEnum.research_breakthrough:
				return self.create_research_breakthrough(event_day)
			case TechnologyEventEnum.technology_setback:
				return self.create_technology_setback(event_day)
			case _:
				return self.create_innovation_grant(event_day, researched_count)

	def create_innovation_grant(self, day: int, researched_count: int) -> PendingEvent:
		if researched_count == 0:
			if self._rng.random() < 0.2:
				amount = 2000
				message = (
					f"You received a small {format_currency(amount)} starter grant for farm innovation. "
					"Consider investing in research."
				)
			else:
				amount = 0
				message = "Your farm was not selected for an innovation grant due to lack of technological adoption."
		elif researched_count <= 1:
			amount = 5000
			message = f"You received a {format_currency(amount)} innovation grant for your initial research efforts."
		elif researched_count <= 3:
			amount = 10000
			message = f"You received a {format_currency(amount)} innovation grant for farm research!"
		elif researched_count <= 5:
			amount = 15000
			message = (
				f"You received a {format_currency(amount)} substantial innovation grant "
				"for your technological leadership!"
			)
		else:
			amount = 20000 + (researched_count - 6) * 2000
			message = (
				f"You received a major {format_currency(amount)} innovation grant for being at the "
				"cutting edge of agricultural technology!"
			)

		return PendingEvent(
			type=EventTypeEnum.technology,
			day=day,
			sub_type=TechnologyEventEnum.innovation_grant,
			amount=amount,
			message=message,
			is_alert=amount > 0,
		)

	def create_research_breakthrough(self, day: int) -> PendingEvent:
		duration = self._roll(16) + 15
		return PendingEvent(
			type=EventTypeEnum.technology,
			day=day,
			sub_type=TechnologyEventEnum.research_breakthrough,
			duration=duration,
			discount=0.3,
			message=f"Research breakthrough! Technology costs reduced by 30% for the next {duration} days.",
			is_alert=True,
		)

	def create_technology_setback(self, day: int) -> PendingEvent:
		amount = self._roll(3000) + 2000
		return PendingEvent(
			type=EventTypeEnum.technology,
			day=day,
			sub_type=TechnologyEventEnum.technology_setback,
			amount=amount,
			message=f"Technology setback! Equipment malfunction has cost you {format_currency(amount)} in repairs.",
			is_alert=True,
		)

	def seasonal_events(self, state: FarmState) -> list[PendingEvent]:
		"""Season-typical events rolled on the first day of ``state.season``."""
		climate = state.climate
		today = state.absolute_day
		events: list[PendingEvent] = []

		match state.season:
			case SeasonEnum.summer:
				if self._rng.random() < climate.drought_probability:
					events.append(self.schedule_drought(today, climate.drought_probability))
				if self._rng.random() < climate.heatwave_probability:
					events.append(self.schedule_heatwave(today))
			case SeasonEnum.winter:
				if self._rng.random() < WINTER_FROST_CHANCE:
					events.append(self.schedule_frost(today))
			case SeasonEnum.spring:
				if self._rng.random() < SPRING_RAIN_CHANCE:
					events.append(self.schedule_rain(today))
			case SeasonEnum.fall:
				if self._rng.random() < FALL_RAIN_CHANCE:
					events.append(self.schedule_rain(today))
				if self._rng.random() < climate.heatwave_probability * 0.5:
					events.append(self.schedule_heatwave(today))
		return events

	# ── Scheduling ──────────────────────────────────────────────────────────

	def schedule(self, state: FarmState, event: PendingEvent | None) -> bool:
		"""Queue a generated event unless one of the same type is already close by.

		Target days not after today are pulled to 1..5 days ahead; days more
		than a year out are pulled back to 10..39 days ahead.
		"""
		if event is None:
			return False

		window = self._settings.duplicate_event_window_days
		if any(p.type == event.type and abs(p.day - event.day) < window for p in state.pending_events):
			_logger.debug("event_duplicate_skipped", event_type=str(event.type), target_day=event.day)
			return False

		today = state.absolute_day
		day = event.day
		if day <= today:
			day = today + self._roll(5) + 1
		if day > today + state.days_per_year:
			day = today + self._roll(30) + 10
		if day != event.day:
			event = event.model_copy(update={"day": day})

		self.enqueue(state, event)
		return True

	def enqueue(self, state: FarmState, event: PendingEvent) -> None:
		state.pending_events.append(event)
		if event.forecast_message:
			state.notify(event.forecast_message)
		_logger.info(
			"event_scheduled",
			event_type=str(event.type),
			label=event.label,
			target_day=event.day,
		)

	# ── Application ─────────────────────────────────────────────────────────

	def process_due(self, state: FarmState) -> list[ApplyOutcome]:
		"""Apply every pending event due today, first scheduled first applied."""
		today = state.absolute_day
		due = [event for event in state.pending_events if event.day <= today]
		if not due:
			return []
		state.pending_events = [event for event in state.pending_events if event.day > today]

		outcomes: list[ApplyOutcome] = []
		for event in due:
			try:
				outcome = self.apply(state, event)
			except Exception as exc:
				_logger.exception(
					"event_apply_failed",
					event_type=str(event.type),
					target_day=event.day,
					error=str(exc),
				)
				continue
			self._settle(state, event, outcome)
			outcomes.append(outcome)
		return outcomes

	def apply(self, state: FarmState, event: PendingEvent) -> ApplyOutcome:
		handler = self._handlers.get(event.type)
		if handler is None:
			raise UnknownEventTypeError(f"No handler for event type {event.type!r}")
		return handler(state, event)

	def _settle(self, state: FarmState, event: PendingEvent, outcome: ApplyOutcome) -> None:
		if outcome.skipped:
			_logger.debug("event_skipped", event_type=str(event.type))
			return

		if outcome.message:
			state.notify(outcome.message, event.is_alert)

		if outcome.continue_event and outcome.lifecycle is not None:
			follow_up = event_lifecycle.continuation(event, outcome.lifecycle, outcome.message)
			state.pending_events.append(follow_up)
			_logger.debug(
				"event_continues",
				event_type=str(event.type),
				target_day=follow_up.day,
				days_remaining=outcome.next_duration,
			)
		elif event.is_multi_day:
			state.cooldowns.record(event.type, state.absolute_day)
			state.notify(f"The {event.type} has ended.")
			_logger.info("event_ended", event_type=str(event.type))

		_logger.info(
			"event_applied",
			event_type=str(event.type),
			label=event.label,
			balance_delta=outcome.balance_delta,
		)

	def apply_rain(self, state: FarmState, event: PendingEvent) -> ApplyOutcome:
		increase = float(_require(event, "water_increase"))
		state.water_reserve = min(100.0, state.water_reserve + increase)

		soil_damage = 0.0
		if event.severity == RainSeverityEnum.heavy:
			soil_damage = 1 + self._rng.random() * 2
		protection = 1 - exposure(state.researched, EROSION_EXPOSURE)

		for _, _, plot in state.plots():
			plot.apply_environmental_effect(EnvironmentalEffectEnum.water_increase, increase * 0.8)
			if soil_damage > 0:
				plot.apply_environmental_effect(EnvironmentalEffectEnum.soil_damage, soil_damage, protection)
		return ApplyOutcome(message=event.message)

	def apply_drought(self, state: FarmState, event: PendingEvent) -> ApplyOutcome:
		if event.duration is not None and event.duration <= 0:
			return ApplyOutcome(skipped=True)
		current = event_lifecycle.lifecycle_of(event)
		if current.phase == EventPhaseEnum.ended:
			return ApplyOutcome(skipped=True)

		severity = DroughtSeverityEnum(_require(event, "severity"))
		factor = DROUGHT_SEVERITY_FACTORS[severity]
		reaching = exposure(state.researched, DROUGHT_EXPOSURE)
		protection = 1 - reaching

		state.water_reserve = max(0.0, state.water_reserve - 0.5 * factor * reaching)
		for _, _, plot in state.plots():
			if plot.is_empty:
				plot.apply_environmental_effect(EnvironmentalEffectEnum.water_decrease, 0.25 * factor)
				continue
			plot.apply_environmental_effect(EnvironmentalEffectEnum.water_decrease, 2 * factor, protection)
			if factor > 1:
				plot.apply_environmental_effect(
					EnvironmentalEffectEnum.yield_damage, 1.5 * (factor - 1), protection
				)

		return self._multi_day_outcome(current, DROUGHT_START_MESSAGES[severity])

	def apply_heatwave(self, state: FarmState, event: PendingEvent) -> ApplyOutcome:
		if event.duration is not None and event.duration <= 0:
			return ApplyOutcome(skipped=True)
		current = event_lifecycle.lifecycle_of(event)
		if current.phase == EventPhaseEnum.ended:
			return ApplyOutcome(skipped=True)

		reaching = exposure(state.researched, HEATWAVE_EXPOSURE)
		protection = 1 - reaching

		state.water_reserve = max(0.0, state.water_reserve - 2 * reaching)
		for _, _, plot in state.plots():
			if plot.is_empty:
				continue
			plot.apply_environmental_effect(EnvironmentalEffectEnum.water_decrease, 3.0, protection)
			heat_sensitivity = plot.crop.heat_sensitivity or 1.0
			plot.apply_environmental_effect(
				EnvironmentalEffectEnum.yield_damage, 2.0 * heat_sensitivity, protection
			)

		return self._multi_day_outcome(current, HEATWAVE_START_MESSAGE)

	def _multi_day_outcome(self, current: EventLifecycle, start_message: str) -> ApplyOutcome:
		following = event_lifecycle.advance(current)
		return ApplyOutcome(
			message=start_message if current.phase == EventPhaseEnum.scheduled else None,
			continue_event=following.phase == EventPhaseEnum.active,
			next_duration=following.days_remaining,
			lifecycle=following,
		)

	def apply_frost(self, state: FarmState, event: PendingEvent) -> ApplyOutcome:
		protection = 1 - exposure(state.researched, FROST_EXPOSURE)
		for _, _, plot in state.plots():
			if plot.is_empty:
				continue
			# plants past half growth shrug frost off
			maturity = min(1.0, plot.growth_progress / 50)
			plot.apply_environmental_effect(
				EnvironmentalEffectEnum.yield_damage, 5.0 * (1 - maturity), protection
			)
		state.cooldowns.record(EventTypeEnum.frost, state.absolute_day)
		return ApplyOutcome(message=event.message or FROST_DEFAULT_MESSAGE)

	def apply_market(self, state: FarmState, event: PendingEvent) -> ApplyOutcome:
		crop_id = _require(event, "crop_id")
		direction = MarketDirectionEnum(_require(event, "direction"))
		change = float(_require(event, "change_percent")) / 100
		current = state.market_prices.get(crop_id, 1.0)

		match direction:
			case MarketDirectionEnum.increase:
				updated = min(MARKET_PRICE_MAX, current * (1 + change))
			case MarketDirectionEnum.decrease:
				updated = max(MARKET_PRICE_MIN, current * (1 - change))
			case MarketDirectionEnum.opportunity:
				# the bonus stays in the price once the opportunity window closes
				updated = min(MARKET_OPPORTUNITY_MAX, current * (1 + change))
		state.market_prices[crop_id] = updated

		message = event.message or "Market conditions changed."
		if "%" not in message:
			message += f" {crop_id} price factor now {round_half_up(updated * 100)}%."
		return ApplyOutcome(message=message)

	def apply_policy(self, state: FarmState, event: PendingEvent) -> ApplyOutcome:
		policy_type = PolicyTypeEnum(_require(event, "policy_type"))
		balance_before = state.balance

		match policy_type:
			case PolicyTypeEnum.water_restriction:
				_logger.warning(
					"water_restriction_announced",
					irrigation_cost_increase=event.irrigation_cost_increase,
				)
				return ApplyOutcome(message=event.message)
			case PolicyTypeEnum.new_regulations:
				base_cost = event.base_cost if event.base_cost is not None else abs(event.balance_change)
				cost = self.policy_cost(base_cost, balance_before)
				state.balance = balance_before - cost
				return ApplyOutcome(
					message=f"{event.message} Final Cost: {format_currency(cost)}",
					balance_delta=-cost,
				)
			case _:
				state.balance = balance_before + event.balance_change
				return ApplyOutcome(message=event.message, balance_delta=event.balance_change)

	def apply_technology(self, state: FarmState, event: PendingEvent) -> ApplyOutcome:
		sub_type = TechnologyEventEnum(_require(event, "sub_type"))
		balance_before = state.balance

		match sub_type:
			case TechnologyEventEnum.innovation_grant:
				amount = event.amount or 0.0
				state.balance = balance_before + amount
				return ApplyOutcome(message=event.message, balance_delta=amount)
			case TechnologyEventEnum.research_breakthrough:
				discount = float(_require(event, "discount"))
				until_day = state.absolute_day + (event.duration or 0)
				state.research_discount = ResearchDiscount(rate=discount, until_day=until_day)
				return ApplyOutcome(message=event.message)
			case TechnologyEventEnum.technology_setback:
				cost = self.setback_cost(float(_require(event, "amount")), balance_before)
				state.balance = balance_before - cost
				return ApplyOutcome(
					message=f"Technology setback! Equipment malfunction repair cost: {format_currency(cost)}.",
					balance_delta=-cost,
				)

	def policy_cost(self, base_cost: float, balance: float) -> int:
		s = self._settings
		return scale_cost(
			base_cost,
			balance,
			reference_balance=s.policy_cost_reference_balance,
			reference_spread=s.policy_cost_reference_spread,
			scale_min=s.policy_cost_scale_min,
			scale_max=s.policy_cost_scale_max,
			cost_min=s.policy_cost_min,
			cost_max=s.policy_cost_max,
		)

	def setback_cost(self, base_cost: float, balance: float) -> int:
		s = self._settings
		return scale_cost(
			base_cost,
			balance,
			reference_balance=s.setback_cost_reference_balance,
			reference_spread=s.setback_cost_reference_spread,
			scale_min=s.setback_cost_scale_min,
			scale_max=s.setback_cost_scale_max,
			cost_min=s.setback_cost_min,
			cost_max=s.setback_cost_max,
		)
