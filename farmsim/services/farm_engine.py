"""Tick orchestrator — one simulated day per ``tick()`` plus the player action API.

Order of a tick:

1. daily overhead (with a low-balance warning)
2. day counters advance, every plot updates row-major
3. season boundary: rotate, fluctuate prices, seasonal events, reserve recovery
4. year boundary: interest, farm value, climate drift, sustainability subsidy
5. due events apply in queue order, each in its own failure boundary
6. farm health recomputes
7. periodic random event
8. strategy hook, in its own failure boundary

Rule violations never raise: actions answer with ``ActionResult`` /
``HarvestResult`` carrying an ``ActionFailureReason``. The boolean methods are
thin wrappers over the ``*_result`` variants.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, TypeVar

import numpy as np
import structlog

from farmsim.config import Settings, get_settings
from farmsim.models.crops import CropCatalog
from farmsim.models.enums import ActionFailureReason, SeasonEnum
from farmsim.models.farm import FarmState
from farmsim.models.plot import Plot
from farmsim.models.technology import DEFAULT_TECHNOLOGIES, TechnologyDefinition, TechnologyTree
from farmsim.observability import bind_tick_context
from farmsim.schemas.farm import (
	ActionResult,
	ClimateState,
	CropHistoryRead,
	FarmNotice,
	FarmSnapshot,
	HarvestResult,
	PlotSnapshot,
	SustainabilityBreakdown,
)
from farmsim.services.event_engine import EventEngine
from farmsim.services.metrics import calculate_farm_health, calculate_farm_value, calculate_sustainability
from farmsim.services.tech_effects import resolve_effect
from farmsim.utils import clamp, format_currency, round_half_up

if TYPE_CHECKING:
	from farmsim.services.strategies import TickStrategy

_logger = structlog.get_logger("farmsim.engine")

R = TypeVar("R")

INITIAL_PRICE_MIN = 0.9
INITIAL_PRICE_SPREAD = 0.2
SEASONAL_PRICE_MIN = 0.5
SEASONAL_PRICE_MAX = 2.0


class FarmEngine:
	"""Owns one game's ``FarmState`` and drives it a day at a time."""

	def __init__(
		self,
		settings: Settings | None = None,
		crop_catalog: CropCatalog | None = None,
		technologies: Iterable[TechnologyDefinition] | None = None,
		*,
		rng: np.random.Generator | None = None,
		seed: int | None = None,
		strategy: TickStrategy | None = None,
	):
		self.settings = settings or get_settings()
		self.crops = crop_catalog or CropCatalog.default()
		self.technologies = TechnologyTree(DEFAULT_TECHNOLOGIES if technologies is None else technologies)
		if rng is None:
			rng = np.random.default_rng(seed if seed is not None else self.settings.random_seed)
		self.rng = rng
		self.events = EventEngine(self.rng, self.settings, self.crops)
		self.strategy = strategy

		s = self.settings
		grid = [[Plot(rng=self.rng) for _ in range(s.grid_size)] for _ in range(s.grid_size)]
		self.state = FarmState(
			grid=grid,
			balance=s.initial_balance,
			water_reserve=s.initial_water_reserve,
			climate=ClimateState(
				drought_probability=s.initial_drought_probability,
				heatwave_probability=s.initial_heatwave_probability,
			),
			farm_health=s.initial_farm_health,
			days_per_year=s.days_per_year,
			notices=deque(maxlen=s.notice_log_size),
		)
		for crop in self.crops.plantable():
			self.state.market_prices[crop.id] = INITIAL_PRICE_MIN + self.rng.random() * INITIAL_PRICE_SPREAD
		self.state.farm_value = calculate_farm_value(self.state.grid, self.technologies)

	# ── Read accessors ──────────────────────────────────────────────────────

	@property
	def balance(self) -> float:
		return self.state.balance

	@property
	def farm_value(self) -> int:
		return self.state.farm_value

	@property
	def farm_health(self) -> int:
		return self.state.farm_health

	@property
	def water_reserve(self) -> float:
		return self.state.water_reserve

	@property
	def year(self) -> int:
		return self.state.year

	@property
	def day(self) -> int:
		return self.state.day

	@property
	def absolute_day(self) -> int:
		return self.state.absolute_day

	@property
	def season(self) -> SeasonEnum:
		return self.state.season

	@property
	def climate(self) -> ClimateState:
		return self.state.climate.model_copy()

	@property
	def grid_size(self) -> int:
		return len(self.state.grid)

	@property
	def market_prices(self) -> dict[str, float]:
		return dict(self.state.market_prices)

	@property
	def researched_technologies(self) -> list[str]:
		return list(self.state.researched)

	@property
	def notices(self) -> list[FarmNotice]:
		return list(self.state.notices)

	def plot(self, row: int, col: int) -> Plot:
		return self.state.grid[row][col]

	def has_technology(self, tech_id: str) -> bool:
		return tech_id in self.state.researched

	def tech_effect(self, effect_name: str, default: bool | float = 1.0) -> bool | float:
		return resolve_effect(effect_name, self.state.researched, self.technologies, default)

	def sustainability(self) -> SustainabilityBreakdown:
		return calculate_sustainability(self.state.grid, self.crops, self.technologies, self.state.researched)

	def research_cost(self, tech_id: str) -> int | None:
		"""Current price of ``tech_id``, including an active breakthrough discount.

		Unknown ids price at ``None``.
		"""
		tech = self.technologies.find(tech_id)
		if tech is None:
			_logger.debug("research_cost_unknown_technology", tech_id=tech_id)
			return None
		return self._price(tech)

	def _price(self, tech: TechnologyDefinition) -> int:
		discount = self.state.research_discount
		if discount is not None and self.state.absolute_day <= discount.until_day:
			return round_half_up(tech.cost * (1 - discount.rate))
		return round_half_up(tech.cost)

	def plot_snapshot(self, row: int, col: int) -> PlotSnapshot:
		plot = self.state.grid[row][col]
		return PlotSnapshot(
			row=row,
			col=col,
			state=plot.state,
			crop_id=plot.crop.id,
			crop_name=plot.crop.name,
			water_level=plot.water_level,
			soil_health=plot.soil_health,
			growth_progress=plot.growth_progress,
			days_since_planting=plot.days_since_planting,
			fertilized=plot.fertilized,
			irrigated=plot.irrigated,
			harvest_ready=plot.harvest_ready,
			expected_yield=plot.expected_yield,
			consecutive_plantings=plot.consecutive_plantings,
			pest_pressure=plot.pest_pressure,
			crop_history=[
				CropHistoryRead(crop_id=entry.crop_id, duration=entry.duration) for entry in plot.crop_history
			],
		)

	def snapshot(self) -> FarmSnapshot:
		state = self.state
		return FarmSnapshot(
			year=state.year,
			day=state.day,
			absolute_day=state.absolute_day,
			season=state.season,
			balance=state.balance,
			farm_value=state.farm_value,
			farm_health=state.farm_health,
			water_reserve=state.water_reserve,
			climate=state.climate.model_copy(),
			market_prices=dict(state.market_prices),
			researched_technologies=list(state.researched),
			pending_event_count=len(state.pending_events),
			sustainability=self.sustainability(),
		)

	# ── Tick ────────────────────────────────────────────────────────────────

	def tick(self) -> None:
		state = self.state
		s = self.settings

		state.balance -= s.daily_overhead
		if state.balance < s.low_balance_warning:
			state.notify("Warning: Farm operating at a significant loss!", is_alert=True)

		state.day += 1
		state.season_day += 1
		self._update_plots()

		if state.season_day > s.days_per_season:
			state.season_day = 1
			self._advance_season()
		if state.day > s.days_per_year:
			state.day = 1
			self._advance_year()

		bind_tick_context(state.year, state.day, str(state.season), state.absolute_day)

		self.events.process_due(state)
		state.farm_health = calculate_farm_health(state.grid, state.water_reserve)

		if state.day % s.random_event_interval_days == 0 and self.rng.random() < s.random_event_chance:
			self.events.schedule(state, self.events.generate_random_event(state))

		self._run_strategy()

	def run_days(self, days: int) -> None:
		for _ in range(days):
			self.tick()

	def _update_plots(self) -> None:
		state = self.state
		ready: list[tuple[int, int, Plot]] = []
		for row, col, plot in state.plots():
			if plot.update(state.water_reserve, state.researched):
				ready.append((row, col, plot))
		for row, col, plot in ready:
			state.notify(f"{plot.crop.name} at row {row + 1}, col {col + 1} is ready for harvest!")

	def _advance_season(self) -> None:
		state = self.state
		state.season = state.season.next()
		state.notify(f"Season changed to {state.season}")
		_logger.info("season_changed", season=str(state.season), year=state.year)
		self._fluctuate_market_prices()

		for event in self.events.seasonal_events(state):
			self.events.enqueue(state, event)

		match state.season:
			case SeasonEnum.spring:
				recovery = int(8 + self.rng.random() * 11)
			case SeasonEnum.fall | SeasonEnum.winter:
				recovery = int(4 + self.rng.random() * 5)
			case _:
				recovery = 0
		if recovery > 0:
			state.water_reserve = min(100.0, state.water_reserve + recovery)
			state.notify(f"{state.season} precipitation replenished {recovery}% water reserves.")

	def _fluctuate_market_prices(self) -> None:
		prices = self.state.market_prices
		for crop in self.crops.plantable():
			change = 0.95 + self.rng.random() * 0.1
			prices[crop.id] = clamp(prices.get(crop.id, 1.0) * change, SEASONAL_PRICE_MIN, SEASONAL_PRICE_MAX)

	def _advance_year(self) -> None:
		state = self.state
		s = self.settings
		state.year += 1

		if state.balance > 0:
			interest = int(state.balance * s.annual_interest_rate)
			if interest > 0:
				state.balance += interest
				state.notify(f"Earned {format_currency(interest)} in interest.")
		elif state.balance < 0:
			debt_interest = int(abs(state.balance) * s.annual_interest_rate * s.debt_interest_multiplier)
			state.balance -= debt_interest
			state.notify(f"Paid {format_currency(debt_interest)} in interest on debt.", is_alert=True)

		state.farm_value = calculate_farm_value(state.grid, self.technologies)
		score = self.sustainability()

		climate = state.climate
		climate.drought_probability = min(
			s.drought_probability_cap, climate.drought_probability + s.climate_drift_per_year
		)
		climate.heatwave_probability = min(
			s.heatwave_probability_cap, climate.heatwave_probability + s.climate_drift_per_year
		)

		state.notify(f"Happy New Year! Completed Year {state.year - 1}.")

		if score.total >= s.sustainability_threshold_high:
			bonus = s.sustainability_subsidy_high
			message = f"Received {format_currency(bonus)} high-tier sustainability subsidy!"
		elif score.total >= s.sustainability_threshold_med:
			bonus = s.sustainability_subsidy_med
			message = f"Received {format_currency(bonus)} mid-tier sustainability subsidy."
		elif score.total >= s.sustainability_threshold_low:
			bonus = s.sustainability_subsidy_low
			message = f"Received {format_currency(bonus)} low-tier sustainability subsidy."
		else:
			bonus = 0
			message = "Farm did not qualify for sustainability subsidies."
		state.balance += bonus
		state.notify(message)

		_logger.info(
			"year_completed",
			year=state.year,
			balance=state.balance,
			farm_value=state.farm_value,
			farm_health=state.farm_health,
			water_reserve=round(state.water_reserve, 2),
			sustainability=score.total,
			soil_score=score.soil_score,
			diversity_score=score.diversity_score,
			tech_score=score.tech_score,
			drought_probability=round(climate.drought_probability, 3),
			heatwave_probability=round(climate.heatwave_probability, 3),
		)

	def _run_strategy(self) -> None:
		if self.strategy is None:
			return
		try:
			self.strategy.on_tick(self)
		except Exception as exc:
			_logger.exception("strategy_failed", strategy=type(self.strategy).__name__, error=str(exc))

	# ── Actions ─────────────────────────────────────────────────────────────

	def _guard(self, action: str, failure: R, fn: Callable[..., R], *args: Any) -> R:
		try:
			return fn(*args)
		except Exception as exc:
			_logger.exception("action_failed", action=action, error=str(exc))
			return failure

	def _refuse(self, action: str, reason: ActionFailureReason, **context: Any) -> ActionResult:
		_logger.debug("action_refused", action=action, reason=str(reason), **context)
		return ActionResult(success=False, reason=reason)

	def plant(self, row: int, col: int, crop_id: str) -> bool:
		return self.plant_result(row, col, crop_id).success

	def plant_result(self, row: int, col: int, crop_id: str) -> ActionResult:
		return self._guard("plant", ActionResult(success=False), self._plant, row, col, crop_id)

	def _plant(self, row: int, col: int, crop_id: str) -> ActionResult:
		state = self.state
		if not state.in_bounds(row, col):
			return self._refuse("plant", ActionFailureReason.invalid_coordinate, row=row, col=col)

		crop = self.crops.find(crop_id)
		if crop is None or crop.is_empty:
			return self._refuse("plant", ActionFailureReason.invalid_crop_id, crop_id=crop_id)

		cost = round_half_up(crop.base_price * self.settings.planting_cost_factor)
		if state.balance < cost:
			state.notify(
				f"Cannot afford to plant {crop.name}. Cost: {format_currency(cost)}, "
				f"Balance: {format_currency(state.balance)}",
				is_alert=True,
			)
			return self._refuse("plant", ActionFailureReason.insufficient_funds, cost=cost)

		plot = state.grid[row][col]
		if not plot.is_empty:
			return self._refuse("plant", ActionFailureReason.plot_occupied, row=row, col=col)

		state.balance -= cost
		plot.plant(crop)
		_logger.debug("crop_planted", crop_id=crop.id, row=row, col=col, cost=cost)
		return ActionResult(success=True, cost=cost)

	def irrigate(self, row: int, col: int) -> bool:
		return self.irrigate_result(row, col).success

	def irrigate_result(self, row: int, col: int) -> ActionResult:
		return self._guard("irrigate", ActionResult(success=False), self._irrigate, row, col)

	def _irrigate(self, row: int, col: int) -> ActionResult:
		state = self.state
		if not state.in_bounds(row, col):
			return self._refuse("irrigate", ActionFailureReason.invalid_coordinate, row=row, col=col)

		plot = state.grid[row][col]
		cost = self.settings.irrigation_cost
		if plot.is_empty:
			state.notify("Cannot irrigate empty plot.", is_alert=True)
			return self._refuse("irrigate", ActionFailureReason.plot_empty, row=row, col=col)
		if plot.irrigated:
			return self._refuse("irrigate", ActionFailureReason.already_applied, row=row, col=col)
		if state.balance < cost:
			state.notify(f"Cannot afford irrigation ({format_currency(cost)}).", is_alert=True)
			return self._refuse("irrigate", ActionFailureReason.insufficient_funds, cost=cost)

		state.balance -= cost
		plot.irrigate(float(self.tech_effect("water_efficiency", 1.0)))
		state.notify(f"Irrigated plot at ({row}, {col}). Cost: {format_currency(cost)}")
		return ActionResult(success=True, cost=cost)

	def fertilize(self, row: int, col: int) -> bool:
		return self.fertilize_result(row, col).success

	def fertilize_result(self, row: int, col: int) -> ActionResult:
		return self._guard("fertilize", ActionResult(success=False), self._fertilize, row, col)

	def _fertilize(self, row: int, col: int) -> ActionResult:
		state = self.state
		if not state.in_bounds(row, col):
			return self._refuse("fertilize", ActionFailureReason.invalid_coordinate, row=row, col=col)

		plot = state.grid[row][col]
		cost = self.settings.fertilize_cost
		if plot.is_empty:
			state.notify("Cannot fertilize empty plot.", is_alert=True)
			return self._refuse("fertilize", ActionFailureReason.plot_empty, row=row, col=col)
		if plot.fertilized:
			return self._refuse("fertilize", ActionFailureReason.already_applied, row=row, col=col)
		if state.balance < cost:
			state.notify(f"Cannot afford fertilizer ({format_currency(cost)}).", is_alert=True)
			return self._refuse("fertilize", ActionFailureReason.insufficient_funds, cost=cost)

		state.balance -= cost
		plot.fertilize(float(self.tech_effect("fertilizer_efficiency", 1.0)))
		state.notify(f"Fertilized plot at ({row}, {col}). Cost: {format_currency(cost)}")
		return ActionResult(success=True, cost=cost)

	def harvest(self, row: int, col: int) -> HarvestResult:
		return self._guard("harvest", HarvestResult(success=False), self._harvest, row, col)

	def _harvest(self, row: int, col: int) -> HarvestResult:
		state = self.state
		if not state.in_bounds(row, col):
			return HarvestResult(success=False, reason=ActionFailureReason.invalid_coordinate)

		plot = state.grid[row][col]
		if plot.is_empty:
			return HarvestResult(success=False, reason=ActionFailureReason.plot_empty)
		if not plot.harvest_ready:
			return HarvestResult(
				success=False,
				crop_name=plot.crop.name,
				reason=ActionFailureReason.plot_not_ready,
			)

		price_factor = state.market_prices.get(plot.crop.id, 1.0)
		outcome = plot.harvest(state.water_reserve, price_factor)
		if outcome.value > 0:
			state.balance += outcome.value
		_logger.debug(
			"crop_harvested",
			crop=outcome.crop_name,
			row=row,
			col=col,
			income=outcome.value,
			yield_percentage=outcome.yield_percentage,
		)
		return HarvestResult(
			success=True,
			income=outcome.value,
			crop_name=outcome.crop_name,
			yield_percentage=outcome.yield_percentage,
		)

	def research_technology(self, tech_id: str) -> bool:
		return self.research_technology_result(tech_id).success

	def research_technology_result(self, tech_id: str) -> ActionResult:
		return self._guard("research", ActionResult(success=False), self._research, tech_id)

	def _research(self, tech_id: str) -> ActionResult:
		state = self.state
		tech = self.technologies.find(tech_id)
		if tech is None:
			return self._refuse("research", ActionFailureReason.unknown_technology, tech_id=tech_id)
		if tech.researched:
			return self._refuse("research", ActionFailureReason.already_researched, tech_id=tech_id)
		if not tech.prerequisites_met(state.researched):
			state.notify(f"Prerequisites not met for {tech.name}.", is_alert=True)
			return self._refuse("research", ActionFailureReason.prerequisites_not_met, tech_id=tech_id)

		cost = self._price(tech)
		if state.balance < cost:
			state.notify(
				f"Cannot afford {tech.name} ({format_currency(cost)}). Balance: {format_currency(state.balance)}",
				is_alert=True,
			)
			return self._refuse("research", ActionFailureReason.insufficient_funds, cost=cost)

		state.balance -= cost
		self.technologies.mark_researched(tech_id)
		state.researched.append(tech_id)
		state.notify(f"Researched {tech.name} for {format_currency(cost)}")
		_logger.info("technology_researched", tech_id=tech_id, cost=cost)
		state.farm_value = calculate_farm_value(state.grid, self.technologies)
		return ActionResult(success=True, cost=cost)

	# ── Strategy port ───────────────────────────────────────────────────────

	def use_strategy(self, strategy: TickStrategy | None) -> None:
		"""Attach ``strategy`` and run its one-off ``setup`` if it has one."""
		self.strategy = strategy
		if strategy is None:
			return
		setup = getattr(strategy, "setup", None)
		if setup is None:
			return
		try:
			setup(self)
		except Exception as exc:
			_logger.exception("strategy_setup_failed", strategy=type(strategy).__name__, error=str(exc))
