"""Plot — one grid cell with its own soil, water, crop and pest state.

Lifecycle::

    empty ──plant()──▶ growing ──update() reaches 100%──▶ harvest_ready
      ▲                                                        │
      └────────────────────────harvest()───────────────────────┘

``consecutive_plantings``, ``pest_pressure`` and ``crop_history`` survive a
harvest so the next ``plant()`` can reward rotation or punish monocropping.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Collection
from dataclasses import dataclass, field

import numpy as np

from farmsim.models.crops import EMPTY_CROP, CropDefinition
from farmsim.models.enums import EnvironmentalEffectEnum, PlotStateEnum
from farmsim.utils import clamp, round_half_up

CROP_HISTORY_LIMIT = 10

SOIL_MIN = 10.0
SOIL_MAX = 100.0
WATER_MAX = 100.0
GROWTH_MAX = 100.0
PEST_MAX = 80.0
YIELD_MAX = 150.0

# Empty plot soil dynamics
EMPTY_SOIL_REGEN = 0.008
EMPTY_SOIL_DEGRADATION_DRY = 0.015
EMPTY_SOIL_DEGRADATION_WET = 0.008

NO_TILL = "no_till_farming"
SILVOPASTURE = "silvopasture"
DRIP_IRRIGATION = "drip_irrigation"
AI_IRRIGATION = "ai_irrigation"
DROUGHT_RESISTANT = "drought_resistant"
SOIL_SENSORS = "soil_sensors"


@dataclass(slots=True)
class CropHistoryEntry:
	crop_id: str
	duration: int


@dataclass(slots=True)
class HarvestOutcome:
	value: int
	crop_name: str
	yield_percentage: int


@dataclass
class Plot:
	crop: CropDefinition = EMPTY_CROP
	water_level: float = 80.0
	soil_health: float = 85.0
	growth_progress: float = 0.0
	days_since_planting: int = 0
	fertilized: bool = False
	irrigated: bool = False
	harvest_ready: bool = False
	expected_yield: float = 0.0
	consecutive_plantings: int = 0
	pest_pressure: float = 5.0
	crop_history: deque[CropHistoryEntry] = field(
		default_factory=lambda: deque(maxlen=CROP_HISTORY_LIMIT)
	)
	rng: np.random.Generator = field(default_factory=np.random.default_rng, repr=False, compare=False)

	@property
	def is_empty(self) -> bool:
		return self.crop.is_empty

	@property
	def state(self) -> PlotStateEnum:
		if self.crop.is_empty:
			return PlotStateEnum.empty
		if self.harvest_ready:
			return PlotStateEnum.harvest_ready
		return PlotStateEnum.growing

	def plant(self, crop: CropDefinition) -> bool:
		if crop.is_empty:
			return False

		if not self.crop.is_empty:
			self._record_history(self.crop.id, self.days_since_planting)
			previous_crop_id: str | None = self.crop.id
		elif self.crop_history:
			previous_crop_id = self.crop_history[-1].crop_id
		else:
			previous_crop_id = None

		if previous_crop_id is None:
			self.consecutive_plantings = 0
		elif previous_crop_id == crop.id:
			self.consecutive_plantings += 1
			self.pest_pressure = min(PEST_MAX, self.pest_pressure + 15 * self.consecutive_plantings)
		else:
			self.consecutive_plantings = 0
			self.pest_pressure = max(0.0, self.pest_pressure - 40)

		self.crop = crop
		self._reset_cycle()

		monocrop_penalty = self.consecutive_plantings * 4
		pest_penalty = self.pest_pressure / 2.5
		self.expected_yield = max(30.0, 100 - monocrop_penalty - pest_penalty)
		return True

	def irrigate(self, water_efficiency: float = 1.0) -> bool:
		if self.crop.is_empty or self.irrigated:
			return False
		self.irrigated = True
		self.water_level = min(WATER_MAX, self.water_level + 30 * water_efficiency)
		return True

	def fertilize(self, fertilizer_efficiency: float = 1.0) -> bool:
		if self.crop.is_empty or self.fertilized:
			return False
		self.fertilized = True

		soil_factor = 0.5 + self.soil_health / 200
		self.soil_health = min(SOIL_MAX, self.soil_health + 10 * fertilizer_efficiency * soil_factor)

		yield_boost = 15 * fertilizer_efficiency * soil_factor * (1 - self.pest_pressure / 150)
		self.expected_yield = min(YIELD_MAX, self.expected_yield + yield_boost)
		return True

	def update(self, water_reserve: float, researched: Collection[str]) -> bool:
		"""Advance one day. Returns True on the day the crop becomes harvest-ready."""
		self.irrigated = False

		if self.crop.is_empty:
			self._update_fallow(water_reserve, researched)
			return False

		self.days_since_planting += 1

		growth_rate = self.growth_rate(water_reserve, researched)
		self.growth_progress = min(GROWTH_MAX, self.growth_progress + growth_rate)

		became_ready = False
		if not self.harvest_ready and self.growth_progress >= GROWTH_MAX:
			self.harvest_ready = True
			became_ready = True

		if self.harvest_ready:
			# unharvested crops slowly lose value
			self.expected_yield = max(0.0, self.expected_yield - 0.1)

		self._consume_water(researched)
		self._apply_water_stress(researched)
		self._degrade_soil(researched)
		self._update_pests()
		return became_ready

	def growth_rate(self, water_reserve: float, researched: Collection[str]) -> float:
		if self.crop.is_empty or self.harvest_ready:
			return 0.0
		if self.crop.growth_time <= 0:
			return 0.0
		base_rate = 100 / self.crop.growth_time

		combined_water = 0.8 * (self.water_level / 100) + 0.2 * (water_reserve / 100)
		water_multiplier = max(0.0, combined_water) ** self.crop.water_sensitivity
		if DROUGHT_RESISTANT in researched and water_multiplier < 0.8:
			water_multiplier = max(water_multiplier, 0.5)
		if AI_IRRIGATION in researched and water_multiplier < 1.0:
			water_multiplier *= 1.05

		soil_multiplier = 0.3 + 0.7 * (self.soil_health / 100) ** 0.8
		if SOIL_SENSORS in researched:
			soil_multiplier *= 1.05
		if NO_TILL in researched:
			soil_multiplier *= 1.03

		fertilizer_multiplier = 1.2 if self.fertilized else 1.0
		pest_multiplier = 1 - self.pest_pressure / 250

		rate = base_rate * water_multiplier * soil_multiplier * fertilizer_multiplier * pest_multiplier
		return max(0.0, rate)

	def harvest(self, water_reserve: float, market_price_factor: float) -> HarvestOutcome:
		if self.crop.is_empty:
			return HarvestOutcome(value=0, crop_name="Nothing", yield_percentage=0)
		if not self.harvest_ready:
			return HarvestOutcome(value=0, crop_name=self.crop.name, yield_percentage=0)

		yield_percentage = clamp(self.expected_yield, 0.0, YIELD_MAX)
		value = round_half_up(self.crop.harvest_value * (yield_percentage / 100) * market_price_factor)
		outcome = HarvestOutcome(
			value=value,
			crop_name=self.crop.name,
			yield_percentage=round_half_up(yield_percentage),
		)

		monocrop_factor = 1 + self.consecutive_plantings * 0.15
		harvest_impact = (4 + abs(self.crop.soil_impact)) * monocrop_factor
		self.soil_health = max(SOIL_MIN, self.soil_health - harvest_impact)
		self._record_history(self.crop.id, self.days_since_planting)

		self.crop = EMPTY_CROP
		self._reset_cycle()
		self.expected_yield = 0.0
		return outcome

	def apply_environmental_effect(
		self,
		effect: EnvironmentalEffectEnum | str,
		magnitude: float,
		protection: float = 0.0,
	) -> None:
		"""Apply an event effect; ``protection`` only attenuates adverse effects."""
		effect = EnvironmentalEffectEnum(effect)
		protection = clamp(protection, 0.0, 1.0)
		effective = magnitude * (1 - protection)

		match effect:
			case EnvironmentalEffectEnum.water_increase:
				self.water_level = min(WATER_MAX, self.water_level + magnitude)
			case EnvironmentalEffectEnum.water_decrease:
				self.water_level = max(0.0, self.water_level - effective)
			case EnvironmentalEffectEnum.soil_damage:
				self.soil_health = max(SOIL_MIN, self.soil_health - effective)
			case EnvironmentalEffectEnum.soil_improve:
				self.soil_health = min(SOIL_MAX, self.soil_health + magnitude)
			case EnvironmentalEffectEnum.yield_damage:
				if not self.crop.is_empty:
					self.expected_yield = max(0.0, self.expected_yield - effective)
			case EnvironmentalEffectEnum.growth_boost:
				if not self.crop.is_empty and not self.harvest_ready:
					self.growth_progress = min(GROWTH_MAX, self.growth_progress + magnitude)
			case EnvironmentalEffectEnum.pest_increase:
				self.pest_pressure = min(PEST_MAX, self.pest_pressure + effective)
			case EnvironmentalEffectEnum.pest_decrease:
				self.pest_pressure = max(0.0, self.pest_pressure - magnitude)

	def _reset_cycle(self) -> None:
		self.growth_progress = 0.0
		self.days_since_planting = 0
		self.fertilized = False
		self.irrigated = False
		self.harvest_ready = False

	def _record_history(self, crop_id: str, duration: int) -> None:
		self.crop_history.append(CropHistoryEntry(crop_id=crop_id, duration=duration))

	def _update_fallow(self, water_reserve: float, researched: Collection[str]) -> None:
		no_till = NO_TILL in researched
		soil_change = EMPTY_SOIL_REGEN * (1.2 if no_till else 1.0)

		if water_reserve < 40 or self.water_level < 30:
			soil_change -= EMPTY_SOIL_DEGRADATION_DRY * (0.5 if no_till else 1.0)
		if self.water_level > 95:
			soil_change -= EMPTY_SOIL_DEGRADATION_WET * (0.3 if no_till else 1.0)

		self.soil_health = clamp(self.soil_health + soil_change, SOIL_MIN, SOIL_MAX)
		self.water_level = max(0.0, self.water_level - 0.05)
		self.pest_pressure = max(0.0, self.pest_pressure - 0.1)

	def _consume_water(self, researched: Collection[str]) -> None:
		efficiency = 1.0
		if DRIP_IRRIGATION in researched:
			efficiency *= 0.8
		if AI_IRRIGATION in researched:
			efficiency *= 0.9
		if DROUGHT_RESISTANT in researched:
			efficiency *= 0.95
		self.water_level = max(0.0, self.water_level - self.crop.water_use * efficiency)

	def _apply_water_stress(self, researched: Collection[str]) -> None:
		if self.water_level >= 30 or self.harvest_ready:
			return
		stress_penalty = 0.8 * (1 - self.water_level / 30)
		resistance = 0.6 if DROUGHT_RESISTANT in researched else 1.0
		self.expected_yield = max(10.0, self.expected_yield - stress_penalty * resistance)

	def _degrade_soil(self, researched: Collection[str]) -> None:
		degradation = 0.08
		if self.consecutive_plantings > 0:
			degradation *= 1 + self.consecutive_plantings * 0.25
		if self.pest_pressure > 50:
			degradation *= 1.15
		degradation *= 0.4 if NO_TILL in researched else 1.1

		regen = 0.0
		if NO_TILL in researched:
			regen += 0.01
		if SILVOPASTURE in researched:
			regen += 0.01

		self.soil_health = clamp(self.soil_health - degradation + regen, SOIL_MIN, SOIL_MAX)

	def _update_pests(self) -> None:
		if self.soil_health < 40 and self.rng.random() < 0.015:
			self.pest_pressure = min(PEST_MAX, self.pest_pressure + 1.5)
		if 0 < self.pest_pressure < 30 and not self.fertilized:
			self.pest_pressure = max(0.0, self.pest_pressure - 0.05)
