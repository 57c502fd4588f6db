"""Automated farming strategies driven through the engine's strategy port."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import structlog

if TYPE_CHECKING:
	from farmsim.services.farm_engine import FarmEngine

_logger = structlog.get_logger("farmsim.strategies")


@runtime_checkable
class TickStrategy(Protocol):
	def on_tick(self, engine: FarmEngine) -> None: ...


class FarmStrategy:
	"""Base for the built-in strategies: a one-off ``setup`` plus ``on_tick``."""

	name = "base"

	def setup(self, engine: FarmEngine) -> None:
		return None

	def on_tick(self, engine: FarmEngine) -> None:
		return None


class MonocultureStrategy(FarmStrategy):
	name = "monoculture"
	crop_id = "corn"

	def setup(self, engine: FarmEngine) -> None:
		planted = 0
		for row in range(engine.grid_size):
			for col in range(engine.grid_size):
				if engine.plant(row, col, self.crop_id):
					planted += 1
		_logger.info("strategy_setup", strategy=self.name, planted=planted, balance=engine.balance)

	def on_tick(self, engine: FarmEngine) -> None:
		if engine.day % 3 != 0:
			return

		for row in range(engine.grid_size):
			for col in range(engine.grid_size):
				plot = engine.plot(row, col)
				if plot.harvest_ready:
					engine.harvest(row, col)
				elif plot.is_empty:
					engine.plant(row, col, self.crop_id)
				elif not plot.irrigated and plot.water_level < 50:
					engine.irrigate(row, col)
				elif not plot.fertilized and plot.growth_progress > 10:
					engine.fertilize(row, col)

		if engine.day % 30 == 0:
			drip = engine.technologies.find("drip_irrigation")
			if drip is not None and not engine.has_technology(drip.id) and engine.balance > drip.cost * 1.2:
				engine.research_technology(drip.id)
			elif (
				not engine.has_technology("precision_drones")
				and engine.has_technology("soil_sensors")
				and engine.balance > 50000
			):
				engine.research_technology("precision_drones")


class DiverseCropsStrategy(FarmStrategy):
	name = "diverse"

	def setup(self, engine: FarmEngine) -> None:
		crop_ids = [crop.id for crop in engine.crops.plantable()]
		if not crop_ids:
			_logger.error("strategy_setup_no_crops", strategy=self.name)
			return
		for row in range(engine.grid_size):
			for col in range(engine.grid_size):
				engine.plant(row, col, crop_ids[(row + col) % len(crop_ids)])
		_logger.info("strategy_setup", strategy=self.name, balance=engine.balance)

	def on_tick(self, engine: FarmEngine) -> None:
		if engine.day % 3 != 0:
			return
		crop_ids = [crop.id for crop in engine.crops.plantable()]
		if not crop_ids:
			return

		for row in range(engine.grid_size):
			for col in range(engine.grid_size):
				plot = engine.plot(row, col)
				if plot.harvest_ready:
					engine.harvest(row, col)
				elif plot.is_empty:
					# rotate by position and a ten-day window
					index = (row + col + engine.day // 10) % len(crop_ids)
					engine.plant(row, col, crop_ids[index])
				elif not plot.irrigated and plot.water_level < 60:
					engine.irrigate(row, col)
				elif not plot.fertilized and plot.growth_progress > 20:
					engine.fertilize(row, col)

		if engine.day % 30 == 0:
			if not engine.has_technology("no_till_farming") and engine.balance > 25000:
				engine.research_technology("no_till_farming")
			elif not engine.has_technology("soil_sensors") and engine.balance > 20000:
				engine.research_technology("soil_sensors")
			elif (
				not engine.has_technology("silvopasture")
				and engine.has_technology("no_till_farming")
				and engine.balance > 35000
			):
				engine.research_technology("silvopasture")


class TechFocusStrategy(FarmStrategy):
	name = "tech-focus"
	crop_id = "lettuce"
	research_queue = (
		"soil_sensors",
		"drip_irrigation",
		"precision_drones",
		"ai_irrigation",
		"drought_resistant",
		"no_till_farming",
		"renewable_energy",
		"greenhouse",
		"silvopasture",
	)

	def _income_area(self, engine: FarmEngine) -> int:
		return math.ceil(engine.grid_size / 2)

	def setup(self, engine: FarmEngine) -> None:
		size = self._income_area(engine)
		for row in range(size):
			for col in range(size):
				engine.plant(row, col, self.crop_id)
		_logger.info("strategy_setup", strategy=self.name, balance=engine.balance)

	def on_tick(self, engine: FarmEngine) -> None:
		size = self._income_area(engine)
		if engine.day % 5 == 0:
			for row in range(engine.grid_size):
				for col in range(engine.grid_size):
					plot = engine.plot(row, col)
					if plot.harvest_ready:
						engine.harvest(row, col)
					elif plot.is_empty and row < size and col < size:
						engine.plant(row, col, self.crop_id)
					elif not plot.is_empty and not plot.irrigated and plot.water_level < 30:
						engine.irrigate(row, col)

		if engine.day % 10 == 0:
			for tech_id in self.research_queue:
				tech = engine.technologies.find(tech_id)
				if tech is None or tech.researched or engine.balance <= tech.cost * 1.1:
					continue
				# one research per check; prerequisites may still refuse it
				if engine.research_technology(tech_id):
					break


class WaterSavingStrategy(FarmStrategy):
	name = "water-saving"
	crop_ids = ("grapes", "almonds")

	def _crop_for(self, engine: FarmEngine, row: int, col: int) -> str:
		return self.crop_ids[(row * engine.grid_size + col) % len(self.crop_ids)]

	def setup(self, engine: FarmEngine) -> None:
		for row in range(engine.grid_size):
			for col in range(engine.grid_size):
				engine.plant(row, col, self._crop_for(engine, row, col))
		_logger.info("strategy_setup", strategy=self.name, balance=engine.balance)

	def on_tick(self, engine: FarmEngine) -> None:
		if engine.day % 3 != 0:
			return

		for row in range(engine.grid_size):
			for col in range(engine.grid_size):
				plot = engine.plot(row, col)
				if plot.harvest_ready:
					engine.harvest(row, col)
				elif plot.is_empty:
					engine.plant(row, col, self._crop_for(engine, row, col))
				elif not plot.irrigated and plot.water_level < 35 and engine.water_reserve > 20:
					engine.irrigate(row, col)

		if engine.day % 30 == 0:
			if not engine.has_technology("drip_irrigation") and engine.balance > 30000:
				engine.research_technology("drip_irrigation")
			elif not engine.has_technology("soil_sensors") and engine.balance > 20000:
				engine.research_technology("soil_sensors")
			elif not engine.has_technology("drought_resistant") and engine.balance > 40000:
				engine.research_technology("drought_resistant")
			elif (
				not engine.has_technology("ai_irrigation")
				and engine.has_technology("drip_irrigation")
				and engine.has_technology("soil_sensors")
				and engine.balance > 55000
			):
				engine.research_technology("ai_irrigation")


class NoActionStrategy(FarmStrategy):
	"""The farm runs passively."""

	name = "no-action"


STRATEGIES: dict[str, type[FarmStrategy]] = {
	strategy.name: strategy
	for strategy in (
		MonocultureStrategy,
		DiverseCropsStrategy,
		TechFocusStrategy,
		WaterSavingStrategy,
		NoActionStrategy,
	)
}


def get_strategy(strategy_id: str) -> FarmStrategy:
	"""Instantiate a built-in strategy; unknown ids fall back to no-action."""
	strategy_cls = STRATEGIES.get(strategy_id)
	if strategy_cls is None:
		_logger.error("unknown_strategy", strategy=strategy_id, fallback=NoActionStrategy.name)
		return NoActionStrategy()
	return strategy_cls()
