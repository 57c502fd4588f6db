"""Headless batch runs of the built-in strategies.

A run stops only at a year boundary, once the target year is reached or the
farm is insolvent (balance at or below zero).
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from farmsim.config import Settings, get_settings
from farmsim.observability import run_context
from farmsim.schemas.farm import StrategyRunResult
from farmsim.services.farm_engine import FarmEngine
from farmsim.services.strategies import STRATEGIES, get_strategy

_logger = structlog.get_logger("farmsim.batch")

DEFAULT_END_YEAR = 50
STOP_TARGET_YEAR = "target_year"
STOP_INSOLVENT = "insolvent"


def run_strategy(
	strategy_id: str,
	*,
	end_year: int = DEFAULT_END_YEAR,
	settings: Settings | None = None,
	seed: int | None = None,
) -> StrategyRunResult:
	settings = settings or get_settings()
	with run_context(strategy_id, seed):
		engine = FarmEngine(settings, seed=seed)
		engine.use_strategy(get_strategy(strategy_id))
		_logger.info("strategy_run_started", end_year=end_year)

		while True:
			year_before = engine.year
			engine.tick()
			if engine.year == year_before:
				continue
			if engine.year >= end_year:
				stop_reason = STOP_TARGET_YEAR
				break
			if engine.balance <= 0:
				stop_reason = STOP_INSOLVENT
				break

		result = summarize(engine, strategy_id, stop_reason)
		_logger.info("strategy_run_finished", **result.model_dump(mode="json"))
	return result


def summarize(engine: FarmEngine, strategy_id: str, stop_reason: str) -> StrategyRunResult:
	return StrategyRunResult(
		strategy=strategy_id,
		stop_reason=stop_reason,
		year=engine.year,
		day=engine.day,
		balance=engine.balance,
		farm_value=engine.farm_value,
		farm_health=engine.farm_health,
		water_reserve=engine.water_reserve,
		sustainability=engine.sustainability(),
		researched_technologies=engine.researched_technologies,
	)


def run_batch(
	strategy_ids: Iterable[str] | None = None,
	*,
	end_year: int = DEFAULT_END_YEAR,
	settings: Settings | None = None,
	seed: int | None = None,
) -> list[StrategyRunResult]:
	"""Run each strategy on a fresh engine; every run uses the same seed."""
	ids = list(STRATEGIES) if strategy_ids is None else list(strategy_ids)
	return [run_strategy(strategy_id, end_year=end_year, settings=settings, seed=seed) for strategy_id in ids]
