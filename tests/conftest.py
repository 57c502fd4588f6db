"""Shared pytest fixtures — settings, seeded engines, farm states, scripted RNG."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import numpy as np
import pytest

from farmsim.config import Settings
from farmsim.models.crops import CropCatalog
from farmsim.models.farm import FarmState
from farmsim.models.plot import Plot
from farmsim.schemas.farm import ClimateState
from farmsim.services.event_engine import EventEngine
from farmsim.services.farm_engine import FarmEngine


class ScriptedRng:
	"""Stands in for ``numpy.random.Generator`` with a fixed sequence of draws."""

	def __init__(self, randoms: list[float] | None = None, integer: int = 0) -> None:
		self.randoms = list(randoms or [])
		self.integer = integer
		self.integer_calls: list[int] = []

	def random(self) -> float:
		if not self.randoms:
			raise AssertionError("ScriptedRng ran out of uniform draws")
		return self.randoms.pop(0)

	def integers(self, span: int) -> int:
		self.integer_calls.append(span)
		return self.integer


@pytest.fixture
def settings() -> Settings:
	"""Defaults only; ignores any local .env file."""
	return Settings(_env_file=None)


@pytest.fixture
def crop_catalog() -> CropCatalog:
	return CropCatalog.default()


@pytest.fixture
def rng() -> np.random.Generator:
	return np.random.default_rng(1234)


@pytest.fixture
def engine(settings: Settings) -> FarmEngine:
	return FarmEngine(settings, seed=42)


@pytest.fixture
def make_state() -> Callable[..., FarmState]:
	"""Factory for small farm states detached from any engine."""

	def _make(grid_size: int = 2, **overrides: Any) -> FarmState:
		plot_rng = np.random.default_rng(0)
		values: dict[str, Any] = {
			"grid": [[Plot(rng=plot_rng) for _ in range(grid_size)] for _ in range(grid_size)],
			"balance": 100000.0,
			"water_reserve": 75.0,
			"climate": ClimateState(drought_probability=0.05, heatwave_probability=0.08),
			"farm_health": 85,
		}
		values.update(overrides)
		return FarmState(**values)

	return _make


@pytest.fixture
def event_engine(settings: Settings, crop_catalog: CropCatalog) -> EventEngine:
	return EventEngine(np.random.default_rng(7), settings, crop_catalog)


@pytest.fixture
def scripted_engine(settings: Settings, crop_catalog: CropCatalog) -> Callable[..., EventEngine]:
	"""Event engine whose draws come from a ``ScriptedRng``."""

	def _make(randoms: list[float] | None = None, integer: int = 0) -> EventEngine:
		return EventEngine(ScriptedRng(randoms, integer), settings, crop_catalog)

	return _make
