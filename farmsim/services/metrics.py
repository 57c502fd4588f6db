"""Farm-wide aggregates — health, value and the sustainability score."""

from __future__ import annotations

from collections import Counter
from collections.abc import Collection, Iterable, Sequence

from farmsim.models.crops import CropCatalog
from farmsim.models.plot import Plot
from farmsim.models.technology import TechnologyDefinition
from farmsim.utils import round_half_up
from farmsim.schemas.farm import SustainabilityBreakdown

Grid = Sequence[Sequence[Plot]]

BASE_LAND_VALUE = 50000
SOIL_VALUE_MULTIPLIER = 25
TECH_DEPRECIATION_FACTOR = 0.80
DEFAULT_FARM_HEALTH = 50

SUSTAINABLE_TECH_POINTS: dict[str, int] = {
	"no_till_farming": 20,
	"silvopasture": 20,
	"drip_irrigation": 15,
	"renewable_energy": 15,
	"precision_drones": 15,
	"ai_irrigation": 15,
	"soil_sensors": 10,
	"greenhouse": 10,
	"drought_resistant": 10,
}


def _plots(grid: Grid) -> Iterable[Plot]:
	for row in grid:
		yield from row


def calculate_farm_health(grid: Grid, water_reserve: float) -> int:
	plots = list(_plots(grid))
	if not plots:
		return DEFAULT_FARM_HEALTH

	avg_soil = sum(plot.soil_health for plot in plots) / len(plots)
	water_factor = max(0.0, min(100.0, water_reserve)) / 100
	health = round_half_up(avg_soil * 0.7 + water_factor * 100 * 0.3)
	return max(0, min(100, health))


def calculate_farm_value(grid: Grid, technologies: Iterable[TechnologyDefinition]) -> int:
	"""Land + soil quality + growing crops + depreciated technology (no cash)."""
	plots = list(_plots(grid))
	if not plots:
		return 0

	soil_value = 0.0
	growing_value = 0.0
	for plot in plots:
		soil_value += max(0.0, plot.soil_health) * SOIL_VALUE_MULTIPLIER
		if not plot.is_empty and plot.crop.harvest_value > 0 and plot.growth_progress > 0:
			growing_value += plot.crop.harvest_value * (plot.growth_progress / 100)

	tech_value = sum(tech.cost * TECH_DEPRECIATION_FACTOR for tech in technologies if tech.researched)

	total = BASE_LAND_VALUE + soil_value + growing_value + tech_value
	floor = BASE_LAND_VALUE + 10 * SOIL_VALUE_MULTIPLIER * len(plots)
	return round_half_up(max(floor, total))


def _diversity_score(grid: Grid, crop_catalog: CropCatalog) -> int:
	counts: Counter[str] = Counter()
	monocrop_penalty = 0
	for plot in _plots(grid):
		if plot.is_empty:
			continue
		counts[plot.crop.id] += 1
		if plot.consecutive_plantings > 0:
			monocrop_penalty += plot.consecutive_plantings * 2

	total = sum(counts.values())
	if total == 0:
		return 0

	max_possible = min(total, len(crop_catalog) - 1)
	raw = (len(counts) / max_possible) * 100 if max_possible > 0 else 0.0
	dominant_share = max(counts.values()) / total
	distribution_penalty = (dominant_share - 0.5) * 100 if dominant_share > 0.5 else 0.0
	monocrop_score_penalty = min(50.0, monocrop_penalty / total * 10)
	return round_half_up(max(0.0, raw - distribution_penalty - monocrop_score_penalty))


def _tech_score(technologies: Iterable[TechnologyDefinition], researched: Collection[str]) -> int:
	known = {tech.id for tech in technologies}
	possible = 0
	earned = 0
	for tech_id, points in SUSTAINABLE_TECH_POINTS.items():
		if tech_id not in known:
			continue
		possible += points
		if tech_id in researched:
			earned += points
	return round_half_up(earned / possible * 100) if possible > 0 else 0


def calculate_sustainability(
	grid: Grid,
	crop_catalog: CropCatalog,
	technologies: Iterable[TechnologyDefinition],
	researched: Collection[str],
) -> SustainabilityBreakdown:
	plots = list(_plots(grid))
	avg_soil = sum(plot.soil_health for plot in plots) / len(plots) if plots else 0.0
	soil_score = round_half_up(avg_soil)
	diversity_score = _diversity_score(grid, crop_catalog)
	tech_score = _tech_score(technologies, researched)
	total = round_half_up(soil_score * 0.4 + diversity_score * 0.3 + tech_score * 0.3)
	return SustainabilityBreakdown(
		total=total,
		soil_score=soil_score,
		diversity_score=diversity_score,
		tech_score=tech_score,
	)
