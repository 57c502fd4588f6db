from __future__ import annotations

import numpy as np
import pytest

from farmsim.models import EMPTY_CROP, CropCatalog, CropDefinition, EnvironmentalEffectEnum, PlotStateEnum
from farmsim.models.plot import PEST_MAX, SOIL_MIN, Plot


def _assert_within_bounds(plot: Plot) -> None:
    assert SOIL_MIN <= plot.soil_health <= 100
    assert 0 <= plot.water_level <= 100
    assert 0 <= plot.growth_progress <= 100
    assert 0 <= plot.pest_pressure <= PEST_MAX
    assert 0 <= plot.expected_yield <= 150
    if plot.is_empty:
        assert plot.growth_progress == 0
        assert not plot.harvest_ready


def _fast_crop() -> CropDefinition:
    return CropDefinition(
        id="radish",
        name="Radish",
        water_use=0.5,
        growth_time=1,
        harvest_value=100,
        base_price=20,
        soil_impact=-1,
        water_sensitivity=0,
        heat_sensitivity=1.0,
    )


def test_new_plot_starts_empty_with_default_levels() -> None:
    plot = Plot()

    assert plot.state == PlotStateEnum.empty
    assert plot.water_level == 80
    assert plot.soil_health == 85
    assert plot.pest_pressure == 5
    assert plot.consecutive_plantings == 0
    assert len(plot.crop_history) == 0


def test_empty_sentinel_cannot_be_planted() -> None:
    plot = Plot()

    assert plot.plant(EMPTY_CROP) is False
    assert plot.state == PlotStateEnum.empty


def test_first_planting_sets_expected_yield_from_pest_pressure(crop_catalog: CropCatalog) -> None:
    plot = Plot()

    assert plot.plant(crop_catalog.get("corn")) is True

    assert plot.state == PlotStateEnum.growing
    assert plot.consecutive_plantings == 0
    assert plot.expected_yield == pytest.approx(98.0)
    assert plot.growth_progress == 0
    assert plot.days_since_planting == 0


def test_repeated_planting_counts_consecutive_and_caps_pests(crop_catalog: CropCatalog) -> None:
    corn = crop_catalog.get("corn")
    plot = Plot()

    plot.plant(corn)
    plot.plant(corn)
    assert plot.consecutive_plantings == 1
    assert plot.pest_pressure == pytest.approx(20.0)
    plot.plant(corn)
    plot.plant(corn)

    assert plot.consecutive_plantings == 3
    assert plot.pest_pressure == pytest.approx(PEST_MAX)
    assert len(plot.crop_history) == 3
    assert plot.expected_yield == pytest.approx(100 - 3 * 4 - PEST_MAX / 2.5)


def test_replanting_after_harvest_uses_history_as_previous_crop(crop_catalog: CropCatalog) -> None:
    corn = crop_catalog.get("corn")
    plot = Plot()
    plot.plant(corn)
    plot.harvest_ready = True
    plot.harvest(75.0, 1.0)

    plot.plant(corn)

    assert plot.consecutive_plantings == 1


def test_rotation_resets_consecutive_and_lowers_pests(crop_catalog: CropCatalog) -> None:
    plot = Plot()
    plot.plant(crop_catalog.get("corn"))
    plot.plant(crop_catalog.get("corn"))
    assert plot.pest_pressure == pytest.approx(20.0)

    plot.plant(crop_catalog.get("lettuce"))

    assert plot.consecutive_plantings == 0
    assert plot.pest_pressure == 0


def test_irrigate_is_idempotent_within_a_day(crop_catalog: CropCatalog) -> None:
    plot = Plot()
    plot.plant(crop_catalog.get("corn"))
    plot.water_level = 50.0

    assert plot.irrigate() is True
    assert plot.water_level == pytest.approx(80.0)
    assert plot.irrigate() is False
    assert plot.water_level == pytest.approx(80.0)

    plot.update(75.0, [])
    assert plot.irrigated is False
    assert plot.irrigate() is True


def test_irrigate_and_fertilize_refuse_empty_plot() -> None:
    plot = Plot()

    assert plot.irrigate() is False
    assert plot.fertilize() is False
    assert plot.water_level == 80
    assert plot.soil_health == 85


def test_fertilize_raises_soil_and_yield_once(crop_catalog: CropCatalog) -> None:
    plot = Plot()
    plot.plant(crop_catalog.get("corn"))

    assert plot.fertilize() is True
    assert plot.soil_health == pytest.approx(94.25)
    assert plot.expected_yield == pytest.approx(98 + 13.875 * (1 - 5 / 150))

    assert plot.fertilize() is False
    assert plot.soil_health == pytest.approx(94.25)


def test_ideal_conditions_reach_harvest_within_growth_time() -> None:
    crop = CropDefinition(
        id="ideal",
        name="Ideal",
        water_use=0,
        growth_time=90,
        harvest_value=100,
        base_price=75,
        water_sensitivity=0,
    )
    plot = Plot(soil_health=100.0, pest_pressure=0.0)
    plot.plant(crop)
    plot.fertilize()

    became_ready = [plot.update(75.0, []) for _ in range(90)]

    assert plot.harvest_ready is True
    assert plot.growth_progress == 100
    assert plot.state == PlotStateEnum.harvest_ready
    assert became_ready.count(True) == 1


def test_harvest_round_trip_resets_cycle_but_keeps_rotation_state() -> None:
    crop = _fast_crop()
    plot = Plot()
    plot.plant(crop)
    for _ in range(5):
        plot.update(75.0, [])
    assert plot.harvest_ready is True

    plot.expected_yield = 120.0
    plot.soil_health = 50.0
    pests_before = plot.pest_pressure
    days_grown = plot.days_since_planting

    outcome = plot.harvest(75.0, 1.1)

    assert outcome.value == 132
    assert outcome.crop_name == "Radish"
    assert outcome.yield_percentage == 120
    assert plot.state == PlotStateEnum.empty
    assert plot.growth_progress == 0
    assert plot.days_since_planting == 0
    assert plot.fertilized is False
    assert plot.irrigated is False
    assert plot.harvest_ready is False
    assert plot.expected_yield == 0
    assert plot.soil_health == pytest.approx(45.0)
    assert plot.pest_pressure == pytest.approx(pests_before)
    assert plot.consecutive_plantings == 0
    assert plot.crop_history[-1].crop_id == "radish"
    assert plot.crop_history[-1].duration == days_grown


def test_harvest_value_uses_market_factor(crop_catalog: CropCatalog) -> None:
    plot = Plot()
    plot.plant(crop_catalog.get("corn"))
    plot.harvest_ready = True
    plot.expected_yield = 120.0

    outcome = plot.harvest(75.0, 1.1)

    assert outcome.value == 211


def test_harvest_before_ready_pays_nothing(crop_catalog: CropCatalog) -> None:
    plot = Plot()
    assert plot.harvest(75.0, 1.0).value == 0

    plot.plant(crop_catalog.get("corn"))
    outcome = plot.harvest(75.0, 1.0)

    assert outcome.value == 0
    assert plot.state == PlotStateEnum.growing


def test_fallow_plot_regenerates_slowly() -> None:
    plot = Plot()

    became_ready = plot.update(75.0, [])

    assert became_ready is False
    assert plot.soil_health == pytest.approx(85.008)
    assert plot.water_level == pytest.approx(79.95)
    assert plot.pest_pressure == pytest.approx(4.9)


def test_protection_attenuates_only_adverse_effects(crop_catalog: CropCatalog) -> None:
    plot = Plot()
    plot.plant(crop_catalog.get("corn"))
    plot.water_level = 50.0

    plot.apply_environmental_effect(EnvironmentalEffectEnum.yield_damage, 10.0, protection=0.4)
    plot.apply_environmental_effect(EnvironmentalEffectEnum.water_increase, 10.0, protection=0.9)

    assert plot.expected_yield == pytest.approx(92.0)
    assert plot.water_level == pytest.approx(60.0)


def test_default_protection_applies_full_magnitude(crop_catalog: CropCatalog) -> None:
    plot = Plot()
    plot.plant(crop_catalog.get("corn"))

    plot.apply_environmental_effect("water-decrease", 30.0)

    assert plot.water_level == pytest.approx(50.0)


def test_yield_damage_ignored_on_empty_plot() -> None:
    plot = Plot()

    plot.apply_environmental_effect(EnvironmentalEffectEnum.yield_damage, 50.0)

    assert plot.expected_yield == 0


def test_levels_stay_bounded_under_random_pressure(crop_catalog: CropCatalog) -> None:
    rng = np.random.default_rng(99)
    crops = crop_catalog.plantable()
    effects = list(EnvironmentalEffectEnum)
    plot = Plot(rng=rng)

    for day in range(720):
        if plot.is_empty and day % 7 == 0:
            plot.plant(crops[int(rng.integers(len(crops)))])
        if day % 3 == 0:
            plot.irrigate(float(rng.random() * 2))
        if day % 11 == 0:
            plot.fertilize(float(rng.random() * 2))
        if day % 5 == 0:
            effect = effects[int(rng.integers(len(effects)))]
            plot.apply_environmental_effect(effect, float(rng.random() * 200), float(rng.random()))
        plot.update(float(rng.random() * 100), ["drip_irrigation"] if day > 360 else [])
        if plot.harvest_ready:
            plot.harvest(50.0, 1.0)
        _assert_within_bounds(plot)
