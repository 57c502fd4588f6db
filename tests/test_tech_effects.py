from __future__ import annotations

import pytest

from farmsim.models.enums import EffectKindEnum
from farmsim.models.technology import DEFAULT_TECHNOLOGIES, TechnologyDefinition, TechnologyEffect, TechnologyTree
from farmsim.services.tech_effects import infer_effect_kind, is_cost_effect, resolve_effect


def _custom_tech(tech_id: str, *effects: tuple[str, float, EffectKindEnum]) -> TechnologyDefinition:
    return TechnologyDefinition(
        id=tech_id,
        name=tech_id.title(),
        cost=1000,
        effects=tuple(TechnologyEffect(name=n, value=v, kind=k) for n, v, k in effects),
    )


def test_multiplicative_effects_compose() -> None:
    value = resolve_effect(
        "water_efficiency", ["drip_irrigation", "soil_sensors"], DEFAULT_TECHNOLOGIES, 1.0
    )

    assert value == pytest.approx(1.32)


def test_unresearched_or_unknown_effect_returns_default() -> None:
    assert resolve_effect("water_efficiency", [], DEFAULT_TECHNOLOGIES, 1.0) == 1.0
    assert resolve_effect("teleportation", ["drip_irrigation"], DEFAULT_TECHNOLOGIES, 0.5) == 0.5


def test_boolean_flag_is_or_of_researched() -> None:
    assert resolve_effect("soil_info", ["soil_sensors"], DEFAULT_TECHNOLOGIES, False) is True
    assert resolve_effect("soil_info", ["drip_irrigation"], DEFAULT_TECHNOLOGIES, False) is False


def test_false_flag_is_not_overridden_by_truthy_default() -> None:
    techs = [
        _custom_tech("dry_sensor", ("soil_info", False, EffectKindEnum.boolean_flag)),
        _custom_tech("dry_drone", ("soil_info", False, EffectKindEnum.boolean_flag)),
    ]

    assert resolve_effect("soil_info", ["dry_sensor", "dry_drone"], techs, 1.0) is False
    assert resolve_effect("soil_info", [], techs, 1.0) == 1.0


def test_additive_bonus_lands_after_multiplication() -> None:
    techs = [
        _custom_tech("boost_a", ("yield_boost", 1.5, EffectKindEnum.multiplicative)),
        _custom_tech("boost_b", ("yield_boost", 0.25, EffectKindEnum.additive_bonus)),
    ]

    forward = resolve_effect("yield_boost", ["boost_a", "boost_b"], techs, 1.0)
    reverse = resolve_effect("yield_boost", ["boost_a", "boost_b"], list(reversed(techs)), 1.0)

    assert forward == pytest.approx(1.75)
    assert reverse == pytest.approx(1.75)


def test_non_cost_effects_floor_at_zero() -> None:
    techs = [
        _custom_tech("drain", ("soil_regen", -5.0, EffectKindEnum.additive_bonus)),
        _custom_tech("rebate", ("energy_cost", -5.0, EffectKindEnum.additive_bonus)),
    ]

    assert resolve_effect("soil_regen", ["drain"], techs, 1.0) == 0.0
    assert resolve_effect("energy_cost", ["rebate"], techs, 1.0) == pytest.approx(-4.0)
    assert is_cost_effect("energy_cost")
    assert not is_cost_effect("water_efficiency")


def test_resolve_accepts_technology_tree() -> None:
    tree = TechnologyTree()

    assert resolve_effect("weather_protection", ["greenhouse"], tree, 1.0) == pytest.approx(0.5)


@pytest.mark.parametrize(
    ("name", "value", "expected"),
    [
        ("water_efficiency", 1.2, EffectKindEnum.multiplicative),
        ("heat_resistance", 0.8, EffectKindEnum.multiplicative),
        ("erosion_reduction", 0.7, EffectKindEnum.multiplicative),
        ("soil_regen", 0.1, EffectKindEnum.additive_bonus),
        ("growth_boost", 0.2, EffectKindEnum.additive_bonus),
        ("soil_info", True, EffectKindEnum.boolean_flag),
        ("energy_cost", 0.7, None),
    ],
)
def test_infer_effect_kind_from_name(name: str, value: bool | float, expected: EffectKindEnum | None) -> None:
    assert infer_effect_kind(name, value) == expected


def test_explicit_kinds_agree_with_naming_convention_except_energy_cost() -> None:
    for tech in DEFAULT_TECHNOLOGIES:
        for effect in tech.effects:
            inferred = infer_effect_kind(effect.name, effect.value)
            if effect.name == "energy_cost":
                assert inferred is None
            else:
                assert inferred == effect.kind, (tech.id, effect.name)


def test_name_inference_ignores_unconventional_effects() -> None:
    explicit = resolve_effect("energy_cost", ["renewable_energy"], DEFAULT_TECHNOLOGIES, 1.0)
    inferred = resolve_effect("energy_cost", ["renewable_energy"], DEFAULT_TECHNOLOGIES, 1.0, infer_kinds=True)

    assert explicit == pytest.approx(0.7)
    assert inferred == 1.0
