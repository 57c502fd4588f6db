"""Technology effect resolver — researched technology ids to effect values."""

from __future__ import annotations

from collections.abc import Collection, Iterable

from farmsim.models.enums import EffectKindEnum
from farmsim.models.technology import TechnologyDefinition

_MULTIPLICATIVE_SUFFIXES = (
	"efficiency",
	"retention",
	"health",
	"factor",
	"resistance",
	"protection",
	"reduction",
)
_ADDITIVE_SUFFIXES = ("regen", "boost")


def infer_effect_kind(effect_name: str, value: bool | float) -> EffectKindEnum | None:
	"""Guess the combination kind from the effect's name, as older catalogs did.

	Returns None for names that follow no known convention; those effects
	were ignored by name-based resolution.
	"""
	if isinstance(value, bool):
		return EffectKindEnum.boolean_flag
	normalized = effect_name.lower().replace("_", "")
	if any(token in normalized for token in _MULTIPLICATIVE_SUFFIXES):
		return EffectKindEnum.multiplicative
	if any(token in normalized for token in _ADDITIVE_SUFFIXES):
		return EffectKindEnum.additive_bonus
	return None


def is_cost_effect(effect_name: str) -> bool:
	return effect_name.lower().endswith("cost")


def resolve_effect(
	effect_name: str,
	researched: Collection[str],
	technologies: Iterable[TechnologyDefinition],
	default: bool | float = 1.0,
	*,
	infer_kinds: bool = False,
) -> bool | float:
	"""Combine ``effect_name`` across every researched technology.

	Multiplicative contributions are folded first, additive bonuses are added
	afterwards, flags are OR-ed. Unknown effects fall back to ``default``.
	With ``infer_kinds`` the kind is derived from the effect name instead of
	the explicit tag.
	"""
	product: float | None = None
	bonus = 0.0
	flag: bool | None = None
	matched = False

	for tech in technologies:
		if tech.id not in researched:
			continue
		effect = tech.effect(effect_name)
		if effect is None:
			continue
		kind = infer_effect_kind(effect.name, effect.value) if infer_kinds else effect.kind
		if kind is None:
			continue
		matched = True

		if kind == EffectKindEnum.boolean_flag:
			flag = bool(flag) or bool(effect.value)
		elif kind == EffectKindEnum.multiplicative:
			product = float(effect.value) if product is None else product * float(effect.value)
		else:
			bonus += float(effect.value)

	if not matched:
		return default
	if flag is not None and product is None and bonus == 0.0:
		return flag

	result = float(default) if product is None else float(default) * product
	result += bonus
	if not is_cost_effect(effect_name):
		result = max(0.0, result)
	return result
