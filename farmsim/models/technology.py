"""Technology tree — catalog definitions plus the per-game researched state.

Each effect carries an explicit ``EffectKindEnum`` telling the resolver how
values from several researched technologies combine. The raw value is kept as
published so naming-convention inference can still be checked against it.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from pydantic import BaseModel, ConfigDict, Field

from farmsim.errors import CatalogLookupError
from farmsim.models.enums import EffectKindEnum

_MUL = EffectKindEnum.multiplicative
_FLAG = EffectKindEnum.boolean_flag


class TechnologyEffect(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: bool | float
    kind: EffectKindEnum


class TechnologyDefinition(BaseModel):
    id: str = Field(min_length=1)
    name: str
    description: str = ""
    cost: float = Field(ge=0)
    prerequisites: frozenset[str] = Field(default_factory=frozenset)
    effects: tuple[TechnologyEffect, ...] = ()
    researched: bool = False

    def effect(self, name: str) -> TechnologyEffect | None:
        for effect in self.effects:
            if effect.name == name:
                return effect
        return None

    def prerequisites_met(self, researched: Iterable[str]) -> bool:
        """True when not yet researched and every prerequisite is."""
        if self.researched:
            return False
        return self.prerequisites.issubset(set(researched))


def _tech(
    tech_id: str,
    name: str,
    description: str,
    cost: float,
    effects: list[tuple[str, bool | float, EffectKindEnum]],
    prerequisites: Iterable[str] = (),
) -> TechnologyDefinition:
    return TechnologyDefinition(
        id=tech_id,
        name=name,
        description=description,
        cost=cost,
        prerequisites=frozenset(prerequisites),
        effects=tuple(TechnologyEffect(name=n, value=v, kind=k) for n, v, k in effects),
    )


DEFAULT_TECHNOLOGIES: tuple[TechnologyDefinition, ...] = (
    _tech(
        "drip_irrigation",
        "Drip Irrigation",
        "Reduces water usage by 20% and improves crop health",
        25000,
        [("water_efficiency", 1.2, _MUL), ("crop_health", 1.1, _MUL)],
    ),
    _tech(
        "soil_sensors",
        "Soil Sensors",
        "Monitors soil health and water levels in real-time",
        15000,
        [("soil_info", True, _FLAG), ("water_efficiency", 1.1, _MUL)],
    ),
    _tech(
        "greenhouse",
        "Greenhouse Technology",
        "Protects crops from extreme weather events",
        40000,
        [("weather_protection", 0.5, _MUL)],
    ),
    _tech(
        "ai_irrigation",
        "AI-Driven Irrigation",
        "Optimizes water use based on weather forecasts and crop needs",
        50000,
        [("water_efficiency", 1.5, _MUL), ("crop_health", 1.2, _MUL)],
        prerequisites=("drip_irrigation", "soil_sensors"),
    ),
    _tech(
        "drought_resistant",
        "Drought-Resistant Varieties",
        "Crop varieties that can thrive with less water",
        35000,
        [("drought_resistance", 0.6, _MUL), ("water_efficiency", 1.3, _MUL)],
    ),
    _tech(
        "precision_drones",
        "Precision Agriculture Drones",
        "Monitor crops and apply fertilizer/pesticides precisely where needed",
        45000,
        [("fertilizer_efficiency", 1.4, _MUL), ("crop_health", 1.15, _MUL)],
        prerequisites=("soil_sensors",),
    ),
    _tech(
        "renewable_energy",
        "Renewable Energy Systems",
        "Solar and wind power to reduce energy costs",
        55000,
        [("energy_cost", 0.7, _MUL)],
    ),
    _tech(
        "no_till_farming",
        "No-Till Farming",
        "Improves soil health and reduces erosion",
        20000,
        [("soil_health", 1.2, _MUL), ("erosion_reduction", 0.7, _MUL)],
    ),
    _tech(
        "silvopasture",
        "Silvopasture",
        "Integrating trees with pasture for shade and water retention",
        30000,
        [("water_retention", 1.2, _MUL), ("heat_resistance", 0.8, _MUL)],
        prerequisites=("no_till_farming",),
    ),
)


class TechnologyTree:
    """Deep, independently mutable copy of a technology catalog."""

    def __init__(self, technologies: Iterable[TechnologyDefinition] = DEFAULT_TECHNOLOGIES):
        self._techs = [tech.model_copy(deep=True) for tech in technologies]
        self._by_id = {tech.id: tech for tech in self._techs}
        if len(self._by_id) != len(self._techs):
            raise ValueError("technology ids must be unique")

    def find(self, tech_id: str) -> TechnologyDefinition | None:
        return self._by_id.get(tech_id)

    def get(self, tech_id: str) -> TechnologyDefinition:
        tech = self._by_id.get(tech_id)
        if tech is None:
            raise CatalogLookupError(f"Technology {tech_id!r} not found")
        return tech

    def mark_researched(self, tech_id: str) -> None:
        self.get(tech_id).researched = True

    def researched_ids(self) -> list[str]:
        return [tech.id for tech in self._techs if tech.researched]

    def __iter__(self) -> Iterator[TechnologyDefinition]:
        return iter(self._techs)

    def __len__(self) -> int:
        return len(self._techs)
