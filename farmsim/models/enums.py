"""Enum types shared by the catalogs, plots, events and engine.

These are separate from the StrEnum in farmsim/config.py —
config enums validate settings, model enums type simulation state.
"""

from enum import StrEnum

# ── Calendar ────────────────────────────────────────────────────────────────


class SeasonEnum(StrEnum):
    """Seasons in rotation order (90 days each)."""

    spring = "Spring"
    summer = "Summer"
    fall = "Fall"
    winter = "Winter"

    def next(self) -> "SeasonEnum":
        order = list(SeasonEnum)
        return order[(order.index(self) + 1) % len(order)]


# ── Plot state ──────────────────────────────────────────────────────────────


class PlotStateEnum(StrEnum):
    """Derived lifecycle state of a single plot."""

    empty = "empty"
    growing = "growing"
    harvest_ready = "harvest_ready"


class EnvironmentalEffectEnum(StrEnum):
    """Tagged effects the event engine applies to plots."""

    water_increase = "water-increase"
    water_decrease = "water-decrease"
    soil_damage = "soil-damage"
    soil_improve = "soil-improve"
    yield_damage = "yield-damage"
    growth_boost = "growth-boost"
    pest_increase = "pest-increase"
    pest_decrease = "pest-decrease"


# ── Technology ──────────────────────────────────────────────────────────────


class EffectKindEnum(StrEnum):
    """How contributions from several technologies combine."""

    multiplicative = "multiplicative"
    additive_bonus = "additive_bonus"
    boolean_flag = "boolean_flag"


# ── Events ──────────────────────────────────────────────────────────────────


class EventTypeEnum(StrEnum):
    """Top-level type of a pending event (weather subkinds are types too)."""

    rain = "rain"
    drought = "drought"
    heatwave = "heatwave"
    frost = "frost"
    market = "market"
    policy = "policy"
    technology = "technology"


class EventCategoryEnum(StrEnum):
    """Generation categories sampled by the random event generator."""

    weather = "weather"
    market = "market"
    policy = "policy"
    technology = "technology"


class RainSeverityEnum(StrEnum):
    light = "light"
    moderate = "moderate"
    heavy = "heavy"


class DroughtSeverityEnum(StrEnum):
    mild = "mild"
    moderate = "moderate"
    severe = "severe"


class MarketDirectionEnum(StrEnum):
    increase = "increase"
    decrease = "decrease"
    opportunity = "opportunity"


class PolicyTypeEnum(StrEnum):
    water_restriction = "water_restriction"
    environmental_subsidy = "environmental_subsidy"
    new_regulations = "new_regulations"


class TechnologyEventEnum(StrEnum):
    innovation_grant = "innovation_grant"
    research_breakthrough = "research_breakthrough"
    technology_setback = "technology_setback"


class EventPhaseEnum(StrEnum):
    """Lifecycle phase of a (possibly multi-day) event."""

    scheduled = "scheduled"
    active = "active"
    ended = "ended"


# ── Actions ─────────────────────────────────────────────────────────────────


class ActionFailureReason(StrEnum):
    """Business-rule reasons an action was refused (never raised)."""

    invalid_coordinate = "invalid_coordinate"
    invalid_crop_id = "invalid_crop_id"
    insufficient_funds = "insufficient_funds"
    plot_occupied = "plot_occupied"
    plot_empty = "plot_empty"
    plot_not_ready = "plot_not_ready"
    already_applied = "already_applied"
    already_researched = "already_researched"
    prerequisites_not_met = "prerequisites_not_met"
    unknown_technology = "unknown_technology"
