"""Simulation model registry.

Application code can import every catalog, enum and plot type from here::

    from farmsim.models import CropCatalog, Plot, SeasonEnum, ...

``FarmState`` is imported from ``farmsim.models.farm`` directly; it depends on
the event schemas, which import these enums.
"""

# ── Enums ───────────────────────────────────────────────────────────────────
from farmsim.models.enums import (
    ActionFailureReason,
    DroughtSeverityEnum,
    EffectKindEnum,
    EnvironmentalEffectEnum,
    EventCategoryEnum,
    EventPhaseEnum,
    EventTypeEnum,
    MarketDirectionEnum,
    PlotStateEnum,
    PolicyTypeEnum,
    RainSeverityEnum,
    SeasonEnum,
    TechnologyEventEnum,
)

# ── Catalogs ────────────────────────────────────────────────────────────────
from farmsim.models.crops import DEFAULT_CROPS, EMPTY_CROP, CropCatalog, CropDefinition
from farmsim.models.technology import (
    DEFAULT_TECHNOLOGIES,
    TechnologyDefinition,
    TechnologyEffect,
    TechnologyTree,
)

# ── Plot state machine ──────────────────────────────────────────────────────
from farmsim.models.plot import CropHistoryEntry, HarvestOutcome, Plot

__all__ = [
    # Enums
    "ActionFailureReason",
    "DroughtSeverityEnum",
    "EffectKindEnum",
    "EnvironmentalEffectEnum",
    "EventCategoryEnum",
    "EventPhaseEnum",
    "EventTypeEnum",
    "MarketDirectionEnum",
    "PlotStateEnum",
    "PolicyTypeEnum",
    "RainSeverityEnum",
    "SeasonEnum",
    "TechnologyEventEnum",
    # Catalogs
    "CropCatalog",
    "CropDefinition",
    "DEFAULT_CROPS",
    "DEFAULT_TECHNOLOGIES",
    "EMPTY_CROP",
    "TechnologyDefinition",
    "TechnologyEffect",
    "TechnologyTree",
    # Plot
    "CropHistoryEntry",
    "HarvestOutcome",
    "Plot",
]
