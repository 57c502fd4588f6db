"""Crop catalog — immutable agronomic reference data.

The catalog is ordered and always starts with the ``empty`` sentinel, a crop
with all-zero fields that marks an unplanted plot and can never be planted::

    catalog = CropCatalog.default()
    corn = catalog.get("corn")
    catalog.plantable()  # every crop except the sentinel
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from pydantic import BaseModel, ConfigDict, Field

from farmsim.errors import CatalogLookupError

EMPTY_CROP_ID = "empty"


class CropDefinition(BaseModel):
    """One plantable crop (or the empty sentinel)."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str
    water_use: float = Field(default=0.0, ge=0)
    growth_time: int = Field(default=0, ge=0)
    harvest_value: float = Field(default=0.0, ge=0)
    base_price: float = Field(default=0.0, ge=0)
    soil_impact: float = 0.0
    fertilizer_need: float = Field(default=0.0, ge=0)
    water_sensitivity: float = Field(default=0.0, ge=0)
    heat_sensitivity: float = Field(default=0.0, ge=0)
    color: str = "#cccccc"

    @property
    def is_empty(self) -> bool:
        return self.id == EMPTY_CROP_ID

    def __repr__(self) -> str:
        return f"<CropDefinition id={self.id!r} growth_time={self.growth_time}>"


EMPTY_CROP = CropDefinition(id=EMPTY_CROP_ID, name="Empty Plot")

DEFAULT_CROPS: tuple[CropDefinition, ...] = (
    EMPTY_CROP,
    CropDefinition(
        id="corn",
        name="Corn",
        water_use=3.5,
        growth_time=90,
        harvest_value=160,
        base_price=75,
        soil_impact=-2,
        fertilizer_need=80,
        water_sensitivity=1.1,
        heat_sensitivity=0.8,
        color="#ffd700",
    ),
    CropDefinition(
        id="lettuce",
        name="Lettuce",
        water_use=1.5,
        growth_time=40,
        harvest_value=260,
        base_price=120,
        soil_impact=-1,
        fertilizer_need=60,
        water_sensitivity=1.2,
        heat_sensitivity=1.3,
        color="#90ee90",
    ),
    CropDefinition(
        id="almonds",
        name="Almonds",
        water_use=4.5,
        growth_time=240,
        harvest_value=550,
        base_price=450,
        soil_impact=-1,
        fertilizer_need=100,
        water_sensitivity=0.9,
        heat_sensitivity=0.7,
        color="#8b4513",
    ),
    CropDefinition(
        id="strawberries",
        name="Strawberries",
        water_use=2.5,
        growth_time=50,
        harvest_value=420,
        base_price=300,
        soil_impact=-2,
        fertilizer_need=90,
        water_sensitivity=1.0,
        heat_sensitivity=1.1,
        color="#ff6b6b",
    ),
    CropDefinition(
        id="grapes",
        name="Grapes",
        water_use=3.0,
        growth_time=180,
        harvest_value=500,
        base_price=350,
        soil_impact=-1,
        fertilizer_need=75,
        water_sensitivity=0.8,
        heat_sensitivity=0.9,
        color="#9370db",
    ),
)


class CropCatalog:
    """Ordered, read-only crop lookup injected into the engine."""

    def __init__(self, crops: Iterable[CropDefinition]):
        ordered = [crop for crop in crops if not crop.is_empty]
        self._crops: tuple[CropDefinition, ...] = (EMPTY_CROP, *ordered)
        self._by_id = {crop.id: crop for crop in self._crops}
        if len(self._by_id) != len(self._crops):
            raise ValueError("crop ids must be unique")

    @classmethod
    def default(cls) -> CropCatalog:
        return cls(DEFAULT_CROPS)

    @property
    def empty(self) -> CropDefinition:
        return self._crops[0]

    def find(self, crop_id: str) -> CropDefinition | None:
        return self._by_id.get(crop_id)

    def get(self, crop_id: str) -> CropDefinition:
        crop = self._by_id.get(crop_id)
        if crop is None:
            raise CatalogLookupError(f"Crop {crop_id!r} not found")
        return crop

    def plantable(self) -> list[CropDefinition]:
        return list(self._crops[1:])

    def ids(self) -> list[str]:
        return [crop.id for crop in self._crops]

    def __iter__(self) -> Iterator[CropDefinition]:
        return iter(self._crops)

    def __len__(self) -> int:
        return len(self._crops)

    def __contains__(self, crop_id: object) -> bool:
        return crop_id in self._by_id
