"""Buildings — static building types and cultivation-method multipliers.

A building type decides what may happen on a tile: whether crops can be
planted there, which cultivation method applies to them, and where the
building may legally be placed.  Method multipliers scale yield, water
and energy relative to ground-level community gardening.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Method(Enum):
    """Cultivation technique for plantable buildings."""

    COMMUNITY_GARDEN = "community_garden"
    ROOF_GARDEN = "roof_garden"
    VERTICAL_FARM = "vertical_farm"


class Placement(Enum):
    """Placement category of a building type."""

    LAND = "land"
    ROOF = "roof"
    SERVICE = "service"
    INFRASTRUCTURE = "infrastructure"


@dataclass(frozen=True)
class MethodMultiplier:
    """Scaling factors relative to baseline land cultivation.

    Attributes:
        yield_mult: Multiplies growth rate and harvested mass.
        water_mult: Multiplies daily crop water demand.
        energy_kwh: Daily energy draw in kWh per cultivated tile.
    """

    yield_mult: float
    water_mult: float
    energy_kwh: float


METHOD_MULTIPLIERS: dict[Method, MethodMultiplier] = {
    Method.COMMUNITY_GARDEN: MethodMultiplier(1.0, 1.0, 0.1),
    Method.ROOF_GARDEN: MethodMultiplier(1.1, 0.9, 0.15),
    Method.VERTICAL_FARM: MethodMultiplier(3.0, 0.5, 2.5),
}


@dataclass(frozen=True)
class BuildingType:
    """Static definition of one building type.

    Attributes:
        building_id: Stable identifier stored on tiles.
        label: Display label.
        cost: Construction cost.
        placement: Where the building may be placed.
        method: Cultivation method, or None for non-plantable buildings.
        glyph: Short label drawn on the map.
    """

    building_id: str
    label: str
    cost: float
    placement: Placement
    method: Method | None = None
    glyph: str = ""

    @property
    def can_plant(self) -> bool:
        """Return True if crops may be planted on this building."""
        return self.method is not None

    @property
    def roof_only(self) -> bool:
        """Return True if the building may only sit on roof tiles."""
        return self.placement is Placement.ROOF


EMPTY = "empty"
COMMUNITY_GARDEN = "community_garden"
ROOF_GARDEN = "roof_garden"
VERTICAL_FARM = "vertical_farm"
MARKET = "market"
RAIN_TANK = "rain_tank"
COLD_HUB = "cold_hub"
COMPOSTER = "composter"
SOLAR = "solar"
EDU_CENTER = "edu_center"

BUILDINGS: dict[str, BuildingType] = {
    EMPTY: BuildingType(EMPTY, "Empty", 0.0, Placement.LAND),
    COMMUNITY_GARDEN: BuildingType(
        COMMUNITY_GARDEN,
        "Community garden",
        2_500_000.0,
        Placement.LAND,
        Method.COMMUNITY_GARDEN,
        "CG",
    ),
    ROOF_GARDEN: BuildingType(
        ROOF_GARDEN,
        "Roof garden",
        4_000_000.0,
        Placement.ROOF,
        Method.ROOF_GARDEN,
        "RG",
    ),
    VERTICAL_FARM: BuildingType(
        VERTICAL_FARM,
        "Vertical farm",
        250_000_000.0,
        Placement.ROOF,
        Method.VERTICAL_FARM,
        "VF",
    ),
    MARKET: BuildingType(MARKET, "Local market", 40_000_000.0, Placement.SERVICE, glyph="M"),
    RAIN_TANK: BuildingType(
        RAIN_TANK,
        "Rain tank",
        10_000_000.0,
        Placement.INFRASTRUCTURE,
        glyph="R",
    ),
    COLD_HUB: BuildingType(
        COLD_HUB,
        "Cold hub",
        75_000_000.0,
        Placement.INFRASTRUCTURE,
        glyph="C",
    ),
    COMPOSTER: BuildingType(
        COMPOSTER,
        "Composter",
        20_000_000.0,
        Placement.INFRASTRUCTURE,
        glyph="K",
    ),
    SOLAR: BuildingType(
        SOLAR,
        "Solar + battery",
        60_000_000.0,
        Placement.INFRASTRUCTURE,
        glyph="S",
    ),
    EDU_CENTER: BuildingType(
        EDU_CENTER,
        "Education centre",
        30_000_000.0,
        Placement.SERVICE,
        glyph="E",
    ),
}

# Build-menu order
BUILDABLE: tuple[str, ...] = (
    COMMUNITY_GARDEN,
    ROOF_GARDEN,
    VERTICAL_FARM,
    MARKET,
    RAIN_TANK,
    COLD_HUB,
    COMPOSTER,
    SOLAR,
    EDU_CENTER,
)


def building_type(building_id: str) -> BuildingType | None:
    """Return the building type for ``building_id``, or None if unknown."""
    return BUILDINGS.get(building_id)


def method_multiplier(building: BuildingType) -> MethodMultiplier | None:
    """Return the method multiplier for a plantable building, else None."""
    if building.method is None:
        return None
    return METHOD_MULTIPLIERS[building.method]
