"""Tile — a single cell of the city grid.

A tile's category (land or roof) is fixed when the grid is generated
and decides which buildings may legally be placed on it.  Everything
else on the tile is mutated one simulated day at a time.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from foodcity.catalog.buildings import EMPTY


class TileCategory(Enum):
    """Physical surface of a tile."""

    LAND = "land"
    ROOF = "roof"


@dataclass
class Tile:
    """A single cell of the city grid.

    Attributes:
        x: Column position.
        y: Row position.
        category: Land or roof surface.
        building: Building type id (``"empty"`` when nothing is built).
        crop: Planted crop id, meaningful only on plantable buildings.
        progress: Growth progress toward the next harvest (0.0-1.0).
        disabled_days: Days the tile remains inactive (e.g. flooded).
    """

    x: int
    y: int
    category: TileCategory = TileCategory.LAND
    building: str = EMPTY
    crop: str | None = None
    progress: float = 0.0
    disabled_days: int = 0

    @property
    def is_empty(self) -> bool:
        """Return True if no building occupies this tile."""
        return self.building == EMPTY

    def clear(self) -> None:
        """Remove the building and any crop, keeping the surface."""
        self.building = EMPTY
        self.crop = None
        self.progress = 0.0
