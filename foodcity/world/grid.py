"""Grid — the fixed-size spatial container for the city.

Tiles are stored row-major in a flat list (``index = y * width + x``),
which is also the order used when the grid is persisted.  The grid is
never resized after creation.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from numpy.random import Generator

from foodcity.catalog.buildings import (
    COMMUNITY_GARDEN,
    MARKET,
    RAIN_TANK,
    building_type,
)
from foodcity.catalog.crops import BOK_CHOY, WATER_SPINACH
from foodcity.world.tile import Tile, TileCategory

# (x, y, building, crop) placed free of charge on a fresh city
_STARTER_LAYOUT: tuple[tuple[int, int, str, str | None], ...] = (
    (3, 2, COMMUNITY_GARDEN, BOK_CHOY),
    (4, 2, COMMUNITY_GARDEN, WATER_SPINACH),
    (15, 1, MARKET, None),
    (5, 3, RAIN_TANK, None),
)


@dataclass
class Grid:
    """A 2D city grid of tiles.

    Attributes:
        width: Number of columns.
        height: Number of rows.
        tiles: Row-major list of tiles; defaults to all-land, all-empty.
    """

    width: int
    height: int
    tiles: list[Tile] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        """Fill in default tiles and validate the tile count."""
        if not self.tiles:
            self.tiles = [
                Tile(x=x, y=y) for y in range(self.height) for x in range(self.width)
            ]
        if len(self.tiles) != self.width * self.height:
            msg = (
                f"expected {self.width * self.height} tiles for "
                f"{self.width}x{self.height}, got {len(self.tiles)}"
            )
            raise ValueError(msg)

    @classmethod
    def generate(
        cls,
        width: int,
        height: int,
        rng: Generator,
        *,
        roof_fraction: float = 0.3,
        starter_layout: bool = True,
    ) -> Grid:
        """Create a fresh city with randomly assigned roof tiles.

        Args:
            width: Number of columns.
            height: Number of rows.
            rng: Seeded random generator.
            roof_fraction: Probability that any tile is a rooftop.
            starter_layout: Place the free starter gardens, market and
                rain tank when they fit inside the grid.

        Returns:
            A new Grid.
        """
        tiles = []
        for y in range(height):
            for x in range(width):
                roof = rng.random() < roof_fraction
                category = TileCategory.ROOF if roof else TileCategory.LAND
                tiles.append(Tile(x=x, y=y, category=category))
        grid = cls(width=width, height=height, tiles=tiles)

        if starter_layout:
            for x, y, building, crop in _STARTER_LAYOUT:
                if grid.in_bounds(x, y):
                    tile = grid.tile_at(x, y)
                    tile.building = building
                    tile.crop = crop
        return grid

    def in_bounds(self, x: int, y: int) -> bool:
        """Return True if ``(x, y)`` lies inside the grid."""
        return 0 <= x < self.width and 0 <= y < self.height

    def index(self, x: int, y: int) -> int:
        """Return the flat index for grid coordinates ``(x, y)``."""
        return y * self.width + x

    def tile_at(self, x: int, y: int) -> Tile:
        """Return the tile at grid coordinates ``(x, y)``.

        Args:
            x: Column index.
            y: Row index.

        Raises:
            IndexError: If coordinates are out of bounds.
        """
        if not self.in_bounds(x, y):
            msg = f"({x}, {y}) out of bounds for {self.width}x{self.height}"
            raise IndexError(msg)
        return self.tiles[self.index(x, y)]

    def __iter__(self) -> Iterator[Tile]:
        return iter(self.tiles)

    def copy(self) -> Grid:
        """Return a deep copy whose tiles can be mutated independently."""
        return Grid(
            width=self.width,
            height=self.height,
            tiles=[replace(tile) for tile in self.tiles],
        )

    def building_counts(self) -> Counter[str]:
        """Count tiles per building id, excluding empty tiles."""
        return Counter(tile.building for tile in self.tiles if not tile.is_empty)

    def green_tile_count(self) -> int:
        """Count tiles whose building supports planting, planted or not."""
        count = 0
        for tile in self.tiles:
            building = building_type(tile.building)
            if building is not None and building.can_plant:
                count += 1
        return count
