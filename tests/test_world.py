"""Tests for foodcity.world.grid and foodcity.world.tile."""

import pytest
from numpy.random import Generator

from foodcity.catalog.buildings import (
    COMMUNITY_GARDEN,
    MARKET,
    RAIN_TANK,
    ROOF_GARDEN,
    SOLAR,
)
from foodcity.catalog.crops import BOK_CHOY
from foodcity.world.grid import Grid
from foodcity.world.tile import Tile, TileCategory


class TestTile:
    """Tests for the Tile dataclass."""

    def test_default_values(self) -> None:
        tile = Tile(x=0, y=0)
        assert tile.category is TileCategory.LAND
        assert tile.is_empty
        assert tile.crop is None
        assert tile.progress == 0.0
        assert tile.disabled_days == 0

    def test_clear_resets_building_and_crop(self) -> None:
        tile = Tile(x=1, y=1, building=COMMUNITY_GARDEN, crop=BOK_CHOY, progress=0.4)
        tile.clear()
        assert tile.is_empty
        assert tile.crop is None
        assert tile.progress == 0.0


class TestGrid:
    """Tests for the Grid container."""

    def test_dimensions(self, small_grid: Grid) -> None:
        assert small_grid.width == 6
        assert small_grid.height == 4
        assert len(small_grid.tiles) == 24

    def test_row_major_index(self, small_grid: Grid) -> None:
        assert small_grid.index(2, 3) == 3 * 6 + 2
        tile = small_grid.tile_at(2, 3)
        assert (tile.x, tile.y) == (2, 3)
        assert small_grid.tiles[small_grid.index(2, 3)] is tile

    def test_tile_at_out_of_bounds(self, small_grid: Grid) -> None:
        with pytest.raises(IndexError):
            small_grid.tile_at(6, 0)
        with pytest.raises(IndexError):
            small_grid.tile_at(0, -1)

    def test_wrong_tile_count_rejected(self) -> None:
        with pytest.raises(ValueError):
            Grid(width=2, height=2, tiles=[Tile(x=0, y=0)])

    def test_copy_is_independent(self, small_grid: Grid) -> None:
        clone = small_grid.copy()
        clone.tile_at(0, 0).building = MARKET
        assert small_grid.tile_at(0, 0).is_empty

    def test_generate_places_starter_layout(self, rng: Generator) -> None:
        grid = Grid.generate(20, 12, rng)
        assert grid.tile_at(3, 2).building == COMMUNITY_GARDEN
        assert grid.tile_at(3, 2).crop == BOK_CHOY
        assert grid.tile_at(15, 1).building == MARKET
        assert grid.tile_at(5, 3).building == RAIN_TANK

    def test_generate_skips_starters_outside_grid(self, rng: Generator) -> None:
        grid = Grid.generate(4, 4, rng)
        assert grid.building_counts()[MARKET] == 0
        assert grid.building_counts()[COMMUNITY_GARDEN] == 1

    def test_generate_roof_fraction_extremes(self, rng: Generator) -> None:
        roofs = Grid.generate(5, 5, rng, roof_fraction=1.0, starter_layout=False)
        land = Grid.generate(5, 5, rng, roof_fraction=0.0, starter_layout=False)
        assert all(t.category is TileCategory.ROOF for t in roofs)
        assert all(t.category is TileCategory.LAND for t in land)

    def test_generate_is_deterministic(self) -> None:
        import numpy as np

        a = Grid.generate(10, 10, np.random.default_rng(7))
        b = Grid.generate(10, 10, np.random.default_rng(7))
        assert [t.category for t in a] == [t.category for t in b]

    def test_building_counts_and_green_tiles(self, small_grid: Grid) -> None:
        small_grid.tile_at(0, 0).building = COMMUNITY_GARDEN
        small_grid.tile_at(1, 0).building = ROOF_GARDEN
        small_grid.tile_at(2, 0).building = SOLAR
        small_grid.tile_at(3, 0).building = "castle"
        counts = small_grid.building_counts()
        assert counts[COMMUNITY_GARDEN] == 1
        assert counts[SOLAR] == 1
        assert "empty" not in counts
        # Unplanted gardens still count; unknown buildings do not
        assert small_grid.green_tile_count() == 2
