"""Tests for foodcity.city.modifiers — the city modifier aggregator."""

import pytest

from foodcity.catalog.buildings import (
    COLD_HUB,
    COMMUNITY_GARDEN,
    EDU_CENTER,
    MARKET,
    RAIN_TANK,
    SOLAR,
    VERTICAL_FARM,
)
from foodcity.city.modifiers import compute_city_modifiers
from foodcity.city.policies import Policies
from foodcity.simulation.config import ModifierConfig
from foodcity.world.grid import Grid


def _grid_with(*buildings: str) -> Grid:
    grid = Grid(width=len(buildings) or 1, height=1)
    for tile, building in zip(grid, buildings, strict=False):
        tile.building = building
    return grid


class TestCityModifiers:
    """Tests for deriving modifiers from the building census."""

    def test_empty_city(self) -> None:
        mods = compute_city_modifiers(Grid(width=3, height=3), ModifierConfig())
        assert mods.market_capacity == 0.0
        assert mods.cold_chain_quality == 0.0
        assert mods.solar_offset_kwh == 0.0
        assert mods.rainwater_offset_m3 == 0.0
        assert mods.irrigation_efficiency == pytest.approx(0.1)
        assert mods.local_preference_boost == 0.0
        assert mods.green_tiles == 0
        assert mods.worker_count == 0.0

    def test_market_capacity(self) -> None:
        grid = _grid_with(MARKET, MARKET, EDU_CENTER)
        mods = compute_city_modifiers(grid, ModifierConfig())
        assert mods.market_capacity == pytest.approx(2 * 1200 + 100)

    def test_flat_offsets(self) -> None:
        grid = _grid_with(SOLAR, SOLAR, RAIN_TANK)
        mods = compute_city_modifiers(grid, ModifierConfig())
        assert mods.solar_offset_kwh == pytest.approx(120.0)
        assert mods.rainwater_offset_m3 == pytest.approx(3.0)
        assert mods.irrigation_efficiency == pytest.approx(0.15)

    def test_caps_are_hard_ceilings(self) -> None:
        grid = _grid_with(*([COLD_HUB] * 30 + [RAIN_TANK] * 30 + [EDU_CENTER] * 30))
        mods = compute_city_modifiers(grid, ModifierConfig())
        assert mods.cold_chain_quality == pytest.approx(0.6)
        assert mods.irrigation_efficiency == pytest.approx(0.5)
        assert mods.local_preference_boost == pytest.approx(0.4)

    def test_policies_respect_caps(self) -> None:
        grid = _grid_with(EDU_CENTER)
        policies = Policies(local_food_campaign=1.0, irrigation_subsidy=1.0)
        mods = compute_city_modifiers(grid, ModifierConfig(), policies)
        assert mods.local_preference_boost == pytest.approx(0.4)
        assert mods.irrigation_efficiency == pytest.approx(0.5)

    def test_policies_add_below_cap(self) -> None:
        grid = _grid_with(EDU_CENTER)
        policies = Policies(local_food_campaign=0.1)
        mods = compute_city_modifiers(grid, ModifierConfig(), policies)
        assert mods.local_preference_boost == pytest.approx(0.15)

    def test_worker_weights(self) -> None:
        grid = _grid_with(COMMUNITY_GARDEN, VERTICAL_FARM, MARKET, COLD_HUB, SOLAR)
        mods = compute_city_modifiers(grid, ModifierConfig())
        # 1 + 3 + 2 + 2, solar needs no staff
        assert mods.worker_count == pytest.approx(8.0)
        assert mods.green_tiles == 2

    def test_recomputed_after_grid_change(self) -> None:
        grid = _grid_with(MARKET, "empty")
        before = compute_city_modifiers(grid, ModifierConfig())
        grid.tile_at(1, 0).building = MARKET
        after = compute_city_modifiers(grid, ModifierConfig())
        assert before.market_capacity == pytest.approx(1200)
        assert after.market_capacity == pytest.approx(2400)
        assert after.count(MARKET) == 2
