"""Tests for foodcity.city.actions — build, plant, demolish, inspect."""

import pytest

from foodcity.catalog.buildings import (
    BUILDINGS,
    COMMUNITY_GARDEN,
    MARKET,
    ROOF_GARDEN,
    SOLAR,
)
from foodcity.catalog.crops import BOK_CHOY, LETTUCE
from foodcity.city.actions import (
    ActionRejected,
    Mode,
    apply_click,
    build,
    demolish,
    inspect,
    plant,
)
from foodcity.simulation.config import EconomyConfig
from foodcity.simulation.state import WorldState
from foodcity.world.tile import TileCategory


class TestBuild:
    """Tests for placing buildings."""

    def test_build_charges_and_plants(self, small_state: WorldState) -> None:
        budget = small_state.resources.budget
        build(small_state, 1, 1, COMMUNITY_GARDEN, LETTUCE)
        tile = small_state.grid.tile_at(1, 1)
        assert tile.building == COMMUNITY_GARDEN
        assert tile.crop == LETTUCE
        assert small_state.resources.budget == budget - BUILDINGS[COMMUNITY_GARDEN].cost

    def test_non_plantable_building_gets_no_crop(self, small_state: WorldState) -> None:
        build(small_state, 0, 0, MARKET, LETTUCE)
        assert small_state.grid.tile_at(0, 0).crop is None

    def test_occupied_tile_rejected(self, small_state: WorldState) -> None:
        build(small_state, 0, 0, SOLAR)
        budget = small_state.resources.budget
        with pytest.raises(ActionRejected):
            build(small_state, 0, 0, MARKET)
        assert small_state.grid.tile_at(0, 0).building == SOLAR
        assert small_state.resources.budget == budget

    def test_roof_only_on_land_rejected(self, small_state: WorldState) -> None:
        with pytest.raises(ActionRejected, match="rooftop"):
            build(small_state, 0, 0, ROOF_GARDEN, LETTUCE)
        assert small_state.grid.tile_at(0, 0).is_empty

    def test_roof_only_on_roof_allowed(self, small_state: WorldState) -> None:
        small_state.grid.tile_at(2, 2).category = TileCategory.ROOF
        build(small_state, 2, 2, ROOF_GARDEN, LETTUCE)
        assert small_state.grid.tile_at(2, 2).building == ROOF_GARDEN

    def test_insufficient_budget_rejected(self, small_state: WorldState) -> None:
        small_state.resources.budget = 1000.0
        with pytest.raises(ActionRejected, match="budget"):
            build(small_state, 0, 0, MARKET)
        assert small_state.resources.budget == 1000.0

    def test_unknown_or_empty_building_rejected(self, small_state: WorldState) -> None:
        with pytest.raises(ActionRejected):
            build(small_state, 0, 0, "castle")
        with pytest.raises(ActionRejected):
            build(small_state, 0, 0, "empty")

    def test_out_of_bounds_rejected(self, small_state: WorldState) -> None:
        with pytest.raises(ActionRejected):
            build(small_state, 99, 0, MARKET)


class TestPlant:
    """Tests for planting crops."""

    def test_switching_crop_resets_progress(self, small_state: WorldState) -> None:
        build(small_state, 0, 0, COMMUNITY_GARDEN, LETTUCE)
        tile = small_state.grid.tile_at(0, 0)
        tile.progress = 0.6
        plant(small_state, 0, 0, LETTUCE)
        assert tile.progress == 0.6
        plant(small_state, 0, 0, BOK_CHOY)
        assert tile.crop == BOK_CHOY
        assert tile.progress == 0.0

    def test_cannot_plant_on_empty_or_service(self, small_state: WorldState) -> None:
        with pytest.raises(ActionRejected):
            plant(small_state, 0, 0, LETTUCE)
        build(small_state, 1, 0, MARKET)
        with pytest.raises(ActionRejected):
            plant(small_state, 1, 0, LETTUCE)

    def test_unknown_crop_rejected(self, small_state: WorldState) -> None:
        build(small_state, 0, 0, COMMUNITY_GARDEN, LETTUCE)
        with pytest.raises(ActionRejected):
            plant(small_state, 0, 0, "durian")
        assert small_state.grid.tile_at(0, 0).crop == LETTUCE


class TestDemolish:
    """Tests for clearing tiles."""

    def test_demolish_without_refund(self, small_state: WorldState) -> None:
        build(small_state, 0, 0, COMMUNITY_GARDEN, LETTUCE)
        budget = small_state.resources.budget
        demolish(small_state, 0, 0, EconomyConfig())
        tile = small_state.grid.tile_at(0, 0)
        assert tile.is_empty
        assert tile.crop is None
        assert tile.progress == 0.0
        assert small_state.resources.budget == budget

    def test_demolish_with_refund(self, small_state: WorldState) -> None:
        build(small_state, 0, 0, MARKET)
        budget = small_state.resources.budget
        demolish(small_state, 0, 0, EconomyConfig(demolish_refund_fraction=0.4))
        assert small_state.resources.budget == pytest.approx(
            budget + 0.4 * BUILDINGS[MARKET].cost,
        )

    def test_demolish_unknown_building_clears_without_refund(
        self,
        small_state: WorldState,
    ) -> None:
        small_state.grid.tile_at(0, 0).building = "castle"
        budget = small_state.resources.budget
        demolish(small_state, 0, 0, EconomyConfig(demolish_refund_fraction=0.4))
        assert small_state.grid.tile_at(0, 0).is_empty
        assert small_state.resources.budget == budget

    def test_demolish_empty_rejected(self, small_state: WorldState) -> None:
        with pytest.raises(ActionRejected):
            demolish(small_state, 0, 0, EconomyConfig())


class TestInspectAndDispatch:
    """Tests for inspect and mode dispatch."""

    def test_inspect_describes_tile(self, small_state: WorldState) -> None:
        build(small_state, 0, 0, COMMUNITY_GARDEN, LETTUCE)
        small_state.grid.tile_at(0, 0).disabled_days = 1
        text = inspect(small_state, 0, 0)
        assert "Community garden" in text
        assert "Lettuce" in text
        assert "flooded" in text

    def test_inspect_unknown_building(self, small_state: WorldState) -> None:
        small_state.grid.tile_at(0, 0).building = "castle"
        assert "castle" in inspect(small_state, 0, 0)

    def test_apply_click_modes(self, small_state: WorldState) -> None:
        kwargs = {
            "building_id": COMMUNITY_GARDEN,
            "crop_id": LETTUCE,
            "config": EconomyConfig(),
        }
        apply_click(small_state, Mode.BUILD, 0, 0, **kwargs)
        assert small_state.grid.tile_at(0, 0).building == COMMUNITY_GARDEN
        apply_click(small_state, Mode.PLANT, 0, 0, **{**kwargs, "crop_id": BOK_CHOY})
        assert small_state.grid.tile_at(0, 0).crop == BOK_CHOY
        assert "Bok choy" in apply_click(small_state, Mode.INSPECT, 0, 0, **kwargs)
        apply_click(small_state, Mode.DEMOLISH, 0, 0, **kwargs)
        assert small_state.grid.tile_at(0, 0).is_empty
