"""Tests for foodcity.city.milestones — the onboarding checklist."""

from foodcity.catalog.buildings import COLD_HUB, COMMUNITY_GARDEN, MARKET, RAIN_TANK
from foodcity.catalog.crops import LETTUCE, WATER_SPINACH
from foodcity.city.milestones import check_milestones, initial_milestones
from foodcity.world.grid import Grid
from foodcity.world.weather import WeatherEvent, WeatherKind


def _done(milestones) -> set[str]:
    return {m.key for m in milestones if m.done}


class TestMilestones:
    """Tests for deriving checklist progress."""

    def test_nothing_done_on_empty_city(self, small_grid: Grid) -> None:
        result = check_milestones(initial_milestones(), grid=small_grid, ratio=0.0, events=[])
        assert _done(result) == set()
        assert len(result) == 7

    def test_buildings_and_crops(self, small_grid: Grid) -> None:
        small_grid.tile_at(0, 0).building = COMMUNITY_GARDEN
        small_grid.tile_at(0, 0).crop = LETTUCE
        small_grid.tile_at(1, 0).building = RAIN_TANK
        small_grid.tile_at(2, 0).building = MARKET
        small_grid.tile_at(3, 0).building = COLD_HUB
        result = check_milestones(initial_milestones(), grid=small_grid, ratio=0.0, events=[])
        assert _done(result) == {"build_garden", "build_rain", "market", "cold"}

        small_grid.tile_at(0, 0).crop = WATER_SPINACH
        result = check_milestones(result, grid=small_grid, ratio=0.0, events=[])
        assert "plant_fast" in _done(result)

    def test_ratio_and_weather(self, small_grid: Grid) -> None:
        result = check_milestones(
            initial_milestones(),
            grid=small_grid,
            ratio=0.25,
            events=[WeatherEvent(WeatherKind.FLOOD, 1)],
        )
        assert _done(result) == {"ratio", "weather"}

    def test_completed_milestones_stay_done(self, small_grid: Grid) -> None:
        first = check_milestones(
            initial_milestones(),
            grid=small_grid,
            ratio=0.5,
            events=[WeatherEvent(WeatherKind.HEATWAVE, 2)],
        )
        later = check_milestones(first, grid=small_grid, ratio=0.0, events=[])
        assert _done(later) == {"ratio", "weather"}

    def test_previous_not_modified(self, small_grid: Grid) -> None:
        previous = initial_milestones()
        check_milestones(previous, grid=small_grid, ratio=1.0, events=[])
        assert _done(previous) == set()

    def test_fast_crop_on_non_plantable_building_ignored(self, small_grid: Grid) -> None:
        small_grid.tile_at(0, 0).building = MARKET
        small_grid.tile_at(0, 0).crop = WATER_SPINACH
        small_grid.tile_at(1, 0).building = "castle"
        small_grid.tile_at(1, 0).crop = WATER_SPINACH
        result = check_milestones(initial_milestones(), grid=small_grid, ratio=0.0, events=[])
        assert "plant_fast" not in _done(result)
