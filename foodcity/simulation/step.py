"""Daily step — advance every tile of the city by one simulated day.

The step runs in a fixed order:

1. Age and roll weather events (the only random draw)
2. Grow, irrigate, power, and harvest each tile
3. Net the day's water and energy against solar and rainwater offsets
   and price them

Tiles are independent within a day.  The input grid is never mutated;
a new grid is returned.  Tiles referring to an unknown building or crop
are left exactly as they are.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from foodcity.catalog.buildings import (
    COMMUNITY_GARDEN,
    Method,
    building_type,
    method_multiplier,
)
from foodcity.catalog.crops import crop_species
from foodcity.world.tile import TileCategory
from foodcity.world.weather import Conditions, advance_weather

if TYPE_CHECKING:
    from collections.abc import Iterable

    from numpy.random import Generator

    from foodcity.catalog.crops import CropSpecies
    from foodcity.city.modifiers import CityModifiers
    from foodcity.simulation.config import SimulationConfig, WeatherConfig
    from foodcity.world.grid import Grid
    from foodcity.world.tile import Tile
    from foodcity.world.weather import WeatherEvent

# Absorbs float drift so an n-day crop matures on day n
_MATURITY_EPSILON = 1e-9


@dataclass
class TileTotals:
    """Accumulated per-tile results for one day.

    Attributes:
        water_m3: Gross irrigation water drawn.
        energy_kwh: Gross energy drawn.
        production: Harvested kg by crop id.
    """

    water_m3: float = 0.0
    energy_kwh: float = 0.0
    production: dict[str, float] = field(default_factory=dict)


@dataclass
class DayOutcome:
    """Everything one daily step produces.

    Attributes:
        grid: The grid after today's growth and harvest.
        events: Weather events in effect today.
        spawned: The event created today, if any.
        conditions: Which event types were in effect.
        water_m3: Gross water drawn today.
        energy_kwh: Gross energy drawn today.
        production: Harvested kg by crop id.
        net_water_m3: Water billed after the rainwater offset.
        net_energy_kwh: Energy billed after the solar offset.
        water_cost: Cost of billed water.
        energy_cost: Cost of billed energy.
        emissions_kg: Emissions from billed energy.
    """

    grid: Grid
    events: list[WeatherEvent]
    spawned: WeatherEvent | None
    conditions: Conditions
    water_m3: float
    energy_kwh: float
    production: dict[str, float]
    net_water_m3: float
    net_energy_kwh: float
    water_cost: float
    energy_cost: float
    emissions_kg: float

    @property
    def total_produced(self) -> float:
        """Return the kg harvested today across all crops."""
        return sum(self.production.values())


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp ``value`` into ``[lo, hi]``."""
    return max(lo, min(hi, value))


def harvest_loss_rate(
    crop: CropSpecies,
    conditions: Conditions,
    cold_chain_quality: float,
    weather: WeatherConfig,
    *,
    min_loss: float,
    max_loss: float,
) -> float:
    """Return the postharvest loss fraction, clamped to ``[min_loss, max_loss]``."""
    heat = weather.heat_loss_mult if conditions.heatwave else 1.0
    return clamp(crop.base_loss * heat * (1.0 - cold_chain_quality), min_loss, max_loss)


def is_flood_prone(tile: Tile) -> bool:
    """Return True for ground-level community gardens, which floods disable."""
    return tile.building == COMMUNITY_GARDEN and tile.category is TileCategory.LAND


def grow_tile(
    tile: Tile,
    conditions: Conditions,
    modifiers: CityModifiers,
    config: SimulationConfig,
    totals: TileTotals,
) -> None:
    """Advance one tile by a day in place, accumulating into ``totals``.

    Args:
        tile: The tile to update (already a private copy).
        conditions: Today's weather.
        modifiers: City-wide modifiers for today.
        config: Simulation configuration.
        totals: Day accumulator for water, energy, and production.
    """
    if tile.disabled_days > 0:
        tile.disabled_days -= 1
        return

    if conditions.flood and is_flood_prone(tile):
        tile.disabled_days = 1
        return

    building = building_type(tile.building)
    if building is None or not building.can_plant:
        return
    crop = crop_species(tile.crop)
    if crop is None:
        return

    weather = config.weather
    mult = method_multiplier(building)
    heat_growth = weather.heat_growth_mult if conditions.heatwave else 1.0

    growth = (1.0 / crop.cycle_days) * mult.yield_mult * heat_growth
    tile.progress = clamp(tile.progress + growth, 0.0, 1.0)

    heat_water = weather.heat_water_mult if conditions.heatwave else 1.0
    litres = (
        crop.water_litres
        * mult.water_mult
        * heat_water
        * (1.0 - modifiers.irrigation_efficiency)
    )
    totals.water_m3 += litres / 1000.0

    heat_energy = 1.0
    if conditions.heatwave and building.method is Method.VERTICAL_FARM:
        heat_energy = weather.heat_vertical_energy_mult
    totals.energy_kwh += mult.energy_kwh * heat_energy

    if tile.progress >= 1.0 - _MATURITY_EPSILON:
        loss = harvest_loss_rate(
            crop,
            conditions,
            modifiers.cold_chain_quality,
            weather,
            min_loss=config.economy.min_loss,
            max_loss=config.economy.max_loss,
        )
        harvested = crop.base_yield * mult.yield_mult * heat_growth * (1.0 - loss)
        totals.production[crop.crop_id] = (
            totals.production.get(crop.crop_id, 0.0) + harvested
        )
        tile.progress = 0.0


def grow_tiles(
    grid: Grid,
    conditions: Conditions,
    modifiers: CityModifiers,
    config: SimulationConfig,
) -> tuple[Grid, TileTotals]:
    """Advance every tile by one day without any randomness.

    Returns:
        ``(next_grid, totals)``; ``grid`` itself is not modified.
    """
    next_grid = grid.copy()
    totals = TileTotals(production=defaultdict(float))
    for tile in next_grid:
        grow_tile(tile, conditions, modifiers, config, totals)
    totals.production = dict(totals.production)
    return next_grid, totals


def advance_one_day(
    grid: Grid,
    events: Iterable[WeatherEvent],
    modifiers: CityModifiers,
    config: SimulationConfig,
    rng: Generator,
) -> DayOutcome:
    """Run the daily step for the whole grid.

    Args:
        grid: Yesterday's grid (not modified).
        events: Weather events active yesterday.
        modifiers: City-wide modifiers computed from ``grid``.
        config: Simulation configuration.
        rng: Random source for weather; the only random input.

    Returns:
        The DayOutcome for today.
    """
    events_today, spawned = advance_weather(events, rng, config.weather)
    conditions = Conditions.from_events(events_today)

    next_grid, totals = grow_tiles(grid, conditions, modifiers, config)

    economy = config.economy
    net_energy = max(0.0, totals.energy_kwh - modifiers.solar_offset_kwh)
    net_water = max(0.0, totals.water_m3 - modifiers.rainwater_offset_m3)

    return DayOutcome(
        grid=next_grid,
        events=events_today,
        spawned=spawned,
        conditions=conditions,
        water_m3=totals.water_m3,
        energy_kwh=totals.energy_kwh,
        production=totals.production,
        net_water_m3=net_water,
        net_energy_kwh=net_energy,
        water_cost=net_water * economy.water_price_m3,
        energy_cost=net_energy * economy.energy_price_kwh,
        emissions_kg=net_energy * economy.emission_kg_per_kwh,
    )
