"""WorldState — everything the simulation owns between days.

A single WorldState is threaded through the engine; there is no
process-wide simulation state.  The presentation layer reads it between
days and never writes to it directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from foodcity.simulation.history import HistoryLog
from foodcity.world.grid import Grid

if TYPE_CHECKING:
    from numpy.random import Generator

    from foodcity.simulation.config import SimulationConfig
    from foodcity.world.weather import WeatherEvent


@dataclass
class CityResources:
    """City-wide resource levels and KPIs.

    Attributes:
        day: Day counter, starting at 1.
        budget: Currency balance; may be negative.
        water_m3: Gross water drawn on the latest day.
        energy_kwh: Gross energy drawn on the latest day.
        inventory: Stored-but-undelivered kg by crop id.
        self_sufficiency: Headline self-sufficiency ratio.
        happiness: Happiness score (0-100).
        emissions_kg: Cumulative emissions; never decreases.
    """

    day: int = 1
    budget: float = 800_000_000.0
    water_m3: float = 0.0
    energy_kwh: float = 0.0
    inventory: dict[str, float] = field(default_factory=dict)
    self_sufficiency: float = 0.0
    happiness: float = 65.0
    emissions_kg: float = 0.0


@dataclass
class WorldState:
    """The grid, resources, weather, and history of one city.

    Attributes:
        grid: The city grid.
        resources: Resource levels and KPIs.
        events: Active weather events.
        history: Trailing daily log.
    """

    grid: Grid
    resources: CityResources = field(default_factory=CityResources)
    events: list[WeatherEvent] = field(default_factory=list)
    history: HistoryLog = field(default_factory=HistoryLog)

    @classmethod
    def fresh(cls, config: SimulationConfig, rng: Generator) -> WorldState:
        """Create a new city from configuration.

        Args:
            config: Simulation configuration.
            rng: Seeded random generator used for grid generation.

        Returns:
            A day-1 WorldState.
        """
        grid = Grid.generate(
            config.grid_width,
            config.grid_height,
            rng,
            roof_fraction=config.roof_fraction,
        )
        return cls(
            grid=grid,
            resources=CityResources(
                budget=config.economy.start_budget,
                happiness=config.happiness.start,
            ),
            history=HistoryLog(retention_days=config.history_days),
        )
