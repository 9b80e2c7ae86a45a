"""City modifiers — city-wide multipliers derived from the building census.

The aggregate is a pure function of the grid (plus optional policies):
nothing is cached, so callers recompute it whenever the grid may have
changed.  Every diminishing-returns term is clamped to its cap.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from foodcity.catalog.buildings import COLD_HUB, EDU_CENTER, MARKET, RAIN_TANK, SOLAR

if TYPE_CHECKING:
    from foodcity.city.policies import Policies
    from foodcity.simulation.config import ModifierConfig
    from foodcity.world.grid import Grid


@dataclass(frozen=True)
class CityModifiers:
    """Derived city-wide multipliers for one grid state.

    Attributes:
        market_capacity: Daily kg the city can distribute.
        cold_chain_quality: Postharvest-loss reduction (0.0-cap).
        solar_offset_kwh: Daily kWh supplied by solar.
        rainwater_offset_m3: Daily m³ supplied by rain tanks.
        irrigation_efficiency: Fractional reduction in crop water draw.
        local_preference_boost: Added share of demand aimed at local food.
        green_tiles: Tiles whose building supports planting.
        worker_count: Staff-weighted building count.
        building_counts: Census of non-empty tiles by building id.
    """

    market_capacity: float = 0.0
    cold_chain_quality: float = 0.0
    solar_offset_kwh: float = 0.0
    rainwater_offset_m3: float = 0.0
    irrigation_efficiency: float = 0.0
    local_preference_boost: float = 0.0
    green_tiles: int = 0
    worker_count: float = 0.0
    building_counts: tuple[tuple[str, int], ...] = ()

    def count(self, building_id: str) -> int:
        """Return how many tiles hold ``building_id``."""
        return dict(self.building_counts).get(building_id, 0)


def compute_city_modifiers(
    grid: Grid,
    config: ModifierConfig,
    policies: Policies | None = None,
) -> CityModifiers:
    """Derive city-wide modifiers from the grid's building census.

    Args:
        grid: The city grid (read only).
        config: Per-building modifier rates and caps.
        policies: Optional policy sliders added before capping.

    Returns:
        A fresh CityModifiers record.
    """
    counts = grid.building_counts()
    markets = counts[MARKET]
    edus = counts[EDU_CENTER]
    tanks = counts[RAIN_TANK]

    campaign = policies.local_food_campaign if policies else 0.0
    subsidy = policies.irrigation_subsidy if policies else 0.0

    workers = sum(
        weight * counts[building_id]
        for building_id, weight in config.worker_weights.items()
    )

    return CityModifiers(
        market_capacity=markets * config.market_capacity + edus * config.edu_capacity,
        cold_chain_quality=min(
            config.cold_chain_cap,
            config.cold_chain_per_hub * counts[COLD_HUB],
        ),
        solar_offset_kwh=config.solar_kwh_per_unit * counts[SOLAR],
        rainwater_offset_m3=config.rainwater_m3_per_tank * tanks,
        irrigation_efficiency=min(
            config.irrigation_cap,
            config.irrigation_base + config.irrigation_per_tank * tanks + subsidy,
        ),
        local_preference_boost=min(
            config.preference_cap,
            config.preference_per_edu * edus + campaign,
        ),
        green_tiles=grid.green_tile_count(),
        worker_count=float(workers),
        building_counts=tuple(sorted(counts.items())),
    )
