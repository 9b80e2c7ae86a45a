"""Economy — daily budget and happiness updates.

Both updates are plain functions of the day's figures.  The budget has
no floor: a negative balance is a warning state for the player, not a
failure.  Happiness is clamped to ``[0, 100]``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from foodcity.catalog.crops import crop_species

if TYPE_CHECKING:
    from collections.abc import Mapping

    from foodcity.simulation.config import EconomyConfig, HappinessConfig
    from foodcity.world.weather import Conditions


@dataclass(frozen=True)
class Ledger:
    """One day's income statement.

    Attributes:
        average_price: Mean sale price per kg used for revenue.
        revenue: Income from dispatched food.
        wages: Staff cost.
        opex: Total operating expense (utilities, wages, overhead).
        budget: Budget after today.
    """

    average_price: float
    revenue: float
    wages: float
    opex: float
    budget: float


def average_price(production: Mapping[str, float], fallback: float) -> float:
    """Return the mass-weighted sale price of today's harvest.

    Crops missing from the catalogue contribute mass but no value.
    ``fallback`` is used when nothing was harvested.
    """
    total = sum(production.values())
    if total <= 0:
        return fallback
    value = 0.0
    for crop_id, kg in production.items():
        crop = crop_species(crop_id)
        if crop is not None:
            value += kg * crop.price
    return value / total


def settle_budget(
    budget: float,
    *,
    production: Mapping[str, float],
    dispatched: float,
    energy_cost: float,
    water_cost: float,
    worker_count: float,
    config: EconomyConfig,
) -> Ledger:
    """Apply today's revenue and operating expense to the budget.

    Args:
        budget: Budget before today.
        production: Kg harvested today by crop id.
        dispatched: Kg sold today.
        energy_cost: Cost of billed energy.
        water_cost: Cost of billed water.
        worker_count: Staff-weighted building count.
        config: Economy parameters.

    Returns:
        The day's Ledger.
    """
    price = average_price(production, config.fallback_price)
    revenue = dispatched * price
    wages = config.wage_per_worker * worker_count
    opex = energy_cost + water_cost + wages + config.daily_overhead
    return Ledger(
        average_price=price,
        revenue=revenue,
        wages=wages,
        opex=opex,
        budget=budget + revenue - opex,
    )


def update_happiness(
    happiness: float,
    *,
    green_tiles: int,
    ratio: float,
    conditions: Conditions,
    config: HappinessConfig,
) -> float:
    """Nudge happiness for greenery, food shortfall, and bad weather.

    Args:
        happiness: Yesterday's happiness.
        green_tiles: Plantable tiles in the city.
        ratio: Self-sufficiency ratio driving the shortfall penalty.
        conditions: Today's weather.
        config: Happiness weights.

    Returns:
        Today's happiness in ``[0, 100]``.
    """
    happiness += config.per_green_tile * green_tiles
    happiness -= config.shortfall_penalty * max(0.0, 1.0 - ratio)
    if conditions.flood:
        happiness -= config.flood_penalty
    if conditions.heatwave:
        happiness -= config.heatwave_penalty
    return max(0.0, min(100.0, happiness))
