"""Market — distribute harvested and stored food against demand.

Today's harvest is merged into the carried inventory, then the market
withdraws up to its daily capacity.  Crops are drained in lexicographic
order of their ids so that identical inputs always dispatch identically.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

# Self-sufficiency above 1.0 is kept (surplus) up to this ceiling
MAX_RATIO = 2.0


@dataclass
class Distribution:
    """Result of one day's market run.

    Attributes:
        inventory: Stored-but-undelivered kg by crop id after dispatch.
        dispatched: Total kg sent to market today.
        dispatched_by_crop: Kg sent to market today by crop id.
        ratio: Same-day self-sufficiency ratio in ``[0, MAX_RATIO]``.
    """

    inventory: dict[str, float]
    dispatched: float
    dispatched_by_crop: dict[str, float]
    ratio: float


def daily_demand(
    population: int,
    kg_per_capita: float,
    base_preference: float,
    preference_boost: float,
) -> float:
    """Return the day's local-food demand in kg."""
    return population * kg_per_capita * (base_preference + preference_boost)


def self_sufficiency(dispatched: float, demand: float) -> float:
    """Return ``dispatched / demand`` clamped to ``[0, MAX_RATIO]``; 0 if no demand."""
    if demand <= 0:
        return 0.0
    return max(0.0, min(MAX_RATIO, dispatched / demand))


def distribute(
    production: Mapping[str, float],
    inventory: Mapping[str, float],
    capacity: float,
    demand: float,
) -> Distribution:
    """Merge today's harvest into storage and dispatch up to capacity.

    Args:
        production: Kg harvested today by crop id.
        inventory: Kg carried over from previous days by crop id.
        capacity: Market capacity in kg for today.
        demand: Demand in kg for today.

    Returns:
        The updated inventory, dispatched mass, and same-day ratio.
    """
    stock = {crop_id: max(0.0, kg) for crop_id, kg in inventory.items()}
    for crop_id, kg in production.items():
        stock[crop_id] = stock.get(crop_id, 0.0) + kg

    budget = min(sum(stock.values()), max(0.0, capacity))
    dispatched = 0.0
    by_crop: dict[str, float] = {}
    for crop_id in sorted(stock):
        if budget <= 0:
            break
        take = min(stock[crop_id], budget)
        if take <= 0:
            continue
        stock[crop_id] -= take
        by_crop[crop_id] = take
        dispatched += take
        budget -= take

    return Distribution(
        inventory=stock,
        dispatched=dispatched,
        dispatched_by_crop=by_crop,
        ratio=self_sufficiency(dispatched, demand),
    )
