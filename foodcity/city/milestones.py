"""Milestones — the onboarding checklist shown beside the map.

The checklist is derived from the grid, the self-sufficiency ratio, and
the active weather; it never changes simulation state.  A milestone
that has been reached stays reached.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from foodcity.catalog.buildings import (
    COLD_HUB,
    COMMUNITY_GARDEN,
    MARKET,
    RAIN_TANK,
    building_type,
)
from foodcity.catalog.crops import FAST_CROPS

if TYPE_CHECKING:
    from collections.abc import Sequence

    from foodcity.world.grid import Grid
    from foodcity.world.weather import WeatherEvent

# Ratio the "first deliveries" milestone asks for
RATIO_GOAL = 0.25


@dataclass(frozen=True)
class Milestone:
    """One checklist entry."""

    key: str
    title: str
    description: str
    done: bool = False


def initial_milestones() -> list[Milestone]:
    """Return the checklist with nothing completed."""
    return [
        Milestone(
            "build_garden",
            "Build a community garden",
            "Build mode, pick Community garden, click a land tile.",
        ),
        Milestone("build_rain", "Build a rain tank", "Rainwater cuts the water bill."),
        Milestone(
            "plant_fast",
            "Plant a fast crop",
            "Plant mode, pick water spinach or bok choy, click a garden.",
        ),
        Milestone("market", "Build a local market", "Harvests need a market to reach people."),
        Milestone(
            "ratio",
            f"Reach {RATIO_GOAL:.0%} self-sufficiency",
            "Grow more and add distribution capacity.",
        ),
        Milestone("cold", "Build a cold hub", "Cold storage cuts postharvest loss."),
        Milestone(
            "weather",
            "Live through a weather event",
            "Floods and heatwaves should not derail the city.",
        ),
    ]


def _can_plant(building_id: str) -> bool:
    building = building_type(building_id)
    return building is not None and building.can_plant


def check_milestones(
    previous: Sequence[Milestone],
    *,
    grid: Grid,
    ratio: float,
    events: Sequence[WeatherEvent],
) -> list[Milestone]:
    """Return the checklist updated for the current city.

    Args:
        previous: Yesterday's checklist.
        grid: Current grid.
        ratio: Self-sufficiency ratio used for gating.
        events: Active weather events.

    Returns:
        A new checklist; ``previous`` is not modified.
    """
    counts = grid.building_counts()
    planted_fast = any(
        tile.crop in FAST_CROPS and _can_plant(tile.building) for tile in grid
    )
    reached = {
        "build_garden": counts[COMMUNITY_GARDEN] >= 1,
        "build_rain": counts[RAIN_TANK] >= 1,
        "plant_fast": planted_fast,
        "market": counts[MARKET] >= 1,
        "ratio": ratio >= RATIO_GOAL,
        "cold": counts[COLD_HUB] >= 1,
        "weather": len(events) > 0,
    }
    return [
        replace(m, done=m.done or reached.get(m.key, False)) for m in previous
    ]
