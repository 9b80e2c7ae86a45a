"""Weather — transient heatwave and flood events.

Updated first in each simulated day so that tile growth reacts to the
current conditions.  Randomness comes only from the generator passed in,
which keeps the rest of the daily step deterministic.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from numpy.random import Generator

    from foodcity.simulation.config import WeatherConfig

logger = logging.getLogger(__name__)


class WeatherKind(Enum):
    """Type of a weather event."""

    HEATWAVE = "heatwave"
    FLOOD = "flood"


@dataclass
class WeatherEvent:
    """An active weather event.

    Attributes:
        kind: Heatwave or flood.
        days_left: Days the event remains in effect, including today.
    """

    kind: WeatherKind
    days_left: int


@dataclass(frozen=True)
class Conditions:
    """Which event types are in effect today.

    Stacked events of one type have no additional effect.
    """

    heatwave: bool = False
    flood: bool = False

    @classmethod
    def from_events(cls, events: Iterable[WeatherEvent]) -> Conditions:
        kinds = {event.kind for event in events}
        return cls(
            heatwave=WeatherKind.HEATWAVE in kinds,
            flood=WeatherKind.FLOOD in kinds,
        )


def age_events(events: Iterable[WeatherEvent]) -> list[WeatherEvent]:
    """Count every event down by one day and drop the expired ones.

    Returns new event objects; the input is left untouched.
    """
    aged = [WeatherEvent(e.kind, e.days_left - 1) for e in events]
    return [e for e in aged if e.days_left > 0]


def spawn_event(rng: Generator, config: WeatherConfig) -> WeatherEvent | None:
    """Roll for today's new weather event.

    With ``config.daily_probability`` one event is created, a heatwave
    or a flood with equal odds, lasting a uniformly drawn number of days
    from the type's inclusive range.

    Args:
        rng: Seeded random generator.
        config: Weather odds and durations.

    Returns:
        The new event, or None on a calm day.
    """
    if rng.random() >= config.daily_probability:
        return None
    if rng.random() < 0.5:
        lo, hi = config.heatwave_days
        kind = WeatherKind.HEATWAVE
    else:
        lo, hi = config.flood_days
        kind = WeatherKind.FLOOD
    return WeatherEvent(kind=kind, days_left=int(rng.integers(lo, hi + 1)))


def advance_weather(
    events: Iterable[WeatherEvent],
    rng: Generator,
    config: WeatherConfig,
) -> tuple[list[WeatherEvent], WeatherEvent | None]:
    """Advance the active event list by one day.

    Args:
        events: Events active yesterday.
        rng: Seeded random generator.
        config: Weather odds, durations, and dedupe policy.

    Returns:
        ``(events_today, spawned)`` where ``spawned`` is the event
        created today, if any.
    """
    current = age_events(events)
    spawned = spawn_event(rng, config)
    if spawned is None:
        return current, None

    logger.info("Weather event: %s for %d days", spawned.kind.value, spawned.days_left)
    if config.dedupe_events:
        for event in current:
            if event.kind is spawned.kind:
                event.days_left = max(event.days_left, spawned.days_left)
                return current, spawned
    current.append(spawned)
    return current, spawned
