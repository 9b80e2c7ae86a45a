"""SimulationEngine — the day-by-day driver.

Owns the WorldState and advances it one day per ``step()`` call in the
canonical order:

1. Derive city modifiers from the current grid
2. Age and roll weather, grow and harvest every tile, price utilities
3. Distribute harvest and stored food against demand
4. Settle the budget
5. Log the day and update the rolling self-sufficiency ratio
6. Update happiness, emissions, and the onboarding checklist

Only one step may run at a time.  Listeners (persistence, display) are
notified after a step has fully completed.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
from numpy.random import Generator

from foodcity.catalog.buildings import COLD_HUB, EDU_CENTER, MARKET, RAIN_TANK, SOLAR
from foodcity.city.actions import ActionRejected, Mode, apply_click
from foodcity.city.milestones import Milestone, check_milestones, initial_milestones
from foodcity.city.modifiers import CityModifiers, compute_city_modifiers
from foodcity.city.policies import Policies
from foodcity.simulation.economy import Ledger, settle_budget, update_happiness
from foodcity.simulation.history import HistoryRecord
from foodcity.simulation.market import Distribution, daily_demand, distribute
from foodcity.simulation.state import WorldState
from foodcity.simulation.step import DayOutcome, advance_one_day

if TYPE_CHECKING:
    from collections.abc import Callable

    from foodcity.simulation.config import SimulationConfig

logger = logging.getLogger(__name__)

# Messages kept for the player
_MESSAGE_LIMIT = 6


@dataclass(frozen=True)
class DayReport:
    """What happened on one simulated day.

    Attributes:
        day: The day the report closes (the new day counter).
        outcome: Tile-level results and utility costs.
        distribution: Market dispatch and same-day ratio.
        ledger: Revenue, expense, and resulting budget.
        demand: Kg demanded today.
        rolling_ratio: Trailing-window self-sufficiency ratio.
        happiness: Happiness after today.
    """

    day: int
    outcome: DayOutcome
    distribution: Distribution
    ledger: Ledger
    demand: float
    rolling_ratio: float
    happiness: float


@dataclass(frozen=True)
class CitySummary:
    """Figures for the city summary panel."""

    markets: int
    market_capacity: float
    cold_hubs: int
    cold_chain_quality: float
    solar_units: int
    solar_offset_kwh: float
    rain_tanks: int
    rainwater_offset_m3: float
    edu_centers: int
    local_preference: float
    average_production: float


@dataclass
class SimulationEngine:
    """Drives the city forward one day at a time.

    Attributes:
        config: Loaded simulation configuration.
        state: The world being simulated; generated from config if None.
        policies: Active policy sliders; taken from config if None.
        rng: Master seeded random generator.
        milestones: Onboarding checklist.
        messages: Recent player-facing messages, oldest first.
    """

    config: SimulationConfig
    state: WorldState | None = None
    policies: Policies | None = None
    rng: Generator = field(init=False)
    milestones: list[Milestone] = field(init=False)
    messages: deque[str] = field(init=False)
    _listeners: list[Callable[[SimulationEngine, DayReport], None]] = field(
        init=False,
        default_factory=list,
        repr=False,
    )
    _step_lock: threading.Lock = field(
        init=False,
        default_factory=threading.Lock,
        repr=False,
    )

    def __post_init__(self) -> None:
        """Seed the RNG, build a fresh world if needed, and prime the checklist."""
        if self.policies is None:
            self.policies = self.config.policies
        self.rng = np.random.default_rng(self.config.seed)
        if self.state is None:
            self.state = WorldState.fresh(self.config, self.rng)
        self.messages = deque(maxlen=_MESSAGE_LIMIT)
        self.milestones = check_milestones(
            initial_milestones(),
            grid=self.state.grid,
            ratio=self.state.resources.self_sufficiency,
            events=self.state.events,
        )

    @property
    def day(self) -> int:
        """Return the current day counter."""
        return self.state.resources.day

    @property
    def modifiers(self) -> CityModifiers:
        """Return modifiers for the current grid (recomputed on every access)."""
        return compute_city_modifiers(
            self.state.grid,
            self.config.modifiers,
            self.policies,
        )

    def add_listener(self, listener: Callable[[SimulationEngine, DayReport], None]) -> None:
        """Register a callback run after each completed step.

        Args:
            listener: Called with the engine and the day's report.
        """
        self._listeners.append(listener)

    def post_message(self, text: str) -> None:
        """Append a player-facing message tagged with the current day."""
        self.messages.append(f"D{self.day}: {text}")

    def step(self) -> DayReport | None:
        """Advance the simulation by one day.

        Returns:
            The day's report, or None if another step is still running.
        """
        if not self._step_lock.acquire(blocking=False):
            logger.warning("Step requested while day %d is still running", self.day)
            return None
        try:
            report = self._advance()
        finally:
            self._step_lock.release()

        for listener in self._listeners:
            listener(self, report)
        return report

    def run(self, days: int) -> None:
        """Run the simulation for a fixed number of days.

        Args:
            days: Number of days to advance.
        """
        for _ in range(days):
            self.step()

    def apply_action(
        self,
        mode: Mode,
        x: int,
        y: int,
        *,
        building_id: str,
        crop_id: str,
    ) -> bool:
        """Apply a tile click; rejected actions only leave a message.

        Returns:
            True if the action changed or described the city, False if
            it was rejected.
        """
        with self._step_lock:
            try:
                result = apply_click(
                    self.state,
                    mode,
                    x,
                    y,
                    building_id=building_id,
                    crop_id=crop_id,
                    config=self.config.economy,
                )
            except ActionRejected as exc:
                logger.info("Action rejected: %s", exc)
                self.post_message(str(exc))
                return False
            self.post_message(result)
            self.milestones = check_milestones(
                self.milestones,
                grid=self.state.grid,
                ratio=self.state.resources.self_sufficiency,
                events=self.state.events,
            )
            return True

    def reset(self) -> None:
        """Discard the current city and start a fresh one from config."""
        with self._step_lock:
            self.rng = np.random.default_rng(self.config.seed)
            self.state = WorldState.fresh(self.config, self.rng)
            self.messages.clear()
            self.milestones = check_milestones(
                initial_milestones(),
                grid=self.state.grid,
                ratio=self.state.resources.self_sufficiency,
                events=self.state.events,
            )
        logger.info("City reset")

    def summary(self) -> CitySummary:
        """Return figures for the city summary panel."""
        mods = self.modifiers
        return CitySummary(
            markets=mods.count(MARKET),
            market_capacity=mods.market_capacity,
            cold_hubs=mods.count(COLD_HUB),
            cold_chain_quality=mods.cold_chain_quality,
            solar_units=mods.count(SOLAR),
            solar_offset_kwh=mods.solar_offset_kwh,
            rain_tanks=mods.count(RAIN_TANK),
            rainwater_offset_m3=mods.rainwater_offset_m3,
            edu_centers=mods.count(EDU_CENTER),
            local_preference=(
                self.config.economy.base_local_preference + mods.local_preference_boost
            ),
            average_production=self.state.history.average_production(7),
        )

    def _advance(self) -> DayReport:
        state = self.state
        res = state.resources
        economy = self.config.economy

        mods = self.modifiers
        outcome = advance_one_day(state.grid, state.events, mods, self.config, self.rng)
        if outcome.spawned is not None:
            self.post_message(
                f"{outcome.spawned.kind.value.capitalize()} for "
                f"{outcome.spawned.days_left} days!",
            )

        demand = daily_demand(
            economy.population,
            economy.demand_kg_per_capita,
            economy.base_local_preference,
            mods.local_preference_boost,
        )
        dist = distribute(outcome.production, res.inventory, mods.market_capacity, demand)

        ledger = settle_budget(
            res.budget,
            production=outcome.production,
            dispatched=dist.dispatched,
            energy_cost=outcome.energy_cost,
            water_cost=outcome.water_cost,
            worker_count=mods.worker_count,
            config=economy,
        )

        record = HistoryRecord(
            day=res.day + 1,
            ratio=dist.ratio,
            produced=outcome.total_produced,
            dispatched=dist.dispatched,
            demand=demand,
        )
        rolling = state.history.rolling_ratio(
            self.config.ratio_window_days,
            pending=record,
        )
        gating_ratio = rolling if self.config.ratio_mode == "rolling" else dist.ratio

        happiness = update_happiness(
            res.happiness,
            green_tiles=mods.green_tiles,
            ratio=gating_ratio,
            conditions=outcome.conditions,
            config=self.config.happiness,
        )

        if ledger.budget < 0 <= res.budget:
            logger.info("Budget went negative on day %d", res.day + 1)

        state.history.append(record)
        state.grid = outcome.grid
        state.events = outcome.events
        res.water_m3 = outcome.water_m3
        res.energy_kwh = outcome.energy_kwh
        res.emissions_kg += outcome.emissions_kg
        res.budget = ledger.budget
        res.inventory = dist.inventory
        res.self_sufficiency = gating_ratio
        res.happiness = happiness
        res.day += 1

        self.milestones = check_milestones(
            self.milestones,
            grid=state.grid,
            ratio=gating_ratio,
            events=state.events,
        )

        return DayReport(
            day=res.day,
            outcome=outcome,
            distribution=dist,
            ledger=ledger,
            demand=demand,
            rolling_ratio=rolling,
            happiness=happiness,
        )
