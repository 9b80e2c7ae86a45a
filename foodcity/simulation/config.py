"""Config — load simulation parameters from YAML files.

All tunable constants (grid size, prices, modifier rates, weather odds,
happiness weights) live in YAML and are parsed into typed dataclasses
here.  Numbers are illustrative rather than balanced; keeping them in
data makes the city easy to experiment with.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from foodcity.city.policies import Policies

RATIO_MODES = ("rolling", "daily")


def _from_mapping(cls: type, data: dict[str, Any] | None) -> Any:
    """Build dataclass ``cls`` from the keys of ``data`` it recognises."""
    data = data or {}
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class ModifierConfig:
    """Per-building rates used by the city modifier aggregator.

    Attributes:
        market_capacity: Daily kg each market can distribute.
        edu_capacity: Daily kg each education centre can distribute.
        cold_chain_per_hub: Cold-chain quality added per cold hub.
        cold_chain_cap: Ceiling on cold-chain quality.
        solar_kwh_per_unit: Daily kWh offset per solar installation.
        rainwater_m3_per_tank: Daily m³ offset per rain tank.
        irrigation_base: Irrigation efficiency with no rain tanks.
        irrigation_per_tank: Irrigation efficiency added per rain tank.
        irrigation_cap: Ceiling on irrigation efficiency.
        preference_per_edu: Local-preference boost per education centre.
        preference_cap: Ceiling on the local-preference boost.
        worker_weights: Staff required per building id.
    """

    market_capacity: float = 1200.0
    edu_capacity: float = 100.0
    cold_chain_per_hub: float = 0.05
    cold_chain_cap: float = 0.6
    solar_kwh_per_unit: float = 60.0
    rainwater_m3_per_tank: float = 3.0
    irrigation_base: float = 0.1
    irrigation_per_tank: float = 0.05
    irrigation_cap: float = 0.5
    preference_per_edu: float = 0.05
    preference_cap: float = 0.4
    worker_weights: dict[str, float] = field(
        default_factory=lambda: {
            "community_garden": 1.0,
            "roof_garden": 1.0,
            "vertical_farm": 3.0,
            "market": 2.0,
            "cold_hub": 2.0,
            "composter": 1.0,
            "edu_center": 1.0,
        },
    )


@dataclass
class WeatherConfig:
    """Weather event odds and their effect multipliers.

    Attributes:
        daily_probability: Chance of one new event each day.
        heatwave_days: Inclusive (min, max) heatwave duration.
        flood_days: Inclusive (min, max) flood duration.
        dedupe_events: Extend an active event of the same type instead
            of appending a duplicate.
        heat_growth_mult: Growth and yield multiplier during a heatwave.
        heat_water_mult: Water-draw multiplier during a heatwave.
        heat_vertical_energy_mult: Vertical-farm energy multiplier
            during a heatwave.
        heat_loss_mult: Postharvest-loss multiplier during a heatwave.
    """

    daily_probability: float = 0.06
    heatwave_days: tuple[int, int] = (3, 5)
    flood_days: tuple[int, int] = (2, 3)
    dedupe_events: bool = True
    heat_growth_mult: float = 0.95
    heat_water_mult: float = 1.15
    heat_vertical_energy_mult: float = 1.2
    heat_loss_mult: float = 1.1

    def __post_init__(self) -> None:
        """Normalise YAML lists into tuples."""
        self.heatwave_days = (int(self.heatwave_days[0]), int(self.heatwave_days[1]))
        self.flood_days = (int(self.flood_days[0]), int(self.flood_days[1]))


@dataclass
class EconomyConfig:
    """Prices, costs, and demand parameters.

    Attributes:
        start_budget: Budget on day 1.
        population: City population driving food demand.
        demand_kg_per_capita: Daily fresh-food target per resident.
        base_local_preference: Share of demand aimed at local food.
        water_price_m3: Cost per m³ of billable water.
        energy_price_kwh: Cost per kWh of billable energy.
        emission_kg_per_kwh: Emissions per billable kWh.
        fallback_price: Sale price per kg on days without a harvest.
        wage_per_worker: Daily wage per worker.
        daily_overhead: Fixed daily operating expense.
        min_loss: Floor on the postharvest loss rate.
        max_loss: Ceiling on the postharvest loss rate.
        demolish_refund_fraction: Share of construction cost refunded
            on demolition.
    """

    start_budget: float = 800_000_000.0
    population: int = 10_000
    demand_kg_per_capita: float = 0.5
    base_local_preference: float = 0.5
    water_price_m3: float = 3000.0
    energy_price_kwh: float = 1400.0
    emission_kg_per_kwh: float = 0.0008
    fallback_price: float = 17000.0
    wage_per_worker: float = 100_000.0
    daily_overhead: float = 1_200_000.0
    min_loss: float = 0.02
    max_loss: float = 0.20
    demolish_refund_fraction: float = 0.0


@dataclass
class HappinessConfig:
    """Weights of the daily happiness nudge.

    Attributes:
        start: Happiness on day 1.
        per_green_tile: Gain per plantable tile.
        shortfall_penalty: Loss per unit of self-sufficiency shortfall.
        flood_penalty: Flat loss while a flood is active.
        heatwave_penalty: Flat loss while a heatwave is active.
    """

    start: float = 65.0
    per_green_tile: float = 0.05
    shortfall_penalty: float = 10.0
    flood_penalty: float = 2.0
    heatwave_penalty: float = 1.0


@dataclass
class SimulationConfig:
    """Top-level simulation configuration.

    Attributes:
        seed: RNG seed for deterministic replay.
        grid_width: Number of grid columns.
        grid_height: Number of grid rows.
        roof_fraction: Share of tiles generated as rooftops.
        ratio_window_days: Trailing window of the rolling
            self-sufficiency ratio.
        history_days: Days of history retained.
        ratio_mode: ``"rolling"`` or ``"daily"``; which ratio drives
            happiness and the onboarding checklist.
        modifiers: City modifier rates.
        weather: Weather odds and multipliers.
        economy: Prices, costs, and demand.
        happiness: Happiness weights.
        policies: Starting policy settings.
    """

    seed: int = 42
    grid_width: int = 20
    grid_height: int = 12
    roof_fraction: float = 0.3
    ratio_window_days: int = 60
    history_days: int = 120
    ratio_mode: str = "rolling"
    modifiers: ModifierConfig = field(default_factory=ModifierConfig)
    weather: WeatherConfig = field(default_factory=WeatherConfig)
    economy: EconomyConfig = field(default_factory=EconomyConfig)
    happiness: HappinessConfig = field(default_factory=HappinessConfig)
    policies: Policies = field(default_factory=Policies)

    def __post_init__(self) -> None:
        """Reject an unknown ratio mode early."""
        if self.ratio_mode not in RATIO_MODES:
            msg = f"ratio_mode must be one of {RATIO_MODES}, got {self.ratio_mode!r}"
            raise ValueError(msg)

    @classmethod
    def from_yaml(cls, path: str | Path) -> SimulationConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML config file.

        Returns:
            A populated SimulationConfig instance.

        Raises:
            FileNotFoundError: If the config file does not exist.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}

        return cls(
            seed=data.get("seed", cls.seed),
            grid_width=data.get("grid_width", cls.grid_width),
            grid_height=data.get("grid_height", cls.grid_height),
            roof_fraction=data.get("roof_fraction", cls.roof_fraction),
            ratio_window_days=data.get("ratio_window_days", cls.ratio_window_days),
            history_days=data.get("history_days", cls.history_days),
            ratio_mode=data.get("ratio_mode", cls.ratio_mode),
            modifiers=_from_mapping(ModifierConfig, data.get("modifiers")),
            weather=_from_mapping(WeatherConfig, data.get("weather")),
            economy=_from_mapping(EconomyConfig, data.get("economy")),
            happiness=_from_mapping(HappinessConfig, data.get("happiness")),
            policies=_from_mapping(Policies, data.get("policies")),
        )
