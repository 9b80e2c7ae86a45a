"""Shared fixtures for the Food City test suite."""

from __future__ import annotations

import numpy as np
import pytest
from numpy.random import Generator

from foodcity.city.modifiers import CityModifiers
from foodcity.simulation.config import SimulationConfig, WeatherConfig
from foodcity.simulation.state import WorldState
from foodcity.world.grid import Grid


@pytest.fixture
def rng() -> Generator:
    """A deterministic random generator for reproducible tests."""
    return np.random.default_rng(seed=12345)


@pytest.fixture
def small_grid() -> Grid:
    """A small all-land, all-empty 6x4 grid for fast tests."""
    return Grid(width=6, height=4)


@pytest.fixture
def default_config() -> SimulationConfig:
    """Default simulation config (no YAML file needed)."""
    return SimulationConfig()


@pytest.fixture
def calm_config() -> SimulationConfig:
    """A config whose weather never spawns an event."""
    return SimulationConfig(weather=WeatherConfig(daily_probability=0.0))


@pytest.fixture
def no_modifiers() -> CityModifiers:
    """Modifiers of a city with no support buildings at all."""
    return CityModifiers()


@pytest.fixture
def small_state(small_grid: Grid) -> WorldState:
    """A WorldState around the small grid with default resources."""
    return WorldState(grid=small_grid)
