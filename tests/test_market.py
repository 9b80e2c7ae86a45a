"""Tests for foodcity.simulation.market — distribution against demand."""

import numpy as np
import pytest

from foodcity.simulation.market import (
    MAX_RATIO,
    daily_demand,
    distribute,
    self_sufficiency,
)


class TestDistribute:
    """Tests for merging harvest into storage and dispatching."""

    def test_lexicographic_drain(self) -> None:
        result = distribute({}, {"cropB": 5.0, "cropA": 5.0}, capacity=7.0, demand=10.0)
        assert result.dispatched == pytest.approx(7.0)
        assert result.dispatched_by_crop == {"cropA": 5.0, "cropB": 2.0}
        assert result.inventory["cropA"] == 0.0
        assert result.inventory["cropB"] == pytest.approx(3.0)

    def test_production_merged_before_dispatch(self) -> None:
        result = distribute({"a": 2.0}, {"a": 1.0, "b": 4.0}, capacity=100.0, demand=7.0)
        assert result.dispatched == pytest.approx(7.0)
        assert all(kg == 0.0 for kg in result.inventory.values())
        assert result.ratio == pytest.approx(1.0)

    def test_zero_capacity_dispatches_nothing(self) -> None:
        result = distribute({"a": 3.0}, {}, capacity=0.0, demand=50.0)
        assert result.dispatched == 0.0
        assert result.inventory == {"a": 3.0}
        assert result.ratio == 0.0

    def test_inputs_not_mutated(self) -> None:
        inventory = {"a": 5.0}
        production = {"a": 1.0}
        distribute(production, inventory, capacity=4.0, demand=1.0)
        assert inventory == {"a": 5.0}
        assert production == {"a": 1.0}

    def test_bounds_hold_on_random_inputs(self) -> None:
        rng = np.random.default_rng(0)
        crops = ["a", "b", "c", "d"]
        for _ in range(500):
            inventory = {c: float(rng.uniform(0, 50)) for c in crops if rng.random() < 0.7}
            production = {c: float(rng.uniform(0, 20)) for c in crops if rng.random() < 0.5}
            capacity = float(rng.uniform(0, 150))
            demand = float(rng.uniform(0, 100))
            total = sum(inventory.values()) + sum(production.values())
            result = distribute(production, inventory, capacity, demand)
            assert result.dispatched <= min(total, capacity) + 1e-9
            assert all(kg >= 0.0 for kg in result.inventory.values())
            assert 0.0 <= result.ratio <= MAX_RATIO
            assert sum(result.inventory.values()) + result.dispatched == pytest.approx(total)


class TestRatio:
    """Tests for the self-sufficiency ratio."""

    def test_zero_demand(self) -> None:
        assert self_sufficiency(10.0, 0.0) == 0.0

    def test_surplus_kept_up_to_ceiling(self) -> None:
        assert self_sufficiency(150.0, 100.0) == pytest.approx(1.5)
        assert self_sufficiency(500.0, 100.0) == MAX_RATIO

    def test_daily_demand(self) -> None:
        assert daily_demand(10_000, 0.5, 0.5, 0.1) == pytest.approx(3000.0)
