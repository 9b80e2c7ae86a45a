"""History — the bounded day-by-day log and the metrics derived from it.

The log only feeds display and rolling metrics; the daily step never
reads it.  Records older than the retention window are evicted.
"""

from __future__ import annotations

from collections import deque
from dataclasses import asdict, dataclass, field
from typing import Any

import numpy as np
from numpy.typing import NDArray

from foodcity.simulation.market import MAX_RATIO, self_sufficiency


@dataclass(frozen=True)
class HistoryRecord:
    """One simulated day.

    Attributes:
        day: Day index the record closes.
        ratio: Same-day self-sufficiency ratio.
        produced: Kg harvested.
        dispatched: Kg sent to market.
        demand: Kg demanded.
    """

    day: int
    ratio: float
    produced: float
    dispatched: float
    demand: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class HistoryLog:
    """Trailing log of daily records.

    Attributes:
        retention_days: Maximum records kept.
        records: Records, oldest first.
    """

    retention_days: int = 120
    records: deque[HistoryRecord] = field(default_factory=deque)

    def __post_init__(self) -> None:
        """Bound the record deque to the retention window."""
        self.records = deque(self.records, maxlen=self.retention_days)

    def __len__(self) -> int:
        return len(self.records)

    def append(self, record: HistoryRecord) -> None:
        """Add a record, evicting the oldest beyond retention."""
        self.records.append(record)

    def rolling_ratio(
        self,
        window_days: int,
        *,
        pending: HistoryRecord | None = None,
    ) -> float:
        """Return sum(dispatched) / sum(demand) over the last ``window_days``.

        Args:
            window_days: Trailing window length.
            pending: A record not yet appended, counted as the newest day.

        Returns:
            The ratio, or 0.0 with no history or no demand in the window.
        """
        recent = list(self.records)
        if pending is not None:
            recent.append(pending)
        if not recent:
            return 0.0
        recent = recent[-window_days:]
        dispatched = sum(r.dispatched for r in recent)
        demand = sum(r.demand for r in recent)
        return self_sufficiency(dispatched, demand)

    def rolling_ratio_series(self, window_days: int) -> NDArray[np.float64]:
        """Return the rolling ratio as of each retained day.

        Element ``i`` covers records ``max(0, i - window_days + 1)``
        through ``i`` inclusive.
        """
        if not self.records:
            return np.zeros(0, dtype=np.float64)
        dispatched = np.cumsum([r.dispatched for r in self.records], dtype=np.float64)
        demand = np.cumsum([r.demand for r in self.records], dtype=np.float64)
        # Subtract the running total from just before each window starts
        if len(dispatched) > window_days:
            dispatched[window_days:] -= dispatched[:-window_days].copy()
            demand[window_days:] -= demand[:-window_days].copy()
        ratio = np.divide(
            dispatched,
            demand,
            out=np.zeros_like(dispatched),
            where=demand > 0,
        )
        return np.clip(ratio, 0.0, MAX_RATIO)

    def production_series(self) -> NDArray[np.float64]:
        """Return daily harvested kg, oldest first."""
        return np.array([r.produced for r in self.records], dtype=np.float64)

    def average_production(self, days: int = 7) -> float:
        """Return mean daily kg harvested over the last ``days`` records."""
        series = self.production_series()[-days:]
        if series.size == 0:
            return 0.0
        return float(series.mean())
