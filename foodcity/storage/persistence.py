"""Persistence — save and restore a WorldState through a key-value store.

Every piece of state lives under its own key as a JSON string, the way a
browser's local storage would hold it.  Loading never fails: each key
is parsed on its own, and a missing, unparsable, or ill-typed value is
logged and replaced by its default.  Saving is last-write-wins; write
failures are logged and the simulation carries on in memory.

Encoding is deterministic, so loading a save and writing it straight
back reproduces it byte for byte.
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from foodcity.catalog.buildings import EMPTY
from foodcity.simulation.history import HistoryLog, HistoryRecord
from foodcity.simulation.market import MAX_RATIO
from foodcity.simulation.state import CityResources, WorldState
from foodcity.world.grid import Grid
from foodcity.world.tile import Tile, TileCategory
from foodcity.world.weather import WeatherEvent, WeatherKind

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from numpy.random import Generator

    from foodcity.simulation.config import SimulationConfig

logger = logging.getLogger(__name__)

KEY_PREFIX = "foodcity_"
GRID_KEY = KEY_PREFIX + "grid"
DAY_KEY = KEY_PREFIX + "day"
BUDGET_KEY = KEY_PREFIX + "budget"
WATER_KEY = KEY_PREFIX + "water"
ENERGY_KEY = KEY_PREFIX + "energy"
INVENTORY_KEY = KEY_PREFIX + "inventory"
RATIO_KEY = KEY_PREFIX + "self_sufficiency"
HAPPINESS_KEY = KEY_PREFIX + "happiness"
EMISSIONS_KEY = KEY_PREFIX + "emissions"
EVENTS_KEY = KEY_PREFIX + "events"
HISTORY_KEY = KEY_PREFIX + "history"


class KeyValueStore(Protocol):
    """Durable string-to-string storage."""

    def get(self, key: str) -> str | None: ...

    def set_many(self, items: Mapping[str, str]) -> None: ...

    def clear(self) -> None: ...


class MemoryStore:
    """In-memory store, used for tests and display-less runs."""

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set_many(self, items: Mapping[str, str]) -> None:
        self.data.update(items)

    def clear(self) -> None:
        self.data.clear()


class JsonFileStore:
    """Store backed by a single JSON object on disk.

    Attributes:
        path: Location of the save file.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._data: dict[str, str] = self._read()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Save file %s unreadable, starting empty", self.path, exc_info=True)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Save file %s is not a JSON object, starting empty", self.path)
            return {}
        return {k: v for k, v in raw.items() if isinstance(v, str)}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set_many(self, items: Mapping[str, str]) -> None:
        self._data.update(items)
        self._write()

    def clear(self) -> None:
        self._data.clear()
        self._write()

    def _write(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(self._data, indent=2, sort_keys=True) + "\n",
                encoding="utf-8",
            )
        except OSError:
            logger.warning("Failed to write save file %s", self.path, exc_info=True)


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _dumps(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


def _tile_to_dict(tile: Tile) -> dict[str, Any]:
    return {
        "x": tile.x,
        "y": tile.y,
        "category": tile.category.value,
        "building": tile.building,
        "crop": tile.crop,
        "progress": tile.progress,
        "disabled_days": tile.disabled_days,
    }


def encode_state(state: WorldState) -> dict[str, str]:
    """Return every persisted key of ``state`` as a JSON string."""
    res = state.resources
    return {
        GRID_KEY: _dumps(
            {
                "width": state.grid.width,
                "height": state.grid.height,
                "tiles": [_tile_to_dict(t) for t in state.grid],
            },
        ),
        DAY_KEY: _dumps(res.day),
        BUDGET_KEY: _dumps(res.budget),
        WATER_KEY: _dumps(res.water_m3),
        ENERGY_KEY: _dumps(res.energy_kwh),
        INVENTORY_KEY: _dumps(res.inventory),
        RATIO_KEY: _dumps(res.self_sufficiency),
        HAPPINESS_KEY: _dumps(res.happiness),
        EMISSIONS_KEY: _dumps(res.emissions_kg),
        EVENTS_KEY: _dumps(
            [{"kind": e.kind.value, "days_left": e.days_left} for e in state.events],
        ),
        HISTORY_KEY: _dumps([r.to_dict() for r in state.history.records]),
    }


def save_state(store: KeyValueStore, state: WorldState) -> None:
    """Write ``state`` to ``store`` (last write wins)."""
    store.set_many(encode_state(state))


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _number(value: Any, lo: float = -math.inf, hi: float = math.inf) -> float | int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        msg = f"expected a number, got {value!r}"
        raise TypeError(msg)
    if not math.isfinite(value):
        msg = f"expected a finite number, got {value!r}"
        raise ValueError(msg)
    if not lo <= value <= hi:
        msg = f"expected a number in [{lo}, {hi}], got {value!r}"
        raise ValueError(msg)
    return value


def _count(value: Any, lo: int = 0) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"expected an integer, got {value!r}"
        raise TypeError(msg)
    if value < lo:
        msg = f"expected an integer >= {lo}, got {value!r}"
        raise ValueError(msg)
    return value


def _day(value: Any) -> int:
    return _count(value, 1)


def _non_negative(value: Any) -> float | int:
    return _number(value, 0.0)


def _ratio(value: Any) -> float | int:
    return _number(value, 0.0, MAX_RATIO)


def _happiness(value: Any) -> float | int:
    return _number(value, 0.0, 100.0)


def _tile(raw: Any) -> Tile:
    crop = raw.get("crop")
    if crop is not None and not isinstance(crop, str):
        msg = f"crop must be a string, got {crop!r}"
        raise TypeError(msg)
    building = raw["building"]
    if not isinstance(building, str):
        msg = f"building must be a string, got {building!r}"
        raise TypeError(msg)
    progress = _number(raw.get("progress", 0.0), 0.0, 1.0)
    # An empty lot carries no crop
    if building == EMPTY:
        crop, progress = None, 0.0
    return Tile(
        x=_count(raw["x"]),
        y=_count(raw["y"]),
        category=TileCategory(raw["category"]),
        building=building,
        crop=crop,
        progress=progress,
        disabled_days=_count(raw.get("disabled_days", 0)),
    )


def _grid(raw: Any) -> Grid:
    width = _count(raw["width"], 1)
    height = _count(raw["height"], 1)
    tiles = [_tile(t) for t in raw["tiles"]]
    if len(tiles) != width * height:
        msg = f"expected {width * height} tiles for {width}x{height}, got {len(tiles)}"
        raise ValueError(msg)
    for i, tile in enumerate(tiles):
        if (tile.x, tile.y) != (i % width, i // width):
            msg = f"tile {i} is at ({tile.x}, {tile.y}), out of row-major order"
            raise ValueError(msg)
    return Grid(width=width, height=height, tiles=tiles)


def _inventory(raw: Any) -> dict[str, float]:
    if not isinstance(raw, dict):
        msg = f"inventory must be an object, got {type(raw).__name__}"
        raise TypeError(msg)
    return {str(k): _non_negative(v) for k, v in raw.items()}


def _events(raw: Any) -> list[WeatherEvent]:
    return [
        WeatherEvent(kind=WeatherKind(e["kind"]), days_left=_count(e["days_left"], 1))
        for e in raw
    ]


def _records(raw: Any) -> list[HistoryRecord]:
    return [
        HistoryRecord(
            day=_day(r["day"]),
            ratio=_ratio(r["ratio"]),
            produced=_non_negative(r["produced"]),
            dispatched=_non_negative(r["dispatched"]),
            demand=_non_negative(r["demand"]),
        )
        for r in raw
    ]


def _load_key(
    store: KeyValueStore,
    key: str,
    parse: Callable[[Any], Any],
    default: Callable[[], Any],
) -> Any:
    """Parse one key, falling back to ``default()`` on any problem."""
    text = store.get(key)
    if text is None:
        return default()
    try:
        return parse(json.loads(text))
    except (
        ValueError,
        TypeError,
        KeyError,
        AttributeError,
        IndexError,
        OverflowError,
    ):
        logger.warning("Ignoring corrupt saved value for %s", key, exc_info=True)
        return default()


def load_state(
    store: KeyValueStore,
    config: SimulationConfig,
    rng: Generator,
) -> WorldState:
    """Restore a WorldState, substituting defaults key by key.

    Defaults: a freshly generated grid, day 1, the configured start
    budget and happiness, zero water/energy/ratio/emissions, and empty
    inventory, events, and history.

    Args:
        store: Where the state was saved.
        config: Simulation configuration supplying the defaults.
        rng: Seeded generator, used only if a fresh grid is needed.

    Returns:
        The restored WorldState.
    """
    grid = _load_key(
        store,
        GRID_KEY,
        _grid,
        lambda: Grid.generate(
            config.grid_width,
            config.grid_height,
            rng,
            roof_fraction=config.roof_fraction,
        ),
    )
    resources = CityResources(
        day=_load_key(store, DAY_KEY, _day, lambda: 1),
        budget=_load_key(store, BUDGET_KEY, _number, lambda: config.economy.start_budget),
        water_m3=_load_key(store, WATER_KEY, _non_negative, lambda: 0.0),
        energy_kwh=_load_key(store, ENERGY_KEY, _non_negative, lambda: 0.0),
        inventory=_load_key(store, INVENTORY_KEY, _inventory, dict),
        self_sufficiency=_load_key(store, RATIO_KEY, _ratio, lambda: 0.0),
        happiness=_load_key(
            store,
            HAPPINESS_KEY,
            _happiness,
            lambda: config.happiness.start,
        ),
        emissions_kg=_load_key(store, EMISSIONS_KEY, _non_negative, lambda: 0.0),
    )
    events = _load_key(store, EVENTS_KEY, _events, list)
    records = _load_key(store, HISTORY_KEY, _records, list)
    return WorldState(
        grid=grid,
        resources=resources,
        events=events,
        history=HistoryLog(retention_days=config.history_days, records=records),
    )
