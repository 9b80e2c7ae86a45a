"""Actions — player edits to the city between simulated days.

Each action either applies completely or raises ``ActionRejected``
without touching the state.  The message carried by the exception is
meant to be shown to the player.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from foodcity.catalog.buildings import building_type
from foodcity.catalog.crops import crop_species
from foodcity.world.tile import TileCategory

if TYPE_CHECKING:
    from foodcity.simulation.config import EconomyConfig
    from foodcity.simulation.state import WorldState
    from foodcity.world.tile import Tile

logger = logging.getLogger(__name__)


class Mode(Enum):
    """Tile-click interpretation selected by the player."""

    BUILD = "build"
    PLANT = "plant"
    DEMOLISH = "demolish"
    INSPECT = "inspect"


class ActionRejected(ValueError):
    """A player action that is not allowed in the current state."""


def _tile(state: WorldState, x: int, y: int) -> Tile:
    try:
        return state.grid.tile_at(x, y)
    except IndexError as exc:
        raise ActionRejected(str(exc)) from exc


def build(
    state: WorldState,
    x: int,
    y: int,
    building_id: str,
    crop_id: str | None = None,
) -> str:
    """Place a building on an empty tile and pay for it.

    Plantable buildings are planted with ``crop_id`` straight away.

    Raises:
        ActionRejected: If the tile is occupied, the building is
            unknown, the budget is short, or a roof-only building is
            aimed at a land tile.
    """
    tile = _tile(state, x, y)
    building = building_type(building_id)
    if building is None or building.cost <= 0:
        msg = f"Unknown building {building_id!r}"
        raise ActionRejected(msg)
    if not tile.is_empty:
        msg = f"Tile ({x}, {y}) is already occupied"
        raise ActionRejected(msg)
    if building.roof_only and tile.category is not TileCategory.ROOF:
        msg = f"{building.label} can only be built on a rooftop"
        raise ActionRejected(msg)
    if building.cost > state.resources.budget:
        msg = f"Not enough budget for {building.label}"
        raise ActionRejected(msg)

    tile.building = building.building_id
    tile.crop = crop_id if building.can_plant and crop_species(crop_id) else None
    tile.progress = 0.0
    state.resources.budget -= building.cost
    return f"Built {building.label} at ({x}, {y})"


def plant(state: WorldState, x: int, y: int, crop_id: str) -> str:
    """Plant (or replant) a crop on a plantable building.

    Switching to a different crop restarts its growth.

    Raises:
        ActionRejected: If the crop is unknown or the tile cannot be
            planted.
    """
    tile = _tile(state, x, y)
    crop = crop_species(crop_id)
    if crop is None:
        msg = f"Unknown crop {crop_id!r}"
        raise ActionRejected(msg)
    building = building_type(tile.building)
    if building is None or not building.can_plant:
        msg = f"Nothing can be planted at ({x}, {y})"
        raise ActionRejected(msg)

    if tile.crop != crop.crop_id:
        tile.crop = crop.crop_id
        tile.progress = 0.0
    return f"Planted {crop.name} at ({x}, {y})"


def demolish(
    state: WorldState,
    x: int,
    y: int,
    config: EconomyConfig,
) -> str:
    """Clear a tile back to empty, refunding part of the construction cost.

    Raises:
        ActionRejected: If the tile is already empty.
    """
    tile = _tile(state, x, y)
    if tile.is_empty:
        msg = f"Tile ({x}, {y}) is already empty"
        raise ActionRejected(msg)

    building = building_type(tile.building)
    refund = 0.0
    if building is not None:
        refund = building.cost * config.demolish_refund_fraction
    tile.clear()
    state.resources.budget += refund
    if refund > 0:
        return f"Demolished ({x}, {y}), refunded {refund:,.0f}"
    return f"Demolished ({x}, {y})"


def inspect(state: WorldState, x: int, y: int) -> str:
    """Describe a tile for the player."""
    tile = _tile(state, x, y)
    building = building_type(tile.building)
    label = building.label if building else f"Unknown ({tile.building})"
    parts = [f"({x}, {y}) {tile.category.value}: {label}"]
    crop = crop_species(tile.crop)
    if crop is not None:
        parts.append(f"{crop.name} {tile.progress:.0%}")
    if tile.disabled_days > 0:
        parts.append("flooded")
    return " - ".join(parts)


def apply_click(
    state: WorldState,
    mode: Mode,
    x: int,
    y: int,
    *,
    building_id: str,
    crop_id: str,
    config: EconomyConfig,
) -> str:
    """Dispatch a tile click according to the selected mode.

    Returns:
        A message describing what happened.

    Raises:
        ActionRejected: If the underlying action is not allowed.
    """
    if mode is Mode.BUILD:
        result = build(state, x, y, building_id, crop_id)
    elif mode is Mode.PLANT:
        result = plant(state, x, y, crop_id)
    elif mode is Mode.DEMOLISH:
        result = demolish(state, x, y, config)
    else:
        return inspect(state, x, y)
    logger.info(result)
    return result
