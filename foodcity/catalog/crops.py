"""Crops — the static catalogue of plantable species.

Each species carries its agronomic constants (yield per tile per cycle,
cycle length, water demand, postharvest loss) and its market price.
The catalogue is immutable and looked up by string id, which is also
the form stored on tiles and in persisted state.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CropSpecies:
    """Static definition of one crop species.

    Attributes:
        crop_id: Stable identifier used on tiles and in inventory.
        name: Display name.
        base_yield: Harvested kg per tile per growth cycle.
        cycle_days: Days from planting (or last harvest) to harvest.
        water_litres: Water demand in litres per tile per day.
        base_loss: Postharvest loss fraction before modifiers.
        price: Sale price per kg.
        calories_per_kg: Optional caloric value for display.
    """

    crop_id: str
    name: str
    base_yield: float
    cycle_days: int
    water_litres: float
    base_loss: float
    price: float
    calories_per_kg: float | None = None


LETTUCE = "lettuce"
WATER_SPINACH = "water_spinach"
BOK_CHOY = "bok_choy"
TOMATO = "tomato"
CHILI = "chili"
MUSHROOM = "mushroom"

CROPS: dict[str, CropSpecies] = {
    LETTUCE: CropSpecies(LETTUCE, "Lettuce", 3.0, 30, 60.0, 0.10, 16000.0, 150.0),
    WATER_SPINACH: CropSpecies(
        WATER_SPINACH,
        "Water spinach",
        3.5,
        21,
        45.0,
        0.08,
        12000.0,
        190.0,
    ),
    BOK_CHOY: CropSpecies(BOK_CHOY, "Bok choy", 3.2, 28, 55.0, 0.09, 18000.0, 130.0),
    TOMATO: CropSpecies(TOMATO, "Tomato", 5.0, 70, 120.0, 0.12, 20000.0, 180.0),
    CHILI: CropSpecies(CHILI, "Chili", 2.2, 90, 140.0, 0.12, 60000.0, 400.0),
    MUSHROOM: CropSpecies(MUSHROOM, "Mushroom", 7.0, 30, 25.0, 0.07, 22000.0, 220.0),
}

# Short-cycle leafy greens, used by the onboarding checklist
FAST_CROPS: frozenset[str] = frozenset({WATER_SPINACH, BOK_CHOY})


def crop_species(crop_id: str | None) -> CropSpecies | None:
    """Return the species for ``crop_id``, or None if unknown or unset."""
    if crop_id is None:
        return None
    return CROPS.get(crop_id)
