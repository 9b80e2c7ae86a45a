"""Policies — player-adjustable city-wide programme sliders.

Policies are short-term knobs the player tweaks during play.  They add
to the building-driven modifiers without replacing them, and they never
lift a modifier past its cap.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Policies:
    """Active policy settings for the city.

    All values are normalised 0.0-1.0.

    Attributes:
        local_food_campaign: Extra local-preference boost from a
            buy-local campaign.
        irrigation_subsidy: Extra irrigation efficiency from subsidised
            drip equipment.
    """

    local_food_campaign: float = 0.0
    irrigation_subsidy: float = 0.0

    def __post_init__(self) -> None:
        """Reject sliders outside 0.0-1.0."""
        for name in ("local_food_campaign", "irrigation_subsidy"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                msg = f"{name} must be within 0.0-1.0, got {value!r}"
                raise ValueError(msg)
