"""Entry point for ``python -m foodcity``.

Loads the default YAML config, restores the saved city (or founds a new
one), and either opens a Pygame window or runs a fixed number of days
headless.  The city is saved after every completed day.
"""

from __future__ import annotations

import argparse
import logging
import pathlib
from collections.abc import Callable

import numpy as np

from foodcity.simulation.config import SimulationConfig
from foodcity.simulation.engine import DayReport, SimulationEngine
from foodcity.storage.persistence import JsonFileStore, load_state, save_state
from foodcity.ui.pygame_client import PygameRenderer

logger = logging.getLogger("foodcity")

_DEFAULT_CONFIG = (
    pathlib.Path(__file__).resolve().parent.parent / "config" / "default.yaml"
)
_DEFAULT_SAVE = pathlib.Path("foodcity_save.json")


def _autosave(
    store: JsonFileStore,
) -> Callable[[SimulationEngine, DayReport], None]:
    """Return a listener that saves the city after each day."""

    def listener(engine: SimulationEngine, report: DayReport) -> None:
        save_state(store, engine.state)

    return listener


def main() -> None:
    """Parse CLI args, restore the city, launch renderer or headless run."""
    parser = argparse.ArgumentParser(
        prog="foodcity",
        description="Food City - urban food self-sufficiency simulator",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=pathlib.Path,
        default=_DEFAULT_CONFIG,
        help="Path to YAML config file (default: config/default.yaml)",
    )
    parser.add_argument(
        "-s",
        "--save",
        type=pathlib.Path,
        default=_DEFAULT_SAVE,
        help="Path to the save file (default: foodcity_save.json)",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run without a window for --days days",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=30,
        help="Days to simulate in headless mode (default: 30)",
    )
    parser.add_argument(
        "--cell-size",
        type=int,
        default=28,
        help="Pixel size per grid cell (default: 28)",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=30,
        help="Target frames per second (default: 30)",
    )
    parser.add_argument(
        "--speed",
        type=float,
        default=1.0,
        help="Simulated days per second (default: 1)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = SimulationConfig.from_yaml(args.config)
    store = JsonFileStore(args.save)
    state = load_state(store, config, np.random.default_rng(config.seed))
    engine = SimulationEngine(config=config, state=state)
    engine.add_listener(_autosave(store))

    if args.headless:
        engine.run(args.days)
        res = engine.state.resources
        logger.info(
            "Day %d: self-sufficiency %.0f%%, happiness %.0f, budget %.0f, "
            "emissions %.2f kg",
            res.day,
            res.self_sufficiency * 100,
            res.happiness,
            res.budget,
            res.emissions_kg,
        )
        return

    renderer = PygameRenderer(
        engine=engine,
        cell_size=args.cell_size,
        days_per_second=args.speed,
        store=store,
    )
    renderer.run(fps=args.fps)


if __name__ == "__main__":
    main()
