"""Pygame 2D visualization and input for the food-city simulation.

Renders the city grid, KPIs, charts, and the onboarding checklist in a
window, and turns clicks and key presses into player actions.  The
simulation advances at a configurable days-per-second rate while the
display refreshes at the Pygame frame rate; days are always stepped one
after another, never overlapping.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

import numpy as np
import pygame

if TYPE_CHECKING:
    from foodcity.simulation.engine import SimulationEngine
    from foodcity.storage.persistence import KeyValueStore
    from foodcity.world.tile import Tile

from foodcity.catalog.buildings import BUILDABLE, BUILDINGS, Method, building_type
from foodcity.catalog.crops import CROPS
from foodcity.city.actions import Mode
from foodcity.world.tile import TileCategory

# Colour palette
_BG = (15, 23, 42)
_LAND = (11, 18, 32)
_ROOF = (15, 23, 42)
_ROOF_BORDER = (34, 211, 238)
_LAND_BORDER = (71, 85, 105)
_TEXT = (226, 232, 240)
_WARN = (245, 158, 11)
_GOOD = (16, 185, 129)
_CHART = (148, 163, 184)

_BUILDING_COLOURS: dict[str, tuple[int, int, int]] = {
    "market": (154, 52, 18),
    "rain_tank": (14, 165, 233),
    "cold_hub": (3, 105, 161),
    "composter": (133, 77, 14),
    "solar": (202, 138, 4),
    "edu_center": (51, 65, 85),
}

# Crop growth colour range (dark -> bright)
_GROW_LO = np.array([20, 80, 40], dtype=np.float64)
_GROW_HI = np.array([120, 230, 140], dtype=np.float64)
_VF_LO = np.array([60, 20, 90], dtype=np.float64)
_VF_HI = np.array([190, 120, 240], dtype=np.float64)

_MODE_KEYS: dict[int, Mode] = {
    pygame.K_b: Mode.BUILD,
    pygame.K_p: Mode.PLANT,
    pygame.K_d: Mode.DEMOLISH,
    pygame.K_i: Mode.INSPECT,
}


class PygameRenderer:
    """Renders a SimulationEngine state into a Pygame window.

    Attributes:
        engine: The simulation engine to visualise.
        cell_size: Pixel size of each grid cell.
        store: Save storage, cleared when the player resets the city.
        screen: The Pygame display surface.
    """

    # Speed presets: simulated days per second
    _SPEED_STEPS: ClassVar[list[float]] = [0.5, 1.0, 3.0, 5.0, 10.0]

    def __init__(
        self,
        engine: SimulationEngine,
        cell_size: int = 28,
        days_per_second: float = 1.0,
        store: KeyValueStore | None = None,
    ) -> None:
        """Initialise the renderer.

        Args:
            engine: The simulation engine to render.
            cell_size: Pixel width/height per grid cell.
            days_per_second: Simulated days per real-time second.
            store: Save storage to clear on reset.
        """
        self.engine = engine
        self.cell_size = cell_size
        self.days_per_second = days_per_second
        self.store = store
        self._speed_index = self._nearest_speed(days_per_second)
        self._day_accumulator = 0.0

        self.mode = Mode.BUILD
        self.building_id = BUILDABLE[0]
        self._crop_ids = sorted(CROPS)
        self.crop_id = self._crop_ids[0]

        grid = engine.state.grid
        self._map_w = grid.width * cell_size
        self._map_h = grid.height * cell_size
        self._panel_width = 320
        self._footer_height = 170
        self._win_w = self._map_w + self._panel_width
        self._win_h = max(self._map_h + self._footer_height, 560)

        pygame.init()
        self.screen = pygame.display.set_mode((self._win_w, self._win_h))
        pygame.display.set_caption("Food City")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 13)
        self.running = True
        self.paused = False

    def _nearest_speed(self, dps: float) -> int:
        """Return the index of the closest speed preset."""
        best = 0
        best_diff = abs(self._SPEED_STEPS[0] - dps)
        for i, s in enumerate(self._SPEED_STEPS):
            diff = abs(s - dps)
            if diff < best_diff:
                best, best_diff = i, diff
        return best

    def run(self, fps: int = 30) -> None:
        """Main loop: handle events, step sim, render.

        Args:
            fps: Target frames per second.
        """
        while self.running:
            dt = self.clock.tick(fps) / 1000.0  # seconds elapsed
            self._handle_events()
            if not self.paused:
                self._day_accumulator += self.days_per_second * dt
                steps = int(self._day_accumulator)
                self._day_accumulator -= steps
                for _ in range(steps):
                    self.engine.step()
            self._draw()

        pygame.quit()

    def _handle_events(self) -> None:
        """Process Pygame input events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._click(*event.pos)
            elif event.type == pygame.KEYDOWN:
                self._key(event.key)

    def _key(self, key: int) -> None:
        if key == pygame.K_ESCAPE:
            self.running = False
        elif key == pygame.K_SPACE:
            self.paused = not self.paused
        elif key in (pygame.K_PLUS, pygame.K_EQUALS):
            self._speed_index = min(len(self._SPEED_STEPS) - 1, self._speed_index + 1)
            self.days_per_second = self._SPEED_STEPS[self._speed_index]
        elif key == pygame.K_MINUS:
            self._speed_index = max(0, self._speed_index - 1)
            self.days_per_second = self._SPEED_STEPS[self._speed_index]
        elif key in _MODE_KEYS:
            self.mode = _MODE_KEYS[key]
        elif pygame.K_1 <= key <= pygame.K_9:
            self.building_id = BUILDABLE[min(key - pygame.K_1, len(BUILDABLE) - 1)]
        elif key == pygame.K_c:
            i = self._crop_ids.index(self.crop_id)
            self.crop_id = self._crop_ids[(i + 1) % len(self._crop_ids)]
        elif key == pygame.K_r:
            if self.store is not None:
                self.store.clear()
            self.engine.reset()

    def _click(self, px: int, py: int) -> None:
        """Translate a click on the map into a player action."""
        if px >= self._map_w or py >= self._map_h:
            return
        x, y = px // self.cell_size, py // self.cell_size
        self.engine.apply_action(
            self.mode,
            x,
            y,
            building_id=self.building_id,
            crop_id=self.crop_id,
        )

    def _draw(self) -> None:
        """Render one frame."""
        self.screen.fill(_BG)
        self._draw_map()
        self._draw_info_panel()
        self._draw_charts()
        pygame.display.flip()

    def _tile_colour(self, tile: Tile) -> tuple[int, int, int]:
        building = building_type(tile.building)
        if tile.is_empty or building is None:
            return _ROOF if tile.category is TileCategory.ROOF else _LAND
        if building.can_plant:
            t = min(max(tile.progress, 0.0), 1.0)
            lo, hi = _GROW_LO, _GROW_HI
            if building.method is Method.VERTICAL_FARM:
                lo, hi = _VF_LO, _VF_HI
            return tuple((lo + t * (hi - lo)).astype(int).tolist())
        return _BUILDING_COLOURS.get(tile.building, (51, 65, 85))

    def _draw_map(self) -> None:
        """Draw each tile, its building glyph, and flood shading."""
        cs = self.cell_size
        for tile in self.engine.state.grid:
            rect = pygame.Rect(tile.x * cs + 1, tile.y * cs + 1, cs - 2, cs - 2)
            pygame.draw.rect(self.screen, self._tile_colour(tile), rect, border_radius=4)
            border = _ROOF_BORDER if tile.category is TileCategory.ROOF else _LAND_BORDER
            pygame.draw.rect(self.screen, border, rect, width=1, border_radius=4)
            building = building_type(tile.building)
            if building is not None and building.glyph:
                surf = self.font.render(building.glyph, True, _TEXT)
                self.screen.blit(surf, surf.get_rect(center=rect.center))
            if tile.disabled_days > 0:
                shade = pygame.Surface((cs - 2, cs - 2), pygame.SRCALPHA)
                shade.fill((14, 116, 144, 140))
                self.screen.blit(shade, rect.topleft)

    def _draw_info_panel(self) -> None:
        """Draw KPIs, selections, checklist, and messages on the right."""
        engine = self.engine
        res = engine.state.resources
        summary = engine.summary()
        panel_x = self._map_w + 10
        y = 10

        ratio_colour = _TEXT
        if res.self_sufficiency >= 1:
            ratio_colour = _GOOD
        elif res.self_sufficiency < 0.8:
            ratio_colour = _WARN

        lines: list[tuple[str, tuple[int, int, int]]] = [
            (f"Day: {res.day}", _TEXT),
            (f"Speed: {self.days_per_second:.1f} d/s", _TEXT),
            ("PAUSED" if self.paused else "RUNNING", _TEXT),
            ("", _TEXT),
            (f"Self-sufficiency: {res.self_sufficiency:.0%}", ratio_colour),
            (f"Happiness: {res.happiness:.0f}/100", _WARN if res.happiness < 50 else _TEXT),
            (f"Budget: {res.budget:,.0f}", _WARN if res.budget < 0 else _TEXT),
            (f"Emissions: {res.emissions_kg:.2f} kg", _TEXT),
            (f"Water: {res.water_m3:.2f} m3  Energy: {res.energy_kwh:.1f} kWh", _TEXT),
            ("", _TEXT),
            (f"Mode: {self.mode.value}", _TEXT),
            (f"Building: {BUILDINGS[self.building_id].label}", _TEXT),
            (f"Crop: {CROPS[self.crop_id].name}", _TEXT),
            ("", _TEXT),
            (f"Markets {summary.markets}, capacity {summary.market_capacity:,.0f} kg", _TEXT),
            (f"Cold chain {summary.cold_chain_quality:.0%}", _TEXT),
            (f"Local preference {summary.local_preference:.0%}", _TEXT),
            (f"7-day production {summary.average_production:,.1f} kg", _TEXT),
            ("", _TEXT),
            ("--- Milestones ---", _TEXT),
        ]
        for milestone in engine.milestones:
            mark = "x" if milestone.done else " "
            lines.append((f"[{mark}] {milestone.title}", _GOOD if milestone.done else _TEXT))
        lines.append(("", _TEXT))
        lines.extend((message, _CHART) for message in engine.messages)
        lines += [
            ("", _TEXT),
            ("B/P/D/I: mode  1-9: building", _CHART),
            ("C: crop  SPACE: pause  +/-: speed", _CHART),
            ("R: reset  ESC: quit", _CHART),
        ]

        for text, colour in lines:
            surf = self.font.render(text, True, colour)
            self.screen.blit(surf, (panel_x, y))
            y += 16

    def _draw_charts(self) -> None:
        """Draw production and rolling-ratio sparklines under the map."""
        history = self.engine.state.history
        window = self.engine.config.ratio_window_days
        top = self._map_h + 20
        width = (self._map_w - 30) // 2
        height = self._footer_height - 40
        self._sparkline(
            "Production (kg/day)",
            history.production_series(),
            pygame.Rect(10, top, width, height),
        )
        self._sparkline(
            f"Self-sufficiency ({window}-day, %)",
            history.rolling_ratio_series(window) * 100.0,
            pygame.Rect(20 + width, top, width, height),
            floor_max=100.0,
        )

    def _sparkline(
        self,
        title: str,
        data: np.ndarray,
        rect: pygame.Rect,
        floor_max: float = 1.0,
    ) -> None:
        surf = self.font.render(title, True, _TEXT)
        self.screen.blit(surf, (rect.x, rect.y - 16))
        pygame.draw.rect(self.screen, _LAND, rect, border_radius=6)
        if data.size < 2:
            return
        top = max(floor_max, float(data.max()))
        xs = rect.x + np.linspace(0, rect.width, data.size)
        ys = rect.bottom - (data / top) * rect.height
        points = [(float(x), float(y)) for x, y in zip(xs, ys, strict=True)]
        pygame.draw.lines(self.screen, _CHART, False, points, 2)
        label = self.font.render(f"{top:,.0f}", True, _CHART)
        self.screen.blit(label, (rect.right - label.get_width() - 4, rect.y + 2))
