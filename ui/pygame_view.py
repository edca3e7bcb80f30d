#!/usr/bin/env python3
"""
Main view class — combines all UI mixins into one runnable Pygame window.

Module layout
─────────────
    ui/
    ├── types.py           – ColorRGB, ColorRGBA, Viewport
    ├── constants.py       – ViewConstants mixin (all class-level constants)
    ├── helpers.py         – ViewHelpers mixin  (grain, alpha, text)
    ├── draw_grid.py       – GridRenderer mixin (roads, junctions, buildings)
    ├── draw_cars.py       – CarRenderer mixin  (cars, debug tint, info card)
    ├── hud.py             – HudRenderer mixin  (HUD strip, legend, pause)
    └── pygame_view.py     – GridTrafficView (this file – main loop)
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

import pygame

from traffic.bridge import SimBridge

from .constants import ViewConstants
from .draw_cars import CarRenderer
from .draw_grid import GridRenderer, mark_look_ahead
from .helpers import ViewHelpers, make_grain_surface
from .hud import HudRenderer
from .types import Viewport

log = logging.getLogger("main")


class GridTrafficView(
    ViewConstants,
    ViewHelpers,
    GridRenderer,
    CarRenderer,
    HudRenderer,
):
    """Grid-traffic visualiser powered by Pygame.

    Reads the latest :meth:`SimBridge.snapshot` every frame; never steps
    the simulation itself.
    """

    def __init__(self, bridge: SimBridge, fps: int = 60, scale: float = 1.0):
        self.bridge = bridge
        self.fps = fps
        network = bridge.network
        self.width = max(400, int(network.width * scale))
        self.height = max(300, int(network.height * scale) + self.HUD_HEIGHT)
        self.viewport = Viewport(network.width, network.height, self.width, self.height, self.HUD_HEIGHT)

        self.screen: Optional[pygame.Surface] = None
        self.clock: Optional[pygame.time.Clock] = None
        self.font_small: Optional[pygame.font.Font] = None
        self.font_tiny: Optional[pygame.font.Font] = None
        self.font_title: Optional[pygame.font.Font] = None
        self._grain: Optional[pygame.Surface] = None

        # UI state
        self.time_seconds = 0.0
        self.paused = bridge.paused
        self.show_debug = False
        self.selected_id: Optional[int] = None
        self._problems: List[str] = []
        self._frame = 0
        self._screenshot_flash_until = 0.0

    # ------------------------------------------------------------------ #
    #  Resize                                                              #
    # ------------------------------------------------------------------ #
    def _handle_resize(self, new_w: int, new_h: int) -> None:
        self.width = max(400, new_w)
        self.height = max(300, new_h)
        self.viewport.screen_w = self.width
        self.viewport.screen_h = self.height
        self.screen = pygame.display.set_mode(
            (self.width, self.height), pygame.RESIZABLE
        )

    # ------------------------------------------------------------------ #
    #  Screenshot                                                          #
    # ------------------------------------------------------------------ #
    def _take_screenshot(self) -> None:
        if self.screen is None:
            return
        os.makedirs(self.SCREENSHOT_DIR, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        path = os.path.join(self.SCREENSHOT_DIR, f"grid_{stamp}.png")
        pygame.image.save(self.screen, path)
        self._screenshot_flash_until = self.time_seconds + 0.35
        log.info("Screenshot saved to %s", path)

    # ------------------------------------------------------------------ #
    #  Input                                                               #
    # ------------------------------------------------------------------ #
    def _toggle_debug(self) -> None:
        self.show_debug = not self.show_debug
        if not self.show_debug:
            self.selected_id = None
            self.bridge.network.clear_debug_marks()

    def _reset(self) -> None:
        self.selected_id = None
        self._problems = []
        self.bridge.network.clear_debug_marks()
        self.bridge.reset()

    def _select_at(self, sx: int, sy: int) -> None:
        """Toggle selection of the car under the mouse (debug mode only)."""
        if not self.show_debug:
            return
        wx, wy = self.viewport.screen_to_world(sx, sy)
        radius = self.bridge.network.road_width * self.PICK_RADIUS_RATIO
        picked = self.bridge.pick_car(wx, wy, radius)
        self.selected_id = None if picked == self.selected_id else picked

    def _handle_key(self, key: int) -> None:
        if key == pygame.K_SPACE:
            self.paused = not self.paused
            self.bridge.set_paused(self.paused)
        elif key == pygame.K_d:
            self._toggle_debug()
        elif key == pygame.K_r:
            self._reset()
        elif key == pygame.K_F12:
            self._take_screenshot()
        elif key == pygame.K_n and self.paused:
            self.bridge.step_once()

    # ------------------------------------------------------------------ #
    #  Frame                                                               #
    # ------------------------------------------------------------------ #
    def _selected_car(self, snapshot: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if self.selected_id is None:
            return None
        return next((c for c in snapshot["cars"] if c["id"] == self.selected_id), None)

    def _render(self, snapshot: Dict[str, Any]) -> None:
        network = self.bridge.network
        if self.show_debug:
            mark_look_ahead(network, self._selected_car(snapshot))

        world_surf = pygame.Surface((int(network.width), int(network.height)))
        self.draw_grid(world_surf, network, snapshot["junctions"])
        self.draw_cars(world_surf, snapshot["cars"], network.road_width, self.selected_id)
        world_surf.blit(self._grain, (0, 0))

        self.screen.fill(self.BG_COLOR)
        size = self.viewport.size
        if size != world_surf.get_size():
            world_surf = pygame.transform.smoothscale(world_surf, size)
        ox, oy = self.viewport.offset
        self.screen.blit(world_surf, (int(ox), int(oy)))

        if self._frame % self.INVARIANT_POLL_FRAMES == 0:
            problems = self.bridge.invariant_report()
            if problems and problems != self._problems:
                log.warning("Invariant violations: %s", "; ".join(problems))
            self._problems = problems
        self.draw_hud(self.screen, snapshot, self._problems)
        if self.show_debug:
            self._draw_legend(self.screen)
        if self.paused:
            self._draw_pause_banner(self.screen)
        if self.time_seconds < self._screenshot_flash_until:
            flash = pygame.Surface((self.width, self.height), pygame.SRCALPHA)
            flash.fill((255, 255, 255, 40))
            self.screen.blit(flash, (0, 0))

    # ------------------------------------------------------------------ #
    #  Main loop                                                           #
    # ------------------------------------------------------------------ #
    def run(self) -> None:
        pygame.init()
        pygame.display.set_caption("GRID TRAFFIC")
        self.screen = pygame.display.set_mode(
            (self.width, self.height), pygame.RESIZABLE
        )
        self.clock = pygame.time.Clock()
        self.font_small = self._load_font(13, bold=False)
        self.font_tiny = self._load_font(11, bold=False)
        self.font_title = self._load_font(28, bold=True)
        network = self.bridge.network
        self._grain = make_grain_surface(
            int(network.width), int(network.height),
            scale=self.GRAIN_SCALE, max_alpha=self.GRAIN_MAX_ALPHA,
        )

        running = True
        while running:
            delta_time = self.clock.tick(self.fps) / 1000.0
            self.time_seconds += delta_time

            # ---- events ------------------------------------------------- #
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.VIDEORESIZE:
                    self._handle_resize(event.w, event.h)
                elif event.type == pygame.KEYDOWN:
                    self._handle_key(event.key)
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    self._select_at(*event.pos)

            # ---- render ------------------------------------------------- #
            self._render(self.bridge.snapshot())
            self._frame += 1
            pygame.display.flip()

        pygame.quit()


# ---------------------------------------------------------------------- #
#  Convenience entry point                                                 #
# ---------------------------------------------------------------------- #
def run_pygame_view(bridge: SimBridge, fps: int = 60, scale: float = 1.0) -> None:
    view = GridTrafficView(bridge=bridge, fps=fps, scale=scale)
    view.run()


if __name__ == "__main__":
    raise SystemExit(
        "pygame_view.py needs a SimBridge. Run `python main.py` "
        "or call run_pygame_view(your_bridge)."
    )
