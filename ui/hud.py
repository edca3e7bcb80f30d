#!/usr/bin/env python3
"""HUD strip, legend, invariant warnings and pause banner (mixin)."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

import pygame

from .helpers import render_text


class HudRenderer:
    """Mixin that draws every overlay / HUD element."""

    # ------------------------------------------------------------------ #
    #  Top strip                                                           #
    # ------------------------------------------------------------------ #

    def draw_hud(
        self,
        surface: pygame.Surface,
        snapshot: Mapping[str, Any],
        problems: Sequence[str],
    ) -> None:
        if self.font_small is None or self.font_tiny is None:
            return
        panel = pygame.Rect(0, 0, self.width, self.HUD_HEIGHT)
        pygame.draw.rect(surface, self.HUD_BG_COLOR, panel)
        pygame.draw.line(surface, self.HUD_BORDER_COLOR, panel.bottomleft, panel.bottomright)

        cars = snapshot.get("cars", [])
        waiting = sum(1 for c in cars if c["state"] == "waiting")
        header = (
            f"TICK {snapshot.get('tick', 0):>6}   CARS {len(cars)}   "
            f"WAITING {waiting}   BUSY JUNCTIONS {len(snapshot.get('junctions', {}))}"
        )
        render_text(surface, self.font_small, header, (12, 8), self.HUD_TEXT_COLOR)

        metrics = snapshot.get("metrics", {})
        counters = "  ".join(f"{name.upper()} {value}" for name, value in metrics.items())
        render_text(surface, self.font_tiny, counters, (12, 28), self.HUD_DIM_COLOR)

        if problems:
            status, color = f"INVARIANTS: {len(problems)} VIOLATED  ({problems[0]})", self.WARNING_COLOR
        else:
            status, color = "INVARIANTS OK", self.OK_COLOR
        render_text(surface, self.font_tiny, status, (12, 44), color)

        hint = "R reset  D debug  SPACE pause  N step  F12 screenshot"
        render_text(surface, self.font_tiny, hint, (self.width - 12, 8), self.HUD_DIM_COLOR, anchor="topright")
        if self.show_debug and self.clock is not None:
            render_text(surface, self.font_tiny, f"FPS {self.clock.get_fps():.1f}",
                        (self.width - 12, 28), self.OK_COLOR, anchor="topright")

    # ------------------------------------------------------------------ #
    #  Legend                                                              #
    # ------------------------------------------------------------------ #

    def _draw_legend(self, surface: pygame.Surface) -> None:
        if self.font_tiny is None:
            return
        x = self.width - 120
        y = self.height - 16 - len(self.LEGEND_ITEMS) * 18 - 8
        box_w, box_h = 112, len(self.LEGEND_ITEMS) * 18 + 10
        pygame.draw.rect(
            surface, self.HUD_BG_COLOR, (x - 6, y - 4, box_w, box_h), border_radius=4
        )
        pygame.draw.rect(
            surface, self.HUD_BORDER_COLOR, (x - 6, y - 4, box_w, box_h), width=1, border_radius=4
        )
        for label, color in self.LEGEND_ITEMS:
            pygame.draw.circle(surface, color, (x + 4, y + 6), 4)
            render_text(surface, self.font_tiny, label, (x + 14, y), (200, 200, 200))
            y += 18

    # ------------------------------------------------------------------ #
    #  Pause banner                                                        #
    # ------------------------------------------------------------------ #

    def _draw_pause_banner(self, surface: pygame.Surface) -> None:
        overlay = pygame.Surface((self.width, self.height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 100))
        surface.blit(overlay, (0, 0))
        if self.font_title:
            render_text(surface, self.font_title, "PAUSED", (self.width // 2, self.height // 2),
                        (220, 220, 220), anchor="center")
