"""
ui/types.py
===========
Lightweight data containers used across every UI module.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

ColorRGB = Tuple[int, int, int]
ColorRGBA = Tuple[int, int, int, int]


@dataclass
class Viewport:
    """Maps grid pixels to window pixels.

    The grid is scaled uniformly to fit below a ``top`` band (the HUD) and
    centred horizontally.
    """
    world_w: float
    world_h: float
    screen_w: int
    screen_h: int
    top: int = 0

    @property
    def scale(self) -> float:
        avail_h = max(1, self.screen_h - self.top)
        return max(0.05, min(self.screen_w / self.world_w, avail_h / self.world_h))

    @property
    def offset(self) -> Tuple[float, float]:
        return (self.screen_w - self.world_w * self.scale) / 2, float(self.top)

    @property
    def size(self) -> Tuple[int, int]:
        """Scaled grid size in window pixels."""
        return int(round(self.world_w * self.scale)), int(round(self.world_h * self.scale))

    def world_to_screen(self, wx: float, wy: float) -> Tuple[float, float]:
        ox, oy = self.offset
        return ox + wx * self.scale, oy + wy * self.scale

    def screen_to_world(self, sx: float, sy: float) -> Tuple[float, float]:
        ox, oy = self.offset
        return (sx - ox) / self.scale, (sy - oy) / self.scale
