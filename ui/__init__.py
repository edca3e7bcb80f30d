#!/usr/bin/env python3

from .types import ColorRGB, ColorRGBA, Viewport
from .constants import ViewConstants
from .helpers import ViewHelpers
from .draw_grid import GridRenderer
from .draw_cars import CarRenderer
from .hud import HudRenderer
from .pygame_view import GridTrafficView, run_pygame_view

__all__ = [
    "ColorRGB",
    "ColorRGBA",
    "Viewport",
    "ViewConstants",
    "ViewHelpers",
    "GridRenderer",
    "CarRenderer",
    "HudRenderer",
    "GridTrafficView",
    "run_pygame_view",
]
