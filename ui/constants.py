#!/usr/bin/env python3
"""Visual constants shared across all renderers."""

from __future__ import annotations

from typing import Dict, Sequence, Tuple

import config

from .types import ColorRGB, ColorRGBA


def hex_to_rgb(value: str) -> ColorRGB:
    """``"#rrggbb"`` → ``(r, g, b)``."""
    value = value.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"expected #rrggbb, got {value!r}")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


class ViewConstants:
    """Mixin providing every visual / layout constant."""

    BG_COLOR: ColorRGB = hex_to_rgb(config.COLOR_BG)
    ROAD_COLOR: ColorRGB = hex_to_rgb(config.COLOR_ROAD)
    CAR_COLORS: Sequence[ColorRGB] = tuple(hex_to_rgb(c) for c in config.COLOR_CARS)
    BUILDING_COLORS: Sequence[ColorRGB] = tuple(hex_to_rgb(c) for c in config.COLOR_BUILDINGS)

    HUD_BG_COLOR: ColorRGB = (22, 22, 22)
    HUD_BORDER_COLOR: ColorRGB = (42, 42, 42)
    HUD_TEXT_COLOR: ColorRGB = (220, 220, 220)
    HUD_DIM_COLOR: ColorRGB = (140, 140, 140)
    WARNING_COLOR: ColorRGB = (255, 60, 60)
    OK_COLOR: ColorRGB = (0, 200, 110)

    # Debug overlay
    DEBUG_EMPTY_FILL: ColorRGB = (255, 255, 255)
    DEBUG_EMPTY_OUTLINE: ColorRGB = (180, 180, 180)
    DEBUG_ARROW_COLOR: ColorRGB = (180, 180, 180)
    DEBUG_JUNCTION_FILL: ColorRGB = (255, 100, 100)
    DEBUG_JUNCTION_BUSY: ColorRGBA = (255, 0, 0, 50)
    DEBUG_JUNCTION_DOT: ColorRGB = (255, 0, 0)
    DEBUG_MARK_OUTLINE: ColorRGB = (0, 0, 0)
    DEBUG_MARK_JUNCTION: ColorRGB = (0, 255, 255)
    DEBUG_SPAWN_COLOR: ColorRGB = (0, 255, 0)
    DEBUG_NEXT_DIR_COLOR: ColorRGB = (0, 0, 255)
    SELECTED_OUTLINE: ColorRGB = (255, 255, 0)

    CAR_STATE_COLORS: Dict[str, ColorRGBA] = {
        "collision": (255, 0, 0, 128),
        "waiting": (0, 0, 255, 128),
        "driving": (0, 255, 0, 128),
    }

    LEGEND_ITEMS: Sequence[Tuple[str, ColorRGB]] = (
        ("DRIVING", (0, 255, 0)),
        ("WAITING", (0, 0, 255)),
        ("COLLISION", (255, 0, 0)),
    )

    CAR_SIZE_RATIO = 0.7            # of the road width
    NEXT_DIR_LINE_RATIO = 1.8       # of the car size
    GRAIN_SCALE = 100.0             # noise lattice spacing (px)
    GRAIN_MAX_ALPHA = 40
    HUD_HEIGHT = config.HUD_HEIGHT
    INVARIANT_POLL_FRAMES = 30
    PICK_RADIUS_RATIO = 0.75        # of the road width

    SCREENSHOT_DIR = "screenshots"
