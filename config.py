#!/usr/bin/env python3
"""
config.py
=========
Application-wide configuration constants.

Values can be overridden via environment variables (see :mod:`main` and
:mod:`demo`).  This module is a thin, import-safe leaf — it never imports
from other project packages.
"""

import logging
import os
from typing import Optional

# ── Grid defaults ────────────────────────────────────────────────────────────
GRID_COLS: int = 50
GRID_ROWS: int = 50
CELL_SIZE: int = 20

# ── Simulation defaults ──────────────────────────────────────────────────────
DEFAULT_CAR_COUNT: int = 160
DEFAULT_TICK_RATE_HZ: float = 60.0
DEFAULT_DEMO_TICKS: int = 3600

# ── UI defaults ──────────────────────────────────────────────────────────────
TARGET_FPS: int = 60
HUD_HEIGHT: int = 64

# ── Palette (hex, converted by the renderer) ─────────────────────────────────
COLOR_BG: str = "#f3f3f1"
COLOR_ROAD: str = "#e6c008"
COLOR_CARS = ("#01419d", "#af1f1f", "#b6b8aa")                 # blue, red, grey
COLOR_BUILDINGS = ("#0059a5", "#a82125", "#e6c008", "#babab8")  # blue, red, yellow, grey

# ── Environment variable names ───────────────────────────────────────────────
ENV_CARS: str = "GRIDTRAFFIC_CARS"
ENV_SEED: str = "GRIDTRAFFIC_SEED"
ENV_TICK_HZ: str = "GRIDTRAFFIC_TICK_HZ"
ENV_TICKS: str = "GRIDTRAFFIC_TICKS"
ENV_LOG_LEVEL: str = "GRIDTRAFFIC_LOG_LEVEL"


# ── Environment overrides ────────────────────────────────────────────────────

def env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logging.getLogger("config").warning("Ignoring %s=%r (not an integer)", name, raw)
        return default


def env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logging.getLogger("config").warning("Ignoring %s=%r (not a number)", name, raw)
        return default


def env_log_level(default: int = logging.INFO) -> int:
    raw = os.environ.get(ENV_LOG_LEVEL, "").strip().upper()
    level = logging.getLevelName(raw) if raw else default
    return level if isinstance(level, int) else default

