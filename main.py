#!/usr/bin/env python3
"""
main.py
=======
Interactive entry point: logging, environment overrides, the background
simulation driver and the pygame window.

Environment
-----------
``GRIDTRAFFIC_CARS``       number of cars (default :data:`config.DEFAULT_CAR_COUNT`)
``GRIDTRAFFIC_SEED``       seed for layout and cars (random when unset)
``GRIDTRAFFIC_TICK_HZ``    simulation ticks per second
``GRIDTRAFFIC_LOG_LEVEL``  ``DEBUG`` / ``INFO`` / ``WARNING`` …
"""

import logging

import config
from logging_setup import setup_logging
from traffic.bridge import SimBridge
from traffic.generator import generate_network
from ui import run_pygame_view


def main() -> None:
    setup_logging(config.env_log_level())
    log = logging.getLogger("main")

    seed = config.env_int(config.ENV_SEED, None)
    cars = config.env_int(config.ENV_CARS, config.DEFAULT_CAR_COUNT)
    tick_hz = config.env_float(config.ENV_TICK_HZ, config.DEFAULT_TICK_RATE_HZ)
    log.info("Starting grid traffic: %d cars, %.1f Hz, seed=%s", cars, tick_hz, seed)

    network = generate_network(
        cols=config.GRID_COLS,
        rows=config.GRID_ROWS,
        cell_size=config.CELL_SIZE,
        seed=seed,
    )
    bridge = SimBridge(
        tick_rate_hz=tick_hz,
        vehicle_count=cars,
        random_seed=seed,
        network=network,
    )
    bridge.start()
    try:
        run_pygame_view(bridge, fps=config.TARGET_FPS)
    except KeyboardInterrupt:
        log.info("Shutting down...")
    finally:
        bridge.stop()


if __name__ == "__main__":
    main()
