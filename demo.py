#!/usr/bin/env python3
"""
Headless demo — steps the simulation for a fixed number of ticks without
a window and logs liveness counters and invariant checks along the way.

Usage:
    GRIDTRAFFIC_TICKS=2000 GRIDTRAFFIC_SEED=7 python3 demo.py
"""

import logging
import sys
from typing import Optional

import config
from logging_setup import setup_logging
from traffic.generator import generate_network
from traffic.world import World

REPORT_EVERY = 600


def run_headless(
    ticks: int,
    cars: int = config.DEFAULT_CAR_COUNT,
    seed: Optional[int] = None,
) -> int:
    """Run *ticks* steps; return the number of ticks with invariant violations."""
    log = logging.getLogger("main")
    network = generate_network(
        cols=config.GRID_COLS, rows=config.GRID_ROWS, cell_size=config.CELL_SIZE, seed=seed
    )
    world = World(network=network, num_cars=cars, seed=seed)
    log.info("Headless run: %d ticks, %d cars placed, seed=%s", ticks, len(world.cars), seed)

    bad_ticks = 0
    for _ in range(ticks):
        world.step()
        problems = world.check_invariants()
        if problems:
            bad_ticks += 1
            log.error("Tick %d invariant violations: %s", world.tick, "; ".join(problems))
        if world.tick % REPORT_EVERY == 0:
            waiting = sum(1 for car in world.cars if car.is_waiting)
            log.info("Tick %d: %d waiting, metrics %s", world.tick, waiting, world.metrics.report())

    log.info("Finished at tick %d, metrics %s", world.tick, world.metrics.report())
    return bad_ticks


if __name__ == "__main__":
    setup_logging(config.env_log_level())
    bad = run_headless(
        ticks=config.env_int(config.ENV_TICKS, config.DEFAULT_DEMO_TICKS),
        cars=config.env_int(config.ENV_CARS, config.DEFAULT_CAR_COUNT),
        seed=config.env_int(config.ENV_SEED, None),
    )
    sys.exit(1 if bad else 0)
