#!/usr/bin/env python3
"""
traffic/world.py
================
Simulation owner.

:class:`World` owns the road network, the car roster, the junction
arbiter, the spawn allocator, the metrics and the shared RNG, and
threads them through every :meth:`Car.update <traffic.car.Car.update>`
call.  One :meth:`World.step` is one tick: every car is updated once, in
roster order.
"""

from __future__ import annotations

import itertools
import logging
import random
from collections import Counter
from typing import Any, Dict, List, Optional

from traffic.arbitration import JunctionArbiter
from traffic.car import CAR_PALETTE_SIZE, Car
from traffic.generator import generate_network
from traffic.metrics import TrafficMetrics
from traffic.network import RoadNetwork
from traffic.policy import DrivingPolicy
from traffic.spawner import SpawnAllocator

log = logging.getLogger("world")

_STATUS_EVERY_TICKS = 60


class World:
    """Owns and advances the whole simulation.

    Parameters
    ----------
    network : RoadNetwork or None
        The road layout.  Uses :func:`~traffic.generator.generate_network`
        (seeded with *seed*) when *None*.
    num_cars : int
        Requested roster size.  Fewer cars are placed when the network
        runs out of free road cells.
    seed : int or None
        Random seed for reproducibility.
    policy : DrivingPolicy or None
        Tunable constants; uses defaults when *None*.
    """

    def __init__(
        self,
        network: Optional[RoadNetwork] = None,
        num_cars: int = 160,
        seed: Optional[int] = None,
        policy: Optional[DrivingPolicy] = None,
    ) -> None:
        self.policy = policy or DrivingPolicy()
        self.network = network or generate_network(seed=seed)
        self.num_cars = max(0, int(num_cars))
        self._rng = random.Random(seed)
        self._ids = itertools.count(1)
        self.metrics = TrafficMetrics()
        self.arbiter = JunctionArbiter(self.network, self._rng, self.metrics, self.policy)
        self.spawner = SpawnAllocator(self.network, self._rng, self.metrics)
        self.cars: List[Car] = []
        self._roster_size = 0
        self.tick = 0
        self._init_cars()

    # ── initialisation / reset ────────────────────────────────────────────

    def _init_cars(self) -> None:
        self.cars = []
        self._roster_size = 0
        attempts = self.num_cars * self.policy.init_attempts_per_car
        while len(self.cars) < self.num_cars and attempts > 0:
            attempts -= 1
            spot = self.spawner.find_safe_spawn(self.cars, initial=True)
            if spot is None:
                break
            self.add_car(*spot)
        if len(self.cars) < self.num_cars:
            log.warning("placed %d of %d requested cars", len(self.cars), self.num_cars)
        else:
            log.info("placed %d cars on the road network", len(self.cars))

    def add_car(self, x: float, y: float) -> Car:
        """Create a car at *(x, y)* and append it to the roster."""
        car = Car.create(
            next(self._ids), x, y,
            self.network, self.policy, self.metrics,
            color=self._rng.randrange(CAR_PALETTE_SIZE),
            tick=self.tick,
        )
        self.cars.append(car)
        self._roster_size = len(self.cars)
        return car

    def reset(self) -> None:
        """Clear every junction record and rebuild the roster.

        Car ids keep increasing across resets.
        """
        self.arbiter.reset()
        self.metrics.reset()
        self.tick = 0
        self._init_cars()
        log.info("world reset")

    # ── tick ──────────────────────────────────────────────────────────────

    def step(self) -> None:
        """Advance the simulation by one tick."""
        self.tick += 1
        self.arbiter.tick = self.tick
        roster = self.cars
        for car in roster:
            car.update(roster, self)

        if self.tick % _STATUS_EVERY_TICKS == 0:
            states = Counter(car.state.value for car in roster)
            log.debug("=== TICK %d === %s", self.tick, dict(states))

    # ── queries ───────────────────────────────────────────────────────────

    def car_at(self, x: float, y: float, radius: float) -> Optional[Car]:
        """Nearest car within *radius* of *(x, y)*, used for mouse picking."""
        best: Optional[Car] = None
        best_d2 = radius * radius
        for car in self.cars:
            d2 = (car.x - x) ** 2 + (car.y - y) ** 2
            if d2 <= best_d2:
                best, best_d2 = car, d2
        return best

    def check_invariants(self) -> List[str]:
        """Describe every violated junction / roster invariant (empty when sound)."""
        problems: List[str] = []
        held_by: Dict[int, Any] = {}
        for coord, state in self.network.junctions.items():
            occupant = state.occupant
            if occupant is not None:
                if any(queued is occupant for queued in state.queue):
                    problems.append(f"junction {coord}: occupant car {occupant.id} is also queued")
                if not any(car is occupant for car in self.cars):
                    problems.append(f"junction {coord}: occupant car {occupant.id} is not in the roster")
                if occupant.id in held_by:
                    problems.append(
                        f"car {occupant.id} occupies both {held_by[occupant.id]} and {coord}"
                    )
                held_by[occupant.id] = coord
            ids = [car.id for car in state.queue]
            if len(ids) != len(set(ids)):
                problems.append(f"junction {coord}: duplicate cars in queue {ids}")
        if len(self.cars) != self._roster_size:
            problems.append(
                f"roster size changed from {self._roster_size} to {len(self.cars)}"
            )
        roster_ids = [car.id for car in self.cars]
        if len(roster_ids) != len(set(roster_ids)):
            problems.append("duplicate car ids in roster")
        return problems

    def snapshot(self) -> Dict[str, Any]:
        """Plain-data view of the current tick for renderers."""
        return {
            "tick": self.tick,
            "cars": [car.as_dict() for car in self.cars],
            "junctions": {
                coord: state.as_dict()
                for coord, state in self.network.junctions.items()
                if state.occupied or state.queue
            },
            "metrics": self.metrics.report(),
        }
