#!/usr/bin/env python3
"""
traffic/car.py
==============
Per-car driving state machine.

A :class:`Car` never holds a reference to the network.  Each tick
:meth:`World.step <traffic.world.World.step>` calls :meth:`Car.update`
with the whole roster and the world, which supplies the network, the
junction arbiter, the spawn allocator, the metrics and the policy.

Update precedence (first matching branch wins, then the stall guard)::

    0  parked car retries relocation
    1  long wait + clear road ahead        → recover
       very long wait                      → relocate out of the jam
    2  blocker ahead                       → COLLISION, stop
    3  COLLISION and unblocked             → DRIVING
    4  orphaned WAITING (no claim)         → DRIVING
    5  junction ahead, no claim            → request entry
    6  QUEUED claim                        → re-request / override / wait
    7  still waiting                       → stop
    8  integrate, snap + turn at junction centre, release
    10 off the field or off the road       → relocate
    9  (always) stalled held claim         → force release
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence

from traffic.collision import clear_ahead, detect_blocker, near_stopped_traffic
from traffic.geometry import along_heading, distance
from traffic.metrics import TrafficMetrics
from traffic.network import Direction, GridCoord, RoadNetwork
from traffic.policy import DrivingPolicy

if TYPE_CHECKING:
    from traffic.world import World

log = logging.getLogger("car")

CAR_PALETTE_SIZE = 3


class CarState(Enum):
    DRIVING = "driving"
    WAITING = "waiting"
    COLLISION = "collision"
    RESPAWNED = "respawned"


class ClaimStatus(Enum):
    QUEUED = "queued"
    """In the junction's wait queue."""
    GRANTED = "granted"
    """Current occupant of the junction."""
    FORCED = "forced"
    """Crossing on the safe-release override without holding the junction."""


@dataclass(frozen=True)
class JunctionClaim:
    """A car's relationship with the one junction it is dealing with."""

    coord: GridCoord
    status: ClaimStatus
    since_tick: int = 0


@dataclass(eq=False)
class Car:
    """One autonomous car.  Equality is identity."""

    id: int
    x: float
    y: float
    direction: Direction = Direction.EAST
    next_direction: Optional[Direction] = None
    speed: float = 2.0
    max_speed: float = 2.0
    state: CarState = CarState.DRIVING
    claim: Optional[JunctionClaim] = None
    waiting_cycles: int = 0
    last_moved_tick: int = 0
    sensor_range: float = 60.0
    min_safe_distance: float = 20.0
    color: int = 0

    def __post_init__(self) -> None:
        self.speed = min(self.speed, self.max_speed)

    # ── construction ──────────────────────────────────────────────────────

    @classmethod
    def create(
        cls,
        car_id: int,
        x: float,
        y: float,
        network: RoadNetwork,
        policy: DrivingPolicy,
        metrics: TrafficMetrics,
        color: int = 0,
        tick: int = 0,
    ) -> "Car":
        """Build a car sized to *network* and place it at *(x, y)*."""
        car = cls(
            id=car_id,
            x=x,
            y=y,
            speed=policy.max_speed,
            max_speed=policy.max_speed,
            sensor_range=policy.sensor_range(network.road_width),
            min_safe_distance=policy.min_safe_distance(network.road_width),
            color=color,
        )
        car.place(x, y, network, policy, metrics, tick)
        return car

    def place(
        self,
        x: float,
        y: float,
        network: RoadNetwork,
        policy: DrivingPolicy,
        metrics: TrafficMetrics,
        tick: int = 0,
    ) -> None:
        """Put the car on *(x, y)*, centred across its road, heading with the flow."""
        cell = network.cell_at(x, y)
        heading = network.initial_heading(cell)
        if heading is None:
            metrics.heading_defects += 1
            log.warning(
                "car %d placed at (%.1f, %.1f) with no road flow, heading %s",
                self.id, x, y, policy.fallback_direction.value,
            )
            heading = policy.fallback_direction
        elif heading in (Direction.EAST, Direction.WEST):
            y = cell.center[1]
        else:
            x = cell.center[0]

        self.x = x
        self.y = y
        self.direction = heading
        self.next_direction = None
        self.speed = self.max_speed
        self.state = CarState.DRIVING
        self.claim = None
        self.waiting_cycles = 0
        self.last_moved_tick = tick

    # ── derived state ─────────────────────────────────────────────────────

    @property
    def is_waiting(self) -> bool:
        return self.state in (CarState.WAITING, CarState.COLLISION)

    @property
    def current_junction(self) -> Optional[GridCoord]:
        return self.claim.coord if self.claim is not None else None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "direction": self.direction.value,
            "next_direction": self.next_direction.value if self.next_direction else None,
            "state": self.state.value,
            "junction": self.current_junction,
            "claim": self.claim.status.value if self.claim else None,
            "waiting_cycles": self.waiting_cycles,
            "color": self.color,
        }

    # ── per-tick update ───────────────────────────────────────────────────

    def update(self, roster: Sequence["Car"], world: "World") -> None:
        """Advance this car by one tick."""
        self._drive(roster, world)
        self._stall_guard(roster, world)

    def _drive(self, roster: Sequence["Car"], world: "World") -> None:
        network = world.network
        arbiter = world.arbiter
        policy = world.policy
        tick = world.tick

        cell = network.cell_at(self.x, self.y)
        if self.state is CarState.WAITING and self.claim is None and not network.is_drivable(cell):
            self._relocate(roster, world)
            return

        if self.is_waiting and self.last_moved_tick < tick - 1:
            self.waiting_cycles += 1
            if self.waiting_cycles > policy.recovery_wait_cycles and clear_ahead(self, roster, policy):
                self._recover(world)
                return
            if self.waiting_cycles > policy.gridlock_wait_cycles and self._break_gridlock(roster, world):
                return

        if detect_blocker(self, roster, network, policy) is not None:
            self.state = CarState.COLLISION
            world.metrics.collision_stops += 1
            return
        if self.state is CarState.COLLISION:
            self.state = CarState.DRIVING

        if (self.state is CarState.WAITING and self.claim is None
                and not near_stopped_traffic(self, roster)):
            self.state = CarState.DRIVING

        ahead = network.adjacent_cell(cell, self.direction)
        if self.claim is None and ahead is not None and ahead.is_junction:
            if arbiter.request_entry(ahead.coord, self, roster):
                self._grant(ahead.coord, world)
            else:
                self.claim = JunctionClaim(ahead.coord, ClaimStatus.QUEUED, tick)
                self.state = CarState.WAITING
                self._try_override(roster, world)
                return
        elif self.claim is not None and self.claim.status is ClaimStatus.QUEUED:
            if arbiter.request_entry(self.claim.coord, self, roster):
                self._grant(self.claim.coord, world)
            else:
                if not self._try_override(roster, world):
                    self.state = CarState.WAITING
                return

        if self.is_waiting:
            return

        self._advance(roster, world)

    def _advance(self, roster: Sequence["Car"], world: "World") -> None:
        network = world.network
        hx, hy = self.direction.vector
        self.x += hx * self.speed
        self.y += hy * self.speed
        self.last_moved_tick = world.tick
        self.waiting_cycles = 0

        cell = network.cell_at(self.x, self.y)
        if not network.is_drivable(cell):
            self._relocate(roster, world)
            return

        if not cell.is_junction:
            return
        cx, cy = cell.center
        remaining = along_heading(self.x, self.y, hx, hy, cx, cy)
        if remaining < 0.0:
            return
        if remaining <= self.speed or distance(self.x, self.y, cx, cy) < world.policy.center_snap_radius:
            self._turn_at_centre(cell.coord, roster, world)

    def _turn_at_centre(self, coord: GridCoord, roster: Sequence["Car"], world: "World") -> None:
        """Snap onto the junction centre, take the exit and let go of the junction.

        A car that reaches the centre without a pre-selected exit (its claim
        was force released on the way in) picks one now, so every turn is an
        allowed exit of the junction it is taken in.
        """
        self.x, self.y = world.network.cell_at_coord(*coord).center
        turn = self.next_direction
        if turn is None:
            turn = world.arbiter.decide_next_direction(coord)
        self.direction = turn
        self.next_direction = None
        claim = self.claim
        if claim is not None and claim.coord == coord and claim.status is not ClaimStatus.QUEUED:
            self._drop_claim(roster, world)
        self.state = CarState.DRIVING

    # ── junction claim helpers ────────────────────────────────────────────

    def _grant(self, coord: GridCoord, world: "World") -> None:
        self.claim = JunctionClaim(coord, ClaimStatus.GRANTED, world.tick)
        self.next_direction = world.arbiter.decide_next_direction(coord)
        self.state = CarState.DRIVING
        self.waiting_cycles = 0

    def _force(self, coord: GridCoord, world: "World") -> None:
        world.arbiter.withdraw(coord, self)
        self.claim = JunctionClaim(coord, ClaimStatus.FORCED, world.tick)
        self.next_direction = world.arbiter.decide_next_direction(coord)

    def _try_override(self, roster: Sequence["Car"], world: "World") -> bool:
        """Safe-release override for a car queued too long."""
        policy = world.policy
        if self.waiting_cycles <= policy.recovery_wait_cycles:
            return False
        if not clear_ahead(self, roster, policy):
            return False
        self._recover(world)
        return True

    def _recover(self, world: "World") -> None:
        claim = self.claim
        if claim is not None and claim.status is ClaimStatus.QUEUED:
            self._force(claim.coord, world)
        log.info("car %d released after waiting %d cycles", self.id, self.waiting_cycles)
        self.state = CarState.DRIVING
        self.waiting_cycles = 0
        world.metrics.recoveries += 1

    def _drop_claim(self, roster: Sequence["Car"], world: "World") -> None:
        claim = self.claim
        if claim is None:
            return
        self.claim = None
        if claim.status is ClaimStatus.GRANTED:
            world.arbiter.release(claim.coord, self, roster)
        else:
            world.arbiter.withdraw(claim.coord, self)

    def _stall_guard(self, roster: Sequence["Car"], world: "World") -> None:
        claim = self.claim
        if claim is None or claim.status is ClaimStatus.QUEUED:
            return
        idle_since = max(self.last_moved_tick, claim.since_tick)
        if world.tick - idle_since <= world.policy.junction_stall_ticks:
            return
        log.warning(
            "car %d stalled on junction %s for %d ticks, force releasing",
            self.id, claim.coord, world.tick - idle_since,
        )
        self._drop_claim(roster, world)
        self.next_direction = None
        self.state = CarState.DRIVING
        world.metrics.forced_releases += 1

    # ── relocation ────────────────────────────────────────────────────────

    def _relocate(self, roster: Sequence["Car"], world: "World") -> bool:
        """Move to a free spawn point; park in WAITING when none is free."""
        self._drop_claim(roster, world)
        self.state = CarState.RESPAWNED
        spot = world.spawner.find_safe_spawn(roster, exclude=self)
        if spot is None:
            self.state = CarState.WAITING
            self.next_direction = None
            self.waiting_cycles = 0
            world.metrics.parked_spawns += 1
            log.debug("car %d parked, no free spawn point", self.id)
            return False
        self.place(spot[0], spot[1], world.network, world.policy, world.metrics, world.tick)
        world.metrics.respawns += 1
        log.debug("car %d respawned at (%.1f, %.1f)", self.id, self.x, self.y)
        return True

    def _break_gridlock(self, roster: Sequence["Car"], world: "World") -> bool:
        """Lift a car out of a jam no recovery rule can dissolve.

        Tries a free boundary spawn point first, then any free road cell.
        When nothing is free the car stays where it is and tries again on
        the next tick.
        """
        spawner = world.spawner
        spot = spawner.find_safe_spawn(roster, exclude=self)
        if spot is None:
            spot = spawner.find_safe_spawn(roster, initial=True, exclude=self)
        if spot is None:
            return False
        log.warning(
            "car %d gridlocked for %d cycles at (%.1f, %.1f), relocating",
            self.id, self.waiting_cycles, self.x, self.y,
        )
        self._drop_claim(roster, world)
        self.place(spot[0], spot[1], world.network, world.policy, world.metrics, world.tick)
        world.metrics.gridlock_relocations += 1
        return True
