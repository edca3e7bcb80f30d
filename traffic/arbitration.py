#!/usr/bin/env python3
"""
traffic/arbitration.py
======================
Single-occupant mutual exclusion for junction cells.

Every junction is a resource with one occupant slot and a FIFO wait
queue.  :class:`JunctionArbiter` is the only code that mutates
:class:`~traffic.network.JunctionState` records; all calls happen inside
:meth:`World.step <traffic.world.World.step>`, which serialises them.

Stale occupants (cars that respawned or dropped out of the roster) are
evicted on the next request or release so a junction can never deadlock
on a ghost.
"""

from __future__ import annotations

import logging
import random
from typing import Optional, Sequence

from traffic.car import Car, CarState, ClaimStatus, JunctionClaim
from traffic.metrics import TrafficMetrics
from traffic.network import Direction, GridCoord, JunctionState, RoadNetwork
from traffic.policy import DrivingPolicy

log = logging.getLogger("arbiter")


def _in_roster(car: Car, roster: Sequence[Car]) -> bool:
    return any(other is car for other in roster)


def is_stale(car: Car, roster: Sequence[Car]) -> bool:
    """A car that respawned or no longer exists cannot hold a junction."""
    return car.state is CarState.RESPAWNED or not _in_roster(car, roster)


class JunctionArbiter:
    """Grants, queues and releases junction entry.

    Parameters
    ----------
    network : RoadNetwork
        Owner of the junction records.
    rng : random.Random
        Shared world RNG, used for exit selection.
    metrics : TrafficMetrics
        Receives eviction / promotion / defect counts.
    policy : DrivingPolicy or None
        Supplies the fallback heading for exitless junctions.
    """

    def __init__(
        self,
        network: RoadNetwork,
        rng: random.Random,
        metrics: TrafficMetrics,
        policy: Optional[DrivingPolicy] = None,
    ) -> None:
        self.network = network
        self.rng = rng
        self.metrics = metrics
        self.policy = policy or DrivingPolicy()
        self.tick = 0

    # ── queries ───────────────────────────────────────────────────────────

    def is_occupant(self, coord: GridCoord, car: Car) -> bool:
        state = self.network.junction(coord)
        return state is not None and state.occupant is car

    def decide_next_direction(self, coord: GridCoord) -> Direction:
        """Uniform random pick among the junction's allowed exits."""
        exits = self.network.allowed_exits(coord)
        if not exits:
            self.metrics.direction_defects += 1
            log.warning(
                "junction %s has no allowed exits, falling back to %s",
                coord, self.policy.fallback_direction.value,
            )
            return self.policy.fallback_direction
        return self.rng.choice(exits)

    # ── protocol ──────────────────────────────────────────────────────────

    def request_entry(self, coord: GridCoord, car: Car, roster: Sequence[Car]) -> bool:
        """Try to become occupant of *coord*.

        Returns ``True`` when *car* holds the junction afterwards; otherwise
        *car* is (or stays) queued and ``False`` is returned.
        """
        state = self.network.ensure_junction(coord)
        if state.occupant is car:
            return True
        if state.occupant is not None and is_stale(state.occupant, roster):
            self._evict(state)
        if state.occupant is None:
            state.occupant = car
            self._remove_from_queue(state, car)
            log.debug("car %d entered junction %s", car.id, coord)
            return True
        if not any(queued is car for queued in state.queue):
            state.queue.append(car)
            log.debug(
                "car %d queued at %s behind car %d (position %d)",
                car.id, coord, state.occupant.id, len(state.queue),
            )
        return False

    def release(self, coord: GridCoord, car: Car, roster: Sequence[Car]) -> Optional[Car]:
        """Free *coord* and promote the head of its queue.

        Permitted when *car* is the occupant, the occupant is stale, or the
        junction has no occupant.  Returns the promoted car, if any.
        """
        state = self.network.junction(coord)
        if state is None:
            return None
        occupant = state.occupant
        if occupant is not None and occupant is not car:
            if not is_stale(occupant, roster):
                log.debug(
                    "car %d may not release %s held by car %d",
                    car.id, coord, occupant.id,
                )
                return None
            self._evict(state)
        state.occupant = None
        self._remove_from_queue(state, car)

        before = len(state.queue)
        state.queue[:] = [queued for queued in state.queue if not is_stale(queued, roster)]
        if len(state.queue) != before:
            log.debug("pruned %d stale cars from queue at %s", before - len(state.queue), coord)

        if not state.queue:
            return None
        promoted = state.queue.pop(0)
        state.occupant = promoted
        promoted.state = CarState.DRIVING
        promoted.claim = JunctionClaim(coord, ClaimStatus.GRANTED, self.tick)
        promoted.next_direction = self.decide_next_direction(coord)
        self.metrics.promotions += 1
        log.debug("car %d promoted to occupant of %s", promoted.id, coord)
        return promoted

    def withdraw(self, coord: GridCoord, car: Car) -> None:
        """Remove *car* from the wait queue of *coord* (no-op if absent)."""
        state = self.network.junction(coord)
        if state is not None:
            self._remove_from_queue(state, car)

    def reset(self) -> None:
        self.network.reset_junctions()
        self.tick = 0

    # ── internals ─────────────────────────────────────────────────────────

    def _evict(self, state: JunctionState) -> None:
        ghost = state.occupant
        state.occupant = None
        self.metrics.stale_evictions += 1
        log.info(
            "evicted stale occupant car %d from junction %s",
            ghost.id if ghost is not None else -1, state.coord,
        )

    @staticmethod
    def _remove_from_queue(state: JunctionState, car: Car) -> None:
        state.queue[:] = [queued for queued in state.queue if queued is not car]
