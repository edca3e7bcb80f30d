"""
traffic/collision.py
====================
Forward-cone proximity checks between cars.

A car only reacts to cars that are (a) within its sensor range, (b) on a
cell of the same kind as its own (horizontal road, vertical road or
junction) and (c) inside its forward cone.  Three tiers decide whether
such a car blocks:

1. closer than the hard minimum safe distance;
2. stopped (waiting or colliding) and inside the stopped-traffic band;
3. anywhere inside the following band.

Two cars on exactly the same spot have no bearing to each other; the one
with the higher id treats the other as a blocker so they separate.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

from traffic.geometry import distance, forward_alignment
from traffic.network import RoadNetwork
from traffic.policy import DrivingPolicy

if TYPE_CHECKING:
    from traffic.car import Car

_DEFAULT_POLICY = DrivingPolicy()


def _ahead(car: "Car", other: "Car", policy: DrivingPolicy) -> bool:
    hx, hy = car.direction.vector
    return forward_alignment(hx, hy, car.x, car.y, other.x, other.y) > policy.forward_cone_dot


def detect_blocker(
    car: "Car",
    roster: Sequence["Car"],
    network: RoadNetwork,
    policy: Optional[DrivingPolicy] = None,
) -> Optional["Car"]:
    """Return the first car in *roster* that blocks *car*, or ``None``."""
    policy = policy or _DEFAULT_POLICY
    own_cell = network.cell_at(car.x, car.y)
    if own_cell is None:
        return None

    stopped_band = car.sensor_range * policy.stopped_traffic_ratio
    following_band = car.sensor_range * policy.following_ratio

    for other in roster:
        if other is car:
            continue
        d = distance(car.x, car.y, other.x, other.y)
        if d >= car.sensor_range:
            continue
        other_cell = network.cell_at(other.x, other.y)
        if other_cell is None or other_cell.kind is not own_cell.kind:
            continue
        if d == 0.0:
            # Coincident cars have no bearing; the higher id yields.
            if other.id < car.id:
                return other
            continue
        if not _ahead(car, other, policy):
            continue
        if d < car.min_safe_distance:
            return other
        if other.is_waiting and d < stopped_band:
            return other
        if d < following_band:
            return other
    return None


def clear_ahead(
    car: "Car",
    roster: Sequence["Car"],
    policy: Optional[DrivingPolicy] = None,
) -> bool:
    """Safe-release check: nothing close in front of *car*."""
    policy = policy or _DEFAULT_POLICY
    clearance = car.min_safe_distance * policy.release_clearance_factor
    for other in roster:
        if other is car:
            continue
        d = distance(car.x, car.y, other.x, other.y)
        if d == 0.0:
            if other.id < car.id:
                return False
            continue
        if d >= car.sensor_range:
            continue
        if d < clearance and _ahead(car, other, policy):
            return False
    return True


def near_stopped_traffic(car: "Car", roster: Sequence["Car"]) -> bool:
    """True when a waiting or colliding car is inside *car*'s sensor range."""
    for other in roster:
        if other is car or not other.is_waiting:
            continue
        if distance(car.x, car.y, other.x, other.y) < car.sensor_range:
            return True
    return False
