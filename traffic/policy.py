#!/usr/bin/env python3
"""
traffic/policy.py
=================
Tunable driving, proximity and recovery parameters for the grid
simulation.  Every constant lives in the frozen :class:`DrivingPolicy`
dataclass so that experiments can swap policies without touching code.

Distances are expressed as multiples of the network's road width so the
same policy works for any cell size.
"""

from __future__ import annotations

from dataclasses import dataclass

from traffic.network import Direction


@dataclass(frozen=True)
class DrivingPolicy:
    """Immutable bag of every tunable simulation parameter.

    Groups: longitudinal motion, proximity sensing, junction recovery,
    data-defect fallbacks, initial placement.
    """

    # ── Longitudinal motion ───────────────────────────────────────────────
    max_speed: float = 2.0
    """Distance covered per tick (world units)."""

    center_snap_radius: float = 2.0
    """A car this close to its junction centre snaps onto it."""

    # ── Proximity sensing ─────────────────────────────────────────────────
    sensor_range_factor: float = 3.0
    """Sensor radius as a multiple of the road width."""

    min_safe_distance_factor: float = 1.0
    """Hard minimum gap to a car ahead, as a multiple of the road width."""

    forward_cone_dot: float = 0.7
    """Heading / bearing dot product above which another car is *ahead*
    (roughly a 45° cone)."""

    stopped_traffic_ratio: float = 0.75
    """Fraction of the sensor range inside which a stopped car ahead blocks."""

    following_ratio: float = 0.5
    """Fraction of the sensor range inside which any car ahead blocks."""

    # ── Junction recovery ─────────────────────────────────────────────────
    recovery_wait_cycles: int = 50
    """Waiting ticks after which a car may try the safe-release override."""

    release_clearance_factor: float = 2.0
    """Safe-release needs no car ahead within this many safe distances."""

    junction_stall_ticks: int = 60
    """A held junction claim without movement for longer than this is
    force-released."""

    gridlock_wait_cycles: int = 600
    """Waiting ticks after which a car that still cannot recover is lifted
    out of the jam and relocated."""

    # ── Data-defect fallbacks ─────────────────────────────────────────────
    fallback_direction: Direction = Direction.EAST
    """Heading used when a junction has no exits or a road has no flow."""

    # ── Initial placement ─────────────────────────────────────────────────
    init_attempts_per_car: int = 10
    """Placement attempts per requested car when filling the roster."""

    def sensor_range(self, road_width: float) -> float:
        return road_width * self.sensor_range_factor

    def min_safe_distance(self, road_width: float) -> float:
        return road_width * self.min_safe_distance_factor
