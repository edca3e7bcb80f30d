"""
traffic/bridge.py
=================
Background-thread driver for :class:`~traffic.world.World`.  The UI polls
the bridge for the latest snapshot without blocking.

Public API consumed by :mod:`ui.pygame_view`
--------------------------------------------
* ``snapshot()``        → ``dict`` (tick, cars, busy junctions, metrics)
* ``network``           → the immutable :class:`~traffic.network.RoadNetwork`
* ``pick_car(x, y, r)`` → ``Optional[int]``
* ``invariant_report()``→ ``List[str]``
* ``reset()``           → ``None``
* ``set_paused(bool)``  → ``None``
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Dict, List, Optional

from traffic.network import RoadNetwork
from traffic.policy import DrivingPolicy
from traffic.world import World

log = logging.getLogger("bridge")


class SimBridge:
    """Simulation driver running in a background thread.

    The thread calls :meth:`World.step` at ``tick_rate_hz`` and caches a
    snapshot for the UI thread.  Stepping and snapshot reads share one lock,
    so the UI never sees a half-updated tick.

    Parameters
    ----------
    tick_rate_hz : float
        Simulation ticks per second.
    vehicle_count : int
        Number of cars to place.
    random_seed : int or None
        Seed for reproducibility.
    network : RoadNetwork or None
        Layout to drive on; generated from *random_seed* when *None*.
    policy : DrivingPolicy or None
        Tunable constants.
    """

    def __init__(
        self,
        tick_rate_hz: float = 60.0,
        vehicle_count: int = 160,
        random_seed: Optional[int] = None,
        network: Optional[RoadNetwork] = None,
        policy: Optional[DrivingPolicy] = None,
    ) -> None:
        if tick_rate_hz <= 0:
            raise ValueError(f"tick_rate_hz must be positive, got {tick_rate_hz!r}")
        self._tick_rate_hz = tick_rate_hz
        self._world = World(
            network=network,
            num_cars=vehicle_count,
            seed=random_seed,
            policy=policy,
        )
        self._lock = threading.Lock()

        # Written by the sim thread, read by the UI thread
        self._snapshot: Dict[str, Any] = self._world.snapshot()

        self._thread: Optional[threading.Thread] = None
        self._running = False
        self._paused = False

    @property
    def network(self) -> RoadNetwork:
        return self._world.network

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def start(self) -> None:
        """Spawn the background simulation thread."""
        if self._running:
            return
        self._running = True
        self._thread = threading.Thread(
            target=self._loop, daemon=True, name="SimBridge"
        )
        self._thread.start()
        log.info("SimBridge started at %.1f Hz", self._tick_rate_hz)

    def stop(self) -> None:
        """Signal the thread to stop and wait for it to join."""
        self._running = False
        if self._thread:
            self._thread.join(timeout=2.0)
        log.info("SimBridge stopped")

    # ── UI API ────────────────────────────────────────────────────────────────

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return self._snapshot

    def pick_car(self, x: float, y: float, radius: float) -> Optional[int]:
        """Id of the car nearest *(x, y)* within *radius*, if any."""
        with self._lock:
            car = self._world.car_at(x, y, radius)
            return car.id if car is not None else None

    def invariant_report(self) -> List[str]:
        with self._lock:
            return self._world.check_invariants()

    def reset(self) -> None:
        """Clear the junctions and re-place every car."""
        with self._lock:
            self._world.reset()
            self._snapshot = self._world.snapshot()
        log.info("SimBridge reset")

    def set_paused(self, paused: bool) -> None:
        """Pause / unpause the simulation tick."""
        self._paused = paused

    @property
    def paused(self) -> bool:
        return self._paused

    def step_once(self) -> None:
        """Advance one tick synchronously (single-step key while paused)."""
        self._tick()

    # ── Background loop ───────────────────────────────────────────────────────

    def _loop(self) -> None:
        dt = 1.0 / self._tick_rate_hz
        while self._running:
            t0 = time.perf_counter()
            if not self._paused:
                try:
                    self._tick()
                except Exception:
                    log.exception("SimBridge tick error")
            time.sleep(max(0.0, dt - (time.perf_counter() - t0)))

    def _tick(self) -> None:
        with self._lock:
            self._world.step()
            self._snapshot = self._world.snapshot()
