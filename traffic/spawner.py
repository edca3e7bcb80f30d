"""
traffic/spawner.py
==================
Safe-position search for placing and relocating cars.

Initial placement spreads cars over every road cell; runtime relocation
uses the boundary spawn points, whose flow points into the grid.
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from traffic.geometry import distance
from traffic.metrics import TrafficMetrics
from traffic.network import RoadNetwork

if TYPE_CHECKING:
    from traffic.car import Car

log = logging.getLogger("spawner")

Position = Tuple[float, float]


class SpawnAllocator:
    """Finds free road positions for new or relocated cars."""

    def __init__(
        self,
        network: RoadNetwork,
        rng: random.Random,
        metrics: TrafficMetrics,
    ) -> None:
        self.network = network
        self.rng = rng
        self.metrics = metrics
        self._warned_no_spawn_points = False

    def candidates(self, initial: bool = False) -> List[Position]:
        if initial:
            return [cell.center for cell in self.network.road_cells()]
        points = self.network.spawn_points()
        if points:
            return points
        if not self._warned_no_spawn_points:
            log.warning("no boundary spawn points, relocating onto road cells instead")
            self._warned_no_spawn_points = True
        return [cell.center for cell in self.network.road_cells()]

    def is_occupied(
        self,
        x: float,
        y: float,
        roster: Sequence["Car"],
        check_safe_distance: bool = True,
        exclude: Optional["Car"] = None,
    ) -> bool:
        """True when *(x, y)* is off the grid or too close to another car.

        A car within half a cell on both axes always occupies the spot.
        With *check_safe_distance*, so does any car on the same cell kind
        within one road width.
        """
        cell = self.network.cell_at(x, y)
        if cell is None:
            return True
        half = self.network.cell_size / 2.0
        for car in roster:
            if car is exclude:
                continue
            if abs(car.x - x) < half and abs(car.y - y) < half:
                return True
            if check_safe_distance:
                other_cell = self.network.cell_at(car.x, car.y)
                if (other_cell is not None and other_cell.kind is cell.kind
                        and distance(x, y, car.x, car.y) < self.network.road_width):
                    return True
        return False

    def find_safe_spawn(
        self,
        roster: Sequence["Car"],
        initial: bool = False,
        exclude: Optional["Car"] = None,
    ) -> Optional[Position]:
        """First free candidate in random order, or ``None`` if all are taken."""
        pool = self.candidates(initial)
        self.rng.shuffle(pool)
        for x, y in pool:
            if not self.is_occupied(x, y, roster, check_safe_distance=True, exclude=exclude):
                return (x, y)
        log.debug("no free spawn position among %d candidates", len(pool))
        return None
