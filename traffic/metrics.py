"""
TrafficMetrics: Tracks liveness and data-defect counters for the simulation.
"""


class TrafficMetrics:
    """
    Counters for every non-routine event the simulation recovers from.

    Attributes:
        recoveries (int): Cars that left a long wait through the safe-release check.
        forced_releases (int): Junction claims released by the stall guard.
        respawns (int): Cars relocated after leaving the drivable area.
        parked_spawns (int): Relocations that found no free spawn point.
        stale_evictions (int): Junction occupants evicted because they respawned or vanished.
        promotions (int): Queue heads promoted to junction occupant.
        direction_defects (int): Exit decisions at a junction with no allowed exits.
        heading_defects (int): Placements on a road cell with no resolvable flow.
        collision_stops (int): Ticks on which a car stopped for a blocker ahead.
        gridlock_relocations (int): Cars relocated out of a jam after a very long wait.
    """

    _FIELDS = (
        "recoveries",
        "forced_releases",
        "respawns",
        "parked_spawns",
        "stale_evictions",
        "promotions",
        "direction_defects",
        "heading_defects",
        "collision_stops",
        "gridlock_relocations",
    )

    def __init__(self):
        """Initialize all counters to zero."""
        self.reset()

    def reset(self) -> None:
        for name in self._FIELDS:
            setattr(self, name, 0)

    def report(self) -> dict:
        """
        Return a snapshot of current metrics.

        Returns:
            dict: Counter name to value, in declaration order.
        """
        return {name: getattr(self, name) for name in self._FIELDS}
