"""
traffic — Simulation core
=========================

Modules
-------
network
    :class:`RoadNetwork` grid topology and junction records.
arbitration
    :class:`JunctionArbiter` single-occupant junction protocol.
car
    :class:`Car` per-tick driving state machine.
collision
    Forward-cone proximity checks.
spawner
    :class:`SpawnAllocator` safe-position search.
world
    :class:`World` roster owner and tick driver.
bridge
    :class:`SimBridge` background-thread driver for the UI.
generator
    :func:`generate_network` procedural city layout.
policy
    :class:`DrivingPolicy` tunable constants.
metrics
    :class:`TrafficMetrics` liveness counters.
geometry
    Low-level vector helpers.
"""
