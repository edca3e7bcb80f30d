#!/usr/bin/env python3
"""
Junction mutual-exclusion, FIFO promotion and stale-occupant eviction.
"""

from __future__ import annotations

import random
import unittest

from traffic.arbitration import JunctionArbiter
from traffic.car import Car, CarState, ClaimStatus
from traffic.metrics import TrafficMetrics
from traffic.network import Direction, RoadNetwork

CROSS = [
    "..v..",
    "..v..",
    ">>+>>",
    "..v..",
    "..v..",
]
JUNCTION = (2, 2)


class JunctionArbiterTests(unittest.TestCase):
    def setUp(self) -> None:
        self.network = RoadNetwork.from_layout(CROSS)
        self.metrics = TrafficMetrics()
        self.arbiter = JunctionArbiter(self.network, random.Random(4), self.metrics)
        self.arbiter.tick = 7
        self.a = Car(id=1, x=30.0, y=50.0, direction=Direction.EAST)
        self.b = Car(id=2, x=50.0, y=30.0, direction=Direction.SOUTH)
        self.c = Car(id=3, x=10.0, y=50.0, direction=Direction.EAST)
        self.roster = [self.a, self.b, self.c]

    @property
    def state(self):
        return self.network.junction(JUNCTION)

    def test_free_junction_is_granted(self) -> None:
        self.assertTrue(self.arbiter.request_entry(JUNCTION, self.a, self.roster))
        self.assertIs(self.state.occupant, self.a)
        self.assertTrue(self.state.occupied)
        self.assertTrue(self.arbiter.is_occupant(JUNCTION, self.a))

    def test_reentry_by_occupant_is_idempotent(self) -> None:
        self.arbiter.request_entry(JUNCTION, self.a, self.roster)
        self.assertTrue(self.arbiter.request_entry(JUNCTION, self.a, self.roster))
        self.assertEqual(self.state.queue, [])

    def test_contender_is_queued_once(self) -> None:
        self.arbiter.request_entry(JUNCTION, self.a, self.roster)
        self.assertFalse(self.arbiter.request_entry(JUNCTION, self.b, self.roster))
        self.assertFalse(self.arbiter.request_entry(JUNCTION, self.b, self.roster))
        self.assertFalse(self.arbiter.request_entry(JUNCTION, self.c, self.roster))
        self.assertEqual(self.state.queue, [self.b, self.c])
        self.assertNotIn(self.a, self.state.queue)

    def test_release_promotes_in_fifo_order(self) -> None:
        self.arbiter.request_entry(JUNCTION, self.a, self.roster)
        self.arbiter.request_entry(JUNCTION, self.b, self.roster)
        self.arbiter.request_entry(JUNCTION, self.c, self.roster)
        self.b.state = CarState.WAITING

        promoted = self.arbiter.release(JUNCTION, self.a, self.roster)
        self.assertIs(promoted, self.b)
        self.assertIs(self.state.occupant, self.b)
        self.assertEqual(self.state.queue, [self.c])
        self.assertIs(self.b.state, CarState.DRIVING)
        self.assertEqual(self.b.claim.coord, JUNCTION)
        self.assertIs(self.b.claim.status, ClaimStatus.GRANTED)
        self.assertEqual(self.b.claim.since_tick, 7)
        self.assertIn(self.b.next_direction, (Direction.SOUTH, Direction.EAST))

        self.assertIs(self.arbiter.release(JUNCTION, self.b, self.roster), self.c)
        self.assertIsNone(self.arbiter.release(JUNCTION, self.c, self.roster))
        self.assertFalse(self.state.occupied)
        self.assertEqual(self.metrics.promotions, 2)

    def test_release_by_non_occupant_is_denied(self) -> None:
        self.arbiter.request_entry(JUNCTION, self.a, self.roster)
        self.arbiter.request_entry(JUNCTION, self.b, self.roster)
        self.assertIsNone(self.arbiter.release(JUNCTION, self.c, self.roster))
        self.assertIs(self.state.occupant, self.a)
        self.assertEqual(self.state.queue, [self.b])

    def test_release_of_free_junction_promotes_head(self) -> None:
        self.arbiter.request_entry(JUNCTION, self.a, self.roster)
        self.arbiter.request_entry(JUNCTION, self.b, self.roster)
        self.state.occupant = None
        self.assertIs(self.arbiter.release(JUNCTION, self.c, self.roster), self.b)

    def test_release_of_unknown_junction(self) -> None:
        self.assertIsNone(self.arbiter.release((0, 0), self.a, self.roster))

    def test_respawned_occupant_is_evicted(self) -> None:
        self.arbiter.request_entry(JUNCTION, self.a, self.roster)
        self.a.state = CarState.RESPAWNED
        self.assertTrue(self.arbiter.request_entry(JUNCTION, self.c, self.roster))
        self.assertIs(self.state.occupant, self.c)
        self.assertEqual(self.metrics.stale_evictions, 1)

    def test_vanished_occupant_is_evicted(self) -> None:
        self.arbiter.request_entry(JUNCTION, self.a, self.roster)
        survivors = [self.b, self.c]
        self.assertTrue(self.arbiter.request_entry(JUNCTION, self.c, survivors))
        self.assertIs(self.state.occupant, self.c)

    def test_anyone_may_release_a_stale_occupant(self) -> None:
        self.arbiter.request_entry(JUNCTION, self.a, self.roster)
        self.arbiter.request_entry(JUNCTION, self.b, self.roster)
        promoted = self.arbiter.release(JUNCTION, self.c, [self.b, self.c])
        self.assertIs(promoted, self.b)
        self.assertEqual(self.metrics.stale_evictions, 1)

    def test_release_prunes_stale_queue_entries(self) -> None:
        self.arbiter.request_entry(JUNCTION, self.a, self.roster)
        self.arbiter.request_entry(JUNCTION, self.b, self.roster)
        self.arbiter.request_entry(JUNCTION, self.c, self.roster)
        self.b.state = CarState.RESPAWNED
        self.assertIs(self.arbiter.release(JUNCTION, self.a, self.roster), self.c)
        self.assertEqual(self.state.queue, [])

    def test_withdraw_leaves_queue(self) -> None:
        self.arbiter.request_entry(JUNCTION, self.a, self.roster)
        self.arbiter.request_entry(JUNCTION, self.b, self.roster)
        self.arbiter.withdraw(JUNCTION, self.b)
        self.arbiter.withdraw(JUNCTION, self.b)
        self.assertEqual(self.state.queue, [])
        self.assertIs(self.state.occupant, self.a)

    def test_next_direction_is_an_allowed_exit(self) -> None:
        for _ in range(20):
            self.assertIn(
                self.arbiter.decide_next_direction(JUNCTION),
                (Direction.SOUTH, Direction.EAST),
            )
        self.assertEqual(self.metrics.direction_defects, 0)

    def test_exitless_junction_falls_back_to_east(self) -> None:
        with self.assertLogs("network", level="WARNING"):
            network = RoadNetwork.from_layout(["...", ".+.", "..."])
        arbiter = JunctionArbiter(network, random.Random(1), self.metrics)
        with self.assertLogs("arbiter", level="WARNING"):
            self.assertIs(arbiter.decide_next_direction((1, 1)), Direction.EAST)
        self.assertEqual(self.metrics.direction_defects, 1)

    def test_reset_clears_records(self) -> None:
        self.arbiter.request_entry(JUNCTION, self.a, self.roster)
        self.arbiter.request_entry(JUNCTION, self.b, self.roster)
        self.arbiter.reset()
        self.assertFalse(self.state.occupied)
        self.assertEqual(self.state.queue, [])
        self.assertEqual(self.arbiter.tick, 0)


if __name__ == "__main__":
    unittest.main()
