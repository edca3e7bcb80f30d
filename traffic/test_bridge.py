#!/usr/bin/env python3
"""
Background driver tests (stepped synchronously, no thread).
"""

from __future__ import annotations

import unittest

from traffic.bridge import SimBridge
from traffic.generator import generate_network


class SimBridgeTests(unittest.TestCase):
    def setUp(self) -> None:
        network = generate_network(cols=20, rows=20, seed=8)
        self.bridge = SimBridge(vehicle_count=15, random_seed=8, network=network)

    def test_snapshot_follows_steps(self) -> None:
        initial = self.bridge.snapshot()
        self.assertEqual(initial["tick"], 0)
        self.assertGreater(len(initial["cars"]), 0)
        for _ in range(3):
            self.bridge.step_once()
        snap = self.bridge.snapshot()
        self.assertEqual(snap["tick"], 3)
        self.assertEqual(len(snap["cars"]), len(initial["cars"]))

    def test_reset_restarts_the_clock(self) -> None:
        self.bridge.step_once()
        self.bridge.reset()
        self.assertEqual(self.bridge.snapshot()["tick"], 0)
        self.assertEqual(self.bridge.invariant_report(), [])

    def test_pick_car(self) -> None:
        car = self.bridge.snapshot()["cars"][0]
        self.assertEqual(self.bridge.pick_car(car["x"], car["y"], 5.0), car["id"])

    def test_pause_flag(self) -> None:
        self.bridge.set_paused(True)
        self.assertTrue(self.bridge.paused)
        self.bridge.set_paused(False)
        self.assertFalse(self.bridge.paused)

    def test_invalid_tick_rate(self) -> None:
        with self.assertRaises(ValueError):
            SimBridge(tick_rate_hz=0, vehicle_count=1, network=generate_network(cols=10, rows=10, seed=1))


if __name__ == "__main__":
    unittest.main()
