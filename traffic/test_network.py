#!/usr/bin/env python3
"""
Topology tests for the grid road network.
"""

from __future__ import annotations

import unittest

from traffic.network import CellKind, Direction, Flow, RoadNetwork

# One junction where a southbound road crosses an eastbound one.
CROSS = [
    "..v..",
    "..v..",
    ">>+>>",
    "..v..",
    "..v..",
]


class RoadNetworkLayoutTests(unittest.TestCase):
    def setUp(self) -> None:
        self.network = RoadNetwork.from_layout(CROSS, cell_size=20)

    def test_dimensions(self) -> None:
        self.assertEqual((self.network.cols, self.network.rows), (5, 5))
        self.assertEqual(self.network.road_width, 20.0)
        self.assertEqual(self.network.width, 100.0)

    def test_cell_lookup(self) -> None:
        cell = self.network.cell_at(50.0, 50.0)
        self.assertIsNotNone(cell)
        self.assertEqual(cell.coord, (2, 2))
        self.assertIs(cell.kind, CellKind.JUNCTION)
        self.assertEqual(cell.center, (50.0, 50.0))
        self.assertIs(self.network.cell_at(10.0, 50.0).flow, Flow.WEST_TO_EAST)

    def test_out_of_bounds_is_none(self) -> None:
        self.assertIsNone(self.network.cell_at(-1.0, 5.0))
        self.assertIsNone(self.network.cell_at(100.0, 5.0))
        self.assertIsNone(self.network.cell_at(5.0, 100.0))
        self.assertFalse(self.network.in_bounds(-0.5, 50.0))
        self.assertTrue(self.network.in_bounds(0.0, 50.0))

    def test_adjacent_cell(self) -> None:
        junction = self.network.cell_at_coord(2, 2)
        self.assertEqual(self.network.adjacent_cell(junction, Direction.NORTH).coord, (2, 1))
        self.assertEqual(self.network.adjacent_cell(junction, Direction.WEST).coord, (1, 2))
        corner = self.network.cell_at_coord(0, 0)
        self.assertIsNone(self.network.adjacent_cell(corner, Direction.WEST))
        self.assertIsNone(self.network.adjacent_cell(None, Direction.EAST))

    def test_exits_follow_outgoing_flows(self) -> None:
        self.assertEqual(
            self.network.allowed_exits((2, 2)),
            (Direction.SOUTH, Direction.EAST),
        )

    def test_exit_override_is_ordered_and_deduplicated(self) -> None:
        network = RoadNetwork.from_layout(
            CROSS,
            junction_exits={(2, 2): [Direction.EAST, Direction.SOUTH, Direction.EAST]},
        )
        self.assertEqual(network.allowed_exits((2, 2)), (Direction.SOUTH, Direction.EAST))

    def test_exits_see_through_junction_runs(self) -> None:
        network = RoadNetwork.from_layout(["....", ">++>", "...."])
        self.assertEqual(network.allowed_exits((1, 1)), (Direction.EAST,))
        self.assertEqual(network.allowed_exits((2, 1)), (Direction.EAST,))

    def test_exitless_junction_is_reported(self) -> None:
        with self.assertLogs("network", level="WARNING"):
            network = RoadNetwork.from_layout(["...", ".+.", "..."])
        self.assertEqual(network.allowed_exits((1, 1)), ())

    def test_spawn_points_point_inward(self) -> None:
        self.assertEqual(self.network.spawn_points(), [(0.0, 50.0), (50.0, 0.0)])

    def test_spawn_points_on_far_edges(self) -> None:
        network = RoadNetwork.from_layout([
            "..^..",
            "..^..",
            "<<+<<",
            "..^..",
            "..^..",
        ])
        self.assertEqual(network.spawn_points(), [(80.0, 50.0), (50.0, 80.0)])

    def test_road_cells_exclude_junctions(self) -> None:
        cells = self.network.road_cells()
        self.assertEqual(len(cells), 8)
        self.assertTrue(all(cell.is_road for cell in cells))

    def test_initial_heading(self) -> None:
        self.assertIs(self.network.initial_heading(self.network.cell_at_coord(0, 2)), Direction.EAST)
        self.assertIs(self.network.initial_heading(self.network.cell_at_coord(2, 0)), Direction.SOUTH)
        self.assertIsNone(self.network.initial_heading(self.network.cell_at_coord(2, 2)))
        self.assertIsNone(self.network.initial_heading(self.network.cell_at_coord(0, 0)))

    def test_drivable(self) -> None:
        self.assertTrue(self.network.is_drivable(self.network.cell_at_coord(2, 2)))
        self.assertTrue(self.network.is_drivable(self.network.cell_at_coord(2, 0)))
        self.assertFalse(self.network.is_drivable(self.network.cell_at_coord(0, 0)))
        self.assertFalse(self.network.is_drivable(None))


class JunctionRecordTests(unittest.TestCase):
    def test_occupied_tracks_occupant(self) -> None:
        network = RoadNetwork.from_layout(CROSS)
        state = network.junction((2, 2))
        self.assertFalse(state.occupied)
        state.occupant = object()
        self.assertTrue(state.occupied)
        network.reset_junctions()
        self.assertFalse(state.occupied)
        self.assertEqual(state.queue, [])

    def test_ensure_junction_creates_missing_record(self) -> None:
        network = RoadNetwork.from_layout(CROSS)
        self.assertIsNone(network.junction((0, 2)))
        state = network.ensure_junction((0, 2))
        self.assertIs(network.junction((0, 2)), state)
        self.assertIs(network.ensure_junction((2, 2)), network.junction((2, 2)))

    def test_debug_marks_are_cleared(self) -> None:
        network = RoadNetwork.from_layout(CROSS)
        network.cell_at_coord(1, 2).debug_mark = "lookahead"
        network.clear_debug_marks()
        self.assertEqual(network.cell_at_coord(1, 2).debug_mark, "")


class LayoutValidationTests(unittest.TestCase):
    def test_unknown_character(self) -> None:
        with self.assertRaises(ValueError):
            RoadNetwork.from_layout(["..x"])

    def test_ragged_rows(self) -> None:
        with self.assertRaises(ValueError):
            RoadNetwork.from_layout(["...", ".."])

    def test_non_positive_cell_size(self) -> None:
        with self.assertRaises(ValueError):
            RoadNetwork.from_layout(["..."], cell_size=0)

    def test_empty_layout(self) -> None:
        with self.assertRaises(ValueError):
            RoadNetwork.from_layout([])


if __name__ == "__main__":
    unittest.main()
