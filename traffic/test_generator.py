#!/usr/bin/env python3
"""
Procedural layout tests.
"""

from __future__ import annotations

import unittest

from traffic.generator import BUILDING_PALETTE_SIZE, generate_network
from traffic.network import CellKind, Flow


def _kinds(network):
    return [[cell.kind for cell in row] for row in network.cells]


class GeneratorTests(unittest.TestCase):
    def test_dimensions(self) -> None:
        network = generate_network(cols=40, rows=30, cell_size=16, seed=1)
        self.assertEqual((network.cols, network.rows), (40, 30))
        self.assertEqual(network.cell_size, 16.0)
        self.assertEqual(network.cell_at_coord(39, 29).center, (39 * 16 + 8.0, 29 * 16 + 8.0))

    def test_every_junction_has_an_exit(self) -> None:
        for seed in range(8):
            network = generate_network(seed=seed)
            for coord, state in network.junctions.items():
                self.assertTrue(state.allowed_exits, msg=f"seed {seed} junction {coord}")

    def test_roads_carry_a_flow_matching_their_axis(self) -> None:
        network = generate_network(seed=3)
        self.assertTrue(network.road_cells())
        for cell in network.iter_cells():
            if cell.kind is CellKind.ROAD_HORIZONTAL:
                self.assertTrue(cell.flow.is_horizontal)
            elif cell.kind is CellKind.ROAD_VERTICAL:
                self.assertFalse(cell.flow.is_horizontal)
            else:
                self.assertIsNone(cell.flow)

    def test_parallel_roads_are_spaced(self) -> None:
        network = generate_network(seed=7)
        for row in range(network.rows - 1):
            upper = [network.cell_at_coord(c, row).kind for c in range(network.cols)]
            lower = [network.cell_at_coord(c, row + 1).kind for c in range(network.cols)]
            adjacent = [
                c for c in range(network.cols)
                if upper[c] is CellKind.ROAD_HORIZONTAL and lower[c] is CellKind.ROAD_HORIZONTAL
            ]
            self.assertEqual(adjacent, [], msg=f"rows {row} and {row + 1}")

    def test_buildings_use_the_palette(self) -> None:
        buildings = [
            cell
            for seed in range(5)
            for cell in generate_network(seed=seed).iter_cells()
            if cell.kind is CellKind.BUILDING
        ]
        self.assertTrue(buildings)
        for cell in buildings:
            self.assertIn(cell.color, range(BUILDING_PALETTE_SIZE))

    def test_spawn_points_sit_on_inbound_boundary_roads(self) -> None:
        network = generate_network(seed=5)
        for x, y in network.spawn_points():
            cell = network.cell_at(x, y)
            self.assertTrue(cell.is_road)
            on_edge = cell.col in (0, network.cols - 1) or cell.row in (0, network.rows - 1)
            self.assertTrue(on_edge)
            if cell.col == 0 and cell.kind is CellKind.ROAD_HORIZONTAL:
                self.assertIs(cell.flow, Flow.WEST_TO_EAST)

    def test_same_seed_same_layout(self) -> None:
        self.assertEqual(_kinds(generate_network(seed=42)), _kinds(generate_network(seed=42)))

    def test_too_small_grid(self) -> None:
        with self.assertRaises(ValueError):
            generate_network(cols=2, rows=10)


if __name__ == "__main__":
    unittest.main()
