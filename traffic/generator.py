#!/usr/bin/env python3
"""
traffic/generator.py
====================
Procedural city layout.

:func:`generate_network` lays random one-way roads across an empty grid
(parallel roads keep at least one cell apart, crossings become
junctions, roads may start or stop at a crossing), then fills the larger
empty pockets with nested rectangular buildings.  Junctions that end up
with no way out are turned back into empty lots before the
:class:`~traffic.network.RoadNetwork` is built, so every junction in the
result has at least one allowed exit.
"""

from __future__ import annotations

import logging
import math
import random
from collections import deque
from dataclasses import dataclass
from typing import List, Optional, Set, Tuple

from traffic.network import (
    Cell, CellKind, Flow, RoadNetwork, junction_exits_in, make_cell,
)

log = logging.getLogger("generator")

DEFAULT_COLS = 50
DEFAULT_ROWS = 50
DEFAULT_CELL_SIZE = 20.0

BUILDING_PALETTE_SIZE = 4

_BASE_ROADS = 20
_BASE_ROADS_SPREAD = 15
_ROAD_VARIATION = 0.3
_POSITION_ATTEMPTS = 12
_ROAD_START_CHANCE = 0.1
_ROAD_END_CHANCE = 0.3
_BASE_BUILDINGS = 8
_BUILDING_VARIATION = 0.2
_NEST_CHANCE = 0.7
_MAX_NEST_DEPTH = 2


@dataclass
class _Area:
    """Bounding box of one connected pocket of empty cells."""

    min_row: int
    max_row: int
    min_col: int
    max_col: int

    @property
    def width(self) -> int:
        return self.max_col - self.min_col + 1

    @property
    def height(self) -> int:
        return self.max_row - self.min_row + 1


class _Draft:
    """Mutable grid used while laying out roads and buildings."""

    def __init__(self, cols: int, rows: int, cell_size: float) -> None:
        self.cols = cols
        self.rows = rows
        self.cell_size = cell_size
        self.cells: List[List[Cell]] = [
            [make_cell(c, r, CellKind.EMPTY, cell_size) for c in range(cols)]
            for r in range(rows)
        ]

    def kind(self, col: int, row: int) -> CellKind:
        return self.cells[row][col].kind

    def set(self, col: int, row: int, kind: CellKind,
            flow: Optional[Flow] = None, color: Optional[int] = None) -> None:
        self.cells[row][col] = make_cell(col, row, kind, self.cell_size, flow=flow, color=color)


def generate_network(
    cols: int = DEFAULT_COLS,
    rows: int = DEFAULT_ROWS,
    cell_size: float = DEFAULT_CELL_SIZE,
    seed: Optional[int] = None,
) -> RoadNetwork:
    """Build a random road grid.

    Parameters
    ----------
    cols, rows : int
        Grid dimensions in cells (at least 3 each).
    cell_size : float
        Cell side length in world units.
    seed : int or None
        Random seed for reproducibility.
    """
    if cols < 3 or rows < 3:
        raise ValueError(f"grid must be at least 3x3 cells, got {cols}x{rows}")
    rng = random.Random(seed)
    draft = _Draft(cols, rows, cell_size)

    base_roads = _BASE_ROADS + rng.randrange(_BASE_ROADS_SPREAD)
    num_roads = math.floor(base_roads + rng.random() * base_roads * _ROAD_VARIATION)
    used: Set[Tuple[bool, int]] = set()
    laid = sum(1 for _ in range(num_roads) if _lay_road(draft, rng, used))

    buildings = _add_buildings(draft, rng)
    removed = _remove_dead_junctions(draft)

    network = RoadNetwork(draft.cells, cell_size)
    log.info(
        "generated %dx%d grid: %d/%d roads, %d junctions, %d buildings, "
        "%d dead-end junctions removed, %d spawn points",
        cols, rows, laid, num_roads, len(network.junctions), buildings,
        removed, len(network.spawn_points()),
    )
    return network


# ── Roads ─────────────────────────────────────────────────────────────────────

def _too_close(position: int, horizontal: bool, limit: int, used: Set[Tuple[bool, int]]) -> bool:
    if position < 0 or position >= limit:
        return True
    return any((horizontal, position + offset) in used for offset in (-1, 0, 1))


def _lay_road(draft: _Draft, rng: random.Random, used: Set[Tuple[bool, int]]) -> bool:
    horizontal = rng.random() < 0.5
    if horizontal:
        flow = Flow.WEST_TO_EAST if rng.random() < 0.5 else Flow.EAST_TO_WEST
        limit = draft.rows
    else:
        flow = Flow.NORTH_TO_SOUTH if rng.random() < 0.5 else Flow.SOUTH_TO_NORTH
        limit = draft.cols

    for _ in range(_POSITION_ATTEMPTS):
        position = max(1, math.floor(rng.random() * (limit - 1)))
        if not _too_close(position, horizontal, limit, used):
            break
    else:
        log.debug("no free %s road position after %d attempts",
                  "horizontal" if horizontal else "vertical", _POSITION_ATTEMPTS)
        return False

    used.add((horizontal, position))
    if horizontal:
        _lay_horizontal(draft, rng, position, flow)
    else:
        _lay_vertical(draft, rng, position, flow)
    return True


def _partial_span(crossings: List[int], length: int, rng: random.Random) -> Tuple[int, int]:
    """Start and end of a road that may begin or stop at a crossing."""
    start, end = 0, length - 1
    for index in crossings:
        if rng.random() < _ROAD_START_CHANCE:
            start = index
        if rng.random() < _ROAD_END_CHANCE and index > start:
            end = index
    if end <= start:
        end = length - 1
    return start, end


def _lay_horizontal(draft: _Draft, rng: random.Random, row: int, flow: Flow) -> None:
    crossings = [c for c in range(draft.cols) if draft.kind(c, row) is CellKind.ROAD_VERTICAL]
    start, end = _partial_span(crossings, draft.cols, rng)
    for col in range(start, end + 1):
        if draft.kind(col, row) is CellKind.ROAD_VERTICAL:
            draft.set(col, row, CellKind.JUNCTION)
        else:
            draft.set(col, row, CellKind.ROAD_HORIZONTAL, flow=flow)


def _lay_vertical(draft: _Draft, rng: random.Random, col: int, flow: Flow) -> None:
    crossings = [r for r in range(draft.rows) if draft.kind(col, r) is CellKind.ROAD_HORIZONTAL]
    start, end = _partial_span(crossings, draft.rows, rng)
    for row in range(start, end + 1):
        if draft.kind(col, row) is CellKind.ROAD_HORIZONTAL:
            draft.set(col, row, CellKind.JUNCTION)
        else:
            draft.set(col, row, CellKind.ROAD_VERTICAL, flow=flow)


def _remove_dead_junctions(draft: _Draft) -> int:
    """Turn junctions with no allowed exit into empty lots until none remain."""
    removed = 0
    while True:
        dead = [
            cell.coord
            for row in draft.cells for cell in row
            if cell.is_junction and not junction_exits_in(draft.cells, cell.coord)
        ]
        if not dead:
            return removed
        for col, row in dead:
            draft.set(col, row, CellKind.EMPTY)
        removed += len(dead)


# ── Buildings ─────────────────────────────────────────────────────────────────

def _empty_areas(draft: _Draft) -> List[_Area]:
    """Bounding boxes of connected empty pockets at least 2x2 in size."""
    seen: Set[Tuple[int, int]] = set()
    areas: List[_Area] = []
    for r in range(draft.rows):
        for c in range(draft.cols):
            if (c, r) in seen or draft.kind(c, r) is not CellKind.EMPTY:
                continue
            area = _Area(r, r, c, c)
            queue = deque([(c, r)])
            seen.add((c, r))
            while queue:
                col, row = queue.popleft()
                area.min_row = min(area.min_row, row)
                area.max_row = max(area.max_row, row)
                area.min_col = min(area.min_col, col)
                area.max_col = max(area.max_col, col)
                for nc, nr in ((col, row - 1), (col, row + 1), (col - 1, row), (col + 1, row)):
                    if (0 <= nr < draft.rows and 0 <= nc < draft.cols
                            and (nc, nr) not in seen
                            and draft.kind(nc, nr) is CellKind.EMPTY):
                        seen.add((nc, nr))
                        queue.append((nc, nr))
            if area.width >= 2 and area.height >= 2:
                areas.append(area)
    return areas


def _add_buildings(draft: _Draft, rng: random.Random) -> int:
    areas = _empty_areas(draft)
    areas.sort(key=lambda a: a.width * a.height, reverse=True)

    variation = _BASE_BUILDINGS * _BUILDING_VARIATION
    target = math.floor(_BASE_BUILDINGS + rng.random() * variation * 2 - variation)

    placed = 0
    for area in areas:
        if placed >= target:
            break
        if area.width > area.height:
            height = area.height
            width = min(area.width, area.height + 2)
        else:
            width = area.width
            height = min(area.height, area.width + 2)
        top = area.min_row + rng.randrange(area.height - height + 1)
        left = area.min_col + rng.randrange(area.width - width + 1)
        _place_building(draft, rng, left, top, width, height, depth=0, used_colors=[], owned=None)
        placed += 1
    return placed


def _place_building(
    draft: _Draft,
    rng: random.Random,
    left: int,
    top: int,
    width: int,
    height: int,
    depth: int,
    used_colors: List[int],
    owned: Optional[Set[Tuple[int, int]]],
) -> None:
    """Fill a rectangle with one building colour, maybe nesting another inside.

    The outermost building only claims empty cells; nested ones only
    repaint cells of the building around them.
    """
    if width < 2 or height < 2:
        return
    choices = [i for i in range(BUILDING_PALETTE_SIZE) if i not in used_colors]
    color = rng.choice(choices or list(range(BUILDING_PALETTE_SIZE)))
    used_colors.append(color)

    claimed: Set[Tuple[int, int]] = set()
    for row in range(top, top + height):
        for col in range(left, left + width):
            allowed = (draft.kind(col, row) is CellKind.EMPTY if owned is None
                       else (col, row) in owned)
            if allowed:
                draft.set(col, row, CellKind.BUILDING, color=color)
                claimed.add((col, row))

    if depth >= _MAX_NEST_DEPTH or width <= 3 or height <= 3 or rng.random() >= _NEST_CHANCE:
        return
    if depth == 0:
        if rng.random() > 0.5:
            inner_w = width
            inner_h = height - max(3, math.floor(rng.random() * (height - 3)))
        else:
            inner_h = height
            inner_w = width - max(3, math.floor(rng.random() * (width - 3)))
    else:
        inner_h = min(height - 2, rng.randint(2, 3))
        inner_w = min(width - 2, rng.randint(2, 3))
    _place_building(
        draft, rng,
        left + (width - inner_w) // 2,
        top + (height - inner_h) // 2,
        inner_w, inner_h, depth + 1, used_colors, claimed,
    )
