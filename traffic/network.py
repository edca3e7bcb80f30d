#!/usr/bin/env python3
"""
traffic/network.py
==================
Grid topology for the city simulation.

Defines :class:`Cell`, :class:`JunctionState` and :class:`RoadNetwork` — a
rectangular grid of typed cells (roads with a fixed flow, junctions where
roads cross, buildings, empty lots) plus the registry of per-junction
arbitration records keyed by ``(col, row)``.

The topology is immutable once built.  The only mutable parts are the
junction records (mutated exclusively through
:class:`~traffic.arbitration.JunctionArbiter`) and the opaque
``Cell.debug_mark`` annotation used by the renderer.

:meth:`RoadNetwork.from_layout` builds a network from ASCII art, which is
how the tests describe small scenarios.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence, Tuple,
)

if TYPE_CHECKING:
    from traffic.car import Car

log = logging.getLogger("network")

GridCoord = Tuple[int, int]
"""``(col, row)`` index of a cell."""


# ── Headings ──────────────────────────────────────────────────────────────────

class Direction(Enum):
    """Cardinal heading.  Screen space: north is *up* (negative y)."""

    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

    @property
    def vector(self) -> Tuple[int, int]:
        return _DIRECTION_VECTORS[self]

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]


_DIRECTION_VECTORS: Dict[Direction, Tuple[int, int]] = {
    Direction.NORTH: (0, -1),
    Direction.SOUTH: (0, 1),
    Direction.EAST: (1, 0),
    Direction.WEST: (-1, 0),
}

_OPPOSITES: Dict[Direction, Direction] = {
    Direction.NORTH: Direction.SOUTH,
    Direction.SOUTH: Direction.NORTH,
    Direction.EAST: Direction.WEST,
    Direction.WEST: Direction.EAST,
}


class Flow(Enum):
    """One-way traffic sense of a road cell."""

    WEST_TO_EAST = "west_to_east"
    EAST_TO_WEST = "east_to_west"
    NORTH_TO_SOUTH = "north_to_south"
    SOUTH_TO_NORTH = "south_to_north"

    @property
    def heading(self) -> Direction:
        return _FLOW_HEADINGS[self]

    @property
    def is_horizontal(self) -> bool:
        return self in (Flow.WEST_TO_EAST, Flow.EAST_TO_WEST)


_FLOW_HEADINGS: Dict[Flow, Direction] = {
    Flow.WEST_TO_EAST: Direction.EAST,
    Flow.EAST_TO_WEST: Direction.WEST,
    Flow.NORTH_TO_SOUTH: Direction.SOUTH,
    Flow.SOUTH_TO_NORTH: Direction.NORTH,
}


class CellKind(Enum):
    EMPTY = "empty"
    ROAD_HORIZONTAL = "road_horizontal"
    ROAD_VERTICAL = "road_vertical"
    JUNCTION = "junction"
    BUILDING = "building"

    @property
    def is_road(self) -> bool:
        return self in (CellKind.ROAD_HORIZONTAL, CellKind.ROAD_VERTICAL)

    @property
    def is_drivable(self) -> bool:
        return self.is_road or self is CellKind.JUNCTION


# ── Cells ─────────────────────────────────────────────────────────────────────

@dataclass
class Cell:
    """One grid square.

    Attributes
    ----------
    col, row : int
        Grid indices.
    kind : CellKind
        What occupies the square.
    center : tuple of float
        World-space centre, derived from the indices and the cell size.
    flow : Flow or None
        One-way sense for road cells; ``None`` otherwise.
    color : int or None
        Building palette index (rendering metadata).
    debug_mark : str
        Opaque annotation owned by the debug overlay.  Never read by the
        simulation core.
    """

    col: int
    row: int
    kind: CellKind
    center: Tuple[float, float]
    flow: Optional[Flow] = None
    color: Optional[int] = None
    debug_mark: str = field(default="", compare=False)

    @property
    def coord(self) -> GridCoord:
        return (self.col, self.row)

    @property
    def is_road(self) -> bool:
        return self.kind.is_road

    @property
    def is_junction(self) -> bool:
        return self.kind is CellKind.JUNCTION


def make_cell(
    col: int,
    row: int,
    kind: CellKind,
    cell_size: float,
    flow: Optional[Flow] = None,
    color: Optional[int] = None,
) -> Cell:
    """Build a :class:`Cell` with its centre derived from *cell_size*."""
    center = (col * cell_size + cell_size / 2.0, row * cell_size + cell_size / 2.0)
    return Cell(col=col, row=row, kind=kind, center=center, flow=flow, color=color)


# ── Junction arbitration record ───────────────────────────────────────────────

@dataclass
class JunctionState:
    """Arbitration record of one junction cell.

    ``occupied`` is derived from ``occupant`` so the two can never
    disagree.  ``queue`` is FIFO and never holds duplicates or the current
    occupant; :class:`~traffic.arbitration.JunctionArbiter` maintains that.
    """

    coord: GridCoord
    allowed_exits: Tuple[Direction, ...] = ()
    occupant: Optional["Car"] = None
    queue: List["Car"] = field(default_factory=list)

    @property
    def occupied(self) -> bool:
        return self.occupant is not None

    def clear(self) -> None:
        self.occupant = None
        self.queue.clear()

    def as_dict(self) -> Dict[str, Any]:
        """Render-friendly view: ids instead of car references."""
        return {
            "coord": self.coord,
            "occupied": self.occupied,
            "occupant": self.occupant.id if self.occupant is not None else None,
            "queue": [car.id for car in self.queue],
            "allowed_exits": [d.value for d in self.allowed_exits],
        }


# ── Road network ──────────────────────────────────────────────────────────────

_LAYOUT_CHARS: Dict[str, Tuple[CellKind, Optional[Flow]]] = {
    ".": (CellKind.EMPTY, None),
    "#": (CellKind.BUILDING, None),
    ">": (CellKind.ROAD_HORIZONTAL, Flow.WEST_TO_EAST),
    "<": (CellKind.ROAD_HORIZONTAL, Flow.EAST_TO_WEST),
    "v": (CellKind.ROAD_VERTICAL, Flow.NORTH_TO_SOUTH),
    "^": (CellKind.ROAD_VERTICAL, Flow.SOUTH_TO_NORTH),
    "+": (CellKind.JUNCTION, None),
}


class RoadNetwork:
    """Immutable grid of cells plus the junction registry.

    Provides the lookups used by :class:`~traffic.car.Car` every tick:

    * **cell_at** — continuous coordinate → containing cell.
    * **adjacent_cell** — one grid step in a heading.
    * **junction** — arbitration record for a junction coordinate.
    * **spawn_points** — boundary road cells whose flow points inward.

    Parameters
    ----------
    cells : sequence of rows of Cell
        ``cells[row][col]``; every row must have the same length.
    cell_size : float
        Side length of a cell in world units.  Roads are one cell wide.
    junction_exits : mapping, optional
        Explicit allowed exits per junction coordinate, overriding the
        exits derived from the neighbouring road flows.
    """

    def __init__(
        self,
        cells: Sequence[Sequence[Cell]],
        cell_size: float,
        junction_exits: Optional[Mapping[GridCoord, Sequence[Direction]]] = None,
    ) -> None:
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size!r}")
        if not cells or not cells[0]:
            raise ValueError("a road network needs at least one cell")
        width = len(cells[0])
        for row in cells:
            if len(row) != width:
                raise ValueError("all grid rows must have the same length")

        self.cells: List[List[Cell]] = [list(row) for row in cells]
        self.rows = len(self.cells)
        self.cols = width
        self.cell_size = float(cell_size)
        self.road_width = self.cell_size
        self.width = self.cols * self.cell_size
        self.height = self.rows * self.cell_size

        overrides = dict(junction_exits or {})
        self.junctions: Dict[GridCoord, JunctionState] = {}
        for cell in self.iter_cells():
            if not cell.is_junction:
                continue
            if cell.coord in overrides:
                exits = _ordered(overrides[cell.coord])
            else:
                exits = self.derive_exits(cell.coord)
            if not exits:
                log.warning("junction %s has no allowed exits", cell.coord)
            self.junctions[cell.coord] = JunctionState(cell.coord, exits)

        self._spawn_points = self._compute_spawn_points()
        self._road_cells = [c for c in self.iter_cells() if c.is_road]
        if not self._spawn_points:
            log.warning("network has no boundary spawn points")

    # ── construction helpers ──────────────────────────────────────────────

    @classmethod
    def from_layout(
        cls,
        layout: Sequence[str],
        cell_size: float = 20.0,
        junction_exits: Optional[Mapping[GridCoord, Sequence[Direction]]] = None,
    ) -> "RoadNetwork":
        """Build a network from ASCII rows.

        ``.`` empty, ``#`` building, ``>`` ``<`` ``v`` ``^`` one-way roads,
        ``+`` junction.  The first string is the northern-most row.
        """
        grid: List[List[Cell]] = []
        for r, line in enumerate(layout):
            row: List[Cell] = []
            for c, ch in enumerate(line):
                try:
                    kind, flow = _LAYOUT_CHARS[ch]
                except KeyError:
                    raise ValueError(
                        f"unknown layout character {ch!r} at ({c}, {r})"
                    ) from None
                row.append(make_cell(c, r, kind, cell_size, flow=flow))
            grid.append(row)
        return cls(grid, cell_size, junction_exits=junction_exits)

    def derive_exits(self, coord: GridCoord) -> Tuple[Direction, ...]:
        """Exits of a junction inferred from the roads leaving it."""
        return junction_exits_in(self.cells, coord)

    def _compute_spawn_points(self) -> List[Tuple[float, float]]:
        points: List[Tuple[float, float]] = []
        last_col = self.cols - 1
        last_row = self.rows - 1
        half = self.cell_size / 2.0
        for r in range(self.rows):
            cell = self.cells[r][0]
            if cell.kind is CellKind.ROAD_HORIZONTAL and cell.flow is Flow.WEST_TO_EAST:
                points.append((0.0, r * self.cell_size + half))
        for r in range(self.rows):
            cell = self.cells[r][last_col]
            if cell.kind is CellKind.ROAD_HORIZONTAL and cell.flow is Flow.EAST_TO_WEST:
                points.append((last_col * self.cell_size, r * self.cell_size + half))
        for c in range(self.cols):
            cell = self.cells[0][c]
            if cell.kind is CellKind.ROAD_VERTICAL and cell.flow is Flow.NORTH_TO_SOUTH:
                points.append((c * self.cell_size + half, 0.0))
        for c in range(self.cols):
            cell = self.cells[last_row][c]
            if cell.kind is CellKind.ROAD_VERTICAL and cell.flow is Flow.SOUTH_TO_NORTH:
                points.append((c * self.cell_size + half, last_row * self.cell_size))
        return points

    # ── queries ───────────────────────────────────────────────────────────

    def iter_cells(self):
        for row in self.cells:
            yield from row

    def cell_at_coord(self, col: int, row: int) -> Optional[Cell]:
        if 0 <= row < self.rows and 0 <= col < self.cols:
            return self.cells[row][col]
        return None

    def cell_at(self, x: float, y: float) -> Optional[Cell]:
        """Cell containing world point *(x, y)*, or ``None`` off the grid."""
        return self.cell_at_coord(math.floor(x / self.cell_size),
                                  math.floor(y / self.cell_size))

    def adjacent_cell(self, cell: Optional[Cell], direction: Direction) -> Optional[Cell]:
        """Neighbour one grid step from *cell* in *direction*."""
        if cell is None:
            return None
        dx, dy = direction.vector
        return self.cell_at_coord(cell.col + dx, cell.row + dy)

    def in_bounds(self, x: float, y: float) -> bool:
        return self.cell_at(x, y) is not None

    @staticmethod
    def is_drivable(cell: Optional[Cell]) -> bool:
        return cell is not None and cell.kind.is_drivable

    @staticmethod
    def initial_heading(cell: Optional[Cell]) -> Optional[Direction]:
        """Heading a car placed on *cell* should adopt, if resolvable."""
        if cell is None or not cell.is_road or cell.flow is None:
            return None
        return cell.flow.heading

    def junction(self, coord: GridCoord) -> Optional[JunctionState]:
        return self.junctions.get(coord)

    def ensure_junction(self, coord: GridCoord) -> JunctionState:
        """Return the record for *coord*, creating it from derived exits."""
        state = self.junctions.get(coord)
        if state is None:
            exits = self.derive_exits(coord)
            if not exits:
                log.warning("late junction record %s has no allowed exits", coord)
            state = JunctionState(coord, exits)
            self.junctions[coord] = state
        return state

    def allowed_exits(self, coord: GridCoord) -> Tuple[Direction, ...]:
        state = self.junctions.get(coord)
        return state.allowed_exits if state is not None else ()

    def spawn_points(self) -> List[Tuple[float, float]]:
        return list(self._spawn_points)

    def road_cells(self) -> List[Cell]:
        return list(self._road_cells)

    # ── mutation (reset control / debug overlay only) ─────────────────────

    def reset_junctions(self) -> None:
        """Drop every occupant and queue entry."""
        for state in self.junctions.values():
            state.clear()

    def clear_debug_marks(self) -> None:
        for cell in self.iter_cells():
            cell.debug_mark = ""


def junction_exits_in(cells: Sequence[Sequence[Cell]], coord: GridCoord) -> Tuple[Direction, ...]:
    """Allowed exits of the junction at *coord* in a ``cells[row][col]`` grid.

    Heading *d* is allowed when the neighbour in *d* is a road flowing in
    *d*, possibly after a run of further junction cells.
    """
    rows = len(cells)
    col, row = coord
    exits: List[Direction] = []
    for direction in Direction:
        dx, dy = direction.vector
        c, r = col + dx, row + dy
        while 0 <= r < rows and 0 <= c < len(cells[r]):
            cell = cells[r][c]
            if cell.is_junction:
                c, r = c + dx, r + dy
                continue
            if cell.is_road and cell.flow is not None and cell.flow.heading is direction:
                exits.append(direction)
            break
    return tuple(exits)


def _ordered(directions: Sequence[Direction]) -> Tuple[Direction, ...]:
    """De-duplicate and sort into declaration order (stable RNG draws)."""
    wanted = set(directions)
    return tuple(d for d in Direction if d in wanted)
