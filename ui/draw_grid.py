"""
ui/draw_grid.py
===============
Renders the road grid: background, road strips, junction squares and
buildings, plus the debug overlay (flow arrows, junction occupancy and
queue length, allowed exits, look-ahead marks, spawn points).

The static layer is cached per debug mode; only junction state and cell
marks are redrawn every frame.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional, Tuple

import pygame

from traffic.network import Cell, CellKind, Direction, Flow, RoadNetwork

from .helpers import draw_alpha_rect, render_text

# Arrow rotation (radians) per flow; 0 points south on screen.
_FLOW_ANGLE: Dict[Flow, float] = {
    Flow.NORTH_TO_SOUTH: 0.0,
    Flow.SOUTH_TO_NORTH: math.pi,
    Flow.WEST_TO_EAST: 3 * math.pi / 2,
    Flow.EAST_TO_WEST: math.pi / 2,
}


def _triangle(cx: float, cy: float, size: float, angle: float) -> Tuple[Tuple[float, float], ...]:
    """Equilateral triangle centred on *(cx, cy)*, tip rotated by *angle*."""
    r = size / math.sqrt(3)
    points = []
    for k in range(3):
        a = angle + math.pi / 2 + k * 2 * math.pi / 3
        points.append((cx + r * math.cos(a), cy + r * math.sin(a)))
    return tuple(points)


class GridRenderer:
    """Mixin that draws the :class:`~traffic.network.RoadNetwork`."""

    _grid_cache: Optional[pygame.Surface] = None
    _grid_cache_debug: Optional[bool] = None

    def draw_grid(
        self,
        surface: pygame.Surface,
        network: RoadNetwork,
        junctions: Mapping[Any, Mapping[str, Any]],
    ) -> None:
        """Blit the static layer, then the per-frame debug annotations."""
        if self._grid_cache is None or self._grid_cache_debug != self.show_debug:
            self._grid_cache = self._render_static(network, self.show_debug)
            self._grid_cache_debug = self.show_debug
        surface.blit(self._grid_cache, (0, 0))

        if not self.show_debug:
            return
        for state in network.junctions.values():
            self._draw_junction_state(surface, network, state.coord, junctions.get(state.coord))
        for cell in network.iter_cells():
            if cell.debug_mark:
                self._draw_debug_mark(surface, network, cell)
        radius = max(1, int(network.cell_size / 8))
        for x, y in network.spawn_points():
            pygame.draw.circle(surface, self.DEBUG_SPAWN_COLOR, (int(x), int(y)), radius)

    # ── static layer ──────────────────────────────────────────────────────

    def _render_static(self, network: RoadNetwork, debug: bool) -> pygame.Surface:
        layer = pygame.Surface((int(network.width), int(network.height)))
        layer.fill(self.BG_COLOR)
        for cell in network.iter_cells():
            self._draw_cell(layer, network, cell, debug)
        return layer

    def _draw_cell(self, surface: pygame.Surface, network: RoadNetwork, cell: Cell, debug: bool) -> None:
        size = network.cell_size
        rw = network.road_width
        x, y = cell.col * size, cell.row * size
        cx, cy = cell.center

        if cell.kind is CellKind.EMPTY:
            if debug:
                rect = pygame.Rect(int(x), int(y), int(size), int(size))
                pygame.draw.rect(surface, self.DEBUG_EMPTY_FILL, rect)
                pygame.draw.rect(surface, self.DEBUG_EMPTY_OUTLINE, rect, width=1)
        elif cell.kind is CellKind.ROAD_HORIZONTAL:
            pygame.draw.rect(surface, self.ROAD_COLOR, (int(x), int(cy - rw / 2), int(size), int(rw)))
        elif cell.kind is CellKind.ROAD_VERTICAL:
            pygame.draw.rect(surface, self.ROAD_COLOR, (int(cx - rw / 2), int(y), int(rw), int(size)))
        elif cell.kind is CellKind.JUNCTION:
            color = self.DEBUG_JUNCTION_FILL if debug else self.ROAD_COLOR
            pygame.draw.rect(surface, color, (int(cx - rw / 2), int(cy - rw / 2), int(rw), int(rw)))
        elif cell.kind is CellKind.BUILDING:
            color = self.BUILDING_COLORS[(cell.color or 0) % len(self.BUILDING_COLORS)]
            pygame.draw.rect(surface, color, (int(x), int(y), int(size), int(size)))

        if debug and cell.flow is not None:
            pygame.draw.polygon(
                surface, self.DEBUG_ARROW_COLOR, _triangle(cx, cy, rw / 2, _FLOW_ANGLE[cell.flow])
            )

    # ── per-frame debug layer ─────────────────────────────────────────────

    def _draw_junction_state(
        self,
        surface: pygame.Surface,
        network: RoadNetwork,
        coord: Tuple[int, int],
        record: Optional[Mapping[str, Any]],
    ) -> None:
        cell = network.cell_at_coord(*coord)
        size = network.cell_size
        rw = network.road_width
        cx, cy = cell.center

        if record is not None and record.get("occupied"):
            draw_alpha_rect(
                surface,
                self.DEBUG_JUNCTION_BUSY,
                pygame.Rect(int(cell.col * size), int(cell.row * size), int(size), int(size)),
            )
        pygame.draw.circle(surface, self.DEBUG_JUNCTION_DOT, (int(cx), int(cy)), max(1, int(rw / 4)))

        queue_len = len(record["queue"]) if record is not None else 0
        if self.font_tiny is not None:
            render_text(surface, self.font_tiny, str(queue_len), (int(cx), int(cy)),
                        (255, 255, 255), anchor="center")

        for direction in network.allowed_exits(coord):
            dx, dy = direction.vector
            pygame.draw.circle(
                surface,
                self.DEBUG_JUNCTION_DOT,
                (int(cx + dx * rw / 2), int(cy + dy * rw / 2)),
                max(1, int(rw / 8)),
            )

    def _draw_debug_mark(self, surface: pygame.Surface, network: RoadNetwork, cell: Cell) -> None:
        size = int(network.cell_size)
        x, y = int(cell.col * network.cell_size), int(cell.row * network.cell_size)
        if cell.debug_mark == "junction":
            rect = pygame.Rect(x, y, size, size)
            pygame.draw.rect(surface, self.DEBUG_MARK_JUNCTION, rect)
            pygame.draw.rect(surface, self.DEBUG_MARK_OUTLINE, rect, width=2)
        else:
            pygame.draw.rect(surface, self.DEBUG_MARK_OUTLINE, (x + 1, y + 1, size - 3, size - 3), width=2)


def mark_look_ahead(network: RoadNetwork, car: Optional[Mapping[str, Any]]) -> None:
    """Annotate the cell one step ahead of *car* for the debug overlay.

    Junction cells get ``"junction"``, anything else ``"mark"``.  Marks from
    the previous frame are cleared first.
    """
    network.clear_debug_marks()
    if car is None:
        return
    here = network.cell_at(car["x"], car["y"])
    ahead = network.adjacent_cell(here, Direction(car["direction"]))
    if ahead is not None:
        ahead.debug_mark = "junction" if ahead.is_junction else "mark"
