#!/usr/bin/env python3
"""
traffic/geometry.py
===================
Low-level vector helpers used by :mod:`traffic.car`, :mod:`traffic.collision`
and :mod:`traffic.spawner`.

Keeping these in a separate module avoids circular imports and makes unit
testing straightforward.  All coordinates are screen-space: *x* grows to the
east, *y* grows to the south.
"""

from __future__ import annotations

import math
from typing import Tuple


def distance(ax: float, ay: float, bx: float, by: float) -> float:
    """Euclidean distance between two points."""
    return math.hypot(bx - ax, by - ay)


def unit_vector(dx: float, dy: float) -> Tuple[float, float]:
    """Normalise *(dx, dy)*.  The zero vector stays zero."""
    length = math.hypot(dx, dy)
    if length < 1e-9:
        return (0.0, 0.0)
    return (dx / length, dy / length)


def forward_alignment(
    hx: float, hy: float, ax: float, ay: float, bx: float, by: float,
) -> float:
    """Dot product between heading *(hx, hy)* and the unit bearing from
    *(ax, ay)* to *(bx, by)*.

    ``1.0`` means *b* lies dead ahead, ``0.0`` abeam (or coincident),
    ``-1.0`` directly behind.
    """
    ux, uy = unit_vector(hx, hy)
    rx, ry = unit_vector(bx - ax, by - ay)
    return ux * rx + uy * ry


def along_heading(
    x: float, y: float, hx: float, hy: float, tx: float, ty: float,
) -> float:
    """Signed distance from *(x, y)* to target *(tx, ty)* measured along the
    unit heading *(hx, hy)*.

    Positive → the target is still ahead.
    Zero / negative → the point has reached or passed it.
    """
    return (tx - x) * hx + (ty - y) * hy
