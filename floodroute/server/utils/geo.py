"""Planar geometry helpers shared across routing modules."""

from __future__ import annotations

import math

Coordinate = tuple[float, float]  # (x, y) in map units


def euclidean_distance(a: Coordinate, b: Coordinate) -> float:
    """Return the straight-line distance between two map points."""
    return math.hypot(a[0] - b[0], a[1] - b[1])
