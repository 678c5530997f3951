"""Spatial indexing for pairwise geometry checks.

Pairwise rules are quadratic if every pair is tested. These helpers use a
shapely STRtree as a broad phase: they return only the index pairs whose
(grown) envelopes touch, and the caller applies the exact test.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from shapely.geometry import Point as ShapelyPoint
from shapely.geometry import box
from shapely.strtree import STRtree

from ..core.model import Point, Rect
from .rect import distance


def _rect_geom(r: Rect, margin: float = 0.0):
    return box(r.x - margin, r.y - margin, r.right + margin, r.top + margin)


def candidate_pairs(rects: Sequence[Rect], margin: float = 0.0) -> List[Tuple[int, int]]:
    """Index pairs whose rectangles, grown by ``margin``, may intersect.

    Args:
        rects: Rectangles to index.
        margin: Extra distance to grow each query rectangle by.

    Returns:
        Sorted list of ``(i, j)`` pairs with ``i < j``.
    """
    if len(rects) < 2:
        return []

    geoms = [_rect_geom(r) for r in rects]
    tree = STRtree(geoms)

    pairs = set()
    for i, r in enumerate(rects):
        # query() returns indices, not geometries
        for j in tree.query(_rect_geom(r, margin)):
            j = int(j)
            if j > i:
                pairs.add((i, j))
    return sorted(pairs)


def points_within(points: Sequence[Point], radius: float) -> List[Tuple[int, int]]:
    """Index pairs of points no further apart than ``radius``.

    Args:
        points: Points to index.
        radius: Maximum Euclidean distance, inclusive.

    Returns:
        Sorted list of ``(i, j)`` pairs with ``i < j``.
    """
    if len(points) < 2:
        return []

    tree = STRtree([ShapelyPoint(p.x, p.y) for p in points])

    pairs = []
    for i, p in enumerate(points):
        window = box(p.x - radius, p.y - radius, p.x + radius, p.y + radius)
        for j in tree.query(window):
            j = int(j)
            if j > i and distance(p, points[j]) <= radius:
                pairs.append((i, j))
    return sorted(pairs)
