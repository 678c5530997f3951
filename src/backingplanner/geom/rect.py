"""Axis-aligned rectangle and point math.

All coordinates are floating point inches and nothing here rounds. Callers
are expected to have rejected non-finite input already.
"""

from __future__ import annotations

import math
from typing import Iterable, Tuple

from ..core.model import Point, Rect


def overlaps(a: Rect, b: Rect) -> bool:
    """Check whether the interiors of two rectangles intersect.

    Touching edges do not count as overlap.

    Args:
        a: First rectangle.
        b: Second rectangle.

    Returns:
        True if the rectangles share interior area.
    """
    return a.x < b.right and b.x < a.right and a.y < b.top and b.y < a.top


def distance(p: Point, q: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(q.x - p.x, q.y - p.y)


def expand(r: Rect, margin: float) -> Rect:
    """Grow a rectangle by ``margin`` on every side."""
    return Rect(r.x - margin, r.y - margin, r.width + 2 * margin, r.height + 2 * margin)


def bounding_rect(rects: Iterable[Rect]) -> Rect:
    """Smallest rectangle covering every rectangle in ``rects``.

    Raises:
        ValueError: If ``rects`` is empty.
    """
    rects = list(rects)
    if not rects:
        raise ValueError("bounding_rect() requires at least one rectangle")
    min_x = min(r.x for r in rects)
    min_y = min(r.y for r in rects)
    max_x = max(r.right for r in rects)
    max_y = max(r.top for r in rects)
    return Rect(min_x, min_y, max_x - min_x, max_y - min_y)


def gap(a: Rect, b: Rect) -> float:
    """Axis-aligned separation: the larger of the x and y gaps, 0 if they meet.

    ``overlaps(expand(a, m), b)`` holds for non-overlapping rectangles
    exactly when ``gap(a, b) < m``.
    """
    dx = max(0.0, max(a.x, b.x) - min(a.right, b.right))
    dy = max(0.0, max(a.y, b.y) - min(a.top, b.top))
    return max(dx, dy)


def minimum_translation(fixed: Rect, moving: Rect) -> Tuple[float, float]:
    """Smallest translation of ``moving`` that removes its overlap with ``fixed``.

    The rectangle is pushed out along the axis of least penetration, away
    from the center of ``fixed``.

    Args:
        fixed: Rectangle that stays in place.
        moving: Rectangle to be moved.

    Returns:
        ``(dx, dy)`` with exactly one non-zero component, or ``(0.0, 0.0)``
        when the rectangles do not overlap.
    """
    if not overlaps(fixed, moving):
        return 0.0, 0.0

    push_right = fixed.right - moving.x
    push_left = moving.right - fixed.x
    push_up = fixed.top - moving.y
    push_down = moving.top - fixed.y

    # Ties push toward positive x / y
    dx = push_right if push_right <= push_left else -push_left
    dy = push_up if push_up <= push_down else -push_down

    if abs(dx) <= abs(dy):
        return dx, 0.0
    return 0.0, dy
