"""Input validation for the detection engine.

Two kinds of problem are handled here. Call-boundary errors (a bad grouping
distance, a malformed backing handed to the optimizer) raise
``InvalidInput``. Per-record problems found during clash detection are only
described, so the evaluator can turn them into clashes and keep going.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

from ..core.model import BackingPlacement, WallSegment


class InvalidInput(ValueError):
    """Raised when an engine call receives input it cannot work with."""

    pass


def _finite(*values: float) -> bool:
    try:
        return all(math.isfinite(v) for v in values)
    except TypeError:
        return False


def backing_problem(backing: BackingPlacement) -> Optional[str]:
    """Describe what is wrong with a backing, if anything.

    Args:
        backing: The placement to check.

    Returns:
        A short description of the first problem found, or None if the
        backing is well formed.
    """
    d = backing.dimensions
    loc = backing.location

    if not _finite(d.width, d.height, d.thickness):
        return "dimensions must be finite numbers"
    if d.width <= 0 or d.height <= 0 or d.thickness <= 0:
        return (
            f"dimensions must be positive, got {d.width} x {d.height} x {d.thickness}"
        )
    if not _finite(loc.x, loc.y, loc.z):
        return "location must be finite numbers"
    if loc.z < 0:
        return f"mounting height must be >= 0, got {loc.z}"
    return None


def wall_problem(wall: WallSegment) -> Optional[str]:
    """Describe what is wrong with a wall segment, if anything."""
    coords = (wall.start_point.x, wall.start_point.y, wall.end_point.x, wall.end_point.y)
    if not _finite(*coords, wall.thickness):
        return "coordinates and thickness must be finite numbers"
    if wall.thickness < 0:
        return f"thickness must be >= 0, got {wall.thickness}"
    return None


def validate_backings(backings: Sequence[BackingPlacement]) -> None:
    """Reject a backing list that contains malformed or duplicate records.

    Raises:
        InvalidInput: On the first malformed backing or repeated id.
    """
    seen = set()
    for backing in backings:
        problem = backing_problem(backing)
        if problem is not None:
            raise InvalidInput(f"Backing {backing.id!r} is invalid: {problem}")
        if backing.id in seen:
            raise InvalidInput(f"Duplicate backing id: {backing.id!r}")
        seen.add(backing.id)


def validate_grouping_distance(grouping_distance: float) -> None:
    """Reject a grouping distance that is negative or not a number.

    Negative values are rejected rather than clamped.
    """
    if isinstance(grouping_distance, bool) or not isinstance(grouping_distance, (int, float)):
        raise InvalidInput(f"grouping_distance must be a number, got {grouping_distance!r}")
    if math.isnan(grouping_distance):
        raise InvalidInput("grouping_distance must not be NaN")
    if grouping_distance < 0:
        raise InvalidInput(f"grouping_distance must be >= 0, got {grouping_distance}")


def split_valid(backings: Sequence[BackingPlacement]) -> tuple[List[BackingPlacement], List[tuple[BackingPlacement, str]]]:
    """Partition backings into usable records and rejected ones.

    The first occurrence of an id is kept; later duplicates are rejected.

    Returns:
        ``(valid, rejected)`` where ``rejected`` pairs each bad backing
        with the reason it was set aside. Input order is preserved.
    """
    valid = []
    rejected = []
    seen = set()
    for backing in backings:
        problem = backing_problem(backing)
        if problem is None and backing.id in seen:
            problem = "duplicate backing id"
        if problem is not None:
            rejected.append((backing, problem))
            continue
        seen.add(backing.id)
        valid.append(backing)
    return valid, rejected
