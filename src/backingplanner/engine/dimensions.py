"""Dimension annotations from backings to walls.

Every backing gets one linear dimension from its plan location to the
closest point of the nearest wall centerline, so installers can locate it
from a wall they can measure from.
"""

from __future__ import annotations

import logging
import math
from typing import List, Sequence

from shapely.geometry import LineString
from shapely.geometry import Point as ShapelyPoint
from shapely.ops import nearest_points

from ..core.model import BackingPlacement, Dimension, Point, WallSegment
from .validators import wall_problem

LOGGER = logging.getLogger(__name__)


def _wall_geom(wall: WallSegment):
    start = (wall.start_point.x, wall.start_point.y)
    end = (wall.end_point.x, wall.end_point.y)
    # A zero-length wall is measured to as a point
    if start == end:
        return ShapelyPoint(start)
    return LineString([start, end])


def generate_dimensions(
    backings: Sequence[BackingPlacement], walls: Sequence[WallSegment]
) -> List[Dimension]:
    """Dimension every backing to its nearest wall.

    Args:
        backings: Backing placements to dimension.
        walls: Candidate walls; on equal distance the earlier wall wins.

    Returns:
        Dimensions in backing order. Empty when there is no usable wall.
        Backings with a non-finite location are skipped, so ids may have gaps.
    """
    usable = []
    for wall in walls:
        problem = wall_problem(wall)
        if problem is not None:
            LOGGER.warning("Skipping wall %r: %s", wall.id, problem)
            continue
        usable.append((wall, _wall_geom(wall)))
    if not usable:
        return []

    dimensions = []
    for index, backing in enumerate(backings):
        loc = backing.location
        if not (math.isfinite(loc.x) and math.isfinite(loc.y)):
            LOGGER.warning("Skipping backing %r: location must be finite numbers", backing.id)
            continue

        origin = ShapelyPoint(loc.x, loc.y)
        wall, geom = min(usable, key=lambda item: origin.distance(item[1]))
        _, closest = nearest_points(origin, geom)
        value = origin.distance(geom)
        dimensions.append(
            Dimension(
                id=f"dim-{index}",
                backing_id=backing.id,
                wall_id=wall.id,
                start=Point(loc.x, loc.y),
                end=Point(closest.x, closest.y),
                value=value,
                label=f'{value:.2f}"',
            )
        )

    LOGGER.info("Generated %d dimension(s) against %d wall(s)", len(dimensions), len(usable))
    return dimensions
