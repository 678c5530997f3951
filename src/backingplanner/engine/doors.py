"""Door detection from wall openings.

Image-based wall extraction happens outside the engine; once walls exist,
their openings are filtered by width and reported as ``DoorOpening``
records that clearance checks and the drawing editor can use.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from ..config import DEFAULT_DOOR_HEIGHT, DOOR_CLEARANCE, DoorSettings
from ..core.model import DoorOpening, WallSegment

LOGGER = logging.getLogger(__name__)


def detect_doors(
    walls: Sequence[WallSegment], settings: DoorSettings | None = None
) -> List[DoorOpening]:
    """Report the door (and optionally window) openings found on walls.

    A door is kept when its width lies within
    ``[settings.min_width, settings.max_width]``. Windows are kept, whatever
    their width, only with ``settings.include_windows``.

    Args:
        walls: Wall segments with their openings.
        settings: Width filters and options; defaults to ``DoorSettings()``.

    Returns:
        Openings in wall order, then opening order, with ids
        ``door-<wall id>-<opening index>``.
    """
    if settings is None:
        settings = DoorSettings()

    doors = []
    for wall in walls:
        for index, opening in enumerate(wall.openings):
            if opening.type == "window" and not settings.include_windows:
                continue
            if opening.type == "door" and not settings.min_width <= opening.width <= settings.max_width:
                LOGGER.debug(
                    "Ignoring door %d on wall %s: width %.2f outside [%.2f, %.2f]",
                    index,
                    wall.id,
                    opening.width,
                    settings.min_width,
                    settings.max_width,
                )
                continue

            swing = None
            if settings.detect_swing_direction and opening.type == "door":
                swing = opening.swing or "left"

            doors.append(
                DoorOpening(
                    id=f"door-{wall.id}-{index}",
                    wall_id=wall.id,
                    position=opening.position,
                    width=opening.width,
                    height=opening.height if opening.height > 0 else DEFAULT_DOOR_HEIGHT,
                    type=opening.type,
                    swing_direction=swing,
                    clearance_required=DOOR_CLEARANCE,
                )
            )

    LOGGER.info("Detected %d opening(s) on %d wall(s)", len(doors), len(walls))
    return doors
