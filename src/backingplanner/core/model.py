"""Core data models for backing planning.

This module defines the fundamental data structures used to describe
backing placements on a drawing, the walls and openings they sit on, and
the clashes and installation zones the engine produces from them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

CLASH_TYPES = ("backing_overlap", "door_clearance", "spacing", "structural")
SEVERITIES = ("error", "warning")


@dataclass(frozen=True)
class Point:
    """Represents a 2D point on the drawing plane.

    Attributes:
        x: The x-coordinate in inches.
        y: The y-coordinate in inches.
    """

    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    """Axis-aligned bounding box.

    Attributes:
        x: Left edge.
        y: Bottom edge.
        width: Extent along x, never negative.
        height: Extent along y, never negative.
    """

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2.0, self.y + self.height / 2.0)


@dataclass(frozen=True)
class Dimensions:
    """Size of a piece of backing in inches."""

    width: float
    height: float
    thickness: float


@dataclass(frozen=True)
class Location:
    """Placement of a backing; z is the height above finished floor."""

    x: float
    y: float
    z: float


@dataclass(frozen=True)
class BackingPlacement:
    """A single piece of required blocking.

    Attributes:
        id: Unique identifier, stable across recomputation.
        component_id: The fixture this backing supports.
        backing_type: Lumber/material code, e.g. "2x6" or "steel_plate".
        dimensions: Width, height and thickness in inches.
        location: Plan position plus mounting height (AFF).
        orientation: Rotation in degrees, informational only.
        status: One of "ai_generated", "user_modified", "approved".
        optimized: Whether the optimizer has assigned a zone.
        zone_id: The zone this backing belongs to, once grouped.
    """

    id: str
    component_id: str
    backing_type: str
    dimensions: Dimensions
    location: Location
    orientation: float = 0.0
    status: str = "ai_generated"
    optimized: bool = False
    zone_id: str | None = None

    @property
    def rect(self) -> Rect:
        """Plan-view footprint of the backing."""
        return Rect(
            self.location.x,
            self.location.y,
            self.dimensions.width,
            self.dimensions.height,
        )


@dataclass(frozen=True)
class Opening:
    """A door or window cut into a wall.

    Attributes:
        position: Center of the opening on the wall line.
        width: Opening width measured along the wall.
        height: Opening height above finished floor.
        type: "door" or "window".
        swing: Side of the wall the leaf swings into ("left" or "right"
            relative to the wall direction), None when unknown.
    """

    position: Point
    width: float
    height: float
    type: str = "door"
    swing: str | None = None


@dataclass(frozen=True)
class WallSegment:
    """Represents a wall segment on the drawing.

    Attributes:
        id: Unique identifier for the wall.
        start_point: Starting point of the wall centerline.
        end_point: Ending point of the wall centerline.
        thickness: Wall thickness in inches.
        type: One of "exterior", "interior", "partition", "structural".
        openings: Doors and windows cut into this wall.
    """

    id: str
    start_point: Point
    end_point: Point
    thickness: float
    type: str = "interior"
    openings: tuple[Opening, ...] = field(default_factory=tuple)

    @property
    def length(self) -> float:
        return math.hypot(
            self.end_point.x - self.start_point.x,
            self.end_point.y - self.start_point.y,
        )

    @property
    def is_horizontal(self) -> bool:
        return abs(self.end_point.y - self.start_point.y) <= abs(
            self.end_point.x - self.start_point.x
        )

    @property
    def is_vertical(self) -> bool:
        return not self.is_horizontal

    @property
    def footprint(self) -> Rect:
        """Plan rect of the wall body, the centerline grown by half the thickness."""
        half = self.thickness / 2.0
        min_x = min(self.start_point.x, self.end_point.x)
        min_y = min(self.start_point.y, self.end_point.y)
        max_x = max(self.start_point.x, self.end_point.x)
        max_y = max(self.start_point.y, self.end_point.y)
        if self.is_horizontal:
            return Rect(min_x, min_y - half, max_x - min_x, (max_y - min_y) + 2 * half)
        return Rect(min_x - half, min_y, (max_x - min_x) + 2 * half, max_y - min_y)


@dataclass(frozen=True)
class DoorOpening:
    """A door (or window) reported by door detection.

    Attributes:
        id: Identifier of the form "door-<wall id>-<index>".
        wall_id: ID of the wall the opening was found on.
        position: Center of the opening.
        width: Opening width in inches.
        height: Opening height in inches.
        type: "door" or "window".
        swing_direction: "left", "right" or None when not requested.
        clearance_required: Clearance that must stay free in front of it.
    """

    id: str
    wall_id: str
    position: Point
    width: float
    height: float
    type: str
    swing_direction: str | None
    clearance_required: float


@dataclass(frozen=True)
class Clash:
    """A detected conflict between placed elements.

    Attributes:
        id: Deterministic identifier derived from the type and items.
        type: One of "backing_overlap", "door_clearance", "spacing", "structural".
        severity: "error" blocks sign-off, "warning" is advisory.
        items: IDs of the elements involved, never empty.
        resolution: Human-readable suggestion, if any.
    """

    id: str
    type: str
    severity: str
    items: tuple[str, ...]
    resolution: str | None = None

    def __post_init__(self) -> None:
        if not self.items:
            raise ValueError(f"Clash {self.id} must reference at least one item")
        if self.type not in CLASH_TYPES:
            raise ValueError(f"Unknown clash type: {self.type}")
        if self.severity not in SEVERITIES:
            raise ValueError(f"Unknown clash severity: {self.severity}")

    @property
    def blocks_signoff(self) -> bool:
        return self.severity == "error"


@dataclass(frozen=True)
class Dimension:
    """A linear dimension from a backing to the nearest wall.

    Attributes:
        id: "dim-<n>", n being the backing's position in the input.
        backing_id: The backing being dimensioned.
        wall_id: The wall measured to.
        start: Backing location on the plan.
        end: Closest point on the wall centerline.
        value: Distance between ``start`` and ``end`` in inches.
        label: ``value`` formatted for the drawing, e.g. '18.00"'.
        type: Dimension style; only "linear" is produced.
    """

    id: str
    backing_id: str
    wall_id: str
    start: Point
    end: Point
    value: float
    label: str
    type: str = "linear"


@dataclass(frozen=True)
class BackingZone:
    """A cluster of backings grouped for combined cutting and installation.

    Attributes:
        id: Zone identifier, "zone-<n>" in discovery order.
        backings: Member placements in input order.
        bounds: Minimum rect covering every member rect.
        center: Centroid of ``bounds``.
        total_area: Sum of member rect areas.
        material_type: Backing type the zone is cut from.
    """

    id: str
    backings: tuple[BackingPlacement, ...]
    bounds: Rect
    center: Point
    total_area: float
    material_type: str

    @property
    def backing_ids(self) -> tuple[str, ...]:
        return tuple(b.id for b in self.backings)

    @property
    def bounds_area(self) -> float:
        return self.bounds.area

    @property
    def waste(self) -> float:
        """Area of the bounds not covered by member backings."""
        return max(0.0, self.bounds_area - self.total_area)
