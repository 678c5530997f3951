"""
Configuration for the backing planner engine.

Module-level constants hold the defaults; the settings dataclasses below are
what callers pass to the detectors. Every ``from_dict`` accepts snake_case
keys as well as the camelCase keys the drawing editor sends.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping

# Optimizer
DEFAULT_GROUPING_DISTANCE = 24.0  # inches between backing centers

# Clash detection
DOOR_CLEARANCE = 36.0  # accessibility clearance in front of a door
DEFAULT_DOOR_HEIGHT = 84.0  # standard door height, also the swing height range
MIN_SPACING = 3.0  # gap required between backings of the same type
SUPPORT_TOLERANCE = 2.0  # how close a structural wall must be to carry a backing

# Door detection
DOOR_MIN_WIDTH = 24.0
DOOR_MAX_WIDTH = 48.0


def _snake_case(key: str) -> str:
    out = []
    for ch in key:
        if ch.isupper():
            out.append("_")
            out.append(ch.lower())
        else:
            out.append(ch)
    return "".join(out)


def _settings_kwargs(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
    known = {f.name for f in fields(cls)}
    kwargs = {}
    for key, value in data.items():
        name = _snake_case(key)
        if name not in known:
            raise ValueError(f"Unknown {cls.__name__} option: {key}")
        kwargs[name] = value
    return kwargs


def _check_distance(name: str, value: float) -> None:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if math.isnan(value) or value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")


@dataclass(frozen=True)
class ClashSettings:
    """Toggles and thresholds for clash detection.

    Attributes:
        check_overlaps: Run the backing overlap rule.
        check_clearances: Run the door clearance rule.
        check_spacing: Run the minimum spacing rule.
        check_structural: Run the span table rule.
        door_clearance: Clearance grown around each door opening.
        min_spacing: Gap required between backings of the same type.
        door_height: Swing height used when an opening has no height.
    """

    check_overlaps: bool = True
    check_clearances: bool = True
    check_spacing: bool = True
    check_structural: bool = True
    door_clearance: float = DOOR_CLEARANCE
    min_spacing: float = MIN_SPACING
    door_height: float = DEFAULT_DOOR_HEIGHT

    def __post_init__(self) -> None:
        _check_distance("door_clearance", self.door_clearance)
        _check_distance("min_spacing", self.min_spacing)
        _check_distance("door_height", self.door_height)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ClashSettings":
        return cls(**_settings_kwargs(cls, data))


@dataclass(frozen=True)
class DoorSettings:
    """Filters applied when turning wall openings into doors."""

    min_width: float = DOOR_MIN_WIDTH
    max_width: float = DOOR_MAX_WIDTH
    detect_swing_direction: bool = True
    include_windows: bool = False

    def __post_init__(self) -> None:
        _check_distance("min_width", self.min_width)
        _check_distance("max_width", self.max_width)
        if self.min_width > self.max_width:
            raise ValueError(
                f"min_width ({self.min_width}) must not exceed max_width ({self.max_width})"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DoorSettings":
        return cls(**_settings_kwargs(cls, data))


@dataclass(frozen=True)
class OptimizationSettings:
    """Options for grouping backings into installation zones.

    Attributes:
        grouping_distance: Maximum center distance for two backings to join.
        minimize_waste: Cut mixed zones from the type covering most area.
        optimize_for_speed: Find neighbours through the spatial index
            instead of testing every pair.
        maintain_structural: Never merge structural-only types with others,
            and cut mixed zones from the strongest member type.
        allow_combining: Allow different backing types in one zone.
    """

    grouping_distance: float = DEFAULT_GROUPING_DISTANCE
    minimize_waste: bool = True
    optimize_for_speed: bool = False
    maintain_structural: bool = True
    allow_combining: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OptimizationSettings":
        return cls(**_settings_kwargs(cls, data))
