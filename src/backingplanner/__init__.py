"""Backing Planner - clash detection and placement optimization for wall backing."""

__version__ = "0.1.0"

from .core.model import BackingPlacement, BackingZone, Clash, Point, Rect, WallSegment
from .engine.clashes import detect_clashes
from .engine.optimizer import optimize_backings

__all__ = [
    "BackingPlacement",
    "BackingZone",
    "Clash",
    "Point",
    "Rect",
    "WallSegment",
    "detect_clashes",
    "optimize_backings",
]
