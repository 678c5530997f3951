"""Core data models for backing planning."""

from .model import (
    BackingPlacement,
    BackingZone,
    Clash,
    Dimension,
    Dimensions,
    DoorOpening,
    Location,
    Opening,
    Point,
    Rect,
    WallSegment,
)
from .rules import SPAN_RULES, SpanRule, span_rule

__all__ = [
    "BackingPlacement",
    "BackingZone",
    "Clash",
    "Dimension",
    "Dimensions",
    "DoorOpening",
    "Location",
    "Opening",
    "Point",
    "Rect",
    "WallSegment",
    "SPAN_RULES",
    "SpanRule",
    "span_rule",
]
