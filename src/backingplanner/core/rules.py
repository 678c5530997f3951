"""Rule tables for backing evaluation.

Structural checks are table lookups keyed by backing type rather than load
calculations. Each entry gives the longest unsupported span a piece of that
material may bridge and whether it must always sit on a structural wall.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class SpanRule:
    """Span limits for one backing type.

    Attributes:
        max_span: Longest side, in inches, allowed without structural support.
        requires_structural: Whether the type always needs a structural wall.
        strength: Relative load class, used to pick the stronger of two types.
    """

    max_span: float
    requires_structural: bool
    strength: int


SPAN_RULES: Dict[str, SpanRule] = {
    "blocking": SpanRule(max_span=16.0, requires_structural=False, strength=0),
    "2x4": SpanRule(max_span=24.0, requires_structural=False, strength=1),
    "2x6": SpanRule(max_span=32.0, requires_structural=False, strength=2),
    "2x8": SpanRule(max_span=48.0, requires_structural=False, strength=3),
    "2x10": SpanRule(max_span=64.0, requires_structural=False, strength=4),
    "3/4_plywood": SpanRule(max_span=48.0, requires_structural=False, strength=2),
    "steel_plate": SpanRule(max_span=24.0, requires_structural=True, strength=5),
}

# Applied to backing codes missing from the table
DEFAULT_SPAN_RULE = SpanRule(max_span=24.0, requires_structural=False, strength=1)

# Stock sizes a backing is cut from, in inches
STANDARD_WIDTHS: Tuple[float, ...] = (12, 16, 24, 32, 48, 64, 96)
STANDARD_HEIGHTS: Tuple[float, ...] = (12, 16, 24, 32, 48, 64, 96)


def span_rule(backing_type: str) -> SpanRule:
    """Look up the span rule for a backing type.

    Args:
        backing_type: Lumber/material code.

    Returns:
        The matching rule, or ``DEFAULT_SPAN_RULE`` for unknown codes.
    """
    return SPAN_RULES.get(backing_type, DEFAULT_SPAN_RULE)


def stronger_type(first: str, second: str) -> str:
    """Return whichever backing type has the higher load class."""
    if span_rule(second).strength > span_rule(first).strength:
        return second
    return first


def suggest_upgrade(backing_type: str, span: float) -> str | None:
    """Find the weakest non-structural type able to bridge ``span``.

    Args:
        backing_type: Current backing type.
        span: Required unsupported span in inches.

    Returns:
        A backing type code, or None if no table entry is long enough.
    """
    current = span_rule(backing_type)
    candidates = [
        (rule.strength, name)
        for name, rule in SPAN_RULES.items()
        if not rule.requires_structural
        and rule.max_span >= span
        and rule.strength >= current.strength
        and name != backing_type
    ]
    if not candidates:
        return None
    return min(candidates)[1]
