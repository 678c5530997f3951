"""Detection results and how they are merged.

Each detector produces one tagged result. The caller keeps a
``DetectionResults`` envelope and folds new results into it: results with a
different tag are combined, a result with the same tag replaces the old
value. There is no delta merge.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Optional, Tuple, Union

from ..core.model import BackingPlacement, BackingZone, Clash, DoorOpening, WallSegment

_TAGS = ("walls", "doors", "conflicts", "optimization")


@dataclass(frozen=True)
class WallsResult:
    walls: Tuple[WallSegment, ...]
    type: str = "walls"


@dataclass(frozen=True)
class DoorsResult:
    doors: Tuple[DoorOpening, ...]
    type: str = "doors"


@dataclass(frozen=True)
class ConflictsResult:
    conflicts: Tuple[Clash, ...]
    type: str = "conflicts"


@dataclass(frozen=True)
class OptimizationResult:
    """Optimized backings, plus the zones they were grouped into."""

    optimized_backings: Tuple[BackingPlacement, ...]
    zones: Tuple[BackingZone, ...] = ()
    type: str = "optimization"


DetectionResult = Union[WallsResult, DoorsResult, ConflictsResult, OptimizationResult]


@dataclass(frozen=True)
class DetectionResults:
    """Everything the detectors have reported so far.

    Attributes:
        walls: Latest wall detection result, if any.
        doors: Latest door detection result, if any.
        conflicts: Latest clash detection result, if any.
        optimization: Latest optimization result, if any.
    """

    walls: Optional[WallsResult] = None
    doors: Optional[DoorsResult] = None
    conflicts: Optional[ConflictsResult] = None
    optimization: Optional[OptimizationResult] = None

    @property
    def types(self) -> Tuple[str, ...]:
        """Tags present in the envelope, in a fixed order."""
        return tuple(
            name
            for name in _TAGS
            if getattr(self, name) is not None
        )


def merge_results(
    current: Optional[DetectionResults],
    update: Union[DetectionResult, DetectionResults],
) -> DetectionResults:
    """Merge a new result (or a whole envelope) into ``current``.

    Args:
        current: Existing envelope, or None to start a new one.
        update: A single tagged result, or another envelope whose present
            fields are merged one by one.

    Returns:
        A new envelope; ``current`` is left untouched.

    Raises:
        ValueError: If a result carries an unknown tag.
    """
    if current is None:
        current = DetectionResults()

    if isinstance(update, DetectionResults):
        merged = current
        for name in update.types:
            merged = merge_results(merged, getattr(update, name))
        return merged

    if update.type not in _TAGS:
        raise ValueError(f"Unknown detection result type: {update.type}")
    return replace(current, **{update.type: update})


def aggregate(results: Iterable[Union[DetectionResult, DetectionResults]]) -> DetectionResults:
    """Fold a sequence of results into one envelope, last write wins."""
    merged = DetectionResults()
    for result in results:
        merged = merge_results(merged, result)
    return merged
