"""Geometry utilities for backing planning.

This module provides axis-aligned rectangle math and a spatial index used
to keep pairwise checks away from quadratic cost on large drawings.
"""

from .rect import bounding_rect, distance, expand, gap, minimum_translation, overlaps
from .spatial import candidate_pairs, points_within

__all__ = [
    "overlaps",
    "distance",
    "expand",
    "gap",
    "bounding_rect",
    "minimum_translation",
    "candidate_pairs",
    "points_within",
]
