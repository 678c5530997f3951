"""Placement optimization: grouping backings into installation zones.

Backings are clustered with single-link clustering. Two backings are linked
when their centers are within the grouping distance and their materials may
be combined; every connected component of the resulting graph becomes one
``BackingZone``. Every input backing ends up in exactly one zone.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, replace
from typing import Dict, List, Sequence, Tuple

import networkx as nx

from ..config import DEFAULT_GROUPING_DISTANCE, OptimizationSettings
from ..core.model import BackingPlacement, BackingZone
from ..core.rules import STANDARD_HEIGHTS, STANDARD_WIDTHS, span_rule, stronger_type
from ..geom.rect import bounding_rect, distance
from ..geom.spatial import points_within
from .validators import validate_backings, validate_grouping_distance

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class OptimizationSummary:
    """Figures reported alongside an optimization run.

    Attributes:
        zones_created: Number of zones produced.
        backings_grouped: Backings that share a zone with at least one other.
        labor_reduced_pct: Share of separate installs saved, in percent.
        bounds_waste: Zone bounds area not covered by backings.
        standard_waste: Off-cut from rounding each backing up to stock size.
    """

    zones_created: int
    backings_grouped: int
    labor_reduced_pct: int
    bounds_waste: float
    standard_waste: float


def resolve_settings(
    grouping_distance: float = DEFAULT_GROUPING_DISTANCE,
    settings: OptimizationSettings | None = None,
) -> OptimizationSettings:
    """Build the effective settings and validate the grouping distance.

    Raises:
        InvalidInput: If the grouping distance is negative or not a number.
    """
    if settings is None:
        settings = OptimizationSettings(grouping_distance=grouping_distance)
    validate_grouping_distance(settings.grouping_distance)
    return settings


def can_combine(a: BackingPlacement, b: BackingPlacement, settings: OptimizationSettings) -> bool:
    """Check whether two backings may share a zone, ignoring distance."""
    if a.backing_type == b.backing_type:
        return True
    if not settings.allow_combining:
        return False
    if settings.maintain_structural:
        return span_rule(a.backing_type).requires_structural == span_rule(b.backing_type).requires_structural
    return True


def _close_pairs(backings: Sequence[BackingPlacement], settings: OptimizationSettings) -> List[Tuple[int, int]]:
    centers = [b.rect.center for b in backings]
    radius = settings.grouping_distance
    if settings.optimize_for_speed:
        return points_within(centers, radius)
    return [
        (i, j)
        for i in range(len(centers))
        for j in range(i + 1, len(centers))
        if distance(centers[i], centers[j]) <= radius
    ]


def build_proximity_graph(
    backings: Sequence[BackingPlacement], settings: OptimizationSettings
) -> nx.Graph:
    """Build the graph linking backings that may be grouped together.

    Nodes are input positions (added in input order) carrying the backing as
    the ``backing`` attribute.

    Args:
        backings: Validated backing placements.
        settings: Effective optimization settings.

    Returns:
        NetworkX Graph over the backings.
    """
    G = nx.Graph()
    for index, backing in enumerate(backings):
        G.add_node(index, backing=backing)

    for i, j in _close_pairs(backings, settings):
        if can_combine(backings[i], backings[j], settings):
            G.add_edge(i, j)

    return G


def find_components(graph: nx.Graph) -> List[List[int]]:
    """Connected components in discovery order over the node insertion order.

    Each component's members are sorted by input position.
    """
    seen = set()
    components = []
    for node in graph.nodes:
        if node in seen:
            continue
        component = nx.node_connected_component(graph, node)
        seen |= component
        components.append(sorted(component))
    return components


def _material_type(members: Sequence[BackingPlacement], settings: OptimizationSettings) -> str:
    types = [b.backing_type for b in members]
    if len(set(types)) == 1:
        return types[0]

    if settings.maintain_structural:
        strongest = types[0]
        for backing_type in types[1:]:
            strongest = stronger_type(strongest, backing_type)
        return strongest

    if settings.minimize_waste:
        area_by_type: Dict[str, float] = defaultdict(float)
        for b in members:
            area_by_type[b.backing_type] += b.rect.area
        # max() keeps the first type on ties, dicts keep insertion order
        return max(area_by_type, key=area_by_type.get)

    return types[0]


def build_zones(
    backings: Sequence[BackingPlacement],
    components: Sequence[Sequence[int]],
    settings: OptimizationSettings,
) -> List[BackingZone]:
    """Turn index components into zones with bounds, center and areas."""
    zones = []
    for number, component in enumerate(components):
        members = tuple(backings[i] for i in component)
        bounds = bounding_rect(b.rect for b in members)
        zones.append(
            BackingZone(
                id=f"zone-{number}",
                backings=members,
                bounds=bounds,
                center=bounds.center,
                total_area=sum(b.rect.area for b in members),
                material_type=_material_type(members, settings),
            )
        )
    return zones


def optimize_backings(
    backings: Sequence[BackingPlacement],
    grouping_distance: float = DEFAULT_GROUPING_DISTANCE,
    settings: OptimizationSettings | None = None,
) -> List[BackingZone]:
    """Group backings into material-efficient installation zones.

    Args:
        backings: Backing placements to group. Never modified.
        grouping_distance: Maximum distance between backing centers, in
            inches. Ignored when ``settings`` is given.
        settings: Full optimization settings.

    Returns:
        Zones in discovery order. Their member sets partition the input.

    Raises:
        InvalidInput: If the grouping distance is negative or NaN, or a
            backing is malformed or its id repeated.
    """
    settings = resolve_settings(grouping_distance, settings)
    if not backings:
        return []
    validate_backings(backings)

    graph = build_proximity_graph(backings, settings)
    zones = build_zones(backings, find_components(graph), settings)

    LOGGER.info(
        "Grouped %d backing(s) into %d zone(s) at %.2f\"",
        len(backings),
        len(zones),
        settings.grouping_distance,
    )
    return zones


def apply_zones(
    backings: Sequence[BackingPlacement], zones: Sequence[BackingZone]
) -> List[BackingPlacement]:
    """Copies of the backings marked as optimized with their zone ids.

    Backings that belong to no zone are returned unchanged. Input order is
    kept.
    """
    zone_of = {}
    for zone in zones:
        for backing in zone.backings:
            zone_of[backing.id] = zone.id

    return [
        replace(b, optimized=True, zone_id=zone_of[b.id]) if b.id in zone_of else b
        for b in backings
    ]


def standard_size(backing: BackingPlacement) -> Tuple[float, float]:
    """Round a backing up to the nearest stock width and height.

    Sizes larger than every stock size are kept as they are.
    """
    width = backing.dimensions.width
    height = backing.dimensions.height
    std_width = next((w for w in STANDARD_WIDTHS if w >= width), width)
    std_height = next((h for h in STANDARD_HEIGHTS if h >= height), height)
    return float(std_width), float(std_height)


def material_waste(backings: Sequence[BackingPlacement]) -> float:
    """Total off-cut area from cutting every backing out of stock sizes."""
    total = 0.0
    for backing in backings:
        std_width, std_height = standard_size(backing)
        total += std_width * std_height - backing.rect.area
    return total


def summarize_optimization(
    backings: Sequence[BackingPlacement], zones: Sequence[BackingZone]
) -> OptimizationSummary:
    """Summarize what an optimization run saves."""
    count = len(backings)
    labor = 0
    if count and len(zones) < count:
        labor = round((count - len(zones)) / count * 100)

    return OptimizationSummary(
        zones_created=len(zones),
        backings_grouped=sum(len(z.backings) for z in zones if len(z.backings) > 1),
        labor_reduced_pct=labor,
        bounds_waste=sum(z.waste for z in zones),
        standard_waste=material_waste(backings),
    )
