"""Clash detection for backing placements.

This module evaluates independent rules over a set of backings and walls and
unions their findings. Rules are registered by name so they can be run one
at a time (the orchestrator reports progress between them) or all together
through :func:`detect_clashes`.

Detection is best effort: a malformed backing is reported as a structural
error and left out of every other rule instead of aborting the pass.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, Iterable, List, Protocol, Sequence, Tuple
from urllib.parse import quote

from ..config import SUPPORT_TOLERANCE, ClashSettings
from ..core.model import BackingPlacement, Clash, Opening, Rect, WallSegment
from ..core.rules import span_rule, suggest_upgrade
from ..geom.rect import expand, gap, minimum_translation, overlaps
from ..geom.spatial import candidate_pairs
from .validators import split_valid, wall_problem

LOGGER = logging.getLogger(__name__)

RULE_ORDER = ("backing_overlap", "door_clearance", "spacing", "structural")


class ClashRule(Protocol):
    """Protocol for clash rules.

    Rules only ever see backings and walls that passed validation.
    """

    def enabled(self, settings: ClashSettings) -> bool:
        ...

    def check(
        self,
        backings: Sequence[BackingPlacement],
        walls: Sequence[WallSegment],
        settings: ClashSettings,
    ) -> List[Clash]:
        ...


def clash_id(clash_type: str, *parts) -> str:
    """Deterministic clash id: the type and its parts joined with ``/``.

    Parts are percent-encoded, so an item id containing ``/`` or ``-`` can
    never make two different clashes share an id.
    """
    return "/".join([clash_type, *(quote(str(part), safe="") for part in parts)])


def _describe_shift(backing_id: str, dx: float, dy: float, reason: str) -> str:
    if dx != 0.0:
        amount, axis = dx, "x"
    else:
        amount, axis = dy, "y"
    sign = "+" if amount >= 0 else "-"
    return f'Relocate backing {backing_id} by {abs(amount):.2f}" along {sign}{axis} {reason}'


class BackingOverlapRule:
    """Two backings whose plan footprints overlap can never both be installed."""

    def enabled(self, settings: ClashSettings) -> bool:
        return settings.check_overlaps

    def check(self, backings, walls, settings) -> List[Clash]:
        rects = [b.rect for b in backings]
        clashes = []
        for i, j in candidate_pairs(rects):
            if not overlaps(rects[i], rects[j]):
                continue
            first, later = backings[i], backings[j]
            dx, dy = minimum_translation(rects[i], rects[j])
            clashes.append(
                Clash(
                    id=clash_id("backing_overlap", first.id, later.id),
                    type="backing_overlap",
                    severity="error",
                    items=(first.id, later.id),
                    resolution=_describe_shift(later.id, dx, dy, f"to clear {first.id}"),
                )
            )
        return clashes


def opening_rect(wall: WallSegment, opening: Opening) -> Rect:
    """Plan rect of an opening: its width along the wall, the wall thickness across."""
    pos = opening.position
    half_width = opening.width / 2.0
    half_thickness = wall.thickness / 2.0
    if wall.is_horizontal:
        return Rect(pos.x - half_width, pos.y - half_thickness, opening.width, wall.thickness)
    return Rect(pos.x - half_thickness, pos.y - half_width, wall.thickness, opening.width)


def clearance_zone(wall: WallSegment, opening: Opening, clearance: float) -> Rect:
    """Area in front of an opening that must stay free.

    The opening rect is grown by ``clearance`` on every side. When the swing
    side is known the zone is cut back to the wall face on the other side.
    """
    leaf = opening_rect(wall, opening)
    zone = expand(leaf, clearance)
    if opening.swing not in ("left", "right"):
        return zone

    # "left" is relative to the wall direction, start -> end
    dx = wall.end_point.x - wall.start_point.x
    dy = wall.end_point.y - wall.start_point.y
    swing_left = opening.swing == "left"
    if wall.is_horizontal:
        keep_positive = swing_left == (dx >= 0)
        if keep_positive:
            return Rect(zone.x, leaf.y, zone.width, zone.top - leaf.y)
        return Rect(zone.x, zone.y, zone.width, leaf.top - zone.y)

    keep_positive = swing_left != (dy >= 0)
    if keep_positive:
        return Rect(leaf.x, zone.y, zone.right - leaf.x, zone.height)
    return Rect(zone.x, zone.y, leaf.right - zone.x, zone.height)


class DoorClearanceRule:
    """Backings mounted inside the swing height must stay out of door clearance."""

    def enabled(self, settings: ClashSettings) -> bool:
        return settings.check_clearances

    def check(self, backings, walls, settings) -> List[Clash]:
        clashes = []
        for wall in walls:
            for index, opening in enumerate(wall.openings):
                if opening.type != "door":
                    continue
                door_id = f"door-{wall.id}-{index}"
                leaf = opening_rect(wall, opening)
                zone = clearance_zone(wall, opening, settings.door_clearance)
                swing_height = opening.height if opening.height > 0 else settings.door_height

                for backing in backings:
                    if not 0 <= backing.location.z < swing_height:
                        continue
                    rect = backing.rect
                    if not overlaps(rect, zone):
                        continue
                    dx, dy = minimum_translation(zone, rect)
                    if overlaps(rect, leaf):
                        severity = "error"
                        reason = f"out of the opening of {door_id}"
                    else:
                        severity = "warning"
                        reason = f"out of the clearance zone of {door_id}"
                    clashes.append(
                        Clash(
                            id=clash_id("door_clearance", door_id, backing.id),
                            type="door_clearance",
                            severity=severity,
                            items=(backing.id, door_id),
                            resolution=_describe_shift(backing.id, dx, dy, reason),
                        )
                    )
        return clashes


class SpacingRule:
    """Backings of the same type need a minimum gap between them."""

    def enabled(self, settings: ClashSettings) -> bool:
        return settings.check_spacing and settings.min_spacing > 0

    def check(self, backings, walls, settings) -> List[Clash]:
        margin = settings.min_spacing
        rects = [b.rect for b in backings]
        clashes = []
        for i, j in candidate_pairs(rects, margin=margin):
            first, later = backings[i], backings[j]
            if first.backing_type != later.backing_type:
                continue
            if overlaps(rects[i], rects[j]):
                continue
            if not overlaps(expand(rects[i], margin), rects[j]):
                continue
            needed = margin - gap(rects[i], rects[j])
            clashes.append(
                Clash(
                    id=clash_id("spacing", first.id, later.id),
                    type="spacing",
                    severity="warning",
                    items=(first.id, later.id),
                    resolution=(
                        f'Move backing {later.id} {needed:.2f}" further from {first.id} '
                        f'(minimum spacing {margin:.2f}")'
                    ),
                )
            )
        return clashes


class StructuralRule:
    """Span table check: long or heavy backings need a structural wall behind them."""

    def enabled(self, settings: ClashSettings) -> bool:
        return settings.check_structural

    def check(self, backings, walls, settings) -> List[Clash]:
        supports = [expand(w.footprint, SUPPORT_TOLERANCE) for w in walls if w.type == "structural"]
        clashes = []
        for backing in backings:
            rule = span_rule(backing.backing_type)
            span = max(backing.dimensions.width, backing.dimensions.height)
            if not rule.requires_structural and span <= rule.max_span:
                continue
            rect = backing.rect
            if any(overlaps(support, rect) for support in supports):
                continue

            if rule.requires_structural:
                resolution = (
                    f"{backing.backing_type} must be mounted on a structural wall; "
                    f"relocate backing {backing.id} onto one"
                )
            else:
                upgrade = suggest_upgrade(backing.backing_type, span)
                alternative = f"use {upgrade}" if upgrade else f'reduce the span to {rule.max_span:.2f}"'
                resolution = (
                    f'Span {span:.2f}" exceeds the {rule.max_span:.2f}" limit for '
                    f"{backing.backing_type}; {alternative} or mount on a structural wall"
                )
            clashes.append(
                Clash(
                    id=clash_id("structural", backing.id),
                    type="structural",
                    severity="error",
                    items=(backing.id,),
                    resolution=resolution,
                )
            )
        return clashes


_RULES: Dict[str, ClashRule] = {
    "backing_overlap": BackingOverlapRule(),
    "door_clearance": DoorClearanceRule(),
    "spacing": SpacingRule(),
    "structural": StructuralRule(),
}


def register_rule(name: str, rule: ClashRule) -> None:
    """Register a clash rule under ``name``, replacing any existing one.

    Args:
        name: Name of the rule.
        rule: Rule instance to register.
    """
    _RULES[name] = rule


def get_rule(name: str) -> ClashRule:
    """Get a rule by name.

    Raises:
        KeyError: If the rule is not registered.
    """
    if name not in _RULES:
        raise KeyError(f"Clash rule '{name}' not found")
    return _RULES[name]


def prepare_inputs(
    backings: Sequence[BackingPlacement], walls: Sequence[WallSegment]
) -> Tuple[List[BackingPlacement], List[WallSegment], List[Clash]]:
    """Split inputs into usable records and clashes for the malformed ones.

    Returns:
        ``(valid_backings, usable_walls, invalid_clashes)``.
    """
    valid, rejected = split_valid(backings)
    invalid_clashes = []
    for position, (backing, problem) in enumerate(rejected):
        LOGGER.warning("Skipping backing %r: %s", backing.id, problem)
        invalid_clashes.append(
            Clash(
                id=clash_id("structural", backing.id, "invalid", position),
                type="structural",
                severity="error",
                items=(backing.id,),
                resolution=f"Fix backing {backing.id}: {problem}",
            )
        )

    usable_walls = []
    for wall in walls:
        problem = wall_problem(wall)
        if problem is not None:
            LOGGER.warning("Skipping wall %r: %s", wall.id, problem)
            continue
        usable_walls.append(wall)

    return valid, usable_walls, invalid_clashes


def run_rule(
    name: str,
    backings: Sequence[BackingPlacement],
    walls: Sequence[WallSegment],
    settings: ClashSettings,
) -> List[Clash]:
    """Run one registered rule on already prepared inputs."""
    rule = get_rule(name)
    if not rule.enabled(settings):
        LOGGER.debug("Rule %s disabled", name)
        return []
    clashes = rule.check(backings, walls, settings)
    LOGGER.debug("Rule %s found %d clash(es)", name, len(clashes))
    return clashes


def detect_clashes(
    backings: Sequence[BackingPlacement],
    walls: Sequence[WallSegment],
    settings: ClashSettings | None = None,
) -> List[Clash]:
    """Detect clashes between backings, wall openings and other backings.

    Args:
        backings: Backing placements to check. Never modified.
        walls: Wall segments, including their openings.
        settings: Rule toggles and thresholds; defaults to ``ClashSettings()``.

    Returns:
        Clashes for malformed records first, then each rule's findings in
        rule order. Empty input gives an empty list.
    """
    if settings is None:
        settings = ClashSettings()

    valid, usable_walls, clashes = prepare_inputs(backings, walls)
    for name in RULE_ORDER:
        clashes.extend(run_rule(name, valid, usable_walls, settings))

    LOGGER.info("Detected %d clash(es) across %d backing(s)", len(clashes), len(backings))
    return clashes


def blocking_clashes(clashes: Iterable[Clash]) -> List[Clash]:
    """Clashes that block sign-off (severity ``error``)."""
    return [c for c in clashes if c.blocks_signoff]


def is_ready_for_install(clashes: Iterable[Clash]) -> bool:
    """True when no error clash remains; warnings are advisory."""
    return not blocking_clashes(clashes)


def summarize_clashes(clashes: Iterable[Clash]) -> Dict[str, Dict[str, int]]:
    """Count clashes by severity and by type."""
    clashes = list(clashes)
    return {
        "severity": dict(Counter(c.severity for c in clashes)),
        "type": dict(Counter(c.type for c in clashes)),
    }
