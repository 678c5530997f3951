"""Tests for backing zone optimization."""

import math
import random

import pytest

from backingplanner.config import OptimizationSettings
from backingplanner.core.model import Rect
from backingplanner.engine.optimizer import (
    apply_zones,
    build_proximity_graph,
    can_combine,
    find_components,
    optimize_backings,
    standard_size,
    summarize_optimization,
)
from backingplanner.engine.validators import InvalidInput


def _row(make_backing, spacing, count=5, backing_type="2x4"):
    return [
        make_backing(f"b{i}", i * spacing, 0, 8, 4, backing_type=backing_type)
        for i in range(count)
    ]


def _random_backings(make_backing, seed, count=40):
    rng = random.Random(seed)
    types = ("2x4", "2x6", "steel_plate")
    return [
        make_backing(
            f"r{i}",
            rng.uniform(0, 300),
            rng.uniform(0, 300),
            rng.uniform(2, 20),
            rng.uniform(2, 20),
            backing_type=rng.choice(types),
        )
        for i in range(count)
    ]


def test_chain_within_distance_forms_one_zone(make_backing):
    backings = _row(make_backing, 10)

    zones = optimize_backings(backings, grouping_distance=24)

    assert len(zones) == 1
    zone = zones[0]
    assert zone.id == "zone-0"
    assert zone.backing_ids == ("b0", "b1", "b2", "b3", "b4")
    assert zone.bounds == Rect(0, 0, 48, 4)
    assert zone.center.x == 24 and zone.center.y == 2
    assert zone.total_area == 5 * 32
    assert zone.material_type == "2x4"


def test_single_link_chains_beyond_distance(make_backing):
    # Each neighbour is 20 apart, the ends are 80 apart
    backings = _row(make_backing, 20)

    assert len(optimize_backings(backings, grouping_distance=24)) == 1


def test_far_apart_backings_stay_separate(make_backing):
    backings = _row(make_backing, 100)

    zones = optimize_backings(backings, grouping_distance=24)

    assert [z.id for z in zones] == [f"zone-{i}" for i in range(5)]
    assert [z.backing_ids for z in zones] == [(f"b{i}",) for i in range(5)]


def test_distance_is_inclusive(make_backing):
    backings = _row(make_backing, 24, count=2)

    assert len(optimize_backings(backings, grouping_distance=24)) == 1
    assert len(optimize_backings(backings, grouping_distance=23.99)) == 2


def test_zero_distance_groups_only_coincident_centers(make_backing):
    backings = [
        make_backing("a", 0, 0, 8, 4),
        make_backing("b", 0, 0, 8, 4),
        make_backing("c", 1, 0, 8, 4),
    ]

    zones = optimize_backings(backings, grouping_distance=0)

    assert [z.backing_ids for z in zones] == [("a", "b"), ("c",)]


def test_empty_input():
    assert optimize_backings([]) == []


def test_zones_partition_the_input(make_backing):
    backings = _random_backings(make_backing, seed=7)

    zones = optimize_backings(backings, grouping_distance=30)

    ids = [i for z in zones for i in z.backing_ids]
    assert sorted(ids) == sorted(b.id for b in backings)
    assert len(ids) == len(set(ids))
    for zone in zones:
        assert len({b.backing_type for b in zone.backings}) == 1


def test_larger_distance_never_splits_zones(make_backing):
    backings = _random_backings(make_backing, seed=11)

    previous = None
    for d in (0, 5, 15, 30, 60, 120):
        groups = {frozenset(z.backing_ids) for z in optimize_backings(backings, grouping_distance=d)}
        if previous is not None:
            for group in previous:
                assert any(group <= bigger for bigger in groups)
        previous = groups


def test_zone_ids_follow_first_member_order(make_backing):
    backings = [
        make_backing("far", 500, 500, 8, 4),
        make_backing("a", 0, 0, 8, 4),
        make_backing("b", 10, 0, 8, 4),
    ]

    zones = optimize_backings(backings)

    assert [(z.id, z.backing_ids) for z in zones] == [("zone-0", ("far",)), ("zone-1", ("a", "b"))]


def test_members_keep_input_order(make_backing):
    backings = [
        make_backing("c", 20, 0, 8, 4),
        make_backing("x", 400, 0, 8, 4),
        make_backing("a", 0, 0, 8, 4),
        make_backing("b", 10, 0, 8, 4),
    ]

    zones = optimize_backings(backings)

    assert zones[0].backing_ids == ("c", "a", "b")


@pytest.mark.parametrize("bad", [-1.0, math.nan, "24", True])
def test_bad_grouping_distance_raises(make_backing, bad):
    with pytest.raises(InvalidInput):
        optimize_backings(_row(make_backing, 10), grouping_distance=bad)


def test_bad_distance_raises_even_for_empty_input():
    with pytest.raises(InvalidInput):
        optimize_backings([], grouping_distance=-5)


def test_malformed_backing_raises(make_backing):
    backings = [make_backing("a", 0, 0), make_backing("b", 0, 0, width=math.nan)]
    with pytest.raises(InvalidInput):
        optimize_backings(backings)


def test_duplicate_id_raises(make_backing):
    with pytest.raises(InvalidInput):
        optimize_backings([make_backing("a", 0, 0), make_backing("a", 50, 0)])


def test_types_are_not_mixed_by_default(make_backing):
    backings = [
        make_backing("a", 0, 0, 8, 4, backing_type="2x4"),
        make_backing("b", 10, 0, 8, 4, backing_type="2x6"),
    ]

    zones = optimize_backings(backings)

    assert [z.material_type for z in zones] == ["2x4", "2x6"]


def test_allow_combining_mixes_types(make_backing):
    backings = [
        make_backing("a", 0, 0, 8, 4, backing_type="2x4"),
        make_backing("b", 10, 0, 8, 4, backing_type="2x6"),
    ]
    settings = OptimizationSettings(allow_combining=True)

    zones = optimize_backings(backings, settings=settings)

    assert len(zones) == 1
    assert zones[0].material_type == "2x6"


def test_maintain_structural_keeps_steel_apart(make_backing):
    a = make_backing("a", 0, 0, 8, 4, backing_type="2x4")
    plate = make_backing("p", 10, 0, 8, 4, backing_type="steel_plate")

    strict = OptimizationSettings(allow_combining=True)
    loose = OptimizationSettings(allow_combining=True, maintain_structural=False)

    assert not can_combine(a, plate, strict)
    assert can_combine(a, plate, loose)
    assert len(optimize_backings([a, plate], settings=strict)) == 2
    assert len(optimize_backings([a, plate], settings=loose)) == 1


def test_minimize_waste_picks_dominant_area(make_backing):
    backings = [
        make_backing("small", 0, 0, 4, 4, backing_type="2x8"),
        make_backing("big", 6, 0, 16, 16, backing_type="2x4"),
    ]
    settings = OptimizationSettings(allow_combining=True, maintain_structural=False)

    zones = optimize_backings(backings, settings=settings)

    assert zones[0].material_type == "2x4"


def test_speed_mode_gives_same_zones(make_backing):
    backings = _random_backings(make_backing, seed=3, count=60)

    exact = optimize_backings(backings, settings=OptimizationSettings(grouping_distance=40))
    fast = optimize_backings(
        backings, settings=OptimizationSettings(grouping_distance=40, optimize_for_speed=True)
    )

    assert [z.backing_ids for z in exact] == [z.backing_ids for z in fast]


def test_graph_and_components(make_backing):
    backings = _row(make_backing, 10, count=3) + [make_backing("lone", 300, 0, 8, 4)]

    graph = build_proximity_graph(backings, OptimizationSettings())

    assert list(graph.nodes) == [0, 1, 2, 3]
    assert graph.nodes[3]["backing"].id == "lone"
    assert find_components(graph) == [[0, 1, 2], [3]]


def test_input_is_not_modified(make_backing):
    backings = _row(make_backing, 10)
    snapshot = list(backings)

    optimize_backings(backings)

    assert backings == snapshot
    assert not any(b.optimized for b in backings)


def test_apply_zones(make_backing):
    backings = _row(make_backing, 10, count=2) + [make_backing("far", 400, 0, 8, 4)]
    zones = optimize_backings(backings)

    updated = apply_zones(backings, zones)

    assert [b.id for b in updated] == ["b0", "b1", "far"]
    assert all(b.optimized for b in updated)
    assert [b.zone_id for b in updated] == ["zone-0", "zone-0", "zone-1"]


def test_waste_of_zone(make_backing):
    backings = [make_backing("a", 0, 0, 8, 4), make_backing("b", 12, 0, 8, 4)]

    zone = optimize_backings(backings)[0]

    assert zone.bounds_area == 80
    assert zone.total_area == 64
    assert zone.waste == 16


def test_standard_size(make_backing):
    assert standard_size(make_backing("a", 0, 0, 10, 20)) == (12.0, 24.0)
    assert standard_size(make_backing("b", 0, 0, 16, 16)) == (16.0, 16.0)
    assert standard_size(make_backing("c", 0, 0, 120, 4)) == (120.0, 12.0)


def test_summarize_optimization(make_backing):
    backings = _row(make_backing, 10, count=4) + [make_backing("far", 400, 0, 8, 4)]
    zones = optimize_backings(backings)

    summary = summarize_optimization(backings, zones)

    assert summary.zones_created == 2
    assert summary.backings_grouped == 4
    assert summary.labor_reduced_pct == 60
    assert summary.bounds_waste == zones[0].waste + zones[1].waste
    assert summary.standard_waste == pytest.approx(5 * (12 * 12 - 32))


def test_summary_without_grouping(make_backing):
    backings = _row(make_backing, 100, count=3)

    summary = summarize_optimization(backings, optimize_backings(backings))

    assert summary.labor_reduced_pct == 0
    assert summary.backings_grouped == 0
