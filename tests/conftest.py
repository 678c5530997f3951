"""Shared factories for backing planner tests."""

import pytest

from backingplanner.core.model import (
    BackingPlacement,
    Dimensions,
    Location,
    Opening,
    Point,
    WallSegment,
)


def _backing(id, x, y, width=16.0, height=16.0, backing_type="2x4", z=48.0, thickness=1.5):
    return BackingPlacement(
        id=id,
        component_id=f"component-{id}",
        backing_type=backing_type,
        dimensions=Dimensions(width, height, thickness),
        location=Location(x, y, z),
    )


def _wall(id="w1", start=(0.0, 0.0), end=(240.0, 0.0), thickness=6.0, type="interior", openings=()):
    return WallSegment(
        id=id,
        start_point=Point(*start),
        end_point=Point(*end),
        thickness=thickness,
        type=type,
        openings=tuple(openings),
    )


def _door(x, y, width=32.0, height=84.0, swing=None, type="door"):
    return Opening(position=Point(x, y), width=width, height=height, type=type, swing=swing)


@pytest.fixture
def make_backing():
    return _backing


@pytest.fixture
def make_wall():
    return _wall


@pytest.fixture
def make_door():
    return _door
