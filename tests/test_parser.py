"""Tests for the drawing JSON reader and writer."""

import json

import pytest

from backingplanner.core.model import Clash
from backingplanner.engine.optimizer import optimize_backings
from backingplanner.engine.results import ConflictsResult, DetectionResults, OptimizationResult
from backingplanner.io.parser import (
    load_drawing,
    parse_backing,
    parse_drawing,
    parse_wall,
    results_to_dict,
    save_results,
    zone_to_dict,
)

DRAWING = {
    "backings": [
        {
            "id": "b1",
            "componentId": "tv-1",
            "backingType": "2x6",
            "dimensions": {"width": 16, "height": 16, "thickness": 1.5},
            "location": {"x": 10, "y": 0, "z": 48},
            "status": "approved",
        },
        {
            "id": "b2",
            "backing_type": "2x4",
            "x": 40,
            "y": 5,
            "width": 8,
            "height": 4,
        },
    ],
    "walls": [
        {
            "id": "w1",
            "startPoint": {"x": 0, "y": 0},
            "endPoint": {"x": 240, "y": 0},
            "thickness": 6,
            "type": "structural",
            "openings": [{"position": {"x": 100, "y": 0}, "width": 32, "swing": "left"}],
        },
        {"id": "w2", "start": {"x": 0, "y": 0}, "end": {"x": 0, "y": 120}},
    ],
}


def test_parse_drawing():
    drawing = parse_drawing(DRAWING)

    first, second = drawing.backings
    assert first.backing_type == "2x6"
    assert first.component_id == "tv-1"
    assert first.location.z == 48
    assert first.status == "approved"
    assert second.dimensions.width == 8
    assert second.dimensions.thickness == 1.5
    assert second.location.z == 0
    assert second.component_id == ""

    w1, w2 = drawing.walls
    assert w1.type == "structural"
    assert w1.openings[0].height == 84
    assert w1.openings[0].swing == "left"
    assert w2.end_point.y == 120
    assert w2.thickness == 0
    assert w2.openings == ()


def test_missing_backing_field():
    with pytest.raises(ValueError, match="b9"):
        parse_backing({"id": "b9", "backingType": "2x4", "x": 0, "y": 0, "width": 4})


def test_non_numeric_wall_coordinate():
    with pytest.raises(ValueError, match="w9"):
        parse_wall({"id": "w9", "start": {"x": "left", "y": 0}, "end": {"x": 1, "y": 0}})


def test_drawing_must_be_object():
    with pytest.raises(ValueError):
        parse_drawing([1, 2, 3])


def test_empty_drawing():
    drawing = parse_drawing({})
    assert drawing.backings == () and drawing.walls == ()


def test_load_drawing(tmp_path):
    path = tmp_path / "drawing.json"
    path.write_text(json.dumps(DRAWING), encoding="utf-8")

    drawing = load_drawing(path)

    assert [b.id for b in drawing.backings] == ["b1", "b2"]


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_drawing(tmp_path / "missing.json")


def test_zone_to_dict(make_backing):
    zone = optimize_backings([make_backing("a", 0, 0, 8, 4), make_backing("b", 12, 0, 8, 4)])[0]

    data = zone_to_dict(zone)

    assert data["backings"] == ["a", "b"]
    assert data["bounds"] == {"x": 0, "y": 0, "width": 20, "height": 4}
    assert data["waste"] == 16


def test_save_results(tmp_path, make_backing):
    clash = Clash(id="spacing-a-b", type="spacing", severity="warning", items=("a", "b"))
    results = DetectionResults(
        conflicts=ConflictsResult((clash,)),
        optimization=OptimizationResult((make_backing("a", 0, 0),)),
    )
    path = tmp_path / "out" / "results.json"

    save_results(results, path)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["types"] == ["conflicts", "optimization"]
    assert data["conflicts"][0]["items"] == ["a", "b"]
    assert data["optimized_backings"][0]["id"] == "a"
    assert data["zones"] == []
    assert "walls" not in data
    assert results_to_dict(DetectionResults()) == {"types": []}
