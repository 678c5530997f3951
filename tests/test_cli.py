"""Tests for the command line interface."""

import json

import pytest
from typer.testing import CliRunner

from backingplanner.cli import app

runner = CliRunner()


def _write(tmp_path, backings, walls=()):
    path = tmp_path / "drawing.json"
    path.write_text(json.dumps({"backings": backings, "walls": list(walls)}), encoding="utf-8")
    return path


def _backing(id, x, y, width=8, height=4, backing_type="2x4"):
    return {
        "id": id,
        "backingType": backing_type,
        "dimensions": {"width": width, "height": height},
        "location": {"x": x, "y": y, "z": 48},
    }


WALL = {
    "id": "w1",
    "startPoint": {"x": 0, "y": 0},
    "endPoint": {"x": 240, "y": 0},
    "thickness": 6,
    "openings": [{"position": {"x": 100, "y": 0}, "width": 32, "height": 84}],
}


@pytest.fixture
def clean_drawing(tmp_path):
    return _write(tmp_path, [_backing("a", 150, 60), _backing("b", 170, 60)], [WALL])


@pytest.fixture
def clashing_drawing(tmp_path):
    return _write(tmp_path, [_backing("a", 150, 60), _backing("b", 152, 60)], [WALL])


def test_clashes_ready(clean_drawing, tmp_path):
    out = tmp_path / "clashes.json"

    result = runner.invoke(app, ["clashes", "-d", str(clean_drawing), "-o", str(out)])

    assert result.exit_code == 0
    assert "Ready for install" in result.output
    assert json.loads(out.read_text(encoding="utf-8")) == []


def test_clashes_with_errors(clashing_drawing, tmp_path):
    out = tmp_path / "clashes.json"

    result = runner.invoke(app, ["clashes", "-d", str(clashing_drawing), "-o", str(out)])

    assert result.exit_code == 1
    data = json.loads(out.read_text(encoding="utf-8"))
    assert [c["type"] for c in data] == ["backing_overlap"]
    assert data[0]["items"] == ["a", "b"]


def test_clashes_missing_file(tmp_path):
    result = runner.invoke(app, ["clashes", "-d", str(tmp_path / "nope.json")])

    assert result.exit_code == 1
    assert "File not found" in result.output


def test_clashes_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    result = runner.invoke(app, ["clashes", "-d", str(path)])

    assert result.exit_code == 1
    assert "Invalid JSON" in result.output


def test_doors(clean_drawing, tmp_path):
    out = tmp_path / "doors.json"

    result = runner.invoke(app, ["doors", "-d", str(clean_drawing), "-o", str(out)])

    assert result.exit_code == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert [d["id"] for d in data] == ["door-w1-0"]
    assert data[0]["swing_direction"] == "left"


def test_optimize(clean_drawing, tmp_path):
    out = tmp_path / "zones.json"

    result = runner.invoke(app, ["optimize", "-d", str(clean_drawing), "-o", str(out)])

    assert result.exit_code == 0
    assert "1 zone(s)" in result.output
    zones = json.loads(out.read_text(encoding="utf-8"))
    assert zones[0]["backings"] == ["a", "b"]


def test_optimize_negative_distance(clean_drawing):
    result = runner.invoke(app, ["optimize", "-d", str(clean_drawing), "--distance", "-5"])

    assert result.exit_code == 1


def test_analyze(clean_drawing, tmp_path):
    out = tmp_path / "results" / "analysis.json"

    result = runner.invoke(app, ["analyze", "-d", str(clean_drawing), "-o", str(out)])

    assert result.exit_code == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["types"] == ["doors", "conflicts", "optimization"]
    assert data["conflicts"] == []
    assert all(b["optimized"] for b in data["optimized_backings"])


def test_analyze_with_errors(clashing_drawing, tmp_path):
    out = tmp_path / "analysis.json"

    result = runner.invoke(app, ["analyze", "-d", str(clashing_drawing), "-o", str(out)])

    assert result.exit_code == 1
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["conflicts"][0]["type"] == "backing_overlap"


def test_dimensions(clean_drawing, tmp_path):
    out = tmp_path / "dimensions.json"

    result = runner.invoke(app, ["dimensions", "-d", str(clean_drawing), "-o", str(out)])

    assert result.exit_code == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert [(d["id"], d["backing_id"], d["wall_id"]) for d in data] == [
        ("dim-0", "a", "w1"),
        ("dim-1", "b", "w1"),
    ]
    assert data[0]["value"] == pytest.approx(60)
    assert data[0]["label"] == '60.00"'
