"""Reader and writer for drawing JSON documents.

A drawing document holds the backing placements and wall segments of one
sheet::

    {
      "backings": [{"id": "b1", "backingType": "2x6", "componentId": "tv-1",
                    "dimensions": {"width": 16, "height": 16, "thickness": 1.5},
                    "location": {"x": 10, "y": 0, "z": 48}}],
      "walls": [{"id": "w1", "startPoint": {"x": 0, "y": 0},
                 "endPoint": {"x": 240, "y": 0}, "thickness": 6,
                 "type": "interior",
                 "openings": [{"position": {"x": 100, "y": 0}, "width": 32,
                               "height": 84, "type": "door"}]}]
    }

Keys are accepted in camelCase (as sent by the drawing editor) or
snake_case. Values are not range-checked here: a negative width is a
detection concern, not a parse error.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Mapping

from ..config import DEFAULT_DOOR_HEIGHT
from ..core.model import (
    BackingPlacement,
    BackingZone,
    Clash,
    Dimension,
    Dimensions,
    DoorOpening,
    Location,
    Opening,
    Point,
    WallSegment,
)
from ..engine.results import DetectionResults


@dataclass(frozen=True)
class Drawing:
    """Backings and walls loaded from one drawing document."""

    backings: tuple[BackingPlacement, ...]
    walls: tuple[WallSegment, ...]


def _get(data: Mapping[str, Any], snake: str, camel: str | None = None, default: Any = KeyError) -> Any:
    if snake in data:
        return data[snake]
    if camel is not None and camel in data:
        return data[camel]
    if default is KeyError:
        raise KeyError(camel or snake)
    return default


def _parse_point(data: Mapping[str, Any]) -> Point:
    return Point(float(data["x"]), float(data["y"]))


def parse_backing(data: Mapping[str, Any]) -> BackingPlacement:
    """Build a backing placement from a JSON object.

    Both the nested form (``dimensions`` / ``location``) and the flat form
    (``x``, ``y``, ``width``, ``height`` on the object itself) are read.

    Raises:
        ValueError: If a required field is missing or not a number.
    """
    backing_id = str(data.get("id", "?"))
    try:
        dims = data.get("dimensions") or data
        loc = data.get("location") or data
        return BackingPlacement(
            id=str(data["id"]),
            component_id=str(_get(data, "component_id", "componentId", "")),
            backing_type=str(_get(data, "backing_type", "backingType")),
            dimensions=Dimensions(
                width=float(dims["width"]),
                height=float(dims["height"]),
                thickness=float(dims.get("thickness", 1.5)),
            ),
            location=Location(
                x=float(loc["x"]),
                y=float(loc["y"]),
                z=float(loc.get("z", 0.0)),
            ),
            orientation=float(data.get("orientation", 0.0)),
            status=str(data.get("status", "ai_generated")),
            optimized=bool(data.get("optimized", False)),
            zone_id=_get(data, "zone_id", "zoneId", None),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid backing data for {backing_id}: {e}") from e


def parse_opening(data: Mapping[str, Any]) -> Opening:
    """Build a wall opening from a JSON object."""
    return Opening(
        position=_parse_point(data["position"]),
        width=float(data["width"]),
        height=float(data.get("height") or DEFAULT_DOOR_HEIGHT),
        type=str(data.get("type", "door")),
        swing=data.get("swing"),
    )


def parse_wall(data: Mapping[str, Any]) -> WallSegment:
    """Build a wall segment from a JSON object.

    ``start``/``end`` are accepted as aliases of ``startPoint``/``endPoint``.

    Raises:
        ValueError: If a required field is missing or not a number.
    """
    wall_id = str(data.get("id", "?"))
    try:
        start = _get(data, "start_point", "startPoint", None) or data["start"]
        end = _get(data, "end_point", "endPoint", None) or data["end"]
        return WallSegment(
            id=str(data["id"]),
            start_point=_parse_point(start),
            end_point=_parse_point(end),
            thickness=float(data.get("thickness", 0.0)),
            type=str(data.get("type", "interior")),
            openings=tuple(parse_opening(o) for o in data.get("openings") or ()),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid wall data for {wall_id}: {e}") from e


def parse_drawing(data: Mapping[str, Any]) -> Drawing:
    """Build a drawing from an already decoded JSON document."""
    if not isinstance(data, Mapping):
        raise ValueError(f"Drawing must be a JSON object, got {type(data).__name__}")
    return Drawing(
        backings=tuple(parse_backing(b) for b in data.get("backings", [])),
        walls=tuple(parse_wall(w) for w in data.get("walls", [])),
    )


def load_drawing(path: str | Path) -> Drawing:
    """Load a drawing from a JSON file.

    Args:
        path: Path to the JSON file containing drawing data.

    Returns:
        Drawing with its backings and walls.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the JSON data is invalid or malformed.
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with open(file_path, encoding="utf-8") as f:
        data = json.load(f)

    return parse_drawing(data)


def backing_to_dict(backing: BackingPlacement) -> Dict[str, Any]:
    return asdict(backing)


def clash_to_dict(clash: Clash) -> Dict[str, Any]:
    data = asdict(clash)
    data["items"] = list(clash.items)
    return data


def dimension_to_dict(dimension: Dimension) -> Dict[str, Any]:
    return asdict(dimension)


def door_to_dict(door: DoorOpening) -> Dict[str, Any]:
    return asdict(door)


def zone_to_dict(zone: BackingZone) -> Dict[str, Any]:
    """Serialize a zone with member ids instead of full backings."""
    return {
        "id": zone.id,
        "backings": list(zone.backing_ids),
        "bounds": asdict(zone.bounds),
        "center": asdict(zone.center),
        "total_area": zone.total_area,
        "bounds_area": zone.bounds_area,
        "waste": zone.waste,
        "material_type": zone.material_type,
    }


def wall_to_dict(wall: WallSegment) -> Dict[str, Any]:
    return asdict(wall)


def results_to_dict(results: DetectionResults) -> Dict[str, Any]:
    """Serialize the present parts of a results envelope."""
    out: Dict[str, Any] = {"types": list(results.types)}
    if results.walls is not None:
        out["walls"] = [wall_to_dict(w) for w in results.walls.walls]
    if results.doors is not None:
        out["doors"] = [door_to_dict(d) for d in results.doors.doors]
    if results.conflicts is not None:
        out["conflicts"] = [clash_to_dict(c) for c in results.conflicts.conflicts]
    if results.optimization is not None:
        out["optimized_backings"] = [
            backing_to_dict(b) for b in results.optimization.optimized_backings
        ]
        out["zones"] = [zone_to_dict(z) for z in results.optimization.zones]
    return out


def save_results(results: DetectionResults, output_path: str | Path) -> None:
    """Write a results envelope to a JSON file, creating parent directories."""
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(results_to_dict(results), f, indent=2)

