"""Shared pytest fixtures for the geojson2svg test suite."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import yaml

# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def feature(geometry: dict[str, Any], **properties: Any) -> dict[str, Any]:
    return {"type": "Feature", "geometry": geometry, "properties": properties}


def write_geojson(path: Path, features: list[dict[str, Any]]) -> Path:
    path.write_text(
        json.dumps({"type": "FeatureCollection", "features": features}),
        encoding="utf-8",
    )
    return path


def write_yaml(path: Path, payload: dict[str, Any]) -> Path:
    path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Sample data fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def square_features() -> list[dict[str, Any]]:
    """Two lon/lat squares side by side with a numeric `pop` attribute."""
    west = {
        "type": "Polygon",
        "coordinates": [[[0.0, 0.0], [10.0, 0.0], [10.0, 10.0], [0.0, 10.0], [0.0, 0.0]]],
    }
    east = {
        "type": "Polygon",
        "coordinates": [[[10.0, 0.0], [20.0, 0.0], [20.0, 10.0], [10.0, 10.0], [10.0, 0.0]]],
    }
    return [feature(west, name="west", pop=100), feature(east, name="east", pop=5000)]


@pytest.fixture()
def squares_geojson(tmp_path: Path, square_features: list[dict[str, Any]]) -> Path:
    return write_geojson(tmp_path / "squares.geojson", square_features)


@pytest.fixture()
def rivers_geojson(tmp_path: Path) -> Path:
    river = {"type": "LineString", "coordinates": [[1.0, 1.0], [5.0, 4.0], [9.0, 2.0]]}
    return write_geojson(tmp_path / "rivers.geojson", [feature(river, length=12.5)])


@pytest.fixture()
def map_config_payload(squares_geojson: Path, rivers_geojson: Path) -> dict[str, Any]:
    return {
        "map": {
            "width": 400,
            "height": 200,
            "output": "build/map.svg",
            "extent": "squares",
            "layers": [
                {
                    "path": squares_geojson.name,
                    "classification": "quantiles",
                    "field": "pop",
                    "nb_class": 2,
                    "palette": "Blues",
                    "stroke-width": 0.5,
                },
                {"path": rivers_geojson.name, "stroke": "#1f78b4"},
            ],
        },
        "title": {"content": "Squares & rivers", "font-size": "18", "position": [200, 20]},
    }


@pytest.fixture()
def map_config_path(tmp_path: Path, map_config_payload: dict[str, Any]) -> Path:
    return write_yaml(tmp_path / "map.yaml", map_config_payload)
