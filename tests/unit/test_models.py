"""Unit tests for GeoJSON decoding into the domain model."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from geojson2svg.errors import InvalidInputError
from geojson2svg.io_geojson import extract_sample, load_feature_collection
from geojson2svg.models import Feature, FeatureCollection, Geometry, GeometryKind, MapExtent


class TestGeometryDecoding:
    def test_polygon_with_hole(self) -> None:
        geometry = Geometry.from_mapping(
            {
                "type": "Polygon",
                "coordinates": [
                    [[0, 0], [4, 0], [4, 4], [0, 4], [0, 0]],
                    [[1, 1], [2, 1], [2, 2], [1, 1]],
                ],
            }
        )
        assert geometry.kind is GeometryKind.POLYGON
        assert len(geometry.coordinates) == 2
        assert geometry.coordinates[1][0] == (1.0, 1.0)
        assert isinstance(geometry.coordinates[0][1][0], float)

    def test_altitude_is_dropped(self) -> None:
        geometry = Geometry.from_mapping({"type": "Point", "coordinates": [2.0, 3.0, 120.0]})
        assert geometry.coordinates == (2.0, 3.0)

    def test_iter_points_visits_all_coordinates(self) -> None:
        geometry = Geometry.from_mapping(
            {
                "type": "MultiPolygon",
                "coordinates": [
                    [[[0, 0], [1, 0], [1, 1], [0, 0]]],
                    [[[5, 5], [6, 5], [6, 6], [5, 5]]],
                ],
            }
        )
        assert len(list(geometry.iter_points())) == 8

    def test_geometry_collection_is_decoded(self) -> None:
        geometry = Geometry.from_mapping(
            {
                "type": "GeometryCollection",
                "geometries": [
                    {"type": "Point", "coordinates": [0, 0]},
                    {"type": "LineString", "coordinates": [[0, 0], [1, 1]]},
                ],
            }
        )
        assert geometry.kind is GeometryKind.GEOMETRY_COLLECTION
        assert [member.kind for member in geometry.geometries] == [
            GeometryKind.POINT,
            GeometryKind.LINE_STRING,
        ]

    @pytest.mark.parametrize(
        "raw",
        [
            {"type": "Circle", "coordinates": [0, 0]},
            {"type": "Point", "coordinates": [0]},
            {"type": "Point", "coordinates": ["a", "b"]},
            {"type": "LineString", "coordinates": [0, 1]},
            {"type": "Point", "coordinates": [True, 1]},
        ],
    )
    def test_malformed_geometry(self, raw: dict) -> None:
        with pytest.raises(InvalidInputError):
            Geometry.from_mapping(raw)


class TestFeatureCollectionDecoding:
    def test_properties_and_id_preserved(self) -> None:
        collection = FeatureCollection.from_mapping(
            {
                "type": "FeatureCollection",
                "features": [
                    {
                        "type": "Feature",
                        "id": "fr",
                        "geometry": {"type": "Point", "coordinates": [2.35, 48.85]},
                        "properties": {"name": "Paris", "pop": 2.1e6},
                    },
                    {
                        "type": "Feature",
                        "geometry": {"type": "Point", "coordinates": [0, 0]},
                        "properties": None,
                    },
                ],
            }
        )
        assert len(collection) == 2
        first, second = collection
        assert first.id == "fr"
        assert first.properties["name"] == "Paris"
        assert second.properties == {}

    def test_single_feature_is_wrapped(self) -> None:
        collection = FeatureCollection.from_mapping(
            {"type": "Feature", "geometry": {"type": "Point", "coordinates": [1, 2]}, "properties": {}}
        )
        assert len(collection) == 1

    def test_null_geometry_rejected(self) -> None:
        with pytest.raises(InvalidInputError, match="no geometry"):
            FeatureCollection.from_mapping(
                {"type": "FeatureCollection", "features": [{"type": "Feature", "geometry": None}]}
            )

    def test_bare_geometry_rejected(self) -> None:
        with pytest.raises(InvalidInputError, match="FeatureCollection"):
            FeatureCollection.from_mapping({"type": "Point", "coordinates": [0, 0]})

    def test_with_geometry_keeps_attributes(self) -> None:
        original = Feature(Geometry(GeometryKind.POINT, (0.0, 0.0)), {"a": 1}, id=7)
        moved = original.with_geometry(Geometry(GeometryKind.POINT, (9.0, 9.0)))
        assert moved.properties == {"a": 1}
        assert moved.id == 7
        assert original.geometry.coordinates == (0.0, 0.0)

    def test_properties_are_a_read_only_copy(self) -> None:
        raw = {"pop": 5}
        feature = Feature(Geometry(GeometryKind.POINT, (0.0, 0.0)), raw)
        raw["pop"] = 6
        assert feature.properties["pop"] == 5
        with pytest.raises(TypeError):
            feature.properties["pop"] = 7  # type: ignore[index]


class TestMapExtent:
    def test_from_sequence(self) -> None:
        extent = MapExtent.from_sequence([-10, 10, -5, 5])
        assert extent.width == 20.0
        assert extent.height == 10.0

    @pytest.mark.parametrize("values", [[0, 1, 2], [1, 0, 0, 1], [0, 1, 1, 1], [0, "1", 0, 1]])
    def test_invalid_sequences(self, values: list) -> None:
        with pytest.raises(ValueError):
            MapExtent.from_sequence(values)


class TestGeojsonFiles:
    def test_load_and_extract_sample(self, squares_geojson: Path) -> None:
        collection = load_feature_collection(squares_geojson)
        assert extract_sample(collection, "pop") == [100.0, 5000.0]

    def test_missing_field(self, squares_geojson: Path) -> None:
        collection = load_feature_collection(squares_geojson)
        with pytest.raises(InvalidInputError, match="no property 'area'"):
            extract_sample(collection, "area")

    def test_non_numeric_field(self, squares_geojson: Path) -> None:
        collection = load_feature_collection(squares_geojson)
        with pytest.raises(InvalidInputError, match="not numeric"):
            extract_sample(collection, "name")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_feature_collection(tmp_path / "nope.geojson")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.geojson"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(InvalidInputError, match="Invalid JSON"):
            load_feature_collection(path)

    def test_root_must_be_object(self, tmp_path: Path) -> None:
        path = tmp_path / "list.geojson"
        path.write_text(json.dumps([1, 2]), encoding="utf-8")
        with pytest.raises(InvalidInputError):
            load_feature_collection(path)
