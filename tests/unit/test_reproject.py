"""Unit tests for strict and lenient reprojection."""

from __future__ import annotations

import math

import pytest
from pyproj.exceptions import ProjError

from geojson2svg.errors import ProjectionFailureError, UnsupportedGeometryError
from geojson2svg.models import Feature, FeatureCollection, Geometry, GeometryKind
from geojson2svg.reproject import Reprojector

EARTH_RADIUS_M = 6378137.0


class _EasternLimitTransformer:
    """Identity in degrees that refuses longitudes east of 90 degrees."""

    def transform(self, x, y, radians=False, errcheck=False, direction=None):  # noqa: ANN001
        if x > math.radians(90.0):
            raise ProjError("point outside the domain of validity")
        return math.degrees(x), math.degrees(y)


class _InfiniteTransformer:
    def transform(self, x, y, radians=False, errcheck=False, direction=None):  # noqa: ANN001
        return math.inf, 0.0


def _fake_reprojector(transformer: object = None) -> Reprojector:
    return Reprojector("fake", transformer=transformer or _EasternLimitTransformer())


# ---------------------------------------------------------------------------
# Real projection
# ---------------------------------------------------------------------------


class TestWebMercator:
    def test_project_point(self) -> None:
        reprojector = Reprojector("EPSG:3857")
        x, y = reprojector.project_point(10.0, 0.0)
        assert x == pytest.approx(EARTH_RADIUS_M * math.radians(10.0), rel=1e-9)
        assert y == pytest.approx(0.0, abs=1e-6)

    def test_round_trip(self) -> None:
        reprojector = Reprojector("EPSG:3857")
        lon, lat = reprojector.unproject_point(*reprojector.project_point(-3.7, 40.4))
        assert lon == pytest.approx(-3.7, abs=1e-9)
        assert lat == pytest.approx(40.4, abs=1e-9)

    def test_pole_cannot_be_projected(self) -> None:
        with pytest.raises(ProjectionFailureError):
            Reprojector("EPSG:3857").project_point(0.0, 90.0)

    def test_invalid_projection(self) -> None:
        with pytest.raises(ProjectionFailureError, match="Invalid output projection"):
            Reprojector("EPSG:99999999")

    def test_properties_survive_reprojection(self) -> None:
        collection = FeatureCollection(
            features=(
                Feature(Geometry(GeometryKind.POINT, (1.0, 1.0)), {"name": "a"}, id="a"),
            )
        )
        projected = Reprojector("EPSG:3857").reproject(collection)
        (feature,) = projected
        assert feature.properties == {"name": "a"}
        assert feature.id == "a"
        assert feature.geometry.coordinates[0] > 100_000.0


# ---------------------------------------------------------------------------
# Strict policy
# ---------------------------------------------------------------------------


class TestStrictReprojection:
    def test_preserves_structure(self) -> None:
        polygon = Geometry(
            GeometryKind.POLYGON,
            (((0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 0.0)),),
        )
        projected = _fake_reprojector().reproject(FeatureCollection.from_geometries([polygon]))
        ring = projected.features[0].geometry.coordinates[0]
        assert len(ring) == 4
        assert ring[2] == pytest.approx((10.0, 10.0))

    def test_failure_names_the_feature(self) -> None:
        collection = FeatureCollection.from_geometries(
            [
                Geometry(GeometryKind.POINT, (0.0, 0.0)),
                Geometry(GeometryKind.LINE_STRING, ((0.0, 0.0), (120.0, 0.0))),
            ]
        )
        with pytest.raises(ProjectionFailureError, match="Feature 1"):
            _fake_reprojector().reproject(collection)

    def test_non_finite_output_is_a_failure(self) -> None:
        with pytest.raises(ProjectionFailureError, match="non-finite"):
            _fake_reprojector(_InfiniteTransformer()).project_point(0.0, 0.0)

    def test_non_finite_inverse_is_a_failure(self) -> None:
        with pytest.raises(ProjectionFailureError, match="non-finite"):
            _fake_reprojector(_InfiniteTransformer()).unproject_point(0.0, 0.0)

    def test_output_does_not_share_properties_with_input(self) -> None:
        source = FeatureCollection.from_mapping(
            {
                "type": "FeatureCollection",
                "features": [
                    {
                        "type": "Feature",
                        "geometry": {"type": "Point", "coordinates": [1.0, 2.0]},
                        "properties": {"pop": 5},
                    }
                ],
            }
        )
        projected = _fake_reprojector().reproject(source)
        with pytest.raises(TypeError):
            projected.features[0].properties["pop"] = 999  # type: ignore[index]
        assert projected.features[0].properties is not source.features[0].properties
        assert source.features[0].properties["pop"] == 5
        assert projected.features[0].properties["pop"] == 5

    def test_geometry_collection_rejected(self) -> None:
        nested = Geometry(GeometryKind.GEOMETRY_COLLECTION, geometries=())
        with pytest.raises(UnsupportedGeometryError):
            _fake_reprojector().reproject(FeatureCollection.from_geometries([nested]))


# ---------------------------------------------------------------------------
# Lenient policy
# ---------------------------------------------------------------------------


class TestLenientReprojection:
    def test_multiline_keeps_projectable_lines(self) -> None:
        grid = Geometry(
            GeometryKind.MULTI_LINE_STRING,
            (
                ((0.0, 0.0), (100.0, 0.0), (120.0, 0.0)),
                ((10.0, 0.0), (20.0, 0.0), (95.0, 0.0)),
            ),
        )
        projected = _fake_reprojector().reproject_lenient(FeatureCollection.from_geometries([grid]))
        (feature,) = projected
        (line,) = feature.geometry.coordinates
        assert len(line) == 2
        assert line[0] == pytest.approx((10.0, 0.0))
        assert line[1] == pytest.approx((20.0, 0.0))

    def test_features_left_empty_are_dropped(self) -> None:
        collection = FeatureCollection.from_geometries(
            [
                Geometry(GeometryKind.POINT, (100.0, 0.0)),
                Geometry(GeometryKind.LINE_STRING, ((0.0, 0.0), (100.0, 0.0))),
                Geometry(GeometryKind.MULTI_LINE_STRING, (((91.0, 0.0), (92.0, 0.0)),)),
                Geometry(GeometryKind.MULTI_POINT, ((0.0, 0.0), (100.0, 0.0))),
            ]
        )
        projected = _fake_reprojector().reproject_lenient(collection)
        (survivor,) = projected
        assert survivor.geometry.kind is GeometryKind.MULTI_POINT
        (point,) = survivor.geometry.coordinates
        assert point == pytest.approx((0.0, 0.0))

    def test_polygons_stay_strict(self) -> None:
        polygon = Geometry(
            GeometryKind.POLYGON,
            (((0.0, 0.0), (100.0, 0.0), (0.0, 10.0), (0.0, 0.0)),),
        )
        with pytest.raises(ProjectionFailureError):
            _fake_reprojector().reproject_lenient(FeatureCollection.from_geometries([polygon]))
