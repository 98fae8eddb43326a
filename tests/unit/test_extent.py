"""Unit tests for padded extent computation."""

from __future__ import annotations

import math

import pytest

from geojson2svg.errors import EmptyInputError, UnsupportedGeometryError
from geojson2svg.extent import compute_extent
from geojson2svg.models import FeatureCollection, Geometry, GeometryKind, MapExtent


def _collection(*geometries: Geometry) -> FeatureCollection:
    return FeatureCollection.from_geometries(list(geometries))


class TestComputeExtent:
    def test_pads_each_axis_by_a_tenth(self) -> None:
        extent = compute_extent(
            _collection(
                Geometry(GeometryKind.POINT, (0.0, 0.0)),
                Geometry(GeometryKind.POINT, (10.0, 20.0)),
            )
        )
        assert extent == MapExtent(left=-1.0, right=11.0, bottom=-2.0, top=22.0)

    def test_walks_every_nesting_level(self) -> None:
        multipolygon = Geometry(
            GeometryKind.MULTI_POLYGON,
            (
                (((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 0.0)),),
                (((50.0, -50.0), (60.0, -40.0), (55.0, 100.0), (50.0, -50.0)),),
            ),
        )
        line = Geometry(GeometryKind.MULTI_LINE_STRING, (((-40.0, 5.0), (-30.0, 6.0)),))
        extent = compute_extent(_collection(multipolygon, line))
        assert extent.left == pytest.approx(-40.0 - 10.0)
        assert extent.right == pytest.approx(60.0 + 10.0)
        assert extent.bottom == pytest.approx(-50.0 - 15.0)
        assert extent.top == pytest.approx(100.0 + 15.0)

    def test_single_point_is_degenerate_not_nan(self) -> None:
        extent = compute_extent(_collection(Geometry(GeometryKind.POINT, (5.0, 5.0))))
        assert extent == MapExtent(left=5.0, right=5.0, bottom=5.0, top=5.0)
        assert extent.width == 0.0
        assert extent.height == 0.0
        assert extent.is_degenerate
        assert not any(math.isnan(v) for v in extent.to_list())

    def test_horizontal_line_is_not_degenerate(self) -> None:
        extent = compute_extent(
            _collection(Geometry(GeometryKind.LINE_STRING, ((0.0, 3.0), (10.0, 3.0))))
        )
        assert extent.height == 0.0
        assert not extent.is_degenerate

    def test_empty_collection(self) -> None:
        with pytest.raises(EmptyInputError):
            compute_extent(FeatureCollection())

    def test_collection_without_coordinates(self) -> None:
        with pytest.raises(EmptyInputError):
            compute_extent(_collection(Geometry(GeometryKind.MULTI_POINT, ())))

    def test_geometry_collection_rejected(self) -> None:
        nested = Geometry(
            GeometryKind.GEOMETRY_COLLECTION,
            geometries=(Geometry(GeometryKind.POINT, (1.0, 1.0)),),
        )
        with pytest.raises(UnsupportedGeometryError):
            compute_extent(_collection(Geometry(GeometryKind.POINT, (0.0, 0.0)), nested))
