"""Reprojection of lon/lat feature collections into the output projection."""

from __future__ import annotations

import logging
import math
from functools import lru_cache
from typing import Any, Sequence

from .errors import ProjectionFailureError, UnsupportedGeometryError
from .models import Feature, FeatureCollection, Geometry, GeometryKind, Position

_LOGGER = logging.getLogger("geojson2svg.reproject")

SOURCE_CRS = "EPSG:4326"


class Reprojector:
    """Projects WGS84 lon/lat degrees into `target_crs` planar units.

    Two failure policies are exposed: `reproject` aborts on the first point
    that cannot be projected, `reproject_lenient` drops such points (and the
    lines they leave too short) so a graticule is clipped by the domain of
    validity of the projection instead of failing the render.
    """

    def __init__(self, target_crs: str, *, transformer: Any | None = None) -> None:
        self.target_crs = target_crs
        self._transformer = transformer if transformer is not None else _build_transformer(target_crs)

    def project_point(self, x: float, y: float) -> Position:
        proj_error = _require_pyproj().exceptions.ProjError
        try:
            px, py = self._transformer.transform(
                math.radians(x),
                math.radians(y),
                radians=True,
                errcheck=True,
            )
        except proj_error as exc:
            raise ProjectionFailureError(f"Cannot project ({x}, {y}) to {self.target_crs}: {exc}") from exc
        if not math.isfinite(px) or not math.isfinite(py):
            raise ProjectionFailureError(f"Cannot project ({x}, {y}) to {self.target_crs}: non-finite result")
        return (float(px), float(py))

    def unproject_point(self, x: float, y: float) -> Position:
        """Inverse of `project_point`, returning lon/lat degrees."""
        pyproj = _require_pyproj()
        try:
            lon, lat = self._transformer.transform(
                x,
                y,
                radians=True,
                errcheck=True,
                direction=pyproj.enums.TransformDirection.INVERSE,
            )
        except pyproj.exceptions.ProjError as exc:
            raise ProjectionFailureError(f"Cannot unproject ({x}, {y}) from {self.target_crs}: {exc}") from exc
        if not math.isfinite(lon) or not math.isfinite(lat):
            raise ProjectionFailureError(f"Cannot unproject ({x}, {y}) from {self.target_crs}: non-finite result")
        return (math.degrees(lon), math.degrees(lat))

    def reproject(self, collection: FeatureCollection) -> FeatureCollection:
        """Strict reprojection: any failing point aborts the whole collection."""
        features: list[Feature] = []
        for idx, feature in enumerate(collection):
            geometry = feature.geometry
            _ensure_supported(geometry, idx)
            try:
                coordinates = self._project_nested(geometry.coordinates, geometry.kind.coordinate_depth)
            except ProjectionFailureError as exc:
                raise ProjectionFailureError(f"Feature {idx}: {exc}") from exc
            features.append(feature.with_geometry(geometry.with_coordinates(coordinates)))
        return FeatureCollection(features=tuple(features))

    def reproject_lenient(self, collection: FeatureCollection) -> FeatureCollection:
        """Reprojection for reference-grid layers; unprojectable points are dropped."""
        features: list[Feature] = []
        dropped_points = 0
        dropped_features = 0
        for idx, feature in enumerate(collection):
            geometry = feature.geometry
            _ensure_supported(geometry, idx)
            kind = geometry.kind

            if kind.is_polygon:
                try:
                    coordinates = self._project_nested(geometry.coordinates, kind.coordinate_depth)
                except ProjectionFailureError as exc:
                    raise ProjectionFailureError(f"Feature {idx}: {exc}") from exc
            elif kind is GeometryKind.POINT:
                coordinates = self._try_project(geometry.coordinates)
                if coordinates is None:
                    dropped_points += 1
            elif kind is GeometryKind.MULTI_LINE_STRING:
                lines: list[tuple[Position, ...]] = []
                for line in geometry.coordinates:
                    projected = self._project_line_lenient(line)
                    dropped_points += len(line) - len(projected)
                    if len(projected) >= 2:
                        lines.append(projected)
                coordinates = tuple(lines) if lines else None
            else:
                projected = self._project_line_lenient(geometry.coordinates)
                dropped_points += len(geometry.coordinates) - len(projected)
                min_points = 2 if kind is GeometryKind.LINE_STRING else 1
                coordinates = projected if len(projected) >= min_points else None

            if coordinates is None:
                dropped_features += 1
                _LOGGER.debug("Feature %d dropped: nothing left after lenient reprojection", idx)
                continue
            features.append(feature.with_geometry(geometry.with_coordinates(coordinates)))

        if dropped_points or dropped_features:
            _LOGGER.info(
                "Lenient reprojection to %s dropped %d points and %d features",
                self.target_crs,
                dropped_points,
                dropped_features,
            )
        return FeatureCollection(features=tuple(features))

    def _project_nested(self, value: Any, depth: int) -> Any:
        if depth == 0:
            return self.project_point(value[0], value[1])
        return tuple(self._project_nested(item, depth - 1) for item in value)

    def _project_line_lenient(self, line: Sequence[Position]) -> tuple[Position, ...]:
        out: list[Position] = []
        for point in line:
            projected = self._try_project(point)
            if projected is not None:
                out.append(projected)
        return tuple(out)

    def _try_project(self, point: Position) -> Position | None:
        try:
            return self.project_point(point[0], point[1])
        except ProjectionFailureError as exc:
            _LOGGER.debug("Dropping point: %s", exc)
            return None


def _ensure_supported(geometry: Geometry, idx: int) -> None:
    if geometry.kind is GeometryKind.GEOMETRY_COLLECTION:
        raise UnsupportedGeometryError(f"Feature {idx}: GeometryCollection cannot be reprojected")


def _build_transformer(target_crs: str) -> Any:
    pyproj = _require_pyproj()
    try:
        target = pyproj.CRS.from_user_input(target_crs)
        return pyproj.Transformer.from_crs(SOURCE_CRS, target, always_xy=True)
    except pyproj.exceptions.ProjError as exc:
        raise ProjectionFailureError(f"Invalid output projection {target_crs!r}: {exc}") from exc


@lru_cache(maxsize=1)
def _require_pyproj() -> Any:
    try:
        import pyproj
        import pyproj.enums
        import pyproj.exceptions
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("pyproj is required for reprojection") from exc
    return pyproj
