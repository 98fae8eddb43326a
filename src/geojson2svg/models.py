"""Domain models shared across pipeline modules."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Sequence

from .errors import InvalidInputError

Position = tuple[float, float]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _position(value: Any, field_name: str) -> Position:
    if not isinstance(value, (list, tuple)) or len(value) < 2:
        raise InvalidInputError(f"Expected [x, y] position for '{field_name}'")
    x_raw, y_raw = value[0], value[1]
    if not _is_number(x_raw) or not _is_number(y_raw):
        raise InvalidInputError(f"Expected numeric position for '{field_name}'")
    return (float(x_raw), float(y_raw))


def _nested_positions(value: Any, depth: int, field_name: str) -> Any:
    if depth == 0:
        return _position(value, field_name)
    if not isinstance(value, (list, tuple)):
        raise InvalidInputError(f"Expected list for '{field_name}'")
    return tuple(
        _nested_positions(item, depth - 1, f"{field_name}[{idx}]")
        for idx, item in enumerate(value)
    )


class GeometryKind(str, Enum):
    POINT = "Point"
    MULTI_POINT = "MultiPoint"
    LINE_STRING = "LineString"
    MULTI_LINE_STRING = "MultiLineString"
    POLYGON = "Polygon"
    MULTI_POLYGON = "MultiPolygon"
    GEOMETRY_COLLECTION = "GeometryCollection"

    @property
    def coordinate_depth(self) -> int:
        """Nesting level of `coordinates` above a single position."""
        return _COORDINATE_DEPTH[self]

    @property
    def is_line(self) -> bool:
        return self in (GeometryKind.LINE_STRING, GeometryKind.MULTI_LINE_STRING)

    @property
    def is_polygon(self) -> bool:
        return self in (GeometryKind.POLYGON, GeometryKind.MULTI_POLYGON)

    @property
    def is_point(self) -> bool:
        return self in (GeometryKind.POINT, GeometryKind.MULTI_POINT)


_COORDINATE_DEPTH = {
    GeometryKind.POINT: 0,
    GeometryKind.MULTI_POINT: 1,
    GeometryKind.LINE_STRING: 1,
    GeometryKind.MULTI_LINE_STRING: 2,
    GeometryKind.POLYGON: 2,
    GeometryKind.MULTI_POLYGON: 3,
    GeometryKind.GEOMETRY_COLLECTION: -1,
}


@dataclass(frozen=True, slots=True)
class Geometry:
    """Tagged GeoJSON geometry with coordinates as nested `(x, y)` tuples."""

    kind: GeometryKind
    coordinates: Any = ()
    geometries: tuple[Geometry, ...] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], field_name: str = "geometry") -> Geometry:
        type_raw = data.get("type")
        try:
            kind = GeometryKind(type_raw)
        except ValueError as exc:
            raise InvalidInputError(f"Unknown geometry type {type_raw!r} for '{field_name}'") from exc

        if kind is GeometryKind.GEOMETRY_COLLECTION:
            members_raw = data.get("geometries")
            if not isinstance(members_raw, list):
                raise InvalidInputError(f"Expected list for '{field_name}.geometries'")
            members: list[Geometry] = []
            for idx, item in enumerate(members_raw):
                if not isinstance(item, Mapping):
                    raise InvalidInputError(f"Expected mapping for '{field_name}.geometries[{idx}]'")
                members.append(cls.from_mapping(item, f"{field_name}.geometries[{idx}]"))
            return cls(kind=kind, geometries=tuple(members))

        coordinates = _nested_positions(
            data.get("coordinates"),
            kind.coordinate_depth,
            f"{field_name}.coordinates",
        )
        return cls(kind=kind, coordinates=coordinates)

    def iter_points(self) -> Iterator[Position]:
        """Yield every coordinate pair, descending into collections."""
        if self.kind is GeometryKind.GEOMETRY_COLLECTION:
            for member in self.geometries:
                yield from member.iter_points()
            return
        yield from _iter_nested(self.coordinates, self.kind.coordinate_depth)

    def with_coordinates(self, coordinates: Any) -> Geometry:
        return replace(self, coordinates=coordinates)


def _iter_nested(value: Any, depth: int) -> Iterator[Position]:
    if depth == 0:
        yield value
        return
    for item in value:
        yield from _iter_nested(item, depth - 1)


@dataclass(frozen=True, slots=True)
class Feature:
    """One GeoJSON feature: a geometry plus its attribute properties."""

    geometry: Geometry
    properties: Mapping[str, Any] = field(default_factory=dict)
    id: Any = None

    def __post_init__(self) -> None:
        # Each feature owns a read-only copy of its attributes.
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], index: int = 0) -> Feature:
        if data.get("type") != "Feature":
            raise InvalidInputError(f"Expected Feature object at index {index}")
        geometry_raw = data.get("geometry")
        if geometry_raw is None:
            raise InvalidInputError(f"Feature {index} has no geometry")
        if not isinstance(geometry_raw, Mapping):
            raise InvalidInputError(f"Expected mapping for 'features[{index}].geometry'")
        properties_raw = data.get("properties")
        if properties_raw is None:
            properties: dict[str, Any] = {}
        elif isinstance(properties_raw, Mapping):
            properties = dict(properties_raw)
        else:
            raise InvalidInputError(f"Expected mapping for 'features[{index}].properties'")
        return cls(
            geometry=Geometry.from_mapping(geometry_raw, f"features[{index}].geometry"),
            properties=properties,
            id=data.get("id"),
        )

    def with_geometry(self, geometry: Geometry) -> Feature:
        return Feature(geometry=geometry, properties=self.properties, id=self.id)


@dataclass(frozen=True, slots=True)
class FeatureCollection:
    """Ordered, immutable set of features; pipeline stages return new ones."""

    features: tuple[Feature, ...] = ()

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self) -> Iterator[Feature]:
        return iter(self.features)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> FeatureCollection:
        kind = data.get("type")
        if kind == "Feature":
            return cls(features=(Feature.from_mapping(data),))
        if kind != "FeatureCollection":
            raise InvalidInputError(f"Expected a FeatureCollection, got {kind!r}")
        features_raw = data.get("features")
        if not isinstance(features_raw, list):
            raise InvalidInputError("Expected list for 'features'")
        features: list[Feature] = []
        for idx, item in enumerate(features_raw):
            if not isinstance(item, Mapping):
                raise InvalidInputError(f"Expected mapping at 'features[{idx}]'")
            features.append(Feature.from_mapping(item, idx))
        return cls(features=tuple(features))

    @classmethod
    def from_geometries(cls, geometries: Sequence[Geometry]) -> FeatureCollection:
        return cls(features=tuple(Feature(geometry=geometry) for geometry in geometries))


@dataclass(frozen=True, slots=True)
class MapExtent:
    """Map bounding box in output-projection units.

    Computed extents may have zero span on one axis (a flat line) or both (a
    single point); only the latter is rejected, by `Converter`.
    """

    left: float
    right: float
    bottom: float
    top: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.top - self.bottom

    @property
    def is_degenerate(self) -> bool:
        """True when the box has no extent along either axis."""
        return not self.width > 0.0 and not self.height > 0.0

    @classmethod
    def from_sequence(cls, values: Sequence[Any], field_name: str = "extent") -> MapExtent:
        if len(values) != 4:
            raise ValueError(f"Expected [left, right, bottom, top] for '{field_name}'")
        numbers: list[float] = []
        for idx, value in enumerate(values):
            if not _is_number(value) or not math.isfinite(float(value)):
                raise ValueError(f"Expected finite number for '{field_name}[{idx}]'")
            numbers.append(float(value))
        left, right, bottom, top = numbers
        if right <= left or top <= bottom:
            raise ValueError(f"'{field_name}' must satisfy right > left and top > bottom")
        return cls(left=left, right=right, bottom=bottom, top=top)

    def to_list(self) -> list[float]:
        return [self.left, self.right, self.bottom, self.top]
