"""Mapping of projected coordinates into viewport path primitives."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Sequence, Union

from .errors import InvalidInputError, UnsupportedGeometryError
from .models import Geometry, GeometryKind, MapExtent, Position


class PathCommand(NamedTuple):
    op: str
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True, slots=True)
class PathData:
    """A finished path in viewport pixels."""

    commands: tuple[PathCommand, ...]
    closed: bool

    def to_svg(self, precision: int = 3) -> str:
        parts: list[str] = []
        for command in self.commands:
            if command.op == "Z":
                parts.append("Z")
            else:
                parts.append(f"{command.op}{_fmt(command.x, precision)},{_fmt(command.y, precision)}")
        return " ".join(parts)


@dataclass(frozen=True, slots=True)
class CircleMarker:
    cx: float
    cy: float


Primitive = Union[PathData, CircleMarker]


class PathState(str, Enum):
    EMPTY = "empty"
    OPEN = "open"
    CLOSED = "closed"


class PathBuilder:
    """Accumulates rings into one path until the owner closes or finishes it."""

    def __init__(self) -> None:
        self._commands: list[PathCommand] = []
        self._closed = False

    @property
    def state(self) -> PathState:
        if self._closed:
            return PathState.CLOSED
        return PathState.OPEN if self._commands else PathState.EMPTY

    def append_ring(self, points: Sequence[Position]) -> PathBuilder:
        if self._closed:
            raise InvalidInputError("Cannot append a ring to a closed path")
        if not points:
            raise InvalidInputError("Cannot draw an empty ring")
        first, *rest = points
        self._commands.append(PathCommand("M", first[0], first[1]))
        for x, y in rest:
            self._commands.append(PathCommand("L", x, y))
        return self

    def close(self) -> PathBuilder:
        if not self._closed:
            self._commands.append(PathCommand("Z"))
            self._closed = True
        return self

    def finish(self) -> PathData:
        return PathData(commands=tuple(self._commands), closed=self._closed)


class Converter:
    """Uniform-scale mapping from an extent onto a `width` x `height` viewport.

    The resolution (output units per pixel) is the larger of the two axis
    scales so the whole extent fits; the y axis is flipped because the
    viewport origin is the top-left corner.
    """

    def __init__(self, viewport_width: int, viewport_height: int, extent: MapExtent) -> None:
        for name, value in (("viewport_width", viewport_width), ("viewport_height", viewport_height)):
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise InvalidInputError(f"{name} must be a positive integer, got {value!r}")
        if extent.is_degenerate:
            raise InvalidInputError(
                "Extent has zero width and height; cannot derive a viewport resolution "
                f"from {extent.to_list()}"
            )
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height
        self.extent = extent
        self.resolution = max(extent.width / viewport_width, extent.height / viewport_height)

    def project_point(self, point: Position) -> Position:
        return (
            (point[0] - self.extent.left) / self.resolution,
            (self.extent.top - point[1]) / self.resolution,
        )

    def build_path(
        self,
        rings: Sequence[Sequence[Position]],
        builder: PathBuilder | None = None,
    ) -> PathBuilder:
        """Append `rings` to a path.

        Without `builder` a fresh path is created and closed after the rings.
        A supplied builder is left open for the caller to close or finish.
        """
        close = builder is None
        target = PathBuilder() if builder is None else builder
        for ring in rings:
            target.append_ring([self.project_point(point) for point in ring])
        if close:
            target.close()
        return target

    def convert_geometry(self, geometry: Geometry) -> list[Primitive]:
        kind = geometry.kind
        coords = geometry.coordinates
        if kind is GeometryKind.POINT:
            return [self._marker(coords)]
        if kind is GeometryKind.MULTI_POINT:
            return [self._marker(point) for point in coords]
        if kind is GeometryKind.LINE_STRING:
            return [self.build_path([coords], PathBuilder()).finish()]
        if kind is GeometryKind.MULTI_LINE_STRING:
            builder = PathBuilder()
            for line in coords:
                self.build_path([line], builder)
            return [builder.finish()]
        if kind is GeometryKind.POLYGON:
            return [self.build_path(coords).finish()]
        if kind is GeometryKind.MULTI_POLYGON:
            builder = PathBuilder()
            for polygon in coords:
                self.build_path(polygon, builder)
            return [builder.close().finish()]
        raise UnsupportedGeometryError(f"Cannot draw geometry of type {kind.value}")

    def _marker(self, point: Position) -> CircleMarker:
        cx, cy = self.project_point(point)
        return CircleMarker(cx=cx, cy=cy)


def _fmt(value: float, precision: int) -> str:
    text = f"{value:.{precision}f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text
