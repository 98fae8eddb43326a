"""Reference grid of meridians and parallels."""

from __future__ import annotations

from .models import FeatureCollection, Geometry, GeometryKind, Position

GRATICULE_LAYER_NAME = "graticule"
GRATICULE_STEP_DEG = 9.9
LON_LIMIT_DEG = 179.99
LAT_LIMIT_DEG = 89.99


def _steps(start: float, end_inclusive: float, step: float) -> list[float]:
    out: list[float] = []
    value = start
    while value <= end_inclusive:
        out.append(value)
        value += step
    return out


def build_graticule(step_deg: float = GRATICULE_STEP_DEG) -> FeatureCollection:
    """One MultiLineString feature: meridians first, then parallels."""
    if step_deg <= 0:
        raise ValueError("Graticule step must be > 0")
    lons = _steps(-LON_LIMIT_DEG, LON_LIMIT_DEG, step_deg)
    lats = _steps(-LAT_LIMIT_DEG, LAT_LIMIT_DEG, step_deg)

    lines: list[tuple[Position, ...]] = []
    for lon in lons:
        lines.append(tuple((lon, lat) for lat in lats))
    for lat in lats:
        lines.append(tuple((lon, lat) for lon in lons))
    geometry = Geometry(kind=GeometryKind.MULTI_LINE_STRING, coordinates=tuple(lines))
    return FeatureCollection.from_geometries([geometry])
