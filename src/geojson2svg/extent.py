"""Padded bounding extent of a feature collection."""

from __future__ import annotations

import math

from .errors import EmptyInputError, UnsupportedGeometryError
from .models import FeatureCollection, GeometryKind, MapExtent

PADDING_DIVISOR = 10.0


def compute_extent(collection: FeatureCollection) -> MapExtent:
    """Bounding box of every coordinate, padded by a tenth of each span.

    A single point gives a zero-size extent; it is returned as is and left
    to the viewport converter to reject.
    """
    if len(collection) == 0:
        raise EmptyInputError("Cannot compute an extent from an empty collection")

    left, right = math.inf, -math.inf
    bottom, top = math.inf, -math.inf
    for idx, feature in enumerate(collection):
        geometry = feature.geometry
        if geometry.kind is GeometryKind.GEOMETRY_COLLECTION:
            raise UnsupportedGeometryError(
                f"Feature {idx}: GeometryCollection is not supported for extent computation"
            )
        for x, y in geometry.iter_points():
            left = min(left, x)
            right = max(right, x)
            bottom = min(bottom, y)
            top = max(top, y)

    if left > right or bottom > top:
        raise EmptyInputError("Collection has no coordinates to compute an extent from")

    pad_x = (right - left) / PADDING_DIVISOR
    pad_y = (top - bottom) / PADDING_DIVISOR
    return MapExtent(
        left=left - pad_x,
        right=right + pad_x,
        bottom=bottom - pad_y,
        top=top + pad_y,
    )
