"""Error taxonomy shared by the rendering core."""

from __future__ import annotations


class Geojson2SvgError(Exception):
    """Base class for every failure raised by the rendering core."""


class InvalidInputError(Geojson2SvgError, ValueError):
    """Bad class count, empty or non-numeric sample, malformed geometry."""


class EmptyInputError(Geojson2SvgError):
    """A geometry collection with nothing to measure."""


class UnsupportedGeometryError(Geojson2SvgError):
    """Geometry variant the pipeline cannot handle (GeometryCollection)."""


class ProjectionFailureError(Geojson2SvgError):
    """A coordinate could not be projected into the output frame."""


class LookupFailureError(Geojson2SvgError):
    """A value falls outside the computed class bounds."""
