"""GeoJSON file loading and attribute sample extraction."""

from __future__ import annotations

import json
from pathlib import Path

from .errors import InvalidInputError
from .models import FeatureCollection


def load_feature_collection(path: Path) -> FeatureCollection:
    """Read and decode a GeoJSON FeatureCollection (or single Feature)."""
    if not path.exists():
        raise FileNotFoundError(f"GeoJSON file not found: {path}")
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise InvalidInputError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise InvalidInputError(f"Expected GeoJSON object at root of {path}")
    return FeatureCollection.from_mapping(raw)


def extract_sample(collection: FeatureCollection, field_name: str) -> list[float]:
    """Numeric values of `field_name`, one per feature, in feature order."""
    values: list[float] = []
    for idx, feature in enumerate(collection):
        if field_name not in feature.properties:
            raise InvalidInputError(f"Feature {idx} has no property '{field_name}'")
        value = feature.properties[field_name]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidInputError(
                f"Property '{field_name}' of feature {idx} is not numeric: {value!r}"
            )
        values.append(float(value))
    return values
