"""Validation layer for config and input datasets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .config import AppConfig, LayerConfig
from .errors import Geojson2SvgError
from .io_geojson import extract_sample, load_feature_collection
from .palette import is_known_palette
from .reproject import Reprojector


@dataclass(slots=True)
class ValidationReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)


class Validator:
    """Checks that a loaded config can be rendered before doing any drawing."""

    def __init__(self, cfg: AppConfig) -> None:
        self.cfg = cfg

    def run(self) -> ValidationReport:
        report = ValidationReport()
        self._validate_projection(report)
        for layer in self.cfg.map.layers:
            self._validate_layer(report, layer)
        if self.cfg.map.extent is not None:
            report.add_info(f"Explicit map extent: {self.cfg.map.extent.to_list()}")
        else:
            report.add_info(f"Map extent derived from layer '{self.cfg.map.extent_layer}'")
        return report

    def _validate_projection(self, report: ValidationReport) -> None:
        projection = self.cfg.map.projection
        if projection is None:
            report.add_warning(
                "No output projection configured; lon/lat degrees are drawn as planar units."
            )
            return
        try:
            Reprojector(projection)
        except Geojson2SvgError as exc:
            report.add_error(str(exc))
            return
        report.add_info(f"Output projection accepted: {projection}")

    def _validate_layer(self, report: ValidationReport, layer: LayerConfig) -> None:
        if not layer.path.exists():
            report.add_error(f"Layer '{layer.name}': missing input file {layer.path}")
            return
        try:
            collection = load_feature_collection(layer.path)
        except (Geojson2SvgError, ValueError, OSError) as exc:
            report.add_error(f"Layer '{layer.name}': failed parsing {layer.path}: {exc}")
            return
        if len(collection) == 0:
            report.add_warning(f"Layer '{layer.name}' has no features")
        report.add_info(f"Layer '{layer.name}': loaded {len(collection)} features from {layer.path}")

        classification = layer.classification
        if classification is None:
            return
        if not is_known_palette(classification.palette):
            report.add_error(f"Layer '{layer.name}': unknown palette '{classification.palette}'")
        try:
            extract_sample(collection, classification.field)
        except Geojson2SvgError as exc:
            report.add_error(f"Layer '{layer.name}': {exc}")


def format_report_lines(report: ValidationReport) -> Sequence[str]:
    lines: list[str] = []
    lines.extend(f"[INFO] {msg}" for msg in report.infos)
    lines.extend(f"[WARN] {msg}" for msg in report.warnings)
    lines.extend(f"[ERROR] {msg}" for msg in report.errors)
    if report.ok:
        lines.append("[OK] Validation passed.")
    return lines
