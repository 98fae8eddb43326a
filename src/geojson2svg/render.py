"""Map rendering pipeline: layers in, SVG document out."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping, Sequence

from .classification import class_index_or_raise, classify, default_class_count
from .config import AppConfig, ClassificationConfig, LayerConfig, LayerStyle, MapConfig
from .converter import Converter
from .errors import Geojson2SvgError
from .extent import compute_extent
from .graticule import GRATICULE_LAYER_NAME, build_graticule
from .io_geojson import extract_sample, load_feature_collection
from .models import FeatureCollection, GeometryKind, MapExtent
from .palette import palette_colours
from .reproject import Reprojector
from .svg import RenderedLayer, ShapeRole, StyledShape, build_document, write_document

_LOGGER = logging.getLogger("geojson2svg.render")

# Failures that abort one layer; anything else is a bug and propagates.
_LAYER_ERRORS = (Geojson2SvgError, ValueError, OSError)


@dataclass(frozen=True, slots=True)
class LayerClassification:
    bounds: tuple[float, ...]
    class_indices: tuple[int, ...]
    colours: tuple[str, ...]

    @property
    def n_classes(self) -> int:
        return len(self.bounds) - 1


@dataclass(slots=True)
class RenderReport:
    output_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)
    summary: dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)


class MapRenderer:
    """Runs the per-layer pipeline for one map configuration."""

    def __init__(self, cfg: MapConfig, *, reprojector: Reprojector | None = None) -> None:
        self.cfg = cfg
        if reprojector is None and cfg.projection is not None:
            reprojector = Reprojector(cfg.projection)
        self.reprojector = reprojector

    def prepare_layer(self, layer: LayerConfig) -> FeatureCollection:
        """Load a layer and move it into the output projection (strict)."""
        collection = load_feature_collection(layer.path)
        if self.reprojector is not None:
            collection = self.reprojector.reproject(collection)
        return collection

    def prepare_graticule(self) -> FeatureCollection:
        collection = build_graticule(self.cfg.graticule.step_deg)
        if self.reprojector is not None:
            collection = self.reprojector.reproject_lenient(collection)
        return collection

    def resolve_extent(self, prepared: Mapping[str, FeatureCollection]) -> MapExtent:
        if self.cfg.extent is not None:
            return self.cfg.extent
        name = self.cfg.extent_layer
        if name is None or name not in prepared:
            raise ValueError(f"Extent layer '{name}' is not available")
        return compute_extent(prepared[name])

    def render_layer(
        self,
        *,
        name: str,
        collection: FeatureCollection,
        style: LayerStyle,
        converter: Converter,
        classification: LayerClassification | None = None,
    ) -> RenderedLayer:
        shapes: list[StyledShape] = []
        for idx, feature in enumerate(collection):
            role = _shape_role(feature.geometry.kind)
            feature_style = style
            if classification is not None:
                colour = classification.colours[classification.class_indices[idx]]
                if role is ShapeRole.LINE:
                    feature_style = replace(style, stroke=colour)
                else:
                    feature_style = replace(style, fill=colour)
            for primitive in converter.convert_geometry(feature.geometry):
                shapes.append(
                    StyledShape(feature_index=idx, role=role, primitive=primitive, style=feature_style)
                )
        return RenderedLayer(name=name, shapes=tuple(shapes))


def classify_layer(collection: FeatureCollection, cfg: ClassificationConfig) -> LayerClassification:
    """Class index and colour for every feature, in feature order."""
    sample = extract_sample(collection, cfg.field)
    nb_class = cfg.nb_class if cfg.nb_class is not None else default_class_count(len(sample))
    bounds = classify(sample, nb_class, cfg.method)
    n_classes = len(bounds) - 1
    return LayerClassification(
        bounds=tuple(bounds),
        class_indices=tuple(class_index_or_raise(bounds, value) for value in sample),
        colours=palette_colours(cfg.palette, n_classes),
    )


def run_render(cfg: AppConfig, *, output_path: Path | None = None) -> RenderReport:
    """Render every configured layer and write the SVG document."""
    map_cfg = cfg.map
    target = output_path if output_path is not None else map_cfg.output
    report = RenderReport(output_path=target)

    try:
        renderer = MapRenderer(map_cfg)
    except _LAYER_ERRORS as exc:
        report.add_error(f"Failed initializing map renderer: {exc}")
        return report
    report.add_info(f"Output projection: {map_cfg.projection or 'none (lon/lat used as planar units)'}")

    prepared: dict[str, FeatureCollection] = {}
    for layer in map_cfg.layers:
        layer_t0 = time.perf_counter()
        try:
            prepared[layer.name] = renderer.prepare_layer(layer)
        except _LAYER_ERRORS as exc:
            report.add_error(f"Layer '{layer.name}': {exc}")
            continue
        _LOGGER.info(
            "[render] prepared layer %s (%d features) in %.2fs",
            layer.name,
            len(prepared[layer.name]),
            time.perf_counter() - layer_t0,
        )

    graticule: FeatureCollection | None = None
    if map_cfg.graticule.enabled:
        try:
            graticule = renderer.prepare_graticule()
        except _LAYER_ERRORS as exc:
            report.add_error(f"Layer '{GRATICULE_LAYER_NAME}': {exc}")

    try:
        extent = renderer.resolve_extent(prepared)
        converter = Converter(map_cfg.width, map_cfg.height, extent)
    except _LAYER_ERRORS as exc:
        report.add_error(f"Cannot resolve map extent: {exc}")
        return report
    report.add_info(
        "Map extent: "
        f"left={extent.left:.6g}, right={extent.right:.6g}, "
        f"bottom={extent.bottom:.6g}, top={extent.top:.6g} "
        f"(resolution={converter.resolution:.6g} units/px)"
    )

    rendered: list[RenderedLayer] = []
    if graticule is not None:
        rendered.append(
            renderer.render_layer(
                name=GRATICULE_LAYER_NAME,
                collection=graticule,
                style=map_cfg.graticule.style,
                converter=converter,
            )
        )

    layers_rendered = 0
    for layer in map_cfg.layers:
        collection = prepared.get(layer.name)
        if collection is None:
            continue
        try:
            classification = None
            if layer.classification is not None:
                classification = classify_layer(collection, layer.classification)
                report.add_info(
                    f"Layer '{layer.name}' classified on '{layer.classification.field}' "
                    f"({layer.classification.method.value}) into {classification.n_classes} classes: "
                    + ", ".join(f"{bound:.6g}" for bound in classification.bounds)
                )
            rendered.append(
                renderer.render_layer(
                    name=layer.name,
                    collection=collection,
                    style=layer.style,
                    converter=converter,
                    classification=classification,
                )
            )
            layers_rendered += 1
        except _LAYER_ERRORS as exc:
            report.add_error(f"Layer '{layer.name}': {exc}")

    report.summary = {
        "layers_total": len(map_cfg.layers),
        "layers_rendered": layers_rendered,
        "shapes_total": sum(len(item.shapes) for item in rendered),
    }
    report.add_info(
        "Render summary: "
        f"layers_total={report.summary['layers_total']}, "
        f"layers_rendered={report.summary['layers_rendered']}, "
        f"shapes_total={report.summary['shapes_total']}"
    )
    if not report.ok:
        report.add_warning(f"Document not written because of layer errors: {target}")
        return report

    document = build_document(
        width=map_cfg.width,
        height=map_cfg.height,
        layers=rendered,
        title=cfg.title,
    )
    write_document(target, document)
    report.add_info(f"SVG document written to {target}")
    return report


def format_render_lines(report: RenderReport) -> Sequence[str]:
    lines: list[str] = []
    lines.extend(f"[INFO] {msg}" for msg in report.infos)
    lines.extend(f"[WARN] {msg}" for msg in report.warnings)
    lines.extend(f"[ERROR] {msg}" for msg in report.errors)
    if report.ok:
        lines.append("[OK] Map rendering completed with no errors.")
    return lines


def _shape_role(kind: GeometryKind) -> ShapeRole:
    if kind.is_line:
        return ShapeRole.LINE
    if kind.is_point:
        return ShapeRole.MARKER
    return ShapeRole.AREA
