"""Typed configuration loader for the map YAML file."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, cast

import yaml

from .classification import ClassificationMethod
from .graticule import GRATICULE_LAYER_NAME, GRATICULE_STEP_DEG
from .models import MapExtent
from .palette import DEFAULT_PALETTE


def _mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"Expected mapping for '{field_name}'")
    return cast(Mapping[str, Any], value)


def _str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _optional_str(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    return _str(value, field_name)


def _positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Expected integer for '{field_name}'")
    if value < 1:
        raise ValueError(f"'{field_name}' must be >= 1")
    return value


def _float(value: Any, field_name: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    raise ValueError(f"Expected float for '{field_name}'")


def _bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"Expected bool for '{field_name}'")
    return value


def _style_value(value: Any, field_name: str) -> str:
    # SVG attribute values; YAML numbers are accepted and stringified.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return _str(value, field_name)


def _path_from_cfg(value: Any, field_name: str, root_dir: Path) -> Path:
    raw = _str(value, field_name)
    p = Path(raw)
    return p if p.is_absolute() else root_dir / p


_STYLE_KEYS = {
    "fill": "fill",
    "fill-opacity": "fill_opacity",
    "stroke": "stroke",
    "stroke-opacity": "stroke_opacity",
    "stroke-width": "stroke_width",
    "radius": "radius",
}


@dataclass(frozen=True, slots=True)
class LayerStyle:
    fill: str = "blue"
    fill_opacity: str = "0.8"
    stroke: str = "black"
    stroke_opacity: str = "1"
    stroke_width: str = "0.7"
    radius: str = "4"

    @classmethod
    def from_mapping(
        cls,
        raw: Mapping[str, Any],
        field_name: str,
        defaults: LayerStyle | None = None,
    ) -> LayerStyle:
        """Read the style keys present in `raw` on top of `defaults`."""
        base = defaults if defaults is not None else cls()
        updates: dict[str, str] = {}
        for key, attr in _STYLE_KEYS.items():
            value = raw.get(key)
            if value is not None:
                updates[attr] = _style_value(value, f"{field_name}.{key}")
        return replace(base, **updates)


GRATICULE_STYLE = LayerStyle(
    fill="none",
    fill_opacity="0",
    stroke="#888888",
    stroke_opacity="1",
    stroke_width="0.4",
)


@dataclass(frozen=True, slots=True)
class ClassificationConfig:
    method: ClassificationMethod
    field: str
    nb_class: int | None
    palette: str

    @classmethod
    def from_layer_mapping(cls, raw: Mapping[str, Any], field_name: str) -> ClassificationConfig | None:
        method_raw = raw.get("classification")
        if method_raw is None:
            return None
        method = ClassificationMethod.parse(_str(method_raw, f"{field_name}.classification"))
        nb_class_raw = raw.get("nb_class")
        return cls(
            method=method,
            field=_str(raw.get("field"), f"{field_name}.field"),
            nb_class=(
                None
                if nb_class_raw is None
                else _positive_int(nb_class_raw, f"{field_name}.nb_class")
            ),
            palette=_str(raw.get("palette", DEFAULT_PALETTE), f"{field_name}.palette"),
        )


@dataclass(frozen=True, slots=True)
class LayerConfig:
    name: str
    path: Path
    style: LayerStyle
    classification: ClassificationConfig | None = None

    @classmethod
    def from_mapping(cls, raw: Any, field_name: str, root_dir: Path) -> LayerConfig:
        # A bare string is shorthand for a layer with only a path.
        if isinstance(raw, str):
            raw = {"path": raw}
        data = _mapping(raw, field_name)
        path = _path_from_cfg(data.get("path"), f"{field_name}.path", root_dir)
        name = _optional_str(data.get("name"), f"{field_name}.name") or path.stem
        return cls(
            name=name,
            path=path,
            style=LayerStyle.from_mapping(data, field_name),
            classification=ClassificationConfig.from_layer_mapping(data, field_name),
        )


@dataclass(frozen=True, slots=True)
class GraticuleConfig:
    enabled: bool = False
    step_deg: float = GRATICULE_STEP_DEG
    style: LayerStyle = GRATICULE_STYLE

    @classmethod
    def from_value(cls, raw: Any, field_name: str) -> GraticuleConfig:
        if raw is None:
            return cls()
        if isinstance(raw, bool):
            return cls(enabled=raw)
        data = _mapping(raw, field_name)
        step_deg = _float(data.get("step_deg", GRATICULE_STEP_DEG), f"{field_name}.step_deg")
        if step_deg <= 0:
            raise ValueError(f"{field_name}.step_deg must be > 0")
        return cls(
            enabled=_bool(data.get("enabled", True), f"{field_name}.enabled"),
            step_deg=step_deg,
            style=LayerStyle.from_mapping(data, field_name, defaults=GRATICULE_STYLE),
        )


@dataclass(frozen=True, slots=True)
class MapConfig:
    width: int
    height: int
    output: Path
    projection: str | None
    extent: MapExtent | None
    extent_layer: str | None
    graticule: GraticuleConfig
    layers: tuple[LayerConfig, ...]

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> MapConfig:
        layers_raw = raw.get("layers")
        if not isinstance(layers_raw, list) or not layers_raw:
            raise ValueError("Expected non-empty list for 'map.layers'")
        layers = tuple(
            LayerConfig.from_mapping(item, f"map.layers[{idx}]", root_dir)
            for idx, item in enumerate(layers_raw)
        )
        seen: set[str] = set()
        for layer in layers:
            if layer.name in seen:
                raise ValueError(f"Duplicate layer name '{layer.name}' in 'map.layers'")
            seen.add(layer.name)

        extent_raw = raw.get("extent")
        extent: MapExtent | None = None
        extent_layer: str | None = None
        if isinstance(extent_raw, list):
            extent = MapExtent.from_sequence(extent_raw, "map.extent")
        elif extent_raw is None:
            extent_layer = layers[0].name
        else:
            extent_layer = _str(extent_raw, "map.extent")
            if extent_layer not in seen:
                raise ValueError(f"map.extent refers to unknown layer '{extent_layer}'")

        graticule = GraticuleConfig.from_value(raw.get("graticule"), "map.graticule")
        if graticule.enabled and GRATICULE_LAYER_NAME in seen:
            raise ValueError(f"Layer name '{GRATICULE_LAYER_NAME}' is reserved when the graticule is enabled")

        return cls(
            width=_positive_int(raw.get("width"), "map.width"),
            height=_positive_int(raw.get("height"), "map.height"),
            output=_path_from_cfg(raw.get("output"), "map.output", root_dir),
            projection=_optional_str(raw.get("projection"), "map.projection"),
            extent=extent,
            extent_layer=extent_layer,
            graticule=graticule,
            layers=layers,
        )


@dataclass(frozen=True, slots=True)
class TitleConfig:
    content: str
    font_size: str
    position: tuple[float, float]

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> TitleConfig:
        position_raw = raw.get("position")
        if not isinstance(position_raw, list) or len(position_raw) != 2:
            raise ValueError("Expected [x, y] for 'title.position'")
        return cls(
            content=_str(raw.get("content"), "title.content"),
            font_size=_style_value(raw.get("font-size", "16"), "title.font-size"),
            position=(
                _float(position_raw[0], "title.position[0]"),
                _float(position_raw[1], "title.position[1]"),
            ),
        )


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    file: Path | None = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> LoggingConfig:
        file_raw = raw.get("file")
        if file_raw is None:
            return cls()
        return cls(file=_path_from_cfg(file_raw, "logging.file", root_dir))


@dataclass(frozen=True, slots=True)
class AppConfig:
    source_path: Path
    map: MapConfig
    title: TitleConfig | None
    logging: LoggingConfig

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], source_path: Path) -> AppConfig:
        root_dir = source_path.parent.resolve()
        title_raw = raw.get("title")
        logging_raw = raw.get("logging")
        return cls(
            source_path=source_path.resolve(),
            map=MapConfig.from_mapping(_mapping(raw.get("map"), "map"), root_dir),
            title=None if title_raw is None else TitleConfig.from_mapping(_mapping(title_raw, "title")),
            logging=(
                LoggingConfig()
                if logging_raw is None
                else LoggingConfig.from_mapping(_mapping(logging_raw, "logging"), root_dir)
            ),
        )


def load_config(path: str | Path) -> AppConfig:
    """Load and validate the YAML config file into typed settings."""
    cfg_path = Path(path).resolve()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if not isinstance(raw, Mapping):
        raise ValueError("Top-level config must be a YAML mapping")
    return AppConfig.from_mapping(cast(Mapping[str, Any], raw), cfg_path)
