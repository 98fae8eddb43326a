"""SVG document assembly for rendered layers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from html import escape
from pathlib import Path
from typing import Sequence

from .config import LayerStyle, TitleConfig
from .converter import CircleMarker, PathData, Primitive


class ShapeRole(str, Enum):
    AREA = "area"
    LINE = "line"
    MARKER = "marker"


@dataclass(frozen=True, slots=True)
class StyledShape:
    feature_index: int
    role: ShapeRole
    primitive: Primitive
    style: LayerStyle


@dataclass(frozen=True, slots=True)
class RenderedLayer:
    name: str
    shapes: tuple[StyledShape, ...]


def build_document(
    *,
    width: int,
    height: int,
    layers: Sequence[RenderedLayer],
    title: TitleConfig | None = None,
) -> str:
    """Serialize rendered layers (and an optional title) into SVG text."""
    lines: list[str] = [
        "<?xml version='1.0' encoding='utf-8'?>",
        (
            "<svg xmlns='http://www.w3.org/2000/svg' "
            f"x='0' y='0' width='{width}' height='{height}' "
            f"viewBox='0 0 {width} {height}'>"
        ),
    ]
    for layer in layers:
        lines.append(f"  <g id='{escape(layer.name)}'>")
        lines.extend(f"    {_shape_element(shape)}" for shape in layer.shapes)
        lines.append("  </g>")
    if title is not None:
        x, y = title.position
        lines.append(
            f"  <text font-size='{escape(title.font_size)}' text-anchor='middle' "
            f"x='{_num(x)}' y='{_num(y)}'>{escape(title.content)}</text>"
        )
    lines.append("</svg>")
    return "\n".join(lines) + "\n"


def write_document(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _shape_element(shape: StyledShape) -> str:
    style = shape.style
    primitive = shape.primitive
    if isinstance(primitive, CircleMarker):
        return (
            f"<circle cx='{_num(primitive.cx)}' cy='{_num(primitive.cy)}' "
            f"r='{escape(style.radius)}' fill='{escape(style.fill)}'/>"
        )
    if not isinstance(primitive, PathData):
        raise TypeError(f"Unsupported primitive: {primitive!r}")
    if shape.role is ShapeRole.LINE:
        attrs = {"fill": "none"}
    else:
        attrs = {"fill": style.fill, "fill-opacity": style.fill_opacity}
    attrs.update(
        {
            "stroke": style.stroke,
            "stroke-width": style.stroke_width,
            "stroke-opacity": style.stroke_opacity,
        }
    )
    rendered = " ".join(f"{key}='{escape(value)}'" for key, value in attrs.items())
    return f"<path {rendered} d='{primitive.to_svg()}'/>"


def _num(value: float) -> str:
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text
