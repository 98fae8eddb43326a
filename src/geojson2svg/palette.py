"""Colour-ramp lookup from palette name and class index."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

DEFAULT_PALETTE = "Blues"


def is_known_palette(name: str) -> bool:
    return name in _require_matplotlib().colormaps


def palette_colours(name: str, n_classes: int) -> tuple[str, ...]:
    """Sample `n_classes` evenly spaced `#rrggbb` colours from a colormap."""
    if n_classes < 1:
        raise ValueError("n_classes must be >= 1")
    return _palette_colours(name, n_classes)


def colour_for_class(name: str, index: int, n_classes: int) -> str:
    colours = palette_colours(name, n_classes)
    if index < 0 or index >= len(colours):
        raise IndexError(f"Class index {index} out of range for {n_classes} classes")
    return colours[index]


@lru_cache(maxsize=64)
def _palette_colours(name: str, n_classes: int) -> tuple[str, ...]:
    matplotlib = _require_matplotlib()
    if name not in matplotlib.colormaps:
        raise ValueError(f"Unknown palette '{name}'")
    cmap = matplotlib.colormaps[name].resampled(n_classes)
    return tuple(matplotlib.colors.to_hex(cmap(idx)) for idx in range(n_classes))


@lru_cache(maxsize=1)
def _require_matplotlib() -> Any:
    try:
        import matplotlib
        import matplotlib.colors
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("matplotlib is required for palette lookup") from exc
    return matplotlib
