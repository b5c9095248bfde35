from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Any, Hashable, Sequence

import numpy as np


_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}([0-9a-fA-F]{2})?$")

DEFAULT_SCHEME = "category10"
COLOR_SCHEMES: dict[str, tuple[str, ...]] = {
    "category10": (
        "#1f77b4",
        "#ff7f0e",
        "#2ca02c",
        "#d62728",
        "#9467bd",
        "#8c564b",
        "#e377c2",
        "#7f7f7f",
        "#bcbd22",
        "#17becf",
    ),
    "tableau10": (
        "#4e79a7",
        "#f28e2c",
        "#e15759",
        "#76b7b2",
        "#59a14f",
        "#edc949",
        "#af7aa1",
        "#ff9da7",
        "#9c755f",
        "#bab0ab",
    ),
    "blues": ("#deebf7", "#08519c"),
    "greens": ("#e5f5e0", "#006d2c"),
    "oranges": ("#fee6ce", "#a63603"),
}
DEFAULT_SEQUENTIAL_SCHEME = "blues"


def is_hex_color(value: Any) -> bool:
    return isinstance(value, str) and bool(_HEX_COLOR.match(value))


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    if not is_hex_color(color):
        raise ValueError(f"expected #RRGGBB color, got {color!r}")
    return (int(color[1:3], 16), int(color[3:5], 16), int(color[5:7], 16))


def rgb_to_hex(rgb: Sequence[float]) -> str:
    r, g, b = (int(round(max(0.0, min(255.0, float(c))))) for c in rgb[:3])
    return f"#{r:02x}{g:02x}{b:02x}"


def interpolate_colors(stops: Sequence[str], t: float) -> str:
    """Piecewise-linear RGB interpolation across evenly spaced color stops."""

    if not stops:
        raise ValueError("at least one color stop is required")
    if len(stops) == 1:
        return stops[0]
    positions = np.linspace(0.0, 1.0, len(stops))
    rgb = np.asarray([hex_to_rgb(s) for s in stops], dtype=np.float64)
    t = float(np.clip(t, 0.0, 1.0))
    return rgb_to_hex([np.interp(t, positions, rgb[:, c]) for c in range(3)])


def resolve_scheme(name: str | None, *, discrete: bool) -> tuple[str, ...]:
    if name is None:
        name = DEFAULT_SCHEME if discrete else DEFAULT_SEQUENTIAL_SCHEME
    try:
        return COLOR_SCHEMES[name]
    except KeyError as exc:
        raise ValueError(f"unknown color scheme: {name}") from exc


@dataclass
class CategoricalColorScale:
    """Stable value -> color assignment that cycles through a scheme."""

    colors: tuple[str, ...]
    _assigned: dict[Hashable, str] = field(default_factory=dict)

    def get_color(self, value: Any) -> str | None:
        if value is None:
            return None
        key = _hashable(value)
        color = self._assigned.get(key)
        if color is None:
            color = self.colors[len(self._assigned) % len(self.colors)]
            self._assigned[key] = color
        return color

    def register(self, values: Sequence[Any]) -> None:
        for value in values:
            self.get_color(value)


@dataclass
class CategoricalColorNamespace:
    name: str
    _scales: dict[str, CategoricalColorScale] = field(default_factory=dict)

    def get_scale(self, scheme: str | None = None) -> CategoricalColorScale:
        key = scheme or DEFAULT_SCHEME
        scale = self._scales.get(key)
        if scale is None:
            scale = CategoricalColorScale(colors=resolve_scheme(key, discrete=True))
            self._scales[key] = scale
        return scale


DEFAULT_NAMESPACE = "GLOBAL"
_NAMESPACES: dict[str, CategoricalColorNamespace] = {}


def get_categorical_namespace(name: str | None = None) -> CategoricalColorNamespace:
    key = name or DEFAULT_NAMESPACE
    namespace = _NAMESPACES.get(key)
    if namespace is None:
        namespace = CategoricalColorNamespace(name=key)
        _NAMESPACES[key] = namespace
    return namespace


def reset_categorical_namespaces() -> None:
    _NAMESPACES.clear()


def _hashable(value: Any) -> Hashable:
    try:
        hash(value)
    except TypeError:
        return repr(value)
    return value
