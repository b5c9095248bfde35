from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Sequence

import numpy as np

from chartkit_encode.formats import to_number
from chartkit_encode.parsers.extract_getter import extract_getter
from chartkit_encode.types import FieldDef


ValueGetter = Callable[[Any], Any]

BOX_PLOT_KEYS = ("min", "firstQuartile", "median", "thirdQuartile", "max")


@dataclass(frozen=True)
class Mark:
    """A child mark handed to the rendering collaborator.

    Layout only reads the values each row contributes to the X and Y domains.
    """

    data: tuple[Any, ...]

    @property
    def kind(self) -> str:
        return "mark"

    def x_values(self, row: Any) -> Iterable[Any]:
        return ()

    def y_values(self, row: Any) -> Iterable[Any]:
        return ()


@dataclass(frozen=True)
class PointSeries(Mark):
    x: ValueGetter = lambda row: None
    y: ValueGetter = lambda row: None

    @property
    def kind(self) -> str:
        return "point"

    def x_values(self, row: Any) -> Iterable[Any]:
        return (self.x(row),)

    def y_values(self, row: Any) -> Iterable[Any]:
        return (self.y(row),)


@dataclass(frozen=True)
class BoxPlotSeries(Mark):
    horizontal: bool = False
    fill: Callable[[Any], Any] | None = None
    stroke: Callable[[Any], Any] | None = None
    fill_opacity: float = 0.4
    stroke_width: float = 1.0
    width_ratio: float = 0.6

    @property
    def kind(self) -> str:
        return "boxplot"

    def x_values(self, row: Any) -> Iterable[Any]:
        return _box_values(row) if self.horizontal else (row.get("x"),)

    def y_values(self, row: Any) -> Iterable[Any]:
        return (row.get("y"),) if self.horizontal else _box_values(row)


def _box_values(row: Any) -> list[Any]:
    values = [row.get(key) for key in BOX_PLOT_KEYS]
    values.extend(row.get("outliers") or ())
    return values


def summarize_box_plot(rows: Sequence[Any], group_field: str, value_field: str) -> list[dict[str, Any]]:
    """Aggregate raw rows into one box plot row per group (1.5 * IQR whiskers)."""

    group_of = extract_getter(FieldDef(field=group_field, type="nominal"))
    value_of = extract_getter(FieldDef(field=value_field, type="quantitative"))
    groups: dict[Any, list[float]] = {}
    for row in rows:
        label = group_of(row)
        value = to_number(value_of(row))
        if label is None or value is None or not np.isfinite(value):
            continue
        groups.setdefault(label, []).append(value)

    out: list[dict[str, Any]] = []
    for label, values in groups.items():
        arr = np.asarray(values, dtype=np.float64)
        q1, median, q3 = (float(v) for v in np.percentile(arr, [25.0, 50.0, 75.0]))
        iqr = q3 - q1
        low_fence = q1 - 1.5 * iqr
        high_fence = q3 + 1.5 * iqr
        inside = arr[(arr >= low_fence) & (arr <= high_fence)]
        outliers = arr[(arr < low_fence) | (arr > high_fence)]
        out.append(
            {
                "label": label,
                "min": float(np.min(inside)),
                "firstQuartile": q1,
                "median": median,
                "thirdQuartile": q3,
                "max": float(np.max(inside)),
                "outliers": sorted(float(v) for v in outliers),
            }
        )
    return out
