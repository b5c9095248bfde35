from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import Any, Callable, Iterable, Mapping, Sequence

import numpy as np

from chartkit_encode.formats import to_datetime, to_number
from chartkit_encode.ticks import nice_extent
from chartkit_layout.margin import Margin
from chartkit_layout.marks import Mark
from chartkit_layout.theme import ChartTheme


LOGGER = logging.getLogger(__name__)

CONTINUOUS = frozenset({"linear", "log", "pow", "sqrt", "time"})


@dataclass(frozen=True)
class CollectedScale:
    type: str
    values: tuple[Any, ...]
    range: tuple[float, float]

    def domain(self) -> list[Any]:
        return list(self.values)


@dataclass(frozen=True)
class CollectedScales:
    x_scale: CollectedScale
    y_scale: CollectedScale


def collect_scales(
    *,
    width: float,
    height: float,
    margin: Margin,
    x_scale: Mapping[str, Any],
    y_scale: Mapping[str, Any],
    theme: ChartTheme,
    children: Sequence[Mark],
) -> CollectedScales:
    """Resolve provisional X/Y scales from the data carried by ``children``."""

    inner_w = max(0.0, width - margin.left - margin.right)
    inner_h = max(0.0, height - margin.top - margin.bottom)
    x = _collect(x_scale, children, lambda mark, row: mark.x_values(row), (0.0, inner_w))
    y = _collect(y_scale, children, lambda mark, row: mark.y_values(row), (inner_h, 0.0))
    LOGGER.debug("collected scales x=%r y=%r", x.values, y.values)
    return CollectedScales(x_scale=x, y_scale=y)


def _collect(
    shape: Mapping[str, Any],
    children: Sequence[Mark],
    values_of: Callable[[Mark, Any], Iterable[Any]],
    pixel_range: tuple[float, float],
) -> CollectedScale:
    scale_type = str(shape.get("type", "linear"))
    if shape.get("domain") is not None:
        return CollectedScale(type=scale_type, values=tuple(shape["domain"]), range=pixel_range)

    raw = [value for mark in children for row in mark.data for value in values_of(mark, row)]
    if scale_type not in CONTINUOUS:
        return CollectedScale(type=scale_type, values=_unique(raw), range=pixel_range)

    numbers = np.asarray([_as_number(v, scale_type) for v in raw], dtype=np.float64)
    finite = numbers[np.isfinite(numbers)]
    if scale_type == "log":
        finite = finite[finite > 0]
    if finite.size == 0:
        lo, hi = (1.0, 10.0) if scale_type == "log" else (0.0, 1.0)
    else:
        lo, hi = float(np.min(finite)), float(np.max(finite))
    if shape.get("include_zero"):
        lo, hi = min(lo, 0.0), max(hi, 0.0)
    if shape.get("nice") and scale_type in ("linear", "pow", "sqrt"):
        lo, hi = nice_extent(lo, hi)

    if scale_type == "time":
        values: tuple[Any, ...] = tuple(datetime.fromtimestamp(v / 1000.0, tz=timezone.utc) for v in (lo, hi))
    else:
        values = (lo, hi)
    return CollectedScale(type=scale_type, values=values, range=pixel_range)


def _as_number(value: Any, scale_type: str) -> float:
    if scale_type == "time":
        moment = to_datetime(value)
        if moment is None:
            return float("nan")
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment.timestamp() * 1000.0
    number = to_number(value)
    return float("nan") if number is None else number


def _unique(values: Iterable[Any]) -> tuple[Any, ...]:
    seen: set[Any] = set()
    out: list[Any] = []
    for value in values:
        if value is None:
            continue
        key = value if _is_hashable(value) else repr(value)
        if key in seen:
            continue
        seen.add(key)
        out.append(value)
    return tuple(out)


def _is_hashable(value: Any) -> bool:
    try:
        hash(value)
    except TypeError:
        return False
    return True
