from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping

MARGIN_SIDES = ("top", "right", "bottom", "left")


@dataclass(frozen=True)
class Margin:
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0

    def __post_init__(self) -> None:
        for side in MARGIN_SIDES:
            if getattr(self, side) < 0:
                raise ValueError(f"margin {side} must be >= 0")

    def grow(self, **deltas: float) -> "Margin":
        unknown = set(deltas) - set(MARGIN_SIDES)
        if unknown:
            raise ValueError(f"unknown margin sides: {sorted(unknown)}")
        return replace(self, **{side: getattr(self, side) + delta for side, delta in deltas.items()})

    def as_dict(self) -> dict[str, float]:
        return {side: getattr(self, side) for side in MARGIN_SIDES}


DEFAULT_MARGIN = Margin(top=20, right=20, bottom=20, left=20)

PartialMargin = Mapping[str, float]


def coerce_margin(value: Margin | Mapping[str, Any] | None, *, fallback: Margin = DEFAULT_MARGIN) -> Margin:
    if value is None:
        return fallback
    if isinstance(value, Margin):
        return value
    unknown = set(value) - set(MARGIN_SIDES)
    if unknown:
        raise ValueError(f"unknown margin sides: {sorted(unknown)}")
    return replace(fallback, **{side: float(v) for side, v in value.items()})


def merge_margin(a: Margin, b: Margin | PartialMargin) -> Margin:
    """Element-wise maximum; each margin is a lower bound on space, not a budget."""

    other = b.as_dict() if isinstance(b, Margin) else b
    return Margin(**{side: max(getattr(a, side), float(other.get(side, 0.0))) for side in MARGIN_SIDES})
