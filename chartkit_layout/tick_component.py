from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from chartkit_encode.axis_agent import AxisLayout


@dataclass(frozen=True)
class TickLabel:
    x: float
    y: float
    text: str
    angle: float
    text_anchor: str
    dy: str


TickComponent = Callable[..., TickLabel]


def create_tick_component(layout: AxisLayout) -> TickComponent | None:
    """Tick label factory for rotated X labels; flat labels use the default tick."""

    if layout.label_overlap != "rotate" or layout.label_angle == 0:
        return None

    angle = layout.label_angle
    anchor = layout.tick_text_anchor
    dy = "0.25em" if layout.orient == "bottom" else "-0.25em"

    def tick_component(*, x: float, y: float, formatted_value: str) -> TickLabel:
        return TickLabel(x=x, y=y, text=formatted_value, angle=angle, text_anchor=anchor, dy=dy)

    return tick_component
