from __future__ import annotations

from typing import Any, Mapping, Sequence

from chartkit_encode.channel_encoder import ChannelEncoder
from chartkit_layout.margin import DEFAULT_MARGIN, Margin, coerce_margin
from chartkit_layout.marks import Mark
from chartkit_layout.memo import IdentityMemo, create_selector
from chartkit_layout.theme import DEFAULT_LAYOUT_SETTINGS, ChartTheme, LayoutSettings
from chartkit_layout.xy_chart_layout import XYChartLayout, XYChartLayoutConfig


def create_margin_selector(default_margin: Margin = DEFAULT_MARGIN) -> IdentityMemo[Margin]:
    def compute(margin: Margin | Mapping[str, Any] | None) -> Margin:
        return coerce_margin(margin, fallback=default_margin)

    return create_selector("margin", compute=compute)


def create_xy_chart_layout_selector(settings: LayoutSettings = DEFAULT_LAYOUT_SETTINGS) -> IdentityMemo[XYChartLayout]:
    def compute(
        width: float,
        height: float,
        margin: Margin,
        theme: ChartTheme,
        x_encoder: ChannelEncoder,
        y_encoder: ChannelEncoder,
        children: Sequence[Mark],
    ) -> XYChartLayout:
        return XYChartLayout(
            XYChartLayoutConfig(
                width=width,
                height=height,
                margin=margin,
                theme=theme,
                x_encoder=x_encoder,
                y_encoder=y_encoder,
                children=children,
                settings=settings,
            )
        )

    return create_selector(
        "width",
        "height",
        "margin",
        "theme",
        "x_encoder",
        "y_encoder",
        "children",
        compute=compute,
    )
