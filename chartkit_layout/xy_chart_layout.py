from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from typing import Any, Callable, Sequence

from chartkit_encode.axis_agent import AxisLayout
from chartkit_encode.channel_encoder import ChannelEncoder
from chartkit_encode.formats import Formatter
from chartkit_encode.types import AxisOrient
from chartkit_layout.collect_scales import collect_scales
from chartkit_layout.convert_scale import convert_scale_to_collection_shape
from chartkit_layout.frame import ChartFrame, Dimension
from chartkit_layout.margin import Margin, merge_margin
from chartkit_layout.marks import Mark
from chartkit_layout.theme import DEFAULT_LAYOUT_SETTINGS, ChartTheme, LayoutSettings
from chartkit_layout.tick_component import TickComponent, create_tick_component


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class XYChartLayoutConfig:
    width: float
    height: float
    margin: Margin
    x_encoder: ChannelEncoder
    y_encoder: ChannelEncoder
    children: Sequence[Mark]
    theme: ChartTheme
    min_content_width: float = 0.0
    min_content_height: float = 0.0
    settings: LayoutSettings = DEFAULT_LAYOUT_SETTINGS


@dataclass(frozen=True)
class LayoutResult:
    chart_width: float
    chart_height: float
    container_width: float
    container_height: float
    margin: Margin
    x_layout: AxisLayout | None = None
    y_layout: AxisLayout | None = None


@dataclass(frozen=True)
class AxisDescriptor:
    label: str
    label_offset: float
    num_ticks: int
    orientation: AxisOrient
    tick_format: Formatter
    tick_component: TickComponent | None = None
    props: dict[str, Any] = field(default_factory=dict)


class XYChartLayout:
    """Adaptive margin resolution for a chart with X and Y channels.

    The Y axis is sized first against the full container height; its margin
    fixes the inner width the X axis is then sized against. The result is
    frozen in ``result`` and exposed through read-only properties.
    """

    def __init__(self, config: XYChartLayoutConfig) -> None:
        self.config = config

        width = config.width
        height = config.height
        margin = config.margin
        x_encoder = config.x_encoder
        y_encoder = config.y_encoder
        theme = config.theme
        settings = config.settings

        collected = collect_scales(
            width=width,
            height=height,
            margin=margin,
            x_scale=convert_scale_to_collection_shape(x_encoder.scale),
            y_scale=convert_scale_to_collection_shape(y_encoder.scale),
            theme=theme,
            children=config.children,
        )

        if y_encoder.scale is not None:
            y_encoder.scale.set_domain(collected.y_scale.domain())
        y_layout: AxisLayout | None = None
        if y_encoder.axis is not None:
            y_layout = y_encoder.axis.compute_layout(
                axis_width=height - margin.top - margin.bottom,
                tick_length=theme.y_tick_styles.length,
                tick_text_style=theme.y_tick_styles.label.right,
            )
        # Angle recommendation below reads the resolved Y layout.
        self._y_layout = y_layout

        second_margin = merge_margin(margin, y_layout.min_margin) if y_layout else margin
        inner_width = max(width - second_margin.left - second_margin.right, config.min_content_width)

        if x_encoder.scale is not None:
            x_encoder.scale.set_domain(collected.x_scale.domain())
        x_layout: AxisLayout | None = None
        if x_encoder.axis is not None:
            x_layout = x_encoder.axis.compute_layout(
                axis_width=inner_width,
                label_angle=self.recommend_x_label_angle(x_encoder.axis.orient),
                tick_length=theme.x_tick_styles.length,
                tick_text_style=theme.x_tick_styles.label.bottom,
            )

        final_margin = merge_margin(second_margin, x_layout.min_margin) if x_layout else second_margin
        inner_height = max(height - final_margin.top - final_margin.bottom, config.min_content_height)

        chart_width = _round_half_up(inner_width + final_margin.left + final_margin.right)
        chart_height = _round_half_up(inner_height + final_margin.top + final_margin.bottom)

        overflow = settings.overflow_margin
        is_overflow_x = chart_width > width
        is_overflow_y = chart_height > height
        if is_overflow_x:
            final_margin = final_margin.grow(bottom=overflow)
        if is_overflow_y:
            final_margin = final_margin.grow(right=overflow)

        self.result = LayoutResult(
            chart_width=chart_width + overflow if is_overflow_x else chart_width,
            chart_height=chart_height + overflow if is_overflow_y else chart_height,
            container_width=width,
            container_height=height,
            margin=final_margin,
            x_layout=x_layout,
            y_layout=y_layout,
        )
        LOGGER.debug(
            "layout %sx%s -> chart %sx%s margin=%r overflow=(%s, %s)",
            width,
            height,
            self.result.chart_width,
            self.result.chart_height,
            final_margin,
            is_overflow_x,
            is_overflow_y,
        )

    @property
    def chart_width(self) -> float:
        return self.result.chart_width

    @property
    def chart_height(self) -> float:
        return self.result.chart_height

    @property
    def container_width(self) -> float:
        return self.result.container_width

    @property
    def container_height(self) -> float:
        return self.result.container_height

    @property
    def margin(self) -> Margin:
        return self.result.margin

    @property
    def x_layout(self) -> AxisLayout | None:
        return self.result.x_layout

    @property
    def y_layout(self) -> AxisLayout | None:
        return self.result.y_layout

    def recommend_x_label_angle(self, x_orient: AxisOrient = "bottom") -> float:
        default = self.config.settings.default_label_angle
        axis = self.config.y_encoder.axis
        if self._y_layout is None or axis is None:
            return default
        y_orient = axis.orient
        if (y_orient == "right" and x_orient == "bottom") or (y_orient == "left" and x_orient == "top"):
            return -default
        return default

    def render_chart_with_frame(self, render_chart: Callable[[Dimension], Any]) -> ChartFrame:
        return ChartFrame(
            width=self.container_width,
            height=self.container_height,
            content_width=self.chart_width,
            content_height=self.chart_height,
            render_content=render_chart,
        )

    def render_x_axis(self, **props: Any) -> AxisDescriptor | None:
        axis = self.config.x_encoder.axis
        if axis is None or self.x_layout is None:
            return None
        return AxisDescriptor(
            label=axis.get_title(),
            label_offset=self.x_layout.label_offset,
            num_ticks=axis.config.tick_count,
            orientation=axis.orient,
            tick_format=axis.get_format(),
            tick_component=create_tick_component(self.x_layout),
            props=props,
        )

    def render_y_axis(self, **props: Any) -> AxisDescriptor | None:
        axis = self.config.y_encoder.axis
        if axis is None or self.y_layout is None:
            return None
        return AxisDescriptor(
            label=axis.get_title(),
            label_offset=self.y_layout.label_offset,
            num_ticks=axis.config.tick_count,
            orientation=axis.orient,
            tick_format=axis.get_format(),
            props=props,
        )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
