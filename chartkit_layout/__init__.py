from chartkit_layout.box_plot import BoxPlot, BoxPlotEncoder, BoxPlotRender, XYChartSpec
from chartkit_layout.collect_scales import CollectedScale, CollectedScales, collect_scales
from chartkit_layout.frame import ChartFrame, Dimension
from chartkit_layout.margin import DEFAULT_MARGIN, Margin, merge_margin
from chartkit_layout.marks import BoxPlotSeries, Mark, PointSeries, summarize_box_plot
from chartkit_layout.memo import IdentityMemo, create_selector
from chartkit_layout.theme import (
    DEFAULT_LABEL_ANGLE,
    DEFAULT_THEME,
    OVERFLOW_MARGIN,
    ChartConfig,
    ChartTheme,
    LayoutSettings,
    TickStyles,
    load_chart_config,
)
from chartkit_layout.xy_chart_layout import AxisDescriptor, LayoutResult, XYChartLayout, XYChartLayoutConfig

__all__ = [
    "AxisDescriptor",
    "BoxPlot",
    "BoxPlotEncoder",
    "BoxPlotRender",
    "BoxPlotSeries",
    "ChartConfig",
    "ChartFrame",
    "ChartTheme",
    "CollectedScale",
    "CollectedScales",
    "DEFAULT_LABEL_ANGLE",
    "DEFAULT_MARGIN",
    "DEFAULT_THEME",
    "Dimension",
    "IdentityMemo",
    "LayoutResult",
    "LayoutSettings",
    "Margin",
    "Mark",
    "OVERFLOW_MARGIN",
    "PointSeries",
    "TickStyles",
    "XYChartLayout",
    "XYChartLayoutConfig",
    "XYChartSpec",
    "collect_scales",
    "create_selector",
    "load_chart_config",
    "merge_margin",
    "summarize_box_plot",
]
