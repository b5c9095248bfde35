from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Mapping, Sequence

from chartkit_encode.encoder import Encoder, LegendEntry
from chartkit_encode.types import ChannelType, FieldDef
from chartkit_layout.adapters import to_rows
from chartkit_layout.frame import ChartFrame, Dimension
from chartkit_layout.margin import Margin
from chartkit_layout.marks import BoxPlotSeries, Mark
from chartkit_layout.memo import create_selector
from chartkit_layout.selectors import create_margin_selector, create_xy_chart_layout_selector
from chartkit_layout.theme import DEFAULT_LAYOUT_SETTINGS, DEFAULT_THEME, ChartTheme, LayoutSettings
from chartkit_layout.xy_chart_layout import AxisDescriptor


LOGGER = logging.getLogger(__name__)

DEFAULT_BOX_FILL = "#55acee"


class BoxPlotEncoder(Encoder):
    channel_types = {
        "x": ChannelType.X_BAND,
        "y": ChannelType.Y_BAND,
        "color": ChannelType.COLOR,
    }
    default_encoding = {
        "x": {"field": "x", "type": "nominal"},
        "y": {"field": "y", "type": "quantitative"},
        "color": {"value": "#222"},
    }


@dataclass(frozen=True)
class XYChartSpec:
    width: float
    height: float
    margin: Margin
    theme: ChartTheme
    children: tuple[Mark, ...]
    x_axis: AxisDescriptor | None
    y_axis: AxisDescriptor | None
    aria_label: str = "BoxPlot"
    show_y_grid: bool = True


@dataclass(frozen=True)
class BoxPlotRender:
    class_name: str
    width: float
    height: float
    legend: tuple[LegendEntry, ...] | None
    frame: ChartFrame


class BoxPlot:
    """Box plot chart; owns one memo cache per expensive construction step."""

    _PROPS = ("width", "height", "data", "encoding", "common_encoding", "options", "margin", "theme", "class_name")

    def __init__(
        self,
        *,
        width: float,
        height: float,
        data: Any,
        encoding: Mapping[str, Any] | None = None,
        common_encoding: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
        margin: Margin | Mapping[str, float] | None = None,
        theme: ChartTheme = DEFAULT_THEME,
        settings: LayoutSettings = DEFAULT_LAYOUT_SETTINGS,
        class_name: str = "",
    ) -> None:
        self.width = width
        self.height = height
        self.data = data
        self.encoding = encoding
        self.common_encoding = common_encoding
        self.options = options
        self.margin = margin
        self.theme = theme
        self.class_name = class_name

        self._create_encoder = create_selector(
            "encoding",
            "common_encoding",
            "options",
            compute=lambda encoding, common_encoding, options: BoxPlotEncoder(
                encoding=encoding, common_encoding=common_encoding, options=options
            ),
        )
        self._create_rows = create_selector("data", compute=to_rows)
        self._create_children = create_selector("rows", "encoder", compute=self._build_children)
        self._create_margin = create_margin_selector()
        self._create_layout = create_xy_chart_layout_selector(settings)
        self.encoder: BoxPlotEncoder = self._create_encoder(self)

    def update(self, **props: Any) -> None:
        unknown = set(props) - set(self._PROPS)
        if unknown:
            raise ValueError(f"unknown BoxPlot props: {sorted(unknown)}")
        for name, value in props.items():
            setattr(self, name, value)

    def _build_children(self, rows: Sequence[Any], encoder: BoxPlotEncoder) -> tuple[Mark, ...]:
        channels = encoder.channels
        y_def = channels["y"].definition
        horizontal = isinstance(y_def, FieldDef) and y_def.type == "nominal"
        if horizontal:
            mapped = tuple({**row, "y": channels["y"].get(row)} for row in rows)
        else:
            mapped = tuple({**row, "x": channels["x"].get(row)} for row in rows)
        encoder.set_domain_from_dataset(mapped)
        color = channels["color"]
        return (
            BoxPlotSeries(
                data=mapped,
                horizontal=horizontal,
                fill=lambda datum: color.encode(datum, DEFAULT_BOX_FILL),
                stroke=lambda datum: color.encode(datum),
            ),
        )

    def render_chart(self, dim: Dimension) -> ChartFrame:
        encoder = self.encoder
        children = self._create_children(rows=self._create_rows(data=self.data), encoder=encoder)
        layout = self._create_layout(
            width=dim.width,
            height=dim.height,
            margin=self._create_margin(margin=self.margin),
            theme=self.theme,
            x_encoder=encoder.channels["x"],
            y_encoder=encoder.channels["y"],
            children=children,
        )

        def render_content(chart_dim: Dimension) -> XYChartSpec:
            return XYChartSpec(
                width=chart_dim.width,
                height=chart_dim.height,
                margin=layout.margin,
                theme=self.theme,
                children=children,
                x_axis=layout.render_x_axis(),
                y_axis=layout.render_y_axis(),
            )

        return layout.render_chart_with_frame(render_content)

    def render(self) -> BoxPlotRender:
        self.encoder = self._create_encoder(self)
        rows = self._create_rows(data=self.data)
        legend = tuple(self.encoder.legend_entries(rows)) if self.encoder.has_legend() else None
        frame = ChartFrame(
            width=self.width,
            height=self.height,
            content_width=self.width,
            content_height=self.height,
            render_content=self.render_chart,
        )
        LOGGER.debug("rendering BoxPlot %sx%s (legend=%s)", self.width, self.height, legend is not None)
        return BoxPlotRender(
            class_name=f"chartkit-box-plot {self.class_name}".strip(),
            width=self.width,
            height=self.height,
            legend=legend,
            frame=frame,
        )
