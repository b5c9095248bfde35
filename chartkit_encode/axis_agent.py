from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import TYPE_CHECKING, Literal
import weakref

import numpy as np

from chartkit_encode.formats import Formatter
from chartkit_encode.parsers.extract_axis import extract_axis
from chartkit_encode.parsers.extract_format import extract_format
from chartkit_encode.text import TextStyle, measure_text, rotated_extent
from chartkit_encode.ticks import format_ticks_for_axis
from chartkit_encode.types import AxisConfig, AxisOrient, FieldDef

if TYPE_CHECKING:
    from chartkit_encode.channel_encoder import ChannelEncoder


LOGGER = logging.getLogger(__name__)

TextAnchor = Literal["start", "middle", "end"]


@dataclass(frozen=True)
class AxisLayout:
    label_offset: float
    label_overlap: Literal["flat", "rotate"]
    label_angle: float
    tick_text_anchor: TextAnchor
    min_margin: dict[str, float]
    orient: AxisOrient
    tick_labels: tuple[str, ...] = ()
    max_label_width: float = 0.0
    max_label_height: float = 0.0
    tick_count: int = 5


class AxisAgent:
    """Sizes the axis of one positional channel.

    Holds only a weak reference back to its owning ``ChannelEncoder``; the
    encoder is the sole strong owner of both its scale and this agent.
    """

    def __init__(self, channel_encoder: "ChannelEncoder") -> None:
        if not channel_encoder.is_xy():
            raise ValueError(f"axis requires a positional channel, got {channel_encoder.channel_type.value}")
        self._encoder_ref = weakref.ref(channel_encoder)
        self.config: AxisConfig = extract_axis(channel_encoder.channel_type, channel_encoder.definition)
        self._format: Formatter = self._resolve_format(channel_encoder)
        # Unformatted continuous ticks take their decimals from the tick step.
        self._step_decimals = self.config.format is None and not (
            isinstance(channel_encoder.definition, FieldDef) and channel_encoder.definition.format
        )

    @property
    def channel_encoder(self) -> "ChannelEncoder":
        encoder = self._encoder_ref()
        if encoder is None:
            raise ReferenceError("axis agent outlived its channel encoder")
        return encoder

    @property
    def orient(self) -> AxisOrient:
        assert self.config.orient is not None
        return self.config.orient

    @property
    def is_horizontal(self) -> bool:
        return self.orient in ("top", "bottom")

    def get_title(self) -> str:
        if self.config.title is not None:
            return self.config.title
        return self.channel_encoder.get_title()

    def get_format(self) -> Formatter:
        return self._format

    def get_tick_labels(self) -> list[str]:
        scale = self.channel_encoder.scale
        if scale is None:
            return []
        ticks = scale.ticks(self.config.tick_count)
        if self._step_decimals and scale.is_continuous and scale.scale_type != "time":
            return format_ticks_for_axis(np.asarray(ticks, dtype=np.float64))
        return [self._format(v) for v in ticks]

    def compute_layout(
        self,
        *,
        axis_width: float,
        tick_length: float,
        tick_text_style: TextStyle,
        label_angle: float | None = None,
    ) -> AxisLayout:
        labels = self.get_tick_labels()
        sizes = [measure_text(label, tick_text_style) for label in labels]
        max_w = float(max((w for w, _ in sizes), default=0))
        max_h = float(max((h for _, h in sizes), default=measure_text("", tick_text_style)[1]))
        padding = self.config.label_padding
        title = self.get_title()
        title_h = float(measure_text(title, tick_text_style)[1]) + padding if title else 0.0

        overlap = self._resolve_overlap(labels, max_w, axis_width)
        angle = 0.0 if overlap == "flat" else float(label_angle if label_angle is not None else self.config.label_angle)
        anchor: TextAnchor = "middle" if angle == 0 else ("start" if angle > 0 else "end")

        min_margin: dict[str, float] = {}
        if self.is_horizontal:
            _, extent_h = rotated_extent(max_w, max_h, angle) if angle else (max_w, max_h)
            label_offset = math.ceil(extent_h + padding)
            min_margin[self.orient] = math.ceil(tick_length + padding + label_offset + title_h)
            if angle:
                lean = math.ceil(abs(max_w * math.cos(math.radians(angle))))
                min_margin["right" if angle > 0 else "left"] = lean
        else:
            label_offset = math.ceil(max_w + padding)
            min_margin[self.orient] = math.ceil(tick_length + padding + max_w + title_h)

        LOGGER.debug(
            "axis %s: %d labels, max %.0fx%.0f, overlap=%s angle=%.1f min_margin=%r",
            self.orient,
            len(labels),
            max_w,
            max_h,
            overlap,
            angle,
            min_margin,
        )
        return AxisLayout(
            label_offset=float(label_offset),
            label_overlap=overlap,
            label_angle=angle,
            tick_text_anchor=anchor,
            min_margin=min_margin,
            orient=self.orient,
            tick_labels=tuple(labels),
            max_label_width=max_w,
            max_label_height=max_h,
            tick_count=self.config.tick_count,
        )

    def _resolve_overlap(self, labels: list[str], max_w: float, axis_width: float) -> Literal["flat", "rotate"]:
        if not self.is_horizontal or self.config.label_overlap == "flat" or not labels:
            return "flat"
        if self.config.label_overlap == "rotate":
            return "rotate"
        width_per_tick = axis_width / len(labels)
        return "rotate" if max_w > width_per_tick else "flat"

    def _resolve_format(self, channel_encoder: "ChannelEncoder") -> Formatter:
        definition = channel_encoder.definition
        if self.config.format is not None and isinstance(definition, FieldDef):
            return extract_format(definition.type, self.config.format)
        return channel_encoder.formatter
