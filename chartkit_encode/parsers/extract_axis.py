from __future__ import annotations

from dataclasses import replace

from chartkit_encode.types import AxisConfig, ChannelDef, ChannelType, FieldDef


def extract_axis(channel_type: ChannelType, definition: ChannelDef) -> AxisConfig:
    """Resolve an axis config with orientation defaulted from the channel."""

    axis = definition.axis if isinstance(definition, FieldDef) else None
    config = axis if isinstance(axis, AxisConfig) else AxisConfig()
    if config.orient is None:
        config = replace(config, orient="bottom" if channel_type.is_x else "left")
    return config
