from chartkit_encode.axis_agent import AxisAgent, AxisLayout
from chartkit_encode.channel_encoder import ChannelEncoder
from chartkit_encode.encoder import Encoder, LegendEntry
from chartkit_encode.errors import EncodingSpecError
from chartkit_encode.parsers import ScaleAgent, extract_format_from_channel_def, extract_getter, extract_scale
from chartkit_encode.text import TextStyle
from chartkit_encode.types import (
    AxisConfig,
    BandFieldDef,
    ChannelOptions,
    ChannelType,
    DefKind,
    FieldDef,
    ScaleConfig,
    ValueDef,
    parse_channel_def,
)

__all__ = [
    "AxisAgent",
    "AxisConfig",
    "AxisLayout",
    "BandFieldDef",
    "ChannelEncoder",
    "ChannelOptions",
    "ChannelType",
    "DefKind",
    "Encoder",
    "EncodingSpecError",
    "FieldDef",
    "LegendEntry",
    "ScaleAgent",
    "ScaleConfig",
    "TextStyle",
    "ValueDef",
    "extract_format_from_channel_def",
    "extract_getter",
    "extract_scale",
    "parse_channel_def",
]
