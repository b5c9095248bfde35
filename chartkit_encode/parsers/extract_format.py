from __future__ import annotations

from chartkit_encode.formats import Formatter, get_number_formatter, get_time_formatter, plain_format
from chartkit_encode.types import ChannelDef, DataType, FieldDef


def extract_format(data_type: DataType | None, spec: str | None) -> Formatter:
    if data_type == "quantitative":
        return get_number_formatter(spec)
    if data_type == "temporal":
        return get_time_formatter(spec)
    return plain_format


def extract_format_from_channel_def(definition: ChannelDef) -> Formatter:
    if isinstance(definition, FieldDef):
        return extract_format(definition.type, definition.format)
    return plain_format
