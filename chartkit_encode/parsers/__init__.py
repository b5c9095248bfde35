from .extract_axis import extract_axis
from .extract_format import extract_format, extract_format_from_channel_def
from .extract_getter import extract_getter
from .extract_scale import ScaleAgent, extract_scale

__all__ = [
    "ScaleAgent",
    "extract_axis",
    "extract_format",
    "extract_format_from_channel_def",
    "extract_getter",
    "extract_scale",
]
