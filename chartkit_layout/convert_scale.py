from __future__ import annotations

from typing import Any

from chartkit_encode.parsers.extract_scale import ScaleAgent
from chartkit_encode.types import ScaleConfig


def convert_scale_to_collection_shape(scale: ScaleAgent | ScaleConfig | None) -> dict[str, Any]:
    """Translate a scale config into the shape the scale-collection step reads."""

    if scale is None:
        return {"type": "linear", "include_zero": False, "nice": False}
    config = scale.config if isinstance(scale, ScaleAgent) else scale
    scale_type = config.type or "linear"
    shape: dict[str, Any] = {"type": scale_type}
    if config.domain is not None:
        shape["domain"] = tuple(config.domain)
    if scale_type in ("band", "point"):
        shape["padding_inner"] = config.padding_inner
        shape["padding_outer"] = config.padding_outer
    elif scale_type != "ordinal":
        shape["include_zero"] = bool(config.zero) and scale_type not in ("log", "time")
        shape["nice"] = config.nice
        shape["clamp"] = config.clamp
    return shape
