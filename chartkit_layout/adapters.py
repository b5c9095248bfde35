from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from chartkit_encode.errors import EncodingSpecError


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]


def to_rows(data: Any) -> tuple[Any, ...]:
    """Normalize chart data into a tuple of row objects.

    Accepts an iterable of mappings (or other row objects) and, when pandas is
    installed, a ``DataFrame``.
    """

    if data is None:
        return ()
    if pd is not None and isinstance(data, pd.DataFrame):
        return tuple(data.to_dict(orient="records"))
    if isinstance(data, Mapping) or isinstance(data, (str, bytes)):
        raise EncodingSpecError(f"chart data must be a sequence of rows, got {type(data)!r}")
    if isinstance(data, Iterable):
        return tuple(data)
    raise EncodingSpecError(f"unsupported chart data type: {type(data)!r}")
