from __future__ import annotations

from collections.abc import Mapping, Sequence
from functools import lru_cache
import re
from typing import Any, Callable

from chartkit_encode.types import ChannelDef, ValueDef


Getter = Callable[[Any], Any]

_PATH_TOKEN = re.compile(r"((?:\\.|[^.\[\]])+)|\[(\d+)\]")


def extract_getter(definition: ChannelDef) -> Getter:
    if isinstance(definition, ValueDef):
        value = definition.value
        return lambda datum: value

    path = parse_field_path(definition.field)
    if len(path) == 1:
        key = path[0]
        return lambda datum: _lookup(datum, key)
    return lambda datum: get_path(datum, path)


@lru_cache(maxsize=256)
def parse_field_path(field: str) -> tuple[str | int, ...]:
    """Split ``a.b[0].c`` into ``("a", "b", 0, "c")``; ``\\.`` escapes a literal dot."""

    out: list[str | int] = []
    for name, index in _PATH_TOKEN.findall(field):
        if index:
            out.append(int(index))
        else:
            out.append(name.replace("\\.", "."))
    return tuple(out) if out else (field,)


def get_path(datum: Any, path: Sequence[str | int]) -> Any:
    current = datum
    for key in path:
        if current is None:
            return None
        current = _lookup(current, key)
    return current


def _lookup(container: Any, key: str | int) -> Any:
    if container is None:
        return None
    if isinstance(container, Mapping):
        return container.get(key)
    if isinstance(key, int) and isinstance(container, Sequence) and not isinstance(container, (str, bytes)):
        return container[key] if -len(container) <= key < len(container) else None
    # pandas rows and other keyed containers
    try:
        return container[key]
    except (KeyError, IndexError, TypeError):
        return getattr(container, key, None) if isinstance(key, str) else None
