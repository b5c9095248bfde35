from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
import logging
import math
from typing import Any, Iterable, Sequence

import numpy as np

from chartkit_encode.colors import (
    CategoricalColorScale,
    get_categorical_namespace,
    interpolate_colors,
    is_hex_color,
    resolve_scheme,
)
from chartkit_encode.formats import to_datetime, to_number
from chartkit_encode.ticks import generate_nice_ticks, nice_extent
from chartkit_encode.types import (
    DISCRETE_DATA_TYPES,
    ChannelDef,
    ChannelType,
    DataType,
    FieldDef,
    ScaleConfig,
    ScaleType,
)


LOGGER = logging.getLogger(__name__)

CONTINUOUS_SCALE_TYPES: frozenset[str] = frozenset({"linear", "log", "pow", "sqrt", "time"})
DISCRETE_SCALE_TYPES: frozenset[str] = frozenset({"band", "point", "ordinal"})
DEFAULT_SHAPES = ("circle", "square", "triangle-up", "diamond", "cross", "star")
# Time scales read these as epoch milliseconds.
DEFAULT_CONTINUOUS_DOMAIN = (0.0, 1.0)
DEFAULT_LOG_DOMAIN = (1.0, 10.0)


def infer_scale_type(channel_type: ChannelType, data_type: DataType) -> ScaleType | None:
    if channel_type in (ChannelType.TEXT, ChannelType.CATEGORY):
        return None
    if channel_type is ChannelType.SHAPE:
        return "ordinal"
    if data_type == "temporal":
        return "time"
    if data_type == "quantitative":
        return "linear"
    if channel_type.is_band:
        return "band"
    if channel_type.is_xy:
        return "point"
    if channel_type.is_color:
        return "ordinal"
    return "point"


def default_range(channel_type: ChannelType, scale_type: ScaleType, scheme: str | None) -> tuple[Any, ...]:
    if channel_type.is_color:
        return resolve_scheme(scheme, discrete=scale_type in DISCRETE_SCALE_TYPES)
    if channel_type is ChannelType.SHAPE:
        return DEFAULT_SHAPES
    if channel_type is ChannelType.SIZE:
        return (1.0, 10.0)
    if channel_type is ChannelType.OPACITY:
        return (0.3, 1.0)
    if channel_type is ChannelType.STROKE_WIDTH:
        return (1.0, 4.0)
    return (0.0, 1.0)


def default_zero(channel_type: ChannelType, scale_type: ScaleType) -> bool:
    return scale_type in ("linear", "pow", "sqrt") and (channel_type.is_xy or channel_type is ChannelType.SIZE)


class ScaleAgent:
    """Maps raw channel values onto a visual range.

    The domain starts from the config, else ``[0, 1]`` for continuous scales
    (``[1, 10]`` for log) and empty for discrete ones. The layout pass replaces
    positional domains through ``set_domain``; other channels fit theirs to the
    data through ``set_domain_from_values``.
    """

    def __init__(self, config: ScaleConfig, channel_type: ChannelType, *, namespace: str | None = None) -> None:
        if config.type is None:
            raise ValueError("ScaleAgent requires a resolved scale type")
        self.config = config
        self.channel_type = channel_type
        self.scale_type: ScaleType = config.type
        output = tuple(config.range) if config.range is not None else ()
        self._range: tuple[Any, ...] = tuple(reversed(output)) if config.reverse else output
        self._domain: tuple[Any, ...] = ()
        self._index: dict[Any, int] = {}
        self._color_scale: CategoricalColorScale | None = None
        if self.scale_type == "ordinal" and channel_type.is_color and config.range is None:
            self._color_scale = get_categorical_namespace(namespace or config.namespace).get_scale(config.scheme)
        if config.domain is not None:
            self.set_domain(config.domain)
        elif self.is_continuous:
            self.set_domain(DEFAULT_LOG_DOMAIN if self.scale_type == "log" else DEFAULT_CONTINUOUS_DOMAIN)

    @property
    def domain(self) -> tuple[Any, ...]:
        return self._domain

    @property
    def range(self) -> tuple[Any, ...]:
        return self._range

    @property
    def is_continuous(self) -> bool:
        return self.scale_type in CONTINUOUS_SCALE_TYPES

    @property
    def is_discrete(self) -> bool:
        return self.scale_type in DISCRETE_SCALE_TYPES

    def set_domain(self, values: Sequence[Any]) -> None:
        domain = tuple(values)
        if self.is_continuous:
            if self.scale_type == "time":
                domain = tuple(v if isinstance(v, datetime) else to_datetime(v) for v in domain)
            else:
                domain = tuple(float(v) for v in domain)
        self._domain = domain
        self._index = {}
        if self.is_discrete:
            for i, value in enumerate(domain):
                self._index.setdefault(_key(value), i)
            if self._color_scale is not None:
                self._color_scale.register(domain)
        LOGGER.debug("scale %s (%s) domain set to %r", self.scale_type, self.channel_type.value, domain)

    def set_domain_from_values(self, values: Iterable[Any]) -> None:
        """Fit the domain to observed values: extent for continuous scales, first-seen order otherwise."""

        present = [v for v in values if v is not None]
        if not present:
            return
        if not self.is_continuous:
            seen: set[Any] = set()
            unique: list[Any] = []
            for value in present:
                key = _key(value)
                if key not in seen:
                    seen.add(key)
                    unique.append(value)
            self.set_domain(unique)
            return

        if self.scale_type == "time":
            moments = [to_datetime(v) for v in present]
            numbers = np.asarray(
                [m.replace(tzinfo=m.tzinfo or timezone.utc).timestamp() * 1000.0 for m in moments if m is not None],
                dtype=np.float64,
            )
        else:
            numbers = np.asarray([n for n in (to_number(v) for v in present) if n is not None], dtype=np.float64)
        numbers = numbers[np.isfinite(numbers)]
        if self.scale_type == "log":
            numbers = numbers[numbers > 0]
        if numbers.size == 0:
            return
        lo, hi = float(np.min(numbers)), float(np.max(numbers))
        if self.config.zero and self.scale_type in ("linear", "pow", "sqrt"):
            lo, hi = min(lo, 0.0), max(hi, 0.0)
        if self.config.nice and self.scale_type in ("linear", "pow", "sqrt"):
            lo, hi = nice_extent(lo, hi)
        self.set_domain((lo, hi))

    def encode_value(self, value: Any) -> Any:
        if value is None:
            return None
        if self.is_continuous:
            return self._encode_continuous(value)
        if self.scale_type == "ordinal":
            return self._encode_ordinal(value)
        return self._encode_positional(value)

    def bandwidth(self) -> float:
        if self.scale_type != "band" or not self._domain:
            return 0.0
        step, _ = self._band_step()
        return step * (1.0 - self.config.padding_inner)

    def ticks(self, count: int = 5) -> list[Any]:
        if not self._domain:
            return []
        if self.is_discrete:
            return list(self._domain)
        t0, t1 = self._transformed_extent()
        if t0 is None or t1 is None:
            return []
        if self.scale_type == "log":
            lo, hi = sorted((t0, t1))
            powers = [self.config.base**e for e in range(int(math.ceil(lo)), int(math.floor(hi)) + 1)]
            if len(powers) >= 2:
                return powers
            return [float(v) for v in generate_nice_ticks(self._domain[0], self._domain[-1], count)]
        if self.scale_type == "time":
            ms = generate_nice_ticks(t0, t1, count)
            return [datetime.fromtimestamp(float(v) / 1000.0, tz=timezone.utc) for v in ms]
        return [float(v) for v in generate_nice_ticks(float(self._domain[0]), float(self._domain[-1]), count)]

    # -- continuous ---------------------------------------------------------

    def _transform(self, value: Any) -> float | None:
        if self.scale_type == "time":
            moment = to_datetime(value)
            if moment is None:
                return None
            if moment.tzinfo is None:
                moment = moment.replace(tzinfo=timezone.utc)
            return moment.timestamp() * 1000.0
        number = to_number(value)
        if number is None or not math.isfinite(number):
            return None
        if self.scale_type == "log":
            if number <= 0:
                return None
            return math.log(number, self.config.base)
        if self.scale_type == "sqrt":
            return math.copysign(abs(number) ** 0.5, number)
        if self.scale_type == "pow":
            return math.copysign(abs(number) ** self.config.exponent, number)
        return number

    def _transformed_extent(self) -> tuple[float | None, float | None]:
        if len(self._domain) < 2:
            return (None, None)
        return (self._transform(self._domain[0]), self._transform(self._domain[-1]))

    def _encode_continuous(self, value: Any) -> Any:
        t = self._transform(value)
        t0, t1 = self._transformed_extent()
        if t is None or t0 is None or t1 is None:
            return None
        frac = 0.5 if t0 == t1 else (t - t0) / (t1 - t0)
        if self.config.clamp:
            frac = min(1.0, max(0.0, frac))
        output = self._range
        if len(output) < 2:
            return frac
        if all(is_hex_color(c) for c in output):
            return interpolate_colors(output, frac)
        stops = np.linspace(0.0, 1.0, len(output))
        values = np.asarray(output, dtype=np.float64)
        if 0.0 <= frac <= 1.0:
            return float(np.interp(frac, stops, values))
        # Extrapolate along the outermost segment when unclamped.
        if frac < 0.0:
            return float(values[0] + (values[1] - values[0]) * frac * (len(output) - 1))
        return float(values[-1] + (values[-1] - values[-2]) * (frac - 1.0) * (len(output) - 1))

    # -- discrete -----------------------------------------------------------

    def _encode_ordinal(self, value: Any) -> Any:
        if self._color_scale is not None:
            return self._color_scale.get_color(value)
        index = self._index.get(_key(value))
        if index is None or not self._range:
            return None
        return self._range[index % len(self._range)]

    def _band_step(self) -> tuple[float, float]:
        r0, r1 = (float(self._range[0]), float(self._range[-1])) if len(self._range) >= 2 else (0.0, 1.0)
        n = len(self._domain)
        span = r1 - r0
        if self.scale_type == "band":
            step = span / max(1.0, n - self.config.padding_inner + 2.0 * self.config.padding_outer)
            start = r0 + (span - step * (n - self.config.padding_inner)) * self.config.align
        else:
            step = span / max(1.0, n - 1 + 2.0 * self.config.padding_outer) if n > 1 else 0.0
            start = r0 + (span - step * (n - 1)) * self.config.align
        return step, start

    def _encode_positional(self, value: Any) -> float | None:
        index = self._index.get(_key(value))
        if index is None:
            return None
        step, start = self._band_step()
        return start + step * index


def extract_scale(
    channel_type: ChannelType,
    definition: ChannelDef,
    namespace: str | None = None,
) -> ScaleAgent | None:
    if not isinstance(definition, FieldDef) or definition.scale is False:
        return None
    config = definition.scale or ScaleConfig()
    scale_type = config.type or infer_scale_type(channel_type, definition.type)
    if scale_type is None:
        return None
    if scale_type in CONTINUOUS_SCALE_TYPES and definition.type in DISCRETE_DATA_TYPES:
        LOGGER.debug("continuous %s scale on discrete field %r", scale_type, definition.field)
    output = config.range
    # Discrete colors without an explicit range come from the shared namespace.
    if output is None and not (scale_type == "ordinal" and channel_type.is_color):
        output = default_range(channel_type, scale_type, config.scheme)
    resolved = replace(
        config,
        type=scale_type,
        range=output,
        zero=config.zero if config.zero is not None else default_zero(channel_type, scale_type),
        namespace=config.namespace or namespace,
    )
    return ScaleAgent(resolved, channel_type, namespace=namespace)


def _key(value: Any) -> Any:
    try:
        hash(value)
    except TypeError:
        return repr(value)
    return value
