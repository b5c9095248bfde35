from __future__ import annotations

from typing import Any, Iterable, Mapping

from chartkit_encode.axis_agent import AxisAgent
from chartkit_encode.formats import Formatter
from chartkit_encode.parsers.extract_format import extract_format_from_channel_def
from chartkit_encode.parsers.extract_getter import Getter, extract_getter
from chartkit_encode.parsers.extract_scale import ScaleAgent, extract_scale
from chartkit_encode.types import (
    DISCRETE_DATA_TYPES,
    ChannelDef,
    ChannelOptions,
    ChannelType,
    FieldDef,
    LegendConfig,
    is_disabled,
    is_enabled,
    is_value_def,
    parse_channel_def,
    parse_channel_options,
)


def _identity(value: Any) -> Any:
    return value


class ChannelEncoder:
    """Binds one encoding channel to its accessor, formatter, scale and axis."""

    def __init__(
        self,
        *,
        name: str,
        channel_type: ChannelType | str,
        definition: ChannelDef | Mapping[str, Any],
        options: ChannelOptions | Mapping[str, Any] | None = None,
    ) -> None:
        self.name = name
        self.channel_type = ChannelType.parse(channel_type)
        self.definition: ChannelDef = parse_channel_def(definition, self.channel_type)
        self.options: ChannelOptions = parse_channel_options(options)

        self.getter: Getter = extract_getter(self.definition)
        self.formatter: Formatter = extract_format_from_channel_def(self.definition)
        self.scale: ScaleAgent | None = extract_scale(self.channel_type, self.definition, self.options.namespace)
        # Axis geometry reads the formatter and scale, so it is built last.
        self.axis: AxisAgent | None = AxisAgent(self) if self._wants_axis() else None
        self.encode_value = self.scale.encode_value if self.scale is not None else _identity

    def _wants_axis(self) -> bool:
        if not self.is_xy() or is_value_def(self.definition):
            return False
        if is_disabled(self.options.axis):
            return False
        return not (isinstance(self.definition, FieldDef) and is_disabled(self.definition.axis))

    def get(self, datum: Any, otherwise: Any = None) -> Any:
        value = self.getter(datum)
        if value is None and otherwise is not None:
            return otherwise
        return value

    def encode(self, datum: Any, otherwise: Any = None) -> Any:
        value = self.get(datum)
        if value is None:
            return otherwise
        output = self.encode_value(value)
        if output is None and otherwise is not None:
            return otherwise
        return output

    def set_domain_from_dataset(self, data: Iterable[Any]) -> None:
        # Positional domains belong to the layout pass; explicit domains are kept.
        scale = self.scale
        if scale is None or self.is_xy() or scale.config.domain is not None:
            return
        scale.set_domain_from_values(self.get(datum) for datum in data)

    def format(self, datum: Any) -> str:
        return self.formatter(self.get(datum))

    def get_title(self) -> str:
        if isinstance(self.definition, FieldDef):
            return self.definition.title or self.definition.field
        return ""

    def has_legend(self) -> bool:
        if is_disabled(self.options.legend) or self.is_xy() or is_value_def(self.definition):
            return False
        assert isinstance(self.definition, FieldDef)
        legend = self.definition.legend
        if legend is not None:
            return isinstance(legend, LegendConfig) or is_enabled(legend)
        return self.scale is not None

    def is_group_by(self) -> bool:
        if not isinstance(self.definition, FieldDef) or self.definition.type not in DISCRETE_DATA_TYPES:
            return False
        return (
            self.channel_type in (ChannelType.CATEGORY, ChannelType.TEXT, ChannelType.COLOR)
            or self.is_xy()
        )

    def is_x(self) -> bool:
        return self.channel_type.is_x

    def is_y(self) -> bool:
        return self.channel_type.is_y

    def is_xy(self) -> bool:
        return self.channel_type.is_xy

    def __repr__(self) -> str:
        return f"ChannelEncoder(name={self.name!r}, channel_type={self.channel_type.value}, definition={self.definition!r})"
