from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, ClassVar, Iterable, Mapping

from chartkit_encode.channel_encoder import ChannelEncoder
from chartkit_encode.errors import EncodingSpecError
from chartkit_encode.types import ChannelType, CommonEncoding, FieldDef, parse_channel_def


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class LegendEntry:
    channel: str
    value: Any
    output: Any
    label: str


class Encoder:
    """The full set of channel encoders for one chart.

    Subclasses declare ``channel_types`` and ``default_encoding``; a partial
    ``encoding`` is merged over the defaults channel by channel.
    """

    channel_types: ClassVar[Mapping[str, ChannelType]] = {}
    default_encoding: ClassVar[Mapping[str, Mapping[str, Any]]] = {}

    def __init__(
        self,
        *,
        encoding: Mapping[str, Any] | None = None,
        common_encoding: Mapping[str, Any] | CommonEncoding | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> None:
        encoding = encoding or {}
        options = options or {}
        unknown = [name for name in list(encoding) + list(options) if name not in self.channel_types]
        if unknown:
            raise EncodingSpecError(f"unknown channels for {type(self).__name__}: {sorted(set(unknown))}")

        self.encoding: dict[str, Any] = {**self.default_encoding, **encoding}
        self.common_encoding = _parse_common_encoding(common_encoding)
        self.channels: dict[str, ChannelEncoder] = {}
        for name, channel_type in self.channel_types.items():
            if name not in self.encoding:
                raise EncodingSpecError(f"missing definition for channel {name!r}")
            self.channels[name] = ChannelEncoder(
                name=name,
                channel_type=channel_type,
                definition=self.encoding[name],
                options=options.get(name),
            )
        self.common_channels: dict[str, list[ChannelEncoder]] = {
            "group": [
                ChannelEncoder(name=f"group{i}", channel_type=ChannelType.CATEGORY, definition=definition)
                for i, definition in enumerate(self.common_encoding.group)
            ],
            "tooltip": [
                ChannelEncoder(name=f"tooltip{i}", channel_type=ChannelType.TEXT, definition=definition)
                for i, definition in enumerate(self.common_encoding.tooltip)
            ],
        }
        LOGGER.debug("built %s with channels %s", type(self).__name__, sorted(self.channels))

    def all_channel_encoders(self) -> list[ChannelEncoder]:
        return [
            *self.channels.values(),
            *self.common_channels["group"],
            *self.common_channels["tooltip"],
        ]

    def get_group_bys(self) -> list[str]:
        fields: list[str] = []
        for channel in [*self.channels.values(), *self.common_channels["group"]]:
            if channel.is_group_by() and isinstance(channel.definition, FieldDef):
                if channel.definition.field not in fields:
                    fields.append(channel.definition.field)
        return fields

    def legend_channels(self) -> list[ChannelEncoder]:
        return [channel for channel in self.channels.values() if channel.has_legend()]

    def has_legend(self) -> bool:
        return bool(self.legend_channels())

    def set_domain_from_dataset(self, data: Iterable[Any]) -> None:
        rows = list(data)
        for channel in self.channels.values():
            channel.set_domain_from_dataset(rows)

    def legend_entries(self, data: Iterable[Any]) -> list[LegendEntry]:
        rows = list(data)
        self.set_domain_from_dataset(rows)
        entries: list[LegendEntry] = []
        for channel in self.legend_channels():
            seen: set[Any] = set()
            for row in rows:
                value = channel.get(row)
                if value is None:
                    continue
                key = value if _is_hashable(value) else repr(value)
                if key in seen:
                    continue
                seen.add(key)
                entries.append(
                    LegendEntry(
                        channel=channel.name,
                        value=value,
                        output=channel.encode(row),
                        label=channel.format(row),
                    )
                )
        return entries


def _parse_common_encoding(raw: Mapping[str, Any] | CommonEncoding | None) -> CommonEncoding:
    if raw is None:
        return CommonEncoding()
    if isinstance(raw, CommonEncoding):
        return raw
    unknown = set(raw) - {"group", "tooltip"}
    if unknown:
        raise EncodingSpecError(f"unknown common encoding keys: {sorted(unknown)}")
    return CommonEncoding(
        group=tuple(parse_channel_def(d, ChannelType.CATEGORY) for d in raw.get("group") or ()),
        tooltip=tuple(parse_channel_def(d, ChannelType.TEXT) for d in raw.get("tooltip") or ()),
    )


def _is_hashable(value: Any) -> bool:
    try:
        hash(value)
    except TypeError:
        return False
    return True
