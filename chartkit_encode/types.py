from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Literal, Mapping, TypeAlias

from chartkit_encode.errors import EncodingSpecError


DataType = Literal["quantitative", "nominal", "ordinal", "temporal"]
DATA_TYPES: frozenset[str] = frozenset({"quantitative", "nominal", "ordinal", "temporal"})
DISCRETE_DATA_TYPES: frozenset[str] = frozenset({"nominal", "ordinal"})

AxisOrient = Literal["top", "bottom", "left", "right"]
LabelOverlap = Literal["auto", "flat", "rotate"]
ScaleType = Literal["linear", "log", "pow", "sqrt", "time", "band", "point", "ordinal"]
SCALE_TYPES: frozenset[str] = frozenset({"linear", "log", "pow", "sqrt", "time", "band", "point", "ordinal"})


class ChannelType(str, Enum):
    X = "X"
    X_BAND = "XBand"
    Y = "Y"
    Y_BAND = "YBand"
    COLOR = "Color"
    FILL = "Fill"
    STROKE = "Stroke"
    OPACITY = "Opacity"
    SIZE = "Size"
    STROKE_WIDTH = "StrokeWidth"
    SHAPE = "Shape"
    TEXT = "Text"
    CATEGORY = "Category"
    NUMERIC = "Numeric"

    @property
    def is_x(self) -> bool:
        match self:
            case ChannelType.X | ChannelType.X_BAND:
                return True
            case (
                ChannelType.Y
                | ChannelType.Y_BAND
                | ChannelType.COLOR
                | ChannelType.FILL
                | ChannelType.STROKE
                | ChannelType.OPACITY
                | ChannelType.SIZE
                | ChannelType.STROKE_WIDTH
                | ChannelType.SHAPE
                | ChannelType.TEXT
                | ChannelType.CATEGORY
                | ChannelType.NUMERIC
            ):
                return False

    @property
    def is_y(self) -> bool:
        match self:
            case ChannelType.Y | ChannelType.Y_BAND:
                return True
            case (
                ChannelType.X
                | ChannelType.X_BAND
                | ChannelType.COLOR
                | ChannelType.FILL
                | ChannelType.STROKE
                | ChannelType.OPACITY
                | ChannelType.SIZE
                | ChannelType.STROKE_WIDTH
                | ChannelType.SHAPE
                | ChannelType.TEXT
                | ChannelType.CATEGORY
                | ChannelType.NUMERIC
            ):
                return False

    @property
    def is_xy(self) -> bool:
        return self.is_x or self.is_y

    @property
    def is_band(self) -> bool:
        return self in (ChannelType.X_BAND, ChannelType.Y_BAND)

    @property
    def is_color(self) -> bool:
        return self in (ChannelType.COLOR, ChannelType.FILL, ChannelType.STROKE)

    @classmethod
    def parse(cls, value: "ChannelType | str") -> "ChannelType":
        if isinstance(value, ChannelType):
            return value
        try:
            return cls(value)
        except ValueError as exc:
            raise EncodingSpecError(f"unknown channel type: {value!r}") from exc


class DefKind(str, Enum):
    HAS_FIELD = "has_field"
    IS_BAND = "is_band"
    IS_CONSTANT = "is_constant"


@dataclass(frozen=True)
class ScaleConfig:
    type: ScaleType | None = None
    domain: tuple[Any, ...] | None = None
    range: tuple[Any, ...] | None = None
    zero: bool | None = None
    nice: bool = False
    clamp: bool = False
    padding_inner: float = 0.1
    padding_outer: float = 0.1
    align: float = 0.5
    scheme: str | None = None
    base: float = 10.0
    exponent: float = 1.0
    reverse: bool = False
    namespace: str | None = None


@dataclass(frozen=True)
class AxisConfig:
    orient: AxisOrient | None = None
    tick_count: int = 5
    title: str | None = None
    label_angle: float = 40.0
    label_overlap: LabelOverlap = "auto"
    label_padding: float = 4.0
    format: str | None = None


@dataclass(frozen=True)
class LegendConfig:
    title: str | None = None


@dataclass(frozen=True)
class ChannelOptions:
    namespace: str | None = None
    legend: bool | None = None
    axis: bool | None = None


@dataclass(frozen=True)
class FieldDef:
    field: str
    type: DataType
    # `False` marks a sub-config as explicitly disabled; `None` means "use defaults".
    scale: ScaleConfig | Literal[False] | None = None
    axis: AxisConfig | Literal[False] | None = None
    legend: LegendConfig | bool | None = None
    format: str | None = None
    title: str | None = None

    @property
    def kind(self) -> DefKind:
        return DefKind.HAS_FIELD


@dataclass(frozen=True)
class BandFieldDef(FieldDef):
    @property
    def kind(self) -> DefKind:
        return DefKind.IS_BAND


@dataclass(frozen=True)
class ValueDef:
    value: Any

    @property
    def kind(self) -> DefKind:
        return DefKind.IS_CONSTANT


ChannelDef: TypeAlias = FieldDef | BandFieldDef | ValueDef


@dataclass(frozen=True)
class CommonEncoding:
    group: tuple[ChannelDef, ...] = field(default_factory=tuple)
    tooltip: tuple[ChannelDef, ...] = field(default_factory=tuple)


def is_enabled(config: Any) -> bool:
    return config is not None and config is not False


def is_disabled(config: Any) -> bool:
    return config is False


def is_field_def(definition: ChannelDef) -> bool:
    return definition.kind in (DefKind.HAS_FIELD, DefKind.IS_BAND)


def is_value_def(definition: ChannelDef) -> bool:
    return definition.kind is DefKind.IS_CONSTANT


def parse_channel_def(raw: ChannelDef | Mapping[str, Any], channel_type: ChannelType | str) -> ChannelDef:
    """Build a typed channel definition from its declarative mapping form.

    A mapping carrying ``value`` and no ``field`` is a constant encoding; a field
    mapping on a banded channel becomes a ``BandFieldDef``.
    """

    ctype = ChannelType.parse(channel_type)
    if isinstance(raw, (FieldDef, ValueDef)):
        if ctype.is_band and type(raw) is FieldDef:
            return BandFieldDef(**{f.name: getattr(raw, f.name) for f in fields(raw)})
        return raw
    if not isinstance(raw, Mapping):
        raise EncodingSpecError(f"channel definition must be a mapping, got {type(raw)!r}")

    if "field" not in raw:
        if "value" not in raw:
            raise EncodingSpecError("channel definition requires `field` or `value`")
        return ValueDef(value=raw["value"])

    field_name = raw["field"]
    if not isinstance(field_name, str) or not field_name:
        raise EncodingSpecError("channel `field` must be a non-empty string")
    data_type = raw.get("type")
    if data_type not in DATA_TYPES:
        raise EncodingSpecError(f"unknown data type for field {field_name!r}: {data_type!r}")

    cls = BandFieldDef if ctype.is_band else FieldDef
    return cls(
        field=field_name,
        type=data_type,
        scale=_parse_scale(raw.get("scale")),
        axis=_parse_axis(raw.get("axis")),
        legend=_parse_legend(raw.get("legend")),
        format=_coerce_optional_str(raw.get("format"), "format"),
        title=_coerce_optional_str(raw.get("title"), "title"),
    )


def parse_channel_options(raw: ChannelOptions | Mapping[str, Any] | None) -> ChannelOptions:
    if raw is None:
        return ChannelOptions()
    if isinstance(raw, ChannelOptions):
        return raw
    if not isinstance(raw, Mapping):
        raise EncodingSpecError("channel options must be a mapping")
    unknown = set(raw) - {"namespace", "legend", "axis"}
    if unknown:
        raise EncodingSpecError(f"unknown channel options: {sorted(unknown)}")
    return ChannelOptions(
        namespace=_coerce_optional_str(raw.get("namespace"), "namespace"),
        legend=_coerce_optional_bool(raw.get("legend"), "legend"),
        axis=_coerce_optional_bool(raw.get("axis"), "axis"),
    )


def _parse_scale(raw: Any) -> ScaleConfig | Literal[False] | None:
    if raw is None or raw is True:
        return None
    if raw is False:
        return False
    if isinstance(raw, ScaleConfig):
        return raw
    if not isinstance(raw, Mapping):
        raise EncodingSpecError("`scale` must be a mapping or a boolean")
    scale_type = raw.get("type")
    if scale_type is not None and scale_type not in SCALE_TYPES:
        raise EncodingSpecError(f"unknown scale type: {scale_type!r}")
    kwargs: dict[str, Any] = {"type": scale_type}
    for key in ("domain", "range"):
        if raw.get(key) is not None:
            kwargs[key] = tuple(raw[key])
    for src, dst in (
        ("zero", "zero"),
        ("nice", "nice"),
        ("clamp", "clamp"),
        ("paddingInner", "padding_inner"),
        ("padding_inner", "padding_inner"),
        ("paddingOuter", "padding_outer"),
        ("padding_outer", "padding_outer"),
        ("align", "align"),
        ("scheme", "scheme"),
        ("base", "base"),
        ("exponent", "exponent"),
        ("reverse", "reverse"),
        ("namespace", "namespace"),
    ):
        if raw.get(src) is not None:
            kwargs[dst] = raw[src]
    return ScaleConfig(**kwargs)


def _parse_axis(raw: Any) -> AxisConfig | Literal[False] | None:
    if raw is None or raw is True:
        return None
    if raw is False:
        return False
    if isinstance(raw, AxisConfig):
        return raw
    if not isinstance(raw, Mapping):
        raise EncodingSpecError("`axis` must be a mapping or a boolean")
    orient = raw.get("orient")
    if orient is not None and orient not in ("top", "bottom", "left", "right"):
        raise EncodingSpecError(f"unknown axis orient: {orient!r}")
    overlap = raw.get("labelOverlap", raw.get("label_overlap", "auto"))
    if overlap not in ("auto", "flat", "rotate"):
        raise EncodingSpecError(f"unknown label overlap strategy: {overlap!r}")
    tick_count = raw.get("tickCount", raw.get("tick_count", 5))
    if not isinstance(tick_count, int) or tick_count <= 0:
        raise EncodingSpecError("axis tick count must be a positive integer")
    return AxisConfig(
        orient=orient,
        tick_count=tick_count,
        title=_coerce_optional_str(raw.get("title"), "axis.title"),
        label_angle=float(raw.get("labelAngle", raw.get("label_angle", 40.0))),
        label_overlap=overlap,
        label_padding=float(raw.get("labelPadding", raw.get("label_padding", 4.0))),
        format=_coerce_optional_str(raw.get("format"), "axis.format"),
    )


def _parse_legend(raw: Any) -> LegendConfig | bool | None:
    if raw is None or isinstance(raw, (bool, LegendConfig)):
        return raw
    if not isinstance(raw, Mapping):
        raise EncodingSpecError("`legend` must be a mapping or a boolean")
    return LegendConfig(title=_coerce_optional_str(raw.get("title"), "legend.title"))


def _coerce_optional_str(value: Any, label: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise EncodingSpecError(f"`{label}` must be a string")
    return value


def _coerce_optional_bool(value: Any, label: str) -> bool | None:
    if value is None:
        return None
    if not isinstance(value, bool):
        raise EncodingSpecError(f"`{label}` must be a boolean")
    return value
