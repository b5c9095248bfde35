from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
import tomllib
from typing import Any, Mapping

from chartkit_encode.text import TextStyle


LOGGER = logging.getLogger(__name__)

DEFAULT_LABEL_ANGLE = 40.0
# Additional margin to avoid content hidden behind a scroll bar.
OVERFLOW_MARGIN = 8.0


@dataclass(frozen=True)
class TickLabelStyles:
    top: TextStyle = field(default_factory=TextStyle)
    bottom: TextStyle = field(default_factory=TextStyle)
    left: TextStyle = field(default_factory=TextStyle)
    right: TextStyle = field(default_factory=TextStyle)


@dataclass(frozen=True)
class TickStyles:
    length: float = 4.0
    stroke: str = "#757575"
    label: TickLabelStyles = field(default_factory=TickLabelStyles)


@dataclass(frozen=True)
class ChartTheme:
    x_tick_styles: TickStyles = field(default_factory=TickStyles)
    y_tick_styles: TickStyles = field(default_factory=TickStyles)


@dataclass(frozen=True)
class LayoutSettings:
    overflow_margin: float = OVERFLOW_MARGIN
    default_label_angle: float = DEFAULT_LABEL_ANGLE


DEFAULT_THEME = ChartTheme()
DEFAULT_LAYOUT_SETTINGS = LayoutSettings()


@dataclass(frozen=True)
class ChartConfig:
    theme: ChartTheme = DEFAULT_THEME
    layout: LayoutSettings = DEFAULT_LAYOUT_SETTINGS


def validate_tick_styles(overrides: Mapping[str, Any] | None = None, *, base: TickStyles | None = None) -> TickStyles:
    """Merge tick style overrides (``length``, ``stroke``, font keys) onto ``base``."""

    base = base or TickStyles()
    if not overrides:
        return base
    allowed = {"length", "stroke", "font_family", "font_size_px", "letter_spacing_px"}
    unknown = set(overrides) - allowed
    if unknown:
        raise ValueError(f"Unknown tick style keys: {sorted(unknown)}")

    length = overrides.get("length", base.length)
    if not isinstance(length, (int, float)) or isinstance(length, bool) or float(length) < 0:
        raise ValueError("Tick style `length` must be a non-negative number")
    stroke = overrides.get("stroke", base.stroke)
    if not isinstance(stroke, str) or not stroke.strip():
        raise ValueError("Tick style `stroke` must be a non-empty string")

    label = base.label.bottom
    font_family = overrides.get("font_family", label.font_family)
    if not isinstance(font_family, str) or not font_family.strip():
        raise ValueError("Tick style `font_family` must be a non-empty string")
    font_size = overrides.get("font_size_px", label.font_size_px)
    if not isinstance(font_size, (int, float)) or isinstance(font_size, bool) or float(font_size) <= 0:
        raise ValueError("Tick style `font_size_px` must be a positive number")
    spacing = overrides.get("letter_spacing_px", label.letter_spacing_px)
    if not isinstance(spacing, (int, float)) or isinstance(spacing, bool):
        raise ValueError("Tick style `letter_spacing_px` must be a number")

    style = TextStyle(font_family=font_family, font_size_px=float(font_size), letter_spacing_px=float(spacing))
    return TickStyles(
        length=float(length),
        stroke=stroke,
        label=TickLabelStyles(top=style, bottom=style, left=style, right=style),
    )


def validate_layout_settings(overrides: Mapping[str, Any] | None = None) -> LayoutSettings:
    if not overrides:
        return DEFAULT_LAYOUT_SETTINGS
    unknown = set(overrides) - {"overflow_margin", "default_label_angle"}
    if unknown:
        raise ValueError(f"Unknown layout settings: {sorted(unknown)}")
    overflow = overrides.get("overflow_margin", OVERFLOW_MARGIN)
    angle = overrides.get("default_label_angle", DEFAULT_LABEL_ANGLE)
    if not isinstance(overflow, (int, float)) or isinstance(overflow, bool) or float(overflow) < 0:
        raise ValueError("Setting `overflow_margin` must be a non-negative number")
    if not isinstance(angle, (int, float)) or isinstance(angle, bool) or not -90.0 <= float(angle) <= 90.0:
        raise ValueError("Setting `default_label_angle` must be a number in [-90, 90]")
    return LayoutSettings(overflow_margin=float(overflow), default_label_angle=float(angle))


def load_chart_config(path: str | Path) -> ChartConfig:
    """Read theme and layout settings from a TOML file.

    Recognized tables are ``[theme.x_tick]``, ``[theme.y_tick]`` and ``[layout]``.
    """

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"chart config not found: {config_path}")
    with config_path.open("rb") as f:
        raw = tomllib.load(f)

    unknown = set(raw) - {"theme", "layout"}
    if unknown:
        raise ValueError(f"Unknown chart config sections: {sorted(unknown)}")
    theme_raw = raw.get("theme", {})
    unknown = set(theme_raw) - {"x_tick", "y_tick"}
    if unknown:
        raise ValueError(f"Unknown theme sections: {sorted(unknown)}")

    theme = ChartTheme(
        x_tick_styles=validate_tick_styles(theme_raw.get("x_tick")),
        y_tick_styles=validate_tick_styles(theme_raw.get("y_tick")),
    )
    layout = validate_layout_settings(raw.get("layout"))
    LOGGER.debug("loaded chart config from %s", config_path)
    return ChartConfig(theme=theme, layout=layout)

