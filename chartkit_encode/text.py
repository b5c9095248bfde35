from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import logging
import math
from pathlib import Path

from PIL import ImageFont


LOGGER = logging.getLogger(__name__)

DEFAULT_FONT_FAMILY = "DejaVu Sans"
DEFAULT_FONT_SIZE_PX = 11.0
FONT_FALLBACK_PATTERNS = (
    "dejavusans",
    "dejavu sans",
    "helvetica",
    "arial",
    "liberationsans",
    "menlo",
    "courier",
)


@dataclass(frozen=True)
class TextStyle:
    font_family: str = DEFAULT_FONT_FAMILY
    font_size_px: float = DEFAULT_FONT_SIZE_PX
    letter_spacing_px: float = 0.0


def text_size(
    text: str,
    *,
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = DEFAULT_FONT_SIZE_PX,
    letter_spacing_px: float = 0.0,
) -> tuple[int, int]:
    """Unrotated pixel box of ``text`` rendered in the given font."""

    font = _load_font(font_family=font_family, font_size_px=font_size_px)
    if isinstance(font, ImageFont.FreeTypeFont):
        ascent, descent = font.getmetrics()
        line_h = max(1, int(ascent + descent))
    else:
        _, top, _, bottom = font.getbbox("Ag")
        line_h = max(1, int(bottom - top))
    if not text:
        return (0, line_h)
    left, _, right, _ = font.getbbox(text)
    w = max(0, int(math.ceil(right - left + letter_spacing_px * max(0, len(text) - 1))))
    return (w, line_h)


def measure_text(text: str, style: TextStyle | None = None) -> tuple[int, int]:
    style = style or TextStyle()
    return text_size(
        text,
        font_family=style.font_family,
        font_size_px=style.font_size_px,
        letter_spacing_px=style.letter_spacing_px,
    )


def rotated_extent(width: float, height: float, angle_deg: float) -> tuple[float, float]:
    """Axis-aligned box of a ``width`` x ``height`` rectangle rotated by ``angle_deg``."""

    theta = math.radians(angle_deg)
    cos_t = abs(math.cos(theta))
    sin_t = abs(math.sin(theta))
    return (width * cos_t + height * sin_t, width * sin_t + height * cos_t)


@lru_cache(maxsize=64)
def _load_font(font_family: str, font_size_px: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    size = max(1, int(round(font_size_px)))
    font_path = _resolve_font_path(font_family)
    if font_path is not None:
        try:
            return ImageFont.truetype(str(font_path), size=size)
        except OSError as exc:
            LOGGER.warning("could not load font %s (%s); using Pillow default", font_path, exc)
    else:
        LOGGER.warning("no font found for family %r; using Pillow default", font_family)
    try:
        return ImageFont.load_default(size=size)
    except TypeError:
        # Pillow < 10.1 only ships the fixed-size bitmap font.
        return ImageFont.load_default()


@lru_cache(maxsize=32)
def _resolve_font_path(font_family: str) -> Path | None:
    wanted = font_family.strip().lower() if font_family.strip() else DEFAULT_FONT_FAMILY.lower()
    patterns = (wanted,) + FONT_FALLBACK_PATTERNS

    font_dirs = [
        Path.home() / "Library" / "Fonts",
        Path("/Library/Fonts"),
        Path("/System/Library/Fonts"),
        Path("/System/Library/Fonts/Supplemental"),
        Path("/usr/share/fonts"),
        Path("/usr/local/share/fonts"),
    ]

    candidates: list[Path] = []
    for base in font_dirs:
        if not base.exists():
            continue
        for ext in ("*.ttf", "*.otf", "*.ttc"):
            candidates.extend(base.rglob(ext))

    for pattern in patterns:
        p = pattern.replace(" ", "")
        for path in candidates:
            stem = path.stem.lower().replace(" ", "")
            name = path.name.lower().replace(" ", "")
            if p in stem or p in name:
                return path
    return None
