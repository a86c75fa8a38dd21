from __future__ import annotations

import logging
from datetime import date, datetime
from functools import lru_cache
from typing import List, Optional, Sequence, Tuple, Union

import cv2
import numpy as np
from PIL import Image, ImageDraw, ImageFilter, ImageFont

from .drawing import alpha_composite
from .models import MessageConfig

logger = logging.getLogger(__name__)

DEFAULT_DATE_FORMAT = "{year}年{month}月{day}日"
FALLBACK_DATE_FORMAT = "{year}/{month}/{day}"
# Private-use code point no font maps, drawn as the missing-glyph box
MISSING_GLYPH = "\ue000"

ACCENT_RGBA = (255, 215, 0, 255)
LIGHT_RGBA = (255, 255, 255, 255)
SHADOW_RGBA = (0, 0, 0, 204)
PANEL_RGBA = (0, 0, 0, 96)
SHADOW_OFFSET = (2, 2)
SHADOW_BLUR = 5


def format_date(value: Union[str, date, datetime, None], fmt: str = DEFAULT_DATE_FORMAT) -> Optional[str]:
    """Format a date value, or return None when it cannot be parsed."""
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            logger.debug("Ignoring invalid caption date: %r", text)
            return None
    return fmt.format(year=value.year, month=value.month, day=value.day)


def caption_lines(message: MessageConfig, date_format: str = DEFAULT_DATE_FORMAT) -> List[str]:
    lines: List[str] = []
    if message.text.active:
        lines.append(message.text.value.strip())
    if message.date.active:
        formatted = format_date(message.date.value, date_format)
        if formatted:
            lines.append(formatted)
    if message.location.active:
        lines.append(message.location.value.strip())
    return lines


def _load_font(size: int, font_path: Optional[str]) -> ImageFont.FreeTypeFont:
    if font_path:
        try:
            return ImageFont.truetype(font_path, size)
        except OSError:
            logger.warning(f"Caption font not readable, using default: {font_path}")
    return ImageFont.load_default(size=size)


def _glyph(font: ImageFont.FreeTypeFont, char: str) -> Tuple[Tuple[int, int], bytes]:
    left, top, right, bottom = (int(v) for v in font.getbbox(char))
    canvas = Image.new("L", (max(1, right - left) + 2, max(1, bottom - top) + 2), 0)
    ImageDraw.Draw(canvas).text((1 - left, 1 - top), char, font=font, fill=255)
    return canvas.size, canvas.tobytes()


def font_can_draw(font: ImageFont.FreeTypeFont, text: str) -> bool:
    """True when no visible character of ``text`` falls back to the missing-glyph box."""
    missing = _glyph(font, MISSING_GLYPH)
    return all(_glyph(font, char) != missing for char in set(text) if not char.isspace())


@lru_cache(maxsize=16)
def date_format_for_font(date_format: str, font_path: Optional[str] = None) -> str:
    """Keep ``date_format`` if the caption font can draw it, else use the numeric one."""
    sample = format_date(date(2000, 12, 31), date_format) or ""
    if font_can_draw(_load_font(24, font_path), sample):
        return date_format
    logger.warning(f"Caption font cannot draw {sample!r}, using date format {FALLBACK_DATE_FORMAT!r}")
    return FALLBACK_DATE_FORMAT


def _layout(width: int, height: int, count: int) -> Tuple[float, List[int], List[float]]:
    padding = width * 0.05
    font_size = max(width * 0.04, 24.0)
    line_height = font_size * 1.4
    sizes = [int(round(font_size if i == 0 else font_size * 0.7)) for i in range(count)]
    advances = [line_height if i == 0 else line_height * 0.8 for i in range(count - 1)]
    baselines = [0.0]
    for advance in advances:
        baselines.append(baselines[-1] + advance)
    shift = height - padding - baselines[-1]
    return padding, sizes, [b + shift for b in baselines]


def render_caption(
    image: np.ndarray,
    lines: Sequence[str],
    font_path: Optional[str] = None,
) -> np.ndarray:
    """Draw the caption block near the bottom of a BGR image.

    Lines are centered; the first is drawn larger in the accent color.
    Returns the input unchanged when there is nothing to draw.
    """
    if not lines:
        return image
    height, width = image.shape[:2]
    padding, sizes, baselines = _layout(width, height, len(lines))
    cx = width / 2.0

    fonts = [_load_font(size, font_path) for size in sizes]
    text_layer = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    shadow_layer = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    text_draw = ImageDraw.Draw(text_layer)
    shadow_draw = ImageDraw.Draw(shadow_layer)

    boxes = []
    for index, (line, font, baseline) in enumerate(zip(lines, fonts, baselines)):
        fill = ACCENT_RGBA if index == 0 else LIGHT_RGBA
        bold = max(1, sizes[index] // 24) if index == 0 else 0
        shadow_draw.text(
            (cx + SHADOW_OFFSET[0], baseline + SHADOW_OFFSET[1]),
            line,
            font=font,
            fill=SHADOW_RGBA,
            anchor="ms",
            stroke_width=bold,
            stroke_fill=SHADOW_RGBA,
        )
        text_draw.text((cx, baseline), line, font=font, fill=fill, anchor="ms", stroke_width=bold, stroke_fill=fill)
        boxes.append(text_draw.textbbox((cx, baseline), line, font=font, anchor="ms", stroke_width=bold))

    margin = padding * 0.4
    left = max(0.0, min(b[0] for b in boxes) - margin)
    top = max(0.0, min(b[1] for b in boxes) - margin)
    right = min(width - 1.0, max(b[2] for b in boxes) + margin)
    bottom = min(height - 1.0, max(b[3] for b in boxes) + margin)

    layer = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    if right > left and bottom > top:
        ImageDraw.Draw(layer).rounded_rectangle(
            (left, top, right, bottom), radius=int(sizes[0] * 0.4), fill=PANEL_RGBA
        )
    layer.alpha_composite(shadow_layer.filter(ImageFilter.GaussianBlur(SHADOW_BLUR)))
    layer.alpha_composite(text_layer)

    bgra = cv2.cvtColor(np.asarray(layer), cv2.COLOR_RGBA2BGRA)
    return alpha_composite(image, bgra)
