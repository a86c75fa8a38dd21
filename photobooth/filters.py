from __future__ import annotations

import math
import re
from dataclasses import dataclass
from functools import partial
from types import MappingProxyType
from typing import List, Mapping, Optional, Sequence, Tuple

import cv2
import numpy as np

from .effects import (
    PixelPass,
    apply_glow,
    apply_grain,
    apply_sketch,
    apply_vignette,
    apply_watercolor,
    chain,
)
from .exceptions import UnknownFilterError

TONE_OPS = ("brightness", "contrast", "saturate", "hue-rotate", "sepia", "grayscale")
_PERCENT_OPS = ("sepia", "grayscale")

_OP_PATTERN = re.compile(r"\s*([a-z-]+)\(\s*([-+]?(?:\d+\.?\d*|\.\d+))\s*(%|deg|rad|turn)?\s*\)\s*")


@dataclass(frozen=True)
class ToneOp:
    """One preview adjustment. ``amount`` is a factor, or degrees for hue-rotate."""

    name: str
    amount: float

    def __post_init__(self) -> None:
        if self.name not in TONE_OPS:
            raise ValueError(f"Unsupported tone operation: {self.name}")

    def matrix(self) -> np.ndarray:
        """3x4 affine matrix in RGB order on 0-255 values."""
        a = self.amount
        m = np.zeros((3, 4), dtype=np.float64)
        if self.name == "brightness":
            m[:, :3] = np.eye(3) * a
        elif self.name == "contrast":
            m[:, :3] = np.eye(3) * a
            m[:, 3] = 127.5 * (1.0 - a)
        elif self.name == "saturate":
            m[:, :3] = [
                [0.213 + 0.787 * a, 0.715 - 0.715 * a, 0.072 - 0.072 * a],
                [0.213 - 0.213 * a, 0.715 + 0.285 * a, 0.072 - 0.072 * a],
                [0.213 - 0.213 * a, 0.715 - 0.715 * a, 0.072 + 0.928 * a],
            ]
        elif self.name == "hue-rotate":
            c, s = math.cos(math.radians(a)), math.sin(math.radians(a))
            m[:, :3] = [
                [0.213 + c * 0.787 - s * 0.213, 0.715 - c * 0.715 - s * 0.715, 0.072 - c * 0.072 + s * 0.928],
                [0.213 - c * 0.213 + s * 0.143, 0.715 + c * 0.285 + s * 0.140, 0.072 - c * 0.072 - s * 0.283],
                [0.213 - c * 0.213 - s * 0.787, 0.715 - c * 0.715 + s * 0.715, 0.072 + c * 0.928 + s * 0.072],
            ]
        elif self.name == "sepia":
            k = 1.0 - min(max(a, 0.0), 1.0)
            m[:, :3] = [
                [0.393 + 0.607 * k, 0.769 - 0.769 * k, 0.189 - 0.189 * k],
                [0.349 - 0.349 * k, 0.686 + 0.314 * k, 0.168 - 0.168 * k],
                [0.272 - 0.272 * k, 0.534 - 0.534 * k, 0.131 + 0.869 * k],
            ]
        else:
            k = 1.0 - min(max(a, 0.0), 1.0)
            m[:, :3] = [
                [0.2126 + 0.7874 * k, 0.7152 - 0.7152 * k, 0.0722 - 0.0722 * k],
                [0.2126 - 0.2126 * k, 0.7152 + 0.2848 * k, 0.0722 - 0.0722 * k],
                [0.2126 - 0.2126 * k, 0.7152 - 0.7152 * k, 0.0722 + 0.9278 * k],
            ]
        return m


def parse_filter_string(value: str) -> Tuple[ToneOp, ...]:
    value = value.strip()
    if value in ("", "none"):
        return ()
    ops: List[ToneOp] = []
    position = 0
    while position < len(value):
        match = _OP_PATTERN.match(value, position)
        if match is None:
            raise ValueError(f"Invalid filter string near: {value[position:]!r}")
        name, number, unit = match.group(1), float(match.group(2)), match.group(3)
        if unit == "%":
            number /= 100.0
        elif unit == "rad":
            number = math.degrees(number)
        elif unit == "turn":
            number *= 360.0
        ops.append(ToneOp(name, number))
        position = match.end()
    return tuple(ops)


def _number(value: float) -> str:
    return f"{round(value, 6):g}"


def format_filter_string(ops: Sequence[ToneOp]) -> str:
    if not ops:
        return "none"
    parts = []
    for op in ops:
        if op.name in _PERCENT_OPS:
            parts.append(f"{op.name}({_number(op.amount * 100)}%)")
        elif op.name == "hue-rotate":
            parts.append(f"{op.name}({_number(op.amount)}deg)")
        else:
            parts.append(f"{op.name}({_number(op.amount)})")
    return " ".join(parts)


def apply_preview(image: np.ndarray, ops: Sequence[ToneOp]) -> np.ndarray:
    """Apply the tone chain to a BGR/BGRA image and return a new uint8 image."""
    if not ops:
        return image.copy()
    work = image[..., :3].astype(np.float32)
    for op in ops:
        rgb = op.matrix()
        bgr = np.empty_like(rgb)
        bgr[:, :3] = rgb[::-1, :3][:, ::-1]
        bgr[:, 3] = rgb[::-1, 3]
        work = np.clip(cv2.transform(work, bgr.astype(np.float32)), 0.0, 255.0)
    out = image.copy()
    out[..., :3] = np.rint(work).astype(np.uint8)
    return out


@dataclass(frozen=True)
class FilterDefinition:
    id: str
    name: str
    preview: Tuple[ToneOp, ...] = ()
    pixel_pass: Optional[PixelPass] = None

    @property
    def css(self) -> str:
        return format_filter_string(self.preview)

    @property
    def has_pixel_pass(self) -> bool:
        return self.pixel_pass is not None

    def apply_preview(self, image: np.ndarray) -> np.ndarray:
        return apply_preview(image, self.preview)


def _define(filter_id: str, name: str, css: str, pixel_pass: Optional[PixelPass] = None) -> FilterDefinition:
    return FilterDefinition(filter_id, name, parse_filter_string(css), pixel_pass)


_DEFINITIONS = (
    _define("none", "なし", "none"),
    _define(
        "film",
        "フィルム風",
        "contrast(1.15) saturate(1.3) brightness(0.92) sepia(15%)",
        partial(apply_grain, intensity=18.0),
    ),
    _define("mono", "モノクロ", "grayscale(100%) contrast(1.15) brightness(1.05)"),
    _define("sepia", "セピア", "sepia(85%) brightness(0.95) contrast(1.1)"),
    _define("soft", "ソフト/グロウ", "brightness(1.18) saturate(1.25) contrast(0.9)", apply_glow),
    _define("warm", "フィルム（温）", "sepia(35%) saturate(1.6) hue-rotate(-15deg) brightness(1.08)"),
    _define("cool", "フィルム（冷）", "hue-rotate(20deg) saturate(1.35) brightness(1.08) contrast(1.05)"),
    _define("watercolor", "水彩", "saturate(1.8) brightness(1.1) contrast(0.85)", apply_watercolor),
    _define("noise", "ノイズ/テクスチャ", "contrast(1.2) brightness(0.95)", partial(apply_grain, intensity=35.0)),
    _define("sketch", "点描/スケッチ", "grayscale(80%) contrast(1.5) brightness(1.1)", apply_sketch),
    _define(
        "vintage",
        "ヴィンテージ",
        "sepia(60%) saturate(0.85) contrast(1.05) brightness(0.95)",
        chain(partial(apply_vignette, strength=0.5), partial(apply_grain, intensity=12.0, color=True)),
    ),
)

FILTERS: Mapping[str, FilterDefinition] = MappingProxyType({f.id: f for f in _DEFINITIONS})
NO_FILTER = FILTERS["none"]


def get_filter(filter_id: str) -> FilterDefinition:
    try:
        return FILTERS[filter_id]
    except KeyError:
        raise UnknownFilterError(filter_id) from None


def list_filters() -> List[FilterDefinition]:
    return list(FILTERS.values())
