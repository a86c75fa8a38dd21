from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Mapping

import numpy as np

from .drawing import Path, polygon, render_paths, stroke

REFERENCE_SIZE = (1920, 1080)


@dataclass(frozen=True)
class FrameStyle:
    """Double border, measured in pixels at the 1920x1080 reference size."""

    id: str
    name: str
    outer_width: float
    outer_color: str
    inner_width: float = 0.0
    inner_color: str = "#ffffff"
    inner_offset: float = 0.0


FRAME_STYLES: Mapping[str, FrameStyle] = MappingProxyType(
    {
        style.id: style
        for style in (
            FrameStyle("classic", "クラシック", 40, "#ffffff", 30, "#ffffff", 60),
            FrameStyle("gold", "ゴールド", 50, "#ffd700", 35, "#ffed4e", 70),
            FrameStyle("silver", "シルバー", 45, "#c0c0c0", 30, "#e8e8e8", 65),
            FrameStyle("colorful", "カラフル", 50, "#ff6b6b", 40, "#4ecdc4", 70),
        )
    }
)


def _border(width: int, height: int, inset: float, band: float, hex_value: str) -> Path:
    # Stroke centered on the band's midline
    mid = inset + band / 2.0
    return polygon(
        [(mid, mid), (width - mid, mid), (width - mid, height - mid), (mid, height - mid)],
        stroke(hex_value, band),
    )


def render_frame(style: FrameStyle, width: int, height: int) -> np.ndarray:
    """Rasterize a frame style to a transparent BGRA image of the given size."""
    scale = min(width / REFERENCE_SIZE[0], height / REFERENCE_SIZE[1])
    surface = np.zeros((height, width, 4), dtype=np.uint8)
    paths = []
    if style.outer_width > 0:
        paths.append(_border(width, height, 0.0, style.outer_width * scale, style.outer_color))
    if style.inner_width > 0 and style.inner_offset:
        paths.append(
            _border(width, height, style.inner_offset * scale, style.inner_width * scale, style.inner_color)
        )
    render_paths(surface, paths)
    return surface


def list_frame_styles() -> List[FrameStyle]:
    return list(FRAME_STYLES.values())
