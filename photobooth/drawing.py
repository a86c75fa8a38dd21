from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Sequence, Tuple

import cv2
import numpy as np

from .geometry import Point

Color = Tuple[int, int, int, int]  # B, G, R, A

_SHIFT = 4
_SUBPIXEL = 1 << _SHIFT


def color(value: str, alpha: float = 1.0) -> Color:
    """'#RRGGBB' (or '#RGB') to a BGRA tuple."""
    value = value.lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    r, g, b = (int(value[i : i + 2], 16) for i in (0, 2, 4))
    return (b, g, r, int(round(np.clip(alpha, 0.0, 1.0) * 255)))


@dataclass(frozen=True)
class Paint:
    fill: Optional[Color] = None
    stroke: Optional[Color] = None
    width: float = 0.0
    feather: float = 0.0


@dataclass(frozen=True)
class Path:
    points: Tuple[Point, ...]
    paint: Paint
    closed: bool = True

    def bounds(self) -> Tuple[float, float, float, float]:
        xs = [p[0] for p in self.points]
        ys = [p[1] for p in self.points]
        return min(xs), min(ys), max(xs), max(ys)


def fill(value: str, alpha: float = 1.0, feather: float = 0.0) -> Paint:
    return Paint(fill=color(value, alpha), feather=feather)


def stroke(value: str, width: float, alpha: float = 1.0) -> Paint:
    return Paint(stroke=color(value, alpha), width=width)


def fill_stroke(fill_value: str, stroke_value: str, width: float, alpha: float = 1.0) -> Paint:
    return Paint(fill=color(fill_value, alpha), stroke=color(stroke_value), width=width)


def _steps_for(rx: float, ry: float, sweep: float) -> int:
    return int(np.clip((abs(rx) + abs(ry)) * abs(sweep) / 8.0, 12, 180))


def _ellipse_points(
    cx: float,
    cy: float,
    rx: float,
    ry: float,
    angle: float = 0.0,
    start: float = 0.0,
    end: float = 2 * math.pi,
    closed: bool = True,
) -> Tuple[Point, ...]:
    steps = _steps_for(rx, ry, end - start)
    ts = np.linspace(start, end, steps, endpoint=not closed, dtype=np.float64)
    ex = rx * np.cos(ts)
    ey = ry * np.sin(ts)
    cos_a, sin_a = math.cos(angle), math.sin(angle)
    xs = cx + ex * cos_a - ey * sin_a
    ys = cy + ex * sin_a + ey * cos_a
    return tuple(zip(xs.tolist(), ys.tolist()))


def ellipse(cx: float, cy: float, rx: float, ry: float, paint: Paint, angle: float = 0.0) -> Path:
    return Path(_ellipse_points(cx, cy, rx, ry, angle), paint)


def circle(cx: float, cy: float, r: float, paint: Paint) -> Path:
    return ellipse(cx, cy, r, r, paint)


def arc(
    cx: float,
    cy: float,
    rx: float,
    ry: float,
    start: float,
    end: float,
    paint: Paint,
    angle: float = 0.0,
) -> Path:
    return Path(_ellipse_points(cx, cy, rx, ry, angle, start, end, closed=False), paint, closed=False)


def polygon(points: Sequence[Point], paint: Paint) -> Path:
    return Path(tuple((float(x), float(y)) for x, y in points), paint)


def polyline(points: Sequence[Point], paint: Paint) -> Path:
    return Path(tuple((float(x), float(y)) for x, y in points), paint, closed=False)


def line(start: Point, end: Point, paint: Paint) -> Path:
    return polyline([start, end], paint)


def cubic_bezier(points: Sequence[Point], steps: int = 40) -> List[Point]:
    if len(points) < 4:
        return [tuple(p) for p in points]
    p0, p1, p2, p3 = [np.array(p, dtype=np.float64) for p in points[:4]]
    ts = np.linspace(0.0, 1.0, steps)
    one_minus = 1.0 - ts
    curve = (
        (one_minus**3)[:, None] * p0
        + 3.0 * (one_minus**2 * ts)[:, None] * p1
        + 3.0 * (one_minus * (ts**2))[:, None] * p2
        + (ts**3)[:, None] * p3
    )
    return [(float(x), float(y)) for x, y in curve]


def round_rect(x: float, y: float, w: float, h: float, r: float, paint: Paint) -> Path:
    r = max(0.0, min(r, w / 2.0, h / 2.0))
    half_pi = math.pi / 2
    corners = [
        (x + w - r, y + r, -half_pi, 0.0),
        (x + w - r, y + h - r, 0.0, half_pi),
        (x + r, y + h - r, half_pi, math.pi),
        (x + r, y + r, math.pi, 3 * half_pi),
    ]
    points: List[Point] = []
    for cx, cy, start, end in corners:
        points.extend(_ellipse_points(cx, cy, r, r, 0.0, start, end, closed=False))
    return Path(tuple(points), paint)


def triangle(cx: float, base_y: float, w: float, h: float, paint: Paint) -> Path:
    """Upward triangle whose base sits on base_y."""
    return polygon([(cx, base_y - h), (cx - w / 2.0, base_y), (cx + w / 2.0, base_y)], paint)


def star(
    cx: float,
    cy: float,
    outer: float,
    inner: float,
    paint: Paint,
    spikes: int = 5,
    rotation: float = -math.pi / 2,
) -> Path:
    points: List[Point] = []
    for i in range(spikes * 2):
        radius = outer if i % 2 == 0 else inner
        theta = rotation + i * math.pi / spikes
        points.append((cx + radius * math.cos(theta), cy + radius * math.sin(theta)))
    return Path(tuple(points), paint)


def heart(cx: float, cy: float, size: float, paint: Paint) -> Path:
    ts = np.linspace(0.0, 2 * math.pi, 64, endpoint=False)
    hx = 16 * np.sin(ts) ** 3
    hy = 13 * np.cos(ts) - 5 * np.cos(2 * ts) - 2 * np.cos(3 * ts) - np.cos(4 * ts)
    scale = size / 32.0
    return Path(tuple(zip((cx + hx * scale).tolist(), (cy - hy * scale).tolist())), paint)


def rotate(paths: Iterable[Path], center: Point, angle: float) -> List[Path]:
    if abs(angle) < 1e-6:
        return list(paths)
    cx, cy = center
    cos_a, sin_a = math.cos(angle), math.sin(angle)
    rotated = []
    for path in paths:
        pts = tuple(
            (cx + (x - cx) * cos_a - (y - cy) * sin_a, cy + (x - cx) * sin_a + (y - cy) * cos_a)
            for x, y in path.points
        )
        rotated.append(replace(path, points=pts))
    return rotated


def _path_bounds(path: Path, pad: float, shape: Tuple[int, int]) -> Optional[Tuple[int, int, int, int]]:
    h, w = shape
    x0, y0, x1, y1 = path.bounds()
    x0 = max(int(math.floor(x0 - pad)), 0)
    y0 = max(int(math.floor(y0 - pad)), 0)
    x1 = min(int(math.ceil(x1 + pad)) + 1, w)
    y1 = min(int(math.ceil(y1 + pad)) + 1, h)
    if x1 <= x0 or y1 <= y0:
        return None
    return x0, y0, x1, y1


def _blend_over(roi: np.ndarray, paint_color: Color, mask: np.ndarray) -> None:
    src_a = mask.astype(np.float32) / 255.0 * (paint_color[3] / 255.0)
    if not np.any(src_a):
        return
    dst = roi.astype(np.float32)
    dst_a = dst[..., 3] / 255.0
    keep = dst_a * (1.0 - src_a)
    out_a = src_a + keep
    src_rgb = np.array(paint_color[:3], dtype=np.float32)
    out_rgb = src_rgb * src_a[..., None] + dst[..., :3] * keep[..., None]
    out_rgb /= np.maximum(out_a, 1e-6)[..., None]
    roi[..., :3] = np.clip(out_rgb + 0.5, 0, 255).astype(np.uint8)
    roi[..., 3] = np.clip(out_a * 255.0 + 0.5, 0, 255).astype(np.uint8)


def _feather(mask: np.ndarray, sigma: float) -> np.ndarray:
    if sigma <= 0 or not np.any(mask):
        return mask
    return cv2.GaussianBlur(mask, (0, 0), sigmaX=sigma)


def render_path(surface: np.ndarray, path: Path) -> None:
    if len(path.points) < 2:
        return
    paint = path.paint
    pad = paint.width + paint.feather * 3.0 + 2.0
    bounds = _path_bounds(path, pad, surface.shape[:2])
    if bounds is None:
        return
    x0, y0, x1, y1 = bounds
    roi = surface[y0:y1, x0:x1]
    offset = np.array([x0, y0], dtype=np.float64)
    pts = np.round((np.asarray(path.points, dtype=np.float64) - offset) * _SUBPIXEL)
    pts = pts.astype(np.int32).reshape(-1, 1, 2)

    if paint.fill is not None and path.closed and len(path.points) >= 3:
        mask = np.zeros(roi.shape[:2], dtype=np.uint8)
        cv2.fillPoly(mask, [pts], 255, lineType=cv2.LINE_AA, shift=_SHIFT)
        _blend_over(roi, paint.fill, _feather(mask, paint.feather))

    if paint.stroke is not None and paint.width > 0:
        mask = np.zeros(roi.shape[:2], dtype=np.uint8)
        cv2.polylines(
            mask,
            [pts],
            path.closed,
            255,
            thickness=max(1, int(round(paint.width))),
            lineType=cv2.LINE_AA,
            shift=_SHIFT,
        )
        _blend_over(roi, paint.stroke, _feather(mask, paint.feather))


def render_paths(surface: np.ndarray, paths: Iterable[Path]) -> None:
    if surface.ndim != 3 or surface.shape[2] != 4:
        raise ValueError("render target must be a BGRA surface")
    for path in paths:
        render_path(surface, path)


def alpha_composite(base: np.ndarray, layer: np.ndarray) -> np.ndarray:
    """Source-over of a BGRA layer onto an opaque BGR base, resizing the layer to fit."""
    h, w = base.shape[:2]
    alpha = layer[..., 3].astype(np.float32) / 255.0
    premultiplied = layer[..., :3].astype(np.float32) * alpha[..., None]
    if layer.shape[:2] != (h, w):
        premultiplied = cv2.resize(premultiplied, (w, h), interpolation=cv2.INTER_LINEAR)
        alpha = cv2.resize(alpha, (w, h), interpolation=cv2.INTER_LINEAR)
    if not np.any(alpha > 0):
        return base
    out = premultiplied + base.astype(np.float32) * (1.0 - alpha[..., None])
    return cv2.convertScaleAbs(out)
