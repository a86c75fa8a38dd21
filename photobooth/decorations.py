from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, List, Mapping, Tuple

import numpy as np

from .drawing import (
    Paint,
    Path,
    arc,
    circle,
    color,
    cubic_bezier,
    ellipse,
    fill,
    fill_stroke,
    heart,
    line,
    polygon,
    polyline,
    render_paths,
    rotate,
    round_rect,
    star,
    stroke,
    triangle,
)
from .exceptions import UnknownDecorationError
from .geometry import CanonicalFaceFrame

DrawFn = Callable[[CanonicalFaceFrame], List[Path]]


class DecorationCategory(str, Enum):
    NONE = "none"
    HEAD = "head"
    EYES = "eyes"
    NOSE = "nose"
    FACE = "face"
    ANIMAL = "animal"


@dataclass(frozen=True)
class DecorationDefinition:
    id: str
    name: str
    category: DecorationCategory
    draw: DrawFn

    @property
    def is_none(self) -> bool:
        return self.category is DecorationCategory.NONE


def _lw(f: CanonicalFaceFrame, fraction: float, minimum: float = 1.5) -> float:
    return max(minimum, f.bw * fraction)


def _sides() -> Tuple[int, int]:
    return (-1, 1)


def _eye_points(f: CanonicalFaceFrame) -> List[Tuple[float, float]]:
    """Both eyes laid out level around eye_mid; callers rotate by roll."""
    mx, my = f.eye_mid
    half = f.eye_span / 2.0
    return [(mx - half, my), (mx + half, my)]


def _cheeks(f: CanonicalFaceFrame) -> List[Tuple[float, float]]:
    mx, my = f.eye_mid
    span = f.eye_span
    return [(mx + side * span * 0.62, my + span * 0.62) for side in _sides()]


# -- head --------------------------------------------------------------------


def _draw_none(f: CanonicalFaceFrame) -> List[Path]:
    return []


def _draw_crown(f: CanonicalFaceFrame) -> List[Path]:
    cw = f.bw * 0.75
    ch = f.bh * 0.35
    cx = f.bx - cw / 2.0
    cy = f.face_top - ch
    body = polygon(
        [
            (cx, cy + ch),
            (cx, cy + ch * 0.3),
            (cx + cw * 0.25, cy + ch * 0.6),
            (cx + cw * 0.5, cy),
            (cx + cw * 0.75, cy + ch * 0.6),
            (cx + cw, cy + ch * 0.3),
            (cx + cw, cy + ch),
        ],
        fill_stroke("#FFD700", "#B8860B", _lw(f, 0.008)),
    )
    jewels = [
        circle(cx + cw * (0.2 + i * 0.3), cy + ch * 0.7, ch * 0.1, fill(hex_value))
        for i, hex_value in enumerate(("#FF4444", "#4444FF", "#44FF44"))
    ]
    return [body] + jewels


def _draw_tiara(f: CanonicalFaceFrame) -> List[Path]:
    tw = f.bw * 0.55
    th = f.bh * 0.16
    base = f.face_top + f.bh * 0.04
    left = f.bx - tw / 2.0
    points = [(left, base)]
    for i in range(5):
        peak = th * (1.0 if i == 2 else 0.7 if i in (1, 3) else 0.45)
        points.append((left + tw * (i + 0.5) / 5.0, base - peak))
        points.append((left + tw * (i + 1) / 5.0, base - th * 0.2))
    points[-1] = (left + tw, base)
    paths = [polygon(points, fill_stroke("#E8E8F0", "#9E9EAE", _lw(f, 0.005)))]
    paths.append(circle(f.bx, base - th * 0.55, th * 0.16, fill_stroke("#FF69B4", "#C2185B", _lw(f, 0.003, 1.0))))
    for side in _sides():
        paths.append(circle(f.bx + side * tw * 0.2, base - th * 0.3, th * 0.09, fill("#87CEFA")))
    return paths


def _draw_santa(f: CanonicalFaceFrame) -> List[Path]:
    sw = f.bw * 0.85
    sh = f.bh * 0.65
    sx = f.bx - sw / 2.0
    sy = f.face_top - sh * 0.55
    return [
        polygon([(sx, sy + sh * 0.5), (sx + sw * 0.5, sy), (sx + sw, sy + sh * 0.5)], fill("#CC0000")),
        round_rect(
            sx, sy + sh * 0.45, sw, sh * 0.18, sh * 0.06, fill_stroke("#FFFFFF", "#DDDDDD", _lw(f, 0.004, 1.0))
        ),
        circle(sx + sw * 0.5 + sh * 0.05, sy + sh * 0.06, sh * 0.12, fill("#FFFFFF")),
    ]


def _draw_party_hat(f: CanonicalFaceFrame) -> List[Path]:
    base = f.face_top + f.bh * 0.03
    width = f.bw * 0.42
    height = f.bh * 0.6
    tip = (f.bx, base - height)
    paths = [triangle(f.bx, base, width, height, fill_stroke("#4ECDC4", "#2A9D8F", _lw(f, 0.006)))]
    for i, hex_value in enumerate(("#FF6B6B", "#FFE66D", "#FF6B6B")):
        t = 0.3 + i * 0.22
        y = base - height * (1.0 - t)
        paths.append(circle(f.bx + (i - 1) * width * 0.18 * t, y, width * 0.06, fill(hex_value)))
    paths.append(circle(tip[0], tip[1], width * 0.12, fill("#FFE66D")))
    return paths


def _draw_witch_hat(f: CanonicalFaceFrame) -> List[Path]:
    top = f.face_top + f.bh * 0.02
    cone = polygon(
        [
            (f.bx - f.bw * 0.3, top),
            (f.bx + f.bw * 0.3, top),
            (f.bx + f.bw * 0.12, top - f.bh * 0.45),
            (f.bx + f.bw * 0.32, top - f.bh * 0.72),
            (f.bx - f.bw * 0.06, top - f.bh * 0.42),
        ],
        fill("#2B1B3F"),
    )
    band = polygon(
        [
            (f.bx - f.bw * 0.29, top - f.bh * 0.02),
            (f.bx + f.bw * 0.29, top - f.bh * 0.02),
            (f.bx + f.bw * 0.26, top - f.bh * 0.11),
            (f.bx - f.bw * 0.25, top - f.bh * 0.11),
        ],
        fill("#8E44AD"),
    )
    buckle_w = f.bw * 0.09
    buckle = round_rect(
        f.bx - buckle_w / 2.0,
        top - f.bh * 0.115,
        buckle_w,
        f.bh * 0.1,
        buckle_w * 0.1,
        stroke("#F1C40F", _lw(f, 0.012)),
    )
    brim = ellipse(f.bx, top, f.bw * 0.7, f.bh * 0.08, fill("#2B1B3F"))
    return [brim, cone, band, buckle]


def _draw_top_hat(f: CanonicalFaceFrame) -> List[Path]:
    top = f.face_top + f.bh * 0.02
    crown_w = f.bw * 0.66
    crown_h = f.bh * 0.55
    return [
        ellipse(f.bx, top, f.bw * 0.55, f.bh * 0.06, fill("#111111")),
        round_rect(f.bx - crown_w / 2.0, top - crown_h, crown_w, crown_h, crown_w * 0.04, fill("#1C1C1C")),
        round_rect(f.bx - crown_w / 2.0, top - f.bh * 0.14, crown_w, f.bh * 0.08, 0.0, fill("#B22222")),
    ]


def _bow(cx: float, cy: float, size: float, light: str, dark: str) -> List[Path]:
    return [
        ellipse(cx - size * 0.5, cy, size * 0.45, size * 0.28, fill(light), angle=-0.5),
        ellipse(cx + size * 0.5, cy, size * 0.45, size * 0.28, fill(light), angle=0.5),
        circle(cx, cy, size * 0.14, fill(dark)),
    ]


def _draw_headband(f: CanonicalFaceFrame) -> List[Path]:
    band_y = f.eye_mid[1] - f.bh * 0.42
    band = arc(
        f.bx,
        band_y + f.bh * 0.12,
        f.bw * 0.58,
        f.bh * 0.2,
        math.pi * 1.05,
        math.pi * 1.95,
        stroke("#FF69B4", max(1.5, f.bh * 0.06)),
    )
    return [band] + _bow(f.bx, band_y - f.bh * 0.03, f.bw * 0.22, "#FF69B4", "#FF1493")


def _draw_halo(f: CanonicalFaceFrame) -> List[Path]:
    cy = f.face_top - f.bh * 0.18
    rx, ry = f.bw * 0.38, f.bh * 0.08
    glow = Paint(stroke=color("#FFF59D", 0.5), width=max(2.0, f.bh * 0.09), feather=max(1.0, f.bh * 0.03))
    return [
        ellipse(f.bx, cy, rx, ry, glow),
        ellipse(f.bx, cy, rx, ry, stroke("#FFD54F", max(1.5, f.bh * 0.035))),
    ]


def _draw_flower_crown(f: CanonicalFaceFrame) -> List[Path]:
    cx, cy = f.bx, f.face_top + f.bh * 0.14
    rx, ry = f.bw * 0.52, f.bh * 0.24
    petal_r = f.bw * 0.035
    palette = ("#FF8FAB", "#FFFFFF", "#FFD166")
    paths: List[Path] = []
    count = 7
    for i in range(count):
        theta = math.pi * (1.1 + 0.8 * i / (count - 1))
        px, py = cx + rx * math.cos(theta), cy + ry * math.sin(theta)
        if i < count - 1:
            mid = math.pi * (1.1 + 0.8 * (i + 0.5) / (count - 1))
            paths.append(
                ellipse(
                    cx + rx * math.cos(mid),
                    cy + ry * math.sin(mid),
                    petal_r * 1.2,
                    petal_r * 0.5,
                    fill("#6BBF59"),
                    angle=mid + math.pi / 2,
                )
            )
        petal_paint = fill(palette[i % len(palette)])
        for k in range(5):
            a = k * 2 * math.pi / 5
            paths.append(circle(px + petal_r * 1.1 * math.cos(a), py + petal_r * 1.1 * math.sin(a), petal_r, petal_paint))
        paths.append(circle(px, py, petal_r * 0.7, fill("#F4A300")))
    return paths


def _draw_horns(f: CanonicalFaceFrame) -> List[Path]:
    hw = f.bw * 0.18
    hh = f.bh * 0.4
    base = f.face_top + f.bh * 0.05
    paint = fill_stroke("#CC0000", "#880000", _lw(f, 0.008))
    return [triangle(f.bx + side * f.bw * 0.22, base, hw, hh, paint) for side in _sides()]


# -- eyes --------------------------------------------------------------------


def _draw_glasses(f: CanonicalFaceFrame) -> List[Path]:
    gw = f.eye_span * 0.78
    (x1, gy), (x2, _) = _eye_points(f)
    frame_paint = stroke("#1A1A1A", _lw(f, 0.025))
    lens_paint = Paint(fill=color("#1E1EC8", 0.25), stroke=color("#1A1A1A"), width=_lw(f, 0.025))
    reach = f.bw * 0.5
    paths = [
        ellipse(x1, gy, gw * 0.5, gw * 0.38, lens_paint),
        ellipse(x2, gy, gw * 0.5, gw * 0.38, lens_paint),
        line((x1 + gw * 0.5, gy), (x2 - gw * 0.5, gy), frame_paint),
        line((x1 - gw * 0.5, gy), (f.eye_mid[0] - reach, gy + f.bw * 0.04), frame_paint),
        line((x2 + gw * 0.5, gy), (f.eye_mid[0] + reach, gy + f.bw * 0.04), frame_paint),
    ]
    return rotate(paths, f.eye_mid, f.roll)


def _draw_heart_glasses(f: CanonicalFaceFrame) -> List[Path]:
    size = f.eye_span * 0.72
    (x1, gy), (x2, _) = _eye_points(f)
    lens = Paint(fill=color("#FF3B6B", 0.8), stroke=color("#C2185B"), width=_lw(f, 0.012))
    paths = [
        heart(x1, gy, size, lens),
        heart(x2, gy, size, lens),
        arc(f.eye_mid[0], gy, f.eye_span * 0.16, f.eye_span * 0.08, math.pi, 2 * math.pi, stroke("#C2185B", _lw(f, 0.012))),
    ]
    return rotate(paths, f.eye_mid, f.roll)


def _draw_round_glasses(f: CanonicalFaceFrame) -> List[Path]:
    r = f.eye_span * 0.36
    (x1, gy), (x2, _) = _eye_points(f)
    rim = Paint(fill=color("#FFFFFF", 0.12), stroke=color("#5D4037"), width=max(1.5, f.eye_span * 0.05))
    bridge = stroke("#5D4037", max(1.5, f.eye_span * 0.04))
    paths = [
        circle(x1, gy, r, rim),
        circle(x2, gy, r, rim),
        arc(f.eye_mid[0], gy, f.eye_span / 2.0 - r, f.eye_span * 0.08, math.pi, 2 * math.pi, bridge),
    ]
    return rotate(paths, f.eye_mid, f.roll)


def _draw_star_glasses(f: CanonicalFaceFrame) -> List[Path]:
    outer = f.eye_span * 0.42
    (x1, gy), (x2, _) = _eye_points(f)
    lens = Paint(fill=color("#FFD700", 0.85), stroke=color("#FF8C00"), width=_lw(f, 0.01))
    paths = [
        star(x1, gy, outer, outer * 0.48, lens),
        star(x2, gy, outer, outer * 0.48, lens),
        line((x1 + outer * 0.45, gy), (x2 - outer * 0.45, gy), stroke("#FF8C00", _lw(f, 0.012))),
    ]
    return rotate(paths, f.eye_mid, f.roll)


def _draw_monocle(f: CanonicalFaceFrame) -> List[Path]:
    _, (ex, ey) = _eye_points(f)
    r = f.eye_span * 0.33
    chain_end = (ex + f.eye_span * 0.45, f.mouth[1] + f.bh * 0.18)
    chain = cubic_bezier(
        [(ex, ey + r), (ex + r * 0.2, ey + r * 2.5), (chain_end[0] + r, chain_end[1] - r), chain_end],
        steps=32,
    )
    paths = [
        circle(ex, ey, r, Paint(fill=color("#FFFFFF", 0.15), stroke=color("#D4AF37"), width=_lw(f, 0.012))),
        polyline(chain, stroke("#D4AF37", _lw(f, 0.005, 1.0))),
    ]
    return rotate(paths, f.eye_mid, f.roll)


def _draw_masquerade(f: CanonicalFaceFrame) -> List[Path]:
    span = f.eye_span
    (x1, gy), (x2, _) = _eye_points(f)
    ring = stroke("#6A1B9A", max(2.0, span * 0.16))
    trim = stroke("#D4AF37", max(1.0, span * 0.025))
    paths: List[Path] = []
    for side, ex in zip(_sides(), (x1, x2)):
        wing_x = ex + side * span * 0.38
        paths.append(
            polygon(
                [
                    (wing_x, gy - span * 0.18),
                    (wing_x + side * span * 0.32, gy - span * 0.34),
                    (wing_x + side * span * 0.1, gy + span * 0.12),
                ],
                fill("#6A1B9A"),
            )
        )
        paths.append(ellipse(ex, gy, span * 0.38, span * 0.26, ring))
        paths.append(ellipse(ex, gy, span * 0.46, span * 0.34, trim))
    paths.append(line((x1 + span * 0.38, gy), (x2 - span * 0.38, gy), ring))
    return rotate(paths, f.eye_mid, f.roll)


# -- nose --------------------------------------------------------------------


def _draw_pig_nose(f: CanonicalFaceFrame) -> List[Path]:
    nx, ny = f.nose
    r = f.bw * 0.18
    nh = r * 0.22
    return [
        ellipse(nx, ny + f.bh * 0.05, r, r * 0.75, fill("#FF96A0", 0.9)),
        ellipse(nx - r * 0.35, ny + f.bh * 0.04, nh, nh * 1.2, fill("#7B3F50"), angle=-0.2),
        ellipse(nx + r * 0.35, ny + f.bh * 0.04, nh, nh * 1.2, fill("#7B3F50"), angle=0.2),
    ]


def _draw_clown_nose(f: CanonicalFaceFrame) -> List[Path]:
    nx, ny = f.nose
    r = f.eye_span * 0.28
    return [
        circle(nx, ny, r, fill("#E53935")),
        circle(nx - r * 0.35, ny - r * 0.35, r * 0.22, fill("#FFFFFF", 0.7)),
    ]


def _draw_mustache(f: CanonicalFaceFrame) -> List[Path]:
    cx = (f.nose[0] + f.mouth[0]) / 2.0
    cy = f.nose[1] * 0.45 + f.mouth[1] * 0.55
    w = f.eye_span * 1.3
    h = w * 0.25
    paths = []
    for side in _sides():
        upper = cubic_bezier(
            [
                (cx, cy - h * 0.3),
                (cx + side * w * 0.25, cy - h * 0.9),
                (cx + side * w * 0.45, cy - h * 0.2),
                (cx + side * w * 0.5, cy - h * 0.6),
            ]
        )
        lower = cubic_bezier(
            [
                (cx + side * w * 0.5, cy - h * 0.6),
                (cx + side * w * 0.42, cy + h * 0.6),
                (cx + side * w * 0.15, cy + h * 0.5),
                (cx, cy + h * 0.1),
            ]
        )
        paths.append(polygon(upper + lower[1:], fill("#3E2723")))
    return rotate(paths, (cx, cy), f.roll)


# -- face --------------------------------------------------------------------


def _draw_blush(f: CanonicalFaceFrame) -> List[Path]:
    rx = f.eye_span * 0.32
    paint = Paint(fill=color("#FF6F91", 0.45), feather=max(1.0, f.eye_span * 0.08))
    return [ellipse(x, y, rx, rx * 0.6, paint) for x, y in _cheeks(f)]


# Freckle offsets as fractions of eye separation, outer cheek on +x
_FRECKLES = (
    (-0.12, -0.08),
    (0.02, -0.12),
    (0.15, -0.05),
    (-0.05, 0.02),
    (0.09, 0.05),
    (0.22, 0.02),
    (-0.14, 0.1),
    (0.03, 0.13),
    (0.17, 0.14),
)


def _draw_freckles(f: CanonicalFaceFrame) -> List[Path]:
    span = f.eye_span
    paint = fill("#8D5524", 0.55)
    paths = []
    for side, (x, y) in zip(_sides(), _cheeks(f)):
        for dx, dy in _FRECKLES:
            paths.append(circle(x + side * dx * span, y + dy * span, max(1.0, span * 0.025), paint))
    return rotate(paths, f.eye_mid, f.roll)


def _draw_heart_cheeks(f: CanonicalFaceFrame) -> List[Path]:
    size = f.eye_span * 0.3
    paint = Paint(fill=color("#FF4081", 0.9), stroke=color("#FFFFFF", 0.8), width=max(1.0, size * 0.06))
    return rotate([heart(x, y, size, paint) for x, y in _cheeks(f)], f.eye_mid, f.roll)


def _draw_star_cheeks(f: CanonicalFaceFrame) -> List[Path]:
    outer = f.eye_span * 0.16
    paths = []
    for side, (x, y) in zip(_sides(), _cheeks(f)):
        paths.append(star(x, y, outer, outer * 0.45, fill_stroke("#FFD700", "#FFA000", max(1.0, outer * 0.08))))
        paths.append(star(x + side * outer * 1.4, y - outer * 1.2, outer * 0.45, outer * 0.15, fill("#FFFFFF", 0.9), spikes=4))
    return rotate(paths, f.eye_mid, f.roll)


# -- animal ------------------------------------------------------------------


def _draw_cat_ears(f: CanonicalFaceFrame) -> List[Path]:
    ew = f.bw * 0.55 * 0.45
    eh = f.bh * 0.45
    base = f.face_top + f.bh * 0.05
    paths = []
    for side in _sides():
        cx = f.bx + side * f.bw * 0.28
        paths.append(triangle(cx, base, ew, eh, fill_stroke("#F4A0B0", "#E75480", _lw(f, 0.008))))
        paths.append(triangle(cx, base - eh * 0.08, ew * 0.5, eh * 0.6, fill("#FFD1DC")))
    return paths


def _draw_rabbit_ears(f: CanonicalFaceFrame) -> List[Path]:
    rw = f.bw * 0.16
    rh = f.bh * 0.9
    top = f.face_top + f.bh * 0.05
    paths = []
    for side in _sides():
        cx = f.bx + side * f.bw * 0.28
        paths.append(round_rect(cx - rw / 2.0, top - rh, rw, rh, rw * 0.5, fill_stroke("#FFFFFF", "#DDDDDD", _lw(f, 0.005))))
        paths.append(round_rect(cx - rw * 0.28, top - rh + rh * 0.1, rw * 0.55, rh * 0.75, rw * 0.3, fill("#FFB6C1")))
    return paths


def _draw_dog(f: CanonicalFaceFrame) -> List[Path]:
    span = f.eye_span
    nx, ny = f.nose
    mx, my = f.mouth
    paths = []
    for side in _sides():
        edge = f.face_right if side > 0 else f.face_left
        paths.append(
            ellipse(edge - side * f.bw * 0.02, f.face_top + f.bh * 0.24, f.bw * 0.14, f.bh * 0.3, fill("#8D6E63"), angle=side * 0.35)
        )
    tongue_y = my + f.bh * 0.08
    paths.append(ellipse(mx, tongue_y, span * 0.18, span * 0.28, fill("#FF7A9A")))
    paths.append(line((mx, tongue_y - span * 0.2), (mx, tongue_y + span * 0.1), stroke("#E05577", max(1.0, span * 0.03))))
    paths.append(ellipse(nx, ny, span * 0.22, span * 0.15, fill("#1B1B1B")))
    paths.append(ellipse(nx - span * 0.07, ny - span * 0.05, span * 0.06, span * 0.035, fill("#FFFFFF", 0.6)))
    return paths


def _draw_bear_ears(f: CanonicalFaceFrame) -> List[Path]:
    r = f.bw * 0.14
    paths = []
    for side in _sides():
        cx, cy = f.bx + side * f.bw * 0.36, f.face_top + f.bh * 0.04
        paths.append(circle(cx, cy, r, fill("#6D4C41")))
        paths.append(circle(cx, cy, r * 0.55, fill("#D7A98C")))
    return paths


def _draw_mouse_ears(f: CanonicalFaceFrame) -> List[Path]:
    r = f.bw * 0.2
    paths = []
    for side in _sides():
        cx, cy = f.bx + side * f.bw * 0.42, f.face_top - f.bh * 0.05
        paths.append(circle(cx, cy, r, fill("#9E9E9E")))
        paths.append(circle(cx, cy, r * 0.65, fill("#F8BBD0")))
    return paths


def _draw_antlers(f: CanonicalFaceFrame) -> List[Path]:
    paint = stroke("#8D6E63", _lw(f, 0.04))
    tine_paint = stroke("#8D6E63", _lw(f, 0.03))
    paths = []
    for side in _sides():
        root = (f.bx + side * f.bw * 0.22, f.face_top + f.bh * 0.03)
        tip = (f.bx + side * f.bw * 0.45, f.face_top - f.bh * 0.55)
        beam = cubic_bezier(
            [
                root,
                (root[0] + side * f.bw * 0.02, root[1] - f.bh * 0.25),
                (tip[0] - side * f.bw * 0.12, tip[1] + f.bh * 0.2),
                tip,
            ],
            steps=32,
        )
        paths.append(polyline(beam, paint))
        for t, length, lean in ((0.45, 0.22, -0.2), (0.7, 0.18, 0.3)):
            bx, by = beam[int(t * (len(beam) - 1))]
            paths.append(line((bx, by), (bx + side * f.bw * lean * length, by - f.bh * length), tine_paint))
    return paths


_DEFINITIONS = (
    DecorationDefinition("none", "なし", DecorationCategory.NONE, _draw_none),
    DecorationDefinition("crown", "クラウン", DecorationCategory.HEAD, _draw_crown),
    DecorationDefinition("tiara", "ティアラ", DecorationCategory.HEAD, _draw_tiara),
    DecorationDefinition("santa", "サンタ帽", DecorationCategory.HEAD, _draw_santa),
    DecorationDefinition("party_hat", "パーティー帽", DecorationCategory.HEAD, _draw_party_hat),
    DecorationDefinition("witch_hat", "魔女の帽子", DecorationCategory.HEAD, _draw_witch_hat),
    DecorationDefinition("top_hat", "シルクハット", DecorationCategory.HEAD, _draw_top_hat),
    DecorationDefinition("headband", "カチューシャ", DecorationCategory.HEAD, _draw_headband),
    DecorationDefinition("halo", "天使の輪", DecorationCategory.HEAD, _draw_halo),
    DecorationDefinition("flower_crown", "花かんむり", DecorationCategory.HEAD, _draw_flower_crown),
    DecorationDefinition("horns", "悪魔の角", DecorationCategory.HEAD, _draw_horns),
    DecorationDefinition("glasses", "サングラス", DecorationCategory.EYES, _draw_glasses),
    DecorationDefinition("heart_glasses", "ハートメガネ", DecorationCategory.EYES, _draw_heart_glasses),
    DecorationDefinition("round_glasses", "丸メガネ", DecorationCategory.EYES, _draw_round_glasses),
    DecorationDefinition("star_glasses", "スターメガネ", DecorationCategory.EYES, _draw_star_glasses),
    DecorationDefinition("monocle", "モノクル", DecorationCategory.EYES, _draw_monocle),
    DecorationDefinition("masquerade", "仮面", DecorationCategory.EYES, _draw_masquerade),
    DecorationDefinition("pig_nose", "豚鼻", DecorationCategory.NOSE, _draw_pig_nose),
    DecorationDefinition("clown_nose", "ピエロの鼻", DecorationCategory.NOSE, _draw_clown_nose),
    DecorationDefinition("mustache", "ひげ", DecorationCategory.NOSE, _draw_mustache),
    DecorationDefinition("blush", "チーク", DecorationCategory.FACE, _draw_blush),
    DecorationDefinition("freckles", "そばかす", DecorationCategory.FACE, _draw_freckles),
    DecorationDefinition("heart_cheeks", "ハートシール", DecorationCategory.FACE, _draw_heart_cheeks),
    DecorationDefinition("star_cheeks", "スターシール", DecorationCategory.FACE, _draw_star_cheeks),
    DecorationDefinition("cat_ears", "猫耳", DecorationCategory.ANIMAL, _draw_cat_ears),
    DecorationDefinition("rabbit_ears", "ウサギ耳", DecorationCategory.ANIMAL, _draw_rabbit_ears),
    DecorationDefinition("dog", "いぬ", DecorationCategory.ANIMAL, _draw_dog),
    DecorationDefinition("bear_ears", "クマ耳", DecorationCategory.ANIMAL, _draw_bear_ears),
    DecorationDefinition("mouse_ears", "ネズミ耳", DecorationCategory.ANIMAL, _draw_mouse_ears),
    DecorationDefinition("antlers", "トナカイの角", DecorationCategory.ANIMAL, _draw_antlers),
)

DECORATIONS: Mapping[str, DecorationDefinition] = MappingProxyType({d.id: d for d in _DEFINITIONS})
NO_DECORATION = DECORATIONS["none"]


def get_decoration(decoration_id: str) -> DecorationDefinition:
    try:
        return DECORATIONS[decoration_id]
    except KeyError:
        raise UnknownDecorationError(decoration_id) from None


def list_decorations() -> List[DecorationDefinition]:
    return list(DECORATIONS.values())


def render_decoration(surface: np.ndarray, decoration: DecorationDefinition, frame: CanonicalFaceFrame) -> None:
    render_paths(surface, decoration.draw(frame))
