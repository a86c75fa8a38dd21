from __future__ import annotations

import math
from typing import Optional, Protocol, Sequence, Tuple

import cv2
import numpy as np


class PixelPass(Protocol):
    """In-place pass over the interior of a BGR(A) surface.

    Every pass takes ``(surface, width, height)`` plus an ``rng`` keyword;
    the compositor always supplies it so randomized passes are reproducible
    under a seed. Deterministic passes accept and ignore it.
    """

    def __call__(
        self,
        surface: np.ndarray,
        width: int,
        height: int,
        *,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        ...

# (blur sigma, brightness gain, screen opacity), widest last
DEFAULT_GLOW_LAYERS: Tuple[Tuple[float, float, float], ...] = (
    (6.0, 1.3, 0.35),
    (12.0, 1.2, 0.22),
    (24.0, 1.1, 0.12),
)

_LUMA_BGR = np.array([0.114, 0.587, 0.299], dtype=np.float32)


def _rng(rng: Optional[np.random.Generator]) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def _interior(surface: np.ndarray, width: int, height: int) -> Optional[np.ndarray]:
    """Color channels without the outer 1-px ring, or None if nothing is inside it."""
    if surface.shape[0] != height or surface.shape[1] != width:
        raise ValueError(f"surface is {surface.shape[1]}x{surface.shape[0]}, expected {width}x{height}")
    if width < 3 or height < 3:
        return None
    return surface[1 : height - 1, 1 : width - 1, :3]


def _store(region: np.ndarray, values: np.ndarray) -> None:
    region[...] = np.clip(np.rint(values), 0, 255).astype(np.uint8)


def _luma(image: np.ndarray) -> np.ndarray:
    return image[..., :3].astype(np.float32) @ _LUMA_BGR


def apply_grain(
    surface: np.ndarray,
    width: int,
    height: int,
    intensity: float = 18.0,
    color: bool = False,
    rng: Optional[np.random.Generator] = None,
) -> None:
    region = _interior(surface, width, height)
    if region is None or intensity <= 0:
        return
    rng = _rng(rng)
    shape = region.shape[:2]
    noise = rng.uniform(-intensity, intensity, size=shape + (1,)).astype(np.float32)
    if color:
        # Shared luminance grain with a smaller per-channel component
        per_channel = rng.uniform(-intensity, intensity, size=shape + (3,)).astype(np.float32)
        noise = noise * 0.7 + per_channel * 0.3
    _store(region, region.astype(np.float32) + noise)


def apply_vignette(
    surface: np.ndarray,
    width: int,
    height: int,
    strength: float = 0.35,
    inner: float = 0.45,
    outer: float = 1.0,
    rng: Optional[np.random.Generator] = None,
) -> None:
    """Darken toward the corners.

    ``inner`` and ``outer`` are fractions of the center-to-corner distance;
    pixels inside ``inner`` are untouched, pixels past ``outer`` are scaled
    by ``1 - strength``.
    """
    if not 0.0 <= strength <= 1.0:
        raise ValueError(f"vignette strength must be in [0, 1], got {strength}")
    if outer <= inner:
        raise ValueError("vignette outer radius must exceed the inner radius")
    region = _interior(surface, width, height)
    if region is None or strength == 0:
        return
    cx, cy = (width - 1) / 2.0, (height - 1) / 2.0
    reach = math.hypot(cx, cy) or 1.0
    ys, xs = np.mgrid[1 : height - 1, 1 : width - 1].astype(np.float32)
    distance = np.hypot(xs - cx, ys - cy) / reach
    ramp = np.clip((distance - inner) / (outer - inner), 0.0, 1.0)
    factor = 1.0 - strength * ramp
    _store(region, region.astype(np.float32) * factor[..., None])


def apply_glow(
    surface: np.ndarray,
    width: int,
    height: int,
    layers: Sequence[Tuple[float, float, float]] = DEFAULT_GLOW_LAYERS,
    rng: Optional[np.random.Generator] = None,
) -> None:
    region = _interior(surface, width, height)
    if region is None:
        return
    source = np.ascontiguousarray(surface[..., :3]).astype(np.float32)
    result = source[1 : height - 1, 1 : width - 1].copy()
    for sigma, gain, opacity in layers:
        bloom = cv2.GaussianBlur(source, (0, 0), sigmaX=sigma)
        bloom = np.clip(bloom * gain, 0.0, 255.0)[1 : height - 1, 1 : width - 1]
        screened = 255.0 - (255.0 - result) * (255.0 - bloom) / 255.0
        result += (screened - result) * opacity
    _store(region, result)


def apply_watercolor(
    surface: np.ndarray,
    width: int,
    height: int,
    saturation: float = 1.35,
    grain: float = 6.0,
    rng: Optional[np.random.Generator] = None,
) -> None:
    region = _interior(surface, width, height)
    if region is None:
        return
    source = surface[..., :3].astype(np.int32)
    total = np.zeros(region.shape, dtype=np.int32)
    for dy in (0, 1, 2):
        for dx in (0, 1, 2):
            total += source[dy : dy + height - 2, dx : dx + width - 2]
    # Integer mean rounded half-up
    softened = ((total * 2 + 9) // 18).astype(np.float32)
    luma = (softened @ _LUMA_BGR)[..., None]
    _store(region, luma + (softened - luma) * saturation)
    apply_grain(surface, width, height, intensity=grain, rng=rng)


def apply_sketch(
    surface: np.ndarray,
    width: int,
    height: int,
    edge_gain: float = 1.5,
    rng: Optional[np.random.Generator] = None,
) -> None:
    region = _interior(surface, width, height)
    if region is None:
        return
    luma = _luma(surface)
    gx = cv2.Sobel(luma, cv2.CV_32F, 1, 0, ksize=3)[1 : height - 1, 1 : width - 1]
    gy = cv2.Sobel(luma, cv2.CV_32F, 0, 1, ksize=3)[1 : height - 1, 1 : width - 1]
    edge = np.minimum(255.0, np.sqrt(gx * gx + gy * gy))
    value = np.maximum(0.0, 255.0 - edge * edge_gain)
    _store(region, np.repeat(value[..., None], 3, axis=2))


def chain(*passes: PixelPass) -> PixelPass:
    """Run several passes in order, sharing one random generator."""

    def run(surface: np.ndarray, width: int, height: int, rng: Optional[np.random.Generator] = None) -> None:
        rng = _rng(rng)
        for pixel_pass in passes:
            pixel_pass(surface, width, height, rng=rng)

    return run
