from __future__ import annotations

import base64
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple, Union

import cv2
import numpy as np

from .caption import DEFAULT_DATE_FORMAT, caption_lines, date_format_for_font, render_caption
from .config import Settings
from .drawing import alpha_composite
from .exceptions import AssetLoadError, CompositeError, PhotoBoothError, SourceNotReadyError
from .filters import NO_FILTER, FilterDefinition
from .frames import FrameStyle, render_frame
from .geometry import Viewport
from .models import MessageConfig

logger = logging.getLogger(__name__)

_MIME_TYPES = {"jpeg": "image/jpeg", "png": "image/png"}
_UNSAFE_FILENAME = re.compile(r'[\\/:*?"<>|\s]+')


@dataclass(frozen=True)
class CropRect:
    x: int
    y: int
    width: int
    height: int

    def viewport(self, source_width: int, source_height: int) -> Viewport:
        return Viewport(
            self.x / source_width,
            self.y / source_height,
            self.width / source_width,
            self.height / source_height,
        )


@dataclass(frozen=True)
class CapturePlan:
    crop: CropRect
    output_width: int
    output_height: int
    viewport: Viewport


def compute_cover_crop(source_width: int, source_height: int, aspect_ratio: float) -> CropRect:
    """Largest centered rectangle of the requested aspect that fits the source."""
    if source_width <= 0 or source_height <= 0:
        raise SourceNotReadyError()
    if aspect_ratio <= 0:
        raise ValueError(f"aspect ratio must be positive, got {aspect_ratio}")
    if source_width / source_height > aspect_ratio:
        width = min(source_width, max(1, int(round(source_height * aspect_ratio))))
        return CropRect((source_width - width) // 2, 0, width, source_height)
    height = min(source_height, max(1, int(round(source_width / aspect_ratio))))
    return CropRect(0, (source_height - height) // 2, source_width, height)


def compute_output_size(width: int, height: int, max_dimension: int) -> Tuple[int, int]:
    scale = min(1.0, max_dimension / max(width, height))
    return max(1, int(round(width * scale))), max(1, int(round(height * scale)))


def plan_capture(source_width: int, source_height: int, aspect_ratio: float, max_dimension: int) -> CapturePlan:
    crop = compute_cover_crop(source_width, source_height, aspect_ratio)
    out_w, out_h = compute_output_size(crop.width, crop.height, max_dimension)
    return CapturePlan(crop, out_w, out_h, crop.viewport(source_width, source_height))


def _to_bgra(image: np.ndarray) -> np.ndarray:
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGRA)
    if image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2BGRA)
    return image


def decode_asset(data: bytes, source: str = "upload") -> np.ndarray:
    if not data:
        raise AssetLoadError(source, "empty payload")
    array = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(array, cv2.IMREAD_UNCHANGED)
    if image is None:
        raise AssetLoadError(source, "unsupported image data")
    if image.dtype != np.uint8:
        image = cv2.convertScaleAbs(image, alpha=255.0 / max(float(image.max()), 1.0))
    return _to_bgra(image)


@dataclass
class FrameAsset:
    image: Optional[np.ndarray] = None
    loaded: bool = False
    source: str = "frame"

    @classmethod
    def from_image(cls, image: np.ndarray, source: str = "frame") -> "FrameAsset":
        return cls(_to_bgra(image), True, source)

    @classmethod
    def from_bytes(cls, data: bytes, source: str = "upload") -> "FrameAsset":
        try:
            return cls(decode_asset(data, source), True, source)
        except AssetLoadError as exc:
            logger.warning(f"{exc}; frame layer will be skipped")
            return cls(None, False, source)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "FrameAsset":
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as exc:
            logger.warning(f"Frame asset not readable: {path} ({exc})")
            return cls(None, False, str(path))
        return cls.from_bytes(data, str(path))

    @classmethod
    def from_style(cls, style: FrameStyle, width: int, height: int) -> "FrameAsset":
        return cls(render_frame(style, width, height), True, style.id)


def encode_image(image: np.ndarray, fmt: str = "jpeg", quality: int = 95) -> bytes:
    if fmt == "png":
        success, buffer = cv2.imencode(".png", image)
    else:
        success, buffer = cv2.imencode(".jpg", image, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
    if not success:
        raise ValueError("Failed to encode image")
    return buffer.tobytes()


def to_data_url(data: bytes, fmt: str = "jpeg") -> str:
    return f"data:{_MIME_TYPES[fmt]};base64," + base64.b64encode(data).decode("utf-8")


@dataclass(frozen=True)
class CompositeResult:
    image: np.ndarray
    caption_lines: Tuple[str, ...] = ()

    @property
    def width(self) -> int:
        return int(self.image.shape[1])

    @property
    def height(self) -> int:
        return int(self.image.shape[0])

    def encode(self, fmt: str = "jpeg", quality: int = 95) -> bytes:
        return encode_image(self.image, fmt, quality)

    def to_data_url(self, fmt: str = "jpeg", quality: int = 95) -> str:
        return to_data_url(self.encode(fmt, quality), fmt)


def build_export_filename(
    prefix: str = "ShinagawaPrince",
    label: str = "",
    now: Optional[datetime] = None,
    ext: str = "png",
) -> str:
    now = now or datetime.now()
    label = _UNSAFE_FILENAME.sub("_", label.strip()).strip("_") or "Photo"
    ext = "jpg" if ext == "jpeg" else ext
    return f"{prefix}_{label}_{now:%Y%m%d}_{now:%H%M%S}.{ext}"


class CaptureCompositor:
    """Builds the final still: camera, effect, decorations, frame, caption."""

    def __init__(
        self,
        aspect_ratio: float = 4 / 3,
        max_dimension: int = 1920,
        font_path: Optional[str] = None,
        date_format: str = DEFAULT_DATE_FORMAT,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.aspect_ratio = aspect_ratio
        self.max_dimension = max_dimension
        self.font_path = font_path
        self.date_format = date_format_for_font(date_format, font_path)
        self.rng = rng if rng is not None else np.random.default_rng()

    @classmethod
    def from_settings(cls, settings: Settings) -> "CaptureCompositor":
        return cls(
            aspect_ratio=settings.aspect_ratio,
            max_dimension=settings.max_output_dimension,
            font_path=settings.caption_font_path,
            date_format=settings.caption_date_format,
            rng=np.random.default_rng(settings.random_seed),
        )

    def plan(self, frame: Optional[np.ndarray]) -> CapturePlan:
        _check_frame(frame)
        height, width = frame.shape[:2]
        return plan_capture(width, height, self.aspect_ratio, self.max_dimension)

    def compose(
        self,
        frame: Optional[np.ndarray],
        user_facing: bool = False,
        filter_def: FilterDefinition = NO_FILTER,
        overlay: Optional[np.ndarray] = None,
        frame_asset: Optional[FrameAsset] = None,
        message: Optional[MessageConfig] = None,
    ) -> CompositeResult:
        plan = self.plan(frame)
        layer = "camera"
        try:
            crop = plan.crop
            image = frame[crop.y : crop.y + crop.height, crop.x : crop.x + crop.width]
            if image.ndim == 2:
                image = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
            elif image.shape[2] == 4:
                image = cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
            size = (plan.output_width, plan.output_height)
            if (image.shape[1], image.shape[0]) != size:
                image = cv2.resize(image, size, interpolation=cv2.INTER_AREA)
            else:
                image = image.copy()
            if user_facing:
                image = cv2.flip(image, 1)
            image = filter_def.apply_preview(image)

            layer = "effect"
            if filter_def.pixel_pass is not None:
                filter_def.pixel_pass(image, plan.output_width, plan.output_height, rng=self.rng)

            layer = "decoration"
            if overlay is not None and overlay.size:
                image = alpha_composite(image, overlay)

            layer = "frame"
            if frame_asset is not None:
                if frame_asset.loaded and frame_asset.image is not None:
                    image = alpha_composite(image, frame_asset.image)
                else:
                    logger.warning(f"Frame asset {frame_asset.source} not loaded, skipping frame layer")

            layer = "caption"
            lines = caption_lines(message, self.date_format) if message is not None else []
            image = render_caption(image, lines, self.font_path)
        except PhotoBoothError:
            raise
        except Exception as exc:
            logger.error(f"Composite failed at {layer} layer: {exc}", exc_info=True)
            raise CompositeError(layer=layer) from exc

        image = np.ascontiguousarray(image)
        image.setflags(write=False)
        return CompositeResult(image=image, caption_lines=tuple(lines))


def _check_frame(frame: Optional[np.ndarray]) -> None:
    if frame is None or not isinstance(frame, np.ndarray) or frame.size == 0 or frame.ndim not in (2, 3):
        raise SourceNotReadyError()
