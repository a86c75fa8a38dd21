from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .compositor import CaptureCompositor, CompositeResult, FrameAsset
from .config import Settings, get_settings
from .decorations import DecorationDefinition
from .detector import FaceDetector
from .exceptions import AssetLoadError, SourceNotReadyError
from .filters import NO_FILTER, FilterDefinition, get_filter
from .frames import FRAME_STYLES, FrameStyle
from .geometry import LandmarkGeometryResolver
from .models import MessageConfig
from .smoothing import SmoothingStore
from .tracking import FaceTracker, FrameSource, OverlaySurface, StillFrameSource

logger = logging.getLogger(__name__)


class PhotoBooth:
    """One capture session: current selections plus the tracker and compositor they drive."""

    def __init__(
        self,
        detector: FaceDetector,
        source: Optional[FrameSource] = None,
        settings: Optional[Settings] = None,
        compositor: Optional[CaptureCompositor] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.source = source if source is not None else StillFrameSource()
        self.overlay = OverlaySurface()
        self.tracker = FaceTracker(
            detector,
            self.source,
            overlay=self.overlay,
            resolver=LandmarkGeometryResolver(SmoothingStore(self.settings.smoothing_alpha)),
            interval=self.settings.tracking_interval,
            aspect_ratio=self.settings.aspect_ratio,
            max_dimension=self.settings.max_output_dimension,
        )
        self.compositor = compositor or CaptureCompositor.from_settings(self.settings)
        self.filter: FilterDefinition = NO_FILTER
        self.frame_asset: Optional[FrameAsset] = None
        self.frame_style: Optional[FrameStyle] = None
        self.message = MessageConfig()

    @property
    def decoration(self) -> DecorationDefinition:
        return self.tracker.decoration

    def select_decoration(self, decoration_id: str) -> DecorationDefinition:
        """Switch decoration; tracking runs only while one is active (needs a running loop)."""
        previous = self.tracker.decoration
        definition = self.tracker.select(decoration_id)
        if definition.is_none:
            self.tracker.stop()
            return definition
        try:
            self.tracker.start()
        except RuntimeError:
            self.tracker.decoration = previous
            raise
        return definition

    def select_filter(self, filter_id: str) -> FilterDefinition:
        self.filter = get_filter(filter_id)
        return self.filter

    def select_frame(self, style_id: Optional[str]) -> Optional[FrameStyle]:
        if style_id is None:
            self.frame_style = None
            return None
        style = FRAME_STYLES.get(style_id)
        if style is None:
            raise AssetLoadError(style_id, "unknown frame style")
        self.frame_style = style
        self.frame_asset = None
        return style

    def set_frame_asset(self, asset: Optional[FrameAsset]) -> None:
        self.frame_asset = asset
        if asset is not None:
            self.frame_style = None

    def preview(self, frame: Optional[np.ndarray] = None) -> np.ndarray:
        """Live-view transform only: mirror for the user-facing camera and tone."""
        frame = frame if frame is not None else self.source.read()
        if frame is None or frame.size == 0:
            raise SourceNotReadyError()
        if self.source.user_facing:
            frame = frame[:, ::-1]
        return self.filter.apply_preview(np.ascontiguousarray(frame))

    def _resolve_frame_asset(self, frame: np.ndarray) -> Optional[FrameAsset]:
        if self.frame_asset is not None:
            return self.frame_asset
        if self.frame_style is None:
            return None
        plan = self.compositor.plan(frame)
        return FrameAsset.from_style(self.frame_style, plan.output_width, plan.output_height)

    def capture(self) -> CompositeResult:
        frame = self.source.read()
        if frame is None or frame.size == 0:
            raise SourceNotReadyError()
        overlay = None if self.overlay.is_empty() else self.overlay.snapshot()
        result = self.compositor.compose(
            frame,
            user_facing=self.source.user_facing,
            filter_def=self.filter,
            overlay=overlay,
            frame_asset=self._resolve_frame_asset(frame),
            message=self.message,
        )
        logger.info(
            f"Captured {result.width}x{result.height} (filter={self.filter.id}, decoration={self.decoration.id})"
        )
        return result

    async def capture_still(self) -> CompositeResult:
        """Run one tracking cycle on the current frame, then capture."""
        if not self.decoration.is_none:
            await self.tracker.run_cycle()
        return self.capture()

    def close(self) -> None:
        self.tracker.stop()
