from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Optional, Protocol

import numpy as np

from .compositor import plan_capture
from .decorations import NO_DECORATION, DecorationDefinition, get_decoration, render_decoration
from .detector import FaceDetector
from .geometry import FULL_VIEWPORT, FaceDetectionResult, LandmarkGeometryResolver, Viewport

logger = logging.getLogger(__name__)


class TrackingState(str, Enum):
    IDLE = "idle"
    TRACKING = "tracking"


class OverlaySurface:
    """Transparent BGRA layer the tracker draws decorations on."""

    def __init__(self, width: int = 0, height: int = 0) -> None:
        self.pixels = np.zeros((height, width, 4), dtype=np.uint8)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def ensure_size(self, width: int, height: int) -> bool:
        if (self.width, self.height) == (width, height):
            return False
        self.pixels = np.zeros((height, width, 4), dtype=np.uint8)
        return True

    def clear(self) -> None:
        self.pixels[...] = 0

    def is_empty(self) -> bool:
        return not np.any(self.pixels[..., 3])

    def snapshot(self) -> np.ndarray:
        return self.pixels.copy()


class FrameSource(Protocol):
    user_facing: bool

    def read(self) -> Optional[np.ndarray]:
        ...


class StillFrameSource:
    """Frame source backed by a single, replaceable image."""

    def __init__(self, frame: Optional[np.ndarray] = None, user_facing: bool = True) -> None:
        self.frame = frame
        self.user_facing = user_facing

    def read(self) -> Optional[np.ndarray]:
        return self.frame


class FaceTracker:
    def __init__(
        self,
        detector: FaceDetector,
        source: FrameSource,
        overlay: Optional[OverlaySurface] = None,
        resolver: Optional[LandmarkGeometryResolver] = None,
        interval: float = 1 / 60,
        aspect_ratio: float = 4 / 3,
        max_dimension: int = 1920,
    ) -> None:
        self.detector = detector
        self.source = source
        self.overlay = overlay if overlay is not None else OverlaySurface()
        self.resolver = resolver if resolver is not None else LandmarkGeometryResolver()
        self.interval = interval
        self.aspect_ratio = aspect_ratio
        self.max_dimension = max_dimension
        self.decoration: DecorationDefinition = NO_DECORATION
        self.state = TrackingState.IDLE
        self.skipped_cycles = 0
        self.face_count = 0
        self._viewport: Viewport = FULL_VIEWPORT
        self._task: Optional[asyncio.Task] = None
        self._inflight: Optional[asyncio.Task] = None
        self._generation = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def inference_pending(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def select(self, decoration_id: str) -> DecorationDefinition:
        self.decoration = get_decoration(decoration_id)
        return self.decoration

    def start(self) -> None:
        if self.is_running:
            return
        # Raises RuntimeError outside a running loop, before any state changes
        self._task = asyncio.get_running_loop().create_task(self._run())
        self.state = TrackingState.TRACKING
        logger.info(f"Face tracking started ({self.decoration.id})")

    def stop(self) -> None:
        """Cancel the loop and any pending inference; safe to call repeatedly."""
        self._generation += 1
        if self._task is not None:
            self._task.cancel()
            self._task = None
        if self._inflight is not None:
            self._inflight.cancel()
            self._inflight = None
        self.overlay.clear()
        self.resolver.reset()
        self.face_count = 0
        if self.state is TrackingState.TRACKING:
            logger.info("Face tracking stopped")
        self.state = TrackingState.IDLE

    async def _run(self) -> None:
        while True:
            self.tick()
            await asyncio.sleep(self.interval)

    def tick(self) -> Optional[asyncio.Task]:
        if self.inference_pending:
            self.skipped_cycles += 1
            return None
        frame = self.source.read()
        if frame is None or frame.size == 0:
            return None
        self._sync_overlay(frame)
        self._inflight = asyncio.get_running_loop().create_task(self._infer(frame, self._generation))
        return self._inflight

    async def run_cycle(self) -> bool:
        """Run one full detection cycle, waiting for any pending one first."""
        if self.inference_pending:
            await asyncio.wait({self._inflight})
        task = self.tick()
        if task is None:
            return False
        await asyncio.wait({task})
        return not task.cancelled()

    def _sync_overlay(self, frame: np.ndarray) -> None:
        height, width = frame.shape[:2]
        plan = plan_capture(width, height, self.aspect_ratio, self.max_dimension)
        self.overlay.ensure_size(plan.output_width, plan.output_height)
        self._viewport = plan.viewport

    async def _infer(self, frame: np.ndarray, generation: int) -> None:
        try:
            result = await self.detector.detect(frame)
        except Exception as exc:
            logger.debug(f"Detection cycle failed: {exc}")
            return
        if generation != self._generation:
            return
        try:
            self.apply_result(result)
        except Exception as exc:
            logger.warning(f"Decoration {self.decoration.id} failed to render: {exc}", exc_info=True)
            self.overlay.clear()

    def apply_result(self, result: FaceDetectionResult) -> None:
        self.face_count = len(result)
        if not result:
            self.overlay.clear()
            self.resolver.reset()
            return
        self.overlay.clear()
        if self.decoration.is_none:
            return
        frames = self.resolver.resolve(
            result,
            self.overlay.width,
            self.overlay.height,
            mirrored=self.source.user_facing,
            viewport=self._viewport,
        )
        for face in frames:
            render_decoration(self.overlay.pixels, self.decoration, face)
