from __future__ import annotations

import asyncio
import logging
import threading
from typing import Callable, Optional, Protocol

import cv2
import numpy as np

from .config import Settings
from .exceptions import DetectionError
from .geometry import FaceDetection, FaceDetectionResult, NormalizedBox

logger = logging.getLogger(__name__)


class FaceDetector(Protocol):
    async def detect(self, frame: np.ndarray) -> FaceDetectionResult:
        ...


class MediaPipeFaceDetector:
    """MediaPipe short-range face detection wrapper with thread safety."""

    def __init__(self, model_selection: int = 0, min_detection_confidence: float = 0.6) -> None:
        import mediapipe as mp

        self._lock = threading.Lock()
        self._detector = mp.solutions.face_detection.FaceDetection(
            model_selection=model_selection,
            min_detection_confidence=min_detection_confidence,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "MediaPipeFaceDetector":
        return cls(settings.detector_model_selection, settings.min_detection_confidence)

    def detect_sync(self, frame: np.ndarray) -> FaceDetectionResult:
        if frame.ndim == 2:
            rgb = cv2.cvtColor(frame, cv2.COLOR_GRAY2RGB)
        elif frame.shape[2] == 4:
            rgb = cv2.cvtColor(frame, cv2.COLOR_BGRA2RGB)
        else:
            rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        try:
            with self._lock:
                results = self._detector.process(rgb)
        except Exception as exc:
            raise DetectionError(f"Face detection failed: {exc}") from exc

        detections = []
        for detection in results.detections or []:
            location = detection.location_data
            rel = location.relative_bounding_box
            box = NormalizedBox(
                x_center=rel.xmin + rel.width / 2.0,
                y_center=rel.ymin + rel.height / 2.0,
                width=rel.width,
                height=rel.height,
            )
            landmarks = tuple((kp.x, kp.y) for kp in location.relative_keypoints)
            score = float(detection.score[0]) if detection.score else 1.0
            detections.append(FaceDetection(box=box, landmarks=landmarks, score=score))
        return FaceDetectionResult(tuple(detections))

    async def detect(self, frame: np.ndarray) -> FaceDetectionResult:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.detect_sync, frame)

    def close(self) -> None:
        with self._lock:
            self._detector.close()


class StaticDetector:
    """Returns a preset result; used for client-supplied detections."""

    def __init__(self, result: Optional[FaceDetectionResult] = None) -> None:
        self.result = result if result is not None else FaceDetectionResult()
        self.calls = 0

    async def detect(self, frame: np.ndarray) -> FaceDetectionResult:
        self.calls += 1
        return self.result


class LazyFaceDetector:
    """Defers building the wrapped detector until the first inference."""

    def __init__(self, factory: Callable[[], FaceDetector]) -> None:
        self._factory = factory
        self._detector: Optional[FaceDetector] = None
        self._lock = threading.Lock()

    def _get(self) -> FaceDetector:
        with self._lock:
            if self._detector is None:
                logger.info("Loading face detection model")
                self._detector = self._factory()
            return self._detector

    async def detect(self, frame: np.ndarray) -> FaceDetectionResult:
        return await self._get().detect(frame)
