from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .smoothing import SmoothingStore

Point = Tuple[float, float]

# MediaPipe short-range keypoint order
RIGHT_EYE = 0
LEFT_EYE = 1
NOSE_TIP = 2
MOUTH_CENTER = 3
RIGHT_EAR = 4
LEFT_EAR = 5
LANDMARK_COUNT = 6

SMOOTHED_KEYS = (
    "bx",
    "by",
    "bw",
    "bh",
    "rex",
    "rey",
    "lex",
    "ley",
    "nx",
    "ny",
    "mx",
    "my",
)


@dataclass(frozen=True)
class NormalizedBox:
    x_center: float
    y_center: float
    width: float
    height: float


@dataclass(frozen=True)
class FaceDetection:
    box: NormalizedBox
    landmarks: Tuple[Point, ...] = ()
    score: float = 1.0

    def landmark(self, index: int) -> Optional[Point]:
        if 0 <= index < len(self.landmarks):
            return self.landmarks[index]
        return None


@dataclass(frozen=True)
class FaceDetectionResult:
    detections: Tuple[FaceDetection, ...] = ()

    def __len__(self) -> int:
        return len(self.detections)

    def __bool__(self) -> bool:
        return bool(self.detections)


@dataclass(frozen=True)
class Viewport:
    """Region of the source frame shown on the overlay, in normalized units."""

    x: float = 0.0
    y: float = 0.0
    width: float = 1.0
    height: float = 1.0

    def mirrored(self) -> "Viewport":
        return Viewport(1.0 - self.x - self.width, self.y, self.width, self.height)


FULL_VIEWPORT = Viewport()


def mirror_detection(detection: FaceDetection) -> FaceDetection:
    box = detection.box
    return FaceDetection(
        box=NormalizedBox(1.0 - box.x_center, box.y_center, box.width, box.height),
        landmarks=tuple((1.0 - x, y) for x, y in detection.landmarks),
        score=detection.score,
    )


def mirror_result(result: FaceDetectionResult) -> FaceDetectionResult:
    return FaceDetectionResult(tuple(mirror_detection(d) for d in result.detections))


@dataclass(frozen=True)
class CanonicalFaceFrame:
    bx: float
    by: float
    bw: float
    bh: float
    right_eye: Point
    left_eye: Point
    nose: Point
    mouth: Point
    eye_mid: Point = field(init=False)
    eye_dist: float = field(init=False)
    face_top: float = field(init=False)
    face_bottom: float = field(init=False)
    face_left: float = field(init=False)
    face_right: float = field(init=False)
    roll: float = field(init=False)

    def __post_init__(self) -> None:
        (rx, ry), (lx, ly) = self.right_eye, self.left_eye
        set_ = object.__setattr__
        set_(self, "eye_mid", ((rx + lx) / 2.0, (ry + ly) / 2.0))
        set_(self, "eye_dist", math.hypot(lx - rx, ly - ry))
        set_(self, "face_top", self.by - self.bh / 2.0)
        set_(self, "face_bottom", self.by + self.bh / 2.0)
        set_(self, "face_left", self.bx - self.bw / 2.0)
        set_(self, "face_right", self.bx + self.bw / 2.0)
        # Eye line measured left-to-right on screen so mirroring keeps it near zero
        (ax, ay), (cx, cy) = sorted((self.right_eye, self.left_eye))
        set_(self, "roll", math.atan2(cy - ay, cx - ax) if cx != ax or cy != ay else 0.0)

    @property
    def eye_span(self) -> float:
        """Eye separation, falling back to a box-relative estimate."""
        return self.eye_dist if self.eye_dist > 1e-3 else self.bw * 0.36


def _fallback_landmarks(box: NormalizedBox) -> List[Point]:
    bx, by, bw, bh = box.x_center, box.y_center, box.width, box.height
    return [
        (bx - bw * 0.18, by - bh * 0.15),
        (bx + bw * 0.18, by - bh * 0.15),
        (bx, by + bh * 0.1),
        (bx, by + bh * 0.3),
    ]


def _raw_scalars(detection: FaceDetection) -> List[float]:
    fallback = _fallback_landmarks(detection.box)
    points: List[Point] = []
    for index in (RIGHT_EYE, LEFT_EYE, NOSE_TIP, MOUTH_CENTER):
        point = detection.landmark(index)
        points.append(point if point is not None else fallback[index])
    box = detection.box
    values = [box.x_center, box.y_center, box.width, box.height]
    for x, y in points:
        values.extend((x, y))
    return values


class LandmarkGeometryResolver:
    """Turns raw detections into smoothed pixel-space face frames."""

    def __init__(self, store: Optional[SmoothingStore] = None) -> None:
        self.store = store if store is not None else SmoothingStore()
        self._face_count = 0

    def reset(self) -> None:
        self.store.reset()
        self._face_count = 0

    def resolve(
        self,
        result: FaceDetectionResult,
        width: int,
        height: int,
        mirrored: bool = False,
        viewport: Viewport = FULL_VIEWPORT,
    ) -> List[CanonicalFaceFrame]:
        detections: Sequence[FaceDetection] = result.detections
        if mirrored:
            detections = [mirror_detection(d) for d in detections]
            viewport = viewport.mirrored()

        for stale in range(len(detections), self._face_count):
            self.store.discard(f"{stale}.")
        self._face_count = len(detections)

        sx = width / viewport.width
        sy = height / viewport.height
        frames: List[CanonicalFaceFrame] = []
        for index, detection in enumerate(detections):
            raw = _raw_scalars(detection)
            pixels = []
            for i, value in enumerate(raw):
                if i in (2, 3):
                    pixels.append(value * (sx if i == 2 else sy))
                elif i % 2 == 0:
                    pixels.append((value - viewport.x) * sx)
                else:
                    pixels.append((value - viewport.y) * sy)
            smoothed = [
                self.store.update(f"{index}.{key}", value)
                for key, value in zip(SMOOTHED_KEYS, pixels)
            ]
            bx, by, bw, bh, rex, rey, lex, ley, nx, ny, mx, my = smoothed
            frames.append(
                CanonicalFaceFrame(
                    bx=bx,
                    by=by,
                    bw=bw,
                    bh=bh,
                    right_eye=(rex, rey),
                    left_eye=(lex, ley),
                    nose=(nx, ny),
                    mouth=(mx, my),
                )
            )
        return frames
