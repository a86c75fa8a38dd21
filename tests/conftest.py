"""Shared fixtures for photobooth tests.

Frames and detections are synthetic, so no ML model is needed.
"""

import numpy as np
import pytest

from photobooth.config import Settings
from photobooth.geometry import CanonicalFaceFrame, FaceDetection, NormalizedBox


@pytest.fixture
def settings():
    """Default settings with a fixed seed for the capture-time pixel passes."""
    return Settings(random_seed=7)


@pytest.fixture
def make_detection():
    """Factory for a normalized detection with plausible keypoints."""

    def _make(x=0.5, y=0.4, w=0.3, h=0.3, landmarks=True, score=0.9):
        points = ()
        if landmarks:
            points = (
                (x - w * 0.18, y - h * 0.15),
                (x + w * 0.18, y - h * 0.15),
                (x, y + h * 0.05),
                (x, y + h * 0.25),
                (x - w * 0.45, y - h * 0.05),
                (x + w * 0.45, y - h * 0.05),
            )
        return FaceDetection(NormalizedBox(x, y, w, h), points, score)

    return _make


@pytest.fixture
def face_frame():
    """Upright face centered in a 640x640 surface."""
    return CanonicalFaceFrame(
        bx=320.0,
        by=330.0,
        bw=200.0,
        bh=220.0,
        right_eye=(284.0, 297.0),
        left_eye=(356.0, 297.0),
        nose=(320.0, 341.0),
        mouth=(320.0, 385.0),
    )


@pytest.fixture
def transparent_surface():
    return np.zeros((640, 640, 4), dtype=np.uint8)


@pytest.fixture
def gray_frame():
    """1920x1080 mid-gray camera frame."""
    return np.full((1080, 1920, 3), 128, dtype=np.uint8)


@pytest.fixture
def noise_image():
    rng = np.random.default_rng(42)
    return rng.integers(0, 256, size=(30, 40, 3), dtype=np.uint8)
