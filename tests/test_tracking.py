"""Tests for the face tracking loop.

Coroutines are driven with asyncio.run so no async test plugin is needed.
"""

import asyncio
import logging

import numpy as np
import pytest

from photobooth.decorations import DecorationCategory, DecorationDefinition, get_decoration
from photobooth.detector import StaticDetector
from photobooth.exceptions import UnknownDecorationError
from photobooth.geometry import FaceDetectionResult, mirror_result
from photobooth.tracking import FaceTracker, OverlaySurface, StillFrameSource, TrackingState


class GatedDetector:
    """Holds every inference until released."""

    def __init__(self, result):
        self.result = result
        self.calls = 0
        self.release = None

    async def detect(self, frame):
        self.calls += 1
        if self.release is None:
            self.release = asyncio.Event()
        await self.release.wait()
        return self.result


class FailingDetector:
    async def detect(self, frame):
        raise RuntimeError("inference crashed")


def _tracker(detector, frame, user_facing=True, decoration="crown"):
    tracker = FaceTracker(detector, StillFrameSource(frame, user_facing=user_facing), interval=0.0)
    tracker.select(decoration)
    return tracker


class TestOverlaySurface:
    def test_ensure_size_reallocates_once(self):
        overlay = OverlaySurface()
        assert overlay.ensure_size(64, 48)
        assert not overlay.ensure_size(64, 48)
        assert (overlay.width, overlay.height) == (64, 48)

    def test_clear(self):
        overlay = OverlaySurface(8, 8)
        overlay.pixels[2, 2] = (1, 2, 3, 255)
        assert not overlay.is_empty()
        overlay.clear()
        assert overlay.is_empty()


class TestFaceTracker:
    def test_unknown_decoration(self, gray_frame):
        tracker = FaceTracker(StaticDetector(), StillFrameSource(gray_frame))
        with pytest.raises(UnknownDecorationError):
            tracker.select("jetpack")

    def test_cycle_draws_decoration(self, gray_frame, make_detection):
        tracker = _tracker(StaticDetector(FaceDetectionResult((make_detection(),))), gray_frame)
        assert asyncio.run(tracker.run_cycle())
        assert (tracker.overlay.width, tracker.overlay.height) == (1440, 1080)
        assert not tracker.overlay.is_empty()
        assert tracker.face_count == 1

    def test_empty_cycles_leave_overlay_empty(self, gray_frame):
        tracker = _tracker(StaticDetector(), gray_frame)

        async def scenario():
            for _ in range(5):
                await tracker.run_cycle()

        asyncio.run(scenario())
        assert tracker.overlay.is_empty()
        assert len(tracker.resolver.store) == 0

    def test_face_lost_clears_overlay_and_smoothing(self, gray_frame, make_detection):
        detector = StaticDetector(FaceDetectionResult((make_detection(),)))
        tracker = _tracker(detector, gray_frame)

        async def scenario():
            await tracker.run_cycle()
            detector.result = FaceDetectionResult()
            await tracker.run_cycle()

        asyncio.run(scenario())
        assert tracker.overlay.is_empty()
        assert len(tracker.resolver.store) == 0

    def test_none_decoration_draws_nothing(self, gray_frame, make_detection):
        tracker = _tracker(StaticDetector(FaceDetectionResult((make_detection(),))), gray_frame, decoration="none")
        asyncio.run(tracker.run_cycle())
        assert tracker.overlay.is_empty()

    def test_busy_detector_skips_ticks(self, gray_frame, make_detection):
        detector = GatedDetector(FaceDetectionResult((make_detection(),)))
        tracker = _tracker(detector, gray_frame)

        async def scenario():
            first = tracker.tick()
            await asyncio.sleep(0)
            assert tracker.tick() is None
            assert tracker.tick() is None
            detector.release.set()
            await first

        asyncio.run(scenario())
        assert detector.calls == 1
        assert tracker.skipped_cycles == 2
        assert not tracker.overlay.is_empty()

    def test_detector_failure_is_swallowed(self, gray_frame):
        tracker = _tracker(FailingDetector(), gray_frame)
        assert asyncio.run(tracker.run_cycle())
        assert tracker.overlay.is_empty()

    def test_start_outside_event_loop_stays_idle(self, gray_frame):
        tracker = _tracker(StaticDetector(), gray_frame)
        with pytest.raises(RuntimeError):
            tracker.start()
        assert tracker.state is TrackingState.IDLE
        assert not tracker.is_running

    def test_render_failure_is_logged_and_clears_overlay(self, gray_frame, make_detection, caplog):
        drawn = []

        def draw_once(frame):
            if drawn:
                raise ValueError("bad geometry")
            drawn.append(frame)
            return get_decoration("crown").draw(frame)

        result = FaceDetectionResult((make_detection(x=0.3), make_detection(x=0.7)))
        tracker = _tracker(StaticDetector(result), gray_frame)
        tracker.decoration = DecorationDefinition("broken", "broken", DecorationCategory.HEAD, draw_once)
        with caplog.at_level(logging.WARNING, logger="photobooth.tracking"):
            assert asyncio.run(tracker.run_cycle())
        assert len(drawn) == 1
        assert tracker.overlay.is_empty()
        assert "bad geometry" in caplog.text

    def test_stop_discards_pending_result(self, gray_frame, make_detection):
        detector = GatedDetector(FaceDetectionResult((make_detection(),)))
        tracker = _tracker(detector, gray_frame)

        async def scenario():
            tracker.tick()
            await asyncio.sleep(0)
            tracker.stop()
            detector.release.set()
            await asyncio.sleep(0.01)

        asyncio.run(scenario())
        assert tracker.overlay.is_empty()
        assert not tracker.inference_pending

    def test_start_stop_idempotent(self, gray_frame, make_detection):
        detector = StaticDetector(FaceDetectionResult((make_detection(),)))
        tracker = _tracker(detector, gray_frame)

        async def scenario():
            tracker.start()
            tracker.start()
            assert tracker.state is TrackingState.TRACKING
            await asyncio.sleep(0.05)
            tracker.stop()
            tracker.stop()

        asyncio.run(scenario())
        assert detector.calls >= 1
        assert tracker.state is TrackingState.IDLE
        assert not tracker.is_running
        assert tracker.overlay.is_empty()
        assert len(tracker.resolver.store) == 0

    def test_user_facing_matches_premirrored_environment(self, gray_frame, make_detection):
        result = FaceDetectionResult((make_detection(x=0.38, y=0.45),))
        user = _tracker(StaticDetector(result), gray_frame, user_facing=True)
        env = _tracker(StaticDetector(mirror_result(result)), gray_frame[:, ::-1].copy(), user_facing=False)
        asyncio.run(user.run_cycle())
        asyncio.run(env.run_cycle())
        assert not user.overlay.is_empty()
        assert np.array_equal(user.overlay.pixels, env.overlay.pixels)
