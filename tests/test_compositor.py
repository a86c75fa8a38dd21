"""Tests for capture planning, composition and export helpers."""

from datetime import datetime

import cv2
import numpy as np
import pytest

from photobooth.compositor import (
    CaptureCompositor,
    CropRect,
    FrameAsset,
    build_export_filename,
    compute_cover_crop,
    compute_output_size,
    decode_asset,
    plan_capture,
)
from photobooth.exceptions import AssetLoadError, CompositeError, SourceNotReadyError
from photobooth.filters import FILTERS, FilterDefinition
from photobooth.frames import FRAME_STYLES
from photobooth.models import MessageConfig, MessageField


@pytest.fixture
def compositor():
    return CaptureCompositor(rng=np.random.default_rng(0))


def _half_white(width=640, height=480):
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    frame[:, : width // 2] = 255
    return frame


class TestPlanning:
    def test_landscape_cover_crop(self):
        assert compute_cover_crop(1920, 1080, 4 / 3) == CropRect(240, 0, 1440, 1080)

    def test_portrait_cover_crop(self):
        assert compute_cover_crop(1080, 1920, 4 / 3) == CropRect(0, 555, 1080, 810)

    @pytest.mark.parametrize("size", [(1920, 1080), (640, 480), (1280, 720), (720, 1280), (333, 777)])
    def test_crop_keeps_aspect(self, size):
        crop = compute_cover_crop(*size, 4 / 3)
        assert crop.width <= size[0] and crop.height <= size[1]
        assert crop.width / crop.height == pytest.approx(4 / 3, abs=0.01)

    def test_output_is_bounded(self):
        assert compute_output_size(4000, 3000, 1920) == (1920, 1440)

    def test_output_never_upscales(self):
        assert compute_output_size(800, 600, 1920) == (800, 600)

    def test_plan_viewport(self):
        plan = plan_capture(1920, 1080, 4 / 3, 1920)
        assert (plan.output_width, plan.output_height) == (1440, 1080)
        assert plan.viewport.x == pytest.approx(0.125)
        assert plan.viewport.width == pytest.approx(0.75)

    def test_empty_source(self):
        with pytest.raises(SourceNotReadyError):
            compute_cover_crop(0, 480, 4 / 3)


class TestCompose:
    def test_crop_and_scale(self, compositor, gray_frame):
        result = compositor.compose(gray_frame)
        assert (result.width, result.height) == (1440, 1080)

    def test_result_is_read_only(self, compositor, gray_frame):
        result = compositor.compose(gray_frame)
        assert not result.image.flags.writeable

    @pytest.mark.parametrize("frame", [None, np.zeros((0, 0, 3), dtype=np.uint8)])
    def test_source_not_ready(self, compositor, frame):
        with pytest.raises(SourceNotReadyError):
            compositor.compose(frame)

    def test_user_facing_is_mirrored(self, compositor):
        result = compositor.compose(_half_white(), user_facing=True)
        assert result.image[240, 600, 0] == 255
        assert result.image[240, 40, 0] == 0

    def test_environment_facing_is_not_mirrored(self, compositor):
        result = compositor.compose(_half_white(), user_facing=False)
        assert result.image[240, 40, 0] == 255

    def test_overlay_is_scaled_onto_output(self, compositor):
        overlay = np.zeros((240, 320, 4), dtype=np.uint8)
        overlay[:120, :160] = (0, 0, 255, 255)
        result = compositor.compose(np.zeros((480, 640, 3), dtype=np.uint8), overlay=overlay)
        assert tuple(result.image[100, 100]) == (0, 0, 255)
        assert tuple(result.image[400, 600]) == (0, 0, 0)

    def test_disabled_caption_is_pixel_identical(self, compositor, noise_image):
        frame = cv2.resize(noise_image, (640, 480), interpolation=cv2.INTER_NEAREST)
        message = MessageConfig(
            date=MessageField(enabled=False, value="2024-03-05"),
            text=MessageField(enabled=False, value="Hello"),
            location=MessageField(enabled=False, value="Tokyo"),
        )
        with_step = compositor.compose(frame, message=message)
        without = compositor.compose(frame)
        assert np.array_equal(with_step.image, without.image)
        assert with_step.caption_lines == ()

    def test_caption_lines_and_pixels(self, compositor):
        frame = np.full((480, 640, 3), 90, dtype=np.uint8)
        message = MessageConfig(
            date=MessageField(enabled=True, value="2024-03-05"),
            text=MessageField(enabled=True, value="Hello"),
            location=MessageField(enabled=True, value="Tokyo"),
        )
        result = compositor.compose(frame, message=message)
        assert result.caption_lines == ("Hello", "2024/3/5", "Tokyo")
        assert not np.array_equal(result.image[300:], frame[300:])
        assert np.array_equal(result.image[:200], frame[:200])

    def test_invalid_date_is_omitted(self, compositor):
        message = MessageConfig(date=MessageField(enabled=True, value="31/31/2024"))
        result = compositor.compose(np.full((480, 640, 3), 90, dtype=np.uint8), message=message)
        assert result.caption_lines == ()

    def test_unloaded_frame_asset_is_skipped(self, compositor, gray_frame):
        asset = FrameAsset.from_bytes(b"not an image")
        assert not asset.loaded
        with_asset = compositor.compose(gray_frame, frame_asset=asset)
        assert np.array_equal(with_asset.image, compositor.compose(gray_frame).image)

    def test_frame_style_border(self, compositor, gray_frame):
        asset = FrameAsset.from_style(FRAME_STYLES["gold"], 1440, 1080)
        result = compositor.compose(gray_frame, frame_asset=asset)
        assert tuple(result.image[10, 10]) == (0, 215, 255)
        assert tuple(result.image[540, 720]) == (128, 128, 128)

    def test_failing_layer_aborts_capture(self, compositor, gray_frame):
        def explode(surface, width, height, rng=None):
            raise RuntimeError("boom")

        broken = FilterDefinition("broken", "broken", (), explode)
        with pytest.raises(CompositeError) as info:
            compositor.compose(gray_frame, filter_def=broken)
        assert info.value.layer == "effect"
        assert info.value.retryable

    def test_seeded_pixel_pass_is_repeatable(self, gray_frame):
        a = CaptureCompositor(rng=np.random.default_rng(11)).compose(gray_frame, filter_def=FILTERS["noise"])
        b = CaptureCompositor(rng=np.random.default_rng(11)).compose(gray_frame, filter_def=FILTERS["noise"])
        assert np.array_equal(a.image, b.image)


class TestAssets:
    def test_decode_png_with_alpha(self):
        image = np.zeros((8, 8, 4), dtype=np.uint8)
        image[..., 3] = 200
        ok, buffer = cv2.imencode(".png", image)
        assert ok
        decoded = decode_asset(buffer.tobytes())
        assert decoded.shape == (8, 8, 4)
        assert decoded[0, 0, 3] == 200

    def test_decode_opaque_gets_alpha(self):
        ok, buffer = cv2.imencode(".png", np.zeros((4, 4, 3), dtype=np.uint8))
        assert decode_asset(buffer.tobytes())[..., 3].min() == 255

    def test_decode_rejects_garbage(self):
        with pytest.raises(AssetLoadError):
            decode_asset(b"garbage")

    def test_missing_path(self, tmp_path):
        asset = FrameAsset.from_path(tmp_path / "missing.png")
        assert not asset.loaded


class TestExport:
    def test_filename_format(self):
        now = datetime(2024, 3, 5, 9, 7, 3)
        assert build_export_filename(now=now) == "ShinagawaPrince_Photo_20240305_090703.png"

    def test_label_is_sanitized(self):
        now = datetime(2024, 12, 31, 23, 59, 59)
        name = build_export_filename("Booth", "Sky Lounge/1", now, "jpeg")
        assert name == "Booth_Sky_Lounge_1_20241231_235959.jpg"

    def test_encode_png_round_trip(self, compositor, gray_frame):
        result = compositor.compose(gray_frame)
        decoded = cv2.imdecode(np.frombuffer(result.encode("png"), np.uint8), cv2.IMREAD_COLOR)
        assert np.array_equal(decoded, result.image)

    def test_data_url(self, compositor, gray_frame):
        url = compositor.compose(gray_frame).to_data_url()
        assert url.startswith("data:image/jpeg;base64,")
