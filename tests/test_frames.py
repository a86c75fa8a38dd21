"""Tests for the procedural frame styles."""

import pytest

from photobooth.frames import FRAME_STYLES, list_frame_styles, render_frame


class TestFrameStyles:
    def test_builtin_styles(self):
        assert [s.id for s in list_frame_styles()] == ["classic", "gold", "silver", "colorful"]

    @pytest.mark.parametrize("style_id", sorted(FRAME_STYLES))
    def test_border_opaque_center_clear(self, style_id):
        image = render_frame(FRAME_STYLES[style_id], 1920, 1080)
        assert image.shape == (1080, 1920, 4)
        assert image[10, 10, 3] == 255
        assert image[540, 960, 3] == 0

    def test_colorful_bands(self):
        image = render_frame(FRAME_STYLES["colorful"], 1920, 1080)
        assert tuple(image[540, 20]) == (107, 107, 255, 255)
        assert tuple(image[540, 90]) == (196, 205, 78, 255)
        assert image[540, 60, 3] == 0

    def test_scales_to_output(self):
        image = render_frame(FRAME_STYLES["gold"], 480, 270)
        assert image[3, 3, 3] == 255
        assert image[135, 240, 3] == 0
