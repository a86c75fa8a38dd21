"""Tests for the exponential smoothing store."""

import pytest

from photobooth.smoothing import DEFAULT_SMOOTHING_ALPHA, SmoothingStore


class TestSmoothingStore:
    def test_first_update_seeds_with_raw_value(self):
        store = SmoothingStore()
        assert store.update("bx", 123.5) == 123.5

    def test_blend_uses_alpha(self):
        store = SmoothingStore()
        store.update("bx", 0.0)
        assert store.update("bx", 100.0) == pytest.approx(100.0 * DEFAULT_SMOOTHING_ALPHA)

    def test_constant_input_converges(self):
        store = SmoothingStore(0.38)
        store.update("x", 0.0)
        for _ in range(60):
            value = store.update("x", 250.0)
        assert value == pytest.approx(250.0, abs=1e-6)

    def test_alpha_one_tracks_raw(self):
        store = SmoothingStore(1.0)
        store.update("x", 10.0)
        assert store.update("x", 42.0) == 42.0

    @pytest.mark.parametrize("alpha", [0.0, -0.2, 1.5])
    def test_invalid_alpha_rejected(self, alpha):
        with pytest.raises(ValueError):
            SmoothingStore(alpha)

    def test_reset_clears_all_keys(self):
        store = SmoothingStore()
        store.update("a", 1.0)
        store.update("b", 2.0)
        store.reset()
        assert len(store) == 0
        assert store.update("a", 9.0) == 9.0

    def test_discard_drops_prefix_only(self):
        store = SmoothingStore()
        store.update("0.bx", 1.0)
        store.update("1.bx", 2.0)
        store.update("1.by", 3.0)
        store.discard("1.")
        assert "0.bx" in store
        assert "1.bx" not in store
        assert len(store) == 1

    def test_get_missing_key(self):
        assert SmoothingStore().get("nope") is None
