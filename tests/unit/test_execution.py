"""
Tests for ExecutionContext.
"""

import pytest
import numpy as np

from instafilter.core.data_types import ImageData
from instafilter.core.execution import ExecutionContext


class TestRasterize:
    """Tests for materializing filter output."""

    def test_clips_and_cleans(self):
        arr = np.array([[[1.5, -0.2, np.nan], [np.inf, 0.5, -np.inf]]], dtype=np.float32)
        out = ExecutionContext().rasterize(ImageData(pixels=arr))
        assert np.allclose(out.pixels, [[[1.0, 0.0, 0.0], [1.0, 0.5, 0.0]]])

    def test_crops_to_size(self, gradient_image):
        out = ExecutionContext().rasterize(gradient_image, size=(10, 5))
        assert out.size == (10, 5)
        assert np.array_equal(out.pixels, gradient_image.pixels[:5, :10])

    def test_returns_read_only_copy(self, gray_image):
        out = ExecutionContext().rasterize(gray_image)
        assert not np.shares_memory(out.pixels, gray_image.pixels)
        assert not out.pixels.flags.writeable
        with pytest.raises(ValueError):
            out.pixels[0, 0] = 0.0
        assert gray_image.pixels.flags.writeable

    def test_copy_is_editable(self, gray_image):
        editable = ExecutionContext().rasterize(gray_image).copy()
        editable.pixels[0, 0] = 0.0
        assert editable.pixels[0, 0, 0] == 0.0

    def test_counts_renders(self, gray_image):
        context = ExecutionContext()
        context.rasterize(gray_image)
        context.rasterize(gray_image)
        assert context.renders == 2


class TestCache:
    """Tests for the bounded render cache."""

    def test_get_and_set(self):
        context = ExecutionContext()
        context.cache_set("a", 1)
        assert context.cache_get("a") == 1
        assert context.cache_get("b") is None
        assert context.cache_hits == 1

    def test_evicts_least_recently_used(self):
        context = ExecutionContext(cache_size=2)
        context.cache_set("a", 1)
        context.cache_set("b", 2)
        context.cache_get("a")
        context.cache_set("c", 3)

        assert len(context) == 2
        assert context.cache_get("b") is None
        assert context.cache_get("a") == 1
        assert context.cache_get("c") == 3

    def test_zero_size_disables(self):
        context = ExecutionContext(cache_size=0)
        context.cache_set("a", 1)
        assert context.cache_get("a") is None
        assert len(context) == 0

    def test_clear(self):
        context = ExecutionContext()
        context.cache_set("a", 1)
        context.clear_cache()
        assert len(context) == 0

    def test_negative_size(self):
        with pytest.raises(ValueError):
            ExecutionContext(cache_size=-1)

    def test_contexts_are_distinct(self):
        assert ExecutionContext().context_id != ExecutionContext().context_id
