"""
Execution Context - Reusable render-time state owned by the engine.

The context is passed explicitly to every render. It provides:
- Rasterization of filter output into a finished image
- A bounded cache of render results keyed by (kind, input, values)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Hashable
from typing import Any
from uuid import UUID, uuid4

import numpy as np

from instafilter.core.data_types import ImageData

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SIZE = 8


class ExecutionContext:
    """
    Context passed to the engine for every render.

    A context can be shared between engines. It never lives in a
    module-level global.
    """

    def __init__(self, cache_size: int = DEFAULT_CACHE_SIZE):
        if cache_size < 0:
            raise ValueError("cache_size must be >= 0")
        self.context_id: UUID = uuid4()
        self._cache_size = cache_size
        self._cache: dict[Hashable, Any] = {}
        self._lock = threading.Lock()
        self.renders = 0
        self.cache_hits = 0

    @property
    def cache_size(self) -> int:
        return self._cache_size

    def __len__(self) -> int:
        return len(self._cache)

    def rasterize(self, image: ImageData, size: tuple[int, int] | None = None) -> ImageData:
        """
        Materialize filter output into a finished image.

        Non-finite values become 0, pixels are clipped to [0, 1] and the
        result is cropped to `size` (width, height) when given. The returned
        pixels are read-only; use ImageData.copy() for an editable image.
        """
        pixels = image.pixels
        if size is not None:
            width, height = size
            pixels = pixels[:height, :width]
        pixels = np.nan_to_num(pixels, nan=0.0, posinf=1.0, neginf=0.0)
        pixels = np.ascontiguousarray(np.clip(pixels, 0.0, 1.0), dtype=np.float32)
        if pixels is image.pixels:
            pixels = pixels.copy()
        # Results may be shared through the cache
        pixels.flags.writeable = False
        self.renders += 1
        return ImageData(pixels=pixels, metadata=image.metadata.copy())

    def cache_get(self, key: Hashable) -> Any | None:
        """Get from cache, marking the entry as most recently used."""
        if self._cache_size == 0:
            return None
        with self._lock:
            value = self._cache.pop(key, None)
            if value is not None:
                self._cache[key] = value
                self.cache_hits += 1
        return value

    def cache_set(self, key: Hashable, value: Any) -> None:
        """Store in cache, evicting the least recently used entries."""
        if self._cache_size == 0:
            return
        with self._lock:
            self._cache.pop(key, None)
            self._cache[key] = value
            while len(self._cache) > self._cache_size:
                oldest = next(iter(self._cache))
                del self._cache[oldest]
                logger.debug(f"Evicted cached render {oldest!r:.60}")

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()
