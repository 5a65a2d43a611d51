"""
Filter Handles - numpy implementations behind each filter kind.

Every handle behaves like a reflective filter object:
- input_keys: the names of the inputs it declares
- set_value / value: keyed access to those inputs
- output_image: pulled on demand; None until an image is set, when the
  image is empty, or when the current values are degenerate

The engine only ever talks to handles through that contract, so the
parameters a kind honors are discovered from input_keys at bind time.
"""

from __future__ import annotations

import logging
import math
import numbers
from abc import ABC, abstractmethod
from typing import Any

import numpy as np
from numpy.typing import NDArray

from instafilter.core.data_types import ImageData
from instafilter.core.errors import FilterInputError
from instafilter.core.parameters import (
    INPUT_CENTER_KEY,
    INPUT_EXTENT_KEY,
    INPUT_IMAGE_KEY,
    INPUT_INTENSITY_KEY,
    INPUT_RADIUS_KEY,
    INPUT_SCALE_KEY,
)

logger = logging.getLogger(__name__)

# Fixed seed so crystallize cells are identical on every render
CRYSTALLIZE_SEED = 0x1F2E3D

SEPIA_MATRIX = np.array([
    [0.393, 0.769, 0.189],
    [0.349, 0.686, 0.168],
    [0.272, 0.534, 0.131],
], dtype=np.float32)

# Box passes per axis when approximating a Gaussian
BLUR_PASSES = 3


class FilterHandle(ABC):
    """
    Base class for filter handles.

    Subclasses declare their inputs (besides the image) in `defaults`
    and implement `_apply`.

    Usage:
        handle = GaussianBlurHandle()
        handle.set_value("inputImage", image)
        handle.set_value("inputRadius", 4)
        result = handle.output_image
    """

    name: str = ""
    defaults: dict[str, Any] = {}

    def __init__(self):
        self._values: dict[str, Any] = {INPUT_IMAGE_KEY: None}
        self._values.update(self.defaults)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"

    @property
    def input_keys(self) -> list[str]:
        """Names of all inputs this filter declares."""
        return list(self._values)

    def set_value(self, key: str, value: Any) -> None:
        """
        Set an input value.

        Raises:
            KeyError: If the filter does not declare this key
            FilterInputError: If the value has the wrong type for the key
        """
        if key not in self._values:
            raise KeyError(f"{self.name} has no input {key!r}")
        self._values[key] = self._check_value(key, value)

    def value(self, key: str) -> Any:
        """Get the current value of an input."""
        if key not in self._values:
            raise KeyError(f"{self.name} has no input {key!r}")
        return self._values[key]

    @property
    def output_image(self) -> ImageData | None:
        """Run the filter on the current inputs."""
        image = self._values[INPUT_IMAGE_KEY]
        if image is None:
            return None
        if image.pixels.size == 0:
            logger.debug(f"{self.name} skipped: empty input image")
            return None
        logger.debug(f"Applying {self.name} with {self._describe_inputs()}")
        return self._apply(image)

    @abstractmethod
    def _apply(self, image: ImageData) -> ImageData | None:
        """Produce the output image, or None if the inputs are degenerate."""
        ...

    def _check_value(self, key: str, value: Any) -> Any:
        if key == INPUT_IMAGE_KEY:
            if value is not None and not isinstance(value, ImageData):
                raise FilterInputError(f"{key} expects ImageData, got {type(value).__name__}")
            return value
        if key == INPUT_CENTER_KEY:
            if value is None:
                return None
            return self._check_point(key, value, 2)
        if key == INPUT_EXTENT_KEY:
            if value is None:
                return None
            return self._check_point(key, value, 4)
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise FilterInputError(f"{key} expects a number, got {value!r}")
        if not math.isfinite(value):
            raise FilterInputError(f"{key} must be finite, got {value!r}")
        return value

    @staticmethod
    def _check_point(key: str, value: Any, length: int) -> tuple[float, ...]:
        try:
            items = tuple(float(v) for v in value)
        except (TypeError, ValueError) as e:
            raise FilterInputError(f"{key} expects {length} numbers, got {value!r}") from e
        if len(items) != length:
            raise FilterInputError(f"{key} expects {length} numbers, got {value!r}")
        return items

    def _describe_inputs(self) -> str:
        return ", ".join(
            f"{k}={v!r}" for k, v in self._values.items() if k != INPUT_IMAGE_KEY
        )

    def _center(self, image: ImageData) -> tuple[float, float]:
        center = self._values.get(INPUT_CENTER_KEY)
        if center is None:
            return (image.width / 2.0, image.height / 2.0)
        return center


# =============================================================================
# HELPERS
# =============================================================================

def _axis_slice(ndim: int, axis: int, start: int, stop: int | None) -> tuple[slice, ...]:
    index = [slice(None)] * ndim
    index[axis] = slice(start, stop)
    return tuple(index)


def _window_max(arr: NDArray, size: int, axis: int) -> NDArray:
    """
    Maximum over a centered window of odd `size` along one axis.

    Windows are grown by doubling so the cost is logarithmic in size.
    Borders repeat the edge value.
    """
    half = size // 2
    pad = [(0, 0)] * arr.ndim
    pad[axis] = (half, half)
    out = np.pad(arr, pad, mode="edge")
    span = 1
    while span < size:
        step = min(span, size - span)
        length = out.shape[axis]
        head = out[_axis_slice(arr.ndim, axis, 0, length - step)]
        tail = out[_axis_slice(arr.ndim, axis, step, None)]
        out = np.maximum(head, tail)
        span += step
    return out


def _dilate(arr: NDArray, radius: int) -> NDArray:
    size = 2 * radius + 1
    return _window_max(_window_max(arr, size, axis=0), size, axis=1)


def _erode(arr: NDArray, radius: int) -> NDArray:
    return -_dilate(-arr, radius)


def _grid_origin(center: float, pitch: float) -> float:
    """First grid line at or before 0 such that a line passes through center."""
    return (center % pitch) - pitch


def _box_radius(sigma: float, passes: int) -> float:
    """
    Extended box radius whose repeated application matches a Gaussian.

    Same approximation Pillow uses for ImageFilter.GaussianBlur: an integer
    box plus a fractional weight on the two outermost samples.
    """
    sigma2 = sigma * sigma / passes
    whole = math.floor((math.sqrt(12.0 * sigma2 + 1.0) - 1.0) / 2.0)
    frac = (2 * whole + 1) * (whole * (whole + 1) - 3.0 * sigma2)
    frac /= 6.0 * (sigma2 - (whole + 1) * (whole + 1))
    return whole + frac


def _box_blur(arr: NDArray, radius: float, axis: int) -> NDArray:
    """Mean over an extended box of `radius` along one axis, edges repeated."""
    whole = int(radius)
    frac = radius - whole
    n = arr.shape[axis]
    pad = [(0, 0)] * arr.ndim
    pad[axis] = (whole + 1, whole + 1)
    padded = np.pad(arr, pad, mode="edge")

    zeros = list(padded.shape)
    zeros[axis] = 1
    sums = np.concatenate([np.zeros(zeros), np.cumsum(padded, axis=axis)], axis=axis)
    far = 2 * whole + 2
    total = (
        sums[_axis_slice(arr.ndim, axis, far, far + n)]
        - sums[_axis_slice(arr.ndim, axis, 1, 1 + n)]
    )
    if frac:
        total += frac * (
            padded[_axis_slice(arr.ndim, axis, 0, n)]
            + padded[_axis_slice(arr.ndim, axis, far, far + n)]
        )
    return total / (2.0 * radius + 1.0)


def _gaussian_blur(color: NDArray, sigma: float) -> NDArray:
    """
    Gaussian blur in float precision.

    Runs BLUR_PASSES extended box blurs per axis, accumulating in float64
    so uniform regions come back unchanged. sigma == 0 is the identity.
    """
    if sigma == 0:
        return color.copy()
    radius = _box_radius(sigma, BLUR_PASSES)
    out = color.astype(np.float64)
    for axis in (1, 0):
        for _ in range(BLUR_PASSES):
            out = _box_blur(out, radius, axis)
    return out.astype(np.float32)


# =============================================================================
# FILTER IMPLEMENTATIONS
# =============================================================================

class AreaAverageHandle(FilterHandle):
    """Replace every pixel with the mean color of the extent."""

    name = "AreaAverage"
    defaults = {INPUT_EXTENT_KEY: None}

    def _apply(self, image: ImageData) -> ImageData | None:
        extent = self._values[INPUT_EXTENT_KEY]
        if extent is None:
            region = image.pixels
        else:
            x, y, w, h = (int(v) for v in extent)
            x0, y0 = max(x, 0), max(y, 0)
            x1, y1 = min(x + w, image.width), min(y + h, image.height)
            if x1 <= x0 or y1 <= y0:
                return None
            region = image.pixels[y0:y1, x0:x1]

        mean = region.reshape(-1, image.channels).mean(axis=0, dtype=np.float64)
        arr = np.empty_like(image.pixels)
        arr[...] = mean.astype(np.float32)
        return ImageData(pixels=arr, metadata=image.metadata.copy())


class BloomHandle(FilterHandle):
    """Soften edges and add a glow by screen-blending a blurred copy."""

    name = "Bloom"
    defaults = {INPUT_RADIUS_KEY: 10.0, INPUT_INTENSITY_KEY: 0.5}

    def _apply(self, image: ImageData) -> ImageData | None:
        radius = self._values[INPUT_RADIUS_KEY]
        intensity = float(self._values[INPUT_INTENSITY_KEY])
        if radius < 0:
            return None

        blurred = _gaussian_blur(image.color, radius)
        glow = np.clip(blurred * intensity, 0.0, 1.0)
        color = 1.0 - (1.0 - image.color) * (1.0 - glow)
        return image.with_color(np.clip(color, 0.0, 1.0))


class CrystallizeHandle(FilterHandle):
    """Polygon-shaped color cells seeded on a jittered grid."""

    name = "Crystallize"
    defaults = {INPUT_RADIUS_KEY: 20.0, INPUT_CENTER_KEY: None}

    def _apply(self, image: ImageData) -> ImageData | None:
        pitch = int(self._values[INPUT_RADIUS_KEY])
        if pitch < 1:
            return None

        h, w = image.height, image.width
        cx, cy = self._center(image)
        ox, oy = _grid_origin(cx, pitch), _grid_origin(cy, pitch)
        ncols = int(math.ceil((w - ox) / pitch)) + 1
        nrows = int(math.ceil((h - oy) / pitch)) + 1

        rng = np.random.default_rng(CRYSTALLIZE_SEED)
        jitter = rng.random((nrows, ncols, 2)) * pitch
        seed_x = ox + np.arange(ncols)[np.newaxis, :] * pitch + jitter[:, :, 0]
        seed_y = oy + np.arange(nrows)[:, np.newaxis] * pitch + jitter[:, :, 1]

        ys, xs = np.mgrid[0:h, 0:w].astype(np.float64) + 0.5
        col = np.floor((xs - ox) / pitch).astype(np.intp)
        row = np.floor((ys - oy) / pitch).astype(np.intp)

        # Nearest seed among the 3x3 neighbouring cells
        best = np.full((h, w), np.inf)
        best_row = row.copy()
        best_col = col.copy()
        for dr in (-1, 0, 1):
            for dc in (-1, 0, 1):
                rr = np.clip(row + dr, 0, nrows - 1)
                cc = np.clip(col + dc, 0, ncols - 1)
                dist = (seed_x[rr, cc] - xs) ** 2 + (seed_y[rr, cc] - ys) ** 2
                closer = dist < best
                best = np.where(closer, dist, best)
                best_row = np.where(closer, rr, best_row)
                best_col = np.where(closer, cc, best_col)

        sx = np.clip(np.floor(seed_x[best_row, best_col]), 0, w - 1).astype(np.intp)
        sy = np.clip(np.floor(seed_y[best_row, best_col]), 0, h - 1).astype(np.intp)
        return ImageData(pixels=image.pixels[sy, sx].copy(), metadata=image.metadata.copy())


class EdgesHandle(FilterHandle):
    """Sobel gradient magnitude per channel."""

    name = "Edges"
    defaults = {INPUT_INTENSITY_KEY: 1.0}

    def _apply(self, image: ImageData) -> ImageData | None:
        intensity = float(self._values[INPUT_INTENSITY_KEY])
        p = np.pad(image.color, ((1, 1), (1, 1), (0, 0)), mode="edge")

        gx = (
            (p[:-2, 2:] + 2 * p[1:-1, 2:] + p[2:, 2:])
            - (p[:-2, :-2] + 2 * p[1:-1, :-2] + p[2:, :-2])
        )
        gy = (
            (p[2:, :-2] + 2 * p[2:, 1:-1] + p[2:, 2:])
            - (p[:-2, :-2] + 2 * p[:-2, 1:-1] + p[:-2, 2:])
        )
        magnitude = np.sqrt(gx * gx + gy * gy) * intensity
        return image.with_color(np.clip(magnitude, 0.0, 1.0))


class GaussianBlurHandle(FilterHandle):
    """Gaussian blur, computed in float precision."""

    name = "GaussianBlur"
    defaults = {INPUT_RADIUS_KEY: 10.0}

    def _apply(self, image: ImageData) -> ImageData | None:
        radius = self._values[INPUT_RADIUS_KEY]
        if radius < 0:
            return None
        blurred = _gaussian_blur(image.pixels, radius)
        return ImageData(pixels=blurred, metadata=image.metadata.copy())


class MorphologyGradientHandle(FilterHandle):
    """Dilation minus erosion over a square window, highlighting edges."""

    name = "MorphologyGradient"
    defaults = {INPUT_RADIUS_KEY: 5.0}

    def _apply(self, image: ImageData) -> ImageData | None:
        radius = int(self._values[INPUT_RADIUS_KEY])
        if radius < 0:
            return None
        color = image.color
        gradient = _dilate(color, radius) - _erode(color, radius)
        return image.with_color(np.clip(gradient, 0.0, 1.0))


class PixellateHandle(FilterHandle):
    """Average the image over square blocks anchored at the center."""

    name = "Pixellate"
    defaults = {INPUT_SCALE_KEY: 8.0, INPUT_CENTER_KEY: None}

    def _apply(self, image: ImageData) -> ImageData | None:
        scale = int(self._values[INPUT_SCALE_KEY])
        if scale < 1:
            return None

        h, w, channels = image.pixels.shape
        cx, cy = self._center(image)
        ox, oy = _grid_origin(cx, scale), _grid_origin(cy, scale)

        bx = np.floor((np.arange(w) + 0.5 - ox) / scale).astype(np.intp)
        by = np.floor((np.arange(h) + 0.5 - oy) / scale).astype(np.intp)
        nbx = int(bx.max()) + 1
        labels = (by[:, np.newaxis] * nbx + bx[np.newaxis, :]).ravel()

        counts = np.bincount(labels)
        flat = image.pixels.reshape(-1, channels)
        out = np.empty_like(flat)
        for c in range(channels):
            sums = np.bincount(labels, weights=flat[:, c])
            with np.errstate(invalid="ignore", divide="ignore"):
                means = sums / counts
            out[:, c] = means[labels]
        return ImageData(pixels=out.reshape(h, w, channels), metadata=image.metadata.copy())


class SepiaToneHandle(FilterHandle):
    """Map colors toward reddish-brown tones."""

    name = "SepiaTone"
    defaults = {INPUT_INTENSITY_KEY: 1.0}

    def _apply(self, image: ImageData) -> ImageData | None:
        intensity = float(self._values[INPUT_INTENSITY_KEY])
        color = image.color
        sepia = np.clip(color @ SEPIA_MATRIX.T, 0.0, 1.0)
        blended = color + intensity * (sepia - color)
        return image.with_color(np.clip(blended, 0.0, 1.0))


class UnsharpMaskHandle(FilterHandle):
    """Sharpen by adding back the difference from a blurred copy."""

    name = "UnsharpMask"
    defaults = {INPUT_RADIUS_KEY: 2.5, INPUT_INTENSITY_KEY: 0.5}

    def _apply(self, image: ImageData) -> ImageData | None:
        radius = self._values[INPUT_RADIUS_KEY]
        intensity = float(self._values[INPUT_INTENSITY_KEY])
        if radius < 0:
            return None
        color = image.color
        sharpened = color + (color - _gaussian_blur(color, radius)) * intensity
        return image.with_color(np.clip(sharpened, 0.0, 1.0))


class VignetteHandle(FilterHandle):
    """Darken pixels further than `radius` pixels from the center."""

    name = "Vignette"
    defaults = {INPUT_INTENSITY_KEY: 0.0, INPUT_RADIUS_KEY: 1.0}

    def _apply(self, image: ImageData) -> ImageData | None:
        intensity = float(self._values[INPUT_INTENSITY_KEY])
        radius = float(self._values[INPUT_RADIUS_KEY])
        if radius < 0:
            return None

        h, w = image.height, image.width
        cx, cy = w / 2.0, h / 2.0
        ys, xs = np.mgrid[0:h, 0:w].astype(np.float32) + 0.5
        dist = np.hypot(xs - cx, ys - cy)
        reach = max(math.hypot(cx, cy) - radius, 1e-6)
        falloff = np.clip((dist - radius) / reach, 0.0, 1.0) ** 2
        factor = 1.0 - np.clip(intensity, 0.0, 1.0) * falloff
        return image.with_color(image.color * factor[:, :, np.newaxis])
