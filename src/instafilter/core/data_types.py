"""
Data Types - Image container shared by every stage of the filter engine.

This module defines the in-memory image representation that is handed
across all calls:
- ImageMetadata: Where an image came from and how it was produced
- ImageData: Container for image pixels and metadata
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np
from numpy.typing import NDArray


@dataclass
class ImageMetadata:
    """Metadata associated with an image."""

    # Source information
    source_path: Path | None = None

    # Filter that produced this image (if any)
    filter_kind: str | None = None
    parameters: dict[str, float | int] = field(default_factory=dict)

    # Image properties
    original_width: int | None = None
    original_height: int | None = None

    # Custom metadata
    custom: dict[str, Any] = field(default_factory=dict)

    def copy(self) -> ImageMetadata:
        """Create a shallow copy of this metadata."""
        return ImageMetadata(
            source_path=self.source_path,
            filter_kind=self.filter_kind,
            parameters=dict(self.parameters),
            original_width=self.original_width,
            original_height=self.original_height,
            custom=self.custom.copy(),
        )


@dataclass
class ImageData:
    """
    Container for image data flowing through the filter engine.

    Internally stores pixels as a numpy array in HWC format with
    float32 values in range [0, 1].

    Attributes:
        pixels: numpy array of shape (H, W, C) with float32 values [0, 1]
        metadata: Optional metadata about the image
    """
    pixels: NDArray[np.float32]
    metadata: ImageMetadata = field(default_factory=ImageMetadata)

    @classmethod
    def from_numpy(
        cls,
        array: NDArray,
        metadata: ImageMetadata | None = None
    ) -> ImageData:
        """
        Create ImageData from a numpy array.

        Handles various input formats:
        - uint8 [0, 255] -> float32 [0, 1]
        - float64 -> float32
        - HW (grayscale) -> HWC
        - CHW -> HWC
        """
        arr = np.array(array, copy=True)

        # Convert to float32 if needed
        if arr.dtype == np.uint8:
            arr = arr.astype(np.float32) / 255.0
        elif arr.dtype != np.float32:
            arr = arr.astype(np.float32)

        # Ensure HWC format
        if arr.ndim == 2:
            # Grayscale -> RGB
            arr = np.stack([arr, arr, arr], axis=-1)
        elif arr.ndim == 3 and arr.shape[0] in (1, 3, 4):
            # CHW -> HWC (if first dim is channels)
            if arr.shape[0] < arr.shape[2]:
                arr = np.transpose(arr, (1, 2, 0))

        if arr.ndim != 3 or arr.shape[2] not in (1, 3, 4):
            raise ValueError(f"Unsupported image array shape: {array.shape}")
        if arr.shape[0] == 0 or arr.shape[1] == 0:
            raise ValueError(f"Empty image array: {array.shape}")
        if arr.shape[2] == 1:
            arr = np.concatenate([arr, arr, arr], axis=-1)

        return cls(pixels=np.ascontiguousarray(arr), metadata=metadata or ImageMetadata())

    @classmethod
    def from_pil(cls, image, metadata: ImageMetadata | None = None) -> ImageData:
        """Create ImageData from a PIL Image."""
        from PIL import Image

        if not isinstance(image, Image.Image):
            raise TypeError(f"Expected PIL Image, got {type(image)}")
        if image.width == 0 or image.height == 0:
            raise ValueError(f"Empty image: {image.size}")

        # Convert to RGB/RGBA
        if image.mode not in ("RGB", "RGBA"):
            image = image.convert("RGBA" if "A" in image.getbands() else "RGB")

        arr = np.array(image, dtype=np.float32) / 255.0

        meta = metadata or ImageMetadata()
        meta.original_width = image.width
        meta.original_height = image.height

        return cls(pixels=arr, metadata=meta)

    @classmethod
    def from_file(cls, path: str | Path, metadata: ImageMetadata | None = None) -> ImageData:
        """
        Create ImageData by loading an image from a file.

        Args:
            path: Path to the image file
            metadata: Optional metadata (source_path will be set automatically)

        Returns:
            ImageData with the loaded image
        """
        from PIL import Image, ImageOps

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Image file not found: {path}")

        with Image.open(path) as image:
            # Camera photos carry their orientation in EXIF
            image = ImageOps.exif_transpose(image)
            image.load()

        meta = metadata or ImageMetadata()
        meta.source_path = path

        return cls.from_pil(image, meta)

    @classmethod
    def coerce(cls, image: Any) -> ImageData:
        """
        Convert whatever an image source hands over into ImageData.

        Accepts ImageData, PIL images, numpy arrays and file paths.
        """
        if isinstance(image, ImageData):
            return image
        if isinstance(image, np.ndarray):
            return cls.from_numpy(image)
        if isinstance(image, (str, Path)):
            return cls.from_file(image)
        return cls.from_pil(image)

    @classmethod
    def solid(
        cls,
        width: int,
        height: int,
        color: tuple[float, ...] = (0.5, 0.5, 0.5),
    ) -> ImageData:
        """Create an image filled with a single color."""
        arr = np.empty((height, width, len(color)), dtype=np.float32)
        arr[...] = np.asarray(color, dtype=np.float32)
        return cls(pixels=arr)

    @property
    def width(self) -> int:
        """Image width in pixels."""
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        """Image height in pixels."""
        return self.pixels.shape[0]

    @property
    def channels(self) -> int:
        """Number of color channels (3 for RGB, 4 for RGBA)."""
        return self.pixels.shape[2] if self.pixels.ndim == 3 else 1

    @property
    def size(self) -> tuple[int, int]:
        """Image size as (width, height)."""
        return (self.width, self.height)

    @property
    def has_alpha(self) -> bool:
        """Check if image has an alpha channel."""
        return self.channels == 4

    @property
    def color(self) -> NDArray[np.float32]:
        """Color channels without alpha."""
        return self.pixels[:, :, :3]

    @property
    def alpha(self) -> NDArray[np.float32] | None:
        """Alpha channel, if present."""
        return self.pixels[:, :, 3:4] if self.has_alpha else None

    def with_color(self, color: NDArray) -> ImageData:
        """Return a new image with the given color channels and this alpha."""
        color = np.asarray(color, dtype=np.float32)
        if self.has_alpha and color.shape[:2] == self.pixels.shape[:2]:
            color = np.concatenate([color, self.alpha], axis=-1)
        return ImageData(pixels=color, metadata=self.metadata.copy())

    def to_numpy(self, dtype: np.dtype = np.float32) -> NDArray:
        """
        Convert to numpy array.

        Args:
            dtype: Output dtype (float32, uint8, etc.)

        Returns:
            Array in HWC format
        """
        if dtype == np.uint8:
            return np.round(self.pixels * 255).clip(0, 255).astype(np.uint8)
        return self.pixels.astype(dtype)

    def to_pil(self):
        """Convert to PIL Image."""
        from PIL import Image

        arr = self.to_numpy(np.uint8)
        mode = "RGBA" if self.has_alpha else "RGB"
        return Image.fromarray(arr).convert(mode)

    def fingerprint(self) -> str:
        """Stable digest of the pixel contents, used as a cache key."""
        digest = hashlib.blake2b(digest_size=16)
        digest.update(repr(self.pixels.shape).encode())
        digest.update(np.ascontiguousarray(self.pixels, dtype=np.float32).tobytes())
        return digest.hexdigest()

    def thumbnail(self, max_size: int = 256) -> ImageData:
        """Create a thumbnail of this image."""
        from PIL import Image

        pil_image = self.to_pil()
        pil_image.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)

        meta = self.metadata.copy()
        return ImageData.from_pil(pil_image, meta)

    def copy(self) -> ImageData:
        """Create a copy of this image."""
        return ImageData(
            pixels=self.pixels.copy(),
            metadata=self.metadata.copy(),
        )
