"""
Output Sinks - What happens to a finished render.

- preview: synchronous thumbnail update for display
- persist: asynchronous save through an image writer, reported through
  exactly one of two callbacks
"""

from __future__ import annotations

import itertools
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Callable, Protocol, runtime_checkable

from instafilter.core.data_types import ImageData
from instafilter.core.engine import RenderResult
from instafilter.core.errors import ConfigError, PersistFailure

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = Path.home() / "Pictures" / "InstaFilter"

# Pillow format name -> file extension
IMAGE_FORMATS = {
    "PNG": "png",
    "JPEG": "jpg",
    "TIFF": "tif",
    "BMP": "bmp",
    "WEBP": "webp",
}

SuccessCallback = Callable[[Path], None]
FailureCallback = Callable[[PersistFailure], None]


@runtime_checkable
class ImageWriter(Protocol):
    """Persistence collaborator: stores a finished image somewhere."""

    def write(self, image: ImageData) -> Path:
        """Store the image and return where it went. Raise on failure."""
        ...


class FileImageWriter:
    """
    Writes images into a directory with unique timestamped names.

    Attributes:
        directory: Target directory (created on first write)
        image_format: Pillow format name, e.g. "PNG"
    """

    _counter = itertools.count(1)

    def __init__(self, directory: str | Path | None = None, image_format: str = "PNG"):
        image_format = image_format.upper()
        if image_format not in IMAGE_FORMATS:
            raise ConfigError(
                f"Unsupported image format {image_format!r}, "
                f"expected one of: {', '.join(IMAGE_FORMATS)}"
            )
        self.directory = Path(directory) if directory else DEFAULT_OUTPUT_DIR
        self.image_format = image_format

    def next_path(self) -> Path:
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        ext = IMAGE_FORMATS[self.image_format]
        return self.directory / f"instafilter-{stamp}-{next(self._counter)}.{ext}"

    def write(self, image: ImageData) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.next_path()
        _save(image, path, self.image_format)
        return path


class FixedPathWriter:
    """Writes every image to one explicit file path."""

    def __init__(self, path: str | Path, image_format: str | None = None):
        self.path = Path(path)
        self.image_format = image_format

    def write(self, image: ImageData) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        _save(image, self.path, self.image_format)
        return self.path


def _save(image: ImageData, path: Path, image_format: str | None) -> None:
    pil_img = image.to_pil()
    fmt = image_format
    if fmt is None:
        from PIL import Image

        fmt = Image.registered_extensions().get(path.suffix.lower(), "PNG")
    if fmt in ("JPEG", "BMP") and pil_img.mode == "RGBA":
        pil_img = pil_img.convert("RGB")
    pil_img.save(str(path), format=fmt)


def describe_failure(error: BaseException) -> str:
    """Human-readable cause text for a failed save."""
    if isinstance(error, OSError) and error.strerror:
        return error.strerror
    return str(error) or type(error).__name__


class _Completion:
    """Guarantees that at most one persist callback fires."""

    def __init__(self, on_success: SuccessCallback | None, on_failure: FailureCallback | None):
        self._on_success = on_success
        self._on_failure = on_failure
        self._lock = threading.Lock()
        self._done = False

    def _claim(self) -> bool:
        with self._lock:
            if self._done:
                return False
            self._done = True
            return True

    def succeed(self, path: Path) -> None:
        if self._claim() and self._on_success:
            self._notify(self._on_success, path)

    def fail(self, failure: PersistFailure) -> None:
        if self._claim() and self._on_failure:
            self._notify(self._on_failure, failure)

    @staticmethod
    def _notify(callback: Callable, arg) -> None:
        try:
            callback(arg)
        except Exception:
            logger.exception(f"Persist callback {callback!r} raised")


class OutputSink:
    """
    Destination for finished renders.

    Usage:
        sink = OutputSink(FileImageWriter("~/Pictures/InstaFilter"))
        sink.preview(result)
        sink.persist(result, on_success=print, on_failure=report)
    """

    def __init__(
        self,
        writer: ImageWriter | None = None,
        thumbnail_size: int = 256,
        on_preview: Callable[[ImageData], None] | None = None,
        max_workers: int = 1,
    ):
        self.writer = writer or FileImageWriter()
        self.thumbnail_size = thumbnail_size
        self._on_preview = on_preview
        self._preview: ImageData | None = None
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="instafilter-persist",
        )

    @property
    def preview_image(self) -> ImageData | None:
        """Thumbnail of the last previewed result."""
        return self._preview

    def preview(self, result: RenderResult) -> ImageData:
        """Update the displayed thumbnail. Always succeeds."""
        self._preview = result.image.thumbnail(self.thumbnail_size)
        if self._on_preview:
            self._on_preview(self._preview)
        return self._preview

    def persist(
        self,
        result: RenderResult,
        on_success: SuccessCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> Future:
        """
        Save a result in the background.

        Exactly one of on_success(path) or on_failure(PersistFailure)
        is called, from a worker thread. The returned future resolves to
        the saved path, or None on failure. It never raises: save errors
        go to on_failure and errors raised by the callbacks are logged.
        After close(), on_failure is called immediately.
        """
        completion = _Completion(on_success, on_failure)
        image = result.image
        try:
            return self._executor.submit(self._persist_sync, image, completion)
        except RuntimeError as e:
            logger.warning(f"Cannot save image: {e}")
            completion.fail(PersistFailure("output sink is closed"))
            done: Future = Future()
            done.set_result(None)
            return done

    def _persist_sync(self, image: ImageData, completion: _Completion) -> Path | None:
        try:
            path = self.writer.write(image)
        except Exception as e:
            failure = PersistFailure(describe_failure(e))
            logger.warning(f"Saving image failed: {failure.cause}")
            completion.fail(failure)
            return None

        logger.info(f"Saved image to {path}")
        completion.succeed(path)
        return path

    def close(self, wait: bool = True) -> None:
        """Stop accepting saves; by default wait for pending ones."""
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> OutputSink:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
