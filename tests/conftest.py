from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest


def pytest_configure() -> None:
    """
    Ensure `src/` is on sys.path so tests can import `instafilter`
    without requiring an editable install.
    """
    repo_root = Path(__file__).resolve().parents[1]
    src_root = repo_root / "src"
    sys.path.insert(0, str(src_root))


@pytest.fixture
def gray_image():
    """4x4 solid mid-gray image."""
    from instafilter.core.data_types import ImageData

    return ImageData.from_numpy(np.full((4, 4, 3), 128, dtype=np.uint8))


@pytest.fixture
def gradient_image():
    """32x24 image with a horizontal red ramp and a vertical green ramp."""
    from instafilter.core.data_types import ImageData

    h, w = 24, 32
    arr = np.zeros((h, w, 3), dtype=np.float32)
    arr[:, :, 0] = np.linspace(0.0, 1.0, w, dtype=np.float32)[np.newaxis, :]
    arr[:, :, 1] = np.linspace(0.0, 1.0, h, dtype=np.float32)[:, np.newaxis]
    arr[:, :, 2] = 0.25
    return ImageData.from_numpy(arr)
