from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from gemini_unblend.core.engine import WatermarkEngine


def make_capture(size: int) -> np.ndarray:
    """Synthetic reference capture: bright logo in the middle fading to black edges."""
    yy, xx = np.mgrid[0:size, 0:size].astype(np.float32)
    center = (size - 1) / 2
    dist = np.sqrt((yy - center) ** 2 + (xx - center) ** 2)
    value = np.clip(255 - dist * 255 / (size / 2), 0, 255).astype(np.uint8)

    capture = np.zeros((size, size, 4), dtype=np.uint8)
    capture[:, :, 0] = value
    capture[:, :, 1] = value
    capture[:, :, 2] = value
    capture[:, :, 3] = 255
    return capture


def make_image(width: int, height: int, seed: int = 0, channels: int = 4) -> np.ndarray:
    rng = np.random.default_rng(seed)
    image = rng.integers(0, 256, size=(height, width, channels), dtype=np.uint8)
    if channels == 4:
        image[:, :, 3] = 255
    return image


@pytest.fixture
def captures() -> dict[int, np.ndarray]:
    return {48: make_capture(48), 96: make_capture(96)}


@pytest.fixture
def assets_dir(tmp_path: Path, captures) -> Path:
    directory = tmp_path / "assets"
    directory.mkdir()
    for size, capture in captures.items():
        Image.fromarray(capture).save(directory / f"bg_{size}.png")
    return directory


@pytest.fixture
def engine(captures) -> WatermarkEngine:
    return WatermarkEngine(captures)
