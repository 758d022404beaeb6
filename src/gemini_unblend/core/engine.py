"""Watermark engine: geometry detection, cached alpha maps and removal."""

import logging
import threading
from collections.abc import Mapping
from pathlib import Path

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from ..assets import get_asset_path, reference_capture_name
from ..exceptions import AssetLoadError, ImageTooSmallError
from . import ALPHA_THRESHOLD, MAX_ALPHA, WATERMARK_SIZES
from .alpha_map import calculate_alpha_map, load_reference_capture
from .blend import remove_watermark
from .position import (
    WatermarkConfig,
    WatermarkInfo,
    WatermarkPosition,
    calculate_watermark_position,
    describe_watermark,
    detect_watermark_config,
)

logger = logging.getLogger(__name__)


class WatermarkEngine:
    """
    Removes the corner watermark from pixel buffers.

    Holds one reference capture per watermark size and derives the matching
    alpha map on first use. Alpha maps are cached for the lifetime of the
    engine and are never rebuilt.
    """

    def __init__(
        self,
        captures: Mapping[int, NDArray[np.uint8]],
        *,
        alpha_threshold: float = ALPHA_THRESHOLD,
        max_alpha: float = MAX_ALPHA,
    ):
        """
        Initialize engine from decoded reference captures.

        Args:
            captures: Reference capture per watermark size (48 and 96)
            alpha_threshold: Alpha below which pixels are left untouched
            max_alpha: Upper clamp for alpha during inverse blending

        Raises:
            AssetLoadError: If a capture is missing or has the wrong shape
            ValueError: If alpha_threshold is negative or max_alpha is not in (0, 1)
        """
        if not alpha_threshold >= 0:
            raise ValueError(f"alpha_threshold must be >= 0, got {alpha_threshold}")
        if not 0 < max_alpha < 1:
            raise ValueError(f"max_alpha must be between 0 and 1 exclusive, got {max_alpha}")

        self._captures: dict[int, NDArray[np.uint8]] = {}
        for size in WATERMARK_SIZES:
            capture = captures.get(size)
            if capture is None:
                raise AssetLoadError(f"Missing reference capture for {size}px watermark")
            capture = np.asarray(capture)
            if capture.shape[:2] != (size, size):
                raise AssetLoadError(
                    f"Reference capture for {size}px watermark has shape {capture.shape}"
                )
            self._captures[size] = capture

        self.alpha_threshold = alpha_threshold
        self.max_alpha = max_alpha

        self._alpha_maps: dict[int, NDArray[np.float32]] = {}
        self._lock = threading.Lock()

    @classmethod
    def create(cls, assets_dir: Path | None = None, **options) -> "WatermarkEngine":
        """
        Load both reference captures and return a ready engine.

        Args:
            assets_dir: Directory holding bg_48.png and bg_96.png. Defaults to
                the captures bundled with the package.
            **options: Passed to the constructor (alpha_threshold, max_alpha)
        """
        captures = {}
        for size in WATERMARK_SIZES:
            asset = get_asset_path(reference_capture_name(size), assets_dir)
            try:
                with asset.open("rb") as f:
                    captures[size] = load_reference_capture(f)
            except OSError as e:
                raise AssetLoadError(f"Cannot open reference capture {asset}: {e}") from e

        logger.info("Loaded reference captures from %s", assets_dir or "bundled assets")
        return cls(captures, **options)

    def detect(self, image_width: int, image_height: int) -> WatermarkConfig:
        return detect_watermark_config(image_width, image_height)

    def locate(
        self,
        image_width: int,
        image_height: int,
        config: WatermarkConfig,
    ) -> WatermarkPosition:
        return calculate_watermark_position(image_width, image_height, config)

    def describe(self, image_width: int, image_height: int) -> WatermarkInfo:
        """Watermark size and rectangle for an image, without touching pixels."""
        return describe_watermark(image_width, image_height)

    def get_alpha_map(self, size: int) -> NDArray[np.float32]:
        """Get cached alpha map or derive it from the reference capture."""
        alpha_map = self._alpha_maps.get(size)
        if alpha_map is not None:
            return alpha_map

        if size not in self._captures:
            raise ValueError(f"No reference capture for {size}px watermark")

        with self._lock:
            if size not in self._alpha_maps:
                logger.debug("Building %dpx alpha map", size)
                self._alpha_maps[size] = calculate_alpha_map(self._captures[size])
            return self._alpha_maps[size]

    def remove_watermark(self, image_array: NDArray[np.uint8]) -> NDArray[np.uint8]:
        """
        Remove the watermark from a copy of an image.

        Args:
            image_array: Pixel buffer (H, W, 4) RGBA or (H, W, 3) RGB

        Returns:
            New array with the watermark region restored. The input is
            never modified.

        Raises:
            ImageTooSmallError: If the watermark rectangle does not fit
        """
        result = np.array(image_array, dtype=np.uint8, copy=True)
        height, width = result.shape[:2]

        config = self.detect(width, height)
        position = self.locate(width, height, config)
        if not position.fits(width, height):
            raise ImageTooSmallError(width, height, position)

        alpha_map = self.get_alpha_map(config.logo_size)

        return remove_watermark(
            result,
            alpha_map,
            position,
            alpha_threshold=self.alpha_threshold,
            max_alpha=self.max_alpha,
        )

    def remove_watermark_from_image(self, image: Image.Image) -> Image.Image:
        """Remove the watermark from a Pillow image, returning a new RGBA image."""
        image_array = np.array(image.convert("RGBA"), dtype=np.uint8)
        return Image.fromarray(self.remove_watermark(image_array))
