import logging
from pathlib import Path

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from ..core.engine import WatermarkEngine
from ..exceptions import UnsupportedImageError

logger = logging.getLogger(__name__)

SUPPORTED_IMAGE_FORMATS = {".png", ".jpg", ".jpeg", ".webp", ".bmp", ".tiff"}
MAX_FILE_SIZE: int = 20 * 1024 * 1024  # 20 MiB


def is_supported_image(path: Path) -> bool:
    """Check if file is a supported image format."""
    return path.suffix.lower() in SUPPORTED_IMAGE_FORMATS


def validate_image_file(path: Path) -> None:
    """Reject files with an unsupported suffix or over MAX_FILE_SIZE."""
    if not is_supported_image(path):
        raise UnsupportedImageError(f"Unsupported image format: {path.suffix or path.name}")
    size = path.stat().st_size
    if size > MAX_FILE_SIZE:
        raise UnsupportedImageError(
            f"{path.name} is {size} bytes, larger than the {MAX_FILE_SIZE} byte limit"
        )


def load_image(input_path: Path) -> NDArray[np.uint8]:
    """Decode an image file into an RGBA pixel buffer (H, W, 4)."""
    with Image.open(input_path) as img:
        # Convert to RGBA (handles RGB, palette, grayscale, etc.)
        if img.mode != "RGBA":
            img = img.convert("RGBA")
        return np.array(img, dtype=np.uint8)


def save_image(image_array: NDArray[np.uint8], output_path: Path) -> Path:
    """Encode a pixel buffer as PNG."""
    Image.fromarray(image_array).save(output_path, format="PNG")
    return output_path


def default_output_path(input_path: Path, suffix: str = "_output") -> Path:
    return input_path.parent / f"{input_path.stem}{suffix}.png"


def process_image(
    input_path: Path,
    output_path: Path | None = None,
    suffix: str = "_output",
    engine: WatermarkEngine | None = None,
) -> Path:
    """
    Process a single image to remove watermark.

    Args:
        input_path: Path to input image
        output_path: Optional explicit output path. If None, uses input name with suffix.
        suffix: Suffix to add to filename if output_path not specified
        engine: Engine to use. If None, one is created from the bundled assets.

    Returns:
        Path to the output file
    """
    validate_image_file(input_path)

    if output_path is None:
        output_path = default_output_path(input_path, suffix)

    if engine is None:
        engine = WatermarkEngine.create()

    image_array = load_image(input_path)
    height, width = image_array.shape[:2]
    info = engine.describe(width, height)
    logger.debug(
        "%s: %dx%d, %dpx watermark at (%d, %d)",
        input_path.name,
        width,
        height,
        info.size,
        info.position.x,
        info.position.y,
    )

    result_array = engine.remove_watermark(image_array)

    return save_image(result_array, output_path)
