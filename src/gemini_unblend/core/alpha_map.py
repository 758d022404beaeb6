from pathlib import Path
from typing import BinaryIO

import numpy as np
from numpy.typing import NDArray
from PIL import Image, UnidentifiedImageError

from ..exceptions import AssetLoadError


def load_reference_capture(source: Path | BinaryIO) -> NDArray[np.uint8]:
    """
    Decode a reference capture into an RGBA pixel buffer.

    Args:
        source: PNG path or binary file object

    Returns:
        Uint8 numpy array (size, size, 4)
    """
    try:
        with Image.open(source) as img:
            return np.array(img.convert("RGBA"), dtype=np.uint8)
    except (OSError, UnidentifiedImageError) as e:
        raise AssetLoadError(f"Cannot load reference capture {source}: {e}") from e


def calculate_alpha_map(capture: NDArray[np.uint8]) -> NDArray[np.float32]:
    """
    Calculate alpha map from a reference capture.

    The capture shows the logo blended over a flat background, so the
    brightest channel of each pixel encodes the blend alpha directly.

    Args:
        capture: Pixel buffer (size, size, C) with C >= 3, or (size, size)

    Returns:
        Float32 numpy array of alpha values (0.0 to 1.0)
    """
    img_array = np.asarray(capture, dtype=np.float32)

    # Calculate alpha as max(R, G, B) / 255.0
    if img_array.ndim == 3:
        alpha_map = np.max(img_array[:, :, :3], axis=2) / 255.0
    else:
        alpha_map = img_array / 255.0

    alpha_map = alpha_map.astype(np.float32)
    alpha_map.flags.writeable = False
    return alpha_map
