import numpy as np
from numpy.typing import NDArray

from . import ALPHA_THRESHOLD, LOGO_VALUE, MAX_ALPHA
from .position import WatermarkPosition


def remove_watermark(
    image_array: NDArray[np.uint8],
    alpha_map: NDArray[np.float32],
    position: WatermarkPosition,
    *,
    alpha_threshold: float = ALPHA_THRESHOLD,
    max_alpha: float = MAX_ALPHA,
) -> NDArray[np.uint8]:
    """
    Remove watermark from image using reverse alpha blending.

    Formula: original = (watermarked - alpha * 255) / (1 - alpha)

    The caller guarantees the position lies inside the image; pixels outside
    it are never read or written. The image's own alpha channel is left as is.

    Args:
        image_array: Input image as numpy array (H, W, C) in RGB/RGBA format
        alpha_map: Alpha transparency map (height x width of position)
        position: Watermark position information
        alpha_threshold: Pixels with alpha below this are left untouched
        max_alpha: Upper clamp for alpha

    Returns:
        The same image array, modified in place
    """
    x, y = position.x, position.y
    w, h = position.width, position.height

    # Extract the watermark region
    region = image_array[y : y + h, x : x + w, :3].astype(np.float64)

    alpha = np.asarray(alpha_map, dtype=np.float64)
    mask = alpha >= alpha_threshold
    alpha = np.minimum(alpha, max_alpha)

    alpha_expanded = alpha[:, :, np.newaxis]  # Shape: (h, w, 1)

    # Apply reverse alpha blending formula:
    # original = (watermarked - alpha * LOGO_VALUE) / (1 - alpha)
    restored = (region - alpha_expanded * LOGO_VALUE) / (1.0 - alpha_expanded)

    # Round half up, then clamp to valid range
    restored = np.clip(np.floor(restored + 0.5), 0, 255)

    # Apply mask: only update pixels with significant alpha
    result = np.where(mask[:, :, np.newaxis], restored, region)

    image_array[y : y + h, x : x + w, :3] = result.astype(np.uint8)

    return image_array
