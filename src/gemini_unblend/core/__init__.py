# Calibration constants tied to the bundled reference captures
ALPHA_THRESHOLD: float = 0.002  # Skip if alpha below this
MAX_ALPHA: float = 0.99  # Clamp alpha to prevent division by near-zero
LOGO_VALUE: int = 255  # White watermark value

# Resolution thresholds
LARGE_IMAGE_THRESHOLD: int = 1024

# Watermark sizes
SMALL_WATERMARK_SIZE: int = 48
LARGE_WATERMARK_SIZE: int = 96
SMALL_MARGIN: int = 32
LARGE_MARGIN: int = 64

WATERMARK_SIZES: tuple[int, ...] = (SMALL_WATERMARK_SIZE, LARGE_WATERMARK_SIZE)
