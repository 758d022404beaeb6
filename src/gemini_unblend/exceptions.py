class WatermarkError(Exception):
    """Base class for all errors raised by gemini_unblend."""


class AssetLoadError(WatermarkError):
    """A reference capture could not be loaded or has the wrong shape."""


class ImageTooSmallError(WatermarkError, ValueError):
    """The watermark rectangle does not fit inside the image."""

    def __init__(self, width: int, height: int, position) -> None:
        self.width = width
        self.height = height
        self.position = position
        super().__init__(
            f"Image {width}x{height} is too small for a {position.width}x{position.height} "
            f"watermark at ({position.x}, {position.y})"
        )


class UnsupportedImageError(WatermarkError, ValueError):
    """Input file is not an accepted image (format or size)."""


class OutputConflictError(WatermarkError):
    """Two batch items would be written to the same output file."""
