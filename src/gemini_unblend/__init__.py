from .core.engine import WatermarkEngine
from .core.position import WatermarkConfig, WatermarkInfo, WatermarkPosition
from .exceptions import AssetLoadError, ImageTooSmallError, UnsupportedImageError, WatermarkError

__version__ = "0.1.0"

__all__ = [
    "WatermarkEngine",
    "WatermarkConfig",
    "WatermarkInfo",
    "WatermarkPosition",
    "WatermarkError",
    "AssetLoadError",
    "ImageTooSmallError",
    "UnsupportedImageError",
]
