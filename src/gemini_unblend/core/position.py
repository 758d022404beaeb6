from dataclasses import dataclass

from . import (
    LARGE_IMAGE_THRESHOLD,
    LARGE_MARGIN,
    LARGE_WATERMARK_SIZE,
    SMALL_MARGIN,
    SMALL_WATERMARK_SIZE,
)


@dataclass(frozen=True)
class WatermarkConfig:
    """Logo size and margins of one watermark bucket."""

    logo_size: int  # 48 or 96
    margin_right: int
    margin_bottom: int


SMALL_CONFIG = WatermarkConfig(
    logo_size=SMALL_WATERMARK_SIZE,
    margin_right=SMALL_MARGIN,
    margin_bottom=SMALL_MARGIN,
)
LARGE_CONFIG = WatermarkConfig(
    logo_size=LARGE_WATERMARK_SIZE,
    margin_right=LARGE_MARGIN,
    margin_bottom=LARGE_MARGIN,
)


@dataclass(frozen=True)
class WatermarkPosition:
    """Represents watermark position and dimensions."""

    x: int
    y: int
    width: int
    height: int

    def fits(self, image_width: int, image_height: int) -> bool:
        """Whether the rectangle lies entirely inside an image of the given size."""
        return (
            self.x >= 0
            and self.y >= 0
            and self.x + self.width <= image_width
            and self.y + self.height <= image_height
        )


@dataclass(frozen=True)
class WatermarkInfo:
    """Detected watermark geometry, for display."""

    size: int
    position: WatermarkPosition
    config: WatermarkConfig


def detect_watermark_config(image_width: int, image_height: int) -> WatermarkConfig:
    """
    Select the watermark bucket from image dimensions.

    The large 96px logo is used only when both dimensions exceed 1024px;
    every other image gets the 48px logo.
    """
    if image_width > LARGE_IMAGE_THRESHOLD and image_height > LARGE_IMAGE_THRESHOLD:
        return LARGE_CONFIG
    return SMALL_CONFIG


def calculate_watermark_position(
    image_width: int,
    image_height: int,
    config: WatermarkConfig,
) -> WatermarkPosition:
    """
    Calculate watermark position based on image dimensions.

    Watermark is positioned in the bottom-right corner, offset by the
    bucket's margins.
    """
    size = config.logo_size

    x = image_width - config.margin_right - size
    y = image_height - config.margin_bottom - size

    return WatermarkPosition(x=x, y=y, width=size, height=size)


def describe_watermark(image_width: int, image_height: int) -> WatermarkInfo:
    config = detect_watermark_config(image_width, image_height)
    position = calculate_watermark_position(image_width, image_height, config)
    return WatermarkInfo(size=config.logo_size, position=position, config=config)
