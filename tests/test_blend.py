import numpy as np
import pytest

from gemini_unblend.core.blend import remove_watermark
from gemini_unblend.core.position import WatermarkPosition


def forward_blend(original: np.ndarray, alpha: np.ndarray) -> np.ndarray:
    """Composite a white logo over original with the given alpha."""
    a = alpha.astype(np.float64)[:, :, np.newaxis]
    blended = a * 255 + (1 - a) * original.astype(np.float64)
    return np.floor(blended + 0.5).astype(np.uint8)


def uniform_alpha(value: float, size: int = 4) -> np.ndarray:
    return np.full((size, size), value, dtype=np.float32)


@pytest.mark.parametrize("alpha_value", [0.002, 0.01, 0.1, 0.25, 0.4, 0.5, 0.6])
def test_inverse_blend_recovers_original(alpha_value):
    rng = np.random.default_rng(1)
    original = rng.integers(0, 256, size=(4, 4, 3), dtype=np.uint8)
    alpha = uniform_alpha(alpha_value)
    image = forward_blend(original, alpha)

    remove_watermark(image, alpha, WatermarkPosition(x=0, y=0, width=4, height=4))

    diff = np.abs(image.astype(int) - original.astype(int))
    assert diff.max() <= 1


@pytest.mark.parametrize("alpha_value", [0.7, 0.8, 0.9, 0.95])
def test_inverse_blend_error_bounded_by_rounding(alpha_value):
    rng = np.random.default_rng(2)
    original = rng.integers(0, 256, size=(4, 4, 3), dtype=np.uint8)
    alpha = uniform_alpha(alpha_value)
    image = forward_blend(original, alpha)

    remove_watermark(image, alpha, WatermarkPosition(x=0, y=0, width=4, height=4))

    # One 8-bit rounding step is amplified by 1 / (1 - alpha)
    bound = 0.5 / (1 - alpha_value) + 0.5
    diff = np.abs(image.astype(int) - original.astype(int))
    assert diff.max() <= bound


def test_exact_values():
    image = np.array([[[200, 128, 255, 77]]], dtype=np.uint8)
    alpha = np.array([[0.5]], dtype=np.float32)

    remove_watermark(image, alpha, WatermarkPosition(x=0, y=0, width=1, height=1))

    # (200 - 127.5) / 0.5 = 145, (128 - 127.5) / 0.5 = 1, 255 -> 255
    assert image[0, 0].tolist() == [145, 1, 255, 77]


def test_rounds_half_up():
    image = np.array([[[128, 0, 0]]], dtype=np.uint8)
    alpha = np.array([[0.2]], dtype=np.float32)

    remove_watermark(image, alpha, WatermarkPosition(x=0, y=0, width=1, height=1))

    a = float(np.float32(0.2))
    expected = np.floor((128 - a * 255) / (1 - a) + 0.5)
    assert image[0, 0, 0] == expected


def test_below_threshold_is_untouched():
    image = np.full((4, 4, 4), 180, dtype=np.uint8)
    alpha = uniform_alpha(0.0019)

    remove_watermark(image, alpha, WatermarkPosition(x=0, y=0, width=4, height=4))

    assert (image == 180).all()


def test_custom_threshold():
    image = np.full((2, 2, 3), 180, dtype=np.uint8)
    alpha = uniform_alpha(0.05, size=2)

    remove_watermark(
        image,
        alpha,
        WatermarkPosition(x=0, y=0, width=2, height=2),
        alpha_threshold=0.1,
    )

    assert (image == 180).all()


@pytest.mark.parametrize("alpha_value", [0.99, 0.995, 1.0])
def test_full_alpha_is_clamped(alpha_value):
    image = np.array([[[255, 250, 0]]], dtype=np.uint8)
    alpha = np.array([[alpha_value]], dtype=np.float32)

    with np.errstate(all="raise"):
        remove_watermark(image, alpha, WatermarkPosition(x=0, y=0, width=1, height=1))

    # Clamped to 0.99: (255 - 252.45) / 0.01 = 255, (250 - 252.45) / 0.01 < 0
    assert image[0, 0].tolist() == [255, 0, 0]


def test_only_rectangle_is_modified():
    image = np.full((10, 12, 4), 200, dtype=np.uint8)
    before = image.copy()
    position = WatermarkPosition(x=5, y=3, width=4, height=4)

    remove_watermark(image, uniform_alpha(0.3), position)

    changed = (image != before).any(axis=2)
    rows, cols = np.nonzero(changed)
    assert changed.any()
    assert rows.min() >= 3 and rows.max() < 7
    assert cols.min() >= 5 and cols.max() < 9


def test_image_alpha_channel_is_untouched():
    image = np.full((4, 4, 4), 200, dtype=np.uint8)
    image[:, :, 3] = np.arange(16, dtype=np.uint8).reshape(4, 4)
    before = image[:, :, 3].copy()

    remove_watermark(image, uniform_alpha(0.5), WatermarkPosition(x=0, y=0, width=4, height=4))

    np.testing.assert_array_equal(image[:, :, 3], before)


def test_modifies_in_place_and_returns_same_array():
    image = np.full((4, 4, 3), 200, dtype=np.uint8)
    result = remove_watermark(image, uniform_alpha(0.5), WatermarkPosition(0, 0, 4, 4))
    assert result is image


def test_is_deterministic():
    rng = np.random.default_rng(3)
    image = rng.integers(0, 256, size=(8, 8, 4), dtype=np.uint8)
    alpha = rng.random((8, 8), dtype=np.float32)
    position = WatermarkPosition(x=0, y=0, width=8, height=8)

    first = remove_watermark(image.copy(), alpha, position)
    second = remove_watermark(image.copy(), alpha, position)

    np.testing.assert_array_equal(first, second)
