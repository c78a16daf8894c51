"""RGB to HSV conversion used by the watermark detector."""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

HSV = Tuple[float, float, float]


def rgb_to_hsv(pixel: Sequence[int]) -> HSV:
    """Convert one RGB pixel (0-255 channels) to ``(hue, saturation, value)``.

    Hue is in degrees ``[0, 360)``; saturation and value are in ``[0, 1]``.
    """
    r = pixel[0] / 255.0
    g = pixel[1] / 255.0
    b = pixel[2] / 255.0

    max_c = max(r, g, b)
    min_c = min(r, g, b)
    delta = max_c - min_c

    if delta == 0:
        h = 0.0
    elif max_c == r:
        h = 60.0 * (((g - b) / delta) % 6.0)
    elif max_c == g:
        h = 60.0 * (((b - r) / delta) + 2.0)
    else:
        h = 60.0 * (((r - g) / delta) + 4.0)

    s = 0.0 if max_c == 0 else delta / max_c
    return h, s, max_c


def rgb_to_hsv_array(image: np.ndarray) -> np.ndarray:
    """Vectorised :func:`rgb_to_hsv` for an ``(H, W, 3)`` RGB image.

    Returns a float64 array of the same shape holding ``h, s, v`` per pixel.
    """
    rgb = image.astype(np.float64) / 255.0
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    max_c = rgb.max(axis=-1)
    min_c = rgb.min(axis=-1)
    delta = max_c - min_c
    safe_delta = np.where(delta == 0, 1.0, delta)

    # Branch order mirrors the scalar version: red wins ties, then green.
    is_red = max_c == r
    is_green = ~is_red & (max_c == g)
    hue = np.where(
        is_red,
        60.0 * np.mod((g - b) / safe_delta, 6.0),
        np.where(
            is_green,
            60.0 * ((b - r) / safe_delta + 2.0),
            60.0 * ((r - g) / safe_delta + 4.0),
        ),
    )
    hue = np.where(delta == 0, 0.0, hue)

    saturation = np.where(max_c == 0, 0.0, delta / np.where(max_c == 0, 1.0, max_c))
    return np.stack([hue, saturation, max_c], axis=-1)


__all__ = ["HSV", "rgb_to_hsv", "rgb_to_hsv_array"]
