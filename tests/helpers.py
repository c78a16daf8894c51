from __future__ import annotations

from typing import Tuple

import cv2
import numpy as np

from watermark_eraser.core import Region


def create_synthetic_sample(
    width: int = 160,
    height: int = 100,
    *,
    text: str = "WM",
    thickness: int = 4,
    background: int = 90,
) -> Tuple[np.ndarray, np.ndarray]:
    """Create a flat RGB background and a copy with white text overlaid."""
    base = np.full((height, width, 3), background, dtype=np.uint8)
    watermarked = base.copy()
    cv2.putText(
        watermarked,
        text,
        (10, height - 20),
        cv2.FONT_HERSHEY_SIMPLEX,
        2.0,
        (255, 255, 255),
        thickness,
        cv2.LINE_AA,
    )
    return base, watermarked


def watermark_bounds(base: np.ndarray, watermarked: np.ndarray, padding: int = 2) -> Region:
    """Bounding box of every pixel the overlay changed, grown by ``padding``."""
    ys, xs = np.nonzero(np.any(base != watermarked, axis=-1))
    x0 = max(int(xs.min()) - padding, 0)
    y0 = max(int(ys.min()) - padding, 0)
    x1 = min(int(xs.max()) + padding + 1, base.shape[1])
    y1 = min(int(ys.max()) + padding + 1, base.shape[0])
    return Region(x0, y0, x1 - x0, y1 - y0)


def white_square_image(size: int = 10) -> np.ndarray:
    """Black image with a 4x4 white square at rows/cols 2-5."""
    image = np.zeros((size, size, 3), dtype=np.uint8)
    image[2:6, 2:6] = 255
    return image
