"""Image I/O and argument helpers shared by the CLI and batch runner."""

from __future__ import annotations

import base64
import logging
from pathlib import Path
from typing import Union

import cv2
import numpy as np

from .regions import Region

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Common file extensions we explicitly allow when validating paths.
SUPPORTED_IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".tiff", ".tif", ".webp"}


def load_image(path: PathLike) -> np.ndarray:
    """Load an image as an RGB ``uint8`` array.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If OpenCV fails to decode the image.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")
    if path.suffix.lower() not in SUPPORTED_IMAGE_EXTENSIONS:
        logger.warning("Attempting to load image with uncommon extension: %s", path.suffix)
    bgr = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if bgr is None:
        raise ValueError(f"Unable to decode image: {path}")
    logger.debug("Loaded image %s with shape %s", path, bgr.shape)
    return cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)


def _to_bgr(image: np.ndarray) -> np.ndarray:
    if image.ndim == 3:
        return cv2.cvtColor(np.ascontiguousarray(image), cv2.COLOR_RGB2BGR)
    return image


def save_image(path: PathLike, image: np.ndarray) -> None:
    """Write an RGB image (or a single-channel mask), creating parent directories."""
    path = Path(path)
    if image is None or image.size == 0:
        raise ValueError("Cannot save empty image.")
    path.parent.mkdir(parents=True, exist_ok=True)
    success = cv2.imwrite(str(path), _to_bgr(image))
    if not success:
        raise IOError(f"Failed to save image at {path}")
    logger.debug("Saved image to %s", path)


def encode_preview(image: np.ndarray) -> str:
    """Encode an RGB image as a ``data:image/png;base64,...`` URL for display."""
    if image is None or image.size == 0:
        raise ValueError("Cannot encode empty image.")
    success, buffer = cv2.imencode(".png", _to_bgr(image))
    if not success:
        raise ValueError("PNG encoding failed.")
    encoded = base64.b64encode(buffer.tobytes()).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def ensure_rgb_image(image: np.ndarray) -> np.ndarray:
    """Validate that ``image`` is a non-empty ``(H, W, 3)`` uint8 array."""
    if image is None or image.size == 0:
        raise ValueError("Cannot process an empty image.")
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) RGB image, got shape {image.shape}.")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected a uint8 image, got {image.dtype}.")
    return image


def parse_region(value: str) -> Region:
    """Parse ``"x,y,width,height"`` into a :class:`Region`."""
    parts = [part.strip() for part in value.split(",")]
    if len(parts) != 4:
        raise ValueError(f"Region must be 'x,y,width,height', received '{value}'")
    try:
        x, y, width, height = (int(part) for part in parts)
    except ValueError as exc:
        raise ValueError(f"Region values must be integers, received '{value}'") from exc
    if width <= 0 or height <= 0:
        raise ValueError(f"Region width and height must be positive, received '{value}'")
    return Region(x, y, width, height)


__all__ = [
    "PathLike",
    "SUPPORTED_IMAGE_EXTENSIONS",
    "encode_preview",
    "ensure_rgb_image",
    "load_image",
    "parse_region",
    "save_image",
]
