"""Watermark region proposals from color thresholds and Canny edges."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping

import cv2
import numpy as np

from .color import rgb_to_hsv_array
from .regions import Region, sort_regions

logger = logging.getLogger(__name__)

CANNY_LOW = 50.0
CANNY_HIGH = 150.0
CANNY_SIGMA = 1.4
DILATE_RADIUS = 3
MIN_AREA_FRACTION = 0.001


class WatermarkDetector:
    """Propose bounding boxes that likely contain an overlaid watermark.

    Pixels are flagged when they fall inside the configured HSV window or lie
    on a Canny edge. The union is dilated so letter strokes merge into one
    blob, and each 8-connected blob large enough relative to the image becomes
    a :class:`Region`.
    """

    def __init__(
        self,
        sensitivity: float = 1.0,
        hue_min: float = 0.0,
        hue_max: float = 360.0,
        sat_min: float = 0.0,
        val_min: float = 0.85,
    ) -> None:
        if sensitivity <= 0:
            raise ValueError("sensitivity must be greater than zero.")
        self.sensitivity = float(sensitivity)
        self.hue_min = float(hue_min)
        self.hue_max = float(hue_max)
        self.sat_min = float(sat_min)
        self.val_min = float(val_min)
        logger.debug(
            "Initialized WatermarkDetector (sensitivity=%s, hue=[%s, %s], sat_min=%s, val_min=%s)",
            self.sensitivity,
            self.hue_min,
            self.hue_max,
            self.sat_min,
            self.val_min,
        )

    def detect(self, image: np.ndarray) -> List[Region]:
        """Return candidate watermark regions sorted by top-left corner."""
        image = np.ascontiguousarray(image)
        height, width = image.shape[:2]
        gray = cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)

        combined = cv2.bitwise_or(self.color_mask(image), self.edge_mask(gray))
        kernel_size = 2 * DILATE_RADIUS + 1
        dilated = cv2.dilate(combined, np.ones((kernel_size, kernel_size), dtype=np.uint8))

        regions = self.find_regions(dilated, width, height)
        logger.debug("Detected %d candidate region(s) in %dx%d image.", len(regions), width, height)
        return regions

    def color_mask(self, image: np.ndarray) -> np.ndarray:
        """Mark pixels whose HSV values fall inside the configured (inclusive) window."""
        hsv = rgb_to_hsv_array(image)
        hue, sat, val = hsv[..., 0], hsv[..., 1], hsv[..., 2]
        selected = (
            (hue >= self.hue_min)
            & (hue <= self.hue_max)
            & (sat >= self.sat_min)
            & (val >= self.val_min)
        )
        return np.where(selected, 255, 0).astype(np.uint8)

    def edge_mask(self, gray: np.ndarray) -> np.ndarray:
        """Canny edges on a Gaussian-smoothed copy, using the L2 gradient norm."""
        blurred = cv2.GaussianBlur(gray, (0, 0), CANNY_SIGMA)
        return cv2.Canny(
            blurred,
            CANNY_LOW * self.sensitivity,
            CANNY_HIGH * self.sensitivity,
            L2gradient=True,
        )

    def find_regions(self, mask: np.ndarray, image_width: int, image_height: int) -> List[Region]:
        """Bounding boxes of the 8-connected components in ``mask`` that pass the area filter."""
        count, _, stats, _ = cv2.connectedComponentsWithStats(
            (mask > 0).astype(np.uint8), connectivity=8
        )
        min_area = image_width * image_height * MIN_AREA_FRACTION * self.sensitivity

        regions = []
        # Label 0 is the background.
        for label in range(1, count):
            x, y, w, h = (int(v) for v in stats[label, :4])
            if w * h >= min_area:
                regions.append(Region(x, y, w, h))
            else:
                logger.debug("Dropped component %d (%dx%d) below min area %.1f", label, w, h, min_area)
        return sort_regions(regions)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "WatermarkDetector":
        settings = dict(config.get("detection", {}))
        return cls(
            sensitivity=float(settings.get("sensitivity", 1.0)),
            hue_min=float(settings.get("hue_min", 0.0)),
            hue_max=float(settings.get("hue_max", 360.0)),
            sat_min=float(settings.get("sat_min", 0.0)),
            val_min=float(settings.get("val_min", 0.85)),
        )


def detect_regions(
    image: np.ndarray,
    sensitivity: float = 1.0,
    hue_min: float = 0.0,
    hue_max: float = 360.0,
    sat_min: float = 0.0,
    val_min: float = 0.85,
) -> List[Region]:
    """Functional shortcut for :meth:`WatermarkDetector.detect`."""
    detector = WatermarkDetector(sensitivity, hue_min, hue_max, sat_min, val_min)
    return detector.detect(image)


__all__ = ["WatermarkDetector", "detect_regions"]
