"""Confidence-weighted diffusion inpainting.

The unknown area is repaired from the outside in ("onion peel"): every
iteration fills only the masked pixels that touch a known pixel, using a
Gaussian-weighted average of the known pixels in a small window. Each pixel
also carries a confidence value so that synthesized pixels count for less
than original ones when they later act as donors.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 500
WINDOW_RADIUS = 2
SIGMA = 1.5
CONFIDENCE_DECAY = 0.98

_NEIGHBOUR_KERNEL = np.ones((3, 3), dtype=np.uint8)
_TRUNCATE_EPSILON = 1e-9


class InpaintMethod(str, Enum):
    """Fill strategies accepted by the inpainter.

    Only ``GAUSSIAN`` has an algorithm of its own; ``SIMPLE`` is accepted for
    compatibility and runs the Gaussian diffusion.
    """

    SIMPLE = "simple"
    GAUSSIAN = "gaussian"

    @classmethod
    def from_name(cls, name: Union[str, "InpaintMethod"]) -> "InpaintMethod":
        if isinstance(name, InpaintMethod):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError as exc:
            raise ValueError(f"Unsupported inpainting method: {name}") from exc


@dataclass
class InpaintResult:
    image: np.ndarray
    mask: np.ndarray
    confidence: np.ndarray
    iterations: int

    @property
    def complete(self) -> bool:
        """True when every originally masked pixel was repaired."""
        return not np.any(self.mask)


class ConfidenceDiffusionInpainter:
    """Fill masked pixels by boundary-advancing, confidence-weighted diffusion."""

    def __init__(
        self,
        method: Union[str, InpaintMethod] = InpaintMethod.GAUSSIAN,
        *,
        max_iterations: int = MAX_ITERATIONS,
        radius: int = WINDOW_RADIUS,
        sigma: float = SIGMA,
        decay: float = CONFIDENCE_DECAY,
    ) -> None:
        if max_iterations <= 0:
            raise ValueError("max_iterations must be a positive integer.")
        if radius <= 0:
            raise ValueError("radius must be a positive integer.")
        if sigma <= 0:
            raise ValueError("sigma must be positive.")
        if not 0.0 < decay <= 1.0:
            raise ValueError("decay must be in (0, 1].")
        self.method = InpaintMethod.from_name(method)
        self.max_iterations = int(max_iterations)
        self.radius = int(radius)
        self.sigma = float(sigma)
        self.decay = float(decay)
        self._kernel = self._distance_kernel()

    def _distance_kernel(self) -> np.ndarray:
        offsets = np.arange(-self.radius, self.radius + 1, dtype=np.float64)
        dy, dx = np.meshgrid(offsets, offsets, indexing="ij")
        kernel = np.exp(-(dx * dx + dy * dy) / (2.0 * self.sigma * self.sigma))
        kernel[self.radius, self.radius] = 0.0
        return kernel

    def inpaint(self, image: np.ndarray, mask: np.ndarray) -> InpaintResult:
        """Repair the non-zero pixels of ``mask`` in a copy of ``image``.

        Returns the repaired image, the mask of pixels still unrepaired when
        the loop stopped, the final confidence map and the iteration count.
        """
        if mask.shape != image.shape[:2]:
            raise ValueError(
                f"Mask shape {mask.shape} does not match image shape {image.shape[:2]}."
            )
        if self.method is InpaintMethod.SIMPLE:
            logger.warning("Inpaint method 'simple' has no dedicated algorithm; using gaussian.")

        result = image.copy()
        unknown = mask > 0
        confidence = np.where(unknown, 0.0, 1.0)

        iterations = 0
        if unknown.any():
            rows, cols = self._working_window(unknown)
            # Views: per-iteration commits write straight into the full arrays.
            work_image = result[rows, cols]
            work_unknown = unknown[rows, cols]
            work_confidence = confidence[rows, cols]
            while iterations < self.max_iterations:
                if not self._iterate(work_image, work_unknown, work_confidence):
                    break
                iterations += 1

        remaining = np.where(unknown, 255, 0).astype(np.uint8)
        logger.debug(
            "Inpainting finished after %d iteration(s); %d pixel(s) left unrepaired.",
            iterations,
            int(np.count_nonzero(remaining)),
        )
        return InpaintResult(result, remaining, confidence, iterations)

    def _working_window(self, unknown: np.ndarray) -> Tuple[slice, slice]:
        """Bounding box of the unknown pixels grown by the window radius."""
        ys, xs = np.nonzero(unknown)
        height, width = unknown.shape
        margin = self.radius
        return (
            slice(max(int(ys.min()) - margin, 0), min(int(ys.max()) + margin + 1, height)),
            slice(max(int(xs.min()) - margin, 0), min(int(xs.max()) + margin + 1, width)),
        )

    def _iterate(self, image: np.ndarray, unknown: np.ndarray, confidence: np.ndarray) -> int:
        """Run one peel; returns the number of pixels repaired (0 means stop).

        All values are computed from the state at entry and committed at the
        end, so pixels filled in this pass never donate to each other.
        """
        known = ~unknown
        has_known_neighbour = cv2.dilate(known.astype(np.uint8), _NEIGHBOUR_KERNEL) > 0
        boundary = unknown & has_known_neighbour
        if not boundary.any():
            return 0

        known_f = known.astype(np.float64)
        donor_weight = confidence * known_f
        distance_sum = self._correlate(known_f)
        weight_sum = self._correlate(donor_weight)
        channel_sums = self._correlate(image.astype(np.float64) * donor_weight[..., None])

        ys, xs = np.nonzero(boundary)
        weights = weight_sum[ys, xs]
        distances = distance_sum[ys, xs]
        has_weight = weights > 0

        colors = image[ys, xs].copy()
        averaged = channel_sums[ys, xs] / np.where(has_weight, weights, 1.0)[:, None]
        # Truncate like an integer cast; the epsilon keeps exact averages such as 128 from becoming 127.
        truncated = np.floor(np.clip(averaged[has_weight], 0, 255) + _TRUNCATE_EPSILON)
        colors[has_weight] = np.minimum(truncated, 255).astype(np.uint8)

        new_confidence = np.where(
            distances > 0,
            weights / np.where(distances > 0, distances, 1.0) * self.decay,
            0.0,
        )

        image[ys, xs] = colors
        unknown[ys, xs] = False
        confidence[ys, xs] = new_confidence
        return int(ys.size)

    def _correlate(self, values: np.ndarray) -> np.ndarray:
        """Sum ``values`` over each pixel's window, weighted by distance; outside the image counts as 0."""
        return cv2.filter2D(values, cv2.CV_64F, self._kernel, borderType=cv2.BORDER_CONSTANT)


__all__ = [
    "CONFIDENCE_DECAY",
    "ConfidenceDiffusionInpainter",
    "InpaintMethod",
    "InpaintResult",
    "MAX_ITERATIONS",
    "SIGMA",
    "WINDOW_RADIUS",
]
