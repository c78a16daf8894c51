"""Image watermark removal: smart masking plus confidence diffusion."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from . import utils
from .detector import WatermarkDetector
from .inpaint import MAX_ITERATIONS, ConfidenceDiffusionInpainter, InpaintMethod, InpaintResult
from .regions import Region
from .smart_mask import LUMA_THRESHOLD, MASK_DILATE_RADIUS, create_smart_mask

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ImageWatermarkRemover:
    """High-level helper for removing watermarks from still images."""

    def __init__(
        self,
        method: Union[str, InpaintMethod] = InpaintMethod.GAUSSIAN,
        max_iterations: int = MAX_ITERATIONS,
        *,
        luma_threshold: int = LUMA_THRESHOLD,
        mask_dilate_radius: int = MASK_DILATE_RADIUS,
        detector: Optional[WatermarkDetector] = None,
    ) -> None:
        if luma_threshold < 0:
            raise ValueError("luma_threshold must not be negative.")
        if mask_dilate_radius < 0:
            raise ValueError("mask_dilate_radius must not be negative.")
        self.inpainter = ConfidenceDiffusionInpainter(method, max_iterations=max_iterations)
        self.luma_threshold = int(luma_threshold)
        self.mask_dilate_radius = int(mask_dilate_radius)
        self.detector = detector or WatermarkDetector()
        logger.debug(
            "Initialized ImageWatermarkRemover (method=%s, max_iterations=%s, luma_threshold=%s)",
            self.method.value,
            self.max_iterations,
            self.luma_threshold,
        )

    @property
    def method(self) -> InpaintMethod:
        return self.inpainter.method

    @property
    def max_iterations(self) -> int:
        return self.inpainter.max_iterations

    def detect(self, image: np.ndarray) -> List[Region]:
        """Propose watermark regions with the configured detector."""
        return self.detector.detect(utils.ensure_rgb_image(image))

    def create_mask(self, image: np.ndarray, regions: Sequence[Region]) -> np.ndarray:
        return create_smart_mask(
            image,
            regions,
            threshold=self.luma_threshold,
            dilate_radius=self.mask_dilate_radius,
        )

    def inpaint(self, image: np.ndarray, regions: Sequence[Region]) -> InpaintResult:
        """Mask and repair ``regions``, keeping the confidence map and iteration count."""
        image = utils.ensure_rgb_image(image)
        mask = self.create_mask(image, regions)
        if not mask.any():
            logger.debug("Smart mask is empty; returning image unchanged.")
        return self.inpainter.inpaint(image, mask)

    def remove(self, image: np.ndarray, regions: Sequence[Region]) -> np.ndarray:
        """Return a copy of ``image`` with the watermark inside ``regions`` removed."""
        return self.inpaint(image, regions).image

    def remove_watermark(
        self,
        image: np.ndarray,
        *,
        regions: Optional[Sequence[Region]] = None,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Remove a watermark from an RGB image array.

        Args:
            image: Input RGB image.
            regions: Boxes to clean. When None the detector proposes them.

        Returns:
            Tuple of (result_image, mask_used).
        """
        image = utils.ensure_rgb_image(image)
        if regions is None:
            logger.info("No regions supplied; attempting automatic watermark detection.")
            regions = self.detect(image)
            logger.info("Detected %d watermark region(s).", len(regions))
        mask = self.create_mask(image, regions)
        outcome = self.inpainter.inpaint(image, mask)
        if not outcome.complete:
            logger.warning(
                "Iteration budget (%s) exhausted with %d pixel(s) unrepaired.",
                self.max_iterations,
                int(np.count_nonzero(outcome.mask)),
            )
        logger.debug("Inpainted %d pixel(s) in %d iteration(s).", int(np.count_nonzero(mask)), outcome.iterations)
        return outcome.image, mask

    def process_file(
        self,
        input_path: PathLike,
        output_path: PathLike,
        *,
        regions: Optional[Sequence[Region]] = None,
    ) -> Tuple[Path, Path]:
        """Remove watermark from a file and store the result next to its mask."""
        image = utils.load_image(input_path)
        logger.info("Processing image %s", input_path)
        result, mask_used = self.remove_watermark(image, regions=regions)
        utils.save_image(output_path, result)
        mask_output_path = Path(output_path).with_suffix(".mask.png")
        utils.save_image(mask_output_path, mask_used)
        return Path(output_path), mask_output_path

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "ImageWatermarkRemover":
        settings = dict(config.get("image_processing", {}))
        return cls(
            method=settings.get("inpaint_method", InpaintMethod.GAUSSIAN.value),
            max_iterations=int(settings.get("max_iterations", MAX_ITERATIONS)),
            luma_threshold=int(settings.get("luma_threshold", LUMA_THRESHOLD)),
            mask_dilate_radius=int(settings.get("mask_dilate_radius", MASK_DILATE_RADIUS)),
            detector=WatermarkDetector.from_config(config),
        )


__all__ = ["ImageWatermarkRemover"]
