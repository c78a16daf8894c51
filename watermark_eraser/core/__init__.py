"""Core processing package for watermark-eraser."""

from . import utils
from .batch_manager import BatchItem, BatchResult, BatchWatermarkProcessor
from .color import rgb_to_hsv, rgb_to_hsv_array
from .detector import WatermarkDetector, detect_regions
from .image_remover import ImageWatermarkRemover
from .inpaint import ConfidenceDiffusionInpainter, InpaintMethod, InpaintResult
from .regions import Region
from .smart_mask import create_smart_mask

__all__ = [
    "BatchItem",
    "BatchResult",
    "BatchWatermarkProcessor",
    "ConfidenceDiffusionInpainter",
    "ImageWatermarkRemover",
    "InpaintMethod",
    "InpaintResult",
    "Region",
    "WatermarkDetector",
    "create_smart_mask",
    "detect_regions",
    "rgb_to_hsv",
    "rgb_to_hsv_array",
    "utils",
]
