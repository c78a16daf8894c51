"""Batch processing helpers for watermark removal."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from .image_remover import ImageWatermarkRemover
from .regions import Region

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class BatchItem:
    input_path: PathLike
    output_path: PathLike
    regions: Optional[Sequence[Region]] = None


@dataclass
class BatchResult:
    success: bool
    input_path: Path
    output_path: Optional[Path] = None
    mask_path: Optional[Path] = None
    regions: Optional[List[Region]] = None
    error: Optional[str] = None


class BatchWatermarkProcessor:
    """Run watermark removal over many images, reporting failures as results."""

    def __init__(
        self,
        remover: Optional[ImageWatermarkRemover] = None,
        *,
        config: Optional[Mapping[str, Any]] = None,
    ) -> None:
        config_map = dict(config or {})
        batch_settings = dict(config_map.get("batch", {}))
        self.halt_on_error = bool(batch_settings.get("halt_on_error", False))
        self.max_workers = int(batch_settings.get("max_workers", 1))

        if remover is None:
            remover = (
                ImageWatermarkRemover.from_config(config_map)
                if config_map
                else ImageWatermarkRemover()
            )
        self.remover = remover

    def _execute_item(self, item: BatchItem) -> BatchResult:
        input_path = Path(item.input_path)
        logger.info("Batch processing %s", input_path)
        try:
            regions = list(item.regions) if item.regions is not None else None
            output_path, mask_path = self.remover.process_file(
                input_path, item.output_path, regions=regions
            )
        except Exception as exc:
            logger.exception("Failed to process %s: %s", input_path, exc)
            return BatchResult(success=False, input_path=input_path, error=str(exc))
        return BatchResult(
            success=True,
            input_path=input_path,
            output_path=output_path,
            mask_path=mask_path,
            regions=regions,
        )

    def process(self, items: Iterable[BatchItem]) -> List[BatchResult]:
        """Process ``items``; results come back in the same order as the input."""
        item_list = list(items)
        if not item_list:
            return []

        if self.max_workers <= 1 or self.halt_on_error:
            results: List[BatchResult] = []
            for item in item_list:
                result = self._execute_item(item)
                results.append(result)
                if self.halt_on_error and not result.success:
                    break
            return results

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return list(executor.map(self._execute_item, item_list))


__all__ = ["BatchItem", "BatchResult", "BatchWatermarkProcessor"]
