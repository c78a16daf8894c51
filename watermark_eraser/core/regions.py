"""Rectangular watermark regions."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class Region:
    """Axis-aligned box in pixel coordinates.

    A region may extend past the image it refers to; call :meth:`clip`
    before indexing pixels with it.
    """

    x: int
    y: int
    width: int
    height: int

    @property
    def area(self) -> int:
        return max(self.width, 0) * max(self.height, 0)

    def clip(self, image_width: int, image_height: int) -> Optional["Region"]:
        """Return the part of the region inside the image, or None if empty."""
        x0 = max(self.x, 0)
        y0 = max(self.y, 0)
        x1 = min(self.x + self.width, image_width)
        y1 = min(self.y + self.height, image_height)
        if x1 <= x0 or y1 <= y0:
            return None
        return Region(x0, y0, x1 - x0, y1 - y0)

    def slices(self) -> Tuple[slice, slice]:
        """Row/column slices for numpy indexing (``image[region.slices()]``)."""
        return slice(self.y, self.y + self.height), slice(self.x, self.x + self.width)

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, int]) -> "Region":
        return cls(int(data["x"]), int(data["y"]), int(data["width"]), int(data["height"]))


def clip_regions(regions: Iterable[Region], image_width: int, image_height: int) -> List[Region]:
    """Clip every region to the image and drop the ones left empty."""
    clipped: List[Region] = []
    for region in regions:
        inside = region.clip(image_width, image_height)
        if inside is not None:
            clipped.append(inside)
    return clipped


def sort_regions(regions: Iterable[Region]) -> List[Region]:
    """Order regions top-to-bottom, then left-to-right."""
    return sorted(regions, key=lambda r: (r.y, r.x, r.height, r.width))


__all__ = ["Region", "clip_regions", "sort_regions"]
