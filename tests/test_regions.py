import unittest

from watermark_eraser.core.regions import Region, clip_regions, sort_regions


class TestRegion(unittest.TestCase):
    def test_clip_inside_is_unchanged(self) -> None:
        region = Region(2, 3, 4, 5)
        self.assertEqual(region.clip(20, 20), region)

    def test_clip_trims_overhang(self) -> None:
        self.assertEqual(Region(8, 6, 10, 10).clip(10, 10), Region(8, 6, 2, 4))
        self.assertEqual(Region(-3, -2, 6, 5).clip(10, 10), Region(0, 0, 3, 3))

    def test_clip_outside_or_empty_returns_none(self) -> None:
        self.assertIsNone(Region(10, 0, 5, 5).clip(10, 10))
        self.assertIsNone(Region(0, 0, 0, 5).clip(10, 10))
        self.assertIsNone(Region(-6, 0, 5, 5).clip(10, 10))

    def test_clip_regions_drops_empty(self) -> None:
        regions = [Region(0, 0, 4, 4), Region(50, 50, 2, 2), Region(1, 1, 0, 3)]
        self.assertEqual(clip_regions(regions, 10, 10), [Region(0, 0, 4, 4)])

    def test_sort_regions_orders_by_top_left(self) -> None:
        regions = [Region(30, 10, 2, 2), Region(5, 40, 2, 2), Region(1, 10, 2, 2)]
        self.assertEqual(
            sort_regions(regions),
            [Region(1, 10, 2, 2), Region(30, 10, 2, 2), Region(5, 40, 2, 2)],
        )

    def test_dict_round_trip_and_area(self) -> None:
        region = Region(1, 2, 3, 4)
        self.assertEqual(region.to_dict(), {"x": 1, "y": 2, "width": 3, "height": 4})
        self.assertEqual(Region.from_dict(region.to_dict()), region)
        self.assertEqual(region.area, 12)


if __name__ == "__main__":
    unittest.main()
