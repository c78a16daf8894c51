import base64
import tempfile
import unittest
from pathlib import Path

import numpy as np

from watermark_eraser.core import utils
from watermark_eraser.core.regions import Region
from .helpers import create_synthetic_sample


class TestUtils(unittest.TestCase):
    def setUp(self) -> None:
        _, self.image = create_synthetic_sample(80, 50)
        self.image[0, 0] = (255, 0, 0)
        self.image[0, 1] = (0, 0, 255)

    def test_load_and_save_image_roundtrip_keeps_rgb_order(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = Path(tmp_dir) / "nested" / "image.png"
            utils.save_image(path, self.image)
            loaded = utils.load_image(path)
            np.testing.assert_array_equal(loaded, self.image)
            self.assertEqual(tuple(loaded[0, 0]), (255, 0, 0))

    def test_save_mask(self) -> None:
        mask = np.zeros((20, 30), dtype=np.uint8)
        mask[5:10, 5:10] = 255
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = Path(tmp_dir) / "mask.png"
            utils.save_image(path, mask)
            loaded = utils.load_image(path)
            np.testing.assert_array_equal(loaded[..., 0], mask)

    def test_load_errors(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            with self.assertRaises(FileNotFoundError):
                utils.load_image(Path(tmp_dir) / "missing.png")
            broken = Path(tmp_dir) / "broken.png"
            broken.write_text("not an image", encoding="utf-8")
            with self.assertRaises(ValueError):
                utils.load_image(broken)

    def test_save_empty_image_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            with self.assertRaises(ValueError):
                utils.save_image(Path(tmp_dir) / "empty.png", np.zeros((0, 0, 3), dtype=np.uint8))

    def test_encode_preview_is_png_data_url(self) -> None:
        preview = utils.encode_preview(self.image)
        prefix = "data:image/png;base64,"
        self.assertTrue(preview.startswith(prefix))
        payload = base64.b64decode(preview[len(prefix):])
        self.assertEqual(payload[:8], b"\x89PNG\r\n\x1a\n")

    def test_parse_region(self) -> None:
        self.assertEqual(utils.parse_region("10, 20,30,40"), Region(10, 20, 30, 40))
        for bad in ("1,2,3", "a,b,c,d", "1,2,0,4", "1,2,3,-4"):
            with self.assertRaises(ValueError):
                utils.parse_region(bad)

    def test_ensure_rgb_image(self) -> None:
        self.assertIs(utils.ensure_rgb_image(self.image), self.image)
        with self.assertRaises(ValueError):
            utils.ensure_rgb_image(np.zeros((4, 4, 4), dtype=np.uint8))


if __name__ == "__main__":
    unittest.main()
