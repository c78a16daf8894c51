import logging
import os
import tempfile
import unittest
from logging.handlers import RotatingFileHandler
from pathlib import Path

from watermark_eraser.config import get_section, load_config, validate_config
from watermark_eraser.core.batch_manager import BatchWatermarkProcessor
from watermark_eraser.core.logger import setup_logging


class TestConfigurationAndLogging(unittest.TestCase):
    def tearDown(self) -> None:
        setup_logging(
            {"level": "WARNING", "console": {"enabled": False}, "file": {"enabled": False}},
            force=True,
        )

    def test_load_config_returns_expected_sections(self) -> None:
        config = load_config()
        for section in ("image_processing", "detection", "batch", "logging"):
            self.assertIn(section, config)
        self.assertEqual(config["image_processing"]["max_iterations"], 500)
        self.assertEqual(config["image_processing"]["luma_threshold"], 30)

    def test_overrides_are_merged_recursively(self) -> None:
        config = load_config(overrides={"detection": {"sensitivity": 3.0}, "extra": {"flag": True}})
        self.assertEqual(config["detection"]["sensitivity"], 3.0)
        self.assertIn("hue_max", config["detection"])
        self.assertEqual(config["extra"], {"flag": True})

    def test_get_section_returns_copy(self) -> None:
        config = load_config()
        section = get_section(config, "detection")
        section["sensitivity"] = 99
        self.assertNotEqual(config["detection"]["sensitivity"], 99)
        self.assertEqual(get_section(config, "missing", {}), {})

    def test_missing_or_invalid_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            with self.assertRaises(FileNotFoundError):
                load_config(Path(tmp_dir) / "absent.yaml")
            scalar = Path(tmp_dir) / "scalar.yaml"
            scalar.write_text("just a string\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_config(scalar)

    def test_invalid_settings_are_rejected_on_load(self) -> None:
        bad_overrides = [
            {"detection": {"sensitivity": 0}},
            {"detection": {"sensitivity": -1.5}},
            {"detection": {"val_min": "bright"}},
            {"image_processing": {"inpaint_method": "telea"}},
            {"image_processing": {"max_iterations": 0}},
            {"image_processing": {"luma_threshold": 2.5}},
            {"batch": {"max_workers": 0}},
            {"batch": {"halt_on_error": "yes"}},
        ]
        for overrides in bad_overrides:
            with self.subTest(overrides=overrides):
                with self.assertRaises(ValueError):
                    load_config(overrides=overrides)

    def test_sections_must_be_mappings(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            for section in ("image_processing", "detection", "batch", "logging"):
                path = Path(tmp_dir) / f"{section}.yaml"
                path.write_text(f"{section}:\n  - not\n  - a mapping\n", encoding="utf-8")
                with self.subTest(section=section):
                    with self.assertRaises(ValueError):
                        load_config(path)

    def test_partial_config_is_accepted(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = Path(tmp_dir) / "partial.yaml"
            path.write_text("detection:\n  sensitivity: 0.5\n", encoding="utf-8")
            config = load_config(path, overrides={"image_processing": {"inpaint_method": "Simple"}})
        self.assertEqual(config["detection"], {"sensitivity": 0.5})
        validate_config({})

    def test_batch_processor_uses_config_defaults(self) -> None:
        config = load_config()
        processor = BatchWatermarkProcessor(config=config)
        self.assertEqual(processor.max_workers, config["batch"]["max_workers"])
        self.assertEqual(processor.halt_on_error, config["batch"]["halt_on_error"])
        self.assertEqual(processor.remover.detector.val_min, config["detection"]["val_min"])

    def test_setup_logging_creates_file_handler(self) -> None:
        config = load_config()
        with tempfile.TemporaryDirectory() as tmp_dir:
            expected_log_path = Path(tmp_dir) / "eraser" / "logs" / "eraser.log"
            settings = dict(config["logging"])
            settings["file"] = dict(settings["file"])
            settings["file"]["filename"] = "${WM_ERASER_TEST_HOME}/eraser/logs/eraser.log"
            settings["file"]["enabled"] = True
            settings["console"] = {"enabled": False}

            original = os.environ.get("WM_ERASER_TEST_HOME")
            os.environ["WM_ERASER_TEST_HOME"] = tmp_dir
            try:
                setup_logging(settings, force=True)
                # A second call must not stack a duplicate handler.
                setup_logging(settings)
                root = logging.getLogger()
                file_handlers = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]
                self.assertEqual(len(file_handlers), 1)

                logging.getLogger("watermark_eraser.tests").info("log-line")
                for handler in file_handlers:
                    handler.flush()

                self.assertTrue(expected_log_path.exists(), "Log file was not created.")
                self.assertGreater(expected_log_path.stat().st_size, 0, "Log file is empty.")
            finally:
                setup_logging(
                    {"level": "WARNING", "console": {"enabled": False}, "file": {"enabled": False}},
                    force=True,
                )
                if original is not None:
                    os.environ["WM_ERASER_TEST_HOME"] = original
                else:
                    os.environ.pop("WM_ERASER_TEST_HOME", None)

    def test_file_logging_without_filename_raises(self) -> None:
        with self.assertRaises(ValueError):
            setup_logging({"console": {"enabled": False}, "file": {"enabled": True}}, force=True)


if __name__ == "__main__":
    unittest.main()
