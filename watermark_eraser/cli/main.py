"""Command-line interface for watermark-eraser."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

from watermark_eraser.config import DEFAULT_CONFIG_PATH, get_section, load_config
from watermark_eraser.core import (
    BatchItem,
    BatchResult,
    BatchWatermarkProcessor,
    ImageWatermarkRemover,
    InpaintMethod,
    Region,
    WatermarkDetector,
    utils,
)
from watermark_eraser.core.logger import setup_logging

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        ivalue = int(value)
    except ValueError as exc:  # pragma: no cover - argparse failure path
        raise argparse.ArgumentTypeError(f"Expected integer, received '{value}'") from exc
    if ivalue <= 0:
        raise argparse.ArgumentTypeError("Value must be a positive integer.")
    return ivalue


def _region_arg(value: str) -> Region:
    try:
        return utils.parse_region(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _add_detection_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--sensitivity", type=float, help="Override detector sensitivity (> 0).")
    parser.add_argument("--hue-min", type=float, help="Lower hue bound in degrees.")
    parser.add_argument("--hue-max", type=float, help="Upper hue bound in degrees.")
    parser.add_argument("--sat-min", type=float, help="Minimum saturation in [0, 1].")
    parser.add_argument("--val-min", type=float, help="Minimum value (brightness) in [0, 1].")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="watermark-eraser",
        description="Detect and remove overlaid watermarks from images.",
    )
    parser.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG_PATH),
        help=f"Path to configuration YAML (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument("--log-level", help="Override logging level (e.g. INFO, DEBUG).")
    parser.add_argument("--log-file", help="Override log file path.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    info_parser = subparsers.add_parser(
        "info", help="Print image dimensions and an embeddable PNG preview."
    )
    info_parser.add_argument("-i", "--input", required=True, help="Path to the image.")

    detect_parser = subparsers.add_parser("detect", help="Print detected watermark regions as JSON.")
    detect_parser.add_argument("-i", "--input", required=True, help="Path to the image.")
    _add_detection_args(detect_parser)

    image_parser = subparsers.add_parser(
        "image", help="Remove a watermark from one image and print a preview of the result."
    )
    image_parser.add_argument("-i", "--input", required=True, help="Path to the input image.")
    image_parser.add_argument("-o", "--output", required=True, help="Path for the restored image.")
    image_parser.add_argument(
        "-r",
        "--region",
        action="append",
        type=_region_arg,
        help="Region to clean as x,y,width,height. Repeatable; detected automatically when omitted.",
    )
    image_parser.add_argument(
        "--method",
        choices=[m.value for m in InpaintMethod],
        help="Override inpainting method.",
    )
    image_parser.add_argument(
        "--max-iterations", type=_positive_int, help="Override the inpainting iteration budget."
    )
    _add_detection_args(image_parser)

    batch_parser = subparsers.add_parser(
        "batch", help="Process a batch manifest describing multiple jobs."
    )
    batch_parser.add_argument(
        "-m",
        "--manifest",
        required=True,
        help="Path to a YAML or JSON manifest describing batch jobs.",
    )
    batch_parser.add_argument(
        "--max-workers",
        type=_positive_int,
        help="Override maximum concurrent workers in batch processor.",
    )
    batch_parser.add_argument(
        "--halt-on-error",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Stop processing remaining items after the first failure.",
    )

    return parser


def _collect_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if args.log_level:
        overrides.setdefault("logging", {})["level"] = args.log_level.upper()
    if args.log_file:
        file_overrides = overrides.setdefault("logging", {}).setdefault("file", {})
        file_overrides["enabled"] = True
        file_overrides["filename"] = args.log_file

    detection = {
        key: getattr(args, key)
        for key in ("sensitivity", "hue_min", "hue_max", "sat_min", "val_min")
        if getattr(args, key, None) is not None
    }
    if detection:
        overrides["detection"] = detection

    processing: Dict[str, Any] = {}
    if getattr(args, "method", None) is not None:
        processing["inpaint_method"] = args.method
    if getattr(args, "max_iterations", None) is not None:
        processing["max_iterations"] = args.max_iterations
    if processing:
        overrides["image_processing"] = processing

    if args.command == "batch":
        batch_overrides: Dict[str, Any] = {}
        if args.max_workers is not None:
            batch_overrides["max_workers"] = args.max_workers
        if args.halt_on_error is not None:
            batch_overrides["halt_on_error"] = args.halt_on_error
        if batch_overrides:
            overrides["batch"] = batch_overrides
    return overrides


def _print_json(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload, indent=2) + "\n")


def _load_manifest(path: Path) -> List[Dict[str, Any]]:
    content = path.read_text(encoding="utf-8")
    if path.suffix.lower() in {".yaml", ".yml"}:
        data = yaml.safe_load(content)
    else:
        data = json.loads(content)
    if not isinstance(data, list):
        raise ValueError("Batch manifest must be a list of job entries.")
    return data


def _manifest_region(entry: Any) -> Region:
    if isinstance(entry, str):
        return utils.parse_region(entry)
    if isinstance(entry, dict):
        return Region.from_dict(entry)
    if isinstance(entry, (list, tuple)) and len(entry) == 4:
        return Region(*(int(v) for v in entry))
    raise ValueError(f"Unsupported region entry: {entry!r}")


def _prepare_batch_items(entries: Iterable[Dict[str, Any]]) -> List[BatchItem]:
    items: List[BatchItem] = []
    for entry in entries:
        input_path = entry.get("input")
        output_path = entry.get("output")
        if not input_path or not output_path:
            raise ValueError("Batch entry must include 'input' and 'output' fields.")
        raw_regions = entry.get("regions")
        regions = [_manifest_region(r) for r in raw_regions] if raw_regions else None
        items.append(BatchItem(input_path=input_path, output_path=output_path, regions=regions))
    return items


def _run_info(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    image = utils.load_image(args.input)
    height, width = image.shape[:2]
    _print_json({"width": width, "height": height, "preview": utils.encode_preview(image)})
    return 0


def _run_detect(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    detector = WatermarkDetector.from_config(config)
    image = utils.load_image(args.input)
    regions = detector.detect(image)
    logger.info("Detected %d region(s) in %s", len(regions), args.input)
    _print_json([region.to_dict() for region in regions])
    return 0


def _run_image(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    remover = ImageWatermarkRemover.from_config(config)
    output, mask_path = remover.process_file(
        input_path=Path(args.input),
        output_path=Path(args.output),
        regions=args.region,
    )
    logger.info("Image processed successfully: %s (mask saved to %s)", output, mask_path)
    _print_json(
        {
            "output": str(output),
            "mask": str(mask_path),
            "preview": utils.encode_preview(utils.load_image(output)),
        }
    )
    return 0


def _summarize_batch(results: List[BatchResult]) -> int:
    success = sum(1 for r in results if r.success)
    failures = [r for r in results if not r.success]
    logger.info("Batch complete. Successes: %s | Failures: %s", success, len(failures))
    for result in failures:
        logger.error("Failed job for %s: %s", result.input_path, result.error)
    return 0 if not failures else 1


def _run_batch(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    manifest_path = Path(args.manifest)
    items = _prepare_batch_items(_load_manifest(manifest_path))
    logger.info("Processing %s batch item(s) defined in %s", len(items), manifest_path)
    processor = BatchWatermarkProcessor(config=config)
    return _summarize_batch(processor.process(items))


COMMANDS = {
    "info": _run_info,
    "detect": _run_detect,
    "image": _run_image,
    "batch": _run_batch,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    overrides = _collect_overrides(args)
    try:
        config = load_config(args.config, overrides=overrides or None)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        sys.stderr.write(f"Failed to load configuration: {exc}\n")
        return 1
    setup_logging(get_section(config, "logging", {}), force=True)

    try:
        return COMMANDS[args.command](args, config)
    except Exception as exc:
        logger.exception("Command failed: %s", exc)
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    sys.exit(main())
