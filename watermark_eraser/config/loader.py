"""YAML configuration loading with nested overrides."""

from __future__ import annotations

import copy
from numbers import Real
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional, Union

import yaml

from watermark_eraser.core.inpaint import InpaintMethod

PathLike = Union[str, Path]

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "config.yaml"

SECTIONS = ("image_processing", "detection", "batch", "logging")


def _merge_dicts(base: MutableMapping[str, Any], overrides: Mapping[str, Any]) -> None:
    """Recursively merge ``overrides`` into ``base`` in-place."""
    for key, value in overrides.items():
        current = base.get(key)
        if isinstance(current, MutableMapping) and isinstance(value, Mapping):
            _merge_dicts(current, value)
        else:
            base[key] = copy.deepcopy(value)


def _number(section: str, key: str, value: Any, *, minimum: float, inclusive: bool = True) -> None:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValueError(f"{section}.{key} must be a number, got {value!r}.")
    if value < minimum or (not inclusive and value == minimum):
        bound = ">=" if inclusive else ">"
        raise ValueError(f"{section}.{key} must be {bound} {minimum}, got {value!r}.")


def _integer(section: str, key: str, value: Any, *, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{section}.{key} must be an integer, got {value!r}.")
    _number(section, key, value, minimum=minimum)


def validate_config(config: Mapping[str, Any]) -> None:
    """Reject settings the processing classes cannot run with.

    Sections and keys are optional; only the values that are present are
    checked.

    Raises:
        ValueError: On a non-mapping section or an out-of-range value.
    """
    for section in SECTIONS:
        if section in config and not isinstance(config[section], Mapping):
            raise ValueError(f"Configuration section '{section}' must be a mapping.")

    processing = config.get("image_processing", {})
    if "inpaint_method" in processing:
        InpaintMethod.from_name(processing["inpaint_method"])
    if "max_iterations" in processing:
        _integer("image_processing", "max_iterations", processing["max_iterations"], minimum=1)
    for key in ("luma_threshold", "mask_dilate_radius"):
        if key in processing:
            _integer("image_processing", key, processing[key], minimum=0)

    detection = config.get("detection", {})
    if "sensitivity" in detection:
        _number("detection", "sensitivity", detection["sensitivity"], minimum=0, inclusive=False)
    for key in ("hue_min", "hue_max", "sat_min", "val_min"):
        if key in detection:
            _number("detection", key, detection[key], minimum=0)

    batch = config.get("batch", {})
    if "max_workers" in batch:
        _integer("batch", "max_workers", batch["max_workers"], minimum=1)
    if "halt_on_error" in batch and not isinstance(batch["halt_on_error"], bool):
        raise ValueError(f"batch.halt_on_error must be true or false, got {batch['halt_on_error']!r}.")


def load_config(
    path: Optional[PathLike] = None, *, overrides: Optional[Mapping[str, Any]] = None
) -> Dict[str, Any]:
    """Read the YAML config at ``path`` (the packaged default when omitted).

    Overrides are merged before validation, so a bad command-line value is
    reported the same way as a bad file value.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the document is not a mapping or a setting is invalid.
    """
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
    with config_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration root must be a mapping: {config_path}")
    if overrides:
        _merge_dicts(data, overrides)
    validate_config(data)
    return data


def get_section(config: Mapping[str, Any], section: str, default: Optional[Any] = None) -> Any:
    """Return a deep copy of one configuration section."""
    return copy.deepcopy(config.get(section, default))


__all__ = ["load_config", "get_section", "validate_config", "DEFAULT_CONFIG_PATH"]
