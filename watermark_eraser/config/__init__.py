"""Configuration helpers for watermark-eraser."""

from .loader import DEFAULT_CONFIG_PATH, get_section, load_config, validate_config

__all__ = ["DEFAULT_CONFIG_PATH", "load_config", "get_section", "validate_config"]
