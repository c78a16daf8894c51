"""Watermark detection and content-aware removal for raster images."""

__version__ = "0.1.0"
