"""Command-line entry points for watermark-eraser."""
