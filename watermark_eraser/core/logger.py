"""Logging setup driven by the ``logging`` section of the YAML config."""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Mapping

DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
CONSOLE_FORMAT = "%(levelname)s | %(name)s | %(message)s"


def _resolve_log_path(filename: str) -> Path:
    expanded = Path(os.path.expandvars(filename)).expanduser()
    try:
        expanded.parent.mkdir(parents=True, exist_ok=True)
        return expanded
    except OSError:
        fallback_dir = Path("./logs")
        fallback_dir.mkdir(parents=True, exist_ok=True)
        return fallback_dir / Path(filename).name


def _reset_handlers(root_logger: logging.Logger) -> None:
    for handler in list(root_logger.handlers):
        handler.close()
        root_logger.removeHandler(handler)


def _add_console_handler(root_logger: logging.Logger, settings: Mapping[str, Any]) -> None:
    if any(type(h) is logging.StreamHandler for h in root_logger.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(settings.get("format", CONSOLE_FORMAT)))
    root_logger.addHandler(handler)


def _add_file_handler(root_logger: logging.Logger, settings: Mapping[str, Any]) -> None:
    filename = settings.get("filename")
    if not filename:
        raise ValueError("File logging enabled but no filename provided.")
    log_path = _resolve_log_path(str(filename))
    for handler in root_logger.handlers:
        if (
            isinstance(handler, RotatingFileHandler)
            and Path(handler.baseFilename).resolve() == log_path.resolve()
        ):
            return
    handler = RotatingFileHandler(
        log_path,
        maxBytes=int(settings.get("rotate_bytes", 1_048_576)),
        backupCount=int(settings.get("backups", 5)),
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(settings.get("format", DEFAULT_FORMAT)))
    root_logger.addHandler(handler)


def setup_logging(settings: Mapping[str, Any], *, force: bool = False) -> None:
    """Configure root logging handlers.

    ``settings`` holds ``level``, a ``console`` block (``enabled``, ``format``)
    and a ``file`` block (``enabled``, ``filename``, ``rotate_bytes``,
    ``backups``, ``format``). Filenames may use ``~`` and environment variables.
    With ``force`` every existing root handler is closed first.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(str(settings.get("level", "INFO")).upper())

    if force:
        _reset_handlers(root_logger)

    console_settings = settings.get("console") or {}
    if console_settings.get("enabled", True):
        _add_console_handler(root_logger, console_settings)

    file_settings = settings.get("file") or {}
    if file_settings.get("enabled", False):
        _add_file_handler(root_logger, file_settings)


__all__ = ["CONSOLE_FORMAT", "DEFAULT_FORMAT", "setup_logging"]
