"""Loguru sinks for the viewer app."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from loguru import logger

from .config import ViewerSettings

# Packages whose records are written to the log file.
PACKAGES = ("variation_tree", "variation_notation", "variation_viewer")

CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> <level>{level: <7}</level> <cyan>{name}</cyan> {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} {level: <7} {name}:{line} {message}"


def _from_packages(record: dict[str, Any]) -> bool:
    return (record["name"] or "").split(".", 1)[0] in PACKAGES


def setup_logging(settings: ViewerSettings | None = None) -> list[int]:
    """Replace loguru's default sink with a console sink and an optional file.

    The console shows everything at ``settings.log_level``; the file, when
    ``settings.log_file`` is set, keeps only records from the variation
    packages and rotates per ``log_rotation``/``log_retention``. Returns the
    sink ids so callers can remove them again.
    """
    if settings is None:
        settings = ViewerSettings.from_env()
    logger.remove()
    sinks = [logger.add(sys.stderr, level=settings.log_level, format=CONSOLE_FORMAT, colorize=True)]
    if settings.log_file:
        path = Path(settings.log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        sinks.append(
            logger.add(
                path,
                level=settings.log_level,
                format=FILE_FORMAT,
                filter=_from_packages,
                rotation=settings.log_rotation,
                retention=settings.log_retention,
                encoding="utf-8",
            )
        )
    logger.debug("viewer logging at {} (file: {})", settings.log_level, settings.log_file or "none")
    return sinks
