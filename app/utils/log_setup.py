"""Loguru sink configuration shared by the CLI entry points."""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """
    Replace the default loguru sink.

    Args:
        level: Minimum level for all sinks
        log_file: Optional file sink, rotated at 10 MB
    """
    logger.remove()
    logger.add(sys.stdout, format=LOG_FORMAT, level=level.upper())

    if log_file is not None:
        log_file = Path(log_file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format=LOG_FORMAT,
            level=level.upper(),
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
        )
