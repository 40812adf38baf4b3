"""Logging utilities.

All modules log through loguru. ``get_logger`` binds the component name into
``extra`` so console and file output show which part of the engine spoke.
"""

import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger

LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[name]}:{function}:{line} - {message}"

logger.configure(extra={"name": "voiceid"})


def _check_level(level: str) -> str:
    level = level.upper()
    if level not in LEVELS:
        raise ValueError(f"Unknown log level '{level}' (expected one of {', '.join(LEVELS)})")
    return level


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    quiet: bool = False,
    rotation: str = "10 MB",
    retention: str = "1 week",
) -> None:
    """Setup logging configuration.

    Args:
        log_level: Logging level, case-insensitive (DEBUG, INFO, WARNING, ...)
        log_file: Path to log file (optional)
        quiet: Only show warnings and errors on the console; the log file
            still receives ``log_level``
        rotation: Log rotation size
        retention: Log retention period
    """
    level = _check_level(log_level)
    logger.remove()

    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level="WARNING" if quiet and logger.level(level).no < logger.level("WARNING").no else level,
        colorize=sys.stderr.isatty(),
    )

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format=FILE_FORMAT,
            level=level,
            rotation=rotation,
            retention=retention,
            compression="zip",
        )


def get_logger(name: str):
    """Logger bound to a component name (usually ``__name__``)."""
    return logger.bind(name=name)
