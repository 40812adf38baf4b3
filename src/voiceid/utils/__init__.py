"""Utilities module."""

from voiceid.utils.config import (
    Config,
    Settings,
    apply_settings,
    load_config,
    save_config,
)
from voiceid.utils.logger import get_logger, setup_logging

__all__ = [
    "Config",
    "Settings",
    "apply_settings",
    "load_config",
    "save_config",
    "get_logger",
    "setup_logging",
]
