"""Runtime infrastructure for the asset scanner.

This package provides process/runtime services including:
- Logging setup via get_logger()
- Path resolution via get_paths(), ProjectPaths
- Settings via load_settings()
- The local record store, busy flag and catalog HTTP client

Usage:
    from assetscan.runtime import get_logger, get_paths, load_settings

    logger = get_logger(__name__)
    settings = load_settings()
"""

from assetscan.runtime.logging import (
    DEFAULT_LOG_LEVEL,
    LOG_FORMAT,
    LOG_FORMAT_DEBUG,
    configure_logging,
    get_logger,
    set_log_level,
)
from assetscan.runtime.paths import ProjectPaths, get_paths, reset_paths
from assetscan.runtime.settings import Settings, load_settings

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "set_log_level",
    "DEFAULT_LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FORMAT_DEBUG",
    # Paths
    "get_paths",
    "reset_paths",
    "ProjectPaths",
    # Settings
    "Settings",
    "load_settings",
]
