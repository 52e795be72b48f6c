"""Runtime infrastructure for BillBeam.

This package provides process/runtime services including:
- Logging setup via get_logger()
- Path resolution via get_paths(), ProjectPaths
- Settings via load_settings()

The extraction client, document storage and HTTP server live in their own
modules (extraction_service, storage, server) and are imported directly.

Usage:
    from billbeam.runtime import get_logger, get_paths, load_settings

    logger = get_logger(__name__)
    paths = get_paths()
    print(paths.root, paths.data)
"""

from billbeam.runtime.logging import (
    DEFAULT_LOG_LEVEL,
    LOG_FORMAT,
    LOG_FORMAT_DEBUG,
    configure_logging,
    get_logger,
    set_log_level,
)
from billbeam.runtime.paths import ProjectPaths, get_paths
from billbeam.runtime.settings import Settings, load_settings

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
    "ProjectPaths",
    # Settings
    "Settings",
    "load_settings",
]
