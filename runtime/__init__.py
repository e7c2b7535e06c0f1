"""Runtime infrastructure for tillroll.

This package provides process/runtime services including:
- Logging setup via get_logger()
- Path and service-endpoint resolution via get_paths(), ProjectPaths
- Store-name rule loading via load_known_store_prefixes()

Usage:
    from tillroll.runtime import get_logger, get_paths

    logger = get_logger(__name__)
    paths = get_paths()
    print(paths.root, paths.analysis_service_url)
"""

from tillroll.runtime.logging import (
    DEFAULT_LOG_LEVEL,
    LOG_FORMAT,
    LOG_FORMAT_DEBUG,
    configure_logging,
    get_logger,
    set_log_level,
)
from tillroll.runtime.paths import (
    DEFAULT_ANALYSIS_SERVICE_URL,
    ProjectPaths,
    get_paths,
    reset_paths,
)
from tillroll.runtime.store_rules import load_known_store_prefixes

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "set_log_level",
    "DEFAULT_LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FORMAT_DEBUG",
    # Rules
    "load_known_store_prefixes",
    # Paths
    "get_paths",
    "reset_paths",
    "ProjectPaths",
    "DEFAULT_ANALYSIS_SERVICE_URL",
]
