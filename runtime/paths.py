"""Centralized path and service configuration for tillroll.

This module provides a single source of truth for the on-disk locations and
service endpoints the runtime layer uses.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_ANALYSIS_SERVICE_URL = "http://localhost:8001"


def _get_project_root() -> Path:
    """Determine the project root directory."""
    override = os.environ.get("TILLROLL_ROOT")
    if override:
        return Path(override)
    # runtime/paths.py -> runtime -> package root
    return Path(__file__).parent.parent


@dataclass
class ProjectPaths:
    """Container for all project-related paths.

    All paths are computed relative to the project root, ensuring consistency
    across all modules regardless of the current working directory.
    """

    root: Path = field(default_factory=_get_project_root)

    def __post_init__(self) -> None:
        self.root = self.root.resolve()

    # --- Configuration paths ---
    @property
    def config(self) -> Path:
        """Configuration directory (config/)."""
        return self.root / "config"

    @property
    def store_rules(self) -> Path:
        """Known store names TOML file."""
        return self.config / "store_rules.toml"

    # --- Debug output ---
    @property
    def analysis_json(self) -> Path:
        """Raw document-analysis responses (JSON)."""
        return self.root / "analysis_json"

    @property
    def analysis_service_url(self) -> str:
        return os.environ.get("ANALYSIS_SERVICE_URL", DEFAULT_ANALYSIS_SERVICE_URL)


_paths: ProjectPaths | None = None


def get_paths() -> ProjectPaths:
    """Get the singleton ProjectPaths instance.

    Returns:
        The global ProjectPaths instance.
    """
    global _paths
    if _paths is None:
        _paths = ProjectPaths()
    return _paths


def reset_paths() -> None:
    """Forget the cached ProjectPaths (e.g. after changing TILLROLL_ROOT in tests)."""
    global _paths
    _paths = None
