"""Centralized path management for BillBeam.

This module provides a single source of truth for all on-disk locations:
configuration and per-user documents.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path

_SAFE_ID = re.compile(r"^[A-Za-z0-9_.@-]{1,128}$")


def _get_project_root() -> Path:
    """Determine the project root directory."""
    # billbeam/runtime/paths.py -> billbeam/runtime -> billbeam -> project root
    return Path(__file__).parent.parent.parent


def _default_data_dir() -> Path:
    env_dir = os.environ.get("BILLBEAM_DATA_DIR")
    if env_dir:
        return Path(env_dir).expanduser()
    return _get_project_root() / "data"


def is_safe_id(value: str) -> bool:
    """Return True if ``value`` can be used as a single path component."""
    return bool(_SAFE_ID.match(value)) and value not in {".", ".."}


@dataclass
class ProjectPaths:
    """Container for all project-related paths.

    All paths are computed relative to the project root or the data directory,
    regardless of the current working directory.
    """

    root: Path = field(default_factory=_get_project_root)
    data: Path = field(default_factory=_default_data_dir)

    def __post_init__(self) -> None:
        self.root = self.root.resolve()
        self.data = self.data.resolve()

    # --- Configuration paths ---
    @property
    def config(self) -> Path:
        """Configuration directory (config/)."""
        return self.root / "config"

    @property
    def settings_file(self) -> Path:
        """Main settings TOML file."""
        return self.config / "billbeam.toml"

    # --- Data paths ---
    @property
    def users(self) -> Path:
        """Per-user document root."""
        return self.data / "users"

    def user_dir(self, user_id: str) -> Path:
        """Document directory for one user."""
        return self.users / user_id

    def user_receipts(self, user_id: str) -> Path:
        """Saved receipts for one user."""
        return self.user_dir(user_id) / "receipts"

    def user_groups(self, user_id: str) -> Path:
        """Saved groups for one user."""
        return self.user_dir(user_id) / "groups"

    def user_preferences(self, user_id: str) -> Path:
        """Preferences document for one user."""
        return self.user_dir(user_id) / "preferences.json"

    def ensure_user_directories(self, user_id: str) -> None:
        """Create the document directories for a user if they don't exist."""
        self.user_receipts(user_id).mkdir(parents=True, exist_ok=True)
        self.user_groups(user_id).mkdir(parents=True, exist_ok=True)


_paths: ProjectPaths | None = None


def get_paths() -> ProjectPaths:
    """Get the singleton ProjectPaths instance."""
    global _paths
    if _paths is None:
        _paths = ProjectPaths()
    return _paths
