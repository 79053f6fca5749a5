"""Centralized path management for the asset scanner.

All on-disk locations (config, local record store, exports) are resolved here
so the rest of the package never builds paths by hand.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _get_project_root() -> Path:
    """Determine the project root directory."""
    env_root = os.environ.get("ASSETSCAN_HOME", "").strip()
    if env_root:
        return Path(env_root).expanduser()
    # assetscan/runtime/paths.py -> assetscan/runtime -> assetscan -> project root
    return Path(__file__).parent.parent.parent


@dataclass
class ProjectPaths:
    """Container for all project-related paths."""

    root: Path = field(default_factory=_get_project_root)

    def __post_init__(self) -> None:
        self.root = self.root.resolve()

    # --- Configuration paths ---
    @property
    def config(self) -> Path:
        """Configuration directory (config/)."""
        return self.root / "config"

    @property
    def settings_file(self) -> Path:
        """Service/device settings TOML file."""
        return self.config / "assetscan.toml"

    # --- Data paths ---
    @property
    def data(self) -> Path:
        """Local durable data directory."""
        return self.root / "data"

    @property
    def record_store(self) -> Path:
        """JSON key-value file holding the committed record list."""
        return self.data / "records.json"

    @property
    def exports(self) -> Path:
        """Directory for exported record bundles."""
        return self.root / "exports"

    def ensure_data_directories(self) -> None:
        """Create data/export directories if they don't exist."""
        self.data.mkdir(parents=True, exist_ok=True)
        self.exports.mkdir(parents=True, exist_ok=True)


_paths: ProjectPaths | None = None


def get_paths() -> ProjectPaths:
    """Get the singleton ProjectPaths instance."""
    global _paths
    if _paths is None:
        _paths = ProjectPaths()
    return _paths


def reset_paths() -> None:
    """Drop the cached singleton (next get_paths() re-reads ASSETSCAN_HOME)."""
    global _paths
    _paths = None
