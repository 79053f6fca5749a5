"""Runtime loader for service, device, and storage settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

from assetscan.runtime.logging import get_logger
from assetscan.runtime.paths import get_paths

logger = get_logger(__name__)

DEFAULT_LOOKUP_URL = "http://localhost:8001/lookup"
DEFAULT_INGEST_URL = "http://localhost:8001/ingest"
DEFAULT_STORAGE_KEY = "@scanned_data_list"
DEFAULT_TIMEOUT = 15.0


@dataclass(frozen=True)
class Settings:
    """Resolved settings for one process."""

    lookup_url: str = DEFAULT_LOOKUP_URL
    ingest_url: str = DEFAULT_INGEST_URL
    timeout: float = DEFAULT_TIMEOUT
    # One ingestion endpoint expects the payload string wrapped in quotes.
    quote_forward_body: bool = False
    device_id: str = "unknown-device"
    store_path: Path | None = None
    storage_key: str = DEFAULT_STORAGE_KEY

    @property
    def resolved_store_path(self) -> Path:
        if self.store_path is None:
            return get_paths().record_store
        if self.store_path.is_absolute():
            return self.store_path
        return get_paths().root / self.store_path


def _table(config: dict[str, Any], name: str) -> dict[str, Any]:
    value = config.get(name, {})
    if not isinstance(value, dict):
        raise ValueError(f"[{name}] must be a table")
    return value


@lru_cache(maxsize=4)
def load_settings(config_path: str | None = None) -> Settings:
    """
    Load settings from assetscan.toml.

    Args:
        config_path: Optional TOML path override. If None, uses default project path.

    Returns:
        Settings with file values applied over defaults, then environment overrides.
    """
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    path = Path(config_path) if config_path is not None else get_paths().settings_file
    config: dict[str, Any] = {}
    if path.exists():
        with open(path, "rb") as f:
            config = tomllib.load(f)
        logger.debug("Loaded settings from %s", path)
    else:
        logger.debug("Settings file not found: %s (using defaults)", path)

    service = _table(config, "service")
    device = _table(config, "device")
    storage = _table(config, "storage")

    store_path = storage.get("store_path")

    return Settings(
        lookup_url=os.environ.get("ASSETSCAN_LOOKUP_URL") or str(service.get("lookup_url", DEFAULT_LOOKUP_URL)),
        ingest_url=os.environ.get("ASSETSCAN_INGEST_URL") or str(service.get("ingest_url", DEFAULT_INGEST_URL)),
        timeout=float(service.get("timeout", DEFAULT_TIMEOUT)),
        quote_forward_body=bool(service.get("quote_forward_body", False)),
        device_id=os.environ.get("ASSETSCAN_DEVICE_ID") or str(device.get("device_id", "unknown-device")),
        store_path=Path(store_path) if store_path else None,
        storage_key=str(storage.get("storage_key", DEFAULT_STORAGE_KEY)),
    )
