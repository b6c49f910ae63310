"""Configuration loading from TOML files and environment variables."""

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import SecretStr

from kvgraph.config.models import KVGraphConfig
from kvgraph.config.paths import get_config_path

logger = logging.getLogger(__name__)


def _get_default_config_paths() -> list[Path]:
    """Get ordered list of default config file locations."""
    return [
        Path("config.toml"),  # Current directory
        get_config_path(),  # ~/.kvgraph/config.toml (or KVGRAPH_HOME)
        Path("/etc/kvgraph/config.toml"),  # System-wide
    ]


def _resolve_env(config: dict[str, Any]) -> dict[str, Any]:
    """Fill storage credentials from the environment where not set in config."""
    storage = config.setdefault("storage", {})
    if storage.get("url") is None:
        if url := os.environ.get("KV_REST_API_URL"):
            storage["url"] = url
    if storage.get("token") is None:
        if token := os.environ.get("KV_REST_API_TOKEN"):
            storage["token"] = SecretStr(token)
    return config


def load_config(path: Path | None = None) -> KVGraphConfig:
    """Load configuration from TOML file.

    Args:
        path: Explicit path to config file. If None, searches default
            locations and falls back to defaults when none exists.

    Returns:
        Validated KVGraphConfig instance.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
        ValueError: If config file is invalid.
    """
    config_path: Path | None = None

    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        for default_path in _get_default_config_paths():
            expanded = default_path.expanduser()
            if expanded.exists():
                config_path = expanded
                break

    raw_config: dict[str, Any] = {}
    if config_path is None:
        logger.debug("No config file found, using defaults")
    else:
        with config_path.open("rb") as f:
            raw_config = tomllib.load(f)

    raw_config = _resolve_env(raw_config)

    return KVGraphConfig.model_validate(raw_config)


def get_default_config() -> KVGraphConfig:
    """Get a default configuration for development/testing."""
    return KVGraphConfig()

