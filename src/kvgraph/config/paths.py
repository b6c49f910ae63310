"""Centralized path management for kvgraph.

All local state (config, logs, file-backed store) lives under a single base
directory, overridable with the KVGRAPH_HOME environment variable.

Default location: ~/.kvgraph
"""

import os
from functools import lru_cache
from pathlib import Path

ENV_VAR = "KVGRAPH_HOME"


@lru_cache(maxsize=1)
def get_kvgraph_home() -> Path:
    """Get the base directory for all kvgraph data.

    Resolution order:
    1. KVGRAPH_HOME environment variable (if set)
    2. ~/.kvgraph
    """
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser().resolve()
    return Path.home() / ".kvgraph"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_kvgraph_home() / "config.toml"


def get_logs_path() -> Path:
    """Get the JSONL log directory."""
    return get_kvgraph_home() / "logs"


def get_store_path() -> Path:
    """Get the directory used by the file-backed graph store."""
    return get_kvgraph_home() / "store"


def ensure_kvgraph_home() -> Path:
    home = get_kvgraph_home()
    home.mkdir(parents=True, exist_ok=True)
    return home


def get_all_paths() -> dict[str, Path]:
    """Get all kvgraph paths for display purposes."""
    return {
        "home": get_kvgraph_home(),
        "config": get_config_path(),
        "logs": get_logs_path(),
        "store": get_store_path(),
    }
