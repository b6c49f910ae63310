"""Configuration module."""

from kvgraph.config.loader import get_default_config, load_config
from kvgraph.config.models import (
    ConfigError,
    KVGraphConfig,
    LoggingConfig,
    ServerConfig,
    StorageConfig,
)
from kvgraph.config.paths import (
    get_config_path,
    get_kvgraph_home,
    get_logs_path,
    get_store_path,
)

__all__ = [
    "ConfigError",
    "KVGraphConfig",
    "LoggingConfig",
    "ServerConfig",
    "StorageConfig",
    "get_config_path",
    "get_default_config",
    "get_kvgraph_home",
    "get_logs_path",
    "get_store_path",
    "load_config",
]
