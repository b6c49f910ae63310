"""Configuration models using Pydantic."""

import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, SecretStr, model_validator

from kvgraph.config.paths import get_store_path

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Configuration error."""

    pass


class StorageConfig(BaseModel):
    """Configuration for the key-value backend holding the graph.

    Backends:
    - "memory": process-local, lost on exit (tests, demos)
    - "file": one JSON document per key under ``path``
    - "rest": Redis-over-REST service (Upstash / Vercel KV)
    """

    backend: Literal["memory", "file", "rest"] = "file"
    key: str = "knowledge_graph"
    path: Path = Field(default_factory=get_store_path)
    url: str | None = None
    token: SecretStr | None = None
    timeout: float = 10.0  # seconds, per REST call

    @model_validator(mode="after")
    def _validate_rest(self) -> "StorageConfig":
        if self.backend == "rest" and (not self.url or self.token is None):
            raise ValueError(
                "storage.backend = 'rest' requires storage.url and storage.token "
                "(or KV_REST_API_URL / KV_REST_API_TOKEN)"
            )
        return self


class ServerConfig(BaseModel):
    """Configuration for HTTP server."""

    host: str = "127.0.0.1"
    port: int = 8080
    api_prefix: str = ""


class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None
    log_to_file: bool = False
    redact: bool = True
    retention_days: int = 7


class KVGraphConfig(BaseModel):
    """Root configuration model."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def describe_storage(self) -> str:
        """Human-readable location of the configured backend."""
        storage = self.storage
        if storage.backend == "file":
            return f"file:{storage.path}"
        if storage.backend == "rest":
            return f"rest:{storage.url}"
        return "memory"
