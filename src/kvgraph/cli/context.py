"""Shared CLI context: config loading and manager construction."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from pydantic import ValidationError

from kvgraph.cli.console import console, error

if TYPE_CHECKING:
    from kvgraph.config import KVGraphConfig
    from kvgraph.graph import GraphManager


def get_config(config_path: Path | None = None) -> KVGraphConfig:
    """Load config, exiting with a readable error on failure."""
    from kvgraph.config import load_config

    try:
        return load_config(config_path)
    except FileNotFoundError as e:
        error(str(e))
        raise typer.Exit(1) from None
    except ValidationError as e:
        error("Configuration validation failed:")
        for err in e.errors():
            loc = ".".join(str(x) for x in err["loc"])
            console.print(f"  [yellow]{loc}[/yellow]: {err['msg']}")
        raise typer.Exit(1) from None
    except tomllib.TOMLDecodeError as e:
        error(f"Invalid TOML: {e}")
        raise typer.Exit(1) from None


def get_manager(config: KVGraphConfig) -> GraphManager:
    """Build a GraphManager over the configured backend."""
    from kvgraph.graph import GraphManager, create_graph_store

    store = create_graph_store(config.storage)
    return GraphManager(store, key=config.storage.key)


def generate_config_template() -> str:
    """Commented TOML template written by ``kvgraph init``."""
    return """\
# kvgraph configuration

[storage]
# Backend: "file" (default), "rest" (Upstash / Vercel KV REST API), "memory"
backend = "file"
key = "knowledge_graph"
# path = "~/.kvgraph/store"

# For backend = "rest". Credentials may also come from
# KV_REST_API_URL and KV_REST_API_TOKEN.
# url = "https://example.upstash.io"
# token = "..."
# timeout = 10.0

[server]
host = "127.0.0.1"
port = 8080
# api_prefix = "/api"

[logging]
# level = "INFO"
log_to_file = false
"""
