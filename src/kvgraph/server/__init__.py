"""HTTP server for kvgraph."""

from kvgraph.server.app import KVGraphServer, create_app
from kvgraph.server.runner import ServerRunner

__all__ = [
    "KVGraphServer",
    "ServerRunner",
    "create_app",
]
