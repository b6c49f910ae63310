"""CLI command modules."""

from kvgraph.cli.commands import config, graph, init, serve

__all__ = [
    "config",
    "graph",
    "init",
    "serve",
]
