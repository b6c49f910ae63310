"""Main CLI application."""

import typer

from kvgraph.cli.commands import config, graph, init, serve

app = typer.Typer(
    name="kvgraph",
    help="kvgraph - Knowledge graph over a key-value store",
    no_args_is_help=True,
)

init.register(app)
config.register(app)
serve.register(app)
graph.register(app)


if __name__ == "__main__":
    app()
