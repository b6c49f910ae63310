"""Graph inspection commands."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import click
import typer

from kvgraph.cli.console import console, create_table, dim, error

if TYPE_CHECKING:
    from kvgraph.graph import GraphManager, KnowledgeGraph


def register(app: typer.Typer) -> None:
    """Register the graph command."""

    @app.command()
    def graph(
        action: Annotated[
            str | None,
            typer.Argument(
                help="Action: show, search, open, stats",
            ),
        ] = None,
        targets: Annotated[
            list[str] | None,
            typer.Argument(
                help="Search query (search) or entity names (open)",
            ),
        ] = None,
        config_path: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="Path to configuration file",
            ),
        ] = None,
        as_json: Annotated[
            bool,
            typer.Option(
                "--json",
                help="Print raw JSON instead of tables",
            ),
        ] = False,
    ) -> None:
        """Inspect the stored knowledge graph.

        Examples:
            kvgraph graph show              # All entities and relations
            kvgraph graph search alice      # Substring search
            kvgraph graph open Alice Bob    # Named entities + relations between them
            kvgraph graph stats             # Counts by type
        """
        if action is None:
            ctx = click.get_current_context()
            click.echo(ctx.get_help())
            raise typer.Exit(0)

        from kvgraph.cli.context import get_config, get_manager

        config = get_config(config_path)
        manager = get_manager(config)

        try:
            asyncio.run(
                _run_graph_action(
                    manager,
                    action=action,
                    targets=targets or [],
                    as_json=as_json,
                )
            )
        except KeyboardInterrupt:
            console.print("\n[dim]Cancelled[/dim]")


async def _run_graph_action(
    manager: GraphManager,
    action: str,
    targets: list[str],
    as_json: bool,
) -> None:
    """Run graph action asynchronously."""
    if action == "show":
        _print_graph(await manager.read_graph(), as_json)
    elif action == "search":
        if not targets:
            error("Usage: kvgraph graph search <query>")
            raise typer.Exit(1)
        _print_graph(await manager.search_nodes(" ".join(targets)), as_json)
    elif action == "open":
        if not targets:
            error("Usage: kvgraph graph open <name> [<name> ...]")
            raise typer.Exit(1)
        _print_graph(await manager.open_nodes(targets), as_json)
    elif action == "stats":
        stats = (await manager.read_graph()).stats()
        if as_json:
            console.print_json(json.dumps(stats))
        else:
            _print_stats(stats)
    else:
        error(f"Unknown action: {action}")
        console.print("Valid actions: show, search, open, stats")
        raise typer.Exit(1)


def _print_graph(graph: KnowledgeGraph, as_json: bool) -> None:
    if as_json:
        console.print_json(json.dumps(graph.to_dict()))
        return

    if not graph.entities and not graph.relations:
        dim("No entities found.")
        return

    entities = create_table(
        f"Entities ({len(graph.entities)})",
        [
            ("Name", "bold"),
            ("Type", "cyan"),
            ("Observations", ""),
        ],
    )
    for entity in graph.entities:
        entities.add_row(
            entity.name,
            entity.entity_type,
            "\n".join(entity.observations) or "-",
        )
    console.print(entities)

    if graph.relations:
        relations = create_table(
            f"Relations ({len(graph.relations)})",
            [
                ("From", "bold"),
                ("Type", "green"),
                ("To", "bold"),
            ],
        )
        for relation in graph.relations:
            relations.add_row(relation.from_, relation.relation_type, relation.to)
        console.print(relations)


def _print_stats(stats: dict) -> None:
    table = create_table(
        "Graph Stats",
        [
            ("Metric", "cyan"),
            ("Count", {"justify": "right"}),
        ],
    )
    table.add_row("Entities", str(stats["entities"]))
    table.add_row("Relations", str(stats["relations"]))
    table.add_row("Observations", str(stats["observations"]))
    for entity_type, count in stats["entity_types"].items():
        table.add_row(f"  entity: {entity_type}", str(count))
    for relation_type, count in stats["relation_types"].items():
        table.add_row(f"  relation: {relation_type}", str(count))
    console.print(table)
