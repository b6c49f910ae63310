"""Server command for running the kvgraph HTTP API."""

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer

logger = logging.getLogger(__name__)


def register(app: typer.Typer) -> None:
    """Register the serve command."""

    @app.command()
    def serve(
        config: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="Path to configuration file",
            ),
        ] = None,
        host: Annotated[
            str | None,
            typer.Option(
                "--host",
                "-h",
                help="Host to bind to (default: server.host)",
            ),
        ] = None,
        port: Annotated[
            int | None,
            typer.Option(
                "--port",
                "-p",
                help="Port to bind to (default: server.port)",
            ),
        ] = None,
    ) -> None:
        """Start the kvgraph HTTP server."""
        try:
            asyncio.run(_run_server(config, host, port))
        except KeyboardInterrupt:
            # Use print here since logging may not be configured yet
            print("\nServer stopped")


async def _run_server(
    config_path: Path | None = None,
    host: str | None = None,
    port: int | None = None,
) -> None:
    """Run the server asynchronously."""
    from kvgraph.cli.context import get_config, get_manager
    from kvgraph.logging import configure_logging, configure_redaction
    from kvgraph.server import ServerRunner, create_app

    kvgraph_config = get_config(config_path)

    log_config = kvgraph_config.logging
    token = kvgraph_config.storage.token
    configure_redaction(
        enabled=log_config.redact,
        secrets=[token.get_secret_value()] if token else None,
    )
    configure_logging(
        level=log_config.level,
        use_rich=True,
        log_to_file=log_config.log_to_file,
        retention_days=log_config.retention_days,
    )

    logger.info(
        "Using graph store %s (key=%s)",
        kvgraph_config.describe_storage(),
        kvgraph_config.storage.key,
    )
    manager = get_manager(kvgraph_config)
    fastapi_app = create_app(manager, config=kvgraph_config)

    runner = ServerRunner(
        fastapi_app,
        host=host if host is not None else kvgraph_config.server.host,
        port=port if port is not None else kvgraph_config.server.port,
    )
    await runner.run()
