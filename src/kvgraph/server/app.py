"""FastAPI application for the kvgraph server."""

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from kvgraph.server.routes import graph, health

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from kvgraph.config import KVGraphConfig
    from kvgraph.graph import GraphManager

logger = logging.getLogger(__name__)


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    # Drop the leading "body"/"query" segment from the location
    loc = ".".join(str(part) for part in first.get("loc", ())[1:])
    msg = first.get("msg", "invalid value")
    return f"{loc}: {msg}" if loc else msg


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info(
        "request_rejected",
        extra={"http.path": request.url.path, "error.count": len(exc.errors())},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": _describe_validation_error(exc)},
    )


class KVGraphServer:
    """Main server application.

    Owns the FastAPI app and exposes the GraphManager to routes via
    ``app.state.manager``.
    """

    def __init__(
        self,
        manager: "GraphManager",
        config: "KVGraphConfig | None" = None,
    ):
        self._manager = manager
        self._config = config
        self._app = self._create_app()

    @property
    def app(self) -> FastAPI:
        """Get the FastAPI application."""
        return self._app

    @property
    def manager(self) -> "GraphManager":
        return self._manager

    def _create_app(self) -> FastAPI:
        """Create and configure the FastAPI app."""
        manager = self._manager
        config = self._config

        @asynccontextmanager
        async def lifespan(app: FastAPI) -> "AsyncIterator[None]":
            logger.info(
                "server_starting",
                extra={
                    "store.key": manager.key,
                    "store.backend": type(manager.store).__name__,
                },
            )
            yield
            logger.info("server_stopping")

        app = FastAPI(
            title="kvgraph",
            description="Knowledge graph over a key-value store",
            version="0.1.0",
            lifespan=lifespan,
        )

        app.state.server = self
        app.state.manager = manager

        app.add_exception_handler(RequestValidationError, _validation_error_handler)

        prefix = config.server.api_prefix.rstrip("/") if config else ""
        app.include_router(health.router, tags=["health"])
        app.include_router(graph.router, prefix=prefix, tags=["graph"])

        return app


def create_app(
    manager: "GraphManager",
    config: "KVGraphConfig | None" = None,
) -> FastAPI:
    """Create the FastAPI application."""
    server = KVGraphServer(manager=manager, config=config)
    return server.app
