"""Knowledge graph routes.

Request bodies are validated by FastAPI before any manager call; validation
failures become 400 responses (see ``kvgraph.server.app``). Any error raised
by the manager is logged with its traceback and answered with a fixed 500
message, never the error detail.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from kvgraph.graph.manager import GraphManager
from kvgraph.graph.types import (
    Entity,
    KnowledgeGraph,
    ObservationAddition,
    ObservationDeletion,
    ObservationResult,
    Relation,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def get_manager(request: Request) -> GraphManager:
    return request.app.state.manager


Manager = Annotated[GraphManager, Depends(get_manager)]


class OpenNodesRequest(BaseModel):
    names: list[str]


class EntitiesRequest(BaseModel):
    entities: list[Entity]


class DeleteEntitiesRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    entity_names: list[str] = Field(alias="entityNames")


class RelationsRequest(BaseModel):
    relations: list[Relation]


class AddObservationsRequest(BaseModel):
    observations: list[ObservationAddition]


class DeleteObservationsRequest(BaseModel):
    deletions: list[ObservationDeletion]


def _failure(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": message},
    )


def _message(message: str) -> dict[str, str]:
    return {"message": message}


@router.get("/graph", response_model=KnowledgeGraph)
async def read_graph(manager: Manager):
    try:
        return await manager.read_graph()
    except Exception:
        logger.exception("Error reading graph")
        return _failure("Failed to read knowledge graph")


@router.get("/graph/search", response_model=KnowledgeGraph)
async def search_nodes(manager: Manager, query: Annotated[str, Query(min_length=1)]):
    try:
        return await manager.search_nodes(query)
    except Exception:
        logger.exception("Error searching nodes")
        return _failure("Failed to search knowledge graph")


@router.post("/graph/nodes", response_model=KnowledgeGraph)
async def open_nodes(manager: Manager, body: OpenNodesRequest):
    try:
        return await manager.open_nodes(body.names)
    except Exception:
        logger.exception("Error opening nodes")
        return _failure("Failed to open nodes")


@router.post(
    "/entities",
    response_model=list[Entity],
    status_code=status.HTTP_201_CREATED,
)
async def create_entities(manager: Manager, body: EntitiesRequest):
    try:
        return await manager.create_entities(body.entities)
    except Exception:
        logger.exception("Error creating entities")
        return _failure("Failed to create entities")


@router.delete("/entities")
async def delete_entities(manager: Manager, body: DeleteEntitiesRequest):
    try:
        await manager.delete_entities(body.entity_names)
    except Exception:
        logger.exception("Error deleting entities")
        return _failure("Failed to delete entities")
    return _message("Entities deleted successfully")


@router.post(
    "/relations",
    response_model=list[Relation],
    status_code=status.HTTP_201_CREATED,
)
async def create_relations(manager: Manager, body: RelationsRequest):
    try:
        return await manager.create_relations(body.relations)
    except Exception:
        logger.exception("Error creating relations")
        return _failure("Failed to create relations")


@router.delete("/relations")
async def delete_relations(manager: Manager, body: RelationsRequest):
    try:
        await manager.delete_relations(body.relations)
    except Exception:
        logger.exception("Error deleting relations")
        return _failure("Failed to delete relations")
    return _message("Relations deleted successfully")


@router.post(
    "/observations",
    response_model=list[ObservationResult],
    status_code=status.HTTP_201_CREATED,
)
async def add_observations(manager: Manager, body: AddObservationsRequest):
    try:
        return await manager.add_observations(body.observations)
    except Exception:
        logger.exception("Error adding observations")
        return _failure("Failed to add observations")


@router.delete("/observations")
async def delete_observations(manager: Manager, body: DeleteObservationsRequest):
    try:
        await manager.delete_observations(body.deletions)
    except Exception:
        logger.exception("Error deleting observations")
        return _failure("Failed to delete observations")
    return _message("Observations deleted successfully")
