"""Knowledge graph manager.

Every operation loads the full graph snapshot from the store, computes its
result against the in-memory copy and, when it mutated the copy, writes the
whole snapshot back under the same key.

Mutating operations hold a per-manager ``asyncio.Lock`` across the
load/mutate/save cycle, so writers inside one process are serialized.
Writers in other processes sharing the same backend are not coordinated and
can still overwrite each other's snapshot.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from pydantic import ValidationError

from kvgraph.graph.errors import EntityNotFoundError, PersistenceError
from kvgraph.graph.store import GraphStore
from kvgraph.graph.types import (
    Entity,
    KnowledgeGraph,
    ObservationAddition,
    ObservationDeletion,
    ObservationResult,
    Relation,
)

logger = logging.getLogger(__name__)

GRAPH_KEY = "knowledge_graph"


class GraphManager:
    """CRUD and search over a knowledge graph persisted as one blob."""

    def __init__(self, store: GraphStore, key: str = GRAPH_KEY) -> None:
        self._store = store
        self._key = key
        self._write_lock = asyncio.Lock()

    @property
    def store(self) -> GraphStore:
        return self._store

    @property
    def key(self) -> str:
        return self._key

    # -- Load / save --

    async def load(self, strict: bool = False) -> KnowledgeGraph:
        """Load the graph.

        By default an unreadable or invalid document degrades to an empty
        graph. With ``strict`` (used before every write) the failure raises
        ``PersistenceError`` instead, so a write never replaces a stored
        document it could not read.
        """
        try:
            raw = await self._store.get(self._key)
        except Exception as e:
            if strict:
                logger.error(
                    "graph_load_failed", extra={"store.key": self._key}, exc_info=True
                )
                raise PersistenceError(f"Failed to load graph: {e}") from e
            logger.warning(
                "graph_load_failed", extra={"store.key": self._key}, exc_info=True
            )
            return KnowledgeGraph()

        if raw is None:
            return KnowledgeGraph()
        try:
            return KnowledgeGraph.from_dict(raw)
        except ValidationError as e:
            if strict:
                logger.error(
                    "graph_load_invalid", extra={"store.key": self._key}, exc_info=True
                )
                raise PersistenceError("Stored graph failed validation") from e
            logger.warning(
                "graph_load_invalid", extra={"store.key": self._key}, exc_info=True
            )
            return KnowledgeGraph()

    async def save(self, graph: KnowledgeGraph) -> None:
        """Write the full graph. Failures surface as ``PersistenceError``."""
        try:
            await self._store.set(self._key, graph.to_dict())
        except Exception as e:
            logger.error(
                "graph_save_failed", extra={"store.key": self._key}, exc_info=True
            )
            raise PersistenceError(f"Failed to save graph: {e}") from e
        logger.debug(
            "graph_saved",
            extra={
                "graph.entities": len(graph.entities),
                "graph.relations": len(graph.relations),
            },
        )

    # -- Entities --

    async def create_entities(self, entities: Iterable[Entity]) -> list[Entity]:
        """Add entities whose names are not yet taken.

        Returns the entities actually added; colliding names are skipped.
        """
        async with self._write_lock:
            graph = await self.load(strict=True)
            seen = graph.entity_names()
            created: list[Entity] = []
            for entity in entities:
                if entity.name in seen:
                    continue
                seen.add(entity.name)
                created.append(entity)
            graph.entities.extend(created)
            await self.save(graph)

        logger.info("entities_created", extra={"count": len(created)})
        return created

    async def delete_entities(self, entity_names: Iterable[str]) -> None:
        """Delete entities and every relation touching them."""
        names = set(entity_names)
        async with self._write_lock:
            graph = await self.load(strict=True)
            graph.entities = [e for e in graph.entities if e.name not in names]
            graph.relations = [
                r
                for r in graph.relations
                if r.from_ not in names and r.to not in names
            ]
            await self.save(graph)

    # -- Relations --

    async def create_relations(self, relations: Iterable[Relation]) -> list[Relation]:
        """Add relations whose (from, to, relationType) triple is new."""
        async with self._write_lock:
            graph = await self.load(strict=True)
            seen = graph.relation_keys()
            created: list[Relation] = []
            for relation in relations:
                if relation.key in seen:
                    continue
                seen.add(relation.key)
                created.append(relation)
            graph.relations.extend(created)
            await self.save(graph)

        logger.info("relations_created", extra={"count": len(created)})
        return created

    async def delete_relations(self, relations: Iterable[Relation]) -> None:
        """Delete relations matching the given triples exactly."""
        keys = {r.key for r in relations}
        async with self._write_lock:
            graph = await self.load(strict=True)
            graph.relations = [r for r in graph.relations if r.key not in keys]
            await self.save(graph)

    # -- Observations --

    async def add_observations(
        self, additions: Iterable[ObservationAddition]
    ) -> list[ObservationResult]:
        """Append new observation strings to existing entities.

        Raises:
            EntityNotFoundError: If any item names an unknown entity. Nothing
                is saved and later items are not processed.
        """
        async with self._write_lock:
            graph = await self.load(strict=True)
            results: list[ObservationResult] = []
            for addition in additions:
                entity = graph.get_entity(addition.entity_name)
                if entity is None:
                    raise EntityNotFoundError(addition.entity_name)
                existing = set(entity.observations)
                added: list[str] = []
                for content in addition.contents:
                    if content in existing:
                        continue
                    existing.add(content)
                    added.append(content)
                entity.observations.extend(added)
                results.append(
                    ObservationResult(
                        entity_name=addition.entity_name,
                        added_observations=added,
                    )
                )
            await self.save(graph)
        return results

    async def delete_observations(
        self, deletions: Iterable[ObservationDeletion]
    ) -> None:
        """Remove observation strings; unknown entities are skipped."""
        async with self._write_lock:
            graph = await self.load(strict=True)
            for deletion in deletions:
                entity = graph.get_entity(deletion.entity_name)
                if entity is None:
                    continue
                remove = set(deletion.observations)
                entity.observations = [
                    o for o in entity.observations if o not in remove
                ]
            await self.save(graph)

    # -- Queries --

    async def read_graph(self) -> KnowledgeGraph:
        return await self.load()

    async def search_nodes(self, query: str) -> KnowledgeGraph:
        """Case-insensitive substring search over names, types and observations.

        An empty query matches every entity.
        """
        needle = query.lower()

        def matches(entity: Entity) -> bool:
            return (
                needle in entity.name.lower()
                or needle in entity.entity_type.lower()
                or any(needle in o.lower() for o in entity.observations)
            )

        graph = await self.load()
        return graph.subgraph(matches)

    async def open_nodes(self, names: Iterable[str]) -> KnowledgeGraph:
        """Extract the named entities and the relations among them."""
        wanted = set(names)
        graph = await self.load()
        return graph.subgraph(lambda e: e.name in wanted)
