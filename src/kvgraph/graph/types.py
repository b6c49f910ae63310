"""Graph node, edge and request/result types.

Attributes are snake_case in Python; the persisted and wire form uses the
camelCase aliases (``entityType``, ``relationType``, ``from``, ...).
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _GraphModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Entity(_GraphModel):
    """Named node with a type tag and ordered free-text observations."""

    name: str = Field(min_length=1)
    entity_type: str = Field(alias="entityType")
    observations: list[str] = Field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Entity:
        return cls.model_validate(d)


class Relation(_GraphModel):
    """Directed, typed edge between two entity names.

    Identity is the full ``(from, to, relationType)`` triple.
    """

    from_: str = Field(alias="from")
    to: str
    relation_type: str = Field(alias="relationType")

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.from_, self.to, self.relation_type)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Relation:
        return cls.model_validate(d)


class ObservationAddition(_GraphModel):
    entity_name: str = Field(alias="entityName")
    contents: list[str]


class ObservationResult(_GraphModel):
    entity_name: str = Field(alias="entityName")
    added_observations: list[str] = Field(alias="addedObservations")


class ObservationDeletion(_GraphModel):
    entity_name: str = Field(alias="entityName")
    observations: list[str]


class KnowledgeGraph(_GraphModel):
    """The full set of entities and relations, persisted as one unit."""

    entities: list[Entity] = Field(default_factory=list)
    relations: list[Relation] = Field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> KnowledgeGraph:
        return cls.model_validate(d)

    def get_entity(self, name: str) -> Entity | None:
        for entity in self.entities:
            if entity.name == name:
                return entity
        return None

    def entity_names(self) -> set[str]:
        return {e.name for e in self.entities}

    def relation_keys(self) -> set[tuple[str, str, str]]:
        return {r.key for r in self.relations}

    def subgraph(self, predicate: Callable[[Entity], bool]) -> KnowledgeGraph:
        """Extract the entities matching ``predicate``.

        Only relations whose both endpoints survive the filter are kept.
        """
        entities = [e for e in self.entities if predicate(e)]
        names = {e.name for e in entities}
        relations = [r for r in self.relations if r.from_ in names and r.to in names]
        return KnowledgeGraph(entities=entities, relations=relations)

    def stats(self) -> dict[str, Any]:
        """Entity/relation counts with per-type tallies."""
        entity_types = Counter(e.entity_type for e in self.entities)
        relation_types = Counter(r.relation_type for r in self.relations)
        return {
            "entities": len(self.entities),
            "relations": len(self.relations),
            "observations": sum(len(e.observations) for e in self.entities),
            "entity_types": dict(entity_types.most_common()),
            "relation_types": dict(relation_types.most_common()),
        }
