"""Knowledge graph core.

Public API:
- GraphManager: CRUD and search over the persisted graph
- GraphStore: Key-value backend protocol (memory, file, REST)
- create_graph_store: Build a backend from StorageConfig

Types:
- Entity, Relation, KnowledgeGraph
- ObservationAddition, ObservationDeletion, ObservationResult
"""

from kvgraph.graph.errors import (
    EntityNotFoundError,
    GraphError,
    PersistenceError,
    StoreError,
)
from kvgraph.graph.manager import GRAPH_KEY, GraphManager
from kvgraph.graph.store import (
    FileGraphStore,
    GraphStore,
    MemoryGraphStore,
    RestGraphStore,
    create_graph_store,
)
from kvgraph.graph.types import (
    Entity,
    KnowledgeGraph,
    ObservationAddition,
    ObservationDeletion,
    ObservationResult,
    Relation,
)

__all__ = [
    "GRAPH_KEY",
    "Entity",
    "EntityNotFoundError",
    "FileGraphStore",
    "GraphError",
    "GraphManager",
    "GraphStore",
    "KnowledgeGraph",
    "MemoryGraphStore",
    "ObservationAddition",
    "ObservationDeletion",
    "ObservationResult",
    "PersistenceError",
    "Relation",
    "RestGraphStore",
    "StoreError",
    "create_graph_store",
]
