"""Graph error taxonomy."""


class GraphError(Exception):
    """Base class for graph core errors."""


class EntityNotFoundError(GraphError):
    """An operation referenced an entity name that is not in the graph."""

    def __init__(self, entity_name: str) -> None:
        self.entity_name = entity_name
        super().__init__(f"Entity with name {entity_name} not found")


class PersistenceError(GraphError):
    """Saving the graph to the backend failed."""


class StoreError(GraphError):
    """A key-value backend get/set call failed."""
