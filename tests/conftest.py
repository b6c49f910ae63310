"""Shared test fixtures and factories."""

from pathlib import Path
from typing import Any

import pytest

from kvgraph.config.paths import ENV_VAR, get_kvgraph_home
from kvgraph.graph import Entity, GraphManager, MemoryGraphStore, Relation
from kvgraph.graph.errors import StoreError

# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def kvgraph_home(tmp_path: Path, monkeypatch) -> Path:
    """Point KVGRAPH_HOME at a temporary directory for every test."""
    home = tmp_path / ".kvgraph"
    home.mkdir()
    monkeypatch.setenv(ENV_VAR, str(home))
    monkeypatch.delenv("KV_REST_API_URL", raising=False)
    monkeypatch.delenv("KV_REST_API_TOKEN", raising=False)
    monkeypatch.delenv("KVGRAPH_LOG_LEVEL", raising=False)
    get_kvgraph_home.cache_clear()
    yield home
    get_kvgraph_home.cache_clear()


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def config_toml_content(tmp_path: Path) -> str:
    """Valid TOML config content."""
    return f"""
[storage]
backend = "file"
key = "test_graph"
path = "{tmp_path / "store"}"

[server]
host = "0.0.0.0"
port = 9090
"""


@pytest.fixture
def config_file(tmp_path: Path, config_toml_content: str) -> Path:
    """Create a temporary config file."""
    config_path = tmp_path / "config.toml"
    config_path.write_text(config_toml_content)
    return config_path


# =============================================================================
# Store / Manager Fixtures
# =============================================================================


class FlakyStore:
    """In-memory store whose get/set can be switched to fail."""

    def __init__(self) -> None:
        self.inner = MemoryGraphStore()
        self.fail_get = False
        self.fail_set = False
        self.get_calls = 0
        self.set_calls = 0

    async def get(self, key: str) -> Any | None:
        self.get_calls += 1
        if self.fail_get:
            raise StoreError("backend unavailable")
        return await self.inner.get(key)

    async def set(self, key: str, value: Any) -> None:
        self.set_calls += 1
        if self.fail_set:
            raise StoreError("backend unavailable")
        await self.inner.set(key, value)


@pytest.fixture
def memory_store() -> MemoryGraphStore:
    return MemoryGraphStore()


@pytest.fixture
def flaky_store() -> FlakyStore:
    return FlakyStore()


@pytest.fixture
def manager(memory_store: MemoryGraphStore) -> GraphManager:
    return GraphManager(memory_store)


@pytest.fixture
def flaky_manager(flaky_store: FlakyStore) -> GraphManager:
    return GraphManager(flaky_store)


def make_entity(
    name: str, entity_type: str = "person", observations: list[str] | None = None
) -> Entity:
    return Entity(
        name=name, entity_type=entity_type, observations=list(observations or [])
    )


def make_relation(source: str, target: str, relation_type: str = "knows") -> Relation:
    return Relation(from_=source, to=target, relation_type=relation_type)


# =============================================================================
# CLI Fixtures
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner with colors disabled."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1"})
