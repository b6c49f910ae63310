"""Key-value backends holding the serialized graph.

Every backend implements the ``GraphStore`` protocol: an async ``get``
returning the stored value (or None when the key is absent) and an async
``set`` replacing it. Both raise ``StoreError`` on failure.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
import re
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any, Protocol, runtime_checkable

import httpx
from filelock import FileLock

from kvgraph.config.models import ConfigError, StorageConfig
from kvgraph.graph.errors import StoreError

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._:-]*$")


@runtime_checkable
class GraphStore(Protocol):
    """Interface for the key-value service the graph is persisted in."""

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any) -> None: ...


class MemoryGraphStore:
    """Process-local backend. Values are deep-copied in and out."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    async def get(self, key: str) -> Any | None:
        value = self._data.get(key)
        return copy.deepcopy(value)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class FileGraphStore:
    """File-backed backend storing one JSON document per key.

    Reads and writes hold a ``FileLock`` so separate processes never observe
    a partially written file; writes go through a temp file + replace.
    """

    def __init__(self, root: Path) -> None:
        self._root = root
        self._root.parent.mkdir(parents=True, exist_ok=True)
        self._lock = FileLock(str(root) + ".lock")

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, key: str) -> Path:
        return self._root / f"{_normalize_key(key)}.json"

    async def get(self, key: str) -> Any | None:
        path = self.path_for(key)
        return await asyncio.to_thread(self._read, path)

    async def set(self, key: str, value: Any) -> None:
        path = self.path_for(key)
        await asyncio.to_thread(self._write, path, value)

    def _read(self, path: Path) -> Any | None:
        with self._lock:
            if not path.exists():
                return None
            try:
                return json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                raise StoreError(f"failed to read {path}: {e}") from e

    def _write(self, path: Path, value: Any) -> None:
        with self._lock:
            temp_path: Path | None = None
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                with NamedTemporaryFile(
                    mode="w",
                    delete=False,
                    dir=str(path.parent),
                    suffix=".tmp",
                    encoding="utf-8",
                ) as handle:
                    temp_path = Path(handle.name)
                    json.dump(value, handle, ensure_ascii=False, separators=(",", ":"))
                    handle.write("\n")
                temp_path.replace(path)
            except (OSError, TypeError, ValueError) as e:
                if temp_path is not None:
                    temp_path.unlink(missing_ok=True)
                raise StoreError(f"failed to write {path}: {e}") from e


class RestGraphStore:
    """Redis-over-REST backend (Upstash / Vercel KV REST protocol).

    Each call POSTs a JSON command array such as ``["GET", key]`` to the
    base URL with bearer auth. Responses carry ``{"result": ...}`` on
    success and ``{"error": ...}`` on failure. Values are stored as JSON
    text.
    """

    def __init__(
        self,
        url: str,
        token: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url.rstrip("/")
        self._token = token
        self._timeout = timeout
        self._transport = transport

    async def get(self, key: str) -> Any | None:
        result = await self._command("GET", key)
        if result is None:
            return None
        if isinstance(result, str):
            try:
                return json.loads(result)
            except json.JSONDecodeError as e:
                raise StoreError(f"undecodable value at key {key!r}") from e
        return result

    async def set(self, key: str, value: Any) -> None:
        payload = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
        result = await self._command("SET", key, payload)
        if result != "OK":
            raise StoreError(f"unexpected SET result: {result!r}")

    async def _command(self, *args: str) -> Any:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self._url,
                    json=list(args),
                    headers={"Authorization": f"Bearer {self._token}"},
                )
        except httpx.HTTPError as e:
            raise StoreError(f"{args[0]} request failed: {e}") from e

        if response.status_code != 200:
            logger.error(
                "kv_request_failed",
                extra={
                    "kv.command": args[0],
                    "http.status_code": response.status_code,
                },
            )
            raise StoreError(f"{args[0]} failed: HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise StoreError(f"{args[0]} returned a non-JSON body") from e
        if not isinstance(data, dict):
            raise StoreError(f"{args[0]} returned an unexpected body")
        if "error" in data:
            raise StoreError(f"{args[0]} failed: {data['error']}")
        return data.get("result")


def _normalize_key(key: str) -> str:
    text = str(key).strip()
    if not text or not _KEY_PATTERN.match(text):
        raise StoreError(f"invalid store key: {key!r}")
    return text


def create_graph_store(config: StorageConfig) -> GraphStore:
    """Build the backend selected by ``config.backend``."""
    if config.backend == "memory":
        return MemoryGraphStore()
    if config.backend == "file":
        return FileGraphStore(config.path.expanduser())
    if config.url is None or config.token is None:
        raise ConfigError("rest backend requires url and token")
    return RestGraphStore(
        url=config.url,
        token=config.token.get_secret_value(),
        timeout=config.timeout,
    )
