"""Shared test fixtures.

Everything runs against the local filesystem stores under ``tmp_path``.
Failure injection wraps a real store instead of mocking it, so pagination
and metadata behave exactly as in production code paths.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from switchyard.retry import RetryExecutor
from switchyard.settings import _get_settings_cached
from switchyard.store.base import ListPage, StoredObject
from switchyard.store.local import LocalAgentStorage, LocalObjectStore


class FlakyStore:
    """Object store wrapper that fails scripted calls before delegating.

    ``failures`` maps an operation name (``put``, ``get``, ``delete``,
    ``list``) to a list of exceptions raised, in order, by its next calls.
    """

    def __init__(self, inner: LocalObjectStore, failures: dict[str, list[Exception]] | None = None) -> None:
        self.inner = inner
        self.failures = failures or {}
        self.calls: dict[str, int] = {"put": 0, "get": 0, "delete": 0, "list": 0}

    def _maybe_fail(self, op: str) -> None:
        self.calls[op] += 1
        pending = self.failures.get(op)
        if pending:
            raise pending.pop(0)

    async def put(self, key: str, body: bytes, *, content_type: str, metadata: dict[str, str] | None = None) -> None:
        self._maybe_fail("put")
        await self.inner.put(key, body, content_type=content_type, metadata=metadata)

    async def get(self, key: str) -> StoredObject | None:
        self._maybe_fail("get")
        return await self.inner.get(key)

    async def delete(self, key: str) -> None:
        self._maybe_fail("delete")
        await self.inner.delete(key)

    async def list(self, prefix: str, *, limit: int = 1000, cursor: str | None = None) -> ListPage:
        self._maybe_fail("list")
        return await self.inner.list(prefix, limit=limit, cursor=cursor)


class SleepRecorder:
    """Stand-in for ``anyio.sleep`` that records delays instead of waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    _get_settings_cached.cache_clear()
    yield
    _get_settings_cached.cache_clear()


@pytest.fixture
def object_store(tmp_path: Path) -> LocalObjectStore:
    return LocalObjectStore(tmp_path / "blobs")


@pytest.fixture
def agent_storage(tmp_path: Path) -> LocalAgentStorage:
    return LocalAgentStorage(tmp_path / "state", namespace="default")


@pytest.fixture
def sleeps() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def retry(sleeps: SleepRecorder) -> RetryExecutor:
    """Default retry policy with recorded (not real) backoff sleeps."""
    return RetryExecutor(sleep=sleeps)


@pytest.fixture
def flaky_store(object_store: LocalObjectStore) -> FlakyStore:
    """Local store that tests can script failures into via ``.failures``."""
    return FlakyStore(object_store)
