"""Storage interfaces.

Two backends sit under the orchestration core:

- An **object store** holding workspace files.  It is a flat key/value blob
  store with prefix listing and cursor pagination (S3, R2, or the local
  filesystem stand-in).
- **Agent storage**, the durable per-agent key/value store the host gives
  each agent.  The coordinator keeps its whole registry under a single key.

Both interfaces are async so local and remote backends share one calling
convention.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from switchyard.models.enums import RetryKind


class TransientStoreError(RuntimeError):
    """Raised by store adapters for failures that are worth retrying.

    Adapters translate their backend's raw errors into a ``RetryKind`` once,
    here at the edge, so nothing deeper has to parse error text.
    """

    def __init__(self, kind: RetryKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind


@dataclass
class StoredObject:
    """An object fetched from the store."""

    key: str
    body: bytes
    content_type: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    def text(self) -> str:
        return self.body.decode("utf-8")


@dataclass
class ListPage:
    """One page of a prefix listing.

    ``cursor`` is only meaningful when ``truncated`` is true.
    """

    keys: list[str]
    truncated: bool = False
    cursor: str | None = None


@runtime_checkable
class ObjectStore(Protocol):
    """Async protocol for the blob store behind workspaces."""

    async def put(
        self,
        key: str,
        body: bytes,
        *,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> None:
        """Store ``body`` at ``key``, overwriting any existing object."""
        ...

    async def get(self, key: str) -> StoredObject | None:
        """Fetch an object.  Returns ``None`` if no object exists at ``key``."""
        ...

    async def delete(self, key: str) -> None:
        """Delete an object.  No-op if not found."""
        ...

    async def list(self, prefix: str, *, limit: int = 1000, cursor: str | None = None) -> ListPage:
        """List keys starting with ``prefix`` in ascending order, one page at a time."""
        ...


@runtime_checkable
class AgentStorage(Protocol):
    """Async protocol for an agent's durable key/value storage.

    Values are JSON-compatible (dicts, lists, strings, numbers).
    """

    async def get(self, key: str) -> Any | None:
        """Read a value.  Returns ``None`` if the key was never written."""
        ...

    async def put(self, key: str, value: Any) -> None:
        """Write a value, replacing any previous one."""
        ...
