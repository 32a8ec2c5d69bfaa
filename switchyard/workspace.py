"""Workspace-scoped virtual file system.

Each worker agent owns a workspace: a key prefix in the object store under
which all of its files live::

    {workspace_path}/{normalized relative path}

Logical paths are normalized with ``normalize_path`` before being joined to
the prefix, so no path can address a key outside the workspace.  Every
store call runs through a ``RetryExecutor``; transient store failures are
retried there and only terminal failures (``OperationError``) reach callers.
"""

from __future__ import annotations

from datetime import UTC, datetime

from switchyard.models.workspace import DEFAULT_AUTHOR, DEFAULT_CONTENT_TYPE, FileEntry
from switchyard.paths import normalize_path
from switchyard.retry import DEFAULT_MAX_ATTEMPTS, RetryExecutor
from switchyard.store.base import ListPage, ObjectStore, StoredObject

LIST_PAGE_SIZE = 1000


class WorkspaceFs:
    """File operations confined to one workspace prefix."""

    def __init__(
        self,
        store: ObjectStore,
        workspace_path: str,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry: RetryExecutor | None = None,
    ) -> None:
        self._store = store
        self._prefix = workspace_path.rstrip("/") + "/"
        self._retry = retry or RetryExecutor(max_attempts)

    @property
    def prefix(self) -> str:
        return self._prefix

    def resolve_key(self, path: str) -> str:
        """Storage key for a logical path."""
        return f"{self._prefix}{normalize_path(path)}"

    # -- Write -----------------------------------------------------------------

    async def write_file(
        self,
        path: str,
        content: str,
        *,
        author: str | None = None,
        content_type: str | None = None,
    ) -> None:
        """Write ``content`` to ``path``, replacing any existing file.

        Raises ``ValueError`` if ``path`` resolves to the workspace root.
        """
        if not normalize_path(path):
            msg = f"Path resolves to the workspace root: {path!r}"
            raise ValueError(msg)

        key = self.resolve_key(path)
        body = content.encode("utf-8")
        metadata = {
            "timestamp": datetime.now(UTC).isoformat(),
            "author": author or DEFAULT_AUTHOR,
        }
        await self._retry.execute(
            lambda: self._store.put(
                key,
                body,
                content_type=content_type or DEFAULT_CONTENT_TYPE,
                metadata=metadata,
            )
        )

    # -- Read ------------------------------------------------------------------

    async def read_file(self, path: str) -> str | None:
        """Read a file as text.  Returns ``None`` if it does not exist."""
        entry = await self.read_entry(path)
        return entry.content if entry is not None else None

    async def read_entry(self, path: str) -> FileEntry | None:
        """Read a file with its write metadata.  Returns ``None`` if it does not exist."""
        key = self.resolve_key(path)
        obj: StoredObject | None = await self._retry.execute(lambda: self._store.get(key))
        if obj is None:
            return None
        return FileEntry(
            path=normalize_path(path),
            content=obj.text(),
            content_type=obj.content_type or DEFAULT_CONTENT_TYPE,
            author=obj.metadata.get("author", DEFAULT_AUTHOR),
            timestamp=obj.metadata.get("timestamp"),
        )

    async def list_files(self, dir: str | None = None) -> list[str]:  # noqa: A002
        """List file paths (relative to the workspace) under ``dir``.

        Follows the store's cursor until the listing is exhausted.  Results
        are de-duplicated and sorted.  A failure on any page fails the whole
        call.
        """
        safe_dir = normalize_path(dir) if dir else ""
        prefix = f"{self._prefix}{safe_dir}/" if safe_dir else self._prefix

        found: set[str] = set()
        cursor: str | None = None
        while True:
            page: ListPage = await self._retry.execute(
                lambda c=cursor: self._store.list(prefix, limit=LIST_PAGE_SIZE, cursor=c)
            )
            found.update(key[len(self._prefix) :] for key in page.keys)
            if not page.truncated or not page.cursor:
                break
            cursor = page.cursor

        return sorted(found)

    # -- Delete ----------------------------------------------------------------

    async def delete_file(self, path: str) -> None:
        """Delete a file.  No-op if it does not exist."""
        key = self.resolve_key(path)
        await self._retry.execute(lambda: self._store.delete(key))
