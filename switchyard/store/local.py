"""Local filesystem stores.

``LocalObjectStore`` keeps workspace objects under a data root::

    {data_root}/objects/{quoted key}        -> object body
    {data_root}/meta/{quoted key}.json      -> content type + custom metadata

Keys are percent-encoded into a single file name, so the key space stays
flat: ``ws/notes`` and ``ws/notes/today.md`` are independent objects.

``LocalAgentStorage`` keeps durable agent values as JSON files::

    {data_root}/agents/{namespace}/{key}.json

Uses ``anyio.to_thread.run_sync`` for non-blocking file I/O.

Writes are atomic: data is written to a temporary file in the same directory,
then renamed to the target path.  This prevents corrupt reads if the process
crashes mid-write.
"""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
from functools import partial
from pathlib import Path
from typing import Any
from urllib.parse import quote, unquote

from anyio import to_thread

from switchyard.store.base import ListPage, StoredObject

_TMP_PREFIX = ".switchyard-tmp-"


class LocalObjectStore:
    """Local filesystem implementation of the ObjectStore protocol.

    Listing scans every object file, so it is meant for development and tests
    rather than large workspaces.
    """

    def __init__(self, data_root: str | Path) -> None:
        base = Path(data_root)
        self._objects = base / "objects"
        self._meta = base / "meta"

    def _object_path(self, key: str) -> Path:
        return self._objects / _encode_key(key)

    def _meta_path(self, key: str) -> Path:
        return self._meta / f"{_encode_key(key)}.json"

    # -- Write -----------------------------------------------------------------

    async def put(
        self,
        key: str,
        body: bytes,
        *,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> None:
        meta = json.dumps({"content_type": content_type, "metadata": metadata or {}})
        await to_thread.run_sync(partial(_atomic_write, self._object_path(key), body))
        await to_thread.run_sync(partial(_atomic_write, self._meta_path(key), meta.encode("utf-8")))

    # -- Read ------------------------------------------------------------------

    async def get(self, key: str) -> StoredObject | None:
        return await to_thread.run_sync(partial(self._read_object, key))

    def _read_object(self, key: str) -> StoredObject | None:
        path = self._object_path(key)
        if not path.is_file():
            return None
        body = path.read_bytes()
        meta_path = self._meta_path(key)
        meta: dict[str, Any] = {}
        if meta_path.is_file():
            meta = json.loads(meta_path.read_text(encoding="utf-8"))
        return StoredObject(
            key=key,
            body=body,
            content_type=meta.get("content_type"),
            metadata=meta.get("metadata", {}),
        )

    async def list(self, prefix: str, *, limit: int = 1000, cursor: str | None = None) -> ListPage:
        keys = await to_thread.run_sync(partial(self._matching_keys, prefix))
        if cursor is not None:
            keys = [k for k in keys if k > cursor]
        page = keys[:limit]
        truncated = len(keys) > limit
        return ListPage(keys=page, truncated=truncated, cursor=page[-1] if truncated else None)

    def _matching_keys(self, prefix: str) -> list[str]:
        if not self._objects.exists():
            return []
        keys = []
        for path in self._objects.iterdir():
            if path.is_file() and not path.name.startswith(_TMP_PREFIX):
                key = unquote(path.name)
                if key.startswith(prefix):
                    keys.append(key)
        return sorted(keys)

    # -- Delete ----------------------------------------------------------------

    async def delete(self, key: str) -> None:
        await to_thread.run_sync(partial(_unlink, self._object_path(key)))
        await to_thread.run_sync(partial(_unlink, self._meta_path(key)))


class LocalAgentStorage:
    """Local filesystem implementation of the AgentStorage protocol."""

    def __init__(self, data_root: str | Path, namespace: str) -> None:
        self._base = Path(data_root) / "agents" / namespace

    def _value_path(self, key: str) -> Path:
        return self._base / f"{_checked_key(key)}.json"

    async def get(self, key: str) -> Any | None:
        path = self._value_path(key)
        raw = await to_thread.run_sync(partial(_read_optional, path))
        if raw is None:
            return None
        return json.loads(raw)

    async def put(self, key: str, value: Any) -> None:
        data = json.dumps(value, indent=2).encode("utf-8")
        await to_thread.run_sync(partial(_atomic_write, self._value_path(key), data))


# -- Sync helpers (run in thread pool) -----------------------------------------


def _checked_key(key: str) -> str:
    """Reject empty, absolute and dot-dot keys."""
    parts = key.split("/")
    if key in ("", ".") or key.startswith("/") or ".." in parts:
        msg = f"Invalid object key: {key!r}"
        raise ValueError(msg)
    return key


def _encode_key(key: str) -> str:
    """File name of an object key.  Every ``/`` is encoded, so keys never nest."""
    return quote(_checked_key(key), safe="")


def _atomic_write(path: Path, data: bytes) -> None:
    """Write data atomically: temp file + rename.

    Ensures readers never see a partially-written file.  The temp file is
    created in the same directory so ``os.replace`` is atomic on POSIX.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=_TMP_PREFIX)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise


def _read_optional(path: Path) -> str | None:
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8")


def _unlink(path: Path) -> None:
    """Remove a file.  No-op if it doesn't exist."""
    if path.is_file():
        path.unlink()
