"""Workspace file data model."""

from __future__ import annotations

from pydantic import BaseModel

DEFAULT_CONTENT_TYPE = "text/plain; charset=utf-8"
DEFAULT_AUTHOR = "system"


class FileEntry(BaseModel):
    """A file read back from a workspace, with its write metadata."""

    path: str
    content: str
    content_type: str = DEFAULT_CONTENT_TYPE
    author: str = DEFAULT_AUTHOR
    timestamp: str | None = None
    """ISO-8601 UTC time of the last write, ``None`` if the object carries no metadata."""
