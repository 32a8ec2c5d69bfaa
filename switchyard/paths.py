"""Logical path normalization for workspace files.

Workspace paths are relative, slash-separated, and may never climb out of
the workspace they are resolved against.  ``..`` segments are resolved
structurally rather than rejected: one beyond the root is simply dropped.
"""

from __future__ import annotations


def normalize_path(path: str) -> str:
    """Normalize a logical path.

    >>> normalize_path("/notes/./draft/../final.md")
    'notes/final.md'
    >>> normalize_path("../../etc/passwd")
    'etc/passwd'

    Deterministic and idempotent.  Never raises; may return ``""``.
    """
    stack: list[str] = []
    for segment in path.lstrip("/").split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if stack:
                stack.pop()
            continue
        stack.append(segment)
    return "/".join(stack)
