"""Object store and agent storage implementations."""

from switchyard.store.base import AgentStorage, ListPage, ObjectStore, StoredObject, TransientStoreError
from switchyard.store.local import LocalAgentStorage, LocalObjectStore

__all__ = [
    "AgentStorage",
    "ListPage",
    "LocalAgentStorage",
    "LocalObjectStore",
    "ObjectStore",
    "StoredObject",
    "TransientStoreError",
]
