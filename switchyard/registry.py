"""Durable agent registry.

The coordinator records every worker it has created in a single mapping
``{agent_id: AgentRegistryEntry}`` stored under one key of its agent
storage.  The mapping is always read whole, changed in memory, and written
back whole.

Read-modify-write cycles run inside ``transaction()``, which holds the
registry lock for the whole cycle.  Callers that check-then-insert (agent
creation) keep the lock across the check and the insert, so two creations
of the same id in this process cannot both pass the duplicate check.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

from loguru import logger
from pydantic import TypeAdapter

from switchyard.models.agent import AgentRegistryEntry
from switchyard.store.base import AgentStorage

REGISTRY_KEY = "agent_registry"
FALLBACK_AGENT_ID = "agent"

_DISALLOWED = re.compile(r"[^a-z0-9\-_]+")
_UNDERSCORES = re.compile(r"_+")

_mapping_adapter = TypeAdapter(dict[str, AgentRegistryEntry])


def sanitize_agent_id(name: str) -> str:
    """Derive the key-safe agent id from a human-supplied name.

    >>> sanitize_agent_id("DMD Research!!")
    'dmd_research'

    This is the only way ids are derived, so it defines when two names
    refer to the same agent.
    """
    sanitized = _DISALLOWED.sub("_", name.strip().lower())
    sanitized = _UNDERSCORES.sub("_", sanitized).strip("_")
    return sanitized or FALLBACK_AGENT_ID


class AgentRegistry:
    """The coordinator's ``agent_id -> AgentRegistryEntry`` mapping."""

    def __init__(self, storage: AgentStorage, key: str = REGISTRY_KEY) -> None:
        self._storage = storage
        self._key = key
        self._lock = asyncio.Lock()

    # -- Persistence -----------------------------------------------------------

    async def load(self) -> dict[str, AgentRegistryEntry]:
        """Load the whole mapping.  An absent key is an empty registry."""
        raw = await self._storage.get(self._key)
        if raw is None:
            return {}
        return _mapping_adapter.validate_python(raw)

    async def save(self, mapping: dict[str, AgentRegistryEntry]) -> None:
        """Overwrite the stored mapping."""
        await self._storage.put(self._key, _mapping_adapter.dump_python(mapping, mode="json"))

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[dict[str, AgentRegistryEntry]]:
        """Serialized read-modify-write of the mapping.

        Yields the loaded mapping; changes made to it are saved when the
        block exits without an exception and discarded otherwise.  A block
        that leaves the mapping as loaded writes nothing.
        """
        async with self._lock:
            mapping = await self.load()
            before = _mapping_adapter.dump_python(mapping, mode="json")
            yield mapping
            after = _mapping_adapter.dump_python(mapping, mode="json")
            if after != before:
                await self._storage.put(self._key, after)

    # -- Query -----------------------------------------------------------------

    async def get(self, agent_id: str) -> AgentRegistryEntry | None:
        return (await self.load()).get(agent_id)

    async def list_entries(self) -> list[AgentRegistryEntry]:
        return list((await self.load()).values())

    # -- Mutation --------------------------------------------------------------

    async def touch(self, agent_id: str, when: datetime) -> bool:
        """Advance ``last_active`` of a known agent.

        ``last_active`` never moves backwards.  Returns ``False`` (and writes
        nothing) if the agent is not registered.
        """
        async with self.transaction() as mapping:
            entry = mapping.get(agent_id)
            if entry is None:
                return False
            entry.last_active = max(entry.last_active, when)
        logger.debug("Registry: touched agent {} (last_active={})", agent_id, entry.last_active)
        return True
