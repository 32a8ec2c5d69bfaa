"""Agent registry data models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from switchyard.models.enums import MessageRole


class AgentRegistryEntry(BaseModel):
    """One worker agent as recorded in the coordinator's registry."""

    id: str
    name: str
    description: str
    created_at: datetime
    last_active: datetime


class AgentInfo(BaseModel):
    """Public projection of a registry entry, as returned by ``list_agents``."""

    id: str
    name: str
    description: str


class ChatMessage(BaseModel):
    role: MessageRole
    content: str


class RelayResult(BaseModel):
    """Outcome of a best-effort status relay to the coordinator.

    Relays never raise; callers may log a failed result but are not obliged
    to check it.
    """

    ok: bool
    reason: str | None = None

    @classmethod
    def success(cls) -> RelayResult:
        return cls(ok=True)

    @classmethod
    def failed(cls, reason: str) -> RelayResult:
        return cls(ok=False, reason=reason)
