"""Worker agent.

A worker is created by the coordinator with a description and a first task,
then answers messages routed to it.  It owns a workspace in the object store
at ``{workspace_root}research_agents/{agent_id}/`` and reports each reply
back to the coordinator on a best-effort basis.

Producing the reply is delegated to a ``Responder`` (typically a pydantic-ai
agent run with ``worker_toolset``); the worker only keeps the conversation
and the bookkeeping around it.  Conversations are held in memory.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from switchyard.context import WorkerDeps
from switchyard.log import agent_logger
from switchyard.models.agent import ChatMessage, RelayResult
from switchyard.models.enums import MessageRole
from switchyard.router import relay_status
from switchyard.workspace import WorkspaceFs

if TYPE_CHECKING:
    from switchyard.retry import RetryExecutor
    from switchyard.router import CoordinatorHandle
    from switchyard.store.base import ObjectStore

Responder = Callable[[Any, list[ChatMessage]], Awaitable[str]]
"""``(deps, messages) -> reply``: the model call behind an agent."""

EMPTY_REPLY = "Okay."
ERROR_REPLY = "Error processing research request."


def workspace_path_for(workspace_root: str, agent_id: str) -> str:
    """Workspace prefix of a worker: ``{workspace_root}research_agents/{agent_id}/``."""
    return f"{workspace_root.rstrip('/')}/research_agents/{agent_id}/"


class WorkerAgent:
    """One worker agent.  Entry points run one at a time."""

    def __init__(
        self,
        agent_id: str,
        *,
        store: ObjectStore,
        coordinator: CoordinatorHandle,
        responder: Responder,
        workspace_root: str = "memory/",
        retry: RetryExecutor | None = None,
    ) -> None:
        self.agent_id = agent_id
        self.name = ""
        self.description = ""
        self.messages: list[ChatMessage] = []
        self._store = store
        self._coordinator = coordinator
        self._responder = responder
        self._workspace_root = workspace_root
        self._retry = retry
        self._fs: WorkspaceFs | None = None
        self._lock = asyncio.Lock()
        self._log = agent_logger(agent_id)

    # -- Workspace -------------------------------------------------------------

    @property
    def fs(self) -> WorkspaceFs:
        """The worker's workspace, created on first use."""
        if self._fs is None:
            path = workspace_path_for(self._workspace_root, self.name or self.agent_id)
            self._fs = WorkspaceFs(self._store, path, retry=self._retry)
        return self._fs

    def deps(self) -> WorkerDeps:
        return WorkerDeps(agent_id=self.name or self.agent_id, fs=self.fs, coordinator=self._coordinator)

    # -- Entry points ----------------------------------------------------------

    async def initialize(self, agent_id: str, description: str, message: str) -> None:
        """Set identity and prime the conversation with the first task."""
        async with self._lock:
            self.name = agent_id
            self.description = description
            self._fs = None
            self.messages = [
                *self.messages,
                ChatMessage(
                    role=MessageRole.SYSTEM,
                    content=f"You are a specialized research agent for: {description}",
                ),
                ChatMessage(role=MessageRole.USER, content=message),
            ]
        self._log.info("Worker initialized as {} ({})", agent_id, description)

    async def send_message(self, message: str) -> str:
        """Answer ``message`` and relay the answer to the coordinator."""
        async with self._lock:
            self.messages.append(ChatMessage(role=MessageRole.USER, content=message))
            try:
                reply = await self._responder(self.deps(), list(self.messages))
            except Exception:
                self._log.exception("Worker responder failed")
                self.messages.append(ChatMessage(role=MessageRole.ASSISTANT, content=ERROR_REPLY))
                raise

            reply = reply or EMPTY_REPLY
            self.messages.append(ChatMessage(role=MessageRole.ASSISTANT, content=reply))

        await self.relay_status(reply)
        return reply

    async def relay_status(self, message: str) -> RelayResult:
        return await relay_status(self._coordinator, self.name or self.agent_id, message)

    def info(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "message_count": len(self.messages),
        }
