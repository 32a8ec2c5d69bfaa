"""Coordinator agent.

The single agent users talk to.  It keeps the agent registry in its durable
storage, creates and messages workers through its ``AgentRouter``, and
collects the status reports workers relay back.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from switchyard.context import CoordinatorDeps
from switchyard.log import agent_logger
from switchyard.models.agent import ChatMessage
from switchyard.models.enums import MessageRole
from switchyard.registry import REGISTRY_KEY, AgentRegistry
from switchyard.router import AgentRouter

if TYPE_CHECKING:
    from switchyard.agents.worker import Responder
    from switchyard.router import WorkerDirectory
    from switchyard.store.base import AgentStorage

EMPTY_REPLY = "Okay."
ERROR_REPLY = "Sorry, I encountered an error processing your request."


class CoordinatorAgent:
    """The coordinating agent."""

    def __init__(
        self,
        agent_id: str,
        *,
        storage: AgentStorage,
        directory: WorkerDirectory,
        responder: Responder | None = None,
        registry_key: str = REGISTRY_KEY,
    ) -> None:
        self.agent_id = agent_id
        self.registry = AgentRegistry(storage, key=registry_key)
        self.router = AgentRouter(self.registry, directory)
        self.messages: list[ChatMessage] = []
        self._responder = responder
        self._lock = asyncio.Lock()
        self._log = agent_logger(agent_id)

    def deps(self) -> CoordinatorDeps:
        return CoordinatorDeps(agent_id=self.agent_id, router=self.router)

    async def chat(self, message: str) -> str:
        """Answer a user message with the configured responder."""
        if self._responder is None:
            msg = f"Coordinator {self.agent_id} has no responder configured"
            raise RuntimeError(msg)

        async with self._lock:
            self.messages.append(ChatMessage(role=MessageRole.USER, content=message))
            try:
                reply = await self._responder(self.deps(), list(self.messages))
            except Exception:
                self._log.exception("Coordinator responder failed")
                self.messages.append(ChatMessage(role=MessageRole.ASSISTANT, content=ERROR_REPLY))
                raise
            reply = reply or EMPTY_REPLY
            self.messages.append(ChatMessage(role=MessageRole.ASSISTANT, content=reply))
        return reply

    async def receive_relay(self, agent_id: str, message: str) -> None:
        """Record a status report from a worker.

        Not serialized with ``chat``: workers relay while a coordinator turn
        that messaged them is still awaiting their reply.
        """
        self.messages.append(ChatMessage(role=MessageRole.USER, content=f"Agent {agent_id} reports: {message}"))
        self._log.debug("Relay received from {}", agent_id)
