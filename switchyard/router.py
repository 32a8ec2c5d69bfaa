"""Agent routing -- create, list and message worker agents.

The router is the coordinator's side of the orchestration surface.  It
owns no state of its own: registrations live in the ``AgentRegistry`` and
workers are reached through the host, which addresses each worker by its
sanitized id.

Lifecycle of a worker as seen from here: unregistered -> active.  An entry
only ever appears in the registry after the worker accepted its
initialization, so every registered id names a working agent.

``relay_status`` is the worker's complement: a best-effort status report
back to the coordinator that never raises.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Protocol

from loguru import logger

from switchyard.models.agent import AgentInfo, AgentRegistryEntry, RelayResult
from switchyard.registry import AgentRegistry, sanitize_agent_id


class DuplicateAgentError(ValueError):
    """Raised when creating an agent whose sanitized id is already registered."""

    def __init__(self, agent_id: str) -> None:
        super().__init__(f"Agent already exists: {agent_id}")
        self.agent_id = agent_id


class AgentInitializationError(RuntimeError):
    """Raised when a new worker rejected or failed its initialization."""

    def __init__(self, agent_id: str, cause: BaseException) -> None:
        super().__init__(f"Failed to initialize agent {agent_id}: {cause}")
        self.agent_id = agent_id
        self.cause = cause


# -- Remote boundary -----------------------------------------------------------


class WorkerHandle(Protocol):
    """Addressable stub of a worker agent."""

    async def initialize(self, agent_id: str, description: str, message: str) -> None: ...

    async def send_message(self, message: str) -> str: ...


class WorkerDirectory(Protocol):
    """Resolves a stable agent id to its worker stub."""

    def worker(self, agent_id: str) -> WorkerHandle: ...


class CoordinatorHandle(Protocol):
    """Addressable stub of the coordinator, as seen by workers."""

    async def receive_relay(self, agent_id: str, message: str) -> None: ...


# -- Router --------------------------------------------------------------------


class AgentRouter:
    """Creates, lists and messages worker agents on behalf of the coordinator."""

    def __init__(self, registry: AgentRegistry, directory: WorkerDirectory) -> None:
        self._registry = registry
        self._directory = directory

    async def create_agent(self, name: str, description: str, message: str) -> str:
        """Create and register a worker.  Returns its sanitized id.

        Raises ``DuplicateAgentError`` if the id is taken and
        ``AgentInitializationError`` if the worker failed to start; in both
        cases the registry is left unchanged.
        """
        agent_id = sanitize_agent_id(name)

        async with self._registry.transaction() as mapping:
            if agent_id in mapping:
                raise DuplicateAgentError(agent_id)

            try:
                await self._directory.worker(agent_id).initialize(agent_id, description, message)
            except Exception as e:
                logger.warning("Router: initialization of agent {} failed: {}", agent_id, e)
                raise AgentInitializationError(agent_id, e) from e

            now = datetime.now(UTC)
            mapping[agent_id] = AgentRegistryEntry(
                id=agent_id,
                name=agent_id,
                description=description,
                created_at=now,
                last_active=now,
            )

        logger.info("Router: created agent {}", agent_id)
        return agent_id

    async def list_agents(self) -> list[AgentInfo]:
        """All registered agents, sorted by name."""
        entries = await self._registry.list_entries()
        infos = [AgentInfo(id=e.id, name=e.name, description=e.description) for e in entries]
        infos.sort(key=lambda info: info.name)
        return infos

    async def route_message(self, agent_id: str, message: str) -> str:
        """Send ``message`` to a worker and return its reply unchanged.

        ``agent_id`` may be raw or already sanitized.  Errors from the worker
        propagate as-is; no retry is applied here.  A failure to record the
        worker's activity afterwards is logged and does not affect the reply.
        """
        sanitized = sanitize_agent_id(agent_id)
        reply = await self._directory.worker(sanitized).send_message(message)

        try:
            await self._registry.touch(sanitized, datetime.now(UTC))
        except Exception:
            logger.exception("Router: failed to update last_active for agent {}", sanitized)

        logger.info("Router: routed message to agent {} ({} chars reply)", sanitized, len(reply))
        return reply


async def relay_status(coordinator: CoordinatorHandle, agent_id: str, message: str) -> RelayResult:
    """Forward a worker's status to the coordinator.  Never raises."""
    try:
        await coordinator.receive_relay(agent_id, message)
    except Exception as e:
        logger.warning("Relay: status from agent {} not delivered: {}", agent_id, e)
        return RelayResult.failed(str(e) or type(e).__name__)
    return RelayResult.success()
