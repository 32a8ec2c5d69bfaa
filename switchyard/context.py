"""Execution contexts handed to tools.

pydantic-ai passes tool dependencies explicitly as ``RunContext.deps``.  A
coordinator run carries ``CoordinatorDeps``; a worker run carries
``WorkerDeps``.  Tools never look up "the current agent" ambiently -- a tool
called without the context it needs fails with ``ContextUnavailableError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from switchyard.models.agent import RelayResult
    from switchyard.router import AgentRouter, CoordinatorHandle
    from switchyard.workspace import WorkspaceFs

DepsT = TypeVar("DepsT")


class ContextUnavailableError(RuntimeError):
    """Raised when an operation runs outside a valid agent execution context."""


@dataclass
class CoordinatorDeps:
    """Dependencies of a coordinator run."""

    agent_id: str
    router: AgentRouter


@dataclass
class WorkerDeps:
    """Dependencies of a worker run."""

    agent_id: str
    fs: WorkspaceFs
    coordinator: CoordinatorHandle

    async def relay(self, message: str) -> RelayResult:
        from switchyard.router import relay_status

        return await relay_status(self.coordinator, self.agent_id, message)


def require_deps(ctx: Any, deps_type: type[DepsT]) -> DepsT:
    """Return ``ctx.deps`` if it is a ``deps_type``, else raise ``ContextUnavailableError``."""
    deps = getattr(ctx, "deps", None)
    if not isinstance(deps, deps_type):
        msg = f"Agent context not available (expected {deps_type.__name__}, got {type(deps).__name__})"
        raise ContextUnavailableError(msg)
    return deps
