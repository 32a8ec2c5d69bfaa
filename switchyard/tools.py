"""Tool surface exposed to the model runtime.

Two pydantic-ai toolsets:

- ``coordinator_toolset``: ``create_agent``, ``list_agents``, ``message_agent``
- ``worker_toolset``: ``write_file``, ``read_file``, ``list_files``, ``send_message``

pydantic-ai validates arguments against the signatures below before a tool
runs.  A tool whose operation fails returns ``{"error": message}`` so the
model sees the failure and the run goes on; only a missing or mismatched
execution context (``ContextUnavailableError``) ends the run.
"""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar

from loguru import logger
from pydantic_ai import FunctionToolset, RunContext

from switchyard.context import ContextUnavailableError, CoordinatorDeps, WorkerDeps, require_deps

P = ParamSpec("P")
R = TypeVar("R")


class NotFoundError(LookupError):
    """Raised by ``read_file`` when the requested file does not exist."""


def reports_failures(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R | dict[str, str]]]:
    """Turn a failed tool call into an ``{"error": message}`` result.

    The undecorated tool stays reachable as ``__wrapped__``.
    """

    @functools.wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R | dict[str, str]:
        try:
            return await func(*args, **kwargs)
        except ContextUnavailableError:
            raise
        except Exception as e:
            logger.warning("Tool {} failed: {}: {}", func.__name__, type(e).__name__, e)
            return {"error": str(e) or type(e).__name__}

    return wrapper


# ---------------------------------------------------------------------------
# Coordinator tools
# ---------------------------------------------------------------------------


@reports_failures
async def create_agent(
    ctx: RunContext[CoordinatorDeps], name: str, description: str, message: str
) -> dict[str, str]:
    """Create a new research agent for a specific domain.

    Args:
        name: Agent name (e.g. duchenne_md_research).
        description: What this agent researches.
        message: Initial research task.
    """
    deps = require_deps(ctx, CoordinatorDeps)
    agent_id = await deps.router.create_agent(name, description, message)
    return {"agent_id": agent_id}


@reports_failures
async def list_agents(ctx: RunContext[CoordinatorDeps]) -> list[dict[str, str]]:
    """List all known research agents."""
    deps = require_deps(ctx, CoordinatorDeps)
    return [info.model_dump() for info in await deps.router.list_agents()]


@reports_failures
async def message_agent(ctx: RunContext[CoordinatorDeps], agent_id: str, message: str) -> dict[str, str]:
    """Send a message to a specific research agent.

    Args:
        agent_id: The ID (sanitized name) of the agent.
        message: Message to send.
    """
    deps = require_deps(ctx, CoordinatorDeps)
    reply = await deps.router.route_message(agent_id, message)
    return {"response": reply}


# ---------------------------------------------------------------------------
# Worker tools
# ---------------------------------------------------------------------------


@reports_failures
async def write_file(ctx: RunContext[WorkerDeps], path: str, content: str) -> dict[str, bool]:
    """Write content to a file in the agent workspace.

    Args:
        path: Relative path within agent workspace.
        content: Text content to write.
    """
    deps = require_deps(ctx, WorkerDeps)
    await deps.fs.write_file(path, content, author=deps.agent_id)
    return {"ok": True}


@reports_failures
async def read_file(ctx: RunContext[WorkerDeps], path: str) -> dict[str, str]:
    """Read content from a file in the agent workspace.

    Args:
        path: Relative path within agent workspace.
    """
    deps = require_deps(ctx, WorkerDeps)
    text = await deps.fs.read_file(path)
    if text is None:
        msg = f"File not found: {path}"
        raise NotFoundError(msg)
    return {"content": text}


@reports_failures
async def list_files(ctx: RunContext[WorkerDeps], dir: str | None = None) -> dict[str, list[str]]:  # noqa: A002
    """List files in a directory of the agent workspace.

    Args:
        dir: Relative directory within agent workspace.
    """
    deps = require_deps(ctx, WorkerDeps)
    return {"files": await deps.fs.list_files(dir)}


async def send_message(ctx: RunContext[WorkerDeps], message: str) -> dict[str, bool]:
    """Send a status update back to the coordinating agent.

    Args:
        message: Status or summary to report back.
    """
    deps = require_deps(ctx, WorkerDeps)
    # Delivery is best-effort; a failed relay must not fail the worker's run.
    await deps.relay(message)
    return {"ok": True}


# ---------------------------------------------------------------------------
# Toolsets
# ---------------------------------------------------------------------------

COORDINATOR_TOOLS = (create_agent, list_agents, message_agent)
WORKER_TOOLS = (write_file, read_file, list_files, send_message)

COORDINATOR_TOOL_NAMES = tuple(t.__name__ for t in COORDINATOR_TOOLS)
WORKER_TOOL_NAMES = tuple(t.__name__ for t in WORKER_TOOLS)

coordinator_toolset: FunctionToolset[CoordinatorDeps] = FunctionToolset(list(COORDINATOR_TOOLS))
worker_toolset: FunctionToolset[WorkerDeps] = FunctionToolset(list(WORKER_TOOLS))
