"""Switchyard - multi-agent orchestration with per-agent object-store workspaces."""

from switchyard.context import ContextUnavailableError, CoordinatorDeps, WorkerDeps
from switchyard.paths import normalize_path
from switchyard.registry import AgentRegistry, sanitize_agent_id
from switchyard.retry import OperationError, RetryExecutor, classify_error
from switchyard.router import AgentInitializationError, AgentRouter, DuplicateAgentError
from switchyard.store.base import TransientStoreError
from switchyard.tools import NotFoundError
from switchyard.workspace import WorkspaceFs

__all__ = [
    "AgentInitializationError",
    "AgentRegistry",
    "AgentRouter",
    "ContextUnavailableError",
    "CoordinatorDeps",
    "DuplicateAgentError",
    "NotFoundError",
    "OperationError",
    "RetryExecutor",
    "TransientStoreError",
    "WorkerDeps",
    "WorkspaceFs",
    "classify_error",
    "normalize_path",
    "sanitize_agent_id",
]
