"""Coordinator and worker agents, and the in-process host that addresses them."""

from switchyard.agents.coordinator import CoordinatorAgent
from switchyard.agents.host import LocalAgentHost, build_host, create_object_store
from switchyard.agents.worker import Responder, WorkerAgent, workspace_path_for

__all__ = [
    "CoordinatorAgent",
    "LocalAgentHost",
    "Responder",
    "WorkerAgent",
    "build_host",
    "create_object_store",
    "workspace_path_for",
]
