"""Data models for switchyard."""

from switchyard.models.agent import AgentInfo, AgentRegistryEntry, ChatMessage, RelayResult
from switchyard.models.enums import MessageRole, RetryKind
from switchyard.models.workspace import DEFAULT_AUTHOR, DEFAULT_CONTENT_TYPE, FileEntry

__all__ = [
    "DEFAULT_AUTHOR",
    "DEFAULT_CONTENT_TYPE",
    # Agents
    "AgentInfo",
    "AgentRegistryEntry",
    "ChatMessage",
    # Workspace
    "FileEntry",
    # Enums
    "MessageRole",
    "RelayResult",
    "RetryKind",
]
