"""Shared enumerations."""

from __future__ import annotations

from enum import StrEnum

# -- Retry -------------------------------------------------------------------


class RetryKind(StrEnum):
    """Closed set of transient object-store failures worth retrying."""

    RATE_LIMITED = "rate_limited"
    SERVICE_UNAVAILABLE = "service_unavailable"
    TIMEOUT = "timeout"


# -- Conversation ------------------------------------------------------------


class MessageRole(StrEnum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
