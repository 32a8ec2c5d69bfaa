"""Service configuration loaded from SWITCHYARD_* environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class SwitchyardSettings(BaseSettings):
    """Switchyard settings.

    All fields are read from environment variables with the ``SWITCHYARD_``
    prefix.  For example, ``SWITCHYARD_MAX_ATTEMPTS=5`` maps to
    ``max_attempts``.

    Model provider keys are **not** managed here -- they belong to whatever
    responder the host is built with.
    """

    model_config = SettingsConfigDict(
        env_prefix="SWITCHYARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"
    log_json: bool = False
    """Emit one JSON object per log line (for log collectors)."""

    # -- Data storage ----------------------------------------------------------
    data_root: str = "./data"
    """Root directory for the local object store and durable agent storage."""

    workspace_root: str = "memory/"
    """Key prefix under which every worker workspace lives."""

    object_store: Literal["local", "s3"] = "local"

    # S3 (only when object_store = "s3")
    s3_endpoint: str | None = None
    s3_bucket: str | None = None
    s3_region: str | None = None
    s3_access_key: str | None = None
    s3_secret_key: SecretStr | None = None
    s3_path_style: bool = False
    """Use path-style addressing (required by MinIO and some S3-compatible services)."""

    # -- Retry -----------------------------------------------------------------
    max_attempts: int = 3
    """Retries allowed after the first failed object-store call."""

    retry_base_delay: float = 1.0
    retry_max_delay: float = 5.0

    # -- Agents ----------------------------------------------------------------
    registry_key: str = "agent_registry"
    coordinator_id: str = "default"


def get_settings() -> SwitchyardSettings:
    """Return a cached settings instance.

    Reads from environment variables and ``.env`` on first call, then returns
    the same object.  Call ``_get_settings_cached.cache_clear()`` in tests to force a
    re-read after overriding env vars.
    """
    return _get_settings_cached()


@lru_cache(maxsize=1)
def _get_settings_cached() -> SwitchyardSettings:
    return SwitchyardSettings()


