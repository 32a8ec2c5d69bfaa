"""In-process agent host.

Plays the part of the actor runtime: every agent is addressed by a stable
id, and asking for the same id twice returns the same instance.  Each agent
serializes its own entry points; distinct agents run concurrently.

Workspace files go to the configured object store.  The coordinator's
durable storage (holding the registry) is a ``LocalAgentStorage`` under the
data root.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from switchyard.agents.coordinator import CoordinatorAgent
from switchyard.agents.worker import Responder, WorkerAgent
from switchyard.registry import REGISTRY_KEY
from switchyard.retry import RetryExecutor
from switchyard.store.local import LocalAgentStorage, LocalObjectStore

if TYPE_CHECKING:
    from switchyard.settings import SwitchyardSettings
    from switchyard.store.base import AgentStorage, ObjectStore


class LocalAgentHost:
    """Addresses the coordinator and its workers inside one process."""

    def __init__(
        self,
        *,
        store: ObjectStore,
        coordinator_storage: AgentStorage,
        responder: Responder,
        coordinator_responder: Responder | None = None,
        workspace_root: str = "memory/",
        retry: RetryExecutor | None = None,
        coordinator_id: str = "default",
        registry_key: str = REGISTRY_KEY,
    ) -> None:
        self._store = store
        self._responder = responder
        self._workspace_root = workspace_root
        self._retry = retry or RetryExecutor()
        self._workers: dict[str, WorkerAgent] = {}
        self.coordinator = CoordinatorAgent(
            coordinator_id,
            storage=coordinator_storage,
            directory=self,
            responder=coordinator_responder,
            registry_key=registry_key,
        )

    def worker(self, agent_id: str) -> WorkerAgent:
        """The worker addressed by ``agent_id``, created on first use."""
        worker = self._workers.get(agent_id)
        if worker is None:
            worker = WorkerAgent(
                agent_id,
                store=self._store,
                coordinator=self.coordinator,
                responder=self._responder,
                workspace_root=self._workspace_root,
                retry=self._retry,
            )
            self._workers[agent_id] = worker
            logger.debug("Host: instantiated worker {}", agent_id)
        return worker

    @property
    def worker_ids(self) -> list[str]:
        return sorted(self._workers)


def create_object_store(settings: SwitchyardSettings) -> ObjectStore:
    """Create the object store backend based on configuration."""
    if settings.object_store == "s3":
        from switchyard.store.s3 import S3ObjectStore

        if not (settings.s3_endpoint and settings.s3_bucket and settings.s3_access_key and settings.s3_secret_key):
            msg = "object_store=s3 requires SWITCHYARD_S3_ENDPOINT, _BUCKET, _ACCESS_KEY and _SECRET_KEY"
            raise ValueError(msg)
        return S3ObjectStore(
            bucket=settings.s3_bucket,
            endpoint_url=settings.s3_endpoint,
            access_key=settings.s3_access_key,
            secret_key=settings.s3_secret_key.get_secret_value(),
            region=settings.s3_region,
            path_style=settings.s3_path_style,
        )
    return LocalObjectStore(settings.data_root)


def build_host(
    settings: SwitchyardSettings,
    responder: Responder,
    coordinator_responder: Responder | None = None,
) -> LocalAgentHost:
    """Wire a host from settings."""
    store = create_object_store(settings)
    logger.info(
        "Host: object store={} (data_root={}, workspace_root={})",
        settings.object_store,
        settings.data_root,
        settings.workspace_root,
    )
    return LocalAgentHost(
        store=store,
        coordinator_storage=LocalAgentStorage(settings.data_root, namespace=settings.coordinator_id),
        responder=responder,
        coordinator_responder=coordinator_responder,
        workspace_root=settings.workspace_root,
        retry=RetryExecutor(
            settings.max_attempts,
            base_delay=settings.retry_base_delay,
            max_delay=settings.retry_max_delay,
        ),
        coordinator_id=settings.coordinator_id,
        registry_key=settings.registry_key,
    )
