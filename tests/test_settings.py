"""Unit tests for settings and logging setup."""

from __future__ import annotations

import logging

import pytest
from loguru import logger

from switchyard.agents import create_object_store
from switchyard.log import agent_logger, setup_logging
from switchyard.settings import SwitchyardSettings, get_settings
from switchyard.store.local import LocalObjectStore


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SWITCHYARD_MAX_ATTEMPTS", raising=False)
    settings = SwitchyardSettings(_env_file=None)

    assert settings.object_store == "local"
    assert settings.workspace_root == "memory/"
    assert settings.max_attempts == 3
    assert settings.registry_key == "agent_registry"
    assert settings.coordinator_id == "default"


def test_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SWITCHYARD_MAX_ATTEMPTS", "5")
    monkeypatch.setenv("SWITCHYARD_S3_SECRET_KEY", "hunter2")

    settings = get_settings()

    assert settings.max_attempts == 5
    assert settings.s3_secret_key is not None
    assert settings.s3_secret_key.get_secret_value() == "hunter2"
    assert "hunter2" not in repr(settings)
    assert get_settings() is settings


def test_local_object_store_from_settings(tmp_path) -> None:
    store = create_object_store(SwitchyardSettings(_env_file=None, data_root=str(tmp_path)))
    assert isinstance(store, LocalObjectStore)


def test_s3_requires_connection_settings() -> None:
    settings = SwitchyardSettings(_env_file=None, object_store="s3", s3_bucket="b")
    with pytest.raises(ValueError, match="SWITCHYARD_S3_ENDPOINT"):
        create_object_store(settings)


def test_setup_logging_routes_stdlib() -> None:
    records: list[str] = []
    setup_logging("debug", quiet=("botocore",))
    sink_id = logger.add(records.append, level="DEBUG", format="{message}")
    try:
        logging.getLogger("switchyard.test").warning("from stdlib")
    finally:
        logger.remove(sink_id)

    assert any("from stdlib" in r for r in records)
    assert logging.getLogger("botocore").level == logging.WARNING


def test_agent_logger_tags_records() -> None:
    records: list[dict] = []
    setup_logging("info")
    sink_id = logger.add(lambda m: records.append(m.record["extra"]), level="INFO")
    try:
        agent_logger("dmd_research").info("hello")
        logger.info("untagged")
    finally:
        logger.remove(sink_id)

    assert records == [{"agent": "dmd_research"}, {"agent": "-"}]
