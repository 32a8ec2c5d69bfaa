"""Unit tests for WorkspaceFs over the local object store."""

from __future__ import annotations

import pytest

from switchyard.models.workspace import DEFAULT_CONTENT_TYPE
from switchyard.retry import OperationError, RetryExecutor
from switchyard.store.local import LocalObjectStore
from switchyard.workspace import WorkspaceFs

PREFIX = "memory/research_agents/test-agent/"


@pytest.fixture
def fs(object_store: LocalObjectStore, retry: RetryExecutor) -> WorkspaceFs:
    return WorkspaceFs(object_store, PREFIX, retry=retry)


def test_prefix_gets_single_trailing_slash(object_store: LocalObjectStore) -> None:
    assert WorkspaceFs(object_store, "memory/a").prefix == "memory/a/"
    assert WorkspaceFs(object_store, "memory/a///").prefix == "memory/a/"


def test_resolve_key_stays_in_workspace(fs: WorkspaceFs) -> None:
    assert fs.resolve_key("notes/a.md") == f"{PREFIX}notes/a.md"
    assert fs.resolve_key("../../other/secret") == f"{PREFIX}other/secret"
    assert fs.resolve_key("/abs/path") == f"{PREFIX}abs/path"


# ---------------------------------------------------------------------------
# write / read
# ---------------------------------------------------------------------------


async def test_write_then_read(fs: WorkspaceFs) -> None:
    content = "# Research Report\n\nFindings..."
    await fs.write_file("report.md", content)
    assert await fs.read_file("report.md") == content


async def test_overwrite(fs: WorkspaceFs) -> None:
    await fs.write_file("report.md", "v1")
    await fs.write_file("report.md", "v2")
    assert await fs.read_file("report.md") == "v2"


async def test_unicode_roundtrip(fs: WorkspaceFs) -> None:
    content = "Dystrophin: ΔE50 · 日本語 · emoji 🧬"
    await fs.write_file("notes/unicode.txt", content)
    assert await fs.read_file("notes/unicode.txt") == content


async def test_equivalent_paths_address_same_file(fs: WorkspaceFs) -> None:
    await fs.write_file("/notes/./draft/../final.md", "done")
    assert await fs.read_file("notes/final.md") == "done"


async def test_file_and_directory_of_same_name(fs: WorkspaceFs) -> None:
    await fs.write_file("notes", "top")
    await fs.write_file("notes/today.md", "nested")

    assert await fs.read_file("notes") == "top"
    assert await fs.read_file("notes/today.md") == "nested"
    assert await fs.list_files() == ["notes", "notes/today.md"]


async def test_read_missing_returns_none(fs: WorkspaceFs) -> None:
    assert await fs.read_file("missing.txt") is None
    assert await fs.read_entry("missing.txt") is None


async def test_write_metadata_defaults(fs: WorkspaceFs) -> None:
    await fs.write_file("a.txt", "x")
    entry = await fs.read_entry("a.txt")

    assert entry is not None
    assert entry.path == "a.txt"
    assert entry.author == "system"
    assert entry.content_type == DEFAULT_CONTENT_TYPE
    assert entry.timestamp is not None


async def test_write_metadata_explicit(fs: WorkspaceFs) -> None:
    await fs.write_file("data.json", "{}", author="dmd_research", content_type="application/json")
    entry = await fs.read_entry("data.json")

    assert entry is not None
    assert entry.author == "dmd_research"
    assert entry.content_type == "application/json"


async def test_write_to_workspace_root_rejected(fs: WorkspaceFs) -> None:
    with pytest.raises(ValueError, match="workspace root"):
        await fs.write_file("../..", "x")


async def test_workspaces_isolated(object_store: LocalObjectStore) -> None:
    a = WorkspaceFs(object_store, "memory/research_agents/a/")
    b = WorkspaceFs(object_store, "memory/research_agents/b/")

    await a.write_file("shared.txt", "from a")
    await b.write_file("shared.txt", "from b")

    assert await a.read_file("shared.txt") == "from a"
    assert await b.read_file("shared.txt") == "from b"
    assert await a.read_file("../b/shared.txt") is None


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------


async def test_delete_then_read_absent(fs: WorkspaceFs) -> None:
    await fs.write_file("tmp.txt", "x")
    await fs.delete_file("tmp.txt")
    assert await fs.read_file("tmp.txt") is None


async def test_delete_is_idempotent(fs: WorkspaceFs) -> None:
    await fs.write_file("tmp.txt", "x")
    await fs.delete_file("tmp.txt")
    await fs.delete_file("tmp.txt")
    await fs.delete_file("never-existed.txt")


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


async def test_list_sorted_regardless_of_write_order(fs: WorkspaceFs) -> None:
    for path in ["zeta.md", "alpha.md", "notes/b.md", "notes/a.md", "mid.md"]:
        await fs.write_file(path, path)

    assert await fs.list_files() == ["alpha.md", "mid.md", "notes/a.md", "notes/b.md", "zeta.md"]


async def test_list_reflects_deletes(fs: WorkspaceFs) -> None:
    await fs.write_file("keep.md", "1")
    await fs.write_file("drop.md", "2")
    await fs.delete_file("drop.md")

    assert await fs.list_files() == ["keep.md"]


async def test_list_directory(fs: WorkspaceFs) -> None:
    await fs.write_file("notes/a.md", "1")
    await fs.write_file("notes/sub/b.md", "2")
    await fs.write_file("notes-other.md", "3")
    await fs.write_file("top.md", "4")

    assert await fs.list_files("notes") == ["notes/a.md", "notes/sub/b.md"]
    assert await fs.list_files("/notes/") == ["notes/a.md", "notes/sub/b.md"]
    assert await fs.list_files("notes/sub/..") == ["notes/a.md", "notes/sub/b.md"]


async def test_list_empty_dir_means_whole_workspace(fs: WorkspaceFs) -> None:
    await fs.write_file("a.md", "1")
    assert await fs.list_files("") == ["a.md"]
    assert await fs.list_files(".") == ["a.md"]


async def test_list_excludes_other_workspaces(object_store: LocalObjectStore, fs: WorkspaceFs) -> None:
    other = WorkspaceFs(object_store, "memory/research_agents/test-agent-2/")
    await other.write_file("foreign.md", "x")
    await fs.write_file("mine.md", "y")

    assert await fs.list_files() == ["mine.md"]


async def test_list_follows_pagination(object_store: LocalObjectStore, monkeypatch) -> None:
    monkeypatch.setattr("switchyard.workspace.LIST_PAGE_SIZE", 2)
    fs = WorkspaceFs(object_store, PREFIX)
    paths = [f"f{i}.txt" for i in range(5)]
    for path in reversed(paths):
        await fs.write_file(path, path)

    assert await fs.list_files() == paths


async def test_list_empty_workspace(fs: WorkspaceFs) -> None:
    assert await fs.list_files() == []


# ---------------------------------------------------------------------------
# retry integration
# ---------------------------------------------------------------------------


async def test_transient_failures_are_retried(flaky_store, retry: RetryExecutor, sleeps) -> None:
    fs = WorkspaceFs(flaky_store, PREFIX, retry=retry)
    flaky_store.failures["put"] = [RuntimeError("503 Service Unavailable"), RuntimeError("429")]

    await fs.write_file("a.txt", "x")

    assert flaky_store.calls["put"] == 3
    assert sleeps.delays == [1.0, 2.0]
    assert await fs.read_file("a.txt") == "x"


async def test_fatal_failure_surfaces_operation_error(flaky_store, retry: RetryExecutor) -> None:
    fs = WorkspaceFs(flaky_store, PREFIX, retry=retry)
    flaky_store.failures["get"] = [PermissionError("403 Forbidden")]

    with pytest.raises(OperationError) as exc_info:
        await fs.read_file("a.txt")

    assert flaky_store.calls["get"] == 1
    assert isinstance(exc_info.value.cause, PermissionError)


async def test_max_attempts_per_instance(flaky_store, sleeps) -> None:
    fs = WorkspaceFs(flaky_store, PREFIX, retry=RetryExecutor(1, sleep=sleeps))
    flaky_store.failures["delete"] = [RuntimeError("rate limit") for _ in range(5)]

    with pytest.raises(OperationError):
        await fs.delete_file("a.txt")

    assert flaky_store.calls["delete"] == 2


async def test_max_attempts_keyword(flaky_store) -> None:
    fs = WorkspaceFs(flaky_store, PREFIX, max_attempts=0)
    flaky_store.failures["get"] = [RuntimeError("503")]

    with pytest.raises(OperationError):
        await fs.read_file("a.txt")
    assert flaky_store.calls["get"] == 1


async def test_failure_mid_pagination_returns_nothing(flaky_store, monkeypatch) -> None:
    monkeypatch.setattr("switchyard.workspace.LIST_PAGE_SIZE", 1)
    fs = WorkspaceFs(flaky_store, PREFIX, retry=RetryExecutor(0))
    for name in ("a", "b", "c"):
        await fs.write_file(name, name)

    original = flaky_store.inner.list
    pages = 0

    async def fail_on_second_page(prefix: str, *, limit: int = 1000, cursor: str | None = None):
        nonlocal pages
        pages += 1
        if pages == 2:
            raise RuntimeError("access denied")
        return await original(prefix, limit=limit, cursor=cursor)

    monkeypatch.setattr(flaky_store.inner, "list", fail_on_second_page)

    with pytest.raises(OperationError):
        await fs.list_files()
    assert pages == 2
