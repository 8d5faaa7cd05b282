"""Tests for the node store."""
import itertools
import time
from typing import Any, Iterable, List, Mapping
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from bilingual_archive.exceptions import (
    InvalidFieldError,
    InvalidMoveError,
    InvalidParentError,
    NotFoundError,
    PersistenceError,
)
from bilingual_archive.models import (
    ContentType,
    FileDraft,
    FolderDraft,
    FolderNode,
    Node,
)
from bilingual_archive.storage.base import BaseNodeBackend
from bilingual_archive.storage.local_store import LocalJsonBackend
from bilingual_archive.storage.node_store import NodeStore
from bilingual_archive.storage.sql_store import SqlNodeBackend


class UnreachableBackend(BaseNodeBackend):
    """Remote backend whose every call fails."""

    def __init__(self):
        self.calls: List[str] = []

    async def _fail(self, name: str):
        self.calls.append(name)
        raise PersistenceError(f"{name}: connection refused")

    async def initialize(self) -> None:
        pass

    async def select_all(self) -> List[Node]:
        return await self._fail("select_all")

    async def insert(self, node: Node) -> None:
        await self._fail("insert")

    async def update(self, node_id: str, fields: Mapping[str, Any]) -> Node:
        return await self._fail("update")

    async def delete_many(self, node_ids: Iterable[str]) -> None:
        await self._fail("delete_many")

    async def upsert_many(self, nodes: Iterable[Node]) -> None:
        await self._fail("upsert_many")


@pytest.fixture
def store(tmp_path):
    """Create a local-only store."""
    return NodeStore(cache=LocalJsonBackend(tmp_path / "nodes.json"))


@pytest_asyncio.fixture
async def remote_store(tmp_path):
    """Create a remote-primary store over SQLite."""
    remote = SqlNodeBackend(f"sqlite+aiosqlite:///{tmp_path / 'remote.db'}")
    store = NodeStore(cache=LocalJsonBackend(tmp_path / "cache.json"), remote=remote)
    await store.initialize()
    yield store
    await remote.close()


async def build_abc(store: NodeStore):
    """Root folder A, child folder B, file C inside B."""
    a = await store.add(FolderDraft(name="A"))
    b = await store.add(FolderDraft(name="B", parent_id=a.id))
    c = await store.add(FileDraft(name="C", parent_id=b.id, content_en="<p>c</p>"))
    return a, b, c


@pytest.mark.asyncio
async def test_add_assigns_id_and_timestamp(store):
    """Test that add stamps a fresh ID and a current timestamp."""
    before = int(time.time() * 1000)
    first = await store.add(FolderDraft(name="First"))
    second = await store.add(FolderDraft(name="Second"))

    nodes = await store.fetch_all()
    assert {n.id for n in nodes} == {first.id, second.id}
    assert first.id != second.id
    assert first.created_at >= before
    assert first in nodes


@pytest.mark.asyncio
async def test_add_rejects_missing_parent(store):
    """Test adding under a parent that does not exist."""
    with pytest.raises(NotFoundError):
        await store.add(FolderDraft(name="Orphan", parent_id="nope"))
    assert await store.fetch_all() == []


@pytest.mark.asyncio
async def test_add_rejects_file_parent(store):
    """Test that files cannot hold children."""
    _, _, c = await build_abc(store)
    with pytest.raises(InvalidParentError):
        await store.add(FolderDraft(name="Inside file", parent_id=c.id))
    assert len(await store.fetch_all()) == 3


@pytest.mark.asyncio
async def test_update_changes_only_given_fields(store):
    """Test that update touches only the requested field."""
    _, _, c = await build_abc(store)

    await store.update(c.id, {"name": "X"})

    fetched = await store.get(c.id)
    assert fetched.name == "X"
    assert fetched.model_dump(exclude={"name"}) == c.model_dump(exclude={"name"})


@pytest.mark.asyncio
async def test_update_ignores_identity_and_parent(store):
    """Test that ignorable keys are dropped silently."""
    a, b, c = await build_abc(store)

    result = await store.update(c.id, {"id": "new", "created_at": 0, "parent_id": a.id, "bogus": 1})

    assert result == c
    assert (await store.get(c.id)).parent_id == b.id


@pytest.mark.asyncio
async def test_update_missing_node(store):
    """Test updating an unknown ID."""
    with pytest.raises(NotFoundError):
        await store.update("missing", {"name": "X"})


@pytest.mark.asyncio
async def test_delete_cascades(store):
    """Test that deleting A removes A, B and C."""
    a, b, c = await build_abc(store)

    deleted = await store.delete(a.id)

    assert set(deleted) == {a.id, b.id, c.id}
    assert deleted[0] == a.id
    assert await store.fetch_all() == []


@pytest.mark.asyncio
async def test_delete_leaves_siblings(store):
    """Test that only the subtree goes away."""
    a, b, c = await build_abc(store)
    other = await store.add(FolderDraft(name="Other"))
    sibling = await store.add(FolderDraft(name="Sibling", parent_id=a.id))

    await store.delete(b.id)

    remaining = {n.id for n in await store.fetch_all()}
    assert remaining == {a.id, other.id, sibling.id}
    assert not any(n.parent_id == b.id for n in await store.fetch_all())


@pytest.mark.asyncio
async def test_delete_missing_node(store):
    """Test deleting an unknown ID."""
    with pytest.raises(NotFoundError):
        await store.delete("missing")


@pytest.mark.asyncio
async def test_move_into_descendant_rejected(store):
    """Test cycle prevention."""
    a, b, c = await build_abc(store)
    deep = await store.add(FolderDraft(name="Deep", parent_id=b.id))
    before = await store.fetch_all()

    with pytest.raises(InvalidMoveError):
        await store.move(a.id, b.id)
    with pytest.raises(InvalidMoveError):
        await store.move(a.id, deep.id)

    assert await store.fetch_all() == before


@pytest.mark.asyncio
async def test_move_into_self_rejected(store):
    """Test that a node cannot become its own parent."""
    a, _, c = await build_abc(store)
    before = await store.fetch_all()

    with pytest.raises(InvalidMoveError):
        await store.move(a.id, a.id)
    with pytest.raises(InvalidMoveError):
        await store.move(c.id, c.id)

    assert await store.fetch_all() == before


@pytest.mark.asyncio
async def test_move_under_file_rejected(store):
    """Test that files cannot become parents."""
    _, b, c = await build_abc(store)
    before = await store.fetch_all()

    with pytest.raises(InvalidMoveError):
        await store.move(b.id, c.id)

    assert await store.fetch_all() == before


@pytest.mark.asyncio
async def test_move_to_missing_destination(store):
    """Test moving into a folder that does not exist."""
    _, b, _ = await build_abc(store)
    with pytest.raises(NotFoundError):
        await store.move(b.id, "nope")
    with pytest.raises(NotFoundError):
        await store.move("nope", b.id)


@pytest.mark.asyncio
async def test_move_valid(store):
    """Test moving a subtree elsewhere and back to root."""
    a, b, c = await build_abc(store)
    target = await store.add(FolderDraft(name="Target"))

    moved = await store.move(b.id, target.id)
    assert moved.parent_id == target.id
    assert (await store.get(c.id)).parent_id == b.id
    assert await store.breadcrumbs(c.id) == [target, moved, c]

    moved = await store.move(b.id, None)
    assert moved.parent_id is None


@pytest.mark.asyncio
async def test_read_helpers(store, monkeypatch):
    """Test children, search and featured videos."""
    clock = itertools.count(1000)
    monkeypatch.setattr("bilingual_archive.storage.node_store.now_ms", lambda: next(clock))
    a, b, c = await build_abc(store)
    video = await store.add(FileDraft(
        name="Lecture | שיעור",
        parent_id=a.id,
        content_type=ContentType.VIDEO,
        url="https://example.org/v",
    ))

    children = await store.children(a.id)
    assert [n.id for n in children] == [video.id, b.id]
    assert [n.id for n in await store.children(None)] == [a.id]

    assert [n.id for n in await store.search("LECT")] == [video.id]
    assert [n.id for n in await store.search("שיעור")] == [video.id]
    assert await store.search("   ") == []
    assert len(await store.search("", limit=1)) == 0

    assert await store.featured_videos() == [video]


@pytest.mark.asyncio
async def test_seed_written_once(tmp_path):
    """Test that an empty local archive gets seeded only the first time."""
    seed = [FolderNode(id="f-seed", name="Seed", created_at=1)]
    store = NodeStore(cache=LocalJsonBackend(tmp_path / "nodes.json"), seed=seed)

    assert await store.fetch_all() == seed
    await store.delete("f-seed")
    assert await store.fetch_all() == []


@pytest.mark.asyncio
async def test_remote_primary_writes_through(remote_store):
    """Test that writes land in the remote and the cache."""
    a, b, c = await build_abc(remote_store)

    assert {n.id for n in await remote_store.remote.select_all()} == {a.id, b.id, c.id}
    assert {n.id for n in await remote_store.cache.select_all()} == {a.id, b.id, c.id}

    await remote_store.delete(a.id)
    assert await remote_store.remote.select_all() == []
    assert await remote_store.cache.select_all() == []


@pytest.mark.asyncio
async def test_remote_failure_falls_back_to_cache(tmp_path):
    """Test that reads survive an unreachable remote."""
    cache = LocalJsonBackend(tmp_path / "cache.json")
    cached = FolderNode(id="a", name="Cached", created_at=1)
    await cache.insert(cached)
    store = NodeStore(cache=cache, remote=UnreachableBackend())

    assert await store.fetch_all() == [cached]


@pytest.mark.asyncio
async def test_remote_write_failure_keeps_cache(tmp_path):
    """Test that a failed remote insert leaves no partial state."""
    cache = LocalJsonBackend(tmp_path / "cache.json")
    remote = UnreachableBackend()
    store = NodeStore(cache=cache, remote=remote)

    with pytest.raises(PersistenceError):
        await store.add(FolderDraft(name="Lost"))

    assert "insert" in remote.calls
    assert await cache.select_all() == []


@pytest.mark.asyncio
async def test_sync_to_remote(tmp_path):
    """Test pushing the local snapshot into a remote database."""
    local = NodeStore(cache=LocalJsonBackend(tmp_path / "cache.json"))
    a, b, c = await build_abc(local)

    remote = SqlNodeBackend(f"sqlite+aiosqlite:///{tmp_path / 'remote.db'}")
    store = NodeStore(cache=local.cache, remote=remote)
    try:
        await store.initialize()
        assert await store.sync_to_remote() == 3
        assert {n.id for n in await remote.select_all()} == {a.id, b.id, c.id}
    finally:
        await remote.close()


@pytest.mark.asyncio
async def test_sync_requires_remote_and_data(store, tmp_path):
    """Test sync preconditions."""
    with pytest.raises(PersistenceError):
        await store.sync_to_remote()

    empty = NodeStore(cache=LocalJsonBackend(tmp_path / "empty.json"), remote=UnreachableBackend())
    with pytest.raises(PersistenceError):
        await empty.sync_to_remote()


@pytest.mark.asyncio
async def test_update_rejects_invalid_values(store):
    """Test that nulling a required field is refused without writing."""
    _, b, c = await build_abc(store)

    with pytest.raises(InvalidFieldError):
        await store.update(c.id, {"content_en": None})
    with pytest.raises(InvalidFieldError):
        await store.update(b.id, {"name": None})

    assert await store.get(c.id) == c
    assert await store.get(b.id) == b


@pytest.mark.asyncio
async def test_search_matches_label_halves(store):
    """Test matching against the English and Hebrew halves, not the separator."""
    node = await store.add(FolderDraft(name="Belief | אמונה"))

    assert [n.id for n in await store.search("belief")] == [node.id]
    assert [n.id for n in await store.search("אמונה")] == [node.id]
    assert await store.search("|") == []


@pytest.mark.asyncio
async def test_empty_remote_migrates_local_archive(tmp_path):
    """Test that configuring an empty database keeps the existing local archive."""
    cache = LocalJsonBackend(tmp_path / "cache.json")
    a, b, c = await build_abc(NodeStore(cache=cache))

    remote = SqlNodeBackend(f"sqlite+aiosqlite:///{tmp_path / 'remote.db'}")
    store = NodeStore(cache=cache, remote=remote)
    await store.initialize()
    try:
        nodes = await store.fetch_all()

        assert {n.id for n in nodes} == {a.id, b.id, c.id}
        assert {n.id for n in await cache.select_all()} == {a.id, b.id, c.id}
        assert {n.id for n in await remote.select_all()} == {a.id, b.id, c.id}
        assert await store.sync_to_remote() == 3
    finally:
        await remote.close()


@pytest.mark.asyncio
async def test_failed_migration_serves_cache(tmp_path):
    """Test that an unwritable remote leaves the local archive in place."""
    cache = LocalJsonBackend(tmp_path / "cache.json")
    cached = FolderNode(id="a", name="Cached", created_at=1)
    await cache.insert(cached)

    class EmptyReadOnlyBackend(UnreachableBackend):
        async def select_all(self) -> List[Node]:
            return []

    remote = EmptyReadOnlyBackend()
    store = NodeStore(cache=cache, remote=remote)

    assert await store.fetch_all() == [cached]
    assert "upsert_many" in remote.calls
    assert await cache.select_all() == [cached]


@pytest.mark.asyncio
async def test_fetch_skips_unchanged_snapshot(remote_store):
    """Test that the cache file is rewritten only when the remote changed."""
    a, _, _ = await build_abc(remote_store)
    await remote_store.fetch_all()
    remote_store.cache.replace_all = AsyncMock()

    await remote_store.fetch_all()
    remote_store.cache.replace_all.assert_not_called()

    await remote_store.remote.insert(FolderNode(id="direct", name="Direct", parent_id=a.id, created_at=1))
    nodes = await remote_store.fetch_all()

    assert "direct" in {n.id for n in nodes}
    remote_store.cache.replace_all.assert_called_once()
