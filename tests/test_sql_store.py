"""Tests for the relational backend."""
import pytest
import pytest_asyncio

from bilingual_archive.exceptions import NotFoundError, PersistenceError
from bilingual_archive.models import ContentType, FileNode, FolderNode, TranslationStatus
from bilingual_archive.storage.sql_store import SqlNodeBackend, schema_sql


@pytest_asyncio.fixture
async def backend(tmp_path):
    """Create a SQLite-backed store in a temp dir."""
    store = SqlNodeBackend(f"sqlite+aiosqlite:///{tmp_path / 'archive.db'}")
    await store.initialize()
    yield store
    await store.close()


@pytest.mark.asyncio
async def test_insert_and_select(backend):
    """Test round-tripping both node kinds through the table."""
    folder = FolderNode(id="a", name="A | א", created_at=10)
    file = FileNode(
        id="b",
        name="Lecture",
        parent_id="a",
        created_at=20,
        content_type=ContentType.VIDEO,
        url="https://example.org/watch",
        translation_status=TranslationStatus.READY,
    )
    await backend.insert(folder)
    await backend.insert(file)

    nodes = await backend.select_all()
    assert nodes == [folder, file]


@pytest.mark.asyncio
async def test_insert_with_missing_parent_fails(backend):
    """Test the foreign key on parent_id."""
    with pytest.raises(PersistenceError):
        await backend.insert(FolderNode(id="x", name="X", parent_id="nope", created_at=1))


@pytest.mark.asyncio
async def test_update(backend):
    """Test partial updates."""
    await backend.insert(FileNode(id="f", name="F", created_at=1, content_en="<p>en</p>"))

    updated = await backend.update("f", {"content_he": "<p>he</p>", "created_at": 999})

    assert updated.content_he == "<p>he</p>"
    assert updated.created_at == 1
    assert (await backend.select_all()) == [updated]


@pytest.mark.asyncio
async def test_update_unknown_id(backend):
    """Test updating a missing node."""
    with pytest.raises(NotFoundError):
        await backend.update("missing", {"name": "X"})


@pytest.mark.asyncio
async def test_delete_many(backend):
    """Test deleting a parent and its children together."""
    await backend.insert(FolderNode(id="a", name="A", created_at=1))
    await backend.insert(FolderNode(id="b", name="B", parent_id="a", created_at=2))
    await backend.insert(FileNode(id="c", name="C", parent_id="b", created_at=3))
    await backend.insert(FolderNode(id="d", name="D", created_at=4))

    await backend.delete_many(["a", "b", "c"])

    assert [n.id for n in await backend.select_all()] == ["d"]


@pytest.mark.asyncio
async def test_upsert_many_orders_parents(backend):
    """Test that upserts succeed with children listed before parents."""
    await backend.upsert_many([
        FileNode(id="c", name="C", parent_id="b", created_at=3),
        FolderNode(id="b", name="B", parent_id="a", created_at=2),
        FolderNode(id="a", name="A", created_at=1),
    ])
    await backend.upsert_many([FolderNode(id="a", name="Renamed", created_at=1)])

    nodes = await backend.select_all()
    assert [(n.id, n.name) for n in nodes] == [("a", "Renamed"), ("b", "B"), ("c", "C")]


def test_schema_sql():
    """Test rendering the DDL."""
    ddl = schema_sql()
    assert ddl.startswith("CREATE TABLE nodes")
    assert "ON DELETE CASCADE" in ddl
    assert "content_he" in ddl
    with pytest.raises(ValueError):
        schema_sql("oracle")
