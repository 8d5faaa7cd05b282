"""Relational implementation of the node backend."""
from typing import Any, Dict, Iterable, List, Mapping, Optional
import logging

from sqlalchemy import BigInteger, ForeignKey, String, Text, delete, event, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncAttrs, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.schema import CreateTable

from .base import BaseNodeBackend, merge_node
from .tree import parents_first
from ..exceptions import NotFoundError, PersistenceError
from ..models.node import Node, node_from_dict

logger = logging.getLogger(__name__)


class Base(AsyncAttrs, DeclarativeBase):
    pass


class NodeRecord(Base):
    """SQLAlchemy model for the nodes table."""

    __tablename__ = "nodes"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    parent_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("nodes.id", ondelete="CASCADE"), nullable=True, index=True
    )
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    content_en: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content_he: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content_type: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    translation_status: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)


COLUMNS = tuple(NodeRecord.__table__.columns.keys())


def node_to_row(node: Node) -> Dict[str, Any]:
    """Flatten a node into column values; folder rows leave content columns NULL."""
    data = node.model_dump(mode="json")
    return {column: data.get(column) for column in COLUMNS}


def row_to_node(record: NodeRecord) -> Node:
    data = {column: getattr(record, column) for column in COLUMNS}
    if data["type"] == "folder":
        data = {k: data[k] for k in ("id", "name", "type", "parent_id", "created_at")}
    else:
        data = {k: v for k, v in data.items() if v is not None or k == "parent_id"}
    return node_from_dict(data)


def schema_sql(dialect: str = "postgresql") -> str:
    """Render the CREATE TABLE statement for the nodes table."""
    dialects = {"postgresql": postgresql.dialect(), "sqlite": sqlite.dialect()}
    if dialect not in dialects:
        raise ValueError(f"Unsupported dialect: {dialect}")
    ddl = CreateTable(NodeRecord.__table__).compile(dialect=dialects[dialect])
    return str(ddl).strip() + ";"


class SqlNodeBackend(BaseNodeBackend):
    """Stores nodes in a relational table through SQLAlchemy's async engine."""

    def __init__(self, url: str, echo: bool = False):
        """Initialize the backend.

        Args:
            url: SQLAlchemy database URL, e.g. ``sqlite+aiosqlite:///archive.db``
            echo: Log emitted SQL
        """
        self.url = url
        self.engine = create_async_engine(url, echo=echo)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False)
        self._initialized = False

    async def initialize(self) -> None:
        """Create the nodes table if it does not exist."""
        if self._initialized:
            return
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to initialize database: {e}") from e
        self._initialized = True

    async def close(self) -> None:
        """Dispose of the engine's connection pool."""
        await self.engine.dispose()

    async def select_all(self) -> List[Node]:
        await self.initialize()
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(NodeRecord).order_by(NodeRecord.created_at)
                )
                return [row_to_node(record) for record in result.scalars()]
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to fetch nodes: {e}") from e

    async def insert(self, node: Node) -> None:
        await self.initialize()
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    session.add(NodeRecord(**node_to_row(node)))
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to insert node {node.id}: {e}") from e

    async def update(self, node_id: str, fields: Mapping[str, Any]) -> Node:
        await self.initialize()
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    record = await session.get(NodeRecord, node_id)
                    if record is None:
                        raise NotFoundError(node_id)
                    merged = merge_node(row_to_node(record), fields)
                    for column, value in node_to_row(merged).items():
                        setattr(record, column, value)
                return merged
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to update node {node_id}: {e}") from e

    async def delete_many(self, node_ids: Iterable[str]) -> None:
        ids = list(node_ids)
        if not ids:
            return
        await self.initialize()
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    await session.execute(delete(NodeRecord).where(NodeRecord.id.in_(ids)))
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to delete nodes: {e}") from e

    async def upsert_many(self, nodes: Iterable[Node]) -> None:
        await self.initialize()
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    for node in parents_first(list(nodes)):
                        await session.merge(NodeRecord(**node_to_row(node)))
                        # Flush per node so parents land before children.
                        await session.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to upsert nodes: {e}") from e


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
