"""Node store: CRUD and tree-aware operations over the archive."""
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, TypeVar
import logging
import time
import uuid

from .base import BaseNodeBackend, merge_node, updatable_fields
from .local_store import LocalJsonBackend
from .tree import ancestors, descendants, parents_first
from ..exceptions import (
    InvalidMoveError,
    InvalidParentError,
    NotFoundError,
    PersistenceError,
)
from ..models.labels import display_name, split_label
from ..models.node import ContentType, FileNode, FolderNode, Node, NodeDraft

logger = logging.getLogger(__name__)

T = TypeVar("T")


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


class NodeStore:
    """Owns the node collection and is the only writer of persisted state.

    With a remote backend the store is remote-primary: writes go to the remote
    first and the local cache is refreshed only after the remote confirms.
    Reads fall back to the cache when the remote is unreachable. Without a
    remote the cache is the store.
    """

    def __init__(
        self,
        cache: LocalJsonBackend,
        remote: Optional[BaseNodeBackend] = None,
        seed: Sequence[Node] = ()
    ):
        """Initialize the node store.

        Args:
            cache: Local snapshot backend
            remote: Optional primary backend
            seed: Nodes written when a local-only archive starts empty
        """
        self.cache = cache
        self.remote = remote
        self.seed = list(seed)

    @property
    def local_only(self) -> bool:
        return self.remote is None

    async def initialize(self) -> None:
        """Initialize the configured backends."""
        await self.cache.initialize()
        if self.remote is not None:
            await self.remote.initialize()

    async def _write(self, operation: Callable[[BaseNodeBackend], Awaitable[T]]) -> T:
        """Run a write against the primary backend, then mirror it into the cache."""
        if self.remote is None:
            return await operation(self.cache)
        result = await operation(self.remote)
        try:
            await operation(self.cache)
        except (PersistenceError, NotFoundError) as e:
            # Next successful fetch_all rewrites the snapshot.
            logger.warning(f"Local cache out of sync after remote write: {e}")
        return result

    async def fetch_all(self) -> List[Node]:
        """Get every node, oldest first.

        Returns:
            List[Node]: All nodes in the archive
        """
        if self.remote is not None:
            try:
                nodes = await self.remote.select_all()
            except PersistenceError as e:
                logger.warning(f"Remote fetch failed, serving local snapshot: {e}")
                return await self.cache.select_all()
            try:
                cached = await self.cache.select_all()
            except PersistenceError as e:
                logger.warning(f"Failed to read local snapshot: {e}")
                cached = []
            if not nodes and cached:
                return await self._migrate_cache(cached)
            if _by_id(nodes) != _by_id(cached):
                try:
                    await self.cache.replace_all(nodes)
                except PersistenceError as e:
                    logger.warning(f"Failed to refresh local snapshot: {e}")
            return nodes

        if self.seed and not self.cache.exists():
            logger.info(f"Seeding empty archive with {len(self.seed)} nodes")
            await self.cache.replace_all(self.seed)
        return await self.cache.select_all()

    async def _migrate_cache(self, cached: List[Node]) -> List[Node]:
        """Copy a local archive into an empty remote and serve it."""
        try:
            await self.remote.upsert_many(parents_first(cached))
        except PersistenceError as e:
            logger.warning(f"Migration of local snapshot failed, serving it as is: {e}")
            return cached
        logger.info(f"Migrated {len(cached)} local nodes into empty remote")
        return cached

    async def get(self, node_id: str) -> Node:
        """Get a node by ID.

        Raises:
            NotFoundError: If no node has this ID
        """
        for node in await self.fetch_all():
            if node.id == node_id:
                return node
        raise NotFoundError(node_id)

    async def add(self, draft: NodeDraft) -> Node:
        """Persist a new node with a fresh ID and the current timestamp.

        Args:
            draft: Node fields without ``id``/``created_at``

        Returns:
            Node: The persisted node

        Raises:
            NotFoundError: If the parent does not exist
            InvalidParentError: If the parent is a file
            PersistenceError: If the write fails
        """
        if draft.parent_id is not None:
            nodes = await self.fetch_all()
            parent = _find(nodes, draft.parent_id)
            if parent is None:
                raise NotFoundError(draft.parent_id)
            if not isinstance(parent, FolderNode):
                raise InvalidParentError(f"Node {draft.parent_id} is a file and cannot hold children")

        node = draft.to_node(str(uuid.uuid4()), now_ms())
        try:
            await self._write(lambda backend: backend.insert(node))
        except PersistenceError as e:
            logger.error(f"Failed to add node: {e}")
            raise
        logger.info(f"Added {node.type} '{display_name(node.name)}' ({node.id}) under {node.parent_id}")
        return node

    async def update(self, node_id: str, fields: Mapping[str, Any]) -> Node:
        """Merge ``fields`` into an existing node.

        Keys that cannot change on this node kind are ignored; parent changes
        go through :meth:`move`.

        Raises:
            NotFoundError: If no node has this ID
        """
        node = await self.get(node_id)
        changes = updatable_fields(node, fields)
        changes.pop("parent_id", None)
        if not changes:
            return node
        merge_node(node, changes)
        try:
            updated = await self._write(lambda backend: backend.update(node_id, changes))
        except PersistenceError as e:
            logger.error(f"Failed to update node {node_id}: {e}")
            raise
        logger.info(f"Updated node {node_id}: {sorted(changes)}")
        return updated

    async def delete(self, node_id: str) -> List[str]:
        """Delete a node together with its whole subtree.

        Returns:
            List[str]: IDs that were removed

        Raises:
            NotFoundError: If no node has this ID
        """
        nodes = await self.fetch_all()
        if _find(nodes, node_id) is None:
            raise NotFoundError(node_id)
        doomed = [node_id] + sorted(descendants(nodes, node_id))
        try:
            await self._write(lambda backend: backend.delete_many(doomed))
        except PersistenceError as e:
            logger.error(f"Failed to delete node {node_id}: {e}")
            raise
        logger.info(f"Deleted node {node_id} and {len(doomed) - 1} descendants")
        return doomed

    async def move(self, node_id: str, new_parent_id: Optional[str]) -> Node:
        """Reparent a node.

        Args:
            node_id: Node to move
            new_parent_id: Destination folder, None for root level

        Raises:
            NotFoundError: If the node or destination does not exist
            InvalidMoveError: If the destination is the node itself, one of
                its descendants, or a file
        """
        nodes = await self.fetch_all()
        if _find(nodes, node_id) is None:
            raise NotFoundError(node_id)
        if new_parent_id is not None:
            if new_parent_id == node_id:
                raise InvalidMoveError("Invalid move destination: a node cannot contain itself")
            target = _find(nodes, new_parent_id)
            if target is None:
                raise NotFoundError(new_parent_id)
            if not isinstance(target, FolderNode):
                raise InvalidMoveError("Invalid move destination: files cannot hold children")
            if new_parent_id in descendants(nodes, node_id):
                raise InvalidMoveError("Invalid move destination: target is inside the moved node")

        changes = {"parent_id": new_parent_id}
        try:
            moved = await self._write(lambda backend: backend.update(node_id, changes))
        except PersistenceError as e:
            logger.error(f"Failed to move node {node_id}: {e}")
            raise
        logger.info(f"Moved node {node_id} to {new_parent_id}")
        return moved

    async def children(self, parent_id: Optional[str]) -> List[Node]:
        """Direct children of a folder (or root level), newest first."""
        nodes = await self.fetch_all()
        found = [n for n in nodes if n.parent_id == parent_id]
        found.sort(key=lambda n: n.created_at, reverse=True)
        return found

    async def search(self, query: str, limit: int = 5) -> List[Node]:
        """Case-insensitive substring match on either half of node labels."""
        needle = query.strip().lower()
        if not needle:
            return []
        nodes = await self.fetch_all()
        return [n for n in nodes if _label_matches(n.name, needle)][:limit]

    async def featured_videos(self, limit: int = 4) -> List[FileNode]:
        """Newest video files."""
        nodes = await self.fetch_all()
        videos = [
            n for n in nodes
            if isinstance(n, FileNode) and n.content_type == ContentType.VIDEO
        ]
        videos.sort(key=lambda n: n.created_at, reverse=True)
        return videos[:limit]

    async def breadcrumbs(self, node_id: str) -> List[Node]:
        """Ancestor chain of a node, root first, ending with the node itself."""
        nodes = await self.fetch_all()
        by_id: Dict[str, Node] = {n.id: n for n in nodes}
        if node_id not in by_id:
            raise NotFoundError(node_id)
        chain = [by_id[i] for i in reversed(ancestors(nodes, node_id)) if i in by_id]
        return chain + [by_id[node_id]]

    async def sync_to_remote(self) -> int:
        """Upsert every cached node into the remote backend.

        Returns:
            int: Number of nodes written

        Raises:
            PersistenceError: If no remote is configured, the cache is empty,
                or the upsert fails
        """
        if self.remote is None:
            raise PersistenceError("No remote database is configured")
        nodes = await self.cache.select_all()
        if not nodes:
            raise PersistenceError("No local data found to sync")
        await self.remote.upsert_many(parents_first(nodes))
        logger.info(f"Synced {len(nodes)} nodes to remote")
        return len(nodes)


def _by_id(nodes: Sequence[Node]) -> Dict[str, Node]:
    return {n.id: n for n in nodes}


def _label_matches(name: str, needle: str) -> bool:
    return any(needle in half.lower() for half in split_label(name) if half)


def _find(nodes: Sequence[Node], node_id: str) -> Optional[Node]:
    for node in nodes:
        if node.id == node_id:
            return node
    return None
