"""JSON-file implementation of the node backend."""
from typing import Any, Iterable, List, Mapping, Union
import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from .base import BaseNodeBackend, merge_node
from ..exceptions import NotFoundError, PersistenceError
from ..models.node import Node, node_from_dict, node_to_dict

logger = logging.getLogger(__name__)


class LocalJsonBackend(BaseNodeBackend):
    """Keeps the whole node set as one JSON array on disk.

    Serves as the local-only store and as the cache behind a remote backend.
    """

    def __init__(self, path: Union[str, Path]):
        """Initialize the backend.

        Args:
            path: Location of the JSON snapshot file
        """
        self.path = Path(path)

    async def initialize(self) -> None:
        """Create the parent directory of the snapshot file."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Failed to prepare {self.path}: {e}") from e

    def exists(self) -> bool:
        """Whether a snapshot has ever been written."""
        return self.path.exists()

    def _read(self) -> List[Node]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            return [node_from_dict(item) for item in raw]
        except (OSError, ValueError, ValidationError) as e:
            raise PersistenceError(f"Failed to read {self.path}: {e}") from e

    def _write(self, nodes: List[Node]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump([node_to_dict(n) for n in nodes], f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise PersistenceError(f"Failed to write {self.path}: {e}") from e

    async def select_all(self) -> List[Node]:
        nodes = self._read()
        nodes.sort(key=lambda n: n.created_at)
        return nodes

    async def insert(self, node: Node) -> None:
        nodes = self._read()
        if any(n.id == node.id for n in nodes):
            raise PersistenceError(f"Node with ID {node.id} already exists")
        nodes.append(node)
        self._write(nodes)

    async def update(self, node_id: str, fields: Mapping[str, Any]) -> Node:
        nodes = self._read()
        for i, node in enumerate(nodes):
            if node.id == node_id:
                nodes[i] = merge_node(node, fields)
                self._write(nodes)
                return nodes[i]
        raise NotFoundError(node_id)

    async def delete_many(self, node_ids: Iterable[str]) -> None:
        doomed = set(node_ids)
        nodes = self._read()
        self._write([n for n in nodes if n.id not in doomed])

    async def upsert_many(self, nodes: Iterable[Node]) -> None:
        by_id = {n.id: n for n in self._read()}
        for node in nodes:
            by_id[node.id] = node
        self._write(list(by_id.values()))

    async def replace_all(self, nodes: Iterable[Node]) -> None:
        """Overwrite the snapshot with ``nodes``."""
        self._write(list(nodes))
        logger.debug(f"Local snapshot refreshed at {self.path}")
