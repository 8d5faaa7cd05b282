"""Base class for node persistence backends."""
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping

from pydantic import ValidationError

from ..exceptions import InvalidFieldError
from ..models.node import FILE_ONLY_FIELDS, FileNode, Node

IMMUTABLE_FIELDS = frozenset({"id", "type", "created_at"})


def updatable_fields(node: Node, fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Filter an update down to the keys that may change on ``node``.

    Identity fields, unknown keys and file-only keys on a folder are dropped.

    Args:
        node: Node being updated
        fields: Requested changes

    Returns:
        Dict[str, Any]: Changes that apply to this node kind
    """
    allowed = set(type(node).model_fields) - IMMUTABLE_FIELDS
    if not isinstance(node, FileNode):
        allowed -= FILE_ONLY_FIELDS
    return {key: value for key, value in fields.items() if key in allowed}


def merge_node(node: Node, fields: Mapping[str, Any]) -> Node:
    """Return a validated copy of ``node`` with ``fields`` applied."""
    data = node.model_dump()
    data.update(updatable_fields(node, fields))
    try:
        return type(node).model_validate(data)
    except ValidationError as e:
        raise InvalidFieldError(f"Invalid update for node {node.id}: {e}") from e


class BaseNodeBackend(ABC):
    """Abstract base class for node persistence backends.

    Implementations raise PersistenceError for any storage failure and
    NotFoundError when an update targets an unknown ID.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the backend (create tables, files, ...)."""
        pass

    @abstractmethod
    async def select_all(self) -> List[Node]:
        """Get every stored node.

        Returns:
            List[Node]: Stored nodes ordered by creation time
        """
        pass

    @abstractmethod
    async def insert(self, node: Node) -> None:
        """Store a new node.

        Args:
            node: Node to insert
        """
        pass

    @abstractmethod
    async def update(self, node_id: str, fields: Mapping[str, Any]) -> Node:
        """Apply field changes to a stored node.

        Args:
            node_id: ID of the node to update
            fields: Field changes

        Returns:
            Node: The node after the update
        """
        pass

    @abstractmethod
    async def delete_many(self, node_ids: Iterable[str]) -> None:
        """Remove several nodes in one operation.

        Args:
            node_ids: IDs to delete
        """
        pass

    @abstractmethod
    async def upsert_many(self, nodes: Iterable[Node]) -> None:
        """Insert or replace several nodes.

        Args:
            nodes: Nodes to write, parents before children
        """
        pass
