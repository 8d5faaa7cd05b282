"""Tree queries over a flat list of nodes with parent pointers.

All walks are iterative and keep a visited set, so a cycle introduced by a
bad write cannot hang a traversal.
"""
from collections import deque
from typing import Dict, Iterable, List, Optional, Sequence, Set

from ..models.node import Node


def children_index(nodes: Iterable[Node]) -> Dict[Optional[str], List[Node]]:
    """Group nodes by parent ID."""
    index: Dict[Optional[str], List[Node]] = {}
    for node in nodes:
        index.setdefault(node.parent_id, []).append(node)
    return index


def descendants(nodes: Sequence[Node], node_id: str) -> Set[str]:
    """IDs of every transitive child of ``node_id`` (excluding itself).

    Args:
        nodes: Full node set
        node_id: Root of the subtree

    Returns:
        Set[str]: Descendant IDs
    """
    index = children_index(nodes)
    found: Set[str] = set()
    queue = deque([node_id])
    while queue:
        current = queue.popleft()
        for child in index.get(current, []):
            if child.id in found or child.id == node_id:
                continue
            found.add(child.id)
            queue.append(child.id)
    return found


def ancestors(nodes: Sequence[Node], node_id: str) -> List[str]:
    """IDs on the parent chain of ``node_id``, nearest parent first."""
    by_id = {node.id: node for node in nodes}
    chain: List[str] = []
    seen = {node_id}
    current = by_id.get(node_id)
    while current is not None and current.parent_id is not None:
        parent_id = current.parent_id
        if parent_id in seen:
            break
        seen.add(parent_id)
        chain.append(parent_id)
        current = by_id.get(parent_id)
    return chain


def parents_first(nodes: Sequence[Node]) -> List[Node]:
    """Order nodes so every parent precedes its children.

    Nodes whose parent is missing from ``nodes`` are treated as roots.
    """
    present = {node.id for node in nodes}
    index = children_index(nodes)
    ordered: List[Node] = []
    visited: Set[str] = set()
    queue = deque(
        node for node in nodes
        if node.parent_id is None or node.parent_id not in present
    )
    while queue:
        node = queue.popleft()
        if node.id in visited:
            continue
        visited.add(node.id)
        ordered.append(node)
        queue.extend(index.get(node.id, []))
    # Anything left sits on a cycle; keep it rather than drop data.
    ordered.extend(node for node in nodes if node.id not in visited)
    return ordered
