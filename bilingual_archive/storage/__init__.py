"""Storage backends and the node store."""
from .base import BaseNodeBackend
from .local_store import LocalJsonBackend
from .node_store import NodeStore
from .sql_store import SqlNodeBackend, schema_sql

__all__ = [
    "BaseNodeBackend",
    "LocalJsonBackend",
    "NodeStore",
    "SqlNodeBackend",
    "schema_sql",
]
