"""Data models for the archive tree."""
from .labels import display_name, join_label, split_label
from .node import (
    ContentType,
    FileDraft,
    FileNode,
    FolderDraft,
    FolderNode,
    Node,
    NodeDraft,
    TranslationStatus,
    node_from_dict,
    node_to_dict,
)

__all__ = [
    "ContentType",
    "FileDraft",
    "FileNode",
    "FolderDraft",
    "FolderNode",
    "Node",
    "NodeDraft",
    "TranslationStatus",
    "display_name",
    "join_label",
    "node_from_dict",
    "node_to_dict",
    "split_label",
]
