"""Node models for the archive tree."""
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


class ContentType(str, Enum):
    """Kind of content a file node carries."""

    TEXT = "text"
    VIDEO = "video"
    LINK = "link"
    BOOK = "book"


class TranslationStatus(str, Enum):
    """State of the machine translation attached to a file node."""

    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class BaseNode(BaseModel):
    """Fields shared by folders and files."""

    id: str = Field(description="Unique identifier for the node")
    name: str = Field(description="Display label, optionally 'English | Hebrew'")
    parent_id: Optional[str] = Field(None, description="Parent folder ID, None for root level")
    created_at: int = Field(description="Creation time in epoch milliseconds")


class FolderNode(BaseNode):
    """A grouping container."""

    type: Literal["folder"] = "folder"


class FileNode(BaseNode):
    """A leaf carrying content in one or two languages."""

    type: Literal["file"] = "file"
    content_type: ContentType = Field(ContentType.TEXT, description="Kind of content")
    content_en: str = Field("", description="English HTML body")
    content_he: Optional[str] = Field(None, description="Hebrew HTML body")
    url: Optional[str] = Field(None, description="External link or video reference")
    translation_status: Optional[TranslationStatus] = Field(
        None,
        description="Machine translation state, None when none was requested"
    )


Node = Annotated[Union[FolderNode, FileNode], Field(discriminator="type")]

NODE_ADAPTER: TypeAdapter = TypeAdapter(Node)

FILE_ONLY_FIELDS = frozenset(
    {"content_type", "content_en", "content_he", "url", "translation_status"}
)


class FolderDraft(BaseModel):
    """A folder that has not been persisted yet."""

    type: Literal["folder"] = "folder"
    name: str = Field(..., min_length=1)
    parent_id: Optional[str] = None

    def to_node(self, node_id: str, created_at: int) -> FolderNode:
        return FolderNode(id=node_id, created_at=created_at, **self.model_dump())


class FileDraft(BaseModel):
    """A file that has not been persisted yet."""

    type: Literal["file"] = "file"
    name: str = Field(..., min_length=1)
    parent_id: Optional[str] = None
    content_type: ContentType = ContentType.TEXT
    content_en: str = ""
    content_he: Optional[str] = None
    url: Optional[str] = None
    translation_status: Optional[TranslationStatus] = None

    def to_node(self, node_id: str, created_at: int) -> FileNode:
        return FileNode(id=node_id, created_at=created_at, **self.model_dump())


NodeDraft = Annotated[Union[FolderDraft, FileDraft], Field(discriminator="type")]


def node_from_dict(data: dict) -> Union[FolderNode, FileNode]:
    """Validate a raw record into the matching node variant."""
    return NODE_ADAPTER.validate_python(data)


def node_to_dict(node: Union[FolderNode, FileNode]) -> dict:
    """Dump a node into a JSON-compatible record."""
    return node.model_dump(mode="json")
