"""Pydantic models for request/response validation in the API."""
from typing import List, Optional
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.node import ContentType, Node


class ErrorResponse(BaseModel):
    """Error response model."""

    detail: str = Field(..., description="Error message")
    error_code: str = Field(..., description="Error code for programmatic handling")
    path: Optional[str] = Field(None, description="Path where the error occurred")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Timestamp of the error"
    )


class NodeList(BaseModel):
    """Model for a list of nodes."""

    items: List[Node] = Field(..., description="List of nodes")
    total: int = Field(..., description="Number of nodes returned")


class NodeUpdateRequest(BaseModel):
    """Model for updating an existing node.

    Only the fields present in the request are changed.
    """

    name: Optional[str] = Field(None, min_length=1, description="Display label")
    content_type: Optional[ContentType] = Field(None, description="Kind of content (files only)")
    content_en: Optional[str] = Field(None, description="English HTML body (files only)")
    content_he: Optional[str] = Field(None, description="Hebrew HTML body (files only)")
    url: Optional[str] = Field(None, description="External link or video reference (files only)")

    @field_validator("name", "content_type", "content_en")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("field may be omitted but not null")
        return value

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Belief & Anticipation | אמונה וציפייה",
            }
        }
    )


class MoveRequest(BaseModel):
    """Model for moving a node."""

    parent_id: Optional[str] = Field(None, description="Destination folder ID, null for root level")


class UnlockRequest(BaseModel):
    """Model for unlocking the admin console."""

    passcode: str = Field(..., description="Shared admin passcode")


class UnlockResponse(BaseModel):
    """Model for the admin unlock result."""

    unlocked: bool


class SyncResponse(BaseModel):
    """Model for a sync-to-remote result."""

    synced: int = Field(..., description="Number of nodes written to the remote database")


class SchemaResponse(BaseModel):
    """Model for the remote table DDL."""

    dialect: str
    sql: str


class DeleteResponse(BaseModel):
    """Model for a cascading delete result."""

    deleted: List[str] = Field(..., description="IDs removed, starting with the requested node")
