"""File-related Pydantic schemas for request/response validation."""

from typing import Optional, Union
from uuid import UUID

from pydantic import ConfigDict, Field

from .base import BaseSchema


class FileCreateRequest(BaseSchema):
    """Schema for creating a folder, file or image.

    Field names follow the public API (camelCase); ``data`` carries the
    content as base64 and is required unless ``type`` is ``folder``.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, max_length=255, description="Display name")
    type: Optional[str] = Field(None, description="One of folder, file, image")
    parent_id: Union[str, int, None] = Field("0", alias="parentId", description="Parent folder id, 0 for root")
    is_public: bool = Field(False, alias="isPublic", description="Readable by everyone")
    data: Optional[str] = Field(None, description="Base64 encoded content")


class FileResponse(BaseSchema):
    """Schema for file response data. Storage locators are never exposed."""

    id: UUID
    user_id: UUID
    name: str
    type: str
    is_public: bool
    parent_id: str
    thumbnail_status: Optional[str] = None

    @classmethod
    def from_record(cls, record) -> "FileResponse":
        return cls(
            id=record.id,
            user_id=record.user_id,
            name=record.name,
            type=record.kind,
            is_public=record.is_public,
            parent_id=str(record.parent_id) if record.parent_id else "0",
            thumbnail_status=record.thumbnail_status,
        )


class FileListResponse(BaseSchema):
    """Schema for one page of files."""

    files: list[FileResponse]
    total: int
    page: int
    size: int
    has_next: bool
    has_prev: bool
