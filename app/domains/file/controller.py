"""File API controller with FastAPI endpoints."""

import base64
import binascii
import logging
import mimetypes
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Response, status

from app.core.config import settings
from app.core.dependencies import get_current_user_id, get_file_service, get_optional_user_id
from app.domains.file.service import FileService, parse_parent_id
from app.exceptions.base import ValidationError
from app.schemas.base import ResponseSchema
from app.schemas.file import FileCreateRequest, FileListResponse, FileResponse
from app.shared.pagination import PaginationParams

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files", tags=["files"])


def _decode_data(data: Optional[str]) -> Optional[bytes]:
    if data is None:
        return None
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError("Invalid data") from e


@router.post("", response_model=ResponseSchema, status_code=status.HTTP_201_CREATED)
async def create_file(
    file_data: FileCreateRequest,
    current_user_id: UUID = Depends(get_current_user_id),
    service: FileService = Depends(get_file_service),
):
    """Create a folder, or upload a file or an image."""
    record = await service.create_file(
        owner_id=current_user_id,
        name=file_data.name,
        kind=file_data.type,
        parent_id=parse_parent_id(file_data.parent_id),
        is_public=file_data.is_public,
        data=_decode_data(file_data.data) if file_data.type != "folder" else None,
    )

    return ResponseSchema(
        status="success",
        message="File created successfully",
        data=FileResponse.from_record(record).model_dump(mode="json"),
    )


@router.get("", response_model=FileListResponse)
async def list_files(
    parent_id: Optional[str] = Query("0", alias="parentId"),
    page: int = Query(1, ge=1),
    current_user_id: UUID = Depends(get_current_user_id),
    service: FileService = Depends(get_file_service),
):
    """Get one page of the caller's files under a folder (``0`` for the root)."""
    try:
        parent = parse_parent_id(parent_id)
    except ValidationError:
        # A parent that cannot exist has no children
        return FileListResponse(
            files=[],
            total=0,
            page=page,
            size=settings.page_size,
            has_next=False,
            has_prev=page > 1,
        )

    result = await service.list_files(
        current_user_id, parent, PaginationParams(page=page, size=settings.page_size)
    )

    return FileListResponse(
        files=[FileResponse.from_record(record) for record in result["items"]],
        total=result["total"],
        page=result["page"],
        size=result["size"],
        has_next=result["has_next"],
        has_prev=result["has_prev"],
    )


@router.get("/{file_id}", response_model=ResponseSchema)
async def get_file(
    file_id: str = Path(..., description="File ID"),
    current_user_id: UUID = Depends(get_current_user_id),
    service: FileService = Depends(get_file_service),
):
    """Get a specific file by ID."""
    record = await service.get_file(file_id, current_user_id)

    return ResponseSchema(
        status="success",
        message="File retrieved successfully",
        data=FileResponse.from_record(record).model_dump(mode="json"),
    )


@router.put("/{file_id}/publish", response_model=ResponseSchema)
async def publish_file(
    file_id: str = Path(..., description="File ID"),
    current_user_id: UUID = Depends(get_current_user_id),
    service: FileService = Depends(get_file_service),
):
    """Make a file readable by everyone."""
    record = await service.set_public(file_id, current_user_id, True)

    return ResponseSchema(
        status="success",
        message="File published",
        data=FileResponse.from_record(record).model_dump(mode="json"),
    )


@router.put("/{file_id}/unpublish", response_model=ResponseSchema)
async def unpublish_file(
    file_id: str = Path(..., description="File ID"),
    current_user_id: UUID = Depends(get_current_user_id),
    service: FileService = Depends(get_file_service),
):
    """Make a file readable by its owner only."""
    record = await service.set_public(file_id, current_user_id, False)

    return ResponseSchema(
        status="success",
        message="File unpublished",
        data=FileResponse.from_record(record).model_dump(mode="json"),
    )


@router.get("/{file_id}/data")
async def get_file_data(
    file_id: str = Path(..., description="File ID"),
    size: Optional[int] = Query(None, description="Thumbnail width"),
    current_user_id: Optional[UUID] = Depends(get_optional_user_id),
    service: FileService = Depends(get_file_service),
):
    """Get the content of a file, or of one of its thumbnails.

    Anonymous callers can read public files.
    """
    record, content = await service.get_file_data(file_id, current_user_id, size)
    media_type = mimetypes.guess_type(record.name)[0] or "application/octet-stream"

    return Response(content=content, media_type=media_type)
