"""File catalog service layer with business logic."""

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import and_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.domains.auth.access import ensure_readable, ensure_writable
from app.domains.file.storage import BlobStore
from app.domains.thumbnail.queue import ThumbnailQueue
from app.domains.thumbnail.service import THUMBNAIL_WIDTHS, ThumbnailJob
from app.exceptions.base import (
    InternalInconsistencyError,
    NotFoundError,
    StorageFaultError,
    ValidationError,
)
from app.exceptions.file import (
    BlobNotFoundError,
    FolderHasNoContentError,
    ParentNotFolderError,
    ParentNotFoundError,
)
from app.shared.pagination import PaginationParams, paginate
from models import File, FileKind, ThumbnailStatus

logger = logging.getLogger(__name__)

ROOT_PARENT_ID = "0"


def parse_parent_id(value: Any) -> Optional[UUID]:
    """Turn an API parent id into a UUID, with None meaning the root."""
    if value is None or value == "" or str(value) == ROOT_PARENT_ID:
        return None
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError as e:
        raise ParentNotFoundError() from e


def parse_file_id(value: Any) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError as e:
        raise NotFoundError() from e


class FileService:
    """Service class for the file catalog."""

    def __init__(
        self,
        db: AsyncSession,
        blobs: BlobStore,
        thumbnails: Optional[ThumbnailQueue] = None,
        thumbnail_widths: tuple[int, ...] = THUMBNAIL_WIDTHS,
        max_file_size: Optional[int] = None,
    ):
        self.db = db
        self.blobs = blobs
        self.thumbnails = thumbnails
        self.thumbnail_widths = tuple(thumbnail_widths)
        self.max_file_size = max_file_size

    async def create_file(
        self,
        owner_id: UUID,
        name: Optional[str],
        kind: Optional[str],
        parent_id: Optional[UUID] = None,
        is_public: bool = False,
        data: Optional[bytes] = None,
    ) -> File:
        """Create a folder, file or image.

        Content is stored before the record is inserted; if storing fails no
        record is created. Images get a thumbnail job once the record is
        committed.
        """
        if not name or not name.strip():
            raise ValidationError("Missing name")
        if not kind:
            raise ValidationError("Missing type")
        try:
            kind = FileKind(kind)
        except ValueError as e:
            raise ValidationError("Missing type") from e

        if parent_id is not None:
            parent = await self._get_file_by_id_and_user(parent_id, owner_id)
            if parent is None:
                raise ParentNotFoundError()
            if not parent.is_folder:
                raise ParentNotFolderError()

        locator = None
        if kind != FileKind.folder:
            if data is None:
                raise ValidationError("Missing data")
            if self.max_file_size is not None and len(data) > self.max_file_size:
                raise ValidationError(
                    "File too large", details={"max_file_size": self.max_file_size}
                )
            locator = await self.blobs.put(data)

        record = File(
            user_id=owner_id,
            name=name,
            kind=kind.value,
            parent_id=parent_id,
            is_public=bool(is_public),
            locator=locator,
            thumbnail_status=ThumbnailStatus.pending.value if kind == FileKind.image else None,
        )

        try:
            self.db.add(record)
            await self.db.commit()
            await self.db.refresh(record)
        except SQLAlchemyError as e:
            await self.db.rollback()
            if locator is not None:
                await self.blobs.delete(locator)
            logger.error("Failed to create file record for user %s: %s", owner_id, str(e))
            raise StorageFaultError(f"Failed to create file: {str(e)}") from e

        if kind == FileKind.image:
            await self._enqueue_thumbnails(record)

        return record

    async def get_file(self, file_id: Any, requester_id: Optional[UUID]) -> File:
        """Get a file the requester may read, or raise NotFoundError."""
        record = await self.db.get(File, parse_file_id(file_id), populate_existing=True)
        return ensure_readable(requester_id, record)

    async def list_files(
        self,
        owner_id: UUID,
        parent_id: Optional[UUID] = None,
        pagination: Optional[PaginationParams] = None,
    ) -> Dict[str, Any]:
        """Get one page of the owner's files directly under ``parent_id``."""
        parent_clause = File.parent_id.is_(None) if parent_id is None else File.parent_id == parent_id
        stmt = (
            select(File)
            .where(and_(File.user_id == owner_id, parent_clause))
            .order_by(File.seq)
        )
        return await paginate(self.db, stmt, pagination or PaginationParams())

    async def set_public(self, file_id: Any, requester_id: UUID, value: bool) -> File:
        """Publish or unpublish a file. Setting the current value is a no-op."""
        record = await self.db.get(File, parse_file_id(file_id), populate_existing=True)
        record = ensure_writable(requester_id, record)
        if record.is_public == value:
            return record

        try:
            await self.db.execute(
                update(File).where(File.id == record.id).values(is_public=value)
            )
            await self.db.commit()
            await self.db.refresh(record)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageFaultError(f"Failed to update file: {str(e)}") from e
        return record

    async def get_file_data(
        self, file_id: Any, requester_id: Optional[UUID], size: Optional[int] = None
    ) -> tuple[File, bytes]:
        """Return a readable file and its content, or one of its thumbnails."""
        record = await self.get_file(file_id, requester_id)
        if record.is_folder:
            raise FolderHasNoContentError()

        if size is None:
            try:
                return record, await self.blobs.get(record.locator)
            except BlobNotFoundError as e:
                logger.error("File %s references missing content %s", record.id, record.locator)
                raise InternalInconsistencyError() from e

        if size not in self.thumbnail_widths:
            raise ValidationError(
                "Invalid size", details={"allowed": list(self.thumbnail_widths)}
            )
        if not record.is_image or record.thumbnail_status != ThumbnailStatus.done.value:
            raise NotFoundError()
        try:
            return record, await self.blobs.get(BlobStore.thumbnail_locator(record.locator, size))
        except BlobNotFoundError as e:
            raise NotFoundError() from e

    async def _enqueue_thumbnails(self, record: File) -> None:
        if self.thumbnails is None:
            logger.warning("No thumbnail queue configured; file %s stays pending", record.id)
            return
        try:
            await self.thumbnails.enqueue(ThumbnailJob(file_id=record.id, locator=record.locator))
        except Exception as e:
            logger.error("Failed to enqueue thumbnails for file %s: %s", record.id, str(e))

    async def _get_file_by_id_and_user(self, file_id: UUID, user_id: UUID) -> Optional[File]:
        stmt = select(File).where(and_(File.id == file_id, File.user_id == user_id))
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()
