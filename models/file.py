"""
File model for folders, plain files and images.
"""

import enum

from sqlalchemy import DDL, BigInteger, Boolean, Column, ForeignKey, Sequence, String, event
from sqlalchemy.orm import relationship, validates

from .base import UUID, BaseModel


class FileKind(str, enum.Enum):
    folder = "folder"
    file = "file"
    image = "image"


class ThumbnailStatus(str, enum.Enum):
    pending = "pending"
    generating = "generating"
    done = "done"
    failed = "failed"


class File(BaseModel):
    """
    Represents an entry of the file catalog.

    ``parent_id`` is null for entries at the root. ``locator`` addresses the
    bytes in the blob store and is null for folders. ``thumbnail_status`` is
    only set for images.
    """

    __tablename__ = "files"
    # seq is filled in by the database and only read back by queries
    __mapper_args__ = {"eager_defaults": False}

    user_id = Column(UUID(), ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    kind = Column(String(16), nullable=False)
    parent_id = Column(UUID(), ForeignKey("files.id"), nullable=True, index=True)
    is_public = Column(Boolean, nullable=False, default=False)
    locator = Column(String(64), nullable=True)
    thumbnail_status = Column(String(16), nullable=True)
    # Insertion counter, breaks ties between equal created_at values
    seq = Column(BigInteger, Sequence("files_seq"), nullable=True, unique=True)

    user = relationship("User", back_populates="files")

    @validates("kind", "locator")
    def _validate_write_once(self, key, value):
        if key == "kind":
            value = FileKind(value).value
        current = getattr(self, key)
        if current is not None and current != value:
            raise ValueError(f"{key} cannot be changed once set")
        return value

    @property
    def is_folder(self) -> bool:
        return self.kind == FileKind.folder.value

    @property
    def is_image(self) -> bool:
        return self.kind == FileKind.image.value


# SQLite has no sequences, its rowid grows the same way
event.listen(
    File.__table__,
    "after_create",
    DDL(
        "CREATE TRIGGER files_assign_seq AFTER INSERT ON files "
        "BEGIN UPDATE files SET seq = NEW.rowid WHERE rowid = NEW.rowid; END"
    ).execute_if(dialect="sqlite"),
)
