"""
Models package initialization.
"""

from .base import Base, BaseModel
from .file import File, FileKind, ThumbnailStatus
from .user import User

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "File",
    "FileKind",
    "ThumbnailStatus",
]
