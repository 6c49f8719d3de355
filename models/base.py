"""
Declarative base shared by the user and file tables.

Every record gets a UUID primary key assigned on insert and a creation
timestamp. The creation timestamp is never touched after insert.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, TypeDecorator
from sqlalchemy.dialects.postgresql import UUID as PostgreSQLUUID
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, the form both SQLite and PostgreSQL columns round-trip."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class UUID(TypeDecorator):
    """
    Platform-independent UUID type.
    Uses PostgreSQL's UUID type when available,
    otherwise uses CHAR(36), storing as string.
    """

    impl = String
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PostgreSQLUUID())
        return dialect.type_descriptor(String(36))

    def process_bind_param(self, value, dialect):
        if value is None or dialect.name == "postgresql":
            return value
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(value)


class BaseModel(Base):
    """
    Abstract base for stored records.

    :ivar id: Identifier assigned by the database layer on insert.
    :type id: UUID
    :ivar created_at: Insertion time, used to order listings.
    :type created_at: datetime
    """

    __abstract__ = True

    id = Column(UUID(), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
