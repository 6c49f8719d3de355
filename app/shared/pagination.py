"""Pagination utilities."""

from typing import Any, Dict

from pydantic import BaseModel, Field
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

DEFAULT_PAGE_SIZE = 20


class PaginationParams(BaseModel):
    """Pagination parameters."""

    page: int = Field(default=1, ge=1, description="Page number (1-based)")
    size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=100, description="Page size")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size


async def paginate(db: AsyncSession, query: Select, pagination: PaginationParams) -> Dict[str, Any]:
    """
    Paginate a SQLAlchemy query.

    A page past the end yields an empty ``items`` list.

    Args:
        db: Database session
        query: SQLAlchemy select query, already ordered
        pagination: Pagination parameters

    Returns:
        Dictionary with pagination info and items
    """

    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total_result = await db.execute(count_query)
    total = total_result.scalar() or 0

    total_pages = (total + pagination.size - 1) // pagination.size  # Ceiling division

    result = await db.execute(query.offset(pagination.offset).limit(pagination.size))
    items = list(result.scalars().all())

    return {
        "items": items,
        "total": total,
        "page": pagination.page,
        "size": pagination.size,
        "has_next": pagination.page < total_pages,
        "has_prev": pagination.page > 1,
        "total_pages": total_pages,
    }
