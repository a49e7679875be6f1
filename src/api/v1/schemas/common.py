"""Common Pydantic schemas shared across the API."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel

from domain.entities.pagination import Page


class CountResponse(BaseModel):
    """Single count wrapped in the standard envelope."""

    data: int


class PageMeta(BaseModel):
    """Pagination metadata for paged list responses."""

    page: int
    size: int
    total: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page[Any]) -> "PageMeta":
        return cls(
            page=page.page,
            size=page.size,
            total=page.total,
            total_pages=page.total_pages,
        )


def to_naive_utc(value: datetime | None) -> datetime | None:
    """Normalise an aware datetime to naive UTC; naive values are taken as UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
