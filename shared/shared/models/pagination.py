from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PaginationParams(BaseModel):
    """Query params for list endpoints."""

    model_config = ConfigDict(extra="forbid")

    page: int = Field(default=1, ge=1, description="Page number")
    limit: int = Field(default=10, ge=1, le=100, description="Items per page")

    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PageMeta(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, params: PaginationParams, total: int) -> "PageMeta":
        return cls(
            page=params.page,
            limit=params.limit,
            total=total,
            pages=(total + params.limit - 1) // params.limit,
        )


class PaginatedResponse(BaseModel, Generic[T]):
    """Wrapped list with pagination metadata."""

    items: list[T]
    pagination: PageMeta

    @property
    def has_more(self) -> bool:
        return self.pagination.page < self.pagination.pages
