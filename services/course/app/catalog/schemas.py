"""Catalog domain Pydantic V2 schemas.

Covers Course and ContentItem authoring plus the public catalog views.
Follows RORO: separate request models from response models.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.enums import ContentType, CourseLevel, CourseSortField, SortOrder
from shared.models.pagination import PaginatedResponse


# ---------------------------------------------------------------------------
# Course request schemas
# ---------------------------------------------------------------------------


class CreateCourseRequest(BaseModel):
    """Request body for creating a new course.

    The caller becomes the course author. Courses start unpublished.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255, description="Course title.")
    description: str | None = Field(default=None, description="Course landing page body.")
    featured_image: str | None = Field(
        default=None, max_length=500, description="Cover image URL."
    )
    price: Decimal = Field(default=Decimal("0"), ge=0, description="0 for free courses.")
    currency: str = Field(
        default="USD", min_length=3, max_length=3, description="ISO 4217 currency code."
    )
    level: CourseLevel = Field(default=CourseLevel.BEGINNER)
    duration_mins: int = Field(default=0, ge=0, description="Estimated total duration.")
    language: str = Field(default="English", max_length=50)
    category: str | None = Field(default=None, max_length=100)
    tags: list[str] = Field(default_factory=list, description="Free-form search tags.")

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, v: str) -> str:
        return v.upper()


CLEARABLE_COURSE_FIELDS = frozenset({"description", "featured_image", "category"})


class UpdateCourseRequest(BaseModel):
    """PUT body for updating a course. Omitted fields are left unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None)
    featured_image: str | None = Field(default=None, max_length=500)
    price: Decimal | None = Field(default=None, ge=0)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    level: CourseLevel | None = Field(default=None)
    duration_mins: int | None = Field(default=None, ge=0)
    language: str | None = Field(default=None, max_length=50)
    category: str | None = Field(default=None, max_length=100)
    tags: list[str] | None = Field(default=None)

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, v: str | None) -> str | None:
        return v.upper() if v else v

    def to_updates(self) -> dict:
        """Fields the client sent. Only nullable columns may be cleared with ``null``."""
        return {
            field: value
            for field, value in self.model_dump(exclude_unset=True).items()
            if value is not None or field in CLEARABLE_COURSE_FIELDS
        }


class CourseListFilters(BaseModel):
    """Query filters for the public catalog."""

    category: str | None = None
    level: CourseLevel | None = None
    search: str | None = Field(default=None, description="Case-insensitive title/description match.")
    min_price: Decimal | None = Field(default=None, ge=0)
    max_price: Decimal | None = Field(default=None, ge=0)
    sort: CourseSortField = CourseSortField.CREATED_AT
    order: SortOrder = SortOrder.DESC


# ---------------------------------------------------------------------------
# Content request schemas
# ---------------------------------------------------------------------------


class CreateContentRequest(BaseModel):
    """Request body for adding a content item to a course.

    ``data`` is checked against the payload model for ``content_type``.
    When ``order`` is omitted the item is appended after the last one.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)
    content_type: ContentType = Field(description="mcq, pdf, text, video, image, note or assignment.")
    data: dict = Field(default_factory=dict, description="Type-specific payload.")
    duration_mins: int = Field(default=0, ge=0)
    order: int | None = Field(default=None, ge=1, description="Position within the course.")
    is_preview: bool = Field(default=False, description="Visible to non-enrolled users.")


class UpdateContentRequest(BaseModel):
    """PUT body for a content item. A new ``data`` is validated against the effective type."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(default=None, min_length=1, max_length=255)
    content_type: ContentType | None = None
    data: dict | None = None
    duration_mins: int | None = Field(default=None, ge=0)
    order: int | None = Field(default=None, ge=1)
    is_preview: bool | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class CourseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    course_id: UUID
    author_id: UUID
    title: str
    description: str | None
    featured_image: str | None
    price: Decimal
    currency: str
    level: CourseLevel
    duration_mins: int
    language: str
    category: str | None
    tags: list[str]
    is_published: bool
    created_at: datetime
    updated_at: datetime


class CourseListResponse(PaginatedResponse[CourseResponse]):
    """One page of published courses."""


class ContentItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    content_id: UUID
    course_id: UUID
    title: str
    content_type: ContentType
    data: dict
    duration_mins: int
    order: int
    is_preview: bool
    created_at: datetime
    updated_at: datetime


class ContentOutlineItem(BaseModel):
    """Content item as listed in a course outline."""

    model_config = ConfigDict(from_attributes=True)

    content_id: UUID
    title: str
    content_type: ContentType
    duration_mins: int
    order: int
    is_preview: bool
    data: dict | None = None


class CourseDetailResponse(BaseModel):
    """Course with its content outline.

    Anonymous and non-enrolled callers only receive preview items; the
    author and enrolled learners receive every item.
    """

    course: CourseResponse
    contents: list[ContentOutlineItem]
    total_contents: int = Field(description="Number of items in the course, preview or not.")
    is_enrolled: bool = False
    is_author: bool = False


class ResumeResponse(BaseModel):
    content: ContentItemResponse
    last_position: int
    is_completed: bool
    updated_at: datetime
