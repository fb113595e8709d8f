"""Progress domain Pydantic V2 schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.catalog.schemas import ContentItemResponse
from app.models.enums import ContentType


class UpdateProgressRequest(BaseModel):
    """Progress report for one content item.

    ``time_spent`` is the number of seconds spent since the last report and
    is added to the stored total.
    """

    is_completed: bool = Field(default=False)
    time_spent: int = Field(default=0, ge=0, description="Seconds to add to the running total.")
    last_position: int = Field(default=0, ge=0, description="Playback or scroll offset.")


class ContentProgressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    progress_id: UUID
    enrollment_id: UUID
    content_id: UUID
    is_completed: bool
    time_spent: int
    last_position: int
    completed_at: datetime | None
    updated_at: datetime


class RecordProgressResponse(BaseModel):
    progress: ContentProgressResponse
    course_progress: int = Field(description="Enrollment percentage after this update.")


class ContentWithProgressResponse(BaseModel):
    content: ContentItemResponse
    progress: ContentProgressResponse | None = None


class ContentCompletionItem(BaseModel):
    """Outline entry of an enrolled course with the learner's state."""

    content_id: UUID
    title: str
    content_type: ContentType
    order: int
    duration_mins: int
    is_preview: bool
    is_completed: bool
    time_spent: int = 0
    last_position: int = 0
    completed_at: datetime | None = None


class CourseProgressResponse(BaseModel):
    course_id: UUID
    progress: int
    is_completed: bool
    completed_at: datetime | None
    total_contents: int
    completed_contents: int
    total_time_spent: int
    contents: list[ContentCompletionItem]


class CourseProgressSummary(BaseModel):
    course_id: UUID
    course_title: str
    progress: int
    is_completed: bool
    total_contents: int
    completed_contents: int
    last_accessed_at: datetime | None


class ActivityItem(BaseModel):
    course_id: UUID
    course_title: str
    content_id: UUID
    content_title: str
    content_type: ContentType
    is_completed: bool
    time_spent: int
    updated_at: datetime


class Badge(BaseModel):
    name: str
    description: str


class AchievementsResponse(BaseModel):
    total_courses_enrolled: int
    total_courses_completed: int
    total_time_spent: int = Field(description="Seconds across every enrollment.")
    total_certificates: int
    badges: list[Badge]
