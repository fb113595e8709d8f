"""Enrollment domain Pydantic V2 schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.catalog.schemas import CourseResponse
from app.models.enums import PaymentStatus


class EnrollmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    enrollment_id: UUID
    user_id: UUID
    course_id: UUID
    enrolled_at: datetime
    completed_at: datetime | None
    last_accessed_at: datetime | None
    progress: int = Field(description="Completed content as an integer percentage (0-100).")
    payment_status: PaymentStatus
    is_completed: bool


class EnrollmentDetailResponse(EnrollmentResponse):
    """Enrollment together with the enrolled course."""

    course: CourseResponse
