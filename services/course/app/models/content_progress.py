import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.database.postgres import Base


class ContentProgress(Base):
    __tablename__ = "content_progress"

    progress_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    enrollment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("enrollments.enrollment_id", ondelete="CASCADE"),
        nullable=False,
    )
    content_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("content_items.content_id", ondelete="CASCADE"),
        nullable=False,
    )
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Seconds, accumulated across updates
    time_spent: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Playback / scroll offset, overwritten on every update
    last_position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Set on the first completion only
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    enrollment = relationship("Enrollment", back_populates="progress_records", lazy="select")
    content = relationship("ContentItem", lazy="select")

    __table_args__ = (
        UniqueConstraint(
            "enrollment_id", "content_id", name="uq_content_progress_enrollment_content"
        ),
        Index("ix_content_progress_enrollment_id", "enrollment_id"),
        Index("ix_content_progress_updated_at", "updated_at"),
    )
