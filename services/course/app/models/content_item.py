import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.database.postgres import Base

from .enums import ContentType, content_type_enum


class ContentItem(Base):
    __tablename__ = "content_items"

    content_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    course_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("courses.course_id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[ContentType] = mapped_column(content_type_enum, nullable=False)
    # Type-specific payload, validated against the ContentType variant on write
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    duration_mins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Delivery order within the course; ties resolved by content_id
    order: Mapped[int] = mapped_column(Integer, nullable=False)
    # Visible to non-enrolled users
    is_preview: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    course = relationship("Course", back_populates="contents", lazy="select")

    __table_args__ = (
        CheckConstraint('"order" >= 1', name="order_positive"),
        Index("ix_content_items_course_order", "course_id", "order", "content_id"),
    )
