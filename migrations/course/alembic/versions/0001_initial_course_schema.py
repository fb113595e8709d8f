"""Initial course schema: courses, content, enrollments, progress, certificates, reviews.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

COURSE_LEVELS = ("beginner", "intermediate", "advanced")
CONTENT_TYPES = ("mcq", "pdf", "text", "video", "image", "note", "assignment")
PAYMENT_STATUSES = ("pending", "completed", "failed")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    # ── courses ──────────────────────────────────────────────────────────
    op.create_table(
        "courses",
        sa.Column("course_id", sa.Uuid(), nullable=False),
        sa.Column("author_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("featured_image", sa.String(500), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column(
            "level",
            sa.Enum(*COURSE_LEVELS, name="course_level"),
            nullable=False,
            server_default="beginner",
        ),
        sa.Column("duration_mins", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("language", sa.String(50), nullable=False, server_default="English"),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("course_id", name="pk_courses"),
    )
    op.create_index("ix_courses_author_id", "courses", ["author_id"])
    op.create_index("ix_courses_is_published", "courses", ["is_published"])
    op.create_index("ix_courses_category", "courses", ["category"])
    op.create_index("ix_courses_created_at", "courses", ["created_at"])

    # ── content_items ────────────────────────────────────────────────────
    op.create_table(
        "content_items",
        sa.Column("content_id", sa.Uuid(), nullable=False),
        sa.Column("course_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content_type", sa.Enum(*CONTENT_TYPES, name="content_type"), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("duration_mins", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.Column("is_preview", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.CheckConstraint('"order" >= 1', name="ck_content_items_order_positive"),
        sa.ForeignKeyConstraint(
            ["course_id"], ["courses.course_id"],
            name="fk_content_items_course_id_courses", ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("content_id", name="pk_content_items"),
    )
    op.create_index(
        "ix_content_items_course_order", "content_items", ["course_id", "order", "content_id"]
    )

    # ── enrollments ──────────────────────────────────────────────────────
    op.create_table(
        "enrollments",
        sa.Column("enrollment_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("course_id", sa.Uuid(), nullable=False),
        sa.Column("enrolled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_accessed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "payment_status",
            sa.Enum(*PAYMENT_STATUSES, name="payment_status"),
            nullable=False,
            server_default="pending",
        ),
        *_timestamps(),
        sa.CheckConstraint(
            "progress >= 0 AND progress <= 100", name="ck_enrollments_progress_range"
        ),
        sa.ForeignKeyConstraint(
            ["course_id"], ["courses.course_id"],
            name="fk_enrollments_course_id_courses", ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("enrollment_id", name="pk_enrollments"),
        sa.UniqueConstraint("user_id", "course_id", name="uq_enrollments_user_course"),
    )
    op.create_index("ix_enrollments_user_id", "enrollments", ["user_id"])
    op.create_index("ix_enrollments_course_id", "enrollments", ["course_id"])

    # ── content_progress ─────────────────────────────────────────────────
    op.create_table(
        "content_progress",
        sa.Column("progress_id", sa.Uuid(), nullable=False),
        sa.Column("enrollment_id", sa.Uuid(), nullable=False),
        sa.Column("content_id", sa.Uuid(), nullable=False),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("time_spent", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["enrollment_id"], ["enrollments.enrollment_id"],
            name="fk_content_progress_enrollment_id_enrollments", ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["content_id"], ["content_items.content_id"],
            name="fk_content_progress_content_id_content_items", ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("progress_id", name="pk_content_progress"),
        sa.UniqueConstraint(
            "enrollment_id", "content_id", name="uq_content_progress_enrollment_content"
        ),
    )
    op.create_index("ix_content_progress_enrollment_id", "content_progress", ["enrollment_id"])
    op.create_index("ix_content_progress_updated_at", "content_progress", ["updated_at"])

    # ── certificates ─────────────────────────────────────────────────────
    op.create_table(
        "certificates",
        sa.Column("certificate_id", sa.Uuid(), nullable=False),
        sa.Column("certificate_code", sa.String(40), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("course_id", sa.Uuid(), nullable=False),
        sa.Column("course_title", sa.String(255), nullable=False, server_default=""),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["course_id"], ["courses.course_id"],
            name="fk_certificates_course_id_courses", ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("certificate_id", name="pk_certificates"),
        sa.UniqueConstraint("certificate_code", name="uq_certificates_certificate_code"),
        sa.UniqueConstraint("user_id", "course_id", name="uq_certificates_user_course"),
    )
    op.create_index("ix_certificates_user_id", "certificates", ["user_id"])

    # ── reviews ──────────────────────────────────────────────────────────
    op.create_table(
        "reviews",
        sa.Column("review_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("course_id", sa.Uuid(), nullable=False),
        sa.Column("rating", sa.SmallInteger(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False, server_default=""),
        *_timestamps(),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
        sa.ForeignKeyConstraint(
            ["course_id"], ["courses.course_id"],
            name="fk_reviews_course_id_courses", ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("review_id", name="pk_reviews"),
        sa.UniqueConstraint("user_id", "course_id", name="uq_reviews_user_course"),
    )
    op.create_index("ix_reviews_course_id", "reviews", ["course_id"])


def downgrade() -> None:
    op.drop_table("reviews")
    op.drop_table("certificates")
    op.drop_table("content_progress")
    op.drop_table("enrollments")
    op.drop_table("content_items")
    op.drop_table("courses")
    for enum_name in ("payment_status", "content_type", "course_level"):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
