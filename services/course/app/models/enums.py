import enum

from sqlalchemy import Enum as SAEnum


class CourseLevel(str, enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class ContentType(str, enum.Enum):
    MCQ = "mcq"
    PDF = "pdf"
    TEXT = "text"
    VIDEO = "video"
    IMAGE = "image"
    NOTE = "note"
    ASSIGNMENT = "assignment"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


# Catalog ordering, query-string only
class CourseSortField(str, enum.Enum):
    CREATED_AT = "created_at"
    TITLE = "title"
    PRICE = "price"
    DURATION_MINS = "duration_mins"


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


def _values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


# Shared SQLAlchemy Enum instances (reuse across models to avoid duplicate type creation).
# Persist the lowercase values, not the member names, so the wire format and the
# column contents match.
course_level_enum = SAEnum(CourseLevel, name="course_level", values_callable=_values)
content_type_enum = SAEnum(ContentType, name="content_type", values_callable=_values)
payment_status_enum = SAEnum(PaymentStatus, name="payment_status", values_callable=_values)
