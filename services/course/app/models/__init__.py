# Import all models so Alembic can discover them via Base.metadata
from .certificate import Certificate
from .content_item import ContentItem
from .content_progress import ContentProgress
from .course import Course
from .enrollment import Enrollment
from .review import Review

__all__ = [
    "Certificate",
    "ContentItem",
    "ContentProgress",
    "Course",
    "Enrollment",
    "Review",
]
