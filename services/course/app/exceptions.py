"""Shared domain exception classes for the course service.

These are raised by service-layer code and caught by controllers
to map to appropriate HTTP responses.
"""


class CourseNotFoundError(Exception):
    """Raised when a course cannot be found, or is not visible to the caller."""

    def __init__(self, identifier: str = ""):
        self.identifier = identifier
        super().__init__(f"Course not found: {identifier}")


class ContentNotFoundError(Exception):
    def __init__(self, content_id: str = ""):
        self.content_id = content_id
        super().__init__(f"Content not found: {content_id}")


class CertificateNotFoundError(Exception):
    def __init__(self, identifier: str = ""):
        self.identifier = identifier
        super().__init__(f"Certificate not found: {identifier}")


class ReviewNotFoundError(Exception):
    def __init__(self, review_id: str = ""):
        self.review_id = review_id
        super().__init__(f"Review not found: {review_id}")


class NoProgressFoundError(Exception):
    """Raised when resume is requested before any progress was recorded."""


class NoMoreContentError(Exception):
    """Raised when every content item of an enrollment is already completed."""


class AlreadyEnrolledError(Exception):
    """Raised when user tries to enroll in a course they are already enrolled in."""


class NotEnrolledError(Exception):
    """Raised when an operation requires an enrollment that does not exist."""


class NotEnrollmentOwnerError(Exception):
    """Raised when the acting user does not own the enrollment being mutated."""


class AlreadyCompletedError(Exception):
    """Raised when completion is requested for an enrollment that is already completed."""


class NotCourseAuthorError(Exception):
    """Raised when a non-author tries to modify a course they don't own."""


class CourseNotCompletedError(Exception):
    """Raised when a review is attempted before the course was completed."""


class ReviewAlreadyExistsError(Exception):
    """Raised when the user already reviewed this course."""


class NotReviewOwnerError(Exception):
    """Raised when a user tries to modify someone else's review."""


class InvalidContentPayloadError(Exception):
    """Raised when a content item's payload does not match its type.

    ``errors`` follows the pydantic error shape (``loc``, ``msg``) so the
    controller can report it like any other request validation failure.
    """

    def __init__(self, detail: str = "", errors: list[dict] | None = None):
        self.detail = detail
        self.errors = errors or []
        super().__init__(detail or "Invalid content data")
