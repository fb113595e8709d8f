from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from app.certificates.service import complete_course
from app.enrollment import service
from app.exceptions import AlreadyEnrolledError, CourseNotFoundError, NotEnrolledError
from app.models.certificate import Certificate
from app.models.content_progress import ContentProgress
from app.models.enums import PaymentStatus
from app.progress.service import record_progress


@pytest.mark.asyncio
async def test_enroll_free_course(db_session, make_course, author_id, learner_id) -> None:
    course = await make_course(author_id)
    enrollment = await service.enroll(db_session, learner_id, course.course_id)
    assert enrollment.user_id == learner_id
    assert enrollment.course_id == course.course_id
    assert enrollment.progress == 0
    assert enrollment.completed_at is None
    assert enrollment.payment_status == PaymentStatus.COMPLETED


@pytest.mark.asyncio
async def test_enroll_paid_course_is_pending(db_session, make_course, author_id, learner_id) -> None:
    course = await make_course(author_id, price=Decimal("19.99"))
    enrollment = await service.enroll(db_session, learner_id, course.course_id)
    assert enrollment.payment_status == PaymentStatus.PENDING


@pytest.mark.asyncio
async def test_enroll_twice_raises(db_session, make_course, author_id, learner_id) -> None:
    course = await make_course(author_id)
    await service.enroll(db_session, learner_id, course.course_id)
    with pytest.raises(AlreadyEnrolledError):
        await service.enroll(db_session, learner_id, course.course_id)


@pytest.mark.asyncio
async def test_enroll_missing_course_raises(db_session, learner_id) -> None:
    with pytest.raises(CourseNotFoundError):
        await service.enroll(db_session, learner_id, uuid4())


@pytest.mark.asyncio
async def test_enroll_unpublished_course_raises(db_session, make_course, author_id, learner_id) -> None:
    course = await make_course(author_id, is_published=False)
    with pytest.raises(CourseNotFoundError):
        await service.enroll(db_session, learner_id, course.course_id)


@pytest.mark.asyncio
async def test_get_enrollment_when_absent_raises(db_session, make_course, author_id, learner_id) -> None:
    course = await make_course(author_id)
    with pytest.raises(NotEnrolledError):
        await service.get_enrollment(db_session, learner_id, course.course_id)


@pytest.mark.asyncio
async def test_unenroll_removes_enrollment_and_progress(
    db_session, make_course, make_content, author_id, learner_id
) -> None:
    course = await make_course(author_id)
    item = await make_content(course, 1)
    enrollment = await service.enroll(db_session, learner_id, course.course_id)
    await record_progress(
        db_session, enrollment, learner_id, item.content_id, is_completed=True, time_spent=30
    )
    enrollment_id = enrollment.enrollment_id

    await service.unenroll(db_session, learner_id, course.course_id)

    with pytest.raises(NotEnrolledError):
        await service.get_enrollment(db_session, learner_id, course.course_id)
    rows = await db_session.scalar(
        select(func.count())
        .select_from(ContentProgress)
        .where(ContentProgress.enrollment_id == enrollment_id)
    )
    assert rows == 0


@pytest.mark.asyncio
async def test_unenroll_keeps_certificate(db_session, make_course, author_id, learner_id) -> None:
    course = await make_course(author_id)
    enrollment = await service.enroll(db_session, learner_id, course.course_id)
    await complete_course(db_session, enrollment, learner_id)
    await service.unenroll(db_session, learner_id, course.course_id)
    certificates = await db_session.scalar(
        select(func.count()).select_from(Certificate).where(Certificate.user_id == learner_id)
    )
    assert certificates == 1


@pytest.mark.asyncio
async def test_unenroll_when_absent_raises(db_session, make_course, author_id, learner_id) -> None:
    course = await make_course(author_id)
    with pytest.raises(NotEnrolledError):
        await service.unenroll(db_session, learner_id, course.course_id)


@pytest.mark.asyncio
async def test_reenroll_starts_fresh(
    db_session, make_course, make_content, author_id, learner_id
) -> None:
    course = await make_course(author_id)
    item = await make_content(course, 1)
    enrollment = await service.enroll(db_session, learner_id, course.course_id)
    await record_progress(db_session, enrollment, learner_id, item.content_id, is_completed=True)
    await service.unenroll(db_session, learner_id, course.course_id)

    again = await service.enroll(db_session, learner_id, course.course_id)
    assert again.progress == 0
    assert again.completed_at is None


@pytest.mark.asyncio
async def test_list_my_enrollments(db_session, make_course, author_id, learner_id) -> None:
    first = await make_course(author_id, title="First")
    second = await make_course(author_id, title="Second")
    await service.enroll(db_session, learner_id, first.course_id)
    await service.enroll(db_session, learner_id, second.course_id)
    await service.enroll(db_session, uuid4(), first.course_id)

    enrollments = await service.list_my_enrollments(db_session, learner_id)
    assert {e.course.title for e in enrollments} == {"First", "Second"}
