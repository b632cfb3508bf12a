from __future__ import annotations

import logging
from uuid import UUID

from fluency_api.models.enrollment import EnrolledCourse, PurchasedCourse
from fluency_api.models.user import normalize_email
from fluency_api.repos.unit_of_work import UnitOfWork
from fluency_api.services.course_service import CourseNotFoundError

logger = logging.getLogger(__name__)


class AlreadyEnrolledError(Exception):
    pass


class AlreadyPurchasedError(Exception):
    pass


class CourseNotOpenError(Exception):
    """Course is not approved, or has no seat left to sell."""


async def list_enrolled(uow: UnitOfWork, email: str) -> list[EnrolledCourse]:
    return await uow.enrollments.list_by_user(normalize_email(email))


async def list_purchased(uow: UnitOfWork, email: str) -> list[PurchasedCourse]:
    return await uow.purchases.list_by_user(normalize_email(email))


async def enroll(uow: UnitOfWork, *, user_email: str, course_id: UUID) -> EnrolledCourse:
    email = normalize_email(user_email)
    async with uow.transaction():
        course = await uow.courses.get(course_id)
        if course is None:
            raise CourseNotFoundError(str(course_id))
        if not course.is_approved:
            raise CourseNotOpenError("course is not open for enrollment")
        if course.available_seats <= 0:
            raise CourseNotOpenError("No seats available")
        if await uow.purchases.exists(email, course_id):
            raise AlreadyPurchasedError(str(course_id))

        enrollment = EnrolledCourse.new(
            user_email=email,
            course_id=course_id,
            course_name=course.name,
            price=course.price,
        )
        try:
            await uow.enrollments.add(enrollment)
        except ValueError:
            raise AlreadyEnrolledError(str(course_id)) from None

    logger.info("Enrolled user=%s course=%s", email, course_id)
    return enrollment


async def remove_enrollment(uow: UnitOfWork, enrollment_id: UUID) -> bool:
    async with uow.transaction():
        deleted = await uow.enrollments.delete(enrollment_id)
    if deleted:
        logger.info("Removed enrollment id=%s", enrollment_id)
    return deleted
