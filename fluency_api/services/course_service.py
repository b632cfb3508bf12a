"""Course submission, editing and the moderation workflow.

    submit ──> pending ──approve──> approved   (listed publicly)
                   └─────deny────> denied     (feedback explains why)

Transitions are only legal out of ``pending``.  Approving an already
denied course (or the reverse) raises InvalidStatusTransitionError; the
instructor resubmits instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any
from uuid import UUID

from fluency_api.models.course import (
    EDITABLE_FIELDS,
    STATUS_APPROVED,
    STATUS_DENIED,
    STATUS_PENDING,
    Course,
)
from fluency_api.models.user import normalize_email
from fluency_api.repos.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class CourseNotFoundError(LookupError):
    pass


class CourseValidationError(ValueError):
    pass


class InvalidStatusTransitionError(Exception):
    def __init__(self, course_id: UUID, current: str, target: str) -> None:
        super().__init__(f"cannot move course from {current} to {target}")
        self.course_id = course_id
        self.current = current
        self.target = target


@dataclass(frozen=True)
class CourseUpdate:
    matched: bool
    modified: bool
    course: Course | None = None


async def list_public(uow: UnitOfWork, status: str | None = None) -> list[Course]:
    return await uow.courses.list_all(status or STATUS_APPROVED)


async def list_everything(uow: UnitOfWork) -> list[Course]:
    return await uow.courses.list_all()


async def list_popular(uow: UnitOfWork, limit: int) -> list[Course]:
    return await uow.courses.list_popular(limit)


async def list_for_instructor(uow: UnitOfWork, email: str) -> list[Course]:
    return await uow.courses.list_by_instructor(normalize_email(email))


async def get_course(uow: UnitOfWork, course_id: UUID) -> Course:
    course = await uow.courses.get(course_id)
    if course is None:
        raise CourseNotFoundError(str(course_id))
    return course


async def submit_course(
    uow: UnitOfWork,
    *,
    instructor_email: str,
    name: str = "",
    instructor_name: str = "",
    image_url: str | None = None,
    available_seats: int = 0,
    price: Decimal = Decimal("0"),
) -> Course:
    if available_seats < 0:
        raise CourseValidationError("available_seats must be >= 0")
    if price < 0:
        raise CourseValidationError("price must be >= 0")

    course = Course.new(
        name=name.strip(),
        instructor_email=instructor_email,
        instructor_name=instructor_name,
        image_url=image_url,
        available_seats=available_seats,
        price=price,
    )
    async with uow.transaction():
        await uow.courses.add(course)
    logger.info(
        "Course submitted id=%s instructor=%s seats=%d",
        course.id,
        course.instructor_email,
        course.available_seats,
    )
    return course


async def _apply(uow: UnitOfWork, course_id: UUID, fields: dict[str, Any]) -> CourseUpdate:
    async with uow.transaction():
        current = await uow.courses.get(course_id)
        if current is None:
            return CourseUpdate(matched=False, modified=False)
        changed = {k: v for k, v in fields.items() if getattr(current, k) != v}
        if not changed:
            return CourseUpdate(matched=True, modified=False, course=current)
        updated = await uow.courses.update(course_id, **changed)
    return CourseUpdate(matched=True, modified=True, course=updated)


async def update_course(
    uow: UnitOfWork, course_id: UUID, fields: dict[str, Any]
) -> CourseUpdate:
    unknown = set(fields) - EDITABLE_FIELDS
    if unknown:
        raise CourseValidationError(f"fields not editable: {sorted(unknown)}")
    if "available_seats" in fields and fields["available_seats"] < 0:
        raise CourseValidationError("available_seats must be >= 0")
    if "price" in fields and fields["price"] < 0:
        raise CourseValidationError("price must be >= 0")
    return await _apply(uow, course_id, fields)


async def set_feedback(uow: UnitOfWork, course_id: UUID, feedback: str) -> CourseUpdate:
    result = await _apply(uow, course_id, {"feedback": feedback})
    if result.modified:
        logger.info("Feedback recorded for course=%s", course_id)
    return result


async def _transition(uow: UnitOfWork, course_id: UUID, target: str) -> CourseUpdate:
    async with uow.transaction():
        current = await uow.courses.get(course_id)
        if current is None:
            return CourseUpdate(matched=False, modified=False)
        if current.status == target:
            return CourseUpdate(matched=True, modified=False, course=current)
        if current.status != STATUS_PENDING:
            logger.warning(
                "Rejected status change course=%s %s -> %s",
                course_id,
                current.status,
                target,
            )
            raise InvalidStatusTransitionError(course_id, current.status, target)
        updated = await uow.courses.update(course_id, status=target)

    logger.info("Course %s -> %s", course_id, target)
    return CourseUpdate(matched=True, modified=True, course=updated)


async def approve_course(uow: UnitOfWork, course_id: UUID) -> CourseUpdate:
    return await _transition(uow, course_id, STATUS_APPROVED)


async def deny_course(uow: UnitOfWork, course_id: UUID) -> CourseUpdate:
    return await _transition(uow, course_id, STATUS_DENIED)
