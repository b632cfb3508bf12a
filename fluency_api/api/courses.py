"""Course catalogue, instructor submissions and admin moderation.

Public listing shows approved courses only; pending and denied courses are
visible to their instructor through /coursesByEmail and to admins through
/courses/all.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import Field

from fluency_api.api.access import check_same_identity
from fluency_api.api.dependencies import get_uow, require_role, require_user
from fluency_api.api.results import (
    InsertResult,
    UpdateResult,
    WireModel,
    update_result,
)
from fluency_api.models.course import STATUSES, Course
from fluency_api.models.principal import Principal
from fluency_api.models.user import ROLE_ADMIN
from fluency_api.repos.unit_of_work import UnitOfWork
from fluency_api.services import course_service
from fluency_api.services.course_service import (
    CourseNotFoundError,
    CourseUpdate,
    CourseValidationError,
    InvalidStatusTransitionError,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["courses"])


class CourseOut(WireModel):
    id: str
    name: str
    image_url: str | None
    instructor_name: str
    instructor_email: str
    available_seats: int
    price: float
    status: str
    feedback: str | None
    enrolled_count: int


class CourseIn(WireModel):
    # "status" is accepted for compatibility with older clients but ignored:
    # every submission starts pending.
    instructor_email: str
    name: str = ""
    instructor_name: str = ""
    image_url: str | None = None
    available_seats: int = Field(default=0, ge=0)
    price: Decimal = Field(default=Decimal("0"), ge=0)
    status: str | None = None


class CoursePatch(WireModel):
    name: str | None = None
    image_url: str | None = None
    instructor_name: str | None = None
    available_seats: int | None = Field(default=None, ge=0)
    price: Decimal | None = Field(default=None, ge=0)


class FeedbackIn(WireModel):
    feedback: str


def _course_out(c: Course) -> CourseOut:
    return CourseOut(
        id=str(c.id),
        name=c.name,
        image_url=c.image_url,
        instructor_name=c.instructor_name,
        instructor_email=c.instructor_email,
        available_seats=c.available_seats,
        price=float(c.price),
        status=c.status,
        feedback=c.feedback,
        enrolled_count=c.enrolled_count,
    )


def _to_update_result(result: CourseUpdate) -> UpdateResult:
    return update_result(result.matched, result.modified)


# --- Reads -----------------------------------------------------------------


@router.get("/courses", response_model=list[CourseOut])
async def list_courses(
    uow: Annotated[UnitOfWork, Depends(get_uow)],
    course_status: Annotated[str | None, Query(alias="status")] = None,
) -> list[CourseOut]:
    if course_status is not None and course_status not in STATUSES:
        raise HTTPException(status_code=422, detail="unknown status")
    courses = await course_service.list_public(uow, course_status)
    return [_course_out(c) for c in courses]


@router.get("/courses/all", response_model=list[CourseOut])
async def list_all_courses(
    _admin: Annotated[Principal, Depends(require_role(ROLE_ADMIN))],
    uow: Annotated[UnitOfWork, Depends(get_uow)],
) -> list[CourseOut]:
    return [_course_out(c) for c in await course_service.list_everything(uow)]


@router.get("/courses/popular", response_model=list[CourseOut])
async def popular_courses(
    uow: Annotated[UnitOfWork, Depends(get_uow)],
    limit: Annotated[int, Query(ge=1, le=50)] = 6,
) -> list[CourseOut]:
    return [_course_out(c) for c in await course_service.list_popular(uow, limit)]


@router.get("/courses/{course_id}", response_model=CourseOut)
async def get_course(
    course_id: UUID,
    uow: Annotated[UnitOfWork, Depends(get_uow)],
) -> CourseOut:
    try:
        course = await course_service.get_course(uow, course_id)
    except CourseNotFoundError:
        raise HTTPException(status_code=404, detail="course not found") from None
    return _course_out(course)


@router.get("/coursesByEmail", response_model=list[CourseOut])
async def courses_by_instructor(
    email: str,
    principal: Annotated[Principal, Depends(require_user)],
    uow: Annotated[UnitOfWork, Depends(get_uow)],
) -> list[CourseOut]:
    check_same_identity(principal, email)
    courses = await course_service.list_for_instructor(uow, email)
    return [_course_out(c) for c in courses]


# --- Writes ----------------------------------------------------------------


@router.post("/courses", response_model=InsertResult)
async def submit_course(
    payload: CourseIn,
    uow: Annotated[UnitOfWork, Depends(get_uow)],
) -> InsertResult:
    try:
        course = await course_service.submit_course(
            uow,
            name=payload.name,
            instructor_email=payload.instructor_email,
            instructor_name=payload.instructor_name,
            image_url=payload.image_url,
            available_seats=payload.available_seats,
            price=payload.price,
        )
    except CourseValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from None
    return InsertResult(inserted_id=str(course.id))


@router.patch("/courses/feedback/{course_id}", response_model=UpdateResult)
async def course_feedback(
    course_id: UUID,
    payload: FeedbackIn,
    uow: Annotated[UnitOfWork, Depends(get_uow)],
) -> UpdateResult:
    return _to_update_result(
        await course_service.set_feedback(uow, course_id, payload.feedback)
    )


@router.patch("/courses/approve/{course_id}", response_model=UpdateResult)
async def approve_course(
    course_id: UUID,
    uow: Annotated[UnitOfWork, Depends(get_uow)],
) -> UpdateResult:
    try:
        result = await course_service.approve_course(uow, course_id)
    except InvalidStatusTransitionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from None
    return _to_update_result(result)


@router.patch("/courses/denied/{course_id}", response_model=UpdateResult)
async def deny_course(
    course_id: UUID,
    uow: Annotated[UnitOfWork, Depends(get_uow)],
) -> UpdateResult:
    try:
        result = await course_service.deny_course(uow, course_id)
    except InvalidStatusTransitionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from None
    return _to_update_result(result)


@router.patch("/courses/{course_id}", response_model=UpdateResult)
async def update_course(
    course_id: UUID,
    payload: CoursePatch,
    uow: Annotated[UnitOfWork, Depends(get_uow)],
) -> UpdateResult:
    fields = payload.model_dump(exclude_unset=True, exclude_none=True)
    try:
        result = await course_service.update_course(uow, course_id, fields)
    except CourseValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from None
    return _to_update_result(result)
