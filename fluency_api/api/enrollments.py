"""Enrollment (intent to buy) and purchased-course listings."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from fluency_api.api.access import check_same_identity
from fluency_api.api.dependencies import get_uow, require_user
from fluency_api.api.results import (
    DeleteResult,
    InsertResult,
    WireModel,
    delete_result,
)
from fluency_api.models.enrollment import EnrolledCourse, PurchasedCourse
from fluency_api.models.principal import Principal
from fluency_api.repos.unit_of_work import UnitOfWork
from fluency_api.services import enrollment_service
from fluency_api.services.course_service import CourseNotFoundError
from fluency_api.services.enrollment_service import (
    AlreadyEnrolledError,
    AlreadyPurchasedError,
    CourseNotOpenError,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["enrollments"])


class EnrollmentIn(WireModel):
    email: str
    course_id: UUID


class EnrolledCourseOut(WireModel):
    id: str
    user_email: str
    course_id: str
    course_name: str
    price: float


class PurchasedCourseOut(WireModel):
    id: str
    user_email: str
    course_id: str
    payment_id: str
    course_name: str
    price: float
    purchased_at: datetime | None


def enrolled_out(e: EnrolledCourse) -> EnrolledCourseOut:
    return EnrolledCourseOut(
        id=str(e.id),
        user_email=e.user_email,
        course_id=str(e.course_id),
        course_name=e.course_name,
        price=float(e.price),
    )


def purchased_out(p: PurchasedCourse) -> PurchasedCourseOut:
    return PurchasedCourseOut(
        id=str(p.id),
        user_email=p.user_email,
        course_id=str(p.course_id),
        payment_id=str(p.payment_id),
        course_name=p.course_name,
        price=float(p.price),
        purchased_at=p.purchased_at,
    )


@router.get("/enrolled", response_model=list[EnrolledCourseOut])
async def get_enrolled(
    email: str,
    principal: Annotated[Principal, Depends(require_user)],
    uow: Annotated[UnitOfWork, Depends(get_uow)],
) -> list[EnrolledCourseOut]:
    check_same_identity(principal, email)
    return [enrolled_out(e) for e in await enrollment_service.list_enrolled(uow, email)]


@router.post("/enrolled", response_model=InsertResult)
async def post_enrolled(
    payload: EnrollmentIn,
    uow: Annotated[UnitOfWork, Depends(get_uow)],
) -> InsertResult:
    try:
        enrollment = await enrollment_service.enroll(
            uow, user_email=payload.email, course_id=payload.course_id
        )
    except CourseNotFoundError:
        raise HTTPException(status_code=404, detail="course not found") from None
    except AlreadyEnrolledError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="already enrolled"
        ) from None
    except AlreadyPurchasedError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="course already purchased"
        ) from None
    except CourseNotOpenError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from None
    return InsertResult(inserted_id=str(enrollment.id))


@router.delete("/enrolled/{enrollment_id}", response_model=DeleteResult)
async def delete_enrolled(
    enrollment_id: UUID,
    uow: Annotated[UnitOfWork, Depends(get_uow)],
) -> DeleteResult:
    return delete_result(await enrollment_service.remove_enrollment(uow, enrollment_id))


@router.get("/purchased", response_model=list[PurchasedCourseOut])
async def get_purchased(
    email: str,
    principal: Annotated[Principal, Depends(require_user)],
    uow: Annotated[UnitOfWork, Depends(get_uow)],
) -> list[PurchasedCourseOut]:
    check_same_identity(principal, email)
    return [purchased_out(p) for p in await enrollment_service.list_purchased(uow, email)]
