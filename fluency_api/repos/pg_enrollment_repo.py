"""PostgreSQL implementations of EnrollmentRepo and PurchaseRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fluency_api.db.tables import EnrolledCourseRow, PurchasedCourseRow
from fluency_api.models.enrollment import EnrolledCourse, PurchasedCourse


class PgEnrollmentRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_by_user(self, email: str) -> list[EnrolledCourse]:
        stmt = select(EnrolledCourseRow).where(EnrolledCourseRow.user_email == email)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_enrollment(r) for r in rows]

    async def get(self, enrollment_id: UUID) -> EnrolledCourse | None:
        row = await self._session.get(EnrolledCourseRow, enrollment_id)
        if row is None:
            return None
        return _row_to_enrollment(row)

    async def find(self, email: str, course_id: UUID) -> EnrolledCourse | None:
        stmt = select(EnrolledCourseRow).where(
            EnrolledCourseRow.user_email == email,
            EnrolledCourseRow.course_id == course_id,
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_enrollment(row)

    async def add(self, enrollment: EnrolledCourse) -> None:
        self._session.add(
            EnrolledCourseRow(
                id=enrollment.id,
                user_email=enrollment.user_email,
                course_id=enrollment.course_id,
                course_name=enrollment.course_name,
                price=enrollment.price,
            )
        )
        try:
            await self._session.flush()
        except IntegrityError as e:
            raise ValueError("already enrolled") from e

    async def delete(self, enrollment_id: UUID) -> bool:
        result = await self._session.execute(
            delete(EnrolledCourseRow).where(EnrolledCourseRow.id == enrollment_id)
        )
        return result.rowcount > 0


class PgPurchaseRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_by_user(self, email: str) -> list[PurchasedCourse]:
        stmt = (
            select(PurchasedCourseRow)
            .where(PurchasedCourseRow.user_email == email)
            .order_by(PurchasedCourseRow.purchased_at)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_purchase(r) for r in rows]

    async def exists(self, email: str, course_id: UUID) -> bool:
        stmt = select(
            exists().where(
                PurchasedCourseRow.user_email == email,
                PurchasedCourseRow.course_id == course_id,
            )
        )
        return bool((await self._session.execute(stmt)).scalar())

    async def add(self, purchase: PurchasedCourse) -> None:
        self._session.add(
            PurchasedCourseRow(
                id=purchase.id,
                user_email=purchase.user_email,
                course_id=purchase.course_id,
                payment_id=purchase.payment_id,
                course_name=purchase.course_name,
                price=purchase.price,
                purchased_at=purchase.purchased_at,
            )
        )
        try:
            await self._session.flush()
        except IntegrityError as e:
            raise ValueError("already purchased") from e


def _row_to_enrollment(row: EnrolledCourseRow) -> EnrolledCourse:
    return EnrolledCourse(
        id=row.id,
        user_email=row.user_email,
        course_id=row.course_id,
        course_name=row.course_name or "",
        price=row.price,
    )


def _row_to_purchase(row: PurchasedCourseRow) -> PurchasedCourse:
    return PurchasedCourse(
        id=row.id,
        user_email=row.user_email,
        course_id=row.course_id,
        payment_id=row.payment_id,
        course_name=row.course_name or "",
        price=row.price,
        purchased_at=row.purchased_at,
    )
