"""PostgreSQL implementation of CourseRepo."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fluency_api.db.tables import CourseRow
from fluency_api.models.course import Course


class PgCourseRepo:
    """Satisfies the CourseRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_all(self, status: str | None = None) -> list[Course]:
        stmt = select(CourseRow).order_by(CourseRow.created_at)
        if status is not None:
            stmt = stmt.where(CourseRow.status == status)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]

    async def list_by_instructor(self, email: str) -> list[Course]:
        stmt = (
            select(CourseRow)
            .where(CourseRow.instructor_email == email)
            .order_by(CourseRow.created_at)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]

    async def list_popular(self, limit: int) -> list[Course]:
        stmt = (
            select(CourseRow)
            .where(CourseRow.status == "approved")
            .order_by(CourseRow.enrolled_count.desc(), CourseRow.created_at)
            .limit(limit)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]

    async def get(self, course_id: UUID) -> Course | None:
        row = await self._session.get(CourseRow, course_id)
        if row is None:
            return None
        return _row_to_course(row)

    async def add(self, course: Course) -> None:
        self._session.add(
            CourseRow(
                id=course.id,
                name=course.name,
                image_url=course.image_url,
                instructor_name=course.instructor_name,
                instructor_email=course.instructor_email,
                available_seats=course.available_seats,
                price=course.price,
                status=course.status,
                feedback=course.feedback,
                enrolled_count=course.enrolled_count,
            )
        )
        await self._session.flush()

    async def update(self, course_id: UUID, **fields: Any) -> Course | None:
        stmt = (
            update(CourseRow)
            .where(CourseRow.id == course_id)
            .values(**fields)
            .returning(CourseRow)
            .execution_options(populate_existing=True)
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_course(row)

    async def decrement_seats(self, course_id: UUID, amount: int = 1) -> Course | None:
        # The seat check lives in the WHERE clause, so Postgres evaluates it
        # against the row it locks for the update.  A concurrent purchase of
        # the last seat blocks on that lock, then sees 0 and matches nothing.
        stmt = (
            update(CourseRow)
            .where(CourseRow.id == course_id, CourseRow.available_seats >= amount)
            .values(
                available_seats=CourseRow.available_seats - amount,
                enrolled_count=CourseRow.enrolled_count + amount,
            )
            .returning(CourseRow)
            .execution_options(populate_existing=True)
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_course(row)


def _row_to_course(row: CourseRow) -> Course:
    return Course(
        id=row.id,
        name=row.name,
        instructor_email=row.instructor_email,
        instructor_name=row.instructor_name or "",
        image_url=row.image_url,
        available_seats=row.available_seats,
        price=row.price,
        status=row.status,
        feedback=row.feedback,
        enrolled_count=row.enrolled_count,
    )
