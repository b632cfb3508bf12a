from __future__ import annotations

from dataclasses import replace
from typing import Any, Protocol
from uuid import UUID

from fluency_api.models.course import Course


class CourseRepo(Protocol):
    async def list_all(self, status: str | None = None) -> list[Course]: ...
    async def list_by_instructor(self, email: str) -> list[Course]: ...
    async def list_popular(self, limit: int) -> list[Course]: ...
    async def get(self, course_id: UUID) -> Course | None: ...
    async def add(self, course: Course) -> None: ...
    async def update(self, course_id: UUID, **fields: Any) -> Course | None: ...
    async def decrement_seats(
        self, course_id: UUID, amount: int = 1
    ) -> Course | None: ...


class InMemoryCourseRepo:
    def __init__(self) -> None:
        # dicts keep insertion order, which doubles as submission order
        self._by_id: dict[UUID, Course] = {}

    def _snapshot(self) -> dict[UUID, Course]:
        return dict(self._by_id)

    def _restore(self, snapshot: dict[UUID, Course]) -> None:
        self._by_id = snapshot

    async def list_all(self, status: str | None = None) -> list[Course]:
        return [
            c for c in self._by_id.values() if status is None or c.status == status
        ]

    async def list_by_instructor(self, email: str) -> list[Course]:
        return [c for c in self._by_id.values() if c.instructor_email == email]

    async def list_popular(self, limit: int) -> list[Course]:
        approved = [c for c in self._by_id.values() if c.is_approved]
        approved.sort(key=lambda c: c.enrolled_count, reverse=True)
        return approved[:limit]

    async def get(self, course_id: UUID) -> Course | None:
        return self._by_id.get(course_id)

    async def add(self, course: Course) -> None:
        if course.id in self._by_id:
            raise ValueError("course already exists")
        self._by_id[course.id] = course

    async def update(self, course_id: UUID, **fields: Any) -> Course | None:
        c = self._by_id.get(course_id)
        if c is None:
            return None
        updated = replace(c, **fields)
        self._by_id[course_id] = updated
        return updated

    async def decrement_seats(self, course_id: UUID, amount: int = 1) -> Course | None:
        # Check and write happen without an await in between, so no other
        # task can observe the old count once this one has decided.
        c = self._by_id.get(course_id)
        if c is None or c.available_seats < amount:
            return None
        updated = replace(
            c,
            available_seats=c.available_seats - amount,
            enrolled_count=c.enrolled_count + amount,
        )
        self._by_id[course_id] = updated
        return updated
