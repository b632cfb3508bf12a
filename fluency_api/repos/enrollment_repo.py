from __future__ import annotations

from typing import Protocol
from uuid import UUID

from fluency_api.models.enrollment import EnrolledCourse, PurchasedCourse


class EnrollmentRepo(Protocol):
    async def list_by_user(self, email: str) -> list[EnrolledCourse]: ...
    async def get(self, enrollment_id: UUID) -> EnrolledCourse | None: ...
    async def find(self, email: str, course_id: UUID) -> EnrolledCourse | None: ...
    async def add(self, enrollment: EnrolledCourse) -> None: ...
    async def delete(self, enrollment_id: UUID) -> bool: ...


class PurchaseRepo(Protocol):
    async def list_by_user(self, email: str) -> list[PurchasedCourse]: ...
    async def exists(self, email: str, course_id: UUID) -> bool: ...
    async def add(self, purchase: PurchasedCourse) -> None: ...


class InMemoryEnrollmentRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, EnrolledCourse] = {}

    def _snapshot(self) -> dict[UUID, EnrolledCourse]:
        return dict(self._by_id)

    def _restore(self, snapshot: dict[UUID, EnrolledCourse]) -> None:
        self._by_id = snapshot

    async def list_by_user(self, email: str) -> list[EnrolledCourse]:
        return [e for e in self._by_id.values() if e.user_email == email]

    async def get(self, enrollment_id: UUID) -> EnrolledCourse | None:
        return self._by_id.get(enrollment_id)

    async def find(self, email: str, course_id: UUID) -> EnrolledCourse | None:
        for e in self._by_id.values():
            if e.user_email == email and e.course_id == course_id:
                return e
        return None

    async def add(self, enrollment: EnrolledCourse) -> None:
        if await self.find(enrollment.user_email, enrollment.course_id) is not None:
            raise ValueError("already enrolled")
        self._by_id[enrollment.id] = enrollment

    async def delete(self, enrollment_id: UUID) -> bool:
        return self._by_id.pop(enrollment_id, None) is not None


class InMemoryPurchaseRepo:
    def __init__(self) -> None:
        self._items: list[PurchasedCourse] = []

    def _snapshot(self) -> list[PurchasedCourse]:
        return list(self._items)

    def _restore(self, snapshot: list[PurchasedCourse]) -> None:
        self._items = snapshot

    async def list_by_user(self, email: str) -> list[PurchasedCourse]:
        return [p for p in self._items if p.user_email == email]

    async def exists(self, email: str, course_id: UUID) -> bool:
        return any(
            p.user_email == email and p.course_id == course_id for p in self._items
        )

    async def add(self, purchase: PurchasedCourse) -> None:
        if await self.exists(purchase.user_email, purchase.course_id):
            raise ValueError("already purchased")
        self._items.append(purchase)
