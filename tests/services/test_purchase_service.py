"""Purchase coordinator tests, run directly against the in-memory store.

The coordinator's promise is all-or-nothing: after a failed purchase the
store must look exactly as it did before, and two buyers racing for the
last seat must end with one purchase and zero seats, never minus one.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from decimal import Decimal

import pytest

from fluency_api.api.dependencies import memory_uow
from fluency_api.models.enrollment import EnrolledCourse
from fluency_api.repos.course_repo import InMemoryCourseRepo
from fluency_api.services import enrollment_service
from fluency_api.services.purchase_service import (
    EnrollmentNotOwnedError,
    PurchaseFailed,
    SeatsUnavailable,
    complete_purchase,
)
from tests.conftest import seed_course

PRICE = Decimal("49.99")


def _enroll(email: str, course_id) -> EnrolledCourse:
    return asyncio.run(
        enrollment_service.enroll(memory_uow, user_email=email, course_id=course_id)
    )


def _purchase(email: str, enrollment: EnrolledCourse, **overrides):
    kwargs = {
        "user_email": email,
        "course_id": enrollment.course_id,
        "enrollment_id": enrollment.id,
        "transaction_id": "pi_123",
        "price": PRICE,
    }
    kwargs.update(overrides)
    return complete_purchase(memory_uow, **kwargs)


def _store_state(email: str, course_id):
    async def _read():
        return (
            await memory_uow.courses.get(course_id),
            await memory_uow.enrollments.list_by_user(email),
            await memory_uow.purchases.list_by_user(email),
            await memory_uow.payments.list_by_user(email),
        )

    return asyncio.run(_read())


def test_purchase_moves_enrollment_to_purchased() -> None:
    course = seed_course(seats=3)
    enrollment = _enroll("student@example.com", course.id)

    receipt = asyncio.run(_purchase("student@example.com", enrollment))

    assert receipt.course.available_seats == 2
    assert receipt.course.enrolled_count == 1
    assert receipt.payment.seats_before == 3
    assert receipt.payment.transaction_id == "pi_123"
    assert receipt.purchase.payment_id == receipt.payment.id

    stored, enrolled, purchased, payments = _store_state(
        "student@example.com", course.id
    )
    assert stored.available_seats == 2
    assert enrolled == []
    assert [p.course_id for p in purchased] == [course.id]
    assert [p.id for p in payments] == [receipt.payment.id]


def test_client_seat_count_is_not_trusted() -> None:
    # Server reads seats itself; there is no parameter to pass a count in.
    course = seed_course(seats=7)
    enrollment = _enroll("student@example.com", course.id)
    receipt = asyncio.run(_purchase("student@example.com", enrollment))
    assert receipt.payment.seats_before == 7


def test_sold_out_aborts_without_partial_writes() -> None:
    course = seed_course(seats=1)
    enrollment = _enroll("student@example.com", course.id)
    asyncio.run(memory_uow.courses.update(course.id, available_seats=0))

    with pytest.raises(SeatsUnavailable, match="No seats available"):
        asyncio.run(_purchase("student@example.com", enrollment))

    stored, enrolled, purchased, payments = _store_state(
        "student@example.com", course.id
    )
    assert stored.available_seats == 0
    assert stored.enrolled_count == 0
    assert [e.id for e in enrolled] == [enrollment.id]
    assert purchased == []
    assert payments == []


def test_failure_after_decrement_rolls_back_seat(monkeypatch) -> None:
    course = seed_course(seats=2)
    enrollment = _enroll("student@example.com", course.id)

    async def _broken_add(_purchase) -> None:
        raise RuntimeError("disk full")

    monkeypatch.setattr(memory_uow.purchases, "add", _broken_add)

    with pytest.raises(PurchaseFailed) as exc_info:
        asyncio.run(_purchase("student@example.com", enrollment))
    assert isinstance(exc_info.value.__cause__, RuntimeError)

    stored, enrolled, _purchased, payments = _store_state(
        "student@example.com", course.id
    )
    assert stored.available_seats == 2
    assert stored.enrolled_count == 0
    assert payments == []
    assert [e.id for e in enrolled] == [enrollment.id]


def test_enrollment_of_other_user_rejected() -> None:
    course = seed_course()
    enrollment = _enroll("owner@example.com", course.id)

    with pytest.raises(EnrollmentNotOwnedError):
        asyncio.run(_purchase("intruder@example.com", enrollment))

    stored, *_ = _store_state("owner@example.com", course.id)
    assert stored.available_seats == course.available_seats


def test_enrollment_for_other_course_rejected() -> None:
    course = seed_course()
    other = seed_course(name="Business German")
    enrollment = _enroll("student@example.com", course.id)

    with pytest.raises(PurchaseFailed, match="does not reference"):
        asyncio.run(
            _purchase("student@example.com", enrollment, course_id=other.id)
        )


def test_price_mismatch_rejected() -> None:
    course = seed_course(price="49.99")
    enrollment = _enroll("student@example.com", course.id)

    with pytest.raises(PurchaseFailed, match="price"):
        asyncio.run(
            _purchase("student@example.com", enrollment, price=Decimal("0.50"))
        )


class _SlowCourseRepo(InMemoryCourseRepo):
    """Suspends between reading the seat count and writing it back."""

    async def decrement_seats(self, course_id, amount=1):
        c = self._by_id.get(course_id)
        if c is None or c.available_seats < amount:
            return None
        await asyncio.sleep(0)
        updated = replace(
            c,
            available_seats=c.available_seats - amount,
            enrolled_count=c.enrolled_count + amount,
        )
        self._by_id[course_id] = updated
        return updated


def test_concurrent_buyers_of_last_seat(monkeypatch) -> None:
    course = seed_course(seats=1)
    first = _enroll("first@example.com", course.id)
    second = _enroll("second@example.com", course.id)

    # Let the two purchases interleave inside the seat check; only the
    # transaction lock keeps the second buyer from reading the stale count.
    slow = _SlowCourseRepo()
    slow._by_id = memory_uow.courses._by_id
    monkeypatch.setattr(memory_uow, "courses", slow)

    async def _race():
        return await asyncio.gather(
            _purchase("first@example.com", first, transaction_id="pi_a"),
            _purchase("second@example.com", second, transaction_id="pi_b"),
            return_exceptions=True,
        )

    results = asyncio.run(_race())

    failures = [r for r in results if isinstance(r, BaseException)]
    successes = [r for r in results if not isinstance(r, BaseException)]
    assert len(successes) == 1
    assert len(failures) == 1
    assert isinstance(failures[0], SeatsUnavailable)

    stored = asyncio.run(memory_uow.courses.get(course.id))
    assert stored.available_seats == 0
    assert stored.enrolled_count == 1
