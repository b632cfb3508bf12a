"""Purchase coordinator: turns a paid enrollment into an entitlement.

Runs once the client has confirmed a payment with the processor.  All of
the following happen inside ONE unit-of-work transaction:

  1. load the enrollment and check it belongs to the caller and to the
     course being paid for
  2. take a seat: conditional decrement, only while available_seats > 0
  3. append the Payment audit record
  4. append the PurchasedCourse record
  5. delete the EnrolledCourse record

If any step fails the transaction rolls back, so the store never holds a
payment without its purchase, or a purchase next to a lingering
enrollment.  Every failure surfaces as a PurchaseFailed (or a subclass) so
the route has one thing to map.

The seat count is read and decremented server-side by the conditional
update.  A seat count sent by the client is ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from fluency_api.core.metrics import PURCHASES
from fluency_api.models.course import Course
from fluency_api.models.enrollment import PurchasedCourse
from fluency_api.models.payment import Payment
from fluency_api.models.user import normalize_email
from fluency_api.repos.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class PurchaseFailed(Exception):
    """The purchase was aborted and nothing was written."""

    result_label = "failed"

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class SeatsUnavailable(PurchaseFailed):
    result_label = "sold_out"

    def __init__(self, course_id: UUID) -> None:
        super().__init__("No seats available")
        self.course_id = course_id


class EnrollmentNotOwnedError(PurchaseFailed):
    result_label = "not_owned"

    def __init__(self) -> None:
        super().__init__("forbidden access")


@dataclass(frozen=True)
class PurchaseReceipt:
    payment: Payment
    purchase: PurchasedCourse
    course: Course


async def complete_purchase(
    uow: UnitOfWork,
    *,
    user_email: str,
    course_id: UUID,
    enrollment_id: UUID,
    transaction_id: str,
    price: Decimal,
) -> PurchaseReceipt:
    email = normalize_email(user_email)
    try:
        async with uow.transaction():
            receipt = await _purchase_steps(
                uow,
                email=email,
                course_id=course_id,
                enrollment_id=enrollment_id,
                transaction_id=transaction_id,
                price=price,
            )
    except PurchaseFailed as e:
        PURCHASES.labels(result=e.result_label).inc()
        logger.warning(
            "Purchase aborted user=%s course=%s enrollment=%s reason=%s",
            email,
            course_id,
            enrollment_id,
            e.reason,
        )
        raise
    except Exception as e:
        PURCHASES.labels(result=PurchaseFailed.result_label).inc()
        logger.exception(
            "Purchase aborted by store error user=%s course=%s", email, course_id
        )
        raise PurchaseFailed("purchase could not be completed") from e

    PURCHASES.labels(result="completed").inc()
    logger.info(
        "Purchase completed user=%s course=%s payment=%s seats_left=%d",
        email,
        course_id,
        receipt.payment.id,
        receipt.course.available_seats,
    )
    return receipt


async def _purchase_steps(
    uow: UnitOfWork,
    *,
    email: str,
    course_id: UUID,
    enrollment_id: UUID,
    transaction_id: str,
    price: Decimal,
) -> PurchaseReceipt:
    enrollment = await uow.enrollments.get(enrollment_id)
    if enrollment is None:
        raise PurchaseFailed("enrollment not found")
    if enrollment.user_email != email:
        raise EnrollmentNotOwnedError()
    if enrollment.course_id != course_id:
        raise PurchaseFailed("enrollment does not reference this course")

    course = await uow.courses.get(course_id)
    if course is None:
        raise PurchaseFailed("course not found")
    if price != course.price:
        raise PurchaseFailed("price does not match the course price")

    updated = await uow.courses.decrement_seats(course_id, 1)
    if updated is None:
        raise SeatsUnavailable(course_id)

    payment = Payment.new(
        user_email=email,
        course_id=course_id,
        enrollment_id=enrollment_id,
        transaction_id=transaction_id,
        price=price,
        seats_before=updated.available_seats + 1,
    )
    await uow.payments.add(payment)

    purchase = PurchasedCourse.new(
        user_email=email,
        course_id=course_id,
        payment_id=payment.id,
        course_name=course.name,
        price=price,
    )
    try:
        await uow.purchases.add(purchase)
    except ValueError:
        raise PurchaseFailed("course already purchased") from None

    if not await uow.enrollments.delete(enrollment_id):
        raise PurchaseFailed("enrollment was removed during checkout")

    return PurchaseReceipt(payment=payment, purchase=purchase, course=updated)


async def list_payments(uow: UnitOfWork, email: str) -> list[Payment]:
    return await uow.payments.list_by_user(normalize_email(email))
