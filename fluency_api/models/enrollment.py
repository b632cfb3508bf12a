from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class EnrolledCourse:
    """A user's intent to buy a seat; removed once the purchase completes."""

    id: UUID
    user_email: str
    course_id: UUID
    course_name: str = ""
    price: Decimal = Decimal("0")

    @staticmethod
    def new(
        *,
        user_email: str,
        course_id: UUID,
        course_name: str = "",
        price: Decimal = Decimal("0"),
    ) -> EnrolledCourse:
        return EnrolledCourse(
            id=uuid4(),
            user_email=user_email.strip().lower(),
            course_id=course_id,
            course_name=course_name,
            price=price,
        )


@dataclass(frozen=True, slots=True)
class PurchasedCourse:
    """Paid entitlement.  Append-only."""

    id: UUID
    user_email: str
    course_id: UUID
    payment_id: UUID
    course_name: str = ""
    price: Decimal = Decimal("0")
    purchased_at: datetime | None = None

    @staticmethod
    def new(
        *,
        user_email: str,
        course_id: UUID,
        payment_id: UUID,
        course_name: str = "",
        price: Decimal = Decimal("0"),
    ) -> PurchasedCourse:
        return PurchasedCourse(
            id=uuid4(),
            user_email=user_email,
            course_id=course_id,
            payment_id=payment_id,
            course_name=course_name,
            price=price,
            purchased_at=datetime.now(UTC),
        )
