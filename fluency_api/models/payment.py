from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Payment:
    """Audit record of a completed transaction.  Never updated or deleted.

    seats_before is the course's seat count as read inside the purchase
    transaction, not whatever the client believed it to be.
    """

    id: UUID
    user_email: str
    course_id: UUID
    enrollment_id: UUID
    transaction_id: str
    price: Decimal
    seats_before: int
    created_at: datetime

    @staticmethod
    def new(
        *,
        user_email: str,
        course_id: UUID,
        enrollment_id: UUID,
        transaction_id: str,
        price: Decimal,
        seats_before: int,
    ) -> Payment:
        return Payment(
            id=uuid4(),
            user_email=user_email,
            course_id=course_id,
            enrollment_id=enrollment_id,
            transaction_id=transaction_id,
            price=price,
            seats_before=seats_before,
            created_at=datetime.now(UTC),
        )
