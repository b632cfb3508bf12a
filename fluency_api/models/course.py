from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID, uuid4

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_DENIED = "denied"
STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_DENIED)

# Fields an instructor may change through a partial update.  Status,
# feedback and the enrolment counter have their own operations.
EDITABLE_FIELDS = frozenset(
    {"name", "image_url", "instructor_name", "available_seats", "price"}
)


@dataclass(frozen=True, slots=True)
class Course:
    id: UUID
    name: str
    instructor_email: str
    instructor_name: str = ""
    image_url: str | None = None
    available_seats: int = 0
    price: Decimal = Decimal("0")
    status: str = STATUS_PENDING  # pending|approved|denied
    feedback: str | None = None
    enrolled_count: int = 0

    @staticmethod
    def new(
        *,
        name: str,
        instructor_email: str,
        instructor_name: str = "",
        image_url: str | None = None,
        available_seats: int = 0,
        price: Decimal = Decimal("0"),
    ) -> Course:
        # Submissions always start pending, whatever the client sent.
        return Course(
            id=uuid4(),
            name=name,
            instructor_email=instructor_email.strip().lower(),
            instructor_name=instructor_name,
            image_url=image_url,
            available_seats=available_seats,
            price=price,
        )

    @property
    def is_approved(self) -> bool:
        return self.status == STATUS_APPROVED
