from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4

ROLE_ADMIN = "admin"
ROLE_INSTRUCTOR = "instructor"
ROLES = (ROLE_ADMIN, ROLE_INSTRUCTOR)


def normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass(frozen=True, slots=True)
class User:
    id: UUID
    email: str
    name: str = ""
    photo_url: str | None = None
    role: str | None = None  # None (plain user) | admin | instructor

    @staticmethod
    def new(*, email: str, name: str = "", photo_url: str | None = None) -> User:
        # Registration never grants a role; promotion is a separate operation.
        return User(
            id=uuid4(),
            email=normalize_email(email),
            name=name.strip(),
            photo_url=photo_url,
        )

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_instructor(self) -> bool:
        return self.role == ROLE_INSTRUCTOR
