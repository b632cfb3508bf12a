from __future__ import annotations

from dataclasses import replace
from typing import Protocol
from uuid import UUID

from fluency_api.models.user import User


class UserRepo(Protocol):
    """User records, also the role store consulted by the authorization gate."""

    async def list_all(self) -> list[User]: ...
    async def list_by_role(self, role: str) -> list[User]: ...
    async def get_by_id(self, user_id: UUID) -> User | None: ...
    async def get_by_email(self, email: str) -> User | None: ...
    async def get_role(self, email: str) -> str | None: ...
    async def add(self, user: User) -> None: ...
    async def set_role(self, user_id: UUID, role: str | None) -> User | None: ...
    async def delete(self, user_id: UUID) -> bool: ...


class InMemoryUserRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, User] = {}

    def _snapshot(self) -> dict[UUID, User]:
        return dict(self._by_id)

    def _restore(self, snapshot: dict[UUID, User]) -> None:
        self._by_id = snapshot

    async def list_all(self) -> list[User]:
        return list(self._by_id.values())

    async def list_by_role(self, role: str) -> list[User]:
        return [u for u in self._by_id.values() if u.role == role]

    async def get_by_id(self, user_id: UUID) -> User | None:
        return self._by_id.get(user_id)

    async def get_by_email(self, email: str) -> User | None:
        for user in self._by_id.values():
            if user.email == email:
                return user
        return None

    async def get_role(self, email: str) -> str | None:
        user = await self.get_by_email(email)
        return user.role if user is not None else None

    async def add(self, user: User) -> None:
        if any(u.email == user.email for u in self._by_id.values()):
            raise ValueError("email already exists")
        self._by_id[user.id] = user

    async def set_role(self, user_id: UUID, role: str | None) -> User | None:
        u = self._by_id.get(user_id)
        if u is None:
            return None
        updated = replace(u, role=role)
        self._by_id[user_id] = updated
        return updated

    async def delete(self, user_id: UUID) -> bool:
        return self._by_id.pop(user_id, None) is not None
