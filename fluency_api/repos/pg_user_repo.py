"""PostgreSQL implementation of UserRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fluency_api.db.tables import UserRow
from fluency_api.models.user import User


class PgUserRepo:
    """Satisfies the UserRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_all(self) -> list[User]:
        rows = (await self._session.execute(select(UserRow))).scalars().all()
        return [_row_to_user(r) for r in rows]

    async def list_by_role(self, role: str) -> list[User]:
        stmt = select(UserRow).where(UserRow.role == role)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_user(r) for r in rows]

    async def get_by_id(self, user_id: UUID) -> User | None:
        stmt = select(UserRow).where(UserRow.id == user_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_user(row)

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(UserRow).where(UserRow.email == email)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_user(row)

    async def get_role(self, email: str) -> str | None:
        stmt = select(UserRow.role).where(UserRow.email == email)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def add(self, user: User) -> None:
        row = UserRow(
            id=user.id,
            email=user.email,
            name=user.name,
            photo_url=user.photo_url,
            role=user.role,
        )
        self._session.add(row)
        try:
            await self._session.flush()
        except IntegrityError as e:
            raise ValueError("email already exists") from e

    async def set_role(self, user_id: UUID, role: str | None) -> User | None:
        stmt = update(UserRow).where(UserRow.id == user_id).values(role=role)
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.get_by_id(user_id)

    async def delete(self, user_id: UUID) -> bool:
        result = await self._session.execute(
            delete(UserRow).where(UserRow.id == user_id)
        )
        return result.rowcount > 0


def _row_to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        email=row.email,
        name=row.name or "",
        photo_url=row.photo_url,
        role=row.role,
    )
