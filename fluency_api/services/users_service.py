from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from uuid import UUID

from fluency_api.models.user import ROLES, User, normalize_email
from fluency_api.repos.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class UserValidationError(ValueError):
    pass


class UserAlreadyExistsError(Exception):
    pass


@dataclass(frozen=True)
class RoleChange:
    matched: bool
    modified: bool


async def list_users(uow: UnitOfWork) -> list[User]:
    return await uow.users.list_all()


async def list_instructors(uow: UnitOfWork) -> list[User]:
    return await uow.users.list_by_role("instructor")


async def register_user(
    uow: UnitOfWork,
    *,
    email: str,
    name: str = "",
    photo_url: str | None = None,
) -> User:
    email = normalize_email(email)
    if not _EMAIL_RE.match(email):
        logger.warning("Rejected invalid email=%r", email)
        raise UserValidationError("email must be a valid address")

    async with uow.transaction():
        if await uow.users.get_by_email(email) is not None:
            logger.info("Registration skipped, user exists email=%s", email)
            raise UserAlreadyExistsError(email)
        user = User.new(email=email, name=name, photo_url=photo_url)
        try:
            await uow.users.add(user)
        except ValueError:
            # Lost a race with a concurrent registration for the same email
            raise UserAlreadyExistsError(email) from None

    logger.info("Registered user id=%s email=%s", user.id, user.email)
    return user


async def set_role(uow: UnitOfWork, user_id: UUID, role: str) -> RoleChange:
    if role not in ROLES:
        raise UserValidationError(f"unknown role {role!r}")

    async with uow.transaction():
        current = await uow.users.get_by_id(user_id)
        if current is None:
            logger.warning("Role change for unknown user id=%s", user_id)
            return RoleChange(matched=False, modified=False)
        if current.role == role:
            return RoleChange(matched=True, modified=False)
        await uow.users.set_role(user_id, role)

    logger.info(
        "Role changed user=%s %s -> %s", current.email, current.role or "user", role
    )
    return RoleChange(matched=True, modified=True)


async def delete_user(uow: UnitOfWork, user_id: UUID) -> bool:
    async with uow.transaction():
        deleted = await uow.users.delete(user_id)
    if deleted:
        logger.info("Deleted user id=%s", user_id)
    return deleted


async def has_role(uow: UnitOfWork, email: str, role: str) -> bool:
    """Live role lookup; never cached."""
    return await uow.users.get_role(normalize_email(email)) == role
