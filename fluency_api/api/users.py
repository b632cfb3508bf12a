"""User registration and role management.

GET    /users                      admin only
POST   /users                      open; idempotent on email
DELETE /users/{user_id}
PATCH  /users/admin/{user_id}      promote to admin
PATCH  /users/instructor/{user_id} promote to instructor
GET    /users/admin/{email}        {"admin": bool} for the caller's own email
GET    /users/instructor/{email}   {"instructor": bool}, same rule
GET    /instructors                public instructor directory
"""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from fluency_api.api.access import is_same_identity
from fluency_api.api.dependencies import get_uow, require_role, require_user
from fluency_api.api.results import (
    DeleteResult,
    InsertResult,
    MessageOut,
    UpdateResult,
    WireModel,
    delete_result,
    update_result,
)
from fluency_api.models.principal import Principal
from fluency_api.models.user import ROLE_ADMIN, ROLE_INSTRUCTOR, User
from fluency_api.repos.unit_of_work import UnitOfWork
from fluency_api.services import users_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


class UserOut(WireModel):
    id: str
    email: str
    name: str
    photo_url: str | None
    role: str | None


class UserCreateIn(WireModel):
    email: str
    name: str = ""
    photo_url: str | None = None


class AdminCheckOut(WireModel):
    admin: bool


class InstructorCheckOut(WireModel):
    instructor: bool


def _user_out(u: User) -> UserOut:
    return UserOut(
        id=str(u.id), email=u.email, name=u.name, photo_url=u.photo_url, role=u.role
    )


@router.get("/users", response_model=list[UserOut])
async def get_users(
    _admin: Annotated[Principal, Depends(require_role(ROLE_ADMIN))],
    uow: Annotated[UnitOfWork, Depends(get_uow)],
) -> list[UserOut]:
    return [_user_out(u) for u in await users_service.list_users(uow)]


@router.post("/users", response_model=InsertResult | MessageOut)
async def post_user(
    payload: UserCreateIn,
    uow: Annotated[UnitOfWork, Depends(get_uow)],
) -> InsertResult | MessageOut:
    try:
        user = await users_service.register_user(
            uow, email=payload.email, name=payload.name, photo_url=payload.photo_url
        )
    except users_service.UserAlreadyExistsError:
        # Social sign-in posts on every login; an existing user is a normal
        # outcome, not a conflict.
        return MessageOut(message="User already exist")
    except users_service.UserValidationError as e:
        logger.warning("Invalid user payload: %s", e)
        raise HTTPException(
            status_code=422,
            detail=str(e),
        ) from None

    return InsertResult(inserted_id=str(user.id))


@router.delete("/users/{user_id}", response_model=DeleteResult)
async def delete_user(
    user_id: UUID,
    uow: Annotated[UnitOfWork, Depends(get_uow)],
) -> DeleteResult:
    return delete_result(await users_service.delete_user(uow, user_id))


@router.patch("/users/admin/{user_id}", response_model=UpdateResult)
async def make_admin(
    user_id: UUID,
    uow: Annotated[UnitOfWork, Depends(get_uow)],
) -> UpdateResult:
    change = await users_service.set_role(uow, user_id, ROLE_ADMIN)
    return update_result(change.matched, change.modified)


@router.patch("/users/instructor/{user_id}", response_model=UpdateResult)
async def make_instructor(
    user_id: UUID,
    uow: Annotated[UnitOfWork, Depends(get_uow)],
) -> UpdateResult:
    change = await users_service.set_role(uow, user_id, ROLE_INSTRUCTOR)
    return update_result(change.matched, change.modified)


@router.get("/users/admin/{email}", response_model=AdminCheckOut)
async def is_admin(
    email: str,
    principal: Annotated[Principal, Depends(require_user)],
    uow: Annotated[UnitOfWork, Depends(get_uow)],
) -> AdminCheckOut:
    if not is_same_identity(principal, email):
        return AdminCheckOut(admin=False)
    return AdminCheckOut(
        admin=await users_service.has_role(uow, principal.email, ROLE_ADMIN)
    )


@router.get("/users/instructor/{email}", response_model=InstructorCheckOut)
async def is_instructor(
    email: str,
    principal: Annotated[Principal, Depends(require_user)],
    uow: Annotated[UnitOfWork, Depends(get_uow)],
) -> InstructorCheckOut:
    if not is_same_identity(principal, email):
        return InstructorCheckOut(instructor=False)
    return InstructorCheckOut(
        instructor=await users_service.has_role(uow, principal.email, ROLE_INSTRUCTOR)
    )


@router.get("/instructors", response_model=list[UserOut])
async def get_instructors(
    uow: Annotated[UnitOfWork, Depends(get_uow)],
) -> list[UserOut]:
    return [_user_out(u) for u in await users_service.list_instructors(uow)]
