"""Authorization gate and data-access dependencies.

Each protected request walks the same chain:

  extract   bearer token from Authorization      missing   -> 401
  verify    signature + expiry (token_service)   bad/stale -> 403
  identity  token email vs. email in the request (see access.py)
  role      live lookup in the user store        wrong     -> 403

Nothing is remembered between requests: the token is re-verified every
time and the role is read from the store every time it matters.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from fluency_api.core.metrics import AUTHZ_DENIALS
from fluency_api.db import engine as db_engine
from fluency_api.models.principal import Principal
from fluency_api.models.user import normalize_email
from fluency_api.repos.unit_of_work import InMemoryUnitOfWork, PgUnitOfWork, UnitOfWork
from fluency_api.services import token_service, users_service
from fluency_api.services.payment_gateway import PaymentGateway, payment_gateway

logger = logging.getLogger(__name__)

# tokenUrl only feeds the OpenAPI docs; /jwt takes JSON, not a password form.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/jwt")

# Used whenever DATABASE_URL is unset.
memory_uow = InMemoryUnitOfWork()


async def get_uow() -> AsyncGenerator[UnitOfWork, None]:
    """Yield the data-access context for one request."""
    if db_engine.async_session_factory is None:
        yield memory_uow
        return
    async with db_engine.session_scope() as session:
        yield PgUnitOfWork(session)


def get_payment_gateway() -> PaymentGateway:
    return payment_gateway


def require_user(
    request: Request,
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> Principal:
    """Verify the bearer token and return the caller's Principal."""
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        AUTHZ_DENIALS.labels(reason="expired_token").inc()
        logger.warning("Expired token rejected")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Token expired",
        ) from None
    except jwt.InvalidTokenError as e:
        AUTHZ_DENIALS.labels(reason="invalid_token").inc()
        logger.warning("Invalid token rejected: %s", e)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid token",
        ) from None

    principal = Principal(email=normalize_email(claims["sub"]))
    request.state.user_email = principal.email
    logger.debug("Token validated for email=%s", principal.email)
    return principal


def require_role(role: str):
    """Dependency factory: demand a role, looked up live in the user store.

    Usage: Depends(require_role("admin"))
    """

    async def _guard(
        principal: Annotated[Principal, Depends(require_user)],
        uow: Annotated[UnitOfWork, Depends(get_uow)],
    ) -> Principal:
        if not await users_service.has_role(uow, principal.email, role):
            AUTHZ_DENIALS.labels(reason="role").inc()
            logger.warning(
                "Access denied: email=%s missing role=%s", principal.email, role
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return principal

    return _guard
