"""POST /jwt: exchange an email for a one-hour bearer token.

The web client signs users in with a third-party identity provider and
then posts the resulting email here.  No password is checked; the token
only asserts which email the caller claims, and every privileged route
still checks the role stored for that email.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from fluency_api.api.ratelimit import TOKEN_ISSUE_LIMIT, require_rate_limit
from fluency_api.api.results import WireModel
from fluency_api.models.user import normalize_email
from fluency_api.services import token_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


class TokenIn(WireModel):
    email: str


class TokenOut(WireModel):
    token: str


@router.post(
    "/jwt",
    response_model=TokenOut,
    dependencies=[Depends(require_rate_limit(TOKEN_ISSUE_LIMIT))],
)
async def issue_token(payload: TokenIn) -> TokenOut:
    email = normalize_email(payload.email)
    if not email:
        raise HTTPException(
            status_code=422,
            detail="email must be non-empty",
        )
    logger.info("Token issued email=%s", email)
    return TokenOut(token=token_service.create_access_token(email=email))
