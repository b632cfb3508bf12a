"""JWT access token creation and validation (HS256).

The only claim that identifies the caller is ``sub``, the user's email.
Roles are deliberately absent: the authorization gate resolves them from
the user store per request, so promotions apply without re-login.

There is no refresh token.  After ACCESS_TOKEN_TTL the client posts to
/jwt again.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import jwt

from fluency_api.core.config import SETTINGS

ALGORITHM = "HS256"
ISSUER = "fluency-fusion"
AUDIENCE = "fluency-fusion-api"
ACCESS_TOKEN_TTL = timedelta(hours=1)


def create_access_token(*, email: str, now: datetime | None = None) -> str:
    """Sign a token for ``email`` valid for one hour from ``now``."""
    issued_at = now or datetime.now(UTC)
    payload = {
        "sub": email,
        "iss": ISSUER,
        "aud": AUDIENCE,
        "iat": issued_at,
        "exp": issued_at + ACCESS_TOKEN_TTL,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, SETTINGS.access_token_secret, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    Pins the algorithm so a token cannot pick its own (alg:none, or an
    asymmetric alg abusing the shared secret as a public key).

    Raises jwt.ExpiredSignatureError, jwt.InvalidTokenError on failure.
    """
    return jwt.decode(
        token,
        SETTINGS.access_token_secret,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=AUDIENCE,
        options={"require": ["sub", "exp", "iat", "jti"]},
    )
