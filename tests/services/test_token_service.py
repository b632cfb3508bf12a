from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from fluency_api.core.config import SETTINGS
from fluency_api.services import token_service


def test_round_trip_carries_email_as_sub() -> None:
    token = token_service.create_access_token(email="student@example.com")
    claims = token_service.decode_access_token(token)
    assert claims["sub"] == "student@example.com"
    assert claims["iss"] == token_service.ISSUER
    assert claims["aud"] == token_service.AUDIENCE
    assert claims["jti"]


def test_token_carries_no_role() -> None:
    token = token_service.create_access_token(email="admin@example.com")
    claims = token_service.decode_access_token(token)
    assert "role" not in claims
    assert "roles" not in claims


def test_token_expires_after_one_hour() -> None:
    now = datetime.now(UTC)
    token = token_service.create_access_token(email="a@example.com", now=now)
    claims = token_service.decode_access_token(token)
    assert claims["exp"] - claims["iat"] == 3600


def test_expired_token_rejected() -> None:
    issued = datetime.now(UTC) - token_service.ACCESS_TOKEN_TTL - timedelta(minutes=1)
    token = token_service.create_access_token(email="a@example.com", now=issued)
    with pytest.raises(jwt.ExpiredSignatureError):
        token_service.decode_access_token(token)


def test_token_signed_with_other_secret_rejected() -> None:
    now = datetime.now(UTC)
    forged = jwt.encode(
        {
            "sub": "admin@example.com",
            "iss": token_service.ISSUER,
            "aud": token_service.AUDIENCE,
            "iat": now,
            "exp": now + timedelta(hours=1),
            "jti": "x",
        },
        "not-the-secret",
        algorithm="HS256",
    )
    with pytest.raises(jwt.InvalidSignatureError):
        token_service.decode_access_token(forged)


def test_wrong_audience_rejected() -> None:
    now = datetime.now(UTC)
    token = jwt.encode(
        {
            "sub": "a@example.com",
            "iss": token_service.ISSUER,
            "aud": "some-other-api",
            "iat": now,
            "exp": now + timedelta(hours=1),
            "jti": "x",
        },
        SETTINGS.access_token_secret,
        algorithm="HS256",
    )
    with pytest.raises(jwt.InvalidAudienceError):
        token_service.decode_access_token(token)


def test_missing_jti_rejected() -> None:
    now = datetime.now(UTC)
    token = jwt.encode(
        {
            "sub": "a@example.com",
            "iss": token_service.ISSUER,
            "aud": token_service.AUDIENCE,
            "iat": now,
            "exp": now + timedelta(hours=1),
        },
        SETTINGS.access_token_secret,
        algorithm="HS256",
    )
    with pytest.raises(jwt.MissingRequiredClaimError):
        token_service.decode_access_token(token)


def test_garbage_rejected() -> None:
    with pytest.raises(jwt.InvalidTokenError):
        token_service.decode_access_token("not.a.token")
