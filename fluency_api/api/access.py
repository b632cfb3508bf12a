"""Identity checks between the token's email and the email a request names.

Two conventions coexist and both are relied on by existing clients:

  role-check routes  (GET /users/admin/{email}, /users/instructor/{email})
      a mismatch is an answer, not an error: {"admin": false}.
      Use ``is_same_identity``.

  data-access routes (/coursesByEmail, /enrolled, /purchased, /payments)
      a mismatch is 403.  Use ``check_same_identity``.

Plain functions rather than dependencies because the email arrives through
different parameters (path on one route, query on another).
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from fluency_api.core.metrics import AUTHZ_DENIALS
from fluency_api.models.principal import Principal

logger = logging.getLogger(__name__)


def is_same_identity(principal: Principal, email: str) -> bool:
    return principal.owns(email)


def check_same_identity(principal: Principal, email: str) -> None:
    """Raise 403 unless ``email`` is the caller's own."""
    if principal.owns(email):
        return
    AUTHZ_DENIALS.labels(reason="forbidden").inc()
    logger.warning(
        "Access denied: email=%s requested data of %s", principal.email, email
    )
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="forbidden access",
    )
