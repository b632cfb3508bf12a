"""Request context middleware.

Every request gets an ID (taken from X-Request-ID when the client sends
one, otherwise a fresh UUID).  The ID is stored in a ContextVar so that any
log line emitted while the request is in flight carries it, no matter which
module logs.  A ContextVar rather than a thread-local because many requests
share the event-loop thread.

On completion a single summary line is logged with the method, path,
status, duration and, when the authorization gate resolved one, the
caller's email.  Unhandled exceptions are logged with their traceback
before the framework turns them into a 500.
"""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from fluency_api.core.logging import request_id_var

logger = logging.getLogger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a request ID, time the request, log a summary line."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request_id_var.set(req_id)

        start = time.monotonic()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "%s %s failed with an unhandled error",
                request.method,
                request.url.path,
                extra={
                    "request_id": req_id,
                    "method": request.method,
                    "path": request.url.path,
                },
            )
            raise
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        # Set by require_user once the bearer token has been verified.
        user_email = getattr(request.state, "user_email", None)

        logger.info(
            "%s %s → %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
                "user_email": user_email,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers["X-Request-ID"] = req_id
        return response
