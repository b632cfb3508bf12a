"""Prometheus scrape endpoint.

Plain-text exposition format, e.g.:

  purchases_total{result="completed"} 12.0
  http_requests_total{method="POST",endpoint="/payments",status_code="409"} 3.0

Left unauthenticated; restrict it at the ingress in production.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
