from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from fluency_api.api.courses import router as courses_router
from fluency_api.api.enrollments import router as enrollments_router
from fluency_api.api.health import router as health_router
from fluency_api.api.metrics_endpoint import router as metrics_router
from fluency_api.api.payments import router as payments_router
from fluency_api.api.tokens import router as tokens_router
from fluency_api.api.users import router as users_router
from fluency_api.core.config import SETTINGS
from fluency_api.core.logging import setup_logging
from fluency_api.db.engine import lifespan_db
from fluency_api.db.redis import lifespan_redis
from fluency_api.middleware.metrics import MetricsMiddleware
from fluency_api.middleware.request_context import RequestContextMiddleware

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Torn down in reverse order.
    async with lifespan_db():
        async with lifespan_redis():
            yield


app = FastAPI(
    title="fluency-fusion-api",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(SETTINGS.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Last added runs first: RequestContext -> Metrics -> CORS -> route.
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(tokens_router)
app.include_router(users_router)
app.include_router(courses_router)
app.include_router(enrollments_router)
app.include_router(payments_router)


@app.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def root() -> str:
    return "Fluency Fusion Running"


logger.info(
    "fluency-fusion-api started  env=%s log_level=%s port=%d docs=%s payments=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.is_dev else "off",
    "stripe" if SETTINGS.payment_secret_key else "fake",
)
