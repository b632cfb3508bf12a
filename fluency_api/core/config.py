from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

# Only acceptable outside prod; load_settings() refuses it when APP_ENV=prod.
DEV_TOKEN_SECRET = "dev-only-secret-change-me"


def _getenv(name: str, default: str) -> str:
    # Centralize env access so it’s easy to extend later (type casting, required vars)
    return os.environ.get(name, default).strip()


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("", "0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    redis_url: str | None
    access_token_secret: str = DEV_TOKEN_SECRET
    payment_secret_key: str | None = None
    payment_api_base: str = "https://api.stripe.com"
    payment_currency: str = "usd"
    cors_origins: tuple[str, ...] = ("http://localhost:5173",)

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    port_raw = _getenv("PORT", "5000")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer (got {port_raw!r})") from None

    log_json = _parse_bool("LOG_JSON", _getenv("LOG_JSON", "false"))

    access_token_secret = _getenv("ACCESS_TOKEN_SECRET", "") or DEV_TOKEN_SECRET
    if app_env_raw == "prod" and access_token_secret == DEV_TOKEN_SECRET:
        raise ValueError("ACCESS_TOKEN_SECRET must be set when APP_ENV=prod")

    currency = _getenv("PAYMENT_CURRENCY", "usd").lower()
    if len(currency) != 3 or not currency.isalpha():
        raise ValueError(
            f"PAYMENT_CURRENCY must be a 3-letter ISO code (got {currency!r})"
        )

    origins = tuple(
        o.strip()
        for o in _getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
        if o.strip()
    )

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=log_json,
        port=port,
        database_url=_getenv("DATABASE_URL", "") or None,
        redis_url=_getenv("REDIS_URL", "") or None,
        access_token_secret=access_token_secret,
        payment_secret_key=_getenv("PAYMENT_SECRET_KEY", "") or None,
        payment_api_base=_getenv("PAYMENT_API_BASE", "https://api.stripe.com").rstrip(
            "/"
        ),
        payment_currency=currency,
        cors_origins=origins,
    )


# Optional: module-level singleton so imports are cheap
SETTINGS = load_settings()
