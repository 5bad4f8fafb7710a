from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]


def _getenv(name: str, default: str) -> str:
    # Centralize env access so it’s easy to extend later (type casting, required vars)
    return os.environ.get(name, default).strip()


def _getenv_bool(name: str, default: bool = False) -> bool:
    raw = _getenv(name, "true" if default else "false").lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


def _getenv_int(name: str, default: int) -> int:
    raw = _getenv(name, str(default))
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer (got {raw!r})") from None


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    redis_url: str | None
    site_name: str = "EAD Platform"
    site_url: str = "http://localhost:5173"
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_from: str = '"EAD Platform" <no-reply@eadplatform.com>'
    jwt_private_key: str | None = None
    jwt_issuer: str = "ead-service"
    jwt_audience: str = "ead-service"
    cors_origins: tuple[str, ...] = field(default=("http://localhost:5173",))

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"

    @property
    def smtp_configured(self) -> bool:
        return self.smtp_host is not None


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    port = _getenv_int("PORT", 8000)
    smtp_port = _getenv_int("SMTP_PORT", 587)

    database_url = _getenv("DATABASE_URL", "") or None
    redis_url = _getenv("REDIS_URL", "") or None

    # The ephemeral dev key dies with the process; production tokens must
    # survive restarts and be shared across instances.
    jwt_private_key = _getenv("JWT_PRIVATE_KEY", "") or None
    if app_env_raw == "prod" and jwt_private_key is None:
        raise ValueError("JWT_PRIVATE_KEY is required when APP_ENV=prod")

    cors_raw = _getenv("CORS_ORIGINS", "http://localhost:5173")
    cors_origins = tuple(o.strip() for o in cors_raw.split(",") if o.strip())

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=_getenv_bool("LOG_JSON"),
        port=port,
        database_url=database_url,
        redis_url=redis_url,
        site_name=_getenv("SITE_NAME", "EAD Platform"),
        site_url=_getenv("SITE_URL", "http://localhost:5173").rstrip("/"),
        smtp_host=_getenv("SMTP_HOST", "") or None,
        smtp_port=smtp_port,
        smtp_user=_getenv("SMTP_USER", "") or None,
        smtp_password=_getenv("SMTP_PASSWORD", "") or None,
        smtp_from=_getenv("SMTP_FROM", '"EAD Platform" <no-reply@eadplatform.com>'),
        jwt_private_key=jwt_private_key,
        jwt_issuer=_getenv("JWT_ISSUER", "ead-service"),
        jwt_audience=_getenv("JWT_AUDIENCE", "ead-service"),
        cors_origins=cors_origins,
    )


# Optional: module-level singleton so imports are cheap
SETTINGS = load_settings()
