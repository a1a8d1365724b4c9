"""Configuration helpers for environment variables."""

from __future__ import annotations

import os
import logging

from dotenv import load_dotenv


logger = logging.getLogger(__name__)


_TRUE_VALUES = {"1", "true"}
_LOCAL_ENVS = {"dev", "local"}
_TEST_ENVS = {"test", "ci"}


def _should_load_dotenv() -> bool:
    """Return whether local dotenv loading should run."""
    app_env = os.getenv("APP_ENV", "dev").strip().lower()
    return app_env in _LOCAL_ENVS


if _should_load_dotenv():
    load_dotenv()


def get_env(name: str, default: str | None = None) -> str | None:
    """Return a raw environment value or default."""
    return os.getenv(name, default)


def app_env() -> str:
    """Return the current application environment."""
    return (get_env("APP_ENV", "dev") or "dev").strip() or "dev"


def cors_allow_origins() -> list[str]:
    """Return CORS allowed origins from env with safe environment defaults."""
    raw_origins = get_env("CORS_ALLOW_ORIGINS", "") or ""
    parsed_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]

    if parsed_origins:
        return parsed_origins

    if app_env().strip().lower() in _LOCAL_ENVS:
        return ["*"]

    ui_origin = (get_env("UI_ORIGIN", "") or "").strip()
    if ui_origin:
        return [ui_origin]

    logger.warning(
        "cors_allow_origins_empty_in_prod app_env=%s; define CORS_ALLOW_ORIGINS or UI_ORIGIN",
        app_env(),
    )

    return []


def auth_required() -> bool:
    """Return whether mutating routes require a verified bearer token.

    Explicit `AUTH_REQUIRED` wins; otherwise auth is enforced everywhere except
    local and test environments.
    """
    raw_value = (get_env("AUTH_REQUIRED", "") or "").strip().lower()
    if raw_value:
        return raw_value in _TRUE_VALUES

    return app_env().strip().lower() not in _LOCAL_ENVS | _TEST_ENVS


def mongodb_uri() -> str | None:
    """Return MongoDB connection string when configured."""
    return (get_env("MONGODB_URI", "") or "").strip() or None


def mongodb_database() -> str:
    """Return MongoDB database name."""
    return (get_env("MONGODB_DATABASE", "") or "").strip() or "finance-management"


def mongodb_collection() -> str:
    """Return MongoDB collection holding transaction documents."""
    return (get_env("MONGODB_COLLECTION", "") or "").strip() or "personal-finance"


def mongodb_timeout_ms() -> int:
    """Return server selection timeout in milliseconds."""
    raw_value = (get_env("MONGODB_TIMEOUT_MS", "") or "").strip()
    try:
        return int(raw_value) if raw_value else 5000
    except ValueError:
        logger.warning("mongodb_timeout_ms_invalid value=%s; using default", raw_value)
        return 5000


def supabase_url() -> str | None:
    """Return Supabase URL when configured."""
    return get_env("SUPABASE_URL")


def supabase_anon_key() -> str | None:
    """Return Supabase anon key when configured."""
    return get_env("SUPABASE_ANON_KEY")


def log_level() -> str:
    """Return the root log level name."""
    return (get_env("LOG_LEVEL", "INFO") or "INFO").strip().upper() or "INFO"


def port() -> int:
    """Return the HTTP port for the API server."""
    raw_value = (get_env("PORT", "") or "").strip()
    return int(raw_value) if raw_value.isdigit() else 3000
