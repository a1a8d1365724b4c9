"""Caller identity resolution and ownership checks."""

from __future__ import annotations

import logging

from backend.auth import supabase_auth
from backend.services.errors import ForbiddenError, UnauthenticatedError
from shared.models import Identity, Transaction


logger = logging.getLogger(__name__)

_BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise UnauthenticatedError("Missing Authorization header")
    if not authorization.startswith(_BEARER_PREFIX):
        raise UnauthenticatedError("Invalid Authorization header")
    token = authorization[len(_BEARER_PREFIX) :].strip()
    if not token:
        raise UnauthenticatedError("Missing bearer token")
    return token


def authenticate(authorization: str | None) -> Identity:
    """Resolve the verified caller identity from an `Authorization` header value.

    Raises `UnauthenticatedError` when the header is absent, malformed, or the
    identity provider rejects the token. Callers must not proceed to the store
    after a failure.
    """

    token = extract_bearer_token(authorization)
    try:
        payload = supabase_auth.get_user_from_bearer_token(token)
    except supabase_auth.UnauthorizedError as exc:
        logger.warning("authentication_failed reason=%s", exc)
        raise UnauthenticatedError("Unauthorized") from exc

    user_id = payload.get("id")
    return Identity(
        email=str(payload["email"]).strip(),
        user_id=user_id if isinstance(user_id, str) else None,
    )


def authorize_owner(record: Transaction, caller_email: str) -> None:
    """Raise `ForbiddenError` unless `caller_email` exactly matches the record owner."""

    if record.user_email != caller_email:
        logger.warning("ownership_check_failed transaction_id=%s", record.id)
        raise ForbiddenError("Not authorized")


def authorize_caller(identity: Identity | None, caller_email: str | None) -> None:
    """Raise `ForbiddenError` when a verified identity acts under another email.

    `identity` is None when authentication is disabled; the caller-supplied
    email is then trusted as-is. A missing email is left to field validation.
    """

    if identity is None:
        return
    if not isinstance(caller_email, str) or not caller_email.strip():
        return
    if identity.email != caller_email.strip():
        logger.warning("caller_email_mismatch user_id=%s", identity.user_id)
        raise ForbiddenError("Not authorized")
