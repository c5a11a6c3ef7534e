from __future__ import annotations

import logging
from dataclasses import dataclass

import jwt
from email_validator import EmailNotValidError, validate_email

from .errors import AuthError
from .roles import Role, parse_role
from .security import decode_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    user_id: str
    role: Role | None
    email: str
    full_name: str


def normalize_email(raw: str | None) -> str:
    if not raw:
        return ""
    try:
        return validate_email(raw, check_deliverability=False).normalized
    except EmailNotValidError:
        logger.warning("Ignoring malformed email claim: %s", raw)
        return ""


def authenticate(token: str) -> Identity:
    """Verify a bearer token issued by the identity provider."""
    try:
        payload = decode_token(token)
    except jwt.PyJWTError as exc:
        raise AuthError("Invalid token", cause=exc) from exc

    sub = payload.get("sub")
    if not sub:
        raise AuthError("Invalid token")

    # role and name live in user metadata; a top-level "role" is the
    # provider's own audience label and is ignored unless it is one of ours
    meta = payload.get("user_metadata") or {}
    return Identity(
        user_id=str(sub),
        role=parse_role(meta.get("role") or payload.get("role")),
        email=normalize_email(payload.get("email")),
        full_name=str(meta.get("full_name") or meta.get("name") or ""),
    )
