"""Bearer token authentication.

Access tokens are HS256 JWTs signed with ``settings.secret_key``:

    {"sub": <user id>, "roles": [...], "type": "access", "iat": ..., "exp": ..., "jti": ...}

Without a configured secret key every request runs as an anonymous
principal, which is how local development and the test suite work.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import jwt
import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config.settings import settings
from app.core.errors import AuthenticationError

logger = structlog.get_logger()

ANONYMOUS_USER = "anonymous"

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class Principal:
    user_id: str
    roles: List[str] = field(default_factory=list)
    authenticated: bool = True


def _secret() -> str:
    if not settings.secret_key:
        raise AuthenticationError("Token authentication is not configured")
    return settings.secret_key


def create_access_token(
    subject: str, roles: Optional[List[str]] = None, expires_minutes: Optional[int] = None
) -> str:
    now = datetime.now(timezone.utc)
    minutes = expires_minutes if expires_minutes is not None else settings.access_token_expire_minutes
    payload = {
        "sub": subject,
        "roles": roles or [],
        "type": "access",
        "iat": now,
        "exp": now + timedelta(minutes=minutes),
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, _secret(), algorithm=settings.algorithm)


def decode_access_token(token: str) -> dict:
    """Verify a token and return its claims, raising AuthenticationError"""
    try:
        payload = jwt.decode(token, _secret(), algorithms=[settings.algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.warning("Rejected bearer token", error=str(e))
        raise AuthenticationError(f"Invalid token: {e}")

    if payload.get("type") != "access":
        raise AuthenticationError(f"Expected access token, got {payload.get('type')}")
    if not payload.get("sub"):
        raise AuthenticationError("Token has no subject")
    return payload


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:
    if not settings.secret_key:
        return Principal(user_id=ANONYMOUS_USER, authenticated=False)

    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("Missing bearer token")

    payload = decode_access_token(credentials.credentials)
    return Principal(user_id=str(payload["sub"]), roles=list(payload.get("roles") or []))
