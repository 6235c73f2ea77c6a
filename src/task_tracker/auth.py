"""
Identity gate: password hashing, access tokens, and the FastAPI dependency
that turns a bearer token into an AuthContext.
"""
from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Tuple

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .errors import Unauthenticated
from .settings import Settings
from .utils import utcnow

logger = logging.getLogger(__name__)

_PBKDF2_ROUNDS = 260_000

_security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """The authenticated principal of a request."""

    user_id: str


def hash_password(password: str, salt: Optional[str] = None) -> Tuple[str, str]:
    """PBKDF2-HMAC-SHA256 hash with a per-user random salt. Returns (hash, salt)."""
    if salt is None:
        salt = secrets.token_hex(16)
    key = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), _PBKDF2_ROUNDS)
    return key.hex(), salt


def verify_password(password: str, stored_hash: str, salt: str) -> bool:
    return hmac.compare_digest(hash_password(password, salt)[0], stored_hash)


# PUBLIC_INTERFACE
def create_access_token(user_id: str, settings: Settings) -> str:
    """Issue a signed token whose subject is the user id."""
    now = utcnow()
    payload = {
        "sub": user_id,
        "iat": now,
        "exp": now + timedelta(minutes=settings.token_ttl_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


# PUBLIC_INTERFACE
def decode_access_token(token: str, settings: Settings) -> AuthContext:
    """
    Validate a token and return the principal it names.

    Raises:
        Unauthenticated if the token is expired, tampered with, or has no subject.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as exc:
        raise Unauthenticated("Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise Unauthenticated("Invalid authentication token") from exc

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthenticated("Invalid authentication token")
    return AuthContext(user_id=str(user_id))


# PUBLIC_INTERFACE
async def get_auth_context(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(_security),
) -> AuthContext:
    """
    FastAPI dependency guarding every task and profile route.

    Raises:
        Unauthenticated when credentials are missing, invalid, or name a user
        that no longer exists. Nothing downstream runs in that case.
    """
    if creds is None or not creds.credentials:
        raise Unauthenticated("Not authenticated")

    ctx = decode_access_token(creds.credentials, request.app.state.settings)
    if request.app.state.stores.users.find_by_id(ctx.user_id) is None:
        logger.info("Rejected token for unknown user %s", ctx.user_id)
        raise Unauthenticated("Invalid authentication token")
    return ctx
