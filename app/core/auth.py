"""
Authentication Utility - sessions, passwords, CSRF and reset tokens.

Provides:
- Password hashing with bcrypt
- Session cookie login state (Starlette SessionMiddleware)
- CSRF token issue/verification for mutating routes
- Signed password-reset tokens (JWT)
- FastAPI dependencies for protected routes
"""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Request
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import text

from app.core.config import get_settings
from app.core.errors import AuthenticationError, ForbiddenError
from app.db.postgres import get_db_session

settings = get_settings()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds)

CSRF_HEADER = "X-CSRF-Token"
RESET_PURPOSE = "password_reset"


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify password against hash. OAuth-only accounts have no hash."""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


# ============================================================
# SESSIONS
# ============================================================

def start_session(request: Request, user_id: str, email: str) -> None:
    request.session["user_id"] = user_id
    request.session["user_email"] = email


def end_session(request: Request) -> None:
    request.session.clear()


async def get_current_user(request: Request) -> dict:
    """
    FastAPI dependency - Get current authenticated user from the session.

    Usage:
        @router.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    user_id = request.session.get("user_id")
    if not user_id:
        raise AuthenticationError("Authentication required")

    with get_db_session() as db:
        result = db.execute(
            text("SELECT u_id, email FROM users WHERE u_id = :id"),
            {"id": user_id}
        )
        user = result.fetchone()

    if not user:
        # Account was deleted under a live session
        request.session.clear()
        raise AuthenticationError("Authentication required")

    return {"user_id": user[0], "email": user[1]}


# ============================================================
# CSRF
# ============================================================

def get_csrf_token(request: Request) -> str:
    """Return the session's CSRF token, creating one on first use."""
    token = request.session.get("csrf_token")
    if not token:
        token = secrets.token_urlsafe(32)
        request.session["csrf_token"] = token
    return token


async def csrf_protect(request: Request) -> None:
    """Dependency - require X-CSRF-Token to match the session token."""
    if not settings.csrf_enabled:
        return
    expected = request.session.get("csrf_token")
    supplied = request.headers.get(CSRF_HEADER)
    if not expected or not supplied or not secrets.compare_digest(expected, supplied):
        raise ForbiddenError("Invalid or missing CSRF token", code="CSRF_INVALID")


# ============================================================
# PASSWORD RESET TOKENS
# ============================================================

def _password_fingerprint(password_hash: Optional[str]) -> str:
    return hashlib.sha256((password_hash or "").encode()).hexdigest()[:16]


def create_reset_token(user_id: str, password_hash: Optional[str], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed reset token.

    The token embeds a fingerprint of the current password hash, so it
    stops verifying as soon as the password changes.
    """
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.reset_token_expire_minutes))
    payload = {
        "sub": user_id,
        "purpose": RESET_PURPOSE,
        "fp": _password_fingerprint(password_hash),
        "exp": expire,
    }
    return jwt.encode(payload, settings.reset_token_secret, algorithm=settings.reset_token_algorithm)


def decode_reset_token(token: str) -> Optional[dict]:
    """Decode and verify a reset token. Returns None when invalid or expired."""
    try:
        payload = jwt.decode(token, settings.reset_token_secret, algorithms=[settings.reset_token_algorithm])
    except JWTError:
        return None
    if payload.get("purpose") != RESET_PURPOSE or not payload.get("sub"):
        return None
    return payload


def reset_token_matches(payload: dict, password_hash: Optional[str]) -> bool:
    return secrets.compare_digest(payload.get("fp", ""), _password_fingerprint(password_hash))
