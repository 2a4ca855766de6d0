"""
Security utilities for portal session tokens
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
import uuid

from jose import JWTError, jwt

from bazarx.config import settings
from bazarx.models.user import SessionUser
from bazarx.utils.encryption import open_upstream_token, seal_upstream_token

SESSION_TOKEN_TYPE = "session"


def create_session_token(user: SessionUser, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed session JWT for a logged-in user

    The upstream bearer token travels encrypted in the ``tok`` claim.

    Args:
        user: Session user (``sid`` is assigned if empty, ``expires_at`` is set)
        expires_delta: Optional expiration time delta

    Returns:
        Encoded JWT token
    """
    if not user.sid:
        user.sid = uuid.uuid4().hex

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.SESSION_EXPIRE_MINUTES)
    user.expires_at = expire.timestamp()

    to_encode = {
        "sub": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "phone": user.phone,
        "sid": user.sid,
        "tok": seal_upstream_token(user.token),
        "exp": expire,
        "type": SESSION_TOKEN_TYPE,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and verify a JWT token

    Returns:
        Decoded token payload or None if invalid
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def verify_token_type(payload: Dict[str, Any], expected_type: str) -> bool:
    return payload.get("type") == expected_type


def decode_session_token(token: str) -> Optional[SessionUser]:
    """
    Turn a session JWT back into a SessionUser

    Returns:
        SessionUser, or None if the token is invalid, expired or tampered with
    """
    payload = decode_token(token)
    if payload is None or not verify_token_type(payload, SESSION_TOKEN_TYPE):
        return None

    user_id = payload.get("sub")
    encrypted = payload.get("tok")
    if not user_id or not encrypted:
        return None

    upstream_token = open_upstream_token(encrypted)
    if upstream_token is None:
        return None

    return SessionUser(
        id=user_id,
        name=payload.get("name") or "",
        email=payload.get("email") or "",
        role=payload.get("role") or "",
        token=upstream_token,
        sid=payload.get("sid") or "",
        phone=payload.get("phone"),
        expires_at=payload.get("exp"),
    )
