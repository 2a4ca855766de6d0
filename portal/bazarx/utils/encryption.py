"""
Sealing of the upstream bearer token carried inside a portal session
"""
from functools import lru_cache
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from bazarx.config import settings


@lru_cache()
def _fernet(key: str) -> Fernet:
    return Fernet(key.encode())


def session_cipher() -> Fernet:
    """Fernet keyed with ENCRYPTION_KEY"""
    if not settings.ENCRYPTION_KEY:
        raise ValueError("ENCRYPTION_KEY not set in environment variables")
    return _fernet(settings.ENCRYPTION_KEY)


def seal_upstream_token(token: str) -> str:
    """
    Encrypt the upstream API token for the session's ``tok`` claim

    Args:
        token: bearer token issued by the upstream login

    Returns:
        URL-safe ciphertext
    """
    return session_cipher().encrypt(token.encode()).decode()


def open_upstream_token(sealed: str) -> Optional[str]:
    """Decrypt a ``tok`` claim; None if it was not sealed with our key."""
    try:
        return session_cipher().decrypt(sealed.encode()).decode()
    except (InvalidToken, ValueError):
        return None
