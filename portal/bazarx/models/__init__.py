"""
Models package
"""
from bazarx.models.user import ADMIN_ROLES, SessionUser, UserRole

__all__ = [
    "ADMIN_ROLES",
    "SessionUser",
    "UserRole",
]
