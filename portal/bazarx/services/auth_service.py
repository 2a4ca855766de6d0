"""
Authentication Service
"""
import logging
import time
from typing import Any, Dict, Optional, Tuple

from bazarx.config.permissions import ROLE_LONG_NAMES
from bazarx.models.user import ADMIN_ROLES, SessionUser
from bazarx.schemas.auth import PasswordResetSubmit, ProfileUpdate, ResetLinkStatus
from bazarx.services.backend_client import BackendClient, BackendError
from bazarx.services.validation import FormValidationError

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

INVALID_LINK_TITLE = "Invalid Reset Link"
INVALID_LINK_MESSAGE = (
    "This password reset link is invalid or has expired. "
    "Please request a new one from your administrator."
)


def _now_ms() -> int:
    return int(time.time() * 1000)


def parse_login_response(data: Any) -> Tuple[Dict[str, Any], str]:
    """
    Split an upstream login response into (user, token)

    Both ``{"user": {...}, "token": "..."}`` and the flat
    ``{...user fields, "token": "..."}`` shapes are accepted.

    Raises:
        BackendError: no token or no user id in the response
    """
    if not isinstance(data, dict):
        raise BackendError("Login failed")
    token = data.get("token")
    if isinstance(data.get("user"), dict):
        user = dict(data["user"])
    else:
        user = {k: v for k, v in data.items() if k != "token"}
    user_id = user.get("id") or user.get("_id")
    if not token or not user_id:
        raise BackendError("Login failed")
    user["id"] = str(user_id)
    return user, token


def session_user_from(user: Dict[str, Any], token: str, sid: str = "") -> SessionUser:
    known = {"id", "_id", "name", "email", "role", "phone"}
    return SessionUser(
        id=str(user.get("id") or user.get("_id")),
        name=user.get("name") or "",
        email=user.get("email") or "",
        role=user.get("role") or "",
        token=token,
        sid=sid,
        phone=user.get("phone"),
        extra={k: v for k, v in user.items() if k not in known},
    )


async def login(client: BackendClient, email: str, password: str) -> SessionUser:
    """
    Authenticate against the upstream API

    Args:
        client: Unauthenticated upstream client
        email: User email
        password: Plain text password

    Returns:
        SessionUser holding the upstream bearer token
    """
    data = await client.post("/auth/login", {"email": email, "password": password})
    user, token = parse_login_response(data)
    logger.info("User %s logged in with role %s", user.get("email"), user.get("role"))
    return session_user_from(user, token)


async def update_profile(client: BackendClient, changes: ProfileUpdate) -> Dict[str, Any]:
    """Send the edited fields upstream and return the updated user."""
    data = await client.put("/auth/profile", changes.model_dump(exclude_none=True))
    user = data.get("user") if isinstance(data, dict) else None
    if not isinstance(user, dict):
        raise BackendError("Profile update failed")
    return user


def format_time_remaining(expires_ms: int, now_ms: int) -> str:
    left = expires_ms - now_ms
    if left <= 0:
        return "Expired"
    return f"{left // 60000}m {(left % 60000) // 1000}s"


def check_reset_link(
    user_id: Optional[str],
    role: Optional[str],
    expires: Optional[str],
    now_ms: Optional[int] = None,
) -> ResetLinkStatus:
    """
    Check the query parameters of a password reset link

    Only shapes the page; the upstream API re-validates on submit.

    Args:
        user_id: ``userId`` query parameter
        role: ``role`` query parameter; must be an admin-side role
        expires: expiry as epoch milliseconds
        now_ms: current time, epoch milliseconds

    Returns:
        ResetLinkStatus in state ``form`` or ``invalid``
    """
    now = _now_ms() if now_ms is None else now_ms

    def invalid(reason: str) -> ResetLinkStatus:
        logger.info("Rejected password reset link: %s", reason)
        return ResetLinkStatus(state="invalid", title=INVALID_LINK_TITLE, message=INVALID_LINK_MESSAGE, reason=reason)

    if not user_id or not role or not expires:
        return invalid("missing parameters")
    try:
        expiry = int(expires)
    except (TypeError, ValueError):
        return invalid("malformed expiry")
    if now > expiry:
        return invalid("Password reset link has expired")
    if role not in ADMIN_ROLES:
        return invalid("Invalid reset link - unauthorized role")

    display_name = ROLE_LONG_NAMES.get(role, role)
    return ResetLinkStatus(
        state="form",
        title="Reset Your Password",
        message=f"{display_name} User",
        user_id=user_id,
        role=role,
        display_name=display_name,
        time_remaining=format_time_remaining(expiry, now),
    )


def validate_new_password(password: str, confirm: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise FormValidationError({"password": "Password must be at least 6 characters long"})
    if password != confirm:
        raise FormValidationError({"confirmPassword": "Passwords do not match"})


async def reset_password(
    client: BackendClient,
    submit: PasswordResetSubmit,
    now_ms: Optional[int] = None,
) -> str:
    """
    Re-check the link, validate the new password and submit it upstream

    Raises:
        FormValidationError: invalid link or unacceptable password
    """
    link = check_reset_link(submit.userId, submit.role, submit.expires, now_ms)
    if link.state != "form":
        raise FormValidationError({"link": link.reason or INVALID_LINK_MESSAGE})
    validate_new_password(submit.password, submit.confirmPassword)

    data = await client.post("/auth/reset-password", {
        "userId": submit.userId,
        "role": submit.role,
        "expires": submit.expires,
        "password": submit.password,
    })
    logger.info("Password reset for user %s", submit.userId)
    message = data.get("message") if isinstance(data, dict) else None
    return message or "Password updated successfully!"
