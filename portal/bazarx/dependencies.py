"""
Common Dependencies for FastAPI Routes
"""
import logging
from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from bazarx.config import settings
from bazarx.config.permissions import has_access_to_section, is_admin_role
from bazarx.models.user import SessionUser
from bazarx.services.backend_client import BackendAuthError, BackendClient, BackendError
from bazarx.state import Store, session_stores
from bazarx.utils.security import decode_session_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


class LoginRedirect(Exception):
    """Raised by guards; turned into a redirect before any page body is built."""

    def __init__(self, reason: str, location: Optional[str] = None):
        super().__init__(reason)
        self.reason = reason
        self.location = location or settings.LOGIN_REDIRECT_URL


def get_backend_client() -> BackendClient:
    """Unauthenticated upstream client; overridden in tests."""
    return BackendClient()


def session_from_request(request: Request, credentials: Optional[HTTPAuthorizationCredentials] = None) -> Optional[SessionUser]:
    """Session user from the Authorization header or the session cookie, if any"""
    token = credentials.credentials if credentials else None
    if not token:
        auth = request.headers.get("Authorization", "")
        if auth.lower().startswith("bearer "):
            token = auth[7:].strip()
    if not token:
        token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return None
    return decode_session_token(token)


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[SessionUser]:
    return session_from_request(request, credentials)


async def get_current_user(
    request: Request,
    user: Optional[SessionUser] = Depends(get_optional_user),
) -> SessionUser:
    """
    Dependency to get the current logged-in user (any role)
    """
    if user is None:
        logger.info("No session for %s, redirecting", request.url.path)
        raise LoginRedirect("not authenticated")
    return user


async def get_current_admin_user(
    request: Request,
    current_user: SessionUser = Depends(get_current_user),
) -> SessionUser:
    """Require one of the admin-side roles; unknown roles fail closed"""
    if not is_admin_role(current_user.role):
        logger.info("Role %r is not an admin role, redirecting from %s", current_user.role, request.url.path)
        raise LoginRedirect("not an admin role")
    return current_user


# Customer pages only need a logged-in session
require_customer = get_current_user


def require_section(section: str) -> Callable:
    """
    Dependency factory to require access to an admin section

    Usage:
        current_user: SessionUser = Depends(require_section("warehouse"))
    """
    async def section_checker(
        request: Request,
        current_user: SessionUser = Depends(get_current_admin_user),
    ) -> SessionUser:
        if not has_access_to_section(current_user.role, section):
            logger.info("Role %r has no access to section %s, redirecting", current_user.role, section)
            raise LoginRedirect(f"section {section} not granted")
        return current_user

    return section_checker


def get_user_client(
    current_user: SessionUser = Depends(get_current_user),
    client: BackendClient = Depends(get_backend_client),
) -> BackendClient:
    """Upstream client carrying the session's bearer token"""
    return client.with_token(current_user.token)


def get_store(current_user: SessionUser = Depends(get_current_user)) -> Store:
    """The session's application state store"""
    return session_stores.get(
        current_user.sid,
        user=current_user.public_dict(),
        token=current_user.token,
        expires_at=current_user.expires_at,
    )


def upstream_http_error(exc: BackendError) -> Exception:
    """
    Map an upstream failure onto the portal response

    Client errors keep their status; anything else becomes 502. The body is
    the toast message shown to the user. A rejected token is returned as is
    for the application-wide handler, which ends the session.
    """
    if isinstance(exc, BackendAuthError):
        return exc
    code = exc.status_code
    if code is None or not 400 <= code < 500:
        code = status.HTTP_502_BAD_GATEWAY
    return HTTPException(status_code=code, detail=exc.message)
